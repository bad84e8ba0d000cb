"""Dashboard configuration models.

Settings are resolved in three layers, later layers winning:
the optional YAML file, ``VIGILANT_*`` environment variables, then CLI flags.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, field_validator

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "vigilant" / "config.yaml"
ALL_NAMESPACES = "*"


class KubernetesDefaultsConfig(BaseModel):
    """Tunables for API calls, watches and the UI refresh tick."""

    model_config = ConfigDict(extra="forbid")

    timeout: int = 30
    retry_attempts: int = 3
    watch_timeout_seconds: int = 3600
    poll_interval: float = 0.2
    log_tail_lines: int = 500

    @field_validator("timeout", "watch_timeout_seconds", "log_tail_lines")
    @classmethod
    def validate_positive_int(cls, v: int) -> int:
        """Validate integer settings are positive."""
        if v <= 0:
            raise ValueError("value must be positive")
        return v

    @field_validator("poll_interval")
    @classmethod
    def validate_poll_interval(cls, v: float) -> float:
        """Validate poll_interval is positive."""
        if v <= 0:
            raise ValueError("poll_interval must be positive")
        return v

    @field_validator("retry_attempts")
    @classmethod
    def validate_retry_attempts(cls, v: int) -> int:
        """Validate retry_attempts is non-negative."""
        if v < 0:
            raise ValueError("retry_attempts must be non-negative")
        return v


class KubernetesConfig(BaseModel):
    """Complete dashboard configuration.

    ``namespace`` of ``None`` means every namespace is listed and watched,
    which is what the dashboard does unless told otherwise.
    """

    model_config = ConfigDict(extra="forbid")

    kubeconfig: str | None = None
    context: str | None = None
    namespace: str | None = None
    initial_resource: str = "pods"
    defaults: KubernetesDefaultsConfig = KubernetesDefaultsConfig()

    @field_validator("kubeconfig")
    @classmethod
    def validate_kubeconfig(cls, v: str | None) -> str | None:
        """Expand ~ in kubeconfig path."""
        if v is None:
            return None
        return str(Path(v).expanduser())

    @field_validator("namespace")
    @classmethod
    def validate_namespace(cls, v: str | None) -> str | None:
        """Normalize the all-namespaces spellings to None."""
        if v is None or v.strip() in ("", ALL_NAMESPACES):
            return None
        return v.strip()

    @field_validator("initial_resource")
    @classmethod
    def validate_initial_resource(cls, v: str) -> str:
        """Resource names are matched case-insensitively."""
        v = v.strip().lower()
        if not v:
            raise ValueError("initial_resource must not be empty")
        return v

    @classmethod
    def from_env(cls, base_config: dict[str, Any] | None = None) -> KubernetesConfig:
        """Create configuration with environment variable overrides.

        Supported environment variables:
            VIGILANT_KUBECONFIG: kubeconfig file path
            VIGILANT_CONTEXT: kubeconfig context to use
            VIGILANT_NAMESPACE: namespace to watch ("*" for all)
            VIGILANT_RESOURCE: resource view shown at startup
            VIGILANT_TIMEOUT: API request timeout in seconds
            VIGILANT_WATCH_TIMEOUT: server-side watch timeout in seconds
        """
        config_dict = dict(base_config) if base_config else {}
        defaults = dict(config_dict.get("defaults") or {})

        if kubeconfig := os.environ.get("VIGILANT_KUBECONFIG"):
            config_dict["kubeconfig"] = kubeconfig
        if context := os.environ.get("VIGILANT_CONTEXT"):
            config_dict["context"] = context
        if namespace := os.environ.get("VIGILANT_NAMESPACE"):
            config_dict["namespace"] = namespace
        if resource := os.environ.get("VIGILANT_RESOURCE"):
            config_dict["initial_resource"] = resource
        if timeout := os.environ.get("VIGILANT_TIMEOUT"):
            defaults["timeout"] = int(timeout)
        if watch_timeout := os.environ.get("VIGILANT_WATCH_TIMEOUT"):
            defaults["watch_timeout_seconds"] = int(watch_timeout)

        config_dict["defaults"] = defaults
        return cls.model_validate(config_dict)

    def with_overrides(self, **overrides: Any) -> KubernetesConfig:
        """Return a copy with the non-None overrides applied and re-validated."""
        data = self.model_dump()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return type(self).model_validate(data)


def load_config(path: Path | None = None) -> KubernetesConfig:
    """Load configuration from a YAML file, then apply environment overrides.

    A missing file is not an error; the built-in defaults are used.

    Args:
        path: Config file path. Defaults to ~/.config/vigilant/config.yaml.

    Returns:
        The resolved configuration.

    Raises:
        ValueError: If the file is not a YAML mapping.
    """
    config_path = path or DEFAULT_CONFIG_PATH
    base: dict[str, Any] = {}
    if config_path.exists():
        loaded = yaml.safe_load(config_path.read_text()) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"{config_path} must contain a YAML mapping")
        base = loaded
    return KubernetesConfig.from_env(base)
