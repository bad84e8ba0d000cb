"""Unit tests for dashboard configuration."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from vigilant.integrations.kubernetes.config import (
    KubernetesConfig,
    KubernetesDefaultsConfig,
    load_config,
)


@pytest.mark.unit
@pytest.mark.kubernetes
class TestKubernetesDefaultsConfig:
    """Test KubernetesDefaultsConfig model."""

    def test_defaults(self) -> None:
        """Test default values."""
        defaults = KubernetesDefaultsConfig()

        assert defaults.timeout == 30
        assert defaults.retry_attempts == 3
        assert defaults.watch_timeout_seconds == 3600
        assert defaults.poll_interval == 0.2
        assert defaults.log_tail_lines == 500

    @pytest.mark.parametrize("field", ["timeout", "watch_timeout_seconds", "log_tail_lines"])
    def test_positive_ints(self, field: str) -> None:
        """Test integer settings reject zero."""
        with pytest.raises(ValidationError, match="must be positive"):
            KubernetesDefaultsConfig(**{field: 0})

    def test_poll_interval_positive(self) -> None:
        """Test poll_interval rejects non-positive values."""
        with pytest.raises(ValidationError, match="poll_interval"):
            KubernetesDefaultsConfig(poll_interval=0)

    def test_retry_attempts_zero_allowed(self) -> None:
        """Test retries may be disabled."""
        assert KubernetesDefaultsConfig(retry_attempts=0).retry_attempts == 0

    def test_retry_attempts_negative(self) -> None:
        """Test negative retries are rejected."""
        with pytest.raises(ValidationError):
            KubernetesDefaultsConfig(retry_attempts=-1)

    def test_unknown_field(self) -> None:
        """Test unknown settings are rejected."""
        with pytest.raises(ValidationError):
            KubernetesDefaultsConfig(refresh=5)  # type: ignore[call-arg]


@pytest.mark.unit
@pytest.mark.kubernetes
class TestKubernetesConfig:
    """Test KubernetesConfig model."""

    def test_defaults(self) -> None:
        """Test the dashboard watches every namespace by default."""
        config = KubernetesConfig()

        assert config.namespace is None
        assert config.initial_resource == "pods"
        assert config.kubeconfig is None

    @pytest.mark.parametrize("value", ["", "*", "  "])
    def test_all_namespace_spellings(self, value: str) -> None:
        """Test empty and '*' mean all namespaces."""
        assert KubernetesConfig(namespace=value).namespace is None

    def test_namespace_stripped(self) -> None:
        """Test namespace whitespace is removed."""
        assert KubernetesConfig(namespace=" web ").namespace == "web"

    def test_kubeconfig_expanded(self) -> None:
        """Test ~ is expanded in the kubeconfig path."""
        config = KubernetesConfig(kubeconfig="~/.kube/config")

        assert config.kubeconfig == str(Path.home() / ".kube" / "config")

    def test_initial_resource_normalized(self) -> None:
        """Test resource names are lowercased."""
        assert KubernetesConfig(initial_resource=" Deployments ").initial_resource == "deployments"

    def test_initial_resource_empty(self) -> None:
        """Test an empty resource name is rejected."""
        with pytest.raises(ValidationError):
            KubernetesConfig(initial_resource="  ")

    def test_with_overrides_ignores_none(self) -> None:
        """Test None overrides keep the current value."""
        config = KubernetesConfig(namespace="web", context="prod")

        updated = config.with_overrides(namespace=None, context="staging")

        assert updated.namespace == "web"
        assert updated.context == "staging"

    def test_with_overrides_all_namespaces(self) -> None:
        """Test '*' clears a configured namespace."""
        config = KubernetesConfig(namespace="web")

        assert config.with_overrides(namespace="*").namespace is None


@pytest.mark.unit
@pytest.mark.kubernetes
class TestFromEnv:
    """Test environment variable overrides."""

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test every supported variable is applied."""
        monkeypatch.setenv("VIGILANT_KUBECONFIG", "/tmp/kubeconfig")
        monkeypatch.setenv("VIGILANT_CONTEXT", "dev")
        monkeypatch.setenv("VIGILANT_NAMESPACE", "apps")
        monkeypatch.setenv("VIGILANT_RESOURCE", "deployments")
        monkeypatch.setenv("VIGILANT_TIMEOUT", "10")
        monkeypatch.setenv("VIGILANT_WATCH_TIMEOUT", "120")

        config = KubernetesConfig.from_env()

        assert config.kubeconfig == "/tmp/kubeconfig"
        assert config.context == "dev"
        assert config.namespace == "apps"
        assert config.initial_resource == "deployments"
        assert config.defaults.timeout == 10
        assert config.defaults.watch_timeout_seconds == 120

    def test_env_wins_over_base(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test environment beats file values but keeps the rest."""
        monkeypatch.setenv("VIGILANT_NAMESPACE", "*")

        config = KubernetesConfig.from_env(
            {"namespace": "web", "context": "prod", "defaults": {"timeout": 5}}
        )

        assert config.namespace is None
        assert config.context == "prod"
        assert config.defaults.timeout == 5

    def test_base_dict_not_mutated(self) -> None:
        """Test the caller's dict is left alone."""
        base = {"defaults": {"timeout": 5}}

        KubernetesConfig.from_env(base)

        assert base == {"defaults": {"timeout": 5}}


@pytest.mark.unit
@pytest.mark.kubernetes
class TestLoadConfig:
    """Test YAML loading."""

    def test_missing_file_uses_defaults(self, temp_dir: Path) -> None:
        """Test a missing file is not an error."""
        config = load_config(temp_dir / "absent.yaml")

        assert config == KubernetesConfig()

    def test_loads_file(self, temp_config_file: Path) -> None:
        """Test values are read from YAML."""
        config = load_config(temp_config_file)

        assert config.context == "staging"
        assert config.namespace == "web"
        assert config.initial_resource == "deployments"
        assert config.defaults.timeout == 15
        assert config.defaults.watch_timeout_seconds == 600

    def test_empty_file(self, temp_dir: Path) -> None:
        """Test an empty file yields defaults."""
        path = temp_dir / "empty.yaml"
        path.write_text("")

        assert load_config(path) == KubernetesConfig()

    def test_non_mapping_rejected(self, temp_dir: Path) -> None:
        """Test a YAML list is rejected."""
        path = temp_dir / "list.yaml"
        path.write_text("- pods\n- deployments\n")

        with pytest.raises(ValueError, match="YAML mapping"):
            load_config(path)

    def test_env_applied_after_file(
        self, temp_config_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test environment variables override the file."""
        monkeypatch.setenv("VIGILANT_CONTEXT", "override")

        assert load_config(temp_config_file).context == "override"
