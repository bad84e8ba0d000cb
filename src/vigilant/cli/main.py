"""Main CLI entry point using Typer."""

from __future__ import annotations

from pathlib import Path

import structlog
import typer
from rich.console import Console

from vigilant import __version__
from vigilant.integrations.kubernetes import (
    KubernetesClient,
    KubernetesConnectionError,
    load_config,
)
from vigilant.integrations.kubernetes.config import ALL_NAMESPACES, KubernetesConfig
from vigilant.logging.config import configure_logging

app = typer.Typer(
    name="vigilant",
    help="Live terminal dashboard for Kubernetes pods and deployments.",
    add_completion=True,
)

console = Console()
err_console = Console(stderr=True)
logger = structlog.get_logger()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"vigilant version {__version__}")
        raise typer.Exit()


def resolve_config(
    config_path: Path | None,
    kubeconfig: str | None,
    context: str | None,
    namespace: str | None,
    all_namespaces: bool,
    resource: str | None,
) -> KubernetesConfig:
    """Merge the config file, environment and command-line flags.

    Flags win over the environment, which wins over the file.
    """
    base = load_config(config_path)
    return base.with_overrides(
        kubeconfig=kubeconfig,
        context=context,
        namespace=ALL_NAMESPACES if all_namespaces else namespace,
        initial_resource=resource,
    )


@app.command()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging.",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug logging, including the Kubernetes client.",
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        help="Path to the YAML config file.",
    ),
    kubeconfig: str | None = typer.Option(
        None,
        "--kubeconfig",
        help="Path to the kubeconfig file.",
    ),
    context: str | None = typer.Option(
        None,
        "--context",
        help="Kubeconfig context to use.",
    ),
    namespace: str | None = typer.Option(
        None,
        "--namespace",
        "-n",
        help="Only show resources in this namespace.",
    ),
    all_namespaces: bool = typer.Option(
        False,
        "--all-namespaces",
        "-A",
        help="Show resources in every namespace.",
    ),
    resource: str | None = typer.Option(
        None,
        "--resource",
        "-r",
        help="Resource type shown first (pods, deployments).",
    ),
) -> None:
    """Watch pods and deployments in a terminal dashboard."""
    configure_logging(verbose=verbose, debug=debug)

    try:
        config = resolve_config(
            config_path, kubeconfig, context, namespace, all_namespaces, resource
        )
    except ValueError as e:
        err_console.print(f"[red]Error:[/red] Invalid configuration: {e}")
        raise typer.Exit(1) from None

    try:
        client = KubernetesClient(config)
    except KubernetesConnectionError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None

    from vigilant.tui.apps.kubernetes import VigilantApp

    logger.info(
        "dashboard_starting",
        context=client.get_current_context(),
        namespace=config.namespace or ALL_NAMESPACES,
        resource=config.initial_resource,
    )
    with client:
        VigilantApp(
            client,
            initial_resource=config.initial_resource,
            poll_interval=config.defaults.poll_interval,
        ).run()


if __name__ == "__main__":
    app()
