"""Command line entry points: init, config show, serve."""

from __future__ import annotations

import json
import logging
from importlib import metadata

import typer
from rich.console import Console

from oracle_agent.config import ConfigManager, YAMLConfigLoader

app = typer.Typer(
    name="oracle-agent",
    help="oracle-agent: LLM agent runs driven by an external oracle service.",
)
config_app = typer.Typer(help="Inspect resolved configuration.")
app.add_typer(config_app, name="config")

console = Console()


def _version_callback(value: bool) -> None:
    if not value:
        return
    try:
        version = metadata.version("oracle-agent")
    except metadata.PackageNotFoundError:
        version = "unknown"
    typer.echo(f"oracle-agent {version}")
    raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """oracle-agent command line."""


@app.command("init")
def init_command(
    path: str = typer.Option(".", "--path", help="Output directory"),
    force: bool = typer.Option(False, "--force", help="Overwrite existing oracle_agent.yaml"),
) -> None:
    """Generate a default oracle_agent.yaml in the target directory."""
    try:
        output = YAMLConfigLoader.write_default(path, force=force)
    except FileExistsError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc
    console.print(f"[green]Created[/green] {output}")


@config_app.command("show")
def show_command(
    config: str = typer.Option("", "--config", help="Optional config file path"),
) -> None:
    """Print the resolved configuration with secrets masked."""
    manager = ConfigManager.load(config_path=str(YAMLConfigLoader.resolve_path(config or None)))
    typer.echo(json.dumps(manager.masked_dump(), indent=2, sort_keys=True))


@app.command("serve")
def serve_command(
    config: str = typer.Option("", "--config", help="Optional config file path"),
    host: str = typer.Option("", "--host", help="Bind host (overrides api.host)"),
    port: int = typer.Option(0, "--port", help="Bind port (overrides api.port)"),
    log_level: str = typer.Option("info", "--log-level", help="Logging level"),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    from oracle_agent.api import APIKeyAuthProvider, create_app
    from oracle_agent.app import create_controller

    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    manager = ConfigManager.load(config_path=str(YAMLConfigLoader.resolve_path(config or None)))
    cfg = manager.get()
    try:
        controller = create_controller(cfg)
    except ValueError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc
    client_auth = APIKeyAuthProvider(cfg.api.client_api_keys) if cfg.api.client_api_keys else None
    http_app = create_app(
        controller,
        client_auth=client_auth,
        default_system_prompt=cfg.agent.system_prompt,
        default_max_iterations=cfg.agent.default_max_iterations,
    )
    bind_host = host or cfg.api.host
    bind_port = port or cfg.api.port
    console.print(f"[bold]oracle-agent[/bold] listening on http://{bind_host}:{bind_port}")
    uvicorn.run(http_app, host=bind_host, port=bind_port, log_level=log_level.lower())
