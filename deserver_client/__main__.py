"""
CLI entry points for the DeServer client.

Commands:
    deserver-client run       Run the agent headless against an in-memory scene
    deserver-client snapshot  Print the snapshot a scene would report
    deserver-client config    Show the effective configuration
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from deserver_client import __version__
from deserver_client.agent import SyncAgent
from deserver_client.config import ClientConfig
from deserver_client.errors import SceneFileError
from deserver_client.logging import get_logger, setup_logging
from deserver_client.sync.modules import DirectoryModuleLoader
from deserver_client.sync.snapshot import snapshot_world
from deserver_client.world.memory import InMemoryWorld, ScriptedInput

console = Console()
logger = get_logger("cli")

app = typer.Typer(
    name="deserver-client",
    help="DeServer synchronization agent.",
    no_args_is_help=True,
)


def _load_world(scene: Path | None) -> InMemoryWorld:
    if scene is None:
        return InMemoryWorld()
    if not scene.exists():
        console.print(f"[red]Scene file not found:[/red] {scene}")
        raise typer.Exit(1)
    try:
        return InMemoryWorld.load(scene)
    except SceneFileError as e:
        console.print(f"[red]Invalid scene file:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e


@app.command()
def run(
    scene: Path | None = typer.Option(None, "--scene", "-s", help="YAML scene file"),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Config file"),
    fps: float = typer.Option(30.0, "--fps", help="Headless frame rate"),
    host: str | None = typer.Option(None, "--host", help="Override server host"),
    port: int | None = typer.Option(None, "--port", help="Override server port"),
) -> None:
    """Run the agent headless until interrupted."""
    config = ClientConfig.load(config_path)
    if host:
        config.server.host = host
    if port:
        config.server.port = port
    setup_logging(log_file=config.log_file, level=config.log_level, log_to_file=config.log_to_file)

    world = _load_world(scene)
    agent = SyncAgent(
        world,
        config=config,
        input_source=ScriptedInput(),
        module_loader=DirectoryModuleLoader(config.data_dir / "mods"),
    )

    console.print(
        f"[bold cyan]DeServer client {__version__}[/bold cyan] -> {config.server.base_url} "
        f"([dim]{len(world.roots())} root node(s), {fps:g} fps[/dim])"
    )
    try:
        asyncio.run(agent.run(fps=fps))
    except KeyboardInterrupt:
        console.print("\n[dim]Stopped.[/dim]")


@app.command()
def snapshot(
    scene: Path = typer.Option(..., "--scene", "-s", help="YAML scene file"),
) -> None:
    """Print the objects snapshot of a scene."""
    world = _load_world(scene)
    descriptors = snapshot_world(world)

    table = Table(title=f"Snapshot of {scene.name}")
    table.add_column("ID", style="dim")
    table.add_column("Parent", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Position")
    table.add_column("Rotation")
    table.add_column("Components", style="green")
    table.add_column("Text")

    for d in descriptors:
        table.add_row(
            str(d.id),
            d.parent_name or "-",
            d.name,
            f"{d.position.x:g}, {d.position.y:g}, {d.position.z:g}",
            f"{d.euler_rotation.x:g}, {d.euler_rotation.y:g}, {d.euler_rotation.z:g}",
            ", ".join(d.capability_names),
            d.text or "",
        )

    console.print(table)
    console.print(f"[dim]{len(descriptors)} active node(s)[/dim]")


@app.command()
def config(
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Config file"),
) -> None:
    """Show the effective configuration."""
    cfg = ClientConfig.load(config_path)

    table = Table(title="DeServer Client Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Data Directory", str(cfg.data_dir))
    table.add_row("Log Level", cfg.log_level)
    table.add_row("Server", cfg.server.base_url)
    table.add_row("Timeout", f"{cfg.server.timeout:g}s")
    table.add_row("Player Node", cfg.player_node)
    table.add_row("Objects Interval", f"{cfg.loops.objects_interval:g}s")
    table.add_row("Poll Interval", f"{cfg.loops.poll_interval:g}s")
    table.add_row("Retry Interval", f"{cfg.loops.retry_interval:g}s")
    table.add_row("Pause Interval", f"{cfg.loops.pause_interval:g}s")
    table.add_row("Axes", ", ".join(cfg.input.axes))

    console.print(table)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
