"""
Health Guardian CLI

Command-line interface for config snapshots, health checks and recovery.
"""

import sys
import json
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from . import __version__
from .config import GuardianConfig, load_config, create_default_config, STATE_DIR_ENV
from .errors import StorageWriteError
from .recovery import RecoveryController


console = Console()


@click.group()
@click.version_option(__version__, prog_name="health-guardian")
@click.option("--config", "-c", "config_path", type=click.Path(), help="Path to config file")
@click.option("--state-dir", envvar=STATE_DIR_ENV, help="OpenClaw state directory")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, config_path: str, state_dir: str, verbose: bool):
    """Health Guardian - Config Snapshots and Auto-Recovery for OpenClaw"""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["state_dir"] = state_dir
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)


def _load(ctx) -> GuardianConfig:
    config_path = ctx.obj.get("config_path")
    state_dir = ctx.obj.get("state_dir")

    if config_path:
        if not Path(config_path).exists():
            raise click.ClickException(f"Config file not found: {config_path}")
        return load_config(config_path, state_dir=state_dir)
    return GuardianConfig(state_dir=state_dir or "")


def _controller(ctx) -> RecoveryController:
    if "controller" not in ctx.obj:
        ctx.obj["controller"] = RecoveryController.from_config(_load(ctx))
    return ctx.obj["controller"]


def _fail(message: str):
    console.print(f"[red]✗[/red] {message}")
    sys.exit(1)


# =============================================================================
# Setup
# =============================================================================

@cli.command()
@click.option("--output", "-o", default="health-guardian.yaml", type=click.Path(), help="Output file")
def init(output: str):
    """Initialize a new configuration file."""
    config_path = Path(output)

    if config_path.exists():
        if not click.confirm(f"{config_path} already exists. Overwrite?"):
            return

    config_path.write_text(create_default_config())
    console.print(f"[green]✓[/green] Created {config_path}")
    console.print("\nEdit the file if needed, then run:")
    console.print(f"  [cyan]health-guardian -c {config_path} check[/cyan]")


# =============================================================================
# Snapshot Commands
# =============================================================================

@cli.command()
@click.option("--reason", "-r", default="manual", help="Snapshot reason tag")
@click.pass_context
def backup(ctx, reason: str):
    """Snapshot the current config."""
    controller = _controller(ctx)

    try:
        result = controller.backup(reason)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--reason")
    except StorageWriteError as e:
        _fail(e.message)

    if result.success:
        console.print(f"[green]✓[/green] Backed up: {result.filename}")
        for filename in result.expired:
            console.print(f"  [dim]retention removed {filename}[/dim]")
    elif result.skipped == "unchanged":
        console.print("[yellow]Config unchanged, skipping backup[/yellow]")
    else:
        _fail(f"Config unavailable: {controller.config_path}")


@cli.command("list")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of a table")
@click.pass_context
def list_snapshots(ctx, as_json: bool):
    """List config snapshots, newest first."""
    snapshots = _controller(ctx).list_snapshots()

    if as_json:
        click.echo(json.dumps({
            "snapshots": [s.to_dict() for s in snapshots],
            "count": len(snapshots),
        }, indent=2))
        return

    if not snapshots:
        console.print("[yellow]No snapshots[/yellow]")
        return

    table = Table(title="Config Snapshots")
    table.add_column("Filename", style="cyan")
    table.add_column("Reason")
    table.add_column("Created", style="dim")
    table.add_column("Size", justify="right")

    for s in snapshots:
        table.add_row(
            s.filename,
            s.reason,
            s.created_at.isoformat()[:19],
            str(s.size_bytes),
        )

    console.print(table)
    console.print(f"\nTotal: {len(snapshots)} snapshots")


@cli.command()
@click.argument("filename")
@click.pass_context
def restore(ctx, filename: str):
    """Restore the config from a snapshot."""
    try:
        result = _controller(ctx).restore(filename)
    except StorageWriteError as e:
        _fail(e.message)

    if not result.success:
        _fail(result.error)

    console.print(f"[green]✓[/green] Restored: {result.filename}")
    if result.pre_restore:
        console.print(f"  Previous config saved as {result.pre_restore}")


# =============================================================================
# Health Commands
# =============================================================================

@cli.command()
@click.pass_context
def check(ctx):
    """Check config health (exit 1 when unhealthy)."""
    controller = _controller(ctx)
    report = controller.check()

    if report.healthy:
        console.print(Panel(
            f"[bold green]Healthy[/bold green]\n\n"
            f"Config: {controller.config_path}",
            title="✓ Health Check"
        ))
    else:
        console.print(Panel(
            f"[bold red]Unhealthy[/bold red]\n\n"
            f"Config: {controller.config_path}\n"
            f"Reason: {report.message}",
            title="✗ Health Check"
        ))
        sys.exit(1)


@cli.command()
@click.pass_context
def recover(ctx):
    """Restore the newest manual snapshot."""
    try:
        result = _controller(ctx).auto_recover()
    except StorageWriteError as e:
        _fail(e.message)

    if not result.success:
        _fail(result.error)
    console.print(f"[green]✓[/green] Recovered from {result.filename}")


@cli.command()
@click.pass_context
def doctor(ctx):
    """Check health and auto-recover if the config is broken."""
    controller = _controller(ctx)
    try:
        result = controller.check_and_recover()
    except StorageWriteError as e:
        _fail(e.message)

    if not result.success:
        _fail(result.error)

    if result.filename is None:
        console.print("[green]✓[/green] Config healthy, nothing to do")
        return

    console.print(f"[green]✓[/green] Recovered from {result.filename}")
    after = controller.check()
    if not after.healthy:
        _fail(f"Config still unhealthy after recovery: {after.message}")


# =============================================================================
# Server
# =============================================================================

@cli.command()
@click.option("--host", "-h", default=None, help="Host to bind to")
@click.option("--port", "-p", default=None, type=int, help="Port to bind to")
@click.pass_context
def serve(ctx, host: str, port: int):
    """Start the HTTP server."""
    config = _load(ctx)
    host = host or config.server.host
    port = port or config.server.port

    console.print(Panel(
        f"[bold]Health Guardian v{__version__}[/bold]\n"
        f"Config: [cyan]{config.config_path}[/cyan]\n"
        f"Listening: [cyan]http://{host}:{port}[/cyan]",
        title="🚀 Starting"
    ))

    from .server import main as server_main
    server_main(
        config_path=ctx.obj.get("config_path"),
        state_dir=ctx.obj.get("state_dir"),
        host=host,
        port=port,
    )


# =============================================================================
# Main
# =============================================================================

def main():
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
