"""
CLI tool for running and inspecting the control relay.

Provides commands for serving the relay with uvicorn and for viewing the
envelope handler table and the master command relay table.
"""

import logging

import typer
import uvicorn
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from control_relay.api.ws.constants import MasterCommand, MessageType
from control_relay.api.ws.handlers import load_handlers
from control_relay.api.ws.handlers.commands import COMMAND_RELAY_TABLE
from control_relay.routing import envelope_handlers
from control_relay.settings import app_settings
from control_relay.uvicorn_filters import ExcludeMetricsFilter

typer_app = typer.Typer(
    name="relay-cli",
    help="Control Relay CLI - Run the relay and inspect its dispatch tables",
    add_completion=False,
)
console = Console()


@typer_app.command(name="serve")
def serve(
    host: str = typer.Option(app_settings.HOST, help="Interface to bind"),
    port: int = typer.Option(app_settings.PORT, help="Port to listen on"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
):
    """
    Run the relay with uvicorn.

    Example:
        python cli.py serve --port 3000
    """
    logging.getLogger("uvicorn.access").addFilter(ExcludeMetricsFilter())

    console.print(
        Panel.fit(
            f"[bold cyan]Control Relay[/bold cyan]\n\n"
            f"HTTP status: http://{host}:{port}/\n"
            f"WebSocket:   ws://{host}:{port}{app_settings.WS_PATH}",
            border_style="cyan",
        )
    )

    uvicorn.run(
        "control_relay:application",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


@typer_app.command(name="handlers")
def handlers():
    """
    Display the envelope handler table and the master command relay table.

    Exits with code 1 if an envelope type has no handler.

    Example:
        python cli.py handlers
    """
    load_handlers()

    console.print()
    table = Table(
        "Envelope type",
        "Handler Path",
        title="Envelope Handlers",
        show_lines=True,
    )

    missing_handlers = []
    for message_type in MessageType:
        handler = envelope_handlers.handlers_registry.get(message_type)
        if not handler:
            table.add_row(
                f"[dim]{message_type.value}[/dim]",
                "[red]No handler registered[/red]",
            )
            missing_handlers.append(message_type.value)
            continue

        table.add_row(
            f"[green]{message_type.value}[/green]",
            f"{handler.__module__}.[yellow]{handler.__name__}[/yellow]",
        )

    console.print(table)
    console.print()

    commands = Table(
        "Master command",
        "Sent to clients as",
        "Relays data",
        title="Master Command Relay",
    )
    for master_command in MasterCommand:
        client_command, relays_data = COMMAND_RELAY_TABLE[master_command]
        commands.add_row(
            master_command.value,
            f"[cyan]{client_command.value}[/cyan]",
            "yes" if relays_data else "no",
        )

    console.print(commands)
    console.print()

    if missing_handlers:
        console.print(
            "[red]✗ Missing handlers for:[/red]",
            ", ".join(f"[cyan]{h}[/cyan]" for h in missing_handlers),
        )
        console.print()
        raise typer.Exit(code=1)


if __name__ == "__main__":
    typer_app()
