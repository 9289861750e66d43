"""
Command-line interface for the Carrier Tracker.
Provides commands for live lookups, offline parsing of saved documents, and configuration.
"""

import asyncio
import json
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from tracker import __version__
from tracker.models import CarrierId

console = Console()


def _print_result(result, as_json: bool):
    if as_json:
        click.echo(json.dumps(result.to_payload(), ensure_ascii=False, indent=2))
        return

    if not result.ok:
        console.print(f"[red]✗ {result.message}[/red] [dim]({result.kind})[/dim]")
        return

    record = result.record
    console.print(Panel.fit(
        f"{record.current_status_icon} [bold]{record.current_status}[/bold]\n"
        f"{record.current_status_description}",
        title=f"{result.carrier_id} · {record.tracking_number}",
    ))

    parties = Table(title="Envío")
    parties.add_column("", style="cyan")
    parties.add_column("Remitente", style="green")
    parties.add_column("Destinatario", style="green")
    parties.add_row("Nombre", record.sender.name, record.receiver.name)
    parties.add_row("Ciudad", record.sender.origin, record.receiver.destination)
    parties.add_row("Dirección", record.sender.address, record.receiver.address)
    parties.add_row("Unidad", "", record.receiver.unit)
    console.print(parties)

    if not record.timeline:
        console.print("[yellow]No timeline found, raw text follows[/yellow]")
        console.print(result.raw_text)
        return

    timeline = Table(title="Historial")
    timeline.add_column("", width=2)
    timeline.add_column("Estado", style="cyan")
    timeline.add_column("Fecha", style="green")
    timeline.add_column("Detalles")
    for entry in record.timeline:
        timeline.add_row(entry.icon, entry.canonical_label, entry.timestamp, entry.details)
    console.print(timeline)


@click.group()
@click.version_option(version=__version__, prog_name="Carrier Tracker")
@click.option(
    "--config", "-c", "config_path",
    type=click.Path(exists=True),
    help="Path to configuration file"
)
@click.pass_context
def cli(ctx, config_path):
    """Carrier Tracker - carrier tracking page scraper"""
    from tracker.config import init_config
    from tracker.logging_config import setup_logging

    config = init_config(config_path)
    setup_logging(config)
    ctx.obj = config


@cli.command()
@click.argument("carrier", type=click.Choice([c.value for c in CarrierId], case_sensitive=False))
@click.argument("number")
@click.option("--json", "as_json", is_flag=True, help="Print the result payload as JSON")
@click.option("--timeout", type=float, help="Override the request timeout (seconds)")
@click.pass_obj
def track(config, carrier, number, as_json, timeout):
    """Look up a tracking number on the carrier's site."""
    from tracker.tracking_service import track as track_shipment

    if timeout:
        config.request_timeout = timeout

    result = asyncio.run(track_shipment(carrier, number, config))
    _print_result(result, as_json)

    if not result.ok:
        raise SystemExit(1)


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--carrier",
    type=click.Choice([c.value for c in CarrierId], case_sensitive=False),
    required=True,
    help="Carrier whose layout and phrases apply",
)
@click.option("--number", default="", help="Tracking number to report")
@click.option("--json", "as_json", is_flag=True, help="Print the result payload as JSON")
@click.pass_obj
def parse(config, path, carrier, number, as_json):
    """Run extraction over a saved HTML page or PDF report."""
    from tracker.carriers import get_carrier
    from tracker.errors import TrackerError
    from tracker.extraction.pipeline import run_pipeline
    from tracker.models import TrackingQuery, TrackingSuccess
    from tracker.tracking_service import failure_from_error

    adapter = get_carrier(carrier, config)
    query = TrackingQuery(carrier_id=adapter.carrier_id, tracking_number=number)
    content = Path(path).read_bytes()

    try:
        output = run_pipeline(
            content,
            adapter,
            query.tracking_number,
            min_content_bytes=config.min_content_bytes,
            min_text_length=config.min_text_length,
        )
        result = TrackingSuccess(
            carrier_id=query.carrier_id,
            record=output.record,
            raw_text=output.text.plain_text,
            source_kind=output.text.source_kind,
            source_url=Path(path).resolve().as_uri(),
        )
    except TrackerError as e:
        result = failure_from_error(query, e)

    _print_result(result, as_json)

    if not result.ok:
        raise SystemExit(1)


@cli.command()
@click.pass_obj
def carriers(config):
    """List supported carriers."""
    from tracker.carriers import CARRIERS

    table = Table(title="Carriers")
    table.add_column("Id", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Protocol")

    for carrier_id, adapter_cls in CARRIERS.items():
        table.add_row(carrier_id.value, adapter_cls.display_name, adapter_cls.protocol)

    console.print(table)


@cli.command()
@click.pass_obj
def status(config):
    """Show the effective configuration."""
    console.print(Panel.fit(
        f"[bold]Carrier Tracker v{__version__}[/bold]",
        title="Status"
    ))

    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Request timeout", f"{config.request_timeout}s")
    table.add_row("Max redirects", str(config.max_redirects))
    table.add_row("Connection pool", str(config.pool_limit) if config.pool_limit else "[dim]per query[/dim]")
    table.add_row("Max concurrency", str(config.max_concurrency))
    table.add_row("Copetran URL", config.copetran_base_url)
    table.add_row("Transmoralar URL", config.transmoralar_base_url)
    table.add_row("Log level", config.log_level)
    table.add_row("Log file", config.log_file or "[dim]console only[/dim]")

    console.print(table)

    for problem in config.validate():
        console.print(f"[yellow]! {problem}[/yellow]")


@cli.command()
@click.argument("config_path", type=click.Path())
def init(config_path):
    """Initialize configuration file."""
    config_path = Path(config_path)

    if config_path.exists():
        if not click.confirm(f"{config_path} already exists. Overwrite?"):
            return

    template = '''# Carrier Tracker Configuration

# HTTP
TRACKER_REQUEST_TIMEOUT=15
TRACKER_MAX_REDIRECTS=5
TRACKER_POOL_LIMIT=20
TRACKER_MAX_CONCURRENCY=10

# Carrier endpoints
COPETRAN_BASE_URL=https://autogestion.copetran.com.co/gestion_2
TRANSMORALAR_BASE_URL=https://transmoralar.softwareparati.com

# Logging
LOG_LEVEL=INFO
LOG_FILE=
'''

    config_path.write_text(template, encoding='utf-8')
    console.print(f"[green]✓ Configuration file created: {config_path}[/green]")
    console.print("\nEdit this file with your settings, then run:")
    console.print(f"  carrier-tracker --config {config_path} track transmoralar <number>")


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
