"""fieldops CLI.

Commands:
- init: Initialize database schema
- report: Export one building's daily service report as PDF
- web serve: Run the ops console
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from fieldops.config import get_config
from fieldops.core.logging import configure_logging
from fieldops.dates import today_in_zone
from fieldops.db.connection import close_db, get_session, init_db
from fieldops.errors import ServiceReportError
from fieldops.reporting.pdf_export import render_service_report_pdf
from fieldops.reporting.service_report import get_service_report_data

app = typer.Typer(
    name="fieldops",
    help="fieldops - Daily service reports for building maintenance",
    no_args_is_help=True,
)

web_cli = typer.Typer(help="Web UI / API")
app.add_typer(web_cli, name="web")

console = Console()


@app.callback()
def setup():
    # Runs before every command
    configure_logging(get_config())


@app.command()
def init(
    drop: bool = typer.Option(False, "--drop", help="Drop existing tables"),
):
    """Initialize database schema."""
    config = get_config()
    console.print(f"[bold]Initializing database:[/bold] {config.db.url}")

    async def _init():
        if drop:
            console.print("[yellow]Dropping existing tables...[/yellow]")
        await init_db(drop=drop)
        await close_db()

    asyncio.run(_init())
    console.print("[bold green]✓[/bold green] Database initialized")


@app.command()
def report(
    building_id: str = typer.Argument(..., help="Building ID"),
    report_date: str | None = typer.Argument(None, help="Civil date (YYYY-MM-DD), default today"),
    output: Path | None = typer.Option(None, "--out", "-o", help="Output PDF file"),
):
    """Export the service report of a building for one day."""
    config = get_config()
    report_date = report_date or today_in_zone(config.report.zone)
    output = output or Path(f"service-report-{report_date}.pdf")

    console.print(
        f"[bold]Service report:[/bold] building={building_id}, date={report_date} "
        f"({config.report.time_zone})"
    )

    async def _report():
        try:
            async with get_session() as session:
                data, error = await get_service_report_data(session, building_id, report_date)
                if error is not None:
                    raise error
        finally:
            await close_db()
        return data

    try:
        data = asyncio.run(_report())
        content = render_service_report_pdf(data, config.report)
    except ServiceReportError as exc:
        console.print(f"[red]✗ {type(exc).__name__}:[/red] {exc.message}")
        raise typer.Exit(code=1) from exc

    table = Table(title=f"{data.building.name} · {data.report_date}")
    table.add_column("Template")
    table.add_column("Executions", justify="right")
    table.add_column("Items", justify="right")
    for section in data.sections:
        table.add_row(section.template_name, str(len(section.visits)), str(len(section.items)))
    if data.is_empty:
        console.print("[yellow]No completed visits for this day[/yellow]")
    else:
        console.print(table)

    if data.report is not None:
        console.print(f"Status: {data.report.status.value}")

    output.write_bytes(content)
    console.print(f"\n[green]✓[/green] Report saved to: {output}")


@web_cli.command("serve")
def web_serve(
    host: str = typer.Option("0.0.0.0", help="Host to bind"),
    port: int = typer.Option(8001, help="Port to bind"),
    reload: bool = typer.Option(False, help="Enable autoreload (dev only)"),
):
    """Run the FastAPI ops console."""
    import uvicorn

    typer.echo(f"Starting web UI on http://{host}:{port}")
    uvicorn.run("fieldops.web.app:app", host=host, port=port, reload=reload, workers=1)


def main():
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
