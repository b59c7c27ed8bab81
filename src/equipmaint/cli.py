import logging

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(help="equipmaint CLI: maintenance work orders, PM schedules, spare parts")
console = Console()


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")):
    """Configure logging from settings before any command runs."""
    from equipmaint.config.settings import get_settings

    level = "DEBUG" if verbose else get_settings().log_level
    logging.basicConfig(
        level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )


@app.command("init-db")
def init_db():
    """Initialize the database (create all tables)."""
    from equipmaint.models.database import get_engine
    from equipmaint.models.database import init_db as _init_db

    engine = get_engine()
    _init_db(engine)
    console.print("[green]Database initialized.[/green]")


@app.command("generate-data")
def generate_data():
    """Run the synthetic data generator."""
    import subprocess
    import sys

    subprocess.run([sys.executable, "scripts/generate_data.py"], check=True)


@app.command("load-parts")
def load_parts(csv_path: str = typer.Argument(..., help="Spare part catalogue CSV")):
    """Import or update spare parts from a CSV file."""
    from equipmaint.exceptions import MaintenanceError
    from equipmaint.ingestion.parts_loader import load_parts_csv
    from equipmaint.models.database import get_engine, get_session

    try:
        with get_session(get_engine()) as session:
            created, updated = load_parts_csv(session, csv_path)
    except MaintenanceError as exc:
        console.print(f"[red]{exc.message}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Created {created} and updated {updated} spare parts.[/green]")


@app.command("generate-pm")
def generate_pm(
    as_of: str = typer.Option(
        None, "--as-of", "-d", help="Run date (YYYY-MM-DD), defaults to now"
    ),
):
    """Generate work orders for every due preventive-maintenance schedule."""
    from datetime import date

    from equipmaint.maintenance.pm_generator import PMGenerator
    from equipmaint.models.database import get_engine, get_session

    run_date = date.fromisoformat(as_of) if as_of else None
    with get_session(get_engine()) as session:
        summary = PMGenerator(session).generate_due_work_orders(run_date)

    console.print(f"[green]Generated {summary.generated_count} work orders.[/green]")
    if summary.error_count:
        console.print(f"[red]{summary.error_count} schedule(s) failed:[/red]")
        for err in summary.errors:
            console.print(f"  schedule {err.schedule_id}: {err.error}")


@app.command("work-orders")
def work_orders(
    status: str = typer.Option(None, "--status", "-s", help="Status filter"),
    assigned_to: str = typer.Option(None, "--assigned-to", "-a", help="Assignee"),
    limit: int = typer.Option(50, "--limit", "-n", help="Maximum rows"),
):
    """List work orders."""
    from equipmaint.exceptions import MaintenanceError
    from equipmaint.ingestion.work_order_loader import load_work_orders
    from equipmaint.models.database import get_engine, get_session

    try:
        with get_session(get_engine()) as session:
            orders = load_work_orders(
                session, status=status, assigned_to=assigned_to, limit=limit
            )
            table = Table(title=f"Work Orders ({len(orders)})")
            table.add_column("Number", style="cyan")
            table.add_column("Equipment", justify="right")
            table.add_column("Type")
            table.add_column("Priority")
            table.add_column("Status", style="bold")
            table.add_column("Assigned To")
            table.add_column("Issue")
            for wo in orders:
                table.add_row(
                    wo.work_order_number or str(wo.id),
                    str(wo.equipment_id),
                    wo.wo_type.value,
                    wo.priority.value,
                    wo.status.value,
                    wo.assigned_to or "-",
                    wo.issue,
                )
    except MaintenanceError as exc:
        console.print(f"[red]{exc.message}[/red]")
        raise typer.Exit(1)
    console.print(table)


@app.command("log-part")
def log_part(
    work_order_id: int = typer.Argument(..., help="Work order ID"),
    part_id: int = typer.Argument(..., help="Spare part ID"),
    quantity: int = typer.Argument(..., help="Units consumed"),
):
    """Record spare-part usage against a work order."""
    from equipmaint.exceptions import MaintenanceError
    from equipmaint.maintenance.work_orders import WorkOrderEngine
    from equipmaint.models.database import get_engine, get_session

    try:
        with get_session(get_engine()) as session:
            engine = WorkOrderEngine(session)
            engine.log_part_usage(work_order_id, part_id, quantity)
            part = engine.ledger.get_part(part_id)
            remaining, low = part.quantity, part.is_low_stock
    except MaintenanceError as exc:
        console.print(f"[red]{exc.message}[/red]")
        raise typer.Exit(1)

    console.print(
        f"[green]Logged {quantity} x part {part_id} on work order "
        f"{work_order_id}.[/green] Remaining stock: {remaining}"
    )
    if low:
        console.print("[yellow]Part is at or below its minimum quantity.[/yellow]")


@app.command("low-stock")
def low_stock():
    """Show spare parts at or below their reorder threshold."""
    from equipmaint.inventory.spare_parts import SparePartLedger
    from equipmaint.models.database import get_engine, get_session

    with get_session(get_engine()) as session:
        parts = SparePartLedger(session).low_stock_parts()
        if not parts:
            console.print("[green]No parts are low on stock.[/green]")
            return

        table = Table(title="Low Stock Parts")
        table.add_column("ID", justify="right")
        table.add_column("Name", style="cyan")
        table.add_column("On Hand", justify="right", style="red")
        table.add_column("Minimum", justify="right")
        table.add_column("Supplier")
        table.add_column("Location")
        for p in parts:
            table.add_row(
                str(p.id),
                p.name,
                str(p.quantity),
                str(p.minimum_quantity),
                p.supplier or "-",
                p.location or "-",
            )
        console.print(table)


@app.command()
def serve(host: str = "0.0.0.0", port: int = 8000):
    """Start the FastAPI server."""
    import uvicorn

    uvicorn.run("equipmaint.api.main:app", host=host, port=port, reload=True)


if __name__ == "__main__":
    app()
