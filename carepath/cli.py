"""Command Line Interface for CarePath.

This module provides a CLI using Typer for submitting patient snapshots,
recording admissions and medications, and reading history, interventions and
risk scores without going through the HTTP API.

Security Impact:
    - Patient files are validated against the Patient schema before any store call
    - Credentials come from configuration only and are never printed
"""

import asyncio
import json
from datetime import date, datetime
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from carepath import __version__
from carepath.domain.clinical_record import Admission, Medication, Patient, parse_patient
from carepath.domain.ports import CarePathError, RiskScorerPort, ValidationError
from carepath.domain.services import ReadmissionService
from carepath.infrastructure.logging_config import setup_logging
from carepath.infrastructure.settings import settings
from carepath.main import create_history_store, create_service

app = typer.Typer(
    name="carepath",
    help="CarePath: patient history, readmission risk and interventions",
    add_completion=False
)
console = Console()


def _fail(exc: CarePathError) -> None:
    console.print(f"[red]✗[/red] {type(exc).__name__}: {str(exc)}")
    raise typer.Exit(code=2 if isinstance(exc, ValidationError) else 1)


def _load_patient(patient_file: Path) -> Patient:
    try:
        payload = json.loads(patient_file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON in {patient_file.name}: {str(e)}", operation="load_patient") from e
    except UnicodeDecodeError as e:
        raise ValidationError(f"{patient_file.name} is not valid UTF-8 text", operation="load_patient") from e
    if not isinstance(payload, dict):
        raise ValidationError(f"{patient_file.name} must contain a JSON object", operation="load_patient")
    return parse_patient(payload)


def _service() -> ReadmissionService:
    try:
        return create_service()
    except ValueError as e:
        console.print(f"[red]✗[/red] Invalid configuration: {str(e)}")
        raise typer.Exit(code=1)


def _scorer(service: ReadmissionService) -> RiskScorerPort:
    try:
        return service.scorer
    except ValueError as e:
        console.print(f"[red]✗[/red] Invalid scorer configuration: {str(e)}")
        raise typer.Exit(code=1)


@app.command("init-schema")
def init_schema() -> None:
    """Install the graph store schema (predicates, indexes and types)."""
    try:
        store = create_history_store()
        with console.status("[bold green]Installing schema..."):
            store.initialize_schema()
    except CarePathError as e:
        _fail(e)
    console.print("[green]✓[/green] Schema installed")


@app.command()
def submit(
    patient_file: Path = typer.Argument(..., help="JSON file with a patient snapshot", exists=True, dir_okay=False),
) -> None:
    """Store a patient snapshot.

    Examples:
        carepath submit patient.json
    """
    try:
        patient = _load_patient(patient_file)
        _service().submit_patient(patient)
    except CarePathError as e:
        _fail(e)
    console.print(f"[green]✓[/green] Stored patient {patient.id}")


@app.command()
def history(
    patient_id: str = typer.Argument(..., help="Patient identifier"),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON instead of tables"),
) -> None:
    """Show the stored history of a patient."""
    try:
        records = _service().fetch_history(patient_id)
    except CarePathError as e:
        _fail(e)

    if as_json:
        console.print_json(json.dumps([record.model_dump(mode="json") for record in records]))
        return

    if not records:
        console.print(f"[yellow]⚠[/yellow] No history for patient {patient_id}")
        return

    for record in records:
        console.print(f"\n[bold]{record.name}[/bold]  age: {record.age}  condition: {record.condition or '-'}")

        admissions = Table(title="Admissions", show_header=True, header_style="bold")
        admissions.add_column("Date", style="cyan")
        admissions.add_column("Diagnosis")
        admissions.add_column("Treatment")
        for admission in record.chronological_admissions():
            admissions.add_row(admission.date.isoformat(), admission.diagnosis, admission.treatment)
        console.print(admissions)

        medications = Table(title="Medications", show_header=True, header_style="bold")
        medications.add_column("Name", style="cyan")
        medications.add_column("Dosage")
        for medication in record.medications:
            medications.add_row(medication.name, medication.dosage)
        console.print(medications)


@app.command()
def interventions(
    patient_id: str = typer.Argument(..., help="Patient identifier"),
) -> None:
    """List interventions recommended from a patient's history."""
    try:
        recommended = _service().fetch_interventions(patient_id)
    except CarePathError as e:
        _fail(e)

    if not recommended:
        console.print("No interventions recommended")
        return
    for item in recommended:
        console.print(f"  • {item}")


@app.command()
def risk(
    patient_file: Path = typer.Argument(..., help="JSON file with a patient snapshot", exists=True, dir_okay=False),
) -> None:
    """Score a patient snapshot with the configured risk scorer."""

    async def _score(service: ReadmissionService, scorer: RiskScorerPort, patient: Patient) -> float:
        try:
            return await service.assess_risk(patient)
        finally:
            await scorer.aclose()

    try:
        patient = _load_patient(patient_file)
        service = _service()
        scorer = _scorer(service)
        score = asyncio.run(_score(service, scorer, patient))
    except CarePathError as e:
        _fail(e)
    console.print(f"Readmission risk for {patient.id}: [bold]{score:.2f}[/bold]")


def _parse_date(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise typer.BadParameter(f"Expected YYYY-MM-DD, got {value!r}")


@app.command()
def admit(
    patient_id: str = typer.Argument(..., help="Patient identifier"),
    admitted_on: str = typer.Option(..., "--date", "-d", help="Admission date (YYYY-MM-DD)"),
    diagnosis: str = typer.Option(..., "--diagnosis", help="Diagnosis label"),
    treatment: str = typer.Option("", "--treatment", help="Treatment label"),
) -> None:
    """Record an admission for an existing patient."""
    admission = Admission(date=_parse_date(admitted_on), diagnosis=diagnosis, treatment=treatment)
    try:
        _service().record_admission(patient_id, admission)
    except CarePathError as e:
        _fail(e)
    console.print(f"[green]✓[/green] Recorded admission on {admission.date.isoformat()}")


@app.command()
def prescribe(
    patient_id: str = typer.Argument(..., help="Patient identifier"),
    name: str = typer.Option(..., "--name", "-n", help="Medication name"),
    dosage: str = typer.Option("", "--dosage", help="Dosage, e.g. '500 mg'"),
) -> None:
    """Record a medication for an existing patient."""
    try:
        _service().record_medication(patient_id, Medication(name=name, dosage=dosage))
    except CarePathError as e:
        _fail(e)
    console.print(f"[green]✓[/green] Recorded medication {name}")


@app.command()
def info() -> None:
    """Display configuration (credentials are never shown)."""
    console.print("[bold blue]CarePath Configuration[/bold blue]\n")

    info_table = Table(show_header=False, box=None, padding=(0, 2))
    info_table.add_row("Application:", settings.app_name)
    try:
        graph = settings.graph_config
        info_table.add_row("Graph store:", graph.address)
        info_table.add_row("Store timeout:", f"{graph.timeout_seconds}s")
        scorer = settings.scorer_config
        info_table.add_row("Scorer backend:", scorer.backend.value)
        if scorer.base_url:
            info_table.add_row("Scorer URL:", scorer.base_url + scorer.predict_path)
    except ValueError as e:
        info_table.add_row("Configuration:", f"[red]invalid[/red] ({str(e)})")
    console.print(info_table)


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", "--host", help="Bind address"),
    port: int = typer.Option(8080, "--port", "-p", help="Bind port"),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn
    uvicorn.run("carepath.api.main:app", host=host, port=port, log_level=settings.log_level.lower())


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version information"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """CarePath: patient history, readmission risk and interventions."""
    if version:
        console.print(f"CarePath v{__version__}")
        raise typer.Exit()
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        raise typer.Exit()
    setup_logging(use_json=settings.json_logs, log_level="DEBUG" if verbose else settings.log_level)


if __name__ == "__main__":
    app()
