"""
WFScan CLI

Thin wrapper around the scanner and the bucket collaborators.

Usage:
    wfscan scan <workflow.json> [--json]
    wfscan check <workflow.json> [--json]
    wfscan upload <workflow.json> --name <output> [--optional category:model] [--force]
    wfscan provision <name> [--overwrite] [--comfyui-version VER | --latest-comfyui]
    wfscan categories
    wfscan serve [--host 127.0.0.1] [--port 8000]
"""

from __future__ import annotations

import asyncio
import json as json_module
from pathlib import Path
from typing import List, Optional

import typer

from .config.settings import configure_logging, get_config
from .core.errors import ProvisioningError, StorageError, WorkflowExistsError, WorkflowFileError
from .core.models import CATEGORY_LABELS, AvailabilityStatus, ScanResult
from .provisioning.plan import fetch_latest_comfyui_version
from .provisioning.runner import ProvisioningRunner
from .storage.factory import create_availability_checker, create_uploader
from .workflows.scanner import WorkflowScanner, load_workflow_file
from .workflows.summary import (
    categories_with_models,
    missing_required_models,
    model_keys,
    required_model_names,
    total_model_count,
)

app = typer.Typer(
    name="wfscan",
    help="WFScan - ComfyUI workflow dependency scanner",
    no_args_is_help=True,
)


def output_json(data: dict) -> None:
    """Output data as JSON."""
    typer.echo(json_module.dumps(data, indent=2, default=str))


def output_error(message: str) -> None:
    """Output error message."""
    typer.secho(f"Error: {message}", fg=typer.colors.RED, err=True)


def output_success(message: str) -> None:
    """Output success message."""
    typer.secho(message, fg=typer.colors.GREEN)


def output_warning(message: str) -> None:
    """Output warning message."""
    typer.secho(f"Warning: {message}", fg=typer.colors.YELLOW)


def load_and_scan(path: Path) -> tuple:
    """Read a workflow file, returning (workflow_data, scan_result)."""
    workflow_data = load_workflow_file(path)
    return workflow_data, WorkflowScanner().scan_workflow(workflow_data)


def availability_badge(available: Optional[bool]) -> str:
    if available is None:
        return "?"
    return "✓" if available else "✗"


def print_scan_result(result: ScanResult, availability: Optional[AvailabilityStatus] = None) -> None:
    total = total_model_count(result.models)
    typer.echo(f"Custom nodes: {len(result.custom_nodes)}")
    typer.echo(f"Total models: {total}")

    if result.custom_nodes:
        typer.echo("")
        typer.echo("Custom nodes:")
        for node in result.custom_nodes:
            badge = ""
            if availability is not None:
                badge = f"[{availability_badge(availability.custom_node_available(node))}] "
            typer.echo(f"  {badge}{node.node} ({node.version})")

    for item in categories_with_models(result.models):
        typer.echo("")
        typer.echo(f"{item.category} ({item.count}):")
        for name in result.models.get(item.key):
            badge = ""
            if availability is not None:
                badge = f"[{availability_badge(availability.model_available(item.key, name))}] "
            typer.echo(f"  {badge}{name}")


# =============================================================================
# Commands
# =============================================================================

@app.command("scan")
def scan(
    workflow: Path = typer.Argument(..., help="Workflow JSON file"),
    json: bool = typer.Option(False, "--json", help="Output the manifest as JSON"),
):
    """Scan a workflow for model and custom node dependencies."""
    try:
        _, result = load_and_scan(workflow)
    except WorkflowFileError as e:
        output_error(str(e))
        raise typer.Exit(1)

    if json:
        typer.echo(result.to_json())
    else:
        print_scan_result(result)


@app.command("check")
def check(
    workflow: Path = typer.Argument(..., help="Workflow JSON file"),
    json: bool = typer.Option(False, "--json", help="Output availability as JSON"),
):
    """Scan a workflow and check its dependencies against the bucket."""
    try:
        _, result = load_and_scan(workflow)
    except WorkflowFileError as e:
        output_error(str(e))
        raise typer.Exit(1)

    availability = create_availability_checker().check(result)

    if json:
        output_json({"scanResult": result.to_dict(), "availability": availability.to_dict()})
        return

    print_scan_result(result, availability)
    missing = missing_required_models(availability, model_keys(result))
    typer.echo("")
    if missing:
        output_warning(f"{len(missing)} model(s) missing in the bucket")
    else:
        output_success("All models are available in the bucket")


@app.command("upload")
def upload(
    workflow: Path = typer.Argument(..., help="Workflow JSON file"),
    name: str = typer.Option(..., "--name", "-n", help="Output folder name (workflows/<name>/)"),
    optional: Optional[List[str]] = typer.Option(
        None, "--optional", help="category:model not required by this workflow (repeatable)"
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Upload even if required models are missing"),
):
    """Upload a workflow and its scan result to the bucket."""
    try:
        workflow_data, result = load_and_scan(workflow)
    except WorkflowFileError as e:
        output_error(str(e))
        raise typer.Exit(1)

    not_required = set(optional or [])
    required_keys = [key for key in model_keys(result) if key not in not_required]

    if not force:
        availability = create_availability_checker().check(result)
        missing = missing_required_models(availability, required_keys)
        if missing:
            output_error(
                "Required models missing in the bucket: " + ", ".join(missing)
                + ". Upload them, mark them --optional, or use --force."
            )
            raise typer.Exit(1)

    try:
        uploaded = create_uploader().upload(
            output_name=name,
            scan_result=result,
            workflow_data=workflow_data,
            workflow_file_name=workflow.name,
            required_models=required_model_names(required_keys),
        )
    except (ValueError, WorkflowExistsError, StorageError) as e:
        output_error(str(e))
        raise typer.Exit(1)

    output_success(f"Uploaded to {uploaded.location}")
    for key in uploaded.files:
        typer.echo(f"  - {key}")


@app.command("provision")
def provision(
    name: str = typer.Argument(..., help="Uploaded workflow folder name"),
    overwrite: bool = typer.Option(False, "--overwrite", help="Reinstall custom nodes already in the bucket"),
    comfyui_version: Optional[str] = typer.Option(None, "--comfyui-version", help="ComfyUI version to install against"),
    latest_comfyui: bool = typer.Option(False, "--latest-comfyui", help="Resolve the latest ComfyUI release first"),
):
    """Run the provisioning script for an uploaded workflow."""
    if latest_comfyui and not comfyui_version:
        try:
            comfyui_version = fetch_latest_comfyui_version()
        except ProvisioningError as e:
            output_error(str(e))
            raise typer.Exit(1)
        typer.echo(f"Latest stable ComfyUI version: {comfyui_version}")

    runner = ProvisioningRunner.from_config()

    async def consume() -> Optional[int]:
        exit_code = None
        async for event in runner.stream(name, overwrite, comfyui_version):
            if event.type == "log":
                typer.echo(event.message, nl=False)
            elif event.type == "error":
                typer.secho(event.message, fg=typer.colors.RED, err=True, nl=False)
            elif event.type == "success":
                typer.secho(event.message, fg=typer.colors.GREEN, nl=False)
            elif event.type == "done":
                exit_code = event.exit_code
        return exit_code

    exit_code = asyncio.run(consume())
    if exit_code != 0:
        raise typer.Exit(exit_code if exit_code else 1)


@app.command("categories")
def categories():
    """List the model categories the scanner reports."""
    for key, label in CATEGORY_LABELS.items():
        typer.echo(f"{key:<18} {label}")


@app.command("serve")
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", help="Bind port"),
):
    """Run the HTTP API."""
    import uvicorn

    config = get_config()
    uvicorn.run(
        "wfscan.api.main:app",
        host=host or config.api.host,
        port=port or config.api.port,
    )


def main() -> None:
    configure_logging()
    app()


if __name__ == "__main__":
    main()
