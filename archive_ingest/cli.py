"""Typer-based CLI for running ingestion phases against an import."""

import json

import typer

from archive_ingest.errors import ArchiveIngestError
from archive_ingest.processing import handle_phase
from archive_ingest.session import create_session

app = typer.Typer(
    name="archive-ingest",
    help="Conversation archive ingestion: extract, chunk and embed an import.",
    add_completion=False,
)


def _run(phase: str, import_id: str, user_id: str):
    try:
        session = create_session()
    except ArchiveIngestError as e:
        typer.echo(json.dumps(e.to_payload()))
        raise typer.Exit(code=1)

    response = handle_phase(phase, {"import_id": import_id, "user_id": user_id}, session)
    typer.echo(json.dumps(response, indent=2, default=str))
    if "error" in response:
        raise typer.Exit(code=1)


@app.command()
def extract(
    import_id: str = typer.Option(..., "--import-id", help="Import to extract"),
    user_id: str = typer.Option(..., "--user-id", help="Owner of the import"),
):
    """Reassemble and unpack the uploaded archive."""
    _run("extract", import_id, user_id)


@app.command()
def chunk(
    import_id: str = typer.Option(..., "--import-id", help="Import to chunk"),
    user_id: str = typer.Option(..., "--user-id", help="Owner of the import"),
):
    """Segment parsed conversations into chunks."""
    _run("chunk", import_id, user_id)


@app.command()
def embed(
    import_id: str = typer.Option(..., "--import-id", help="Import to embed"),
    user_id: str = typer.Option(..., "--user-id", help="Owner of the import"),
):
    """Embed one batch of un-embedded chunks."""
    _run("embed", import_id, user_id)


@app.command()
def run(
    import_id: str = typer.Option(..., "--import-id", help="Import to process"),
    user_id: str = typer.Option(..., "--user-id", help="Owner of the import"),
):
    """Run extraction, chunking and embedding in order."""
    _run("run", import_id, user_id)
