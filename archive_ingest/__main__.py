from archive_ingest.cli import app

app()
