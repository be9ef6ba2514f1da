"""Import file rows created by the extraction phase."""

from archive_ingest.config import IMPORT_FILES_TABLE
from archive_ingest.database.client import with_retry


@with_retry()
def upsert_import_file(client, import_id: str, storage_path: str, file_type: str, metadata: dict):
    """Record an extracted file; re-runs update the row for the same path."""
    client.from_(IMPORT_FILES_TABLE).upsert({
        "import_id": import_id,
        "storage_path": storage_path,
        "file_type": file_type,
        "metadata": metadata,
    }, on_conflict="import_id,storage_path").execute()

