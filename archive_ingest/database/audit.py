"""Append-only audit events."""

from archive_ingest.config import AUDIT_EVENTS_TABLE
from archive_ingest.database.client import with_retry


@with_retry()
def log_audit_event(client, actor_user_id: str, action: str, import_id: str, metadata: dict,
                    object_type: str = "import", object_id: str = None):
    """Append one audit event; object_id defaults to the import."""
    client.from_(AUDIT_EVENTS_TABLE).insert({
        "actor_user_id": actor_user_id,
        "action": action,
        "object_type": object_type,
        "object_id": object_id or import_id,
        "import_id": import_id,
        "metadata_json": metadata,
    }).execute()
