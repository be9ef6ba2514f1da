"""Import row operations - lookup, status, per-phase stats."""

from archive_ingest.config import IMPORTS_TABLE
from archive_ingest.database.client import with_retry
from archive_ingest.errors import NotFound
from archive_ingest.utils import now_iso


@with_retry()
def get_import(client, import_id: str) -> dict:
    """Get a single import by ID, raising NotFound when it does not exist."""
    result = client.from_(IMPORTS_TABLE).select("*").eq("id", import_id).limit(1).execute()
    if not result.data:
        raise NotFound(f"Import not found: {import_id}", import_id=import_id)
    return result.data[0]


@with_retry()
def update_import_status(client, import_id: str, status: str):
    client.from_(IMPORTS_TABLE).update({
        "status": status,
        "updated_at": now_iso(),
    }).eq("id", import_id).execute()


def merge_phase_stats(stats: dict, phase: str, phase_stats: dict) -> dict:
    """Return stats with phase's entry replaced and every other phase kept."""
    merged = dict(stats) if isinstance(stats, dict) else {}
    merged[phase] = phase_stats
    return merged


@with_retry()
def write_phase_stats(client, import_id: str, phase: str, phase_stats: dict, status: str = None) -> dict:
    """Merge one phase's summary into the import's stats map and persist it."""
    current = client.from_(IMPORTS_TABLE).select("stats").eq("id", import_id).limit(1).execute()
    existing = current.data[0].get("stats") if current.data else {}
    stats = merge_phase_stats(existing, phase, phase_stats)

    update_data = {"stats": stats, "updated_at": now_iso()}
    if status:
        update_data["status"] = status
    client.from_(IMPORTS_TABLE).update(update_data).eq("id", import_id).execute()
    return stats
