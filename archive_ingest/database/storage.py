"""Supabase storage operations for archives and extracted files."""

from archive_ingest.config import STORAGE_LIST_PAGE_SIZE
from archive_ingest.database.client import with_retry


@with_retry()
def download_object(client, bucket: str, key: str) -> bytes:
    """Download one object. Raises the storage client's error when it is missing."""
    return client.storage.from_(bucket).download(key)


@with_retry()
def list_folder(client, bucket: str, folder: str) -> list:
    """List every entry name directly under folder, following pagination."""
    names = []
    offset = 0
    while True:
        page = client.storage.from_(bucket).list(
            folder, {"limit": STORAGE_LIST_PAGE_SIZE, "offset": offset, "sortBy": {"column": "name", "order": "asc"}}
        ) or []
        names.extend(entry["name"] for entry in page if entry.get("name"))
        if len(page) < STORAGE_LIST_PAGE_SIZE:
            return names
        offset += STORAGE_LIST_PAGE_SIZE


@with_retry()
def upload_object(client, bucket: str, key: str, data: bytes, content_type: str):
    """Upload bytes, overwriting any existing object at key."""
    client.storage.from_(bucket).upload(
        key, data, {"content-type": content_type, "upsert": "true"}
    )
