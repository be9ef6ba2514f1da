"""Archive chunk operations - claims, inserts, embedding backfill."""

from archive_ingest.config import CHUNK_CLAIMS_TABLE, CHUNKS_TABLE
from archive_ingest.database.client import with_retry
from archive_ingest.utils import now_iso


@with_retry()
def conversation_has_chunks(client, conversation_id: str) -> bool:
    result = client.from_(CHUNKS_TABLE).select("id").eq("conversation_id", conversation_id).limit(1).execute()
    return bool(result.data)


@with_retry()
def claim_conversation(client, import_id: str, conversation_id: str, claim_token: str) -> bool:
    """Atomically claim a conversation for chunking.

    Inserts a claim row with ON CONFLICT DO NOTHING. An empty result means a
    claim row already exists; it is ours only if it carries claim_token,
    which happens when a retried request had already been applied.
    """
    result = client.from_(CHUNK_CLAIMS_TABLE).upsert({
        "conversation_id": conversation_id,
        "import_id": import_id,
        "claimed_by": claim_token,
        "claimed_at": now_iso(),
    }, on_conflict="conversation_id", ignore_duplicates=True).execute()
    if result.data:
        return True

    existing = client.from_(CHUNK_CLAIMS_TABLE).select("claimed_by").eq(
        "conversation_id", conversation_id
    ).limit(1).execute()
    return bool(existing.data) and existing.data[0].get("claimed_by") == claim_token


@with_retry()
def release_conversation_claim(client, conversation_id: str, claim_token: str):
    client.from_(CHUNK_CLAIMS_TABLE).delete().eq("conversation_id", conversation_id).eq(
        "claimed_by", claim_token
    ).execute()


@with_retry()
def insert_chunks(client, rows: list) -> list:
    """Write all of one conversation's chunks in a single request.

    Rows are keyed on (conversation_id, start_message_id) and existing keys
    are left untouched, so repeating the request never duplicates a chunk.
    """
    if not rows:
        return []
    result = client.from_(CHUNKS_TABLE).upsert(
        rows, on_conflict="conversation_id,start_message_id", ignore_duplicates=True
    ).execute()
    return result.data or []


@with_retry()
def get_unembedded_chunks(client, import_id: str, limit: int) -> list:
    """Get up to limit chunks of an import that have no embedding yet."""
    result = client.from_(CHUNKS_TABLE).select("id, chunk_text").eq(
        "import_id", import_id
    ).is_("embedding_id", "null").limit(limit).execute()
    return result.data or []


@with_retry()
def set_chunk_embedding(client, chunk_id: str, embedding_id: str) -> bool:
    """Backfill embedding_id only while it is still unset."""
    result = client.from_(CHUNKS_TABLE).update({"embedding_id": embedding_id}).eq(
        "id", chunk_id
    ).is_("embedding_id", "null").execute()
    return bool(result.data)
