"""Generic embedding rows keyed by (object_type, object_id)."""

from archive_ingest.config import EMBEDDINGS_TABLE
from archive_ingest.database.client import with_retry


def insert_embedding(client, owner_user_id: str, object_type: str, object_id: str, model: str, vector: list) -> str:
    """Insert an embedding row and return its ID.

    Not retried: a response lost after commit would leave a second row behind.
    """
    result = client.from_(EMBEDDINGS_TABLE).insert({
        "owner_user_id": owner_user_id,
        "object_type": object_type,
        "object_id": object_id,
        "model": model,
        "vector": vector,
    }).execute()
    return result.data[0]["id"] if result.data else None


@with_retry()
def delete_embedding(client, embedding_id: str):
    client.from_(EMBEDDINGS_TABLE).delete().eq("id", embedding_id).execute()
