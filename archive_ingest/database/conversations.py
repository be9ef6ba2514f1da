"""Read-only access to parsed conversations and their messages."""

from archive_ingest.config import CONVERSATIONS_TABLE, MESSAGES_TABLE
from archive_ingest.database.client import with_retry


@with_retry()
def get_import_conversations(client, import_id: str) -> list:
    """Get all conversations parsed from an import, oldest first."""
    result = client.from_(CONVERSATIONS_TABLE).select("id, title").eq(
        "import_id", import_id
    ).order("created_at").execute()
    return result.data or []


@with_retry()
def get_conversation_messages(client, conversation_id: str) -> list:
    """Get a conversation's messages in sequence order."""
    result = client.from_(MESSAGES_TABLE).select(
        "id, role, content, sequence_index, occurred_at"
    ).eq("conversation_id", conversation_id).order("sequence_index").execute()
    return result.data or []
