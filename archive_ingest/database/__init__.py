# Database layer - Supabase operations

from archive_ingest.database.client import create_supabase_client

from archive_ingest.database.storage import (
    download_object,
    list_folder,
    upload_object,
)

from archive_ingest.database.imports import (
    get_import,
    update_import_status,
    write_phase_stats,
)

from archive_ingest.database.files import (
    upsert_import_file,
)

from archive_ingest.database.conversations import (
    get_import_conversations,
    get_conversation_messages,
)

from archive_ingest.database.chunks import (
    conversation_has_chunks,
    claim_conversation,
    release_conversation_claim,
    insert_chunks,
    get_unembedded_chunks,
    set_chunk_embedding,
)

from archive_ingest.database.embeddings import insert_embedding, delete_embedding

from archive_ingest.database.audit import log_audit_event

__all__ = [
    # Client
    "create_supabase_client",
    # Storage
    "download_object",
    "list_folder",
    "upload_object",
    # Imports
    "get_import",
    "update_import_status",
    "write_phase_stats",
    # Files
    "upsert_import_file",
    # Conversations
    "get_import_conversations",
    "get_conversation_messages",
    # Chunks
    "conversation_has_chunks",
    "claim_conversation",
    "release_conversation_claim",
    "insert_chunks",
    "get_unembedded_chunks",
    "set_chunk_embedding",
    # Embeddings
    "insert_embedding",
    "delete_embedding",
    # Audit
    "log_audit_event",
]
