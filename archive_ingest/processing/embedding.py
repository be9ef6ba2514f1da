"""Embedding phase - vectors for chunks that do not have one yet."""

from archive_ingest.config import (
    EMBEDDING_BATCH_LIMIT,
    EMBEDDING_MAX_CHARS,
    EMBEDDING_OBJECT_TYPE,
    Phase,
)
from archive_ingest.database import (
    delete_embedding,
    get_unembedded_chunks,
    insert_embedding,
    set_chunk_embedding,
)
from archive_ingest.errors import PerItemFailure, ServiceUnavailable
from archive_ingest.logging import get_logger
from archive_ingest.processing.results import PhaseResult

logger = get_logger(__name__)


def truncate_for_embedding(text: str, max_chars: int = EMBEDDING_MAX_CHARS) -> str:
    return (text or "")[:max_chars]


def embed_chunk(session, chunk: dict, owner_user_id: str) -> str:
    """Embed one chunk and backfill its embedding_id. Returns the embedding ID.

    Returns None when another run set the chunk's embedding first; the
    embedding row written here is then removed. Raises PerItemFailure when
    the provider call or either write fails.
    """
    embedder = session.embedder
    try:
        vector = embedder.embed(truncate_for_embedding(chunk["chunk_text"]))
        embedding_id = insert_embedding(
            session.client, owner_user_id, EMBEDDING_OBJECT_TYPE, chunk["id"], embedder.model, vector
        )
        if not set_chunk_embedding(session.client, chunk["id"], embedding_id):
            delete_embedding(session.client, embedding_id)
            return None
    except Exception as e:
        raise PerItemFailure(chunk["id"], str(e)) from e
    return embedding_id


def embed_import_chunks(session, import_id: str, owner_user_id: str,
                        limit: int = EMBEDDING_BATCH_LIMIT, deadline=None) -> PhaseResult:
    """Embed up to limit un-embedded chunks of an import, one at a time.

    Without a configured embedder the phase succeeds with nothing embedded.
    Failed chunks keep a null embedding_id and are picked up next time.
    """
    result = PhaseResult(phase=Phase.EMBEDDING)
    result.counts = {
        "service_configured": session.embedder is not None,
        "chunks_selected": 0,
        "embeddings_created": 0,
        "embeddings_failed": 0,
        "already_embedded": 0,
        "batch_limit": limit,
    }

    if session.embedder is None:
        logger.warning("embed_service_unconfigured", import_id=import_id)
        return result

    chunks = get_unembedded_chunks(session.client, import_id, limit)
    already_embedded = 0
    for chunk in chunks:
        if deadline is not None and deadline.expired():
            result.timed_out = True
            logger.warning("embed_deadline_reached", import_id=import_id,
                           embedded=len(result.succeeded))
            break

        try:
            embedding_id = embed_chunk(session, chunk, owner_user_id)
        except PerItemFailure as e:
            logger.warning("embed_chunk_failed", chunk_id=e.item, reason=e.reason,
                           service_unavailable=isinstance(e.__cause__, ServiceUnavailable))
            result.fail(e.item, e.reason)
            continue

        if embedding_id is None:
            already_embedded += 1
        else:
            result.succeeded.append(chunk["id"])

    result.counts.update({
        "model": session.embedder.model,
        "chunks_selected": len(chunks),
        "embeddings_created": len(result.succeeded),
        "embeddings_failed": len(result.failed),
        "already_embedded": already_embedded,
    })
    return result


def is_backlog_drained(result: PhaseResult) -> bool:
    """True when this invocation saw the last un-embedded chunks and embedded them all."""
    counts = result.counts
    return (
        counts.get("service_configured", False)
        and not result.timed_out
        and not result.failed
        and counts.get("chunks_selected", 0) < counts.get("batch_limit", EMBEDDING_BATCH_LIMIT)
    )
