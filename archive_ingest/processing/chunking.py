"""Chunking phase - segment each conversation of an import once."""

import uuid

from archive_ingest.config import Phase
from archive_ingest.database import (
    claim_conversation,
    conversation_has_chunks,
    get_conversation_messages,
    get_import_conversations,
    insert_chunks,
    release_conversation_claim,
)
from archive_ingest.errors import PerItemFailure
from archive_ingest.logging import get_logger
from archive_ingest.processing.results import PhaseResult
from archive_ingest.processing.segmenter import build_chunk_row, segment_messages

logger = get_logger(__name__)


def chunk_conversation(session, import_id: str, conversation_id: str) -> tuple:
    """Segment one claimed conversation and insert its chunks in one batch.

    Returns (rows inserted, SegmentationPlan). Raises PerItemFailure when the
    messages cannot be read or the chunks cannot be written.
    """
    try:
        messages = get_conversation_messages(session.client, conversation_id)
        plan = segment_messages(messages, min_trailing_tokens=session.settings.min_trailing_tokens)
        rows = [build_chunk_row(c, import_id, conversation_id, session.hasher) for c in plan.chunks]
        insert_chunks(session.client, rows)
    except Exception as e:
        raise PerItemFailure(conversation_id, str(e)) from e
    return rows, plan


def chunk_import(session, import_id: str, deadline=None) -> PhaseResult:
    """Chunk every not-yet-chunked conversation of an import.

    A conversation is skipped when it already has chunks or another run holds
    its claim. If segmenting or inserting fails the claim is released so a
    later invocation can retry it.
    """
    result = PhaseResult(phase=Phase.CHUNKING)
    claim_token = uuid.uuid4().hex
    conversations = get_import_conversations(session.client, import_id)
    skipped = 0
    chunks_created = 0
    total_tokens = 0
    messages_dropped = 0

    for conversation in conversations:
        if deadline is not None and deadline.expired():
            result.timed_out = True
            logger.warning("chunk_deadline_reached", import_id=import_id,
                           chunked=len(result.succeeded))
            break

        conversation_id = conversation["id"]
        if conversation_has_chunks(session.client, conversation_id):
            skipped += 1
            continue
        if not claim_conversation(session.client, import_id, conversation_id, claim_token):
            logger.info("chunk_conversation_skipped", conversation_id=conversation_id,
                        reason="claimed")
            skipped += 1
            continue

        try:
            rows, plan = chunk_conversation(session, import_id, conversation_id)
        except PerItemFailure as e:
            logger.warning("chunk_conversation_failed", conversation_id=e.item, reason=e.reason)
            result.fail(e.item, e.reason)
            try:
                release_conversation_claim(session.client, conversation_id, claim_token)
            except Exception as release_error:
                logger.error("chunk_claim_release_failed", conversation_id=conversation_id,
                             reason=str(release_error))
            continue

        if plan.dropped_messages:
            logger.info("chunk_trailing_dropped", conversation_id=conversation_id,
                        messages=plan.dropped_messages, tokens=plan.dropped_tokens)
        result.succeeded.append(conversation_id)
        chunks_created += len(rows)
        total_tokens += plan.total_tokens
        messages_dropped += plan.dropped_messages

    result.counts = {
        "conversations_total": len(conversations),
        "conversations_chunked": len(result.succeeded),
        "conversations_skipped": skipped,
        "conversations_failed": len(result.failed),
        "chunks_created": chunks_created,
        "total_tokens": total_tokens,
        "messages_dropped": messages_dropped,
    }
    return result
