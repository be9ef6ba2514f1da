"""Processing pipeline - phase entry points and orchestration.

Each ``step_*`` function is one independently invocable unit of work taking
an explicit session. Fatal errors mark the import failed and propagate;
``handle_phase`` is the single place they are turned into an error payload.
"""

from pydantic import BaseModel, Field, ValidationError

from archive_ingest.config import AuditAction, ImportStatus, Phase
from archive_ingest.database import get_import, update_import_status
from archive_ingest.errors import ArchiveIngestError, NotFound
from archive_ingest.logging import get_logger
from archive_ingest.processing.chunking import chunk_import
from archive_ingest.processing.embedding import embed_import_chunks, is_backlog_drained
from archive_ingest.processing.extraction import extract_archive, verify_checksum
from archive_ingest.processing.reassembly import fetch_archive
from archive_ingest.processing.stats import record_phase_failure, record_phase_outcome
from archive_ingest.utils import Deadline, namespace_from_key

logger = get_logger(__name__)

# Upper bound on embedding invocations inside one run_pipeline call.
MAX_EMBEDDING_ROUNDS = 1000


class PhaseRequest(BaseModel):
    import_id: str = Field(min_length=1)
    user_id: str = Field(min_length=1)


def _fail_phase(session, import_id: str, phase: str, error):
    logger.error("phase_failed", phase=phase, import_id=import_id,
                 error_type=type(error).__name__, error=str(error))
    try:
        record_phase_failure(session, import_id, phase, error, ImportStatus.FAILED)
    except Exception as record_error:
        logger.error("phase_failure_not_recorded", phase=phase, import_id=import_id,
                     reason=str(record_error))


def _deadline(session) -> Deadline:
    return Deadline(session.settings.phase_timeout_seconds)


def step_extract_archive(session, import_id: str, user_id: str):
    """Extraction: reassemble the uploaded archive, unpack it, upload its files.

    Returns a PhaseResult with files_found, files_uploaded, by_type and the
    archive's part count and size.
    """
    import_row = get_import(session.client, import_id)
    update_import_status(session.client, import_id, ImportStatus.EXTRACTING)
    try:
        key = import_row.get("storage_zip_path")
        if not key:
            raise NotFound(f"Import {import_id} has no archive path", import_id=import_id)

        archive = fetch_archive(session.client, session.bucket, key)
        verify_checksum(archive.data, import_row.get("zip_sha256"))
        result = extract_archive(
            session, import_id, user_id, archive.data,
            deadline=_deadline(session),
            namespace=namespace_from_key(key),
        )
    except Exception as e:
        _fail_phase(session, import_id, Phase.EXTRACTION, e)
        raise

    result.counts["archive_parts"] = archive.part_count
    result.counts["archive_size"] = archive.size
    status = ImportStatus.EXTRACTING if result.timed_out else ImportStatus.EXTRACTED
    record_phase_outcome(session, import_id, user_id, AuditAction.EXTRACT_COMPLETED, result, status)
    return result


def step_chunk_conversations(session, import_id: str, user_id: str):
    """Chunking: segment each parsed conversation of the import into chunks."""
    get_import(session.client, import_id)
    update_import_status(session.client, import_id, ImportStatus.CHUNKING)
    try:
        result = chunk_import(session, import_id, deadline=_deadline(session))
    except Exception as e:
        _fail_phase(session, import_id, Phase.CHUNKING, e)
        raise

    status = ImportStatus.CHUNKING if result.timed_out else ImportStatus.CHUNKED
    record_phase_outcome(session, import_id, user_id, AuditAction.CHUNK_COMPLETED, result, status)
    return result


def step_embed_chunks(session, import_id: str, user_id: str):
    """Embedding: embed one batch of the import's un-embedded chunks."""
    get_import(session.client, import_id)
    update_import_status(session.client, import_id, ImportStatus.EMBEDDING)
    try:
        result = embed_import_chunks(session, import_id, user_id, deadline=_deadline(session))
    except Exception as e:
        _fail_phase(session, import_id, Phase.EMBEDDING, e)
        raise

    status = ImportStatus.COMPLETE if is_backlog_drained(result) else ImportStatus.EMBEDDING
    record_phase_outcome(session, import_id, user_id, AuditAction.EMBED_COMPLETED, result, status)
    return result


def run_pipeline(session, import_id: str, user_id: str, parse_transcripts=None) -> dict:
    """Run every phase in order, stopping at the first fatal error.

    Args:
        session: PipelineSession
        import_id: Import to process
        user_id: Owner, recorded on embeddings and audit events
        parse_transcripts: Optional callable(session, import_id, user_id) that
            turns the extracted JSON exports into conversation/message rows

    Returns:
        dict of phase name -> summary
    """
    summaries = {}
    extraction = step_extract_archive(session, import_id, user_id)
    summaries[Phase.EXTRACTION] = extraction.summary()
    if extraction.timed_out:
        return summaries

    if parse_transcripts is not None:
        parse_transcripts(session, import_id, user_id)

    chunking = step_chunk_conversations(session, import_id, user_id)
    summaries[Phase.CHUNKING] = chunking.summary()
    if chunking.timed_out:
        return summaries

    # Keep embedding while batches make progress
    created = 0
    for _ in range(MAX_EMBEDDING_ROUNDS):
        embedding = step_embed_chunks(session, import_id, user_id)
        created += embedding.counts["embeddings_created"]
        if is_backlog_drained(embedding) or not embedding.succeeded:
            break
    summaries[Phase.EMBEDDING] = {**embedding.summary(), "embeddings_created_total": created}
    return summaries


PHASE_HANDLERS = {
    "extract": step_extract_archive,
    "chunk": step_chunk_conversations,
    "embed": step_embed_chunks,
}


def handle_phase(phase: str, payload: dict, session, parse_transcripts=None) -> dict:
    """Entry point for external triggers: validate, run, and report.

    Returns the phase summary on success, or {"error", "error_type"} on failure.
    """
    try:
        request = PhaseRequest.model_validate(payload or {})
    except ValidationError as e:
        return {"error": f"Invalid request: {e.errors()[0]['msg']}", "error_type": "InvalidRequest"}

    logger.info("phase_requested", phase=phase, import_id=request.import_id)
    try:
        if phase == "run":
            phases = run_pipeline(session, request.import_id, request.user_id, parse_transcripts)
            return {"success": True, "phase": "run", "phases": phases}
        if phase not in PHASE_HANDLERS:
            return {"error": f"Unknown phase: {phase}", "error_type": "InvalidRequest"}
        return PHASE_HANDLERS[phase](session, request.import_id, request.user_id).to_dict()
    except ArchiveIngestError as e:
        return e.to_payload()
    except Exception as e:
        logger.exception("phase_unexpected_error", phase=phase, import_id=request.import_id)
        return {"error": str(e), "error_type": type(e).__name__}
