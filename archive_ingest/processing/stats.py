"""Phase outcome recording - import stats merge and audit trail."""

from archive_ingest.database import log_audit_event, write_phase_stats
from archive_ingest.logging import get_logger

logger = get_logger(__name__)


def record_phase_outcome(session, import_id: str, user_id: str, action: str,
                         result, status: str = None) -> dict:
    """Merge the phase summary into import stats and append one audit event."""
    summary = result.summary()
    stats = write_phase_stats(session.client, import_id, result.phase, summary, status=status)
    log_audit_event(session.client, user_id, action, import_id, summary)
    logger.info("phase_completed", phase=result.phase, import_id=import_id,
                succeeded=len(result.succeeded), failed=len(result.failed),
                timed_out=result.timed_out)
    return stats


def record_phase_failure(session, import_id: str, phase: str, error, status: str):
    """Store the fatal error under the phase's stats key and mark the import."""
    write_phase_stats(session.client, import_id, phase, {
        "error": str(error),
        "error_type": type(error).__name__,
    }, status=status)
