"""Session-scoped collaborators handed to every phase call."""

from dataclasses import dataclass, field

from archive_ingest.database import create_supabase_client
from archive_ingest.llm import create_embedder
from archive_ingest.logging import configure_logging
from archive_ingest.processing.hashing import XXHashChunkHasher
from archive_ingest.settings import Settings


@dataclass
class PipelineSession:
    """Clients and settings for one invocation; nothing here is process-wide.

    ``embedder`` is None when no embedding credential is configured.
    """
    client: object
    settings: Settings
    embedder: object = None
    hasher: object = field(default_factory=XXHashChunkHasher)

    @property
    def bucket(self) -> str:
        return self.settings.storage_bucket


def create_session(settings: Settings = None) -> PipelineSession:
    """Build a session from environment settings."""
    settings = settings or Settings()
    configure_logging(settings.log_level)
    return PipelineSession(
        client=create_supabase_client(settings),
        settings=settings,
        embedder=create_embedder(settings),
    )
