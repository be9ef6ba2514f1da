"""Configuration constants for the archive ingestion pipeline."""

# Storage
STORAGE_BUCKET = "vault"
EXPORT_NAMESPACE = "openai_exports"
PART_SUFFIX = ".chunk"
STORAGE_LIST_PAGE_SIZE = 1000

# Tables
IMPORTS_TABLE = "archive_imports"
IMPORT_FILES_TABLE = "archive_import_files"
CONVERSATIONS_TABLE = "archive_conversations"
MESSAGES_TABLE = "archive_messages"
CHUNKS_TABLE = "archive_chunks"
CHUNK_CLAIMS_TABLE = "archive_chunk_claims"
EMBEDDINGS_TABLE = "embeddings"
AUDIT_EVENTS_TABLE = "archive_audit_events"

# File classification by extension (lowercase, with dot)
JSON_EXTENSIONS = {".json"}
IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}
AUDIO_EXTENSIONS = {".mp3", ".wav", ".m4a", ".ogg"}
PDF_EXTENSIONS = {".pdf"}

# Content types for extracted uploads, keyed by extension
CONTENT_TYPES = {
    ".json": "application/json",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".m4a": "audio/mp4",
    ".ogg": "audio/ogg",
    ".pdf": "application/pdf",
}
DEFAULT_CONTENT_TYPE = "application/octet-stream"

# Chunk segmentation
CHARS_PER_TOKEN = 4
MAX_CHUNK_TOKENS = 1200
MIN_TRAILING_CHUNK_TOKENS = 200

# Embeddings
EMBEDDING_BATCH_LIMIT = 100
EMBEDDING_MAX_CHARS = 8000
EMBEDDING_OBJECT_TYPE = "archive_chunk"
DEFAULT_EMBEDDING_MODELS = {
    "gemini": "text-embedding-004",
    "openai": "text-embedding-3-small",
}

# Phase execution
DEFAULT_PHASE_TIMEOUT_SECONDS = 300


class FileType:
    """File type labels stored on import file rows."""
    JSON = "json"
    IMAGE = "image"
    AUDIO = "audio"
    PDF = "pdf"
    OTHER = "other"

    ALL = (JSON, IMAGE, AUDIO, PDF, OTHER)


class ImportStatus:
    """Import status values written by the pipeline phases."""
    UPLOADED = "uploaded"
    EXTRACTING = "extracting"
    EXTRACTED = "extracted"
    CHUNKING = "chunking"
    CHUNKED = "chunked"
    EMBEDDING = "embedding"
    COMPLETE = "complete"
    FAILED = "failed"


class Phase:
    """Phase names, also used as keys in the import stats map."""
    EXTRACTION = "extraction"
    CHUNKING = "chunking"
    EMBEDDING = "embedding"

    ALL = (EXTRACTION, CHUNKING, EMBEDDING)


class AuditAction:
    """Audit event action names, one per phase completion."""
    EXTRACT_COMPLETED = "extract_completed"
    CHUNK_COMPLETED = "chunk_completed"
    EMBED_COMPLETED = "embed_completed"
