"""Exception taxonomy for the ingestion phases.

    ArchiveIngestError  (base)
    +-- NotFound            archive, part set, or import row missing (fatal)
    +-- PartialFetch        some multi-part pieces could not be read (fatal)
    +-- ExtractionFailure   archive is corrupt or fails its checksum (fatal)
    +-- ConfigurationError  settings unusable at startup (fatal)
    +-- ServiceUnavailable  embedding provider unreachable or erroring
    +-- PerItemFailure      one file / conversation / chunk failed (non-fatal)
"""


class ArchiveIngestError(Exception):
    """Base exception for archive ingest errors."""

    def __init__(self, message: str = "Archive ingest failed", import_id: str = None):
        self.message = message
        self.import_id = import_id
        super().__init__(message)

    def to_payload(self) -> dict:
        """Error response body returned by the phase entry points."""
        return {"error": self.message, "error_type": type(self).__name__}


class NotFound(ArchiveIngestError):
    """Raised when the archive (direct or multi-part) or the import row is missing."""


class PartialFetch(ArchiveIngestError):
    """Raised when any selected archive part cannot be downloaded."""

    def __init__(self, message: str, missing_parts: list = None, import_id: str = None):
        super().__init__(message, import_id=import_id)
        self.missing_parts = list(missing_parts or [])


class ExtractionFailure(ArchiveIngestError):
    """Raised when the reassembled archive cannot be decompressed or verified."""


class ConfigurationError(ArchiveIngestError):
    """Raised when settings are missing or invalid."""


class ServiceUnavailable(ArchiveIngestError):
    """Raised by embedders when the provider API rejects or cannot serve a request."""


class PerItemFailure(ArchiveIngestError):
    """One file, conversation or chunk failed; the phase records it and moves on."""

    def __init__(self, item: str, reason: str):
        super().__init__(f"{item}: {reason}")
        self.item = item
        self.reason = reason
