"""Shared utility functions for paths, classification and token estimates."""

import hashlib
import math
import posixpath
import re
import time
from datetime import datetime, timezone

from archive_ingest.config import (
    AUDIO_EXTENSIONS,
    CHARS_PER_TOKEN,
    CONTENT_TYPES,
    DEFAULT_CONTENT_TYPE,
    EXPORT_NAMESPACE,
    IMAGE_EXTENSIONS,
    JSON_EXTENSIONS,
    PART_SUFFIX,
    PDF_EXTENSIONS,
    FileType,
)


def estimate_tokens(text: str) -> int:
    """Approximate language-model tokens as ceil(characters / 4)."""
    return math.ceil(len(text or "") / CHARS_PER_TOKEN)


def file_extension(path: str) -> str:
    """Lowercased extension including the dot, or '' when there is none."""
    return posixpath.splitext(path)[1].lower()


def classify_file_type(path: str) -> str:
    """Classify an extracted file by extension alone."""
    ext = file_extension(path)
    if ext in JSON_EXTENSIONS:
        return FileType.JSON
    if ext in IMAGE_EXTENSIONS:
        return FileType.IMAGE
    if ext in AUDIO_EXTENSIONS:
        return FileType.AUDIO
    if ext in PDF_EXTENSIONS:
        return FileType.PDF
    return FileType.OTHER


def content_type_for(path: str) -> str:
    return CONTENT_TYPES.get(file_extension(path), DEFAULT_CONTENT_TYPE)


def build_extracted_path(user_id: str, import_id: str, relative_path: str, namespace: str = EXPORT_NAMESPACE) -> str:
    """Storage key for an extracted file: raw/<namespace>/<user>/<import>/extracted/<relative_path>."""
    relative_path = relative_path.replace("\\", "/").lstrip("/")
    return f"raw/{namespace}/{user_id}/{import_id}/extracted/{relative_path}"


def split_storage_key(key: str) -> tuple:
    """Split 'a/b/c.zip' into ('a/b', 'c.zip')."""
    folder, _, name = key.rpartition("/")
    return folder, name


def parse_part_index(entry_name: str, base_name: str):
    """Return N when entry_name is '<base_name>.chunk<N>', else None."""
    match = re.fullmatch(re.escape(base_name + PART_SUFFIX) + r"(\d+)", entry_name)
    return int(match.group(1)) if match else None


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class Deadline:
    """Phase-level time budget, checked between items."""

    def __init__(self, seconds: float, clock=time.monotonic):
        self._clock = clock
        self.seconds = seconds
        self._expires_at = clock() + seconds

    def expired(self) -> bool:
        return self._clock() >= self._expires_at

    def remaining(self) -> float:
        return max(0.0, self._expires_at - self._clock())


def namespace_from_key(key: str, default: str = EXPORT_NAMESPACE) -> str:
    """Namespace segment of 'raw/<namespace>/...' keys, else default."""
    parts = (key or "").split("/")
    if len(parts) > 2 and parts[0] == "raw" and parts[1]:
        return parts[1]
    return default
