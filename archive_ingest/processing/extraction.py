"""Unpack an archive into a scratch directory and upload each file."""

import io
import os
import shutil
import tempfile
import zipfile
import zlib
from collections import Counter

from archive_ingest.config import EXPORT_NAMESPACE, Phase
from archive_ingest.database import upload_object, upsert_import_file
from archive_ingest.errors import ExtractionFailure, PerItemFailure
from archive_ingest.logging import get_logger
from archive_ingest.processing.results import PhaseResult
from archive_ingest.utils import (
    build_extracted_path,
    classify_file_type,
    content_type_for,
    sha256_hex,
)

logger = get_logger(__name__)


def verify_checksum(data: bytes, expected_sha256: str):
    """Raise ExtractionFailure when the archive does not match its recorded SHA-256."""
    if not expected_sha256:
        return
    actual = sha256_hex(data)
    if actual != expected_sha256.lower():
        raise ExtractionFailure(
            f"Archive checksum mismatch: expected {expected_sha256}, got {actual}"
        )


def unpack_zip(data: bytes, scratch_dir: str):
    """Decompress data into scratch_dir.

    Any archive that cannot be fully read, encrypted members included, is fatal.
    """
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            archive.extractall(scratch_dir)
    except (zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError, RuntimeError) as e:
        raise ExtractionFailure(f"Archive could not be decompressed: {e}") from e


def walk_files(root: str) -> list:
    """Relative POSIX paths of every regular file under root, sorted."""
    found = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        for filename in sorted(filenames):
            full_path = os.path.join(dirpath, filename)
            if os.path.isfile(full_path) and not os.path.islink(full_path):
                found.append(os.path.relpath(full_path, root).replace(os.sep, "/"))
    return found


def remove_scratch_dir(scratch_dir: str):
    try:
        shutil.rmtree(scratch_dir)
    except OSError as e:
        logger.warning("extract_scratch_cleanup_failed", path=scratch_dir, reason=str(e))


def upload_extracted_file(session, import_id: str, scratch_dir: str, relative_path: str,
                          storage_path: str, file_type: str) -> int:
    """Upload one unpacked file and upsert its import file row. Returns its size."""
    try:
        with open(os.path.join(scratch_dir, relative_path), "rb") as f:
            file_bytes = f.read()
        upload_object(session.client, session.bucket, storage_path, file_bytes,
                      content_type_for(relative_path))
        upsert_import_file(session.client, import_id, storage_path, file_type, {
            "original_path": relative_path,
            "size": len(file_bytes),
        })
    except Exception as e:
        raise PerItemFailure(relative_path, str(e)) from e
    return len(file_bytes)


def extract_archive(session, import_id: str, user_id: str, data: bytes,
                    deadline=None, namespace: str = EXPORT_NAMESPACE) -> PhaseResult:
    """Unpack data, upload every file, and record one import file row per upload.

    Upload failures are per file: logged, recorded in the result, and skipped.

    Returns a PhaseResult whose counts hold:
        - files_found / files_uploaded / files_failed
        - by_type: histogram of uploaded files per file type
        - bytes_uploaded
    """
    result = PhaseResult(phase=Phase.EXTRACTION)
    by_type = Counter()
    bytes_uploaded = 0

    scratch_dir = tempfile.mkdtemp(prefix=f"archive-{import_id}-")
    try:
        unpack_zip(data, scratch_dir)
        relative_paths = walk_files(scratch_dir)
        logger.info("extract_files_found", import_id=import_id, count=len(relative_paths))

        for relative_path in relative_paths:
            if deadline is not None and deadline.expired():
                result.timed_out = True
                logger.warning("extract_deadline_reached", import_id=import_id,
                               uploaded=len(result.succeeded))
                break

            file_type = classify_file_type(relative_path)
            storage_path = build_extracted_path(user_id, import_id, relative_path, namespace)
            try:
                size = upload_extracted_file(session, import_id, scratch_dir, relative_path,
                                             storage_path, file_type)
            except PerItemFailure as e:
                logger.warning("extract_file_upload_failed", import_id=import_id,
                               path=e.item, reason=e.reason)
                result.fail(e.item, e.reason)
                continue

            result.succeeded.append(relative_path)
            by_type[file_type] += 1
            bytes_uploaded += size
    finally:
        remove_scratch_dir(scratch_dir)

    result.counts = {
        "files_found": len(relative_paths),
        "files_uploaded": len(result.succeeded),
        "files_failed": len(result.failed),
        "by_type": dict(by_type),
        "bytes_uploaded": bytes_uploaded,
    }
    return result
