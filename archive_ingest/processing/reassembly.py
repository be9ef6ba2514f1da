"""Fetch one logical archive that may be stored whole or as numbered parts.

Parts live beside the archive as ``<key>.chunk0``, ``<key>.chunk1``, ... and
are concatenated in ascending numeric order. The whole archive is held in
memory, so memory use grows with export size; very large exports should be
reassembled by the storage side instead.
"""

from dataclasses import dataclass

from archive_ingest.database import download_object, list_folder
from archive_ingest.errors import NotFound, PartialFetch
from archive_ingest.logging import get_logger
from archive_ingest.utils import parse_part_index, split_storage_key

logger = get_logger(__name__)


@dataclass
class ReassembledArchive:
    key: str
    data: bytes
    part_count: int  # 0 when the archive was fetched directly

    @property
    def size(self) -> int:
        return len(self.data)


def find_part_keys(client, bucket: str, key: str) -> list:
    """Return part keys for key, sorted by their integer suffix."""
    folder, base_name = split_storage_key(key)
    indexed = []
    for name in list_folder(client, bucket, folder):
        index = parse_part_index(name, base_name)
        if index is not None:
            indexed.append((index, f"{folder}/{name}" if folder else name))
    indexed.sort(key=lambda pair: pair[0])
    return [part_key for _, part_key in indexed]


def fetch_archive(client, bucket: str, key: str) -> ReassembledArchive:
    """Download key directly, or reassemble it from its parts.

    Raises:
        NotFound: neither the object nor any part exists.
        PartialFetch: a listed part could not be downloaded (all-or-nothing).
    """
    try:
        data = download_object(client, bucket, key)
        logger.info("archive_fetched_direct", key=key, size=len(data))
        return ReassembledArchive(key=key, data=data, part_count=0)
    except Exception as e:
        # Storage raises on a missing object; fall through to the part listing.
        logger.info("archive_direct_fetch_missed", key=key, reason=str(e))

    part_keys = find_part_keys(client, bucket, key)
    if not part_keys:
        raise NotFound(f"Archive not found: {key}")

    pieces = []
    missing = []
    for part_key in part_keys:
        try:
            pieces.append(download_object(client, bucket, part_key))
        except Exception as e:
            logger.error("archive_part_fetch_failed", part=part_key, reason=str(e))
            missing.append(part_key)

    if missing:
        raise PartialFetch(
            f"Failed to fetch {len(missing)} of {len(part_keys)} archive parts for {key}",
            missing_parts=missing,
        )

    data = b"".join(pieces)
    logger.info("archive_reassembled", key=key, parts=len(part_keys), size=len(data))
    return ReassembledArchive(key=key, data=data, part_count=len(part_keys))
