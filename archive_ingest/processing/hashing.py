"""Fast non-cryptographic hashing of chunk text."""

from abc import ABC, abstractmethod

import xxhash


class ChunkHasher(ABC):
    """Computes chunk_hash values used for change detection."""

    name: str

    @abstractmethod
    def hash_text(self, text: str) -> str:
        ...


class XXHashChunkHasher(ChunkHasher):
    """xxh64 of the UTF-8 bytes, as 16 hex characters."""

    name = "xxh64"

    def hash_text(self, text: str) -> str:
        return xxhash.xxh64(text.encode("utf-8")).hexdigest()
