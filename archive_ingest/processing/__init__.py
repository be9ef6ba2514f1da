# Processing layer - reassembly, extraction, segmentation, embedding, pipeline

from archive_ingest.processing.results import FailedItem, PhaseResult

from archive_ingest.processing.hashing import ChunkHasher, XXHashChunkHasher

from archive_ingest.processing.reassembly import (
    ReassembledArchive,
    fetch_archive,
    find_part_keys,
)

from archive_ingest.processing.extraction import (
    extract_archive,
    unpack_zip,
    verify_checksum,
    walk_files,
)

from archive_ingest.processing.segmenter import (
    PlannedChunk,
    SegmentationPlan,
    build_chunk_row,
    render_chunk_text,
    segment_messages,
)

from archive_ingest.processing.chunking import chunk_conversation, chunk_import

from archive_ingest.processing.embedding import (
    embed_chunk,
    embed_import_chunks,
    is_backlog_drained,
    truncate_for_embedding,
)

from archive_ingest.processing.stats import record_phase_failure, record_phase_outcome

from archive_ingest.processing.pipeline import (
    handle_phase,
    run_pipeline,
    step_chunk_conversations,
    step_embed_chunks,
    step_extract_archive,
)

__all__ = [
    # Results
    "FailedItem",
    "PhaseResult",
    # Hashing
    "ChunkHasher",
    "XXHashChunkHasher",
    # Reassembly
    "ReassembledArchive",
    "fetch_archive",
    "find_part_keys",
    # Extraction
    "extract_archive",
    "unpack_zip",
    "verify_checksum",
    "walk_files",
    # Segmentation
    "PlannedChunk",
    "SegmentationPlan",
    "build_chunk_row",
    "render_chunk_text",
    "segment_messages",
    # Chunking
    "chunk_conversation",
    "chunk_import",
    # Embedding
    "embed_chunk",
    "embed_import_chunks",
    "is_backlog_drained",
    "truncate_for_embedding",
    # Stats
    "record_phase_failure",
    "record_phase_outcome",
    # Pipeline
    "handle_phase",
    "run_pipeline",
    "step_chunk_conversations",
    "step_embed_chunks",
    "step_extract_archive",
]
