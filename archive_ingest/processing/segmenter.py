"""Greedy, order-preserving segmentation of a conversation into chunks.

Messages are never split. A chunk closes when adding the next message would
push it past the token ceiling, so a single oversized message still becomes
a chunk of its own. The trailing group is kept only if it reaches the
minimum size; otherwise its messages are dropped.
"""

from dataclasses import dataclass, field

from archive_ingest.config import MAX_CHUNK_TOKENS, MIN_TRAILING_CHUNK_TOKENS
from archive_ingest.utils import estimate_tokens


def format_message(message: dict) -> str:
    role = (message.get("role") or "unknown").upper()
    return f"[{role}]: {message.get('content') or ''}"


def render_chunk_text(messages: list) -> str:
    """Role-labelled lines separated by a blank line, in original order."""
    return "\n\n".join(format_message(m) for m in messages)


@dataclass
class PlannedChunk:
    messages: list = field(default_factory=list)
    token_estimate: int = 0

    @property
    def chunk_text(self) -> str:
        return render_chunk_text(self.messages)

    @property
    def first(self) -> dict:
        return self.messages[0]

    @property
    def last(self) -> dict:
        return self.messages[-1]


@dataclass
class SegmentationPlan:
    chunks: list
    dropped_messages: int = 0
    dropped_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return sum(c.token_estimate for c in self.chunks)


def segment_messages(messages: list, max_tokens: int = MAX_CHUNK_TOKENS,
                     min_trailing_tokens: int = MIN_TRAILING_CHUNK_TOKENS) -> SegmentationPlan:
    """Group ordered messages into the fewest token-bounded chunks.

    Args:
        messages: Message dicts with role, content, already in sequence order
        max_tokens: Ceiling for a chunk holding more than one message
        min_trailing_tokens: Smallest trailing chunk worth keeping

    Returns:
        SegmentationPlan with the chunks and what the trailing rule dropped
    """
    chunks = []
    current = PlannedChunk()

    for message in messages:
        cost = estimate_tokens(message.get("content") or "")
        if current.messages and current.token_estimate + cost > max_tokens:
            chunks.append(current)
            current = PlannedChunk()
        current.messages.append(message)
        current.token_estimate += cost

    plan = SegmentationPlan(chunks=chunks)
    if current.messages:
        if current.token_estimate >= min_trailing_tokens:
            chunks.append(current)
        else:
            plan.dropped_messages = len(current.messages)
            plan.dropped_tokens = current.token_estimate
    return plan


def build_chunk_row(chunk: PlannedChunk, import_id: str, conversation_id: str, hasher) -> dict:
    """Row for the chunks table; embedding_id is left unset."""
    text = chunk.chunk_text
    return {
        "import_id": import_id,
        "conversation_id": conversation_id,
        "start_message_id": chunk.first["id"],
        "end_message_id": chunk.last["id"],
        "occurred_start_at": chunk.first.get("occurred_at"),
        "occurred_end_at": chunk.last.get("occurred_at"),
        "chunk_text": text,
        "token_estimate": chunk.token_estimate,
        "chunk_hash": hasher.hash_text(text),
    }
