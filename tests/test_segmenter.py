"""
Unit tests for greedy chunk segmentation.
"""
from archive_ingest.config import MAX_CHUNK_TOKENS
from archive_ingest.processing.hashing import XXHashChunkHasher
from archive_ingest.processing.segmenter import (
    build_chunk_row,
    render_chunk_text,
    segment_messages,
)
from archive_ingest.utils import estimate_tokens

from conftest import make_messages


def tokens_of(chars):
    return "x" * chars


class TestSegmentMessages:
    """Tests for the greedy bin-fill."""

    def test_short_conversation_yields_no_chunks(self):
        # 5 messages x 25 tokens = 125 tokens, under the trailing minimum
        messages = make_messages("c1", [tokens_of(100)] * 5)
        plan = segment_messages(messages)
        assert plan.chunks == []
        assert plan.dropped_messages == 5
        assert plan.dropped_tokens == 125

    def test_split_example_three_chunks(self):
        # 10 messages x 250 tokens = 2500 tokens
        messages = make_messages("c1", [tokens_of(1000)] * 10)
        plan = segment_messages(messages)
        assert len(plan.chunks) == 3
        assert [c.token_estimate for c in plan.chunks] == [1000, 1000, 500]
        assert all(c.token_estimate <= MAX_CHUNK_TOKENS for c in plan.chunks[:2])
        assert plan.total_tokens == 2500
        assert plan.dropped_messages == 0

    def test_chunk_fills_exactly_to_ceiling(self):
        messages = make_messages("c1", [tokens_of(400)] * 13)
        plan = segment_messages(messages)
        assert plan.chunks[0].token_estimate == 1200
        assert len(plan.chunks[0].messages) == 12
        # Trailing 100 tokens are below the minimum
        assert len(plan.chunks) == 1
        assert plan.dropped_messages == 1

    def test_oversized_message_is_its_own_chunk(self):
        messages = make_messages("c1", [tokens_of(400), tokens_of(8000), tokens_of(1000)])
        plan = segment_messages(messages)
        assert [len(c.messages) for c in plan.chunks] == [1, 1, 1]
        assert plan.chunks[1].token_estimate == 2000

    def test_oversized_first_message_never_split(self):
        messages = make_messages("c1", [tokens_of(6000)])
        plan = segment_messages(messages)
        assert len(plan.chunks) == 1
        assert plan.chunks[0].token_estimate == 1500

    def test_bound_holds_unless_single_message(self):
        sizes = [37, 4100, 800, 1999, 12, 5000, 640, 2400, 900, 3, 4799, 1200]
        messages = make_messages("c1", [tokens_of(n) for n in sizes])
        plan = segment_messages(messages)
        for chunk in plan.chunks:
            assert chunk.token_estimate <= MAX_CHUNK_TOKENS or len(chunk.messages) == 1

    def test_order_preserved_and_nothing_duplicated(self):
        sizes = [700, 900, 1300, 2000, 300, 4000, 1000]
        messages = make_messages("c1", [tokens_of(n) for n in sizes])
        plan = segment_messages(messages)
        seen = [m["id"] for c in plan.chunks for m in c.messages]
        assert seen == [m["id"] for m in messages][: len(seen)]

    def test_trailing_chunk_at_minimum_is_kept(self):
        messages = make_messages("c1", [tokens_of(800)])
        plan = segment_messages(messages)
        assert len(plan.chunks) == 1
        assert plan.chunks[0].token_estimate == 200

    def test_custom_trailing_minimum(self):
        messages = make_messages("c1", [tokens_of(100)] * 5)
        plan = segment_messages(messages, min_trailing_tokens=0)
        assert len(plan.chunks) == 1

    def test_empty_conversation(self):
        plan = segment_messages([])
        assert plan.chunks == []
        assert plan.dropped_messages == 0

    def test_token_estimate_matches_message_costs(self):
        contents = ["hello there", "a" * 999, "short"] * 40
        messages = make_messages("c1", contents)
        plan = segment_messages(messages)
        for chunk in plan.chunks:
            assert chunk.token_estimate == sum(estimate_tokens(m["content"]) for m in chunk.messages)


class TestChunkText:
    def test_round_trip_from_referenced_messages(self):
        contents = ["What is the plan?" * 30, "Here it is." * 80, "Thanks" * 50]
        messages = make_messages("c1", contents)
        plan = segment_messages(messages)
        by_id = {m["id"]: i for i, m in enumerate(messages)}
        for chunk in plan.chunks:
            start = by_id[chunk.first["id"]]
            end = by_id[chunk.last["id"]]
            rebuilt = "\n\n".join(
                f"[{m['role'].upper()}]: {m['content']}" for m in messages[start:end + 1]
            )
            assert rebuilt == chunk.chunk_text

    def test_render_format(self):
        messages = [
            {"id": "a", "role": "user", "content": "Hi"},
            {"id": "b", "role": "assistant", "content": "Hello"},
        ]
        assert render_chunk_text(messages) == "[USER]: Hi\n\n[ASSISTANT]: Hello"

    def test_missing_content_renders_empty(self):
        assert render_chunk_text([{"id": "a", "role": "tool", "content": None}]) == "[TOOL]: "


class TestBuildChunkRow:
    def test_row_fields(self):
        messages = make_messages("c1", [tokens_of(500), tokens_of(500)])
        chunk = segment_messages(messages).chunks[0]
        hasher = XXHashChunkHasher()
        row = build_chunk_row(chunk, "imp-1", "c1", hasher)

        assert row["import_id"] == "imp-1"
        assert row["conversation_id"] == "c1"
        assert row["start_message_id"] == "c1-m0"
        assert row["end_message_id"] == "c1-m1"
        assert row["occurred_start_at"] == messages[0]["occurred_at"]
        assert row["occurred_end_at"] == messages[1]["occurred_at"]
        assert row["token_estimate"] == 250
        assert row["chunk_hash"] == hasher.hash_text(row["chunk_text"])
        assert "embedding_id" not in row

    def test_hash_is_stable_and_text_sensitive(self):
        hasher = XXHashChunkHasher()
        assert hasher.hash_text("abc") == hasher.hash_text("abc")
        assert hasher.hash_text("abc") != hasher.hash_text("abd")
        assert len(hasher.hash_text("abc")) == 16
