"""
Shared fixtures: an in-memory stand-in for the Supabase client.

FakeSupabase implements just the query-builder and storage calls the
pipeline makes (select/eq/is_/order/limit, insert/update/upsert/delete,
storage download/list/upload) over plain lists of dicts.
"""
import copy
import io
import itertools
import zipfile

import pytest

from archive_ingest.config import (
    CHUNK_CLAIMS_TABLE,
    CHUNKS_TABLE,
    IMPORT_FILES_TABLE,
    IMPORTS_TABLE,
)
from archive_ingest.session import PipelineSession
from archive_ingest.settings import Settings


class FakeStorageError(Exception):
    """Raised by FakeBucket for missing objects or injected failures."""


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.op = "select"
        self.filters = []
        self.payload = None
        self._order = None
        self._limit = None
        self.on_conflict = ""
        self.ignore_duplicates = False

    def select(self, columns="*", count=None):
        self.op = "select"
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def is_(self, column, value):
        assert value == "null"
        self.filters.append(lambda row: row.get(column) is None)
        return self

    def order(self, column, desc=False):
        self._order = (column, desc)
        return self

    def limit(self, count):
        self._limit = count
        return self

    def insert(self, rows):
        self.op = "insert"
        self.payload = rows
        return self

    def update(self, data):
        self.op = "update"
        self.payload = data
        return self

    def upsert(self, rows, on_conflict="", ignore_duplicates=False):
        self.op = "upsert"
        self.payload = rows
        self.on_conflict = on_conflict
        self.ignore_duplicates = ignore_duplicates
        return self

    def delete(self):
        self.op = "delete"
        return self

    def _matches(self, row):
        return all(f(row) for f in self.filters)

    def execute(self):
        self.db.calls.append((self.table, self.op))
        hook = self.db.failures.get((self.table, self.op))
        if hook is not None:
            error = hook(self)
            if error is not None:
                raise error

        rows = self.db.tables.setdefault(self.table, [])
        handler = getattr(self, f"_execute_{self.op}")
        return FakeResponse(handler(rows))

    def _execute_select(self, rows):
        matched = [r for r in rows if self._matches(r)]
        if self._order:
            column, desc = self._order
            matched.sort(key=lambda r: (r.get(column) is None, r.get(column) or 0), reverse=desc)
        if self._limit is not None:
            matched = matched[: self._limit]
        return copy.deepcopy(matched)

    def _new_row(self, row):
        new = {**self.db.defaults.get(self.table, {}), **copy.deepcopy(row)}
        new.setdefault("id", f"{self.table}-{next(self.db.ids)}")
        return new

    def _check_unique(self, rows, new):
        for columns in self.db.unique.get(self.table, []):
            for existing in rows:
                if all(existing.get(c) == new.get(c) for c in columns):
                    raise RuntimeError(f"duplicate key value violates unique constraint on {columns}")

    def _execute_insert(self, rows):
        payload = self.payload if isinstance(self.payload, list) else [self.payload]
        created = [self._new_row(r) for r in payload]
        staged = list(rows)
        for new in created:
            self._check_unique(staged, new)
            staged.append(new)
        rows[:] = staged
        return copy.deepcopy(created)

    def _execute_update(self, rows):
        updated = []
        for row in rows:
            if self._matches(row):
                row.update(copy.deepcopy(self.payload))
                updated.append(copy.deepcopy(row))
        return updated

    def _execute_upsert(self, rows):
        payload = self.payload if isinstance(self.payload, list) else [self.payload]
        columns = [c for c in self.on_conflict.split(",") if c]
        written = []
        for item in payload:
            existing = next(
                (r for r in rows if columns and all(r.get(c) == item.get(c) for c in columns)),
                None,
            )
            if existing is not None:
                if self.ignore_duplicates:
                    continue
                existing.update(copy.deepcopy(item))
                written.append(copy.deepcopy(existing))
            else:
                new = self._new_row(item)
                rows.append(new)
                written.append(copy.deepcopy(new))
        return written

    def _execute_delete(self, rows):
        removed = [r for r in rows if self._matches(r)]
        rows[:] = [r for r in rows if not self._matches(r)]
        return copy.deepcopy(removed)


class FakeBucket:
    def __init__(self, storage, name):
        self.storage = storage
        self.name = name

    def download(self, key):
        if key in self.storage.fail_downloads or key not in self.storage.objects:
            raise FakeStorageError(f"Object not found: {key}")
        return self.storage.objects[key]

    def list(self, folder=None, options=None):
        options = options or {}
        prefix = f"{folder}/" if folder else ""
        names = sorted(
            key[len(prefix):] for key in self.storage.objects
            if key.startswith(prefix) and "/" not in key[len(prefix):]
        )
        offset = options.get("offset", 0)
        limit = options.get("limit", 100)
        self.storage.list_calls.append((folder, offset, limit))
        return [{"name": n} for n in names[offset: offset + limit]]

    def upload(self, key, data, file_options=None):
        if key in self.storage.fail_uploads:
            raise FakeStorageError(f"Upload failed: {key}")
        self.storage.objects[key] = bytes(data)
        self.storage.uploads.append((key, dict(file_options or {})))
        return {"Key": key}


class FakeStorage:
    def __init__(self):
        self.objects = {}
        self.uploads = []
        self.list_calls = []
        self.fail_downloads = set()
        self.fail_uploads = set()

    def from_(self, bucket):
        return FakeBucket(self, bucket)


class FakeSupabase:
    def __init__(self):
        self.tables = {}
        self.calls = []
        self.failures = {}
        self.ids = itertools.count(1)
        self.defaults = {CHUNKS_TABLE: {"embedding_id": None}}
        self.unique = {
            CHUNK_CLAIMS_TABLE: [("conversation_id",)],
            CHUNKS_TABLE: [("conversation_id", "start_message_id")],
            IMPORT_FILES_TABLE: [("import_id", "storage_path")],
        }
        self.storage = FakeStorage()

    def from_(self, table):
        return FakeQuery(self, table)

    table = from_

    def rows(self, table):
        return self.tables.get(table, [])


class FakeEmbedder:
    """Deterministic embedder; texts listed in fail_texts raise."""

    provider = "fake"

    def __init__(self, model="fake-embedding"):
        self.model = model
        self.calls = []
        self.fail_texts = set()
        self.before_return = None

    def embed(self, text):
        self.calls.append(text)
        if text in self.fail_texts:
            raise RuntimeError("provider unavailable")
        if self.before_return is not None:
            self.before_return(text)
        return [float(len(text)), 0.5, -0.5]


class StepDeadline:
    """Deadline that expires after a fixed number of checks."""

    def __init__(self, allowed_checks):
        self.allowed = allowed_checks
        self.checks = 0

    def expired(self):
        self.checks += 1
        return self.checks > self.allowed


def make_zip(files: dict) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for name, content in files.items():
            archive.writestr(name, content)
    return buffer.getvalue()


def make_messages(conversation_id, contents, role_cycle=("user", "assistant")):
    roles = itertools.cycle(role_cycle)
    return [
        {
            "id": f"{conversation_id}-m{i}",
            "conversation_id": conversation_id,
            "role": next(roles),
            "content": content,
            "sequence_index": i,
            "occurred_at": f"2024-01-01T00:{i // 60:02d}:{i % 60:02d}+00:00",
        }
        for i, content in enumerate(contents)
    ]


class ReadError(ConnectionError):
    """Shares its name with httpx.ReadError, which with_retry treats as transient."""


def reset_after_commit_once(fake_db, table, op):
    """Apply the next (table, op) write, then fail its response with ReadError."""
    def hook(query):
        del fake_db.failures[(table, op)]
        query.execute()
        return ReadError("connection reset by peer")

    fake_db.failures[(table, op)] = hook


@pytest.fixture
def no_retry_delay(monkeypatch):
    monkeypatch.setattr("archive_ingest.database.client.time.sleep", lambda seconds: None)


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        supabase_url="http://localhost:54321",
        supabase_service_role_key="service-role",
        embedding_backend="gemini",
        gemini_api_key="",
        openai_api_key="",
    )


@pytest.fixture
def fake_db():
    return FakeSupabase()


@pytest.fixture
def embedder():
    return FakeEmbedder()


@pytest.fixture
def session(fake_db, settings, embedder):
    return PipelineSession(client=fake_db, settings=settings, embedder=embedder)


@pytest.fixture
def import_row(fake_db):
    row = {
        "id": "imp-1",
        "owner_user_id": "user-1",
        "storage_zip_path": "raw/openai_exports/user-1/imp-1/openai_export.zip",
        "zip_sha256": None,
        "status": "uploaded",
        "stats": {},
    }
    fake_db.tables.setdefault(IMPORTS_TABLE, []).append(row)
    return row
