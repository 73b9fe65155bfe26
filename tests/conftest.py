# tests/conftest.py
# Pytest fixtures. Run: pytest tests/ -v
# No database or model access is needed: the Mongo handle, the completion
# service and the text extractor are swapped for in-memory fakes.

import copy
import os
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017")
os.environ.setdefault("MONGO_DB_NAME", "shidduch_test")
os.environ.setdefault("JWT_SECRET", "test-secret-not-for-prod")
os.environ.setdefault("SKIP_DB_CHECK", "1")

from main import app  # noqa: E402
from shidduch.logic.llm_client import get_completion  # noqa: E402
from shidduch.routers.auth_router import get_current_user  # noqa: E402
from shidduch.services.text_extraction import get_text_extractor  # noqa: E402
from shidduch.utils.mongo import get_db  # noqa: E402


# ---------------------------------------------------------------------------
# In-memory stand-ins
# ---------------------------------------------------------------------------

def _matches(doc, query):
    for key, cond in query.items():
        if isinstance(cond, dict) and "$in" in cond:
            if doc.get(key) not in cond["$in"]:
                return False
        elif doc.get(key) != cond:
            return False
    return True


class FakeCursor:
    def __init__(self, docs):
        self._docs = docs

    def sort(self, key, direction=1):
        self._docs = sorted(self._docs, key=lambda d: d.get(key), reverse=direction < 0)
        return self

    def __aiter__(self):
        self._it = iter(self._docs)
        return self

    async def __anext__(self):
        try:
            return next(self._it)
        except StopIteration:
            raise StopAsyncIteration


class FakeCollection:
    def __init__(self):
        self.docs = []
        self.fail_insert_many_after = None  # insert this many rows, then raise
        self.fail_insert_many_calls = 0  # reject this many insert_many calls outright
        self.fail_update = False

    async def insert_one(self, doc):
        self.docs.append(copy.deepcopy(doc))
        return SimpleNamespace(inserted_id=doc["_id"])

    async def insert_many(self, docs, ordered=True):
        if self.fail_insert_many_calls > 0:
            self.fail_insert_many_calls -= 1
            raise RuntimeError("write rejected")
        for i, doc in enumerate(docs):
            if self.fail_insert_many_after is not None and i >= self.fail_insert_many_after:
                raise RuntimeError("write rejected")
            self.docs.append(copy.deepcopy(doc))
        return SimpleNamespace(inserted_ids=[d["_id"] for d in docs])

    async def find_one(self, query):
        for doc in self.docs:
            if _matches(doc, query):
                return copy.deepcopy(doc)
        return None

    def find(self, query=None):
        return FakeCursor([copy.deepcopy(d) for d in self.docs if _matches(d, query or {})])

    async def update_one(self, query, update):
        if self.fail_update:
            raise RuntimeError("update rejected")
        for doc in self.docs:
            if _matches(doc, query):
                doc.update(copy.deepcopy(update.get("$set", {})))
                return SimpleNamespace(matched_count=1, modified_count=1)
        return SimpleNamespace(matched_count=0, modified_count=0)

    async def delete_one(self, query):
        for i, doc in enumerate(self.docs):
            if _matches(doc, query):
                del self.docs[i]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)

    async def delete_many(self, query):
        before = len(self.docs)
        self.docs = [d for d in self.docs if not _matches(d, query)]
        return SimpleNamespace(deleted_count=before - len(self.docs))


class FakeDB:
    def __init__(self):
        self._collections = {}

    def __getitem__(self, name):
        return self._collections.setdefault(name, FakeCollection())


class FakeCompletion:
    """
    Replays canned replies in order. An Exception instance in the list is
    raised instead of returned.
    """

    def __init__(self, replies=None):
        self.replies = list(replies or [])
        self.calls = []

    async def __call__(self, messages, *, model, temperature, max_tokens):
        self.calls.append({"messages": messages, "model": model, "temperature": temperature, "max_tokens": max_tokens})
        if not self.replies:
            raise RuntimeError("no canned reply left")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


class FakeExtractor:
    def __init__(self, text="Resume text", error=None):
        self.text = text
        self.error = error
        self.calls = []

    async def __call__(self, filename, content, content_type=None):
        self.calls.append(filename)
        if self.error is not None:
            raise self.error
        return self.text


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

def _make_user(user_id: str, email: str = "parent@test.local"):
    return SimpleNamespace(id=user_id, email=email)


@pytest.fixture
def user_a():
    return _make_user("user-a-id", "a@test.local")


@pytest.fixture
def user_b():
    return _make_user("user-b-id", "b@test.local")


@pytest.fixture
def fake_db():
    return FakeDB()


@pytest.fixture
def completion():
    return FakeCompletion()


@pytest.fixture
def extractor():
    return FakeExtractor()


@pytest.fixture
def client(fake_db, completion, extractor):
    app.dependency_overrides[get_db] = lambda: fake_db
    app.dependency_overrides[get_completion] = lambda: completion
    app.dependency_overrides[get_text_extractor] = lambda: extractor
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def login():
    """Override the auth dependency with the given user."""
    def _login(user):
        app.dependency_overrides[get_current_user] = lambda: user
    return _login
