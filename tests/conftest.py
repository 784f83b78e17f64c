import copy
import re
from types import SimpleNamespace

import bson
import pytest
from bson import ObjectId
from bson.codec_options import CodecOptions
from fastapi.testclient import TestClient
from pymongo.errors import DuplicateKeyError

from plan_api.database import get_db
from plan_api.main import app

BSON_OPTIONS = CodecOptions(tz_aware=True)


def _matches(document, filters):
    for key, condition in filters.items():
        if key == "$or":
            if not any(_matches(document, sub) for sub in condition):
                return False
            continue

        value = document.get(key)
        if isinstance(condition, re.Pattern):
            if not isinstance(value, str) or not condition.search(value):
                return False
        elif isinstance(condition, dict):
            for op, operand in condition.items():
                if value is None:
                    return False
                if op == "$gte" and not value >= operand:
                    return False
                if op == "$lte" and not value <= operand:
                    return False
                if op == "$gt" and not value > operand:
                    return False
                if op == "$lt" and not value < operand:
                    return False
        elif value != condition:
            return False
    return True


class FakeCursor:
    def __init__(self, docs):
        self._docs = docs
        self._skip = 0
        self._limit = 0

    def sort(self, keys):
        for field, direction in reversed(keys):
            self._docs.sort(key=lambda d: d.get(field), reverse=direction < 0)
        return self

    def skip(self, count):
        self._skip = count
        return self

    def limit(self, count):
        self._limit = count
        return self

    def _window(self):
        docs = self._docs[self._skip:]
        return docs[: self._limit] if self._limit else docs

    async def to_list(self, length=None):
        docs = self._window()
        return [copy.deepcopy(d) for d in (docs[:length] if length else docs)]

    def __aiter__(self):
        self._iter = iter(self._window())
        return self

    async def __anext__(self):
        try:
            return copy.deepcopy(next(self._iter))
        except StopIteration:
            raise StopAsyncIteration


class FakeCollection:
    """Just enough of an AsyncIOMotorCollection for the plan handlers."""

    def __init__(self, name):
        self.name = name
        self.docs = []
        self.unique_keys = []
        self.calls = []

    async def create_index(self, keys, unique=False, name=None):
        if unique:
            self.unique_keys.append(tuple(field for field, _ in keys))
        return name

    async def insert_one(self, document):
        self.calls.append("insert_one")
        document.setdefault("_id", ObjectId())
        for fields in self.unique_keys:
            if any(all(d.get(f) == document.get(f) for f in fields) for d in self.docs):
                raise DuplicateKeyError(f"E11000 duplicate key error collection: {self.name}")
        # Stored as MongoDB would, at BSON precision.
        self.docs.append(bson.decode(bson.encode(document), codec_options=BSON_OPTIONS))
        return SimpleNamespace(inserted_id=document["_id"])

    async def find_one(self, filters):
        self.calls.append("find_one")
        for d in self.docs:
            if _matches(d, filters):
                return copy.deepcopy(d)
        return None

    async def count_documents(self, filters):
        self.calls.append("count_documents")
        return sum(1 for d in self.docs if _matches(d, filters))

    def find(self, filters):
        self.calls.append("find")
        return FakeCursor([d for d in self.docs if _matches(d, filters)])


class FakeDatabase:
    name = "plans_test"

    def __init__(self):
        self.users = FakeCollection("users")
        self.plans = FakeCollection("plans")


@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def client(fake_db):
    app.dependency_overrides[get_db] = lambda: fake_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def owner_id():
    return str(ObjectId())


@pytest.fixture
def other_owner_id():
    return str(ObjectId())


@pytest.fixture
def auth():
    def headers(identifier):
        return {"x-user-id": identifier}

    return headers
