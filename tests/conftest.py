import json

import pytest

from api.api_session import session as session_module
from api.api_session.session import DataSession


def lookup_path(document: dict, path: str):
    value = document
    for part in path.split("."):
        if not isinstance(value, dict) or part not in value:
            return None
        value = value[part]
    return value


def matches(document: dict, query: dict):
    for field, expected in query.items():
        if field == "$or":
            if not any(matches(document, option) for option in expected):
                return False
            continue
        actual = lookup_path(document, field)
        if isinstance(expected, dict) and "$gt" in expected:
            if actual is None or not actual > expected["$gt"]:
                return False
        elif actual != expected:
            return False
    return True


class FakeCursor:
    def __init__(self, documents):
        self.documents = list(documents)

    def sort(self, field, direction=1):
        self.documents.sort(key=lambda doc: lookup_path(doc, field), reverse=direction < 0)
        return self

    def limit(self, count):
        self.documents = self.documents[:count]
        return self

    def __iter__(self):
        return iter([dict(doc) for doc in self.documents])


class FakeCollection:
    """In-memory stand-in for the parts of a pymongo collection in use."""

    def __init__(self, documents=None):
        self.documents = list(documents or [])
        self.find_calls = []
        self.find_one_calls = []

    def find(self, query=None):
        self.find_calls.append(query)
        return FakeCursor(doc for doc in self.documents if matches(doc, query or {}))

    def find_one(self, query=None):
        self.find_one_calls.append(query)
        for doc in self.documents:
            if matches(doc, query or {}):
                return dict(doc)
        return None


class FakeDatabase:
    def __init__(self, collections=None):
        self.collections = {name: FakeCollection(docs) for name, docs in (collections or {}).items()}

    def __getitem__(self, name):
        return self.collections.setdefault(name, FakeCollection())


class FakeCache:
    """Dict-backed replacement for the Redis get/setex calls."""

    def __init__(self):
        self.store = {}
        self.ttls = {}

    def get(self, key):
        return self.store.get(key)

    def setex(self, key, ttl, value):
        self.store[key] = value.encode() if isinstance(value, str) else value
        self.ttls[key] = ttl


class FakeUser:
    def __init__(self, token, email=None):
        self.id_token = token
        self.email = email

    def get_id_token(self):
        return self.id_token


class FakeAuth:
    def __init__(self, user=None):
        self.current_user = user


def make_movie(key: str, **fields):
    document = {
        "_id": key,
        "title": f"Movie {key}",
        "averageRating": 3.47,
        "overview": f"Overview of {key}",
        "poster": f"/{key}.jpg",
        "genres": {"Action": True},
    }
    document.update(fields)
    return document


@pytest.fixture
def movie_documents():
    return [make_movie(f"m{index:02d}") for index in range(1, 16)]


@pytest.fixture
def database(movie_documents):
    return FakeDatabase({"movies": movie_documents})


@pytest.fixture
def cache():
    return FakeCache()


@pytest.fixture
def auth():
    return FakeAuth()


@pytest.fixture
def data_session(database, cache, auth):
    return DataSession(client=None, database=database, cache=cache, auth=auth)


@pytest.fixture(autouse=True)
def clean_shared_session():
    session_module.reset_session()
    yield
    session_module.reset_session()


def cached_document(cache: FakeCache, key: str):
    return json.loads(cache.store[key])
