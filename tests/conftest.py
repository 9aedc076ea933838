"""Shared test fixtures.

Provides a dict-backed stand-in for the redis client (wrapped by the real
RedisCacheStore), in-memory primary-store models implementing the
BaseNoSqlModel operations, and sample author/book payloads.
No external services are needed.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Optional, Set

import pytest
import redis

from backend.factories.service_factory import CatalogServices
from backend.modules.catalog.models.author_model import AuthorModel
from backend.modules.catalog.models.book_model import BookModel
from shared.modules.cache.redis_cache_store import RedisCacheStore


# === Cache ===


class FakeRedis:
    """Minimal redis client: strings with optional TTL bookkeeping."""

    def __init__(self):
        self.data: Dict[str, str] = {}
        self.ttls: Dict[str, Optional[int]] = {}
        self.fail = False
        # (operation, key) pairs that fail once, e.g. ("set", "author:1")
        self.fail_once: Set[tuple] = set()
        self.closed = False
        self.calls: List[tuple] = []

    def _check(self, op, *args):
        self.calls.append((op,) + args)
        if self.fail:
            raise redis.exceptions.ConnectionError("redis is down")
        if args and (op, args[0]) in self.fail_once:
            self.fail_once.discard((op, args[0]))
            raise redis.exceptions.ConnectionError(f"redis {op} failed")

    def ping(self):
        self._check("ping")
        return True

    def exists(self, *keys):
        self._check("exists", *keys)
        return sum(1 for k in keys if k in self.data)

    def get(self, key):
        self._check("get", key)
        return self.data.get(key)

    def set(self, key, value, ex=None):
        self._check("set", key, value, ex)
        self.data[key] = value
        self.ttls[key] = ex
        return True

    def expire(self, key, seconds):
        self._check("expire", key, seconds)
        if key not in self.data:
            return False
        self.ttls[key] = seconds
        return True

    def delete(self, *keys):
        self._check("delete", *keys)
        removed = 0
        for k in keys:
            if self.data.pop(k, None) is not None:
                removed += 1
            self.ttls.pop(k, None)
        return removed

    def close(self):
        self.closed = True


@pytest.fixture
def redis_client() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def cache_store(redis_client) -> RedisCacheStore:
    return RedisCacheStore(url="redis://test", client=redis_client)


# === Primary store ===


class InMemoryStoreMixin:
    """BaseNoSqlModel operations over a dict of documents keyed by _id."""

    def __init__(self):
        super().__init__(db=None)
        self.docs: Dict[str, Dict[str, Any]] = {}
        self.fail_inserts = False

    @staticmethod
    def _matches(doc, query):
        return all(doc.get(k) == v for k, v in query.items())

    def find_all(self):
        return [copy.deepcopy(d) for d in self.docs.values()]

    def find_by_id(self, doc_id):
        doc = self.docs.get(doc_id)
        return copy.deepcopy(doc) if doc else None

    def find_where(self, query, limit=None):
        found = [copy.deepcopy(d) for d in self.docs.values() if self._matches(d, query)]
        return found[:limit] if limit else found

    def insert(self, doc):
        if self.fail_inserts:
            return False
        self.docs[doc["_id"]] = copy.deepcopy(doc)
        return True

    def update_fields(self, doc_id, fields):
        doc = self.docs.get(doc_id)
        if doc is None:
            return 0
        changed = {k: v for k, v in fields.items() if doc.get(k) != v}
        doc.update(copy.deepcopy(changed))
        return 1 if changed else 0

    def increment_and_push(self, doc_id, counter_field, list_field, value):
        doc = self.docs.get(doc_id)
        if doc is None:
            return None
        doc[counter_field] = doc.get(counter_field, 0) + 1
        doc.setdefault(list_field, []).append(value)
        return copy.deepcopy(doc)

    def add_to_set_and_increment(self, doc_id, counter_field, list_field, value):
        doc = self.docs.get(doc_id)
        if doc is None or value in doc.get(list_field, []):
            return 0
        doc.setdefault(list_field, []).append(value)
        doc[counter_field] = doc.get(counter_field, 0) + 1
        return 1

    def pull_and_decrement(self, doc_id, counter_field, list_field, value):
        doc = self.docs.get(doc_id)
        if doc is None or value not in doc.get(list_field, []):
            return 0
        doc[list_field] = [v for v in doc[list_field] if v != value]
        doc[counter_field] = doc.get(counter_field, 0) - 1
        return 1

    def delete_by_id(self, doc_id):
        return 1 if self.docs.pop(doc_id, None) is not None else 0

    def delete_where(self, query):
        doomed = [k for k, d in self.docs.items() if self._matches(d, query)]
        for k in doomed:
            del self.docs[k]
        return len(doomed)


class InMemoryAuthorModel(InMemoryStoreMixin, AuthorModel):
    pass


class InMemoryBookModel(InMemoryStoreMixin, BookModel):
    pass


@pytest.fixture
def author_model() -> InMemoryAuthorModel:
    return InMemoryAuthorModel()


@pytest.fixture
def book_model() -> InMemoryBookModel:
    return InMemoryBookModel()


@pytest.fixture
def services(author_model, book_model, cache_store) -> CatalogServices:
    return CatalogServices(author_model, book_model, cache_store)


# === Sample payloads ===


@pytest.fixture
def author_payload() -> Dict[str, Any]:
    return {
        "first_name": "Jane",
        "last_name": "Doe",
        "date_of_birth": "1980-01-01",
        "hometownCity": "Austin",
        "hometownState": "TX",
    }


@pytest.fixture
def make_book_payload():
    def _make(author_id: str, **overrides) -> Dict[str, Any]:
        payload = {
            "title": "Title X",
            "genres": ["Fiction", "Mystery"],
            "publicationDate": "01/01/2020",
            "publisher": "Acme Press",
            "summary": "A story.",
            "isbn": "978-3-16-148410-0",
            "language": "English",
            "pageCount": 320,
            "price": 19.99,
            "format": ["Hardcover"],
            "authorId": author_id,
        }
        payload.update(overrides)
        return payload

    return _make
