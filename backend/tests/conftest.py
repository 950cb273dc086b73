"""
Shared fixtures.

`FakeFirestore` is an in-memory stand-in for the subset of the Firestore client
the repositories use: documents (get/set/update/delete), equality queries with
FieldFilter, limit/stream and the batch `get_all`. Every read and write copies
the data, so nothing outside the store can mutate what is "persisted".
"""
import copy
import itertools
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from google.api_core.exceptions import ServiceUnavailable

from storefront.config import get_db, settings
from storefront.main import app
from storefront.repositories.carts import CartStore
from storefront.repositories.products import ProductCatalog
from storefront.services.cart_engine import CartEngine

_ids = itertools.count(1)


def _resolve(data, dotted):
    value = data
    for part in dotted.split("."):
        if not isinstance(value, dict) or part not in value:
            return None
        value = value[part]
    return value


class FakeSnapshot:
    def __init__(self, ref, data):
        self.reference = ref
        self.id = ref.id
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return copy.deepcopy(self._data) if self._data is not None else None


class FakeDocRef:
    def __init__(self, db, collection, doc_id):
        self._db = db
        self._collection = collection
        self.id = doc_id

    @property
    def _docs(self):
        return self._db.data.setdefault(self._collection, {})

    def get(self):
        self._db.check()
        return FakeSnapshot(self, copy.deepcopy(self._docs.get(self.id)))

    def set(self, data):
        self._db.check()
        self._docs[self.id] = copy.deepcopy(data)

    def update(self, fields):
        self._db.check()
        if self.id not in self._docs:
            raise KeyError(self.id)
        self._docs[self.id].update(copy.deepcopy(fields))

    def delete(self):
        self._db.check()
        self._docs.pop(self.id, None)


class FakeQuery:
    def __init__(self, db, collection, filters=(), limit=None):
        self._db = db
        self._collection = collection
        self._filters = tuple(filters)
        self._limit = limit

    def where(self, *, filter):
        assert filter.op_string == "==", "only equality filters are faked"
        return FakeQuery(self._db, self._collection, self._filters + (filter,), self._limit)

    def limit(self, count):
        return FakeQuery(self._db, self._collection, self._filters, count)

    def stream(self):
        self._db.check()
        docs = self._db.data.get(self._collection, {})
        hits = [
            FakeSnapshot(FakeDocRef(self._db, self._collection, doc_id), copy.deepcopy(data))
            for doc_id, data in docs.items()
            if all(_resolve(data, f.field_path) == f.value for f in self._filters)
        ]
        return iter(hits[: self._limit] if self._limit is not None else hits)


class FakeCollection(FakeQuery):
    def document(self, doc_id=None):
        return FakeDocRef(self._db, self._collection, doc_id or f"auto{next(_ids)}")


class FakeFirestore:
    def __init__(self):
        self.data = {}
        self.fail = False

    def check(self):
        if self.fail:
            raise ServiceUnavailable("firestore is down")

    def collection(self, name):
        return FakeCollection(self, name)

    def get_all(self, refs):
        self.check()
        for ref in refs:
            yield ref.get()

    # test helpers
    def doc(self, collection, doc_id):
        return copy.deepcopy(self.data.get(collection, {}).get(doc_id))

    def put(self, collection, doc_id, data):
        self.data.setdefault(collection, {})[doc_id] = copy.deepcopy(data)


NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

PRODUCTS = {
    "tee-001": {"name": "Basic Tee", "description": "Cotton t-shirt", "price": 19.99,
                "category": "men", "image": "tee.png", "stock": 40},
    "jeans-002": {"name": "Slim Jeans", "description": "Blue denim", "price": 49.5,
                  "category": "women", "image": "jeans.png", "stock": 12},
    "kids-hoodie": {"name": "Kids Hoodie", "description": "Warm hoodie", "price": 25.0,
                    "category": "kids", "image": "hoodie.png", "stock": 7},
}


@pytest.fixture
def db(monkeypatch):
    """Fake store seeded with three products (newest last) and one soft-deleted one."""
    monkeypatch.setattr(settings, "firebase_collection_prefix", "")
    store = FakeFirestore()
    for i, (pid, data) in enumerate(PRODUCTS.items()):
        store.put("products", pid, dict(data, is_deleted=False, created_at=NOW + timedelta(days=i)))
    store.put("products", "retired-99", {
        "name": "Retired", "price": 5.0, "category": "men", "is_deleted": True, "created_at": NOW,
    })
    return store


@pytest.fixture
def engine(db):
    return CartEngine(CartStore(db), ProductCatalog(db))


@pytest.fixture
def test_client(db, monkeypatch):
    """
    TestClient wired to the fake store.
    Mock bearer tokens (mock_jwt_token_<uid>) are enabled; payments run simulated.
    """
    monkeypatch.setattr(settings, "allow_mock_tokens", True)
    monkeypatch.setattr(settings, "iyzico_api_key", "")
    monkeypatch.setattr(settings, "iyzico_secret_key", "")
    monkeypatch.setattr(settings, "smtp_user", None)
    app.dependency_overrides[get_db] = lambda: db

    client = TestClient(app)
    yield client

    # Clean up dependency overrides
    app.dependency_overrides.clear()


def _bearer(uid):
    return {"Authorization": f"Bearer mock_jwt_token_{uid}"}


@pytest.fixture
def bearer():
    """Builds mock-token headers for any uid."""
    return _bearer


@pytest.fixture
def user_headers():
    return _bearer("alice")


@pytest.fixture
def other_headers():
    return _bearer("bob")


@pytest.fixture
def admin_headers():
    return _bearer("admin-carol")
