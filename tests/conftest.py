"""
Shared fixtures.

Every storage-facing test runs against both backends: JSON files in a
temporary directory, and the document backend on FakeMongoDatabase, an
in-memory stand-in for the subset of the pymongo collection API the
document store uses.
"""

import copy
from decimal import Decimal
from types import SimpleNamespace

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from models import Product
from services import DEFAULT_PRODUCTS, FulfillmentService
from storage import DocumentStorage, open_file_storage


BACKENDS = ["file", "document"]


# =============================================================================
# IN-MEMORY MONGO STAND-IN
# =============================================================================

class FakeCollection:
    """Equality-filter subset of pymongo.collection.Collection."""

    def __init__(self, name):
        self.name = name
        self.docs = []
        self.unique_fields = {"_id"}

    @staticmethod
    def _matches(doc, query):
        return all(doc.get(key) == value for key, value in (query or {}).items())

    @staticmethod
    def _project(doc, projection):
        doc = copy.deepcopy(doc)
        if projection and projection.get("_id") is False:
            doc.pop("_id", None)
        return doc

    def _check_unique(self, doc, skip=None):
        for field in self.unique_fields:
            if field not in doc:
                continue
            for other in self.docs:
                if other is not skip and other.get(field) == doc[field]:
                    raise DuplicateKeyError(f"E11000 duplicate key error: {field}", 11000)

    def create_index(self, keys, unique=False):
        field = keys[0][0] if isinstance(keys, list) else keys
        if unique:
            self.unique_fields.add(field)
        return f"{field}_1"

    def find_one(self, query=None, projection=None):
        for doc in self.docs:
            if self._matches(doc, query):
                return self._project(doc, projection)
        return None

    def find(self, query=None, projection=None):
        return [self._project(doc, projection) for doc in self.docs if self._matches(doc, query)]

    def count_documents(self, query):
        return len(self.find(query))

    def insert_one(self, doc):
        doc.setdefault("_id", ObjectId())
        self._check_unique(doc)
        self.docs.append(copy.deepcopy(doc))
        return SimpleNamespace(inserted_id=doc["_id"])

    def replace_one(self, query, replacement, upsert=False):
        for index, doc in enumerate(self.docs):
            if self._matches(doc, query):
                new_doc = copy.deepcopy(replacement)
                new_doc.setdefault("_id", doc["_id"])
                self._check_unique(new_doc, skip=doc)
                self.docs[index] = new_doc
                return SimpleNamespace(matched_count=1, upserted_id=None)
        if upsert:
            new_doc = {**query, **copy.deepcopy(replacement)}
            inserted = self.insert_one(new_doc)
            return SimpleNamespace(matched_count=0, upserted_id=inserted.inserted_id)
        return SimpleNamespace(matched_count=0, upserted_id=None)

    def update_one(self, query, update):
        for doc in self.docs:
            if self._matches(doc, query):
                doc.update(copy.deepcopy(update.get("$set", {})))
                return SimpleNamespace(matched_count=1, modified_count=1)
        return SimpleNamespace(matched_count=0, modified_count=0)

    def delete_one(self, query):
        for index, doc in enumerate(self.docs):
            if self._matches(doc, query):
                del self.docs[index]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)

    def delete_many(self, query):
        kept = [doc for doc in self.docs if not self._matches(doc, query)]
        deleted = len(self.docs) - len(kept)
        self.docs = kept
        return SimpleNamespace(deleted_count=deleted)


class FakeMongoDatabase:
    """Dict-style access to lazily created FakeCollections."""

    def __init__(self, name="order_fulfillment_test"):
        self.name = name
        self.collections = {}

    def __getitem__(self, name):
        if name not in self.collections:
            self.collections[name] = FakeCollection(name)
        return self.collections[name]


def build_storage(backend, data_dir):
    """Fresh, empty storage for the given backend."""
    if backend == "file":
        return open_file_storage(data_dir)
    storage = DocumentStorage(FakeMongoDatabase())
    storage.ensure_indexes()
    return storage


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def fake_db():
    """Empty in-memory Mongo database."""
    return FakeMongoDatabase()


@pytest.fixture(params=BACKENDS)
def make_storage(request, tmp_path_factory):
    """Factory producing a fresh, empty storage per call (one backend per param)."""
    def factory():
        return build_storage(request.param, tmp_path_factory.mktemp("data"))
    factory.backend = request.param
    return factory


@pytest.fixture
def storage(make_storage):
    """Empty storage on each backend."""
    return make_storage()


@pytest.fixture
def stocked_storage(storage):
    """Storage holding the four sample products."""
    for product in DEFAULT_PRODUCTS:
        storage.catalog.insert(product)
    return storage


@pytest.fixture
def service(stocked_storage):
    """FulfillmentService with default settings on stocked storage."""
    return FulfillmentService.from_storage(stocked_storage)


@pytest.fixture
def product_one():
    """The product used by the worked examples: 19.99, 50 in stock."""
    return Product(id="1", price=Decimal("19.99"), stock=50, name="product1")
