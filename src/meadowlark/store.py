"""Document store — DocumentStore protocol, in-memory and MongoDB backends."""

from __future__ import annotations

import copy
import uuid
from typing import Any, Protocol, runtime_checkable

from bson import ObjectId
from pymongo import AsyncMongoClient
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import PyMongoError

from meadowlark.config import Settings
from meadowlark.exceptions import StoreError, UnknownEnvironment

Document = dict[str, Any]


@runtime_checkable
class Collection(Protocol):
    """A named set of documents. Filters are equality matches on top-level keys."""

    name: str

    async def find(self, filter: Document | None = None) -> list[Document]: ...
    async def find_one(self, filter: Document) -> Document | None: ...
    async def find_by_id(self, record_id: str) -> Document | None: ...
    async def insert(self, document: Document) -> str: ...
    async def replace(
        self, record_id: str, document: Document, *, upsert: bool = False
    ) -> None: ...
    async def delete(self, record_id: str) -> bool: ...
    async def count(self, filter: Document | None = None) -> int: ...


@runtime_checkable
class DocumentStore(Protocol):
    """Pluggable storage for catalog, user and session documents."""

    def collection(self, name: str) -> Collection: ...
    async def close(self) -> None: ...


def _matches(document: Document, filter: Document | None) -> bool:
    if not filter:
        return True
    return all(document.get(key) == value for key, value in filter.items())


class InMemoryCollection:
    """Dict-backed collection. Single-process only."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._documents: dict[str, Document] = {}

    async def find(self, filter: Document | None = None) -> list[Document]:
        return [
            copy.deepcopy(doc)
            for doc in self._documents.values()
            if _matches(doc, filter)
        ]

    async def find_one(self, filter: Document) -> Document | None:
        for doc in self._documents.values():
            if _matches(doc, filter):
                return copy.deepcopy(doc)
        return None

    async def find_by_id(self, record_id: str) -> Document | None:
        doc = self._documents.get(record_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def insert(self, document: Document) -> str:
        doc = copy.deepcopy(document)
        record_id = str(doc.setdefault("_id", uuid.uuid4().hex))
        if record_id in self._documents:
            raise StoreError(f"{self.name}: duplicate id {record_id!r}")
        doc["_id"] = record_id
        self._documents[record_id] = doc
        return record_id

    async def replace(
        self, record_id: str, document: Document, *, upsert: bool = False
    ) -> None:
        if record_id not in self._documents and not upsert:
            raise StoreError(f"{self.name}: no record with id {record_id!r}")
        doc = copy.deepcopy(document)
        doc["_id"] = record_id
        self._documents[record_id] = doc

    async def delete(self, record_id: str) -> bool:
        return self._documents.pop(record_id, None) is not None

    async def count(self, filter: Document | None = None) -> int:
        return sum(1 for doc in self._documents.values() if _matches(doc, filter))


class InMemoryDocumentStore:
    """Default store for tests and database-less development runs."""

    def __init__(self) -> None:
        self._collections: dict[str, InMemoryCollection] = {}

    def collection(self, name: str) -> InMemoryCollection:
        if name not in self._collections:
            self._collections[name] = InMemoryCollection(name)
        return self._collections[name]

    async def close(self) -> None:
        pass


def _coerce_id(record_id: str) -> Any:
    return ObjectId(record_id) if ObjectId.is_valid(record_id) else record_id


def _out(document: Document | None) -> Document | None:
    if document is None:
        return None
    document["_id"] = str(document["_id"])
    return document


class MongoCollection:
    """Collection adapter over pymongo's asyncio driver.

    Every call is a single attempt; driver errors surface as ``StoreError``.
    """

    def __init__(self, collection: AsyncCollection[Document]) -> None:
        self.name = collection.name
        self._collection = collection

    async def find(self, filter: Document | None = None) -> list[Document]:
        try:
            documents = await self._collection.find(filter or {}).to_list()
        except PyMongoError as exc:
            raise StoreError(f"{self.name}: find failed") from exc
        return [doc for doc in map(_out, documents) if doc is not None]

    async def find_one(self, filter: Document) -> Document | None:
        try:
            return _out(await self._collection.find_one(filter))
        except PyMongoError as exc:
            raise StoreError(f"{self.name}: find_one failed") from exc

    async def find_by_id(self, record_id: str) -> Document | None:
        return await self.find_one({"_id": _coerce_id(record_id)})

    async def insert(self, document: Document) -> str:
        try:
            result = await self._collection.insert_one(dict(document))
        except PyMongoError as exc:
            raise StoreError(f"{self.name}: insert failed") from exc
        return str(result.inserted_id)

    async def replace(
        self, record_id: str, document: Document, *, upsert: bool = False
    ) -> None:
        body = {k: v for k, v in document.items() if k != "_id"}
        try:
            result = await self._collection.replace_one(
                {"_id": _coerce_id(record_id)}, body, upsert=upsert
            )
        except PyMongoError as exc:
            raise StoreError(f"{self.name}: replace failed") from exc
        if not upsert and result.matched_count == 0:
            raise StoreError(f"{self.name}: no record with id {record_id!r}")

    async def delete(self, record_id: str) -> bool:
        try:
            result = await self._collection.delete_one({"_id": _coerce_id(record_id)})
        except PyMongoError as exc:
            raise StoreError(f"{self.name}: delete failed") from exc
        return bool(result.deleted_count)

    async def count(self, filter: Document | None = None) -> int:
        try:
            return await self._collection.count_documents(filter or {})
        except PyMongoError as exc:
            raise StoreError(f"{self.name}: count failed") from exc


class MongoDocumentStore:
    """MongoDB-backed store; the database comes from the connection string."""

    def __init__(self, url: str, *, default_database: str = "meadowlark") -> None:
        self._client: AsyncMongoClient[Document] = AsyncMongoClient(url)
        self._db = self._client.get_default_database(default=default_database)

    def collection(self, name: str) -> MongoCollection:
        return MongoCollection(self._db[name])

    async def close(self) -> None:
        await self._client.close()


def select_connection_string(settings: Settings) -> str:
    """Pick the database for the environment designator.

    Raises ``UnknownEnvironment`` for anything but development/production.
    """
    if settings.env == "development":
        return settings.mongo_development_url
    if settings.env == "production":
        return settings.mongo_production_url
    raise UnknownEnvironment(settings.env)
