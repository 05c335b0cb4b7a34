"""
Database Helper Functions

MongoDB connection, id/serialization helpers and the Repository base class
every collection wrapper in repositories/ builds on.
"""

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterator, List, Optional, Union

from bson import ObjectId
from pydantic import BaseModel
from pymongo import ASCENDING, GEOSPHERE, MongoClient, ReturnDocument
from pymongo.database import Database
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)


class InvalidReference(ValueError):
    """A reference field holds something that is not a store id."""

    def __init__(self, field: str, value: Any):
        super().__init__(f"Invalid reference for '{field}': {value!r}")
        self.field = field
        self.value = value


def connect(database_url: str, database_name: str, timeout_ms: int = 5000) -> Database:
    client = MongoClient(database_url, serverSelectionTimeoutMS=timeout_ms, tz_aware=True)
    # fail at startup rather than on the first request
    client.admin.command("ping")
    logger.info("Connected to MongoDB database %s", database_name)
    return client[database_name]


def ensure_indexes(db: Database) -> None:
    db["users"].create_index([("email", ASCENDING)], unique=True)
    db["products"].create_index([("name", ASCENDING)], unique=True)
    db["sessions"].create_index([("token", ASCENDING)], unique=True)
    db["trackers"].create_index([("location", GEOSPHERE)])
    db["trackers"].create_index([("employee", ASCENDING)])
    db["employees"].create_index([("user", ASCENDING)])
    db["customers"].create_index([("user", ASCENDING)])
    db["orders"].create_index([("customer", ASCENDING)])
    db["orders"].create_index([("restaurant", ASCENDING)])
    db["deliveries"].create_index([("order", ASCENDING)])
    db["chats"].create_index([("delivery", ASCENDING)])
    db["bornes"].create_index([("restaurant", ASCENDING)])


def _to_dict(data: Union[BaseModel, dict]) -> dict:
    if isinstance(data, BaseModel):
        return data.model_dump()
    return dict(data)


def to_object_id(value: Any) -> Optional[ObjectId]:
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def _now() -> datetime:
    return datetime.now(timezone.utc)


@contextmanager
def rollback_on_error() -> Iterator[List[Callable[[], Any]]]:
    """Run the registered undo actions, newest first, if the block raises.

    Used for writes spanning several documents::

        with rollback_on_error() as undo:
            account = accounts.create(...)
            undo.append(lambda: accounts.delete_by_id(account["_id"]))
            customers.create(...)
    """
    undo: List[Callable[[], Any]] = []
    try:
        yield undo
    except Exception:
        for action in reversed(undo):
            try:
                action()
            except PyMongoError:
                logger.exception("Rollback step failed; documents may be left orphaned")
        if undo:
            logger.warning("Rolled back %d write(s) after a failed multi-document operation", len(undo))
        raise


class Repository:
    """Thin wrapper around one collection.

    ``references`` lists the fields holding ids of other documents; they are
    stored as ObjectIds so the store can join on them, and handed back as
    strings by ``serialize_doc``.
    """

    collection_name: str = ""
    references: tuple = ()

    def __init__(self, db: Database):
        self.db = db
        self.collection = db[self.collection_name]

    # CRUD helpers

    def create(self, data: Union[BaseModel, dict]) -> dict:
        payload = self._prepare(_to_dict(data))
        now = _now()
        payload['created_at'] = now
        payload['updated_at'] = now
        result = self.collection.insert_one(payload)
        payload['_id'] = result.inserted_id
        return serialize_doc(payload)

    def find_by_id(self, _id: Any) -> Optional[dict]:
        oid = to_object_id(_id)
        if oid is None:
            return None
        return serialize_doc(self.collection.find_one({"_id": oid}))

    def find_one(self, filter_dict: dict) -> Optional[dict]:
        return serialize_doc(self.collection.find_one(filter_dict))

    def find_many(self, filter_dict: Optional[dict] = None, sort: Optional[list] = None, limit: Optional[int] = None) -> List[dict]:
        cursor = self.collection.find(filter_dict or {})
        if sort:
            cursor = cursor.sort(sort)
        if limit:
            cursor = cursor.limit(int(limit))
        return [serialize_doc(doc) for doc in cursor]

    def find_by_ids(self, ids: List[Any]) -> List[dict]:
        """Documents for ``ids``, in the same order, skipping the missing ones."""
        return _fetch_many(self.collection, ids)

    def update_by_id(self, _id: Any, update_data: Dict[str, Any]) -> Optional[dict]:
        oid = to_object_id(_id)
        if oid is None:
            return None
        fields = self._prepare(_to_dict(update_data))
        fields['updated_at'] = _now()
        doc = self.collection.find_one_and_update(
            {"_id": oid}, {"$set": fields}, return_document=ReturnDocument.AFTER
        )
        return serialize_doc(doc)

    def push(self, _id: Any, field: str, ref: Any) -> Optional[dict]:
        return self._modify_array(_id, "$push", field, ref)

    def add_to_set(self, _id: Any, field: str, ref: Any) -> Optional[dict]:
        return self._modify_array(_id, "$addToSet", field, ref)

    def pull(self, _id: Any, field: str, ref: Any) -> Optional[dict]:
        return self._modify_array(_id, "$pull", field, ref)

    def unset(self, _id: Any, field: str) -> Optional[dict]:
        oid = to_object_id(_id)
        if oid is None:
            return None
        doc = self.collection.find_one_and_update(
            {"_id": oid},
            {"$unset": {field: ""}, "$set": {"updated_at": _now()}},
            return_document=ReturnDocument.AFTER,
        )
        return serialize_doc(doc)

    def delete_by_id(self, _id: Any) -> Optional[dict]:
        oid = to_object_id(_id)
        if oid is None:
            return None
        return serialize_doc(self.collection.find_one_and_delete({"_id": oid}))

    def count(self, filter_dict: Optional[dict] = None) -> int:
        return self.collection.count_documents(filter_dict or {})

    # Hydration

    def _embed(self, doc: dict, field: str, collection_name: str) -> dict:
        """Replace the id in ``doc[field]`` with the referenced document."""
        oid = to_object_id(doc.get(field))
        if oid is not None:
            doc[field] = serialize_doc(self.db[collection_name].find_one({"_id": oid}))
        return doc

    def _embed_many(self, doc: dict, field: str, collection_name: str) -> dict:
        doc[field] = _fetch_many(self.db[collection_name], doc.get(field) or [])
        return doc

    # Internals

    def _modify_array(self, _id: Any, operator: str, field: str, ref: Any) -> Optional[dict]:
        oid = to_object_id(_id)
        ref_oid = to_object_id(ref)
        if oid is None or ref_oid is None:
            return None
        doc = self.collection.find_one_and_update(
            {"_id": oid},
            {operator: {field: ref_oid}, "$set": {"updated_at": _now()}},
            return_document=ReturnDocument.AFTER,
        )
        return serialize_doc(doc)

    def _prepare(self, payload: dict) -> dict:
        for field in self.references:
            if payload.get(field) is None:
                continue
            value = payload[field]
            if isinstance(value, list):
                payload[field] = [self._reference(field, v) for v in value]
            else:
                payload[field] = self._reference(field, value)
        return payload

    @staticmethod
    def _reference(field: str, value: Any) -> ObjectId:
        oid = to_object_id(value)
        if oid is None:
            raise InvalidReference(field, value)
        return oid


# Utility

def _fetch_many(collection, ids: List[Any]) -> List[dict]:
    oids = [oid for oid in (to_object_id(i) for i in ids) if oid is not None]
    if not oids:
        return []
    found = {doc["_id"]: doc for doc in collection.find({"_id": {"$in": oids}})}
    return [serialize_doc(found[oid]) for oid in oids if oid in found]


def _stringify(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {k: _stringify(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_stringify(v) for v in value]
    return value


def serialize_doc(doc: Optional[dict]) -> Optional[dict]:
    if not doc:
        return None
    # ObjectIds (the _id and every reference) become strings
    return _stringify(dict(doc))
