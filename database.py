"""
MongoDB access for the Portfolio API.

The client is created from DATABASE_URL at import time; routes receive the
database through the ``get_db`` dependency so tests can swap it out.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Union

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import HTTPException
from pydantic import BaseModel
from pymongo import ASCENDING, DESCENDING, MongoClient, ReturnDocument
from pymongo.database import Database

import config

logger = logging.getLogger(__name__)

# Collection names (lowercased schema class names)
ADMIN = "admin"
HOME = "home"
PROJECT = "project"
EXPERIENCE = "experience"
SKILL = "skill"
CONTACT = "contact"

# Singletons carry a constant slot value behind a unique index
ADMIN_SLOT = "primary"
HOME_SLOT = "home"

# Never sent to clients
PRIVATE_FIELDS = ("password", "slot")

client: Optional[MongoClient] = MongoClient(config.DATABASE_URL) if config.DATABASE_URL else None
db: Optional[Database] = client[config.DATABASE_NAME] if client is not None else None


def get_db() -> Database:
    if db is None:
        raise HTTPException(status_code=500, detail="Database not available")
    return db


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Parse a path/claim id; None when it is not a valid ObjectId."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def serialize(doc: Dict[str, Any], hide: Iterable[str] = ()) -> Dict[str, Any]:
    item = dict(doc)
    item["id"] = str(item.pop("_id"))
    for field in (*PRIVATE_FIELDS, *hide):
        item.pop(field, None)
    return item


def create_document(database: Database, collection_name: str, data: Union[BaseModel, dict], **extra) -> Dict[str, Any]:
    payload = data.model_dump(by_alias=True) if isinstance(data, BaseModel) else dict(data)
    payload.update(extra)
    stamp = utcnow()
    payload["createdAt"] = stamp
    payload["updatedAt"] = stamp
    result = database[collection_name].insert_one(payload)
    payload["_id"] = result.inserted_id
    return payload


def get_documents(database: Database, collection_name: str, filter_dict: Optional[dict] = None, sort: Optional[list] = None) -> List[Dict[str, Any]]:
    cursor = database[collection_name].find(filter_dict or {})
    if sort:
        cursor = cursor.sort(sort)
    return list(cursor)


def get_document(database: Database, collection_name: str, document_id: Any, **filters) -> Optional[Dict[str, Any]]:
    oid = to_object_id(document_id)
    if oid is None:
        return None
    return database[collection_name].find_one({"_id": oid, **filters})


def update_document(database: Database, collection_name: str, document_id: ObjectId, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Apply ``fields`` in a single $set and return the updated document."""
    return database[collection_name].find_one_and_update(
        {"_id": document_id},
        {"$set": {**fields, "updatedAt": utcnow()}},
        return_document=ReturnDocument.AFTER,
    )


def ensure_indexes(database: Database) -> None:
    database[ADMIN].create_index("slot", unique=True)
    database[ADMIN].create_index("email", unique=True)
    database[HOME].create_index("slot", unique=True)
    database[PROJECT].create_index([("isActive", ASCENDING), ("order", ASCENDING), ("createdAt", DESCENDING)])
    database[CONTACT].create_index([("createdAt", DESCENDING)])
    logger.info("MongoDB indexes ensured on %s", database.name)
