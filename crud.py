"""
Collection-level CRUD shared by the admin routes.

Records are never removed: deletion flips ``isActive``. Updates validate the
merged record, then write only the submitted fields in one ``$set``.
"""
import logging
from typing import Any, Dict, List, Optional, Type

from fastapi import HTTPException
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from database import create_document, get_document, get_documents, serialize, update_document
from schemas import Document

logger = logging.getLogger(__name__)

# Server-managed keys that never come from a request body
READ_ONLY_FIELDS = {"_id", "id", "createdAt", "updatedAt", "slot"}


def not_found(label: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"{label} not found")


def submitted_fields(model: Type[Document], payload: Dict[str, Any]) -> Dict[str, Any]:
    """Keep known fields of ``payload``, keyed by their stored alias."""
    lookup = model.field_aliases()
    return {lookup[key]: value for key, value in payload.items() if key in lookup and key not in READ_ONLY_FIELDS}


def merge_and_validate(model: Type[Document], existing: Dict[str, Any], changes: Dict[str, Any]) -> Dict[str, Any]:
    """Validate ``existing`` + ``changes`` and return the normalised values of the changed keys.

    Raises ``pydantic.ValidationError`` when the merged record breaks a constraint.
    """
    current = {key: value for key, value in existing.items() if key not in READ_ONLY_FIELDS}
    validated = model.model_validate({**current, **changes}).model_dump(by_alias=True)
    return {key: validated[key] for key in changes}


def list_records(database: Database, collection: str, sort: list, include_inactive: bool = False) -> List[Dict[str, Any]]:
    query = {} if include_inactive else {"isActive": True}
    return [serialize(doc) for doc in get_documents(database, collection, query, sort)]


def get_record(database: Database, collection: str, record_id: str, label: str, include_inactive: bool = False) -> Dict[str, Any]:
    filters = {} if include_inactive else {"isActive": True}
    doc = get_document(database, collection, record_id, **filters)
    if not doc:
        raise not_found(label)
    return serialize(doc)


def create_record(database: Database, collection: str, record: Document) -> Dict[str, Any]:
    doc = create_document(database, collection, record)
    logger.info("Created %s %s", collection, doc["_id"])
    return serialize(doc)


def update_record(database: Database, collection: str, model: Type[Document], record_id: str, payload: Dict[str, Any], label: str) -> Dict[str, Any]:
    existing = get_document(database, collection, record_id)
    if not existing:
        raise not_found(label)
    changes = merge_and_validate(model, existing, submitted_fields(model, payload))
    doc = update_document(database, collection, existing["_id"], changes)
    if not doc:
        raise not_found(label)
    logger.info("Updated %s %s fields=%s", collection, existing["_id"], sorted(changes))
    return serialize(doc)


def soft_delete_record(database: Database, collection: str, record_id: str, label: str) -> Dict[str, Any]:
    existing = get_document(database, collection, record_id)
    if not existing:
        raise not_found(label)
    if not existing.get("isActive", True):
        return serialize(existing)
    doc = update_document(database, collection, existing["_id"], {"isActive": False})
    logger.info("Soft-deleted %s %s", collection, existing["_id"])
    return serialize(doc or existing)


def upsert_singleton(database: Database, collection: str, model: Type[Document], slot: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    """Create the singleton on first write, otherwise merge into it.

    The unique index on ``slot`` keeps a concurrent first write from inserting
    a second record; the loser falls through to the update path.
    """
    existing: Optional[Dict[str, Any]] = database[collection].find_one({"slot": slot})
    if existing is None:
        record = model.model_validate(payload)
        try:
            return serialize(create_document(database, collection, record, slot=slot))
        except DuplicateKeyError:
            existing = database[collection].find_one({"slot": slot})
    changes = merge_and_validate(model, existing, submitted_fields(model, payload))
    return serialize(update_document(database, collection, existing["_id"], changes))
