"""
Admin CRUD. Every route here sits behind the bearer-token check.
"""
import logging
from typing import Any, Dict, Type

from fastapi import APIRouter, Body, Depends, Query
from pydantic import BaseModel, ConfigDict, Field
from pymongo.database import Database

from crud import create_record, get_record, list_records, not_found, soft_delete_record, update_record, upsert_singleton
from database import CONTACT, EXPERIENCE, HOME, HOME_SLOT, PROJECT, SKILL, get_db, get_document, get_documents, serialize, update_document, utcnow
from routers.public import EXPERIENCE_SORT, PROJECT_SORT, SKILL_SORT
from schemas import Document, Experience, Home, Project, Skill
from security import get_current_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(get_current_admin)])


class ReplyRequest(BaseModel):
    reply: str = Field(..., min_length=1)

    model_config = ConfigDict(str_strip_whitespace=True)


# =====================
# Projects / Experience / Skills
# =====================

def register_collection(path: str, collection: str, model: Type[Document], key: str, sort: list) -> None:
    """Mount list/get/create/update/soft-delete routes for one collection."""
    label = key.capitalize()

    @router.get(f"/{path}", name=f"list_{path}")
    def list_items(include_inactive: bool = Query(False, alias="includeInactive"), database: Database = Depends(get_db)):
        return list_records(database, collection, sort, include_inactive=include_inactive)

    @router.get(f"/{path}/{{item_id}}", name=f"get_{key}")
    def get_item(item_id: str, include_inactive: bool = Query(False, alias="includeInactive"), database: Database = Depends(get_db)):
        return get_record(database, collection, item_id, label, include_inactive=include_inactive)

    @router.post(f"/{path}", status_code=201, name=f"create_{key}")
    def create_item(item: model, database: Database = Depends(get_db)):
        return {"message": f"{label} created successfully", key: create_record(database, collection, item)}

    @router.put(f"/{path}/{{item_id}}", name=f"update_{key}")
    def update_item(item_id: str, payload: Dict[str, Any] = Body(...), database: Database = Depends(get_db)):
        return {"message": f"{label} updated successfully", key: update_record(database, collection, model, item_id, payload, label)}

    @router.delete(f"/{path}/{{item_id}}", name=f"delete_{key}")
    def delete_item(item_id: str, database: Database = Depends(get_db)):
        return {"message": f"{label} deleted successfully", key: soft_delete_record(database, collection, item_id, label)}


register_collection("projects", PROJECT, Project, "project", PROJECT_SORT)
register_collection("experiences", EXPERIENCE, Experience, "experience", EXPERIENCE_SORT)
register_collection("skills", SKILL, Skill, "skill", SKILL_SORT)


# =====================
# Home (singleton)
# =====================

@router.get("/home")
def get_home(database: Database = Depends(get_db)):
    home = database[HOME].find_one({"slot": HOME_SLOT})
    return serialize(home) if home else {}


@router.post("/home")
def save_home(payload: Dict[str, Any] = Body(...), database: Database = Depends(get_db)):
    home = upsert_singleton(database, HOME, Home, HOME_SLOT, payload)
    logger.info("Home profile %s saved", home["id"])
    return {"message": "Home information saved successfully", "home": home}


# =====================
# Contacts
# =====================

@router.get("/contacts")
def list_contacts(database: Database = Depends(get_db)):
    return [serialize(doc) for doc in get_documents(database, CONTACT, sort=[("createdAt", -1)])]


@router.put("/contacts/{contact_id}/read")
def mark_contact_read(contact_id: str, database: Database = Depends(get_db)):
    contact = get_document(database, CONTACT, contact_id)
    if not contact:
        raise not_found("Contact")
    update_document(database, CONTACT, contact["_id"], {"isRead": True})
    return {"message": "Contact marked as read"}


@router.put("/contacts/{contact_id}/reply")
def reply_to_contact(contact_id: str, data: ReplyRequest, database: Database = Depends(get_db)):
    contact = get_document(database, CONTACT, contact_id)
    if not contact:
        raise not_found("Contact")
    # Replying always implies the message was read
    update_document(database, CONTACT, contact["_id"], {
        "reply": data.reply,
        "isReplied": True,
        "repliedAt": utcnow(),
        "isRead": True,
    })
    logger.info("Replied to contact %s", contact["_id"])
    return {"message": "Reply sent successfully"}

