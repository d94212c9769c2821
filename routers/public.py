"""
Public, read-only portfolio endpoints plus the contact form.
"""
import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pymongo.database import Database

from database import CONTACT, EXPERIENCE, HOME, PROJECT, SKILL, create_document, get_db, get_document, get_documents, serialize
from schemas import Contact, ContactSubmission
from urls import with_absolute_urls

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/public", tags=["public"])

PROJECT_SORT = [("order", 1), ("createdAt", -1)]
EXPERIENCE_SORT = [("order", 1), ("startDate", -1)]
SKILL_SORT = [("category", 1), ("order", 1)]

CONTACT_THANKS = "Thank you for your message! I will get back to you soon."


def public_view(doc: dict) -> dict:
    return with_absolute_urls(serialize(doc, hide=("isActive",)))


@router.get("/home")
def get_home(database: Database = Depends(get_db)):
    home = database[HOME].find_one({"isActive": True})
    return public_view(home) if home else {}


@router.get("/projects")
def list_projects(featured: Optional[str] = None, database: Database = Depends(get_db)):
    query = {"isActive": True}
    if featured == "true":
        query["featured"] = True
    return [public_view(doc) for doc in get_documents(database, PROJECT, query, PROJECT_SORT)]


@router.get("/projects/{project_id}")
def get_project(project_id: str, database: Database = Depends(get_db)):
    project = get_document(database, PROJECT, project_id, isActive=True)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return public_view(project)


@router.get("/experiences")
def list_experiences(database: Database = Depends(get_db)):
    return [public_view(doc) for doc in get_documents(database, EXPERIENCE, {"isActive": True}, EXPERIENCE_SORT)]


@router.get("/skills")
def list_skills(database: Database = Depends(get_db)):
    grouped: Dict[str, List[dict]] = {}
    for doc in get_documents(database, SKILL, {"isActive": True}, SKILL_SORT):
        grouped.setdefault(doc["category"], []).append(public_view(doc))
    return grouped


@router.post("/contact", status_code=201)
def submit_contact(submission: ContactSubmission, database: Database = Depends(get_db)):
    doc = create_document(database, CONTACT, Contact(**submission.model_dump()))
    logger.info("Contact message %s received", doc["_id"])
    return {"message": CONTACT_THANKS}


@router.get("/stats")
def get_stats(database: Database = Depends(get_db)):
    active = {"isActive": True}
    return {
        "projects": database[PROJECT].count_documents(active),
        "experiences": database[EXPERIENCE].count_documents(active),
        "skills": database[SKILL].count_documents(active),
    }
