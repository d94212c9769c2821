"""
Single-admin signup/login and token introspection.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, EmailStr, Field
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from database import ADMIN, ADMIN_SLOT, create_document, get_db
from schemas import Admin
from security import create_access_token, get_current_admin, hash_password, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

ADMIN_EXISTS = "Admin already exists. Only one admin is allowed."


class SignupRequest(BaseModel):
    name: str = Field(..., min_length=2)
    email: EmailStr
    password: str = Field(..., min_length=6)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


def admin_summary(admin: dict) -> dict:
    return {"id": str(admin["_id"]), "name": admin["name"], "email": admin["email"]}


@router.post("/signup", status_code=201)
def signup(data: SignupRequest, database: Database = Depends(get_db)):
    # The unique slot index backs this check when two signups race
    if database[ADMIN].find_one({}) is not None:
        raise HTTPException(status_code=400, detail=ADMIN_EXISTS)
    admin = Admin(name=data.name, email=data.email, password=hash_password(data.password))
    try:
        doc = create_document(database, ADMIN, admin, slot=ADMIN_SLOT)
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail=ADMIN_EXISTS)
    logger.info("Admin account %s created", doc["_id"])
    return {
        "message": "Admin created successfully",
        "token": create_access_token(str(doc["_id"])),
        "admin": admin_summary(doc),
    }


@router.post("/login")
def login(data: LoginRequest, database: Database = Depends(get_db)):
    admin = database[ADMIN].find_one({"email": data.email.lower()})
    if not admin:
        raise HTTPException(status_code=400, detail="Invalid credentials")
    if not admin.get("isActive", True):
        raise HTTPException(status_code=400, detail="Account is deactivated")
    if not verify_password(data.password, admin["password"]):
        logger.warning("Failed login for %s", data.email)
        raise HTTPException(status_code=400, detail="Invalid credentials")
    return {
        "message": "Login successful",
        "token": create_access_token(str(admin["_id"])),
        "admin": admin_summary(admin),
    }


@router.get("/me")
def me(admin: dict = Depends(get_current_admin)):
    return {"admin": admin_summary(admin)}


@router.get("/check-admin")
def check_admin(database: Database = Depends(get_db)):
    return {"adminExists": database[ADMIN].find_one({}) is not None}
