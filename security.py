"""
Admin authentication: password hashing and bearer JWT checks.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Header, HTTPException
from jose import JWTError, jwt
from passlib.context import CryptContext
from pymongo.database import Database

import config
from database import ADMIN, get_db, to_object_id

logger = logging.getLogger(__name__)

# Use pbkdf2_sha256 to avoid external bcrypt dependency issues
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

# One message for every auth failure; callers never learn which check failed
NOT_AUTHORIZED = "Not authorized"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(admin_id: str, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES))
    return jwt.encode({"sub": admin_id, "exp": expire}, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def _unauthorized() -> HTTPException:
    return HTTPException(status_code=401, detail=NOT_AUTHORIZED, headers={"WWW-Authenticate": "Bearer"})


def get_current_admin(authorization: Optional[str] = Header(None), database: Database = Depends(get_db)) -> dict:
    """Resolve the bearer token to an active admin document or reject with 401."""
    if not authorization or not authorization.lower().startswith("bearer "):
        raise _unauthorized()
    token = authorization.split(" ", 1)[1].strip()
    try:
        payload = jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
    except JWTError as exc:
        logger.info("Rejected admin token: %s", exc)
        raise _unauthorized()

    admin_id = to_object_id(payload.get("sub"))
    admin = database[ADMIN].find_one({"_id": admin_id}) if admin_id else None
    if not admin or not admin.get("isActive", True):
        logger.warning("Token subject %s does not resolve to an active admin", payload.get("sub"))
        raise _unauthorized()
    return admin
