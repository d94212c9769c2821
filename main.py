import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import PyMongoError

import config
import database
from errors import register_exception_handlers
from routers import admin_router, auth_router, public_router

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    if root.handlers:
        return
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s", "%Y-%m-%d %H:%M:%S"))
    root.addHandler(handler)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if database.db is None:
        logger.warning("DATABASE_URL is not set; data routes will answer 500")
    else:
        # Singleton guarantees depend on these indexes; refuse to start without them
        database.ensure_indexes(database.db)
    yield
    if database.client is not None:
        database.client.close()


# ==================
# FastAPI app config
# ==================
setup_logging(config.LOG_LEVEL)

app = FastAPI(
    title="Portfolio API",
    lifespan=lifespan,
    docs_url=None if config.IS_PRODUCTION else "/docs",
    redoc_url=None if config.IS_PRODUCTION else "/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(public_router)
app.include_router(auth_router)
app.include_router(admin_router)


# ======
# Routes
# ======
@app.get("/")
def root():
    return {"status": "ok", "service": "portfolio-api", "environment": config.APP_ENV}


@app.get("/test")
def test_database():
    if database.db is None:
        return {"backend": "running", "database": "not-available", "collections": []}
    try:
        collections = database.db.list_collection_names()
    except PyMongoError as exc:
        logger.warning("Database probe failed: %s", exc)
        return {"backend": "running", "database": "error", "collections": []}
    return {"backend": "running", "database": "connected", "collections": collections[:10]}
