import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.db.base_class import Base
from app.api.v1.api import api_router
from app.db import session as db_session

# registers every model on Base.metadata
from app.db import base as _models  # noqa: F401

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Content Studio API",
    openapi_url="/api/v1/openapi.json",
)


def _normalize_origin(raw: str) -> str | None:
    origin = (raw or "").strip().rstrip("/")
    if not origin:
        return None
    return origin if origin.startswith("http") else f"https://{origin}"


def _build_cors_origins() -> list[str]:
    candidates = list(settings.BACKEND_CORS_ORIGINS)
    candidates += os.getenv("ADDITIONAL_CORS_ORIGINS", "").split(",")
    allow_origins = sorted({o for o in map(_normalize_origin, candidates) if o})
    logger.info("CORS origins: %s", allow_origins)
    return allow_origins


app.add_middleware(
    CORSMiddleware,
    allow_origins=_build_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["Authorization", "Content-Type", "X-Service-Name"],
)

app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
async def startup():
    logger.info("Checking database tables...")
    async with db_session.async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready.")


@app.get("/")
def read_root():
    return {"message": "Welcome to the Content Studio API!"}
