"""FastAPI application entry point."""

import os
import sys
import logging
import tomllib
from contextlib import asynccontextmanager
from pathlib import Path
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from dotenv import load_dotenv

# Must run before importing modules that read env vars (api.security)
load_dotenv()

# main.py is at <root>/src/api/main.py
_src_path = Path(__file__).parent.parent
sys.path.insert(0, str(_src_path))

from api.routes import auth, health, users
from utils.logging import setup_structured_logging
from adapter.mongodb.connection import get_mongodb_client, DATABASE_NAME
from adapter.mongodb.indexes import ensure_all_indexes

setup_structured_logging()

logger = logging.getLogger(__name__)

# pyproject.toml is the single source of truth for the version
_project_root = _src_path.parent
with open(_project_root / "pyproject.toml", "rb") as f:
    VERSION = tomllib.load(f)["project"]["version"]

SERVICE_NAME = "Bookshelf API"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: ensure MongoDB indexes on startup."""
    client = get_mongodb_client()
    if client:
        db = client[DATABASE_NAME]
        if ensure_all_indexes(db):
            logger.info("MongoDB indexes verified/created successfully")
        else:
            logger.warning("Failed to create some MongoDB indexes")
    else:
        logger.warning("MongoDB unavailable, skipping index creation")

    yield


app = FastAPI(
    title=SERVICE_NAME,
    description="User accounts, session tokens and password recovery for the book catalog",
    version=VERSION,
    lifespan=lifespan,
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report request validation failures as 400 with one entry per field."""
    errors = []
    for error in exc.errors():
        loc = error.get("loc", ())
        errors.append({
            "msg": error.get("msg"),
            "param": loc[-1] if loc else None,
            "location": loc[0] if loc else None,
        })
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"errors": errors})


# Credentials are only allowed with an explicit origin list
cors_origins_env = os.getenv("CORS_ORIGINS", "*")

if cors_origins_env == "*":
    cors_origins = ["*"]
    allow_credentials = False
    logger.warning(
        "CORS configured with wildcard origin ('*'). "
        "For production, set CORS_ORIGINS to specific domains (e.g., 'https://app.example.com')"
    )
else:
    cors_origins = [origin.strip() for origin in cors_origins_env.split(",")]
    allow_credentials = True
    logger.info(f"CORS configured with specific origins: {cors_origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(users.router)
app.include_router(health.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": SERVICE_NAME,
        "version": VERSION,
        "status": "running"
    }


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    # Access logs stay off; application logs go through the JSON formatter
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=port,
        access_log=False
    )
