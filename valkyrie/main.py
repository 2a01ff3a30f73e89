"""
Main.py works as a main function for the application
Api app starts from here
"""

from contextlib import asynccontextmanager
from logging import getLogger
from logging.config import dictConfig
from pathlib import Path

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from valkyrie import __version__
from valkyrie.core.config import settings
from valkyrie.core.exceptions import (FieldValidationError,
                                      field_validation_exception_handler,
                                      global_exception_handler,
                                      validation_exception_handler)
from valkyrie.database import init_db
from valkyrie.routers import guild_router, user_router
from valkyrie.utils.logger import sample_logger


# ----------------------------------------------------------------------
# Lifespan: DB tables and upload directory on startup
# ----------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()

    Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
    logger.info(f"Serving uploads from {settings.UPLOAD_DIR}")

    yield

    logger.info("Shutting down")


logger = getLogger(__name__)

# ----------------------------------------------------------------------
# FastAPI application
# ----------------------------------------------------------------------
app = FastAPI(
    title="Valkyrie",
    description="Accounts, friends and guilds API",
    version=__version__,
    docs_url="/docs" if settings.DEPLOY_PHASE in ("dev", "local") else None,
    lifespan=lifespan,
)

# ----------------------------------------------------------------------
# Logging
# ----------------------------------------------------------------------
dictConfig(sample_logger)

# ----------------------------------------------------------------------
# Exception handlers
# ----------------------------------------------------------------------
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(FieldValidationError, field_validation_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

# ----------------------------------------------------------------------
# CORS (the SPA sends the session cookie)
# ----------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.CORS_ORIGIN],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ----------------------------------------------------------------------
# Routers
# ----------------------------------------------------------------------
app.include_router(user_router)  # /account
app.include_router(guild_router)  # /guilds

# uploaded avatars
app.mount("/files", StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="files")


@app.get("/")
async def root():
    return {"message": "Valkyrie API"}
