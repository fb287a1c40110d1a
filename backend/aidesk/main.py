import logging

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from contextlib import asynccontextmanager

from aidesk.core.config import settings
from aidesk.api.api import api_router
from aidesk.api.errors import (
    http_exception_handler,
    validation_exception_handler,
    general_exception_handler
)
from aidesk.services.auth_service import get_auth_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: open the credential store and restore a saved session so the
    # shell's first status query can pick the initial view
    auth_service = get_auth_service()
    restored = await auth_service.initialize()
    if not auth_service.store.is_durable:
        logger.warning("Running with an in-memory credential store; registrations will be lost on exit")
    logger.info(f"Startup complete (session restored: {restored})")

    yield

    # Shutdown
    await auth_service.shutdown()


app = FastAPI(
    title="AI Desk API",
    description="Local session and credential service for the AI Desk shell",
    version=settings.VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url=None
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)

# Add exception handlers
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

# Include API routes
app.include_router(api_router)


@app.get("/")
async def root():
    return {
        "message": "AI Desk API",
        "version": settings.VERSION,
        "status": "operational"
    }
