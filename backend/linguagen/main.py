"""LinguaGen AI — FastAPI Application Entry Point."""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from linguagen.config import settings
from linguagen.database import init_db
from linguagen.dependencies import get_library, get_store, resolve_api_key
from linguagen.exceptions import (
    ConfirmationRequired,
    DocumentPathError,
    DocumentSchemaError,
    GenerationError,
    InvalidBackupFormat,
    LessonNotFound,
    LinguaGenError,
    RefinementError,
    StorageQuotaExceeded,
    StudentNotFound,
    WorkflowBusy,
    WorkflowClosed,
    WorkflowValidationError,
)
from linguagen.routers import lessons, settings as settings_router, students, workflows
from linguagen.services.ai_client import ai_provider_name
from linguagen.services.generator import needs_api_key

logger = logging.getLogger("linguagen")

# ── CORS origins from env ────────────────────────────────────────────────────
_cors_origins = [o.strip() for o in settings.ALLOWED_ORIGINS.split(",") if o.strip()]

app = FastAPI(
    title="LinguaGen AI",
    description="Personalized ESL lesson plans for your students.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(students.router)
app.include_router(lessons.router)
app.include_router(workflows.router)
app.include_router(settings_router.router)


_STATUS_CODES: dict[type, int] = {
    StudentNotFound: 404,
    LessonNotFound: 404,
    ConfirmationRequired: 409,
    WorkflowBusy: 409,
    WorkflowClosed: 409,
    WorkflowValidationError: 400,
    InvalidBackupFormat: 400,
    DocumentPathError: 422,
    DocumentSchemaError: 422,
    GenerationError: 502,
    RefinementError: 502,
    StorageQuotaExceeded: 507,
}


def status_code_for(exc: LinguaGenError) -> int:
    for exc_type in type(exc).__mro__:
        if exc_type in _STATUS_CODES:
            return _STATUS_CODES[exc_type]
    return 500


@app.exception_handler(LinguaGenError)
async def linguagen_error_handler(request: Request, exc: LinguaGenError):
    body: dict = {"detail": exc.message}
    if needs_api_key(exc.message):
        body["settings_hint"] = "Go to Settings to configure API Key"
    return JSONResponse(status_code=status_code_for(exc), content=body)


@app.on_event("startup")
async def on_startup():
    """Create the storage table, load the library and log the AI provider."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    init_db()
    library = get_library()

    provider = ai_provider_name(resolve_api_key(get_store()))
    if provider == "none":
        logger.warning(
            "AI NOT CONFIGURED: save an API key via PUT /api/settings/api-key "
            "or set ANTHROPIC_API_KEY in backend/.env"
        )
    else:
        logger.info("AI provider: %s", provider)
    logger.info("Library ready: %d students, %d lessons", len(library.students), len(library.lessons))


@app.get("/")
def root():
    return {
        "name": "LinguaGen AI",
        "version": "1.0.0",
        "docs": "/docs",
        "ai_provider": ai_provider_name(resolve_api_key(get_store())),
    }


@app.get("/health")
def health():
    return {"status": "ok"}
