"""
BayBridge Classroom API.
Mounts the stream bridge under /api/s2 and the translation proxy under /api.
"""

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from .schemas import HealthResponse
from .streams import router as streams_router
from .translate import router as translate_router
from ..core.config import (
    VERSION,
    debug_enabled,
    get_allowed_origins,
    get_stream_mode,
    translation_configured,
    validate_config,
)
from util.logging import logger

# Initialize the FastAPI application
app = FastAPI(
    title="BayBridge Classroom API",
    version=VERSION,
    description="Real-time parent/teacher updates with translation and a per-student timeline",
    docs_url="/docs" if debug_enabled() else None,
    redoc_url="/redoc" if debug_enabled() else None
)

# Add CORS middleware to allow browser clients
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(streams_router, prefix="/api/s2", tags=["streams"])
app.include_router(translate_router, prefix="/api", tags=["translate"])

_issues = validate_config()
for _issue in _issues:
    logger.warning(f"Configuration issue: {_issue}")
logger.log_operation("boot", "ready", {
    "stream_mode": get_stream_mode(),
    "translation_enabled": translation_configured(),
})


@app.get("/health", response_model=HealthResponse)
def health_check_endpoint():
    """Report which backends are live and any configuration issues."""
    issues = validate_config()
    return HealthResponse(
        status="healthy" if not issues else "degraded",
        version=VERSION,
        stream_mode=get_stream_mode(),
        translation_enabled=translation_configured(),
        config_issues=issues,
    )


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Handle all unhandled exceptions."""
    logger.error(f"Unhandled exception on {request.url.path}: {exc}")
    content = {"detail": "Internal server error"}
    if debug_enabled():
        content["debug"] = str(exc)
    return JSONResponse(
        status_code=500,
        content=content,
    )
