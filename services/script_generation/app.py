"""FastAPI app for presentation script generation."""

from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from services.script_generation.service import ScriptGenerationService
from shared.exceptions import ScriptGenerationError
from shared.models import (
    ErrorResponse,
    HealthResponse,
    InformalConversionRequest,
    ScriptGenerationRequest,
    ScriptGenerationResponse,
)
from shared.utils import setup_logging

logger = setup_logging("script-generation-api")

app = FastAPI(
    title="Script Generation Service",
    description="Generate spoken presentation scripts from slide content",
    version="1.0.0",
)

service = ScriptGenerationService()


def _error_response(exc: ScriptGenerationError) -> JSONResponse:
    body = ErrorResponse(
        error=exc.message,
        details=str(exc.__cause__) if exc.__cause__ else None,
        hint=exc.hint,
    )
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


@app.post("/generate-script", response_model=ScriptGenerationResponse)
async def generate_script(request: ScriptGenerationRequest) -> ScriptGenerationResponse | JSONResponse:
    """Generate one script per slide plus the full running script."""
    logger.info(
        "Generating %s/%s scripts for %d slides",
        request.style.value,
        request.length.value,
        len(request.slides),
    )
    try:
        return await service.generate_scripts(request)
    except ScriptGenerationError as exc:
        logger.error("Script generation failed: %s", exc.message)
        return _error_response(exc)


@app.post("/convert-informal", response_model=ScriptGenerationResponse)
async def convert_informal(request: InformalConversionRequest) -> ScriptGenerationResponse | JSONResponse:
    """Rewrite existing scripts to informal address."""
    try:
        return await service.convert_informal(request)
    except ScriptGenerationError as exc:
        logger.error("Informal conversion failed: %s", exc.message)
        return _error_response(exc)


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        service="script-generation",
    )
