"""
Deck Narrator Backend - Unified Application Entry Point
Mounts the deck and script services under a single FastAPI application
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from services.deck import app as deck_module
from services.script_generation import app as script_generation_module
from shared.utils import config, setup_logging

logger = setup_logging("deck-narrator-backend")

# Get routers from the service apps
deck_app = deck_module.app
script_generation_app = script_generation_module.app

app = FastAPI(
    title="Deck Narrator Backend API",
    description="""
    Unified API for slide text extraction, script generation and writing
    speaker notes and narration audio back into PowerPoint decks.

    Service routes are organized by tag.
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {
            "name": "Health",
            "description": "Service health and status endpoints",
        },
        {
            "name": "Deck",
            "description": "Slide extraction and notes/audio write-back - mounted at /api/v1/deck",
        },
        {
            "name": "Scripts",
            "description": "Presentation script generation - mounted at /api/v1/scripts",
        },
    ],
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.get("allowed_origins", ["*"]),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes to exclude (internal FastAPI docs routes)
EXCLUDED_PATHS = {"/openapi.json", "/docs", "/docs/oauth2-redirect", "/redoc"}


def include_service_routes(service_app: FastAPI, prefix: str, tag: str, name_prefix: str) -> None:
    """Copy a service app's routes onto the gateway under ``prefix``."""
    for route in service_app.routes:
        if not (hasattr(route, "path") and hasattr(route, "endpoint")):
            continue
        # Skip internal documentation routes
        if route.path in EXCLUDED_PATHS:
            continue
        route_kwargs = {
            "path": f"{prefix}{route.path}",
            "endpoint": route.endpoint,
            "methods": route.methods,
            "tags": [tag],
        }
        if hasattr(route, "name"):
            route_kwargs["name"] = f"{name_prefix}_{route.name}"
        if hasattr(route, "response_model"):
            route_kwargs["response_model"] = route.response_model
        app.add_api_route(**route_kwargs)


include_service_routes(deck_app, "/api/v1/deck", "Deck", "deck")
include_service_routes(script_generation_app, "/api/v1/scripts", "Scripts", "scripts")


@app.get("/", tags=["Health"])
async def root():
    """Describe the mounted services"""
    return {
        "service": "Deck Narrator Backend API",
        "version": "1.0.0",
        "services": {
            "deck": {
                "base_url": "/api/v1/deck",
                "health": "/api/v1/deck/health",
            },
            "scripts": {
                "base_url": "/api/v1/scripts",
                "health": "/api/v1/scripts/health",
            },
        },
        "documentation": {
            "swagger_ui": "/docs",
            "redoc": "/redoc",
            "openapi_json": "/openapi.json",
        },
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for all services"""
    return {
        "status": "healthy",
        "services": {
            "api_gateway": "operational",
            "deck": "operational",
            "scripts": "operational",
        },
    }


if __name__ == "__main__":
    import uvicorn

    logger.info("Starting Deck Narrator Backend on http://0.0.0.0:8000")
    uvicorn.run("app:app", host="0.0.0.0", port=8000, reload=bool(config.get("debug")), log_level="info")
