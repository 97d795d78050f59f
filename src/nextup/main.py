import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .entities import ALL_ENTITIES
from .logging_config import configure_logging
from .routers import dashboard as dashboard_router
from .routers import entities as entities_router
from .routers import session as session_router
from .settings import get_settings

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "session", "description": "Log in and out under a display name."},
    {"name": "dashboard", "description": "Overview counts across every tracked entity."},
    *(
        {"name": spec.slug, "description": f"CRUD operations for {spec.slug} of the logged-in user."}
        for spec in ALL_ENTITIES
    ),
]

_settings = get_settings()
configure_logging(_settings.log_level)

app = FastAPI(
    title="NextUp",
    description=(
        "Personal and academic tracker: assignments, projects, placements, certificates, "
        "courses, important items and events, stored per user in a key/value store."
    ),
    version="0.1.0",
    openapi_tags=openapi_tags,
)

# Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
allow_all = (_settings.cors_allow_origins == ["*"]) or (len(_settings.cors_allow_origins) == 0)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all else _settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Return a consistent JSON structure for request validation errors.

    Response format:
        {
            "error": "ValidationError",
            "detail": [... pydantic/fastapi error details ...],
            "message": "Request validation failed"
        }
    """
    logger.debug("Validation failed for %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(
        status_code=422,
        content={
            "error": "ValidationError",
            "message": "Request validation failed",
            "detail": jsonable_encoder(exc.errors()),
        },
    )


# PUBLIC_INTERFACE
@app.get("/", summary="Health Check", tags=["health"])
def health_check():
    """
    Health check endpoint.

    Returns:
        A JSON object indicating service health.
    """
    return {"message": "Healthy", "backend": _settings.persistence_backend}


app.include_router(session_router.router)
app.include_router(dashboard_router.router)
for _router in entities_router.routers:
    app.include_router(_router)
