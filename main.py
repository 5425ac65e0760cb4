# type: ignore
# pyright: reportGeneralTypeIssues=false
# pyright: reportOptionalMemberAccess=false
"""
Stargate Duty Service
=====================
Tracks people and their astronaut duty-assignment history.

Duty lifecycle rules:
    * at most one open duty per person
    * a new duty closes the current one the day before it starts
    * a RETIRED duty sets the career end date (start - 1 day)

Port: 8080
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from stargate.controllers import duty_controller, person_controller, system_controller
from stargate.core.config import settings
from stargate.core.database import engine
from stargate.core.dependencies import get_duty_service, get_person_repo, get_person_service
from stargate.core.exceptions import StargateError
from stargate.core.logging import get_logger
from stargate.core.schema import init_schema
from stargate.middleware import MetricsMiddleware, RequestIDMiddleware, RequestLoggingMiddleware
from stargate.schemas import ErrorResponse

logger = get_logger(settings.SERVICE_NAME)


# ── Lifespan ──────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(application: FastAPI):
    """Create the schema and seed at startup; dispose the pool on shutdown."""
    try:
        init_schema(engine)
        if settings.SEED_DEFAULT_PEOPLE:
            get_person_service().seed_defaults(get_duty_service())
        logger.info("Database ready url_dialect=%s", engine.dialect.name)
    except Exception as exc:
        logger.error("Database initialisation FAILED — service will start but DB calls will fail: %s", exc)
    yield
    get_person_repo().dispose()
    logger.info("Database connection pool disposed — shutting down")


# ── FastAPI App ───────────────────────────────────────────────────────────
app = FastAPI(
    title="Stargate Duty Service",
    description="People and astronaut duty-assignment history with career timeline rules.",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
    responses={
        422: {"model": ErrorResponse, "description": "Validation error"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(RequestIDMiddleware)


# ── Exception handlers ────────────────────────────────────────────────────
@app.exception_handler(StargateError)
async def domain_exception_handler(request: Request, exc: StargateError):
    req_id = getattr(request.state, "request_id", None)
    if exc.status_code >= 500:
        logger.error("%s: %s", exc.kind, exc.message, extra={"request_id": req_id})
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.kind, "detail": exc.message, "request_id": req_id},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    req_id = getattr(request.state, "request_id", None)
    logger.exception("Unhandled exception", extra={"request_id": req_id})
    return JSONResponse(
        status_code=500,
        content={"error": "internal_server_error", "detail": str(exc), "request_id": req_id},
    )


# ── Routers ───────────────────────────────────────────────────────────────
app.include_router(system_controller.router)
app.include_router(person_controller.router)
app.include_router(duty_controller.router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.SERVICE_PORT, log_level="info")
