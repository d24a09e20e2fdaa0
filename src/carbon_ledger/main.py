"""Main FastAPI application for the Carbon Ledger service."""

import time

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy import text

from . import __version__
from .api import batches, ledger, tokens
from .api.middleware import (
    ProblemDetailsMiddleware,
    RequestSizeLimitMiddleware,
    register_exception_handlers,
)
from .config import get_config
from .db.database import get_db, init_db
from .utils.logging_config import get_logger, initialize_logging

config = get_config()

# Create FastAPI app
app = FastAPI(
    title=config.app.app_name,
    description=config.app.description,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Middleware added later wraps middleware added earlier, so Problem Details
# is added last to sit outside the size limit.
app.add_middleware(
    RequestSizeLimitMiddleware,
    single_request_limit=config.app.single_request_limit,
    batch_request_limit=config.app.batch_request_limit,
)
app.add_middleware(ProblemDetailsMiddleware)

allowed_origins = list(config.server.cors_origins)

# In development mode, allow additional localhost ports
if config.server.debug:
    allowed_origins.extend([
        "http://127.0.0.1:3000",
        "http://localhost:3000",
    ])

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept", "Origin"],
)

register_exception_handlers(app)

# Register API routers
app.include_router(tokens.router)
app.include_router(ledger.router)
app.include_router(batches.router)


@app.on_event("startup")
async def startup_event():
    """Initialize logging and make sure the ledger tables exist."""
    initialize_logging()
    init_db()
    get_logger('main').info(f"{config.app.app_name} {__version__} started")


@app.get("/", include_in_schema=False)
async def root():
    return RedirectResponse(url="/docs")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "carbon-ledger", "version": __version__}


@app.get("/ready")
def readiness_check():
    """Readiness check endpoint that validates database connectivity."""
    start_time = time.time()
    checks = {"database": False, "config": False}
    errors = []

    db_gen = get_db()
    try:
        db = next(db_gen)
        db.execute(text("SELECT 1"))
        checks["database"] = True
    except Exception as e:
        errors.append(f"Database check failed: {str(e)}")
    finally:
        db_gen.close()

    if get_config().ledger.admin_principal:
        checks["config"] = True
    else:
        errors.append("Config check failed: no administrative principal")

    response_time_ms = round((time.time() - start_time) * 1000, 2)
    all_ready = all(checks.values())

    response = {
        "status": "ready" if all_ready else "not_ready",
        "service": "carbon-ledger",
        "version": __version__,
        "checks": checks,
        "response_time_ms": response_time_ms,
    }

    if errors:
        response["errors"] = errors

    status_code = 200 if all_ready else 503
    return JSONResponse(content=response, status_code=status_code)
