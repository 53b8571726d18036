import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import models  # noqa: F401 - register models with Base
from .config import ALLOWED_ORIGINS
from .database import Base, engine
from .domain.analytics.router import router as analytics_router
from .domain.catalog.router import router as services_router
from .domain.clients.router import router as clients_router
from .domain.inventory.router import router as inventory_router
from .domain.ledger.router import router as ledger_router
from .domain.push.router import router as push_router
from .domain.records.router import completions_router
from .domain.records.router import router as records_router
from .domain.reports.router import router as reports_router
from .domain.users.router import router as users_router
from .routes.auth import router as auth_router
from .shared.errors import DomainError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")
            raise

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="Bookkeeper API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(DomainError)
async def domain_exception_handler(request: Request, exc: DomainError):
    """Map domain errors raised by services to their HTTP status"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} - {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_response())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Convert 422 validation errors from HTTPBearer to 401 authentication errors
    when the issue is with the Authorization header
    """
    for error in exc.errors():
        if error.get("loc") and "authorization" in str(error.get("loc")).lower():
            logger.warning(
                f"Authentication failed for {request.url.path}: Missing or invalid Authorization header"
            )
            return JSONResponse(
                status_code=401,
                content={
                    "detail": "Not authenticated. Please provide a valid Bearer token in the Authorization header."
                },
            )

    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": jsonable_errors(exc)})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"❌ {request.method} {request.url.path} - Unhandled error: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def jsonable_errors(exc: RequestValidationError) -> list:
    # ValueError contexts from field validators are not JSON serializable
    return [{k: v for k, v in error.items() if k != "ctx"} for error in exc.errors()]


# CORS Configuration
logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Routes
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(clients_router)
app.include_router(services_router)
app.include_router(records_router)
app.include_router(completions_router)
app.include_router(ledger_router)
app.include_router(analytics_router)
app.include_router(reports_router)
app.include_router(inventory_router)
app.include_router(push_router)


@app.get("/")
def root():
    return {"message": "Bookkeeper API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}
