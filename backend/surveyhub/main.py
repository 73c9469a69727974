import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from surveyhub import __version__
from surveyhub.core.config import settings
from surveyhub.core.exceptions import AlreadyClosedError, CatalogValidationError, DomainError, ErrorKind
from surveyhub.api import scales, surveys, publications, responses, reports

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.STATE_CONFLICT: 400,
    ErrorKind.VALIDATION: 422,
    ErrorKind.TRANSIENT: 500,
}


def init_database():
    """Create tables on startup."""
    from surveyhub.core.database import engine, Base
    import surveyhub.models  # noqa: F401  registers every table on Base

    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_database()
    yield


# Disable API docs in production
docs_url = "/docs" if settings.ENVIRONMENT != "production" else None
redoc_url = "/redoc" if settings.ENVIRONMENT != "production" else None

app = FastAPI(
    title=settings.APP_NAME,
    description="SurveyHub - survey publication, response collection and statistics API",
    version=__version__,
    lifespan=lifespan,
    docs_url=docs_url,
    redoc_url=redoc_url,
)


@app.exception_handler(DomainError)
async def domain_exception_handler(request: Request, exc: DomainError):
    status_code = ERROR_STATUS.get(exc.kind, 400)
    if isinstance(exc, AlreadyClosedError):
        status_code = 409
    if exc.kind == ErrorKind.TRANSIENT:
        logger.error(f"Transient store failure on {request.url.path}: {exc.message}")
    content = {"detail": exc.message, "code": exc.code}
    if isinstance(exc, CatalogValidationError):
        content["errors"] = exc.errors
    return JSONResponse(status_code=status_code, content=content)


# Global exception handler - always return JSON (never plain text)
@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal error"},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request, exc):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health_check():
    return {"status": "healthy", "service": "surveyhub-api", "version": __version__}


@app.get("/")
def root():
    return {"message": "SurveyHub API", "version": __version__, "docs": "/docs"}


# Include routers
app.include_router(scales.router)
app.include_router(surveys.router)
app.include_router(publications.router)
app.include_router(responses.router)
app.include_router(reports.router)
