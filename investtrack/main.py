import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from investtrack.config import settings
from investtrack.core.exceptions import (
    ConflictException,
    DuplicateKeyException,
    ForbiddenException,
    InvalidOperationException,
    NotFoundException,
    PayloadTooLargeException,
    UnauthorizedException,
    UnsupportedMediaTypeException,
    ValidationException,
    error_fields,
)
from investtrack.database import create_tables
from investtrack.routes import (
    auth_routes,
    coverage_routes,
    dashboard_routes,
    event_routes,
    file_routes,
    firm_routes,
    interaction_routes,
    member_routes,
    user_routes,
)

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting %s v%s", settings.APP_NAME, settings.APP_VERSION)
    if settings.CREATE_TABLES_ON_STARTUP:
        create_tables()
    yield
    logger.info("Shutting down %s", settings.APP_NAME)


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs" if settings.DEBUG else None,  # Disable in production
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)

# CORS middleware
cors_origins = settings.cors_origins_list
if cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def error_response(status_code: int, exc: Exception, headers: dict | None = None, **extra):
    """Uniform error body: {"success": false, "message": ...}"""
    content = {"success": False, "message": str(exc), **extra}
    if settings.DEBUG:
        content["stack"] = "".join(traceback.format_exception(exc))
    return JSONResponse(status_code=status_code, content=content, headers=headers)


# Exception handlers
@app.exception_handler(UnauthorizedException)
async def unauthorized_exception_handler(request: Request, exc: UnauthorizedException):
    return error_response(
        status.HTTP_401_UNAUTHORIZED, exc, headers={"WWW-Authenticate": "Bearer"}
    )


@app.exception_handler(ForbiddenException)
async def forbidden_exception_handler(request: Request, exc: ForbiddenException):
    return error_response(status.HTTP_403_FORBIDDEN, exc)


@app.exception_handler(NotFoundException)
async def not_found_exception_handler(request: Request, exc: NotFoundException):
    return error_response(status.HTTP_404_NOT_FOUND, exc)


@app.exception_handler(ValidationException)
async def validation_exception_handler(request: Request, exc: ValidationException):
    return error_response(status.HTTP_400_BAD_REQUEST, exc, fields=exc.fields)


@app.exception_handler(DuplicateKeyException)
async def duplicate_key_exception_handler(request: Request, exc: DuplicateKeyException):
    return error_response(status.HTTP_409_CONFLICT, exc, field=exc.field)


@app.exception_handler(ConflictException)
async def conflict_exception_handler(request: Request, exc: ConflictException):
    return error_response(status.HTTP_409_CONFLICT, exc)


@app.exception_handler(InvalidOperationException)
async def invalid_operation_exception_handler(request: Request, exc: InvalidOperationException):
    # Upload rejections are InvalidOperation subclasses with their own status
    if isinstance(exc, UnsupportedMediaTypeException):
        return error_response(415, exc)
    if isinstance(exc, PayloadTooLargeException):
        return error_response(413, exc)
    return error_response(status.HTTP_400_BAD_REQUEST, exc)


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    fields = error_fields(exc.errors())
    message = "; ".join(f"{item['field']}: {item['message']}" for item in fields)
    return error_response(
        422,
        ValueError(message or "Invalid request"),
        fields=fields,
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc)


# Health check endpoint
@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": settings.APP_VERSION}


# Root endpoint
@app.get("/")
async def root():
    return {
        "message": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs" if settings.DEBUG else "Documentation disabled in production",
    }


# Include routers
app.include_router(auth_routes.router, prefix="/api/auth", tags=["Auth"])
app.include_router(user_routes.router, prefix="/api/users", tags=["Users"])
app.include_router(firm_routes.router, prefix="/api/firms", tags=["Firms"])
app.include_router(member_routes.router, prefix="/api/members", tags=["Members"])
app.include_router(coverage_routes.router, prefix="/api/coverages", tags=["Coverages"])
app.include_router(interaction_routes.router, prefix="/api/interactions", tags=["Interactions"])
app.include_router(event_routes.router, prefix="/api/events", tags=["Events"])
app.include_router(file_routes.router, prefix="/api/files", tags=["Files"])
app.include_router(dashboard_routes.router, prefix="/api/dashboard", tags=["Dashboard"])
