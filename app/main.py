# app/main.py
import uvicorn
import os
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.core.config import settings
from app.core.database import engine, Base, check_database
from app.core.errors import LedgerError
from app.api.v1.api import api_router
from app import models  # noqa: F401  (registers every table on Base.metadata)

logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger(__name__)

# Create all tables on startup (Alembic owns the schema in production)
async def create_db_and_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup event to create database tables"""
    if settings.CREATE_TABLES_ON_STARTUP:
        try:
            await create_db_and_tables()
            logger.info("✅ Database tables created successfully")
        except Exception as e:
            logger.error(f"❌ Startup error: {str(e)}")
    logger.info(f"✅ Frontend URL: {settings.FRONTEND_URL}")
    if not settings.IDENTITY_API_URL:
        logger.warning("⚠️ IDENTITY_API_URL not configured - new users are created from token claims only")
    yield
    await engine.dispose()

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Savings Goals", "description": "Savings goals, deposits, withdrawals and history"},
        {"name": "Personal Savings", "description": "Per-user savings balance"},
        {"name": "User Management", "description": "User profile operations"},
    ],
)

# CORS Configuration
origins = [
    settings.FRONTEND_URL,
    "http://localhost:3000",  # Local development
    "http://localhost:3001",  # Backup local port
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ------------------------------------------------------------
# ERROR HANDLERS
# ------------------------------------------------------------
@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError):
    """Domain and store errors carry their own status code"""
    if exc.http_status >= 500:
        logger.error(
            f"{exc.code} on {request.method} {request.url.path}: {exc.message}",
            exc_info=exc.__cause__ is not None,
        )
    else:
        logger.info(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")

    headers = {"WWW-Authenticate": "Bearer"} if exc.http_status == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(status_code=exc.http_status, content=exc.to_response(), headers=headers)

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Missing or malformed fields are a 400, with the offending fields listed"""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": "Invalid request data",
            "code": "VALIDATION_ERROR",
            "errors": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors()
            ],
        },
    )

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )

# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Anything unexpected becomes a 500 without leaking internals"""
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )

# ------------------------------------------------------------
# ROOT ENDPOINT
# ------------------------------------------------------------
@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information"""
    return {
        "message": f"{settings.APP_NAME} is running!",
        "version": settings.VERSION
    }

# ------------------------------------------------------------
# HEALTH CHECK ENDPOINT
# ------------------------------------------------------------
@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    database_ok = await check_database()
    body = {
        "status": "healthy" if database_ok else "unhealthy",
        "database": "ok" if database_ok else "unreachable",
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
    }
    return JSONResponse(status_code=200 if database_ok else 503, content=body)

# ------------------------------------------------------------
# BUSINESS LOGIC ROUTES
# ------------------------------------------------------------
app.include_router(api_router, prefix="/api/v1")

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("app.main:app", host="0.0.0.0", port=port, reload=False)
