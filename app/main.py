from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from dotenv import load_dotenv
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db, init_db
from app.middleware import RequestTimeoutMiddleware, SecurityHeadersMiddleware
from app.routes import movies, ratings
from app.schemas.validation import ValidationException, ValidationFailureResponse
import os
import logging

# Load environment variables
load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


# ============================================
# Application Lifespan Management
# ============================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: create the schema unless DB_INIT_ON_STARTUP=false
    """
    logger.info("=" * 60)
    logger.info("🚀 Movies API Starting...")
    logger.info(f"   Environment: {os.getenv('ENVIRONMENT', 'development')}")
    logger.info("=" * 60)

    if os.getenv("DB_INIT_ON_STARTUP", "true").lower() == "true":
        await init_db()

    yield

    logger.info("🛑 Movies API Shutting Down...")


app = FastAPI(
    title="Movies API",
    description="Movie catalog with genres and per-user ratings",
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# ============================================
# Middleware
# ============================================

allowed_origins = [
    "http://localhost:3000",
    "http://localhost:5173",
]
if production_url := os.getenv("FRONTEND_URL"):
    allowed_origins.append(production_url)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["Location"],
)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    RequestTimeoutMiddleware,
    timeout=float(os.getenv("REQUEST_TIMEOUT_SECONDS", "30")),
)

# Trusted Hosts - Production only
if os.getenv("ENVIRONMENT") == "production":
    if trusted_hosts := os.getenv("TRUSTED_HOSTS", "").split(","):
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=trusted_hosts)


# ============================================
# Exception Handlers
# ============================================

@app.exception_handler(ValidationException)
async def validation_exception_handler(request: Request, exc: ValidationException):
    """Field-level business rule failures become a 400 with every failure listed"""
    body = ValidationFailureResponse(errors=exc.errors)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body.model_dump())


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    """A constraint the validators could not see, e.g. two creates racing for one slug"""
    logger.warning(f"Constraint violation on {request.method} {request.url.path}: {exc.orig}")
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "The change conflicts with existing data"}
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"}
    )


# ============================================
# Routes
# ============================================

@app.get("/", tags=["Health"])
async def root():
    """Basic health check"""
    return {
        "message": "Movies API",
        "version": API_VERSION,
        "status": "healthy",
        "docs": "/docs"
    }


@app.get("/health", tags=["Health"])
async def health_check(db: AsyncSession = Depends(get_db)):
    """Database health check for monitoring"""
    timestamp = datetime.now(timezone.utc).isoformat()
    try:
        await db.execute(text("SELECT 1"))
    except Exception:
        logger.error("Database health check failed", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "database": "unreachable", "timestamp": timestamp}
        )

    return {
        "status": "healthy",
        "api_version": API_VERSION,
        "database": "ok",
        "timestamp": timestamp,
    }


app.include_router(movies.router)
app.include_router(ratings.router)
app.include_router(ratings.user_ratings_router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        log_level="info"
    )
