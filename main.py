"""
Hospital Management API
Patient/doctor/admin accounts with cookie-based sessions
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter
from slowapi.util import get_remote_address
import uvicorn
from contextlib import asynccontextmanager
import logging
from datetime import datetime, timezone

# Import our modules
from app import config
from app.database import Base, get_engine
from app.models import activity_log, user  # noqa: F401  (register tables on Base)
from app.routers import users
from app.utils.error_handler import register_exception_handlers

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Rate limiting
limiter = Limiter(key_func=get_remote_address, enabled=config.RATE_LIMIT_ENABLED)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management"""
    # Startup
    logger.info("Starting Hospital Management API...")
    Base.metadata.create_all(bind=get_engine())
    logger.info("Database tables created/verified")

    yield

    # Shutdown
    logger.info("Shutting down Hospital Management API...")

# Create FastAPI app
app = FastAPI(
    title="Hospital Management API",
    description="Registration, login and role-gated sessions for patients, doctors and admins",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Add rate limiting
app.state.limiter = limiter

# All failures leave as {"success": false, "message": ...}; must precede CORS
register_exception_handlers(app)

# Add CORS middleware; credentials require explicit origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin for origin in (config.FRONTEND_URL, config.DASHBOARD_URL) if origin],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)

# Include routers
app.include_router(users.router, prefix="/api/v1/user", tags=["users"])

@app.get("/")
@limiter.limit("10/minute")
async def root(request: Request):
    """Root endpoint with API information - publicly accessible"""
    return {
        "message": "Hospital Management API",
        "version": "1.0.0",
        "docs": "/docs",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }

@app.get("/health")
@limiter.limit("30/minute")
async def health_check(request: Request):
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
