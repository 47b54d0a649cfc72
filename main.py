"""
ClassMatch Backend API Server

FastAPI application for class eligibility matching in education centers.
Serves branch option availability, teacher mappings and auto-enrollment.
"""
import logging
import os
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from datetime import datetime
import time

from classmatch.api.routes import eligibility
from classmatch.database import dispose_engine
from classmatch.exceptions import ClassMatchError

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

APP_VERSION = "1.0.0"

# Comma-separated browser origins of the registration UI
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "*").split(",")
    if origin.strip()
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    # Startup
    logger.info("Starting ClassMatch API server...")

    yield

    # Shutdown
    logger.info("Shutting down ClassMatch API server...")
    await dispose_engine()
    logger.info("Database connections closed")


# Create FastAPI application
app = FastAPI(
    title="ClassMatch API",
    description="Class eligibility matching and auto-enrollment",
    version=APP_VERSION,
    lifespan=lifespan,
    debug=os.getenv("APP_DEBUG", "false").lower() in ("1", "true", "yes"),
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json"
)


# CORS middleware for the registration UI
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests with timing"""
    start_time = time.time()

    # Process request
    response = await call_next(request)

    # Calculate duration
    duration_ms = (time.time() - start_time) * 1000

    # Log request
    logger.info(
        f"{request.method} {request.url.path} - "
        f"Status: {response.status_code} - "
        f"Duration: {duration_ms:.2f}ms"
    )

    return response


# Application error handler
@app.exception_handler(ClassMatchError)
async def classmatch_exception_handler(request: Request, exc: ClassMatchError):
    """Render service errors with their own status and code"""
    logger.warning(f"{request.method} {request.url.path} failed: {exc}")

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all uncaught exceptions"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An internal server error occurred",
                "details": str(exc) if app.debug else None
            }
        }
    )


# Validation error handler
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors"""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Request validation failed",
                "details": jsonable_encoder(exc.errors())
            }
        }
    )


# Health check endpoint
@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint.

    Returns server status and version information.
    """
    return {
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat(),
        "version": APP_VERSION,
        "service": "classmatch-api"
    }


# Include routers
app.include_router(eligibility.router)


# Root endpoint
@app.get("/", tags=["Root"])
async def root():
    """API root endpoint"""
    return {
        "name": "ClassMatch API",
        "version": APP_VERSION,
        "description": "Class eligibility matching and auto-enrollment",
        "docs": "/api/docs",
        "health": "/health",
        "endpoints": {
            "options": f"{eligibility.router.prefix}/options",
            "teacher_mapping": f"{eligibility.router.prefix}/branches/{{branch_id}}/teacher-mapping",
            "auto_enroll": f"{eligibility.router.prefix}/auto-enroll",
            "auto_enroll_student": f"{eligibility.router.prefix}/students/{{student_id}}/auto-enroll",
        }
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
