"""
Main FastAPI application
Career Reach Hub learning API: courses, lessons, quizzes, progress and certificates
"""
from fastapi import FastAPI, Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
import time

from career_hub.config import settings
from career_hub.database import init_db
from career_hub.exceptions import CareerHubError
from career_hub.api import courses, lessons, quizzes, certificates
from career_hub.services.notification_service import notification_service
from career_hub.utils.rate_limiter import rate_limiter

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Courses, lessons, quizzes, progress tracking and certificates for Career Reach Hub",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Rate limiting middleware
@app.middleware("http")
async def rate_limit_middleware(request: Request, call_next):
    """Apply rate limiting to all requests"""

    # Health check and docs are never limited
    if request.url.path in ["/health", "/docs", "/redoc", "/openapi.json"]:
        return await call_next(request)

    try:
        await rate_limiter.check_rate_limit(request)
    except HTTPException as e:
        return JSONResponse(
            status_code=e.status_code,
            content=e.detail
        )

    response = await call_next(request)
    return response


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests with timing"""

    start_time = time.time()

    # Process request
    response = await call_next(request)

    # Calculate duration
    duration = time.time() - start_time

    logger.info(
        f"{request.method} {request.url.path} - "
        f"Status: {response.status_code} - "
        f"Duration: {duration:.3f}s"
    )

    return response


def _error_response(status_code: int, error: str, message) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": error,
            "message": message,
            "status_code": status_code
        }
    )


# Domain error handler
@app.exception_handler(CareerHubError)
async def domain_exception_handler(request: Request, exc: CareerHubError):
    """Not-found, precondition and access errors raised by the services"""
    return _error_response(exc.status_code, exc.error, exc.message)


# Validation error handler
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed identifiers and bodies are client errors (400)"""

    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())[1:]) or "request"
        problems.append(f"{location}: {error.get('msg')}")

    return _error_response(400, "validation_error", "; ".join(problems) or "Invalid request")


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors gracefully"""

    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "internal_server_error",
            "message": "An unexpected error occurred. Please try again later.",
            "status_code": 500,
            "detail": str(exc) if settings.DEBUG else None
        }
    )


# HTTP exception handler
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Format HTTP exceptions consistently"""

    response = _error_response(exc.status_code, "http_error", exc.detail)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


# Health check endpoint
@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring

    Returns service status and dependencies
    """
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "notifications": "running" if notification_service.is_running else "stopped",
        "timestamp": time.time()
    }


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "message": "Career Reach Hub API is running!",
        "version": settings.APP_VERSION,
        "endpoints": {
            "courses": "/api/courses",
            "lessons": "/api/lessons",
            "quizzes": "/api/quizzes",
            "certificates": "/api/certificates"
        },
        "docs": "/docs",
        "health": "/health"
    }


# Include routers
app.include_router(courses.router)
app.include_router(lessons.router)
app.include_router(quizzes.router)
app.include_router(certificates.router)


# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize database and services on startup"""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    # Initialize database
    try:
        init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {str(e)}")
        raise

    await notification_service.start()

    logger.info("Application startup complete")


# Shutdown event
@app.on_event("shutdown")
async def shutdown_event():
    """Flush pending notifications and stop the worker"""
    logger.info("Shutting down application")
    await notification_service.stop()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "career_hub.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
