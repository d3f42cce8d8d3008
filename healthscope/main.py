"""
HealthScope FastAPI Backend Application

Main application entry point for the condition knowledge API.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from datetime import datetime

from healthscope.core.config import settings
from healthscope.core.dependencies import get_abstract_cache, get_conditions_service
from healthscope.core.exceptions import ValidationError
from healthscope.core.logging import setup_logging
from healthscope.api import router
from healthscope.schemas.common import ErrorResponse, HealthCheck

logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="Aggregates Wikidata, DBpedia and WikiDoc into one condition record",
    version=settings.app_version,
    debug=settings.debug,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)


@app.middleware("http")
async def disable_http_caching(request: Request, call_next):
    """Condition data is assembled live; clients must not reuse responses."""
    response = await call_next(request)
    response.headers["Cache-Control"] = "no-store"
    return response


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    body = ErrorResponse(**exc.to_dict(), status_code=400)
    return JSONResponse(status_code=400, content=body.model_dump())


# Include API routes
app.include_router(router, prefix="/api")


@app.get("/", tags=["root"])
async def root():
    """Root endpoint with API information."""
    return {
        "message": settings.app_name,
        "version": settings.app_version,
        "status": "running",
        "docs": "/docs",
        "api": "/api/conditions",
    }


@app.get("/health", response_model=HealthCheck, tags=["health"])
async def health_check():
    """Health check endpoint."""
    return HealthCheck(
        status="healthy", version=settings.app_version, timestamp=datetime.now()
    )


# Startup event
@app.on_event("startup")
async def startup_event():
    """Actions to perform on application startup."""
    setup_logging(settings.log_level, settings.log_file)
    logger.info(f"{settings.app_name} v{settings.app_version}")
    logger.info(f"Server running on http://{settings.host}:{settings.port}")
    logger.info(f"API Documentation: http://{settings.host}:{settings.port}/docs")


# Shutdown event
@app.on_event("shutdown")
async def shutdown_event():
    """Actions to perform on application shutdown."""
    if get_abstract_cache.cache_info().currsize:
        logger.info(f"Abstract cache stats: {get_abstract_cache().stats}")
    if get_conditions_service.cache_info().currsize:
        await get_conditions_service().aclose()
    logger.info("Shutting down HealthScope backend")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "healthscope.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
