"""
Revenue Insights API - Main Application

This module serves as the entry point for the Revenue Insights API,
configuring the FastAPI application with all routes, middleware,
and exception handlers.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
from datetime import datetime

# Import API routers
from app.api.routers import dashboard, datasets, health, predictions

from app.api.middlewares.logging_middleware import RequestLoggingMiddleware
from app.api.middlewares.error_handler import add_exception_handlers
from app.config.settings import settings
from app.db.session import engine, init_db

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("api")

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="API for uploading sales CSVs and exploring revenue dashboards and forecasts",
    version=settings.APP_VERSION,
    docs_url=f"{settings.API_PREFIX}/docs",
    redoc_url=f"{settings.API_PREFIX}/redoc",
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add request logging middleware
app.add_middleware(RequestLoggingMiddleware)

# Add exception handlers
add_exception_handlers(app)

# Include routers
prefix = settings.API_PREFIX
app.include_router(health.router, prefix=prefix, tags=["Health"])
app.include_router(datasets.router, prefix=f"{prefix}/datasets", tags=["Datasets"])
app.include_router(dashboard.router, prefix=f"{prefix}/dashboard", tags=["Dashboard"])
app.include_router(predictions.router, prefix=f"{prefix}/predictions", tags=["Predictions"])

# Create tables
init_db()
logger.info(f"{settings.APP_NAME} started with {engine.dialect.name} database")


@app.get(prefix, tags=["Root"])
async def root():
    """API root endpoint"""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": datetime.utcnow().isoformat(),
        "database_type": engine.dialect.name,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
