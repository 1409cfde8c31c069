"""
API router for health checks

Liveness, readiness and a detailed status report covering the database,
the dataset pipeline and the host process.
"""

from fastapi import APIRouter, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
import logging
from datetime import datetime
import os
import platform
import psutil

from app.config.settings import settings
from app.db.repository import DatasetRepository
from app.db.session import check_database_connection, engine, get_db_session
from app.models.models import DatasetStatus

router = APIRouter()
logger = logging.getLogger(__name__)

dataset_repo = DatasetRepository()


def _database_component() -> dict:
    connected = check_database_connection()
    return {
        "status": "ok" if connected else "error",
        "dialect": engine.dialect.name,
        "message": "Connected" if connected else "Failed to connect",
    }


def _datasets_component() -> dict:
    """Datasets per status; uploads left in processing never finished."""
    try:
        with get_db_session() as session:
            counts = dataset_repo.status_counts(session)
    except SQLAlchemyError as e:
        logger.warning(f"Could not count datasets: {str(e)}")
        return {"status": "unknown"}

    return {
        "status": "ok",
        "ready": counts.get(DatasetStatus.READY, 0),
        "processing": counts.get(DatasetStatus.PROCESSING, 0),
    }


def _process_info() -> dict:
    process = psutil.Process(os.getpid())
    return {
        "pid": process.pid,
        "rss_mb": round(process.memory_info().rss / (1024 * 1024), 1),
        "cpu_percent": psutil.cpu_percent(interval=None),
        "memory_percent": psutil.virtual_memory().percent,
        "python_version": platform.python_version(),
    }


@router.get(
    "/health",
    summary="Health report",
    description="Database, dataset pipeline and process status"
)
def health_check():
    """
    Report the health of each component

    Returns:
        Dict: Overall status ("ok" or "degraded") with per-component detail
    """
    database = _database_component()
    report = {
        "status": "ok" if database["status"] == "ok" else "degraded",
        "version": settings.APP_VERSION,
        "checked_at": datetime.utcnow().isoformat(),
        "components": {
            "database": database,
            "datasets": _datasets_component() if database["status"] == "ok" else {"status": "unknown"},
        },
        "process": _process_info(),
    }
    return report


@router.get(
    "/readiness",
    summary="Readiness probe",
    description="Fails with 503 until the database answers"
)
def readiness_check():
    if not check_database_connection():
        logger.error("Readiness check failed: database unavailable")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database connection failed"
        )
    return {"status": "ready", "dialect": engine.dialect.name}


@router.get(
    "/liveness",
    summary="Liveness probe",
    description="Answers as long as the process is serving requests"
)
async def liveness_check():
    return {"status": "alive"}
