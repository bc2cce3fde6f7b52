"""Health check endpoints for LogiFlow.

Provides Kubernetes-compatible health probes:
- /health: Basic health check
- /health/live: Liveness probe (is the app running?)
- /health/ready: Readiness probe (database and Redis reachable?)
"""

from typing import Dict, Any
from datetime import datetime

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from sqlalchemy import text
import redis

from logiflow import __version__
from logiflow.api.deps import get_db
from logiflow.core.config import get_settings

router = APIRouter(tags=["health"])


def check_database(db: Session) -> Dict[str, Any]:
    """Check database connectivity."""
    try:
        db.execute(text("SELECT 1")).fetchone()
        return {
            "status": "healthy",
            "dialect": db.get_bind().dialect.name,
        }
    except Exception as e:
        return {
            "status": "unhealthy",
            "error": str(e),
        }


def check_redis() -> Dict[str, Any]:
    """Check Redis connectivity."""
    try:
        r = redis.from_url(
            get_settings().redis_url,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        r.ping()
        info = r.info("server")
        r.close()

        return {
            "status": "healthy",
            "version": info.get("redis_version", "unknown"),
        }
    except Exception as e:
        return {
            "status": "unhealthy",
            "error": str(e),
        }


@router.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "version": __version__,
        "timestamp": datetime.utcnow().isoformat(),
    }


@router.get("/health/live")
async def liveness_probe():
    """
    Kubernetes liveness probe.

    This check should be fast and not depend on external services.
    """
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "status": "alive",
            "timestamp": datetime.utcnow().isoformat(),
        },
    )


@router.get("/health/ready")
def readiness_probe(db: Session = Depends(get_db)):
    """
    Kubernetes readiness probe.

    Returns 503 when the database or Redis is unreachable.
    """
    checks = {
        "database": check_database(db),
        "redis": check_redis(),
    }

    unhealthy = [name for name, check in checks.items() if check["status"] == "unhealthy"]

    if unhealthy:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "checks": checks,
                "failed": unhealthy,
                "timestamp": datetime.utcnow().isoformat(),
            },
        )

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "status": "ready",
            "checks": checks,
            "timestamp": datetime.utcnow().isoformat(),
        },
    )
