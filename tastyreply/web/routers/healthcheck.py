"""Health endpoints: a cheap liveness probe and a detailed dependency check."""

from __future__ import annotations

import time
from datetime import datetime, timezone

import psutil
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from tastyreply.web.deps import Store

router = APIRouter()


@router.get("/health")
def health(store: Store) -> dict:
    """Liveness probe; always 200, reports whether the store answers."""
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": "connected" if store.ping() else "disconnected",
        "store": store.backend,
    }


@router.get("/healthz")
def healthz(request: Request, store: Store):
    """Comprehensive health check endpoint.

    Checks:
    - Review store connectivity
    - Disk space
    - Memory usage
    - Application uptime

    Returns:
        200 OK if all checks pass
        503 Service Unavailable if any check fails
    """
    status = "healthy"
    checks: dict = {}
    overall_healthy = True

    # 1. Store check
    start = time.time()
    if store.ping():
        checks["store"] = {
            "status": "ok",
            "backend": store.backend,
            "latency_ms": round((time.time() - start) * 1000, 2),
        }
    else:
        checks["store"] = {"status": "error", "backend": store.backend}
        overall_healthy = False
        status = "unhealthy"

    # 2. Disk space check
    try:
        disk = psutil.disk_usage("/")
        checks["disk"] = {
            "status": "warning" if disk.percent > 90 else "ok",
            "free_gb": round(disk.free / (1024**3), 2),
            "used_percent": disk.percent,
        }
        if disk.percent > 90:
            status = "degraded" if status == "healthy" else status
    except OSError as e:
        checks["disk"] = {"status": "error", "error": str(e)}
        overall_healthy = False
        status = "unhealthy"

    # 3. Memory check
    mem = psutil.virtual_memory()
    checks["memory"] = {
        "status": "warning" if mem.percent > 90 else "ok",
        "available_mb": round(mem.available / (1024**2), 2),
        "used_percent": mem.percent,
    }
    if mem.percent > 90:
        status = "degraded" if status == "healthy" else status

    # 4. Uptime
    uptime_seconds = time.time() - request.app.state.started_at
    checks["uptime"] = {
        "status": "ok",
        "uptime_seconds": round(uptime_seconds, 2),
        "uptime_human": _format_uptime(uptime_seconds),
    }
    checks["timestamp"] = datetime.now(timezone.utc).isoformat()

    response = {"status": status, "healthy": overall_healthy, "checks": checks}
    if not overall_healthy:
        return JSONResponse(status_code=503, content=response)
    return response


def _format_uptime(seconds: float) -> str:
    """Format uptime in human-readable format.

    Examples:
        >>> _format_uptime(95400)
        '1d 2h 30m'

    """
    days = int(seconds // 86400)
    hours = int((seconds % 86400) // 3600)
    minutes = int((seconds % 3600) // 60)

    parts = []
    if days > 0:
        parts.append(f"{days}d")
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0 or not parts:
        parts.append(f"{minutes}m")

    return " ".join(parts)
