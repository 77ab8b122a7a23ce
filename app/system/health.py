"""
Service health checks.

All functions in this module must be:
- Read-only
- Fast
- Safe to call in a request context

No shell commands. No subprocess. No network calls.
"""

from typing import Dict, Optional
import shutil
import time

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError


def disk_health(path: str = "/") -> Dict[str, float]:
    """
    Disk usage stats (GB) with the free percentage.
    """
    total, used, free = shutil.disk_usage(path)
    gb = 1024 ** 3
    return {
        "total_gb": round(total / gb, 2),
        "free_gb": round(free / gb, 2),
        "percent_free": round(free / total * 100, 1) if total else 0.0,
    }


def database_status(session) -> Dict[str, object]:
    """
    Round-trip a trivial query. Never raises.
    """
    try:
        session.execute(text("SELECT 1"))
        return {"ok": True}
    except SQLAlchemyError as e:
        session.rollback()
        return {"ok": False, "error": str(e.__class__.__name__)}


def uptime(start_time: float) -> Dict[str, float]:
    """
    Return uptime in seconds since start_time.
    """
    seconds = max(0.0, time.time() - start_time)
    return {
        "uptime_seconds": round(seconds, 1),
    }


def basic_health_snapshot(
    session,
    *,
    version: str,
    app_start_time: Optional[float] = None,
    data_path: str = "/",
) -> Dict[str, object]:
    """
    High-level health snapshot; ``status`` is "ok" only when the database answers.
    """
    snapshot: Dict[str, object] = {
        "version": version,
        "database": database_status(session),
        "disk": disk_health(data_path),
        "warnings": [],
    }

    if app_start_time is not None:
        snapshot["uptime"] = uptime(app_start_time)

    if snapshot["disk"].get("percent_free", 100) < 15:
        snapshot["warnings"].append("Low disk space")

    if not snapshot["warnings"]:
        snapshot.pop("warnings", None)

    snapshot["status"] = "ok" if snapshot["database"]["ok"] else "degraded"
    return snapshot
