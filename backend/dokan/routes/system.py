# backend/dokan/routes/system.py
"""
System health endpoint.

Reports local store reachability and the sync backlog so the counter UI
can show an offline badge and a pending-changes count.
"""

import time
from flask import Blueprint, jsonify, current_app

from ..context import get_context
from ..services import store_service, sync_queue
from ..validation import StoreUnavailable

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    start_time = time.time()
    try:
        store_service.ping()
        pending = sync_queue.count_pending()
    except StoreUnavailable:
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round((time.time() - start_time) * 1000, 2),
            "error": "Database error",
        }
    return {
        "status": "healthy",
        "latency_ms": round((time.time() - start_time) * 1000, 2),
        "details": {"pending_mutations": pending},
    }


@system_bp.get("/health")
def health():
    ctx = get_context()
    database = check_database_health()
    body = {
        "status": database["status"],
        "database": database,
        "online": ctx.connectivity.online,
        "remote_configured": ctx.remote is not None,
    }
    return jsonify(body), 200 if database["status"] == "healthy" else 503
