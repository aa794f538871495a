# Overview: Flask API routes for the sync queue and the connectivity signal.

from flask import Blueprint, request, jsonify, current_app

from ..context import get_context
from ..decorators import json_errors
from ..services import sync_queue

sync_bp = Blueprint("sync", __name__, url_prefix="/api/sync")


@sync_bp.get("/status")
@json_errors("read sync status")
def status_route():
    ctx = get_context()
    body = sync_queue.status()
    body["online"] = ctx.connectivity.online
    body["draining"] = ctx.reconciler.running
    return jsonify(body), 200


@sync_bp.get("/queue")
@json_errors("list sync queue")
def queue_route():
    limit = request.args.get("limit", type=int)
    items = sync_queue.list_pending(limit)
    return jsonify({
        "items": [
            {
                "id": m.sequence_id,
                "collection": m.collection,
                "operation": m.operation,
                "idempotency_key": m.idempotency_key,
                "attempts": m.attempts,
            }
            for m in items
        ],
        "count": len(items),
    }), 200


@sync_bp.put("/connectivity")
@json_errors("update connectivity")
def connectivity_route():
    """
    Connectivity notifier. {"online": true} after being offline starts a
    background drain of the queue.
    """
    data = request.get_json() or {}
    if not isinstance(data.get("online"), bool):
        return jsonify({"error": "online (boolean) required"}), 400

    became_online = get_context().connectivity.set_online(data["online"])
    drain_started = became_online and current_app.config.get("SYNC_DRAIN_ON_RECONNECT", True)
    return jsonify({"online": data["online"], "drain_started": drain_started}), 200


@sync_bp.post("/drain")
@json_errors("drain sync queue")
def drain_route():
    """Manual sweep, run in the request thread."""
    result = get_context().reconciler.drain()
    return jsonify(result.to_dict()), 200
