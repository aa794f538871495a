# Overview: Flask API routes for catalog items; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify

from ..decorators import json_errors, require_login
from ..services import catalog_service

catalog_bp = Blueprint("catalog", __name__, url_prefix="/api/catalog")


@catalog_bp.get("/")
@json_errors("list catalog")
@require_login
def list_items_route():
    items = catalog_service.list_items(
        category=request.args.get("category"),
        search=request.args.get("q"),
    )
    return jsonify({"items": [i.to_dict() for i in items], "count": len(items)}), 200


@catalog_bp.get("/low-stock")
@json_errors("list low-stock items")
@require_login
def low_stock_route():
    threshold = request.args.get("threshold", type=int)
    items = catalog_service.low_stock_items(threshold)
    return jsonify({"items": [i.to_dict() for i in items], "count": len(items)}), 200


@catalog_bp.get("/<item_id>")
@json_errors("load catalog item")
@require_login
def get_item_route(item_id: str):
    return jsonify({"item": catalog_service.get_item(item_id).to_dict()}), 200


@catalog_bp.post("/")
@json_errors("create catalog item")
@require_login
def create_item_route():
    item = catalog_service.create_item(request.get_json() or {})
    return jsonify({"item": item.to_dict()}), 201


@catalog_bp.patch("/<item_id>")
@json_errors("update catalog item")
@require_login
def update_item_route(item_id: str):
    item = catalog_service.update_item(item_id, request.get_json() or {})
    return jsonify({"item": item.to_dict()}), 200


@catalog_bp.delete("/<item_id>")
@json_errors("delete catalog item")
@require_login
def delete_item_route(item_id: str):
    catalog_service.delete_item(item_id)
    return "", 204
