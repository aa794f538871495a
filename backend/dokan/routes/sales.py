# Overview: Flask API routes for checkout and sale lookup; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify

from ..decorators import json_errors, require_login
from ..services import checkout_service, store_service

sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.post("/checkout")
@json_errors("check out cart")
@require_login
def checkout_route():
    """
    Finalize a cart.

    Body: {"lines": [{"item_id", "quantity", "price_cents"?}],
           "customer_name"?, "customer_phone"?, "paid_cents"?}
    """
    data = request.get_json() or {}
    sale = checkout_service.checkout(
        data.get("lines") or [],
        customer_name=data.get("customer_name"),
        customer_phone=data.get("customer_phone"),
        paid_cents=data.get("paid_cents"),
        payment_method=data.get("payment_method") or "cash",
    )
    return jsonify({"sale": sale.to_dict()}), 201


@sales_bp.post("/preview")
@json_errors("price cart")
@require_login
def preview_route():
    data = request.get_json() or {}
    totals = checkout_service.preview(data.get("lines") or [], paid_cents=data.get("paid_cents"))
    return jsonify({"totals": totals.to_dict()}), 200


@sales_bp.get("/")
@json_errors("list sales")
@require_login
def list_sales_route():
    sales = store_service.list_ordered("sales", "date", ascending=False, limit=request.args.get("limit", type=int))
    return jsonify({"items": [s.to_dict() for s in sales], "count": len(sales)}), 200


@sales_bp.get("/<sale_id>")
@json_errors("load sale")
@require_login
def get_sale_route(sale_id: str):
    return jsonify({"sale": store_service.get("sales", sale_id).to_dict()}), 200
