# Overview: Flask API routes for expenses.

from flask import Blueprint, request, jsonify

from ..decorators import json_errors, require_login
from ..services import expense_service

expenses_bp = Blueprint("expenses", __name__, url_prefix="/api/expenses")


@expenses_bp.get("/")
@json_errors("list expenses")
@require_login
def list_expenses_route():
    expenses = expense_service.list_expenses()
    return jsonify({
        "items": [e.to_dict() for e in expenses],
        "count": len(expenses),
        "total_cents": sum(e.amount_cents for e in expenses),
    }), 200


@expenses_bp.post("/")
@json_errors("add expense")
@require_login
def add_expense_route():
    expense = expense_service.add_expense(request.get_json() or {})
    return jsonify({"expense": expense.to_dict()}), 201


@expenses_bp.delete("/<expense_id>")
@json_errors("delete expense")
@require_login
def delete_expense_route(expense_id: str):
    expense_service.delete_expense(expense_id)
    return "", 204
