# Overview: Flask API routes for dashboard figures, due list and monthly summary.

from flask import Blueprint, request, jsonify

from ..decorators import json_errors, require_login
from ..services import reporting_service
from ..time_utils import utcnow

reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/dashboard")
@json_errors("build dashboard")
@require_login
def dashboard_route():
    return jsonify(reporting_service.dashboard_summary()), 200


@reports_bp.get("/dues")
@json_errors("list dues")
@require_login
def dues_route():
    return jsonify(reporting_service.due_sales()), 200


@reports_bp.get("/monthly")
@json_errors("build monthly report")
@require_login
def monthly_route():
    now = utcnow()
    year = request.args.get("year", default=now.year, type=int)
    month = request.args.get("month", default=now.month, type=int)
    return jsonify(reporting_service.monthly_summary(year, month)), 200
