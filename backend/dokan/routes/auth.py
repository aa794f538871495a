# Overview: Flask API routes for the local session and shop profile.

from flask import Blueprint, request, jsonify, g

from ..decorators import json_errors, require_login
from ..services import auth_service, session_service

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/register")
@json_errors("register user")
def register_route():
    """Create the shop account and log it in."""
    data = request.get_json() or {}
    user = auth_service.register_user(
        store_name=data.get("store_name"),
        username=data.get("username"),
        pin=data.get("pin"),
        address=data.get("address"),
        phone=data.get("phone"),
    )
    return jsonify({"user": user.to_dict()}), 201


@auth_bp.post("/login")
@json_errors("login user")
def login_route():
    data = request.get_json() or {}
    username = data.get("username")
    pin = auth_service.normalize_pin(data.get("pin"))
    if not username or not pin:
        return jsonify({"error": "username and pin required"}), 400

    if not session_service.login(username, pin):
        return jsonify({"error": "Invalid credentials"}), 401

    return jsonify({"user": session_service.current_user().to_dict(), "message": "Login successful"}), 200


@auth_bp.post("/logout")
def logout_route():
    session_service.logout()
    return jsonify({"message": "Logged out"}), 200


@auth_bp.get("/me")
@json_errors("load current user")
def me_route():
    user = session_service.current_user()
    if user is None:
        return jsonify({"user": None}), 200
    return jsonify({"user": user.to_dict()}), 200


@auth_bp.patch("/profile")
@json_errors("update profile")
@require_login
def update_profile_route():
    data = request.get_json() or {}
    user = auth_service.update_profile(data)
    g.current_user = user
    return jsonify({"user": user.to_dict(), "message": "Profile updated"}), 200
