# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

"""
Authentication routes.

Public: register-admin (creates a shop), register-barber (joins a shop as
pending), login, shops (registration shop picker).
Authenticated: logout, me.
"""

from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth
from ..errors import attempt
from ..services import auth_service
from ..time_utils import to_utc_z
from .responses import outcome_response, error_response, items

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/register-admin")
def register_admin():
    payload = request.get_json(silent=True) or {}
    outcome = attempt(
        auth_service.register_admin,
        name=payload.get("name"),
        email=payload.get("email"),
        password=payload.get("password"),
        shop_name=payload.get("shop_name"),
        phone=payload.get("phone"),
    )
    return outcome_response(outcome, status=201)


@auth_bp.post("/register-barber")
def register_barber():
    payload = request.get_json(silent=True) or {}
    outcome = attempt(
        auth_service.register_barber,
        name=payload.get("name"),
        email=payload.get("email"),
        password=payload.get("password"),
        shop_id=payload.get("shop_id"),
        phone=payload.get("phone"),
    )
    return outcome_response(outcome, status=201)


@auth_bp.post("/login")
def login():
    """
    Authenticate with email + password.

    Returns the bearer token and the account, including its status so a
    pending barber can be shown "awaiting approval".
    """
    payload = request.get_json(silent=True) or {}
    outcome = attempt(auth_service.sign_in, payload.get("email"), payload.get("password"))
    if not outcome.ok:
        return error_response(outcome.error)

    session, token, user = outcome.value
    return jsonify({
        "token": token,
        "expires_at": to_utc_z(session.expires_at),
        "user": user.to_dict(),
    }), 200


@auth_bp.post("/logout")
@require_auth
def logout():
    auth_service.sign_out(g.token)
    return jsonify({"ok": True}), 200


@auth_bp.get("/me")
@require_auth
def me():
    return jsonify({"user": g.current_user.to_dict()}), 200


@auth_bp.get("/shops")
def shops():
    return jsonify(items(auth_service.list_shops())), 200
