#!/usr/bin/env python3
"""
Authentication routes blueprint.

Handles login and logout for local accounts. The session carries the
username; student routes resolve it back to a User on every request.
"""

import logging

from flask import Blueprint, current_app, jsonify, request, session

from training_server.services.user_service import authenticate_local_user

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__, url_prefix='/rest')


@auth_bp.route("/login", methods=["POST"])
def login():
    """Log in with a local account.

    Body: {
        "username": "student1",
        "password": "secret"
    }
    """
    data = request.get_json(silent=True) or {}
    username = (data.get("username") or "").strip()
    password = data.get("password") or ""

    if not username or not password:
        return jsonify({"ok": False, "error": "Username and password are required"}), 400

    user = authenticate_local_user(username, password)
    if not user:
        logger.info("Failed login for %s", username)
        return jsonify({"ok": False, "error": "Invalid username or password."}), 401

    if not current_app.secret_key:
        logger.error("CRITICAL: Flask app.secret_key is None at login!")
        return jsonify({"ok": False, "error": "Server configuration error"}), 500

    session["user"] = user.username
    logger.info("user logged in: %s", user.username)
    return jsonify({"ok": True, "user": user.to_dict()})


@auth_bp.route("/logout", methods=["POST"])
def logout():
    """Handle user logout."""
    username = session.pop("user", None)
    if username:
        logger.info("user logged out: %s", username)
    return jsonify({"ok": True})
