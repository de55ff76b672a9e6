#!/usr/bin/env python3
"""
Authentication and authorization decorators.
"""

from functools import wraps

from flask import jsonify, session


def login_required(f):
    """Decorator that ensures the user is logged in."""
    @wraps(f)
    def wrapper(*args, **kwargs):
        if not session.get("user"):
            return jsonify({"ok": False, "error": "Not authenticated"}), 401
        return f(*args, **kwargs)
    return wrapper


def admin_required(f):
    """Decorator that ensures the user is logged in and is an admin."""
    @wraps(f)
    @login_required
    def wrapper(*args, **kwargs):
        from training_server.utils.auth_helpers import get_current_user
        user = get_current_user()
        if not user or not user.is_admin:
            return jsonify({"ok": False, "error": "Admin privileges required"}), 403
        return f(*args, **kwargs)
    return wrapper
