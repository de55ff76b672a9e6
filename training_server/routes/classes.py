#!/usr/bin/env python3
"""
Class administration API routes blueprint.

Handles class CRUD and the add/remove operations on a student's apps.
Writes are version checked; a stale write answers 409.
"""

import logging

from flask import Blueprint, current_app, jsonify, request

from training_server.services.class_service import ClassNotFoundError
from training_server.utils.decorators import admin_required
from training_server.utils.locking import OptimisticLockError

logger = logging.getLogger(__name__)

api_classes_bp = Blueprint('api_classes', __name__, url_prefix='/rest/classes')


def _class_repository():
    return current_app.extensions['class_repository']


@api_classes_bp.errorhandler(ClassNotFoundError)
def handle_class_not_found(error):
    return jsonify({"ok": False, "error": str(error)}), 404


@api_classes_bp.errorhandler(OptimisticLockError)
def handle_version_conflict(error):
    return jsonify({"ok": False, "error": str(error)}), 409


@api_classes_bp.errorhandler(ValueError)
def handle_bad_payload(error):
    return jsonify({"ok": False, "error": str(error)}), 400


# ---------------------------------------------------------------------------
# Class CRUD
# ---------------------------------------------------------------------------

@api_classes_bp.route("", methods=["GET"])
@admin_required
def list_classes():
    classes = _class_repository().get_classes()
    return jsonify({"ok": True, "classes": [c.to_dict() for c in classes]})


@api_classes_bp.route("", methods=["POST"])
@admin_required
def create_class():
    """Create a class.

    Body: {
        "name": "Networking 101 - May",
        "courseId": 1,
        "startDate": "2024-05-01T08:00:00Z",
        "endDate": "2024-05-03T17:00:00Z",
        "students": [{
            "userId": 7,
            "provisioningCredentials": {"username": "...", "password": "..."},
            "blueprintPermissions": [{"bpId": "...", "startVms": true, "stopVms": true, "console": false}],
            "apps": [{"appId": "..."}]
        }]
    }
    """
    data = request.get_json(silent=True) or {}
    training_class = _class_repository().create_class(data)
    return jsonify({"ok": True, "class": training_class.to_dict()}), 201


@api_classes_bp.route("/<int:class_id>", methods=["GET"])
@admin_required
def get_class(class_id):
    training_class = _class_repository().get_class(class_id)
    if not training_class:
        raise ClassNotFoundError(f"Class {class_id} not found")
    return jsonify({"ok": True, "class": training_class.to_dict()})


@api_classes_bp.route("/<int:class_id>", methods=["PUT"])
@admin_required
def update_class(class_id):
    """Replace a class. Send the "version" you read to reject stale edits."""
    data = request.get_json(silent=True) or {}
    expected_version = data.get("version")
    if expected_version is not None:
        try:
            expected_version = int(expected_version)
        except (TypeError, ValueError):
            return jsonify({"ok": False, "error": "version must be an integer"}), 400
    training_class = _class_repository().update_class(class_id, data, expected_version=expected_version)
    return jsonify({"ok": True, "class": training_class.to_dict()})


@api_classes_bp.route("/<int:class_id>", methods=["DELETE"])
@admin_required
def delete_class(class_id):
    _class_repository().delete_class(class_id)
    return jsonify({"ok": True})


# ---------------------------------------------------------------------------
# Student apps
# ---------------------------------------------------------------------------

@api_classes_bp.route("/<int:class_id>/students/<int:user_id>/apps", methods=["POST"])
@admin_required
def add_student_app(class_id, user_id):
    """Body: {"appId": "..."}"""
    data = request.get_json(silent=True) or {}
    app_id = data.get("appId")
    if not app_id:
        return jsonify({"ok": False, "error": "appId is required"}), 400

    training_class = _class_repository().add_student_app(user_id, str(app_id), class_id=class_id)
    return jsonify({"ok": True, "class": training_class.to_dict()})


@api_classes_bp.route("/<int:class_id>/students/<int:user_id>/apps/<app_id>", methods=["DELETE"])
@admin_required
def remove_student_app(class_id, user_id, app_id):
    training_class = _class_repository().remove_student_app(user_id, app_id, class_id=class_id)
    return jsonify({"ok": True, "class": training_class.to_dict()})
