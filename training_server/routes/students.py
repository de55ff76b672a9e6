#!/usr/bin/env python3
"""
Student API routes blueprint.

Serves the logged-in student's class, the status of their applications and
the VMs of one application. The studentId/classId path segments are kept
for URL compatibility with the web client; the session user decides which
class and student are used.

Failures answer 404 with a plain-text message and the machine-readable
kind in the X-Error-Kind header.
"""

import logging

from flask import Blueprint, current_app, jsonify

from training_server.services.student_service import StudentRequestError
from training_server.utils.auth_helpers import get_current_user
from training_server.utils.decorators import login_required

logger = logging.getLogger(__name__)

students_bp = Blueprint('students', __name__, url_prefix='/rest/students')


def _student_service():
    return current_app.extensions['student_service']


@students_bp.errorhandler(StudentRequestError)
def handle_student_request_error(error: StudentRequestError):
    return error.message, 404, {
        'Content-Type': 'text/plain; charset=utf-8',
        'X-Error-Kind': error.kind.value,
    }


def _require_user():
    user = get_current_user()
    if not user:
        # Session points at a user that no longer exists
        return None, (jsonify({"ok": False, "error": "Not authenticated"}), 401)
    return user, None


@students_bp.route("/<student_id>", methods=["GET"])
@login_required
def get_student(student_id):
    user, error = _require_user()
    if error:
        return error
    return jsonify(_student_service().get_student(user))


@students_bp.route("/<student_id>/class/<class_id>", methods=["GET"])
@login_required
def get_student_class(student_id, class_id):
    """The user's profile with their class under 'userClass'."""
    user, error = _require_user()
    if error:
        return error
    return jsonify(_student_service().get_student_class(user))


@students_bp.route("/<student_id>/class/<class_id>/apps", methods=["GET"])
@login_required
def get_student_class_apps(student_id, class_id):
    """Status of every application the student owns."""
    user, error = _require_user()
    if error:
        return error
    return jsonify(_student_service().get_student_class_apps(user))


@students_bp.route("/<student_id>/class/<class_id>/apps/<app_id>", methods=["GET"])
@login_required
def get_app_vms(student_id, class_id, app_id):
    """VMs, hostnames and reachable DNS/service endpoints of one application."""
    user, error = _require_user()
    if error:
        return error
    return jsonify(_student_service().get_app_vms(user, app_id))
