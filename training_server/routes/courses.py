#!/usr/bin/env python3
"""
Course administration API routes blueprint.
"""

import logging

from flask import Blueprint, current_app, jsonify, request

from training_server.utils.decorators import admin_required

logger = logging.getLogger(__name__)

api_courses_bp = Blueprint('api_courses', __name__, url_prefix='/rest/courses')


def _course_repository():
    return current_app.extensions['course_repository']


@api_courses_bp.errorhandler(ValueError)
def handle_bad_payload(error):
    return jsonify({"ok": False, "error": str(error)}), 400


@api_courses_bp.route("", methods=["GET"])
@admin_required
def list_courses():
    courses = _course_repository().get_courses()
    return jsonify({"ok": True, "courses": [c.to_dict() for c in courses]})


@api_courses_bp.route("", methods=["POST"])
@admin_required
def create_course():
    """Create a course.

    Body: {
        "name": "Networking 101",
        "description": "...",
        "blueprints": [{"id": "...", "name": "...", "displayForStudents": "...", "description": "..."}]
    }
    """
    data = request.get_json(silent=True) or {}
    course = _course_repository().create_course(data)
    return jsonify({"ok": True, "course": course.to_dict()}), 201


@api_courses_bp.route("/<int:course_id>", methods=["GET"])
@admin_required
def get_course(course_id):
    course = _course_repository().get_course(course_id)
    if not course:
        return jsonify({"ok": False, "error": f"Course {course_id} not found"}), 404
    return jsonify({"ok": True, "course": course.to_dict()})
