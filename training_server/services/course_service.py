#!/usr/bin/env python3
"""
Course repository.

Courses describe which blueprints a class works with and how those blueprints
are presented to students.
"""

import logging
from typing import Any, Dict, List, Optional

from training_server.models import Course, CourseBlueprint, db

logger = logging.getLogger(__name__)


class CourseRepository:
    """Reads and creates Course rows."""

    def get_course(self, course_id: Optional[int]) -> Optional[Course]:
        """Get course by ID; None when missing or when no id is given."""
        if course_id is None:
            return None
        return db.session.get(Course, course_id)

    def get_courses(self) -> List[Course]:
        return Course.query.order_by(Course.name).all()

    def create_course(self, data: Dict[str, Any]) -> Course:
        """Create a course from its DTO form.

        Body shape: {"name": ..., "description": ...,
                     "blueprints": [{"id", "name", "displayForStudents", "description"}]}
        """
        name = (data.get('name') or '').strip()
        if not name:
            raise ValueError("Course name is required")

        course = Course(name=name, description=data.get('description'))
        for bp in data.get('blueprints') or []:
            if not bp.get('id'):
                raise ValueError("Every course blueprint needs an id")
            course.blueprints.append(CourseBlueprint(
                bp_id=str(bp['id']),
                name=bp.get('name'),
                display_for_students=bp.get('displayForStudents'),
                description=bp.get('description'),
            ))

        session = db.session
        try:
            session.add(course)
            session.commit()
        except Exception:
            session.rollback()
            logger.exception("Failed to create course %s", name)
            raise

        logger.info("Created course: %s (%d blueprints)", name, len(course.blueprints))
        return course
