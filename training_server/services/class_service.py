#!/usr/bin/env python3
"""
Class repository for the training portal.

Handles class CRUD, lookup of the class a user is enrolled in, and the
read-modify-write updates that add or remove a student's apps. Every write
goes through optimistic locking on TrainingClass.lock_version.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import selectinload

from training_server.models import (
    BlueprintPermission,
    Student,
    StudentApp,
    TrainingClass,
    User,
    db,
)
from training_server.utils.locking import check_expected_version, with_optimistic_lock

logger = logging.getLogger(__name__)


class ClassNotFoundError(LookupError):
    """Raised when a class (or the class of a user) does not exist."""
    pass


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse ISO strings ("2024-05-01", "2024-05-01T09:00:00Z") into naive UTC."""
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as e:
        raise ValueError(f"Invalid date: {value}") from e
    if parsed.tzinfo:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _with_students():
    """Loader options equivalent to populating students and their users."""
    return (
        selectinload(TrainingClass.students).selectinload(Student.user),
        selectinload(TrainingClass.students).selectinload(Student.blueprint_permissions),
        selectinload(TrainingClass.students).selectinload(Student.apps),
    )


class ClassRepository:
    """Persistence for TrainingClass aggregates."""

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_classes(self) -> List[TrainingClass]:
        return TrainingClass.query.options(*_with_students()).order_by(TrainingClass.id).all()

    def get_class(self, class_id: int) -> Optional[TrainingClass]:
        return TrainingClass.query.options(*_with_students()).filter_by(id=class_id).first()

    def get_class_of_user(self, user_id: int) -> Optional[TrainingClass]:
        """Get the class the user is enrolled in as a student.

        A user enrolled in several classes gets the most recently started one.
        """
        return (TrainingClass.query
                .options(*_with_students())
                .join(Student, Student.class_id == TrainingClass.id)
                .filter(Student.user_id == user_id)
                .order_by(TrainingClass.start_date.desc(), TrainingClass.id.desc())
                .first())

    def get_class_of_user_for_now(self, user_id: int, now: Optional[datetime] = None) -> Optional[TrainingClass]:
        """Get the user's class whose date window contains now."""
        now = now or datetime.utcnow()
        return (TrainingClass.query
                .options(*_with_students())
                .join(Student, Student.class_id == TrainingClass.id)
                .filter(Student.user_id == user_id,
                        TrainingClass.start_date <= now,
                        TrainingClass.end_date >= now)
                .order_by(TrainingClass.start_date.desc())
                .first())

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_class(self, data: Dict[str, Any]) -> TrainingClass:
        """Create a class, its students, permissions and apps from the DTO form."""
        training_class = TrainingClass()
        self._apply_class_data(training_class, data)

        try:
            db.session.add(training_class)
            db.session.commit()
        except Exception:
            db.session.rollback()
            logger.exception("Failed to create class %s", data.get('name'))
            raise

        logger.info("Created class %s (id=%s) with %d students",
                    training_class.name, training_class.id, len(training_class.students))
        return training_class

    @with_optimistic_lock
    def update_class(self, class_id: int, data: Dict[str, Any],
                     expected_version: Optional[int] = None) -> TrainingClass:
        """Replace a class with the given DTO (keyed by id).

        Students are matched by userId; unmatched students are removed and new
        ones added. A student entry without a password keeps the stored one.

        Raises:
            ClassNotFoundError: If the class does not exist
            OptimisticLockError: If expected_version is stale or a concurrent
                write wins the race
        """
        training_class = self.get_class(class_id)
        if not training_class:
            raise ClassNotFoundError(f"Class {class_id} not found")

        check_expected_version(training_class, expected_version)
        self._apply_class_data(training_class, data)
        training_class.touch()

        logger.info("Updated class %s (id=%s)", training_class.name, class_id)
        return training_class

    @with_optimistic_lock
    def add_student_app(self, user_id: int, app_id: str, class_id: Optional[int] = None) -> TrainingClass:
        """Record that the user's student entry owns the given remote app.

        With class_id, the user's class must be that class.
        """
        training_class, student = self._require_student(user_id, class_id)

        if any(a.app_id == str(app_id) for a in student.apps):
            logger.info("App %s already recorded for user %s", app_id, user_id)
            return training_class

        student.apps.append(StudentApp(app_id=str(app_id)))
        training_class.touch()

        logger.info("Added app %s to user %s in class %s", app_id, user_id, training_class.id)
        return training_class

    @with_optimistic_lock
    def remove_student_app(self, user_id: int, app_id: str, class_id: Optional[int] = None) -> TrainingClass:
        """Forget every record of the given remote app for the user."""
        training_class, student = self._require_student(user_id, class_id)

        remaining = [a for a in student.apps if a.app_id != str(app_id)]
        if len(remaining) != len(student.apps):
            student.apps = remaining
            training_class.touch()
            logger.info("Removed app %s from user %s in class %s", app_id, user_id, training_class.id)

        return training_class

    def delete_class(self, class_id: int) -> None:
        training_class = self.get_class(class_id)
        if not training_class:
            raise ClassNotFoundError(f"Class {class_id} not found")

        name = training_class.name
        try:
            db.session.delete(training_class)
            db.session.commit()
        except Exception:
            db.session.rollback()
            logger.exception("Failed to delete class %s", class_id)
            raise

        logger.info("Deleted class %s (id=%s)", name, class_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require_student(self, user_id: int, class_id: Optional[int] = None):
        training_class = self.get_class_of_user(user_id)
        if not training_class:
            raise ClassNotFoundError(f"No class found for user {user_id}")
        if class_id is not None and training_class.id != class_id:
            raise ClassNotFoundError(f"User {user_id} is not a student of class {class_id}")
        return training_class, training_class.find_student_by_user_id(user_id)

    def _apply_class_data(self, training_class: TrainingClass, data: Dict[str, Any]) -> None:
        name = (data.get('name') or '').strip()
        if not name:
            raise ValueError("Class name is required")

        start_date = _parse_datetime(data.get('startDate'))
        end_date = _parse_datetime(data.get('endDate'))
        if start_date and end_date and end_date < start_date:
            raise ValueError("Class end date is before its start date")

        training_class.name = name
        training_class.course_id = data.get('courseId')
        training_class.start_date = start_date
        training_class.end_date = end_date

        existing = {s.user_id: s for s in training_class.students}
        students = []
        for entry in data.get('students') or []:
            user_id = entry.get('userId')
            if user_id is None or db.session.get(User, user_id) is None:
                raise ValueError(f"Unknown user for student entry: {user_id}")
            student = existing.get(user_id) or Student(user_id=user_id)
            self._apply_student_data(student, entry)
            students.append(student)

        if len({s.user_id for s in students}) != len(students):
            raise ValueError("A user can only be enrolled once per class")

        training_class.students = students

    def _apply_student_data(self, student: Student, entry: Dict[str, Any]) -> None:
        credentials = entry.get('provisioningCredentials') or {}
        if 'username' in credentials:
            student.provisioning_username = credentials.get('username')
        if credentials.get('password'):
            student.provisioning_password = credentials['password']

        if 'blueprintPermissions' in entry:
            if any(not p.get('bpId') for p in entry['blueprintPermissions']):
                raise ValueError("Every blueprint permission needs a bpId")
            student.blueprint_permissions = [
                BlueprintPermission(
                    bp_id=str(p['bpId']),
                    start_vms=bool(p.get('startVms', False)),
                    stop_vms=bool(p.get('stopVms', False)),
                    console=bool(p.get('console', False)),
                )
                for p in entry['blueprintPermissions']
            ]

        if 'apps' in entry:
            if any(not a.get('appId') for a in entry['apps']):
                raise ValueError("Every app entry needs an appId")
            student.apps = [StudentApp(app_id=str(a['appId'])) for a in entry['apps']]
