#!/usr/bin/env python3
"""
Student request handling.

Resolves the class of the logged-in user, fans out to the provisioning
service for the student's applications and projects the results into view
objects. Each stage either succeeds or ends the request with a
StudentRequestError naming what failed; routes turn those into 404s.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from training_server.models import Course, Student, TrainingClass, User
from training_server.services.app_view import app_to_student_dto, app_to_vms_dto
from training_server.services.class_view import prepare_class_for_student
from training_server.services.deployment_models import InvalidDeploymentError, RemoteApplication
from training_server.services.provisioning_client import ProvisioningError

logger = logging.getLogger(__name__)

# Failures of a single provisioning call
FETCH_ERRORS = (ProvisioningError, InvalidDeploymentError)


class ErrorKind(str, Enum):
    CLASS_NOT_FOUND = 'class_not_found'
    COURSE_NOT_FOUND = 'course_not_found'
    STUDENT_NOT_FOUND = 'student_not_found'
    APPS_LOAD_FAILED = 'apps_load_failed'
    APP_LOAD_FAILED = 'app_load_failed'
    DEPLOYMENT_FETCH_FAILED = 'deployment_fetch_failed'


class StudentRequestError(Exception):
    """A student request could not be served; message is shown to the client."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


def fetch_apps(client, app_ids: Sequence[str], username: str, password: str) -> List[RemoteApplication]:
    """Fetch several applications concurrently, all or nothing.

    One worker per app. Results keep the order of app_ids. The first failed
    call is re-raised as soon as it completes; calls still in flight are left
    to finish on their own and their results are discarded.
    """
    if not app_ids:
        return []

    executor = ThreadPoolExecutor(max_workers=len(app_ids), thread_name_prefix='app-fetch')
    try:
        future_to_index = {
            executor.submit(client.get_app, app_id, username, password): index
            for index, app_id in enumerate(app_ids)
        }
        results: List[Optional[RemoteApplication]] = [None] * len(app_ids)
        for future in as_completed(future_to_index):
            results[future_to_index[future]] = future.result()
        return results
    finally:
        executor.shutdown(wait=False, cancel_futures=True)


class StudentService:
    """Orchestrates the student endpoints over injected collaborators.

    Args:
        class_repository: ClassRepository (or compatible) for class lookup
        course_repository: CourseRepository (or compatible) for course lookup
        provisioning_client: ProvisioningClient (or compatible) with get_app()
    """

    def __init__(self, class_repository, course_repository, provisioning_client):
        self.class_repository = class_repository
        self.course_repository = course_repository
        self.provisioning_client = provisioning_client

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def _class_of(self, user: User) -> TrainingClass:
        message = f"Could not find the class of student: {user.username}"
        try:
            training_class = self.class_repository.get_class_of_user(user.id)
        except SQLAlchemyError as e:
            logger.warning(f"{message} ({e})")
            raise StudentRequestError(ErrorKind.CLASS_NOT_FOUND, message) from e

        if training_class is None:
            logger.info(message)
            raise StudentRequestError(ErrorKind.CLASS_NOT_FOUND, message)
        return training_class

    def _student_in(self, training_class: TrainingClass, user: User) -> Student:
        student = training_class.find_student_by_user_id(user.id)
        if student is None:
            raise self._student_not_found(training_class, user)
        return student

    def _student_not_found(self, training_class: TrainingClass, user: User) -> StudentRequestError:
        message = f"Could not find student record for user: {user.username} in class {training_class.id}"
        logger.warning(message)
        return StudentRequestError(ErrorKind.STUDENT_NOT_FOUND, message)

    def _course_of(self, training_class: TrainingClass, user: User) -> Course:
        message = f"Could not find the course of student: {user.username}"
        try:
            course = self.course_repository.get_course(training_class.course_id)
        except SQLAlchemyError as e:
            logger.warning(f"{message} ({e})")
            raise StudentRequestError(ErrorKind.COURSE_NOT_FOUND, message) from e

        if course is None:
            logger.info(message)
            raise StudentRequestError(ErrorKind.COURSE_NOT_FOUND, message)
        return course

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def get_student(self, user: User) -> Dict[str, Any]:
        return user.to_dict()

    def get_student_class(self, user: User) -> Dict[str, Any]:
        """User DTO with the student's view of their class under 'userClass'."""
        training_class = self._class_of(user)
        student = self._student_in(training_class, user)

        class_for_student = prepare_class_for_student(training_class, student.id)

        user_data = user.to_dict()
        user_data['userClass'] = class_for_student
        return user_data

    def get_student_class_apps(self, user: User) -> List[Dict[str, Any]]:
        """One DTO per app the student owns; fails as a whole if any app fails."""
        training_class = self._class_of(user)
        student = self._student_in(training_class, user)
        course = self._course_of(training_class, user)

        app_ids = [app.app_id for app in student.apps]
        try:
            apps = fetch_apps(self.provisioning_client, app_ids,
                              student.provisioning_username, student.provisioning_password)
        except FETCH_ERRORS as e:
            message = f"Could not get one of the apps of user: {user.username}"
            logger.warning(f"{message} ({e})")
            raise StudentRequestError(ErrorKind.APPS_LOAD_FAILED, message) from e

        return [app_to_student_dto(course, app) for app in apps]

    def get_app_vms(self, user: User, app_id: str) -> Dict[str, Any]:
        """VM view objects of one application's deployment."""
        try:
            training_class = self.class_repository.get_class_of_user(user.id)
        except SQLAlchemyError as e:
            message = f"Could not load app {app_id}, error: {e}"
            logger.warning(message)
            raise StudentRequestError(ErrorKind.APP_LOAD_FAILED, message) from e

        if training_class is None:
            message = f"Could not load app {app_id}, error: no class found for user {user.username}"
            logger.warning(message)
            raise StudentRequestError(ErrorKind.APP_LOAD_FAILED, message)

        student = self._student_in(training_class, user)

        try:
            app = self.provisioning_client.get_app(app_id, student.provisioning_username,
                                                   student.provisioning_password)
        except FETCH_ERRORS as e:
            message = f"Could not get application deployment information, error: {e}"
            logger.warning(message)
            raise StudentRequestError(ErrorKind.DEPLOYMENT_FETCH_FAILED, message) from e

        if app.deployment is None:
            message = (f"Could not get application deployment information, "
                       f"error: application {app.id} has no deployment")
            logger.warning(message)
            raise StudentRequestError(ErrorKind.DEPLOYMENT_FETCH_FAILED, message)

        return app_to_vms_dto(app)
