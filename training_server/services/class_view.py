#!/usr/bin/env python3
"""
Student-facing view of a training class.
"""

from typing import Any, Dict

from training_server.models import TrainingClass


class StudentNotFoundError(LookupError):
    """Raised when a student id does not belong to the class being projected."""

    def __init__(self, class_id, student_id):
        super().__init__(f"Student {student_id} not found in class {class_id}")
        self.class_id = class_id
        self.student_id = student_id


def prepare_class_for_student(training_class: TrainingClass, student_id: int) -> Dict[str, Any]:
    """Class DTO without the roster, plus the student's permissions by blueprint.

    Returns the class fields with 'students' removed and 'blueprintPermissions'
    set to {bpId: {startVms, stopVms, console}} for the given student.

    Raises:
        StudentNotFoundError: If student_id is not one of the class's students
    """
    student = training_class.find_student(student_id)
    if student is None:
        raise StudentNotFoundError(training_class.id, student_id)

    class_data = training_class.to_dict()
    class_data.pop('students', None)
    class_data['blueprintPermissions'] = {
        permission.bp_id: permission.flags()
        for permission in student.blueprint_permissions
    }
    return class_data
