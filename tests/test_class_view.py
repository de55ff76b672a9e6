#!/usr/bin/env python3
"""
Tests for the student-facing class projection.

Run with: python -m pytest tests/test_class_view.py -v
"""

import os
import sys
from datetime import datetime

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))


def _training_class():
    from training_server.models import BlueprintPermission, Student, TrainingClass

    training_class = TrainingClass(id=3, name='May cohort', course_id=9, lock_version=4,
                                   start_date=datetime(2024, 5, 1, 8, 0),
                                   end_date=datetime(2024, 5, 3, 17, 0))
    first = Student(id=10, user_id=1)
    first.blueprint_permissions = [
        BlueprintPermission(bp_id='bp-1', start_vms=True, stop_vms=False, console=True),
    ]
    second = Student(id=11, user_id=2)
    second.blueprint_permissions = [
        BlueprintPermission(bp_id='bp-1', start_vms=False, stop_vms=False, console=False),
        BlueprintPermission(bp_id='bp-2', start_vms=True, stop_vms=True, console=True),
    ]
    training_class.students = [first, second]
    return training_class


def test_class_for_student_has_permission_map():
    from training_server.services.class_view import prepare_class_for_student

    view = prepare_class_for_student(_training_class(), 11)

    assert view['blueprintPermissions'] == {
        'bp-1': {'startVms': False, 'stopVms': False, 'console': False},
        'bp-2': {'startVms': True, 'stopVms': True, 'console': True},
    }


def test_class_for_student_hides_roster():
    from training_server.services.class_view import prepare_class_for_student

    view = prepare_class_for_student(_training_class(), 10)

    assert 'students' not in view
    assert view['id'] == 3
    assert view['name'] == 'May cohort'
    assert view['courseId'] == 9
    assert view['startDate'] == '2024-05-01T08:00:00'
    assert view['version'] == 4


def test_class_for_student_with_no_permissions():
    from training_server.models import Student
    from training_server.services.class_view import prepare_class_for_student

    training_class = _training_class()
    training_class.students.append(Student(id=12, user_id=3))

    assert prepare_class_for_student(training_class, 12)['blueprintPermissions'] == {}


def test_unknown_student_raises():
    from training_server.services.class_view import StudentNotFoundError, prepare_class_for_student

    with pytest.raises(StudentNotFoundError) as excinfo:
        prepare_class_for_student(_training_class(), 99)

    assert excinfo.value.class_id == 3
    assert excinfo.value.student_id == 99


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
