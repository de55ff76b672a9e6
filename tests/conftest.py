#!/usr/bin/env python3
"""
Shared fixtures: an app on an in-memory sqlite database with a seeded class
and a mocked provisioning client.
"""

import os
import sys
from datetime import datetime, timedelta
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

os.environ.setdefault('SECRET_KEY', 'test-secret-key')


def make_vm_payload(vm_id=1, name='web', state='STARTED', public_ip='1.2.3.4',
                    fqdn='vm1.example.com', services=None):
    """Provider-shaped VM with one network connection."""
    return {
        'id': vm_id,
        'name': name,
        'state': state,
        'hostnames': [name],
        'networkConnections': [
            {'name': 'eth0', 'ipConfig': {'fqdn': fqdn, 'publicIp': public_ip}},
        ],
        'suppliedServices': services if services is not None else [
            {'name': 'ssh', 'external': True, 'externalPort': 22},
        ],
    }


def make_app_payload(app_id, bp_id='bp-1', vms=None, deployed=True, name=None):
    """Provider-shaped application; deployed=False leaves out the deployment."""
    payload = {
        'id': app_id,
        'name': name or f'app-{app_id}',
        'description': 'remote description',
        'baseBlueprintId': bp_id,
        'published': deployed,
    }
    if deployed:
        payload['deployment'] = {'vms': vms if vms is not None else [make_vm_payload()]}
    return payload


@pytest.fixture
def provisioning():
    """Mocked provisioning client; tests set get_app.side_effect."""
    return MagicMock(name='provisioning_client')


@pytest.fixture
def app(provisioning):
    from training_server import create_app
    from training_server.models import db

    app = create_app(
        config={
            'TESTING': True,
            'SQLALCHEMY_DATABASE_URI': 'sqlite://',
        },
        provisioning_client=provisioning,
    )

    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def seed(app):
    """Course with one blueprint; class with two students; a user with no class; an admin."""
    from training_server.models import (
        BlueprintPermission,
        Course,
        CourseBlueprint,
        Student,
        StudentApp,
        TrainingClass,
        User,
        db,
    )

    users = {}
    for username, role in (('alice', 'student'), ('bob', 'student'),
                           ('loner', 'student'), ('root', 'admin')):
        user = User(username=username, role=role)
        user.set_password(f'{username}-pw')
        db.session.add(user)
        users[username] = user

    course = Course(name='Networking 101', description='Intro course')
    course.blueprints.append(CourseBlueprint(bp_id='bp-1', name='Lab BP',
                                             display_for_students='Router Lab',
                                             description='Two routers and a switch'))
    db.session.add(course)
    db.session.flush()

    now = datetime.utcnow()
    training_class = TrainingClass(name='May cohort', course_id=course.id,
                                   start_date=now - timedelta(days=1),
                                   end_date=now + timedelta(days=1))
    alice = Student(user_id=users['alice'].id, provisioning_username='alice@provider',
                    provisioning_password='alice-secret')
    alice.blueprint_permissions = [
        BlueprintPermission(bp_id='bp-1', start_vms=True, stop_vms=False, console=True),
        BlueprintPermission(bp_id='bp-2', start_vms=False, stop_vms=False, console=False),
    ]
    alice.apps = [StudentApp(app_id='app1'), StudentApp(app_id='app2')]
    bob = Student(user_id=users['bob'].id, provisioning_username='bob@provider',
                  provisioning_password='bob-secret')
    training_class.students = [alice, bob]
    db.session.add(training_class)
    db.session.commit()

    return SimpleNamespace(
        course_id=course.id,
        class_id=training_class.id,
        alice_id=users['alice'].id,
        bob_id=users['bob'].id,
        loner_id=users['loner'].id,
        admin_id=users['root'].id,
        alice_student_id=alice.id,
        bob_student_id=bob.id,
    )


def login(client, username, password=None):
    response = client.post('/rest/login', json={
        'username': username,
        'password': password or f'{username}-pw',
    })
    assert response.status_code == 200, response.get_data(as_text=True)
    return response
