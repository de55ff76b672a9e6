#!/usr/bin/env python3
"""
Tests for the student REST endpoints and the login flow.

Run with: python -m pytest tests/test_students_routes.py -v
"""

import os
import sys

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from conftest import login, make_app_payload  # noqa: E402


def _parsed(app_id, **kwargs):
    from training_server.services.deployment_models import RemoteApplication
    return RemoteApplication.from_dict(make_app_payload(app_id, **kwargs))


def _assert_student_error(response, kind, message=None):
    assert response.status_code == 404
    assert response.mimetype == 'text/plain'
    assert response.headers['X-Error-Kind'] == kind
    if message is not None:
        assert response.get_data(as_text=True) == message


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

def test_requests_without_session_are_rejected(client, seed):
    response = client.get('/rest/students/1/class/1')

    assert response.status_code == 401
    assert response.get_json()['ok'] is False


def test_login_with_wrong_password(client, seed):
    response = client.post('/rest/login', json={'username': 'alice', 'password': 'nope'})

    assert response.status_code == 401


def test_login_without_credentials(client, seed):
    response = client.post('/rest/login', json={})

    assert response.status_code == 400


def test_logout_ends_session(client, seed):
    login(client, 'alice')
    client.post('/rest/logout')

    assert client.get('/rest/students/1').status_code == 401


def test_health(client):
    response = client.get('/health')

    assert response.status_code == 200
    assert response.get_json() == {'ok': True}


# ---------------------------------------------------------------------------
# Student profile and class
# ---------------------------------------------------------------------------

def test_get_student(client, seed):
    login(client, 'alice')

    data = client.get(f'/rest/students/{seed.alice_id}').get_json()

    assert data['id'] == seed.alice_id
    assert data['username'] == 'alice'
    assert 'passwordHash' not in data


def test_get_student_class(client, seed):
    login(client, 'alice')

    response = client.get(f'/rest/students/{seed.alice_id}/class/{seed.class_id}')

    assert response.status_code == 200
    user_class = response.get_json()['userClass']
    assert user_class['id'] == seed.class_id
    assert 'students' not in user_class
    assert user_class['blueprintPermissions'] == {
        'bp-1': {'startVms': True, 'stopVms': False, 'console': True},
        'bp-2': {'startVms': False, 'stopVms': False, 'console': False},
    }


def test_path_ids_do_not_select_another_class(client, seed):
    """The session user decides which class is returned."""
    login(client, 'bob')

    response = client.get(f'/rest/students/{seed.alice_id}/class/{seed.class_id}')

    assert response.status_code == 200
    assert response.get_json()['username'] == 'bob'
    assert response.get_json()['userClass']['blueprintPermissions'] == {}


def test_get_student_class_without_class(client, seed):
    login(client, 'loner')

    response = client.get('/rest/students/3/class/1')

    _assert_student_error(response, 'class_not_found',
                          "Could not find the class of student: loner")


# ---------------------------------------------------------------------------
# Apps
# ---------------------------------------------------------------------------

def test_get_student_apps(client, seed, provisioning):
    provisioning.get_app.side_effect = lambda app_id, u, p: _parsed(app_id)
    login(client, 'alice')

    response = client.get(f'/rest/students/{seed.alice_id}/class/{seed.class_id}/apps')

    assert response.status_code == 200
    apps = response.get_json()
    assert [a['id'] for a in apps] == ['app1', 'app2']
    assert apps[0] == {
        'id': 'app1',
        'name': 'app-app1',
        'description': 'Two routers and a switch',
        'blueprintId': 'bp-1',
        'displayForStudents': 'Router Lab',
        'published': True,
        'vmsCount': 1,
        'startedVmsCount': 1,
    }


def test_get_student_apps_one_fails(client, seed, provisioning):
    from training_server.services.provisioning_client import ProvisioningError

    def get_app(app_id, username, password):
        if app_id == 'app2':
            raise ProvisioningError("HTTP 500", status_code=500)
        return _parsed(app_id)

    provisioning.get_app.side_effect = get_app
    login(client, 'alice')

    response = client.get(f'/rest/students/{seed.alice_id}/class/{seed.class_id}/apps')

    _assert_student_error(response, 'apps_load_failed',
                          "Could not get one of the apps of user: alice")


def test_get_student_apps_invalid_payload(client, seed, provisioning):
    from training_server.services.deployment_models import InvalidDeploymentError

    provisioning.get_app.side_effect = InvalidDeploymentError("application.id is required")
    login(client, 'alice')

    response = client.get(f'/rest/students/{seed.alice_id}/class/{seed.class_id}/apps')

    _assert_student_error(response, 'apps_load_failed')


def test_get_app_vms(client, seed, provisioning):
    provisioning.get_app.return_value = _parsed('app1')
    login(client, 'alice')

    response = client.get(f'/rest/students/{seed.alice_id}/class/{seed.class_id}/apps/app1')

    assert response.status_code == 200
    data = response.get_json()
    assert data['id'] == 'app1'
    assert data['vms'] == [{
        'id': 1,
        'name': 'web',
        'status': 'STARTED',
        'hostnames': [{'name': 'web'}],
        'allDns': [{'name': 'vm1.example.com', 'services': [{'name': 'ssh', 'port': 22}]}],
        'firstDns': {'name': 'vm1.example.com', 'services': [{'name': 'ssh', 'port': 22}]},
    }]


def test_get_app_vms_without_deployment(client, seed, provisioning):
    provisioning.get_app.return_value = _parsed('app1', deployed=False)
    login(client, 'alice')

    response = client.get(f'/rest/students/{seed.alice_id}/class/{seed.class_id}/apps/app1')

    _assert_student_error(response, 'deployment_fetch_failed')


def test_get_app_vms_without_class(client, seed, provisioning):
    login(client, 'loner')

    response = client.get('/rest/students/3/class/1/apps/app1')

    _assert_student_error(response, 'app_load_failed')
    provisioning.get_app.assert_not_called()


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
