#!/usr/bin/env python3
"""
Tests for the course administration REST API.

Run with: python -m pytest tests/test_courses_routes.py -v
"""

import os
import sys

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from conftest import login  # noqa: E402


def test_create_course_and_list(client, seed):
    login(client, 'root')

    response = client.post('/rest/courses', json={
        'name': 'Security Basics',
        'blueprints': [{'id': 'bp-9', 'name': 'Firewall BP', 'displayForStudents': 'Firewall Lab'}],
    })

    assert response.status_code == 201
    created = response.get_json()['course']
    assert created['blueprints'] == [{
        'id': 'bp-9',
        'name': 'Firewall BP',
        'displayForStudents': 'Firewall Lab',
        'description': None,
    }]

    names = [c['name'] for c in client.get('/rest/courses').get_json()['courses']]
    assert names == ['Networking 101', 'Security Basics']

    fetched = client.get(f"/rest/courses/{created['id']}").get_json()['course']
    assert fetched['name'] == 'Security Basics'


def test_create_course_requires_blueprint_ids(client, seed):
    login(client, 'root')

    response = client.post('/rest/courses', json={'name': 'Broken', 'blueprints': [{'name': 'x'}]})

    assert response.status_code == 400


def test_get_missing_course(client, seed):
    login(client, 'root')

    assert client.get('/rest/courses/999').status_code == 404


def test_courses_need_admin(client, seed):
    login(client, 'bob')

    assert client.get('/rest/courses').status_code == 403


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
