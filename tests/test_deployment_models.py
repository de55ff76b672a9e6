#!/usr/bin/env python3
"""
Tests for parsing provisioning service payloads.

Run with: python -m pytest tests/test_deployment_models.py -v
"""

import os
import sys

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))


def test_application_parses_nested_deployment():
    from training_server.services.deployment_models import RemoteApplication
    from conftest import make_app_payload

    app = RemoteApplication.from_dict(make_app_payload('app1'))

    assert app.id == 'app1'
    assert app.base_blueprint_id == 'bp-1'
    assert app.published is True
    assert len(app.vms) == 1
    vm = app.vms[0]
    assert vm.hostnames == ['web']
    assert vm.network_connections[0].fqdn == 'vm1.example.com'
    assert vm.network_connections[0].public_ip == '1.2.3.4'
    assert vm.supplied_services[0].external_port == 22
    assert vm.supplied_services[0].ip is None


def test_application_without_deployment():
    from training_server.services.deployment_models import RemoteApplication
    from conftest import make_app_payload

    app = RemoteApplication.from_dict(make_app_payload('app1', deployed=False))

    assert app.deployment is None
    assert app.vms == []


def test_missing_optional_lists_default_to_empty():
    from training_server.services.deployment_models import Vm

    vm = Vm.from_dict({'id': 7})

    assert vm.hostnames == []
    assert vm.network_connections == []
    assert vm.supplied_services == []


def test_service_ip_key_presence_is_kept():
    from training_server.services.deployment_models import SuppliedService

    unscoped = SuppliedService.from_dict({'name': 'ssh', 'external': True})
    null_scoped = SuppliedService.from_dict({'name': 'ssh', 'external': True, 'ip': None})

    assert unscoped.ip_scoped is False
    assert null_scoped.ip_scoped is True
    assert null_scoped.ip is None


def test_service_without_name_is_accepted():
    from training_server.services.deployment_models import Vm

    vm = Vm.from_dict({'id': 1, 'suppliedServices': [{'external': True, 'externalPort': 80}]})

    assert vm.supplied_services[0].name is None
    assert vm.supplied_services[0].external_port == 80


@pytest.mark.parametrize('payload', [
    None,
    ['not', 'an', 'object'],
    {'name': 'no id'},
    {'id': 'app1', 'deployment': 'broken'},
    {'id': 'app1', 'deployment': {'vms': {'id': 1}}},
    {'id': 'app1', 'deployment': {'vms': [{'name': 'vm without id'}]}},
])
def test_invalid_payloads_are_rejected(payload):
    from training_server.services.deployment_models import InvalidDeploymentError, RemoteApplication

    with pytest.raises(InvalidDeploymentError):
        RemoteApplication.from_dict(payload)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
