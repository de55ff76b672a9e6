#!/usr/bin/env python3
"""
View objects for remote applications and their VMs.

A VM can have several network interfaces and each supplied service may be
scoped to one public address. For every publicly reachable interface the VM
view lists exactly the external services reachable through it.
"""

from typing import Any, Dict, List, Optional

from training_server.models import Course
from training_server.services.deployment_models import NetworkConnection, RemoteApplication, Vm

STARTED_STATE = 'STARTED'


def extract_device_ip(connection: NetworkConnection) -> Optional[str]:
    """Public address of an interface: explicit public IP, else reserved IP, else None."""
    if connection.public_ip:
        return connection.public_ip
    if connection.reserved_ip:
        return connection.reserved_ip
    return None


def _services_for_ip(vm: Vm, public_ip: str) -> List[Dict[str, Any]]:
    # Unscoped external services apply to every address; scoped ones to theirs only
    return [
        {'name': service.name, 'port': service.external_port}
        for service in vm.supplied_services
        if service.external and (not service.ip_scoped or service.ip == public_ip)
    ]


def create_vm_view_object(vm: Vm) -> Dict[str, Any]:
    """Project a VM into {id, name, status, hostnames, allDns[, firstDns]}.

    firstDns is the first allDns entry exposing at least one service and is
    left out when there is none.
    """
    all_dns = []
    for connection in vm.network_connections:
        public_ip = extract_device_ip(connection)
        if not public_ip:
            continue
        all_dns.append({
            'name': connection.fqdn,
            'services': _services_for_ip(vm, public_ip),
        })

    view = {
        'id': vm.id,
        'name': vm.name,
        'status': vm.state,
        'hostnames': [{'name': hostname} for hostname in vm.hostnames],
        'allDns': all_dns,
    }

    first_dns = next((dns for dns in all_dns if dns['services']), None)
    if first_dns is not None:
        view['firstDns'] = first_dns

    return view


def app_to_vms_dto(app: RemoteApplication) -> Dict[str, Any]:
    return {
        'id': app.id,
        'blueprintId': app.base_blueprint_id,
        'vms': [create_vm_view_object(vm) for vm in app.vms],
    }


def app_to_student_dto(course: Course, app: RemoteApplication) -> Dict[str, Any]:
    """Merge a remote application with the course's view of its blueprint."""
    blueprint = None
    if app.base_blueprint_id is not None:
        blueprint = course.find_blueprint(app.base_blueprint_id)

    display_name = app.name
    description = app.description
    if blueprint:
        display_name = blueprint.display_for_students or blueprint.name or app.name
        description = blueprint.description or app.description

    vms = app.vms
    return {
        'id': app.id,
        'name': app.name,
        'description': description,
        'blueprintId': app.base_blueprint_id,
        'displayForStudents': display_name,
        'published': app.published,
        'vmsCount': len(vms),
        'startedVmsCount': sum(1 for vm in vms if vm.state == STARTED_STATE),
    }
