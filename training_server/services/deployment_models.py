#!/usr/bin/env python3
"""
Typed records for applications returned by the provisioning service.

The provider answers with loosely shaped JSON. These dataclasses are built
once per response through from_dict(), which validates the fields the view
layer relies on and raises InvalidDeploymentError for anything unusable.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


class InvalidDeploymentError(ValueError):
    """Raised when a provider payload is missing required fields."""
    pass


def _require_mapping(data: Any, what: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise InvalidDeploymentError(f"{what} must be an object, got {type(data).__name__}")
    return data


def _list_of(data: Dict[str, Any], key: str, what: str) -> List[Any]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise InvalidDeploymentError(f"{what}.{key} must be a list")
    return value


@dataclass
class SuppliedService:
    """Service a VM exposes.

    When the payload carries an ip key (even null) the service is reachable
    only through the address equal to it; ip_scoped records that the key was there.
    """
    name: Optional[str] = None
    external: bool = False
    external_port: Any = None
    ip: Optional[str] = None
    ip_scoped: bool = False

    @classmethod
    def from_dict(cls, data: Any) -> 'SuppliedService':
        data = _require_mapping(data, "service")
        return cls(
            name=data.get('name'),
            external=bool(data.get('external', False)),
            external_port=data.get('externalPort'),
            ip=data.get('ip'),
            ip_scoped='ip' in data,
        )


@dataclass
class NetworkConnection:
    """One network interface of a VM with its public addressing."""
    name: Optional[str] = None
    fqdn: Optional[str] = None
    public_ip: Optional[str] = None
    reserved_ip: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> 'NetworkConnection':
        data = _require_mapping(data, "networkConnection")
        ip_config = _require_mapping(data.get('ipConfig') or {}, "networkConnection.ipConfig")
        auto_ip_config = _require_mapping(ip_config.get('autoIpConfig') or {},
                                          "networkConnection.ipConfig.autoIpConfig")
        return cls(
            name=data.get('name'),
            fqdn=ip_config.get('fqdn'),
            public_ip=ip_config.get('publicIp'),
            reserved_ip=auto_ip_config.get('reservedIp'),
        )


@dataclass
class Vm:
    id: Any
    name: Optional[str] = None
    state: Optional[str] = None
    hostnames: List[str] = field(default_factory=list)
    network_connections: List[NetworkConnection] = field(default_factory=list)
    supplied_services: List[SuppliedService] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> 'Vm':
        data = _require_mapping(data, "vm")
        if data.get('id') is None:
            raise InvalidDeploymentError("vm.id is required")
        return cls(
            id=data['id'],
            name=data.get('name'),
            state=data.get('state'),
            hostnames=[str(h) for h in _list_of(data, 'hostnames', 'vm')],
            network_connections=[NetworkConnection.from_dict(c)
                                 for c in _list_of(data, 'networkConnections', 'vm')],
            supplied_services=[SuppliedService.from_dict(s)
                               for s in _list_of(data, 'suppliedServices', 'vm')],
        )


@dataclass
class Deployment:
    """Running copy of an application; absent until the app is published."""
    vms: List[Vm] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> 'Deployment':
        data = _require_mapping(data, "deployment")
        return cls(vms=[Vm.from_dict(v) for v in _list_of(data, 'vms', 'deployment')])


@dataclass
class RemoteApplication:
    id: Any
    name: Optional[str] = None
    description: Optional[str] = None
    base_blueprint_id: Any = None
    published: bool = False
    deployment: Optional[Deployment] = None

    @property
    def vms(self) -> List[Vm]:
        return self.deployment.vms if self.deployment else []

    @classmethod
    def from_dict(cls, data: Any) -> 'RemoteApplication':
        data = _require_mapping(data, "application")
        if data.get('id') is None:
            raise InvalidDeploymentError("application.id is required")
        deployment = data.get('deployment')
        return cls(
            id=data['id'],
            name=data.get('name'),
            description=data.get('description'),
            base_blueprint_id=data.get('baseBlueprintId'),
            published=bool(data.get('published', False)),
            deployment=Deployment.from_dict(deployment) if deployment is not None else None,
        )
