"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
osbclient, a product of Garudex Labs

Request and response records for every broker operation.

Each field is declared with ``wire_field`` so that its wire name, location,
requiredness, minimum API version and alpha status are data, not code. See
``osbclient.core.codec`` for how those rules are applied.
"""

import base64
import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, NewType, Optional

from osbclient.core.codec import NONE, PATH, QUERY, wire_field
from osbclient.core.version import VERSION_2_12, VERSION_2_13, VERSION_2_14, VERSION_2_15
from osbclient.exceptions import InvalidIdentityAssertionError


# Broker-issued token correlating last_operation queries with one async action.
OperationKey = NewType("OperationKey", str)


class LastOperationState(str, Enum):
    """States reported by a last_operation query."""
    IN_PROGRESS = "in progress"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not LastOperationState.IN_PROGRESS


@dataclass(frozen=True)
class OriginatingIdentity:
    """
    Identity of the platform user on whose behalf a request is made.

    ``value`` is a serialized JSON value meaningful to ``platform``. It is sent
    base64-encoded in the originating identity header on API 2.13 and later.
    """

    platform: str
    value: str

    def __post_init__(self):
        if not self.platform:
            raise InvalidIdentityAssertionError("originating identity platform must not be empty")
        if not self.value:
            raise InvalidIdentityAssertionError("originating identity value must not be empty")
        try:
            json.loads(self.value)
        except ValueError as e:
            raise InvalidIdentityAssertionError(
                f"originating identity value must be valid JSON: {e}"
            ) from e

    def header_value(self) -> str:
        encoded = base64.b64encode(self.value.encode("utf-8")).decode("ascii")
        return f"{self.platform} {encoded}"


# Catalog

@dataclass
class DashboardClient:
    """OAuth SSO settings for a service's dashboard."""
    id: Optional[str] = wire_field()
    secret: Optional[str] = wire_field()
    redirect_uri: Optional[str] = wire_field()


@dataclass
class MaintenanceInfo:
    version: Optional[str] = wire_field()
    description: Optional[str] = wire_field()


@dataclass
class InputParametersSchema:
    """JSON schema for the parameters accepted by a create or update call."""
    parameters: Any = wire_field()


@dataclass
class ServiceInstanceSchema:
    create: Optional[InputParametersSchema] = wire_field()
    update: Optional[InputParametersSchema] = wire_field()


@dataclass
class ServiceBindingSchema:
    create: Optional[InputParametersSchema] = wire_field()


@dataclass
class Schemas:
    service_instance: Optional[ServiceInstanceSchema] = wire_field()
    service_binding: Optional[ServiceBindingSchema] = wire_field()


@dataclass
class Plan:
    """A plan (tier) within a service offering."""
    id: Optional[str] = wire_field()
    name: Optional[str] = wire_field()
    description: Optional[str] = wire_field()
    free: Optional[bool] = wire_field()
    bindable: Optional[bool] = wire_field()
    binding_rotatable: Optional[bool] = wire_field()
    metadata: Optional[Dict[str, Any]] = wire_field()
    schemas: Optional[Schemas] = wire_field(min_version=VERSION_2_13)
    plan_updateable: Optional[bool] = wire_field(alpha=True)
    maximum_polling_duration: Optional[int] = wire_field(alpha=True)
    maintenance_info: Optional[MaintenanceInfo] = wire_field(alpha=True)


@dataclass
class Service:
    """A service offering listed in the broker's catalog."""
    id: Optional[str] = wire_field()
    name: Optional[str] = wire_field()
    description: Optional[str] = wire_field()
    tags: Optional[List[str]] = wire_field()
    requires: Optional[List[str]] = wire_field()
    bindable: Optional[bool] = wire_field()
    instances_retrievable: Optional[bool] = wire_field(alpha=True)
    bindings_retrievable: Optional[bool] = wire_field(alpha=True)
    # 'plan_updateable' is the historical (misspelled) wire name.
    plan_updateable: Optional[bool] = wire_field()
    plans: Optional[List[Plan]] = wire_field()
    dashboard_client: Optional[DashboardClient] = wire_field()
    metadata: Optional[Dict[str, Any]] = wire_field()


@dataclass
class CatalogRequest:
    """The catalog endpoint takes no parameters."""
    originating_identity: Optional[OriginatingIdentity] = wire_field(location=NONE)


@dataclass
class CatalogResponse:
    services: Optional[List[Service]] = wire_field()


# Instances

@dataclass
class ServiceInstanceMetadata:
    labels: Optional[Dict[str, Any]] = wire_field()
    attributes: Optional[Dict[str, Any]] = wire_field()


@dataclass
class PreviousValues:
    """Information about a service instance prior to an update."""
    plan_id: Optional[str] = wire_field()
    service_id: Optional[str] = wire_field()
    organization_id: Optional[str] = wire_field()
    space_id: Optional[str] = wire_field()


@dataclass
class ProvisionRequest:
    instance_id: str = wire_field(location=PATH, required=True)
    service_id: str = wire_field(required=True)
    plan_id: str = wire_field(required=True)
    organization_guid: str = wire_field(required=True)
    space_guid: str = wire_field(required=True)
    accepts_incomplete: bool = wire_field(location=NONE, default=False)
    parameters: Optional[Dict[str, Any]] = wire_field()
    context: Optional[Dict[str, Any]] = wire_field(min_version=VERSION_2_12)
    maintenance_info: Optional[MaintenanceInfo] = wire_field(alpha=True)
    originating_identity: Optional[OriginatingIdentity] = wire_field(location=NONE)


@dataclass
class ProvisionResponse:
    dashboard_url: Optional[str] = wire_field()
    metadata: Optional[ServiceInstanceMetadata] = wire_field()
    operation: Optional[OperationKey] = wire_field()


@dataclass
class UpdateInstanceRequest:
    instance_id: str = wire_field(location=PATH, required=True)
    service_id: str = wire_field(required=True)
    accepts_incomplete: bool = wire_field(location=NONE, default=False)
    # Unset means the plan is not being changed.
    plan_id: Optional[str] = wire_field()
    parameters: Optional[Dict[str, Any]] = wire_field()
    previous_values: Optional[PreviousValues] = wire_field()
    context: Optional[Dict[str, Any]] = wire_field(min_version=VERSION_2_12)
    maintenance_info: Optional[MaintenanceInfo] = wire_field(alpha=True)
    originating_identity: Optional[OriginatingIdentity] = wire_field(location=NONE)


@dataclass
class UpdateInstanceResponse:
    dashboard_url: Optional[str] = wire_field(min_version=VERSION_2_14)
    metadata: Optional[ServiceInstanceMetadata] = wire_field()
    operation: Optional[OperationKey] = wire_field()


@dataclass
class DeprovisionRequest:
    instance_id: str = wire_field(location=PATH, required=True)
    service_id: str = wire_field(location=QUERY, required=True)
    plan_id: str = wire_field(location=QUERY, required=True)
    accepts_incomplete: bool = wire_field(location=NONE, default=False)
    originating_identity: Optional[OriginatingIdentity] = wire_field(location=NONE)


@dataclass
class DeprovisionResponse:
    operation: Optional[OperationKey] = wire_field()


@dataclass
class GetInstanceRequest:
    instance_id: str = wire_field(location=PATH, required=True)
    service_id: Optional[str] = wire_field(location=QUERY)
    plan_id: Optional[str] = wire_field(location=QUERY)
    originating_identity: Optional[OriginatingIdentity] = wire_field(location=NONE)


@dataclass
class GetInstanceResponse:
    service_id: Optional[str] = wire_field()
    plan_id: Optional[str] = wire_field()
    dashboard_url: Optional[str] = wire_field()
    metadata: Optional[ServiceInstanceMetadata] = wire_field()
    parameters: Optional[Dict[str, Any]] = wire_field()


# Last operation

@dataclass
class LastOperationRequest:
    instance_id: str = wire_field(location=PATH, required=True)
    # service_id and plan_id are optional but recommended.
    service_id: Optional[str] = wire_field(location=QUERY)
    plan_id: Optional[str] = wire_field(location=QUERY)
    # Must be sent back when the broker supplied one.
    operation: Optional[OperationKey] = wire_field(location=QUERY)
    originating_identity: Optional[OriginatingIdentity] = wire_field(location=NONE)


@dataclass
class BindingLastOperationRequest:
    instance_id: str = wire_field(location=PATH, required=True)
    binding_id: str = wire_field(location=PATH, required=True)
    service_id: Optional[str] = wire_field(location=QUERY)
    plan_id: Optional[str] = wire_field(location=QUERY)
    operation: Optional[OperationKey] = wire_field(location=QUERY)
    originating_identity: Optional[OriginatingIdentity] = wire_field(location=NONE)


@dataclass
class LastOperationResponse:
    state: LastOperationState = wire_field(strict=True)
    description: Optional[str] = wire_field()
    # Seconds to wait before polling again, read from the Retry-After header.
    poll_delay: Optional[float] = wire_field(location=NONE, min_version=VERSION_2_15)


# Bindings

@dataclass
class BindResource:
    app_guid: Optional[str] = wire_field("appGuid")
    route: Optional[str] = wire_field()

    def is_not_empty(self) -> bool:
        return bool(self.app_guid) or bool(self.route)


class EndpointProtocol(str, Enum):
    TCP = "tcp"
    UDP = "udp"
    ALL = "all"


@dataclass
class Endpoint:
    """A network endpoint an application uses to reach the service instance."""
    host: Optional[str] = wire_field()
    ports: Optional[List[int]] = wire_field()
    protocol: Optional[EndpointProtocol] = wire_field()


@dataclass
class VolumeMountDevice:
    volume_id: Optional[str] = wire_field()
    mount_config: Optional[Dict[str, Any]] = wire_field()


@dataclass
class VolumeMount:
    driver: Optional[str] = wire_field()
    container_dir: Optional[str] = wire_field()
    mode: Optional[str] = wire_field()
    device_type: Optional[str] = wire_field()
    device: Optional[VolumeMountDevice] = wire_field()


@dataclass
class BindingMetadata:
    expires_at: Optional[str] = wire_field()
    renew_before: Optional[str] = wire_field()


@dataclass
class BindRequest:
    binding_id: str = wire_field(location=PATH, required=True)
    instance_id: str = wire_field(location=PATH, required=True)
    service_id: str = wire_field(required=True)
    plan_id: str = wire_field(required=True)
    accepts_incomplete: bool = wire_field(location=NONE, default=False)
    # Deprecated in favour of bind_resource.app_guid.
    app_guid: Optional[str] = wire_field()
    bind_resource: Optional[BindResource] = wire_field()
    parameters: Optional[Dict[str, Any]] = wire_field()
    context: Optional[Dict[str, Any]] = wire_field(min_version=VERSION_2_13)
    originating_identity: Optional[OriginatingIdentity] = wire_field(location=NONE)


@dataclass
class BindResponse:
    credentials: Optional[Dict[str, Any]] = wire_field()
    syslog_drain_url: Optional[str] = wire_field()
    route_service_url: Optional[str] = wire_field()
    volume_mounts: Optional[List[VolumeMount]] = wire_field()
    endpoints: Optional[List[Endpoint]] = wire_field(alpha=True)
    metadata: Optional[BindingMetadata] = wire_field()
    operation: Optional[OperationKey] = wire_field(min_version=VERSION_2_14)


@dataclass
class RotateBindingRequest:
    instance_id: str = wire_field(location=PATH, required=True)
    binding_id: str = wire_field(location=PATH, required=True)
    predecessor_binding_id: str = wire_field(required=True)
    accepts_incomplete: bool = wire_field(location=NONE, default=False)
    originating_identity: Optional[OriginatingIdentity] = wire_field(location=NONE)


@dataclass
class UnbindRequest:
    instance_id: str = wire_field(location=PATH, required=True)
    binding_id: str = wire_field(location=PATH, required=True)
    service_id: str = wire_field(location=QUERY, required=True)
    plan_id: str = wire_field(location=QUERY, required=True)
    accepts_incomplete: bool = wire_field(location=NONE, default=False)
    originating_identity: Optional[OriginatingIdentity] = wire_field(location=NONE)


@dataclass
class UnbindResponse:
    operation: Optional[OperationKey] = wire_field(min_version=VERSION_2_14)


@dataclass
class GetBindingRequest:
    instance_id: str = wire_field(location=PATH, required=True)
    binding_id: str = wire_field(location=PATH, required=True)
    originating_identity: Optional[OriginatingIdentity] = wire_field(location=NONE)


@dataclass
class GetBindingResponse:
    credentials: Optional[Dict[str, Any]] = wire_field()
    syslog_drain_url: Optional[str] = wire_field()
    route_service_url: Optional[str] = wire_field()
    volume_mounts: Optional[List[VolumeMount]] = wire_field()
    parameters: Optional[Dict[str, Any]] = wire_field()
    endpoints: Optional[List[Endpoint]] = wire_field(alpha=True)
    metadata: Optional[BindingMetadata] = wire_field()
