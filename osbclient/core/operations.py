"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
osbclient, a product of Garudex Labs

The closed set of broker operations.

Each operation carries its own wire contract: HTTP method, path template,
request/response records, the API version that introduced it, the API
version from which it may complete asynchronously, and the statuses that
mean synchronous success.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional, Type

from osbclient.core import messages as m
from osbclient.core.codec import PATH, fields_at
from osbclient.core.version import VERSION_2_11, VERSION_2_14, VERSION_2_17, APIVersion

CATALOG_PATH = "/v2/catalog"
INSTANCE_PATH = "/v2/service_instances/{instance_id}"
INSTANCE_LAST_OPERATION_PATH = "/v2/service_instances/{instance_id}/last_operation"
BINDING_PATH = "/v2/service_instances/{instance_id}/service_bindings/{binding_id}"
BINDING_LAST_OPERATION_PATH = (
    "/v2/service_instances/{instance_id}/service_bindings/{binding_id}/last_operation"
)


@dataclass(frozen=True)
class Operation:
    """Wire contract of a single broker operation."""

    name: str
    method: str
    path: str
    request_type: Type
    response_type: Type
    min_version: APIVersion = VERSION_2_11
    # None means the operation never completes asynchronously.
    async_version: Optional[APIVersion] = None
    sync_statuses: FrozenSet[int] = frozenset({200})
    # 410 Gone means the resource is already absent: idempotent success.
    gone_is_success: bool = False
    has_body: bool = False
    # Name of the last_operation query used to poll this operation.
    polled_by: Optional[str] = None

    def supports_async(self, version: APIVersion) -> bool:
        return self.async_version is not None and version.at_least(self.async_version)

    def path_for(self, request) -> str:
        """Interpolate the request's path fields into the template, verbatim."""
        values = {f.name: getattr(request, f.name) for f in fields_at(request, PATH)}
        return self.path.format(**values)

    def __str__(self) -> str:
        return self.name


GET_CATALOG = Operation(
    name="GetCatalog",
    method="GET",
    path=CATALOG_PATH,
    request_type=m.CatalogRequest,
    response_type=m.CatalogResponse,
)

PROVISION_INSTANCE = Operation(
    name="ProvisionInstance",
    method="PUT",
    path=INSTANCE_PATH,
    request_type=m.ProvisionRequest,
    response_type=m.ProvisionResponse,
    async_version=VERSION_2_11,
    sync_statuses=frozenset({200, 201}),
    has_body=True,
    polled_by="PollLastOperation",
)

UPDATE_INSTANCE = Operation(
    name="UpdateInstance",
    method="PATCH",
    path=INSTANCE_PATH,
    request_type=m.UpdateInstanceRequest,
    response_type=m.UpdateInstanceResponse,
    async_version=VERSION_2_11,
    has_body=True,
    polled_by="PollLastOperation",
)

DEPROVISION_INSTANCE = Operation(
    name="DeprovisionInstance",
    method="DELETE",
    path=INSTANCE_PATH,
    request_type=m.DeprovisionRequest,
    response_type=m.DeprovisionResponse,
    async_version=VERSION_2_11,
    gone_is_success=True,
    polled_by="PollLastOperation",
)

GET_INSTANCE = Operation(
    name="GetInstance",
    method="GET",
    path=INSTANCE_PATH,
    request_type=m.GetInstanceRequest,
    response_type=m.GetInstanceResponse,
    min_version=VERSION_2_14,
)

POLL_LAST_OPERATION = Operation(
    name="PollLastOperation",
    method="GET",
    path=INSTANCE_LAST_OPERATION_PATH,
    request_type=m.LastOperationRequest,
    response_type=m.LastOperationResponse,
)

BIND = Operation(
    name="Bind",
    method="PUT",
    path=BINDING_PATH,
    request_type=m.BindRequest,
    response_type=m.BindResponse,
    async_version=VERSION_2_14,
    sync_statuses=frozenset({200, 201}),
    has_body=True,
    polled_by="PollBindingLastOperation",
)

UNBIND = Operation(
    name="Unbind",
    method="DELETE",
    path=BINDING_PATH,
    request_type=m.UnbindRequest,
    response_type=m.UnbindResponse,
    async_version=VERSION_2_14,
    gone_is_success=True,
    polled_by="PollBindingLastOperation",
)

GET_BINDING = Operation(
    name="GetBinding",
    method="GET",
    path=BINDING_PATH,
    request_type=m.GetBindingRequest,
    response_type=m.GetBindingResponse,
    min_version=VERSION_2_14,
)

ROTATE_BINDING = Operation(
    name="RotateBinding",
    method="PUT",
    path=BINDING_PATH,
    request_type=m.RotateBindingRequest,
    response_type=m.BindResponse,
    min_version=VERSION_2_17,
    async_version=VERSION_2_11,
    sync_statuses=frozenset({200, 201}),
    has_body=True,
    polled_by="PollBindingLastOperation",
)

POLL_BINDING_LAST_OPERATION = Operation(
    name="PollBindingLastOperation",
    method="GET",
    path=BINDING_LAST_OPERATION_PATH,
    request_type=m.BindingLastOperationRequest,
    response_type=m.LastOperationResponse,
    min_version=VERSION_2_14,
)

OPERATIONS: Dict[str, Operation] = {
    op.name: op
    for op in (
        GET_CATALOG,
        PROVISION_INSTANCE,
        UPDATE_INSTANCE,
        DEPROVISION_INSTANCE,
        GET_INSTANCE,
        POLL_LAST_OPERATION,
        BIND,
        UNBIND,
        GET_BINDING,
        ROTATE_BINDING,
        POLL_BINDING_LAST_OPERATION,
    )
}
