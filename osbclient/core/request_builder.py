"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
osbclient, a product of Garudex Labs

Builds wire requests for broker operations.

The builder validates a request record, applies the operation and field
version gates, and produces a ``BrokerRequest``. It performs no I/O.
"""

from __future__ import annotations

import base64
import uuid
from typing import TYPE_CHECKING, Dict, Optional

from osbclient.core import codec
from osbclient.core.operations import Operation
from osbclient.core.transport import BrokerRequest
from osbclient.core.version import ORIGINATING_IDENTITY_VERSION, APIVersion
from osbclient.exceptions import MissingRequiredFieldError, OperationNotAllowedError

if TYPE_CHECKING:
    from osbclient.config.settings import AuthConfig

API_VERSION_HEADER = "X-Broker-API-Version"
ORIGINATING_IDENTITY_HEADER = "X-Broker-API-Originating-Identity"
REQUEST_IDENTITY_HEADER = "X-Broker-API-Request-Identity"
POLLING_DELAY_HEADER = "Retry-After"
ACCEPTS_INCOMPLETE = "accepts_incomplete"

CONTENT_TYPE_HEADER = "Content-Type"
JSON_CONTENT_TYPE = "application/json"


def validate_request(request) -> None:
    """
    Check that every required identifier on the request is set.

    Raises:
        MissingRequiredFieldError: Naming the first empty required field
    """
    for name, value in codec.required_fields(request):
        if value is None or value == "":
            raise MissingRequiredFieldError(name)


def check_operation_allowed(operation: Operation, version: APIVersion) -> None:
    """
    Raises:
        OperationNotAllowedError: If the operation is newer than ``version``
    """
    if not version.at_least(operation.min_version):
        raise OperationNotAllowedError(operation.name, operation.min_version, version)


def auth_header(auth: Optional["AuthConfig"]) -> Optional[str]:
    """Authorization header value for the configured credential, if any."""
    if auth is None:
        return None
    if auth.basic is not None:
        token = f"{auth.basic.username}:{auth.basic.password}".encode("utf-8")
        return "Basic " + base64.b64encode(token).decode("ascii")
    if auth.bearer is not None:
        return "Bearer " + auth.bearer.token
    return None


class RequestBuilder:
    """
    Shapes typed request records into ``BrokerRequest`` descriptors.

    Args:
        base_url: Root URL of the broker; trailing slashes are trimmed.
        api_version: Negotiated API version sent with every request.
        enable_alpha_features: Whether alpha-only fields may be sent.
        auth: Optional credential; at most one of basic or bearer.
    """

    def __init__(
        self,
        base_url: str,
        api_version: APIVersion,
        enable_alpha_features: bool = False,
        auth: Optional["AuthConfig"] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_version = api_version
        self.enable_alpha_features = enable_alpha_features
        self._authorization = auth_header(auth)

    def build(
        self,
        operation: Operation,
        request,
        extra_params: Optional[Dict[str, str]] = None,
    ) -> BrokerRequest:
        """
        Build the wire request for ``operation``.

        Raises:
            OperationNotAllowedError: If the operation is newer than the client's version
            MissingRequiredFieldError: If a required identifier is empty
            RequestEncodingError: If the body cannot be serialized
        """
        check_operation_allowed(operation, self.api_version)
        validate_request(request)

        body: Optional[bytes] = None
        if operation.has_body:
            body = codec.dumps(
                codec.to_wire(request, self.api_version, self.enable_alpha_features)
            )

        return BrokerRequest(
            method=operation.method,
            url=self.base_url + operation.path_for(request),
            headers=self._headers(request, body is not None),
            params=self._params(operation, request, extra_params),
            body=body,
        )

    def _headers(self, request, has_body: bool) -> Dict[str, str]:
        headers = {
            API_VERSION_HEADER: self.api_version.header_value(),
            REQUEST_IDENTITY_HEADER: str(uuid.uuid4()),
        }
        if has_body:
            headers[CONTENT_TYPE_HEADER] = JSON_CONTENT_TYPE
        if self._authorization is not None:
            headers["Authorization"] = self._authorization

        identity = getattr(request, "originating_identity", None)
        if identity is not None and self.api_version.at_least(ORIGINATING_IDENTITY_VERSION):
            headers[ORIGINATING_IDENTITY_HEADER] = identity.header_value()
        return headers

    def _params(
        self,
        operation: Operation,
        request,
        extra_params: Optional[Dict[str, str]],
    ) -> Dict[str, str]:
        params: Dict[str, str] = {}
        for key, value in codec.to_wire(
            request, self.api_version, self.enable_alpha_features, where=codec.QUERY
        ).items():
            params[key] = str(value)

        if self.accepts_incomplete(operation, request):
            params[ACCEPTS_INCOMPLETE] = "true"

        if extra_params:
            params.update(extra_params)
        return params

    def accepts_incomplete(self, operation: Operation, request) -> bool:
        """Whether this request opts into asynchronous completion on the wire."""
        return bool(getattr(request, "accepts_incomplete", False)) and operation.supports_async(
            self.api_version
        )
