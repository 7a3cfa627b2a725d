"""
SDK client for Open Service Broker APIs.

Provides a developer-friendly API over the protocol engine: every operation
is built by the RequestBuilder, sent through a transport adapter and
classified by the ResponseInterpreter into an OperationOutcome.
"""

import threading
from typing import Any, Dict, Optional

from osbclient.config.settings import ClientConfiguration, load_config, validate_config
from osbclient.core import messages as m
from osbclient.core import operations as ops
from osbclient.core.operations import Operation
from osbclient.core.poller import LastOperationPoller, PollResult
from osbclient.core.request_builder import REQUEST_IDENTITY_HEADER, RequestBuilder
from osbclient.core.response import OperationOutcome, ResponseInterpreter
from osbclient.logging_config import correlation_scope, get_logger, log_broker_request
from osbclient.sdk.adapters.base import BaseAdapter
from osbclient.sdk.adapters.http import HttpAdapter

logger = get_logger(__name__)


class BrokerClient:
    """
    Client for a single Open Service Broker.

    Configuration is validated here and read-only afterwards; the client
    keeps no per-call state, so one instance may be shared by threads.

    Local validation failures (missing identifiers, operations newer than
    the configured API version, malformed originating identity) are raised
    before any I/O. Transport failures are raised as TransportError. Broker
    failures are returned as FAILURE outcomes; ``outcome.result()`` raises
    the carried BrokerError.
    """

    def __init__(
        self,
        config: ClientConfiguration,
        adapter: Optional[BaseAdapter] = None,
    ):
        """
        Initialize the client.

        Args:
            config: Client configuration (URL, API version, alpha flag, auth, TLS)
            adapter: Transport adapter; defaults to an HttpAdapter built from config

        Raises:
            InvalidConfigurationError: If configuration is invalid, including
                both basic and bearer credentials being configured
        """
        validate_config(config)

        self.config = config
        self.name = config.name
        self.api_version = config.api_version
        self.enable_alpha_features = config.enable_alpha_features

        self._builder = RequestBuilder(
            base_url=config.url,
            api_version=config.api_version,
            enable_alpha_features=config.enable_alpha_features,
            auth=config.auth,
        )
        self._interpreter = ResponseInterpreter(
            api_version=config.api_version,
            enable_alpha_features=config.enable_alpha_features,
            name=config.name,
            verbose=config.verbose,
        )
        self._adapter = adapter or HttpAdapter(
            timeout=config.timeout_seconds,
            tls=config.tls,
            connect_retries=config.connect_retries,
        )

        logger.info(
            f"Initialized broker client {config.name!r} for {self._builder.base_url} "
            f"(API {config.api_version}, alpha={config.enable_alpha_features})"
        )

    @classmethod
    def from_config_file(cls, config_path: Optional[str] = None) -> "BrokerClient":
        """Create a client from a YAML configuration file."""
        return cls(load_config(config_path))

    def close(self) -> None:
        """Release the transport adapter."""
        self._adapter.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def execute(
        self,
        operation: Operation,
        request: Any,
        extra_params: Optional[Dict[str, str]] = None,
    ) -> OperationOutcome:
        """
        Build, send and classify one operation.

        Raises:
            MissingRequiredFieldError: If a required identifier is empty
            OperationNotAllowedError: If the operation is newer than the API version
            RequestEncodingError: If the request body cannot be serialized
            TransportError: If the request could not be exchanged
        """
        wire_request = self._builder.build(operation, request, extra_params)
        request_id = wire_request.headers[REQUEST_IDENTITY_HEADER]

        with correlation_scope(request_id):
            log_broker_request(
                logger,
                broker=self.name,
                method=wire_request.method,
                url=wire_request.url,
                request_id=request_id,
                api_version=self.api_version.label,
                operation=operation.name,
            )
            if self.config.verbose:
                logger.info(f"broker {self.name!r}: doing request to {wire_request.url!r}")

            response = self._adapter.send(wire_request)
            return self._interpreter.interpret(
                operation,
                response,
                accepts_incomplete=self._builder.accepts_incomplete(operation, request),
            )

    # Catalog

    def get_catalog(
        self,
        request: Optional[m.CatalogRequest] = None,
        extra_params: Optional[Dict[str, str]] = None,
    ) -> OperationOutcome:
        """Fetch the broker's catalog of services and plans."""
        return self.execute(ops.GET_CATALOG, request or m.CatalogRequest(), extra_params)

    # Instances

    def provision_instance(
        self,
        request: m.ProvisionRequest,
        extra_params: Optional[Dict[str, str]] = None,
    ) -> OperationOutcome:
        """Provision a new service instance."""
        return self.execute(ops.PROVISION_INSTANCE, request, extra_params)

    def update_instance(
        self,
        request: m.UpdateInstanceRequest,
        extra_params: Optional[Dict[str, str]] = None,
    ) -> OperationOutcome:
        """Update the plan or parameters of a service instance."""
        return self.execute(ops.UPDATE_INSTANCE, request, extra_params)

    def deprovision_instance(
        self,
        request: m.DeprovisionRequest,
        extra_params: Optional[Dict[str, str]] = None,
    ) -> OperationOutcome:
        """Deprovision a service instance. 410 Gone counts as success."""
        return self.execute(ops.DEPROVISION_INSTANCE, request, extra_params)

    def get_instance(
        self,
        request: m.GetInstanceRequest,
        extra_params: Optional[Dict[str, str]] = None,
    ) -> OperationOutcome:
        """Fetch a service instance. Requires API 2.14."""
        return self.execute(ops.GET_INSTANCE, request, extra_params)

    def poll_last_operation(
        self,
        request: m.LastOperationRequest,
        extra_params: Optional[Dict[str, str]] = None,
    ) -> OperationOutcome:
        """Query the state of an instance's asynchronous operation."""
        return self.execute(ops.POLL_LAST_OPERATION, request, extra_params)

    # Bindings

    def bind(
        self,
        request: m.BindRequest,
        extra_params: Optional[Dict[str, str]] = None,
    ) -> OperationOutcome:
        """Create a binding. Asynchronous binding requires API 2.14."""
        return self.execute(ops.BIND, request, extra_params)

    def unbind(
        self,
        request: m.UnbindRequest,
        extra_params: Optional[Dict[str, str]] = None,
    ) -> OperationOutcome:
        """Delete a binding. 410 Gone counts as success."""
        return self.execute(ops.UNBIND, request, extra_params)

    def get_binding(
        self,
        request: m.GetBindingRequest,
        extra_params: Optional[Dict[str, str]] = None,
    ) -> OperationOutcome:
        """Fetch a binding. Requires API 2.14."""
        return self.execute(ops.GET_BINDING, request, extra_params)

    def rotate_binding(
        self,
        request: m.RotateBindingRequest,
        extra_params: Optional[Dict[str, str]] = None,
    ) -> OperationOutcome:
        """Create a binding that replaces a predecessor. Requires API 2.17."""
        return self.execute(ops.ROTATE_BINDING, request, extra_params)

    def poll_binding_last_operation(
        self,
        request: m.BindingLastOperationRequest,
        extra_params: Optional[Dict[str, str]] = None,
    ) -> OperationOutcome:
        """Query the state of a binding's asynchronous operation. Requires API 2.14."""
        return self.execute(ops.POLL_BINDING_LAST_OPERATION, request, extra_params)

    # Polling

    def last_operation_request(self, operation: Operation, request: Any, outcome: OperationOutcome):
        """
        Build the last_operation query that follows an accepted request.

        The operation key from the accept response and the original service
        and plan identifiers are carried over unmodified.
        """
        common = dict(
            instance_id=request.instance_id,
            service_id=getattr(request, "service_id", None) or None,
            plan_id=getattr(request, "plan_id", None) or None,
            operation=outcome.operation_key,
            originating_identity=getattr(request, "originating_identity", None),
        )
        if operation.polled_by == ops.POLL_BINDING_LAST_OPERATION.name:
            return m.BindingLastOperationRequest(binding_id=request.binding_id, **common)
        return m.LastOperationRequest(**common)

    def poller_for(
        self,
        operation: Operation,
        request: Any,
        outcome: OperationOutcome,
        cancel_event: Optional[threading.Event] = None,
        deadline_seconds: Optional[float] = None,
        **kwargs,
    ) -> LastOperationPoller:
        """
        Create a poller for an operation the broker accepted asynchronously.

        Polling defaults come from the client's PollingConfig; keyword
        arguments override them.

        Raises:
            ValueError: If the operation is not pollable or the outcome is not
                an asynchronous acceptance
        """
        if operation.polled_by is None:
            raise ValueError(f"{operation.name} has no last_operation query")
        if not outcome.is_async:
            raise ValueError(
                f"{operation.name} outcome is {outcome.kind.value}, not an asynchronous acceptance"
            )

        poll_request = self.last_operation_request(operation, request, outcome)
        poll_operation = ops.OPERATIONS[operation.polled_by]
        polling = self.config.polling

        settings = dict(
            default_delay=polling.default_delay_seconds,
            max_delay=polling.max_delay_seconds,
            max_retries=polling.max_retries,
            deadline_seconds=(
                deadline_seconds if deadline_seconds is not None else polling.deadline_seconds
            ),
            gone_means_succeeded=operation.gone_is_success,
            cancel_event=cancel_event,
        )
        settings.update(kwargs)

        return LastOperationPoller(
            query=lambda: self.execute(poll_operation, poll_request),
            operation_name=operation.name,
            **settings,
        )

    def wait_for_completion(
        self,
        operation: Operation,
        request: Any,
        outcome: OperationOutcome,
        cancel_event: Optional[threading.Event] = None,
        deadline_seconds: Optional[float] = None,
        **kwargs,
    ) -> PollResult:
        """
        Poll an asynchronously accepted operation until it reaches a terminal state.

        Raises:
            PollExceededRetriesError: If transient errors exceeded the retry budget
        """
        poller = self.poller_for(
            operation, request, outcome,
            cancel_event=cancel_event, deadline_seconds=deadline_seconds, **kwargs,
        )
        return poller.run()
