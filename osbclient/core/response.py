"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
osbclient, a product of Garudex Labs

Classification of broker responses.

The interpreter turns a ``BrokerResponse`` into an ``OperationOutcome``:
synchronous result, asynchronous acceptance or failure. Transport errors
never reach it; adapters raise them and they propagate unchanged.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from osbclient.core import codec
from osbclient.core.messages import LastOperationResponse, OperationKey
from osbclient.core.operations import Operation
from osbclient.core.transport import BrokerResponse, scoped_body
from osbclient.core.version import POLL_DELAY_VERSION, APIVersion
from osbclient.exceptions import BrokerError, DecodeError
from osbclient.logging_config import get_logger, log_broker_response

logger = get_logger(__name__)


class OutcomeKind(Enum):
    SYNC_RESULT = "sync_result"
    ASYNC_ACCEPTED = "async_accepted"
    FAILURE = "failure"


@dataclass
class OperationOutcome:
    """
    Result of a single broker call.

    Exactly one of ``response`` (sync or async) or ``error`` (failure) is
    meaningful. ``operation_key`` is only set for async acceptance, and only
    when the broker supplied one.
    """

    kind: OutcomeKind
    status_code: int
    response: Any = None
    operation_key: Optional[OperationKey] = None
    error: Optional[BrokerError] = None

    @classmethod
    def sync(cls, status_code: int, response: Any) -> "OperationOutcome":
        return cls(OutcomeKind.SYNC_RESULT, status_code, response=response)

    @classmethod
    def accepted(cls, status_code: int, response: Any, operation_key: Optional[OperationKey]) -> "OperationOutcome":
        return cls(OutcomeKind.ASYNC_ACCEPTED, status_code, response=response, operation_key=operation_key)

    @classmethod
    def failure(cls, error: BrokerError) -> "OperationOutcome":
        return cls(OutcomeKind.FAILURE, error.status_code, error=error)

    @property
    def is_async(self) -> bool:
        return self.kind is OutcomeKind.ASYNC_ACCEPTED

    @property
    def is_failure(self) -> bool:
        return self.kind is OutcomeKind.FAILURE

    def result(self) -> Any:
        """Return the typed response, raising the BrokerError on failure."""
        if self.error is not None:
            raise self.error
        return self.response


class ResponseInterpreter:
    """
    Classifies responses for one client configuration.

    Args:
        api_version: Active API version; fields newer than it are dropped.
        enable_alpha_features: Whether alpha-only response fields are kept.
        name: Broker name used in log events.
        verbose: Log raw response bodies.
    """

    def __init__(
        self,
        api_version: APIVersion,
        enable_alpha_features: bool = False,
        name: str = "",
        verbose: bool = False,
    ) -> None:
        self.api_version = api_version
        self.enable_alpha_features = enable_alpha_features
        self.name = name
        self.verbose = verbose

    def interpret(
        self,
        operation: Operation,
        response: BrokerResponse,
        accepts_incomplete: bool,
    ) -> OperationOutcome:
        """
        Classify ``response`` to a request for ``operation``.

        Args:
            operation: The operation the request was built for.
            response: Adapter response; its body is drained and closed here.
            accepts_incomplete: Whether the request opted into async handling
                on the wire. A 202 is only legal when this is True.
        """
        with scoped_body(response):
            status = response.status_code

            if status in operation.sync_statuses:
                outcome = self._sync_outcome(operation, response)
            elif status == 410 and operation.gone_is_success:
                outcome = OperationOutcome.sync(status, operation.response_type())
            elif status == 202 and accepts_incomplete:
                outcome = self._accepted_outcome(operation, response)
            else:
                outcome = OperationOutcome.failure(self.failure_error(response))

        log_broker_response(
            logger,
            broker=self.name,
            operation=operation.name,
            status_code=status,
            outcome=outcome.kind.value,
        )
        return outcome

    def _read(self, response: BrokerResponse) -> bytes:
        body = response.read()
        if self.verbose:
            logger.info(
                f"broker {self.name!r}: response body: {body.decode('utf-8', 'replace')}"
            )
        return body

    def _decode(self, operation: Operation, response: BrokerResponse):
        data = codec.loads(self._read(response))
        return codec.from_wire(
            operation.response_type, data, self.api_version, self.enable_alpha_features
        )

    def _sync_outcome(self, operation: Operation, response: BrokerResponse) -> OperationOutcome:
        try:
            result = self._decode(operation, response)
        except DecodeError as e:
            return OperationOutcome.failure(
                BrokerError(response.status_code, response_error=e)
            )
        if isinstance(result, LastOperationResponse):
            result.poll_delay = self.poll_delay(response)
        return OperationOutcome.sync(response.status_code, result)

    def _accepted_outcome(self, operation: Operation, response: BrokerResponse) -> OperationOutcome:
        try:
            result = self._decode(operation, response)
        except DecodeError as e:
            return OperationOutcome.failure(
                BrokerError(response.status_code, response_error=e)
            )
        if self.verbose:
            logger.info(f"broker {self.name!r}: received asynchronous response")
        return OperationOutcome.accepted(
            response.status_code, result, getattr(result, "operation", None)
        )

    def failure_error(self, response: BrokerResponse) -> BrokerError:
        """
        Build a BrokerError from a conventional failure body.

        ``error`` and ``description`` are copied only when present as strings.
        An unparseable body is recorded in ``response_error``.
        """
        try:
            data = codec.loads(self._read(response))
            if data is None:
                data = {}
            if not isinstance(data, dict):
                raise DecodeError(f"expected object, got {type(data).__name__}")
        except DecodeError as e:
            return BrokerError(response.status_code, response_error=e)

        error_message = data.get("error")
        description = data.get("description")
        return BrokerError(
            response.status_code,
            error_message=error_message if isinstance(error_message, str) else None,
            description=description if isinstance(description, str) else None,
        )

    def poll_delay(self, response: BrokerResponse) -> Optional[float]:
        """Seconds from the Retry-After header, on versions that define it."""
        if not self.api_version.at_least(POLL_DELAY_VERSION):
            return None
        raw = response.header("Retry-After")
        if raw is None:
            return None
        try:
            delay = float(raw.strip())
        except ValueError:
            delay = None
        if delay is None or not math.isfinite(delay) or delay < 0:
            logger.warning(f"broker {self.name!r}: ignoring invalid Retry-After header {raw!r}")
            return None
        return delay
