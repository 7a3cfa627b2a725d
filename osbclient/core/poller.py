"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
osbclient, a product of Garudex Labs

Polling of asynchronous broker operations.

The poller repeatedly issues a last_operation query until the broker reports
a terminal state, the caller cancels, or the deadline elapses. Transient
errors (transport failures and unparseable bodies) are retried with the same
wait policy as an in-progress report, up to a retry budget.
"""

import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from osbclient.core.messages import LastOperationResponse, LastOperationState
from osbclient.core.response import OperationOutcome
from osbclient.exceptions import (
    BrokerError,
    PollCancelledError,
    PollExceededRetriesError,
    TransportError,
)
from osbclient.logging_config import get_logger, log_poll_attempt

logger = get_logger(__name__)

DEFAULT_POLL_DELAY_SECONDS = 5.0
DEFAULT_MAX_RETRIES = 3
# Upper bound on any single wait when no max_delay is configured
MAX_POLL_DELAY_SECONDS = 3600.0


class PollState(Enum):
    STARTED = "started"
    POLLING = "polling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    ABANDONED = "abandoned"


@dataclass
class PollResult:
    """
    Final state of a polling run.

    ``error`` is a PollCancelledError for ABANDONED runs, and the BrokerError
    when the last_operation query itself was rejected by the broker.
    """

    state: PollState
    description: Optional[str] = None
    attempts: int = 0
    last_response: Optional[LastOperationResponse] = None
    error: Optional[Exception] = None

    @property
    def succeeded(self) -> bool:
        return self.state is PollState.SUCCEEDED


class LastOperationPoller:
    """
    Drives one asynchronous operation to a terminal state.

    Args:
        query: Issues one last_operation request and returns its outcome.
            Transport failures are expected to be raised as TransportError.
        operation_name: Name of the polled operation, for logging.
        default_delay: Seconds to wait when the broker gives no positive hint.
        max_delay: Ceiling applied to every wait; MAX_POLL_DELAY_SECONDS when unset.
        max_retries: Consecutive transient errors tolerated before giving up.
        deadline_seconds: Abandon polling once this much time has elapsed.
        gone_means_succeeded: Treat 410 Gone as success (deprovision, unbind).
        cancel_event: Event that abandons polling when set.
        sleep: Replacement for the cancellable wait (used by tests).
        clock: Monotonic clock used for the deadline.
    """

    def __init__(
        self,
        query: Callable[[], OperationOutcome],
        operation_name: str = "",
        default_delay: float = DEFAULT_POLL_DELAY_SECONDS,
        max_delay: Optional[float] = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        deadline_seconds: Optional[float] = None,
        gone_means_succeeded: bool = False,
        cancel_event: Optional[threading.Event] = None,
        sleep: Optional[Callable[[float], None]] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._query = query
        self.operation_name = operation_name
        self.default_delay = default_delay
        self.max_delay = max_delay
        self.max_retries = max_retries
        self.deadline_seconds = deadline_seconds
        self.gone_means_succeeded = gone_means_succeeded
        self._cancel_event = cancel_event or threading.Event()
        self._sleep = sleep
        self._clock = clock
        self._state = PollState.STARTED

    @property
    def state(self) -> PollState:
        return self._state

    def cancel(self) -> None:
        """Abandon polling before the next query is issued."""
        self._cancel_event.set()

    def next_delay(self, hint: Optional[float]) -> float:
        """Wait before the next query: positive broker hint, else the default, clamped."""
        delay = hint if hint is not None and hint > 0 else self.default_delay
        ceiling = self.max_delay if self.max_delay is not None else MAX_POLL_DELAY_SECONDS
        return min(delay, ceiling)

    def _pause(self, seconds: float, started_at: float) -> None:
        if self.deadline_seconds is not None:
            remaining = self.deadline_seconds - (self._clock() - started_at)
            seconds = max(0.0, min(seconds, remaining))
        if self._sleep is not None:
            self._sleep(seconds)
        else:
            self._cancel_event.wait(seconds)

    def _abandon_reason(self, started_at: float) -> Optional[str]:
        if self._cancel_event.is_set():
            return "polling cancelled"
        if self.deadline_seconds is not None and self._clock() - started_at >= self.deadline_seconds:
            return f"polling deadline of {self.deadline_seconds}s elapsed"
        return None

    def _finish(self, state: PollState, attempts: int, **kwargs) -> PollResult:
        self._state = state
        logger.info(
            f"Polling {self.operation_name} finished in state {state.value} "
            f"after {attempts} queries"
        )
        return PollResult(state=state, attempts=attempts, **kwargs)

    def run(self) -> PollResult:
        """
        Poll until a terminal state.

        Returns:
            PollResult in state SUCCEEDED, FAILED or ABANDONED

        Raises:
            PollExceededRetriesError: If transient errors exceeded max_retries
        """
        self._state = PollState.POLLING
        started_at = self._clock()
        attempts = 0
        consecutive_failures = 0
        last_response: Optional[LastOperationResponse] = None

        while True:
            reason = self._abandon_reason(started_at)
            if reason is not None:
                return self._finish(
                    PollState.ABANDONED,
                    attempts,
                    description=last_response.description if last_response else None,
                    last_response=last_response,
                    error=PollCancelledError(f"{reason} after {attempts} queries"),
                )

            attempts += 1
            try:
                outcome = self._query()
                transient_error = self._transient_error(outcome)
            except TransportError as e:
                transient_error = e

            if transient_error is not None:
                consecutive_failures += 1
                if consecutive_failures > self.max_retries:
                    # No terminal state was reported; the caller learns why from the exception.
                    self._state = PollState.ABANDONED
                    logger.error(
                        f"Polling {self.operation_name} gave up after "
                        f"{consecutive_failures} consecutive errors: {transient_error}"
                    )
                    raise PollExceededRetriesError(consecutive_failures, transient_error) from transient_error
                delay = self.next_delay(None)
                log_poll_attempt(
                    logger, self.operation_name, attempts, None,
                    delay_seconds=delay, error=str(transient_error),
                )
                self._pause(delay, started_at)
                continue

            consecutive_failures = 0

            if outcome.is_failure:
                error = outcome.error
                if error.is_gone and self.gone_means_succeeded:
                    return self._finish(PollState.SUCCEEDED, attempts, last_response=last_response)
                return self._finish(
                    PollState.FAILED,
                    attempts,
                    description=error.description,
                    last_response=last_response,
                    error=error,
                )

            last_response = outcome.response
            state = last_response.state
            if state is LastOperationState.SUCCEEDED:
                log_poll_attempt(logger, self.operation_name, attempts, state.value)
                return self._finish(
                    PollState.SUCCEEDED, attempts,
                    description=last_response.description, last_response=last_response,
                )
            if state is LastOperationState.FAILED:
                log_poll_attempt(logger, self.operation_name, attempts, state.value)
                return self._finish(
                    PollState.FAILED, attempts,
                    description=last_response.description, last_response=last_response,
                )

            delay = self.next_delay(last_response.poll_delay)
            log_poll_attempt(logger, self.operation_name, attempts, state.value, delay_seconds=delay)
            self._pause(delay, started_at)

    def _transient_error(self, outcome: OperationOutcome) -> Optional[BrokerError]:
        if not outcome.is_failure or outcome.error.response_error is None:
            return None
        # 410 ends deletion polling whatever its body
        if outcome.error.is_gone and self.gone_means_succeeded:
            return None
        return outcome.error
