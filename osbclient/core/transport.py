"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
osbclient, a product of Garudex Labs

Transport-agnostic request and response representations.

The request builder produces a ``BrokerRequest``; an adapter turns it into a
``BrokerResponse`` whose body is a readable stream owned by the adapter.
"""

from __future__ import annotations

import io
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional, Protocol

from osbclient.logging_config import get_logger

logger = get_logger(__name__)

# Bytes read and discarded from an unconsumed body before it is closed.
DRAIN_LIMIT = 4096


class BodyStream(Protocol):
    def read(self, amt: Optional[int] = None) -> bytes: ...

    def close(self) -> None: ...


@dataclass
class BrokerRequest:
    """Outbound broker request representation."""
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    params: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None


@dataclass
class BrokerResponse:
    """Inbound broker response representation."""
    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)
    stream: Any = None
    elapsed_ms: float = 0.0

    def __post_init__(self):
        if self.stream is None or isinstance(self.stream, (bytes, str)):
            data = self.stream or b""
            self.stream = io.BytesIO(data.encode("utf-8") if isinstance(data, str) else data)
        self.headers = {k.lower(): v for k, v in self.headers.items()}

    def header(self, name: str) -> Optional[str]:
        return self.headers.get(name.lower())

    def read(self) -> bytes:
        return self.stream.read()

    def drain(self) -> None:
        """Discard up to DRAIN_LIMIT unread bytes so the connection can be reused."""
        self.stream.read(DRAIN_LIMIT)

    def close(self) -> None:
        self.stream.close()


@contextmanager
def scoped_body(response: BrokerResponse) -> Iterator[BrokerResponse]:
    """
    Hold a response body for the duration of the block.

    On every exit path the remaining body is drained (up to DRAIN_LIMIT
    bytes) and the stream closed. Errors raised while draining are not
    allowed to mask the block's own result.
    """
    try:
        yield response
    finally:
        try:
            response.drain()
        except (OSError, ValueError) as e:
            logger.debug(f"Failed to drain response body: {e}")
        response.close()
