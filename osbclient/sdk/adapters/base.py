"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
osbclient, a product of Garudex Labs

Transport adapter base class.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from osbclient.core.transport import BrokerRequest, BrokerResponse


class BaseAdapter(ABC):
    """
    Abstract base for all transport adapters.

    Adapters are shared by concurrent callers and must not keep per-call
    state. Connection and timeout failures are raised as TransportError.
    """

    @abstractmethod
    def send(self, request: BrokerRequest) -> BrokerResponse:
        """Send a request and return the response with an unread body stream."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Release adapter resources."""
        ...

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """Whether the adapter is in a usable state."""
        ...


__all__ = ["BaseAdapter", "BrokerRequest", "BrokerResponse"]
