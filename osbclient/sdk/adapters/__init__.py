"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
osbclient, a product of Garudex Labs

Transport adapters.
"""

from osbclient.sdk.adapters.base import BaseAdapter, BrokerRequest, BrokerResponse
from osbclient.sdk.adapters.http import HttpAdapter
from osbclient.sdk.adapters.mock import MockAdapter

__all__ = [
    "BaseAdapter",
    "BrokerRequest",
    "BrokerResponse",
    "HttpAdapter",
    "MockAdapter",
]
