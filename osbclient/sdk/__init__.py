"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
osbclient, a product of Garudex Labs

Python SDK for Open Service Broker APIs.
"""

from osbclient.sdk.client import BrokerClient

__all__ = [
    "BrokerClient",
]
