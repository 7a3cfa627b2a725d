"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
osbclient, a product of Garudex Labs

osbclient - Versioned client for the Open Service Broker API

Provides version-gated request building, response classification and
polling of asynchronous operations against a single service broker.
"""

from osbclient._version import __version__

__all__ = ["__version__"]
