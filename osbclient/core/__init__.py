"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
osbclient, a product of Garudex Labs

Core protocol engine for osbclient.

This module contains the core primitives:
- API version registry
- Message records with per-field version and alpha gates
- Request builder and response interpreter
- Long-running operation poller
"""

from osbclient.core.poller import LastOperationPoller, PollResult, PollState
from osbclient.core.request_builder import RequestBuilder
from osbclient.core.response import OperationOutcome, OutcomeKind, ResponseInterpreter
from osbclient.core.version import APIVersion, all_versions, at_least, latest

__all__ = [
    "APIVersion",
    "LastOperationPoller",
    "OperationOutcome",
    "OutcomeKind",
    "PollResult",
    "PollState",
    "RequestBuilder",
    "ResponseInterpreter",
    "all_versions",
    "at_least",
    "latest",
]
