"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
osbclient, a product of Garudex Labs

Mock transport adapter for local testing.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple, Union

from osbclient.core.transport import BrokerRequest, BrokerResponse
from osbclient.sdk.adapters.base import BaseAdapter

# A canned reaction: a response, an exception to raise, or a callable
# producing either from the request.
Reaction = Union[BrokerResponse, Exception, Callable[[BrokerRequest], BrokerResponse]]


class MockAdapter(BaseAdapter):
    """In-memory mock adapter for unit tests.

    Args:
        responses: Mapping from ``(method, url)`` tuples to a reaction or a
            list of reactions consumed in order (the last one repeats).

    Example::

        adapter = MockAdapter({
            ("GET", "http://broker/v2/catalog"): BrokerResponse(
                status_code=200, stream=b'{"services": []}'
            ),
        })
    """

    def __init__(
        self,
        responses: Optional[Dict[Tuple[str, str], Union[Reaction, List[Reaction]]]] = None,
    ) -> None:
        self._responses: Dict[Tuple[str, str], List[Reaction]] = {}
        for key, reaction in (responses or {}).items():
            self.add(key[0], key[1], reaction)
        self._sent: List[BrokerRequest] = []
        self._closed = False

    def add(self, method: str, url: str, reaction: Union[Reaction, List[Reaction]]) -> None:
        reactions = list(reaction) if isinstance(reaction, list) else [reaction]
        self._responses[(method.upper(), url)] = [_replayable(r) for r in reactions]

    def send(self, request: BrokerRequest) -> BrokerResponse:
        self._sent.append(request)
        key = (request.method.upper(), request.url)
        reactions = self._responses.get(key)
        if not reactions:
            return BrokerResponse(
                status_code=404,
                headers={},
                stream=b'{"error": "NotMocked"}',
            )
        reaction = reactions.pop(0) if len(reactions) > 1 else reactions[0]
        if isinstance(reaction, Exception):
            raise reaction
        return reaction(request)

    def close(self) -> None:
        # Sent requests stay available for assertions after the client closes.
        self._closed = True

    @property
    def is_connected(self) -> bool:
        return not self._closed

    @property
    def sent_requests(self) -> List[BrokerRequest]:
        """All requests that have been sent through this adapter."""
        return list(self._sent)


def _replayable(reaction: Reaction) -> Union[Exception, Callable[[BrokerRequest], BrokerResponse]]:
    """Turn a canned response into a factory so each send gets an unread body."""
    if not isinstance(reaction, BrokerResponse):
        return reaction
    status_code = reaction.status_code
    headers = dict(reaction.headers)
    body = reaction.read()

    def respond(request: BrokerRequest) -> BrokerResponse:
        return BrokerResponse(status_code=status_code, headers=dict(headers), stream=body)

    return respond
