"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
osbclient, a product of Garudex Labs

HTTP transport adapter (default).
"""

from __future__ import annotations

import time
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from osbclient.config.settings import TLSConfig
from osbclient.core.transport import BrokerRequest, BrokerResponse
from osbclient.exceptions import TransportError
from osbclient.logging_config import get_logger
from osbclient.sdk.adapters.base import BaseAdapter

logger = get_logger(__name__)


class _StreamedBody:
    """Body stream over a ``requests`` response opened with ``stream=True``."""

    def __init__(self, response: requests.Response) -> None:
        self._response = response

    def read(self, amt: Optional[int] = None) -> bytes:
        return self._response.raw.read(amt, decode_content=True) or b""

    def close(self) -> None:
        self._response.close()


class HttpAdapter(BaseAdapter):
    """Default HTTP transport using a pooled ``requests.Session``.

    The session is shared between calls; nothing per-request is kept on the
    adapter. Proxies are taken from the environment by ``requests``.

    Args:
        timeout: Request timeout in seconds.
        tls: TLS verification settings.
        pool_maxsize: Maximum pooled connections per host.
        connect_retries: Retries for failed connection attempts. Requests that
            reached the broker are never retried here.
        backoff_factor: Backoff between connection retries.
    """

    def __init__(
        self,
        timeout: int = 60,
        tls: Optional[TLSConfig] = None,
        pool_maxsize: int = 20,
        connect_retries: int = 2,
        backoff_factor: float = 0.5,
    ) -> None:
        self._timeout = timeout
        self._tls = tls or TLSConfig()
        self._session: Optional[requests.Session] = requests.Session()

        # Only connection setup is retried
        retry_strategy = Retry(
            total=connect_retries,
            connect=connect_retries,
            read=0,
            status=0,
            backoff_factor=backoff_factor,
        )
        adapter = HTTPAdapter(
            max_retries=retry_strategy,
            pool_connections=10,
            pool_maxsize=pool_maxsize,
        )
        self._session.mount("http://", adapter)
        self._session.mount("https://", adapter)

        if self._tls.insecure:
            self._session.verify = False
        elif self._tls.ca_file:
            self._session.verify = self._tls.ca_file
        if self._tls.client_cert_file:
            if self._tls.client_key_file:
                self._session.cert = (self._tls.client_cert_file, self._tls.client_key_file)
            else:
                self._session.cert = self._tls.client_cert_file

    def send(self, request: BrokerRequest) -> BrokerResponse:
        if self._session is None:
            raise TransportError("HTTP adapter is closed")

        start = time.monotonic()
        try:
            resp = self._session.request(
                method=request.method,
                url=request.url,
                headers=request.headers,
                params=request.params or None,
                data=request.body,
                timeout=self._timeout,
                stream=True,
            )
        except requests.exceptions.Timeout as e:
            logger.error(f"Request timeout: {request.method} {request.url}")
            raise TransportError(f"Request timeout: {e}") from e
        except requests.exceptions.ConnectionError as e:
            logger.error(f"Connection error: {request.method} {request.url}")
            raise TransportError(f"Connection error: {e}") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Request failed: {request.method} {request.url}")
            raise TransportError(f"Request failed: {e}") from e
        elapsed = (time.monotonic() - start) * 1000

        return BrokerResponse(
            status_code=resp.status_code,
            headers=dict(resp.headers),
            stream=_StreamedBody(resp),
            elapsed_ms=round(elapsed, 2),
        )

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None
            logger.debug("Closed HTTP adapter session")

    @property
    def is_connected(self) -> bool:
        return self._session is not None
