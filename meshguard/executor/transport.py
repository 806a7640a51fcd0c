"""
meshguard/executor/transport.py

Purpose:
    The single place outbound probe traffic leaves the harness.
    Wraps httpx.Client; one pooled client per calling identity (outbound proxy).

Standards:
    - Exactly one request per call(). Retrying is the assertion engine's job.
    - Redirects are never followed: an authn 302 must be observed as a 302.
    - httpx transport failures surface as TransportError.
    - Echo reflection: echo workloads report the request headers they received
      as `RequestHeader=Name:Value` lines in the body; those are overlaid on the
      response headers so expectations see what the target actually got.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Tuple

import httpx

from meshguard.base.config import TransportConfig
from meshguard.catalog.models import Workload
from meshguard.errors import ErrorCode, TransportError

from .models import CallResponse

logger = logging.getLogger(__name__)

USER_AGENT = "meshguard/0.1"

# Optional "[n body] " prefix the echo server adds per response
_REFLECTED_HEADER_RE = re.compile(r"^(?:\[[^\]]*\]\s*)?RequestHeader=([^:]+):(.*)$")


def parse_reflected_headers(body: str) -> Dict[str, str]:
    """Extract request headers reflected by an echo workload; later lines win."""
    reflected: Dict[str, str] = {}
    for line in body.splitlines():
        match = _REFLECTED_HEADER_RE.match(line.strip())
        if match:
            reflected[match.group(1).strip()] = match.group(2).strip()
    return reflected


class HttpCallSurface:
    """
    httpx-backed CallSurface. Manages its own connection pools; call close()
    (or use it as a context manager) when the run ends.
    """

    def __init__(
        self,
        config: Optional[TransportConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._config = config or TransportConfig()
        # Injectable for tests (httpx.MockTransport)
        self._transport = transport
        self._clients: Dict[Optional[str], httpx.Client] = {}

    def _client_for(self, source: Optional[Workload]) -> httpx.Client:
        proxy = source.proxy if source is not None else None
        client = self._clients.get(proxy)
        if client is None or client.is_closed:
            kwargs = {}
            if self._transport is not None:
                kwargs["transport"] = self._transport
            elif proxy:
                kwargs["proxy"] = proxy
            client = httpx.Client(
                headers={"User-Agent": USER_AGENT},
                timeout=self._config.request_timeout,
                verify=self._config.verify_tls,
                follow_redirects=False,
                **kwargs,
            )
            self._clients[proxy] = client
        return client

    def call(
        self,
        url: str,
        headers: List[Tuple[str, str]],
        *,
        source: Optional[Workload] = None,
        host: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> CallResponse:
        request_headers = list(headers)
        if host:
            request_headers.append(("Host", host))

        request_timeout = self._config.request_timeout
        if timeout is not None:
            request_timeout = max(0.0, min(request_timeout, timeout))

        client = self._client_for(source)
        try:
            response = client.get(url, headers=request_headers, timeout=request_timeout)
        except httpx.TimeoutException as e:
            raise TransportError(
                f"Timed out calling {url}",
                details={"url": url, "error_type": type(e).__name__, "timeout": request_timeout},
                code=ErrorCode.TRANSPORT_TIMEOUT,
            ) from e
        except httpx.RequestError as e:
            raise TransportError(
                f"Failed calling {url}: {e}",
                details={"url": url, "error_type": type(e).__name__},
            ) from e

        observed = dict(response.headers.items())
        reflected = parse_reflected_headers(response.text)
        if reflected:
            # Response headers of the same name are shadowed by what the target received
            for name in list(observed):
                if any(name.lower() == r.lower() for r in reflected):
                    del observed[name]
            observed.update(reflected)

        logger.debug("GET %s -> %d", url, response.status_code)
        return CallResponse(status_code=response.status_code, headers=observed)

    def close(self) -> None:
        for client in self._clients.values():
            if not client.is_closed:
                client.close()
        self._clients.clear()

    def __enter__(self) -> "HttpCallSurface":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
