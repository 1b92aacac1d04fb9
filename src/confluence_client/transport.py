from __future__ import annotations

import logging
import xmlrpc.client
from typing import Any, Optional, Sequence

import httpx

from .errors import ConfluenceFault, ConfluenceTransportError


logger = logging.getLogger(__name__)

RPC_PATH = "/rpc/xmlrpc"
DEFAULT_TIMEOUT = 305.0


def normalize_endpoint(url: str) -> str:
    """Return the XML-RPC endpoint for a Confluence base URL.

    `/rpc/xmlrpc` is appended unless the URL already ends with it
    (trailing slashes are dropped first).
    """
    if not url:
        raise ValueError("url is required")
    url = url.rstrip("/")
    if url.endswith(RPC_PATH):
        return url
    return url + RPC_PATH


class XmlRpcTransport:
    """
    XML-RPC over HTTP, using httpx for the wire.

    Notes
    - Request/response bodies are encoded with `xmlrpc.client.dumps`/`loads`
      (`allow_none=True`, Confluence accepts nil values).
    - A single fixed timeout applies to every request. There are no retries.
    - Faults come back as `ConfluenceFault`; everything else that goes wrong
      (network, HTTP status, undecodable body) as `ConfluenceTransportError`.
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._url = normalize_endpoint(url)
        self._timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=self._timeout)

    @property
    def url(self) -> str:
        return self._url

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "XmlRpcTransport":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def call(self, method: str, params: Sequence[Any] = ()) -> Any:
        """Invoke `method` remotely and return its decoded result."""
        body = xmlrpc.client.dumps(tuple(params), methodname=method, allow_none=True)
        logger.debug("XML-RPC call %s -> %s", method, self._url)
        try:
            resp = self._client.post(
                self._url,
                content=body.encode("utf-8"),
                headers={"Content-Type": "text/xml"},
                timeout=self._timeout,
            )
        except (httpx.TimeoutException, httpx.TransportError) as exc:
            raise ConfluenceTransportError(f"Request to {self._url} failed: {exc}") from exc

        if resp.status_code != 200:
            raise ConfluenceTransportError(
                f"HTTP {resp.status_code} from Confluence: {resp.text[:200]}"
            )

        try:
            values, _ = xmlrpc.client.loads(resp.content, use_builtin_types=True)
        except xmlrpc.client.Fault as fault:
            raise ConfluenceFault(fault.faultCode, fault.faultString) from fault
        except Exception as exc:  # expat or unmarshaller errors
            raise ConfluenceTransportError("Failed to decode XML-RPC response") from exc

        # A method response carries exactly one value
        return values[0] if values else None


__all__ = [
    "DEFAULT_TIMEOUT",
    "RPC_PATH",
    "XmlRpcTransport",
    "normalize_endpoint",
]
