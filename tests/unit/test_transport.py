from __future__ import annotations

import xmlrpc.client

import httpx
import pytest

from confluence_client.errors import ConfluenceFault, ConfluenceTransportError
from confluence_client.transport import XmlRpcTransport, normalize_endpoint


def _response(value) -> httpx.Response:
    body = xmlrpc.client.dumps((value,), methodresponse=True, allow_none=True)
    return httpx.Response(200, content=body.encode("utf-8"))


def _fault(code: int, text: str) -> httpx.Response:
    body = xmlrpc.client.dumps(xmlrpc.client.Fault(code, text), methodresponse=True)
    return httpx.Response(200, content=body.encode("utf-8"))


@pytest.mark.parametrize(
    "url,expected",
    [
        ("https://wiki.example.com", "https://wiki.example.com/rpc/xmlrpc"),
        ("https://wiki.example.com/", "https://wiki.example.com/rpc/xmlrpc"),
        ("https://wiki.example.com/rpc/xmlrpc", "https://wiki.example.com/rpc/xmlrpc"),
        ("https://wiki.example.com/rpc/xmlrpc/", "https://wiki.example.com/rpc/xmlrpc"),
    ],
)
def test_normalize_endpoint(url, expected):
    assert normalize_endpoint(url) == expected


def test_normalize_endpoint_rejects_empty():
    with pytest.raises(ValueError):
        normalize_endpoint("")


def test_call_encodes_method_and_params():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["content_type"] = request.headers.get("content-type")
        seen["params"], seen["method"] = xmlrpc.client.loads(request.content)
        return _response({"key": "foo", "name": "Foo"})

    client = httpx.Client(transport=httpx.MockTransport(handler))
    with XmlRpcTransport("https://wiki.example.com", client=client) as rpc:
        space = rpc.call("confluence1.getSpace", ["tok", "foo"])

    assert space == {"key": "foo", "name": "Foo"}
    assert seen["url"] == "https://wiki.example.com/rpc/xmlrpc"
    assert seen["content_type"] == "text/xml"
    assert seen["method"] == "confluence1.getSpace"
    assert seen["params"] == ("tok", "foo")


def test_call_raises_fault():
    def handler(_: httpx.Request) -> httpx.Response:
        return _fault(0, "java.lang.Exception: com.atlassian.confluence.rpc.RemoteException: No space")

    client = httpx.Client(transport=httpx.MockTransport(handler))
    rpc = XmlRpcTransport("https://wiki.example.com", client=client)
    with pytest.raises(ConfluenceFault) as exc_info:
        rpc.call("confluence1.getSpace", ["tok", "nope"])

    assert exc_info.value.fault_code == 0
    assert exc_info.value.fault_string.endswith("No space")


def test_call_raises_on_http_error():
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="Service Unavailable")

    client = httpx.Client(transport=httpx.MockTransport(handler))
    rpc = XmlRpcTransport("https://wiki.example.com", client=client)
    with pytest.raises(ConfluenceTransportError, match="HTTP 503"):
        rpc.call("confluence1.getSpaces", ["tok"])


def test_call_raises_on_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = httpx.Client(transport=httpx.MockTransport(handler))
    rpc = XmlRpcTransport("https://wiki.example.com", client=client)
    with pytest.raises(ConfluenceTransportError, match="connection refused"):
        rpc.call("confluence1.login", ["u", "p"])


def test_call_raises_on_garbage_body():
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>login page</html>")

    client = httpx.Client(transport=httpx.MockTransport(handler))
    rpc = XmlRpcTransport("https://wiki.example.com", client=client)
    with pytest.raises(ConfluenceTransportError):
        rpc.call("confluence1.login", ["u", "p"])


def test_injected_client_is_not_closed():
    client = httpx.Client(transport=httpx.MockTransport(lambda r: _response(True)))
    rpc = XmlRpcTransport("https://wiki.example.com", client=client)
    rpc.close()
    assert client.is_closed is False


def test_timeout_applies_to_injected_client():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["timeout"] = request.extensions.get("timeout")
        return _response("TOKEN")

    client = httpx.Client(transport=httpx.MockTransport(handler), timeout=5.0)
    rpc = XmlRpcTransport("https://wiki.example.com", timeout=42.0, client=client)
    rpc.call("confluence1.login", ["u", "p"])

    assert seen["timeout"]["read"] == 42.0
    assert seen["timeout"]["connect"] == 42.0
