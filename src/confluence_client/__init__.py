"""
Client for the Confluence XML-RPC API.

Modules:
- client: session handling, call forwarding, space/user/group helpers
- transport: XML-RPC over httpx
- config: settings from environment variables or AWS SSM
- result: CallResult value type
- errors: exception types and fault-text cleanup
"""

from .client import Client
from .config import ConfluenceSettings
from .errors import ConfluenceError, ConfluenceFault, ConfluenceTransportError, tidy_fault_text
from .result import CallResult
from .transport import XmlRpcTransport, normalize_endpoint

__all__ = [
    "CallResult",
    "Client",
    "ConfluenceError",
    "ConfluenceFault",
    "ConfluenceSettings",
    "ConfluenceTransportError",
    "XmlRpcTransport",
    "normalize_endpoint",
    "tidy_fault_text",
]
