from __future__ import annotations

import re
from typing import Optional


# Confluence wraps every remote exception in this Java boilerplate
_FAULT_PREFIX_RE = re.compile(
    r"^java\.lang\.Exception: com\.atlassian\.confluence\.rpc\.RemoteException:\s+",
    re.MULTILINE,
)


class ConfluenceError(RuntimeError):
    """Base error for the Confluence client."""


class ConfluenceFault(ConfluenceError):
    """The remote service answered with an XML-RPC fault."""

    def __init__(self, fault_code: int, fault_string: str) -> None:
        super().__init__(fault_string)
        self.fault_code = fault_code
        self.fault_string = fault_string


class ConfluenceTransportError(ConfluenceError):
    """HTTP-level failure or a response that could not be decoded."""


def tidy_fault_text(text: Optional[str]) -> str:
    """Strip the Java exception prefix Confluence puts in front of fault messages.

    Text without the prefix comes back unchanged.
    """
    if text is None:
        return ""
    return _FAULT_PREFIX_RE.sub("", text)


__all__ = [
    "ConfluenceError",
    "ConfluenceFault",
    "ConfluenceTransportError",
    "tidy_fault_text",
]
