from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Optional

import httpx

from .config import DEFAULT_NAMESPACE, ConfluenceSettings
from .errors import ConfluenceFault, tidy_fault_text
from .result import CallResult
from .transport import DEFAULT_TIMEOUT, XmlRpcTransport


logger = logging.getLogger(__name__)

NOT_AUTHENTICATED = "not authenticated"
GROUP_NOT_FOUND = "group not found"


class Client:
    """
    Client for the Confluence XML-RPC API.

    Usage
        with Client("https://wiki.example.com") as confluence:
            if confluence.login(user, password):
                space = confluence.get_space("foo")
                if space is None:
                    print(confluence.error)

    Notes
    - Failures never raise: they are recorded on `error` and reported through
      `ok`. Check `ok` (or the convenience method's return value) after every
      call before trusting a result.
    - `invoke(op, *args)` calls any remote operation with the session token
      prepended and returns a `CallResult`. Unknown attributes forward the same
      way, e.g. `confluence.getPages("foo")`, returning the value or False.
    - Instances hold mutable session state (token, last error) and are not
      safe to share between threads without external locking.
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        namespace: str = DEFAULT_NAMESPACE,
        transport: Optional[XmlRpcTransport] = None,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        if not url:
            raise ValueError("url is required")
        self._transport = transport or XmlRpcTransport(url, timeout=timeout, client=http_client)
        self._namespace = namespace
        self.error: Optional[str] = None
        self.token: Optional[str] = None
        self.user: Optional[str] = None

    @classmethod
    def from_settings(
        cls, settings: ConfluenceSettings, *, http_client: Optional[httpx.Client] = None
    ) -> "Client":
        return cls(
            settings.url,
            timeout=settings.timeout,
            namespace=settings.namespace,
            http_client=http_client,
        )

    def close(self) -> None:
        self._transport.close()

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # --------------- Status ---------------
    @property
    def ok(self) -> bool:
        """Was the last request successful?"""
        return self.error is None

    @property
    def has_error(self) -> bool:
        return not self.ok

    # --------------- Session ---------------
    def login(self, user: str, password: str) -> bool:
        """Authenticate and store the session token. Returns `ok`."""
        if user is None or password is None:
            raise ValueError("user and password are required")
        self.user = user
        try:
            self.token = self._transport.call(self._qualify("login"), [user, password])
            self.error = None
        except ConfluenceFault as fault:
            self.error = tidy_fault_text(fault.fault_string)
        except Exception as exc:
            self.error = tidy_fault_text(str(exc)) or type(exc).__name__

        if self.ok:
            logger.info("Logged in to Confluence as %s", user)
        else:
            logger.warning("Confluence login failed for %s: %s", user, self.error)
        return self.ok

    def logout(self) -> bool:
        result = self.invoke("logout")
        if result.ok:
            logger.info("Logged out of Confluence")
            self.token = None
        return result.ok

    # --------------- Forwarding ---------------
    def invoke(self, operation: str, *args: Any) -> CallResult:
        """Call remote `operation` with the session token as first argument."""
        if self.token is None:
            self.error = NOT_AUTHENTICATED
            return CallResult.failure(operation, NOT_AUTHENTICATED)

        self.error = None
        try:
            value = self._transport.call(self._qualify(operation), [self.token, *args])
        except ConfluenceFault as fault:
            self.error = tidy_fault_text(fault.fault_string)
        except Exception as exc:
            self.error = tidy_fault_text(str(exc)) or type(exc).__name__
        else:
            return CallResult.success(operation, value)

        logger.warning("Confluence call %s failed: %s", operation, self.error)
        return CallResult.failure(operation, self.error)

    def __getattr__(self, name: str) -> Callable[..., Any]:
        # Only reached for names not defined on the instance or class
        if name.startswith("_"):
            raise AttributeError(name)

        def _forward(*args: Any) -> Any:
            return self.invoke(name, *args).unwrap_or(False)

        _forward.__name__ = name
        return _forward

    def _qualify(self, operation: str) -> str:
        return f"{self._namespace}.{operation}"

    # --------------- Spaces ---------------
    def add_space(self, key: str, name: str, description: str) -> Optional[Dict[str, Any]]:
        """Create a space. Returns the space mapping or None."""
        space = {"key": key, "name": name, "description": description}
        return self.invoke("addSpace", space).unwrap_or(None)

    def get_space(self, key: str) -> Optional[Dict[str, Any]]:
        return self.invoke("getSpace", key).unwrap_or(None)

    def remove_space(self, key: str) -> bool:
        return bool(self.invoke("removeSpace", key).unwrap_or(False))

    # --------------- Users ---------------
    def add_user(
        self, login: str, name: str, email: str, password: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Create a user and return it as stored by Confluence (or None).

        Without a password the current Unix time, as a string, is used.
        """
        user = {"email": email, "fullname": name, "name": login}
        result = self.invoke("addUser", user, password or str(int(time.time())))
        if not result.ok:
            return None
        return self.get_user(login)

    def get_user(self, login: str) -> Optional[Dict[str, Any]]:
        return self.invoke("getUser", login).unwrap_or(None)

    def remove_user(self, login: str) -> bool:
        return bool(self.invoke("removeUser", login).unwrap_or(False))

    # --------------- Groups ---------------
    def add_group(self, name: str) -> Optional[Dict[str, str]]:
        if self.invoke("addGroup", name).ok:
            return {"name": name}
        return None

    def get_group(self, name: str) -> Optional[Dict[str, str]]:
        """Look a group up in the full group listing; there is no per-group call."""
        result = self.invoke("getGroups")
        if not result.ok:
            return None
        groups = result.value if isinstance(result.value, (list, tuple)) else []
        if name in groups:
            return {"name": name}
        self.error = GROUP_NOT_FOUND
        return None

    def remove_group(self, name: str, default_group: str = "") -> bool:
        """Remove a group; its members move to `default_group` when given."""
        return bool(self.invoke("removeGroup", name, default_group).unwrap_or(False))


__all__ = [
    "Client",
    "GROUP_NOT_FOUND",
    "NOT_AUTHENTICATED",
]
