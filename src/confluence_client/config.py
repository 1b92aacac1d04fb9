from __future__ import annotations

import os
from typing import Mapping, Optional

import boto3
from botocore.exceptions import ClientError
from pydantic import BaseModel, Field

from .transport import DEFAULT_TIMEOUT


# Environment variable names
ENV_URL = "CONFLUENCE_URL"
ENV_USER = "CONFLUENCE_USER"
ENV_PASSWORD = "CONFLUENCE_PASSWORD"
ENV_TIMEOUT = "CONFLUENCE_TIMEOUT"
ENV_NAMESPACE = "CONFLUENCE_NAMESPACE"

ALL_ENV_VARS = (ENV_URL, ENV_USER, ENV_PASSWORD, ENV_TIMEOUT, ENV_NAMESPACE)

DEFAULT_NAMESPACE = "confluence1"

SSM_FIELDS = ("url", "user", "password")

# SSM error codes that mean "parameter not available" rather than a failure
_SSM_ABSENT_CODES = ("ParameterNotFound", "AccessDeniedException")


class ConfluenceSettings(BaseModel):
    """
    Connection settings for a Confluence XML-RPC endpoint.

    Sources
    - `from_env()`: CONFLUENCE_URL (required), CONFLUENCE_USER,
      CONFLUENCE_PASSWORD, CONFLUENCE_TIMEOUT, CONFLUENCE_NAMESPACE.
    - `from_ssm(prefix)`: `{prefix}url`, `{prefix}user`, `{prefix}password`
      from AWS SSM Parameter Store (SecureString values are decrypted).
    Empty values are treated as unset in both sources.
    """

    url: str = Field(..., min_length=1, description="Base URL or full XML-RPC endpoint")
    user: Optional[str] = None
    password: Optional[str] = None
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    namespace: str = Field(default=DEFAULT_NAMESPACE, min_length=1)

    @property
    def has_credentials(self) -> bool:
        return bool(self.user) and self.password is not None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ConfluenceSettings":
        env = os.environ if environ is None else environ
        values = {name: env.get(name) or None for name in ALL_ENV_VARS}
        url = cls._required_url(values[ENV_URL], ENV_URL)
        timeout = values[ENV_TIMEOUT]
        return cls(
            url=url,
            user=values[ENV_USER],
            password=values[ENV_PASSWORD],
            timeout=float(timeout) if timeout else DEFAULT_TIMEOUT,
            namespace=values[ENV_NAMESPACE] or DEFAULT_NAMESPACE,
        )

    @classmethod
    def from_ssm(cls, prefix: str, *, ssm=None) -> "ConfluenceSettings":
        client = ssm or boto3.client("ssm")
        values = {field: cls._read_parameter(client, f"{prefix}{field}") for field in SSM_FIELDS}
        url = cls._required_url(values["url"], f"{prefix}url")
        return cls(url=url, user=values["user"], password=values["password"])

    @staticmethod
    def _read_parameter(ssm, name: str) -> Optional[str]:
        try:
            resp = ssm.get_parameter(Name=name, WithDecryption=True)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in _SSM_ABSENT_CODES:
                return None
            raise
        val = resp.get("Parameter", {}).get("Value")
        return val if isinstance(val, str) and val else None

    @staticmethod
    def _required_url(url: Optional[str], source: str) -> str:
        if not url:
            raise RuntimeError(f"Missing required configuration: {source}")
        return url


__all__ = [
    "ConfluenceSettings",
    "ENV_URL",
    "ENV_USER",
    "ENV_PASSWORD",
    "ENV_TIMEOUT",
    "ENV_NAMESPACE",
]
