from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator


class CallResult(BaseModel):
    """
    Outcome of a single remote operation.

    Fields
    - op: remote operation name (e.g. "getSpace").
    - ok: True when the call succeeded.
    - value: decoded return value; meaningless when `ok` is False.
    - error: tidied error message when the call failed, else None.
    """

    model_config = {"frozen": True}

    op: str
    ok: bool
    value: Any = None
    error: Optional[str] = Field(default=None, description="Readable failure reason")

    @model_validator(mode="after")
    def _check_consistency(self) -> "CallResult":
        if self.ok and self.error is not None:
            raise ValueError("successful result cannot carry an error")
        if not self.ok and self.error is None:
            raise ValueError("failed result requires an error message")
        return self

    @classmethod
    def success(cls, op: str, value: Any = None) -> "CallResult":
        return cls(op=op, ok=True, value=value)

    @classmethod
    def failure(cls, op: str, error: str) -> "CallResult":
        return cls(op=op, ok=False, error=error)

    def unwrap_or(self, default: Any = None) -> Any:
        return self.value if self.ok else default
