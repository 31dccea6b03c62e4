"""Error classes raised by the SDK.

All errors derive from `AeSdkError` so callers can catch SDK failures as a
group. Account resolution errors also derive from the matching builtin
(`NotImplementedError`, `TypeError`) so generic handlers keep working.
"""

from typing import Any

__all__ = [
    "AeSdkError",
    "DuplicateNodeError",
    "NodeNotFoundError",
    "UnsupportedAccountError",
    "AccountTypeError",
    "CompilerError",
    "NodeError",
    "TxError",
]


class AeSdkError(Exception):
    """Base class for all SDK errors."""


class DuplicateNodeError(AeSdkError):
    """Raised when a node name is already present in the pool."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Node with name {name} already exist")


class NodeNotFoundError(AeSdkError):
    """Raised when a node is missing from the pool or none is selected."""


class UnsupportedAccountError(AeSdkError, NotImplementedError):
    """Raised for account representations the resolver does not support yet."""

    def __init__(self, feature: str):
        self.feature = feature
        super().__init__(f"{feature} not implemented yet")


class AccountTypeError(AeSdkError, TypeError):
    """Raised when an account has an unsupported shape."""


class CompilerError(AeSdkError):
    """Raised when the compiler is unavailable or rejects a request."""


class NodeError(AeSdkError):
    """Raised when a node request fails at the HTTP or transport level."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
        body: Any = None,
    ):
        self.message = message
        self.url = url
        self.status_code = status_code
        self.body = body
        super().__init__(message)

    def __str__(self) -> str:
        parts = [self.message]
        if self.url:
            parts.append(f"url={self.url}")
        if self.status_code is not None:
            parts.append(f"http={self.status_code}")
        if self.body is not None:
            parts.append(f"body={self.body!r}")
        return " ".join(parts)


class TxError(AeSdkError):
    """Raised when a transaction is rejected or is not mined in time."""

    def __init__(self, message: str, tx_hash: str | None = None):
        self.message = message
        self.tx_hash = tx_hash
        super().__init__(message)

    def __str__(self) -> str:
        suffix = f" tx={self.tx_hash}" if self.tx_hash else ""
        return f"{self.message}{suffix}"
