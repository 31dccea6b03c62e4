"""aeternity SDK composition core."""

__version__ = "0.1.0"

from aesdk.accounts import AccountBase, MemoryAccount, generate_keypair, resolve_account
from aesdk.composer import Available, ExecutionContext, MethodComposer, Unavailable, acquire
from aesdk.core.config import Settings, get_settings
from aesdk.core.errors import (
    AccountTypeError,
    AeSdkError,
    CompilerError,
    DuplicateNodeError,
    NodeError,
    NodeNotFoundError,
    TxError,
    UnsupportedAccountError,
)
from aesdk.core.logging import configure_logging
from aesdk.infrastructure.compiler import CompilerClient
from aesdk.infrastructure.node import HttpNodeClient, NodeClient, NodePool
from aesdk.sdk import AeSdkBase

__all__ = [
    "__version__",
    # Facade
    "AeSdkBase",
    # Composition
    "Available",
    "ExecutionContext",
    "MethodComposer",
    "Unavailable",
    "acquire",
    # Accounts
    "AccountBase",
    "MemoryAccount",
    "generate_keypair",
    "resolve_account",
    # Nodes and compiler
    "CompilerClient",
    "HttpNodeClient",
    "NodeClient",
    "NodePool",
    # Config and logging
    "Settings",
    "configure_logging",
    "get_settings",
    # Errors
    "AccountTypeError",
    "AeSdkError",
    "CompilerError",
    "DuplicateNodeError",
    "NodeError",
    "NodeNotFoundError",
    "TxError",
    "UnsupportedAccountError",
]
