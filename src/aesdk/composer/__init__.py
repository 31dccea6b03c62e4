"""Method composition and per-call context injection."""

from aesdk.composer.composer import (
    MethodComposer,
    compose_method,
    inject_context,
    is_option_bag,
)
from aesdk.composer.context import ExecutionContext
from aesdk.composer.lazy import Available, Lazy, Unavailable, acquire

__all__ = [
    "Available",
    "ExecutionContext",
    "Lazy",
    "MethodComposer",
    "Unavailable",
    "acquire",
    "compose_method",
    "inject_context",
    "is_option_bag",
]
