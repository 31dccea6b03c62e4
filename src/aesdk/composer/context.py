"""Per-call execution context handed to composed methods."""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from aesdk.accounts.base import AccountBase
from aesdk.composer.lazy import Available, Lazy, Unavailable
from aesdk.core.errors import AccountTypeError, CompilerError, NodeNotFoundError
from aesdk.infrastructure.compiler.client import CompilerClient
from aesdk.infrastructure.node.client import NodeClient

SUBSYSTEM_FIELDS = ("on_node", "on_account", "on_compiler")
CONTEXT_FIELDS = (*SUBSYSTEM_FIELDS, "network_id")

# camelCase spellings accepted in option bags
_ALIASES = {
    "onNode": "on_node",
    "onAccount": "on_account",
    "onCompiler": "on_compiler",
    "networkId": "network_id",
}


def normalize_key(key: str) -> str:
    """Map camelCase context keys to their snake_case names."""
    return _ALIASES.get(key, key)


@dataclass
class ExecutionContext:
    """Node, account, compiler and network id for a single call.

    Subsystems are stored as lazy values and unwrapped on attribute access,
    so a method only fails on the subsystems it actually reads. Method
    specific options live in `options` and are reachable with `get` or
    item access.
    """

    node: Lazy[NodeClient] = field(
        default_factory=lambda: Unavailable(NodeNotFoundError("Node is not connected"))
    )
    account: Lazy[AccountBase] = field(
        default_factory=lambda: Unavailable(AccountTypeError("Account is not provided"))
    )
    compiler: Lazy[CompilerClient] = field(
        default_factory=lambda: Unavailable(CompilerError("Compiler is not ready"))
    )
    network_id: str | None = None
    options: dict[str, Any] = field(default_factory=dict)

    @property
    def on_node(self) -> NodeClient:
        return self.node.unwrap()

    @property
    def on_account(self) -> AccountBase:
        return self.account.unwrap()

    @property
    def on_compiler(self) -> CompilerClient:
        return self.compiler.unwrap()

    def get(self, key: str, default: Any = None) -> Any:
        """Get an option, or `network_id`, without touching subsystems."""
        key = normalize_key(key)
        if key == "network_id":
            return self.network_id if self.network_id is not None else default
        return self.options.get(key, default)

    def __getitem__(self, key: str) -> Any:
        key = normalize_key(key)
        if key in CONTEXT_FIELDS:
            return getattr(self, key)
        return self.options[key]

    def __contains__(self, key: object) -> bool:
        if isinstance(key, str):
            key = normalize_key(key)
        return key in CONTEXT_FIELDS or key in self.options

    def __iter__(self) -> Iterator[str]:
        yield from CONTEXT_FIELDS
        yield from self.options

    def with_overrides(self, overrides: Mapping[str, Any]) -> "ExecutionContext":
        """Return a copy with caller-supplied values on top.

        Subsystem and network id overrides set to None keep the default.
        """
        updates: dict[str, Any] = {}
        options = dict(self.options)
        for raw_key, value in overrides.items():
            key = normalize_key(raw_key)
            if key in SUBSYSTEM_FIELDS:
                if value is not None:
                    updates[key.removeprefix("on_")] = Available(value)
            elif key == "network_id":
                if value is not None:
                    updates["network_id"] = value
            else:
                options[key] = value
        return replace(self, options=options, **updates)

    def __repr__(self) -> str:
        subsystems = ", ".join(
            f"{name}={'available' if getattr(self, name.removeprefix('on_')) else 'unavailable'}"
            for name in SUBSYSTEM_FIELDS
        )
        return (
            f"ExecutionContext({subsystems}, network_id={self.network_id!r}, "
            f"options={self.options!r})"
        )
