"""Merge method tables into one surface and inject execution context.

Every method in a table is an async function whose last positional parameter
is an `ExecutionContext`. Composed methods build that context per call, so
call sites only pass what they want to override.

Field precedence when merging a caller's option bag:
    resolved `on_account` override > caller-supplied fields > injected defaults
"""

import functools
import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any, Protocol

from aesdk.accounts.base import AccountBase
from aesdk.composer.context import ExecutionContext, normalize_key
from aesdk.composer.lazy import Available

logger = logging.getLogger(__name__)

Method = Callable[..., Awaitable[Any]]
MethodTable = Mapping[str, Method]


class ContextProvider(Protocol):
    """What a composed method needs from the object it is installed on."""

    async def build_context(self) -> ExecutionContext: ...

    def resolve_account(self, account: Any = None) -> AccountBase: ...


def is_option_bag(value: Any) -> bool:
    """Check if a value is a plain option dict, not a class instance."""
    return type(value) is dict


def positional_arity(handler: Method) -> int:
    """Number of positional parameters of a table method, context included."""
    kinds = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    return sum(p.kind in kinds for p in inspect.signature(handler).parameters.values())


def inject_context(
    context: ExecutionContext,
    args: Sequence[Any],
    kwargs: Mapping[str, Any],
    resolve_account: Callable[[Any], AccountBase],
    arity: int | None = None,
) -> list[Any]:
    """Build the positional arguments for a method call.

    A trailing plain dict and keyword arguments are both treated as the
    caller's option bag and merged over `context`; keyword arguments win over
    the dict. Without either, the context is appended as a new argument.

    With `arity` given, a trailing dict is only the option bag when it fills
    the context slot, so methods whose last real parameter is a dict keep it.

    Raises:
        Whatever `resolve_account` raises for an explicit `on_account`
    """
    call_args = list(args)
    overrides: dict[str, Any] = {}
    fills_context_slot = arity is None or len(call_args) == arity
    if call_args and fills_context_slot and is_option_bag(call_args[-1]):
        for key, value in call_args.pop().items():
            overrides[normalize_key(key)] = value
    for key, value in kwargs.items():
        overrides[normalize_key(key)] = value

    if overrides:
        context = context.with_overrides(overrides)
        account = overrides.get("on_account")
        if account is not None:
            context.account = Available(resolve_account(account))

    call_args.append(context)
    return call_args


def compose_method(handler: Method) -> Method:
    """Wrap a table method so it receives a freshly built context.

    When neither the facade nor the caller gives a network id, it is read
    from the node the call runs on.
    """
    arity = positional_arity(handler)

    @functools.wraps(handler)
    async def method(self: ContextProvider, *args: Any, **kwargs: Any) -> Any:
        call_args = inject_context(
            await self.build_context(), args, kwargs, self.resolve_account, arity
        )
        context: ExecutionContext = call_args[-1]
        if context.network_id is None and context.node:
            context.network_id = (await context.on_node.get_status())["network_id"]
        return await handler(*call_args)

    return method


class MethodComposer:
    """Merges named method tables in a fixed priority order.

    Tables later in the order overwrite same-named methods of earlier ones.
    """

    def __init__(self, tables: Sequence[tuple[str, MethodTable]]):
        """Initialize composer.

        Args:
            tables: (table name, {method name: async function}) pairs in merge order
        """
        self.tables = list(tables)
        self._origins: dict[str, str] = {}
        self._methods: dict[str, Method] = {}

        for table_name, table in self.tables:
            for name, handler in table.items():
                if name in self._origins:
                    logger.debug(
                        f"Method {name!r} from {table_name!r} overrides "
                        f"{self._origins[name]!r}"
                    )
                self._origins[name] = table_name
                self._methods[name] = handler

    @property
    def methods(self) -> dict[str, Method]:
        """Merged methods by name."""
        return dict(self._methods)

    def origin(self, name: str) -> str:
        """Name of the table a composed method came from."""
        return self._origins[name]

    def install(self, cls: type) -> type:
        """Install every merged method on `cls` as a context-injecting method."""
        for name, handler in self._methods.items():
            setattr(cls, name, compose_method(handler))
        cls.composed_methods = tuple(self._methods)
        logger.debug(f"Installed {len(self._methods)} methods on {cls.__name__}")
        return cls
