"""SDK facade.

`AeSdkBase` is the composition of the chain, tx, aens, spend, oracle,
contract and generalized-account method tables. Every composed method
receives an `ExecutionContext` built from the facade state (selected node,
default account, compiler, network id and base options) and overridable per
call:

    sdk = AeSdkBase(nodes=[("testnet", HttpNodeClient(url))])
    await sdk.spend(100, recipient, {"on_account": keypair})
    await sdk.spend(1, recipient, denomination="ae")

Missing subsystems never fail at construction or context building, only
when a method actually uses them.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from aesdk.accounts.base import AccountBase
from aesdk.accounts.memory import MemoryAccount
from aesdk.accounts.resolver import AccountLike, resolve_account
from aesdk.composer.composer import MethodComposer
from aesdk.composer.context import ExecutionContext
from aesdk.composer.lazy import Lazy, Unavailable, acquire
from aesdk.core.config import Settings, get_settings
from aesdk.core.errors import CompilerError
from aesdk.infrastructure.compiler.client import CompilerClient
from aesdk.infrastructure.node.client import HttpNodeClient, NodeClient
from aesdk.infrastructure.node.pool import NodePool
from aesdk.methods import METHOD_TABLES
from aesdk.utils.amount import DEFAULT_AMOUNT, AmountFormat

logger = logging.getLogger(__name__)

COMPILER_NOT_READY_MESSAGE = "You can't use Compiler API. Compiler is not ready!"

NodeSpec = tuple[str, NodeClient] | Mapping[str, Any]


def _iter_nodes(nodes: Iterable[NodeSpec]) -> Iterable[tuple[str, NodeClient]]:
    for spec in nodes:
        if isinstance(spec, Mapping):
            yield spec["name"], spec["instance"]
        else:
            name, node = spec
            yield name, node


class AeSdkBase:
    """Facade unifying the SDK method tables.

    State is three independent optional subsystems (selected node, default
    account, compiler) plus base options. All combinations are valid; the
    method being called decides which subsystems it needs.
    """

    composed_methods: tuple[str, ...] = ()

    def __init__(
        self,
        nodes: Iterable[NodeSpec] = (),
        compiler_url: str | None = None,
        ignore_version: bool = False,
        account: AccountLike | None = None,
        network_id: str | None = None,
        **options: Any,
    ):
        """Initialize SDK facade.

        Args:
            nodes: (name, node) pairs or {"name", "instance"} mappings; the first is selected
            compiler_url: Compiler endpoint; without it compiler use fails
            ignore_version: Don't check compiler version
            account: Default account used when a call gives no `on_account`
            network_id: Fixed network id; read from the selected node when None
            **options: Base options merged under every call's options
        """
        self._options: dict[str, Any] = {
            "denomination": AmountFormat.AETTOS.value,
            "amount": DEFAULT_AMOUNT,
            **options,
        }
        self.pool = NodePool()
        self.network_id = network_id
        self.default_account = account
        self._compiler: Lazy[CompilerClient] = Unavailable(
            CompilerError(COMPILER_NOT_READY_MESSAGE)
        )

        for index, (name, node) in enumerate(_iter_nodes(nodes)):
            self.add_node(name, node, select=index == 0)

        if compiler_url is not None:
            self.set_compiler_url(compiler_url, ignore_version=ignore_version)

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **options: Any) -> "AeSdkBase":
        """Build a facade from settings (environment by default)."""
        settings = settings or get_settings()
        nodes = [
            (
                name,
                HttpNodeClient(
                    url,
                    timeout=settings.request_timeout,
                    max_retries=settings.max_retries,
                    retry_delay=settings.retry_delay,
                ),
            )
            for name, url in settings.node_urls.items()
        ]
        account = MemoryAccount({"secret_key": settings.secret_key}) if settings.has_account else None
        return cls(
            nodes=nodes,
            compiler_url=settings.compiler_url,
            ignore_version=settings.ignore_version,
            account=account,
            network_id=settings.network_id,
            denomination=settings.denomination,
            **options,
        )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(nodes={self.pool.names()}, "
            f"selected={self.pool.selected_name!r}, "
            f"compiler={'ready' if self._compiler else 'unavailable'}, "
            f"account={'set' if self.default_account is not None else 'unset'})"
        )

    async def __aenter__(self) -> "AeSdkBase":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close HTTP clients of pooled nodes and the compiler."""
        for name in self.pool:
            node = self.pool.get(name)
            if hasattr(node, "close"):
                await node.close()
        if self._compiler and hasattr(self._compiler.value, "close"):
            await self._compiler.value.close()

    @property
    def options(self) -> dict[str, Any]:
        """Copy of the base options."""
        return dict(self._options)

    # Compiler

    def set_compiler_url(self, compiler_url: str, ignore_version: bool = False) -> None:
        """Point the facade at a compiler.

        A client that cannot be created is stored as a deferred failure.
        """
        self._compiler = acquire(lambda: CompilerClient(compiler_url, ignore_version=ignore_version))
        logger.debug(f"Compiler set to {compiler_url} (ready={bool(self._compiler)})")

    @property
    def compiler_api(self) -> CompilerClient:
        """The compiler client.

        Raises:
            CompilerError: If no usable compiler is configured
        """
        return self._compiler.unwrap()

    # Nodes

    @property
    def api(self) -> NodeClient:
        """The selected node.

        Raises:
            NodeNotFoundError: If no node is connected
        """
        return self.pool.get_selected()

    def add_node(self, name: str, node: NodeClient, select: bool = False) -> None:
        """Add a node to the pool, selecting it if asked or if it is the first."""
        self.pool.add_node(name, node, select=select)

    def select_node(self, name: str) -> None:
        """Select a pooled node as current."""
        self.pool.select_node(name)

    def is_node_connected(self) -> bool:
        """Check if a node is selected."""
        return self.pool.is_connected()

    @property
    def selected_node_name(self) -> str | None:
        return self.pool.selected_name

    async def get_node_info(self) -> dict[str, Any]:
        """Name and metadata of the selected node."""
        return await self.pool.get_selected_info()

    async def get_nodes_in_pool(self) -> list[dict[str, Any]]:
        """Name and metadata of every pooled node."""
        return await self.pool.list_all()

    async def get_network_id(self, network_id: str | None = None) -> str:
        """Network id: the argument, then the configured one, then the node's.

        Raises:
            NodeNotFoundError: If none is given or configured and no node is connected
        """
        if network_id is not None:
            return network_id
        if self.network_id is not None:
            return self.network_id
        status = await self.api.get_status()
        return status["network_id"]

    # Accounts

    def resolve_account(self, account: AccountLike | None = None) -> AccountBase:
        """Resolve an account, falling back to the default account."""
        return resolve_account(account, default=self.default_account)

    def addresses(self) -> list[str]:
        """Addresses managed by the facade; the base facade manages none."""
        return []

    async def address(self, on_account: AccountLike | None = None) -> str:
        return await self.resolve_account(on_account).address()

    async def sign(self, data: bytes, on_account: AccountLike | None = None) -> bytes:
        return await self.resolve_account(on_account).sign(data)

    async def sign_transaction(
        self,
        tx: str,
        on_account: AccountLike | None = None,
        network_id: str | None = None,
    ) -> str:
        """Sign a transaction for the given or current network."""
        account = self.resolve_account(on_account)
        return await account.sign_transaction(tx, network_id=await self.get_network_id(network_id))

    async def sign_message(self, message: str, on_account: AccountLike | None = None) -> bytes:
        return await self.resolve_account(on_account).sign_message(message)

    async def verify_message(
        self,
        message: str,
        signature: bytes | str,
        on_account: AccountLike | None = None,
    ) -> bool:
        return await self.resolve_account(on_account).verify_message(message, signature)

    # Context

    async def build_context(self) -> ExecutionContext:
        """Build the default context for one composed method call.

        The network id is read from the selected node unless configured; with
        neither, it is None and methods needing it fail on the node.
        """
        node = acquire(self.pool.get_selected)
        network_id = self.network_id
        if network_id is None and node:
            network_id = (await node.value.get_status())["network_id"]
        return ExecutionContext(
            node=node,
            account=acquire(self.resolve_account),
            compiler=self._compiler,
            network_id=network_id,
            options=dict(self._options),
        )


MethodComposer(METHOD_TABLES).install(AeSdkBase)

__all__ = ["AeSdkBase", "COMPILER_NOT_READY_MESSAGE"]
