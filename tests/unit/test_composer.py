"""Tests for lazy values, execution context and method composition."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from aesdk.accounts import MemoryAccount, resolve_account
from aesdk.composer import (
    Available,
    ExecutionContext,
    MethodComposer,
    Unavailable,
    acquire,
    inject_context,
    is_option_bag,
)
from aesdk.composer.composer import positional_arity
from aesdk.core.errors import CompilerError, NodeNotFoundError
from tests.factories import OTHER_SECRET_KEY, address_of


class TestLazy:
    """Tests for deferred-failure values."""

    def test_acquire_success(self):
        """Test a successful getter yields Available."""
        value = acquire(lambda: 5)
        assert isinstance(value, Available)
        assert value.is_available is True
        assert value.unwrap() == 5

    def test_acquire_failure_never_raises(self):
        """Test a failing getter is captured, not raised."""

        def fail():
            raise NodeNotFoundError("Node is not connected")

        value = acquire(fail)

        assert isinstance(value, Unavailable)
        assert value.is_available is False
        assert not value

    def test_unwrap_raises_original_error(self):
        """Test unwrapping re-raises the captured error on every use."""
        error = CompilerError("Compiler is not ready!")
        value = Unavailable(error)

        for _ in range(2):
            with pytest.raises(CompilerError) as exc_info:
                value.unwrap()
            assert exc_info.value is error

    def test_getter_called_once(self):
        """Test acquisition runs the getter exactly once."""
        getter = MagicMock(return_value="node")
        value = acquire(getter)
        value.unwrap()
        value.unwrap()
        getter.assert_called_once_with()

    def test_unavailable_repr(self):
        """Test an unavailable value is printable without raising."""
        text = repr(Unavailable(CompilerError("not ready")))
        assert "CompilerError" in text
        assert "not ready" in text


class TestExecutionContext:
    """Tests for ExecutionContext."""

    def test_defaults_fail_on_use(self):
        """Test a bare context fails only when subsystems are read."""
        ctx = ExecutionContext()

        assert ctx.network_id is None
        with pytest.raises(NodeNotFoundError):
            ctx.on_node
        with pytest.raises(CompilerError):
            ctx.on_compiler
        with pytest.raises(TypeError):
            ctx.on_account

    def test_repr_does_not_unwrap(self):
        """Test repr reports availability without raising."""
        ctx = ExecutionContext(node=Available("node"), options={"amount": 5})
        text = repr(ctx)
        assert "on_node=available" in text
        assert "on_compiler=unavailable" in text
        assert "'amount': 5" in text

    def test_get_options_and_network_id(self):
        """Test option lookup with camelCase aliases."""
        ctx = ExecutionContext(network_id="ae_uat", options={"amount": 5})

        assert ctx.get("amount") == 5
        assert ctx.get("missing", "x") == "x"
        assert ctx.get("networkId") == "ae_uat"
        assert ctx["network_id"] == "ae_uat"
        assert ctx["amount"] == 5
        assert "amount" in ctx
        assert "on_node" in ctx

    def test_with_overrides_copies(self):
        """Test overrides produce a new context and keep the original."""
        ctx = ExecutionContext(network_id="ae_uat", options={"amount": 0, "fee": 1})

        updated = ctx.with_overrides({"amount": 5, "networkId": "ae_mainnet", "onNode": "other"})

        assert updated.get("amount") == 5
        assert updated.get("fee") == 1
        assert updated.network_id == "ae_mainnet"
        assert updated.on_node == "other"
        assert ctx.get("amount") == 0
        assert ctx.network_id == "ae_uat"

    def test_none_subsystem_override_keeps_default(self):
        """Test None overrides for subsystems keep the injected value."""
        ctx = ExecutionContext(node=Available("node"), network_id="ae_uat")

        updated = ctx.with_overrides({"on_node": None, "network_id": None})

        assert updated.on_node == "node"
        assert updated.network_id == "ae_uat"

    def test_contains_accepts_aliases(self):
        """Test membership checks accept camelCase keys like item access."""
        ctx = ExecutionContext(network_id="ae_uat", options={"amount": 5})

        assert "onNode" in ctx
        assert "networkId" in ctx
        assert "onWallet" not in ctx
        assert 1 not in ctx


class TestOptionBag:
    """Tests for option bag detection."""

    def test_plain_dict(self):
        """Test plain dicts are option bags."""
        assert is_option_bag({}) is True
        assert is_option_bag({"amount": 5}) is True

    def test_non_plain_values(self):
        """Test instances, subclasses and primitives are not option bags."""

        class Options(dict):
            pass

        assert is_option_bag(Options()) is False
        assert is_option_bag(ExecutionContext()) is False
        assert is_option_bag(None) is False
        assert is_option_bag([1]) is False
        assert is_option_bag("amount") is False


class TestInjectContext:
    """Tests for merging caller arguments with the built context."""

    def setup_method(self):
        """Set up test fixtures."""
        self.context = ExecutionContext(
            node=Available("node"),
            account=Available("default-account"),
            compiler=Available("compiler"),
            network_id="ae_uat",
            options={"denomination": "aettos", "amount": 0},
        )

    def test_append_when_no_option_bag(self):
        """Test the context is appended after positional arguments."""
        args = inject_context(self.context, ["recipient"], {}, resolve_account)

        assert args[0] == "recipient"
        assert args[1] is self.context

    def test_append_when_last_arg_is_not_plain(self):
        """Test a non-dict last argument is kept and the context appended."""
        marker = object()
        args = inject_context(self.context, [marker], {}, resolve_account)

        assert args[0] is marker
        assert isinstance(args[1], ExecutionContext)

    def test_merge_option_bag(self):
        """Test a trailing dict is merged over the defaults."""
        args = inject_context(self.context, ["recipient", {"amount": 5}], {}, resolve_account)

        assert len(args) == 2
        ctx = args[1]
        assert ctx.get("amount") == 5
        assert ctx.get("denomination") == "aettos"
        assert ctx.on_node == "node"
        assert ctx.on_account == "default-account"
        assert ctx.on_compiler == "compiler"
        assert ctx.network_id == "ae_uat"

    def test_caller_dict_not_mutated(self):
        """Test the caller's option bag is left untouched."""
        bag = {"amount": 5}
        inject_context(self.context, [bag], {}, resolve_account)
        assert bag == {"amount": 5}

    def test_keyword_options(self):
        """Test keyword arguments act as the option bag."""
        args = inject_context(self.context, ["recipient"], {"amount": 3}, resolve_account)

        assert args[0] == "recipient"
        assert args[1].get("amount") == 3

    def test_keywords_win_over_dict(self):
        """Test keyword arguments are applied after the positional bag."""
        args = inject_context(self.context, [{"amount": 1}], {"amount": 2}, resolve_account)
        assert args[0].get("amount") == 2

    @pytest.mark.asyncio
    async def test_explicit_account_resolved(self, keypair):
        """Test an explicit on_account is resolved, not passed through raw."""
        args = inject_context(self.context, [{"on_account": keypair}], {}, resolve_account)

        account = args[0].on_account
        assert isinstance(account, MemoryAccount)
        assert await account.address() == keypair["public_key"]

    def test_camel_case_account_resolved(self, keypair):
        """Test onAccount is treated like on_account."""
        args = inject_context(self.context, [{"onAccount": keypair}], {}, resolve_account)
        assert isinstance(args[0].on_account, MemoryAccount)

    def test_invalid_account_fails_immediately(self):
        """Test resolver errors propagate at call time."""
        with pytest.raises(NotImplementedError):
            inject_context(self.context, [{"on_account": "ak_abc"}], {}, resolve_account)

    @pytest.mark.asyncio
    async def test_keyword_account_wins_over_dict_alias(self, keypair, other_keypair):
        """Test the keyword account is the one resolved when both spellings are given."""
        args = inject_context(
            self.context, [{"onAccount": keypair}], {"on_account": other_keypair}, resolve_account
        )

        assert await args[0].on_account.address() == address_of(OTHER_SECRET_KEY)

    def test_trailing_dict_kept_below_arity(self):
        """Test a dict argument that does not fill the context slot is passed through."""
        pointers = {"account_pubkey": "0xabc"}
        args = inject_context(self.context, ["foo.chain", pointers], {}, resolve_account, arity=3)

        assert args[0] == "foo.chain"
        assert args[1] is pointers
        assert args[2] is self.context

    def test_trailing_dict_is_options_at_arity(self):
        """Test a dict filling the context slot is the option bag."""
        pointers = {"account_pubkey": "0xabc"}
        args = inject_context(
            self.context, ["foo.chain", pointers, {"amount": 5}], {}, resolve_account, arity=3
        )

        assert args[1] is pointers
        assert args[2].get("amount") == 5

    def test_none_account_keeps_default(self):
        """Test on_account=None keeps the injected default."""
        resolver = MagicMock()
        args = inject_context(self.context, [{"on_account": None}], {}, resolver)

        assert args[0].on_account == "default-account"
        resolver.assert_not_called()


class TestMethodComposer:
    """Tests for MethodComposer."""

    def test_later_tables_override(self):
        """Test merge order decides name clashes."""
        first = AsyncMock()
        second = AsyncMock()
        composer = MethodComposer([("a", {"run": first}), ("b", {"run": second})])

        assert composer.methods["run"] is second
        assert composer.origin("run") == "b"

    @pytest.mark.asyncio
    async def test_install_injects_context(self):
        """Test installed methods receive a freshly built context."""
        contexts = []

        async def handler(value, ctx):
            contexts.append(ctx)
            return value * 2

        class Host:
            async def build_context(self):
                return ExecutionContext(network_id="ae_uat", options={"amount": 0})

            def resolve_account(self, account=None):
                return resolve_account(account)

        MethodComposer([("t", {"double": handler})]).install(Host)
        host = Host()

        assert await host.double(21) == 42
        assert await host.double(1, {"amount": 9}) == 2

        assert contexts[0].get("amount") == 0
        assert contexts[1].get("amount") == 9
        assert contexts[0] is not contexts[1]
        assert Host.composed_methods == ("double",)
        assert Host.double.__name__ == "handler"

    @pytest.mark.asyncio
    async def test_errors_propagate(self):
        """Test handler failures reach the caller unchanged."""
        error = RuntimeError("boom")

        async def handler(ctx):
            raise error

        class Host:
            async def build_context(self):
                return ExecutionContext()

            def resolve_account(self, account=None):
                return resolve_account(account)

        MethodComposer([("t", {"explode": handler})]).install(Host)

        with pytest.raises(RuntimeError) as exc_info:
            await Host().explode()
        assert exc_info.value is error

    def test_positional_arity(self):
        """Test positional parameters are counted with the context slot."""

        async def update(name, pointers, ctx):
            pass

        async def height(ctx, *, extra=None):
            pass

        assert positional_arity(update) == 3
        assert positional_arity(height) == 1

    @pytest.mark.asyncio
    async def test_network_id_read_from_call_node(self, node):
        """Test a call-supplied node provides the network id when none is set."""
        contexts = []

        async def handler(ctx):
            contexts.append(ctx)

        class Host:
            async def build_context(self):
                return ExecutionContext()

            def resolve_account(self, account=None):
                return resolve_account(account)

        MethodComposer([("t", {"capture": handler})]).install(Host)

        await Host().capture()
        await Host().capture(on_node=node)
        await Host().capture(on_node=node, network_id="ae_mainnet")

        assert contexts[0].network_id is None
        assert contexts[1].network_id == "ae_uat"
        assert contexts[2].network_id == "ae_mainnet"
        node.get_status.assert_awaited_once()
