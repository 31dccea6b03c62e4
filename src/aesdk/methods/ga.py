"""Generalized account methods."""

import logging
from typing import Any

from aesdk.accounts.base import encode_signed_tx
from aesdk.composer.context import ExecutionContext
from aesdk.methods.contract import DEFAULT_GAS, INIT_FUNCTION
from aesdk.methods.spend import send
from aesdk.methods.tx import build_tx, prepare_tx_params

logger = logging.getLogger(__name__)

__all__ = ["create_generalized_account", "create_meta_tx"]


async def create_generalized_account(
    auth_fn_name: str, source: str, init_args: list[str], ctx: ExecutionContext
) -> dict[str, Any]:
    """Turn the context account into a generalized account.

    Args:
        auth_fn_name: Contract function authorizing transactions
        source: Authorization contract source
        init_args: Arguments of the contract init function
        ctx: Execution context

    Raises:
        ValueError: If the account is already generalized
    """
    owner = await ctx.on_account.address()
    account = await ctx.on_node.get_account(owner)
    if account.get("kind") == "generalized":
        raise ValueError(f"Account {owner} is already GA")

    compiler = ctx.on_compiler
    compiled = await compiler.compile(source)
    calldata = await compiler.encode_calldata(source, INIT_FUNCTION, init_args)
    params = {
        "owner_id": owner,
        "code": compiled["bytecode"],
        "auth_fun": auth_fn_name,
        "call_data": calldata,
        "gas": int(ctx.get("gas", DEFAULT_GAS)),
        **await prepare_tx_params(owner, ctx),
    }
    tx = await build_tx("ga_attach_tx", params, ctx)
    result = await send(tx, ctx)
    logger.info(f"Account {owner} attached auth function {auth_fn_name}")
    return {**result, "ga_account": owner}


async def create_meta_tx(
    raw_tx: str, auth_data: dict[str, Any], auth_fn_name: str, ctx: ExecutionContext
) -> str:
    """Wrap a transaction into a meta transaction authorized by a GA.

    Args:
        raw_tx: Inner transaction
        auth_data: `{"calldata": ...}` or `{"source": ..., "args": [...]}`
        auth_fn_name: Authorization function name
        ctx: Execution context

    Returns:
        Encoded signed meta transaction (without signatures)
    """
    if auth_data.get("calldata"):
        auth_calldata = auth_data["calldata"]
    else:
        auth_calldata = await ctx.on_compiler.encode_calldata(
            auth_data["source"], auth_fn_name, auth_data.get("args", [])
        )

    ga_id = await ctx.on_account.address()
    params = {
        "ga_id": ga_id,
        "auth_data": auth_calldata,
        "abi_version": int(ctx.get("abi_version", 3)),
        "gas": int(ctx.get("gas", DEFAULT_GAS)),
        "tx": encode_signed_tx(raw_tx, []),
    }
    meta_tx = await build_tx("ga_meta_tx", params, ctx)
    return encode_signed_tx(meta_tx, [])
