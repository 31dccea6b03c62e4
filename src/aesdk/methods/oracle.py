"""Oracle methods: register, extend, query and respond."""

import asyncio
import logging
from typing import Any

from eth_utils import keccak

from aesdk.composer.context import ExecutionContext
from aesdk.core.config import get_settings
from aesdk.methods.spend import send
from aesdk.methods.tx import build_tx, prepare_tx_params

logger = logging.getLogger(__name__)

__all__ = [
    "extend_oracle_ttl",
    "get_oracle_object",
    "poll_for_query_response",
    "post_query_to_oracle",
    "register_oracle",
    "respond_to_query",
]

DEFAULT_ORACLE_TTL = {"type": "delta", "value": 500}
DEFAULT_QUERY_TTL = {"type": "delta", "value": 10}
DEFAULT_RESPONSE_TTL = {"type": "delta", "value": 10}


def oracle_query_id(sender: str, nonce: int, oracle_id: str) -> str:
    """Id of the query posted by `sender` with `nonce` to `oracle_id`."""
    digest = keccak(sender.encode() + nonce.to_bytes(32, "big") + oracle_id.encode())
    return "oq_" + digest.hex()


async def get_oracle_object(oracle_id: str, ctx: ExecutionContext) -> dict[str, Any]:
    """Get oracle state."""
    return await ctx.on_node.get_oracle(oracle_id)


async def register_oracle(
    query_format: str, response_format: str, ctx: ExecutionContext
) -> dict[str, Any]:
    """Register the context account as an oracle.

    Options:
        query_fee: Fee required to post a query
        oracle_ttl: `{"type": "delta" | "block", "value": int}`
    """
    account_id = await ctx.on_account.address()
    params = {
        "account_id": account_id,
        "query_format": query_format,
        "response_format": response_format,
        "query_fee": int(ctx.get("query_fee", 0)),
        "oracle_ttl": ctx.get("oracle_ttl", DEFAULT_ORACLE_TTL),
        **await prepare_tx_params(account_id, ctx),
    }
    tx = await build_tx("oracle_register_tx", params, ctx)
    result = await send(tx, ctx)
    return {**result, "oracle_id": account_id}


async def extend_oracle_ttl(oracle_id: str, ctx: ExecutionContext) -> dict[str, Any]:
    """Extend oracle ttl by the `oracle_ttl` option."""
    sender = await ctx.on_account.address()
    params = {
        "oracle_id": oracle_id,
        "oracle_ttl": ctx.get("oracle_ttl", DEFAULT_ORACLE_TTL),
        **await prepare_tx_params(sender, ctx),
    }
    tx = await build_tx("oracle_extend_tx", params, ctx)
    return await send(tx, ctx)


async def post_query_to_oracle(oracle_id: str, query: str, ctx: ExecutionContext) -> dict[str, Any]:
    """Post a query to an oracle.

    The query fee defaults to the fee the oracle asks for.

    Returns:
        Send result plus `query_id`
    """
    sender = await ctx.on_account.address()
    query_fee = ctx.get("query_fee")
    if query_fee is None:
        query_fee = (await get_oracle_object(oracle_id, ctx)).get("query_fee", 0)

    tx_params = await prepare_tx_params(sender, ctx)
    params = {
        "sender_id": sender,
        "oracle_id": oracle_id,
        "query": query,
        "query_fee": int(query_fee),
        "query_ttl": ctx.get("query_ttl", DEFAULT_QUERY_TTL),
        "response_ttl": ctx.get("response_ttl", DEFAULT_RESPONSE_TTL),
        **tx_params,
    }
    tx = await build_tx("oracle_query_tx", params, ctx)
    result = await send(tx, ctx)
    return {**result, "query_id": oracle_query_id(sender, tx_params["nonce"], oracle_id)}


async def respond_to_query(
    oracle_id: str, query_id: str, response: str, ctx: ExecutionContext
) -> dict[str, Any]:
    """Answer a query as the oracle."""
    sender = await ctx.on_account.address()
    params = {
        "oracle_id": oracle_id,
        "query_id": query_id,
        "response": response,
        "response_ttl": ctx.get("response_ttl", DEFAULT_RESPONSE_TTL),
        **await prepare_tx_params(sender, ctx),
    }
    tx = await build_tx("oracle_response_tx", params, ctx)
    return await send(tx, ctx)


async def poll_for_query_response(
    oracle_id: str, query_id: str, ctx: ExecutionContext
) -> str:
    """Wait until a query has a response.

    Options:
        interval: Seconds between polls
        attempts: Maximum number of polls

    Raises:
        TimeoutError: If no response arrives in time
    """
    interval = ctx.get("interval", get_settings().poll_interval)
    attempts = int(ctx.get("attempts", 20))
    for _ in range(attempts):
        query = await ctx.on_node.get_oracle_query(oracle_id, query_id)
        if query.get("response"):
            return query["response"]
        await asyncio.sleep(interval)
    raise TimeoutError(f"No response to query {query_id} after {attempts} attempts")
