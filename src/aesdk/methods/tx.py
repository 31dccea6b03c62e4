"""Transaction building methods.

Serialization is done by the node; these helpers only assemble parameters
(nonce, ttl, fee) from the execution context.
"""

import logging
from typing import Any

from aesdk.composer.context import ExecutionContext

logger = logging.getLogger(__name__)

__all__ = ["build_tx", "get_account_nonce", "prepare_tx_params"]

# Options forwarded verbatim into built transactions when present
TX_OPTION_KEYS = ("fee", "gas_price", "gas_limit")


async def get_account_nonce(address: str, ctx: ExecutionContext) -> int:
    """Get the next nonce for an account, or the `nonce` option when set."""
    nonce = ctx.get("nonce")
    if nonce is not None:
        return int(nonce)
    return await ctx.on_node.get_next_nonce(address)


async def prepare_tx_params(sender: str, ctx: ExecutionContext) -> dict[str, Any]:
    """Compute nonce and ttl for a transaction sent by `sender`.

    `ttl` is relative to the current height unless `absolute_ttl` is set;
    a ttl of 0 means no expiry.
    """
    nonce = await get_account_nonce(sender, ctx)
    ttl = int(ctx.get("ttl", 0))
    if ttl and not ctx.get("absolute_ttl", False):
        ttl += await ctx.on_node.get_current_key_block_height()
    return {"nonce": nonce, "ttl": ttl}


async def build_tx(tx_type: str, params: dict[str, Any], ctx: ExecutionContext) -> str:
    """Build an unsigned transaction.

    Args:
        tx_type: Node transaction type, e.g. "spend_tx"
        params: Type-specific fields
        ctx: Execution context

    Returns:
        Encoded unsigned transaction
    """
    fields = dict(params)
    for key in TX_OPTION_KEYS:
        if key not in fields and ctx.get(key) is not None:
            fields[key] = ctx.get(key)
    logger.debug(f"Building {tx_type} with fields {sorted(fields)}")
    return await ctx.on_node.build_tx(tx_type, fields)
