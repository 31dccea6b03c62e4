"""Chain query methods."""

import asyncio
import logging
from typing import Any

from aesdk.composer.context import ExecutionContext
from aesdk.core.config import get_settings
from aesdk.core.errors import TxError
from aesdk.utils.amount import AmountFormat, format_amount

logger = logging.getLogger(__name__)

__all__ = [
    "await_height",
    "get_account",
    "get_balance",
    "get_current_generation",
    "get_height",
    "get_micro_block_transactions",
    "get_name",
    "poll",
    "send_transaction",
    "tx_dry_run",
]

# Node marker for transactions not yet in a block
PENDING_HEIGHT = -1


async def get_height(ctx: ExecutionContext) -> int:
    """Get current chain height."""
    return await ctx.on_node.get_current_key_block_height()


async def await_height(height: int, ctx: ExecutionContext) -> int:
    """Wait until the chain reaches `height`.

    Options:
        interval: Seconds between polls
        attempts: Maximum number of polls

    Raises:
        TimeoutError: If the height is not reached in time
    """
    interval = ctx.get("interval", get_settings().poll_interval)
    attempts = int(ctx.get("attempts", 20))

    current = await get_height(ctx)
    for _ in range(attempts):
        if current >= height:
            return current
        await asyncio.sleep(interval)
        current = await get_height(ctx)
    if current >= height:
        return current
    raise TimeoutError(f"Giving up after {attempts} attempts, height {current} < {height}")


async def poll(tx_hash: str, ctx: ExecutionContext) -> dict[str, Any]:
    """Wait for a transaction to be included in a block.

    Options:
        blocks: Number of blocks to wait
        interval: Seconds between polls

    Raises:
        TxError: If the transaction is not mined within `blocks` blocks
    """
    settings = get_settings()
    blocks = int(ctx.get("blocks", settings.poll_blocks))
    interval = ctx.get("interval", settings.poll_interval)
    node = ctx.on_node

    max_height = await node.get_current_key_block_height() + blocks
    while True:
        tx = await node.get_transaction(tx_hash)
        if tx.get("block_height", PENDING_HEIGHT) != PENDING_HEIGHT:
            return tx
        if await node.get_current_key_block_height() >= max_height:
            raise TxError(f"Giving up after {blocks} blocks mined", tx_hash=tx_hash)
        await asyncio.sleep(interval)


async def send_transaction(tx: str, ctx: ExecutionContext) -> dict[str, Any]:
    """Post a signed transaction.

    Options:
        wait_mined: Wait for inclusion before returning (default True)

    Returns:
        `{"hash": ..., "raw_tx": ...}`, plus block info when mined
    """
    tx_hash = await ctx.on_node.post_transaction(tx)
    logger.info(f"Transaction sent: {tx_hash}")
    result: dict[str, Any] = {"hash": tx_hash, "raw_tx": tx}
    if ctx.get("wait_mined", True):
        mined = await poll(tx_hash, ctx)
        result["block_height"] = mined.get("block_height")
        result["block_hash"] = mined.get("block_hash")
    return result


async def get_account(address: str, ctx: ExecutionContext) -> dict[str, Any]:
    """Get account state."""
    return await ctx.on_node.get_account(address)


async def get_balance(address: str, ctx: ExecutionContext) -> int | Any:
    """Get account balance in the `format` denomination (aettos by default)."""
    account = await get_account(address, ctx)
    balance = int(account.get("balance", 0))
    return format_amount(balance, AmountFormat.AETTOS, ctx.get("format", AmountFormat.AETTOS))


async def get_current_generation(ctx: ExecutionContext) -> dict[str, Any]:
    """Get current generation."""
    return await ctx.on_node.get_current_generation()


async def get_micro_block_transactions(block_hash: str, ctx: ExecutionContext) -> list[dict[str, Any]]:
    """Get transactions of a micro block."""
    return await ctx.on_node.get_micro_block_transactions(block_hash)


async def tx_dry_run(tx: str, account_address: str, ctx: ExecutionContext) -> dict[str, Any]:
    """Dry-run a transaction on top of the current chain state.

    Options:
        top: Block hash to run on top of

    Raises:
        TxError: If the dry-run reports a failure
    """
    result = await ctx.on_node.dry_run([{"tx": tx, "account": account_address}], ctx.get("top"))
    first = (result.get("results") or [{}])[0]
    if first.get("result") != "ok":
        raise TxError(f"Dry run failed: {first.get('reason', 'unknown reason')}")
    return first


async def get_name(name: str, ctx: ExecutionContext) -> dict[str, Any]:
    """Get name entry."""
    return await ctx.on_node.get_name(name)
