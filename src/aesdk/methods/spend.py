"""Signing, sending and spend methods."""

import logging
from decimal import Decimal
from typing import Any

from aesdk.composer.context import ExecutionContext
from aesdk.methods.chain import get_balance, send_transaction
from aesdk.methods.tx import build_tx, prepare_tx_params
from aesdk.utils.amount import AmountFormat, to_aettos

logger = logging.getLogger(__name__)

__all__ = ["pay_for_transaction", "send", "spend", "transfer_funds"]


async def send(tx: str, ctx: ExecutionContext) -> dict[str, Any]:
    """Sign a transaction with the context account and post it."""
    signed = await ctx.on_account.sign_transaction(tx, network_id=ctx.network_id)
    return await send_transaction(signed, ctx)


async def spend(amount: int | str | Decimal, recipient: str, ctx: ExecutionContext) -> dict[str, Any]:
    """Send coins to another account.

    Args:
        amount: Amount in the `denomination` option (aettos by default)
        recipient: Recipient address
        ctx: Execution context

    Options:
        payload: Free-form payload string
    """
    sender = await ctx.on_account.address()
    params = {
        "sender_id": sender,
        "recipient_id": recipient,
        "amount": to_aettos(amount, ctx.get("denomination", AmountFormat.AETTOS)),
        "payload": ctx.get("payload", ""),
        **await prepare_tx_params(sender, ctx),
    }
    tx = await build_tx("spend_tx", params, ctx)
    return await send(tx, ctx)


async def transfer_funds(
    fraction: float | str | Decimal, recipient: str, ctx: ExecutionContext
) -> dict[str, Any]:
    """Send a fraction of the context account balance.

    Raises:
        ValueError: If `fraction` is not within [0, 1]
    """
    fraction = Decimal(str(fraction))
    if not 0 <= fraction <= 1:
        raise ValueError(f"Fraction should be a number between 0 and 1, got {fraction}")

    sender = await ctx.on_account.address()
    balance = await get_balance(sender, ctx.with_overrides({"format": AmountFormat.AETTOS}))
    amount = int(Decimal(balance) * fraction)
    return await spend(amount, recipient, ctx.with_overrides({"denomination": AmountFormat.AETTOS}))


async def pay_for_transaction(tx: str, ctx: ExecutionContext) -> dict[str, Any]:
    """Wrap a transaction signed by another account and pay its fee."""
    payer = await ctx.on_account.address()
    params = {"payer_id": payer, "tx": tx, **await prepare_tx_params(payer, ctx)}
    paying_tx = await build_tx("paying_for_tx", params, ctx)
    return await send(paying_tx, ctx)
