"""Naming system methods: preclaim, claim, update, transfer and revoke names."""

import logging
import secrets
from typing import Any

from eth_utils import keccak

from aesdk.composer.context import ExecutionContext
from aesdk.methods.spend import send
from aesdk.methods.tx import build_tx, prepare_tx_params

logger = logging.getLogger(__name__)

__all__ = [
    "aens_bid",
    "aens_claim",
    "aens_preclaim",
    "aens_query",
    "aens_revoke",
    "aens_transfer",
    "aens_update",
]

NAME_SUFFIX = ".chain"

# Name ttl in blocks when `name_ttl` is not given
DEFAULT_NAME_TTL = 180000


def ensure_name(name: str) -> str:
    """Validate a name and return it lowercased.

    Raises:
        ValueError: If the name lacks the naming-system suffix
    """
    if not name.endswith(NAME_SUFFIX) or len(name) <= len(NAME_SUFFIX):
        raise ValueError(f"Name should end with {NAME_SUFFIX}: {name!r}")
    return name.lower()


def commitment_id(name: str, salt: int) -> str:
    """Commitment hash binding a name to a preclaim salt."""
    digest = keccak(name.encode() + salt.to_bytes(32, "big"))
    return "cm_" + digest.hex()


async def aens_query(name: str, ctx: ExecutionContext) -> dict[str, Any]:
    """Get name entry, including its id, owner and pointers."""
    return await ctx.on_node.get_name(ensure_name(name))


async def aens_preclaim(name: str, ctx: ExecutionContext) -> dict[str, Any]:
    """Commit to claiming a name without revealing it.

    Returns:
        Send result plus the `salt` and `commitment_id` needed to claim
    """
    name = ensure_name(name)
    salt = secrets.randbits(64)
    commitment = commitment_id(name, salt)
    sender = await ctx.on_account.address()

    params = {
        "account_id": sender,
        "commitment_id": commitment,
        **await prepare_tx_params(sender, ctx),
    }
    tx = await build_tx("name_preclaim_tx", params, ctx)
    result = await send(tx, ctx)
    return {**result, "name": name, "salt": salt, "commitment_id": commitment}


async def aens_claim(name: str, salt: int, ctx: ExecutionContext) -> dict[str, Any]:
    """Claim a preclaimed name, or bid on it when `salt` is 0.

    Options:
        name_fee: Fee offered for the name
    """
    name = ensure_name(name)
    sender = await ctx.on_account.address()
    params = {
        "account_id": sender,
        "name": name,
        "name_salt": salt,
        **await prepare_tx_params(sender, ctx),
    }
    if ctx.get("name_fee") is not None:
        params["name_fee"] = int(ctx.get("name_fee"))
    tx = await build_tx("name_claim_tx", params, ctx)
    return {**await send(tx, ctx), "name": name}


async def aens_bid(name: str, name_fee: int, ctx: ExecutionContext) -> dict[str, Any]:
    """Bid on a name in auction."""
    return await aens_claim(name, 0, ctx.with_overrides({"name_fee": name_fee}))


async def _name_tx(
    tx_type: str, name: str, extra: dict[str, Any], ctx: ExecutionContext
) -> dict[str, Any]:
    entry = await aens_query(name, ctx)
    sender = await ctx.on_account.address()
    params = {
        "account_id": sender,
        "name_id": entry["id"],
        **extra,
        **await prepare_tx_params(sender, ctx),
    }
    tx = await build_tx(tx_type, params, ctx)
    return await send(tx, ctx)


async def aens_update(name: str, pointers: dict[str, str], ctx: ExecutionContext) -> dict[str, Any]:
    """Set name pointers.

    Options:
        extend_pointers: Keep existing pointers not in `pointers`
        name_ttl: Name ttl in blocks
        client_ttl: Client cache ttl in seconds
    """
    merged = dict(pointers)
    if ctx.get("extend_pointers", False):
        entry = await aens_query(name, ctx)
        existing = {p["key"]: p["id"] for p in entry.get("pointers", [])}
        merged = {**existing, **pointers}

    extra = {
        "pointers": [{"key": key, "id": value} for key, value in merged.items()],
        "name_ttl": int(ctx.get("name_ttl", DEFAULT_NAME_TTL)),
        "client_ttl": int(ctx.get("client_ttl", 3600)),
    }
    return await _name_tx("name_update_tx", name, extra, ctx)


async def aens_transfer(name: str, recipient: str, ctx: ExecutionContext) -> dict[str, Any]:
    """Transfer a name to another account."""
    return await _name_tx("name_transfer_tx", name, {"recipient_id": recipient}, ctx)


async def aens_revoke(name: str, ctx: ExecutionContext) -> dict[str, Any]:
    """Revoke a name."""
    return await _name_tx("name_revoke_tx", name, {}, ctx)
