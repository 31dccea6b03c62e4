"""Signing capability shared by all account kinds."""

import base64
import json
from abc import ABC, abstractmethod
from typing import Any

SIGNING_METHODS = ("address", "sign", "sign_transaction", "sign_message", "verify_message")

SIGNED_TX_PREFIX = "tx_"


class AccountBase(ABC):
    """Operations needed to produce an address and signatures from key material."""

    @abstractmethod
    async def address(self) -> str:
        """Get account address."""
        ...

    @abstractmethod
    async def sign(self, data: bytes) -> bytes:
        """Sign raw data."""
        ...

    async def sign_transaction(self, tx: str, network_id: str) -> str:
        """Sign an encoded transaction for a network.

        The signature covers the network id followed by the encoded
        transaction, so a transaction signed for one network is rejected by
        the others.

        Args:
            tx: Encoded unsigned transaction
            network_id: Target network id

        Returns:
            Encoded signed transaction
        """
        signature = await self.sign(network_id.encode() + tx.encode())
        return encode_signed_tx(tx, [signature])

    @abstractmethod
    async def sign_message(self, message: str) -> bytes:
        """Sign a text message."""
        ...

    @abstractmethod
    async def verify_message(self, message: str, signature: bytes | str) -> bool:
        """Verify a message signature against this account."""
        ...


def is_account_base(account: Any) -> bool:
    """Check if an object already exposes the signing capability set."""
    if isinstance(account, AccountBase):
        return True
    if isinstance(account, (str, bytes, dict)) or account is None:
        return False
    return all(callable(getattr(account, name, None)) for name in SIGNING_METHODS)


def encode_signed_tx(tx: str, signatures: list[bytes]) -> str:
    """Wrap an encoded transaction and its signatures into a signed transaction."""
    payload = json.dumps(
        {"signatures": [bytes(sig).hex() for sig in signatures], "tx": tx},
        separators=(",", ":"),
    )
    return SIGNED_TX_PREFIX + base64.b64encode(payload.encode()).decode()


def decode_signed_tx(signed_tx: str) -> dict[str, Any]:
    """Unwrap a signed transaction into `{"tx": ..., "signatures": [bytes, ...]}`.

    Raises:
        ValueError: If the value is not a signed transaction
    """
    if not signed_tx.startswith(SIGNED_TX_PREFIX):
        raise ValueError(f"Not a signed transaction: {signed_tx[:16]!r}")
    try:
        payload = json.loads(base64.b64decode(signed_tx[len(SIGNED_TX_PREFIX):]))
        return {
            "tx": payload["tx"],
            "signatures": [bytes.fromhex(sig) for sig in payload["signatures"]],
        }
    except (ValueError, KeyError, TypeError) as e:
        raise ValueError(f"Malformed signed transaction: {e}") from e
