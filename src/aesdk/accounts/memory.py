"""In-memory account backed by a secp256k1 keypair."""

import logging
from collections.abc import Mapping
from typing import Any, TypedDict

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount
from eth_utils import keccak

from aesdk.accounts.base import AccountBase

logger = logging.getLogger(__name__)


class Keypair(TypedDict, total=False):
    """Raw key material. `public_key` is the address and is optional."""

    secret_key: str
    public_key: str


def generate_keypair() -> Keypair:
    """Generate a fresh random keypair."""
    account = Account.create()
    return {"secret_key": "0x" + bytes(account.key).hex(), "public_key": account.address}


class MemoryAccount(AccountBase):
    """Account signing with a secret key held in memory."""

    def __init__(self, keypair: Mapping[str, Any]):
        """Initialize account from keypair.

        Args:
            keypair: Mapping with `secret_key` and optional `public_key`

        Raises:
            ValueError: If the secret key is missing or does not match `public_key`
        """
        secret_key = keypair.get("secret_key") or keypair.get("secretKey")
        if not secret_key:
            raise ValueError("Keypair must contain secret_key")
        key = secret_key if str(secret_key).startswith("0x") else f"0x{secret_key}"
        self._account: LocalAccount = Account.from_key(key)

        public_key = keypair.get("public_key") or keypair.get("publicKey")
        if public_key and public_key.lower() != self._account.address.lower():
            raise ValueError("Invalid keypair: public_key does not match secret_key")

    def __repr__(self) -> str:
        return f"MemoryAccount(address={self._account.address!r})"

    async def address(self) -> str:
        return self._account.address

    async def sign(self, data: bytes) -> bytes:
        signed = self._account.unsafe_sign_hash(keccak(data))
        return bytes(signed.signature)

    async def sign_message(self, message: str) -> bytes:
        signed = self._account.sign_message(encode_defunct(text=message))
        return bytes(signed.signature)

    async def verify_message(self, message: str, signature: bytes | str) -> bool:
        try:
            signer = Account.recover_message(encode_defunct(text=message), signature=signature)
        except Exception as e:
            logger.debug(f"Signature recovery failed: {e}")
            return False
        return signer == self._account.address
