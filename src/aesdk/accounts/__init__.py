"""Accounts and account resolution."""

from aesdk.accounts.base import AccountBase, decode_signed_tx, encode_signed_tx, is_account_base
from aesdk.accounts.memory import Keypair, MemoryAccount, generate_keypair
from aesdk.accounts.resolver import AccountLike, resolve_account

__all__ = [
    "AccountBase",
    "AccountLike",
    "Keypair",
    "MemoryAccount",
    "decode_signed_tx",
    "encode_signed_tx",
    "generate_keypair",
    "is_account_base",
    "resolve_account",
]
