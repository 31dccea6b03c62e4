"""Resolve caller-supplied account representations into signing accounts."""

from collections.abc import Mapping
from typing import Any

from aesdk.accounts.base import AccountBase, is_account_base
from aesdk.accounts.memory import MemoryAccount
from aesdk.core.errors import AccountTypeError, UnsupportedAccountError

# Anything `resolve_account` accepts
AccountLike = AccountBase | Mapping[str, Any] | str


def resolve_account(
    account: AccountLike | None = None,
    default: AccountLike | None = None,
) -> AccountBase:
    """Resolve an account into its signing capability.

    Resolution is stateless and runs on every call, so callers may pass a
    different account each time.

    Args:
        account: Address string, keypair mapping or account instance
        default: Used when `account` is None

    Returns:
        `account` itself when it already is an account, otherwise a new
        `MemoryAccount` wrapping the keypair

    Raises:
        UnsupportedAccountError: For address strings
        AccountTypeError: For None without a default, or any other shape
    """
    if account is None and default is not None:
        account = default

    if isinstance(account, str):
        raise UnsupportedAccountError("Address in AccountResolver")
    if is_account_base(account):
        return account
    if isinstance(account, Mapping):
        return MemoryAccount(keypair=account)
    raise AccountTypeError(
        "Account should be an address (ak-prefixed string), keypair, "
        f"or instance of AccountBase, got {account!r} instead"
    )
