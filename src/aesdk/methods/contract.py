"""Contract methods: compile, deploy and call."""

import logging
from typing import Any

from eth_utils import keccak

from aesdk.composer.context import ExecutionContext
from aesdk.core.errors import TxError
from aesdk.methods.chain import tx_dry_run
from aesdk.methods.spend import send
from aesdk.methods.tx import build_tx, prepare_tx_params

logger = logging.getLogger(__name__)

__all__ = [
    "contract_call",
    "contract_call_static",
    "contract_compile",
    "contract_create",
]

DEFAULT_GAS = 25000
INIT_FUNCTION = "init"


def build_contract_id(owner: str, nonce: int) -> str:
    """Id of the contract created by `owner` with `nonce`."""
    return "ct_" + keccak(owner.encode() + nonce.to_bytes(32, "big")).hex()


async def contract_compile(source: str, ctx: ExecutionContext) -> dict[str, Any]:
    """Compile contract source with the context compiler."""
    return await ctx.on_compiler.compile(source)


async def contract_create(source: str, init_args: list[str], ctx: ExecutionContext) -> dict[str, Any]:
    """Compile and deploy a contract.

    Options:
        deposit, amount, gas: Contract create fields

    Returns:
        Send result plus `contract_id` and compiled `bytecode`
    """
    compiler = ctx.on_compiler
    compiled = await compiler.compile(source)
    calldata = await compiler.encode_calldata(source, INIT_FUNCTION, init_args)

    owner = await ctx.on_account.address()
    tx_params = await prepare_tx_params(owner, ctx)
    params = {
        "owner_id": owner,
        "code": compiled["bytecode"],
        "call_data": calldata,
        "deposit": int(ctx.get("deposit", 0)),
        "amount": int(ctx.get("amount", 0)),
        "gas": int(ctx.get("gas", DEFAULT_GAS)),
        **tx_params,
    }
    tx = await build_tx("contract_create_tx", params, ctx)
    result = await send(tx, ctx)

    contract_id = build_contract_id(owner, tx_params["nonce"])
    logger.info(f"Contract deployed: {contract_id}")
    return {**result, "contract_id": contract_id, "bytecode": compiled["bytecode"]}


async def _call_tx(
    source: str, contract_id: str, function: str, args: list[str], ctx: ExecutionContext
) -> tuple[str, str]:
    calldata = await ctx.on_compiler.encode_calldata(source, function, args)
    caller = await ctx.on_account.address()
    params = {
        "caller_id": caller,
        "contract_id": contract_id,
        "call_data": calldata,
        "amount": int(ctx.get("amount", 0)),
        "gas": int(ctx.get("gas", DEFAULT_GAS)),
        **await prepare_tx_params(caller, ctx),
    }
    return caller, await build_tx("contract_call_tx", params, ctx)


async def contract_call(
    source: str, contract_id: str, function: str, args: list[str], ctx: ExecutionContext
) -> dict[str, Any]:
    """Call a contract function in a transaction.

    Returns:
        Send result plus `call_info` and `decoded_result`

    Raises:
        TxError: If the call did not return ok
    """
    _, tx = await _call_tx(source, contract_id, function, args, ctx)
    result = await send(tx, ctx)
    call_info = await ctx.on_node.get_transaction_info(result["hash"])
    if call_info.get("return_type") != "ok":
        raise TxError(
            f"Invocation failed: {call_info.get('return_type')}", tx_hash=result["hash"]
        )
    decoded = await ctx.on_compiler.decode_call_result(
        source, function, call_info["return_type"], call_info["return_value"]
    )
    return {**result, "call_info": call_info, "decoded_result": decoded}


async def contract_call_static(
    source: str, contract_id: str, function: str, args: list[str], ctx: ExecutionContext
) -> dict[str, Any]:
    """Call a contract function without sending a transaction."""
    caller, tx = await _call_tx(source, contract_id, function, args, ctx)
    dry_run = await tx_dry_run(tx, caller, ctx)
    call_obj = dry_run.get("call_obj", {})
    decoded = await ctx.on_compiler.decode_call_result(
        source, function, call_obj.get("return_type", "ok"), call_obj.get("return_value", "")
    )
    return {"call_info": call_obj, "decoded_result": decoded}
