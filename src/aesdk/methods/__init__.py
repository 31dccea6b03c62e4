"""Method tables composed into the SDK facade.

Each table maps method names to async functions taking an
`ExecutionContext` as their last positional argument.
"""

from types import ModuleType

from aesdk.composer.composer import MethodTable
from aesdk.methods import aens, chain, contract, ga, oracle, spend, tx


def method_table(module: ModuleType) -> MethodTable:
    """Public methods of a table module, as listed in its `__all__`."""
    return {name: getattr(module, name) for name in module.__all__}


# Merge order; later tables win on name clashes
METHOD_TABLES: list[tuple[str, MethodTable]] = [
    ("chain", method_table(chain)),
    ("tx", method_table(tx)),
    ("aens", method_table(aens)),
    ("spend", method_table(spend)),
    ("oracle", method_table(oracle)),
    ("contract", method_table(contract)),
    ("ga", method_table(ga)),
]

__all__ = ["METHOD_TABLES", "method_table"]
