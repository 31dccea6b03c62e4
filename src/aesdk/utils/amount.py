"""Amount denomination helpers."""

from decimal import Decimal
from enum import Enum


class AmountFormat(str, Enum):
    """Supported amount denominations."""

    AE = "ae"
    MILI_AE = "miliAE"
    MICRO_AE = "microAE"
    NANO_AE = "nanoAE"
    PICO_AE = "picoAE"
    FEMTO_AE = "femtoAE"
    AETTOS = "aettos"


# Decimal places of each denomination relative to aettos
DENOMINATION_MAGNITUDE: dict[AmountFormat, int] = {
    AmountFormat.AE: 18,
    AmountFormat.MILI_AE: 15,
    AmountFormat.MICRO_AE: 12,
    AmountFormat.NANO_AE: 9,
    AmountFormat.PICO_AE: 6,
    AmountFormat.FEMTO_AE: 3,
    AmountFormat.AETTOS: 0,
}

DEFAULT_AMOUNT = 0


def format_amount(
    value: int | str | Decimal,
    denomination: str = AmountFormat.AETTOS,
    target: str = AmountFormat.AETTOS,
) -> int | Decimal:
    """Convert an amount between denominations.

    Args:
        value: Amount expressed in `denomination`
        denomination: Source denomination
        target: Target denomination

    Returns:
        An int when converting to aettos, a Decimal otherwise

    Raises:
        ValueError: For unknown denominations or fractional aettos
    """
    source_mag = DENOMINATION_MAGNITUDE[AmountFormat(denomination)]
    target_mag = DENOMINATION_MAGNITUDE[AmountFormat(target)]
    result = Decimal(str(value)).scaleb(source_mag - target_mag)

    if AmountFormat(target) is AmountFormat.AETTOS:
        if result != result.to_integral_value():
            raise ValueError(f"Amount {value} {denomination} is not a whole number of aettos")
        return int(result)
    return result.normalize()


def to_aettos(value: int | str | Decimal, denomination: str = AmountFormat.AETTOS) -> int:
    """Convert an amount to aettos."""
    return int(format_amount(value, denomination, AmountFormat.AETTOS))
