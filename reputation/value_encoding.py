"""
Fixed-point encoding of human decimal values.

Feedback values are stored as a signed integer plus a decimal scale:

    "99.77"  -> value=9977, value_decimals=2
    "-5.5"   -> value=-55,  value_decimals=1
    "1.5e3"  -> value=1500, value_decimals=0

Trailing fractional zeros are dropped, so equal numbers always encode the
same way. Nothing is rounded or clamped: more than MAX_VALUE_DECIMALS
fractional digits, or a scaled value outside the i128 range, is rejected.
Binary floats are refused because they cannot carry an exact decimal.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from reputation.errors import InvalidRange
from reputation.hashing import I128_MAX, I128_MIN, require_int

MAX_VALUE_DECIMALS = 18

# i128 never needs more than 39 digits
_MAX_DIGITS = 39

_DECIMAL_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")

DecimalInput = Union[str, int, Decimal]


@dataclass(frozen=True)
class EncodedValue:
    """Integer value, its decimal scale, and the canonical decimal string."""

    value: int
    value_decimals: int
    normalized: str


def _format(value: int, decimals: int) -> str:
    sign = "-" if value < 0 else ""
    digits = str(abs(value))
    if decimals == 0:
        return sign + digits
    digits = digits.rjust(decimals + 1, "0")
    return f"{sign}{digits[:-decimals]}.{digits[-decimals:]}"


def _parse(value: DecimalInput) -> Decimal:
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise InvalidRange("value", "a finite decimal number", value)
        return value
    text = value.strip()
    if not _DECIMAL_RE.match(text):
        raise InvalidRange("value", "a finite decimal number", value)
    try:
        return Decimal(text)
    except InvalidOperation as exc:
        raise InvalidRange("value", "a finite decimal number", value) from exc


def encode_decimal_value(
    value: DecimalInput,
    value_decimals: Optional[int] = None,
) -> EncodedValue:
    """
    Encode a decimal number as ``(value, value_decimals)``.

    Args:
        value: Decimal string, ``Decimal``, or an already-scaled integer
        value_decimals: Scale for integer input only (defaults to 0)

    Returns:
        EncodedValue with the scaled integer, its scale and normalized text

    Raises:
        InvalidRange: For non-finite, malformed, float, over-precise or
            out-of-range input
    """
    if isinstance(value, float):
        raise InvalidRange(
            "value", "a str, int or Decimal", value,
            "value must be a str, int or Decimal (floats are not exact)",
        )

    if isinstance(value, int) and not isinstance(value, bool):
        decimals = 0 if value_decimals is None else require_int(
            "value_decimals", value_decimals, 0, MAX_VALUE_DECIMALS
        )
        raw = require_int("value", value, I128_MIN, I128_MAX)
        return EncodedValue(raw, decimals, _format(raw, decimals))

    if not isinstance(value, (str, Decimal)):
        raise InvalidRange("value", "a str, int or Decimal", value)
    if value_decimals is not None:
        raise InvalidRange(
            "value_decimals", "omitted for decimal input", value_decimals,
            "value_decimals is derived from the input and must not be given for decimal input",
        )

    sign, digits, exponent = _parse(value).as_tuple()
    digit_list = list(digits)

    while len(digit_list) > 1 and digit_list[-1] == 0 and exponent < 0:
        digit_list.pop()
        exponent += 1

    magnitude = int("".join(str(d) for d in digit_list))
    if magnitude == 0:
        return EncodedValue(0, 0, "0")

    if exponent >= 0:
        if len(digit_list) + exponent > _MAX_DIGITS:
            raise InvalidRange("value", f"in [{I128_MIN}, {I128_MAX}]", value)
        magnitude *= 10 ** exponent
        decimals = 0
    else:
        decimals = -exponent
        if decimals > MAX_VALUE_DECIMALS:
            raise InvalidRange(
                "value_decimals", f"in [0, {MAX_VALUE_DECIMALS}]", decimals,
                f"value has {decimals} fractional digits (max {MAX_VALUE_DECIMALS})",
            )

    raw = -magnitude if sign else magnitude
    if raw < I128_MIN or raw > I128_MAX:
        raise InvalidRange("value", f"in [{I128_MIN}, {I128_MAX}]", raw)
    return EncodedValue(raw, decimals, _format(raw, decimals))


def decode_decimal_value(value: int, value_decimals: int) -> Decimal:
    """Return the exact ``Decimal`` represented by ``(value, value_decimals)``."""
    require_int("value", value, I128_MIN, I128_MAX)
    require_int("value_decimals", value_decimals, 0, MAX_VALUE_DECIMALS)
    digits = tuple(int(c) for c in str(abs(value)))
    return Decimal((1 if value < 0 else 0, digits, -value_decimals))


__all__ = [
    "MAX_VALUE_DECIMALS",
    "EncodedValue",
    "encode_decimal_value",
    "decode_decimal_value",
]
