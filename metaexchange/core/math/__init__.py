"""
Core math modules для metaexchange

Decimal примитивы для денежных расчётов.
"""

from metaexchange.core.math.decimal_safeguards import (
    ZERO,
    DecimalLike,
    quantize,
    safe_divide,
    to_decimal,
    weighted_average,
)

__all__ = [
    # Constants
    "ZERO",
    # Types
    "DecimalLike",
    # Functions
    "quantize",
    "safe_divide",
    "to_decimal",
    "weighted_average",
]
