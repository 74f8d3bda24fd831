"""
Decimal Safeguards — Safe Decimal Primitives

Модуль обеспечивает корректную работу с денежными величинами в Decimal:
- Коэрсия входных значений (str/int/float/Decimal) в Decimal без потери точности
- Безопасное деление с защитой от деления на ноль
- Взвешенное среднее (size-weighted average price)
- Квантование результата для отображения

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Деление на ноль никогда не происходит (возвращается fallback)
2. NaN/Inf никогда не пропагируют (ValueError на входе)
3. float конвертируется через str (Decimal(0.1) != Decimal("0.1"))
"""

from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation
from typing import Final, Iterable, Optional, Union

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

ZERO: Final[Decimal] = Decimal("0")

DecimalLike = Union[Decimal, int, float, str]


# =============================================================================
# КОЭРСИЯ
# =============================================================================


def to_decimal(value: DecimalLike) -> Decimal:
    """
    Конверсия значения в конечный Decimal.

    Args:
        value: Decimal, int, float или строка с числом

    Returns:
        Decimal

    Raises:
        ValueError: Если значение не число, NaN или Inf

    Examples:
        >>> to_decimal("0.1")
        Decimal('0.1')
        >>> to_decimal(0.1)
        Decimal('0.1')
    """
    if isinstance(value, bool):
        raise ValueError(f"Expected a number, got bool {value!r}")

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, float):
        result = Decimal(str(value))
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValueError(f"Not a valid decimal number: {value!r}")

    if not result.is_finite():
        raise ValueError(f"Decimal value must be finite, got {value!r}")

    return result


# =============================================================================
# БЕЗОПАСНОЕ ДЕЛЕНИЕ
# =============================================================================


def safe_divide(
    numerator: Decimal,
    denominator: Decimal,
    fallback: Decimal = ZERO,
) -> Decimal:
    """
    Безопасное деление Decimal.

    Args:
        numerator: Числитель
        denominator: Знаменатель
        fallback: Значение при нулевом знаменателе (default: 0)

    Returns:
        numerator / denominator или fallback, если denominator == 0

    Examples:
        >>> safe_divide(Decimal("10"), Decimal("4"))
        Decimal('2.5')
        >>> safe_divide(Decimal("10"), Decimal("0"))
        Decimal('0')
    """
    if denominator == 0:
        return fallback
    return numerator / denominator


def weighted_average(pairs: Iterable[tuple[Decimal, Decimal]]) -> Decimal:
    """
    Взвешенное среднее Σ(value_i * weight_i) / Σ(weight_i).

    Args:
        pairs: Пары (value, weight); веса неотрицательны

    Returns:
        Взвешенное среднее или 0, если суммарный вес равен 0

    Raises:
        ValueError: Если встречен отрицательный вес
    """
    total_weighted = ZERO
    total_weight = ZERO

    for value, weight in pairs:
        if weight < 0:
            raise ValueError(f"weight must be non-negative, got {weight}")
        total_weighted += value * weight
        total_weight += weight

    return safe_divide(total_weighted, total_weight)


# =============================================================================
# КВАНТОВАНИЕ
# =============================================================================


def quantize(value: Decimal, quantum: Optional[Decimal]) -> Decimal:
    """
    Квантование Decimal до шага quantum (ROUND_HALF_EVEN).

    Args:
        value: Исходное значение
        quantum: Шаг (например, Decimal("0.01")); None — без изменений

    Returns:
        Квантованное значение
    """
    if quantum is None:
        return value
    if quantum <= 0:
        raise ValueError(f"quantum must be positive, got {quantum}")
    return value.quantize(quantum, rounding=ROUND_HALF_EVEN)
