"""
Юнит-тесты для модуля Decimal Safeguards

Проверяет:
1. Коэрсию значений в Decimal без потери точности
2. Безопасное деление (нулевой знаменатель)
3. Взвешенное среднее
4. Квантование
"""

from decimal import Decimal

import pytest

from metaexchange.core.math import (
    ZERO,
    quantize,
    safe_divide,
    to_decimal,
    weighted_average,
)


class TestToDecimal:
    """Тесты коэрсии в Decimal"""

    def test_string(self) -> None:
        assert to_decimal("0.1") == Decimal("0.1")
        assert to_decimal(" 12.50 ") == Decimal("12.50")

    def test_float_goes_through_str(self) -> None:
        """float конвертируется через str: 0.1 → Decimal('0.1')"""
        assert to_decimal(0.1) == Decimal("0.1")

    def test_int_and_decimal(self) -> None:
        assert to_decimal(5) == Decimal("5")
        value = Decimal("3.14")
        assert to_decimal(value) is value

    @pytest.mark.parametrize("raw", ["abc", "", "1,5", "NaN", "Infinity", float("nan"), float("inf")])
    def test_invalid(self, raw) -> None:
        with pytest.raises(ValueError):
            to_decimal(raw)

    def test_bool_rejected(self) -> None:
        with pytest.raises(ValueError, match="bool"):
            to_decimal(True)


class TestSafeDivide:
    """Тесты безопасного деления"""

    def test_basic(self) -> None:
        assert safe_divide(Decimal("10"), Decimal("4")) == Decimal("2.5")

    def test_zero_denominator_fallback(self) -> None:
        assert safe_divide(Decimal("10"), Decimal("0")) == ZERO
        assert safe_divide(Decimal("10"), Decimal("0"), fallback=Decimal("-1")) == Decimal("-1")


class TestWeightedAverage:
    """Тесты взвешенного среднего"""

    def test_cross_exchange_buy(self) -> None:
        """(100*3 + 101*2) / 5 = 100.4"""
        pairs = [(Decimal("100"), Decimal("3")), (Decimal("101"), Decimal("2"))]
        assert weighted_average(pairs) == Decimal("100.4")

    def test_single_value(self) -> None:
        assert weighted_average([(Decimal("57226.46"), Decimal("0.01"))]) == Decimal("57226.46")

    def test_empty_is_zero(self) -> None:
        assert weighted_average([]) == ZERO

    def test_zero_weights_is_zero(self) -> None:
        assert weighted_average([(Decimal("100"), Decimal("0"))]) == ZERO

    def test_negative_weight_rejected(self) -> None:
        with pytest.raises(ValueError, match="non-negative"):
            weighted_average([(Decimal("100"), Decimal("-1"))])

    def test_accepts_generator(self) -> None:
        pairs = ((Decimal(p), Decimal("1")) for p in ("1", "2", "3"))
        assert weighted_average(pairs) == Decimal("2")


class TestQuantize:
    """Тесты квантования"""

    def test_none_is_identity(self) -> None:
        value = Decimal("100.123456")
        assert quantize(value, None) is value

    def test_half_even(self) -> None:
        assert quantize(Decimal("100.125"), Decimal("0.01")) == Decimal("100.12")
        assert quantize(Decimal("100.135"), Decimal("0.01")) == Decimal("100.14")

    def test_non_positive_quantum(self) -> None:
        with pytest.raises(ValueError):
            quantize(Decimal("1"), Decimal("0"))
