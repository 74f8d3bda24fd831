"""
ExecutionPlan — Модель плана исполнения

Immutable Pydantic модели результата: отдельные исполнения (Fill)
и итоговый план с взвешенной по объёму средней ценой (best_price).
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


# =============================================================================
# ENUMS
# =============================================================================


class OrderSide(str, Enum):
    """Сторона запроса"""

    BUY = "Buy"
    SELL = "Sell"

    @classmethod
    def parse(cls, value: "OrderSide | str") -> "OrderSide":
        """
        Разбор стороны из строки (регистр не важен).

        Raises:
            ValueError: Если значение не Buy/Sell
        """
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        for member in cls:
            if member.value.lower() == normalized:
                return member
        raise ValueError(f"Unknown order side: {value!r} (expected Buy or Sell)")


# =============================================================================
# FILL MODEL
# =============================================================================


class Fill(BaseModel):
    """
    Исполненная часть заявки на конкретной бирже.

    Цена копируется из исходной заявки, не пересчитывается.
    """

    exchange_id: str = Field(..., min_length=1, description="Идентификатор биржи")
    price: Decimal = Field(..., gt=0, description="Цена исполнения")
    amount: Decimal = Field(..., gt=0, description="Исполненный объём (crypto)")
    order_id: Optional[str] = Field(None, description="Идентификатор исходной заявки")

    model_config = {"frozen": True}

    @property
    def cost(self) -> Decimal:
        """Стоимость исполнения в EUR (price * amount)."""
        return self.price * self.amount


# =============================================================================
# EXECUTION PLAN MODEL
# =============================================================================


class ExecutionPlan(BaseModel):
    """
    План исполнения.

    Immutable модель (frozen=True). best_price = 0 тогда и только тогда,
    когда список fills пуст.
    """

    best_price: Decimal = Field(
        default=Decimal("0"), ge=0, description="Средневзвешенная цена исполнения"
    )
    fills: list[Fill] = Field(default_factory=list, description="Исполнения в порядке матчинга")

    model_config = {"frozen": True}

    @field_validator("best_price")
    @classmethod
    def validate_best_price_finite(cls, v: Decimal) -> Decimal:
        """Защита от NaN/Inf в best_price."""
        if not v.is_finite():
            raise ValueError(f"best_price must be finite, got {v}")
        return v

    @property
    def filled_amount(self) -> Decimal:
        """Суммарный исполненный объём."""
        return sum((fill.amount for fill in self.fills), Decimal("0"))

    @property
    def total_cost(self) -> Decimal:
        """Суммарная стоимость исполнений в EUR."""
        return sum((fill.cost for fill in self.fills), Decimal("0"))

    @property
    def is_empty(self) -> bool:
        return not self.fills
