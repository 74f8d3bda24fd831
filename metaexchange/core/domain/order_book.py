"""
OrderBook — Модель стакана заявок одной биржи

Mutable Pydantic модели, представляющие стакан (bids/asks) биржи.
Стакан изменяется in-place во время allocation: остаток заявки уменьшается
монотонно, заявка с остатком <= 0 удаляется из своей стороны стакана.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. amount заявки никогда не отрицателен (validate_assignment)
2. Списание с заявки идёт по identity объекта Order, а не по (price, amount)
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


# =============================================================================
# ENUMS
# =============================================================================


class BookSide(str, Enum):
    """Сторона стакана"""

    BIDS = "bids"  # заявки на покупку (покупатели)
    ASKS = "asks"  # заявки на продажу (продавцы)


# =============================================================================
# ORDER MODEL
# =============================================================================


class Order(BaseModel):
    """
    Лимитная заявка в стакане.

    Mutable модель: allocation уменьшает amount на исполненный объём.
    Метаданные (time/type/kind) не участвуют в расчёте и сохраняются
    только для полной записи снапшота обратно в хранилище.
    """

    order_id: Optional[str] = Field(None, description="Идентификатор заявки (может отсутствовать)")
    amount: Decimal = Field(..., ge=0, description="Оставшийся объём заявки (crypto)")
    price: Decimal = Field(..., gt=0, description="Цена заявки (EUR за единицу crypto)")

    # Метаданные источника
    time: Optional[str] = Field(None, description="Время выставления заявки")
    type: Optional[str] = Field(None, description="Тип заявки (Buy/Sell)")
    kind: Optional[str] = Field(None, description="Вид заявки (Limit)")

    model_config = {"validate_assignment": True}

    @property
    def notional(self) -> Decimal:
        """Стоимость оставшегося объёма заявки (price * amount)."""
        return self.price * self.amount


# =============================================================================
# ORDER BOOK MODEL
# =============================================================================


class OrderBook(BaseModel):
    """
    Стакан биржи: списки bid и ask заявок.

    Порядок заявок внутри стороны сохраняется как в источнике
    (используется как последний tie-break при ранжировании).
    """

    bids: list[Order] = Field(default_factory=list, description="Заявки на покупку")
    asks: list[Order] = Field(default_factory=list, description="Заявки на продажу")
    acq_time: Optional[str] = Field(None, description="Время получения стакана источником")

    model_config = {"validate_assignment": True}

    def orders(self, side: BookSide) -> list[Order]:
        """
        Заявки одной стороны стакана (live список, не копия).

        Args:
            side: Сторона стакана

        Returns:
            Список заявок этой стороны
        """
        return self.bids if side == BookSide.BIDS else self.asks

    def contains(self, side: BookSide, order: Order) -> bool:
        """Проверка, что именно этот объект заявки всё ещё в стакане."""
        return any(existing is order for existing in self.orders(side))

    def consume(self, side: BookSide, order: Order, amount: Decimal) -> Optional[Decimal]:
        """
        Списание объёма с заявки (decrement-or-remove).

        Заявка ищется по identity. Если остаток после списания <= 0,
        заявка удаляется из стакана.

        Args:
            side: Сторона стакана, где находится заявка
            order: Объект заявки (ссылка из candidate)
            amount: Списываемый объём (> 0)

        Returns:
            Остаток заявки после списания или None, если заявки уже нет в стакане

        Raises:
            ValueError: Если amount <= 0 или превышает остаток заявки
        """
        if amount <= 0:
            raise ValueError(f"consume amount must be positive, got {amount}")

        orders = self.orders(side)
        for index, existing in enumerate(orders):
            if existing is not order:
                continue

            if amount > existing.amount:
                raise ValueError(
                    f"consume amount {amount} exceeds order remaining {existing.amount}"
                )

            remaining = existing.amount - amount
            existing.amount = remaining
            if remaining <= 0:
                del orders[index]
            return remaining

        return None

    def depth(self, side: BookSide) -> Decimal:
        """Суммарный объём заявок одной стороны."""
        return sum((order.amount for order in self.orders(side)), Decimal("0"))
