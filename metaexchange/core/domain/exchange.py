"""
ExchangeSnapshot — Модель снапшота биржи

Mutable Pydantic модель, представляющая состояние одной биржи:
идентификатор, доступные средства (crypto/EUR) и стакан.

Снапшот создаётся заново на каждый запрос (snapshot store), изменяется
во время allocation и целиком записывается обратно после прогона.
Баланс снапшота является единственным источником истины для ledger.
"""

from decimal import Decimal

from pydantic import BaseModel, Field

from .execution_plan import OrderSide
from .order_book import BookSide, OrderBook


# =============================================================================
# NESTED MODELS
# =============================================================================


class AvailableFunds(BaseModel):
    """
    Доступные средства биржи.

    validate_assignment=True: любое присваивание отрицательного баланса
    поднимает ValidationError (нарушение инварианта, а не runtime условие).
    """

    crypto: Decimal = Field(..., ge=0, description="Баланс crypto (торгуемый актив)")
    euro: Decimal = Field(..., ge=0, description="Баланс EUR (quote currency)")

    model_config = {"validate_assignment": True}


# =============================================================================
# EXCHANGE SNAPSHOT MODEL
# =============================================================================


class ExchangeSnapshot(BaseModel):
    """
    Снапшот биржи (exchange snapshot).

    Содержит:
    - Идентификатор биржи (уникален в рабочем наборе)
    - Доступные средства (available_funds)
    - Стакан (order_book)
    """

    exchange_id: str = Field(..., min_length=1, description="Идентификатор биржи")
    available_funds: AvailableFunds = Field(..., description="Доступные средства")
    order_book: OrderBook = Field(default_factory=OrderBook, description="Стакан заявок")

    model_config = {"validate_assignment": True}

    def ledger_balance(self, side: OrderSide) -> Decimal:
        """
        Ограничивающий баланс для стороны запроса.

        BUY: баланс crypto (биржа отдаёт crypto из своих asks)
        SELL: баланс EUR (биржа платит EUR по своим bids)

        Args:
            side: Сторона запроса

        Returns:
            Текущий баланс соответствующей валюты
        """
        if side == OrderSide.BUY:
            return self.available_funds.crypto
        return self.available_funds.euro

    @staticmethod
    def book_side_for(side: OrderSide) -> BookSide:
        """BUY потребляет asks, SELL потребляет bids."""
        return BookSide.ASKS if side == OrderSide.BUY else BookSide.BIDS
