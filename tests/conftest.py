"""Общие фикстуры тестов metaexchange."""

from decimal import Decimal
from typing import Callable, Sequence

import pytest

from metaexchange.core.domain import AvailableFunds, ExchangeSnapshot, Order, OrderBook

PriceLevel = tuple[str, str]  # (price, amount)


def build_exchange(
    exchange_id: str,
    crypto: str = "0",
    euro: str = "0",
    bids: Sequence[PriceLevel] = (),
    asks: Sequence[PriceLevel] = (),
) -> ExchangeSnapshot:
    """Снапшот биржи из строковых уровней; order_id = '<exchange>-<side>-<i>'."""
    return ExchangeSnapshot(
        exchange_id=exchange_id,
        available_funds=AvailableFunds(crypto=Decimal(crypto), euro=Decimal(euro)),
        order_book=OrderBook(
            bids=[
                Order(order_id=f"{exchange_id}-bid-{i}", price=Decimal(p), amount=Decimal(a))
                for i, (p, a) in enumerate(bids)
            ],
            asks=[
                Order(order_id=f"{exchange_id}-ask-{i}", price=Decimal(p), amount=Decimal(a))
                for i, (p, a) in enumerate(asks)
            ],
        ),
    )


@pytest.fixture
def make_exchange() -> Callable[..., ExchangeSnapshot]:
    """Фабрика снапшотов бирж."""
    return build_exchange
