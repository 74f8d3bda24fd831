"""Candidate Ranker — глобальное ранжирование заявок всех бирж

Объединяет заявки всех бирж релевантной стороны стакана
(asks для BUY, bids для SELL) в одну последовательность,
упорядоченную от самой выгодной для инициатора цены:
- BUY: по возрастанию цены (самые дешёвые asks первыми)
- SELL: по убыванию цены (самые дорогие bids первыми)

Candidate хранит ссылку на объект Order в снапшоте (без копирования),
поэтому allocation списывает объём именно с той заявки, которая была
проранжирована, даже при дублирующихся (price, amount).

Tie-break при равной цене детерминирован (TieBreak).
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Sequence

from metaexchange.core.domain.exchange import ExchangeSnapshot
from metaexchange.core.domain.execution_plan import OrderSide
from metaexchange.core.domain.order_book import BookSide, Order


# =============================================================================
# TYPES
# =============================================================================


class TieBreak(str, Enum):
    """Порядок заявок с одинаковой ценой."""

    EXCHANGE_ID = "exchange_id"  # по id биржи, затем по позиции в стакане
    LARGEST_AMOUNT = "largest_amount"  # больший объём первым, затем по id биржи


@dataclass(frozen=True)
class Candidate:
    """Проранжированная, ещё не исполненная заявка."""

    exchange_id: str
    price: Decimal
    amount: Decimal  # остаток заявки на момент ранжирования
    order: Order  # ссылка на заявку в стакане биржи
    book_side: BookSide
    book_position: int

    @property
    def order_id(self) -> str | None:
        return self.order.order_id


# =============================================================================
# RANKER
# =============================================================================


def rank_candidates(
    exchanges: Sequence[ExchangeSnapshot],
    side: OrderSide,
    tie_break: TieBreak = TieBreak.EXCHANGE_ID,
) -> list[Candidate]:
    """
    Ранжирование заявок всех бирж для стороны запроса.

    Чистая проекция: снапшоты не изменяются.

    Args:
        exchanges: Снапшоты бирж
        side: Сторона запроса (BUY → asks, SELL → bids)
        tie_break: Порядок при равной цене

    Returns:
        Список Candidate, лучшая цена первой (пустой, если заявок нет)
    """
    book_side = ExchangeSnapshot.book_side_for(side)

    candidates = [
        Candidate(
            exchange_id=exchange.exchange_id,
            price=order.price,
            amount=order.amount,
            order=order,
            book_side=book_side,
            book_position=position,
        )
        for exchange in exchanges
        for position, order in enumerate(exchange.order_book.orders(book_side))
        if order.amount > 0
    ]

    # BUY: дешевле лучше; SELL: дороже лучше
    price_sign = 1 if side == OrderSide.BUY else -1

    if tie_break == TieBreak.LARGEST_AMOUNT:
        candidates.sort(
            key=lambda c: (price_sign * c.price, -c.amount, c.exchange_id, c.book_position)
        )
    else:
        candidates.sort(key=lambda c: (price_sign * c.price, c.exchange_id, c.book_position))

    return candidates
