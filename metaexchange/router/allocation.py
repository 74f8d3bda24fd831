"""Greedy Allocation Engine — жадное исполнение по проранжированным заявкам

Проходит candidates в порядке ранжирования и для каждого:
1. Пропускает биржу, если её ledger баланс исчерпан (<= 0)
2. take = min(остаток запроса, остаток заявки, ledger баланс биржи)
3. SELL: пропускает candidate целиком, если EUR биржи не покрывают price * take
4. Применяет исполнение:
   BUY:  crypto -= take, euro += price * take, списание с ask заявки
   SELL: euro -= price * take, crypto += take, списание с bid заявки
5. Добавляет Fill и увеличивает исполненный объём
6. Останавливается, когда исполненный объём достиг запроса

Ledger не ведётся отдельным словарём: баланс снапшота биржи
(ExchangeSnapshot.ledger_balance) является единственным источником истины.

Устаревший candidate (заявки уже нет в стакане) пропускается, а не
считается ошибкой.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Sequence

from metaexchange.core.domain.exchange import ExchangeSnapshot
from metaexchange.core.domain.execution_plan import Fill, OrderSide
from metaexchange.core.math import ZERO
from metaexchange.router.candidates import Candidate

logger = logging.getLogger(__name__)


# =============================================================================
# EXCEPTIONS
# =============================================================================


class AllocationInvariantError(Exception):
    """
    Нарушение инварианта allocation (ошибка в коде, а не runtime условие).

    Например: исполненный объём превысил запрошенный.
    """

    pass


# =============================================================================
# SKIP REASONS
# =============================================================================

SKIP_UNKNOWN_EXCHANGE = "unknown_exchange"
SKIP_LEDGER_EXHAUSTED = "ledger_exhausted"
SKIP_STALE_ORDER = "stale_order"
SKIP_INSUFFICIENT_CASH = "insufficient_cash"


# =============================================================================
# RESULT
# =============================================================================


@dataclass(frozen=True)
class SkippedCandidate:
    """Candidate, пропущенный при allocation."""

    exchange_id: str
    price: Decimal
    amount: Decimal
    reason: str


@dataclass
class AllocationResult:
    """Результат allocation."""

    fills: list[Fill] = field(default_factory=list)
    filled_amount: Decimal = ZERO
    touched_exchange_ids: list[str] = field(default_factory=list)
    skipped: list[SkippedCandidate] = field(default_factory=list)


# =============================================================================
# ENGINE
# =============================================================================


def allocate(
    side: OrderSide,
    amount: Decimal,
    candidates: Sequence[Candidate],
    exchanges: Sequence[ExchangeSnapshot],
) -> AllocationResult:
    """
    Жадное исполнение запроса по проранжированным candidates.

    Изменяет снапшоты in-place (балансы и стаканы).

    Args:
        side: Сторона запроса
        amount: Запрошенный объём (> 0)
        candidates: Candidates в порядке ранжирования
        exchanges: Снапшоты бирж, на которые ссылаются candidates

    Returns:
        AllocationResult с исполнениями в порядке матчинга

    Raises:
        AllocationInvariantError: Если исполненный объём превысил запрос
    """
    by_id = {exchange.exchange_id: exchange for exchange in exchanges}
    result = AllocationResult()

    def skip(candidate: Candidate, reason: str) -> None:
        logger.debug(
            "Skipping %s candidate at %s on %s: %s",
            candidate.book_side.value,
            candidate.price,
            candidate.exchange_id,
            reason,
        )
        result.skipped.append(
            SkippedCandidate(
                exchange_id=candidate.exchange_id,
                price=candidate.price,
                amount=candidate.amount,
                reason=reason,
            )
        )

    for candidate in candidates:
        if result.filled_amount >= amount:
            break

        exchange = by_id.get(candidate.exchange_id)
        if exchange is None:
            skip(candidate, SKIP_UNKNOWN_EXCHANGE)
            continue

        # 1. Ledger биржи исчерпан
        ledger = exchange.ledger_balance(side)
        if ledger <= 0:
            skip(candidate, SKIP_LEDGER_EXHAUSTED)
            continue

        # Матчинг candidate → заявка по identity
        order = candidate.order
        book = exchange.order_book
        if order.amount <= 0 or not book.contains(candidate.book_side, order):
            skip(candidate, SKIP_STALE_ORDER)
            continue

        # 2. Объём к исполнению
        take = min(amount - result.filled_amount, order.amount, ledger)
        cost = take * order.price
        funds = exchange.available_funds

        # 3-4. Применение исполнения
        if side == OrderSide.SELL:
            if funds.euro < cost:
                skip(candidate, SKIP_INSUFFICIENT_CASH)
                continue
            funds.euro = funds.euro - cost
            funds.crypto = funds.crypto + take
        else:
            funds.crypto = funds.crypto - take
            funds.euro = funds.euro + cost

        book.consume(candidate.book_side, order, take)

        # 5. Fill
        result.fills.append(
            Fill(
                exchange_id=exchange.exchange_id,
                price=order.price,
                amount=take,
                order_id=order.order_id,
            )
        )
        result.filled_amount += take
        if exchange.exchange_id not in result.touched_exchange_ids:
            result.touched_exchange_ids.append(exchange.exchange_id)

        if result.filled_amount > amount:
            raise AllocationInvariantError(
                f"filled amount {result.filled_amount} exceeds requested {amount}"
            )

    if result.filled_amount < amount:
        logger.warning(
            "%s request for %s only partially filled: %s (candidates exhausted)",
            side.value,
            amount,
            result.filled_amount,
        )

    return result
