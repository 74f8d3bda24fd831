"""Feasibility Check — проверка выполнимости запроса до allocation

Проверка read-only: снапшоты не изменяются, candidates не резервируются.

BUY:
    ограничивающий ресурс — суммарный баланс crypto всех бирж.
    required_funds = amount
    infeasible, если amount > Σ crypto

SELL:
    ограничивающий ресурс — суммарный баланс EUR всех бирж, но требуемая
    сумма зависит от цены: проходим проранжированные bids, набирая объём
    до amount, и суммируем price * taken (EUR, которые получит продавец).
    infeasible, если required_funds > Σ euro

Buy-проверка только по количеству и не учитывает, может ли стакан
реально отдать этот объём; allocation в таком случае возвращает
частичный план.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from metaexchange.core.domain.exchange import ExchangeSnapshot
from metaexchange.core.domain.execution_plan import OrderSide
from metaexchange.core.math import ZERO
from metaexchange.router.candidates import Candidate

logger = logging.getLogger(__name__)


# =============================================================================
# RESULT
# =============================================================================


@dataclass(frozen=True)
class FeasibilityResult:
    """Результат проверки выполнимости."""

    feasible: bool
    total_available_funds: Decimal  # Σ crypto (BUY) или Σ euro (SELL)
    required_funds: Decimal  # amount (BUY) или EUR для продажи (SELL)
    reason: str

    @property
    def exceeds_limit(self) -> bool:
        return not self.feasible


# =============================================================================
# CHECKS
# =============================================================================


def total_available_funds(exchanges: Sequence[ExchangeSnapshot], side: OrderSide) -> Decimal:
    """Суммарный ограничивающий баланс всех бирж для стороны запроса."""
    return sum((exchange.ledger_balance(side) for exchange in exchanges), ZERO)


def required_sell_funds(candidates: Sequence[Candidate], amount: Decimal) -> Decimal:
    """
    EUR, необходимые для продажи amount по проранжированным bids.

    Args:
        candidates: Проранжированные bids (лучшая цена первой)
        amount: Запрошенный объём продажи

    Returns:
        Σ price * taken по bids до набора amount
    """
    required = ZERO
    accumulated = ZERO

    for candidate in candidates:
        if accumulated >= amount:
            break

        taken = min(amount - accumulated, candidate.amount)
        required += taken * candidate.price
        accumulated += taken

    return required


def check_feasibility(
    side: OrderSide,
    amount: Decimal,
    exchanges: Sequence[ExchangeSnapshot],
    candidates: Sequence[Candidate],
) -> FeasibilityResult:
    """
    Проверка выполнимости запроса.

    Args:
        side: Сторона запроса
        amount: Запрошенный объём (> 0)
        exchanges: Снапшоты бирж (не изменяются)
        candidates: Проранжированные candidates для side (используются только для SELL)

    Returns:
        FeasibilityResult
    """
    available = total_available_funds(exchanges, side)

    if side == OrderSide.BUY:
        required = amount
        feasible = required <= available
        unit = "crypto"
    else:
        required = required_sell_funds(candidates, amount)
        feasible = required <= available
        unit = "EUR"

    if feasible:
        reason = f"PASS: required {required} <= available {available} {unit}"
    else:
        reason = f"exceeds_limit: required {required} > available {available} {unit}"
        logger.warning("%s request for %s %s", side.value, amount, reason)

    return FeasibilityResult(
        feasible=feasible,
        total_available_funds=available,
        required_funds=required,
        reason=reason,
    )
