"""Best Execution — точка входа алгоритма распределения заявки

Поток:
1. Candidate Ranker: заявки всех бирж релевантной стороны, лучшая цена первой
2. Feasibility Check (read-only): хватает ли суммарных средств бирж
3. Если infeasible: пустой план, exceeds_limit=True, без изменений снапшотов
4. Greedy Allocation Engine: исполнение с изменением снапшотов in-place
5. Execution Plan Assembler: средневзвешенная цена и список исполнений

Результат возвращается значением (BestExecutionResult) вместо
out-параметров: exceeds_limit и total_available_funds — поля результата.

Ограничение: одновременные вызовы над одним набором снапшотов
не синхронизируются.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Optional, Sequence

from metaexchange.core.domain.exchange import ExchangeSnapshot
from metaexchange.core.domain.execution_plan import ExecutionPlan, OrderSide
from metaexchange.core.math import DecimalLike, to_decimal
from metaexchange.router.allocation import SkippedCandidate, allocate
from metaexchange.router.candidates import TieBreak, rank_candidates
from metaexchange.router.feasibility import check_feasibility
from metaexchange.router.plan import assemble_plan

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIG
# =============================================================================


@dataclass(frozen=True)
class BestExecutionConfig:
    """Конфигурация best execution.

    tie_break: порядок заявок с одинаковой ценой
    price_quantum: шаг квантования best_price (None — без квантования)
    """

    tie_break: TieBreak = TieBreak.EXCHANGE_ID
    price_quantum: Optional[Decimal] = None


# =============================================================================
# RESULT
# =============================================================================


@dataclass(frozen=True)
class BestExecutionResult:
    """Результат best execution."""

    side: OrderSide
    requested_amount: Decimal
    plan: ExecutionPlan

    # Диагностика feasibility
    exceeds_limit: bool
    total_available_funds: Decimal
    required_funds: Decimal

    # Биржи, состояние которых изменилось (порядок первого исполнения)
    touched_exchange_ids: tuple[str, ...] = ()
    skipped: tuple[SkippedCandidate, ...] = field(default=(), repr=False)

    @property
    def filled_amount(self) -> Decimal:
        return self.plan.filled_amount

    @property
    def fully_filled(self) -> bool:
        """Запрос исполнен полностью (при partial fill — False)."""
        return not self.exceeds_limit and self.plan.filled_amount == self.requested_amount

    def to_document(self) -> Dict[str, Any]:
        """
        JSON-совместимый документ результата (контракт execution_plan.json).

        Decimal значения кодируются строками без потери точности.
        """
        return {
            "side": self.side.value,
            "requested_amount": str(self.requested_amount),
            "exceeds_limit": self.exceeds_limit,
            "total_available_funds": str(self.total_available_funds),
            "best_price": str(self.plan.best_price),
            "filled_amount": str(self.plan.filled_amount),
            "orders": [
                {
                    "exchange": fill.exchange_id,
                    "price": str(fill.price),
                    "amount": str(fill.amount),
                    "order_id": fill.order_id,
                }
                for fill in self.plan.fills
            ],
        }


# =============================================================================
# ENTRY POINT
# =============================================================================


def compute_best_execution(
    side: OrderSide | str,
    amount: DecimalLike,
    exchanges: Sequence[ExchangeSnapshot],
    config: BestExecutionConfig | None = None,
) -> BestExecutionResult:
    """
    Вычисление плана лучшего исполнения.

    При выполнимом запросе снапшоты exchanges изменяются in-place
    (балансы и стаканы); сохранение изменённых бирж — ответственность
    вызывающей стороны.

    Args:
        side: Сторона запроса (OrderSide или "Buy"/"Sell")
        amount: Объём crypto к покупке/продаже (> 0)
        exchanges: Снапшоты бирж (уникальные exchange_id)
        config: Конфигурация (опционально, используется default)

    Returns:
        BestExecutionResult

    Raises:
        ValueError: Если side неизвестна, amount <= 0 или exchange_id дублируются
    """
    config = config or BestExecutionConfig()
    side = OrderSide.parse(side)
    amount = to_decimal(amount)

    if amount <= 0:
        raise ValueError(f"amount must be positive, got {amount}")

    seen: set[str] = set()
    for exchange in exchanges:
        if exchange.exchange_id in seen:
            raise ValueError(f"Duplicate exchange id: {exchange.exchange_id}")
        seen.add(exchange.exchange_id)

    # 1. Ранжирование
    candidates = rank_candidates(exchanges, side, config.tie_break)

    # 2. Feasibility (read-only)
    feasibility = check_feasibility(side, amount, exchanges, candidates)
    if not feasibility.feasible:
        return BestExecutionResult(
            side=side,
            requested_amount=amount,
            plan=ExecutionPlan(),
            exceeds_limit=True,
            total_available_funds=feasibility.total_available_funds,
            required_funds=feasibility.required_funds,
        )

    # 3. Allocation (изменяет снапшоты)
    allocation = allocate(side, amount, candidates, exchanges)

    # 4. План
    plan = assemble_plan(allocation.fills, config.price_quantum)

    logger.info(
        "%s %s: %d fills across %d exchanges, filled %s, best price %s",
        side.value,
        amount,
        len(plan.fills),
        len(allocation.touched_exchange_ids),
        plan.filled_amount,
        plan.best_price,
    )

    return BestExecutionResult(
        side=side,
        requested_amount=amount,
        plan=plan,
        exceeds_limit=False,
        total_available_funds=feasibility.total_available_funds,
        required_funds=feasibility.required_funds,
        touched_exchange_ids=tuple(allocation.touched_exchange_ids),
        skipped=tuple(allocation.skipped),
    )
