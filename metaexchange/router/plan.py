"""Execution Plan Assembler — сборка плана из исполнений

best_price = Σ(price_i * amount_i) / Σ(amount_i)
Если исполнений нет: best_price = 0, fills пуст.
"""

from decimal import Decimal
from typing import Optional, Sequence

from metaexchange.core.domain.execution_plan import ExecutionPlan, Fill
from metaexchange.core.math import quantize, weighted_average


def assemble_plan(fills: Sequence[Fill], price_quantum: Optional[Decimal] = None) -> ExecutionPlan:
    """
    Сборка ExecutionPlan из исполнений (чистая функция).

    Args:
        fills: Исполнения в порядке матчинга
        price_quantum: Шаг квантования best_price (None — точное значение)

    Returns:
        ExecutionPlan
    """
    if not fills:
        return ExecutionPlan()

    best_price = weighted_average((fill.price, fill.amount) for fill in fills)

    return ExecutionPlan(
        best_price=quantize(best_price, price_quantum),
        fills=list(fills),
    )
