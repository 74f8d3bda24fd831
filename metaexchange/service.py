"""Best Execution Service — загрузка, расчёт и сохранение для одного запроса

1. Загрузка всех снапшотов из хранилища (свежие на каждый запрос)
2. compute_best_execution
3. Если запрос выполним и persist=True: полная запись каждой изменённой
   биржи (один раз после прогона, не после каждого исполнения)
"""

import logging

from metaexchange.core.domain.execution_plan import OrderSide
from metaexchange.core.math import DecimalLike
from metaexchange.router.best_execution import (
    BestExecutionConfig,
    BestExecutionResult,
    compute_best_execution,
)
from metaexchange.storage.snapshot_store import ExchangeSnapshotStore

logger = logging.getLogger(__name__)


class BestExecutionService:
    """Оркестрация best execution поверх хранилища снапшотов."""

    def __init__(
        self,
        store: ExchangeSnapshotStore,
        config: BestExecutionConfig | None = None,
    ):
        self.store = store
        self.config = config or BestExecutionConfig()

    def execute(
        self,
        side: OrderSide | str,
        amount: DecimalLike,
        persist: bool = True,
    ) -> BestExecutionResult:
        """
        Выполнение запроса над текущими снапшотами хранилища.

        Args:
            side: Сторона запроса
            amount: Объём crypto (> 0)
            persist: Сохранять изменённые биржи (False — dry run)

        Returns:
            BestExecutionResult

        Raises:
            ValueError: Некорректные side/amount
            SnapshotStoreError: Директория недоступна или запись не удалась
        """
        exchanges = self.store.load_all()
        result = compute_best_execution(side, amount, exchanges, self.config)

        if result.exceeds_limit or not persist:
            return result

        touched = set(result.touched_exchange_ids)
        self.store.save_all(
            exchange for exchange in exchanges if exchange.exchange_id in touched
        )
        logger.info("Persisted %d exchanges", len(touched))

        return result
