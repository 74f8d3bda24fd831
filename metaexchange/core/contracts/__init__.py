"""
Contract Validation Module

Модуль для валидации JSON контрактов metaexchange.
"""

from .validators import (
    ContractValidator,
    ExchangeSnapshotValidator,
    ExecutionPlanValidator,
    SchemaLoader,
    validate_exchange_snapshot,
    validate_execution_plan,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "ExchangeSnapshotValidator",
    "ExecutionPlanValidator",
    # Functions
    "validate_exchange_snapshot",
    "validate_execution_plan",
]
