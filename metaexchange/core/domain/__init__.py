"""
Domain models and value objects.

Contains exchange snapshots, order books and execution plan models.
"""

from metaexchange.core.domain.exchange import AvailableFunds, ExchangeSnapshot
from metaexchange.core.domain.execution_plan import ExecutionPlan, Fill, OrderSide
from metaexchange.core.domain.order_book import BookSide, Order, OrderBook

__all__ = [
    # Order book
    "BookSide",
    "Order",
    "OrderBook",
    # Exchange snapshot
    "AvailableFunds",
    "ExchangeSnapshot",
    # Execution plan
    "OrderSide",
    "Fill",
    "ExecutionPlan",
]
