"""
Тесты для Greedy Allocation Engine

Покрытие:
- BUY/SELL изменения балансов и стаканов
- Пропуск бирж с исчерпанным ledger
- SELL: пропуск candidate при нехватке EUR (без частичного исполнения)
- Устаревшие candidates (заявки нет в стакане)
- Списание по identity при дублирующихся (price, amount)
- Частичное исполнение при исчерпании candidates
"""

from decimal import Decimal

import pytest

from metaexchange.core.domain import BookSide, OrderSide
from metaexchange.router.allocation import (
    SKIP_INSUFFICIENT_CASH,
    SKIP_LEDGER_EXHAUSTED,
    SKIP_STALE_ORDER,
    SKIP_UNKNOWN_EXCHANGE,
    allocate,
)
from metaexchange.router.candidates import rank_candidates


def _run(side: OrderSide, amount: str, exchanges):
    candidates = rank_candidates(exchanges, side)
    return allocate(side, Decimal(amount), candidates, exchanges)


class TestBuyAllocation:
    """BUY: биржа отдаёт crypto по своим asks"""

    def test_single_fill_updates_balances(self, make_exchange) -> None:
        exchange = make_exchange("x", crypto="10", euro="0", asks=[("100", "10")])

        result = _run(OrderSide.BUY, "5", [exchange])

        assert [(f.exchange_id, f.price, f.amount) for f in result.fills] == [
            ("x", Decimal("100"), Decimal("5"))
        ]
        assert result.filled_amount == Decimal("5")
        assert exchange.available_funds.crypto == Decimal("5")
        assert exchange.available_funds.euro == Decimal("500")
        assert exchange.order_book.asks[0].amount == Decimal("5")
        assert result.touched_exchange_ids == ["x"]

    def test_walks_price_levels(self, make_exchange) -> None:
        exchange = make_exchange("x", crypto="10", asks=[("101", "2"), ("100", "1")])

        result = _run(OrderSide.BUY, "2.5", [exchange])

        assert [(f.price, f.amount) for f in result.fills] == [
            (Decimal("100"), Decimal("1")),
            (Decimal("101"), Decimal("1.5")),
        ]
        assert [o.order_id for o in exchange.order_book.asks] == ["x-ask-0"]
        assert exchange.order_book.asks[0].amount == Decimal("0.5")

    def test_capped_by_exchange_crypto(self, make_exchange) -> None:
        """take ограничен ledger балансом биржи"""
        x = make_exchange("x", crypto="1", asks=[("100", "5")])
        y = make_exchange("y", crypto="10", asks=[("105", "5")])

        result = _run(OrderSide.BUY, "3", [x, y])

        assert [(f.exchange_id, f.amount) for f in result.fills] == [
            ("x", Decimal("1")),
            ("y", Decimal("2")),
        ]
        assert x.available_funds.crypto == Decimal("0")
        assert x.order_book.asks[0].amount == Decimal("4")

    def test_exhausted_ledger_skips_remaining_candidates(self, make_exchange) -> None:
        x = make_exchange("x", crypto="2", asks=[("100", "5"), ("101", "5")])
        y = make_exchange("y", crypto="10", asks=[("102", "10")])

        result = _run(OrderSide.BUY, "6", [x, y])

        assert [(f.exchange_id, f.price, f.amount) for f in result.fills] == [
            ("x", Decimal("100"), Decimal("2")),
            ("y", Decimal("102"), Decimal("4")),
        ]
        assert [s.reason for s in result.skipped] == [SKIP_LEDGER_EXHAUSTED]
        assert x.order_book.asks[1].amount == Decimal("5")

    def test_zero_balance_exchange_never_matched(self, make_exchange) -> None:
        x = make_exchange("x", crypto="0", asks=[("90", "5")])
        y = make_exchange("y", crypto="5", asks=[("100", "5")])

        result = _run(OrderSide.BUY, "1", [x, y])

        assert [f.exchange_id for f in result.fills] == ["y"]
        assert x.order_book.asks[0].amount == Decimal("5")

    def test_partial_fill_when_candidates_exhausted(self, make_exchange) -> None:
        exchange = make_exchange("x", crypto="10", asks=[("100", "3")])

        result = _run(OrderSide.BUY, "5", [exchange])

        assert result.filled_amount == Decimal("3")
        assert exchange.order_book.asks == []

    def test_stops_at_requested_amount(self, make_exchange) -> None:
        exchange = make_exchange("x", crypto="10", asks=[("100", "1"), ("101", "1"), ("102", "1")])

        result = _run(OrderSide.BUY, "2", [exchange])

        assert len(result.fills) == 2
        assert result.skipped == []
        assert [o.order_id for o in exchange.order_book.asks] == ["x-ask-2"]
        assert exchange.order_book.asks[0].amount == Decimal("1")


class TestSellAllocation:
    """SELL: биржа платит EUR по своим bids"""

    def test_sell_updates_balances(self, make_exchange) -> None:
        exchange = make_exchange("x", crypto="0", euro="1000", bids=[("10", "50"), ("9", "50")])

        result = _run(OrderSide.SELL, "60", [exchange])

        assert [(f.price, f.amount) for f in result.fills] == [
            (Decimal("10"), Decimal("50")),
            (Decimal("9"), Decimal("10")),
        ]
        assert exchange.available_funds.euro == Decimal("410")
        assert exchange.available_funds.crypto == Decimal("60")
        assert [o.order_id for o in exchange.order_book.bids] == ["x-bid-1"]

    def test_sub_unit_price_caps_take_by_remaining_euro(self, make_exchange) -> None:
        """Ledger SELL = живой баланс EUR, уменьшается на price * take"""
        exchange = make_exchange("x", crypto="0", euro="3", bids=[("0.6", "3"), ("0.5", "10")])

        result = _run(OrderSide.SELL, "5", [exchange])

        assert [(f.price, f.amount) for f in result.fills] == [
            (Decimal("0.6"), Decimal("3")),
            (Decimal("0.5"), Decimal("1.2")),
        ]
        assert result.filled_amount == Decimal("4.2")
        assert exchange.available_funds.euro == Decimal("0.6")
        assert exchange.available_funds.crypto == Decimal("4.2")
        assert exchange.order_book.bids[0].amount == Decimal("8.8")
        assert exchange.order_book.bids[0].amount == Decimal("40")

    def test_insufficient_cash_skips_without_partial(self, make_exchange) -> None:
        x = make_exchange("x", euro="60", bids=[("20", "10")])
        y = make_exchange("y", euro="1000", bids=[("15", "10")])

        result = _run(OrderSide.SELL, "5", [x, y])

        assert [(f.exchange_id, f.amount) for f in result.fills] == [("y", Decimal("5"))]
        assert [s.reason for s in result.skipped] == [SKIP_INSUFFICIENT_CASH]
        assert x.available_funds.euro == Decimal("60")
        assert x.order_book.bids[0].amount == Decimal("10")
        assert y.available_funds.euro == Decimal("925")

    def test_zero_cash_exchange_skipped(self, make_exchange) -> None:
        x = make_exchange("x", euro="0", bids=[("20", "10")])
        y = make_exchange("y", euro="100", bids=[("15", "10")])

        result = _run(OrderSide.SELL, "1", [x, y])

        assert [f.exchange_id for f in result.fills] == ["y"]
        assert result.skipped[0].reason == SKIP_LEDGER_EXHAUSTED


class TestCandidateMatching:
    """Матчинг candidate → заявка по identity"""

    def test_duplicate_price_amount_orders(self, make_exchange) -> None:
        exchange = make_exchange("x", crypto="10", asks=[("100", "2"), ("100", "2")])

        result = _run(OrderSide.BUY, "3", [exchange])

        assert [f.order_id for f in result.fills] == ["x-ask-0", "x-ask-1"]
        assert [(o.order_id, o.amount) for o in exchange.order_book.asks] == [
            ("x-ask-1", Decimal("1"))
        ]

    def test_stale_candidate_skipped(self, make_exchange) -> None:
        exchange = make_exchange("x", crypto="10", asks=[("100", "2"), ("101", "5")])
        candidates = rank_candidates([exchange], OrderSide.BUY)

        # заявка исчезла из стакана после ранжирования
        exchange.order_book.asks.pop(0)

        result = allocate(OrderSide.BUY, Decimal("3"), candidates, [exchange])

        assert [s.reason for s in result.skipped] == [SKIP_STALE_ORDER]
        assert [(f.price, f.amount) for f in result.fills] == [(Decimal("101"), Decimal("3"))]

    def test_same_candidate_twice_not_double_counted(self, make_exchange) -> None:
        exchange = make_exchange("x", crypto="10", asks=[("100", "2"), ("101", "5")])
        candidates = rank_candidates([exchange], OrderSide.BUY)
        duplicated = [candidates[0], candidates[0], candidates[1]]

        result = allocate(OrderSide.BUY, Decimal("4"), duplicated, [exchange])

        assert [(f.price, f.amount) for f in result.fills] == [
            (Decimal("100"), Decimal("2")),
            (Decimal("101"), Decimal("2")),
        ]
        assert result.skipped[0].reason == SKIP_STALE_ORDER

    def test_unknown_exchange_skipped(self, make_exchange) -> None:
        x = make_exchange("x", crypto="10", asks=[("100", "2")])
        y = make_exchange("y", crypto="10", asks=[("101", "2")])
        candidates = rank_candidates([x, y], OrderSide.BUY)

        result = allocate(OrderSide.BUY, Decimal("1"), candidates, [y])

        assert [s.reason for s in result.skipped] == [SKIP_UNKNOWN_EXCHANGE]
        assert [f.exchange_id for f in result.fills] == ["y"]
        assert x.order_book.asks[0].amount == Decimal("2")

    def test_fill_copies_order_price(self, make_exchange) -> None:
        exchange = make_exchange("x", crypto="10", asks=[("57299.73", "0.405")])

        result = _run(OrderSide.BUY, "0.1", [exchange])

        assert result.fills[0].price == Decimal("57299.73")
        assert result.fills[0].order_id == "x-ask-0"

    def test_touched_exchanges_in_first_fill_order(self, make_exchange) -> None:
        x = make_exchange("x", crypto="10", asks=[("100", "1"), ("103", "1")])
        y = make_exchange("y", crypto="10", asks=[("101", "1")])

        result = _run(OrderSide.BUY, "3", [x, y])

        assert result.touched_exchange_ids == ["x", "y"]


@pytest.mark.parametrize("side", [OrderSide.BUY, OrderSide.SELL])
def test_empty_candidates(make_exchange, side: OrderSide) -> None:
    exchange = make_exchange("x", crypto="1", euro="1")

    result = allocate(side, Decimal("1"), [], [exchange])

    assert result.fills == []
    assert result.filled_amount == Decimal("0")
    assert exchange.available_funds.crypto == Decimal("1")
    assert book_is_empty(exchange)


def book_is_empty(exchange) -> bool:
    return not exchange.order_book.orders(BookSide.ASKS) and not exchange.order_book.orders(BookSide.BIDS)
