"""Snapshot Store — загрузка и сохранение снапшотов бирж (JSON файлы)

Формат файла (один файл на биржу, exchanges/<id>.json):

    {
      "Id": "exchange-01",
      "AvailableFunds": {"Crypto": 10.5, "Euro": 120000},
      "OrderBook": {
        "AcqTime": "...",
        "Bids": [{"Order": {"Id": null, "Time": "...", "Type": "Buy",
                            "Kind": "Limit", "Amount": 0.01, "Price": 2960.64}}],
        "Asks": [...]
      }
    }

Числа читаются и пишутся как Decimal без потерь (simplejson,
use_decimal=True). Документ проверяется JSON Schema контрактом
exchange_snapshot.json, затем Pydantic моделью.

Сохранение — полная замена файла (не diff) через временный файл
и атомарный os.replace.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Final, Iterable, Optional

import simplejson
from jsonschema import ValidationError as SchemaValidationError
from pydantic import ValidationError as ModelValidationError

from metaexchange.core.contracts import validate_exchange_snapshot
from metaexchange.core.domain.exchange import AvailableFunds, ExchangeSnapshot
from metaexchange.core.domain.order_book import Order, OrderBook

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

DEFAULT_EXCHANGES_DIR: Final[str] = "exchanges"
SNAPSHOT_FILE_SUFFIX: Final[str] = ".json"


# =============================================================================
# EXCEPTIONS
# =============================================================================


class SnapshotStoreError(Exception):
    """Ошибка загрузки или сохранения снапшота биржи."""

    pass


# =============================================================================
# DOCUMENT MAPPING
# =============================================================================


def _order_from_entry(entry: Dict[str, Any]) -> Order:
    raw = entry["Order"]
    return Order(
        order_id=raw.get("Id"),
        amount=raw["Amount"],
        price=raw["Price"],
        time=raw.get("Time"),
        type=raw.get("Type"),
        kind=raw.get("Kind"),
    )


def _order_to_entry(order: Order) -> Dict[str, Any]:
    return {
        "Order": {
            "Id": order.order_id,
            "Time": order.time,
            "Type": order.type,
            "Kind": order.kind,
            "Amount": order.amount,
            "Price": order.price,
        }
    }


def snapshot_from_document(document: Dict[str, Any]) -> ExchangeSnapshot:
    """
    Построение ExchangeSnapshot из JSON документа.

    Args:
        document: Документ файла снапшота

    Returns:
        ExchangeSnapshot

    Raises:
        jsonschema.ValidationError: Если документ нарушает контракт
        pydantic.ValidationError: Если значения нарушают инварианты модели
    """
    validate_exchange_snapshot(document)

    funds = document["AvailableFunds"]
    book = document.get("OrderBook") or {}

    return ExchangeSnapshot(
        exchange_id=document["Id"],
        available_funds=AvailableFunds(crypto=funds["Crypto"], euro=funds["Euro"]),
        order_book=OrderBook(
            bids=[_order_from_entry(entry) for entry in book.get("Bids") or []],
            asks=[_order_from_entry(entry) for entry in book.get("Asks") or []],
            acq_time=book.get("AcqTime"),
        ),
    )


def snapshot_to_document(snapshot: ExchangeSnapshot) -> Dict[str, Any]:
    """
    JSON документ полного снапшота биржи (Decimal значения как есть).

    Args:
        snapshot: Снапшот биржи

    Returns:
        Документ в формате файла снапшота
    """
    book = snapshot.order_book
    order_book: Dict[str, Any] = {}
    if book.acq_time is not None:
        order_book["AcqTime"] = book.acq_time
    order_book["Bids"] = [_order_to_entry(order) for order in book.bids]
    order_book["Asks"] = [_order_to_entry(order) for order in book.asks]

    return {
        "Id": snapshot.exchange_id,
        "AvailableFunds": {
            "Crypto": snapshot.available_funds.crypto,
            "Euro": snapshot.available_funds.euro,
        },
        "OrderBook": order_book,
    }


def dumps_snapshot(snapshot: ExchangeSnapshot) -> str:
    """Сериализация снапшота в текст JSON файла."""
    return simplejson.dumps(snapshot_to_document(snapshot), indent=2, use_decimal=True)


def loads_snapshot(text: str) -> ExchangeSnapshot:
    """Десериализация снапшота из текста JSON файла (числа как Decimal)."""
    return snapshot_from_document(simplejson.loads(text, use_decimal=True))


# =============================================================================
# STORE
# =============================================================================


class ExchangeSnapshotStore:
    """
    Хранилище снапшотов бирж в директории JSON файлов.

    Запоминает файл, из которого загружена каждая биржа, и сохраняет
    её обратно в тот же файл (иначе в <exchange_id>.json).
    """

    def __init__(self, directory: Path | str = DEFAULT_EXCHANGES_DIR):
        self.directory = Path(directory)
        self._paths: Dict[str, Path] = {}

    def _path_for(self, exchange_id: str) -> Path:
        return self._paths.get(exchange_id) or self.directory / f"{exchange_id}{SNAPSHOT_FILE_SUFFIX}"

    def snapshot_files(self) -> list[Path]:
        """
        JSON файлы директории, отсортированные по имени.

        Raises:
            SnapshotStoreError: Если директория не существует
        """
        if not self.directory.is_dir():
            raise SnapshotStoreError(f"Exchanges directory not found: {self.directory}")
        return sorted(self.directory.glob(f"*{SNAPSHOT_FILE_SUFFIX}"))

    def load_file(self, path: Path) -> ExchangeSnapshot:
        """
        Загрузка снапшота из файла.

        Путь не запоминается для save(): это делают load() и load_all()
        после того, как снапшот принят.

        Raises:
            SnapshotStoreError: Если файл не читается, не JSON или нарушает контракт
        """
        try:
            snapshot = loads_snapshot(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise SnapshotStoreError(f"Cannot read {path}: {e}")
        except simplejson.JSONDecodeError as e:
            raise SnapshotStoreError(f"Invalid JSON in {path}: {e}")
        except SchemaValidationError as e:
            raise SnapshotStoreError(f"Contract violation in {path}: {e.message}")
        except ModelValidationError as e:
            raise SnapshotStoreError(f"Invalid snapshot values in {path}: {e}")

        return snapshot

    def load(self, exchange_id: str) -> ExchangeSnapshot:
        """
        Загрузка одной биржи по идентификатору.

        Raises:
            SnapshotStoreError: Если файл не найден или некорректен
        """
        path = self._path_for(exchange_id)
        if not path.exists():
            raise SnapshotStoreError(f"Snapshot for exchange {exchange_id!r} not found: {path}")
        snapshot = self.load_file(path)
        self._paths[snapshot.exchange_id] = path
        return snapshot

    def load_all(self) -> list[ExchangeSnapshot]:
        """
        Загрузка всех бирж директории.

        Некорректный файл логируется и пропускается, остальные биржи
        загружаются. Повторный exchange_id также пропускается.

        Returns:
            Снапшоты в порядке имён файлов

        Raises:
            SnapshotStoreError: Если директория не существует
        """
        snapshots: list[ExchangeSnapshot] = []
        seen: set[str] = set()

        for path in self.snapshot_files():
            try:
                snapshot = self.load_file(path)
            except SnapshotStoreError as e:
                logger.error("Error loading exchange data: %s", e)
                continue

            if snapshot.exchange_id in seen:
                logger.error(
                    "Duplicate exchange id %r in %s, skipping", snapshot.exchange_id, path
                )
                continue

            seen.add(snapshot.exchange_id)
            self._paths[snapshot.exchange_id] = path
            snapshots.append(snapshot)

        logger.info("Loaded %d exchanges from %s", len(snapshots), self.directory)
        return snapshots

    def save(self, snapshot: ExchangeSnapshot, path: Optional[Path] = None) -> Path:
        """
        Полная запись снапшота (атомарная замена файла).

        Args:
            snapshot: Снапшот биржи
            path: Целевой файл (по умолчанию — файл, из которого биржа загружена)

        Returns:
            Путь записанного файла

        Raises:
            SnapshotStoreError: Если запись не удалась
        """
        target = path or self._path_for(snapshot.exchange_id)
        text = dumps_snapshot(snapshot)

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{target.stem}.", suffix=".tmp", dir=target.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(text)
                os.replace(tmp_name, target)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            raise SnapshotStoreError(f"Cannot write {target}: {e}")

        self._paths[snapshot.exchange_id] = target
        logger.debug("Saved exchange %s to %s", snapshot.exchange_id, target)
        return target

    def save_all(self, snapshots: Iterable[ExchangeSnapshot]) -> list[Path]:
        """Полная запись нескольких снапшотов."""
        return [self.save(snapshot) for snapshot in snapshots]
