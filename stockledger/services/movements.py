"""
Stock movements — the item quantity store and the ledger recorder.

Every change of InventoryItem stock in Stockledger goes through
LedgerMovements.record(), which writes one immutable StockEntry. The
reception and distribution services call adjust() inside their own
unit of work; receive_stock / issue_stock / adjust_stock are manual
movements that open their own.

All methods use transaction.atomic() with appropriate locking.
"""

import logging
from contextlib import contextmanager

from django.db import DatabaseError, transaction

from stockledger.conf import stockledger_settings
from stockledger.exceptions import StockError
from stockledger.models.entry import StockEntry
from stockledger.models.enums import Direction
from stockledger.models.item import InventoryItem
from stockledger.services.lines import item_pk

logger = logging.getLogger('stockledger')


@contextmanager
def unit_of_work(operation: str, **context):
    """
    One atomic unit: item adjustments, ledger entries, requisition status.

    A database error anywhere inside rolls everything back and surfaces
    as StockError('CONSISTENCY_VIOLATION'). StockError passes through.
    """
    try:
        with transaction.atomic():
            yield
    except DatabaseError as exc:
        logger.error(
            "stock.consistency_violation",
            extra={"operation": operation, "error": str(exc), **context},
        )
        raise StockError('CONSISTENCY_VIOLATION', operation=operation, **context) from exc


def lock_items(item_ids) -> dict[int, InventoryItem]:
    """
    Lock item rows in pk order and return them by pk.

    Must run inside transaction.atomic().

    Raises:
        StockError('ITEM_NOT_FOUND'): If any id has no row
    """
    ids = sorted({pk for pk in item_ids if pk is not None})
    if not ids:
        return {}

    items = {
        item.pk: item
        for item in InventoryItem.objects.select_for_update().filter(pk__in=ids).order_by('pk')
    }
    for pk in ids:
        if pk not in items:
            raise StockError('ITEM_NOT_FOUND', item_id=pk)
    return items


def lock_item(item) -> InventoryItem:
    pk = item_pk(item)
    if pk is None:
        raise StockError('ITEM_NOT_FOUND', item_id=None)
    return lock_items([pk])[pk]


def check_available(item: InventoryItem, requested: int, **context) -> None:
    """Raise INSUFFICIENT_STOCK if item cannot cover requested units."""
    if item._stock < requested:
        raise StockError(
            'INSUFFICIENT_STOCK',
            item_id=item.pk,
            item_name=item.name,
            available=item._stock,
            requested=requested,
            **context,
        )


def apply_deltas(deltas, items, reason, user=None, reference=None,
                 allow_negative=None, **metadata) -> dict[int, int]:
    """
    Apply {item_id: signed delta} to locked items.

    Every decrement is checked against the locked stock before the first
    entry is written, so a rejection leaves nothing behind.

    Returns:
        {item_id: new stock}
    """
    if allow_negative is None:
        allow_negative = stockledger_settings.ALLOW_NEGATIVE_STOCK

    if not allow_negative:
        for pk, delta in deltas.items():
            if delta < 0:
                check_available(items[pk], -delta)

    return {
        pk: LedgerMovements.adjust(
            pk, delta, reason,
            user=user,
            reference=reference,
            allow_negative=allow_negative,
            **metadata,
        )
        for pk, delta in deltas.items()
    }


class LedgerMovements:
    """State-changing stock methods."""

    @classmethod
    def record(cls, direction, quantity, item, reason,
               user=None, reference=None, **metadata) -> StockEntry:
        """
        Append one ledger entry. Updates the item's stock cache.

        Raises:
            StockError('INVALID_QUANTITY'): If quantity <= 0
            StockError('REASON_REQUIRED'): If reason is empty
        """
        if direction not in Direction.values:
            raise StockError('INVALID_DIRECTION', direction=direction)
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise StockError('INVALID_QUANTITY', requested=quantity)
        if not reason:
            raise StockError('REASON_REQUIRED')

        return StockEntry.objects.create(
            item_id=item_pk(item),
            direction=direction,
            quantity=quantity,
            reason=reason,
            reference=reference,
            user=user,
            metadata=metadata,
        )

    @classmethod
    def adjust(cls, item, delta, reason, user=None,
               reference=None, allow_negative=None, **metadata) -> int:
        """
        Apply a signed delta to an item and record it.

        Returns:
            New stock quantity

        Raises:
            StockError('ITEM_NOT_FOUND'): If the item does not exist
            StockError('INSUFFICIENT_STOCK'): If a decrement would go below
                zero and negative stock is not allowed

        Concurrency:
            - Runs under transaction.atomic() (savepoint when nested)
            - Uses select_for_update() on the item
        """
        pk = item_pk(item)

        with transaction.atomic():
            locked = InventoryItem.objects.select_for_update().filter(pk=pk).first()
            if locked is None:
                raise StockError('ITEM_NOT_FOUND', item_id=pk)

            if delta == 0:
                return locked._stock

            if delta < 0:
                if allow_negative is None:
                    allow_negative = stockledger_settings.ALLOW_NEGATIVE_STOCK
                if not allow_negative:
                    check_available(locked, -delta)

            direction = Direction.IN if delta > 0 else Direction.OUT
            cls.record(direction, abs(delta), locked, reason,
                       user=user, reference=reference, **metadata)

            locked.refresh_from_db(fields=['_stock'])
            logger.info(
                "stock.adjust",
                extra={
                    "item_id": pk,
                    "delta": delta,
                    "stock": locked._stock,
                    "reason": reason,
                },
            )
            return locked._stock

    @classmethod
    def register_item(cls, name, unit, category='', min_stock=0,
                      initial_stock=0, user=None,
                      reason='Opening balance') -> InventoryItem:
        """
        Create an inventory item.

        A positive initial_stock is recorded as an IN entry so the
        ledger explains the opening quantity.
        """
        if isinstance(initial_stock, bool) or not isinstance(initial_stock, int) or initial_stock < 0:
            raise StockError('INVALID_QUANTITY', field='initial_stock', value=initial_stock)
        if isinstance(min_stock, bool) or not isinstance(min_stock, int) or min_stock < 0:
            raise StockError('INVALID_QUANTITY', field='min_stock', value=min_stock)

        with unit_of_work('item.register'):
            item = InventoryItem.objects.create(
                name=name,
                unit=unit,
                category=category,
                min_stock=min_stock,
            )
            if initial_stock:
                cls.record(Direction.IN, initial_stock, item, reason, user=user)
                item.refresh_from_db()

        logger.info(
            "item.register",
            extra={"item_id": item.pk, "initial_stock": initial_stock},
        )
        return item

    @classmethod
    def receive_stock(cls, quantity, item, reason='Manual stock in',
                      user=None, reference=None) -> StockEntry:
        """
        Manual stock entry.

        Raises:
            StockError('INVALID_QUANTITY'): If quantity <= 0
            StockError('ITEM_NOT_FOUND'): If the item does not exist
        """
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise StockError('INVALID_QUANTITY', requested=quantity)

        with unit_of_work('stock.receive', item_id=item_pk(item)):
            locked = lock_item(item)
            entry = cls.record(Direction.IN, quantity, locked, reason,
                               user=user, reference=reference)

        logger.info(
            "stock.receive",
            extra={"item_id": entry.item_id, "qty": quantity, "reason": reason},
        )
        return entry

    @classmethod
    def issue_stock(cls, quantity, item, reason='Manual stock out',
                    user=None, reference=None) -> StockEntry:
        """
        Manual stock exit.

        Raises:
            StockError('INVALID_QUANTITY'): If quantity <= 0
            StockError('INSUFFICIENT_STOCK'): If quantity > stock
            StockError('ITEM_NOT_FOUND'): If the item does not exist

        Concurrency:
            - Uses select_for_update() on the item
            - Verifies stock after lock
        """
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise StockError('INVALID_QUANTITY', requested=quantity)

        with unit_of_work('stock.issue', item_id=item_pk(item)):
            locked = lock_item(item)
            check_available(locked, quantity)
            entry = cls.record(Direction.OUT, quantity, locked, reason,
                               user=user, reference=reference)

        logger.info(
            "stock.issue",
            extra={"item_id": entry.item_id, "qty": quantity, "reason": reason},
        )

        from stockledger.services.alerts import check_low_stock
        check_low_stock([entry.item_id])
        return entry

    @classmethod
    def adjust_stock(cls, item, new_quantity, reason, user=None) -> StockEntry | None:
        """
        Stock count correction.

        Calculates delta automatically: new_quantity - item.stock

        Raises:
            StockError('REASON_REQUIRED'): If reason is empty
            StockError('INVALID_QUANTITY'): If new_quantity < 0
        """
        if not reason:
            raise StockError('REASON_REQUIRED')
        if isinstance(new_quantity, bool) or not isinstance(new_quantity, int) or new_quantity < 0:
            raise StockError('INVALID_QUANTITY', requested=new_quantity)

        with unit_of_work('stock.count', item_id=item_pk(item)):
            locked = lock_item(item)
            delta = new_quantity - locked._stock

            if delta == 0:
                return None

            direction = Direction.IN if delta > 0 else Direction.OUT
            entry = cls.record(direction, abs(delta), locked,
                               f"Stock count: {reason}", user=user)

        logger.info(
            "stock.count",
            extra={"item_id": entry.item_id, "delta": delta, "reason": reason},
        )
        return entry
