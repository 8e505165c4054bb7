"""
Stock queries — read-only operations.

All methods are classmethod on Inventory and use no locking.
"""

from dataclasses import dataclass

from stockledger.exceptions import StockError
from stockledger.models.entry import StockEntry
from stockledger.models.item import InventoryItem
from stockledger.services.lines import item_pk


@dataclass(frozen=True)
class LedgerDrift:
    """An item whose cached stock disagrees with its ledger."""

    item_id: int
    item_name: str
    stock: int
    ledger_balance: int

    @property
    def difference(self) -> int:
        return self.ledger_balance - self.stock


class LedgerQueries:
    """Read-only stock query methods."""

    @classmethod
    def get_item(cls, item) -> InventoryItem:
        """
        Raises:
            StockError('ITEM_NOT_FOUND'): If the item does not exist
        """
        pk = item_pk(item)
        found = InventoryItem.objects.filter(pk=pk).first() if pk is not None else None
        if found is None:
            raise StockError('ITEM_NOT_FOUND', item_id=pk)
        return found

    @classmethod
    def stock_of(cls, item) -> int:
        """Quantity on hand — O(1) cache read."""
        return cls.get_item(item).stock

    @classmethod
    def ledger_balance(cls, item) -> int:
        """Net of IN minus OUT entries for the item."""
        return StockEntry.objects.balance_for(item_pk(item))

    @classmethod
    def entries_for(cls, item=None, reference=None):
        """Ledger entries, oldest first, filtered by item and/or event."""
        qs = StockEntry.objects.select_related('item')
        if item is not None:
            qs = qs.filter(item_id=item_pk(item))
        if reference is not None:
            qs = qs.for_reference(reference)
        return qs

    @classmethod
    def low_stock_items(cls):
        """Items at or below min_stock, most urgent first."""
        return InventoryItem.objects.low().order_by('_stock', 'name')

    @classmethod
    def verify_ledger(cls, item=None) -> list[LedgerDrift]:
        """
        Compare every item's stock with its ledger balance.

        Returns:
            List of LedgerDrift, empty when the ledger reconciles
        """
        items = InventoryItem.objects.all()
        if item is not None:
            items = items.filter(pk=item_pk(item))

        balances = StockEntry.objects.filter(item__in=items).balances()
        drifts = []
        for row in items.order_by('pk'):
            balance = balances.get(row.pk, 0)
            if balance != row._stock:
                drifts.append(LedgerDrift(
                    item_id=row.pk,
                    item_name=row.name,
                    stock=row._stock,
                    ledger_balance=balance,
                ))
        return drifts
