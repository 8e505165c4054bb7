"""
InventoryItem model — Quantity on hand per item.
"""

import logging

from django.db import models
from django.db.models import F
from django.utils.translation import gettext_lazy as _

from stockledger.models.enums import StockLevel


logger = logging.getLogger('stockledger')


class InventoryItemQuerySet(models.QuerySet):
    """QuerySet with helper filters for stock levels."""

    def critical(self):
        """Items with nothing on hand."""
        return self.filter(_stock__lte=0)

    def low(self):
        """Items at or below their min_stock threshold (critical included)."""
        return self.filter(_stock__lte=F('min_stock'))


class InventoryItem(models.Model):
    """
    An item kept in the storeroom.

    Performance:
    - _stock is a cache updated atomically by StockEntry
    - Read is O(1), not O(N)
    - Use recalculate() for audit/correction

    Never assign _stock directly. Every change goes through a
    StockEntry so the ledger always explains the current quantity.
    """

    name = models.CharField(max_length=200, verbose_name=_('Name'))
    category = models.CharField(
        max_length=100,
        blank=True,
        default='',
        db_index=True,
        verbose_name=_('Category'),
    )
    unit = models.CharField(
        max_length=30,
        verbose_name=_('Unit'),
        help_text=_('E.g. pcs, ream, box'),
    )

    # Quantity cache (updated atomically by StockEntry)
    _stock = models.IntegerField(default=0, verbose_name=_('Stock'))

    min_stock = models.PositiveIntegerField(
        default=0,
        verbose_name=_('Minimum stock'),
        help_text=_('Informational threshold for low stock alerts'),
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = InventoryItemQuerySet.as_manager()

    class Meta:
        verbose_name = _('Inventory item')
        verbose_name_plural = _('Inventory items')
        ordering = ['name']
        indexes = [
            models.Index(fields=['category', 'name'], name='stockledger_item_cat_idx'),
        ]

    # ══════════════════════════════════════════════════════════════
    # PROPERTIES
    # ══════════════════════════════════════════════════════════════

    @property
    def stock(self) -> int:
        """Quantity on hand — O(1) cache read."""
        return self._stock

    @property
    def stock_level(self) -> str:
        if self._stock <= 0:
            return StockLevel.CRITICAL
        if self._stock <= self.min_stock:
            return StockLevel.LOW
        return StockLevel.NORMAL

    @property
    def is_low(self) -> bool:
        return self.stock_level != StockLevel.NORMAL

    # ══════════════════════════════════════════════════════════════
    # METHODS
    # ══════════════════════════════════════════════════════════════

    def ledger_balance(self) -> int:
        """Signed sum of all ledger entries for this item."""
        from stockledger.models.entry import StockEntry

        return StockEntry.objects.balance_for(self)

    def recalculate(self) -> int:
        """
        Recalculate stock from the ledger.

        Use for:
        - Integrity audit
        - Correction after detected inconsistency

        Returns:
            New calculated quantity
        """
        total = self.ledger_balance()

        if total != self._stock:
            old = self._stock
            self._stock = total
            self.save(update_fields=['_stock', 'updated_at'])

            logger.warning(
                "Item %s recalculated: %s -> %s (diff: %s)",
                self.pk, old, total, total - old,
            )

        return total

    def __str__(self) -> str:
        return f"{self.name} ({self._stock} {self.unit})"
