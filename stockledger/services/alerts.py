"""
Stock alerts — flag items that dropped to or below min_stock.

Usage:
    from stockledger.services.alerts import check_low_stock

    # After stock leaves the storeroom
    flagged = check_low_stock([item.pk])
    # Returns list of InventoryItem at or below min_stock
"""

import logging

from stockledger.conf import stockledger_settings
from stockledger.models.item import InventoryItem

logger = logging.getLogger('stockledger')


def check_low_stock(item_ids=None) -> list[InventoryItem]:
    """
    Return the given items (or all items) whose stock is <= min_stock.

    Logs one warning per flagged item unless LOW_STOCK_ALERTS is off.
    """
    qs = InventoryItem.objects.low()
    if item_ids is not None:
        qs = qs.filter(pk__in=list(item_ids))

    flagged = list(qs.order_by('pk'))

    if stockledger_settings.LOW_STOCK_ALERTS:
        for item in flagged:
            logger.warning(
                "stock.low",
                extra={
                    "item_id": item.pk,
                    "item_name": item.name,
                    "stock": item.stock,
                    "min_stock": item.min_stock,
                    "level": str(item.stock_level),
                },
            )

    return flagged
