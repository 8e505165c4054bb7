"""
Stockledger configuration.

Usage in settings.py:
    STOCKLEDGER = {
        "REQUISITION_BACKEND": "purchasing.adapters.PurchaseRequestBackend",
        "ALLOW_NEGATIVE_STOCK": False,
        "NOTE_NUMBER_PREFIX": "DST",
    }
"""

from dataclasses import dataclass
from typing import Any

from django.conf import settings


@dataclass
class StockledgerSettings:
    """Stockledger configuration settings."""

    # Requisition (purchase request) backend (dotted path)
    REQUISITION_BACKEND: str = "stockledger.adapters.requisitions.ModelRequisitionBackend"

    # Let corrections from edits/deletes drive stock below zero.
    # Creation paths always reject insufficient stock.
    ALLOW_NEGATIVE_STOCK: bool = False

    # Distribution note numbers: DST-001, DST-002, ...
    NOTE_NUMBER_PREFIX: str = "DST"
    NOTE_NUMBER_PADDING: int = 3

    # Log a warning when a decrement leaves an item at or below min_stock
    LOW_STOCK_ALERTS: bool = True


def get_stockledger_settings() -> StockledgerSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "STOCKLEDGER", {})
    return StockledgerSettings(**{
        k: v for k, v in user_settings.items()
        if k in StockledgerSettings.__dataclass_fields__
    })


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_stockledger_settings(), name)


stockledger_settings = _LazySettings()
