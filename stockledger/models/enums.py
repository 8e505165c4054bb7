"""
Enums for Stockledger models.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class Direction(models.TextChoices):
    """Sign of a ledger entry. Quantity is always positive."""
    IN = 'IN', _('In')
    OUT = 'OUT', _('Out')


class ReceptionStatus(models.TextChoices):
    """
    Outcome of a goods reception.

    COMPLETE:  Every line arrived exactly as requested. Only this status
               puts the received quantity into stock.
    PARTIAL:   At least one line short, none over.
    DIFFERENT: At least one line over-delivered.
    """
    COMPLETE = 'COMPLETE', _('Complete')
    PARTIAL = 'PARTIAL', _('Partial')
    DIFFERENT = 'DIFFERENT', _('Different')


class RequisitionStatus(models.TextChoices):
    """Purchase request lifecycle."""
    PENDING = 'PENDING', _('Pending')
    APPROVED = 'APPROVED', _('Approved')
    REJECTED = 'REJECTED', _('Rejected')
    RECEIVED = 'RECEIVED', _('Received')


class StockLevel(models.TextChoices):
    """Stock level relative to the item's min_stock threshold."""
    CRITICAL = 'critical', _('Critical')   # stock <= 0
    LOW = 'low', _('Low')                  # stock <= min_stock
    NORMAL = 'normal', _('Normal')
