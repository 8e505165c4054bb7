"""
Reception model — Goods received, possibly against a purchase request.
"""

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from stockledger.models.enums import ReceptionStatus


class Reception(models.Model):
    """
    A goods reception with one or more lines.

    The single-item shape (one item per reception) is stored as a
    reception with exactly one line.

    Stock effect:
    - COMPLETE: every linked line adds its received_quantity
    - PARTIAL / DIFFERENT: nothing is applied

    Stock is changed only by the reception service, never by save().
    """

    # Opaque id resolved through the requisition backend
    requisition_ref = models.CharField(
        max_length=64,
        blank=True,
        default='',
        db_index=True,
        verbose_name=_('Purchase request'),
    )

    status = models.CharField(
        max_length=20,
        choices=ReceptionStatus.choices,
        db_index=True,
        verbose_name=_('Status'),
    )
    receipt_date = models.DateTimeField(default=timezone.now, verbose_name=_('Receipt date'))
    notes = models.TextField(blank=True, default='', verbose_name=_('Notes'))

    received_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Received by'),
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Reception')
        verbose_name_plural = _('Receptions')
        ordering = ['-created_at']

    @property
    def is_complete(self) -> bool:
        return self.status == ReceptionStatus.COMPLETE

    @property
    def has_requisition(self) -> bool:
        return bool(self.requisition_ref)

    def __str__(self) -> str:
        return f"Reception #{self.pk} [{self.status}]"


class ReceptionLine(models.Model):
    """One item of a reception: requested vs received."""

    reception = models.ForeignKey(
        Reception,
        on_delete=models.CASCADE,
        related_name='lines',
        verbose_name=_('Reception'),
    )
    item = models.ForeignKey(
        'stockledger.InventoryItem',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='reception_lines',
        verbose_name=_('Inventory item'),
        help_text=_('Empty = not tracked in stock'),
    )
    item_name = models.CharField(max_length=200, verbose_name=_('Item name'))
    requested_quantity = models.PositiveIntegerField(verbose_name=_('Requested'))
    received_quantity = models.PositiveIntegerField(verbose_name=_('Received'))
    unit = models.CharField(max_length=30, verbose_name=_('Unit'))

    class Meta:
        verbose_name = _('Reception line')
        verbose_name_plural = _('Reception lines')
        ordering = ['pk']

    @property
    def shortfall(self) -> int:
        return max(self.requested_quantity - self.received_quantity, 0)

    @property
    def excess(self) -> int:
        return max(self.received_quantity - self.requested_quantity, 0)

    def __str__(self) -> str:
        return f"{self.item_name}: {self.received_quantity}/{self.requested_quantity} {self.unit}"
