"""
Requisition model — Default store for purchase requests.

Stockledger only reads a requisition to check it exists and writes its
status. Projects with their own purchase-request model plug in a
different REQUISITION_BACKEND and never touch this table.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _

from stockledger.models.enums import RequisitionStatus


class Requisition(models.Model):
    """
    Purchase request.

    LIFECYCLE:

        PENDING ──review──► APPROVED ──complete reception──► RECEIVED
           │                   ▲                                │
           └──review──► REJECTED   └──── reception deleted ─────┘
    """

    request_number = models.CharField(max_length=30, unique=True, verbose_name=_('Request number'))
    item_name = models.CharField(max_length=200, verbose_name=_('Item name'))
    quantity = models.PositiveIntegerField(verbose_name=_('Quantity'))
    unit = models.CharField(max_length=30, verbose_name=_('Unit'))
    status = models.CharField(
        max_length=20,
        choices=RequisitionStatus.choices,
        default=RequisitionStatus.PENDING,
        db_index=True,
        verbose_name=_('Status'),
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Purchase request')
        verbose_name_plural = _('Purchase requests')
        ordering = ['-created_at']

    def __str__(self) -> str:
        return f"{self.request_number} [{self.status}]"
