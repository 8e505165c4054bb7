"""
Distribution model — Goods issued out of the storeroom.
"""

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class Distribution(models.Model):
    """
    Goods handed out to a staff member / department.

    Always fully applied: every linked line leaves stock on creation
    and comes back on deletion.
    """

    note_number = models.CharField(
        max_length=30,
        unique=True,
        verbose_name=_('Note number'),
        help_text=_('Generated as DST-001, DST-002, ...'),
    )
    staff_name = models.CharField(max_length=200, blank=True, default='', verbose_name=_('Staff name'))
    department = models.CharField(max_length=200, blank=True, default='', verbose_name=_('Department'))
    purpose = models.CharField(max_length=255, blank=True, default='', verbose_name=_('Purpose'))
    distribution_date = models.DateTimeField(default=timezone.now, verbose_name=_('Distribution date'))

    distributed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Distributed by'),
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Distribution')
        verbose_name_plural = _('Distributions')
        ordering = ['-created_at']

    def __str__(self) -> str:
        return self.note_number


class DistributionLine(models.Model):
    """One item of a distribution."""

    distribution = models.ForeignKey(
        Distribution,
        on_delete=models.CASCADE,
        related_name='lines',
        verbose_name=_('Distribution'),
    )
    item = models.ForeignKey(
        'stockledger.InventoryItem',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='distribution_lines',
        verbose_name=_('Inventory item'),
        help_text=_('Empty = not tracked in stock'),
    )
    item_name = models.CharField(max_length=200, verbose_name=_('Item name'))
    quantity = models.PositiveIntegerField(verbose_name=_('Quantity'))
    unit = models.CharField(max_length=30, verbose_name=_('Unit'))

    class Meta:
        verbose_name = _('Distribution line')
        verbose_name_plural = _('Distribution lines')
        ordering = ['pk']

    def __str__(self) -> str:
        return f"{self.item_name}: {self.quantity} {self.unit}"
