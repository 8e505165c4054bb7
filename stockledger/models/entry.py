"""
StockEntry model — Immutable ledger of quantity changes.
"""

from django.conf import settings
from django.contrib.contenttypes.fields import GenericForeignKey
from django.contrib.contenttypes.models import ContentType
from django.db import models, transaction
from django.db.models import Case, F, IntegerField, Sum, When
from django.db.models.functions import Coalesce
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from stockledger.models.enums import Direction


SIGNED_QUANTITY = Case(
    When(direction=Direction.OUT, then=-F('quantity')),
    default=F('quantity'),
    output_field=IntegerField(),
)


class StockEntryQuerySet(models.QuerySet):

    def for_reference(self, reference):
        ct = ContentType.objects.get_for_model(reference)
        return self.filter(reference_type=ct, reference_id=reference.pk)

    def balance_for(self, item) -> int:
        """Net of IN minus OUT for one item."""
        return self.filter(item=item).aggregate(
            t=Coalesce(Sum(SIGNED_QUANTITY), 0)
        )['t']

    def balances(self) -> dict:
        """Net ledger balance per item id."""
        rows = self.values('item_id').annotate(
            t=Coalesce(Sum(SIGNED_QUANTITY), 0)
        )
        return {row['item_id']: row['t'] for row in rows}


class StockEntry(models.Model):
    """
    Immutable record of a stock movement.

    Rules:
    - NEVER update() or delete()
    - Corrections are new entries in the opposite direction
    - Updates InventoryItem._stock atomically on save()

    This is the ONLY model that changes stock.
    """

    item = models.ForeignKey(
        'stockledger.InventoryItem',
        on_delete=models.PROTECT,
        related_name='entries',
        verbose_name=_('Item'),
    )

    direction = models.CharField(
        max_length=3,
        choices=Direction.choices,
        verbose_name=_('Direction'),
    )
    quantity = models.PositiveIntegerField(
        verbose_name=_('Quantity'),
        help_text=_('Always positive. Direction carries the sign.'),
    )

    # Event that caused the movement (reception, distribution, ...)
    reference_type = models.ForeignKey(
        ContentType,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Reference type'),
    )
    reference_id = models.PositiveBigIntegerField(null=True, blank=True, verbose_name=_('Reference ID'))
    reference = GenericForeignKey('reference_type', 'reference_id')

    reason = models.CharField(
        max_length=255,
        verbose_name=_('Reason'),
        help_text=_('Required. E.g. "Reception #12", "Distribution DST-004"'),
    )
    metadata = models.JSONField(default=dict, blank=True, verbose_name=_('Metadata'))

    timestamp = models.DateTimeField(default=timezone.now, db_index=True, verbose_name=_('Timestamp'))
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('User'),
    )

    objects = StockEntryQuerySet.as_manager()

    class Meta:
        verbose_name = _('Stock entry')
        verbose_name_plural = _('Stock entries')
        ordering = ['timestamp', 'pk']
        indexes = [
            models.Index(fields=['item', 'timestamp'], name='stockledger_entry_item_idx'),
            models.Index(fields=['reference_type', 'reference_id'], name='stockledger_entry_ref_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0),
                name='stock_entry_quantity_positive',
            ),
        ]

    @property
    def signed_quantity(self) -> int:
        return self.quantity if self.direction == Direction.IN else -self.quantity

    def save(self, *args, **kwargs):
        """Save entry and update item stock cache atomically."""
        if self.pk:
            raise ValueError(
                "Stock entries are immutable. "
                "To correct one, record a new entry in the opposite direction."
            )

        if not self.reason:
            raise ValueError("Reason is required")
        if not self.quantity or self.quantity <= 0:
            raise ValueError("Quantity must be positive")
        if self.direction not in Direction.values:
            raise ValueError(f"Unknown direction: {self.direction!r}")

        with transaction.atomic():
            super().save(*args, **kwargs)

            from stockledger.models.item import InventoryItem

            InventoryItem.objects.filter(pk=self.item_id).update(
                _stock=F('_stock') + self.signed_quantity,
                updated_at=timezone.now()
            )

    def delete(self, *args, **kwargs):
        """Prevent deletion — entries are immutable."""
        raise ValueError(
            "Stock entries are immutable. "
            "To reverse one, record a new entry in the opposite direction."
        )

    def __str__(self) -> str:
        sign = '+' if self.direction == Direction.IN else '-'
        return f"{sign}{self.quantity} | {self.reason}"
