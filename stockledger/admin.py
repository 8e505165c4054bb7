"""
Stockledger Admin — read-only views for auditing.

- InventoryItem: list + edit of descriptive fields (stock is read-only)
- StockEntry: read-only audit trail (timestamp, direction, quantity, reason)
- Reception / Distribution: read-only with lines; deletion goes through
  the reconcilers so stock is reversed
- Requisition: list + edit
"""

import logging

from django.contrib import admin, messages
from django.http import HttpResponseRedirect
from django.urls import reverse
from django.utils.translation import gettext_lazy as _

from stockledger.exceptions import StockError
from stockledger.models import (
    Distribution,
    DistributionLine,
    InventoryItem,
    Reception,
    ReceptionLine,
    Requisition,
    StockEntry,
)

logger = logging.getLogger('stockledger')


class ReadOnlyMixin:
    """No add, no change. Stock only changes via the inventory service."""

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False


class ReconciledDeleteMixin:
    """
    Deletes go through the inventory service so stock is reversed.

    A rejected delete (e.g. goods already issued) shows the error and
    returns to the object instead of Django's success message. The bulk
    delete_selected action is replaced by one that reports real counts.
    """

    # Name of the inventory method: delete_reception / delete_distribution
    inventory_delete = None

    def _reconciled_delete(self, request, obj) -> bool:
        from stockledger import inventory

        try:
            getattr(inventory, self.inventory_delete)(obj.pk, user=request.user)
        except StockError as exc:
            logger.warning("admin.%s: %s", self.inventory_delete, exc)
            self.message_user(request, str(exc), level=messages.ERROR)
            return False
        return True

    def delete_model(self, request, obj):
        if not self._reconciled_delete(request, obj):
            request._stockledger_delete_rejected = True

    def response_delete(self, request, obj_display, obj_id):
        if getattr(request, '_stockledger_delete_rejected', False):
            opts = self.model._meta
            return HttpResponseRedirect(reverse(
                f'admin:{opts.app_label}_{opts.model_name}_change',
                args=[obj_id],
                current_app=self.admin_site.name,
            ))
        return super().response_delete(request, obj_display, obj_id)

    def get_actions(self, request):
        actions = super().get_actions(request)
        actions.pop('delete_selected', None)
        return actions

    @admin.action(description=_('Delete selected and reverse stock'))
    def delete_reconciled(self, request, queryset):
        objs = list(queryset)
        deleted = sum(1 for obj in objs if self._reconciled_delete(request, obj))

        if deleted:
            self.message_user(
                request,
                _('{count} deleted.').format(count=deleted),
                level=messages.SUCCESS,
            )
        if deleted < len(objs):
            self.message_user(
                request,
                _('{count} could not be deleted.').format(count=len(objs) - deleted),
                level=messages.WARNING,
            )


# =========================================================================
# INVENTORY ITEM ADMIN
# =========================================================================

class StockLevelFilter(admin.SimpleListFilter):
    title = _('Stock level')
    parameter_name = 'level'

    def lookups(self, request, model_admin):
        return [
            ('critical', _('Critical (nothing on hand)')),
            ('low', _('At or below minimum')),
        ]

    def queryset(self, request, queryset):
        if self.value() == 'critical':
            return queryset.critical()
        if self.value() == 'low':
            return queryset.low()
        return queryset


@admin.register(InventoryItem)
class InventoryItemAdmin(admin.ModelAdmin):
    """Item admin — descriptive fields editable, stock read-only."""

    list_display = ['name', 'category', 'stock_display', 'unit', 'min_stock',
                    'level_display', 'is_low_display']
    list_filter = [StockLevelFilter, 'category']
    search_fields = ['name', 'category']
    readonly_fields = ['_stock', 'created_at', 'updated_at']

    def has_add_permission(self, request):
        # Opening balances must be recorded in the ledger
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.display(description=_('Stock'), ordering='_stock')
    def stock_display(self, obj):
        return obj.stock

    @admin.display(description=_('Level'))
    def level_display(self, obj):
        return obj.stock_level

    @admin.display(description=_('Reorder?'), boolean=True)
    def is_low_display(self, obj):
        return obj.is_low


# =========================================================================
# STOCK ENTRY ADMIN (read-only audit trail)
# =========================================================================

@admin.register(StockEntry)
class StockEntryAdmin(ReadOnlyMixin, admin.ModelAdmin):
    """Ledger admin — read-only. Immutable audit trail."""

    list_display = ['timestamp', 'item', 'direction', 'quantity', 'reason', 'user']
    list_filter = ['direction', 'timestamp']
    search_fields = ['reason', 'item__name']
    readonly_fields = ['item', 'direction', 'quantity', 'reference_type', 'reference_id',
                       'reason', 'metadata', 'timestamp', 'user']
    date_hierarchy = 'timestamp'

    def has_delete_permission(self, request, obj=None):
        return False


# =========================================================================
# RECEPTION ADMIN
# =========================================================================

class ReceptionLineInline(ReadOnlyMixin, admin.TabularInline):
    model = ReceptionLine
    extra = 0
    can_delete = False
    fields = ['item', 'item_name', 'requested_quantity', 'received_quantity',
              'shortfall', 'excess', 'unit']
    readonly_fields = fields


@admin.register(Reception)
class ReceptionAdmin(ReconciledDeleteMixin, ReadOnlyMixin, admin.ModelAdmin):
    """Reception admin — read-only; delete reverses applied stock."""

    inventory_delete = 'delete_reception'

    list_display = ['id', 'status', 'is_complete_display', 'requisition_ref',
                    'receipt_date', 'received_by']
    list_filter = ['status', 'receipt_date']
    search_fields = ['requisition_ref', 'lines__item_name']
    readonly_fields = ['requisition_ref', 'status', 'receipt_date', 'notes',
                       'received_by', 'created_at', 'updated_at']
    inlines = [ReceptionLineInline]
    actions = ['delete_reconciled']

    @admin.display(description=_('In stock?'), boolean=True)
    def is_complete_display(self, obj):
        return obj.is_complete


# =========================================================================
# DISTRIBUTION ADMIN
# =========================================================================

class DistributionLineInline(ReadOnlyMixin, admin.TabularInline):
    model = DistributionLine
    extra = 0
    can_delete = False
    fields = ['item', 'item_name', 'quantity', 'unit']
    readonly_fields = fields


@admin.register(Distribution)
class DistributionAdmin(ReconciledDeleteMixin, ReadOnlyMixin, admin.ModelAdmin):
    """Distribution admin — read-only; delete puts goods back."""

    inventory_delete = 'delete_distribution'

    list_display = ['note_number', 'staff_name', 'department', 'distribution_date', 'distributed_by']
    list_filter = ['department', 'distribution_date']
    search_fields = ['note_number', 'staff_name', 'lines__item_name']
    readonly_fields = ['note_number', 'staff_name', 'department', 'purpose',
                       'distribution_date', 'distributed_by', 'created_at', 'updated_at']
    inlines = [DistributionLineInline]
    actions = ['delete_reconciled']


# =========================================================================
# REQUISITION ADMIN
# =========================================================================

@admin.register(Requisition)
class RequisitionAdmin(admin.ModelAdmin):
    """Purchase request admin."""

    list_display = ['request_number', 'item_name', 'quantity', 'unit', 'status']
    list_filter = ['status']
    search_fields = ['request_number', 'item_name']
    readonly_fields = ['created_at', 'updated_at']
