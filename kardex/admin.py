"""
Kardex Admin.

Provides views for production debugging:
- StockItem: metadata editable, balance read-only
- StockMovement: read-only audit trail (timestamp, kind, quantity, notes)
"""

import logging

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from kardex.models import StockItem, StockMovement

logger = logging.getLogger(__name__)


# =========================================================================
# STOCK ITEM ADMIN
# =========================================================================

@admin.register(StockItem)
class StockItemAdmin(admin.ModelAdmin):
    """Item admin — metadata only. Balance changes go through the ledger."""

    list_display = ['name', 'quantity_display', 'min_stock', 'unit_cost',
                    'is_low_stock_display', 'updated_at']
    search_fields = ['name', 'description']
    fields = ['name', 'description', 'unit_cost', 'min_stock',
              'initial_quantity', 'quantity_display', 'version',
              'created_at', 'updated_at']
    readonly_fields = ['initial_quantity', 'quantity_display', 'version',
                       'created_at', 'updated_at']
    actions = ['verify_ledger']

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.display(description=_('Quantidade'))
    def quantity_display(self, obj):
        return obj.quantity

    @admin.display(description=_('Estoque baixo?'), boolean=True)
    def is_low_stock_display(self, obj):
        return obj.is_low_stock

    @admin.action(description=_('Verificar kardex dos itens selecionados'))
    def verify_ledger(self, request, queryset):
        from kardex import ledger

        mismatches = [m for m in map(ledger.check_integrity, queryset) if m is not None]
        for mismatch in mismatches:
            logger.warning("verify_ledger: item %s diverge: %s", mismatch.item_id, mismatch.as_dict())

        self.message_user(
            request,
            _('{count} item(ns) com divergência.').format(count=len(mismatches)),
        )


# =========================================================================
# MOVEMENT ADMIN (read-only audit trail)
# =========================================================================

@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    """Movement admin — read-only. Immutable audit trail."""

    list_display = ['created_at', 'item', 'kind', 'quantity', 'work_order_code', 'user']
    list_filter = ['kind', 'created_at']
    search_fields = ['notes', 'work_order_code', 'item__name']
    readonly_fields = ['item', 'kind', 'quantity', 'notes', 'attachments',
                       'work_order_id', 'work_order_code', 'created_at', 'user']
    date_hierarchy = 'created_at'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
