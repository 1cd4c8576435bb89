"""
Signals sent after a movement commits.

    movement_recorded(sender=StockMovement, movement, item)
        Every committed movement.

    low_stock_reached(sender=StockItem, item)
        The movement took the balance from above min_stock to at or
        below it. Movements while the item is already low do not send
        it again; it is sent once more only after the balance has risen
        above the threshold and crossed down again.

Both are dispatched from transaction.on_commit, so receivers never see
a movement that was rolled back.
"""

from django.dispatch import Signal

movement_recorded = Signal()
low_stock_reached = Signal()
