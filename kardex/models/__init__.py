"""
Kardex Models.

Core models for the stock ledger:
- StockItem: Item registry with cached balance
- StockMovement: Immutable ledger of changes
"""

from kardex.models.enums import MovementKind
from kardex.models.item import StockItem
from kardex.models.movement import StockMovement, WorkOrderRef

__all__ = [
    'MovementKind',
    'StockItem',
    'StockMovement',
    'WorkOrderRef',
]
