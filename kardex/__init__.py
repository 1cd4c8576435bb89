"""
Django Kardex — Livro-razão de estoque.

Uso:
    from kardex import ledger, KardexError

    ledger.increase(item, 10)
    ledger.decrease(item, 4)
    ledger.audit_trail(item)
"""


def __getattr__(name):
    """Lazy import to avoid circular imports during app loading."""
    if name == 'ledger':
        from kardex.service import Kardex
        return Kardex
    elif name == 'KardexError':
        from kardex.exceptions import KardexError
        return KardexError
    elif name == 'InsufficientStock':
        from kardex.exceptions import InsufficientStock
        return InsufficientStock
    elif name == 'StockItem':
        from kardex.models.item import StockItem
        return StockItem
    elif name == 'StockMovement':
        from kardex.models.movement import StockMovement
        return StockMovement
    elif name == 'MovementKind':
        from kardex.models.enums import MovementKind
        return MovementKind
    elif name == 'WorkOrderRef':
        from kardex.models.movement import WorkOrderRef
        return WorkOrderRef
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    'ledger',
    'KardexError',
    'InsufficientStock',
    'StockItem',
    'StockMovement',
    'MovementKind',
    'WorkOrderRef',
]

__version__ = '0.1.0'
