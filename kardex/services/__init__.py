"""
Ledger services — modular organization of stock ledger operations.

    from kardex.services import ItemRegistry, LedgerMovements, LedgerQueries, LedgerIntegrity
"""

from kardex.services.integrity import LedgerIntegrity
from kardex.services.items import ItemRegistry
from kardex.services.movements import LedgerMovements
from kardex.services.queries import LedgerQueries

__all__ = [
    'ItemRegistry',
    'LedgerMovements',
    'LedgerQueries',
    'LedgerIntegrity',
]
