"""
Ledger Service — The single public interface for stock ledger operations.

Usage:
    from kardex import ledger, KardexError

    item = ledger.create_item('Filtro de óleo', initial_quantity=0)
    ledger.increase(item, 10, notes='Compra NF 123')
    ledger.decrease(item, 4, work_order_ref={'id': 'os-9', 'display_code': 'OS-0009'})
    ledger.audit_trail(item)            # newest first, with running balance
"""

from kardex.services.integrity import LedgerIntegrity
from kardex.services.items import ItemRegistry
from kardex.services.movements import LedgerMovements
from kardex.services.queries import LedgerQueries


class Kardex(ItemRegistry, LedgerMovements, LedgerQueries, LedgerIntegrity):
    """
    Single interface for all ledger operations.

    Parameter convention: (item, quantity, ...)

    IMPORTANT: apply_movement() and its shortcuts are the only way to
    change an item's balance. See LedgerMovements for concurrency notes.
    """
