"""
Balance replay — rebuild running balances from the ledger.

Pure functions, no database access. The only input is the genesis
balance and a sequence of movement-like objects exposing ``kind``,
``quantity``, ``created_at`` and ``pk``.

Usage:
    entries = reconstruct(item.initial_quantity, movements)
    entries[-1].balance == item.quantity   # healthy ledger
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable

from kardex.models.enums import MovementKind


@dataclass(frozen=True)
class LedgerEntry:
    """A movement paired with the balance right after it."""

    movement: Any
    balance: Decimal


@dataclass(frozen=True)
class IntegrityMismatch:
    """
    Cached balance differs from the replayed ledger.

    Advisory only: reported to operators, never corrected on its own.
    """

    item_id: Any
    cached: Decimal
    replayed: Decimal

    @property
    def difference(self) -> Decimal:
        return self.cached - self.replayed

    def as_dict(self) -> dict[str, str]:
        return {
            'item_id': str(self.item_id),
            'cached': str(self.cached),
            'replayed': str(self.replayed),
            'difference': str(self.difference),
        }


def signed_delta(movement) -> Decimal:
    """+quantity for increases, -quantity for decreases."""
    if movement.kind == MovementKind.INCREASE:
        return Decimal(movement.quantity)
    if movement.kind == MovementKind.DECREASE:
        return -Decimal(movement.quantity)
    raise ValueError(f"Tipo de movimentação desconhecido: {movement.kind!r}")


def ledger_order(movements: Iterable) -> list:
    """Sort movements into ledger order: created_at, then insertion."""
    return sorted(movements, key=lambda m: (m.created_at, m.pk))


def reconstruct(initial_quantity, movements: Iterable) -> list[LedgerEntry]:
    """
    Running balance after each movement, in the order given.

    Callers that can't vouch for the order should pass the sequence
    through ledger_order() first.
    """
    balance = Decimal(initial_quantity)
    entries = []
    for movement in movements:
        balance += signed_delta(movement)
        entries.append(LedgerEntry(movement=movement, balance=balance))
    return entries


def final_balance(initial_quantity, movements: Iterable) -> Decimal:
    """Balance after the whole sequence."""
    return sum((signed_delta(m) for m in movements), Decimal(initial_quantity))


def compare(item, entries: list[LedgerEntry]) -> IntegrityMismatch | None:
    """Check the item's cached balance against a reconstructed ledger."""
    replayed = entries[-1].balance if entries else Decimal(item.initial_quantity)
    if replayed == item.quantity:
        return None
    return IntegrityMismatch(item_id=item.pk, cached=item.quantity, replayed=replayed)
