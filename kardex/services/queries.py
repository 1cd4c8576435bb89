"""
Ledger queries — read-only operations.

Filters work on reconstructed entries (see services.replay), so the
balance shown next to a filtered movement is always the true running
balance of the full ledger.
"""

from datetime import date, datetime, time, timedelta

from django.conf import settings
from django.utils import timezone

from kardex.models.movement import StockMovement
from kardex.services.replay import LedgerEntry, ledger_order, reconstruct

ALL_KINDS = 'all'


def _day_start(day: date) -> datetime:
    """00:00 of the given day in the current timezone."""
    start = datetime.combine(day, time.min)
    if settings.USE_TZ:
        return timezone.make_aware(start)
    return start


def by_kind(entries, kind=None) -> list[LedgerEntry]:
    """Keep entries of one kind; None or 'all' keeps everything."""
    if kind is None or kind == ALL_KINDS:
        return list(entries)
    return [e for e in entries if e.movement.kind == kind]


def by_date_range(entries, date_from: date | None = None,
                  date_to: date | None = None) -> list[LedgerEntry]:
    """
    Keep entries inside a calendar-day window.

    date_from is inclusive from 00:00 of that day; date_to covers the
    whole day, i.e. the bound is 00:00 of the following day, exclusive.
    """
    lower = _day_start(date_from) if date_from else None
    upper = _day_start(date_to + timedelta(days=1)) if date_to else None

    result = []
    for entry in entries:
        ts = entry.movement.created_at
        if lower is not None and ts < lower:
            continue
        if upper is not None and ts >= upper:
            continue
        result.append(entry)
    return result


def filter_entries(entries, kind=None, date_from: date | None = None,
                   date_to: date | None = None) -> list[LedgerEntry]:
    """Both filters, combined with AND."""
    return by_date_range(by_kind(entries, kind), date_from, date_to)


class LedgerQueries:
    """Read-only ledger query methods."""

    @classmethod
    def movements_for(cls, item):
        """Item movements in ledger order."""
        return StockMovement.objects.for_item(item).in_ledger_order()

    @classmethod
    def replay(cls, item) -> list[LedgerEntry]:
        """Full ledger with running balances, oldest first."""
        movements = ledger_order(cls.movements_for(item).select_related('user'))
        return reconstruct(item.initial_quantity, movements)

    @classmethod
    def audit_trail(cls, item, kind=None, date_from: date | None = None,
                    date_to: date | None = None,
                    newest_first: bool = True) -> list[LedgerEntry]:
        """
        Ledger for display.

        Args:
            item: StockItem
            kind: MovementKind value, 'all' or None
            date_from: First day shown (inclusive)
            date_to: Last day shown (inclusive)
            newest_first: Audit tables list the latest movement first

        Returns:
            List of LedgerEntry
        """
        entries = filter_entries(cls.replay(item), kind, date_from, date_to)
        if newest_first:
            entries.reverse()
        return entries
