"""
Ledger integrity — compare cached balances against a replay.

Usage:
    from kardex import ledger

    mismatch = ledger.check_integrity(item)
    if mismatch:
        ...  # report; repair only on purpose with rebuild_quantity()
"""

import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from kardex.models.item import StockItem
from kardex.services.items import ItemRegistry
from kardex.services.queries import LedgerQueries
from kardex.services.replay import IntegrityMismatch, compare

logger = logging.getLogger('kardex')


class LedgerIntegrity:
    """Integrity audit methods."""

    @classmethod
    def check_integrity(cls, item) -> IntegrityMismatch | None:
        """
        Replay the item's ledger and compare with the cached balance.

        Returns:
            IntegrityMismatch when they differ, None for a healthy ledger
        """
        item = ItemRegistry.get_item(item)
        mismatch = compare(item, LedgerQueries.replay(item))
        if mismatch is not None:
            logger.warning("kardex.integrity.mismatch", extra=mismatch.as_dict())
        return mismatch

    @classmethod
    def verify_all(cls) -> list[IntegrityMismatch]:
        """Check every item; returns the mismatches found."""
        mismatches = []
        for item in StockItem.objects.order_by('pk').iterator():
            mismatch = cls.check_integrity(item)
            if mismatch is not None:
                mismatches.append(mismatch)
        return mismatches

    @classmethod
    def rebuild_quantity(cls, item) -> Decimal:
        """
        Reset the cached balance to the replayed ledger.

        Operator repair only; nothing calls this automatically.
        Bumps version so in-flight movements retry against the new value.

        Returns:
            The replayed balance now stored on the item
        """
        item = ItemRegistry.get_item(item)
        with transaction.atomic():
            locked = StockItem.objects.select_for_update().get(pk=item.pk)
            entries = LedgerQueries.replay(locked)
            mismatch = compare(locked, entries)
            if mismatch is None:
                return locked.quantity

            StockItem.objects.filter(pk=locked.pk).update(
                _quantity=mismatch.replayed,
                version=F('version') + 1,
                updated_at=timezone.now(),
            )
            logger.warning("kardex.integrity.rebuilt", extra=mismatch.as_dict())
            return mismatch.replayed
