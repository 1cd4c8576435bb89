"""
Stock movements — the only state-changing path for an item's balance.

Every movement runs as:
    validate → upload attachments → atomic(read item, check, write)

The write is optimistic: the balance update is conditioned on the
item's version, and a lost race (a version mismatch, or a database
lock held by another writer) rolls the block back and retries against
fresh state.
"""

import logging
import time
from decimal import Decimal, InvalidOperation

from django.db import OperationalError, transaction
from django.db.models import F
from django.utils import timezone

from kardex.conf import kardex_settings
from kardex.exceptions import ConflictRetryExhausted, InsufficientStock, LedgerValidationError
from kardex.models.enums import MovementKind
from kardex.models.item import MAX_QUANTITY, StockItem
from kardex.models.movement import StockMovement, WorkOrderRef
from kardex.services.attachments import upload_attachments
from kardex.services.items import ItemRegistry
from kardex.signals import low_stock_reached, movement_recorded

logger = logging.getLogger('kardex')

QUANTITY_PLACES = Decimal('0.001')

# SQLSTATEs for serialization failure and deadlock (PostgreSQL)
_RETRYABLE_SQLSTATES = {'40001', '40P01'}


class _VersionConflict(Exception):
    """Item changed between read and write."""


def is_lock_contention(exc: OperationalError) -> bool:
    """
    True for errors raised because another transaction holds the lock.

    SQLite reports "database is locked" (or "database table is locked")
    when a writer is already active; server databases report a
    serialization failure or deadlock.
    """
    cause = exc.__cause__
    sqlstate = getattr(cause, 'sqlstate', None) or getattr(cause, 'pgcode', None)
    if sqlstate in _RETRYABLE_SQLSTATES:
        return True
    message = str(exc).lower()
    return 'locked' in message or 'busy' in message


class LedgerMovements:
    """State-changing ledger methods."""

    @classmethod
    def apply_movement(cls, item, kind, quantity, notes: str = '',
                       work_order_ref: WorkOrderRef | dict | None = None,
                       attachments=None, user=None) -> StockMovement:
        """
        Record a movement and update the item balance atomically.

        Args:
            item: StockItem or its primary key
            kind: MovementKind.INCREASE or MovementKind.DECREASE
            quantity: Positive amount
            notes: Free text
            work_order_ref: WorkOrderRef or {'id', 'display_code'}; decrease only
            attachments: Django File objects and/or {'name', 'url'} dicts
            user: Who recorded the movement

        Returns:
            The created StockMovement (movement.item carries the new balance)

        Raises:
            LedgerValidationError: Bad input; nothing uploaded or written
            AttachmentUploadFailed: Upload failed; nothing written
            InsufficientStock: Decrease would go below zero; nothing written
            ConflictRetryExhausted: Lost every optimistic attempt

        Concurrency:
            - Balance re-read inside transaction.atomic()
            - UPDATE conditioned on StockItem.version
            - Conflicts and lock contention retried up to MAX_TRANSACTION_RETRIES
        """
        quantity = cls._clean_quantity(quantity)
        kind = cls._clean_kind(kind)
        work_order_ref = cls._clean_work_order_ref(kind, work_order_ref)
        item = ItemRegistry.get_item(item)

        attachments = list(attachments or [])
        references = upload_attachments(item.pk, attachments)
        uploaded = [
            ref for ref, original in zip(references, attachments)
            if not isinstance(original, dict)
        ]

        try:
            return cls._commit(item.pk, kind, quantity, notes or '',
                               work_order_ref, references, user)
        except Exception:
            if uploaded:
                # Upload happened outside the transaction; files stay behind
                logger.warning(
                    "kardex.attachments.orphaned",
                    extra={
                        "item_id": item.pk,
                        "urls": [ref['url'] for ref in uploaded],
                    },
                )
            raise

    @classmethod
    def increase(cls, item, quantity, **kwargs) -> StockMovement:
        """Stock entry."""
        return cls.apply_movement(item, MovementKind.INCREASE, quantity, **kwargs)

    @classmethod
    def decrease(cls, item, quantity, **kwargs) -> StockMovement:
        """Stock exit."""
        return cls.apply_movement(item, MovementKind.DECREASE, quantity, **kwargs)

    # ══════════════════════════════════════════════════════════════
    # INTERNALS
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def _commit(cls, item_id, kind, quantity, notes, work_order_ref,
                attachments, user) -> StockMovement:
        attempts = max(1, kardex_settings.MAX_TRANSACTION_RETRIES)
        backoff = kardex_settings.RETRY_BACKOFF_SECONDS

        for attempt in range(1, attempts + 1):
            try:
                with transaction.atomic():
                    return cls._write(item_id, kind, quantity, notes,
                                      work_order_ref, attachments, user)
            except _VersionConflict:
                logger.info(
                    "kardex.movement.conflict",
                    extra={"item_id": item_id, "attempt": attempt},
                )
            except OperationalError as exc:
                if not is_lock_contention(exc):
                    raise
                logger.info(
                    "kardex.movement.conflict",
                    extra={"item_id": item_id, "attempt": attempt, "error": str(exc)},
                )
                # Let the other writer commit before reading again
                if backoff and attempt < attempts:
                    time.sleep(backoff * attempt)

        logger.warning(
            "kardex.movement.conflict_exhausted",
            extra={"item_id": item_id, "attempts": attempts},
        )
        raise ConflictRetryExhausted(item_id=item_id, attempts=attempts)

    @classmethod
    def _write(cls, item_id, kind, quantity, notes, work_order_ref,
               attachments, user) -> StockMovement:
        """One attempt. Must run inside transaction.atomic()."""
        item = cls._read_item(item_id)
        current = item.quantity

        if kind == MovementKind.INCREASE:
            new_quantity = current + quantity
        else:
            new_quantity = current - quantity

        if new_quantity < 0:
            logger.info(
                "kardex.movement.rejected",
                extra={
                    "item_id": item_id,
                    "available": str(current),
                    "requested": str(quantity),
                },
            )
            raise InsufficientStock(available=current, requested=quantity)
        if new_quantity > MAX_QUANTITY:
            raise LedgerValidationError(
                'INVALID_QUANTITY',
                'Saldo excederia o limite de 999999999,999',
                available=current,
                requested=quantity,
            )

        now = timezone.now()
        updated = StockItem.objects.filter(pk=item_id, version=item.version).update(
            _quantity=new_quantity,
            version=F('version') + 1,
            updated_at=now,
        )
        if not updated:
            raise _VersionConflict(item_id)

        movement = StockMovement.objects.create(
            item_id=item_id,
            kind=kind,
            quantity=quantity,
            notes=notes,
            attachments=attachments,
            work_order_id=work_order_ref.id if work_order_ref else '',
            work_order_code=work_order_ref.display_code if work_order_ref else '',
            created_at=now,
            user=user,
        )

        item._quantity = new_quantity
        item.version += 1
        item.updated_at = now
        movement.item = item

        transaction.on_commit(lambda: cls._after_commit(movement, previous=current))
        return movement

    @classmethod
    def _read_item(cls, item_id) -> StockItem:
        try:
            return StockItem.objects.get(pk=item_id)
        except StockItem.DoesNotExist:
            raise LedgerValidationError('ITEM_NOT_FOUND', item_id=item_id)

    @classmethod
    def _after_commit(cls, movement: StockMovement, previous: Decimal):
        item = movement.item
        logger.info(
            "kardex.movement.applied",
            extra={
                "item_id": item.pk,
                "movement_id": movement.pk,
                "kind": movement.kind,
                "qty": str(movement.quantity),
                "balance": str(item.quantity),
                "work_order": movement.work_order_id or None,
            },
        )
        movement_recorded.send(sender=StockMovement, movement=movement, item=item)

        # Only on the crossing; movements that stay below are not re-announced
        if item.is_low_stock and previous > item.min_stock:
            logger.warning(
                "kardex.item.low_stock",
                extra={
                    "item_id": item.pk,
                    "balance": str(item.quantity),
                    "min_stock": str(item.min_stock),
                },
            )
            low_stock_reached.send(sender=StockItem, item=item)

    @classmethod
    def _clean_quantity(cls, quantity) -> Decimal:
        try:
            value = Decimal(str(quantity))
        except (InvalidOperation, TypeError, ValueError):
            raise LedgerValidationError('INVALID_QUANTITY', requested=quantity)

        if isinstance(quantity, bool) or not value.is_finite() or value <= 0:
            raise LedgerValidationError('INVALID_QUANTITY', requested=quantity)
        if value > MAX_QUANTITY:
            raise LedgerValidationError(
                'INVALID_QUANTITY',
                'Quantidade acima do limite de 999999999,999',
                requested=quantity,
            )
        try:
            exact = value == value.quantize(QUANTITY_PLACES)
        except InvalidOperation:
            exact = False
        if not exact:
            raise LedgerValidationError(
                'INVALID_QUANTITY',
                'Quantidade com mais de 3 casas decimais',
                requested=quantity,
            )
        return value

    @classmethod
    def _clean_kind(cls, kind) -> str:
        if kind not in MovementKind.values:
            raise LedgerValidationError('INVALID_KIND', kind=kind)
        return MovementKind(kind)

    @classmethod
    def _clean_work_order_ref(cls, kind, ref) -> WorkOrderRef | None:
        if ref is None:
            return None
        if kind != MovementKind.DECREASE:
            raise LedgerValidationError('INVALID_REFERENCE', kind=kind)

        if isinstance(ref, dict):
            ref = WorkOrderRef(
                id=ref.get('id'),
                display_code=ref.get('display_code') or ref.get('displayCode') or '',
            )
        if not isinstance(ref, WorkOrderRef) or not ref.id:
            raise LedgerValidationError(
                'INVALID_REFERENCE',
                'Referência de ordem de serviço sem id',
                reference=ref,
            )
        return WorkOrderRef(id=str(ref.id), display_code=str(ref.display_code or ''))
