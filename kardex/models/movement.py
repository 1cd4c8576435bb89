"""
StockMovement model — Immutable ledger of quantity changes.
"""

from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from kardex.models.enums import MovementKind


@dataclass(frozen=True)
class WorkOrderRef:
    """Reference to a work order owned by another system."""

    id: str
    display_code: str = ''


class MovementQuerySet(models.QuerySet):
    """Append-only queryset: no bulk update or delete."""

    def for_item(self, item):
        return self.filter(item=item)

    def in_ledger_order(self):
        return self.order_by('created_at', 'id')

    def update(self, **kwargs):
        raise ValueError(
            "Movimentos são imutáveis. "
            "Para corrigir, registre um novo movimento."
        )

    def delete(self):
        raise ValueError(
            "Movimentos são imutáveis. "
            "Para estornar, registre um novo movimento."
        )


class StockMovement(models.Model):
    """
    Immutable record of a quantity change.

    Rules:
    - NEVER update() or delete()
    - Corrections are new movements of the opposite kind
    - Created only by the movement coordinator, together with the
      item's cached balance, in one transaction
    """

    item = models.ForeignKey(
        'kardex.StockItem',
        on_delete=models.PROTECT,
        related_name='movements',
        verbose_name=_('Item'),
    )

    kind = models.CharField(
        max_length=10,
        choices=MovementKind.choices,
        verbose_name=_('Tipo'),
    )
    quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        verbose_name=_('Quantidade'),
        help_text=_('Sempre positiva; o sinal vem do tipo.'),
    )

    notes = models.TextField(blank=True, default='', verbose_name=_('Observações'))
    attachments = models.JSONField(
        default=list,
        blank=True,
        verbose_name=_('Anexos'),
        help_text=_('Lista de {"name", "url"}'),
    )

    # External work order (decrease only)
    work_order_id = models.CharField(max_length=100, blank=True, default='', verbose_name=_('Ordem de Serviço'))
    work_order_code = models.CharField(max_length=100, blank=True, default='', verbose_name=_('Código da OS'))

    created_at = models.DateTimeField(default=timezone.now, db_index=True, verbose_name=_('Data/Hora'))
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Usuário'),
    )

    objects = MovementQuerySet.as_manager()

    class Meta:
        verbose_name = _('Movimentação')
        verbose_name_plural = _('Movimentações')
        ordering = ['created_at', 'id']
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name='kardex_movement_quantity_positive',
            ),
            models.CheckConstraint(
                condition=Q(work_order_id='') | Q(kind=MovementKind.DECREASE),
                name='kardex_movement_work_order_on_decrease',
            ),
        ]
        indexes = [
            models.Index(fields=['item', 'created_at'], name='kardex_mov_item_created_idx'),
        ]

    @property
    def delta(self) -> Decimal:
        """Signed change applied to the item balance."""
        if self.kind == MovementKind.INCREASE:
            return self.quantity
        return -self.quantity

    @property
    def work_order_ref(self) -> WorkOrderRef | None:
        if not self.work_order_id:
            return None
        return WorkOrderRef(id=self.work_order_id, display_code=self.work_order_code)

    def save(self, *args, **kwargs):
        # Immutability check
        if not self._state.adding:
            raise ValueError(
                "Movimentos são imutáveis. "
                "Para corrigir, registre um novo movimento."
            )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        """Prevent deletion — movements are immutable."""
        raise ValueError(
            "Movimentos são imutáveis. "
            "Para estornar, registre um novo movimento."
        )

    def __str__(self) -> str:
        signal = '+' if self.kind == MovementKind.INCREASE else '-'
        return f"{signal}{self.quantity} | {self.item_id} @ {self.created_at:%d/%m/%y %H:%M}"
