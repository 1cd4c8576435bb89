"""
StockItem model — Item registry with cached balance.
"""

from decimal import Decimal

from django.db import models
from django.db.models import F, Q
from django.utils.translation import gettext_lazy as _


# Fields a plain save() may write once the item exists
METADATA_FIELDS = ('name', 'description', 'unit_cost', 'min_stock', 'updated_at')

# Largest values the DecimalFields below can hold (max_digits=12)
MAX_QUANTITY = Decimal('999999999.999')
MAX_UNIT_COST = Decimal('9999999999.99')


class StockItemQuerySet(models.QuerySet):
    """Read helpers for the item registry."""

    def low_stock(self):
        """Items with a threshold whose balance is at or below it."""
        return self.filter(min_stock__isnull=False, _quantity__lte=F('min_stock'))

    def search(self, term: str):
        """Case-insensitive name search; empty term returns everything."""
        if not term:
            return self.all()
        return self.filter(name__icontains=term)


class StockItem(models.Model):
    """
    A stock item and the cached projection of its ledger.

    Performance:
    - _quantity is a cache written only by the movement coordinator
    - Read is O(1), not O(N)
    - Replay the ledger (services.replay) for audit/correction

    Invariant:
        quantity == initial_quantity + sum(movement.delta)
    """

    name = models.CharField(max_length=200, verbose_name=_('Nome'))
    description = models.TextField(blank=True, default='', verbose_name=_('Descrição'))

    unit_cost = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0'),
        verbose_name=_('Custo unitário'),
    )
    min_stock = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        null=True,
        blank=True,
        verbose_name=_('Estoque mínimo'),
        help_text=_('Apenas sinaliza estoque baixo; não bloqueia saídas.'),
    )

    # Genesis balance, before any recorded movement
    initial_quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        default=Decimal('0'),
        editable=False,
        verbose_name=_('Quantidade inicial'),
    )

    # Balance cache (written only inside the coordinator's transaction)
    _quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        default=Decimal('0'),
        editable=False,
        verbose_name=_('Quantidade'),
    )

    # Optimistic concurrency token, bumped on every committed movement
    version = models.PositiveIntegerField(default=0, editable=False)

    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_('Criado em'))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_('Atualizado em'))

    objects = StockItemQuerySet.as_manager()

    class Meta:
        verbose_name = _('Item de Estoque')
        verbose_name_plural = _('Itens de Estoque')
        ordering = ['name']
        constraints = [
            models.CheckConstraint(
                condition=Q(_quantity__gte=0),
                name='kardex_item_quantity_non_negative',
            ),
            models.CheckConstraint(
                condition=Q(initial_quantity__gte=0),
                name='kardex_item_initial_quantity_non_negative',
            ),
            models.CheckConstraint(
                condition=Q(unit_cost__gte=0),
                name='kardex_item_unit_cost_non_negative',
            ),
            models.CheckConstraint(
                condition=Q(min_stock__isnull=True) | Q(min_stock__gte=0),
                name='kardex_item_min_stock_non_negative',
            ),
        ]

    # ══════════════════════════════════════════════════════════════
    # PROPERTIES
    # ══════════════════════════════════════════════════════════════

    @property
    def quantity(self) -> Decimal:
        """Current balance — O(1) cache read."""
        return self._quantity

    @property
    def is_low_stock(self) -> bool:
        """Advisory flag: threshold set and balance at or below it."""
        return self.min_stock is not None and self._quantity <= self.min_stock

    @property
    def stock_value(self) -> Decimal:
        """Monetary value of the current balance."""
        return self._quantity * self.unit_cost

    # ══════════════════════════════════════════════════════════════
    # METHODS
    # ══════════════════════════════════════════════════════════════

    def save(self, *args, **kwargs):
        """
        Save item.

        Existing rows only get their metadata written unless update_fields
        is passed explicitly, so an edit form built from a stale instance
        can never roll the balance back.
        """
        if not self._state.adding and kwargs.get('update_fields') is None:
            kwargs['update_fields'] = METADATA_FIELDS
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.name}: {self._quantity}"
