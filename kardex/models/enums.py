"""
Enums for Kardex models.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class MovementKind(models.TextChoices):
    """
    Direction of a stock movement.

    The movement quantity is always positive; the sign comes from the kind.
    """
    INCREASE = 'increase', _('Entrada')     # +quantity
    DECREASE = 'decrease', _('Saída')       # -quantity
