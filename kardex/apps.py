"""Django app configuration for Kardex."""

from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class KardexConfig(AppConfig):
    """Configuration for Kardex app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "kardex"
    verbose_name = _("Kardex de Estoque")
