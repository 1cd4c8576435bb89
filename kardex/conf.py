"""
Kardex configuration.

Usage in settings.py:
    KARDEX = {
        "MAX_TRANSACTION_RETRIES": 5,
        "RETRY_BACKOFF_SECONDS": 0.05,
        "ATTACHMENT_STORAGE": "default",
        "ATTACHMENT_UPLOAD_TO": "kardex/movements",
        "ATTACHMENT_MAX_BYTES": 10 * 1024 * 1024,
    }
"""

from dataclasses import dataclass
from typing import Any

from django.conf import settings


@dataclass
class KardexSettings:
    """Kardex configuration settings."""

    # Attempts for the optimistic write before giving up
    MAX_TRANSACTION_RETRIES: int = 5

    # Pause before retrying after lock contention, multiplied by the attempt
    RETRY_BACKOFF_SECONDS: float = 0.05

    # Storage alias (settings.STORAGES) used for movement attachments
    ATTACHMENT_STORAGE: str = "default"

    # Path prefix inside the storage; item id is appended
    ATTACHMENT_UPLOAD_TO: str = "kardex/movements"

    # Largest accepted attachment in bytes (0 = unlimited)
    ATTACHMENT_MAX_BYTES: int = 10 * 1024 * 1024


def get_kardex_settings() -> KardexSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "KARDEX", {})
    return KardexSettings(**{
        k: v for k, v in user_settings.items()
        if k in KardexSettings.__dataclass_fields__
    })


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_kardex_settings(), name)


kardex_settings = _LazySettings()
