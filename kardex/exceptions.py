"""
Exceptions for Kardex.

All errors are KardexError with a structured code for programmatic handling.
Typed subclasses exist so callers can catch one family of failures:

    try:
        ledger.decrease(item, Decimal('5'))
    except InsufficientStock as e:
        print(f"Só tem {e.available} disponível")
"""

from decimal import Decimal
from typing import Any


class BaseError(Exception):
    """
    Exception carrying a code, a human message and context data.

    Subclasses provide `_default_messages` so the message can be
    omitted at the raise site.
    """

    _default_messages: dict[str, str] = {}

    def __init__(self, code: str, message: str | None = None, **data: Any):
        self.code = code
        self.message = message or self._default_messages.get(code, code)
        self.data = data
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code!r}, {self.data!r})"


class KardexError(BaseError):
    """
    Structured exception for ledger operations.

    Attributes:
        code: Error code for programmatic handling
        message: Human-readable message
        data: Additional context data
    """

    _default_messages = {
        'INVALID_QUANTITY': 'Quantidade inválida (deve ser positiva)',
        'INVALID_KIND': 'Tipo de movimentação inválido',
        'INVALID_REFERENCE': 'Ordem de serviço só pode ser vinculada a saídas',
        'INVALID_FIELD': 'Valor inválido para o item',
        'ITEM_NOT_FOUND': 'Item não encontrado',
        'INSUFFICIENT_STOCK': 'Estoque insuficiente',
        'CONFLICT_RETRY_EXHAUSTED': 'Modificação concorrente, tente novamente',
        'ATTACHMENT_UPLOAD_FAILED': 'Falha ao enviar anexo',
    }

    @property
    def available(self) -> Decimal:
        """Shortcut for data['available']."""
        return self.data.get('available', Decimal('0'))

    @property
    def requested(self) -> Decimal:
        """Shortcut for data['requested']."""
        return self.data.get('requested', Decimal('0'))

    def as_dict(self) -> dict[str, Any]:
        """Serialize to dict (useful for APIs)."""
        return {
            'code': self.code,
            'message': self.message,
            'data': {
                k: str(v) if isinstance(v, Decimal) else v
                for k, v in self.data.items()
            }
        }


class LedgerValidationError(KardexError):
    """Bad input, rejected before any upload or transaction."""


class InsufficientStock(KardexError):
    """Decrease would drive the balance below zero."""

    def __init__(self, message: str | None = None, **data: Any):
        super().__init__('INSUFFICIENT_STOCK', message, **data)


class ConflictRetryExhausted(KardexError):
    """Optimistic write lost every attempt; safe to retry the whole call."""

    def __init__(self, message: str | None = None, **data: Any):
        super().__init__('CONFLICT_RETRY_EXHAUSTED', message, **data)


class AttachmentUploadFailed(KardexError):
    """Evidence upload failed; no movement was recorded."""

    def __init__(self, message: str | None = None, **data: Any):
        super().__init__('ATTACHMENT_UPLOAD_FAILED', message, **data)
