"""
Attachment upload — evidence files for movements.

Uploads happen before the movement transaction opens and are not part
of it. If the transaction later fails, the files stay in the store;
the coordinator logs their URLs so they can be swept.
"""

import logging
import os
import uuid

from django.core.files.storage import storages

from kardex.conf import kardex_settings
from kardex.exceptions import AttachmentUploadFailed

logger = logging.getLogger('kardex')


def get_storage():
    return storages[kardex_settings.ATTACHMENT_STORAGE]


def _storage_path(item_id, original_name: str) -> str:
    _, ext = os.path.splitext(original_name or '')
    return f"{kardex_settings.ATTACHMENT_UPLOAD_TO}/{item_id}/{uuid.uuid4().hex}{ext.lower()}"


def _reference(attachment) -> dict[str, str] | None:
    """Already-stored attachment given as {'name', 'url'}."""
    if isinstance(attachment, dict):
        name, url = attachment.get('name'), attachment.get('url')
        if not name or not url:
            raise AttachmentUploadFailed(
                'Anexo sem nome ou URL',
                attachment=attachment,
            )
        return {'name': str(name), 'url': str(url)}
    return None


def upload_attachments(item_id, attachments) -> list[dict[str, str]]:
    """
    Store files and return their references, in the order given.

    Args:
        item_id: Item the movement belongs to (used in the storage path)
        attachments: Django File objects and/or {'name', 'url'} dicts

    Returns:
        List of {'name', 'url'}

    Raises:
        AttachmentUploadFailed: On any storage error or oversized file.
            Files stored earlier in the same call are left in place.
    """
    if not attachments:
        return []

    storage = get_storage()
    max_bytes = kardex_settings.ATTACHMENT_MAX_BYTES
    references = []

    for attachment in attachments:
        reference = _reference(attachment)
        if reference is not None:
            references.append(reference)
            continue

        original_name = os.path.basename(getattr(attachment, 'name', '') or 'anexo')
        size = getattr(attachment, 'size', None)
        if max_bytes and size is not None and size > max_bytes:
            raise AttachmentUploadFailed(
                'Anexo excede o tamanho máximo',
                name=original_name,
                size=size,
                max_bytes=max_bytes,
            )

        try:
            stored_name = storage.save(_storage_path(item_id, original_name), attachment)
            url = storage.url(stored_name)
        except Exception as exc:
            logger.warning(
                "kardex.attachments.failed",
                extra={"item_id": item_id, "attachment": original_name, "error": str(exc)},
            )
            raise AttachmentUploadFailed(name=original_name, error=str(exc)) from exc

        references.append({'name': original_name, 'url': url})

    return references
