"""
Pytest fixtures for Kardex tests.
"""

from datetime import datetime
from decimal import Decimal
from unittest import mock

import pytest
from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.utils import timezone

from kardex import ledger


User = get_user_model()


@pytest.fixture
def user(db):
    """Create a test user."""
    return User.objects.create_user(
        username='tecnico',
        password='testpass123'
    )


@pytest.fixture
def item(db):
    """Empty item: genesis balance 0, no threshold."""
    return ledger.create_item('Filtro de óleo', unit_cost=Decimal('12.50'))


@pytest.fixture
def stocked_item(db):
    """Item created with 10 units and a low-stock threshold of 2."""
    return ledger.create_item(
        'Gás R-410A',
        initial_quantity=Decimal('10'),
        unit_cost=Decimal('80.00'),
        min_stock=Decimal('2'),
    )


@pytest.fixture
def invoice_pdf():
    """Small evidence file."""
    return SimpleUploadedFile('nota-fiscal.PDF', b'%PDF-1.4 nota', content_type='application/pdf')


@pytest.fixture
def at():
    """
    Pin timezone.now() while recording movements.

    Usage:
        with at(2024, 1, 2, 10, 30):
            ledger.increase(item, 5)
    """
    def _at(*args):
        moment = timezone.make_aware(datetime(*args))
        return mock.patch('django.utils.timezone.now', return_value=moment)
    return _at
