"""
Pytest fixtures for Stockledger tests.
"""

import pytest
from django.contrib.auth import get_user_model

from stockledger import inventory
from stockledger.adapters import reset_requisition_backend
from stockledger.models import Requisition, RequisitionStatus


User = get_user_model()


@pytest.fixture(autouse=True)
def fresh_requisition_backend():
    """Each test loads the backend from its own settings."""
    reset_requisition_backend()
    yield
    reset_requisition_backend()


@pytest.fixture
def user(db):
    """Create a test user."""
    return User.objects.create_user(
        username='storekeeper',
        password='testpass123'
    )


@pytest.fixture
def paper(db):
    """A4 paper with 10 reams on hand."""
    return inventory.register_item(
        'A4 Paper', 'ream', category='Stationery', min_stock=2, initial_stock=10,
    )


@pytest.fixture
def toner(db):
    """Toner with 5 cartridges on hand."""
    return inventory.register_item(
        'Toner', 'pcs', category='Printing', min_stock=1, initial_stock=5,
    )


@pytest.fixture
def stapler(db):
    """Stapler with nothing on hand."""
    return inventory.register_item('Stapler', 'pcs', category='Stationery')


@pytest.fixture
def requisition(db):
    """An approved purchase request."""
    return Requisition.objects.create(
        request_number='REQ-001',
        item_name='Stapler',
        quantity=5,
        unit='pcs',
        status=RequisitionStatus.APPROVED,
    )
