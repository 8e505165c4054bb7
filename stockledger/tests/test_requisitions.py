"""
Tests for the requisition link and its backends.
"""

import pytest
from django.core.exceptions import ImproperlyConfigured

from stockledger import inventory, StockError
from stockledger.adapters import ModelRequisitionBackend, get_requisition_backend
from stockledger.models import Reception, ReceptionStatus, RequisitionStatus
from stockledger.protocols import RequisitionBackend, RequisitionInfo


pytestmark = pytest.mark.django_db


class DictRequisitionBackend:
    """In-memory backend standing in for a host project's purchase requests."""

    statuses = {}

    def get_requisition(self, ref):
        if ref not in self.statuses:
            return None
        return RequisitionInfo(ref=ref, status=self.statuses[ref])

    def set_requisition_status(self, ref, status):
        if ref not in self.statuses:
            raise LookupError(ref)
        self.statuses[ref] = status


class TestRequisitionLink:
    """Tests for requisition status following the reception."""

    def test_complete_reception_marks_received(self, stapler, requisition):
        reception = inventory.receive_goods(
            item=stapler, requested_quantity=5, received_quantity=5,
            requisition=requisition,
        )

        requisition.refresh_from_db()
        assert reception.requisition_ref == str(requisition.pk)
        assert reception.has_requisition
        assert requisition.status == RequisitionStatus.RECEIVED

    def test_partial_reception_leaves_requisition(self, stapler, requisition):
        inventory.receive_goods(
            item=stapler, requested_quantity=5, received_quantity=2,
            requisition=requisition.pk,
        )

        requisition.refresh_from_db()
        assert requisition.status == RequisitionStatus.APPROVED

    def test_becoming_complete_advances(self, stapler, requisition):
        reception = inventory.receive_goods(
            item=stapler, requested_quantity=5, received_quantity=2,
            requisition=requisition,
        )

        inventory.update_reception(reception.pk, received_quantity=5)

        requisition.refresh_from_db()
        assert requisition.status == RequisitionStatus.RECEIVED

    def test_leaving_complete_reverts(self, stapler, requisition):
        reception = inventory.receive_goods(
            item=stapler, requested_quantity=5, received_quantity=5,
            requisition=requisition,
        )

        inventory.update_reception(reception.pk, status=ReceptionStatus.PARTIAL)

        requisition.refresh_from_db()
        assert requisition.status == RequisitionStatus.APPROVED

    def test_delete_reverts(self, stapler, requisition):
        reception = inventory.receive_goods(
            item=stapler, requested_quantity=5, received_quantity=5,
            requisition=requisition,
        )

        inventory.delete_reception(reception.pk)

        requisition.refresh_from_db()
        assert requisition.status == RequisitionStatus.APPROVED

    @pytest.mark.parametrize('status', [RequisitionStatus.PENDING, RequisitionStatus.REJECTED])
    def test_unapproved_requisition_rejected(self, stapler, requisition, status):
        """Only an approved purchase request can be received against."""
        requisition.status = status
        requisition.save()

        with pytest.raises(StockError) as exc:
            inventory.receive_goods(
                item=stapler, requested_quantity=5, received_quantity=5,
                requisition=requisition,
            )

        assert exc.value.code == 'INVALID_STATUS'
        assert exc.value.data['status'] == status
        assert not Reception.objects.exists()
        requisition.refresh_from_db()
        assert requisition.status == status

    def test_delete_without_advance_leaves_requisition(self, stapler, requisition):
        """A partial reception never marked it RECEIVED, so delete does not touch it."""
        reception = inventory.receive_goods(
            item=stapler, requested_quantity=5, received_quantity=2,
            requisition=requisition,
        )
        requisition.status = RequisitionStatus.REJECTED
        requisition.save()

        inventory.delete_reception(reception.pk)

        requisition.refresh_from_db()
        assert requisition.status == RequisitionStatus.REJECTED

    def test_unknown_requisition_rejected(self, stapler):
        with pytest.raises(StockError) as exc:
            inventory.receive_goods(
                item=stapler, requested_quantity=5, received_quantity=5,
                requisition=999,
            )

        assert exc.value.code == 'REQUISITION_NOT_FOUND'
        assert exc.value.is_not_found
        assert not Reception.objects.exists()
        stapler.refresh_from_db()
        assert stapler.stock == 0

    def test_requisition_deleted_later(self, stapler, requisition):
        """Reverting a vanished requisition rolls the delete back."""
        reception = inventory.receive_goods(
            item=stapler, requested_quantity=5, received_quantity=5,
            requisition=requisition,
        )
        requisition.delete()

        with pytest.raises(StockError) as exc:
            inventory.delete_reception(reception.pk)

        assert exc.value.code == 'REQUISITION_NOT_FOUND'
        stapler.refresh_from_db()
        assert stapler.stock == 5
        assert Reception.objects.filter(pk=reception.pk).exists()


class TestRequisitionBackend:
    """Tests for backend loading."""

    def test_default_backend(self):
        backend = get_requisition_backend()

        assert isinstance(backend, ModelRequisitionBackend)
        assert isinstance(backend, RequisitionBackend)
        assert get_requisition_backend() is backend

    def test_model_backend_lookup(self, requisition):
        info = ModelRequisitionBackend().get_requisition(str(requisition.pk))

        assert info.ref == str(requisition.pk)
        assert info.request_number == 'REQ-001'
        assert info.status == RequisitionStatus.APPROVED
        assert ModelRequisitionBackend().get_requisition('not-a-pk') is None

    def test_custom_backend(self, stapler, settings):
        settings.STOCKLEDGER = {
            'REQUISITION_BACKEND': 'stockledger.tests.test_requisitions.DictRequisitionBackend',
        }
        DictRequisitionBackend.statuses = {'PO-7': RequisitionStatus.APPROVED}

        reception = inventory.receive_goods(
            item=stapler, requested_quantity=1, received_quantity=1,
            requisition='PO-7',
        )

        assert reception.requisition_ref == 'PO-7'
        assert DictRequisitionBackend.statuses['PO-7'] == RequisitionStatus.RECEIVED

    def test_bad_backend_path(self, settings):
        settings.STOCKLEDGER = {'REQUISITION_BACKEND': 'nowhere.Backend'}

        with pytest.raises(ImproperlyConfigured):
            get_requisition_backend()
