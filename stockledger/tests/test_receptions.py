"""
Tests for the reception reconciler.
"""

import logging

import pytest

from stockledger import inventory, StockError
from stockledger.models import (
    Direction,
    Reception,
    ReceptionLine,
    ReceptionStatus,
    StockEntry,
)


pytestmark = pytest.mark.django_db


def reception_entries(reception):
    return list(StockEntry.objects.for_reference(reception))


class TestReceiveGoods:
    """Tests for inventory.receive_goods()."""

    def test_complete_reception_adds_stock(self, stapler, user):
        reception = inventory.receive_goods(
            lines=[{'item': stapler, 'requested_quantity': 10, 'received_quantity': 10}],
            user=user,
        )

        stapler.refresh_from_db()
        assert reception.status == ReceptionStatus.COMPLETE
        assert stapler.stock == 10

        [entry] = reception_entries(reception)
        assert entry.direction == Direction.IN
        assert entry.quantity == 10
        assert entry.user == user
        assert entry.reason == f'Reception #{reception.pk}'

    def test_lines_borrow_name_and_unit_from_item(self, stapler):
        reception = inventory.receive_goods(
            lines=[{'item': stapler, 'requested_quantity': 2, 'received_quantity': 2}],
        )

        line = reception.lines.get()
        assert line.item_name == 'Stapler'
        assert line.unit == 'pcs'

    def test_partial_reception_applies_nothing(self, stapler):
        reception = inventory.receive_goods(
            lines=[{'item': stapler, 'requested_quantity': 5, 'received_quantity': 3}],
        )

        stapler.refresh_from_db()
        assert reception.status == ReceptionStatus.PARTIAL
        assert stapler.stock == 0
        assert reception_entries(reception) == []

    def test_different_reception_applies_nothing(self, stapler, toner):
        reception = inventory.receive_goods(lines=[
            {'item': stapler, 'requested_quantity': 5, 'received_quantity': 7},
            {'item': toner, 'requested_quantity': 3, 'received_quantity': 3},
        ])

        toner.refresh_from_db()
        assert reception.status == ReceptionStatus.DIFFERENT
        assert toner.stock == 5

    def test_explicit_status_wins_over_classifier(self, stapler):
        """Caller says COMPLETE although the line is short: received is applied."""
        reception = inventory.receive_goods(
            lines=[{'item': stapler, 'requested_quantity': 5, 'received_quantity': 3}],
            status=ReceptionStatus.COMPLETE,
        )

        stapler.refresh_from_db()
        assert reception.status == ReceptionStatus.COMPLETE
        assert stapler.stock == 3

    def test_multi_line_same_item_aggregates(self, stapler):
        reception = inventory.receive_goods(lines=[
            {'item': stapler, 'requested_quantity': 2, 'received_quantity': 2},
            {'item': stapler, 'requested_quantity': 3, 'received_quantity': 3},
        ])

        stapler.refresh_from_db()
        assert stapler.stock == 5
        [entry] = reception_entries(reception)
        assert entry.quantity == 5

    def test_untracked_line_needs_name_and_unit(self):
        with pytest.raises(StockError) as exc:
            inventory.receive_goods(lines=[{'requested_quantity': 1, 'received_quantity': 1}])

        assert exc.value.code == 'INVALID_LINE'

    def test_untracked_line_moves_no_stock(self):
        reception = inventory.receive_goods(lines=[{
            'item_name': 'Flowers', 'unit': 'bunch',
            'requested_quantity': 1, 'received_quantity': 1,
        }])

        assert reception.status == ReceptionStatus.COMPLETE
        assert not StockEntry.objects.exists()

    def test_single_item_shortcut(self, stapler):
        """Legacy single-item shape is stored as a one-line reception."""
        reception = inventory.receive_goods(
            item=stapler, requested_quantity=4, received_quantity=4,
        )

        stapler.refresh_from_db()
        assert reception.lines.count() == 1
        assert stapler.stock == 4

    def test_lines_and_shortcut_together_rejected(self, stapler):
        with pytest.raises(StockError) as exc:
            inventory.receive_goods(
                lines=[{'item': stapler, 'requested_quantity': 1, 'received_quantity': 1}],
                item=stapler,
            )

        assert exc.value.code == 'INVALID_LINE'

    def test_no_lines_rejected(self):
        with pytest.raises(StockError) as exc:
            inventory.receive_goods(lines=[])

        assert exc.value.code == 'INVALID_LINE'

    def test_zero_requested_rejected(self, stapler):
        with pytest.raises(StockError) as exc:
            inventory.receive_goods(item=stapler, requested_quantity=0, received_quantity=0)

        assert exc.value.code == 'INVALID_QUANTITY'

    def test_invalid_status_rejected(self, stapler):
        with pytest.raises(StockError) as exc:
            inventory.receive_goods(
                item=stapler, requested_quantity=1, received_quantity=1, status='LOST',
            )

        assert exc.value.code == 'INVALID_STATUS'

    def test_unknown_item_applies_nothing(self, stapler):
        with pytest.raises(StockError) as exc:
            inventory.receive_goods(lines=[
                {'item': stapler, 'requested_quantity': 1, 'received_quantity': 1},
                {'item': 999, 'requested_quantity': 1, 'received_quantity': 1},
            ])

        assert exc.value.code == 'ITEM_NOT_FOUND'
        assert not Reception.objects.exists()
        stapler.refresh_from_db()
        assert stapler.stock == 0


class TestUpdateReception:
    """Tests for inventory.update_reception()."""

    def test_edit_down_records_out_delta(self, stapler):
        """COMPLETE 10 edited to 6: stock 6, new OUT 4."""
        reception = inventory.receive_goods(
            item=stapler, requested_quantity=10, received_quantity=10,
        )

        inventory.update_reception(
            reception.pk, requested_quantity=6, received_quantity=6,
        )

        stapler.refresh_from_db()
        assert stapler.stock == 6
        entries = reception_entries(reception)
        assert [(e.direction, e.quantity) for e in entries] == [
            (Direction.IN, 10), (Direction.OUT, 4),
        ]

    def test_partial_to_complete_applies_full(self, stapler):
        """PARTIAL 3 edited to COMPLETE with 3: IN 3."""
        reception = inventory.receive_goods(
            item=stapler, requested_quantity=5, received_quantity=3,
        )

        reception = inventory.update_reception(
            reception.pk, status=ReceptionStatus.COMPLETE,
        )

        stapler.refresh_from_db()
        assert reception.status == ReceptionStatus.COMPLETE
        assert stapler.stock == 3
        [entry] = reception_entries(reception)
        assert (entry.direction, entry.quantity) == (Direction.IN, 3)

    def test_complete_to_partial_takes_back(self, stapler):
        reception = inventory.receive_goods(
            item=stapler, requested_quantity=5, received_quantity=5,
        )

        reception = inventory.update_reception(reception.pk, received_quantity=2)

        stapler.refresh_from_db()
        assert reception.status == ReceptionStatus.PARTIAL
        assert stapler.stock == 0

    def test_omitted_status_reclassifies_on_quantity_change(self, stapler):
        """PARTIAL 3/5 edited to 5/5 without status becomes COMPLETE."""
        reception = inventory.receive_goods(
            item=stapler, requested_quantity=5, received_quantity=3,
        )

        reception = inventory.update_reception(reception.pk, received_quantity=5)

        stapler.refresh_from_db()
        assert reception.status == ReceptionStatus.COMPLETE
        assert stapler.stock == 5

    def test_omitted_and_explicit_status_never_double_apply(self, stapler, toner):
        """Same line change with and without status gives the same stock."""
        first = inventory.receive_goods(item=stapler, requested_quantity=5, received_quantity=3)
        second = inventory.receive_goods(item=toner, requested_quantity=5, received_quantity=3)

        inventory.update_reception(first.pk, received_quantity=5)
        inventory.update_reception(
            second.pk, received_quantity=5, status=ReceptionStatus.COMPLETE,
        )

        stapler.refresh_from_db()
        toner.refresh_from_db()
        assert stapler.stock == 5
        assert toner.stock == 5 + 5
        assert stapler.ledger_balance() == stapler.stock
        assert toner.ledger_balance() == toner.stock

    def test_header_only_edit_keeps_status(self, stapler):
        reception = inventory.receive_goods(
            item=stapler, requested_quantity=5, received_quantity=7,
        )

        reception = inventory.update_reception(reception.pk, notes='Checked twice')

        assert reception.status == ReceptionStatus.DIFFERENT
        assert reception.notes == 'Checked twice'
        assert not StockEntry.objects.filter(item=stapler).exists()

    def test_line_moved_to_other_item(self, stapler, toner):
        reception = inventory.receive_goods(
            item=stapler, requested_quantity=2, received_quantity=2,
        )
        line = reception.lines.get()

        inventory.update_reception(reception.pk, lines=[{'id': line.pk, 'item': toner}])

        stapler.refresh_from_db()
        toner.refresh_from_db()
        assert stapler.stock == 0
        assert toner.stock == 7
        moved = reception.lines.get()
        assert (moved.item_name, moved.unit) == ('Toner', 'pcs')

    def test_line_moved_keeps_given_name(self, stapler, toner):
        reception = inventory.receive_goods(
            item=stapler, requested_quantity=2, received_quantity=2,
        )
        line = reception.lines.get()

        inventory.update_reception(reception.pk, lines=[
            {'id': line.pk, 'item': toner, 'item_name': 'Toner cartridge'},
        ])

        moved = reception.lines.get()
        assert (moved.item_name, moved.unit) == ('Toner cartridge', 'pcs')

    def test_lines_add_and_remove(self, stapler, toner):
        reception = inventory.receive_goods(lines=[
            {'item': stapler, 'requested_quantity': 2, 'received_quantity': 2},
            {'item': toner, 'requested_quantity': 1, 'received_quantity': 1},
        ])
        stapler_line = reception.lines.get(item=stapler)

        inventory.update_reception(reception.pk, lines=[
            {'id': stapler_line.pk},
            {'item_name': 'Envelopes', 'unit': 'box',
             'requested_quantity': 3, 'received_quantity': 3},
        ])

        toner.refresh_from_db()
        stapler.refresh_from_db()
        assert toner.stock == 5
        assert stapler.stock == 2
        assert sorted(reception.lines.values_list('item_name', flat=True)) == [
            'Envelopes', 'Stapler',
        ]

    def test_unknown_line_id_rejected(self, stapler):
        reception = inventory.receive_goods(
            item=stapler, requested_quantity=2, received_quantity=2,
        )

        with pytest.raises(StockError) as exc:
            inventory.update_reception(reception.pk, lines=[{'id': 999}])

        assert exc.value.code == 'INVALID_LINE'

    def test_shortcut_on_multi_line_rejected(self, stapler, toner):
        reception = inventory.receive_goods(lines=[
            {'item': stapler, 'requested_quantity': 2, 'received_quantity': 2},
            {'item': toner, 'requested_quantity': 1, 'received_quantity': 1},
        ])

        with pytest.raises(StockError) as exc:
            inventory.update_reception(reception.pk, received_quantity=1)

        assert exc.value.code == 'INVALID_LINE'

    def test_edit_below_issued_stock_rejected(self, stapler):
        """Goods already handed out cannot be un-received by default."""
        reception = inventory.receive_goods(
            item=stapler, requested_quantity=10, received_quantity=10,
        )
        inventory.distribute([{'item': stapler, 'quantity': 8}])

        with pytest.raises(StockError) as exc:
            inventory.update_reception(reception.pk, received_quantity=4)

        assert exc.value.code == 'INSUFFICIENT_STOCK'
        reception.refresh_from_db()
        stapler.refresh_from_db()
        assert reception.status == ReceptionStatus.COMPLETE
        assert reception.lines.get().received_quantity == 10
        assert stapler.stock == 2

    def test_edit_below_issued_stock_allowed_by_setting(self, stapler, settings):
        settings.STOCKLEDGER = {'ALLOW_NEGATIVE_STOCK': True}
        reception = inventory.receive_goods(
            item=stapler, requested_quantity=10, received_quantity=10,
        )
        inventory.distribute([{'item': stapler, 'quantity': 8}])

        inventory.update_reception(
            reception.pk, requested_quantity=4, received_quantity=4,
        )

        stapler.refresh_from_db()
        assert stapler.stock == -4

    def test_missing_reception(self):
        with pytest.raises(StockError) as exc:
            inventory.update_reception(999, notes='x')

        assert exc.value.code == 'EVENT_NOT_FOUND'
        assert exc.value.data['kind'] == 'reception'

    def test_unknown_field_rejected(self, stapler):
        reception = inventory.receive_goods(
            item=stapler, requested_quantity=1, received_quantity=1,
        )

        with pytest.raises(TypeError):
            inventory.update_reception(reception.pk, colour='blue')


class TestDeleteReception:
    """Tests for inventory.delete_reception()."""

    def test_delete_reverses_complete(self, stapler, user):
        reception = inventory.receive_goods(
            item=stapler, requested_quantity=4, received_quantity=4,
        )

        inventory.delete_reception(reception.pk, user=user)

        stapler.refresh_from_db()
        assert stapler.stock == 0
        assert not Reception.objects.exists()
        assert not ReceptionLine.objects.exists()
        out = StockEntry.objects.get(item=stapler, direction=Direction.OUT)
        assert out.quantity == 4
        assert out.user == user
        assert out.metadata['reception_id'] == reception.pk

    def test_delete_partial_moves_nothing(self, stapler):
        reception = inventory.receive_goods(
            item=stapler, requested_quantity=4, received_quantity=1,
        )

        inventory.delete_reception(reception.pk)

        assert not StockEntry.objects.filter(item=stapler).exists()

    def test_second_delete_fails(self, stapler):
        reception = inventory.receive_goods(
            item=stapler, requested_quantity=4, received_quantity=4,
        )
        inventory.delete_reception(reception.pk)

        with pytest.raises(StockError) as exc:
            inventory.delete_reception(reception.pk)

        assert exc.value.code == 'EVENT_NOT_FOUND'
        stapler.refresh_from_db()
        assert stapler.stock == 0

    def test_delete_after_issue_rejected(self, stapler):
        reception = inventory.receive_goods(
            item=stapler, requested_quantity=4, received_quantity=4,
        )
        inventory.issue_stock(3, stapler)

        with pytest.raises(StockError) as exc:
            inventory.delete_reception(reception.pk)

        assert exc.value.code == 'INSUFFICIENT_STOCK'
        assert Reception.objects.filter(pk=reception.pk).exists()


class TestLowStockAfterReceptionChanges:
    """Taking received goods back out can leave an item low."""

    def low_stock_warnings(self, caplog):
        return [r for r in caplog.records if r.getMessage() == 'stock.low']

    def test_delete_warns(self, paper, caplog):
        reception = inventory.receive_goods(item=paper, requested_quantity=3, received_quantity=3)
        inventory.issue_stock(10, paper)
        caplog.clear()

        with caplog.at_level(logging.WARNING, logger='stockledger'):
            inventory.delete_reception(reception.pk)

        [warning] = self.low_stock_warnings(caplog)
        assert warning.item_id == paper.pk
        assert warning.stock == 0

    def test_update_warns(self, paper, caplog):
        reception = inventory.receive_goods(item=paper, requested_quantity=3, received_quantity=3)
        inventory.issue_stock(10, paper)
        caplog.clear()

        with caplog.at_level(logging.WARNING, logger='stockledger'):
            inventory.update_reception(reception.pk, received_quantity=2)

        [warning] = self.low_stock_warnings(caplog)
        assert warning.item_id == paper.pk

    def test_increase_does_not_warn(self, paper, caplog):
        reception = inventory.receive_goods(item=paper, requested_quantity=3, received_quantity=1)

        with caplog.at_level(logging.WARNING, logger='stockledger'):
            inventory.update_reception(reception.pk, received_quantity=3)

        assert self.low_stock_warnings(caplog) == []
