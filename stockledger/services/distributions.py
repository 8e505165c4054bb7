"""
Distribution reconciler — goods issued out of the storeroom.

Distributions are always fully applied: create takes every linked
line's quantity out, delete puts it back, update applies the per-item
difference between the old and the new line set. Any increase in what
leaves the storeroom is checked against stock before the first entry is
written.
"""

import logging
import re

from django.db import IntegrityError, transaction

from stockledger.conf import stockledger_settings
from stockledger.exceptions import StockError
from stockledger.models.distribution import Distribution, DistributionLine
from stockledger.services.alerts import check_low_stock
from stockledger.services.lines import (
    diff_totals,
    item_pk,
    require_quantity,
    require_text,
    totals_by_item,
)
from stockledger.services.movements import (
    apply_deltas,
    check_available,
    lock_items,
    unit_of_work,
)

logger = logging.getLogger('stockledger')

LINE_FIELDS = ('id', 'item', 'item_name', 'quantity', 'unit')
HEADER_FIELDS = ('staff_name', 'department', 'purpose', 'distribution_date', 'note_number')
NOTE_NUMBER_ATTEMPTS = 5


def _parse_lines(lines) -> list[dict]:
    if lines is None:
        raise StockError('INVALID_LINE', reason='a distribution needs at least one line')
    raw_lines = list(lines)
    if not raw_lines:
        raise StockError('INVALID_LINE', reason='a distribution needs at least one line')

    rows = []
    for index, raw in enumerate(raw_lines):
        if not isinstance(raw, dict):
            raise StockError('INVALID_LINE', line=index, reason='line must be a dict')
        unknown = set(raw) - set(LINE_FIELDS)
        if unknown:
            raise StockError('INVALID_LINE', line=index, unknown=sorted(unknown))

        row = {
            'item_id': item_pk(raw.get('item')),
            'quantity': require_quantity(raw.get('quantity'), 'quantity', 1, index),
        }
        for field in ('item_name', 'unit'):
            if raw.get(field) is not None:
                row[field] = require_text(raw[field], field, index)
            elif row['item_id'] is None:
                raise StockError('INVALID_LINE', field=field, line=index)
        rows.append(row)
    return rows


def _issued_totals(lines) -> dict[int, int]:
    return totals_by_item((line['item_id'], line['quantity']) for line in lines)


def _check_issues(deltas, items, lines) -> None:
    """Every negative delta (more leaving) must be covered, naming the line."""
    for pk, delta in deltas.items():
        if delta >= 0:
            continue
        index = next(i for i, line in enumerate(lines) if line['item_id'] == pk)
        check_available(
            items[pk], -delta,
            line=index,
            line_item_name=lines[index]['item_name'],
        )


def _lock_distribution(distribution_id) -> Distribution:
    pk = getattr(distribution_id, 'pk', distribution_id)
    try:
        pk = int(pk)
    except (TypeError, ValueError):
        raise StockError('EVENT_NOT_FOUND', kind='distribution', event_id=pk)

    distribution = Distribution.objects.select_for_update().filter(pk=pk).first()
    if distribution is None:
        raise StockError('EVENT_NOT_FOUND', kind='distribution', event_id=pk)
    return distribution


def next_note_number() -> str:
    """Next free note number: DST-001, DST-002, ..."""
    prefix = stockledger_settings.NOTE_NUMBER_PREFIX
    padding = stockledger_settings.NOTE_NUMBER_PADDING
    pattern = re.compile(rf"^{re.escape(prefix)}-(\d+)$")

    existing = Distribution.objects.filter(
        note_number__startswith=f"{prefix}-"
    ).values_list('note_number', flat=True)
    numbers = (int(m.group(1)) for n in existing if (m := pattern.match(n)))
    return f"{prefix}-{max(numbers, default=0) + 1:0{padding}d}"


def _create_distribution(note_number, **fields) -> Distribution:
    """
    Insert the distribution header.

    A generated number can be taken by a concurrent distribute() between
    next_note_number() and the insert; the unique constraint rejects the
    loser, which retries with a fresh number inside its own savepoint.
    """
    for attempt in range(NOTE_NUMBER_ATTEMPTS):
        number = note_number or next_note_number()
        try:
            with transaction.atomic():
                return Distribution.objects.create(note_number=number, **fields)
        except IntegrityError:
            logger.warning(
                "distribution.note_number_taken",
                extra={"note_number": number, "attempt": attempt + 1},
            )
            if note_number:
                raise StockError('DUPLICATE_NOTE_NUMBER', note_number=number)
    raise StockError('DUPLICATE_NOTE_NUMBER', note_number=number, attempts=NOTE_NUMBER_ATTEMPTS)


def _check_note_number(note_number, exclude_pk=None) -> str:
    note_number = require_text(note_number, 'note_number')
    qs = Distribution.objects.filter(note_number=note_number)
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    if qs.exists():
        raise StockError('DUPLICATE_NOTE_NUMBER', note_number=note_number)
    return note_number


class DistributionService:
    """Create, edit and delete distributions, keeping stock in step."""

    @classmethod
    def distribute(cls, lines, user=None, staff_name='', department='',
                   purpose='', distribution_date=None,
                   note_number=None) -> Distribution:
        """
        Issue goods.

        Args:
            lines: [{item, item_name, quantity, unit}, ...]; item may be
                omitted for goods not tracked in stock

        Raises:
            StockError('INVALID_LINE' | 'INVALID_QUANTITY')
            StockError('ITEM_NOT_FOUND'): Unknown inventory item
            StockError('INSUFFICIENT_STOCK'): A line asks for more than
                is on hand; nothing is applied
            StockError('DUPLICATE_NOTE_NUMBER')
        """
        rows = _parse_lines(lines)

        with unit_of_work('distribution.create'):
            items = lock_items(row['item_id'] for row in rows)
            for row in rows:
                item = items.get(row['item_id'])
                if item is not None:
                    row.setdefault('item_name', item.name)
                    row.setdefault('unit', item.unit)

            deltas = diff_totals(_issued_totals(rows), {})
            _check_issues(deltas, items, rows)

            if note_number:
                note_number = _check_note_number(note_number)

            create_kwargs = {
                'staff_name': staff_name,
                'department': department,
                'purpose': purpose,
                'distributed_by': user,
            }
            if distribution_date is not None:
                create_kwargs['distribution_date'] = distribution_date
            distribution = _create_distribution(note_number, **create_kwargs)
            note_number = distribution.note_number

            DistributionLine.objects.bulk_create([
                DistributionLine(distribution=distribution, **row) for row in rows
            ])

            apply_deltas(
                deltas, items, f"Distribution {note_number}",
                user=user, reference=distribution, allow_negative=False,
                staff_name=staff_name,
            )

        logger.info(
            "distribution.create",
            extra={
                "distribution_id": distribution.pk,
                "note_number": note_number,
                "lines": len(rows),
                "deltas": deltas,
            },
        )
        check_low_stock(deltas)
        return distribution

    @classmethod
    def update_distribution(cls, distribution_id, lines=None, user=None,
                            **fields) -> Distribution:
        """
        Edit a distribution.

        lines, when given, replaces the whole line set. Per item, more
        issued than before takes the difference out (checked against
        stock), less issued puts it back, a removed item comes back in
        full and a new item leaves in full.

        Raises:
            StockError('EVENT_NOT_FOUND'): Distribution does not exist
            StockError('INSUFFICIENT_STOCK'): An increase is not covered
            StockError('DUPLICATE_NOTE_NUMBER')
        """
        unknown = set(fields) - set(HEADER_FIELDS)
        if unknown:
            raise TypeError(f"update_distribution() got unexpected keyword arguments: {sorted(unknown)}")

        rows = _parse_lines(lines) if lines is not None else None

        with unit_of_work('distribution.update',
                          distribution_id=getattr(distribution_id, 'pk', distribution_id)):
            distribution = _lock_distribution(distribution_id)

            if fields.get('note_number') and fields['note_number'] != distribution.note_number:
                distribution.note_number = _check_note_number(
                    fields['note_number'], exclude_pk=distribution.pk)
            for key in ('staff_name', 'department', 'purpose', 'distribution_date'):
                if fields.get(key) is not None:
                    setattr(distribution, key, fields[key])
            distribution.save()

            deltas = {}
            if rows is not None:
                old_lines = list(distribution.lines.values('item_id', 'quantity'))
                items = lock_items(
                    [line['item_id'] for line in old_lines] + [row['item_id'] for row in rows]
                )
                for row in rows:
                    item = items.get(row['item_id'])
                    if item is not None:
                        row.setdefault('item_name', item.name)
                        row.setdefault('unit', item.unit)

                # Stock delta is the opposite of the issued delta
                deltas = diff_totals(_issued_totals(rows), _issued_totals(old_lines))
                _check_issues(deltas, items, rows)

                distribution.lines.all().delete()
                DistributionLine.objects.bulk_create([
                    DistributionLine(distribution=distribution, **row) for row in rows
                ])

                apply_deltas(
                    deltas, items, f"Distribution {distribution.note_number} updated",
                    user=user, reference=distribution, allow_negative=False,
                    staff_name=distribution.staff_name,
                )

        logger.info(
            "distribution.update",
            extra={"distribution_id": distribution.pk, "deltas": deltas},
        )
        if deltas:
            check_low_stock(deltas)
        return distribution

    @classmethod
    def delete_distribution(cls, distribution_id, user=None) -> None:
        """
        Delete a distribution and put its goods back in stock.

        Raises:
            StockError('EVENT_NOT_FOUND'): Distribution does not exist
                (including a second delete of the same distribution)
        """
        with unit_of_work('distribution.delete',
                          distribution_id=getattr(distribution_id, 'pk', distribution_id)):
            distribution = _lock_distribution(distribution_id)
            pk = distribution.pk
            note_number = distribution.note_number
            old_lines = list(distribution.lines.values('item_id', 'quantity'))

            deltas = diff_totals({}, _issued_totals(old_lines))
            items = lock_items(deltas)

            apply_deltas(
                deltas, items, f"Distribution {note_number} deleted",
                user=user, reference=distribution, distribution_id=pk,
            )
            distribution.delete()

        logger.info(
            "distribution.delete",
            extra={"distribution_id": pk, "note_number": note_number, "deltas": deltas},
        )
