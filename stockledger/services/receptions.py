"""
Reception reconciler — goods received into the storeroom.

A reception's stock effect is, per linked item:

    applied = received_quantity if status == COMPLETE else 0

Create applies it, update applies (new applied - old applied), delete
applies -(old applied). Because every path is a difference of the same
function, a status flip (PARTIAL → COMPLETE applies the full quantity,
COMPLETE → PARTIAL takes it back) needs no special case.

Status resolution on update:
    explicit status                 → used as given
    omitted, line quantities change → classify(new lines)
    omitted, nothing changes        → old status

All methods run in one unit of work with the reception row and the
affected item rows locked.
"""

import logging

from stockledger.exceptions import StockError
from stockledger.models.enums import ReceptionStatus
from stockledger.models.reception import Reception, ReceptionLine
from stockledger.services.alerts import check_low_stock
from stockledger.services.classifier import applied_quantity, classify
from stockledger.services.lines import (
    diff_totals,
    item_pk,
    require_quantity,
    require_text,
    totals_by_item,
)
from stockledger.services.movements import apply_deltas, lock_items, unit_of_work
from stockledger.services.requisitions import (
    advance_requisition,
    link_requisition,
    revert_requisition,
)

logger = logging.getLogger('stockledger')

LINE_FIELDS = ('item', 'item_name', 'requested_quantity', 'received_quantity', 'unit')
HEADER_FIELDS = ('receipt_date', 'notes')


def _validate_status(status):
    if status not in ReceptionStatus.values:
        raise StockError('INVALID_STATUS', status=status, expected=list(ReceptionStatus.values))
    return ReceptionStatus(status)


def _parse_line(raw, index: int, patch: bool = False) -> dict:
    """
    Validate one line dict. With patch=True only the keys present are
    checked (partial edit of an existing line).
    """
    if not isinstance(raw, dict):
        raise StockError('INVALID_LINE', line=index, reason='line must be a dict')

    unknown = set(raw) - set(LINE_FIELDS) - {'id'}
    if unknown:
        raise StockError('INVALID_LINE', line=index, unknown=sorted(unknown))

    line = {}
    if raw.get('id') is not None:
        line['id'] = raw['id']
    if 'item' in raw or not patch:
        line['item_id'] = item_pk(raw.get('item'))
    if 'requested_quantity' in raw or not patch:
        line['requested_quantity'] = require_quantity(
            raw.get('requested_quantity'), 'requested_quantity', 1, index)
    if 'received_quantity' in raw or not patch:
        line['received_quantity'] = require_quantity(
            raw.get('received_quantity'), 'received_quantity', 0, index)

    for field in ('item_name', 'unit'):
        if raw.get(field) is not None:
            line[field] = require_text(raw[field], field, index)
        elif not patch and line['item_id'] is None:
            # Untracked lines have no item to borrow a name/unit from
            raise StockError('INVALID_LINE', field=field, line=index)
    return line


def _fill_from_items(line: dict, items) -> None:
    item = items.get(line.get('item_id'))
    if item is not None:
        line.setdefault('item_name', item.name)
        line.setdefault('unit', item.unit)


def _applied_totals(status, lines) -> dict[int, int]:
    return totals_by_item(
        (line['item_id'], applied_quantity(status, line['received_quantity']))
        for line in lines
    )


def _snapshot(line: ReceptionLine) -> dict:
    return {
        'id': line.pk,
        'item_id': line.item_id,
        'item_name': line.item_name,
        'requested_quantity': line.requested_quantity,
        'received_quantity': line.received_quantity,
        'unit': line.unit,
    }


def _lock_reception(reception_id) -> Reception:
    pk = getattr(reception_id, 'pk', reception_id)
    try:
        pk = int(pk)
    except (TypeError, ValueError):
        raise StockError('EVENT_NOT_FOUND', kind='reception', event_id=pk)

    reception = Reception.objects.select_for_update().filter(pk=pk).first()
    if reception is None:
        raise StockError('EVENT_NOT_FOUND', kind='reception', event_id=pk)
    return reception


class ReceptionService:
    """Create, edit and delete receptions, keeping stock in step."""

    @classmethod
    def receive_goods(cls, lines=None, status=None, user=None,
                      requisition=None, receipt_date=None, notes='',
                      **single_line) -> Reception:
        """
        Record a goods reception.

        Either pass lines=[{item, item_name, requested_quantity,
        received_quantity, unit}, ...] or the same keys as keyword
        arguments for a single-item reception.

        If status is omitted it is classified from the lines before any
        stock moves. Only a COMPLETE reception puts stock in.

        Raises:
            StockError('INVALID_LINE' | 'INVALID_QUANTITY' | 'INVALID_STATUS')
            StockError('REQUISITION_NOT_FOUND'): Unknown requisition
            StockError('ITEM_NOT_FOUND'): Unknown inventory item
        """
        unknown = set(single_line) - set(LINE_FIELDS)
        if unknown:
            raise TypeError(f"receive_goods() got unexpected keyword arguments: {sorted(unknown)}")
        if lines is not None and single_line:
            raise StockError('INVALID_LINE', reason='pass lines or single-item fields, not both')

        raw_lines = list(lines) if lines is not None else ([single_line] if single_line else [])
        if not raw_lines:
            raise StockError('INVALID_LINE', reason='a reception needs at least one line')

        rows = [_parse_line(raw, index) for index, raw in enumerate(raw_lines)]
        for row in rows:
            row.pop('id', None)

        if status is None:
            status = classify(rows)
        else:
            status = _validate_status(status)

        with unit_of_work('reception.create'):
            requisition_info = link_requisition(requisition)
            items = lock_items(row['item_id'] for row in rows)
            for row in rows:
                _fill_from_items(row, items)

            create_kwargs = {
                'requisition_ref': requisition_info.ref if requisition_info else '',
                'status': status,
                'notes': notes or '',
                'received_by': user,
            }
            if receipt_date is not None:
                create_kwargs['receipt_date'] = receipt_date
            reception = Reception.objects.create(**create_kwargs)

            ReceptionLine.objects.bulk_create([
                ReceptionLine(reception=reception, **row) for row in rows
            ])

            deltas = diff_totals({}, _applied_totals(status, rows))
            apply_deltas(
                deltas, items, f"Reception #{reception.pk}",
                user=user, reference=reception,
            )

            if requisition_info and status == ReceptionStatus.COMPLETE:
                advance_requisition(requisition_info.ref)

        logger.info(
            "reception.create",
            extra={
                "reception_id": reception.pk,
                "status": str(status),
                "lines": len(rows),
                "deltas": deltas,
            },
        )
        return reception

    @classmethod
    def update_reception(cls, reception_id, lines=None, status=None,
                         user=None, **fields) -> Reception:
        """
        Edit a reception and apply the stock difference.

        lines, when given, is the new line set: a dict with 'id' patches
        that existing line (only the keys present), a dict without 'id'
        adds a line, existing lines left out are removed.

        Single-item shortcuts (item, item_name, requested_quantity,
        received_quantity, unit) patch the only line of a one-line
        reception.

        Raises:
            StockError('EVENT_NOT_FOUND'): Reception does not exist
            StockError('INVALID_LINE'): Bad patch, or shortcut on a
                multi-line reception
            StockError('ITEM_NOT_FOUND'): Unknown inventory item
            StockError('INSUFFICIENT_STOCK'): A decrement would go below
                zero and ALLOW_NEGATIVE_STOCK is off
        """
        unknown = set(fields) - set(LINE_FIELDS) - set(HEADER_FIELDS)
        if unknown:
            raise TypeError(f"update_reception() got unexpected keyword arguments: {sorted(unknown)}")

        header = {k: v for k, v in fields.items() if k in HEADER_FIELDS}
        shortcut = {k: v for k, v in fields.items() if k in LINE_FIELDS}
        if lines is not None and shortcut:
            raise StockError('INVALID_LINE', reason='pass lines or single-item fields, not both')

        if status is not None:
            status = _validate_status(status)

        patches = None
        if lines is not None:
            patches = [
                _parse_line(raw, index, patch=isinstance(raw, dict) and raw.get('id') is not None)
                for index, raw in enumerate(lines)
            ]
            if not patches:
                raise StockError('INVALID_LINE', reason='a reception needs at least one line')
        elif shortcut:
            shortcut_patch = _parse_line(shortcut, 0, patch=True)

        with unit_of_work('reception.update', reception_id=getattr(reception_id, 'pk', reception_id)):
            reception = _lock_reception(reception_id)
            old_lines = {line.pk: _snapshot(line) for line in reception.lines.all()}
            old_status = reception.status

            if patches is None and shortcut:
                if len(old_lines) != 1:
                    raise StockError(
                        'INVALID_LINE',
                        reason='single-item fields need a one-line reception',
                        lines=len(old_lines),
                    )
                patches = [{'id': next(iter(old_lines)), **shortcut_patch}]

            if patches is None:
                new_lines = list(old_lines.values())
            else:
                new_lines = []
                seen = set()
                for index, patch in enumerate(patches):
                    line_id = patch.get('id')
                    if line_id is None:
                        new_lines.append(dict(patch))
                        continue
                    if line_id not in old_lines or line_id in seen:
                        raise StockError('INVALID_LINE', line=index, line_id=line_id)
                    seen.add(line_id)
                    merged = {**old_lines[line_id], **patch}
                    if patch.get('item_id') not in (None, old_lines[line_id]['item_id']):
                        # Moved to another item: take its name/unit unless given
                        for field in ('item_name', 'unit'):
                            if field not in patch:
                                del merged[field]
                    new_lines.append(merged)

            quantities_changed = (
                sorted((l.get('id') or 0, l['requested_quantity'], l['received_quantity'])
                       for l in new_lines)
                != sorted((l['id'], l['requested_quantity'], l['received_quantity'])
                          for l in old_lines.values())
            )
            if status is not None:
                new_status = status
            elif quantities_changed:
                new_status = classify(new_lines)
            else:
                new_status = ReceptionStatus(old_status)

            items = lock_items(
                [l['item_id'] for l in old_lines.values()] + [l['item_id'] for l in new_lines]
            )
            for line in new_lines:
                _fill_from_items(line, items)

            deltas = diff_totals(
                _applied_totals(old_status, old_lines.values()),
                _applied_totals(new_status, new_lines),
            )

            if patches is not None:
                kept = {line['id'] for line in new_lines if line.get('id')}
                reception.lines.exclude(pk__in=kept).delete()
                for line in new_lines:
                    values = {k: line[k] for k in
                              ('item_id', 'item_name', 'requested_quantity', 'received_quantity', 'unit')}
                    if line.get('id'):
                        ReceptionLine.objects.filter(pk=line['id']).update(**values)
                    else:
                        ReceptionLine.objects.create(reception=reception, **values)

            reception.status = new_status
            if 'notes' in header:
                reception.notes = header['notes'] or ''
            if header.get('receipt_date') is not None:
                reception.receipt_date = header['receipt_date']
            reception.save()

            apply_deltas(
                deltas, items, f"Reception #{reception.pk} updated",
                user=user, reference=reception,
            )

            if reception.requisition_ref and old_status != new_status:
                if new_status == ReceptionStatus.COMPLETE:
                    advance_requisition(reception.requisition_ref)
                elif old_status == ReceptionStatus.COMPLETE:
                    revert_requisition(reception.requisition_ref)

        logger.info(
            "reception.update",
            extra={
                "reception_id": reception.pk,
                "old_status": str(old_status),
                "status": str(new_status),
                "deltas": deltas,
            },
        )
        check_low_stock(item_id for item_id, delta in deltas.items() if delta < 0)
        return reception

    @classmethod
    def delete_reception(cls, reception_id, user=None) -> None:
        """
        Delete a reception, taking its applied stock back out.

        A linked requisition this reception had marked RECEIVED returns
        to APPROVED.

        Raises:
            StockError('EVENT_NOT_FOUND'): Reception does not exist
                (including a second delete of the same reception)
            StockError('INSUFFICIENT_STOCK'): The received goods were
                already issued and ALLOW_NEGATIVE_STOCK is off
        """
        with unit_of_work('reception.delete', reception_id=getattr(reception_id, 'pk', reception_id)):
            reception = _lock_reception(reception_id)
            pk = reception.pk
            old_lines = [_snapshot(line) for line in reception.lines.all()]

            deltas = diff_totals(_applied_totals(reception.status, old_lines), {})
            items = lock_items(deltas)

            apply_deltas(
                deltas, items, f"Reception #{pk} deleted",
                user=user, reference=reception, reception_id=pk,
            )

            revert_requisition(reception.requisition_ref)
            reception.delete()

        logger.info(
            "reception.delete",
            extra={"reception_id": pk, "deltas": deltas},
        )
        check_low_stock(item_id for item_id, delta in deltas.items() if delta < 0)
