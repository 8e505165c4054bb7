"""
Line helpers shared by the reception and distribution services.

Both reconcilers reduce an event to {item_id: quantity} totals and diff
the old totals against the new ones, so a line that moves to another
item, a duplicate line for the same item, or a removed line all fall
out of the same subtraction.
"""

from collections import defaultdict

from stockledger.exceptions import StockError


def item_pk(item):
    """Accept an InventoryItem, a pk or None."""
    if item is None or item == '':
        return None
    pk = getattr(item, 'pk', item)
    try:
        return int(pk)
    except (TypeError, ValueError):
        raise StockError('ITEM_NOT_FOUND', item_id=pk)


def require_quantity(value, field: str, minimum: int, line: int | None = None) -> int:
    """Validate an integer quantity >= minimum."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise StockError('INVALID_QUANTITY', field=field, value=value, line=line)
    if value < minimum:
        raise StockError('INVALID_QUANTITY', field=field, value=value, minimum=minimum, line=line)
    return value


def require_text(value, field: str, line: int | None = None) -> str:
    if not isinstance(value, str) or not value.strip():
        raise StockError('INVALID_LINE', field=field, line=line)
    return value.strip()


def totals_by_item(pairs) -> dict[int, int]:
    """Sum (item_id, quantity) pairs per item, skipping unlinked lines."""
    totals = defaultdict(int)
    for pk, quantity in pairs:
        if pk is not None:
            totals[pk] += quantity
    return dict(totals)


def diff_totals(old: dict[int, int], new: dict[int, int]) -> dict[int, int]:
    """Per-item new - old, non-zero entries only, ordered by item id."""
    deltas = {}
    for pk in sorted(set(old) | set(new)):
        delta = new.get(pk, 0) - old.get(pk, 0)
        if delta:
            deltas[pk] = delta
    return deltas
