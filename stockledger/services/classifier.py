"""
Reception status classifier.

    classify([{'requested_quantity': 5, 'received_quantity': 5}])  # COMPLETE
    classify([{'requested_quantity': 5, 'received_quantity': 3}])  # PARTIAL
    classify([
        {'requested_quantity': 5, 'received_quantity': 7},
        {'requested_quantity': 3, 'received_quantity': 3},
    ])                                                             # DIFFERENT

Precedence: DIFFERENT > PARTIAL > COMPLETE. Any over-delivery wins,
even when another line is short.
"""

from stockledger.exceptions import StockError
from stockledger.models.enums import ReceptionStatus


def _quantities(line) -> tuple[int, int]:
    if isinstance(line, dict):
        return line['requested_quantity'], line['received_quantity']
    return line.requested_quantity, line.received_quantity


def classify(lines) -> ReceptionStatus:
    """
    Derive the status of a reception from its lines.

    Args:
        lines: Iterable of dicts or objects with requested_quantity
               and received_quantity

    Raises:
        StockError('INVALID_LINE'): If there are no lines
    """
    pairs = [_quantities(line) for line in lines]
    if not pairs:
        raise StockError('INVALID_LINE', reason='no lines to classify')

    if any(received > requested for requested, received in pairs):
        return ReceptionStatus.DIFFERENT
    if any(received < requested for requested, received in pairs):
        return ReceptionStatus.PARTIAL
    return ReceptionStatus.COMPLETE


def applied_quantity(status: str, received_quantity: int) -> int:
    """Portion of a received quantity that is reflected in stock."""
    if status == ReceptionStatus.COMPLETE:
        return received_quantity
    return 0
