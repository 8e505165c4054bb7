"""
Exceptions for Stockledger.

All errors are StockError with a structured code for programmatic handling.
"""

from typing import Any


NOT_FOUND_CODES = frozenset({
    'ITEM_NOT_FOUND',
    'EVENT_NOT_FOUND',
    'REQUISITION_NOT_FOUND',
})


class StockError(Exception):
    """
    Structured exception for stock operations.

    Usage:
        try:
            inventory.distribute(lines, user=user)
        except StockError as e:
            if e.code == 'INSUFFICIENT_STOCK':
                print(f"Only {e.available} left of {e.data['item_name']}")

    Attributes:
        code: Error code for programmatic handling
        message: Human-readable message
        data: Additional context data
    """

    _default_messages = {
        'ITEM_NOT_FOUND': 'Inventory item not found',
        'EVENT_NOT_FOUND': 'Reception or distribution not found',
        'REQUISITION_NOT_FOUND': 'Purchase request not found',
        'INSUFFICIENT_STOCK': 'Insufficient stock for this item',
        'INVALID_QUANTITY': 'Invalid quantity',
        'INVALID_DIRECTION': 'Direction must be IN or OUT',
        'INVALID_LINE': 'Invalid line item',
        'INVALID_STATUS': 'Invalid status for this operation',
        'REASON_REQUIRED': 'A reason is required',
        'DUPLICATE_NOTE_NUMBER': 'Note number already exists',
        'CONSISTENCY_VIOLATION': 'Stock update could not be committed',
    }

    def __init__(self, code: str, message: str | None = None, **data):
        self.code = code
        self.message = message or self._default_messages.get(code, code)
        self.data = data
        super().__init__(self.message)

    def __str__(self) -> str:
        if not self.data:
            return f"[{self.code}] {self.message}"
        details = ', '.join(f"{k}={v}" for k, v in self.data.items())
        return f"[{self.code}] {self.message} ({details})"

    @property
    def is_not_found(self) -> bool:
        return self.code in NOT_FOUND_CODES

    @property
    def available(self) -> int:
        """Shortcut for data['available']."""
        return self.data.get('available', 0)

    @property
    def requested(self) -> int:
        """Shortcut for data['requested']."""
        return self.data.get('requested', 0)

    @property
    def item_id(self):
        return self.data.get('item_id')

    def as_dict(self) -> dict[str, Any]:
        """Serialize to dict (useful for APIs)."""
        return {
            'code': self.code,
            'message': self.message,
            'data': {
                k: v if isinstance(v, (int, float, bool, type(None), list)) else str(v)
                for k, v in self.data.items()
            }
        }
