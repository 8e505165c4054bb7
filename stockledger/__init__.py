"""
Django Stockledger — inventory stock ledger for receptions and distributions.

Usage:
    from stockledger import inventory, StockError

    inventory.receive_goods(item=paper, requested_quantity=10, received_quantity=10)
    inventory.distribute([{'item': paper, 'quantity': 4}], staff_name='Ana')
    inventory.stock_of(paper)  # 6
"""


def __getattr__(name):
    """Lazy import to avoid circular imports during app loading."""
    if name == 'inventory':
        from stockledger.service import Inventory
        return Inventory
    elif name == 'StockError':
        from stockledger.exceptions import StockError
        return StockError
    elif name == 'InventoryItem':
        from stockledger.models.item import InventoryItem
        return InventoryItem
    elif name == 'StockEntry':
        from stockledger.models.entry import StockEntry
        return StockEntry
    elif name == 'Reception':
        from stockledger.models.reception import Reception
        return Reception
    elif name == 'Distribution':
        from stockledger.models.distribution import Distribution
        return Distribution
    elif name == 'Requisition':
        from stockledger.models.requisition import Requisition
        return Requisition
    elif name == 'ReceptionStatus':
        from stockledger.models.enums import ReceptionStatus
        return ReceptionStatus
    elif name == 'Direction':
        from stockledger.models.enums import Direction
        return Direction
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    'inventory',
    'StockError',
    'InventoryItem',
    'StockEntry',
    'Reception',
    'Distribution',
    'Requisition',
    'ReceptionStatus',
    'Direction',
]

__version__ = '0.1.0'
