"""
Inventory — the single public interface for all stock operations.

Usage:
    from stockledger import inventory, StockError

    reception = inventory.receive_goods(lines=[
        {'item': paper, 'requested_quantity': 10, 'received_quantity': 10},
    ], user=request.user)
    inventory.stock_of(paper)  # 10

    inventory.distribute([{'item': paper, 'quantity': 4}], staff_name='Ana')
    inventory.stock_of(paper)  # 6
"""

from stockledger.services import (
    DistributionService,
    LedgerMovements,
    LedgerQueries,
    ReceptionService,
)


class Inventory(LedgerQueries, LedgerMovements, ReceptionService, DistributionService):
    """
    Single interface for all stock operations.

    Queries:       stock_of, ledger_balance, entries_for, low_stock_items, verify_ledger
    Movements:     register_item, receive_stock, issue_stock, adjust_stock
    Receptions:    receive_goods, update_reception, delete_reception
    Distributions: distribute, update_distribution, delete_distribution

    IMPORTANT: All state-changing methods run in one atomic transaction
    with the event row and item rows locked. See each method's docstring.
    """
