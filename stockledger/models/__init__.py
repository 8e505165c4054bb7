"""
Stockledger Models.

Core models for the stock ledger:
- InventoryItem: Quantity on hand (cache)
- StockEntry: Immutable ledger of changes
- Reception / ReceptionLine: Goods received
- Distribution / DistributionLine: Goods issued
- Requisition: Default purchase request store
"""

from stockledger.models.distribution import Distribution, DistributionLine
from stockledger.models.entry import StockEntry
from stockledger.models.enums import Direction, ReceptionStatus, RequisitionStatus, StockLevel
from stockledger.models.item import InventoryItem
from stockledger.models.reception import Reception, ReceptionLine
from stockledger.models.requisition import Requisition

__all__ = [
    'Direction',
    'ReceptionStatus',
    'RequisitionStatus',
    'StockLevel',
    'InventoryItem',
    'StockEntry',
    'Reception',
    'ReceptionLine',
    'Distribution',
    'DistributionLine',
    'Requisition',
]
