"""
Stockledger services — modular organization of stock operations.

    from stockledger.services import (
        LedgerQueries, LedgerMovements, ReceptionService, DistributionService,
    )
"""

from stockledger.services.distributions import DistributionService
from stockledger.services.movements import LedgerMovements
from stockledger.services.queries import LedgerQueries
from stockledger.services.receptions import ReceptionService

__all__ = [
    'LedgerQueries',
    'LedgerMovements',
    'ReceptionService',
    'DistributionService',
]
