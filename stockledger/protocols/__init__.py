"""
Stockledger Protocols.

Defines interfaces for external system integration.
"""

from stockledger.protocols.requisition import (
    RequisitionBackend,
    RequisitionInfo,
)

__all__ = [
    "RequisitionBackend",
    "RequisitionInfo",
]
