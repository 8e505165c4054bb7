"""
Stockledger Adapters.

Implementations of protocols for external systems.
"""

from stockledger.adapters.requisitions import (
    ModelRequisitionBackend,
    get_requisition_backend,
    reset_requisition_backend,
)

__all__ = [
    "ModelRequisitionBackend",
    "get_requisition_backend",
    "reset_requisition_backend",
]
