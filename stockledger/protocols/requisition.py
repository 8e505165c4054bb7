"""
Requisition Protocol — Interface for purchase request systems.

Stockledger defines this protocol, the purchasing module (or the bundled
model adapter) implements it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class RequisitionInfo:
    """What Stockledger needs to know about a purchase request."""

    ref: str
    status: str
    request_number: str | None = None
    item_name: str | None = None


@runtime_checkable
class RequisitionBackend(Protocol):
    """
    Protocol for the upstream demand link.

    Stockledger never creates, reviews or deletes requisitions. It checks
    they exist and pushes their status forward (RECEIVED) or back
    (APPROVED) as receptions come and go.

    Implementations run inside Stockledger's transaction.atomic() block,
    so a status write must use the same database connection to roll back
    with the stock changes.
    """

    def get_requisition(self, ref: str) -> RequisitionInfo | None:
        """
        Look up a requisition.

        Args:
            ref: Opaque requisition id

        Returns:
            RequisitionInfo or None if not found
        """
        ...

    def set_requisition_status(self, ref: str, status: str) -> None:
        """
        Change the status of a requisition.

        Args:
            ref: Opaque requisition id
            status: New status (RequisitionStatus value)
        """
        ...
