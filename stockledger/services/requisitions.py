"""
Upstream demand link — keep a purchase request in step with its reception.

    APPROVED ──(reception becomes COMPLETE)──► RECEIVED
    RECEIVED ──(reception deleted / no longer COMPLETE)──► APPROVED

Called by the reception service inside its unit of work, so a status
write rolls back with the stock changes.
"""

import logging

from stockledger.adapters.requisitions import get_requisition_backend
from stockledger.exceptions import StockError
from stockledger.models.enums import RequisitionStatus
from stockledger.protocols.requisition import RequisitionInfo

logger = logging.getLogger('stockledger')


def _get(ref: str) -> RequisitionInfo:
    info = get_requisition_backend().get_requisition(ref)
    if info is None:
        raise StockError('REQUISITION_NOT_FOUND', requisition_ref=ref)
    return info


def link_requisition(ref) -> RequisitionInfo | None:
    """
    Resolve a requisition reference. Empty ref = no link.

    Only an APPROVED requisition can be received against.

    Raises:
        StockError('REQUISITION_NOT_FOUND'): If the backend has no such requisition
        StockError('INVALID_STATUS'): If the requisition is not APPROVED
    """
    if ref is None or ref == '':
        return None

    ref = str(getattr(ref, 'pk', ref))
    info = _get(ref)
    if info.status != RequisitionStatus.APPROVED:
        raise StockError(
            'INVALID_STATUS',
            requisition_ref=ref,
            status=str(info.status),
            expected=[str(RequisitionStatus.APPROVED)],
        )
    return info


def _set_status(ref: str, status: str) -> None:
    try:
        get_requisition_backend().set_requisition_status(ref, status)
    except LookupError as exc:
        raise StockError('REQUISITION_NOT_FOUND', requisition_ref=ref) from exc

    logger.info(
        "requisition.status",
        extra={"requisition_ref": ref, "status": str(status)},
    )


def advance_requisition(ref: str) -> None:
    """Mark the requisition as received."""
    if ref:
        _set_status(ref, RequisitionStatus.RECEIVED)


def revert_requisition(ref: str) -> None:
    """Put a RECEIVED requisition back to approved; any other status is left alone."""
    if not ref:
        return
    if _get(ref).status == RequisitionStatus.RECEIVED:
        _set_status(ref, RequisitionStatus.APPROVED)
