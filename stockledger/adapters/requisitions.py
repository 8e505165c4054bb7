"""
Requisition backends — the upstream demand link.

This module holds the default backend (Stockledger's own Requisition
model) and the loader for the configured backend.

Usage:
    from stockledger.adapters import get_requisition_backend

    backend = get_requisition_backend()
    info = backend.get_requisition("42")

Settings:
    STOCKLEDGER = {
        "REQUISITION_BACKEND": "purchasing.adapters.PurchaseRequestBackend",
    }
"""

from __future__ import annotations

import logging
import threading

from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

from stockledger.conf import stockledger_settings
from stockledger.protocols.requisition import RequisitionBackend, RequisitionInfo

logger = logging.getLogger(__name__)


class ModelRequisitionBackend:
    """
    RequisitionBackend over stockledger.models.Requisition.

    The ref is the requisition primary key as a string.
    """

    def _lookup(self, ref: str, for_update: bool = False):
        from stockledger.models import Requisition

        try:
            pk = int(ref)
        except (TypeError, ValueError):
            return None

        qs = Requisition.objects.all()
        if for_update:
            qs = qs.select_for_update()
        return qs.filter(pk=pk).first()

    def get_requisition(self, ref: str) -> RequisitionInfo | None:
        requisition = self._lookup(ref)
        if requisition is None:
            return None
        return RequisitionInfo(
            ref=str(requisition.pk),
            status=requisition.status,
            request_number=requisition.request_number,
            item_name=requisition.item_name,
        )

    def set_requisition_status(self, ref: str, status: str) -> None:
        requisition = self._lookup(ref, for_update=True)
        if requisition is None:
            # Deleted between lookup and write; the caller decides.
            raise LookupError(f"Requisition {ref!r} not found")

        requisition.status = status
        requisition.save(update_fields=['status', 'updated_at'])


# Cached backend instance
_lock = threading.Lock()
_requisition_backend: RequisitionBackend | None = None


def get_requisition_backend() -> RequisitionBackend:
    """
    Return the configured requisition backend.

    Raises:
        ImproperlyConfigured: If REQUISITION_BACKEND is empty or import fails
    """
    global _requisition_backend

    if _requisition_backend is None:
        with _lock:
            if _requisition_backend is None:  # double-checked
                backend_path = stockledger_settings.REQUISITION_BACKEND

                if not backend_path:
                    raise ImproperlyConfigured(
                        "STOCKLEDGER['REQUISITION_BACKEND'] must not be empty. "
                        "Example: 'stockledger.adapters.requisitions.ModelRequisitionBackend'"
                    )

                try:
                    backend_class = import_string(backend_path)
                except ImportError as e:
                    raise ImproperlyConfigured(
                        f"Failed to import requisition backend '{backend_path}': {e}"
                    ) from e

                _requisition_backend = backend_class()
                logger.debug("Loaded requisition backend: %s", backend_path)

    return _requisition_backend


def reset_requisition_backend() -> None:
    """Reset the cached backend. Useful for testing."""
    global _requisition_backend
    _requisition_backend = None
