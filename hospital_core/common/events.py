# hospital_core/common/events.py
import logging
from collections import defaultdict
from typing import Callable, Dict, List, Any

from django.db import transaction

Handler = Callable[[Dict[str, Any]], None]

logger = logging.getLogger(__name__)

_registry: Dict[str, List[Handler]] = defaultdict(list)

# Change feeds published by services (payloads are id-only).
APPOINTMENTS_CHANGED = "appointments.changed"
VITALS_RECORDED = "vitals.recorded"
LAB_ORDERS_CHANGED = "lab_orders.changed"
BILLS_CHANGED = "bills.changed"
MEDICATION_STOCK_CHANGED = "medication_stock.changed"


def subscribe(event_name: str):
    """
    Decorator to register an event handler.
    Usage:
        @subscribe("appointments.changed")
        def handler(payload): ...
    """
    def _decorator(fn: Handler) -> Handler:
        _registry[event_name].append(fn)
        return fn
    return _decorator


def unsubscribe(event_name: str, fn: Handler) -> None:
    handlers = _registry.get(event_name, [])
    if fn in handlers:
        handlers.remove(fn)


def publish(event_name: str, payload: Dict[str, Any]) -> None:
    """
    Publish an event to in-process subscribers.
    Keep payloads ID-based; subscribers re-read the store.

    Delivery is best-effort: a failing subscriber is logged and skipped,
    it never fails the write that triggered it.
    """
    for handler in list(_registry.get(event_name, [])):
        try:
            handler(payload)
        except Exception:
            logger.exception("Subscriber %r failed for %s", handler, event_name)


def publish_on_commit(event_name: str, payload: Dict[str, Any]) -> None:
    """
    Publish once the surrounding transaction commits (immediately when there is none).
    """
    transaction.on_commit(lambda: publish(event_name, payload))
