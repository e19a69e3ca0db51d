# hospital_core/pharmacy/stock.py
"""
Batch picking for dispensing: first-expiring usable stock goes first.

A batch is usable on `on_date` while it has units left and its expiry
date has not passed (the expiry date itself is still usable).
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable


class InsufficientStock(ValueError):
    def __init__(self, requested: int, available: int):
        super().__init__(f"requested {requested}, only {available} available")
        self.requested = requested
        self.available = available


@dataclass(frozen=True)
class Pick:
    batch_id: Any
    quantity: int


def is_usable(batch, on_date: date) -> bool:
    return batch.quantity_on_hand > 0 and batch.expiry_date >= on_date


def available_quantity(batches: Iterable, on_date: date) -> int:
    return sum(b.quantity_on_hand for b in batches if is_usable(b, on_date))


def is_low_stock(on_hand: int, reorder_point: int) -> bool:
    return on_hand <= reorder_point


def pick_batches(batches: Iterable, quantity: int, *, on_date: date) -> list[Pick]:
    """
    Split `quantity` across usable batches ordered by (expiry_date, batch_number).
    Raises InsufficientStock without picking anything when they can't cover it.
    """
    if quantity < 1:
        raise ValueError("quantity must be at least 1")

    usable = sorted(
        (b for b in batches if is_usable(b, on_date)),
        key=lambda b: (b.expiry_date, b.batch_number),
    )
    available = sum(b.quantity_on_hand for b in usable)
    if quantity > available:
        raise InsufficientStock(quantity, available)

    picks: list[Pick] = []
    remaining = quantity
    for batch in usable:
        take = min(batch.quantity_on_hand, remaining)
        picks.append(Pick(batch_id=batch.id, quantity=take))
        remaining -= take
        if remaining == 0:
            break
    return picks
