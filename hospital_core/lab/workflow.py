# hospital_core/lab/workflow.py
"""
Lab order state machine:

    ordered -> sample_collected -> in_progress -> completed

Both manual moves need a settled bill. completed is reached only by
entering a result. Nothing moves backwards.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

from hospital_core.common.api.exceptions import InvalidTransitionError, PaymentRequiredError
from hospital_core.lab.models import LabOrderStatus

MANUAL_TRANSITIONS: dict[str, str] = {
    LabOrderStatus.ORDERED: LabOrderStatus.SAMPLE_COLLECTED,
    LabOrderStatus.SAMPLE_COLLECTED: LabOrderStatus.IN_PROGRESS,
}

PAYMENT_GATED = {LabOrderStatus.SAMPLE_COLLECTED, LabOrderStatus.IN_PROGRESS}

PAYMENT_REQUIRED_MSG = "Payment required before testing. The lab bill must be fully paid."


def is_bill_settled(bill: Optional[Any]) -> bool:
    if bill is None:
        return False
    return Decimal(bill.amount_paid or 0) >= Decimal(bill.amount or 0)


def check_transition(current: str, target: str, bill: Optional[Any]) -> None:
    """
    Raises InvalidTransitionError for a move the machine doesn't allow,
    PaymentRequiredError when the bill isn't settled. Returns None when allowed.
    """
    if MANUAL_TRANSITIONS.get(current) != target:
        raise InvalidTransitionError(f"Lab order cannot move from '{current}' to '{target}'.")

    if target in PAYMENT_GATED and not is_bill_settled(bill):
        raise PaymentRequiredError(PAYMENT_REQUIRED_MSG)


def can_enter_result(current: str) -> bool:
    return current == LabOrderStatus.IN_PROGRESS
