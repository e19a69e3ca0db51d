# hospital_core/billing/services.py
from __future__ import annotations

from decimal import Decimal
from typing import Iterable
from uuid import UUID

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from hospital_core.audit.services import AuditService
from hospital_core.billing.models import Bill, BillItem, ItemType, Payment, PaymentMethod
from hospital_core.common.api.exceptions import ConflictError
from hospital_core.common.context import RequestContext
from hospital_core.common.events import BILLS_CHANGED, publish_on_commit

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def _money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT)


def _announce(ctx: RequestContext, bill: Bill, action: str) -> None:
    publish_on_commit(
        BILLS_CHANGED,
        {
            "hospital_id": str(ctx.hospital_id),
            "bill_id": str(bill.id),
            "lab_order_id": str(bill.lab_order_id) if bill.lab_order_id else None,
            "action": action,
        },
    )


def _settle_if_covered(bill: Bill) -> None:
    if bill.amount_paid >= bill.amount and not bill.is_paid:
        bill.is_paid = True
        bill.paid_at = timezone.now()


class BillingService:
    @staticmethod
    @transaction.atomic
    def create_bill(
        *,
        ctx: RequestContext,
        patient_id: UUID,
        items: Iterable[dict],
        description: str = "",
        visit_id: UUID | None = None,
        lab_order_id: UUID | None = None,
    ) -> Bill:
        """
        items: dicts with description, unit_price and optional quantity/item_type.
        """
        lines = list(items)
        if not lines:
            raise ValidationError({"items": "A bill needs at least one item."})

        bill = Bill.objects.create(
            hospital_id=ctx.hospital_id,
            patient_id=patient_id,
            visit_id=visit_id,
            lab_order_id=lab_order_id,
            description=description or "",
            created_by_id=ctx.actor_user_id,
        )

        total = ZERO
        for line in lines:
            quantity = int(line.get("quantity", 1))
            unit_price = _money(line["unit_price"])
            if quantity < 1:
                raise ValidationError({"items": "Quantity must be at least 1."})
            if unit_price < ZERO:
                raise ValidationError({"items": "Unit price cannot be negative."})

            line_total = (unit_price * quantity).quantize(CENT)
            BillItem.objects.create(
                hospital_id=ctx.hospital_id,
                bill=bill,
                item_type=line.get("item_type", ItemType.SERVICE),
                description=line["description"],
                quantity=quantity,
                unit_price=unit_price,
                line_total=line_total,
            )
            total += line_total

        bill.amount = total
        _settle_if_covered(bill)
        bill.save(update_fields=["amount", "is_paid", "paid_at", "updated_at"])

        AuditService.log(
            ctx=ctx,
            event_code="bill.created",
            entity_type="Bill",
            entity_id=bill.id,
            metadata={"amount": str(bill.amount)},
        )
        _announce(ctx, bill, "created")
        return bill

    @staticmethod
    @transaction.atomic
    def record_payment(
        *,
        ctx: RequestContext,
        bill_id: UUID,
        amount: Decimal,
        method: str = PaymentMethod.CASH,
        reference: str = "",
    ) -> Payment:
        bill = Bill.objects.select_for_update().get(id=bill_id, hospital_id=ctx.hospital_id)

        if amount is None or amount <= 0:
            raise ValidationError({"amount": "Payment amount must be > 0."})
        if bill.is_paid:
            raise ConflictError("This bill is already fully paid.")

        pay = Payment.objects.create(
            hospital_id=ctx.hospital_id,
            bill=bill,
            amount=_money(amount),
            method=method,
            reference=reference or "",
            received_by_id=ctx.actor_user_id,
        )

        bill.amount_paid = (bill.amount_paid or ZERO) + pay.amount
        bill.payment_method = method
        _settle_if_covered(bill)
        bill.save(update_fields=["amount_paid", "payment_method", "is_paid", "paid_at", "updated_at"])

        AuditService.log(
            ctx=ctx,
            event_code="bill.payment_recorded",
            entity_type="Bill",
            entity_id=bill.id,
            metadata={"amount": str(pay.amount), "method": method, "is_paid": bill.is_paid},
        )
        _announce(ctx, bill, "paid" if bill.is_paid else "part_paid")
        return pay

    @staticmethod
    @transaction.atomic
    def apply_discount(
        *,
        ctx: RequestContext,
        bill_id: UUID,
        discount_amount: Decimal,
        reason: str = "",
    ) -> Bill:
        """
        Replace the bill's discount; amount becomes gross minus discount.
        """
        bill = Bill.objects.select_for_update().get(id=bill_id, hospital_id=ctx.hospital_id)

        if bill.is_paid:
            raise ConflictError("Discounts cannot be applied to a paid bill.")

        discount = _money(discount_amount)
        gross = bill.gross_amount
        if discount < ZERO or discount > gross:
            raise ValidationError({"discount_amount": f"Discount must be between 0 and {gross}."})

        bill.discount_amount = discount
        bill.discount_reason = reason or ""
        bill.amount = gross - discount
        _settle_if_covered(bill)
        bill.save(update_fields=["discount_amount", "discount_reason", "amount", "is_paid", "paid_at", "updated_at"])

        AuditService.log(
            ctx=ctx,
            event_code="bill.discounted",
            entity_type="Bill",
            entity_id=bill.id,
            metadata={"discount_amount": str(discount), "reason": bill.discount_reason},
        )
        _announce(ctx, bill, "discounted")
        return bill
