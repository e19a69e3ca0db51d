# hospital_core/billing/tests/test_bill_payments.py
from decimal import Decimal

import pytest
from rest_framework.exceptions import ValidationError

from hospital_core.billing.models import Payment
from hospital_core.billing.services import BillingService
from hospital_core.common.api.exceptions import ConflictError
from hospital_core.tests.helpers import scoped

pytestmark = pytest.mark.django_db

BILLS = "/api/v1/billing/bills/"


@pytest.fixture
def bill(ctx, patient):
    return BillingService.create_bill(
        ctx=ctx,
        patient_id=patient.id,
        description="Pharmacy",
        items=[
            {"item_type": "medication", "description": "Paracetamol", "quantity": 2, "unit_price": "500.00"},
            {"description": "Dressing", "unit_price": Decimal("1500")},
        ],
    )


def test_bill_total_is_sum_of_lines(bill):
    assert bill.amount == Decimal("2500.00")
    assert bill.items.count() == 2
    assert not bill.is_paid
    assert bill.balance_due == Decimal("2500.00")


def test_empty_bill_rejected(ctx, patient):
    with pytest.raises(ValidationError):
        BillingService.create_bill(ctx=ctx, patient_id=patient.id, items=[])


def test_part_payments_settle_when_covered(ctx, bill):
    BillingService.record_payment(ctx=ctx, bill_id=bill.id, amount=Decimal("1000"), method="cash")
    bill.refresh_from_db()
    assert not bill.is_paid
    assert bill.paid_at is None
    assert bill.balance_due == Decimal("1500.00")

    BillingService.record_payment(ctx=ctx, bill_id=bill.id, amount=Decimal("1500"), method="card", reference="POS-1")
    bill.refresh_from_db()
    assert bill.is_paid
    assert bill.paid_at is not None
    assert bill.amount_paid == Decimal("2500.00")
    assert bill.payment_method == "card"
    assert Payment.objects.filter(bill=bill).count() == 2


def test_overpayment_settles_the_bill(ctx, bill):
    BillingService.record_payment(ctx=ctx, bill_id=bill.id, amount=Decimal("3000"), method="cash")
    bill.refresh_from_db()
    assert bill.is_paid
    assert bill.balance_due == Decimal("0.00")


def test_non_positive_payment_rejected(ctx, bill):
    with pytest.raises(ValidationError):
        BillingService.record_payment(ctx=ctx, bill_id=bill.id, amount=Decimal("0"), method="cash")


def test_paying_a_settled_bill_is_a_conflict(ctx, bill):
    BillingService.record_payment(ctx=ctx, bill_id=bill.id, amount=Decimal("2500"), method="cash")
    with pytest.raises(ConflictError):
        BillingService.record_payment(ctx=ctx, bill_id=bill.id, amount=Decimal("1"), method="cash")


def test_discount_reduces_amount(ctx, bill):
    BillingService.apply_discount(ctx=ctx, bill_id=bill.id, discount_amount=Decimal("500"), reason="Staff")
    bill.refresh_from_db()
    assert bill.amount == Decimal("2000.00")
    assert bill.gross_amount == Decimal("2500.00")
    assert bill.discount_reason == "Staff"

    # replaces, does not stack
    BillingService.apply_discount(ctx=ctx, bill_id=bill.id, discount_amount=Decimal("100"))
    bill.refresh_from_db()
    assert bill.amount == Decimal("2400.00")


def test_full_discount_settles_the_bill(ctx, bill):
    BillingService.apply_discount(ctx=ctx, bill_id=bill.id, discount_amount=Decimal("2500"), reason="Waiver")
    bill.refresh_from_db()
    assert bill.is_paid


def test_discount_out_of_range_rejected(ctx, bill):
    with pytest.raises(ValidationError):
        BillingService.apply_discount(ctx=ctx, bill_id=bill.id, discount_amount=Decimal("2600"))
    with pytest.raises(ValidationError):
        BillingService.apply_discount(ctx=ctx, bill_id=bill.id, discount_amount=Decimal("-1"))


def test_payments_api(api_client, hospital, bill):
    r = api_client.post(
        f"{BILLS}{bill.id}/payments/",
        {"amount": "2500.00", "method": "transfer", "reference": "TRX-9"},
        format="json",
        **scoped(hospital),
    )
    assert r.status_code == 201, r.data
    assert r.data["amount"] == "2500.00"

    r = api_client.get(f"{BILLS}{bill.id}/payments/", **scoped(hospital))
    assert r.status_code == 200
    assert [p["reference"] for p in r.data] == ["TRX-9"]

    r = api_client.get(f"{BILLS}{bill.id}/", **scoped(hospital))
    assert r.data["is_paid"] is True
    assert r.data["balance_due"] == "0.00"

    r = api_client.post(
        f"{BILLS}{bill.id}/payments/",
        {"amount": "1.00"},
        format="json",
        **scoped(hospital),
    )
    assert r.status_code == 409
    assert r.data["error"]["code"] == "conflict"


def test_create_and_filter_bills(api_client, hospital, patient, bill):
    r = api_client.post(
        BILLS,
        {"patient_id": str(patient.id), "items": [{"description": "Syringe", "unit_price": "200.00"}]},
        format="json",
        **scoped(hospital),
    )
    assert r.status_code == 201, r.data
    assert r.data["amount"] == "200.00"

    api_client.post(f"{BILLS}{bill.id}/payments/", {"amount": "2500.00"}, format="json", **scoped(hospital))

    r = api_client.get(f"{BILLS}?is_paid=false", **scoped(hospital))
    assert r.data["count"] == 1
    assert r.data["results"][0]["amount"] == "200.00"

    r = api_client.get(f"{BILLS}?is_paid=maybe", **scoped(hospital))
    assert r.status_code == 400


def test_discount_api_needs_finance(client_for, hospital, bill):
    reception = client_for("RECEPTION")
    r = reception.post(f"{BILLS}{bill.id}/discount/", {"discount_amount": "100.00"}, format="json", **scoped(hospital))
    assert r.status_code == 403

    finance = client_for("FINANCE")
    r = finance.post(f"{BILLS}{bill.id}/discount/", {"discount_amount": "100.00"}, format="json", **scoped(hospital))
    assert r.status_code == 200
    assert r.data["amount"] == "2400.00"
