# hospital_core/lab/tests/test_lab_orders_api.py
from decimal import Decimal

import pytest
from django.db import transaction
from rest_framework.exceptions import ValidationError

from hospital_core.billing.models import Bill
from hospital_core.billing.services import BillingService
from hospital_core.lab.models import LabOrder, LabSample, LabTestType
from hospital_core.lab.services import LabService
from hospital_core.tests.helpers import scoped

pytestmark = pytest.mark.django_db

ORDERS = "/api/v1/lab/orders/"


@pytest.fixture
def test_type(hospital):
    return LabTestType.objects.create(
        hospital_id=hospital.id,
        name="Full Blood Count",
        code="fbc",
        sample_type="blood",
        price=Decimal("5000.00"),
    )


@pytest.fixture
def order_id(api_client, hospital, patient, test_type):
    r = api_client.post(
        ORDERS,
        {"patient_id": str(patient.id), "test_type_id": str(test_type.id)},
        format="json",
        **scoped(hospital),
    )
    assert r.status_code == 201, r.data
    return r.data["id"]


def _advance(api_client, hospital, order_id, status, **extra):
    return api_client.post(
        f"{ORDERS}{order_id}/advance/",
        {"status": status, **extra},
        format="json",
        **scoped(hospital),
    )


def _pay_in_full(ctx, order_id):
    bill = Bill.objects.get(lab_order_id=order_id)
    BillingService.record_payment(ctx=ctx, bill_id=bill.id, amount=bill.amount, method="cash")


def test_placing_order_raises_unpaid_bill(api_client, hospital, order_id):
    bill = Bill.objects.get(lab_order_id=order_id)
    assert bill.amount == Decimal("5000.00")
    assert bill.amount_paid == Decimal("0.00")
    assert not bill.is_paid

    r = api_client.get(f"{ORDERS}{order_id}/", **scoped(hospital))
    assert r.data["status"] == "ordered"
    assert r.data["bill_id"] == str(bill.id)
    assert r.data["is_paid"] is False
    assert r.data["next_status"] == "sample_collected"


def test_unpaid_order_cannot_collect_sample(api_client, hospital, order_id):
    r = _advance(api_client, hospital, order_id, "sample_collected")

    assert r.status_code == 402
    assert r.data["error"]["code"] == "payment_required"
    assert "Payment required" in r.data["error"]["message"]

    order = LabOrder.objects.get(id=order_id)
    assert order.status == "ordered"
    assert not LabSample.objects.filter(order_id=order_id).exists()


def test_partial_payment_still_blocks(api_client, hospital, order_id, ctx):
    bill = Bill.objects.get(lab_order_id=order_id)
    BillingService.record_payment(ctx=ctx, bill_id=bill.id, amount=Decimal("4000.00"), method="cash")

    r = _advance(api_client, hospital, order_id, "sample_collected")
    assert r.status_code == 402


def test_paid_order_runs_full_workflow(api_client, hospital, order_id, ctx):
    _pay_in_full(ctx, order_id)

    r = _advance(api_client, hospital, order_id, "sample_collected", sample_condition="good")
    assert r.status_code == 200, r.data
    assert r.data["status"] == "sample_collected"
    assert r.data["sample"]["sample_condition"] == "good"

    r = _advance(api_client, hospital, order_id, "in_progress")
    assert r.status_code == 200
    assert r.data["status"] == "in_progress"

    r = api_client.post(
        f"{ORDERS}{order_id}/results/",
        {"result_value": "Hb 13.5 g/dL", "reference_range": "12-16", "is_abnormal": False},
        format="json",
        **scoped(hospital),
    )
    assert r.status_code == 201, r.data
    assert r.data["result_value"] == "Hb 13.5 g/dL"

    assert LabOrder.objects.get(id=order_id).status == "completed"


def test_skipping_a_step_is_invalid_transition(api_client, hospital, order_id, ctx):
    _pay_in_full(ctx, order_id)

    r = _advance(api_client, hospital, order_id, "in_progress")
    assert r.status_code == 409
    assert r.data["error"]["code"] == "invalid_transition"


def test_result_before_in_progress_is_rejected(api_client, hospital, order_id):
    r = api_client.post(
        f"{ORDERS}{order_id}/results/",
        {"result_value": "x"},
        format="json",
        **scoped(hospital),
    )
    assert r.status_code == 409
    assert LabOrder.objects.get(id=order_id).status == "ordered"


def test_completed_is_not_a_manual_target(api_client, hospital, order_id):
    r = _advance(api_client, hospital, order_id, "completed")
    assert r.status_code == 400


def test_free_test_is_paid_at_creation(api_client, hospital, patient):
    free = LabTestType.objects.create(hospital_id=hospital.id, name="Screening", code="screen", price=Decimal("0"))
    r = api_client.post(
        ORDERS,
        {"patient_id": str(patient.id), "test_type_id": str(free.id)},
        format="json",
        **scoped(hospital),
    )
    assert r.data["is_paid"] is True

    r = _advance(api_client, hospital, r.data["id"], "sample_collected")
    assert r.status_code == 200


def test_doctor_orders_lab_processes(client_for, hospital, patient, test_type, ctx):
    doctor = client_for("DOCTOR")
    lab = client_for("LAB")

    r = doctor.post(
        ORDERS,
        {"patient_id": str(patient.id), "test_type_id": str(test_type.id)},
        format="json",
        **scoped(hospital),
    )
    assert r.status_code == 201
    oid = r.data["id"]

    assert _advance(doctor, hospital, oid, "sample_collected").status_code == 403

    _pay_in_full(ctx, oid)
    assert _advance(lab, hospital, oid, "sample_collected").status_code == 200


def test_list_filters_by_status(api_client, hospital, order_id, ctx, patient, test_type):
    _pay_in_full(ctx, order_id)
    _advance(api_client, hospital, order_id, "sample_collected")
    api_client.post(
        ORDERS,
        {"patient_id": str(patient.id), "test_type_id": str(test_type.id)},
        format="json",
        **scoped(hospital),
    )

    r = api_client.get(f"{ORDERS}?status=ordered", **scoped(hospital))
    assert r.status_code == 200
    assert r.data["count"] == 1


def test_test_type_codes_are_unique_per_hospital(api_client, hospital, test_type):
    r = api_client.post(
        "/api/v1/lab/test-types/",
        {"name": "Another FBC", "code": "fbc", "price": "100.00"},
        format="json",
        **scoped(hospital),
    )
    assert r.status_code == 400
    assert "code" in r.data["error"]["details"]

    r = api_client.get("/api/v1/lab/test-types/", **scoped(hospital))
    assert [t["code"] for t in r.data] == ["fbc"]


def test_duplicate_test_type_leaves_outer_transaction_usable(ctx, test_type):
    with transaction.atomic():
        with pytest.raises(ValidationError):
            LabService.create_test_type(ctx=ctx, name="Another FBC", code="fbc", price=Decimal("100.00"))

        created = LabService.create_test_type(ctx=ctx, name="Malaria RDT", code="mp-rdt", price=Decimal("1500.00"))

    assert LabTestType.objects.filter(hospital_id=ctx.hospital_id).count() == 2
    assert created.code == "mp-rdt"
