# hospital_core/pharmacy/services.py
from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from uuid import UUID

from django.db import IntegrityError, transaction
from rest_framework.exceptions import ValidationError

from hospital_core.audit.services import AuditService
from hospital_core.billing.models import ItemType
from hospital_core.billing.services import BillingService
from hospital_core.common.api.exceptions import InsufficientStockError
from hospital_core.common.context import RequestContext
from hospital_core.common.events import MEDICATION_STOCK_CHANGED, publish_on_commit
from hospital_core.hospitals.selectors import hospital_today
from hospital_core.patients.selectors import get_patient
from hospital_core.pharmacy.models import DispensedBatch, Medication, MedicationDispense, MedicationStock
from hospital_core.pharmacy.stock import InsufficientStock, available_quantity, is_low_stock, pick_batches
from hospital_core.visits.models import Visit

logger = logging.getLogger(__name__)


def _announce(ctx: RequestContext, medication: Medication, action: str) -> None:
    publish_on_commit(
        MEDICATION_STOCK_CHANGED,
        {"hospital_id": str(ctx.hospital_id), "medication_id": str(medication.id), "action": action},
    )


class PharmacyService:
    @staticmethod
    @transaction.atomic
    def add_medication(
        *,
        ctx: RequestContext,
        name: str,
        dosage: str,
        form: str,
        unit_price: Decimal,
        generic_name: str = "",
        category: str = "",
        manufacturer: str = "",
        reorder_point: int = 10,
    ) -> Medication:
        try:
            with transaction.atomic(savepoint=True):
                medication = Medication.objects.create(
                    hospital_id=ctx.hospital_id,
                    name=name,
                    dosage=dosage,
                    form=form,
                    unit_price=unit_price,
                    generic_name=generic_name or "",
                    category=category or "",
                    manufacturer=manufacturer or "",
                    reorder_point=reorder_point,
                )
        except IntegrityError:
            raise ValidationError({"name": "This medication, dosage and form is already in the formulary."})

        AuditService.log(
            ctx=ctx,
            event_code="pharmacy.medication_added",
            entity_type="Medication",
            entity_id=medication.id,
            metadata={"name": name, "dosage": dosage, "form": form},
        )
        return medication

    @staticmethod
    @transaction.atomic
    def receive_stock(
        *,
        ctx: RequestContext,
        medication_id: UUID,
        batch_number: str,
        quantity_received: int,
        expiry_date: date,
        unit_cost: Decimal = Decimal("0.00"),
        supplier: str = "",
    ) -> MedicationStock:
        """
        Add a delivered batch; everything received starts on hand.
        """
        medication = Medication.objects.get(id=medication_id, hospital_id=ctx.hospital_id)

        if quantity_received < 1:
            raise ValidationError({"quantity_received": "Quantity received must be at least 1."})
        if expiry_date < hospital_today(hospital_id=ctx.hospital_id):
            raise ValidationError({"expiry_date": "This batch has already expired."})

        try:
            with transaction.atomic(savepoint=True):
                batch = MedicationStock.objects.create(
                    hospital_id=ctx.hospital_id,
                    medication=medication,
                    batch_number=batch_number,
                    quantity_received=quantity_received,
                    quantity_on_hand=quantity_received,
                    unit_cost=unit_cost,
                    expiry_date=expiry_date,
                    supplier=supplier or "",
                    received_by_id=ctx.actor_user_id,
                )
        except IntegrityError:
            raise ValidationError({"batch_number": "This batch has already been received for this medication."})

        AuditService.log(
            ctx=ctx,
            event_code="pharmacy.stock_received",
            entity_type="MedicationStock",
            entity_id=batch.id,
            metadata={"medication_id": str(medication.id), "batch_number": batch_number, "quantity": quantity_received},
        )
        _announce(ctx, medication, "received")
        return batch

    @staticmethod
    @transaction.atomic
    def dispense(
        *,
        ctx: RequestContext,
        medication_id: UUID,
        patient_id: UUID,
        quantity: int,
        stock_id: UUID | None = None,
        visit_id: UUID | None = None,
        notes: str = "",
    ) -> MedicationDispense:
        """
        Take `quantity` units out of stock (one named batch, or first-expiring
        batches first) and bill them at the medication's unit price.
        Nothing is written when the stock can't cover the quantity.
        """
        medication = Medication.objects.get(id=medication_id, hospital_id=ctx.hospital_id, is_active=True)
        patient = get_patient(ctx=ctx, patient_id=patient_id)

        if visit_id is not None:
            visit = Visit.objects.get(id=visit_id, hospital_id=ctx.hospital_id)
            if visit.patient_id != patient.id:
                raise ValidationError({"visit_id": "Visit belongs to another patient."})

        batches_qs = MedicationStock.objects.select_for_update().filter(
            hospital_id=ctx.hospital_id,
            medication=medication,
        )
        if stock_id is not None:
            # unknown batch is a 404
            MedicationStock.objects.get(id=stock_id, hospital_id=ctx.hospital_id, medication=medication)
            batches_qs = batches_qs.filter(id=stock_id)
        batches = {b.id: b for b in batches_qs.order_by("expiry_date", "batch_number")}

        today = hospital_today(hospital_id=ctx.hospital_id)
        try:
            picks = pick_batches(batches.values(), quantity, on_date=today)
        except InsufficientStock as exc:
            logger.info(
                "Dispense of %s x%s refused in hospital %s: %s usable",
                medication.id,
                quantity,
                ctx.hospital_id,
                exc.available,
            )
            raise InsufficientStockError(
                f"Insufficient stock for {medication.name} {medication.dosage}: "
                f"{exc.available} available, {exc.requested} requested."
            )

        dispense = MedicationDispense.objects.create(
            hospital_id=ctx.hospital_id,
            medication=medication,
            patient=patient,
            visit_id=visit_id,
            quantity=quantity,
            notes=notes or "",
            dispensed_by_id=ctx.actor_user_id,
        )
        for pick in picks:
            batch = batches[pick.batch_id]
            batch.quantity_on_hand -= pick.quantity
            batch.save(update_fields=["quantity_on_hand", "updated_at"])
            DispensedBatch.objects.create(
                hospital_id=ctx.hospital_id,
                dispense=dispense,
                stock=batch,
                quantity=pick.quantity,
            )

        dispense.bill = BillingService.create_bill(
            ctx=ctx,
            patient_id=patient.id,
            visit_id=visit_id,
            description=f"Medication: {medication.name} {medication.dosage}",
            items=[
                {
                    "item_type": ItemType.MEDICATION,
                    "description": f"{medication.name} {medication.dosage} ({medication.form})",
                    "quantity": quantity,
                    "unit_price": medication.unit_price,
                }
            ],
        )
        dispense.save(update_fields=["bill", "updated_at"])

        remaining = available_quantity(
            MedicationStock.objects.filter(hospital_id=ctx.hospital_id, medication=medication), today
        )
        if is_low_stock(remaining, medication.reorder_point):
            logger.warning(
                "Medication %s (%s) low on stock in hospital %s: %s left, reorder point %s",
                medication.name,
                medication.id,
                ctx.hospital_id,
                remaining,
                medication.reorder_point,
            )

        AuditService.log(
            ctx=ctx,
            event_code="pharmacy.dispensed",
            entity_type="MedicationDispense",
            entity_id=dispense.id,
            metadata={
                "medication_id": str(medication.id),
                "patient_id": str(patient.id),
                "quantity": quantity,
                "batches": [{"stock_id": str(p.batch_id), "quantity": p.quantity} for p in picks],
            },
        )
        _announce(ctx, medication, "dispensed")
        return dispense
