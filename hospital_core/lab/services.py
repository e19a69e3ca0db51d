# hospital_core/lab/services.py
from __future__ import annotations

import logging
from decimal import Decimal
from uuid import UUID

from django.db import IntegrityError, transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from hospital_core.audit.services import AuditService
from hospital_core.billing.models import ItemType
from hospital_core.billing.selectors import fetch_bill_for_lab_order
from hospital_core.billing.services import BillingService
from hospital_core.common.api.exceptions import InvalidTransitionError, PaymentRequiredError
from hospital_core.common.context import RequestContext
from hospital_core.common.events import LAB_ORDERS_CHANGED, publish_on_commit
from hospital_core.lab.models import LabOrder, LabOrderPriority, LabOrderStatus, LabResult, LabSample, LabTestType
from hospital_core.lab.workflow import can_enter_result, check_transition
from hospital_core.patients.selectors import get_patient

logger = logging.getLogger(__name__)


def _announce(ctx: RequestContext, order: LabOrder, action: str) -> None:
    publish_on_commit(
        LAB_ORDERS_CHANGED,
        {"hospital_id": str(ctx.hospital_id), "lab_order_id": str(order.id), "status": order.status, "action": action},
    )


class LabService:
    @staticmethod
    @transaction.atomic
    def create_test_type(
        *,
        ctx: RequestContext,
        name: str,
        code: str,
        price: Decimal,
        sample_type: str = "",
    ) -> LabTestType:
        try:
            with transaction.atomic(savepoint=True):
                return LabTestType.objects.create(
                    hospital_id=ctx.hospital_id,
                    name=name,
                    code=code,
                    price=price,
                    sample_type=sample_type or "",
                )
        except IntegrityError:
            raise ValidationError({"code": "A test type with this code already exists."})

    @staticmethod
    @transaction.atomic
    def place_order(
        *,
        ctx: RequestContext,
        patient_id: UUID,
        test_type_id: UUID,
        visit_id: UUID | None = None,
        priority: str = LabOrderPriority.ROUTINE,
        clinical_notes: str = "",
    ) -> LabOrder:
        """
        Create the order in 'ordered' and raise its bill at the test price.
        """
        patient = get_patient(ctx=ctx, patient_id=patient_id)
        test_type = LabTestType.objects.get(id=test_type_id, hospital_id=ctx.hospital_id, is_active=True)

        order = LabOrder.objects.create(
            hospital_id=ctx.hospital_id,
            patient=patient,
            test_type=test_type,
            visit_id=visit_id,
            doctor_id=ctx.actor_user_id,
            priority=priority,
            clinical_notes=clinical_notes or "",
        )

        BillingService.create_bill(
            ctx=ctx,
            patient_id=patient.id,
            visit_id=visit_id,
            lab_order_id=order.id,
            description=f"Lab test: {test_type.name}",
            items=[
                {
                    "item_type": ItemType.LAB,
                    "description": test_type.name,
                    "quantity": 1,
                    "unit_price": test_type.price,
                }
            ],
        )

        AuditService.log(
            ctx=ctx,
            event_code="lab.order_placed",
            entity_type="LabOrder",
            entity_id=order.id,
            metadata={"test_type": test_type.code, "priority": priority},
        )
        _announce(ctx, order, "placed")
        return order

    @staticmethod
    @transaction.atomic
    def advance(
        *,
        ctx: RequestContext,
        order_id: UUID,
        target: str,
        sample_condition: str = "",
    ) -> LabOrder:
        """
        Manual step (ordered -> sample_collected -> in_progress).
        The gate runs before any write; a blocked step changes nothing.
        """
        order = LabOrder.objects.select_for_update().get(id=order_id, hospital_id=ctx.hospital_id)
        bill = fetch_bill_for_lab_order(ctx=ctx, lab_order_id=order.id)

        try:
            check_transition(order.status, target, bill)
        except PaymentRequiredError:
            logger.info("Lab order %s blocked at %s: bill not settled", order.id, order.status)
            raise

        previous = order.status
        order.status = target
        order.save(update_fields=["status", "updated_at"])

        if target == LabOrderStatus.SAMPLE_COLLECTED:
            LabSample.objects.create(
                hospital_id=ctx.hospital_id,
                order=order,
                collected_by_id=ctx.actor_user_id,
                sample_condition=sample_condition or "",
            )

        AuditService.log(
            ctx=ctx,
            event_code=f"lab.{target}",
            entity_type="LabOrder",
            entity_id=order.id,
            metadata={"from": previous, "to": target},
        )
        _announce(ctx, order, target)
        return order

    @staticmethod
    @transaction.atomic
    def enter_result(
        *,
        ctx: RequestContext,
        order_id: UUID,
        result_value: str,
        reference_range: str = "",
        is_abnormal: bool = False,
        is_critical: bool = False,
        comments: str = "",
    ) -> LabResult:
        """
        Record the result and complete the order (in_progress only).
        """
        order = LabOrder.objects.select_for_update().get(id=order_id, hospital_id=ctx.hospital_id)

        if not can_enter_result(order.status):
            raise InvalidTransitionError("Results can only be entered for orders that are in progress.")

        result = LabResult.objects.create(
            hospital_id=ctx.hospital_id,
            order=order,
            result_value=result_value,
            reference_range=reference_range or "",
            is_abnormal=is_abnormal,
            is_critical=is_critical,
            comments=comments or "",
            tested_by_id=ctx.actor_user_id,
            tested_at=timezone.now(),
        )

        order.status = LabOrderStatus.COMPLETED
        order.save(update_fields=["status", "updated_at"])

        AuditService.log(
            ctx=ctx,
            event_code="lab.completed",
            entity_type="LabOrder",
            entity_id=order.id,
            metadata={"is_abnormal": is_abnormal, "is_critical": is_critical},
        )
        _announce(ctx, order, "completed")
        return result
