# hospital_core/appointments/api/views.py
from __future__ import annotations

from uuid import UUID

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from hospital_core.appointments.api.serializers import (
    AppointmentCreateSerializer,
    AppointmentSerializer,
    AppointmentStatusSerializer,
    AutoAllocateSerializer,
    RecurringAppointmentSerializer,
    RescheduleSerializer,
    SlotAvailabilitySerializer,
)
from hospital_core.appointments.models import Appointment
from hospital_core.appointments.results import NoAvailableSlot, RecurringConflict, SlotConflict
from hospital_core.appointments.selectors import fetch_appointments, get_appointment, slot_availability
from hospital_core.appointments.services import AppointmentService
from hospital_core.appointments.slots import format_slot
from hospital_core.common.api.exceptions import error_response
from hospital_core.common.api.params import date_param, uuid_param
from hospital_core.common.api.pagination import paginate
from hospital_core.common.api.routing import UUID_PATTERN
from hospital_core.common.context import require_context
from hospital_core.common.permissions import AppointmentPermission
from hospital_core.hospitals.selectors import hospital_today


def slot_conflict_response(request, conflict: SlotConflict) -> Response:
    """
    409 telling the client to drop its chosen slot (selected_slot is null)
    and pick again from the fresh booked set.
    """
    return error_response(
        request,
        status_code=status.HTTP_409_CONFLICT,
        code="slot_conflict",
        message="This time slot has just been booked. Please select another time.",
        details={
            "scheduled_date": conflict.scheduled_date.isoformat(),
            "start_time": format_slot(conflict.start_time),
            "booked_slots": [format_slot(t) for t in conflict.booked_slots],
            "selected_slot": None,
        },
    )


def booking_response(request, result, *, ok_status: int = status.HTTP_201_CREATED) -> Response:
    if isinstance(result, SlotConflict):
        return slot_conflict_response(request, result)
    return Response(AppointmentSerializer(result.appointment).data, status=ok_status)


class AppointmentViewSet(viewsets.ViewSet):
    permission_classes = [AppointmentPermission]
    lookup_value_regex = UUID_PATTERN

    serializer_class = AppointmentSerializer
    queryset = Appointment.objects.none()

    @extend_schema(
        tags=["Appointments"],
        parameters=[
            OpenApiParameter("date", OpenApiTypes.DATE, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("status", OpenApiTypes.STR, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("patient", OpenApiTypes.UUID, OpenApiParameter.QUERY, required=False),
        ],
        responses={200: AppointmentSerializer(many=True)},
    )
    def list(self, request):
        ctx = require_context(request)

        statuses = [s for s in request.query_params.get("status", "").split(",") if s]

        qs = fetch_appointments(
            ctx=ctx,
            on_date=date_param(request),
            statuses=statuses or None,
            patient_id=uuid_param(request, "patient"),
        )
        return paginate(request, qs, AppointmentSerializer)

    @extend_schema(tags=["Appointments"], responses={200: AppointmentSerializer})
    def retrieve(self, request, pk=None):
        ctx = require_context(request)
        appt = get_appointment(ctx=ctx, appointment_id=UUID(str(pk)))
        return Response(AppointmentSerializer(appt).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Appointments"], request=AppointmentCreateSerializer, responses={201: AppointmentSerializer})
    def create(self, request):
        ctx = require_context(request)

        ser = AppointmentCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        result = AppointmentService.book(ctx=ctx, **ser.validated_data)
        return booking_response(request, result)

    @extend_schema(tags=["Appointments"], request=RecurringAppointmentSerializer)
    @action(detail=False, methods=["post"], url_path="recurring")
    def recurring(self, request):
        ctx = require_context(request)

        ser = RecurringAppointmentSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        result = AppointmentService.book_recurring(ctx=ctx, **ser.validated_data)

        if isinstance(result, RecurringConflict):
            return error_response(
                request,
                status_code=status.HTTP_409_CONFLICT,
                code="slot_conflict",
                message="Some dates in this series are already booked at that time. Nothing was scheduled.",
                details={"conflicting_dates": [d.isoformat() for d in result.conflicting_dates]},
            )

        return Response(
            {
                "recurrence_group": str(result.recurrence_group),
                "count": len(result.appointments),
                "appointments": AppointmentSerializer(result.appointments, many=True).data,
            },
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(tags=["Appointments"], request=AutoAllocateSerializer, responses={201: AppointmentSerializer})
    @action(detail=False, methods=["post"], url_path="auto-allocate")
    def auto_allocate(self, request):
        ctx = require_context(request)

        ser = AutoAllocateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        result = AppointmentService.auto_allocate(
            ctx=ctx,
            patient_id=ser.validated_data["patient_id"],
            on_date=ser.validated_data.get("date"),
        )

        if isinstance(result, NoAvailableSlot):
            return error_response(
                request,
                status_code=status.HTTP_409_CONFLICT,
                code="no_available_slot",
                message="No appointment slots are left on this date.",
                details={"scheduled_date": result.scheduled_date.isoformat()},
            )
        return Response(AppointmentSerializer(result.appointment).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        tags=["Appointments"],
        parameters=[OpenApiParameter("date", OpenApiTypes.DATE, OpenApiParameter.QUERY, required=False)],
        responses={200: SlotAvailabilitySerializer(many=True)},
    )
    @action(detail=False, methods=["get"], url_path="slots")
    def slots(self, request):
        ctx = require_context(request)
        on_date = date_param(request) or hospital_today(hospital_id=ctx.hospital_id)

        return Response(
            {"date": on_date.isoformat(), "slots": slot_availability(ctx=ctx, on_date=on_date)},
            status=status.HTTP_200_OK,
        )

    @extend_schema(tags=["Appointments"], request=AppointmentStatusSerializer, responses={200: AppointmentSerializer})
    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request, pk=None):
        ctx = require_context(request)

        ser = AppointmentStatusSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        appt = AppointmentService.update_status(
            ctx=ctx,
            appointment_id=UUID(str(pk)),
            status=ser.validated_data["status"],
        )
        return Response(AppointmentSerializer(appt).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Appointments"], request=RescheduleSerializer, responses={200: AppointmentSerializer})
    @action(detail=True, methods=["post"], url_path="reschedule")
    def reschedule(self, request, pk=None):
        ctx = require_context(request)

        ser = RescheduleSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        result = AppointmentService.reschedule(ctx=ctx, appointment_id=UUID(str(pk)), **ser.validated_data)
        return booking_response(request, result, ok_status=status.HTTP_200_OK)
