# hospital_core/api/urls.py
from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter

from hospital_core.appointments.api.views import AppointmentViewSet
from hospital_core.audit.api.views import AuditEventViewSet
from hospital_core.billing.api.views import BillViewSet
from hospital_core.iam.api.auth import LoginView, LogoutView, RefreshView
from hospital_core.iam.api.me import MeView
from hospital_core.lab.api.views import LabOrderViewSet, LabTestTypeViewSet
from hospital_core.patients.api.views import PatientViewSet
from hospital_core.pharmacy.api.views import MedicationDispenseViewSet, MedicationViewSet
from hospital_core.triage.api.views import TriageViewSet
from hospital_core.visits.api.views import VisitViewSet
from hospital_core.vitals.api.views import VitalSignsViewSet

router = DefaultRouter()

router.register(r"patients", PatientViewSet, basename="patients")
router.register(r"vitals", VitalSignsViewSet, basename="vitals")
router.register(r"triage", TriageViewSet, basename="triage")
router.register(r"appointments", AppointmentViewSet, basename="appointments")
router.register(r"visits", VisitViewSet, basename="visits")
router.register(r"lab/test-types", LabTestTypeViewSet, basename="lab-test-types")
router.register(r"lab/orders", LabOrderViewSet, basename="lab-orders")
router.register(r"pharmacy/medications", MedicationViewSet, basename="pharmacy-medications")
router.register(r"pharmacy/dispenses", MedicationDispenseViewSet, basename="pharmacy-dispenses")
router.register(r"billing/bills", BillViewSet, basename="billing-bills")
router.register(r"audit/events", AuditEventViewSet, basename="audit-events")

urlpatterns = [
    path("auth/login/", LoginView.as_view(), name="login"),
    path("auth/refresh/", RefreshView.as_view(), name="refresh"),
    path("auth/logout/", LogoutView.as_view(), name="logout"),
    path("me/", MeView.as_view(), name="me"),

    # Router URLs last (so explicit paths win if ever overlapping)
    *router.urls,
]
