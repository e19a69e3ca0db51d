# hospital_core/conftest.py
import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from rest_framework.test import APIClient

from hospital_core.common.context import RequestContext
from hospital_core.hospitals.models import Hospital
from hospital_core.iam.models import HospitalMembership
from hospital_core.patients.models import Patient


def make_user(username, hospital, *roles):
    """
    User with the given role groups and an active membership in `hospital`.
    """
    User = get_user_model()
    user = User.objects.create_user(username=username, password="testpass", is_active=True)
    for role in roles:
        group, _ = Group.objects.get_or_create(name=role)
        user.groups.add(group)
    HospitalMembership.objects.create(user=user, hospital=hospital, is_active=True, is_primary=True)
    return user


@pytest.fixture
def hospital(db):
    return Hospital.objects.create(code="general", name="General Hospital", timezone="Africa/Lagos")


@pytest.fixture
def other_hospital(db):
    return Hospital.objects.create(code="other", name="Other Hospital", timezone="Africa/Lagos")


@pytest.fixture
def user(db, hospital):
    return make_user("testuser", hospital, "ADMIN")


@pytest.fixture
def api_client(user):
    c = APIClient()
    c.force_authenticate(user=user)
    return c


@pytest.fixture
def client_for(db, hospital):
    """
    Factory: authenticated APIClient for a fresh user holding `role`.
    """
    def _make(role, username=None):
        u = make_user(username or f"user-{role.lower()}", hospital, role)
        c = APIClient()
        c.force_authenticate(user=u)
        return c

    return _make


@pytest.fixture
def ctx(hospital, user):
    return RequestContext(actor_user_id=user.id, hospital_id=hospital.id)


@pytest.fixture
def patient(db, hospital):
    return Patient.objects.create(
        hospital_id=hospital.id,
        first_name="Ada",
        last_name="Obi",
        date_of_birth="1990-05-01",
        gender=Patient.Gender.FEMALE,
    )


@pytest.fixture
def make_patient(db, hospital):
    counter = {"n": 0}

    def _make(first_name=None, last_name="Test"):
        counter["n"] += 1
        return Patient.objects.create(
            hospital_id=hospital.id,
            first_name=first_name or f"Patient{counter['n']}",
            last_name=last_name,
            date_of_birth="1985-01-01",
            gender=Patient.Gender.MALE,
        )

    return _make
