# hospital_core/patients/tests/test_patient_retrieve_update.py
import pytest

from hospital_core.tests.helpers import scoped

pytestmark = pytest.mark.django_db


def test_patient_retrieve(api_client, hospital, patient):
    r = api_client.get(f"/api/v1/patients/{patient.id}/", **scoped(hospital))
    assert r.status_code == 200
    assert r.data["id"] == str(patient.id)
    assert r.data["full_name"] == "Ada Obi"


def test_patient_patch_contact_fields(api_client, hospital, patient):
    r = api_client.patch(
        f"/api/v1/patients/{patient.id}/",
        {"phone": "08011112222", "allergies": "Penicillin"},
        format="json",
        **scoped(hospital),
    )
    assert r.status_code == 200, r.data
    assert r.data["phone"] == "08011112222"
    assert r.data["allergies"] == "Penicillin"


@pytest.mark.parametrize(
    "field, value",
    [
        ("first_name", "Adaeze"),
        ("last_name", "Okafor"),
        ("date_of_birth", "1991-01-01"),
        ("gender", "other"),
    ],
)
def test_identity_fields_cannot_change(api_client, hospital, patient, field, value):
    r = api_client.patch(f"/api/v1/patients/{patient.id}/", {field: value}, format="json", **scoped(hospital))

    assert r.status_code == 400
    assert field in r.data["error"]["details"]

    patient.refresh_from_db()
    assert patient.full_name == "Ada Obi"


def test_patch_with_no_fields_rejected(api_client, hospital, patient):
    r = api_client.patch(f"/api/v1/patients/{patient.id}/", {}, format="json", **scoped(hospital))
    assert r.status_code == 400


def test_patient_from_other_hospital_is_404(api_client, other_hospital, patient):
    r = api_client.get(f"/api/v1/patients/{patient.id}/", **scoped(other_hospital))
    assert r.status_code == 404
