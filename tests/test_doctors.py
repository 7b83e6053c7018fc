import pytest


def doctor_payload(**overrides):
    payload = {
        "name": "Grace Obi",
        "email": "grace@clinic.com",
        "password": "Doctor123!",
        "specialization": "Dermatology",
        "license_number": "MD-DERM-3003",
        "experience": 7,
        "education": [{"degree": "MD", "institution": "University of Lagos", "year": 2015}],
        "qualifications": ["Board Certified Dermatologist"],
        "consultation_fee": "90.00",
        "department": "Dermatology",
        "availability": {"monday": {"start": "09:00", "end": "17:00", "available": True}},
    }
    payload.update(overrides)
    return payload


async def test_admin_creates_doctor_who_can_log_in(client, admin):
    response = await client.post("/doctors", json=doctor_payload(), headers=admin.headers)

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Doctor created successfully"
    assert body["doctor"]["specialization"] == "Dermatology"
    assert body["doctor"]["consultation_fee"] == 90.0
    assert body["doctor"]["education"][0]["institution"] == "University of Lagos"

    login = await client.post("/auth/login", json={"email": "grace@clinic.com", "password": "Doctor123!"})
    assert login.status_code == 200
    assert login.json()["user"]["role"] == "doctor"


async def test_only_admin_creates_doctors(client, doctor, patient):
    assert (await client.post("/doctors", json=doctor_payload(), headers=doctor.headers)).status_code == 403
    assert (await client.post("/doctors", json=doctor_payload(), headers=patient.headers)).status_code == 403


async def test_duplicate_license_is_refused(client, admin, doctor):
    response = await client.post(
        "/doctors", json=doctor_payload(license_number=doctor.profile.license_number), headers=admin.headers
    )

    assert response.status_code == 400


async def test_directory_requires_authentication(client, doctor):
    assert (await client.get("/doctors")).status_code == 401


async def test_list_get_and_search(client, patient, doctor, other_doctor):
    listing = (await client.get("/doctors", headers=patient.headers)).json()
    assert listing["total"] == 2

    single = await client.get(f"/doctors/{doctor.profile_id}", headers=patient.headers)
    assert single.json()["name"] == "Sarah Johnson"

    found = (await client.get("/doctors/search/specialization/pedia", headers=patient.headers)).json()
    assert [d["id"] for d in found["doctors"]] == [other_doctor.profile_id]


async def test_unknown_doctor_is_404(client, patient):
    response = await client.get("/doctors/00000000-0000-0000-0000-000000000000", headers=patient.headers)

    assert response.status_code == 404


async def test_availability_defaults_to_empty_week(client, patient, doctor):
    response = await client.get(f"/doctors/{doctor.profile_id}/availability", headers=patient.headers)

    assert response.status_code == 200
    assert all(day is None for day in response.json().values())


async def test_doctor_updates_own_profile_only(client, doctor, other_doctor):
    payload = {
        "bio": "Heart health first.",
        "availability": {"friday": {"start": "08:00", "end": "12:00", "available": True}},
    }

    response = await client.put(f"/doctors/{doctor.profile_id}", json=payload, headers=doctor.headers)
    assert response.status_code == 200
    assert response.json()["doctor"]["bio"] == "Heart health first."

    availability = (await client.get(f"/doctors/{doctor.profile_id}/availability", headers=doctor.headers)).json()
    assert availability["friday"] == {"start": "08:00", "end": "12:00", "available": True}

    response = await client.put(f"/doctors/{other_doctor.profile_id}", json=payload, headers=doctor.headers)
    assert response.status_code == 403


@pytest.mark.parametrize("term", ["_", "%25"])
async def test_specialization_wildcards_match_literally(client, patient, doctor, other_doctor, term):
    found = (await client.get(f"/doctors/search/specialization/{term}", headers=patient.headers)).json()

    assert found["total"] == 0
