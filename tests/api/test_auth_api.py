import pytest

from models.doctor_profile import DoctorProfile
from models.user import User, UserRole

DOCTOR_SIGNUP = {
    "role": "doctor",
    "name": "James Wilson",
    "email": "wilson@example.com",
    "password": "secret123",
    "phone": "555-0111",
    "specialization": "Oncology",
    "experience": 12,
    "bio": "Head of oncology",
}


class TestSignup:
    @pytest.mark.asyncio
    async def test_patient_signup_has_no_doctor_profile(self, client) -> None:
        response = await client.post(
            "/api/auth/signup",
            json={"role": "patient", "name": "Pat", "email": "pat@example.com", "password": "secret123"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["token"]
        assert body["data"]["user"]["role"] == "patient"
        assert "specialization" not in body["data"]["user"]
        user = await User.get(email="pat@example.com")
        assert user.password != "secret123"
        assert not await DoctorProfile.exists(user_id=user.id)

    @pytest.mark.asyncio
    async def test_doctor_signup_creates_profile_with_registration_id(self, client) -> None:
        response = await client.post("/api/auth/signup", json=DOCTOR_SIGNUP)

        assert response.status_code == 201
        user_data = response.json()["data"]["user"]
        assert user_data["specialization"] == "Oncology"
        assert user_data["registrationId"].startswith("MD-")
        assert len(user_data["registrationId"]) == 9
        profile = await DoctorProfile.get(user_id=user_data["id"])
        assert profile.experience == 12

    @pytest.mark.asyncio
    async def test_doctor_signup_requires_doctor_fields(self, client) -> None:
        payload = {k: v for k, v in DOCTOR_SIGNUP.items() if k not in ("bio", "specialization")}

        response = await client.post("/api/auth/signup", json=payload)

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        fields = {error["field"] for error in body["errors"]}
        assert {"bio", "specialization"} <= fields
        assert all(set(error) == {"field", "message"} for error in body["errors"])
        assert not await User.exists(email=DOCTOR_SIGNUP["email"])

    @pytest.mark.asyncio
    async def test_admin_cannot_self_register(self, client) -> None:
        response = await client.post(
            "/api/auth/signup",
            json={"role": "admin", "name": "Eve", "email": "eve@example.com", "password": "secret123"},
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_duplicate_email(self, client, patient: User) -> None:
        response = await client.post(
            "/api/auth/signup",
            json={"role": "patient", "name": "Again", "email": patient.email, "password": "secret123"},
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "email"

    @pytest.mark.asyncio
    async def test_concurrent_duplicate_email(self, client, patient: User, monkeypatch) -> None:
        real_exists = User.exists
        calls = []

        async def stale_first_check(*args, **kwargs) -> bool:
            # the other signup commits between the check and the insert
            calls.append(kwargs)
            if len(calls) == 1:
                return False
            return await real_exists(*args, **kwargs)

        monkeypatch.setattr(User, "exists", stale_first_check)

        response = await client.post(
            "/api/auth/signup",
            json={"role": "patient", "name": "Again", "email": patient.email, "password": "secret123"},
        )

        assert response.status_code == 400
        assert response.json()["errors"] == [{"field": "email", "message": "User already exists"}]
        assert await User.filter(email=patient.email).count() == 1

    @pytest.mark.asyncio
    async def test_duplicate_registration_id(self, client, doctor: User) -> None:
        profile = await DoctorProfile.get(user_id=doctor.id)

        response = await client.post(
            "/api/auth/signup", json={**DOCTOR_SIGNUP, "registrationId": profile.registration_id}
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "registrationId"
        assert not await User.exists(email=DOCTOR_SIGNUP["email"])


class TestLogin:
    @pytest.mark.asyncio
    async def test_valid_credentials(self, client, doctor: User) -> None:
        response = await client.post("/api/auth/login", json={"email": doctor.email, "password": "secret123"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["role"] == "doctor"
        assert data["user"]["specialization"] == "Diagnostics"

        me = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['token']}"})
        assert me.json()["data"]["id"] == doctor.id

    @pytest.mark.asyncio
    @pytest.mark.parametrize("email,password", [("alice@example.com", "wrong-pass"), ("nobody@example.com", "secret123")])
    async def test_invalid_credentials(self, client, patient: User, email: str, password: str) -> None:
        response = await client.post("/api/auth/login", json={"email": email, "password": password})

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"


class TestIdentity:
    @pytest.mark.asyncio
    async def test_me_without_token(self, client) -> None:
        response = await client.get("/api/auth/me")

        assert response.status_code == 401
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_me_with_garbage_token(self, client, db) -> None:
        response = await client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401


class TestDoctorDirectory:
    @pytest.mark.asyncio
    async def test_list_is_public_and_sorted(self, client, doctor: User, other_doctor: User, patient: User) -> None:
        response = await client.get("/api/auth/doctors")

        body = response.json()
        assert body["count"] == 2
        assert [d["name"] for d in body["data"]] == ["Gregory House", "Lisa Cuddy"]
        assert body["data"][1]["specialization"] == "Endocrinology"

    @pytest.mark.asyncio
    async def test_get_doctor_by_id(self, client, doctor: User, patient: User) -> None:
        assert (await client.get(f"/api/auth/doctors/{doctor.id}")).status_code == 200
        assert (await client.get(f"/api/auth/doctors/{patient.id}")).status_code == 404

    @pytest.mark.asyncio
    async def test_only_admin_removes_doctors(self, client, headers_for, doctor: User, patient: User, admin: User) -> None:
        forbidden = await client.delete(f"/api/auth/doctors/{doctor.id}", headers=headers_for(patient))
        assert forbidden.status_code == 403

        response = await client.delete(f"/api/auth/doctors/{doctor.id}", headers=headers_for(admin))

        assert response.status_code == 200
        assert not await User.exists(id=doctor.id, role=UserRole.DOCTOR)
        assert not await DoctorProfile.exists(user_id=doctor.id)
