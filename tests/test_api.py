from sixkul.core.config import settings

PASSWORD = "rahasia123"


async def test_login_sets_cookie_and_me_reads_it(client, seed):
    response = await client.post("/api/auth/login", json={"email": "siswa1@sixkul.sch.id", "password": PASSWORD})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Login berhasil"
    assert body["data"]["user"]["role"] == "SISWA"
    assert body["data"]["user"]["profile"]["nis"] == "20240001"
    assert settings.auth_cookie_name in response.cookies

    me = await client.get("/api/auth/me")
    assert me.status_code == 200
    assert me.json()["data"]["email"] == "siswa1@sixkul.sch.id"


async def test_bad_login_is_unauthorized(client, seed):
    response = await client.post("/api/auth/login", json={"email": "siswa1@sixkul.sch.id", "password": "salah"})

    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Email atau password salah"}


async def test_me_requires_valid_token(client, seed):
    missing = await client.get("/api/auth/me")
    assert missing.status_code == 401
    assert missing.json()["message"] == "Autentikasi diperlukan. Silakan login."

    garbage = await client.get("/api/auth/me", headers={"Authorization": "Bearer bukan.token.valid"})
    assert garbage.status_code == 401
    assert garbage.json()["success"] is False


async def test_role_gates(client, seed, auth_headers):
    student = auth_headers(seed.student_users[0])
    response = await client.get("/api/admin/users", headers=student)
    assert response.status_code == 403
    assert response.json() == {"success": False, "message": "Akses ditolak."}

    schedules_url = f"/api/pembina/extracurriculars/{seed.ekskul.id}/schedules"
    assert (await client.get(schedules_url, headers=auth_headers(seed.other_pembina_user))).status_code == 403
    owner = await client.get(schedules_url, headers=auth_headers(seed.pembina_user))
    assert owner.status_code == 200
    assert owner.json()["data"][0]["dayOfWeek"] == "MONDAY"
    assert (await client.get(schedules_url, headers=auth_headers(seed.admin))).status_code == 200


async def test_request_validation_errors_use_envelope(client, seed):
    response = await client.post("/api/auth/login", json={"email": "bukan-email"})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert {error["field"] for error in body["errors"]} == {"email", "password"}


async def test_health_endpoint(client):
    response = await client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["components"] == {"database": "healthy", "cache": "disabled"}


async def test_admin_creates_pembina_account(client, seed, auth_headers):
    response = await client.post("/api/admin/users", headers=auth_headers(seed.admin), json={
        "name": "Rina Wati",
        "email": "rina@sixkul.sch.id",
        "role": "PEMBINA",
        "specificId": "199001012015012003",
        "expertise": "Tari",
    })

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["defaultPassword"] == "123456"
    assert data["role"] == "PEMBINA"
    assert data["profile"]["nip"] == "199001012015012003"


async def test_admin_create_user_field_errors(client, seed, auth_headers):
    response = await client.post("/api/admin/users", headers=auth_headers(seed.admin), json={"role": "PEMBINA"})

    assert response.status_code == 400
    assert [e["field"] for e in response.json()["errors"]] == ["name", "email", "specificId"]


async def test_users_are_paginated(client, seed, auth_headers):
    response = await client.get("/api/admin/users?page=1&size=4", headers=auth_headers(seed.admin))

    assert response.status_code == 200
    data = response.json()["data"]
    assert len(data["items"]) == 4
    assert data["meta"] == {
        "page": 1, "size": 4, "total": 6, "totalPages": 2, "hasNext": True, "hasPrevious": False,
    }


async def test_student_enrolls_through_api(client, seed, auth_headers):
    response = await client.post(
        "/api/student/enrollments",
        headers=auth_headers(seed.student_users[2]),
        json={"extracurricularId": str(seed.other_ekskul.id)},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Pendaftaran berhasil dikirim. Menunggu persetujuan pembina."
    assert body["data"]["status"] == "PENDING"

    again = await client.post(
        "/api/student/enrollments",
        headers=auth_headers(seed.student_users[2]),
        json={"extracurricularId": str(seed.other_ekskul.id)},
    )
    assert again.status_code == 409


async def test_report_type_is_validated(client, seed, auth_headers):
    response = await client.get(
        "/api/admin/reports?type=ATTENDANCE&startDate=2025-12-01&endDate=2025-12-31",
        headers=auth_headers(seed.admin),
    )

    assert response.status_code == 400
    assert response.json()["success"] is False

    ok = await client.get(
        "/api/admin/reports?type=extracurricular&startDate=2025-12-01&endDate=2025-12-31",
        headers=auth_headers(seed.admin),
    )
    assert ok.status_code == 200
    assert ok.json()["data"]["type"] == "EXTRACURRICULAR"
    assert {row["name"] for row in ok.json()["data"]["rows"]} == {"Pramuka", "Paduan Suara"}
