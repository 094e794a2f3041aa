from unittest.mock import AsyncMock

from app.tutorado.models.codec import encode_attendance

NEW_ATTENDANCE = {"studentId": "ALU002", "date": "2024-06-03", "dimension": "Profissional", "subject": "Estágio"}


def test_list_attendances_with_filters(client, login_as):
    login_as("TUT001", "1234")
    response = client.get("/api/v1/attendances", params={"student_name": "joao", "date_start": "2024-05-01"})

    assert response.status_code == 200
    assert [a["id"] for a in response.json()] == ["ATD1700000000000"]
    assert response.json()[0]["tutorName"] == "Carlos Tutor Silva"


def test_create_attendance_as_tutor(client, service, login_as):
    login_as("TUT002")
    response = client.post("/api/v1/attendances", json=NEW_ATTENDANCE)

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["id"].startswith("ATD")
    assert data["tutorId"] == "TUT002"
    assert data["studentName"] == "Beatriz Lima"
    assert service.cache.attendances[0].id == data["id"]


def test_tutor_fields_from_client_are_ignored(client, login_as):
    login_as("TUT002")
    response = client.post("/api/v1/attendances", json=dict(NEW_ATTENDANCE, tutorId="TUT001", tutorName="Outro"))
    assert response.json()["tutorId"] == "TUT002"


def test_invalid_attendance_is_rejected(client, login_as):
    login_as("TUT002")
    assert client.post("/api/v1/attendances", json=dict(NEW_ATTENDANCE, subject="")).status_code == 422
    assert client.post("/api/v1/attendances", json=dict(NEW_ATTENDANCE, dimension="Espiritual")).status_code == 422


def test_other_tutor_cannot_edit_or_delete(client, login_as):
    login_as("TUT002")
    edit = client.post("/api/v1/attendances", json=dict(NEW_ATTENDANCE, id="ATD1700000000000", studentId="ALU001"))
    assert edit.status_code == 403
    assert client.delete("/api/v1/attendances/ATD1700000000000").status_code == 403


def test_admin_edit_keeps_attribution(client, login_as):
    login_as("ADM001")
    response = client.post(
        "/api/v1/attendances",
        json={"id": "ATD1700000000000", "studentId": "ALU001", "date": "2024-05-12", "subject": "Frações II"},
    )
    assert response.status_code == 200
    assert response.json()["tutorId"] == "TUT001"
    assert response.json()["subject"] == "Frações II"


def test_owner_deletes_attendance(client, service, login_as):
    login_as("TUT001", "1234")
    assert client.delete("/api/v1/attendances/ATD1700000000000").status_code == 204
    assert service.cache.attendances == []


def test_delete_failure_maps_to_502(client, gateway, login_as):
    login_as("ADM001")
    gateway.attendances.delete_by_id = AsyncMock(return_value=False)
    assert client.delete("/api/v1/attendances/ATD1700000000000").status_code == 502


def test_export_txt(client, login_as):
    login_as("ADM001")
    response = client.get("/api/v1/attendances/export.txt")

    assert response.status_code == 200
    assert "relatorio_atendimentos_" in response.headers["content-disposition"]
    assert response.text.startswith("DATA: 2024-05-10\nALUNO: João Pedro (ALU001)\n")


def test_uncached_attendance_edit_checks_the_stored_owner(client, service, gateway, login_as, sample_attendance):
    service.cache.load("attendances", [])
    gateway.attendances.get_by_id = AsyncMock(return_value=encode_attendance(sample_attendance))
    login_as("TUT002")

    edit = client.post("/api/v1/attendances", json=dict(NEW_ATTENDANCE, id=sample_attendance.id, studentId="ALU001"))
    assert edit.status_code == 403
    assert client.delete(f"/api/v1/attendances/{sample_attendance.id}").status_code == 403
    gateway.attendances.upsert.assert_not_awaited()
