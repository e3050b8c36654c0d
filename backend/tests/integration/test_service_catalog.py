"""
Integration tests for the service catalog.
"""

import pytest

from models import Service, ServiceEmployee
from tests.conftest import authenticate_as, create_employee, create_service


def service_payload(employee, **overrides):
    payload = {"name": "Tinte", "duration": 90, "price": 350, "employee_id": employee.id}
    payload.update(overrides)
    return payload


class TestCreateService:
    """POST /api/services."""

    def test_boss_creates_service_assigned_to_employee(self, app_client, db_session, boss, staff):
        authenticate_as(boss)

        response = app_client.post("/api/services", json=service_payload(staff, duration="45", price="120.50"))

        assert response.status_code == 200
        data = response.json()["service"]
        assert data["duration_minutes"] == 45
        assert data["price"] == 120.5
        assert [e["id"] for e in data["employees"]] == [staff.id]
        stored = db_session.query(Service).filter(Service.id == data["id"]).one()
        assert stored.company_id == boss.company_id
        assert db_session.query(ServiceEmployee).filter(ServiceEmployee.service_id == stored.id).count() == 1

    def test_staff_cannot_create(self, app_client, db_session, staff):
        authenticate_as(staff)

        response = app_client.post("/api/services", json=service_payload(staff))

        assert response.status_code == 403
        assert response.json()["message"] == "Solo el jefe puede crear o editar servicios."
        assert db_session.query(Service).count() == 0

    @pytest.mark.parametrize("duration", [0, -15, "abc", None, 30.5])
    def test_invalid_duration_rejected(self, app_client, boss, staff, duration):
        authenticate_as(boss)

        response = app_client.post("/api/services", json=service_payload(staff, duration=duration))

        assert response.status_code == 400
        assert response.json()["message"] == "La duracion debe ser un numero mayor que 0."

    @pytest.mark.parametrize("price", [-1, "gratis", None])
    def test_invalid_price_rejected(self, app_client, boss, staff, price):
        authenticate_as(boss)

        response = app_client.post("/api/services", json=service_payload(staff, price=price))

        assert response.status_code == 400
        assert response.json()["message"] == "El precio debe ser un numero valido."

    def test_free_service_allowed(self, app_client, boss, staff):
        authenticate_as(boss)

        response = app_client.post("/api/services", json=service_payload(staff, price=0))

        assert response.status_code == 200
        assert response.json()["service"]["price"] == 0.0

    def test_employee_from_other_company_rejected(self, app_client, db_session, boss, other_company):
        outsider = create_employee(db_session, other_company, "Externo Staff")
        authenticate_as(boss)

        response = app_client.post("/api/services", json=service_payload(outsider))

        assert response.status_code == 400
        assert response.json()["message"] == "Selecciona el empleado al que se asigna el servicio."
        assert db_session.query(Service).count() == 0

    def test_new_service_is_bookable(self, app_client, db_session, boss, staff, customer, staff_schedule, work_day):
        authenticate_as(boss)
        created = app_client.post("/api/services", json=service_payload(staff, duration=30)).json()["service"]

        response = app_client.post("/api/appointments", json={
            "employee_id": staff.id,
            "client_id": customer.id,
            "service_id": created["id"],
            "date": work_day.isoformat(),
            "time": "10:00",
            "timezone_offset": 0,
        })

        assert response.status_code == 200


class TestUpdateService:
    """PATCH /api/services/{id}."""

    def test_update_replaces_fields_and_assignment(self, app_client, db_session, boss, staff, other_staff):
        authenticate_as(boss)
        created = app_client.post("/api/services", json=service_payload(staff)).json()["service"]

        response = app_client.patch(
            f"/api/services/{created['id']}",
            json=service_payload(other_staff, name="Tinte completo", duration=120, price=400)
        )

        assert response.status_code == 200
        data = response.json()["service"]
        assert data["name"] == "Tinte completo"
        assert data["duration_minutes"] == 120
        assert [e["id"] for e in data["employees"]] == [other_staff.id]
        links = db_session.query(ServiceEmployee).filter(ServiceEmployee.service_id == created["id"]).all()
        assert [link.employee_id for link in links] == [other_staff.id]

    def test_update_keeping_same_employee(self, app_client, db_session, boss, staff):
        authenticate_as(boss)
        created = app_client.post("/api/services", json=service_payload(staff)).json()["service"]

        response = app_client.patch(f"/api/services/{created['id']}", json=service_payload(staff, price=500))

        assert response.status_code == 200
        assert response.json()["service"]["price"] == 500.0
        assert db_session.query(ServiceEmployee).count() == 1

    def test_update_other_company_service_not_found(self, app_client, db_session, boss, staff, other_company):
        foreign = create_service(db_session, other_company, "Ajeno")
        authenticate_as(boss)

        response = app_client.patch(f"/api/services/{foreign.id}", json=service_payload(staff))

        assert response.status_code == 404
        assert response.json()["message"] == "Servicio no encontrado."

    def test_staff_cannot_update(self, app_client, staff, service):
        authenticate_as(staff)

        response = app_client.patch(f"/api/services/{service.id}", json=service_payload(staff))

        assert response.status_code == 403


class TestListServices:
    """GET /api/services."""

    def test_staff_lists_company_services_by_name(self, app_client, db_session, staff, company, other_company):
        create_service(db_session, company, "Peinado")
        create_service(db_session, company, "Manicure")
        create_service(db_session, other_company, "Ajeno")
        authenticate_as(staff)

        response = app_client.get("/api/services")

        assert response.status_code == 200
        assert [s["name"] for s in response.json()["services"]] == ["Manicure", "Peinado"]
        assert response.json()["services"][0]["employees"] == []
