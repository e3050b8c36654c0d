"""
End-to-end authentication through a real bearer token.

The other integration tests override the employee dependency; these go
through JWT verification and the employee lookup.
"""

from services.jwt_service import jwt_service, TokenPayload
from tests.conftest import booking_payload, create_employee


def bearer(user_id: str) -> dict:
    token = jwt_service.create_access_token(TokenPayload(sub=user_id))
    return {"Authorization": f"Bearer {token}"}


class TestBearerAuthentication:
    """Requests authenticated with an access token."""

    def test_boss_token_lists_company_confirmations(self, app_client, boss):
        response = app_client.get("/api/confirmations", headers=bearer("user-boss"))

        assert response.status_code == 200
        assert response.json()["confirmations"] == []

    def test_staff_token_books_for_self(self, app_client, staff, customer, service, staff_schedule, work_day):
        response = app_client.post(
            "/api/appointments",
            json=booking_payload(staff, customer, service, work_day),
            headers=bearer("user-staff")
        )

        assert response.status_code == 200

    def test_staff_token_cannot_write_schedules(self, app_client, staff):
        response = app_client.post(
            f"/api/employees/{staff.id}/schedule",
            json={"day_of_week": 1, "entry_time": "09:00", "exit_time": "17:00"},
            headers=bearer("user-staff")
        )

        assert response.status_code == 403
        assert response.json()["message"] == "Solo el jefe puede realizar esta accion."

    def test_missing_token_unauthorized(self, app_client, staff):
        response = app_client.get("/api/waitlist")

        assert response.status_code == 401
        assert response.json()["status"] == "unauthorized"

    def test_token_for_unknown_user_not_found(self, app_client, company):
        response = app_client.get("/api/waitlist", headers=bearer("user-nobody"))

        assert response.status_code == 404
        assert response.json()["message"] == "Empleado no encontrado."

    def test_token_of_other_company_boss_sees_nothing(self, app_client, db_session, other_company, staff):
        create_employee(db_session, other_company, "Jefe Norte", role="boss", user_id="user-norte")

        response = app_client.get(f"/api/employees/{staff.id}/schedule", headers=bearer("user-norte"))

        assert response.status_code == 404

    def test_public_confirm_needs_no_token(self, app_client):
        response = app_client.get("/api/confirm", params={"token": "missing"})

        assert response.status_code == 404
        assert response.json()["status"] == "not_found"
