"""
Integration tests for the waitlist endpoints and slot reassignment.
"""

import pytest
from datetime import time
from unittest.mock import patch

from core.exceptions import DependencyError, LockedError
from models import Appointment, ConfirmationToken, WaitlistEntry
from services.confirmation_service import ConfirmationService
from services.waitlist_service import WaitlistService
from tests.conftest import (
    auth_context_for, authenticate_as, create_appointment_row, create_client, create_employee,
    create_service, create_token_row, create_waitlist_entry, local_instant,
)


@pytest.fixture
def slot_start(work_day):
    return local_instant(work_day, time(10, 0))


@pytest.fixture
def freed_appointment(db_session, staff, customer, service, slot_start):
    return create_appointment_row(db_session, staff, customer, service, slot_start, status="cancelled")


@pytest.fixture
def waiting_entry(db_session, freed_appointment, second_customer):
    return create_waitlist_entry(db_session, freed_appointment, second_customer)


class TestAssign:
    """POST /api/waitlist/assign."""

    @pytest.mark.parametrize("freed_status", ["cancelled", "rejected"])
    def test_assign_hands_slot_to_waiting_client(
        self, app_client, db_session, staff, customer, second_customer, service, slot_start, freed_status
    ):
        appointment = create_appointment_row(db_session, staff, customer, service, slot_start, status=freed_status)
        entry = create_waitlist_entry(db_session, appointment, second_customer)
        entry_id = entry.id
        authenticate_as(staff)

        response = app_client.post("/api/waitlist/assign", json={"waitlist_id": entry_id})

        assert response.status_code == 200
        data = response.json()
        assert data["appointment_id"] == appointment.id
        assert data["message"] == "Cliente asignado. Confirmacion generada."

        db_session.expire_all()
        reassigned = db_session.get(Appointment, appointment.id)
        assert reassigned.client_id == second_customer.id
        assert reassigned.status == "pending"
        assert db_session.query(WaitlistEntry).filter(WaitlistEntry.id == entry_id).first() is None

        token = db_session.query(ConfirmationToken).filter(ConfirmationToken.token == data["token"]).one()
        assert token.type == "confirm"
        assert token.appointment_id == appointment.id
        assert token.used_at is None

    def test_assign_revokes_previous_client_confirm_token(self, app_client, db_session, staff, freed_appointment, waiting_entry):
        old = create_token_row(db_session, "tok-previous", appointment=freed_appointment)
        authenticate_as(staff)

        app_client.post("/api/waitlist/assign", json={"waitlist_id": waiting_entry.id})

        db_session.refresh(old)
        assert old.used_at is not None

    def test_second_assign_for_same_slot_is_locked(
        self, app_client, db_session, boss, company, freed_appointment, waiting_entry
    ):
        third = create_client(db_session, company, "Elena Cliente", phone="+5215533333333")
        rival_entry = create_waitlist_entry(db_session, freed_appointment, third)
        authenticate_as(boss)

        first = app_client.post("/api/waitlist/assign", json={"waitlist_id": waiting_entry.id})
        second = app_client.post("/api/waitlist/assign", json={"waitlist_id": rival_entry.id})

        assert first.status_code == 200
        assert second.status_code == 409
        assert second.json()["status"] == "locked"
        db_session.expire_all()
        assert db_session.get(Appointment, freed_appointment.id).client_id == waiting_entry.client_id
        assert db_session.get(WaitlistEntry, rival_entry.id) is not None

    @pytest.mark.parametrize("active_status", ["pending", "confirmed", "completed"])
    def test_active_appointment_is_not_reassignable(
        self, app_client, db_session, staff, customer, second_customer, service, slot_start, active_status
    ):
        appointment = create_appointment_row(db_session, staff, customer, service, slot_start, status=active_status)
        entry = create_waitlist_entry(db_session, appointment, second_customer)
        authenticate_as(staff)

        response = app_client.post("/api/waitlist/assign", json={"waitlist_id": entry.id})

        assert response.status_code == 409
        db_session.expire_all()
        unchanged = db_session.get(Appointment, appointment.id)
        assert unchanged.client_id == customer.id
        assert unchanged.status == active_status

    def test_entry_of_other_company_not_found(self, app_client, db_session, other_company, waiting_entry):
        outsider = create_employee(db_session, other_company, "Jefe Norte", role="boss", user_id="user-norte")
        authenticate_as(outsider)

        response = app_client.post("/api/waitlist/assign", json={"waitlist_id": waiting_entry.id})

        assert response.status_code == 404
        assert response.json()["message"] == "Espera no encontrada."

    def test_missing_waitlist_id_invalid(self, app_client, staff):
        authenticate_as(staff)

        response = app_client.post("/api/waitlist/assign", json={})

        assert response.status_code == 400

    def test_token_failure_after_reassign_is_partial(self, app_client, db_session, staff, freed_appointment, waiting_entry):
        authenticate_as(staff)

        with patch.object(ConfirmationService, "issue", side_effect=DependencyError("store down")):
            response = app_client.post("/api/waitlist/assign", json={"waitlist_id": waiting_entry.id})

        assert response.status_code == 500
        assert response.json()["message"] == "La cita se actualizo, pero no pudimos generar la confirmacion."
        db_session.expire_all()
        assert db_session.get(Appointment, freed_appointment.id).status == "pending"

    def test_service_level_race_raises_locked(self, db_session, staff, freed_appointment, waiting_entry):
        """A concurrent writer that re-activated the slot wins."""
        db_session.query(Appointment).filter(Appointment.id == freed_appointment.id).update(
            {Appointment.status: "pending"}, synchronize_session=False
        )
        db_session.commit()

        with pytest.raises(LockedError):
            WaitlistService.assign(db_session, auth_context_for(staff), waiting_entry.id)


class TestWaitlistCrud:
    """Listing, adding, moving and removing entries."""

    def test_create_entry_issues_waitlist_token(self, app_client, db_session, staff, second_customer, freed_appointment, slot_start):
        authenticate_as(staff)

        response = app_client.post(
            "/api/waitlist",
            json={"appointment_id": freed_appointment.id, "client_id": second_customer.id}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["entry"]["appointment_id"] == freed_appointment.id
        assert data["entry"]["client"]["name"] == second_customer.name

        token = db_session.query(ConfirmationToken).filter(ConfirmationToken.token == data["token"]).one()
        assert token.type == "waitlist"
        assert token.waitlist_entry_id == data["entry"]["id"]
        assert token.appointment_id is None
        assert token.expires_at is not None

    def test_create_requires_both_ids(self, app_client, staff, freed_appointment):
        authenticate_as(staff)

        response = app_client.post("/api/waitlist", json={"appointment_id": freed_appointment.id})

        assert response.status_code == 400
        assert response.json()["message"] == "Selecciona una cita y un cliente."

    def test_create_with_foreign_client_not_found(self, app_client, db_session, staff, other_company, freed_appointment):
        foreign = create_client(db_session, other_company, "Cliente Ajeno")
        authenticate_as(staff)

        response = app_client.post(
            "/api/waitlist",
            json={"appointment_id": freed_appointment.id, "client_id": foreign.id}
        )

        assert response.status_code == 404
        assert db_session.query(WaitlistEntry).count() == 0

    def test_list_entries_of_company(self, app_client, db_session, staff, other_company, waiting_entry):
        outsider = create_employee(db_session, other_company, "Otro", user_id="user-otro")
        foreign_client = create_client(db_session, other_company, "Cliente Norte")
        foreign_service = create_service(db_session, other_company, "Masaje")
        foreign_appointment = create_appointment_row(
            db_session, outsider, foreign_client, foreign_service, waiting_entry.appointment.start_time
        )
        create_waitlist_entry(db_session, foreign_appointment, foreign_client)
        authenticate_as(staff)

        response = app_client.get("/api/waitlist")

        assert response.status_code == 200
        assert [item["id"] for item in response.json()["entries"]] == [waiting_entry.id]

    def test_update_entry_moves_to_other_client(self, app_client, db_session, staff, customer, waiting_entry):
        authenticate_as(staff)

        response = app_client.patch("/api/waitlist", json={"id": waiting_entry.id, "client_id": customer.id})

        assert response.status_code == 200
        db_session.expire_all()
        assert db_session.get(WaitlistEntry, waiting_entry.id).client_id == customer.id

    def test_update_without_changes_invalid(self, app_client, staff, waiting_entry):
        authenticate_as(staff)

        response = app_client.patch("/api/waitlist", json={"id": waiting_entry.id})

        assert response.status_code == 400

    def test_delete_entry_revokes_its_tokens(self, app_client, db_session, staff, waiting_entry):
        entry_id = waiting_entry.id
        create_token_row(db_session, "tok-pending-wait", token_type="waitlist", waitlist_entry=waiting_entry)
        authenticate_as(staff)

        response = app_client.delete("/api/waitlist", params={"id": entry_id})

        assert response.status_code == 200
        db_session.expire_all()
        assert db_session.query(WaitlistEntry).filter(WaitlistEntry.id == entry_id).first() is None
        token = db_session.query(ConfirmationToken).filter(ConfirmationToken.token == "tok-pending-wait").one()
        assert token.used_at is not None
        assert token.waitlist_entry_id is None

    def test_delete_unknown_entry_not_found(self, app_client, staff):
        authenticate_as(staff)

        response = app_client.delete("/api/waitlist", params={"id": 9999})

        assert response.status_code == 404
