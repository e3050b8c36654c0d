"""
Integration tests for weekly schedule and vacation management.
"""

import pytest
from datetime import date, time

from models import EmployeeSchedule, EmployeeVacation
from tests.conftest import authenticate_as, create_employee, create_schedule, create_vacation


class TestScheduleEntries:
    """/api/employees/{id}/schedule."""

    def test_boss_adds_entry(self, app_client, db_session, boss, staff):
        authenticate_as(boss)

        response = app_client.post(f"/api/employees/{staff.id}/schedule", json={
            "day_of_week": 2,
            "entry_time": "08:30",
            "exit_time": "16:00",
            "break_start": "12:00",
            "break_end": "12:30",
        })

        assert response.status_code == 200
        data = response.json()
        assert data["day_of_week"] == 2
        assert data["entry_time"] == "08:30"
        assert data["break_end"] == "12:30"
        stored = db_session.query(EmployeeSchedule).filter(EmployeeSchedule.employee_id == staff.id).one()
        assert stored.company_id == staff.company_id
        assert stored.exit_time == time(16, 0)

    def test_entry_without_break(self, app_client, boss, staff):
        authenticate_as(boss)

        response = app_client.post(f"/api/employees/{staff.id}/schedule", json={
            "day_of_week": 6, "entry_time": "10:00", "exit_time": "14:00",
        })

        assert response.status_code == 200
        assert response.json()["break_start"] is None

    @pytest.mark.parametrize("day", [0, 8])
    def test_day_out_of_range_rejected(self, app_client, boss, staff, day):
        authenticate_as(boss)

        response = app_client.post(f"/api/employees/{staff.id}/schedule", json={
            "day_of_week": day, "entry_time": "09:00", "exit_time": "17:00",
        })

        assert response.status_code == 400
        assert response.json()["message"] == "El dia debe estar entre 1 y 7."

    def test_malformed_time_rejected(self, app_client, boss, staff):
        authenticate_as(boss)

        response = app_client.post(f"/api/employees/{staff.id}/schedule", json={
            "day_of_week": 1, "entry_time": "nine", "exit_time": "17:00",
        })

        assert response.status_code == 400

    def test_staff_cannot_edit(self, app_client, db_session, staff):
        authenticate_as(staff)

        response = app_client.post(f"/api/employees/{staff.id}/schedule", json={
            "day_of_week": 1, "entry_time": "09:00", "exit_time": "17:00",
        })

        assert response.status_code == 403
        assert db_session.query(EmployeeSchedule).count() == 0

    def test_staff_reads_own_schedule(self, app_client, db_session, staff):
        create_schedule(db_session, staff, 3)
        create_schedule(db_session, staff, 1)
        authenticate_as(staff)

        response = app_client.get(f"/api/employees/{staff.id}/schedule")

        assert response.status_code == 200
        assert [entry["day_of_week"] for entry in response.json()["schedule"]] == [1, 3]

    def test_staff_cannot_read_colleague_schedule(self, app_client, staff, other_staff):
        authenticate_as(staff)

        response = app_client.get(f"/api/employees/{other_staff.id}/schedule")

        assert response.status_code == 403

    def test_boss_cannot_manage_other_company_employee(self, app_client, db_session, boss, other_company):
        outsider = create_employee(db_session, other_company, "Externo", user_id="user-ext")
        authenticate_as(boss)

        response = app_client.get(f"/api/employees/{outsider.id}/schedule")

        assert response.status_code == 404

    def test_partial_update_keeps_other_fields(self, app_client, db_session, boss, staff):
        entry = create_schedule(db_session, staff, 1)
        authenticate_as(boss)

        response = app_client.patch(f"/api/employees/{staff.id}/schedule/{entry.id}", json={"exit_time": "18:00"})

        assert response.status_code == 200
        data = response.json()
        assert data["exit_time"] == "18:00"
        assert data["entry_time"] == "09:00"
        assert data["break_start"] == "12:00"

    def test_update_clears_break(self, app_client, db_session, boss, staff):
        entry = create_schedule(db_session, staff, 1)
        authenticate_as(boss)

        response = app_client.patch(
            f"/api/employees/{staff.id}/schedule/{entry.id}",
            json={"break_start": None, "break_end": ""}
        )

        assert response.status_code == 200
        assert response.json()["break_start"] is None
        assert response.json()["break_end"] is None

    def test_update_entry_of_other_employee_not_found(self, app_client, db_session, boss, staff, other_staff):
        entry = create_schedule(db_session, other_staff, 1)
        authenticate_as(boss)

        response = app_client.patch(f"/api/employees/{staff.id}/schedule/{entry.id}", json={"exit_time": "18:00"})

        assert response.status_code == 404

    def test_delete_entry(self, app_client, db_session, boss, staff):
        entry = create_schedule(db_session, staff, 1)
        entry_id = entry.id
        authenticate_as(boss)

        response = app_client.delete(f"/api/employees/{staff.id}/schedule/{entry_id}")

        assert response.status_code == 200
        db_session.expire_all()
        assert db_session.query(EmployeeSchedule).filter(EmployeeSchedule.id == entry_id).first() is None


class TestVacations:
    """/api/employees/{id}/vacations."""

    def test_boss_adds_range(self, app_client, db_session, boss, staff):
        authenticate_as(boss)

        response = app_client.post(f"/api/employees/{staff.id}/vacations", json={
            "start_date": "2030-07-01", "end_date": "2030-07-15",
        })

        assert response.status_code == 200
        assert response.json()["start_date"] == "2030-07-01"
        stored = db_session.query(EmployeeVacation).one()
        assert stored.end_date == date(2030, 7, 15)

    def test_single_day_without_end(self, app_client, boss, staff):
        authenticate_as(boss)

        response = app_client.post(f"/api/employees/{staff.id}/vacations", json={"start_date": "2030-07-01"})

        assert response.status_code == 200
        assert response.json()["end_date"] is None

    def test_inverted_range_rejected(self, app_client, boss, staff):
        authenticate_as(boss)

        response = app_client.post(f"/api/employees/{staff.id}/vacations", json={
            "start_date": "2030-07-15", "end_date": "2030-07-01",
        })

        assert response.status_code == 400
        assert response.json()["message"] == "La fecha de inicio no puede ser mayor a la de fin."

    def test_missing_start_rejected(self, app_client, boss, staff):
        authenticate_as(boss)

        response = app_client.post(f"/api/employees/{staff.id}/vacations", json={"end_date": "2030-07-01"})

        assert response.status_code == 400

    def test_staff_reads_own_vacations_in_order(self, app_client, db_session, staff):
        create_vacation(db_session, staff, date(2030, 12, 20), date(2030, 12, 31))
        create_vacation(db_session, staff, date(2030, 4, 1))
        authenticate_as(staff)

        response = app_client.get(f"/api/employees/{staff.id}/vacations")

        assert response.status_code == 200
        assert [v["start_date"] for v in response.json()["vacations"]] == ["2030-04-01", "2030-12-20"]

    def test_staff_cannot_add_vacation(self, app_client, staff):
        authenticate_as(staff)

        response = app_client.post(f"/api/employees/{staff.id}/vacations", json={"start_date": "2030-07-01"})

        assert response.status_code == 403

    def test_update_and_delete(self, app_client, db_session, boss, staff):
        vacation = create_vacation(db_session, staff, date(2030, 7, 1), date(2030, 7, 5))
        vacation_id = vacation.id
        authenticate_as(boss)

        updated = app_client.patch(f"/api/employees/{staff.id}/vacations/{vacation_id}", json={
            "start_date": "2030-08-01", "end_date": "2030-08-03",
        })
        deleted = app_client.delete(f"/api/employees/{staff.id}/vacations/{vacation_id}")

        assert updated.status_code == 200
        assert updated.json()["end_date"] == "2030-08-03"
        assert deleted.status_code == 200
        db_session.expire_all()
        assert db_session.query(EmployeeVacation).count() == 0

    def test_unknown_vacation_not_found(self, app_client, boss, staff):
        authenticate_as(boss)

        response = app_client.delete(f"/api/employees/{staff.id}/vacations/9999")

        assert response.status_code == 404
