"""
Tests for authentication dependencies and the authorization scope.
"""

import pytest
from unittest.mock import patch
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from auth.dependencies import (
    AuthContext, Scope, get_token_payload, get_current_employee, require_boss,
)
from core.exceptions import ForbiddenError, NotFoundError
from services.jwt_service import TokenPayload
from tests.conftest import create_employee


class TestAuthContext:
    """Test AuthContext scope derivation."""

    def test_boss_scope_is_company(self):
        context = AuthContext(employee_id=5, company_id=2, role="boss")

        assert context.is_boss() is True
        assert context.scope == Scope("company_id", 2)

    def test_staff_scope_is_own_employee(self):
        context = AuthContext(employee_id=5, company_id=2, role="staff")

        assert context.is_boss() is False
        assert context.scope == Scope("employee_id", 5)

    def test_scope_unpacks_to_field_and_value(self):
        field, value = AuthContext(employee_id=7, company_id=3, role="staff").scope

        assert (field, value) == ("employee_id", 7)


class TestGetTokenPayload:
    """Test get_token_payload dependency."""

    def test_no_credentials(self):
        assert get_token_payload(None) is None

    @patch('auth.dependencies.jwt_service')
    def test_valid_token(self, mock_jwt_service):
        mock_jwt_service.verify_token.return_value = TokenPayload(sub="user-1")
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="abc")

        payload = get_token_payload(credentials)

        assert payload.sub == "user-1"
        mock_jwt_service.verify_token.assert_called_once_with("abc")

    @patch('auth.dependencies.jwt_service')
    def test_invalid_token(self, mock_jwt_service):
        mock_jwt_service.verify_token.return_value = None
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="bad")

        assert get_token_payload(credentials) is None


class TestGetCurrentEmployee:
    """Test get_current_employee dependency."""

    def test_missing_payload_is_unauthorized(self, db_session):
        with pytest.raises(HTTPException) as exc_info:
            get_current_employee(None, db_session)

        assert exc_info.value.status_code == 401

    def test_unknown_subject_is_not_found(self, db_session, company):
        with pytest.raises(NotFoundError) as exc_info:
            get_current_employee(TokenPayload(sub="nobody"), db_session)

        assert exc_info.value.message == "Empleado no encontrado."

    def test_resolves_employee(self, db_session, company):
        employee = create_employee(db_session, company, "Laura Jefa", role="boss", user_id="user-boss")

        context = get_current_employee(TokenPayload(sub="user-boss"), db_session)

        assert context.employee_id == employee.id
        assert context.company_id == company.id
        assert context.is_boss()


class TestRequireBoss:
    """Test require_boss dependency."""

    def test_boss_allowed(self):
        context = AuthContext(employee_id=1, company_id=1, role="boss")

        assert require_boss(context) is context

    def test_staff_forbidden(self):
        with pytest.raises(ForbiddenError):
            require_boss(AuthContext(employee_id=1, company_id=1, role="staff"))
