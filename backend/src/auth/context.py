"""
Authenticated employee context and the tenant scope derived from it.

Kept free of service imports so the service layer can type against it.
"""

from typing import NamedTuple

from core.constants import ROLE_BOSS


class Scope(NamedTuple):
    """Column/value pair restricting queries to what the caller may see."""
    field: str
    value: int


class AuthContext:
    """Authenticated employee context."""

    def __init__(self, employee_id: int, company_id: int, role: str, name: str = ""):
        self.employee_id = employee_id
        self.company_id = company_id
        self.role = role
        self.name = name

    def is_boss(self) -> bool:
        return self.role == ROLE_BOSS

    @property
    def scope(self) -> Scope:
        if self.is_boss():
            return Scope("company_id", self.company_id)
        return Scope("employee_id", self.employee_id)

    def __repr__(self) -> str:
        return f"AuthContext(employee_id={self.employee_id}, company_id={self.company_id}, role='{self.role}')"
