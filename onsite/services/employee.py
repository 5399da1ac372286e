# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date
from typing import Protocol, runtime_checkable

from pydantic import BaseModel


class EmployeeInfo(BaseModel):
    """Org membership record from the OnSite directory."""

    id: uuid.UUID
    org_id: uuid.UUID
    name: str
    email: str
    role: str = "employee"  # "employee" or "admin"
    hire_date: date | None = None  # pro-rates the first leave year


@runtime_checkable
class EmployeeService(Protocol):
    """Interface for the employee directory."""

    async def get_employee(self, org_id: uuid.UUID, user_id: uuid.UUID) -> EmployeeInfo | None:
        """Fetch a member of the org. Returns None if the user is not a member.

        Raises EmployeeDirectoryError when the directory cannot be reached.
        """
        ...

    async def list_employees(self, org_id: uuid.UUID) -> list[EmployeeInfo]:
        """List all members of an org."""
        ...


class InMemoryEmployeeService:
    """In-memory stub implementation for development."""

    def __init__(self) -> None:
        self._employees: dict[tuple[uuid.UUID, uuid.UUID], EmployeeInfo] = {}

    def seed(self, employee: EmployeeInfo) -> None:
        """Seed an employee for testing."""
        self._employees[(employee.org_id, employee.id)] = employee

    async def get_employee(self, org_id: uuid.UUID, user_id: uuid.UUID) -> EmployeeInfo | None:
        """Fetch a member of the org. Returns None if the user is not a member."""
        return self._employees.get((org_id, user_id))

    async def list_employees(self, org_id: uuid.UUID) -> list[EmployeeInfo]:
        """List all members of an org."""
        return [e for e in self._employees.values() if e.org_id == org_id]


_employee_service: EmployeeService = InMemoryEmployeeService()


def get_employee_service() -> EmployeeService:
    """Return the configured employee directory."""
    return _employee_service


def set_employee_service(service: EmployeeService) -> None:
    """Override the service (for testing or production wiring)."""
    global _employee_service
    _employee_service = service
