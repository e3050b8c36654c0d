"""
Query helper utilities for database operations.

Scoped queries take the ``Scope`` produced once per request by the
authorization context, so the boss/staff distinction is never re-derived
inside individual handlers.
"""

from typing import Any, TypeVar

from sqlalchemy.orm import Query

T = TypeVar('T')


def apply_scope(query: Query[T], model: Any, scope: Any) -> Query[T]:
    """
    Restrict a query to the rows the current employee may act on.

    Args:
        query: SQLAlchemy query over ``model`` (or joined with it)
        model: Mapped class carrying the scope column (e.g. ``Appointment``)
        scope: ``Scope`` value object with ``field`` and ``value``

    Returns:
        Modified query with the ownership filter applied

    Example:
        ```python
        query = db.query(Appointment).filter(Appointment.id == appointment_id)
        appointment = apply_scope(query, Appointment, auth.scope).first()
        ```
    """
    return query.filter(getattr(model, scope.field) == scope.value)
