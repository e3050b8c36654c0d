"""
Scheduling error taxonomy.

Every error carries a machine-readable ``kind`` (rendered as the response
``status``), the HTTP status code it maps to, and a short localized message
suitable for direct display. ``details`` holds upstream diagnostics.
"""

from typing import Any, Dict, Optional

from fastapi import status


class SchedulingError(Exception):
    """Base exception for scheduling failures."""

    kind = "error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Ocurrio un error inesperado."

    def __init__(self, message: Optional[str] = None, details: Optional[str] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"status": self.kind, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind='{self.kind}', message='{self.message}')"


class InvalidInputError(SchedulingError):
    """Malformed or missing request fields."""

    kind = "invalid"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Solicitud no valida."


class ForbiddenError(SchedulingError):
    """Role or ownership violation."""

    kind = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "No tienes permiso para realizar esta accion."


class NotFoundError(SchedulingError):
    """Referenced entity is absent or outside the tenant scope."""

    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Recurso no encontrado."


class ConflictError(SchedulingError):
    """Duplicate booking."""

    kind = "conflict"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Ya existe una cita para ese cliente, empleado y servicio en ese horario."


class LockedError(SchedulingError):
    """The current state is no longer eligible for the requested transition."""

    kind = "locked"
    status_code = status.HTTP_409_CONFLICT
    default_message = "La cita ya no esta disponible."


class UsedError(SchedulingError):
    """Confirmation token was already consumed."""

    kind = "used"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Este enlace ya fue utilizado."


class ExpiredError(SchedulingError):
    """Confirmation token is past its expiry."""

    kind = "expired"
    status_code = status.HTTP_410_GONE
    default_message = "El enlace de confirmacion ha expirado."


class DependencyError(SchedulingError):
    """The store or another collaborator failed."""

    kind = "error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "No pudimos completar la operacion."


class PartialFailureError(DependencyError):
    """
    An earlier step was committed but a later one failed.

    The committed work is not rolled back; the message tells the caller which
    compensating action is needed (for example regenerating the confirmation).
    """

    default_message = "La operacion se completo parcialmente."
