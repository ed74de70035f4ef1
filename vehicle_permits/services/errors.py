# vehicle_permits/services/errors.py
"""
Error taxonomy for the permit workflow.
main.py maps each class to an HTTP status; services raise them directly.
"""

from typing import Optional


class PermitWorkflowError(Exception):
    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def as_dict(self) -> dict:
        body = {"detail": self.message}
        if self.field:
            body["field"] = self.field
        return body


class NotFound(PermitWorkflowError):
    status_code = 404


class InvalidInput(PermitWorkflowError):
    status_code = 422


class InvalidWindow(PermitWorkflowError):
    status_code = 422


class InvalidTransition(PermitWorkflowError):
    status_code = 409


class NotAuthorized(PermitWorkflowError):
    status_code = 403


class DeliveryFailed(PermitWorkflowError):
    """Raised inside the dispatcher only. Recorded on the Notification row, never propagated."""
    status_code = 502
