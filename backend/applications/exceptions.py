"""Errors raised by the rental workflow, each tied to an HTTP status."""

from __future__ import annotations

from rest_framework import status


class WorkflowError(Exception):
    """Base class for expected workflow failures."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request."

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class InvalidRequest(WorkflowError):
    """Malformed, missing or inconsistent input."""

    default_detail = "Invalid request."


class AccessDenied(WorkflowError):
    """Authenticated caller is not allowed to perform the action."""

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Access denied."


class NotFound(WorkflowError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."


class Conflict(WorkflowError):
    """The entity is not in a state that allows the transition."""

    default_detail = "This action is not allowed in the current state."
