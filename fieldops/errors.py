"""Error taxonomy for the service report subsystem.

Aggregation steps return these as values; rendering raises them. The web
layer maps each class to an HTTP status through ``status_code``.
"""

from __future__ import annotations


class ServiceReportError(Exception):
    """Base class for report failures."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(ServiceReportError):
    """Malformed date or missing required parameter."""

    status_code = 400


class NotFoundError(ServiceReportError):
    """Referenced building, report or template does not exist."""

    status_code = 404


class DataLayerError(ServiceReportError):
    """The underlying store failed; the driver message is passed through."""

    status_code = 500


class RenderError(ServiceReportError):
    """A required asset is missing or text cannot be painted."""

    status_code = 500


class InvalidTransitionError(ServiceReportError):
    """A report status change is not allowed from the current status."""

    status_code = 409
