"""
Exception hierarchy shared by the client memory and appointment workflows.
"""

from typing import Any, Dict, Optional


class StyleGenieError(Exception):
    """Base class for every user-facing failure."""

    error_type = 'internal_error'
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(StyleGenieError):
    """A required field is missing or empty."""

    error_type = 'validation_error'
    status_code = 422


class StoreError(StyleGenieError):
    """The persistent store call failed or returned an error payload."""

    error_type = 'store_error'
    status_code = 502


class ExternalServiceError(StyleGenieError):
    """The checkout relay (or another outside service) did not succeed."""

    error_type = 'external_service_error'
    status_code = 502


class UnsupportedCapabilityError(StyleGenieError):
    error_type = 'unsupported_capability'
    status_code = 501


class AppointmentNotFoundError(StyleGenieError):
    error_type = 'appointment_not_found'
    status_code = 404
