"""
Error taxonomy shared by the compatibility workflow, the API client and the
record classifier.
"""


class SajuClientError(Exception):
    """Base exception for client-side failures."""

    def __init__(self, message: str, operation: str = "unknown"):
        super().__init__(message)
        self.message = message
        self.operation = operation


class ValidationError(SajuClientError):
    """Locally detected malformed input (unparseable date/time). Never sent."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message, operation="validate")
        self.field = field


class ProtocolError(SajuClientError):
    """The backend answered successfully but a required field was missing."""


class RemoteError(SajuClientError):
    """Non-success status or network failure talking to the backend."""

    def __init__(
        self,
        message: str,
        operation: str = "unknown",
        status_code: int | None = None,
        response_data: dict | None = None,
    ):
        super().__init__(message, operation=operation)
        self.status_code = status_code
        self.response_data = response_data or {}


class ClassificationParseError(SajuClientError):
    """Malformed metadata on a single record. Always handled by the classifier."""

    def __init__(self, message: str, record_id=None):
        super().__init__(message, operation="classify")
        self.record_id = record_id
