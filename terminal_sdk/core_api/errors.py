"""
Core API error types

Catalog lookups and formatting fail locally and synchronously. None of these
errors are retried; they point at an integration defect in the caller.
"""

from typing import Optional


class CoreApiError(Exception):
    """Base exception for Core API operations"""

    def __init__(self, message: str, error_code: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(self.message)


class UnknownEndpoint(CoreApiError, KeyError):
    """Raised when an endpoint identifier is not registered in the catalog"""

    def __init__(self, endpoint_id: str):
        message = f"Unknown Core API endpoint: {endpoint_id!r}"
        super().__init__(message, error_code="UNKNOWN_ENDPOINT")
        self.endpoint_id = endpoint_id

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.message


class ArityMismatch(CoreApiError, TypeError):
    """Raised when the number of values does not match the template placeholders"""

    def __init__(self, endpoint_id: str, expected: int, got: int):
        message = (
            f"Endpoint {endpoint_id!r} expects {expected} value(s), got {got}"
        )
        super().__init__(message, error_code="ARITY_MISMATCH")
        self.endpoint_id = endpoint_id
        self.expected = expected
        self.got = got


class EndpointDefinitionError(CoreApiError, ValueError):
    """Raised when a catalog is built from invalid endpoint templates"""

    def __init__(self, message: str, endpoint_id: Optional[str] = None):
        super().__init__(message, error_code="INVALID_ENDPOINT_DEFINITION")
        self.endpoint_id = endpoint_id


class CoreRequestError(CoreApiError):
    """Raised when a request to Core fails or returns a non-2xx status"""

    def __init__(
        self,
        message: str,
        endpoint_id: Optional[str] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
    ):
        super().__init__(message, error_code="CORE_REQUEST_FAILED", status_code=status_code)
        self.endpoint_id = endpoint_id
        self.response_body = response_body
