# errors.py
"""
Exceptions raised by the certificate services.

ValidationError, NotFoundError and MalformedResponseError reach callers.
TransportError is raised by the HTTP transport and absorbed by the fallback
layer.
"""
from typing import List, Optional


class CertChainError(Exception):
    """Base class for every error raised by certchain."""


class ValidationError(CertChainError):
    """An issue request is missing one or more required fields."""

    def __init__(self, missing_fields: List[str], message: Optional[str] = None):
        self.missing_fields = list(missing_fields)
        super().__init__(message or f"Missing required fields: {', '.join(self.missing_fields)}")


class NotFoundError(CertChainError):
    """No certificate with the given certificateId exists in any source."""

    def __init__(self, certificate_id: str):
        self.certificate_id = certificate_id
        super().__init__(f"Certificate not found: {certificate_id}")


class TransportError(CertChainError):
    """The remote API could not be reached or answered with a non-2xx status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class MalformedResponseError(CertChainError):
    """The API accepted a write but its answer could not be understood."""

    def __init__(self, message: str, payload=None):
        self.payload = payload
        super().__init__(message)
