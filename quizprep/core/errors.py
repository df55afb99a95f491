from typing import Optional

from fastapi import HTTPException, status


class ServiceError(HTTPException):
    """Base for errors raised by services; each kind maps to a fixed HTTP status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "Server Error"

    def __init__(self, detail: Optional[str] = None) -> None:
        super().__init__(status_code=type(self).status_code, detail=detail or self.default_detail)


class ValidationError(ServiceError):
    """Missing or malformed required input."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


class NotFoundError(ServiceError):
    """A referenced entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class StoreError(ServiceError):
    """The document store is unreachable or a write failed."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Document store unavailable"
