from typing import Any, Dict, Optional
from fastapi import HTTPException, status

from lexpilot_backend.repositories.base import (
    ConflictError,
    NotFoundError,
    RepositoryError,
    ValidationError,
)

class NotFoundException(HTTPException):
    def __init__(self, detail: Any = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail or "Not found", headers=headers)

class ForbiddenException(HTTPException):
    def __init__(self, detail: Any = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail or "Forbidden", headers=headers)

class BadRequestException(HTTPException):
    def __init__(self, detail: Any = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail or "Bad request", headers=headers)

class UnauthorizedException(HTTPException):
    def __init__(self, detail: Any = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail or "Unauthorized",
            headers=headers or {"WWW-Authenticate": "Bearer"},
        )

class ConflictException(HTTPException):
    def __init__(self, detail: Any = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail or "Conflict", headers=headers)

class InternalServerException(HTTPException):
    def __init__(self, detail: Any = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail or "Internal server error",
            headers=headers,
        )

def repository_error_to_http(error: RepositoryError) -> HTTPException:
    if isinstance(error, NotFoundError):
        return NotFoundException(detail=str(error))
    elif isinstance(error, ConflictError):
        return ConflictException(detail=str(error))
    elif isinstance(error, ValidationError):
        return BadRequestException(detail=str(error))
    else:
        return InternalServerException(detail=str(error))
