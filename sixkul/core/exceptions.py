# sixkul/core/exceptions.py
"""Custom exceptions for the SIXKUL application."""
from fastapi import HTTPException
from typing import Any, Dict, List, Optional


class SixkulException(HTTPException):
    """Base exception for SIXKUL application.

    ``detail`` always holds the user-facing message; per-field problems go to
    ``errors`` and are rendered next to it by the error handlers.
    """
    def __init__(
        self,
        status_code: int,
        detail: str,
        errors: Optional[List[Any]] = None,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.errors = errors


class ValidationError(SixkulException):
    """Exception raised for invalid input."""
    def __init__(self, message: str, errors: Optional[List[Any]] = None):
        super().__init__(status_code=400, detail=message, errors=errors)


class BusinessRuleError(SixkulException):
    """Exception raised when a domain rule refuses the operation."""
    def __init__(self, message: str):
        super().__init__(status_code=400, detail=message)


class AuthenticationError(SixkulException):
    def __init__(self, message: str = "Autentikasi diperlukan. Silakan login."):
        super().__init__(status_code=401, detail=message)


class PermissionDenied(SixkulException):
    def __init__(self, message: str = "Akses ditolak."):
        super().__init__(status_code=403, detail=message)


class NotFoundError(SixkulException):
    """Exception raised when a resource is not found."""
    def __init__(self, message: str):
        super().__init__(status_code=404, detail=message)


class ConflictError(SixkulException):
    """Exception raised when duplicate data is found."""
    def __init__(self, message: str, errors: Optional[List[Any]] = None):
        super().__init__(status_code=409, detail=message, errors=errors)
