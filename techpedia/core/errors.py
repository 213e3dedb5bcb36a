# techpedia/core/errors.py
"""
Application error taxonomy.

Every error is an ``HTTPException`` so services can raise them the same way
they raise plain FastAPI errors. ``main.py`` renders them as:

    {"error": <message>, "code": <CODE>, ...extra}

Stock-related errors add the available quantity to ``extra``.
"""

from typing import Any

from fastapi import HTTPException, status


class AppError(HTTPException):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, **extra: Any):
        super().__init__(status_code=self.status_code, detail=message)
        self.message = message
        self.extra = extra

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message, "code": self.code, **self.extra}


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"


class Unauthorized(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHORIZED"


class AccessDenied(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "ACCESS_DENIED"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"


class InsufficientStock(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "INSUFFICIENT_STOCK"


class EmptyCart(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "EMPTY_CART"

    def __init__(self, message: str = "Cart is empty", **extra: Any):
        super().__init__(message, **extra)


class GatewayError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "GATEWAY_ERROR"


class PersistenceError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "PERSISTENCE_ERROR"
