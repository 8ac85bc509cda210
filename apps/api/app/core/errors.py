"""Error taxonomy shared by routers and services.

Every error is an ``HTTPException`` so FastAPI renders it as
``{"detail": ...}`` with the matching status code.
"""
from fastapi import HTTPException


class AppError(HTTPException):
    status_code = 500
    default_detail = "Internal server error"

    def __init__(self, detail: str | None = None):
        super().__init__(status_code=type(self).status_code, detail=detail or self.default_detail)


class Unauthorized(AppError):
    status_code = 401
    default_detail = "Not authenticated"


class Forbidden(AppError):
    status_code = 403
    default_detail = "Forbidden"


class AccessDenied(Forbidden):
    default_detail = "Access denied"


class NotFound(AppError):
    status_code = 404
    default_detail = "Not found"


class ValidationError(AppError):
    status_code = 400
    default_detail = "Invalid request"


class InternalError(AppError):
    pass
