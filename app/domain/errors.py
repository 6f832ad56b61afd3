# app/domain/errors.py
"""
Bledy domenowe, kazdy niesie status HTTP i tresc bezpieczna dla klienta.
Handlery w app.main mapuja je na odpowiedzi JSON.
"""


class AppError(Exception):
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(AppError):
    status_code = 400


class NotFoundError(AppError):
    status_code = 404

    def __init__(self, what: str):
        super().__init__(f"{what.capitalize()} not found")
        self.what = what


class AuthError(AppError):
    status_code = 401


class ForbiddenError(AppError):
    status_code = 403


class ConflictError(AppError):
    status_code = 409


class InternalError(AppError):
    status_code = 500

    def __init__(self, detail: str = "Internal server error"):
        super().__init__(detail)
