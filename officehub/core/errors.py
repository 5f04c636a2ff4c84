"""Error taxonomy shared by services and routers.

Every error carries the HTTP status it maps to; ``officehub.main`` renders
them as ``{"message": ..., "field": ...}``.
"""

from __future__ import annotations

from typing import Optional

from fastapi import status


class OfficeHubError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal Server Error"

    def __init__(self, message: Optional[str] = None, *, field: Optional[str] = None) -> None:
        self.message = message or self.default_message
        self.field = field
        super().__init__(self.message)

    def to_payload(self) -> dict:
        payload = {"message": self.message}
        if self.field:
            payload["field"] = self.field
        return payload


class ValidationError(OfficeHubError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class InvalidTransition(ValidationError):
    default_message = "Status transition not allowed"


class Unauthorized(OfficeHubError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class InvalidCredentials(Unauthorized):
    default_message = "Invalid email or password"


class Forbidden(OfficeHubError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class AccountDisabled(Forbidden):
    default_message = "Account is disabled"


class NotFound(OfficeHubError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class InternalError(OfficeHubError):
    pass
