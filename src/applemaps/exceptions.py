"""Exception hierarchy for the Apple Maps Server API client."""

from __future__ import annotations

from http import HTTPStatus
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

    from applemaps.types import ErrorResponse


class AppleMapsError(Exception):
    """Base exception for all applemaps errors."""


class ValidationError(AppleMapsError, ValueError):
    """Raised when a request fails local validation, before any network call."""


class TokenStoreError(AppleMapsError):
    """Raised when the token store fails to read or write the access token."""


class DecodeError(AppleMapsError):
    """Raised when a successful response body does not match the expected model."""

    def __init__(self, message: str, body: bytes = b"") -> None:
        super().__init__(message)
        self.body = body


class APIError(AppleMapsError):
    """Raised when the server answers with a non-2xx status.

    ``response`` holds the structured error payload when the body decodes,
    otherwise it is ``None`` and only the raw ``body`` is available.
    """

    def __init__(
        self,
        status_code: int,
        body: bytes,
        headers: Mapping[str, str],
        response: ErrorResponse | None = None,
    ) -> None:
        self.status_code = status_code
        self.body = body
        self.headers = headers
        self.response = response
        super().__init__(self._format())

    def _format(self) -> str:
        try:
            reason = HTTPStatus(self.status_code).phrase
        except ValueError:
            reason = ""
        prefix = f"call API failed({self.status_code}/{reason})"
        if self.response is None:
            return f"{prefix} with raw body=`{self.body.decode(errors='replace')}`"
        error = self.response.error
        if not error.details:
            return f"{prefix} with message={error.message}"
        return f"{prefix} with message={error.message} and details=`{', '.join(error.details)}`"


class AuthenticationError(APIError):
    """Raised when the token is missing, invalid or expired (401)."""


class AuthorizationError(APIError):
    """Raised when the token lacks permission for the endpoint (403)."""


class NotFoundError(APIError):
    """Raised when the endpoint or resource does not exist (404)."""


class RateLimitError(APIError):
    """Raised when the daily or per-second quota is exceeded (429)."""


class ServerError(APIError):
    """Raised on unexpected server-side errors (5xx)."""
