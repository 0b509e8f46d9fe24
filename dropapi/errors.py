"""Exceptions raised by the dropapi client."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dropapi.transport import Response


class DigitalOceanAPIError(Exception):
    """Exception raised for DigitalOcean API errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response: Response | None = None,
    ):
        self.status_code = status_code
        self.response = response
        super().__init__(message)


class RequestError(DigitalOceanAPIError):
    """The request could not be built; nothing was sent."""


class TransportError(DigitalOceanAPIError):
    """Network failure or non-2xx response."""


class DecodeError(DigitalOceanAPIError):
    """Response body did not match the expected envelope."""
