from __future__ import annotations


class DiscoveryError(Exception):
    """Base error carrying an HTTP status and a caller-safe message."""

    status_code: int = 500
    default_detail: str = "Discovery request failed."

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class InvalidCoordinatesError(DiscoveryError):
    status_code = 400
    default_detail = "Invalid coordinates provided"


class LocationUnavailableError(DiscoveryError):
    status_code = 400
    default_detail = "User location not available"


class ProfileNotFoundError(DiscoveryError):
    status_code = 404
    default_detail = "User profile not found."


class UserNotFoundError(DiscoveryError):
    status_code = 404
    default_detail = "User not found."


class DiscoveryInternalError(DiscoveryError):
    status_code = 500


class QueryFailedError(DiscoveryInternalError):
    default_detail = "Query failed."
