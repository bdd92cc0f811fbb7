"""Error taxonomy for the subtitle editing pipeline."""

from __future__ import annotations


class SubtitleStudioError(Exception):
    """Base class for all pipeline errors."""

    retryable: bool = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(SubtitleStudioError):
    """A required credential or setting is missing. Fatal to any generation call."""


class ServiceError(SubtitleStudioError):
    """Transport, auth or quota failure reported by the generation backend."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(ServiceError):
    """The backend rejected the request with HTTP 429. Safe to retry later."""

    retryable = True


class SubtitleParseError(SubtitleStudioError):
    """Generated subtitle text contained content that could not be parsed."""

    def __init__(self, message: str, *, remainder: list[str] | None = None) -> None:
        super().__init__(message)
        self.remainder = remainder or []


class SessionBusyError(SubtitleStudioError):
    """Another run or regeneration already holds the session."""
