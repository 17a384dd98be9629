"""Custom exception classes for the application."""

from fastapi import HTTPException, status


# ── Domain errors (raised by services) ─────────────


class ConfigurationError(Exception):
    """The LLM provider cannot be built (missing or blank credential)."""


class ProviderError(Exception):
    """The LLM call itself failed.

    ``reason`` is one of ``authentication``, ``rate_limit``, ``network`` or
    ``provider``. Rate limits are retryable, authentication failures are not.
    """

    def __init__(self, message: str, reason: str = "provider"):
        super().__init__(message)
        self.reason = reason

    @property
    def retryable(self) -> bool:
        return self.reason in ("rate_limit", "network")


# ── HTTP errors (raised by routes) ─────────────────


class ServiceNotConfiguredError(HTTPException):
    def __init__(self, detail: str = "AI service not configured"):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "success": False,
                "error": detail,
                "suggestion": "Set GROQ_API_KEY in your environment or .env file.",
            },
        )


class ServiceUnavailableError(HTTPException):
    def __init__(self, message: str):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "success": False,
                "error": "AI service unavailable",
                "message": message,
                "suggestion": "Please ensure your Groq API key is valid and configured.",
            },
        )


class RateLimitedError(HTTPException):
    def __init__(self, message: str):
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={
                "success": False,
                "error": "AI service rate limited",
                "message": message,
                "suggestion": "Wait a moment and try again.",
            },
        )


def provider_error_to_http(error: ProviderError) -> HTTPException:
    """Map a provider failure to the HTTP error shown to the user."""
    if error.reason == "rate_limit":
        return RateLimitedError(str(error))
    return ServiceUnavailableError(str(error))
