"""
Error kinds raised across the generation stack.

Model clients raise ``ProviderError`` (or ``ProviderTimeout``). The gateway
never lets those escape: it re-raises them as ``GenerationFailure`` carrying
the mode that failed, so the HTTP layer deals with exactly one failure type.
"""

from typing import Optional

# HTTP statuses from the provider that are worth another attempt
RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


class StudioError(Exception):
    """Base class for all errors raised by this package."""


class InvalidRequest(StudioError):
    """Missing or malformed input; surfaced before any provider call."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ProviderError(StudioError):
    """
    Transport or API error from a model provider.

    Attributes:
        message: Error message
        provider: Provider name
        status_code: HTTP status code if applicable
        retry_after: Seconds to wait before retry if the provider said so
        is_retryable: Whether this error should be retried
    """

    def __init__(
        self,
        message: str,
        provider: str,
        status_code: Optional[int] = None,
        retry_after: Optional[float] = None,
        is_retryable: Optional[bool] = None,
    ):
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.status_code = status_code
        self.retry_after = retry_after
        if is_retryable is None:
            is_retryable = status_code in RETRYABLE_STATUS_CODES
        self.is_retryable = is_retryable


class ProviderTimeout(ProviderError):
    def __init__(self, message: str, provider: str):
        super().__init__(message, provider, is_retryable=True)


class GenerationFailure(StudioError):
    """Uniform failure for any gateway operation, annotated with its mode."""

    def __init__(
        self,
        mode: str,
        message: str,
        retryable: bool = False,
        retry_after: Optional[float] = None,
        retries_exhausted: bool = False,
    ):
        super().__init__(message)
        self.mode = mode
        self.message = message
        self.retryable = retryable
        self.retry_after = retry_after
        self.retries_exhausted = retries_exhausted

    def __str__(self) -> str:
        return f"[{self.mode}] {self.message}"


class GenerationTimeout(GenerationFailure):
    def __init__(self, mode: str, message: str = "generation timed out"):
        super().__init__(mode, message, retryable=True)
