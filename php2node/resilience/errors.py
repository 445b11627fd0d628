#!/usr/bin/env python3
# CUI // SP-CTI
"""php2node Resilience: Structured Exception Hierarchy.

Every error raised by the conversion pipeline derives from Php2NodeError so
callers can branch on ``retryable`` instead of parsing messages.

Usage:
    from php2node.resilience.errors import RateLimitedError

    raise RateLimitedError("Groq throttled", service="groq", retry_after=20)
"""


class Php2NodeError(Exception):
    """Root of every error raised while converting a project.

    Attributes:
        service: Component that failed (``conversion_delegate``, ``php_parser``, ...).
        retryable: True when repeating the same call may succeed.
    """

    def __init__(self, message: str, service: str = "", retryable: bool = False):
        super().__init__(message)
        self.service = service
        self.retryable = retryable


class TransientError(Php2NodeError):
    """A failure of the moment: timeouts, throttling, an open circuit."""

    def __init__(self, message: str, service: str = "", retryable: bool = True):
        super().__init__(message, service=service, retryable=retryable)


class PermanentError(Php2NodeError):
    """Repeating the call gives the same answer: bad key, bad PHP, bad config."""

    def __init__(self, message: str, service: str = "", retryable: bool = False):
        super().__init__(message, service=service, retryable=retryable)


class ServiceUnavailableError(TransientError):
    """The circuit breaker for the service is open; the call was not made."""

    def __init__(self, message: str, service: str = ""):
        super().__init__(
            message or f"Service '{service}' is unavailable (circuit breaker open)",
            service=service,
            retryable=True,
        )


class RateLimitedError(TransientError):
    """Rate limited: caller should back off and retry later.

    Attributes:
        retry_after: Seconds to wait before retrying (if known).
    """

    def __init__(self, message: str, service: str = "", retry_after: int = 0):
        super().__init__(message, service=service, retryable=True)
        self.retry_after = retry_after


class DelegateError(TransientError):
    """The remote conversion service failed or returned nothing usable."""


class DelegateAuthError(PermanentError):
    """The remote conversion service rejected our credentials."""


class ConfigurationError(PermanentError):
    """Configuration error: missing or invalid configuration."""

    def __init__(self, message: str, config_key: str = ""):
        super().__init__(message, service="config", retryable=False)
        self.config_key = config_key


class PhpParseError(PermanentError):
    """A PHP source file could not be parsed.

    Scoped to one file: the orchestrator records it and carries on.
    """

    def __init__(self, message: str, file_name: str = "", line: int = 0):
        super().__init__(message, service="php_parser", retryable=False)
        self.file_name = file_name
        self.line = line


class ProjectError(PermanentError):
    """Project-level failure that aborts a whole conversion.

    Raised for a missing source directory, a project without PHP files, or
    a target skeleton that cannot be created.
    """

    def __init__(self, message: str, project_id: str = ""):
        super().__init__(message, service="converter", retryable=False)
        self.project_id = project_id


class ConversionInProgressError(ProjectError):
    """A conversion is already running for the project."""
