# CUI // SP-CTI
"""Remote conversion delegate.

``ConversionDelegate.complete(prompt)`` sends one conversion prompt to the
model routed for ``php_conversion`` and returns the raw reply text. Every
failure is raised as a member of the php2node error taxonomy, so the
strategy layer can treat them uniformly as "fall back to the local
transformer". A circuit breaker sits in front of the remote call.
"""

import logging
from pathlib import Path

import openai

from php2node.llm.provider import LLMRequest
from php2node.resilience.circuit_breaker import get_circuit_breaker
from php2node.resilience.errors import (
    DelegateAuthError,
    DelegateError,
    Php2NodeError,
    RateLimitedError,
    ServiceUnavailableError,
)

logger = logging.getLogger("php2node.conversion.delegate")

BASE_DIR = Path(__file__).resolve().parent.parent.parent
SYSTEM_PROMPT_PATH = BASE_DIR / "hardprompts" / "conversion" / "php_to_node.md"

FUNCTION_NAME = "php_conversion"
SERVICE_NAME = "conversion_delegate"

_FALLBACK_SYSTEM_PROMPT = (
    "You are an expert PHP to Node.js converter. Convert the PHP code you are "
    "given to TypeScript/Node.js using Express.js conventions. Return ONLY the "
    "TypeScript code wrapped in ```typescript``` code blocks."
)


def load_system_prompt(path=SYSTEM_PROMPT_PATH):
    """Read the conversion system prompt, falling back to a built-in one."""
    try:
        return Path(path).read_text(encoding="utf-8").strip()
    except OSError as exc:
        logger.warning("System prompt not readable at %s (%s); using built-in prompt", path, exc)
        return _FALLBACK_SYSTEM_PROMPT


def _retry_after(exc):
    response = getattr(exc, "response", None)
    if response is None:
        return 0
    try:
        return int(float(response.headers.get("retry-after", 0)))
    except (TypeError, ValueError):
        return 0


def classify_error(exc, service=SERVICE_NAME):
    """Map an openai SDK exception onto the php2node error taxonomy."""
    if isinstance(exc, openai.RateLimitError):
        return RateLimitedError(
            f"Rate limit exceeded: {exc}", service=service, retry_after=_retry_after(exc),
        )
    if isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return DelegateAuthError(f"Unauthorized: {exc}", service=service)
    if isinstance(exc, openai.BadRequestError):
        return DelegateError(f"Malformed request: {exc}", service=service)
    if isinstance(exc, openai.APIConnectionError):
        # APITimeoutError is a subclass
        return DelegateError(f"Transport failure: {exc}", service=service)
    return DelegateError(f"Delegate call failed: {exc}", service=service)


class ConversionDelegate:
    """Black-box ``complete(prompt) -> text`` over the LLM router."""

    def __init__(self, router=None, breaker=None, system_prompt=None,
                 function_name=FUNCTION_NAME):
        if router is None:
            from php2node.llm import get_router
            router = get_router()
        self._router = router
        self._breaker = breaker or get_circuit_breaker(SERVICE_NAME)
        self._system_prompt = system_prompt if system_prompt is not None else load_system_prompt()
        self._function_name = function_name

    @property
    def system_prompt(self):
        return self._system_prompt

    def complete(self, prompt):
        """Send ``prompt`` and return the non-empty reply text.

        Raises:
            ServiceUnavailableError: The circuit breaker is open.
            RateLimitedError: The service throttled the request.
            DelegateAuthError: The service rejected the credentials.
            DelegateError: Transport failure, malformed request, empty reply
                or any other unexpected error from the provider.
            ConfigurationError: No provider is configured for the route.
        """
        if not self._breaker.allow_request():
            raise ServiceUnavailableError("", service=SERVICE_NAME)

        request = LLMRequest(
            messages=[{"role": "user", "content": prompt}],
            system_prompt=self._system_prompt,
        )
        try:
            response = self._router.invoke(self._function_name, request)
        except openai.OpenAIError as exc:
            self._breaker.record_failure()
            raise classify_error(exc) from exc
        except Php2NodeError:
            self._breaker.record_failure()
            raise
        except Exception as exc:
            self._breaker.record_failure()
            logger.warning("Unexpected delegate failure: %s: %s", type(exc).__name__, exc)
            raise DelegateError(f"Delegate call failed: {exc}", service=SERVICE_NAME) from exc

        content = (response.content or "").strip()
        if not content:
            self._breaker.record_failure()
            raise DelegateError("Empty response from conversion service", service=SERVICE_NAME)

        self._breaker.record_success()
        logger.debug(
            "Delegate reply from %s/%s: %d chars in %dms",
            response.provider, response.model_id, len(content), response.duration_ms,
        )
        return content
