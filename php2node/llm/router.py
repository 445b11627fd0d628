# CUI // SP-CTI
"""Config-driven LLM router.

args/llm_config.yaml names providers, models and, per php2node function
(``php_conversion``), a chain of models to try in order. ``resolve`` walks
the chain and returns the first model whose provider can be built and
answers an availability check. Check results are cached for
``settings.availability_cache_ttl_seconds``.

A provider whose ``api_key_env`` variable is unset is treated as absent,
so a machine without credentials resolves nothing and the converter
falls back to the local transformer.
"""

import logging
import os
import re
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

import yaml

from php2node.llm.provider import LLMProvider, LLMRequest, LLMResponse
from php2node.resilience.errors import ConfigurationError

logger = logging.getLogger("php2node.llm.router")

BASE_DIR = Path(__file__).resolve().parent.parent.parent
DEFAULT_CONFIG_PATH = BASE_DIR / "args" / "llm_config.yaml"

OPENAI_PROVIDER_TYPES = ("openai", "openai_compatible")

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")


def _expand_env(value):
    """Expand ``${VAR}`` and ``${VAR:-default}`` in string values."""
    if not isinstance(value, str):
        return value

    def replace(match):
        name, sep, default = match.group(1).partition(":-")
        if sep:
            return os.environ.get(name, default)
        return os.environ.get(name, match.group(0))

    return _ENV_PATTERN.sub(replace, value)


@dataclass
class ResolvedModel:
    """A routed model: who serves it and with which settings."""
    provider: LLMProvider
    model_name: str
    model_id: str
    config: Dict = field(default_factory=dict)


class LLMRouter:

    def __init__(self, config_path=None, config: Optional[dict] = None):
        self._config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self._providers: Dict[str, LLMProvider] = {}
        self._availability: Dict[str, bool] = {}
        self._availability_checked_at = 0.0
        self._config = config if config is not None else self._read_config()
        settings = self._config.get("settings", {}) or {}
        self._cache_ttl = float(settings.get("availability_cache_ttl_seconds", 1800))
        self._check_availability = bool(settings.get("check_availability", True))
        logger.info(
            "LLM routing: %d providers, %d models, %d routes",
            len(self._config.get("providers", {})),
            len(self._config.get("models", {})),
            len(self._config.get("routing", {})),
        )

    def _read_config(self) -> dict:
        if not self._config_path.exists():
            logger.warning("LLM config not found at %s - remote conversion disabled", self._config_path)
            return {}
        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                return yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as exc:
            logger.error("Failed to load LLM config %s: %s", self._config_path, exc)
            return {}

    # -------------------------------------------------------------------
    # Providers
    # -------------------------------------------------------------------
    def register_provider(self, provider_name: str, instance: LLMProvider):
        """Use ``instance`` for ``provider_name`` instead of building one."""
        self._providers[provider_name] = instance
        self._availability.clear()

    def _provider(self, provider_name: str) -> Optional[LLMProvider]:
        if provider_name in self._providers:
            return self._providers[provider_name]

        cfg = self._config.get("providers", {}).get(provider_name)
        if not cfg:
            logger.warning("Provider '%s' is not configured", provider_name)
            return None
        if cfg.get("type", "") not in OPENAI_PROVIDER_TYPES:
            logger.warning("Provider '%s' has unsupported type %r", provider_name, cfg.get("type"))
            return None

        api_key = cfg.get("api_key") or ""
        key_env = cfg.get("api_key_env", "")
        if not api_key and key_env:
            api_key = os.environ.get(key_env, "")
            if not api_key:
                logger.warning("Provider '%s' disabled: %s is not set", provider_name, key_env)
                return None

        from php2node.llm.openai_provider import OpenAICompatibleProvider

        provider = OpenAICompatibleProvider(
            api_key=api_key,
            base_url=_expand_env(cfg.get("base_url", "https://api.openai.com/v1")),
            provider_label=provider_name,
            timeout=float(cfg.get("timeout_seconds", 60)),
        )
        self._providers[provider_name] = provider
        return provider

    # -------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------
    def _model(self, model_name: str) -> Optional[ResolvedModel]:
        """The model with a buildable provider, or None."""
        cfg = self._config.get("models", {}).get(model_name)
        if not cfg:
            return None
        provider = self._provider(cfg.get("provider", ""))
        if provider is None:
            return None
        return ResolvedModel(provider, model_name, cfg.get("model_id", ""), cfg)

    def _is_available(self, model: ResolvedModel) -> bool:
        now = time.time()
        if now - self._availability_checked_at > self._cache_ttl:
            self._availability.clear()
            self._availability_checked_at = now
        if model.model_name not in self._availability:
            available = True
            if self._check_availability:
                available = model.provider.check_availability(model.model_id)
            self._availability[model.model_name] = available
        return self._availability[model.model_name]

    def resolve(self, function: str) -> Optional[ResolvedModel]:
        """First available model in the chain routed to ``function``.

        Falls back to the ``default`` route for unknown functions. When no
        model passes the check, the first buildable one is returned anyway
        so a flaky check does not silently disable the remote path.
        """
        routing = self._config.get("routing", {})
        chain = routing.get(function, routing.get("default", {})).get("chain", [])
        if not chain:
            logger.warning("No routing chain for function '%s'", function)
            return None

        candidates = [m for m in (self._model(name) for name in chain) if m is not None]
        for model in candidates:
            if self._is_available(model):
                logger.debug("Routed %s -> %s (%s via %s)", function, model.model_name,
                             model.model_id, model.provider.provider_name)
                return model
        if candidates:
            logger.warning("No model for '%s' passed the availability check; trying %s anyway",
                           function, candidates[0].model_name)
            return candidates[0]
        return None

    def is_available(self, function: str) -> bool:
        return self.resolve(function) is not None

    def invoke(self, function: str, request: LLMRequest) -> LLMResponse:
        """Send ``request`` to the model routed for ``function``.

        Raises:
            ConfigurationError: No model in the chain has a usable provider.
            openai.OpenAIError: Raised by the provider, unchanged.
        """
        model = self.resolve(function)
        if model is None:
            raise ConfigurationError(
                f"No LLM provider available for function '{function}'. "
                "Check args/llm_config.yaml and provider credentials.",
                config_key=f"routing.{function}",
            )
        return model.provider.invoke(request, model.model_id, model.config)
