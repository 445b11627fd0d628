# CUI // SP-CTI
"""Request/response records and the provider interface for the LLM layer.

The conversion path only ever sends plain-text chat turns plus one system
prompt, so the records stay small. ``to_chat_messages`` renders a request
in the Chat Completions shape every OpenAI-compatible server accepts.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class LLMRequest:
    """One chat completion request, independent of the serving vendor."""
    messages: List[Dict[str, str]] = field(default_factory=list)
    system_prompt: str = ""
    max_tokens: int = 4000
    temperature: Optional[float] = None      # None -> model default from config


@dataclass
class LLMResponse:
    content: str = ""
    model_id: str = ""
    provider: str = ""                       # provider label from config, e.g. "groq"
    input_tokens: int = 0
    output_tokens: int = 0
    duration_ms: int = 0
    finish_reason: str = ""


class LLMProvider(ABC):
    """A configured endpoint able to answer chat completion requests."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Label of this provider in llm_config.yaml (e.g. 'groq')."""

    @abstractmethod
    def invoke(self, request: LLMRequest, model_id: str, model_config: dict) -> LLMResponse:
        """Run ``request`` against ``model_id``.

        ``model_config`` is the model's entry from llm_config.yaml and
        supplies defaults such as ``temperature`` and ``max_output_tokens``.
        SDK exceptions propagate unchanged.
        """

    @abstractmethod
    def check_availability(self, model_id: str) -> bool:
        """True when ``model_id`` can currently accept requests."""


def to_chat_messages(request: LLMRequest) -> List[Dict[str, str]]:
    """System prompt first, then the request turns as ``{role, content}``."""
    messages = []
    if request.system_prompt:
        messages.append({"role": "system", "content": request.system_prompt})
    for message in request.messages:
        messages.append({
            "role": message.get("role", "user"),
            "content": str(message.get("content", "")),
        })
    return messages
