# CUI // SP-CTI
"""Chat Completions provider for any OpenAI-compatible endpoint.

Groq is the default conversion backend; OpenAI itself, Ollama and vLLM
work through the same class with a different ``base_url``. The SDK client
is built lazily with its own retries disabled because the converter
already retries each file.
"""

import logging
import time

import openai

from php2node.llm.provider import LLMProvider, LLMRequest, LLMResponse, to_chat_messages

logger = logging.getLogger("php2node.llm.openai_provider")

LOCAL_HOSTS = ("localhost", "127.0.0.1")


class OpenAICompatibleProvider(LLMProvider):

    def __init__(self, api_key: str = "", base_url: str = "https://api.openai.com/v1",
                 provider_label: str = "openai", timeout: float = 60.0, client=None):
        self._api_key = api_key
        self._base_url = base_url
        self._provider_label = provider_label
        self._timeout = timeout
        self._client = client

    @property
    def provider_name(self) -> str:
        return self._provider_label

    @property
    def is_local(self) -> bool:
        return any(host in self._base_url for host in LOCAL_HOSTS)

    def _get_client(self):
        if self._client is None:
            self._client = openai.OpenAI(
                base_url=self._base_url,
                api_key=self._api_key or "not-needed",  # local servers ignore it
                timeout=self._timeout,
                max_retries=0,
            )
        return self._client

    def build_completion_args(self, request: LLMRequest, model_id: str, model_config: dict) -> dict:
        """Keyword arguments for ``chat.completions.create``."""
        args = {
            "model": model_id,
            "messages": to_chat_messages(request),
            "max_tokens": min(request.max_tokens, model_config.get("max_output_tokens", 4000)),
        }
        temperature = request.temperature
        if temperature is None:
            temperature = model_config.get("temperature")
        if temperature is not None:
            args["temperature"] = temperature
        return args

    def invoke(self, request: LLMRequest, model_id: str, model_config: dict) -> LLMResponse:
        started = time.time()
        try:
            completion = self._get_client().chat.completions.create(
                **self.build_completion_args(request, model_id, model_config)
            )
        except openai.OpenAIError as exc:
            logger.error("%s rejected %s: %s", self._provider_label, model_id, exc)
            raise

        response = LLMResponse(
            model_id=model_id,
            provider=self._provider_label,
            duration_ms=int((time.time() - started) * 1000),
        )
        usage = getattr(completion, "usage", None)
        if usage is not None:
            response.input_tokens = usage.prompt_tokens or 0
            response.output_tokens = usage.completion_tokens or 0
        if completion.choices:
            choice = completion.choices[0]
            response.finish_reason = choice.finish_reason or ""
            response.content = choice.message.content or ""
        logger.debug(
            "%s/%s answered in %dms (%d -> %d tokens)",
            self._provider_label, model_id, response.duration_ms,
            response.input_tokens, response.output_tokens,
        )
        return response

    def check_availability(self, model_id: str) -> bool:
        """Remote endpoints need a key; any endpoint must answer ``models.list``."""
        if not self._api_key and not self.is_local:
            return False
        try:
            self._get_client().models.list()
        except openai.OpenAIError as exc:
            logger.debug("%s not reachable: %s", self._provider_label, exc)
            return False
        return True
