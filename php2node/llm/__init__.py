# CUI // SP-CTI
"""LLM access for the remote conversion path.

``get_router()`` returns the process-wide LLMRouter built from
args/llm_config.yaml; the conversion delegate asks it for the model routed
to ``php_conversion`` (Groq by default).
"""

import threading

from php2node.llm.provider import LLMProvider, LLMRequest, LLMResponse

_router = None
_router_lock = threading.Lock()


def get_router(config_path=None):
    """Shared LLMRouter; ``config_path`` only matters on the first call."""
    global _router
    with _router_lock:
        if _router is None:
            from php2node.llm.router import LLMRouter
            _router = LLMRouter(config_path=config_path)
        return _router


__all__ = ["LLMProvider", "LLMRequest", "LLMResponse", "get_router"]
