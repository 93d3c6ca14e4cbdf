import logging
from typing import Any, Dict, List, Optional

from pravis.core.config import settings
from pravis.core.errors import LLMError

logger = logging.getLogger("pravis.llm")


class LLMClient:
    """
    Text-generation client.

    Sends one user message to a chat-completions endpoint and returns the raw
    text of the first choice. Any provider failure is raised as LLMError; no
    retries are attempted here.

    Backends:
      - "openrouter": OpenAI-compatible API at OPENROUTER_BASE_URL via the openai SDK
      - "litellm": any LiteLLM provider (e.g. gemini/gemini-1.5-pro-latest)
    """

    def __init__(self, config=None):
        self.settings = config or settings
        self.backend = self.settings.llm_backend
        self._client = None
        self._litellm = None

    def _model_name(self) -> str:
        if self.backend == "litellm" and getattr(self.settings, "litellm_model", None):
            return self.settings.litellm_model
        return self.settings.llm_model

    def _openai_client(self):
        if self._client is None:
            if not self.settings.openrouter_api_key:
                raise LLMError("OPENROUTER_API_KEY missing. Set it in .env")
            from openai import OpenAI
            kwargs: Dict[str, Any] = {
                "api_key": self.settings.openrouter_api_key,
                "base_url": self.settings.openrouter_base_url,
                "max_retries": 0,
            }
            if self.settings.llm_timeout_seconds:
                kwargs["timeout"] = self.settings.llm_timeout_seconds
            self._client = OpenAI(**kwargs)
        return self._client

    def _litellm_module(self):
        if self._litellm is None:
            # https://docs.litellm.ai/docs/
            import litellm
            self._litellm = litellm
        return self._litellm

    def build_messages(self, prompt: str, images: Optional[List[str]] = None) -> List[Dict[str, Any]]:
        """
        [{"role": "user", "content": prompt}], with image_url parts appended when images are given.
        """
        if not images:
            return [{"role": "user", "content": prompt}]
        parts: List[Dict[str, Any]] = [{"type": "text", "text": prompt}]
        for url in images:
            parts.append({"type": "image_url", "image_url": {"url": url}})
        return [{"role": "user", "content": parts}]

    def generate_text(self, prompt: str, images: Optional[List[str]] = None) -> str:
        """
        Perform a non-streaming completion and return choices[0].message.content.

        Raises:
            LLMError: missing credentials, non-success status or network failure.
        """
        messages = self.build_messages(prompt, images)
        model = self._model_name()

        if self.backend == "openrouter":
            client = self._openai_client()
            try:
                resp = client.chat.completions.create(model=model, messages=messages)
            except Exception as e:
                logger.error(f"OpenRouter API error: {e}")
                raise LLMError(f"OpenRouter API error: {e}") from e
            return _first_choice_text(resp)

        litellm = self._litellm_module()
        kwargs: Dict[str, Any] = {
            "model": model,
            "messages": messages,
            "api_key": self.settings.litellm_api_key,
            "api_base": self.settings.litellm_api_base,
        }
        if self.settings.llm_timeout_seconds:
            kwargs["timeout"] = self.settings.llm_timeout_seconds
        try:
            resp = litellm.completion(**kwargs)
        except Exception as e:
            logger.error(f"LiteLLM complete error: {e}")
            raise LLMError(f"LiteLLM error: {e}") from e
        return _first_choice_text(resp)


def _first_choice_text(resp: Any) -> str:
    """
    choices[0].message.content for both SDK objects and plain dicts; '' when absent.
    """
    choices = getattr(resp, "choices", None)
    if choices is None and isinstance(resp, dict):
        choices = resp.get("choices")
    if not choices:
        return ""

    first = choices[0]
    msg = getattr(first, "message", None)
    if msg is None and isinstance(first, dict):
        msg = first.get("message")
    if msg is None:
        return ""

    content = getattr(msg, "content", None)
    if content is None and isinstance(msg, dict):
        content = msg.get("content")
    return content or ""
