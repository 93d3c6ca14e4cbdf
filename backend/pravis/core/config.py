from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import List, Literal, Optional

import os
BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))  # backend/
ENV_PATH = os.path.join(BASE_DIR, ".env")

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=ENV_PATH,
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )

    # ---- backend switch ----
    llm_backend: Literal["openrouter", "litellm"] = Field(default="openrouter", alias="LLM_BACKEND")
    llm_model: str = Field(default="qwen/qwen3-coder:free", alias="LLM_MODEL")

    # ---- OpenRouter (OpenAI-compatible chat completions) ----
    openrouter_api_key: str = Field(default="", alias="OPENROUTER_API_KEY")
    openrouter_base_url: str = Field(default="https://openrouter.ai/api/v1", alias="OPENROUTER_BASE_URL")

    # ---- LiteLLM (Gemini and other providers) ----
    litellm_model: Optional[str] = Field(default="gemini/gemini-1.5-pro-latest", alias="LITELLM_MODEL")
    litellm_api_key: Optional[str] = Field(default=None, alias="LITELLM_API_KEY")
    litellm_api_base: Optional[str] = Field(default=None, alias="LITELLM_API_BASE")

    # No timeout unless the operator sets one
    llm_timeout_seconds: Optional[float] = Field(default=None, alias="LLM_TIMEOUT_SECONDS")

    # ---- Assistant prompts / UI strings ----
    assistant_config_file: str = Field(default="data/assistant_config.json", alias="ASSISTANT_CONFIG_FILE")

    # ---- Conversation memory ----
    conversation_cache_size: int = Field(default=2000, alias="CONVERSATION_CACHE_SIZE")
    conversation_cache_ttl_seconds: int = Field(default=24 * 3600, alias="CONVERSATION_CACHE_TTL_SECONDS")
    max_history_turns: int = Field(default=20, alias="MAX_HISTORY_TURNS")

    # ---- Images ----
    image_max_edge: int = Field(default=1600, alias="IMAGE_MAX_EDGE")

    # ---- Logging ----
    log_dir: str = Field(default="logs/", alias="LOG_DIR")
    enable_session_logs: bool = Field(default=True, alias="ENABLE_SESSION_LOGS")
    session_log_level: str = Field(default="INFO", alias="SESSION_LOG_LEVEL")
    session_log_format: str = Field(default="%(asctime)s %(levelname)s %(message)s", alias="SESSION_LOG_FORMAT")

    # ---- HTTP ----
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], alias="CORS_ORIGINS")

    def resolve_path(self, path: str) -> str:
        """Relative paths are taken from the backend/ directory."""
        if os.path.isabs(path):
            return path
        return os.path.join(BASE_DIR, path)


settings = Settings()
