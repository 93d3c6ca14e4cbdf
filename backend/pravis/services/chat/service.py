from __future__ import annotations

import json
import os
import logging
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from pravis.core.config import settings
from pravis.core.errors import LLMError
from pravis.services.chat.parser import AssistantResult, ResponseParser
from pravis.services.chat.prompts import build_intent_prompt
from pravis.services.chat.state import ChatTurn, LRUConversationStore
from pravis.services.image_processing import is_data_uri, normalize_data_uri
from pravis.tools.base import NavigationTarget, SessionContext, ToolRequest
from pravis.tools.dispatcher import IntentDispatcher
from pravis.tools.handlers import handle_calendar, handle_email_compose
from pravis.tools.registry import ToolRegistry

logger = logging.getLogger("pravis.chat")

DEFAULT_ACKNOWLEDGEMENT = "Understood. I will handle that request for you."


class AssistantService:
    """
    Turns one free-text user message into either a conversational reply or a
    navigation.

    Responsibilities:
      - Assembles the intent prompt (persona, permitted output shapes, message).
      - Calls the LLM once; transport failures degrade to the fallback reply.
      - Decodes the output with ResponseParser (never raises).
      - Hands tool requests to the IntentDispatcher, which fires the session's navigator.
      - Records the exchange in per-conversation memory.

    Overlapping submissions for one conversation are not serialized or cancelled.
    """
    def __init__(self, llm, config: Optional[Dict[str, Any]] = None):
        self.llm = llm
        self.config = config if config is not None else self._load_config()

        max_items = getattr(settings, "conversation_cache_size", 2000) or 2000
        ttl = getattr(settings, "conversation_cache_ttl_seconds", 24 * 3600) or (24 * 3600)
        self.state_store = LRUConversationStore(max_items=int(max_items), ttl_seconds=int(ttl))

        self.tool_registry = ToolRegistry(self.config)
        self.parser = ResponseParser(self.tool_registry)

        self.dispatcher = IntentDispatcher(self.tool_registry)
        self.dispatcher.register("email_compose", handle_email_compose)
        self.dispatcher.register("calendar", handle_calendar)

    def _load_config(self) -> Dict[str, Any]:
        """
        Loads prompt text / UI strings / tool overrides from the assistant config JSON.
        """
        config: Dict[str, Any] = {
            "system_prompts": {},
            "tool_responses": {},
            "tools": {},
        }
        try:
            config_path = settings.resolve_path(settings.assistant_config_file)
            if os.path.exists(config_path):
                with open(config_path, "r", encoding="utf-8") as f:
                    loaded = json.load(f)
                    if isinstance(loaded, dict):
                        config.update(loaded)
            else:
                logger.warning("assistant config not found at %s", config_path)
        except (OSError, ValueError) as e:
            logger.error("Failed to load assistant config: %s", e)

        return config

    # ---------------------------------------------------------
    # Config helpers
    # ---------------------------------------------------------

    def _persona(self, locale: str) -> Optional[str]:
        prompts = self.config.get("system_prompts", {}) or {}
        block = prompts.get(locale) or prompts.get("en") or {}
        return block.get("persona") or None

    def get_tool_response(self, key: str, locale: str, default: str = "") -> str:
        tool_res = self.config.get("tool_responses", {}) or {}
        responses = tool_res.get(locale) or tool_res.get("en") or {}
        return responses.get(key) or default

    # ---------------------------------------------------------
    # Main entry
    # ---------------------------------------------------------

    def handle_user_message(
        self,
        text: str,
        image_ref: Optional[str] = None,
        ctx: Optional[SessionContext] = None,
    ) -> AssistantResult:
        """
        Returns exactly one of reply / tool_request. When a tool request is
        produced and ctx is given, the dispatcher navigates through ctx.navigator.

        Raises:
            ImageProcessingError: the attached data URI is not a decodable image.
        """
        result, _ = self.respond(text, image_ref, ctx)
        return result

    def respond(
        self,
        text: str,
        image_ref: Optional[str] = None,
        ctx: Optional[SessionContext] = None,
    ) -> Tuple[AssistantResult, Optional[NavigationTarget]]:
        """
        handle_user_message, also returning the navigation that was fired (if any).
        """
        locale = ctx.locale if ctx else "en"
        session_logger = ctx.session_logger if ctx else None

        images: List[str] = []
        if image_ref:
            if is_data_uri(image_ref):
                image_ref = normalize_data_uri(image_ref, max_edge=settings.image_max_edge)
            images.append(image_ref)

        prompt = build_intent_prompt(
            text,
            image_ref,
            tools=self.tool_registry.get_enabled_specs(),
            persona=self._persona(locale),
            locale=locale,
            today=date.today(),
        )

        if session_logger:
            session_logger.info(f"CHAT START | Input: '{text}' | Image: {bool(image_ref)}")

        try:
            raw = self.llm.generate_text(prompt, images=images or None)
        except LLMError as e:
            logger.warning(f"LLM call failed, replying with fallback: {e}")
            if session_logger:
                session_logger.error(f"LLM ERROR: {e}")
            result = AssistantResult.fallback()
        else:
            if session_logger:
                session_logger.info(f"LLM RAW: {raw}")
            result = self.parser.parse(raw)

        logger.info(
            "CHAT RESULT | ok=%s kind=%s",
            result.ok,
            "tool_request" if result.tool_request else "reply",
        )
        if session_logger:
            session_logger.info(f"RESULT ok={result.ok}: {result.to_dict()}")

        navigation: Optional[NavigationTarget] = None
        if result.tool_request and ctx is not None:
            navigation = self.dispatcher.dispatch(result.tool_request, ctx)

        if ctx is not None and ctx.conversation_id:
            self._record_turns(ctx.conversation_id, locale, text, result)

        return result, navigation

    def dispatch(self, tool_request: ToolRequest, ctx: SessionContext) -> Optional[NavigationTarget]:
        return self.dispatcher.dispatch(tool_request, ctx)

    def display_text(self, result: AssistantResult, locale: str = "en") -> str:
        """
        What the chat panel shows for a result.
        """
        if result.tool_request is not None:
            return self.get_tool_response("acknowledged", locale, DEFAULT_ACKNOWLEDGEMENT)
        return result.reply or ""

    # ---------------------------------------------------------
    # History
    # ---------------------------------------------------------

    def _record_turns(self, conversation_id: str, locale: str, text: str, result: AssistantResult) -> None:
        max_turns = int(getattr(settings, "max_history_turns", 20) or 20)
        self.state_store.append_turns(
            conversation_id,
            [("user", text), ("assistant", self.display_text(result, locale))],
            locale=locale,
            max_turns=max_turns,
        )

    def get_history(self, conversation_id: str) -> Optional[List[ChatTurn]]:
        st = self.state_store.get(conversation_id)
        if st is None:
            return None
        return list(st.turns)
