from __future__ import annotations

import threading
import time
import logging
from typing import Dict, List, Literal, Optional, Tuple
from dataclasses import dataclass, field, asdict

logger = logging.getLogger("pravis.state")

# Conversation history lives only in process memory, keyed by conversation_id.
# LRU eviction plus TTL keeps the store bounded; nothing is persisted.


@dataclass
class ChatTurn:
    role: Literal["user", "assistant"]
    content: str


@dataclass
class ConversationState:
    """
    State object for a single conversation (keyed by UUID).
    """
    conversation_id: str
    locale: str = "en"
    # Append-only within the retention window
    turns: List[ChatTurn] = field(default_factory=list)
    updated_at: float = field(default_factory=time.time)

    def append(self, role: str, content: str, max_turns: int = 20) -> None:
        self.turns.append(ChatTurn(role=role, content=content))
        if len(self.turns) > max_turns:
            self.turns = self.turns[-max_turns:]

    def to_dict(self) -> Dict:
        return asdict(self)


class LRUConversationStore:
    """
    In-memory LRU cache for ConversationState.

    Sync request handlers run in FastAPI's thread pool, so every read or
    write of the cache goes through one re-entrant lock.
    """
    def __init__(self, max_items: int = 2000, ttl_seconds: int = 86400):
        self.max_items = max_items
        self.ttl_seconds = ttl_seconds
        self._store: Dict[str, ConversationState] = {}
        # conversation_ids in access order (MRU at end)
        self._access_order: List[str] = []
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def _touch(self, conversation_id: str) -> None:
        if conversation_id in self._access_order:
            self._access_order.remove(conversation_id)
        self._access_order.append(conversation_id)

    def _drop(self, conversation_id: str) -> None:
        self._store.pop(conversation_id, None)
        if conversation_id in self._access_order:
            self._access_order.remove(conversation_id)

    def get(self, conversation_id: str) -> Optional[ConversationState]:
        with self._lock:
            st = self._store.get(conversation_id)
            if st is None:
                return None
            if time.time() - st.updated_at > self.ttl_seconds:
                logger.info(f"Conversation {conversation_id} expired")
                self._drop(conversation_id)
                return None
            self._touch(conversation_id)
            return st

    def get_or_create(self, conversation_id: str, locale: str = "en") -> ConversationState:
        with self._lock:
            st = self.get(conversation_id)
            if st is not None:
                if locale and locale != st.locale:
                    st.locale = locale
                return st

            new_st = ConversationState(conversation_id=conversation_id, locale=locale)
            self.upsert(new_st)
            return new_st

    def upsert(self, state: ConversationState) -> None:
        with self._lock:
            cid = state.conversation_id
            state.updated_at = time.time()

            if cid not in self._store and len(self._store) >= self.max_items:
                lru_id = self._access_order.pop(0)
                self._store.pop(lru_id, None)
                logger.info(f"Evicted conversation {lru_id}")

            self._store[cid] = state
            self._touch(cid)

    def append_turns(
        self,
        conversation_id: str,
        turns: List[Tuple[str, str]],
        locale: str = "en",
        max_turns: int = 20,
    ) -> ConversationState:
        """
        Append (role, content) pairs to a conversation as one step.
        """
        with self._lock:
            st = self.get_or_create(conversation_id, locale=locale)
            for role, content in turns:
                st.append(role, content, max_turns=max_turns)
            self.upsert(st)
            return st
