import abc
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Tuple
from urllib.parse import urlencode

from pydantic import BaseModel, Field


class ToolRequest(BaseModel):
    """
    A validated, machine-actionable command emitted by the model, e.g.
    {"action": "navigateToCalendar", "params": {"date": "2024-07-29"}}.
    """
    action: str
    params: Dict[str, str] = Field(default_factory=dict)


@dataclass
class NavigationTarget:
    """
    Where the UI should go next.

    mode="query": params are URL query parameters (see `url`).
    mode="state": params are handed to the destination view as prefill state.
    """
    path: str
    params: Dict[str, str] = field(default_factory=dict)
    mode: Literal["query", "state"] = "query"

    @property
    def url(self) -> str:
        if self.mode == "query" and self.params:
            return f"{self.path}?{urlencode(self.params)}"
        return self.path

    def to_dict(self) -> Dict[str, Any]:
        return {"path": self.path, "params": dict(self.params), "url": self.url, "mode": self.mode}


class Navigator(abc.ABC):
    """Navigation sink provided by the UI caller."""

    @abc.abstractmethod
    def navigate(self, path: str, params: Dict[str, str]) -> None:
        raise NotImplementedError


class RecordingNavigator(Navigator):
    """
    Server-side navigation sink: remembers what was requested so the HTTP
    response can tell the browser where to go.
    """
    def __init__(self):
        self.calls: List[Tuple[str, Dict[str, str]]] = []

    def navigate(self, path: str, params: Dict[str, str]) -> None:
        self.calls.append((path, dict(params)))


@dataclass
class SessionContext:
    """
    Explicit per-request session state handed to the assistant and the
    dispatcher instead of reading auth/provider globals.
    """
    navigator: Navigator
    conversation_id: Optional[str] = None
    locale: str = "en"
    user: Optional[Dict[str, Any]] = None
    access_token: Optional[str] = None
    settings: Any = None
    session_logger: Any = None
    # One-shot: set while a navigation is firing, cleared right after
    pending_intent: Optional[ToolRequest] = None
