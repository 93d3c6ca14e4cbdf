from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field

from pravis.services.flows.email import HistoryMessage
from pravis.services.flows.insight import CalendarEventBrief


class ChatRequest(BaseModel):
    message: str
    image_data_uri: Optional[str] = None  # data URI or URL
    locale: str = "en"
    conversation_id: Optional[str] = None  # UUID for history tracking


class ToolRequestOut(BaseModel):
    action: str
    params: Dict[str, str] = Field(default_factory=dict)


class NavigationOut(BaseModel):
    path: str
    params: Dict[str, str] = Field(default_factory=dict)
    url: str
    mode: Literal["query", "state"]


class ChatResponse(BaseModel):
    reply: Optional[str] = None
    tool_request: Optional[ToolRequestOut] = None
    navigation: Optional[NavigationOut] = None
    display_text: str
    conversation_id: Optional[str] = None


class ChatTurnOut(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class HistoryResponse(BaseModel):
    conversation_id: str
    turns: List[ChatTurnOut]


class AgentCommandRequest(BaseModel):
    command: str


class AgentCommandResponse(BaseModel):
    matched: bool
    tool_request: Optional[ToolRequestOut] = None
    navigation: Optional[NavigationOut] = None


# ---- flows ----

class DraftEmailReplyRequest(BaseModel):
    history: List[HistoryMessage] = Field(default_factory=list)
    prompt: str


class DraftEmailRepliesRequest(BaseModel):
    email_content: str
    tone: str
    parameters: str = ""


class BrainstormRequest(BaseModel):
    topic: str
    problem_statement: str
    desired_outcome: str
    known_constraints: Optional[str] = None


class SocialMediaRequest(BaseModel):
    platform: str
    instructions: str
    image_data_uri: Optional[str] = None


class GreetingRequest(BaseModel):
    user_name: Optional[str] = None
    events: List[CalendarEventBrief] = Field(default_factory=list)


class ConversationRequest(BaseModel):
    conversation: str


class TextRequest(BaseModel):
    text: str


class ClarityRequest(BaseModel):
    user_message: str


class TextResponse(BaseModel):
    text: str


class FlowResult(BaseModel):
    result: Dict[str, Any]
