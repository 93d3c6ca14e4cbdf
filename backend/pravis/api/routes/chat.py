import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from pravis.api import deps
from pravis.api.schemas import (
    ChatRequest,
    ChatResponse,
    ChatTurnOut,
    HistoryResponse,
    NavigationOut,
    ToolRequestOut,
)
from pravis.core.config import settings
from pravis.core.errors import ImageProcessingError
from pravis.core.logging import open_session_logger
from pravis.services.chat.service import AssistantService
from pravis.tools.base import RecordingNavigator, SessionContext

logger = logging.getLogger("pravis.api.chat")
router = APIRouter()


@router.post("", response_model=ChatResponse)
def chat(
    req: ChatRequest,
    service: AssistantService = Depends(deps.get_assistant_service),
    access_token: Optional[str] = Depends(deps.get_access_token),
):
    """
    One user message in, either a reply or a tool request (plus the navigation
    it triggered) out. Model and transport failures come back as the fallback
    reply, not as an HTTP error.
    """
    session_logger = open_session_logger(settings, req.conversation_id)
    ctx = SessionContext(
        navigator=RecordingNavigator(),
        conversation_id=req.conversation_id,
        locale=req.locale,
        access_token=access_token,
        settings=settings,
        session_logger=session_logger,
    )

    logger.info(f"CHAT START | chars={len(req.message)} | image={bool(req.image_data_uri)} | locale={req.locale}")
    try:
        result, navigation = service.respond(req.message, req.image_data_uri, ctx)
    except ImageProcessingError as e:
        session_logger.error(f"IMAGE ERROR: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    finally:
        session_logger.close()

    return ChatResponse(
        reply=result.reply,
        tool_request=ToolRequestOut(**result.tool_request.model_dump()) if result.tool_request else None,
        navigation=NavigationOut(**navigation.to_dict()) if navigation else None,
        display_text=service.display_text(result, req.locale),
        conversation_id=req.conversation_id,
    )


@router.get("/{conversation_id}/history", response_model=HistoryResponse)
def history(conversation_id: str, service: AssistantService = Depends(deps.get_assistant_service)):
    turns = service.get_history(conversation_id)
    if turns is None:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return HistoryResponse(
        conversation_id=conversation_id,
        turns=[ChatTurnOut(role=t.role, content=t.content) for t in turns],
    )
