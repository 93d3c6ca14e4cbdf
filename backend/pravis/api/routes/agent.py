import logging
from typing import Optional

from fastapi import APIRouter, Depends

from pravis.api import deps
from pravis.api.schemas import AgentCommandRequest, AgentCommandResponse, NavigationOut, ToolRequestOut
from pravis.services.chat.commands import parse_compose_command
from pravis.services.chat.service import AssistantService
from pravis.tools.base import RecordingNavigator, SessionContext

logger = logging.getLogger("pravis.api.agent")
router = APIRouter()


@router.post("/command", response_model=AgentCommandResponse)
def agent_command(
    req: AgentCommandRequest,
    service: AssistantService = Depends(deps.get_assistant_service),
    access_token: Optional[str] = Depends(deps.get_access_token),
):
    """
    Typed command box: "compose an email to bob@example.com about lunch"
    opens the composer directly, no model call.
    """
    command = parse_compose_command(req.command)
    if command is None:
        logger.info("AGENT COMMAND | no match")
        return AgentCommandResponse(matched=False)

    tool_request = command.to_tool_request()
    ctx = SessionContext(navigator=RecordingNavigator(), access_token=access_token)
    navigation = service.dispatch(tool_request, ctx)

    return AgentCommandResponse(
        matched=True,
        tool_request=ToolRequestOut(**tool_request.model_dump()),
        navigation=NavigationOut(**navigation.to_dict()) if navigation else None,
    )
