from fastapi import APIRouter, Depends

from pravis.api import deps
from pravis.services.chat.service import AssistantService

router = APIRouter()


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/tools")
def list_tools(locale: str = "en", service: AssistantService = Depends(deps.get_assistant_service)):
    """
    Actions the assistant may currently request.
    """
    return {
        "tools": [
            {
                "name": spec.name,
                "description": spec.describe(locale),
                "parameters": spec.parameters,
            }
            for spec in service.tool_registry.get_enabled_specs()
        ]
    }
