import logging
from typing import Callable, TypeVar

from fastapi import APIRouter, Depends, HTTPException

from pravis.api import deps
from pravis.api.schemas import (
    BrainstormRequest,
    ClarityRequest,
    ConversationRequest,
    DraftEmailRepliesRequest,
    DraftEmailReplyRequest,
    FlowResult,
    GreetingRequest,
    SocialMediaRequest,
    TextRequest,
    TextResponse,
)
from pravis.core.errors import FlowOutputError, ImageProcessingError, LLMError
from pravis.services.flows import creative, email, insight

logger = logging.getLogger("pravis.api.flows")
router = APIRouter()

T = TypeVar("T")


def _run(name: str, fn: Callable[[], T]) -> T:
    try:
        return fn()
    except ImageProcessingError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except FlowOutputError as e:
        logger.error(f"FLOW {name} | bad model output: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    except LLMError as e:
        logger.error(f"FLOW {name} | LLM error: {e}")
        raise HTTPException(status_code=502, detail="The language model is unavailable. Please try again later.")


@router.post("/draft-email-reply", response_model=FlowResult)
def draft_email_reply(req: DraftEmailReplyRequest, llm=Depends(deps.get_llm)):
    draft = _run("draft-email-reply", lambda: email.draft_email_reply(llm, req.history, req.prompt))
    return FlowResult(result=draft.model_dump())


@router.post("/draft-email-replies", response_model=TextResponse)
def draft_email_replies(req: DraftEmailRepliesRequest, llm=Depends(deps.get_llm)):
    text = _run(
        "draft-email-replies",
        lambda: email.draft_email_replies(llm, req.email_content, req.tone, req.parameters),
    )
    return TextResponse(text=text)


@router.post("/brainstorm", response_model=FlowResult)
def brainstorm(req: BrainstormRequest, llm=Depends(deps.get_llm)):
    result = _run(
        "brainstorm",
        lambda: creative.facilitate_brainstorming(
            llm, req.topic, req.problem_statement, req.desired_outcome, req.known_constraints
        ),
    )
    return FlowResult(result=result.model_dump())


@router.post("/social-media", response_model=TextResponse)
def social_media(req: SocialMediaRequest, llm=Depends(deps.get_llm)):
    post = _run(
        "social-media",
        lambda: creative.social_media_post(llm, req.platform, req.instructions, req.image_data_uri),
    )
    return TextResponse(text=post)


@router.post("/greeting", response_model=TextResponse)
def greeting(req: GreetingRequest, llm=Depends(deps.get_llm)):
    return TextResponse(text=insight.initial_greeting(llm, req.user_name, req.events))


@router.post("/analyze-emotions", response_model=FlowResult)
def analyze_emotions(req: ConversationRequest, llm=Depends(deps.get_llm)):
    analysis = _run("analyze-emotions", lambda: insight.analyze_conversation_emotions(llm, req.conversation))
    return FlowResult(result=analysis.model_dump())


@router.post("/analyze-text", response_model=TextResponse)
def analyze_text(req: TextRequest, llm=Depends(deps.get_llm)):
    return TextResponse(text=_run("analyze-text", lambda: insight.analyze_text(llm, req.text)))


@router.post("/clarity", response_model=TextResponse)
def clarity(req: ClarityRequest, llm=Depends(deps.get_llm)):
    return TextResponse(text=_run("clarity", lambda: insight.provide_clarity(llm, req.user_message)))
