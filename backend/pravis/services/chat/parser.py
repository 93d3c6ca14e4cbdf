"""
Decoding of raw model output into either a conversational reply or a tool request.

The model is asked to answer with exactly one JSON object:

    {"reply": "..."}
    {"toolRequest": {"action": "<name>", "params": {...}}}

Decoding never raises. Anything that does not cleanly match one of the two
shapes becomes the fixed FALLBACK_REPLY.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from pravis.core.errors import FlowOutputError
from pravis.tools.base import ToolRequest
from pravis.tools.registry import ToolRegistry

logger = logging.getLogger("pravis.chat.parser")

FALLBACK_REPLY = "Sorry, I could not understand or process your request."

M = TypeVar("M", bound=BaseModel)


def extract_json_block(raw: Any) -> Optional[str]:
    """
    Substring from the first "{" to the last "}" (inclusive), or None.

    Deliberately naive: prose containing braces around the JSON, or several
    JSON objects, produce a block that usually fails to parse.
    """
    if not isinstance(raw, str):
        return None
    start = raw.find("{")
    end = raw.rfind("}")
    if start == -1 or end == -1 or end < start:
        return None
    return raw[start:end + 1]


class _ToolRequestEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    action: str
    params: Optional[Dict[str, Any]] = None


class _ModelOutput(BaseModel):
    model_config = ConfigDict(extra="ignore")

    reply: Optional[str] = None
    tool_request: Optional[_ToolRequestEnvelope] = Field(default=None, alias="toolRequest")

    @model_validator(mode="after")
    def _exactly_one(self):
        if (self.reply is None) == (self.tool_request is None):
            raise ValueError("expected exactly one of 'reply' or 'toolRequest'")
        return self


@dataclass(frozen=True)
class AssistantResult:
    """
    Outcome of one user message: exactly one of reply / tool_request is set.
    `ok` is False when the fallback reply was substituted.
    """
    reply: Optional[str] = None
    tool_request: Optional[ToolRequest] = None
    ok: bool = True

    @classmethod
    def fallback(cls) -> "AssistantResult":
        return cls(reply=FALLBACK_REPLY, ok=False)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.reply is not None:
            out["reply"] = self.reply
        if self.tool_request is not None:
            out["toolRequest"] = self.tool_request.model_dump()
        return out


class ResponseParser:
    """
    Validates model output against the closed reply/toolRequest schema.
    Tool params are checked with the registry's per-action validators.
    """
    def __init__(self, registry: ToolRegistry):
        self.registry = registry

    def parse(self, raw: Any) -> AssistantResult:
        block = extract_json_block(raw)
        if block is None:
            logger.info("Model output has no JSON object; using fallback reply")
            return AssistantResult.fallback()

        try:
            data = json.loads(block)
        except (ValueError, RecursionError) as e:
            logger.info(f"Model output is not valid JSON ({e}); using fallback reply")
            return AssistantResult.fallback()

        if not isinstance(data, dict):
            return AssistantResult.fallback()

        try:
            out = _ModelOutput.model_validate(data)
        except ValidationError as e:
            logger.info(f"Model output does not match reply/toolRequest schema: {e.error_count()} error(s)")
            return AssistantResult.fallback()

        if out.reply is not None:
            return AssistantResult(reply=out.reply)

        envelope = out.tool_request
        validator = self.registry.validator_for(envelope.action)
        if validator is None:
            logger.warning(f"Model requested unknown action '{envelope.action}'; using fallback reply")
            return AssistantResult.fallback()

        try:
            params = validator.model_validate(envelope.params or {})
        except ValidationError as e:
            logger.info(f"Invalid params for '{envelope.action}': {e.error_count()} error(s)")
            return AssistantResult.fallback()

        return AssistantResult(
            tool_request=ToolRequest(action=envelope.action, params=params.model_dump(exclude_none=True))
        )


def load_structured_output(raw: Any, model_cls: Type[M]) -> M:
    """
    Decode a structured flow's output with the same brace extraction.

    Raises:
        FlowOutputError: no JSON object, invalid JSON or schema mismatch.
    """
    block = extract_json_block(raw)
    if block is None:
        raise FlowOutputError("No JSON object found in the AI response.", raw=raw or "")
    try:
        return model_cls.model_validate_json(block)
    except (ValidationError, RecursionError) as e:
        logger.error(f"Failed to parse {model_cls.__name__} from AI output: {e}")
        raise FlowOutputError("Failed to parse AI response as JSON. The format was invalid.", raw=raw) from e
