# Tool definitions for the assistant's intent layer.
# The action set is closed: config may disable an action or reword its
# description, it cannot introduce new actions.

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel

from pravis.tools.schemas import create_tool_validator

logger = logging.getLogger("pravis.tools")

EMAIL_COMPOSE_ACTION = "navigateToEmailCompose"
CALENDAR_ACTION = "navigateToCalendar"

ISO_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


@dataclass
class ToolSpec:
    """
    ToolSpec: a tool the model may request instead of replying.

    - name: action name the model must emit in toolRequest.action
    - description: localized text shown to the model
    - parameters: JSONSchema for toolRequest.params
    - handler: dispatcher handler key
    - enabled: can be disabled via config
    """
    name: str
    description: Dict[str, str]
    parameters: Dict[str, Any]
    handler: Optional[str] = None
    enabled: bool = True

    def describe(self, locale: str) -> str:
        return (self.description.get(locale) or self.description.get("en") or "").strip()

    def param_lines(self) -> List[str]:
        """
        Human readable "name (type, optional): description" lines for the prompt.
        """
        props = (self.parameters or {}).get("properties", {}) or {}
        required = set((self.parameters or {}).get("required", []) or [])
        lines = []
        for pname, pdef in props.items():
            kind = pdef.get("type", "string")
            flag = "required" if pname in required else "optional"
            desc = pdef.get("description", "")
            lines.append(f'"{pname}" ({kind}, {flag}): {desc}'.rstrip(": "))
        return lines


class ToolRegistry:
    """
    Built-in tool specs, optionally adjusted by the "tools" section of the
    assistant config:

    {
      "tools": {
        "navigateToCalendar": {
          "enabled": true,
          "description": {"en": "..."}
        }
      }
    }
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self._tools: Dict[str, ToolSpec] = self._load_tools()
        self._validators: Dict[str, Type[BaseModel]] = {}

    # ----------------------------
    # Public APIs
    # ----------------------------

    def get_tool_specs(self) -> List[ToolSpec]:
        return list(self._tools.values())

    def get_enabled_specs(self) -> List[ToolSpec]:
        return [spec for spec in self._tools.values() if spec.enabled]

    def get(self, name: str) -> Optional[ToolSpec]:
        spec = self._tools.get(name)
        if spec and spec.enabled:
            return spec
        return None

    def get_tool_handlers(self) -> Dict[str, str]:
        out: Dict[str, str] = {}
        for name, spec in self._tools.items():
            if spec.handler:
                out[name] = spec.handler
        return out

    def validator_for(self, name: str) -> Optional[Type[BaseModel]]:
        spec = self.get(name)
        if not spec:
            return None
        if name not in self._validators:
            self._validators[name] = create_tool_validator(name, spec.parameters)
        return self._validators[name]

    # ----------------------------
    # Internal
    # ----------------------------

    def _load_tools(self) -> Dict[str, ToolSpec]:
        tools = self._default_tools()
        cfg_tools = (self.config.get("tools") or {}) if isinstance(self.config, dict) else {}

        for name, raw in cfg_tools.items():
            if name not in tools:
                logger.warning("Ignoring unknown tool '%s' in config; the action set is fixed.", name)
                continue
            if not isinstance(raw, dict):
                continue
            spec = tools[name]
            spec.enabled = bool(raw.get("enabled", spec.enabled))
            description = raw.get("description")
            if isinstance(description, dict):
                spec.description = {**spec.description, **description}

        return tools

    def _default_tools(self) -> Dict[str, ToolSpec]:
        return {
            EMAIL_COMPOSE_ACTION: ToolSpec(
                name=EMAIL_COMPOSE_ACTION,
                description={
                    "en": "Open the email composer, prefilled with whatever recipient, subject and body the user gave.",
                },
                parameters={
                    "type": "object",
                    "properties": {
                        "to": {"type": "string", "description": "recipient email address"},
                        "subject": {"type": "string", "description": "subject line"},
                        "body": {"type": "string", "description": "email body text"},
                    },
                    "additionalProperties": False,
                },
                handler="email_compose",
            ),
            CALENDAR_ACTION: ToolSpec(
                name=CALENDAR_ACTION,
                description={
                    "en": "Open the calendar with a new event form, prefilled with the date, title and start time the user gave.",
                },
                parameters={
                    "type": "object",
                    "properties": {
                        "date": {"type": "string", "pattern": ISO_DATE_PATTERN, "description": "event date as YYYY-MM-DD"},
                        "summary": {"type": "string", "description": "event title"},
                        "startTime": {"type": "string", "pattern": HHMM_PATTERN, "description": "start time as 24h HH:MM"},
                    },
                    "additionalProperties": False,
                },
                handler="calendar",
            ),
        }
