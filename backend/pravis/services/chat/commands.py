import re
from dataclasses import dataclass
from typing import Optional

from pravis.tools.base import ToolRequest
from pravis.tools.registry import EMAIL_COMPOSE_ACTION

# "compose an email to alice@gmail.com about the new plan"
_COMPOSE_RE = re.compile(r"compose( an)? email to\s+([^\s]+@[^\s]+)(?: about (.+))?", re.IGNORECASE)
_LOOSE_TO_RE = re.compile(r"to (\S+@\S+\.\w+)")
_LOOSE_SUBJECT_RE = re.compile(r"subject (?:is )?(.+)", re.IGNORECASE)


@dataclass
class ComposeCommand:
    to: Optional[str] = None
    about: Optional[str] = None

    def to_tool_request(self) -> ToolRequest:
        params = {}
        if self.to:
            params["to"] = self.to
        if self.about:
            params["subject"] = self.about
        return ToolRequest(action=EMAIL_COMPOSE_ACTION, params=params)


def parse_compose_command(text: str) -> Optional[ComposeCommand]:
    """
    Typed-command shortcut for the email composer, no model call involved.
    Returns None when the text is not a compose command.
    """
    text = text or ""
    m = _COMPOSE_RE.search(text)
    if m:
        about = m.group(3).strip() if m.group(3) else None
        return ComposeCommand(to=m.group(2), about=about or None)

    if re.search(r"email", text, re.IGNORECASE) and re.search(r"compose", text, re.IGNORECASE):
        to_m = _LOOSE_TO_RE.search(text)
        subject_m = _LOOSE_SUBJECT_RE.search(text)
        return ComposeCommand(
            to=to_m.group(1) if to_m else None,
            about=subject_m.group(1) if subject_m else None,
        )
    return None
