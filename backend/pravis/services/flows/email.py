"""
Email drafting flows.

- draft_email_reply: conversational composition, returns a structured draft.
- draft_email_replies: reply to a received email in a requested tone.
"""
from __future__ import annotations

import logging
from typing import List, Literal

from pydantic import BaseModel

from pravis.services.chat.parser import load_structured_output

logger = logging.getLogger("pravis.flows.email")


class HistoryMessage(BaseModel):
    role: Literal["user", "model"]
    content: str


class EmailDraft(BaseModel):
    to: str
    subject: str
    tone: str
    body: str


_COMPOSE_TEMPLATE = """\
You are Pravis, an intelligent email composition assistant. Users will interact with you to create emails. \
Parse their input and generate complete, professional emails based on their requirements.

**Input Processing:**
- Extract recipient information from the user's prompt.
- Identify the main message/request.
- Determine the appropriate tone (e.g., Professional, Formal, Casual, Urgent, Diplomatic, Follow-up).
- Understand any specific requirements or context from the conversation history.

**Response Format:**
Respond ONLY with a JSON object with the string fields "to", "subject", "tone" and "body".
{history}
Current User Request: "{prompt}"

Based on the request and history, generate the email draft.
"""

_REPLY_TEMPLATE = """\
You are Pravis, a personal assistant designed to draft email replies.

Based on the email content, desired tone, and any specific parameters, draft an email reply.

Email Content: {email_content}
Tone: {tone}
Parameters: {parameters}

Respond with only the reply text.

Reply:"""


def _format_history(history: List[HistoryMessage]) -> str:
    if not history:
        return ""
    lines = ["", "Conversation History:"]
    for msg in history:
        speaker = "User" if msg.role == "user" else "Pravis"
        lines.append(f"{speaker}: {msg.content}")
    lines.append("")
    return "\n".join(lines)


def draft_email_reply(llm, history: List[HistoryMessage], prompt: str) -> EmailDraft:
    """
    Raises FlowOutputError when the model does not return a usable draft.
    """
    text = _COMPOSE_TEMPLATE.format(history=_format_history(history), prompt=prompt)
    raw = llm.generate_text(text)
    draft = load_structured_output(raw, EmailDraft)
    logger.info(f"Drafted email to='{draft.to}' tone='{draft.tone}'")
    return draft


def draft_email_replies(llm, email_content: str, tone: str, parameters: str) -> str:
    text = _REPLY_TEMPLATE.format(email_content=email_content, tone=tone, parameters=parameters)
    return llm.generate_text(text).strip()
