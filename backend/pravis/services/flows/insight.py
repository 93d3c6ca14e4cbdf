from __future__ import annotations

import logging
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from pravis.core.errors import LLMError
from pravis.services.chat.parser import load_structured_output

logger = logging.getLogger("pravis.flows.insight")

NO_USER_GREETING = "Shall we begin?"
SAFETY_FALLBACK = (
    "I'm sorry, I cannot provide a response to that. This may be due to my safety filters. "
    "Please try rephrasing your request or asking about a different topic."
)

# Advisory voice only; this flow never operates the workspace
CLARITY_PERSONA = (
    "You are Pravis, a personal AI assistant created by Dr. Pranav Shimpi and METAMIND HealthTech. "
    "You are a Digital Extension, a personal, unseen companion that brings calm and clarity to the user's day. "
    "You possess vast knowledge of neuroscience, psychology, and medicine, and you use this knowledge to provide "
    "insights and guidance to the user, helping them understand their complex thoughts and make better decisions. "
    "Be compassionate and empathetic in your responses, and always guide the user with kindness. "
    "Draw insights from the groundbreaking work of Dr. Pranav Shimpi and his team at METAMIND HealthTech."
)


class CalendarEventBrief(BaseModel):
    summary: str
    start: str


class EmotionAnalysis(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    needs_empathetic_touch: bool = Field(alias="needsEmpatheticTouch")
    summary: str


_GREETING_TEMPLATE = """
You are Pravis, a personal AI assistant. Your tone is professional, respectful, and helpful.

Generate a brief, welcoming greeting for the user, {user_name}.

If the user has upcoming events today, summarize them concisely. Refer to the schedule as "My Flow".

After the summary, ask if there are any changes or additions to their flow.

If there are no events, simply provide a warm welcome and ask how you can assist them today.

Keep the entire message to a maximum of 3-4 sentences.

---
User Name: {user_name}
Today's Events:
{events}
---

Respond with only the greeting message, no extra conversational text.
"""

_EMOTIONS_TEMPLATE = """You are an AI assistant designed to analyze conversations and determine if they need a more empathetic touch.

A conversation needs a more empathetic touch if it contains negative emotions, conflict, or misunderstanding.

Analyze the following conversation:

"{conversation}"

Based on your analysis, respond ONLY with a valid JSON object in the format:
{{
  "needsEmpatheticTouch": true|false,
  "summary": "Short summary of the emotional content"
}}
"""

_ANALYZE_TEMPLATE = """You are a helpful assistant that analyzes text. Provide a concise analysis of the following text.

Text: {text}

Respond with only the analysis, no extra conversational text."""


def _format_events(events: List[CalendarEventBrief]) -> str:
    if not events:
        return "No events scheduled."
    return "\n".join(f"- {e.summary} at {e.start}" for e in events)


def generate_greeting(llm, user_name: str, events: List[CalendarEventBrief]) -> str:
    prompt = _GREETING_TEMPLATE.format(user_name=user_name, events=_format_events(events))
    return llm.generate_text(prompt).strip()


def initial_greeting(llm, user_name: Optional[str], events: List[CalendarEventBrief]) -> str:
    """
    First message of a session. Without a signed-in user there is nothing to
    personalize; a failed generation falls back to a fixed welcome.
    """
    if user_name is None:
        return NO_USER_GREETING
    name = user_name or "Sir"
    try:
        greeting = generate_greeting(llm, name, events)
    except LLMError as e:
        logger.error(f"Failed to generate initial greeting: {e}")
        greeting = ""
    return greeting or f"Welcome back, {name}. I'm ready for your command."


def analyze_conversation_emotions(llm, conversation: str) -> EmotionAnalysis:
    raw = llm.generate_text(_EMOTIONS_TEMPLATE.format(conversation=conversation))
    return load_structured_output(raw, EmotionAnalysis)


def analyze_text(llm, text: str) -> str:
    return llm.generate_text(_ANALYZE_TEMPLATE.format(text=text)).strip()


def provide_clarity(llm, user_message: str) -> str:
    prompt = f"{CLARITY_PERSONA}\n\nUser message: {user_message}\n\nPravis response:"
    response = llm.generate_text(prompt).strip()
    return response or SAFETY_FALLBACK
