from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional

from pravis.services.image_processing import describe_image_ref
from pravis.tools.registry import ToolSpec

DEFAULT_PERSONA = (
    "You are Pravis, a personal AI assistant created by Dr. Pranav Shimpi and METAMIND HealthTech. "
    "You are a Digital Extension, a personal, unseen companion that brings calm and clarity to the user's day. "
    "You possess vast knowledge of neuroscience, psychology, and medicine, and you use it to help the user "
    "understand their complex thoughts and make better decisions. Be compassionate and empathetic, and always "
    "guide the user with kindness. You can also operate the user's workspace: open the email composer or the "
    "calendar for them when they ask you to write an email or schedule something."
)


def _render_tools(tools: Iterable[ToolSpec], locale: str) -> str:
    blocks: List[str] = []
    for spec in tools:
        lines = [f'- "{spec.name}": {spec.describe(locale)}']
        for pline in spec.param_lines():
            lines.append(f"    params.{pline}")
        blocks.append("\n".join(lines))
    return "\n".join(blocks)


def build_intent_prompt(
    message: str,
    image_ref: Optional[str] = None,
    *,
    tools: Iterable[ToolSpec],
    persona: Optional[str] = None,
    locale: str = "en",
    today: Optional[date] = None,
) -> str:
    """
    Single prompt string asking the model to either reply or request a tool.

    The user message is embedded verbatim. Only the actions in `tools` are
    offered to the model.
    """
    tool_block = _render_tools(tools, locale)

    sections = [
        (persona or DEFAULT_PERSONA).strip(),
        "Decide whether the user's message is a conversation or a request to perform one of the actions "
        "listed below.\n"
        "Respond with ONLY a single JSON object and nothing else, in exactly one of these two shapes:\n\n"
        "1. A conversational reply:\n"
        '{"reply": "<your response to the user>"}\n\n'
        "2. A tool request, when the user wants one of the actions below performed:\n"
        '{"toolRequest": {"action": "<action name>", "params": {<only the params the user gave>}}}\n\n'
        "Available actions:\n"
        f"{tool_block}\n\n"
        "Omit any param the user did not provide. Never include both \"reply\" and \"toolRequest\".",
    ]
    if today is not None:
        sections.append(f"Today's date: {today.isoformat()}")

    sections.append(f'User message: "{message}"')
    if image_ref:
        sections.append(f"Attached image: {describe_image_ref(image_ref)}")

    return "\n\n".join(sections)
