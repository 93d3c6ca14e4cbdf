from __future__ import annotations

import logging
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from pravis.core.config import settings
from pravis.services.chat.parser import load_structured_output
from pravis.services.image_processing import describe_image_ref, is_data_uri, normalize_data_uri

logger = logging.getLogger("pravis.flows.creative")


class BrainstormResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    brainstorming_session: str = Field(alias="brainstormingSession")
    potential_solutions: List[str] = Field(alias="potentialSolutions")
    key_insights: List[str] = Field(alias="keyInsights")
    next_steps: Optional[str] = Field(default=None, alias="nextSteps")


_BRAINSTORM_TEMPLATE = """\
You are a creative brainstorming facilitator. Your goal is to help the user generate innovative ideas to solve a problem.

Please use coaching frameworks to guide the brainstorming session.

The brainstorming session should cover the following:
- Topic: {topic}
- Problem Statement: {problem_statement}
- Desired Outcome: {desired_outcome}
{constraints}
Based on the information above, respond ONLY with a JSON object:
{{
  "brainstormingSession": "detailed summary of the brainstorming session",
  "potentialSolutions": ["..."],
  "keyInsights": ["..."],
  "nextSteps": "suggested next steps to implement the solutions"
}}
"""

_SOCIAL_TEMPLATE = """\
You are an expert Social Media Strategist. Your goal is to help the user with their social media presence.

Generate a post for the specified social media platform based on the user's instructions.

Be creative, helpful, and align your suggestions with modern social media best practices for the target platform.
{image}
Platform: {platform}
User's Instructions: {instructions}

Your generated post:"""


def facilitate_brainstorming(
    llm,
    topic: str,
    problem_statement: str,
    desired_outcome: str,
    known_constraints: Optional[str] = None,
) -> BrainstormResult:
    constraints = f"- Known Constraints: {known_constraints}\n" if known_constraints else ""
    prompt = _BRAINSTORM_TEMPLATE.format(
        topic=topic,
        problem_statement=problem_statement,
        desired_outcome=desired_outcome,
        constraints=constraints,
    )
    raw = llm.generate_text(prompt)
    return load_structured_output(raw, BrainstormResult)


def social_media_post(llm, platform: str, instructions: str, image_ref: Optional[str] = None) -> str:
    """
    Post text for `platform`. An attached image is sent alongside the prompt.
    """
    images = None
    image_block = ""
    if image_ref:
        if is_data_uri(image_ref):
            image_ref = normalize_data_uri(image_ref, max_edge=settings.image_max_edge)
        images = [image_ref]
        image_block = (
            "\nThe user has provided an image. Your post should be relevant to this image.\n"
            f"Image: {describe_image_ref(image_ref)}\n"
        )

    prompt = _SOCIAL_TEMPLATE.format(image=image_block, platform=platform, instructions=instructions)
    post = llm.generate_text(prompt, images=images).strip()
    logger.info(f"Generated {platform} post ({len(post)} chars)")
    return post
