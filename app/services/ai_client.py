"""
OpenAI-backed idea expansion and market research.

Both calls go to an OpenAI-compatible ``/chat/completions`` endpoint over
httpx. Any transport error, non-2xx status, empty completion or (for idea
generation) unparsable JSON is raised as ``AIServiceError``; callers turn
that into a 500. Nothing is retried.
"""

import json
import logging
import re
from typing import Any, Dict, List

import httpx

from app.config import settings
from app.schemas.idea import GeneratedIdea

logger = logging.getLogger(__name__)

IDEAS_SYSTEM_PROMPT = (
    "You are a creative business idea generator. Generate innovative, "
    "practical, and marketable business ideas."
)
RESEARCH_SYSTEM_PROMPT = (
    "You are a professional market research analyst. Provide comprehensive, "
    "data-driven market analysis and business insights."
)


class AIServiceError(Exception):
    """The completion service failed or returned something unusable."""


def _strip_code_fences(text: str) -> str:
    fenced = re.match(r"^\s*```[a-zA-Z0-9_-]*\s*([\s\S]*?)\s*```\s*$", text)
    if fenced:
        return fenced.group(1).strip()
    return text.strip()


def build_ideas_prompt(root_title: str, root_description: str, context: str, max_ideas: int) -> str:
    return f"""Based on the following root idea and additional context, generate {max_ideas} new, creative and innovative ideas that build upon or relate to the root idea.

Root Idea:
Title: {root_title}
Description: {root_description}

Additional Context: {context}

Please generate {max_ideas} ideas in the following JSON format:
{{
  "ideas": [
    {{
      "title": "Idea Title",
      "description": "Detailed description of the idea"
    }}
  ]
}}

Make sure each idea is:
1. Unique and creative
2. Feasible and practical
3. Related to the root idea but offers a fresh perspective
4. Has potential market value
5. Is clearly described with specific details
"""


def build_market_research_prompt(title: str, description: str) -> str:
    return f"""Conduct a comprehensive market research analysis for the following business idea:

Title: {title}
Description: {description}

Please provide a detailed market research report that includes:

1. **Market Overview**
   - Market size and potential
   - Target audience analysis
   - Market trends and growth projections

2. **Competitive Analysis**
   - Direct and indirect competitors
   - Competitive advantages and disadvantages
   - Market positioning opportunities

3. **SWOT Analysis**
   - Strengths
   - Weaknesses
   - Opportunities
   - Threats

4. **Financial Projections**
   - Revenue potential
   - Cost considerations
   - Pricing strategy recommendations

5. **Implementation Strategy**
   - Go-to-market strategy
   - Key milestones
   - Risk mitigation

6. **Recommendations**
   - Actionable next steps
   - Success factors
   - Potential pivot points

Format the response in markdown for easy reading.
"""


async def _complete(system_prompt: str, user_prompt: str, temperature: float, max_tokens: int) -> str:
    """POST one chat completion and return the first choice's text."""
    if not settings.OPENAI_API_KEY:
        raise AIServiceError("OPENAI_API_KEY is not configured")

    url = f"{settings.OPENAI_BASE_URL.rstrip('/')}/chat/completions"
    payload: Dict[str, Any] = {
        "model": settings.OPENAI_MODEL,
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        "temperature": temperature,
        "max_tokens": max_tokens,
    }

    try:
        async with httpx.AsyncClient(timeout=settings.AI_TIMEOUT_SECONDS) as client:
            resp = await client.post(
                url,
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {settings.OPENAI_API_KEY}",
                },
                json=payload,
            )
            resp.raise_for_status()
            data = resp.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning(f"Completion request failed: {e}")
        raise AIServiceError("Completion request failed") from e

    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise AIServiceError("Malformed completion response") from e
    if not content or not content.strip():
        raise AIServiceError("No response from the completion service")
    return content


async def generate_ideas(
    root_title: str,
    root_description: str,
    context: str,
    max_ideas: int,
) -> List[GeneratedIdea]:
    """Ask the model for up to ``max_ideas`` ideas derived from the root idea."""
    content = await _complete(
        IDEAS_SYSTEM_PROMPT,
        build_ideas_prompt(root_title, root_description, context, max_ideas),
        temperature=0.8,
        max_tokens=2000,
    )

    try:
        parsed = json.loads(_strip_code_fences(content))
    except json.JSONDecodeError as e:
        logger.warning(f"Idea generation returned non-JSON content: {e}")
        raise AIServiceError("Completion was not valid JSON") from e
    if not isinstance(parsed, dict):
        raise AIServiceError("Completion JSON is not an object")

    ideas: List[GeneratedIdea] = []
    for item in parsed.get("ideas") or []:
        if not isinstance(item, dict):
            continue
        title, description = item.get("title"), item.get("description")
        if isinstance(title, str) and isinstance(description, str) and title.strip() and description.strip():
            ideas.append(GeneratedIdea(title=title.strip(), description=description.strip()))
    return ideas[:max_ideas]


async def generate_market_research(title: str, description: str) -> str:
    """Return a markdown market research report for the idea."""
    return await _complete(
        RESEARCH_SYSTEM_PROMPT,
        build_market_research_prompt(title, description),
        temperature=0.3,
        max_tokens=3000,
    )
