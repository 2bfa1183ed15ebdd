"""
Roadmapper: AI Engine
=====================
Generates learning roadmaps with an AI provider (Groq by default, Gemini
when AI_PROVIDER=gemini):
  1. Validate the topic before any network call
  2. Build a strict JSON-only instruction for the requested level and style
  3. Call the provider once (no automatic retry, bounded timeout)
  4. Repair and normalize the raw output into RoadmapNodes

Provider failures are mapped to the typed errors in roadmapper.core.errors.
In development, a request the provider rejects as malformed (HTTP 400)
returns a placeholder roadmap instead, so the UI keeps working.
"""

import asyncio
import logging
from typing import Any, List, Optional

import google.generativeai as genai
import groq
import requests
from google.api_core import exceptions as google_exceptions
from groq import AsyncGroq

from roadmapper.core.config import settings
from roadmapper.core.errors import (
    AuthConfigError,
    GenerationFailed,
    RoadmapError,
    ServiceBadRequest,
    ServiceRateLimited,
    ServiceUnauthorized,
)
from roadmapper.schemas.roadmap import Level, RoadmapNode, RoadmapStyle
from roadmapper.services.fallback_generator import create_fallback_nodes
from roadmapper.services.prompt_validator import validate_prompt
from roadmapper.services.response_repair import repair_roadmap

logger = logging.getLogger(__name__)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# CLIENT INITIALIZATION
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

logger.info(f"[AI-ENGINE] Provider: {settings.AI_PROVIDER}")

groq_client: Optional[AsyncGroq] = None
if settings.GROQ_API_KEY:
    # max_retries=0: a failed generation goes back to the caller untouched
    groq_client = AsyncGroq(
        api_key=settings.GROQ_API_KEY,
        timeout=settings.AI_TIMEOUT_SECONDS,
        max_retries=0,
    )
    logger.info("[AI-ENGINE] ✓ Groq client ready")
else:
    logger.warning("[AI-ENGINE] ✗ Groq API key missing")

if settings.GOOGLE_API_KEY:
    genai.configure(api_key=settings.GOOGLE_API_KEY, transport="rest")
    logger.info("[AI-ENGINE] ✓ Gemini client ready")
elif settings.AI_PROVIDER == "gemini":
    logger.warning("[AI-ENGINE] ✗ Google API key missing")


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# PROMPTS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

SYSTEM_PROMPT = (
    "You are a JSON generator API that ONLY outputs valid JSON objects.\n"
    'CRITICAL: Your entire response must be a properly formatted JSON object with the structure {"nodes": [...]}.\n'
    "Do not include ANY explanation text, markdown formatting, or code blocks.\n"
    "Only the raw JSON is allowed in your response."
)

NODE_COUNT_RANGES = {
    Level.beginner: "8-10",
    Level.intermediate: "11-15",
    Level.advanced: "15-18",
}

STYLE_INSTRUCTIONS = {
    RoadmapStyle.week_by_week: (
        "Organize the roadmap as consecutive weeks of study: each node is one week, "
        "and its title names that week's focus."
    ),
    RoadmapStyle.topic_wise: (
        "Organize the roadmap by topic: each node is one self-contained subject area, "
        "ordered from prerequisites to specializations."
    ),
}

RESPONSE_FORMAT_EXAMPLE = (
    "{\n"
    '  "nodes": [\n'
    "    {\n"
    '      "id": "node_1",\n'
    '      "title": "1. First Topic",\n'
    '      "description": ["Point 1", "Point 2", "Point 3"],\n'
    '      "children": ["node_2", "node_3"],\n'
    '      "sequence": 1,\n'
    '      "timeNeeded": 4\n'
    "    }\n"
    "  ]\n"
    "}"
)


def build_roadmap_prompt(prompt: str, level: Level, style: RoadmapStyle) -> str:
    level = Level(level)
    style = RoadmapStyle(style)
    return (
        f'As an expert JSON generator for learning roadmaps, create a valid JSON object '
        f'with a nodes array for a "{prompt}" learning roadmap.\n\n'
        f"RESPONSE FORMAT:\n{RESPONSE_FORMAT_EXAMPLE}\n\n"
        "REQUIREMENTS:\n"
        "- ALL nodes must have: id, title, description (array), children (array), "
        "sequence (number), timeNeeded (hours)\n"
        '- id format: "node_X" where X is a number\n'
        '- title format: must start with sequence number (e.g., "1. Introduction")\n'
        f"- For {level.value} level: create {NODE_COUNT_RANGES[level]} nodes\n"
        "- Ensure proper progression from fundamentals to advanced topics\n"
        "- Maximum 2 child nodes per parent\n"
        "- For time allocation: beginner (1-4h), intermediate (2-6h), advanced (4-10h)\n"
        f"- {STYLE_INSTRUCTIONS[style]}\n\n"
        f"Generate a complete, coherent roadmap for learning {prompt} at a {level.value} level."
    )


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# ERROR MAPPING
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

TIMEOUT_MESSAGE = "The AI service took too long to respond. Please try again."
UNREACHABLE_MESSAGE = "Could not reach the AI service. Please try again later."


def error_for_status(status: Optional[int], detail: Optional[str] = None) -> RoadmapError:
    """Map a provider HTTP status to the matching domain error."""
    if status == 401:
        return ServiceUnauthorized(detail=detail)
    if status == 429:
        return ServiceRateLimited(detail=detail)
    if status == 400:
        return ServiceBadRequest(detail=detail)
    return GenerationFailed(f"AI service error (status {status})", detail=detail)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# PROVIDER CALLS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

async def _call_groq(system_prompt: str, user_prompt: str, client: Optional[Any]) -> Optional[str]:
    """Single Groq chat completion in JSON mode."""
    if client is None:
        raise AuthConfigError("GROQ_API_KEY is not configured in environment variables")

    logger.info(f"[AI-ENGINE] Calling Groq ({settings.GROQ_MODEL})...")
    try:
        completion = await client.chat.completions.create(
            model=settings.GROQ_MODEL,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=settings.AI_TEMPERATURE,
            max_tokens=settings.AI_MAX_TOKENS,
            top_p=settings.AI_TOP_P,
            frequency_penalty=settings.AI_FREQUENCY_PENALTY,
            response_format={"type": "json_object"},
            timeout=settings.AI_TIMEOUT_SECONDS,
        )
    except groq.APIStatusError as e:
        logger.error(f"[AI-ENGINE] Groq returned {e.status_code}: {str(e)[:200]}")
        raise error_for_status(e.status_code, str(e)) from e
    except groq.APITimeoutError as e:
        logger.error("[AI-ENGINE] Groq request timed out")
        raise GenerationFailed(TIMEOUT_MESSAGE) from e
    except groq.APIConnectionError as e:
        logger.error(f"[AI-ENGINE] Groq unreachable: {e}")
        raise GenerationFailed(UNREACHABLE_MESSAGE) from e

    if not completion.choices:
        return None
    logger.info("[AI-ENGINE] ✓ Groq call succeeded")
    return completion.choices[0].message.content


async def _call_gemini(system_prompt: str, user_prompt: str) -> Optional[str]:
    """Single Gemini generation in JSON mode."""
    if not settings.GOOGLE_API_KEY:
        raise AuthConfigError("GOOGLE_API_KEY is not configured in environment variables")

    logger.info(f"[AI-ENGINE] Calling Gemini ({settings.GEMINI_MODEL})...")
    model = genai.GenerativeModel(
        model_name=settings.GEMINI_MODEL,
        generation_config={
            "response_mime_type": "application/json",
            "temperature": settings.AI_TEMPERATURE,
            "max_output_tokens": settings.AI_MAX_TOKENS,
            "top_p": settings.AI_TOP_P,
        },
    )
    full_prompt = f"{system_prompt}\n\nUser Task:\n{user_prompt}"
    try:
        response = await asyncio.to_thread(
            model.generate_content,
            full_prompt,
            request_options={"timeout": settings.AI_TIMEOUT_SECONDS},
        )
        text = response.text
    except google_exceptions.DeadlineExceeded as e:
        logger.error("[AI-ENGINE] Gemini request timed out")
        raise GenerationFailed(TIMEOUT_MESSAGE) from e
    except google_exceptions.GoogleAPICallError as e:
        logger.error(f"[AI-ENGINE] Gemini returned {e.code}: {e.message}")
        raise error_for_status(e.code, e.message) from e
    except requests.exceptions.Timeout as e:
        logger.error("[AI-ENGINE] Gemini request timed out")
        raise GenerationFailed(TIMEOUT_MESSAGE) from e
    except requests.exceptions.RequestException as e:
        logger.error(f"[AI-ENGINE] Gemini unreachable: {e}")
        raise GenerationFailed(UNREACHABLE_MESSAGE) from e
    except ValueError as e:
        # response.text raises when the candidate was blocked or empty
        logger.error(f"[AI-ENGINE] Gemini returned no text: {e}")
        return None

    logger.info("[AI-ENGINE] ✓ Gemini call succeeded")
    return text


async def _call_provider(system_prompt: str, user_prompt: str, client: Optional[Any]) -> Optional[str]:
    """An explicit ``client`` is a Groq-compatible client and always wins."""
    if client is None and settings.AI_PROVIDER == "gemini":
        return await _call_gemini(system_prompt, user_prompt)
    return await _call_groq(system_prompt, user_prompt, client or groq_client)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# GENERATION
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

async def generate_roadmap(
    prompt: str,
    level: Level,
    style: RoadmapStyle,
    *,
    client: Optional[Any] = None,
) -> List[RoadmapNode]:
    """
    Generate a roadmap for ``prompt``.
    Raises a RoadmapError subclass on failure; never retries on its own.
    """
    level = Level(level)
    style = RoadmapStyle(style)
    logger.info(f"[ROADMAP] Starting: topic='{prompt}', level={level.value}, style={style.value}")

    validate_prompt(prompt)
    user_prompt = build_roadmap_prompt(prompt.strip(), level, style)

    try:
        raw = await _call_provider(SYSTEM_PROMPT, user_prompt, client)
    except ServiceBadRequest:
        if settings.is_development:
            logger.warning("[ROADMAP] Provider rejected the request; using placeholder roadmap (development)")
            return create_fallback_nodes(prompt.strip(), level)
        raise

    if not raw or not raw.strip():
        logger.error("[ROADMAP] Provider returned an empty message")
        raise GenerationFailed("Invalid response from AI service")

    raw = raw.strip()
    logger.info(f"[ROADMAP] Raw response length: {len(raw)}")
    logger.debug(f"[ROADMAP] Response preview: {raw[:100]}...{raw[-100:]}")

    nodes = repair_roadmap(raw)
    logger.info(f"[ROADMAP] ✓ Generated {len(nodes)} nodes for '{prompt.strip()}'")
    return nodes
