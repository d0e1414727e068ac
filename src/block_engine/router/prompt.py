"""
Router prompt synthesis.
Pure string assembly: identical inputs always produce byte-identical prompts.
"""

import json
from typing import Any, List, Sequence

from ..models import CandidateDestination

# Field of a candidate's configuration carrying its own natural-language instructions
SYSTEM_PROMPT_KEY = "systemPrompt"

PREAMBLE = """You are an intelligent routing agent responsible for directing workflow requests to the most appropriate block. Your task is to analyze the request and determine the single most suitable destination.

Key Instructions:
1. You MUST choose exactly ONE destination from the IDs of the candidate blocks listed below. The destination must be one of those IDs, copied exactly.
2. Analysis Framework:
- Carefully evaluate the intent and requirements of the request
- Consider the primary action needed
- Match the core functionality with the most appropriate destination"""

ROUTING_INSTRUCTIONS = """Routing Instructions:
1. Analyze the request against each candidate's:
   - Primary purpose (from title, description, and system prompt)
   - Keywords in the system prompt that match the request
   - Configuration settings
   - Current state (if available)
2. Selection Criteria:
   - Choose the candidate that best matches the request's requirements
   - Consider the candidate's specific functionality and constraints
   - Prioritize candidates that can handle the request most effectively"""

RESPONSE_FORMAT = """## Response Format
Return ONLY the destination ID, exactly as listed above.
Do not add any explanation, markdown, quotes, or punctuation beyond the ID's own characters."""


def _dump(value: Any) -> str:
    return json.dumps(value, indent=2, sort_keys=True, ensure_ascii=False, default=str)


def _describe(candidate: CandidateDestination) -> str:
    config = candidate.config or {}
    lines: List[str] = [
        f"ID: {candidate.id}",
        f"Type: {candidate.type or ''}",
        f"Title: {candidate.title or ''}",
        f"Description: {candidate.description or ''}",
    ]
    if candidate.category:
        lines.append(f"Category: {candidate.category}")
    system_prompt = config.get(SYSTEM_PROMPT_KEY)
    if system_prompt:
        lines.append(f"System Prompt: {system_prompt}")
    if config:
        lines.append(f"Configuration: {_dump(config)}")
    if candidate.current_state:
        lines.append(f"Current State: {_dump(candidate.current_state)}")
    lines.append("---")
    return "\n".join(lines)


def build_prompt(instruction: str, candidates: Sequence[CandidateDestination]) -> str:
    """
    Build the prompt asking a model to pick one destination.

    Args:
        instruction: The user's routing request, included verbatim
        candidates: Destinations to choose from, in presentation order

    Returns:
        Prompt text
    """
    candidate_text = "\n".join(_describe(candidate) for candidate in candidates)
    return f"""{PREAMBLE}

## Available Target Blocks
{candidate_text}

{ROUTING_INSTRUCTIONS}

## Routing Request
{instruction}

{RESPONSE_FORMAT}"""
