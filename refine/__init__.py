"""LLM-Umformulierung für FloatScribe.

Usage:
    from refine import OpenAIRephraser

    rephraser = OpenAIRephraser(api_key)
    text = await rephraser.rephrase(transcript, model="gpt-4o-mini")
"""

from .llm import OpenAIRephraser
from .prompts import DEFAULT_REPHRASE_PROMPT, build_messages, get_rephrase_prompt

__all__ = [
    "OpenAIRephraser",
    "DEFAULT_REPHRASE_PROMPT",
    "build_messages",
    "get_rephrase_prompt",
]
