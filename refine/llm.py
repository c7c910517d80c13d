"""LLM-Umformulierung für FloatScribe.

Schickt den transkribierten Text mit einer Anweisung an die OpenAI
Chat-Completions API und gibt die umformulierte Fassung zurück.
"""

from __future__ import annotations

import logging

from openai import AsyncOpenAI

from config import DEFAULT_REPHRASE_MODEL, REPHRASE_MAX_TOKENS, REPHRASE_TEMPERATURE
from errors import EmptyResponse
from providers.openai import create_client, translate_api_errors
from utils.logging import get_session_id
from utils.timing import log_preview, timed_operation

from .prompts import build_messages

logger = logging.getLogger("floatscribe.refine")


def _extract_message_content(content) -> str:
    """Extrahiert Text aus Message-Content (String, Liste von Parts oder None)."""
    if content is None:
        return ""
    if isinstance(content, list):
        return "".join(
            part.get("text", "") if isinstance(part, dict) else str(part)
            for part in content
        ).strip()
    return str(content).strip()


class OpenAIRephraser:
    """Umformulierung über chat.completions mit niedriger Temperatur."""

    def __init__(
        self,
        api_key: str,
        *,
        timeout: float | None = None,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self.api_key = api_key
        self.timeout = timeout
        self._client = client

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = create_client(self.api_key, timeout=self.timeout)
        return self._client

    async def rephrase(
        self,
        text: str,
        *,
        model: str | None = None,
        prompt: str | None = None,
    ) -> str:
        """Formuliert Text um.

        Args:
            text: Eingabetext (typischerweise ein Transkript)
            model: Chat-Modell (default: gpt-4o-mini)
            prompt: Anweisung als System-Nachricht (default: Editor-Prompt)

        Returns:
            Der umformulierte Text

        Raises:
            AuthError: Key fehlt oder wird abgelehnt
            UpstreamError: Netzwerk, HTTP-Status oder ungültige Antwort
            EmptyResponse: Erfolg ohne verwertbaren Text
        """
        session_id = get_session_id()

        # Leerer Text → nichts zu tun
        if not text or not text.strip():
            logger.debug(f"[{session_id}] Leerer Text, überspringe Umformulierung")
            return text

        client = self._get_client()
        effective_model = model or DEFAULT_REPHRASE_MODEL
        logger.info(f"[{session_id}] Umformulierung: model={effective_model}")
        logger.debug(f"[{session_id}] Input: {len(text)} Zeichen")

        with timed_operation("Umformulierung", logger=logger):
            with translate_api_errors("Umformulierung"):
                response = await client.chat.completions.create(
                    model=effective_model,
                    messages=build_messages(text, prompt),
                    temperature=REPHRASE_TEMPERATURE,
                    max_tokens=REPHRASE_MAX_TOKENS,
                )

        choices = getattr(response, "choices", None) or []
        if not choices:
            raise EmptyResponse("Umformulierung lieferte keine Antwort (choices leer)")
        message = getattr(choices[0], "message", None)
        result = _extract_message_content(getattr(message, "content", None))
        if not result:
            raise EmptyResponse("Umformulierung lieferte leeren Text")

        logger.debug(f"[{session_id}] Output: {log_preview(result)}")
        return result

