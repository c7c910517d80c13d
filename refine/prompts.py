"""LLM-Prompts für die Umformulierung."""

DEFAULT_REPHRASE_PROMPT = (
    "You are a professional editor who helps rephrase text to make it more clear, "
    "concise, and professional. Maintain the original meaning and details but "
    "improve the clarity and professionalism."
)


def get_rephrase_prompt(prompt: str | None = None) -> str:
    """Gibt den Custom-Prompt zurück, leere Werte fallen auf den Default zurück."""
    if prompt and prompt.strip():
        return prompt.strip()
    return DEFAULT_REPHRASE_PROMPT


def build_messages(text: str, prompt: str | None = None) -> list[dict]:
    """Chat-Nachrichten: Anweisung als system, Text als user."""
    return [
        {"role": "system", "content": get_rephrase_prompt(prompt)},
        {"role": "user", "content": text},
    ]
