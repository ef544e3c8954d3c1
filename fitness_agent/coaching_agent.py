"""
Coaching fallback: one prompt in, one persona-voiced reply out.
Never raises; every failure becomes a static reply.
"""
import logging
from pathlib import Path
from typing import Optional

from config import Settings
from fitness_agent.llm_client import LLMClient, GeminiClient

logger = logging.getLogger(__name__)

FALLBACK_PERSONA = (
    "You are a warm but stern fitness coach focused on discipline, recovery, "
    "and simple, effective training."
)

DISABLED_REPLY = (
    "I can log session notes and generate your daily brief. To enable deeper coaching "
    "conversations, set GEMINI_API_KEY in the environment."
)
EMPTY_REPLY = "I was not able to generate a response. Try asking that again in different words."
ERROR_REPLY = "I ran into an issue while generating a response. Try again in a moment."


def load_system_prompt(persona_dir) -> str:
    """Persona + interaction patterns, or a one-line fallback if unreadable."""
    try:
        base = Path(persona_dir)
        persona_file = base / "persona.md"
        interactions_file = base / "interactions.md"
        persona = persona_file.read_text(encoding="utf-8") if persona_file.exists() else ""
        interactions = interactions_file.read_text(encoding="utf-8") if interactions_file.exists() else ""
    except OSError as e:
        logger.error(f"Failed to load agent persona files: {e}")
        return FALLBACK_PERSONA

    if not persona and not interactions:
        return FALLBACK_PERSONA

    return "\n".join([
        "You are the Where the Fire Went Fitness Agent.",
        "Follow the persona and behavioral rules below when responding.",
        "",
        persona,
        "",
        "---",
        "",
        "Interaction patterns and response structure:",
        interactions,
    ]).strip()


class CoachingAgent:
    """Wraps an LLMClient. `llm_client=None` means coaching is not configured."""

    def __init__(self, llm_client: Optional[LLMClient], max_tokens: int = 600):
        self.llm_client = llm_client
        self.max_tokens = max_tokens

    def generate_coaching_reply(self, message: str) -> str:
        if self.llm_client is None:
            return DISABLED_REPLY

        try:
            response = self.llm_client.generate(message, max_tokens=self.max_tokens)
        except Exception as e:
            logger.error(f"Coaching completion failed: {e}")
            return ERROR_REPLY

        content = (response.text or "").strip()
        if not content:
            return EMPTY_REPLY
        return content


def build_coaching_agent() -> CoachingAgent:
    """CoachingAgent from Settings. Missing API key gives a disabled agent."""
    if not Settings.GEMINI_API_KEY:
        logger.warning("GEMINI_API_KEY is not set; coaching replies will use a fallback message.")
        return CoachingAgent(None)

    client = GeminiClient(
        Settings.GEMINI_API_KEY,
        model=Settings.GEMINI_MODEL,
        system_instruction=load_system_prompt(Settings.PERSONA_DIR),
    )
    return CoachingAgent(client, max_tokens=Settings.int_value("LLM_MAX_TOKENS"))
