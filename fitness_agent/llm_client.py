"""
Fitness Agent LLM Client Interface
==================================

Provider-agnostic LLM interface with a Gemini implementation.
Errors propagate to the caller; CoachingAgent turns them into replies.
"""

import logging
from typing import Protocol, Optional, Dict, Any, List
from dataclasses import dataclass
import google.generativeai as genai

logger = logging.getLogger(__name__)


@dataclass
class LLMResponse:
    """Response from LLM generation."""
    text: str
    input_tokens: int
    output_tokens: int
    model: str
    metadata: Optional[Dict[str, Any]] = None


class LLMClient(Protocol):
    """
    Protocol for LLM clients.
    All implementations must provide generate() method.
    """

    def generate(
        self,
        prompt: str,
        max_tokens: int = 600,
        temperature: float = 0.7
    ) -> LLMResponse:
        """Generate a response from the LLM."""
        ...


class GeminiClient:
    """Gemini LLM client; the coaching persona goes in as system instruction."""

    def __init__(self, api_key: str, model: str = "gemini-2.0-flash", system_instruction: Optional[str] = None):
        self.api_key = api_key
        self.model_name = model
        genai.configure(api_key=api_key)
        self.model = genai.GenerativeModel(
            model_name=model,
            system_instruction=system_instruction
        )

    def generate(
        self,
        prompt: str,
        max_tokens: int = 600,
        temperature: float = 0.7
    ) -> LLMResponse:
        """Generate response using Gemini."""
        config = genai.GenerationConfig(
            max_output_tokens=max_tokens,
            temperature=temperature
        )

        response = self.model.generate_content(prompt, generation_config=config)

        # Blocked responses come back without content parts
        if not response.candidates or not response.candidates[0].content.parts:
            finish_reason = response.candidates[0].finish_reason if response.candidates else "UNKNOWN"
            logger.warning(f"Gemini returned no content (finish_reason: {finish_reason})")
            return LLMResponse(text="", input_tokens=0, output_tokens=0, model=self.model_name)

        input_tokens = 0
        output_tokens = 0
        if hasattr(response, 'usage_metadata'):
            input_tokens = getattr(response.usage_metadata, 'prompt_token_count', 0)
            output_tokens = getattr(response.usage_metadata, 'candidates_token_count', 0)

        return LLMResponse(
            text=response.text,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            model=self.model_name
        )


class MockLLMClient:
    """Mock LLM client for testing. Records prompts, returns a canned reply."""

    def __init__(self, reply: str = "Mock coaching reply.", error: Optional[Exception] = None):
        self.model_name = "mock"
        self.reply = reply
        self.error = error
        self.prompts: List[str] = []

    @property
    def last_prompt(self) -> Optional[str]:
        return self.prompts[-1] if self.prompts else None

    def generate(
        self,
        prompt: str,
        max_tokens: int = 600,
        temperature: float = 0.7
    ) -> LLMResponse:
        """Return mock response."""
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error

        return LLMResponse(
            text=self.reply,
            input_tokens=len(prompt) // 4,
            output_tokens=len(self.reply) // 4,
            model="mock"
        )
