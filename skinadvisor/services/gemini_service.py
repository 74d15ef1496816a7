"""
Gemini Service for skincare routine generation.
"""
import logging
from functools import lru_cache

import google.generativeai as genai

from skinadvisor.core.config import get_settings
from skinadvisor.models.skin_traits import SkinTraitAssessment

logger = logging.getLogger(__name__)

ROUTINE_PROMPT = """You are a professional dermatologist assistant. A user's skin was
assessed as follows: {description}.

Please write a concise daily skincare routine for this user that includes:
1. A morning routine with product types and key ingredients
2. An evening routine with product types and key ingredients
3. Ingredients to avoid for this skin profile
4. A short note on sun protection

Name ingredients by their common INCI or everyday names.
"""


class RoutineGenerationError(Exception):
    """The language model could not produce a routine."""


class GeminiService:
    """Service for interacting with Google Gemini API."""

    def __init__(self, api_key: str, model_name: str, temperature: float, max_output_tokens: int):
        """Initialize the Gemini service with API key."""
        if not api_key:
            raise RoutineGenerationError("GEMINI_API_KEY is not configured")
        genai.configure(api_key=api_key)
        self.model = genai.GenerativeModel(model_name)
        self.generation_config = {
            "temperature": temperature,
            "max_output_tokens": max_output_tokens,
        }
        logger.info(f"✅ Gemini service initialized with model {model_name}")

    def build_prompt(self, assessment: SkinTraitAssessment) -> str:
        return ROUTINE_PROMPT.format(description=assessment.describe())

    async def generate_routine(self, assessment: SkinTraitAssessment) -> str:
        """
        Generate a skincare routine for a confirmed trait assessment.

        Args:
            assessment: The user's confirmed skin traits

        Returns:
            The routine as plain text
        """
        try:
            response = await self.model.generate_content_async(
                self.build_prompt(assessment),
                generation_config=self.generation_config
            )
            text = response.text
        except Exception as e:
            logger.error(f"Error in generate_routine: {str(e)}")
            raise RoutineGenerationError(f"Routine generation failed: {str(e)}") from e

        if not text or not text.strip():
            raise RoutineGenerationError("Routine generation returned no text")
        return text


@lru_cache()
def get_gemini_service() -> GeminiService:
    """Create the Gemini service on first use so the app starts without credentials."""
    settings = get_settings()
    return GeminiService(
        api_key=settings.GEMINI_API_KEY,
        model_name=settings.GEMINI_MODEL,
        temperature=settings.GEMINI_TEMPERATURE,
        max_output_tokens=settings.GEMINI_MAX_OUTPUT_TOKENS,
    )
