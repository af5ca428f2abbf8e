"""Groq Vision Language Model (VLM) service for food image analysis."""
import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from ...core.config import get_settings
from ...core.exceptions import AnalysisError
from ...domain.models.nutrition import NutritionAnalysis
from ...domain.models.user_profile import UserDietaryProfile

logger = logging.getLogger(__name__)


NUTRITION_PROMPT = """
Please analyze this food image and estimate the nutritional information based on what you can see.

Look at the food items, portion sizes, ingredients, and cooking methods visible in the image to make educated estimates.

Return the data as a JSON object with the following structure:
{
    "food_description": "brief description of what you see",
    "estimated_serving_size": "your estimate of serving size",
    "calories": estimated_numeric_value,
    "fats": estimated_numeric_value_in_grams,
    "protein": estimated_numeric_value_in_grams,
    "carbs": estimated_numeric_value_in_grams,
    "sugar": estimated_numeric_value_in_grams,
    "cholesterol": estimated_numeric_value_in_milligrams,
    "vitamin_a": estimated_numeric_value_in_grams,
    "vitamin_c": estimated_numeric_value_in_grams,
    "vitamin_d": estimated_numeric_value_in_grams,
    "vitamin_e": estimated_numeric_value_in_grams,
    "vitamin_k": estimated_numeric_value_in_grams,
    "vitamin_b1": estimated_numeric_value_in_grams,
    "vitamin_b2": estimated_numeric_value_in_grams,
    "vitamin_b3": estimated_numeric_value_in_grams,
    "vitamin_b5": estimated_numeric_value_in_grams,
    "vitamin_b6": estimated_numeric_value_in_grams,
    "vitamin_b7": estimated_numeric_value_in_grams,
    "vitamin_b9": estimated_numeric_value_in_grams,
    "vitamin_b12": estimated_numeric_value_in_grams,
    "potassium": estimated_numeric_value_in_milligrams,
    "calcium": estimated_numeric_value_in_milligrams,
    "iron": estimated_numeric_value_in_milligrams,
    "sodium": estimated_numeric_value_in_milligrams,
    "confidence_level": "high/medium/low based on how clearly you can see the food"
}

Unit rules:
- All vitamin values are in grams (150 micrograms = 0.00015, 50 milligrams = 0.05)
- Macronutrients (fats, protein, carbs, sugar) are in grams
- Cholesterol and minerals are in milligrams
- Calories is the numeric value only

Use null for anything you cannot reasonably estimate.
Return ONLY the JSON object, with no additional text.
"""


def extract_json(content: str) -> Optional[Dict[str, Any]]:
    """
    Parse a JSON object out of model output.

    Accepts bare JSON, JSON inside markdown code fences, or JSON surrounded
    by prose. Returns None when no object can be parsed.
    """
    if not content:
        return None

    json_content = content.strip()
    if "```json" in json_content:
        json_start = json_content.find("```json") + 7
        json_end = json_content.find("```", json_start)
        json_content = json_content[json_start:json_end if json_end != -1 else None].strip()
    elif "```" in json_content:
        json_start = json_content.find("```") + 3
        json_end = json_content.find("```", json_start)
        json_content = json_content[json_start:json_end if json_end != -1 else None].strip()

    try:
        parsed = json.loads(json_content)
    except json.JSONDecodeError:
        # Last resort: outermost braces
        start, end = json_content.find("{"), json_content.rfind("}")
        if start == -1 or end <= start:
            return None
        try:
            parsed = json.loads(json_content[start:end + 1])
        except json.JSONDecodeError:
            return None

    return parsed if isinstance(parsed, dict) else None


def build_question_prompt(
    question: str,
    username: str,
    profiles: List[UserDietaryProfile],
) -> str:
    profile_rows = [
        {
            "username": profile.username,
            "diet_preference": profile.diet_preference,
            "diet_restrictions": profile.diet_restrictions,
        }
        for profile in profiles
    ]
    return f"""You are a helpful dietary assistant. A user has asked a question about food in an image. Please analyze the image and answer their question while taking their dietary profile into account.

Here is the user data from our database:
{json.dumps(profile_rows, indent=2)}

The current user asking the question is: {username}

User's question: "{question}"

Please:
1. Find the user "{username}" in the provided data
2. Parse their dietary restrictions from the diet_restrictions field (JSON like {{"restrictions": "red meat"}})
3. Analyze the food in the image considering their restrictions and diet_preference
4. Answer in a few sentences, mentioning any restricted ingredients you can see

Keep your response conversational and personalized for {username}. It will be read aloud, so do not use markdown."""


class GroqVLMService:
    """
    Service for interacting with Groq's Vision Language Model API.

    This service handles:
    - Calling Groq's chat completions API with an image URL
    - Parsing nutrition JSON out of the response
    - Answering free-form dietary questions about a photo
    """

    GROQ_CHAT_URL = "https://api.groq.com/openai/v1/chat/completions"

    # Timeout for API calls (seconds)
    API_TIMEOUT = 30.0

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None):
        """Initialize Groq VLM Service with API key from settings."""
        settings = get_settings()
        self.api_key = settings.groq_api_key
        self.model = settings.vlm_model
        self._http_client = http_client

        if not self.api_key:
            logger.warning("GROQ_API_KEY not found in environment variables")

    async def _chat(
        self,
        prompt: str,
        image_url: str,
        temperature: float = 0.1,
        max_tokens: int = 1000,
    ) -> str:
        """Send one text+image turn and return the text content of the reply."""
        if not self.api_key:
            raise AnalysisError("VLM API key not configured", retryable=False)

        payload = {
            "model": self.model,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {"type": "image_url", "image_url": {"url": image_url}},
                    ],
                }
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }

        logger.debug(f"Calling Groq VLM API with model: {self.model}")
        client = self._http_client or httpx.AsyncClient(timeout=self.API_TIMEOUT)
        try:
            response = await client.post(
                self.GROQ_CHAT_URL,
                headers=headers,
                json=payload,
                timeout=self.API_TIMEOUT,
            )
            response.raise_for_status()
            result = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error from Groq VLM API: {e.response.status_code} - {e.response.text}")
            raise AnalysisError(
                f"VLM API error: {e.response.status_code}",
                retryable=e.response.status_code >= 500,
            ) from e
        except httpx.TimeoutException as e:
            logger.error("Timeout while calling Groq VLM API")
            raise AnalysisError("VLM API timeout") from e
        except httpx.HTTPError as e:
            logger.error(f"Transport error calling Groq VLM API: {e}")
            raise AnalysisError(f"VLM API unreachable: {e}") from e
        finally:
            if client is not self._http_client:
                await client.aclose()

        choices = result.get("choices") or [{}]
        return (choices[0].get("message") or {}).get("content") or ""

    async def analyze_nutrition(self, image_url: str) -> Optional[NutritionAnalysis]:
        """
        Estimate nutrition facts for the food in an uploaded photo.

        Returns:
            NutritionAnalysis, or None when the model output is not parseable

        Raises:
            AnalysisError: on transport or API failure
        """
        content = await self._chat(NUTRITION_PROMPT, image_url)
        if not content:
            logger.warning("Empty response from Groq VLM API")
            return None

        parsed = extract_json(content)
        if parsed is None:
            logger.warning(f"Unparseable nutrition analysis from VLM: {content[:200]!r}")
            return None

        analysis = NutritionAnalysis.from_dict(parsed)
        logger.info(f"Nutrition analysis complete: {analysis.description or 'no description'}")
        return analysis

    async def answer_question(
        self,
        question: str,
        image_url: str,
        username: str,
        profiles: List[UserDietaryProfile],
    ) -> str:
        """
        Answer a spoken dietary question about a photo, personalised to the
        asking user's profile.
        """
        prompt = build_question_prompt(question, username, profiles)
        content = await self._chat(prompt, image_url, temperature=0.3, max_tokens=2000)
        answer = content.strip()
        if not answer:
            return "Unable to analyze the image."
        logger.info(f"Dietary answer generated for {username}")
        return answer
