import logging
from typing import Any, Optional, Type, TypeVar

from google import genai
from google.genai import types
from pydantic import BaseModel, ValidationError

from ..settings import settings

logger = logging.getLogger("fridgechef.ai")

T = TypeVar("T", bound=BaseModel)


def normalize_model_id(model_string: str) -> str:
    """
    Strip wrapping quotes and a leading ``model=`` from env-supplied model ids.

    'model="gemini-2.5-flash"' -> 'gemini-2.5-flash'
    """
    if not model_string:
        return model_string
    s = model_string.strip()
    if s.lower().startswith("model="):
        s = s[len("model="):]
    return s.strip("\"'").strip()


class AIClient:
    """Thin async wrapper over the Gemini SDK.

    Never raises: every call returns None on failure and records the reason
    in ``last_error`` so callers can surface it in their own errors.
    """

    _instance = None

    def __init__(self, mode: Optional[str] = None, api_key: Optional[str] = None):
        self.mode = mode or settings.ai_mode  # "mock" or "gemini"
        self.api_key = api_key if api_key is not None else settings.gemini_api_key
        self.last_error: Optional[str] = None
        self._client: Optional[genai.Client] = None
        if self.mode == "gemini" and self.api_key:
            self._client = genai.Client(api_key=self.api_key)

    @classmethod
    def get_instance(cls) -> "AIClient":
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def is_available(self) -> bool:
        return self._client is not None

    def _record_error(self, e: Exception) -> None:
        self.last_error = f"{e.__class__.__name__}: {e}"

    async def _generate(self, what: str, model: str, contents: Any, config=None):
        if not self.is_available():
            logger.warning(f"AI is not available (mode={self.mode}), skipping {what}")
            self.last_error = "AI unavailable"
            return None
        try:
            response = await self._client.aio.models.generate_content(
                model=normalize_model_id(model),
                contents=contents,
                config=config,
            )
        except Exception as e:
            self._record_error(e)
            logger.error(f"Gemini {what} failed: {e}")
            return None
        if not response.text:
            self.last_error = "empty response"
            logger.warning(f"Gemini returned an empty {what}")
            return None
        return response

    async def describe_image(
        self,
        prompt: str,
        image_bytes: bytes,
        mime_type: str = "image/jpeg",
        model: Optional[str] = None,
    ) -> Optional[str]:
        """Free-text answer to ``prompt`` about the attached image."""
        response = await self._generate(
            "image analysis",
            model or settings.gemini_vision_model,
            [types.Part.from_bytes(data=image_bytes, mime_type=mime_type), prompt],
        )
        return response.text if response is not None else None

    async def generate_structured(
        self,
        prompt: str,
        response_model: Type[T],
        model: Optional[str] = None,
        system_instruction: Optional[str] = None,
    ) -> Optional[T]:
        """JSON output constrained to ``response_model``; None if it does not validate."""
        config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=response_model,
            system_instruction=system_instruction,
        )
        response = await self._generate(
            "structured generation", model or settings.gemini_text_model, prompt, config
        )
        if response is None:
            return None

        if isinstance(response.parsed, response_model):
            return response.parsed
        # SDK could not parse; validate the raw text so the reason is recorded
        try:
            return response_model.model_validate_json(response.text)
        except ValidationError as e:
            self._record_error(e)
            logger.error(f"Gemini output did not match {response_model.__name__}: {e}")
            return None


ai_client = AIClient.get_instance()
