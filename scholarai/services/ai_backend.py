"""Generative-language backends.

The gateway only sees :class:`AIBackend`: one ``generate`` call that takes a
prompt (or a list of chat turns) and returns the model's raw text.  The
production backend is Google Gemini; tests pass an in-process double.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Literal, Optional, Union

from google import genai
from google.genai import types

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Turn:
    """One message of a backend conversation."""

    role: Literal["user", "model"]
    text: str


Contents = Union[str, list[Turn]]


class AIBackend(ABC):
    """A request/response capability reaching a generative model.

    Implementations make a single attempt per call and raise on any
    failure; retry and fallback decisions belong to the caller.
    """

    @abstractmethod
    async def generate(
        self,
        contents: Contents,
        *,
        system_instruction: Optional[str] = None,
        temperature: Optional[float] = None,
        response_schema: Optional[dict[str, Any]] = None,
    ) -> str:
        """Return the generated text (JSON text when a schema is given)."""

    async def aclose(self) -> None:
        """Release backend resources at shutdown."""


class GeminiBackend(AIBackend):
    """Google Gemini via the ``google-genai`` async client."""

    def __init__(self, api_key: str, model: str = "gemini-2.5-flash"):
        """Initialize the backend.

        Args:
            api_key: Google AI Studio API key
            model: Gemini model name
        """
        if not api_key:
            raise ValueError("Gemini API key required for GeminiBackend")
        self.client = genai.Client(api_key=api_key)
        self.model = model
        logger.info("Initialized GeminiBackend using model %s", self.model)

    async def generate(
        self,
        contents: Contents,
        *,
        system_instruction: Optional[str] = None,
        temperature: Optional[float] = None,
        response_schema: Optional[dict[str, Any]] = None,
    ) -> str:
        config_kwargs: dict[str, Any] = {"candidate_count": 1}
        if system_instruction is not None:
            config_kwargs["system_instruction"] = system_instruction
        if temperature is not None:
            config_kwargs["temperature"] = temperature
        if response_schema is not None:
            config_kwargs["response_mime_type"] = "application/json"
            config_kwargs["response_schema"] = response_schema

        if isinstance(contents, str):
            request: Any = contents
        else:
            request = [
                types.Content(role=t.role, parts=[types.Part(text=t.text)])
                for t in contents
            ]

        response = await self.client.aio.models.generate_content(
            model=self.model,
            contents=request,
            config=types.GenerateContentConfig(**config_kwargs),
        )
        # ``.text`` is None when the candidate was blocked or empty
        return response.text or ""


def build_backend(api_key: Optional[str], model: str) -> GeminiBackend:
    """Create the process-wide backend from settings values."""
    if not api_key:
        raise ValueError(
            "No Gemini API key configured. Set an active profile in "
            ".metadata/llm_profiles.yaml or export GOOGLE_API_KEY."
        )
    return GeminiBackend(api_key=api_key, model=model)
