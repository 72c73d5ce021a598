from __future__ import annotations

from typing import Any

from google import genai
from google.genai import types

from recipe_gallery.services.errors import GeminiConfigurationError


class GeminiClient:
    def __init__(self, api_key: str, model_name: str = "gemini-2.5-flash", client: Any = None) -> None:
        self.api_key = api_key
        self.model_name = model_name
        self._client = client if client is not None else self._configure_api()

    def _configure_api(self) -> genai.Client:
        if not self.api_key:
            raise GeminiConfigurationError("Missing Google API key.")
        return genai.Client(api_key=self.api_key)

    def generate_structured(
        self,
        prompt: str,
        image_bytes: bytes,
        mime_type: str,
        response_schema: Any,
    ) -> str:
        """Ask the model about one image and return its raw JSON answer."""
        response = self._client.models.generate_content(
            model=self.model_name,
            contents=[
                types.Part.from_bytes(data=image_bytes, mime_type=mime_type),
                prompt,
            ],
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=response_schema,
            ),
        )
        return response.text or ""
