"""Imagen image generation through the ``google-genai`` SDK."""

from __future__ import annotations

import base64
import logging
from typing import Any, List, Optional

from google import genai
from google.genai import types

from ..config import Settings, get_settings
from .imagegenerationclient import ImageGenerationClient

logger = logging.getLogger(__name__)

OUTPUT_MIME_TYPE = "image/png"


class GeminiImageGenerationClient(ImageGenerationClient):
    """Sends one ``generate_images`` request per call to the Gemini API."""

    def __init__(self, settings: Optional[Settings] = None, client: Any = None) -> None:
        self.settings = settings or get_settings()
        self._client = client
        self._model = self.settings.image_model_id

    @property
    def model_id(self) -> str:
        return self._model

    def _get_client(self) -> Any:
        # Created on first use so a missing key surfaces as a provider failure
        # instead of preventing the app from starting.
        if self._client is None:
            api_key = self.settings.gemini_api_key.get_secret_value().strip()
            self._client = genai.Client(api_key=api_key) if api_key else genai.Client()
        return self._client

    def _build_config(self, size: str, negative_prompt: Optional[str]) -> types.GenerateImagesConfig:
        options: dict[str, Any] = {
            "number_of_images": 1,
            "output_mime_type": OUTPUT_MIME_TYPE,
            "aspect_ratio": size,
        }
        if negative_prompt:
            options["negative_prompt"] = negative_prompt
        return types.GenerateImagesConfig(**options)

    def generate(
        self,
        prompt: str,
        size: str,
        negative_prompt: Optional[str] = None,
    ) -> List[str]:
        response = self._get_client().models.generate_images(
            model=self._model,
            prompt=prompt,
            config=self._build_config(size, negative_prompt),
        )

        payloads: List[str] = []
        for generated in response.generated_images or []:
            image = generated.image
            if image is None or not image.image_bytes:
                logger.debug("Skipping generated image without bytes (reason: %s)", generated.rai_filtered_reason)
                continue
            payloads.append(base64.b64encode(image.image_bytes).decode("ascii"))
        return payloads
