"""Bridge between generate-image requests and the image provider."""

from __future__ import annotations

import logging
from functools import lru_cache

from .aiservices.geminiimagegenerationclient import GeminiImageGenerationClient
from .aiservices.imagegenerationclient import ImageGenerationClient
from .config import Settings, get_settings
from .errors import EmptyProviderResultError, PromptRequiredError, ProviderRejectionError
from .schemas import GenerateImageRequest, GenerateImageResponse
from .utils import classify_provider_error, get_dimensions, to_data_url

logger = logging.getLogger(__name__)


class ImageBridgeService:
    """Validates a request, calls the provider once and normalises the outcome."""

    def __init__(
        self,
        settings: Settings | None = None,
        image_client: ImageGenerationClient | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._image_client = image_client or GeminiImageGenerationClient(self.settings)

    @property
    def image_model_id(self) -> str:
        return self._image_client.model_id

    def generate_image(self, request: GenerateImageRequest) -> GenerateImageResponse:
        """Generate one image and return it as a PNG data URL.

        Raises a :class:`~imagebridge.errors.BridgeError` subclass on every
        failure path; provider exceptions never escape unclassified.
        """
        size = get_dimensions(request.aspectRatio)

        if not request.prompt:
            raise PromptRequiredError()

        logger.info('Generating image for prompt: "%s" with %s size.', request.prompt, size)

        try:
            payloads = self._image_client.generate(
                prompt=request.prompt,
                size=size,
                negative_prompt=request.negativePrompt or None,
            )
        except Exception as exc:
            kind = classify_provider_error(exc)
            logger.exception("Error calling image provider (classified as %s)", kind.value)
            raise ProviderRejectionError(kind) from exc

        if not payloads:
            logger.error("Image provider returned no image output.")
            raise EmptyProviderResultError()

        logger.info("Image generated successfully.")
        return GenerateImageResponse(imageUrl=to_data_url(payloads[0]))


@lru_cache
def get_imagebridge_service() -> ImageBridgeService:
    return ImageBridgeService(get_settings())
