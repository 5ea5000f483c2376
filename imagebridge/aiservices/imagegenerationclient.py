from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

class ImageGenerationClient(ABC):
    """Abstract interface for an image generation client.

    Implementations must provide a synchronous generation method
    used by the bridge service.
    """

    @property
    @abstractmethod
    def model_id(self) -> str:  # pragma: no cover - interface
        """Identifier of the model requests are sent to."""

    @abstractmethod
    def generate(
        self,
        prompt: str,
        size: str,
        negative_prompt: Optional[str] = None,
    ) -> List[str]:
        """Generate a single PNG image from a prompt.

        Returns the base64 payloads of the images the provider produced, which
        may be empty. Provider failures propagate as exceptions.
        """
