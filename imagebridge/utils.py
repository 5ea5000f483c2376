from __future__ import annotations

from typing import Optional

from google.genai import errors as genai_errors
from fastapi import status

from .errors import ProviderFailureKind

DEFAULT_DIMENSIONS = "1024x1024"

# Closest sizes the Imagen models accept for each ratio offered in the form.
DIMENSIONS_BY_ASPECT_RATIO = {
    "1:1": "1024x1024",
    "4:3": "1536x1024",
    "16:9": "1792x1024",
}

PNG_DATA_URL_PREFIX = "data:image/png;base64,"

_CONTENT_BLOCK_MARKER = "content has been blocked"


def get_dimensions(aspect_ratio: Optional[str]) -> str:
    """Map an aspect ratio label to the provider size string.

    Unknown or missing labels fall back to the square default.
    """
    if aspect_ratio is None:
        return DEFAULT_DIMENSIONS
    return DIMENSIONS_BY_ASPECT_RATIO.get(aspect_ratio, DEFAULT_DIMENSIONS)


def to_data_url(base64_payload: str) -> str:
    return PNG_DATA_URL_PREFIX + base64_payload


def classify_provider_error(exc: BaseException) -> ProviderFailureKind:
    """Sort a provider exception into one of the user-facing failure kinds.

    Only a 400 from the Gemini API whose message says the content has been blocked is
    treated as a safety block. The API has no dedicated code for it, so the
    message check lives here and nowhere else.
    """
    if not isinstance(exc, genai_errors.APIError):
        return ProviderFailureKind.SERVICE_ERROR

    if exc.code != status.HTTP_400_BAD_REQUEST:
        return ProviderFailureKind.SERVICE_ERROR

    message = (exc.message or "").lower()
    if _CONTENT_BLOCK_MARKER in message:
        return ProviderFailureKind.CONTENT_BLOCKED

    return ProviderFailureKind.SERVICE_ERROR
