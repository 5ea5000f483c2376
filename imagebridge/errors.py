"""Failures the bridge reports to its callers."""

from __future__ import annotations

from enum import Enum

from fastapi import status


class ProviderFailureKind(str, Enum):
    CONTENT_BLOCKED = "content_blocked"
    SERVICE_ERROR = "service_error"


PROMPT_REQUIRED_MESSAGE = "Prompt is required."
NO_OUTPUT_MESSAGE = "Failed to generate image: No output."
SERVICE_ERROR_MESSAGE = "AI service error. Check API key and service status."
CONTENT_BLOCKED_MESSAGE = "Content was blocked by safety settings. Try a different prompt."


class BridgeError(Exception):
    """Base exception for failures returned as ``{"error": message}``."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class PromptRequiredError(BridgeError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self) -> None:
        super().__init__(PROMPT_REQUIRED_MESSAGE)


class EmptyProviderResultError(BridgeError):
    """The provider answered but produced no image."""

    def __init__(self) -> None:
        super().__init__(NO_OUTPUT_MESSAGE)


class ProviderRejectionError(BridgeError):
    """The provider call raised; ``kind`` selects the user-facing message."""

    def __init__(self, kind: ProviderFailureKind) -> None:
        self.kind = kind
        if kind is ProviderFailureKind.CONTENT_BLOCKED:
            message = CONTENT_BLOCKED_MESSAGE
        else:
            message = SERVICE_ERROR_MESSAGE
        super().__init__(message)
