"""Client-side controller for the image studio form."""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from textwrap import dedent
from typing import Any, Callable, Optional, Union

import httpx

from ..schemas import ASPECT_RATIO_OPTIONS, DEFAULT_ASPECT_RATIO

logger = logging.getLogger(__name__)

GENERATE_IMAGE_PATH = "/generate-image"

SERVER_ERROR_MESSAGE = "Failed to generate image due to server error."
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred. Check network connection."


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Loading:
    pass


@dataclass(frozen=True)
class Success:
    image_url: str


@dataclass(frozen=True)
class Failure:
    message: str


FormState = Union[Idle, Loading, Success, Failure]


class TransportFailure(Exception):
    """The request could not complete or its body was unreadable."""


class FormController:
    """Holds the form fields and drives a single submission against the bridge.

    The presentation state is one tagged value, so an error and an image can
    never be shown together.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        prompt: str = "",
        negative_prompt: str = "",
        aspect_ratio: str = DEFAULT_ASPECT_RATIO,
        on_change: Optional[Callable[[FormState], None]] = None,
    ) -> None:
        self._client = client
        self.prompt = prompt
        self.negative_prompt = negative_prompt
        self.aspect_ratio = aspect_ratio
        self._on_change = on_change
        self._state: FormState = Idle()

    @property
    def state(self) -> FormState:
        return self._state

    def _set_state(self, state: FormState) -> None:
        self._state = state
        if self._on_change is not None:
            self._on_change(state)

    @property
    def loading(self) -> bool:
        return isinstance(self._state, Loading)

    @property
    def can_submit(self) -> bool:
        return bool(self.prompt.strip()) and not self.loading

    def _payload(self) -> dict[str, Any]:
        return {
            "prompt": self.prompt,
            "aspectRatio": self.aspect_ratio,
            "negativePrompt": self.negative_prompt.strip(),
        }

    async def submit(self) -> FormState:
        """Send the form to the bridge and return the resulting state.

        Never raises: every failure ends in a :class:`Failure` state.
        """
        if not self.can_submit:
            logger.debug("Submit ignored: prompt is empty or a request is in flight")
            return self._state

        try:
            self._set_state(Loading())
            image_url = await self._request_image()
        except _ServerRejected as exc:
            outcome: FormState = Failure(exc.message)
        except Exception as exc:
            logger.exception("Error generating image")
            outcome = Failure(str(exc) or UNKNOWN_ERROR_MESSAGE)
        else:
            outcome = Success(image_url)

        # The state is assigned before listeners run, so a failing listener
        # cannot leave the form in Loading.
        try:
            self._set_state(outcome)
        except Exception:
            logger.exception("Form state listener failed")
        return self._state

    async def _request_image(self) -> str:
        response = await self._client.post(GENERATE_IMAGE_PATH, json=self._payload())

        if not response.is_success:
            raise _ServerRejected(_error_message_for(response))

        try:
            data = response.json()
            image_url = data["imageUrl"]
        except (ValueError, KeyError, TypeError) as exc:
            raise TransportFailure(
                f"Server returned an unreadable response (Status: {response.status_code})."
            ) from exc
        if not isinstance(image_url, str) or not image_url:
            raise TransportFailure("Server response did not include an image.")
        return image_url

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def render(self, action: str = "/studio") -> str:
        """Render the form plus whichever result panel the state calls for."""
        return "\n".join(
            part
            for part in (self._render_form(action), self._render_result())
            if part
        )

    def _render_form(self, action: str) -> str:
        options = "\n".join(
            '<option value="{value}"{selected}>{label}</option>'.format(
                value=html.escape(option.value),
                selected=" selected" if option.value == self.aspect_ratio else "",
                label=html.escape(option.label),
            )
            for option in ASPECT_RATIO_OPTIONS
        )
        disabled = "" if self.can_submit else " disabled"
        button_label = "Generating Image..." if self.loading else "Generate Image"
        busy = ' aria-busy="true"' if self.loading else ""
        return dedent(
            f"""
            <form id="generate-form" method="get" action="{html.escape(action)}">
              <label for="prompt">Describe the image you want to create (Positive Prompt):</label>
              <textarea id="prompt" name="prompt" rows="3" required
                placeholder="e.g., A majestic lion wearing a suit, digital art">{html.escape(self.prompt)}</textarea>
              <label for="aspectRatio">Aspect Ratio:</label>
              <select id="aspectRatio" name="aspectRatio">
            {options}
              </select>
              <label for="negativePrompt">Negative Prompt (Optional):</label>
              <input type="text" id="negativePrompt" name="negativePrompt"
                placeholder="e.g., blurry, watermark, low quality" value="{html.escape(self.negative_prompt)}">
              <button type="submit" id="generate"{disabled}{busy}>{button_label}</button>
            </form>
            """
        ).strip()

    def _render_result(self) -> str:
        state = self._state
        if isinstance(state, Failure):
            return (
                '<div class="error" role="alert"><p class="error-title">Generation Error:</p>'
                f"<p>{html.escape(state.message)}</p></div>"
            )
        if isinstance(state, Success):
            return dedent(
                f"""
                <div class="result">
                  <h2>Your Result:</h2>
                  <img src="{html.escape(state.image_url)}" alt="Generated by AI">
                </div>
                """
            ).strip()
        return ""


class _ServerRejected(Exception):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


def _error_message_for(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return f"Server returned an unexpected response (Status: {response.status_code})."
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return SERVER_ERROR_MESSAGE


def render_page(controller: FormController, action: str = "/studio") -> str:
    """Wrap the controller markup in a standalone HTML document."""
    body = controller.render(action)
    return dedent(
        """
        <!doctype html>
        <html lang="en">
          <head>
            <meta charset="utf-8">
            <meta name="viewport" content="width=device-width,initial-scale=1">
            <title>AI Image Generator Studio</title>
            <style>
              body{{font-family:system-ui,sans-serif;max-width:720px;margin:0 auto;padding:24px}}
              label{{display:block;margin-top:12px}}
              textarea,input,select,button{{width:100%;box-sizing:border-box;padding:8px}}
              button{{margin-top:16px}}
              .error{{color:#9b1c1c;background:#fde8e8;padding:8px;margin-top:16px}}
              .result img{{max-width:100%}}
            </style>
          </head>
          <body>
            <h1>AI Image Generator Studio</h1>
        {body}
            <script>
              const form = document.getElementById("generate-form");
              const prompt = document.getElementById("prompt");
              const button = document.getElementById("generate");
              const sync = () => {{ button.disabled = !prompt.value.trim(); }};
              prompt.addEventListener("input", sync);
              form.addEventListener("submit", () => {{
                button.disabled = true;
                button.setAttribute("aria-busy", "true");
                button.textContent = "Generating Image...";
              }});
              sync();
            </script>
          </body>
        </html>
        """
    ).strip().format(body=body)
