"""Tests covering the FastAPI routes defined in :mod:`imagebridge.main`."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional

import pytest
from fastapi.testclient import TestClient
from google.genai import errors as genai_errors

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))
from imagebridge.aiservices.imagegenerationclient import ImageGenerationClient
from imagebridge.config import Settings
from imagebridge.main import app
from imagebridge.service import ImageBridgeService, get_imagebridge_service


class StubImageClient(ImageGenerationClient):
    """Test double standing in for the Gemini provider."""

    def __init__(self) -> None:
        self.payloads: List[str] = ["iVBORw0KGgo="]
        self.exception: Optional[BaseException] = None
        self.calls: list[dict] = []

    @property
    def model_id(self) -> str:
        return "stub-imagen"

    def generate(self, prompt: str, size: str, negative_prompt: Optional[str] = None) -> List[str]:
        self.calls.append({"prompt": prompt, "size": size, "negative_prompt": negative_prompt})
        if self.exception is not None:
            raise self.exception
        return list(self.payloads)


@pytest.fixture
def stub() -> StubImageClient:
    return StubImageClient()


@pytest.fixture
def client(stub: StubImageClient):
    """Yield a :class:`TestClient` whose bridge talks to the stub provider."""

    service = ImageBridgeService(Settings(gemini_api_key="test-key"), image_client=stub)
    app.dependency_overrides[get_imagebridge_service] = lambda: service

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def test_root_reports_liveness(client: TestClient) -> None:
    response = client.get("/")

    assert response.status_code == 200
    assert response.text == "Backend is connected and running!"


def test_healthcheck_reports_model_and_key_status(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "imageModel": "stub-imagen", "apiKeyConfigured": True}


def test_generate_image_end_to_end_widescreen(client: TestClient, stub: StubImageClient) -> None:
    response = client.post(
        "/generate-image",
        json={"prompt": "a red cube", "aspectRatio": "16:9", "negativePrompt": ""},
    )

    assert response.status_code == 200
    assert response.json() == {"imageUrl": "data:image/png;base64,iVBORw0KGgo="}
    assert stub.calls == [{"prompt": "a red cube", "size": "1792x1024", "negative_prompt": None}]


def test_generate_image_uses_first_image_when_several_returned(client: TestClient, stub: StubImageClient) -> None:
    stub.payloads = ["Zmlyc3Q=", "c2Vjb25k"]

    response = client.post("/generate-image", json={"prompt": "two cats", "aspectRatio": "4:3"})

    assert response.status_code == 200
    assert response.json()["imageUrl"] == "data:image/png;base64,Zmlyc3Q="
    assert stub.calls[0]["size"] == "1536x1024"


def test_generate_image_forwards_negative_prompt(client: TestClient, stub: StubImageClient) -> None:
    client.post(
        "/generate-image",
        json={"prompt": "a lighthouse", "aspectRatio": "1:1", "negativePrompt": "fog"},
    )

    assert stub.calls[0]["negative_prompt"] == "fog"


def test_generate_image_defaults_unknown_ratio_to_square(client: TestClient, stub: StubImageClient) -> None:
    client.post("/generate-image", json={"prompt": "a tree", "aspectRatio": "21:9"})
    client.post("/generate-image", json={"prompt": "a tree"})

    assert [call["size"] for call in stub.calls] == ["1024x1024", "1024x1024"]


@pytest.mark.parametrize("body", [{"prompt": "", "aspectRatio": "1:1"}, {"aspectRatio": "1:1"}, {}])
def test_generate_image_requires_prompt(client: TestClient, stub: StubImageClient, body: dict) -> None:
    response = client.post("/generate-image", json=body)

    assert response.status_code == 400
    assert response.json() == {"error": "Prompt is required."}
    assert stub.calls == []


def test_generate_image_reports_empty_provider_result(client: TestClient, stub: StubImageClient) -> None:
    stub.payloads = []

    response = client.post("/generate-image", json={"prompt": "nothing"})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to generate image: No output."}


def test_generate_image_reports_content_block(client: TestClient, stub: StubImageClient) -> None:
    stub.exception = genai_errors.ClientError(
        400,
        {"error": {"code": 400, "message": "Image generation failed: content has been blocked.", "status": "INVALID_ARGUMENT"}},
    )

    response = client.post("/generate-image", json={"prompt": "something unsafe"})

    assert response.status_code == 500
    assert response.json() == {"error": "Content was blocked by safety settings. Try a different prompt."}


def test_generate_image_hides_provider_details(client: TestClient, stub: StubImageClient) -> None:
    stub.exception = RuntimeError("secret stack detail: key=abc123")

    response = client.post("/generate-image", json={"prompt": "a boat"})

    assert response.status_code == 500
    assert response.json() == {"error": "AI service error. Check API key and service status."}
    assert "abc123" not in response.text


def test_generate_image_rejects_malformed_body(client: TestClient, stub: StubImageClient) -> None:
    response = client.post(
        "/generate-image",
        content="not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request body."}
    assert stub.calls == []


def test_cors_allows_configured_origin(client: TestClient) -> None:
    response = client.options(
        "/generate-image",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "POST",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"
    assert "POST" in response.headers["access-control-allow-methods"]


def test_cors_rejects_other_origins_and_methods(client: TestClient) -> None:
    other_origin = client.options(
        "/generate-image",
        headers={"Origin": "http://evil.example", "Access-Control-Request-Method": "POST"},
    )
    delete_method = client.options(
        "/generate-image",
        headers={"Origin": "http://localhost:5173", "Access-Control-Request-Method": "DELETE"},
    )

    assert other_origin.status_code == 400
    assert "access-control-allow-origin" not in other_origin.headers
    assert delete_method.status_code == 400


def test_studio_renders_idle_form(client: TestClient, stub: StubImageClient) -> None:
    response = client.get("/studio")

    assert response.status_code == 200
    assert 'id="generate-form"' in response.text
    assert '<button type="submit" id="generate" disabled>Generate Image</button>' in response.text
    assert 'class="error"' not in response.text
    assert stub.calls == []


def test_studio_submits_through_bridge_and_shows_image(client: TestClient, stub: StubImageClient) -> None:
    response = client.get(
        "/studio",
        params={"prompt": "a red cube", "aspectRatio": "16:9", "negativePrompt": "  blur  "},
    )

    assert response.status_code == 200
    assert 'src="data:image/png;base64,iVBORw0KGgo="' in response.text
    assert 'class="error"' not in response.text
    assert stub.calls == [{"prompt": "a red cube", "size": "1792x1024", "negative_prompt": "blur"}]


def test_studio_shows_bridge_error(client: TestClient, stub: StubImageClient) -> None:
    stub.payloads = []

    response = client.get("/studio", params={"prompt": "a red cube"})

    assert response.status_code == 200
    assert "Failed to generate image: No output." in response.text
    assert "<img" not in response.text


def test_studio_ignores_whitespace_prompt(client: TestClient, stub: StubImageClient) -> None:
    response = client.get("/studio", params={"prompt": "   "})

    assert response.status_code == 200
    assert stub.calls == []
    assert " disabled" in response.text


@pytest.mark.parametrize("content", [None, "null"])
def test_generate_image_without_body_requires_prompt(client: TestClient, stub: StubImageClient, content) -> None:
    headers = {"Content-Type": "application/json"} if content is not None else {}

    response = client.post("/generate-image", content=content, headers=headers)

    assert response.status_code == 400
    assert response.json() == {"error": "Prompt is required."}
    assert stub.calls == []


def test_generate_image_forwards_whitespace_negative_prompt_unchanged(client: TestClient, stub: StubImageClient) -> None:
    response = client.post(
        "/generate-image",
        json={"prompt": "a lighthouse", "aspectRatio": "1:1", "negativePrompt": "  "},
    )

    assert response.status_code == 200
    assert stub.calls[0]["negative_prompt"] == "  "


def test_startup_warns_when_api_key_missing(monkeypatch, caplog) -> None:
    import imagebridge.main as main_module

    monkeypatch.setattr(main_module, "get_settings", lambda: Settings(gemini_api_key=""))

    with caplog.at_level("INFO", logger="imagebridge.main"):
        with TestClient(app):
            pass

    records = [record for record in caplog.records if record.message == "API Key Status: NOT FOUND"]
    assert records and records[0].levelname == "WARNING"
