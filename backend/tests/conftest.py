"""
Shared fixtures for gateway tests.

OpenAI is replaced by a fake client object exposing the two SDK calls the
gateway makes; Gemini is served by an ``httpx.MockTransport``.
"""
import json
import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock

import httpx
import pytest
from fastapi.testclient import TestClient

# Add backend to path
backend_dir = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(backend_dir))

from dream_gateway.config.settings import Settings  # noqa: E402
from dream_gateway.main import create_app  # noqa: E402

SHARED_SECRET = "secret-token"
AUTH_HEADERS = {"Authorization": f"Bearer {SHARED_SECRET}"}
TINY_PNG_BASE64 = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNk+M9QDwADhgGAWjR9awAAAABJRU5ErkJggg=="


def make_settings(**overrides: Any) -> Settings:
    values: Dict[str, Any] = {
        "openai_api_key": "sk-test",
        "gemini_api_key": "gemini-test",
        "backend_auth_token": SHARED_SECRET,
        "auth_required": True,
        "rate_limit_window_seconds": 60,
        "rate_limit_max_requests": None,
        "image_rate_limit_window_seconds": None,
        "image_rate_limit_max_requests": None,
        "trust_proxy_headers": False,
        "cors_origins": [],
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_fake_openai(
    output_text: Optional[str] = "Your dream speaks of change.",
    output: Optional[List[Dict[str, Any]]] = None,
    transcript: Optional[str] = "ruyamda denizi gordum",
) -> SimpleNamespace:
    if output is None:
        output = [
            {
                "type": "message",
                "role": "assistant",
                "content": [{"type": "output_text", "text": output_text or ""}],
            }
        ]
    return SimpleNamespace(
        responses=SimpleNamespace(
            create=AsyncMock(return_value=SimpleNamespace(output_text=output_text, output=output)),
        ),
        audio=SimpleNamespace(
            transcriptions=SimpleNamespace(
                create=AsyncMock(return_value=SimpleNamespace(text=transcript)),
            ),
        ),
        close=AsyncMock(),
    )


class GeminiStub:
    """Records requests and answers with a configurable response."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.status_code = 200
        self.body: Any = {
            "candidates": [
                {
                    "content": {
                        "parts": [
                            {"text": "Here is your artwork."},
                            {"inlineData": {"mimeType": "image/png", "data": TINY_PNG_BASE64}},
                        ]
                    }
                }
            ]
        }
        self.raise_error: Optional[Exception] = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raise_error is not None:
            raise self.raise_error
        if isinstance(self.body, (dict, list)):
            return httpx.Response(self.status_code, json=self.body)
        return httpx.Response(self.status_code, text=self.body or "")

    @property
    def last_json(self) -> Dict[str, Any]:
        return json.loads(self.requests[-1].content)

    @property
    def last_prompt(self) -> str:
        return self.last_json["contents"][0]["parts"][0]["text"]


@pytest.fixture
def fake_openai() -> SimpleNamespace:
    return make_fake_openai()


@pytest.fixture
def gemini_stub() -> GeminiStub:
    return GeminiStub()


@pytest.fixture
def build_app(fake_openai, gemini_stub):
    """Factory: ``build_app(**settings_overrides)`` returns a configured FastAPI app."""

    def _build(**overrides: Any):
        settings = make_settings(**overrides)
        return create_app(
            settings,
            openai_client=fake_openai,
            image_http_client=httpx.AsyncClient(transport=httpx.MockTransport(gemini_stub)),
        )

    return _build


@pytest.fixture
def build_client(build_app):
    def _build(**overrides: Any) -> TestClient:
        return TestClient(build_app(**overrides))

    return _build


@pytest.fixture
def client(build_client) -> TestClient:
    return build_client()
