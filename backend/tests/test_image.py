"""
Test the artwork route against a stubbed Gemini endpoint.
"""
import httpx
import pytest
from fastapi.testclient import TestClient

from dream_gateway.controllers.image_controller import MAX_PROMPT_LENGTH, normalize_size
from dream_gateway.services.gemini_service import extract_error_message, find_inline_image

from conftest import AUTH_HEADERS, TINY_PNG_BASE64

IMAGE = "/v1/dream/image"


@pytest.mark.parametrize(
    "size, expected",
    [
        ("1024x1024", "1024x1024"),
        ("768x768", "768x768"),
        (" 768X768 ", "768x768"),
        ("999x999", "1024x1024"),
        ("512x512", "1024x1024"),
        (None, "1024x1024"),
        (768, "1024x1024"),
    ],
)
def test_normalize_size(size, expected):
    assert normalize_size(size) == expected


def test_find_inline_image_accepts_snake_case():
    payload = {"candidates": [{"content": {"parts": [{"inline_data": {"data": "abc"}}]}}]}

    assert find_inline_image(payload) == "abc"


def test_find_inline_image_skips_empty_parts():
    payload = {
        "candidates": [
            {"content": {"parts": [{"text": "no image"}]}},
            {"content": {"parts": [{"inlineData": {"data": ""}}, {"inlineData": {"data": "xyz"}}]}},
        ]
    }

    assert find_inline_image(payload) == "xyz"


@pytest.mark.parametrize("payload", [None, "text", {}, {"candidates": None}, {"candidates": ["x"]}])
def test_find_inline_image_tolerates_junk(payload):
    assert find_inline_image(payload) is None


def test_extract_error_message():
    assert extract_error_message({"error": {"message": "quota"}}) == "quota"
    assert extract_error_message({"error": "quota"}) is None
    assert extract_error_message(None) is None


class TestImageRoute:
    def test_success(self, client, gemini_stub):
        response = client.post(
            IMAGE,
            json={"prompt": "A whale swimming through clouds", "size": "768x768"},
            headers=AUTH_HEADERS,
        )

        assert response.status_code == 200
        assert response.json() == {"image_base64": TINY_PNG_BASE64}

        request = gemini_stub.requests[-1]
        assert request.url.path == "/v1beta/models/gemini-2.5-flash-image:generateContent"
        assert request.headers["x-goog-api-key"] == "gemini-test"
        assert gemini_stub.last_json["generationConfig"] == {"responseModalities": ["IMAGE"]}
        assert "exactly 768x768 pixels" in gemini_stub.last_prompt
        assert gemini_stub.last_prompt.endswith("Prompt: A whale swimming through clouds")

    def test_unknown_size_falls_back(self, client, gemini_stub):
        client.post(IMAGE, json={"prompt": "a lake", "size": "999x999"}, headers=AUTH_HEADERS)

        assert "exactly 1024x1024 pixels" in gemini_stub.last_prompt

    def test_style_and_seed_reach_prompt(self, client, gemini_stub):
        client.post(
            IMAGE,
            json={"prompt": "a lake", "style": "ink wash", "seed": 7},
            headers=AUTH_HEADERS,
        )

        assert "Visual style: ink wash" in gemini_stub.last_prompt
        assert "Variation seed: 7" in gemini_stub.last_prompt

    def test_prompt_at_limit_proceeds(self, client, gemini_stub):
        response = client.post(
            IMAGE, json={"prompt": "a" * MAX_PROMPT_LENGTH}, headers=AUTH_HEADERS
        )

        assert response.status_code == 200
        assert len(gemini_stub.requests) == 1

    def test_prompt_over_limit_is_413(self, client, gemini_stub):
        response = client.post(
            IMAGE, json={"prompt": "a" * (MAX_PROMPT_LENGTH + 1)}, headers=AUTH_HEADERS
        )

        assert response.status_code == 413
        assert response.json() == {"error": {"message": "prompt must be at most 8000 characters."}}
        assert gemini_stub.requests == []

    @pytest.mark.parametrize("body", [{}, {"prompt": "   "}, {"prompt": 12}])
    def test_blank_prompt_is_400(self, client, gemini_stub, body):
        response = client.post(IMAGE, json=body, headers=AUTH_HEADERS)

        assert response.status_code == 400
        assert response.json() == {"error": {"message": "prompt is required."}}
        assert gemini_stub.requests == []

    def test_missing_key_is_server_misconfigured(self, build_client, gemini_stub):
        client = build_client(gemini_api_key="")

        response = client.post(IMAGE, json={"prompt": "a lake"}, headers=AUTH_HEADERS)

        assert response.status_code == 500
        assert response.json() == {"error": "server_misconfigured"}
        assert gemini_stub.requests == []

    def test_missing_key_checked_before_prompt(self, build_client):
        client = build_client(gemini_api_key="")

        response = client.post(IMAGE, json={}, headers=AUTH_HEADERS)

        assert response.json() == {"error": "server_misconfigured"}

    def test_image_limit_is_checked_first(self, build_client, gemini_stub):
        client = build_client(image_rate_limit_max_requests=1, gemini_api_key="")

        client.post(IMAGE, json={}, headers=AUTH_HEADERS)
        response = client.post(IMAGE, json={}, headers=AUTH_HEADERS)

        assert response.status_code == 429
        assert response.json() == {"error": {"message": "Too many requests."}}
        assert "Retry-After" in response.headers

    def test_image_limit_does_not_touch_other_routes(self, build_client):
        client = build_client(image_rate_limit_max_requests=1)

        client.post(IMAGE, json={"prompt": "a"}, headers=AUTH_HEADERS)
        assert client.post(IMAGE, json={"prompt": "a"}, headers=AUTH_HEADERS).status_code == 429

        response = client.post("/v1/dream/interpret", json={"text": "x"}, headers=AUTH_HEADERS)
        assert response.status_code == 200

    def test_upstream_error_is_relayed(self, client, gemini_stub):
        gemini_stub.status_code = 403
        gemini_stub.body = {"error": {"code": 403, "message": "API key not valid."}}

        response = client.post(IMAGE, json={"prompt": "a lake"}, headers=AUTH_HEADERS)

        assert response.status_code == 403
        assert response.json() == {"error": {"message": "API key not valid."}}

    def test_non_json_upstream_error_uses_generic_message(self, client, gemini_stub):
        gemini_stub.status_code = 503
        gemini_stub.body = "<html>Service Unavailable</html>"

        response = client.post(IMAGE, json={"prompt": "a lake"}, headers=AUTH_HEADERS)

        assert response.status_code == 503
        assert response.json() == {"error": {"message": "Gemini image request failed."}}

    def test_missing_inline_image_is_502(self, client, gemini_stub):
        gemini_stub.body = {"candidates": [{"content": {"parts": [{"text": "I cannot draw that."}]}}]}

        response = client.post(IMAGE, json={"prompt": "a lake"}, headers=AUTH_HEADERS)

        assert response.status_code == 502
        assert response.json() == {"error": {"message": "Gemini image output missing."}}

    def test_non_json_success_is_502(self, client, gemini_stub):
        gemini_stub.body = "not json"

        response = client.post(IMAGE, json={"prompt": "a lake"}, headers=AUTH_HEADERS)

        assert response.status_code == 502
        assert response.json() == {"error": {"message": "Gemini image output missing."}}

    def test_newlines_are_stripped(self, client, gemini_stub):
        gemini_stub.body = {
            "candidates": [{"content": {"parts": [{"inlineData": {"data": "AAAA\r\nBBBB\nCC=="}}]}}]
        }

        response = client.post(IMAGE, json={"prompt": "a lake"}, headers=AUTH_HEADERS)

        assert response.json() == {"image_base64": "AAAABBBBCC=="}

    def test_transport_error_is_502(self, client, gemini_stub):
        gemini_stub.raise_error = httpx.ConnectError("connection refused")

        response = client.post(IMAGE, json={"prompt": "a lake"}, headers=AUTH_HEADERS)

        assert response.status_code == 502
        assert response.json() == {"error": {"message": "Gemini image request failed."}}

    def test_custom_model_and_base_url(self, build_client, gemini_stub):
        client = build_client(
            gemini_base_url="https://proxy.example.com/gemini/",
            gemini_image_model="imagen-test",
        )

        client.post(IMAGE, json={"prompt": "a lake"}, headers=AUTH_HEADERS)

        assert str(gemini_stub.requests[-1].url) == (
            "https://proxy.example.com/gemini/models/imagen-test:generateContent"
        )

    def test_image_limit_applies_to_malformed_bodies(self, build_client, gemini_stub):
        client = build_client(image_rate_limit_max_requests=1)
        headers = {**AUTH_HEADERS, "Content-Type": "application/json"}

        first = client.post(IMAGE, content=b"{", headers=headers)
        second = client.post(IMAGE, content=b"{", headers=headers)

        assert first.status_code == 400
        assert second.status_code == 429
        assert gemini_stub.requests == []

    def test_unauthorized_image_requests_skip_image_limit(self, build_app):
        app = build_app(image_rate_limit_max_requests=1)
        client = TestClient(app)
        client.post(IMAGE, json={"prompt": "a lake"})

        assert len(app.state.image_rate_limiter) == 0
        assert client.post(IMAGE, json={"prompt": "a lake"}, headers=AUTH_HEADERS).status_code == 200
