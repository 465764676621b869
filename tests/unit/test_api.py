"""Tests for the HTTP API."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest
from fastapi.testclient import TestClient

from capsulegen.api import create_app
from capsulegen.api.routes import EXAMPLE_REQUEST
from capsulegen.core.registry import CapsuleRegistry

Factory = Callable[..., Any]


@pytest.fixture
def client(builtin_registry: CapsuleRegistry) -> TestClient:
    return TestClient(create_app(builtin_registry))


# =============================================================================
# Generation
# =============================================================================


class TestGenerateEndpoint:
    """Tests for /api/generate."""

    def test_generate(self, client: TestClient, make_request: Factory, card_with_button: dict[str, Any]) -> None:
        response = client.post("/api/generate", json=make_request(card_with_button, targets=["web", "android"]))

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert [r["target"] for r in body["results"]] == ["web", "android"]
        web = body["results"][0]
        assert web["state"] == "succeeded"
        assert any(f["path"] == "src/screens/HomeScreen.tsx" for f in web["files"])
        assert body["results"][1]["minVersion"] == "24"
        assert body["summary"]["totalTargets"] == 2

    def test_partial_failure_is_200(self, client: TestClient, make_request: Factory, node: Factory) -> None:
        """A failed target is reported in the body, not as an HTTP error."""
        response = client.post("/api/generate", json=make_request(node("x", "hologram")))

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is False
        assert body["results"][0]["fatal"]["code"] == "UNKNOWN_CAPSULE"
        assert body["results"][0]["files"] == []

    def test_invalid_request(self, client: TestClient) -> None:
        response = client.post("/api/generate", json={"name": "x", "targets": ["tvos"], "screens": []})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Invalid request"
        assert any("tvos" in detail for detail in body["details"])

    def test_non_object_body(self, client: TestClient) -> None:
        response = client.post("/api/generate", json=["web"])

        assert response.status_code == 400

    def test_example_request_generates(self, client: TestClient) -> None:
        described = client.get("/api/generate").json()
        assert described["method"] == "POST"
        assert described["targets"] == ["web", "ios", "android", "desktop"]

        response = client.post("/api/generate", json=described["example"])

        assert response.json()["success"] is True
        assert described["example"] == EXAMPLE_REQUEST


# =============================================================================
# Catalog
# =============================================================================


class TestCapsuleEndpoints:
    """Tests for /api/capsules."""

    def test_list(self, client: TestClient) -> None:
        body = client.get("/api/capsules").json()

        assert body["total"] == 9
        assert [c["id"] for c in body["capsules"]][:2] == ["biometrics", "button"]
        assert "sourceCode" not in body["capsules"][0]
        assert "device" in body["categories"]

    def test_list_filters(self, client: TestClient) -> None:
        desktop = client.get("/api/capsules", params={"target": "desktop"}).json()
        assert "camera" not in [c["id"] for c in desktop["capsules"]]

        searched = client.get("/api/capsules", params={"q": "camera"}).json()
        assert "camera" in [c["id"] for c in searched["capsules"]]

    def test_invalid_target_filter(self, client: TestClient) -> None:
        assert client.get("/api/capsules", params={"target": "tvos"}).status_code == 422

    def test_detail(self, client: TestClient) -> None:
        body = client.get("/api/capsules/button").json()

        assert body["id"] == "button"
        assert body["targets"] == ["web", "ios", "android", "desktop"]
        assert body["props"][0]["name"] == "text"
        assert "sourceCode" in body["platforms"]["web"]

    def test_unknown_capsule(self, client: TestClient) -> None:
        response = client.get("/api/capsules/hologram")

        assert response.status_code == 404
        assert "hologram" in response.json()["detail"]

    def test_health(self, client: TestClient) -> None:
        assert client.get("/health").json() == {"status": "healthy", "capsules": 9}
