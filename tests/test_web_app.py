import httpx
from fastapi.testclient import TestClient

from webcite.settings import Settings
from webcite.web.app import create_app

PAGE_URL = "https://example.com/story"
PAGE_HTML = """
<html><head>
  <meta property="og:title" content="Web title">
  <script type="application/ld+json">{"@type": "Article", "headline": "Schema title"}</script>
</head><body></body></html>
"""


def _handler(request: httpx.Request) -> httpx.Response:
    if str(request.url) == PAGE_URL:
        return httpx.Response(200, text=PAGE_HTML)
    return httpx.Response(404)


def _client() -> TestClient:
    settings = Settings(log_level="ERROR")
    return TestClient(create_app(settings, transport=httpx.MockTransport(_handler)))


def test_health() -> None:
    response = _client().get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_reference_endpoint_returns_citations() -> None:
    response = _client().post(
        "/api/reference",
        json={"url": PAGE_URL, "include_archive": False, "priority": "schemaorg,opengraph"},
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["fields"]["title"] == "Schema title"
    assert payload["fields"]["url"] == PAGE_URL
    assert payload["citations"]["wiki"].startswith("{{cite web\n| title = Schema title")


def test_reference_endpoint_reports_generation_errors() -> None:
    response = _client().post(
        "/api/reference", json={"url": "https://example.com/gone", "include_archive": False}
    )
    assert response.status_code == 422
    assert "could not fetch" in response.json()["detail"]


def test_reference_endpoint_rejects_local_paths() -> None:
    response = _client().post("/api/reference", json={"url": "/etc/passwd"})
    assert response.status_code == 422


def test_metadata_endpoint_lists_every_source() -> None:
    response = _client().post("/api/metadata", json={"url": PAGE_URL})
    assert response.status_code == 200
    title = response.json()["fields"]["title"]
    assert title["default"] == "opengraph"
    assert title["sources"] == {"opengraph": "Web title", "schemaorg": "Schema title"}
