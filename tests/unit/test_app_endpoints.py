"""Endpoint tests for the Starlette application."""

from unittest.mock import AsyncMock, patch

import pytest
from starlette.testclient import TestClient

from igbo_api.adapters.cache_store import InMemoryCacheStore
from igbo_api.adapters.word_repository import FakeWordRepository
from igbo_api.app import build_app_from_env, build_cache_store, content_range, create_app, main
from igbo_api.config import Settings
from igbo_api.domain.errors import UpstreamQueryError


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def client(settings, fake_repository):
    app = create_app(settings, repository=fake_repository, cache_store=InMemoryCacheStore())
    with TestClient(app) as test_client:
        yield test_client


@pytest.mark.unit
class TestListWords:
    def test_igbo_search(self, client):
        response = client.get("/api/v1/words", params={"keyword": "bia"})

        assert response.status_code == 200
        assert [word["word"] for word in response.json()] == ["bia", "biara"]
        assert response.headers["content-range"] == "words 0-1/2"

    def test_response_uses_camel_case_and_hides_dialects(self, client):
        word = client.get("/api/v1/words", params={"keyword": "bia", "strict": "true"}).json()[0]

        assert word["wordClass"] == "V"
        assert word["attributes"]["isStandardIgbo"] is True
        assert "dialects" not in word
        assert word["examples"] == ["ex-bia-1"]

    def test_dialects_and_examples_flags(self, client):
        word = client.get(
            "/api/v1/words",
            params={"keyword": "bia", "strict": "true", "dialects": "true", "examples": "true"},
        ).json()[0]

        assert word["dialects"][0]["dialects"] == ["ONI"]
        assert word["examples"][0]["associatedWords"] == ["w-bia"]

    @pytest.mark.parametrize(
        "params",
        [
            {"keyword": "bia"},
            {"keyword": "food"},
            {"keyword": "bia", "dialects": "true", "examples": "true"},
        ],
    )
    def test_repeated_search_returns_identical_body(self, client, params):
        first = client.get("/api/v1/words", params=params)
        second = client.get("/api/v1/words", params=params)

        assert second.content == first.content
        assert second.headers["content-range"] == first.headers["content-range"]

    def test_english_fallback(self, client):
        response = client.get("/api/v1/words", params={"keyword": "food"})

        assert [word["id"] for word in response.json()] == ["w-nri"]
        assert response.headers["content-range"] == "words 0-0/1"

    def test_quoted_search(self, client):
        response = client.get("/api/v1/words", params={"keyword": '"home"'})

        assert [word["id"] for word in response.json()] == ["w-ulo"]

    def test_main_key_searches_headwords_only(self, settings, sample_words, client):
        without_key = client.get("/api/v1/words", params={"keyword": "ulo"}, headers={"X-API-Key": "other"})
        app = create_app(settings, repository=FakeWordRepository(words=sample_words), cache_store=InMemoryCacheStore())
        with TestClient(app) as main_key_client:
            with_key = main_key_client.get(
                "/api/v1/words", params={"keyword": "ulo"}, headers={"X-API-Key": "main-test-key"}
            )

        assert [word["id"] for word in without_key.json()] == ["w-ulo"]
        assert with_key.json() == []
        assert with_key.headers["content-range"] == "words */0"

    def test_missing_keyword_is_rejected(self, client):
        response = client.get("/api/v1/words")

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "No search term was provided"}

    def test_invalid_flag_is_rejected(self, client):
        response = client.get("/api/v1/words", params={"keyword": "bia", "limit": "lots"})

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid limit"


@pytest.mark.unit
class TestWordAndExampleLookup:
    def test_get_word(self, client):
        response = client.get("/api/v1/words/w-ulo")

        assert response.status_code == 200
        assert response.json()["word"] == "ụlọ"

    def test_unknown_word_is_404(self, client):
        response = client.get("/api/v1/words/missing")

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "No word exists with the provided id."}

    def test_get_example(self, client):
        response = client.get("/api/v1/examples/ex-ulo-1")

        assert response.status_code == 200
        assert response.json()["associatedWords"] == ["w-ulo"]

    def test_unknown_example_is_404(self, client):
        assert client.get("/api/v1/examples/missing").status_code == 404


@pytest.mark.unit
class TestCreateWord:
    def test_creates_word_with_examples(self, client):
        response = client.post(
            "/api/v1/words",
            json={
                "word": "mmiri",
                "wordClass": "NNC",
                "definitions": ["water"],
                "examples": [{"igbo": "Mmiri na-ezo.", "english": "It is raining."}],
            },
        )

        assert response.status_code == 201
        body = response.json()
        assert len(body["examples"]) == 1
        example = client.get(f"/api/v1/examples/{body['examples'][0]}").json()
        assert example["associatedWords"] == [body["id"]]

    def test_invalid_payload_is_400(self, client):
        response = client.post("/api/v1/words", json={"word": ""})

        assert response.status_code == 400
        assert response.json()["message"].startswith("Invalid request: word:")

    def test_malformed_json_is_400(self, client):
        response = client.post("/api/v1/words", content=b"{not json", headers={"content-type": "application/json"})

        assert response.status_code == 400


@pytest.mark.unit
class TestErrorMapping:
    def test_store_failure_is_502(self, settings):
        repository = AsyncMock()
        repository.find_words.side_effect = UpstreamQueryError("Word store find_words failed")
        app = create_app(settings, repository=repository, cache_store=InMemoryCacheStore())

        with TestClient(app) as test_client:
            response = test_client.get("/api/v1/words", params={"keyword": "bia"})

        assert response.status_code == 502
        assert response.json()["success"] is False

    def test_unexpected_errors_are_masked(self, settings):
        repository = FakeWordRepository()
        repository.get_word = AsyncMock(side_effect=RuntimeError("secret internals"))
        app = create_app(settings, repository=repository, cache_store=InMemoryCacheStore())

        with TestClient(app, raise_server_exceptions=False) as test_client:
            response = test_client.get("/api/v1/words/w1")

        assert response.status_code == 500
        assert "secret internals" not in response.text


@pytest.mark.unit
class TestOperationalEndpoints:
    def test_health(self, client):
        body = client.get("/health").json()

        assert body["status"] == "healthy"
        assert body["store"]["word_count"] == 4
        assert body["cache"]["backend"] == "memory"

    def test_health_degrades_when_cache_is_down(self, settings, fake_repository, failing_cache_store):
        app = create_app(settings, repository=fake_repository, cache_store=failing_cache_store)

        with TestClient(app) as test_client:
            response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"

    def test_metrics(self, client):
        client.get("/api/v1/words", params={"keyword": "bia"})

        response = client.get("/metrics")

        assert response.status_code == 200
        assert "igbo_api_word_searches_total" in response.text


@pytest.mark.unit
@pytest.mark.parametrize(
    ("skip", "returned", "total", "expected"),
    [(0, 10, 42, "words 0-9/42"), (20, 2, 22, "words 20-21/22"), (0, 0, 0, "words */0")],
)
def test_content_range(skip, returned, total, expected):
    assert content_range(skip, returned, total) == expected


@pytest.mark.unit
def test_memory_cache_is_bounded_by_settings():
    store = build_cache_store(Settings(redis_url="", cache_max_entries=5))

    assert isinstance(store, InMemoryCacheStore)
    assert store.max_entries == 5


@pytest.mark.unit
class TestServerEntryPoint:
    def test_main_hands_uvicorn_an_import_string(self, monkeypatch):
        monkeypatch.setenv("UVICORN_WORKERS", "4")

        with patch("uvicorn.run") as run:
            main()

        args, kwargs = run.call_args
        assert args == ("igbo_api.app:build_app_from_env",)
        assert kwargs["factory"] is True
        assert kwargs["workers"] == 4
        assert kwargs["log_config"] is None

    def test_factory_builds_app_from_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "words.sqlite"))

        with patch("igbo_api.app.init_tracing") as init_tracing:
            app = build_app_from_env()

        init_tracing.assert_called_once_with(service_name="igbo-api")
        assert app.state.settings.database_path == tmp_path / "words.sqlite"
