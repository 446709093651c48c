"""
Tests for service configuration and error rendering.
"""

from shared.config import get_config
from shared.errors import CommentsNotFoundError, UpstreamError, ValidationError


class TestConfig:
    """Test cases for ServiceConfig."""

    def test_defaults(self, monkeypatch):
        for name in ("POSTS_ENV", "POSTS_CACHE_TTL_SECONDS", "POSTS_UPSTREAM_BASE_URL"):
            monkeypatch.delenv(name, raising=False)

        config = get_config("posts", 4000)

        assert config.is_local()
        assert config.cache_ttl_seconds == 100
        assert config.cache_sweep_interval_seconds == 120
        assert config.upstream_base_url == "https://jsonplaceholder.typicode.com"
        assert config.port == 4000

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("POSTS_ENV", "production")
        monkeypatch.setenv("POSTS_CACHE_TTL_SECONDS", "30")
        monkeypatch.setenv("POSTS_UPSTREAM_BASE_URL", "http://upstream.internal")

        config = get_config("posts", 4000)

        assert config.is_production()
        assert not config.is_development()
        assert config.cache_ttl_seconds == 30
        assert config.upstream_base_url == "http://upstream.internal"

    def test_explicit_overrides_win(self, monkeypatch):
        monkeypatch.setenv("POSTS_ENV", "production")

        assert get_config("posts", 4000, env="development").is_development()


class TestErrorRendering:
    """Test cases for error payloads."""

    def test_upstream_error_envelope_with_details(self):
        error = UpstreamError("placeholder_api", "unexpected status 500", {"status_code": 500})

        assert error.to_response(include_details=True) == {
            "errors": {
                "message": "placeholder_api: unexpected status 500",
                "error": {"code": "UPSTREAM_ERROR", "details": {"status_code": 500}},
            }
        }

    def test_upstream_error_envelope_without_details(self):
        error = UpstreamError("placeholder_api")

        assert error.to_response() == {"errors": {"message": "placeholder_api: Upstream request failed", "error": {}}}

    def test_client_errors_render_single_message(self):
        assert CommentsNotFoundError().to_response(include_details=True) == {"error": "Comments not found"}
        assert ValidationError.for_param("id").to_response() == {"error": "id: Invalid value"}
        assert ValidationError.for_param("id").status_code == 422
