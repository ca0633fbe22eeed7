"""
Rating Config Unit Tests

Environment-driven settings for the rating engine.
"""
import pytest

from core.config import (
    RatingConfig,
    ServiceSettings,
    TIE_POLICY_ERROR,
    TIE_POLICY_LOWEST_RULE_ID,
)
from microservices.rating_service.routes_registry import (
    SERVICE_METADATA,
    SERVICE_ROUTES,
    get_routes_metadata,
)

pytestmark = pytest.mark.unit


class TestRatingConfig:

    def test_defaults(self, monkeypatch):
        for var in ("RATING_SERVICE_PORT", "RATING_MAX_BATCH_SIZE",
                    "RATING_MAX_CONCURRENCY", "RATING_RULE_TIE_POLICY"):
            monkeypatch.delenv(var, raising=False)

        config = RatingConfig.from_env()

        assert config.service_port == 8230
        assert config.max_batch_size == 10000
        assert config.max_concurrency == 50
        assert config.rule_tie_policy == TIE_POLICY_LOWEST_RULE_ID

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("RATING_SERVICE_PORT", "9000")
        monkeypatch.setenv("RATING_MAX_BATCH_SIZE", "500")
        monkeypatch.setenv("RATING_MAX_CONCURRENCY", "8")
        monkeypatch.setenv("RATING_RULE_TIE_POLICY", "ERROR")

        config = RatingConfig.from_env()

        assert config.service_port == 9000
        assert config.max_batch_size == 500
        assert config.max_concurrency == 8
        assert config.rule_tie_policy == TIE_POLICY_ERROR

    def test_unknown_tie_policy_falls_back(self, monkeypatch):
        monkeypatch.setenv("RATING_RULE_TIE_POLICY", "random")
        assert RatingConfig.from_env().rule_tie_policy == TIE_POLICY_LOWEST_RULE_ID

    def test_invalid_numbers_use_defaults(self, monkeypatch):
        monkeypatch.setenv("RATING_MAX_BATCH_SIZE", "lots")
        monkeypatch.setenv("RATING_MAX_CONCURRENCY", "0")

        config = RatingConfig.from_env()

        assert config.max_batch_size == 10000
        assert config.max_concurrency == 1

    def test_service_settings_compose_sub_configs(self, monkeypatch):
        monkeypatch.setenv("POSTGRES_HOST", "db.internal")
        settings = ServiceSettings.from_env()

        assert settings.infrastructure.postgres_host == "db.internal"
        assert settings.rating.service_name == "rating_service"


class TestRoutesRegistry:

    def test_registration_metadata(self):
        meta = get_routes_metadata()

        assert meta["route_count"] == str(len(SERVICE_ROUTES))
        assert meta["base_path"] == "/api/v1/rating"
        assert "rate" in meta["rating"].split(",")
        assert "batch" in meta["rating"].split(",")
        assert all(len(value) <= 512 for value in meta.values())

    def test_service_metadata(self):
        assert SERVICE_METADATA["service_name"] == "rating_service"
        assert "minimum_charge_enforcement" in SERVICE_METADATA["capabilities"]
