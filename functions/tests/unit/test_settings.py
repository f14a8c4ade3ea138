"""Unit tests for environment-driven settings."""

import pytest

from config.settings import Settings


class TestSettings:

    def test_defaults(self, monkeypatch):
        for name in ("REPORTS_COLLECTION", "USER_ROLES_COLLECTION", "PRICING_CACHE_HOURS", "BRAND_NAME"):
            monkeypatch.delenv(name, raising=False)

        config = Settings()

        assert config.reports_collection == "pdfs"
        assert config.user_roles_collection == "userRoles"
        assert config.pricing_cache_hours == 24
        config.validate()

    def test_negative_cache_hours_rejected(self, monkeypatch):
        monkeypatch.setenv("PRICING_CACHE_HOURS", "-1")

        with pytest.raises(ValueError, match="PRICING_CACHE_HOURS"):
            Settings().validate()

    def test_empty_collection_rejected(self, monkeypatch):
        monkeypatch.setenv("REPORTS_COLLECTION", "")

        with pytest.raises(ValueError, match="REPORTS_COLLECTION"):
            Settings().validate()
