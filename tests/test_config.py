"""
Tests for configuration settings
"""

from unittest.mock import patch

import pytest
from pydantic import ValidationError

from italian_practice.config import Settings, get_database_path, get_settings


class TestSettings:
    """Test Settings defaults and environment overrides"""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("DEFAULT_MASTERY_THRESHOLD", raising=False)
        settings = Settings(_env_file=None)

        assert settings.database_url == "sqlite:///data/practice.db"
        assert settings.default_mastery_threshold == 10
        assert settings.default_exclude_mastered is True
        assert settings.enabled_verb_tenses_list == ["Indicativo.Presente"]
        assert settings.max_import_records == 1000

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_MASTERY_THRESHOLD", "5")
        monkeypatch.setenv(
            "DEFAULT_ENABLED_VERB_TENSES", "Indicativo.Presente, Indicativo.Imperfetto"
        )

        settings = Settings(_env_file=None)

        assert settings.default_mastery_threshold == 5
        assert settings.enabled_verb_tenses_list == [
            "Indicativo.Presente",
            "Indicativo.Imperfetto",
        ]

    def test_negative_threshold_rejected(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_MASTERY_THRESHOLD", "-1")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_empty_tenses(self):
        settings = Settings(_env_file=None, default_enabled_verb_tenses="  ")
        assert settings.enabled_verb_tenses_list == []

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()


class TestDatabasePath:
    """Test database path derivation"""

    def test_sqlite_url(self):
        settings = Settings(_env_file=None, database_url="sqlite:///tmp/practice_test.db")
        with patch("italian_practice.config.get_settings", return_value=settings):
            assert get_database_path() == "tmp/practice_test.db"

    def test_non_sqlite_url_falls_back(self):
        settings = Settings(_env_file=None, database_url="postgres://localhost/db")
        with patch("italian_practice.config.get_settings", return_value=settings):
            assert get_database_path() == "data/practice.db"


class TestTranslationLanguage:
    """Test translation language choices"""

    def test_english_accepted(self):
        settings = Settings(_env_file=None, translation_language="en")
        assert settings.translation_language == "en"

    def test_unknown_language_rejected(self, monkeypatch):
        monkeypatch.setenv("TRANSLATION_LANGUAGE", "de")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)
