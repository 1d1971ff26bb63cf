"""
Configuration management for the Italian practice core
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Database Configuration
    database_url: str = Field(default="sqlite:///data/practice.db")

    # Application Configuration
    log_level: str = Field(default="INFO")
    debug: bool = Field(default=False)

    # Practice session defaults
    default_display_count: str = Field(default="10")
    default_sort_option: str = Field(default="none")
    default_exclude_mastered: bool = Field(default=True)
    default_mastery_threshold: int = Field(default=10, ge=0)
    default_enabled_verb_tenses: str = Field(default="Indicativo.Presente")
    translation_language: Literal["pt", "en"] = Field(default="pt")

    # Import limits
    max_import_records: int = Field(default=1000, gt=0)

    @property
    def enabled_verb_tenses_list(self) -> list[str]:
        """Convert default_enabled_verb_tenses string to list of 'Mood.Tense' keys"""
        if not self.default_enabled_verb_tenses.strip():
            return []
        return [
            tense.strip()
            for tense in self.default_enabled_verb_tenses.split(",")
            if tense.strip()
        ]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore"
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


def get_database_path() -> str:
    """Get the database file path from URL"""
    settings = get_settings()
    if settings.database_url.startswith("sqlite:///"):
        return settings.database_url.replace("sqlite:///", "")
    return "data/practice.db"
