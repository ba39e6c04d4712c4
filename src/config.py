from __future__ import annotations

import re
from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    DB_BACKEND: str = "sqlite"
    SQLITE_PATH: str = "./data/schools.db"
    CORS_ORIGINS: str = ""  # Comma-separated origins, empty = same-origin only

    DEFAULT_CITY: str = "Harare"

    # Recommendation engine
    PINNED_SCHOOLS: str = "st eurit international school"  # names / slugs, "|" or "," separated
    RECOMMEND_LIMIT: int = 100
    CHAT_RESULT_LIMIT: int = 5
    DEBUG_RECOMMEND: bool = False

    # Promotional links attached to the pinned school
    SITE_URL: str = ""
    PINNED_REGISTER_PATH: str = "/register/{slug}"
    DOCS_BASE_PATH: str = "/docs"
    PINNED_DOCUMENTS: str = (
        "st-eurit-registration.pdf,st-eurit-profile.pdf,st-eurit-enrollment-requirements.pdf"
    )
    PINNED_IMAGES: str = "st-eurit.jpg,st-eurit-pic2.jpg"

    LOG_LEVEL: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    def pinned_schools(self) -> list[str]:
        """Return the configured pin candidates, lowercased with blanks dropped."""
        return [p.strip().lower() for p in re.split(r"[|,]", self.PINNED_SCHOOLS) if p.strip()]

    def pinned_documents(self) -> list[str]:
        return [d.strip() for d in self.PINNED_DOCUMENTS.split(",") if d.strip()]

    def pinned_images(self) -> list[str]:
        return [i.strip() for i in self.PINNED_IMAGES.split(",") if i.strip()]


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()
