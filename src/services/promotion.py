"""Promotional display fields for the pinned school.

The matching engine only flags the pinned result; registration and document
links are attached here, on the caller side.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from src.config import Settings
from src.services.matching import MatchResult


@dataclass
class PinnedSchoolSummary:
    id: Any
    slug: str
    name: str
    city: str
    register_url: str
    hero_image: str | None = None
    document_urls: list[str] = field(default_factory=list)
    image_urls: list[str] = field(default_factory=list)

    @property
    def media_urls(self) -> list[str]:
        """Images then documents, in the order a chat reply attaches them."""
        return [*self.image_urls, *self.document_urls]


def _absolute(settings: Settings, path: str) -> str:
    return f"{settings.SITE_URL.rstrip('/')}{path}"


def docs_url(settings: Settings, filename: str) -> str:
    base = "/" + settings.DOCS_BASE_PATH.strip("/")
    return _absolute(settings, f"{base}/{filename}")


def register_url(settings: Settings, slug: str) -> str:
    return _absolute(settings, settings.PINNED_REGISTER_PATH.format(slug=slug))


def build_pinned_summary(result: MatchResult, settings: Settings) -> PinnedSchoolSummary:
    """Return the identity of *result* plus its configured promotional links."""
    school = result.school
    image_urls = [docs_url(settings, name) for name in settings.pinned_images()]
    return PinnedSchoolSummary(
        id=school.id,
        slug=school.slug,
        name=school.name,
        city=school.city,
        register_url=register_url(settings, school.slug),
        hero_image=school.hero_image or (image_urls[0] if image_urls else None),
        document_urls=[docs_url(settings, name) for name in settings.pinned_documents()],
        image_urls=image_urls,
    )
