from __future__ import annotations

import datetime

from sqlalchemy import JSON, DateTime, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Async-compatible declarative base for all ORM models."""


class School(Base):
    __tablename__ = "schools"
    __table_args__ = (UniqueConstraint("city", "normalized_name", name="uq_schools_city_normalized_name"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    normalized_name: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    city: Mapped[str] = mapped_column(String(100), nullable=False, default="Harare", index=True)

    phase: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)  # Pre-School / Primary / High
    boarding_type: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)  # Day / Boarding
    curricula: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)  # Cambridge / ZIMSEC / IB
    gender: Mapped[str | None] = mapped_column(String(20), nullable=True)

    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    contact: Mapped[str | None] = mapped_column(String(255), nullable=True)

    tier: Mapped[str | None] = mapped_column(String(20), nullable=True, index=True)  # premium / upper-middle / ...
    learning_environment: Mapped[str | None] = mapped_column(String(30), nullable=True)  # Advanced / Enhanced / ...
    facilities: Mapped[dict[str, bool]] = mapped_column(JSON, nullable=False, default=dict)

    website: Mapped[str | None] = mapped_column(Text, nullable=True)
    facebook_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    logo: Mapped[str | None] = mapped_column(Text, nullable=True)
    hero_image: Mapped[str | None] = mapped_column(Text, nullable=True)

    source: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_verified_at: Mapped[datetime.datetime | None] = mapped_column(DateTime, nullable=True)

    def __repr__(self) -> str:
        return f"<School(id={self.id}, name={self.name!r}, city={self.city!r})>"
