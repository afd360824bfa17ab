"""Catalog, attraction, listener and user documents."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, Field

Role = Literal["customer", "employee", "admin"]


def _now() -> datetime:
    return datetime.now(UTC)


class Vacation(BaseModel):
    name: str
    slug: str
    category: str
    sku: str
    description: str
    price_in_cents: int
    tags: list[str] = Field(default_factory=list)
    in_season: bool = False
    available: bool = True
    requires_waiver: bool = False
    maximum_guests: int
    notes: str = ""
    packages_sold: int = 0

    @property
    def price(self) -> str:
        return f"${self.price_in_cents / 100:.2f}"


class Location(BaseModel):
    lat: float | None = None
    lng: float | None = None


class HistoryEntry(BaseModel):
    event: str
    email: str | None = None
    notes: str | None = None
    date: datetime = Field(default_factory=_now)


class Attraction(BaseModel):
    id: str | None = None
    name: str
    description: str = ""
    location: Location = Field(default_factory=Location)
    history: list[HistoryEntry] = Field(default_factory=list)
    approved: bool = False
    updated_at: datetime | None = None


class VacationInSeasonListener(BaseModel):
    email: str
    skus: list[str] = Field(default_factory=list)


class User(BaseModel):
    id: str | None = None
    auth_id: str
    name: str
    email: str | None = None
    role: Role = "customer"
    created: datetime = Field(default_factory=_now)
