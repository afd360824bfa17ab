"""Repositories over the document store, plus the vacation seed set."""

from __future__ import annotations

import logging
from datetime import datetime

from meadowlark.exceptions import RecordNotFound
from meadowlark.models import (
    Attraction,
    HistoryEntry,
    Location,
    Vacation,
    VacationInSeasonListener,
)
from meadowlark.store import Document, DocumentStore

logger = logging.getLogger(__name__)

SEED_VACATIONS: tuple[Vacation, ...] = (
    Vacation(
        name="Hood River Day Trip",
        slug="hood-river-day-trip",
        category="Day Trip",
        sku="HR199",
        description=(
            "Spend a day sailing on the Columbia and "
            "enjoying craft beers in Hood River!"
        ),
        price_in_cents=9995,
        tags=["day trip", "hood river", "sailing", "windsurfing", "breweries"],
        in_season=True,
        maximum_guests=16,
        available=True,
        packages_sold=0,
    ),
    Vacation(
        name="Oregon Coast Getaway",
        slug="oregon-coast-getaway",
        category="Weekend Getaway",
        sku="OC39",
        description="Enjoy the ocean air and quaint coastal towns!",
        price_in_cents=269995,
        tags=["weekend getaway", "oregon coast", "beachcombing"],
        in_season=False,
        maximum_guests=8,
        available=True,
        packages_sold=0,
    ),
    Vacation(
        name="Rock Climbing in Bend",
        slug="rock-climbing-in-bend",
        category="Adventure",
        sku="B99",
        description="Experience the thrill of rock climbing in the high desert.",
        price_in_cents=289995,
        tags=[
            "weekend getaway",
            "bend",
            "high desert",
            "rock climbing",
            "hiking",
            "skiing",
        ],
        in_season=True,
        requires_waiver=True,
        maximum_guests=4,
        available=False,
        packages_sold=0,
        notes="The tour guide is currently recovering from a skiing accident.",
    ),
)


class VacationRepository:
    def __init__(self, store: DocumentStore) -> None:
        self._collection = store.collection("vacations")

    async def count(self) -> int:
        return await self._collection.count()

    async def add(self, vacation: Vacation) -> str:
        return await self._collection.insert(vacation.model_dump())

    async def list_available(self) -> list[Vacation]:
        documents = await self._collection.find({"available": True})
        return [Vacation.model_validate(doc) for doc in documents]

    async def get_by_sku(self, sku: str) -> Vacation | None:
        document = await self._collection.find_one({"sku": sku})
        return Vacation.model_validate(document) if document is not None else None


async def seed_vacations(repo: VacationRepository) -> int:
    """Insert the seed vacations into an empty catalog.

    Returns the number of records inserted; 0 when the catalog already
    holds anything.
    """
    if await repo.count():
        return 0
    for vacation in SEED_VACATIONS:
        await repo.add(vacation)
    logger.info("Seeded %d vacations", len(SEED_VACATIONS))
    return len(SEED_VACATIONS)


def _attraction(document: Document) -> Attraction:
    return Attraction.model_validate({**document, "id": document["_id"]})


class AttractionRepository:
    def __init__(self, store: DocumentStore) -> None:
        self._collection = store.collection("attractions")

    async def list_approved(self) -> list[Attraction]:
        documents = await self._collection.find({"approved": True})
        return [_attraction(doc) for doc in documents]

    async def create(
        self,
        *,
        name: str,
        description: str,
        lat: float | None,
        lng: float | None,
        email: str | None,
        now: datetime | None = None,
    ) -> str:
        history = HistoryEntry(event="created", email=email)
        if now is not None:
            history.date = now
        attraction = Attraction(
            name=name,
            description=description,
            location=Location(lat=lat, lng=lng),
            history=[history],
            approved=False,
        )
        return await self._collection.insert(attraction.model_dump(exclude={"id"}))

    async def get(self, attraction_id: str) -> Attraction:
        document = await self._collection.find_by_id(attraction_id)
        if document is None:
            raise RecordNotFound("attractions", attraction_id)
        return _attraction(document)


class ListenerRepository:
    def __init__(self, store: DocumentStore) -> None:
        self._collection = store.collection("vacation_in_season_listeners")

    async def subscribe(self, email: str, sku: str) -> VacationInSeasonListener:
        """Add ``sku`` to the listener for ``email``, creating it if needed."""
        document = await self._collection.find_one({"email": email})
        if document is None:
            listener = VacationInSeasonListener(email=email, skus=[sku])
            await self._collection.insert(listener.model_dump())
            return listener

        listener = VacationInSeasonListener.model_validate(document)
        if sku not in listener.skus:
            listener.skus.append(sku)
        await self._collection.replace(document["_id"], listener.model_dump())
        return listener
