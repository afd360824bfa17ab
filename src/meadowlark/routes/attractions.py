"""Attraction API — failures answer ``{"error": message}`` instead of raising."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError
from starlette.requests import Request

from meadowlark.catalog import AttractionRepository
from meadowlark.exceptions import RecordNotFound, StoreError

logger = logging.getLogger(__name__)


class AttractionIn(BaseModel):
    name: str
    description: str = ""
    lat: float | None = None
    lng: float | None = None
    email: str | None = None


def _error(message: str, status_code: int = 500) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


async def _read_attraction(request: Request) -> AttractionIn:
    """Parse an urlencoded or multipart form, otherwise a JSON body.

    Empty form fields count as absent.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(
        ("application/x-www-form-urlencoded", "multipart/form-data")
    ):
        form = await request.form()
        data: Any = {
            key: value
            for key, value in form.items()
            if isinstance(value, str) and value != ""
        }
    else:
        data = await request.json()
    return AttractionIn.model_validate(data)


def build_attraction_router(attractions: AttractionRepository) -> APIRouter:
    router = APIRouter()

    @router.get("/attractions", response_model=None)
    async def list_attractions() -> list[dict[str, Any]] | JSONResponse:
        try:
            approved = await attractions.list_approved()
        except StoreError:
            logger.exception("Listing attractions failed")
            return _error("Internal error.")
        return [
            {
                "name": a.name,
                "description": a.description,
                "location": a.location.model_dump(),
            }
            for a in approved
        ]

    @router.post("/attraction", response_model=None)
    async def create_attraction(request: Request) -> dict[str, Any] | JSONResponse:
        try:
            body = await _read_attraction(request)
        except (ValueError, ValidationError):
            return _error("Invalid request.", status_code=422)

        try:
            attraction_id = await attractions.create(
                name=body.name,
                description=body.description,
                lat=body.lat,
                lng=body.lng,
                email=body.email,
            )
        except StoreError:
            logger.exception("Adding attraction failed")
            return _error("Unable to add attraction.")
        return {"id": attraction_id}

    @router.get("/attraction/{attraction_id}", response_model=None)
    async def get_attraction(attraction_id: str) -> dict[str, Any] | JSONResponse:
        try:
            attraction = await attractions.get(attraction_id)
        except RecordNotFound:
            return _error("Unable to retrieve attraction.", status_code=404)
        except StoreError:
            logger.exception("Fetching attraction %s failed", attraction_id)
            return _error("Unable to retrieve attraction.")
        return {
            "name": attraction.name,
            "description": attraction.description,
            "location": attraction.location.model_dump(),
        }

    return router
