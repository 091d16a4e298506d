"""Stat and value resource endpoints.

GET    /api/v1/stats                              - List stats, newest first
POST   /api/v1/stats                              - Create an empty stat
GET    /api/v1/stats/{stat_id}                    - Get one stat
PUT    /api/v1/stats/{stat_id}                    - Partially update a stat
DELETE /api/v1/stats/{stat_id}                    - Delete a stat and its values
GET    /api/v1/stats/{stat_id}/values             - List values, newest first
POST   /api/v1/stats/{stat_id}/values             - Add a value
GET    /api/v1/stats/{stat_id}/values/{value_id}  - Get one value
DELETE /api/v1/stats/{stat_id}/values/{value_id}  - Delete one value
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, field_validator

from api.deps import get_stat_service
from gateway.stat_store import StatPatch
from services.stat_service import (
    DeleteConfirmation,
    StatService,
    StatView,
    ValueDetailView,
    ValuesView,
)

router = APIRouter()


class NewValueRequest(BaseModel):
    """Value to append to a stat."""

    value: str = Field(
        "", description="Observation; empty string records a plain count/event"
    )
    timestamp: datetime | None = Field(
        None, description="When the observation occurred; defaults to now (UTC if naive)"
    )

    @field_validator("value", mode="before")
    @classmethod
    def coerce_number(cls, v: Any) -> Any:
        """Numbers are stored as their decimal string."""
        if v is None:
            return ""
        if isinstance(v, bool):
            return v
        if isinstance(v, float) and v.is_integer():
            return str(int(v))
        if isinstance(v, (int, float)):
            return str(v)
        return v


@router.get("", response_model=list[StatView])
async def list_stats(
    service: StatService = Depends(get_stat_service),
) -> list[StatView]:
    """Return all stats, newest first."""
    return await service.list_stats()


@router.post("", response_model=StatView)
async def create_stat(
    service: StatService = Depends(get_stat_service),
) -> StatView:
    """Create an empty stat."""
    return await service.create_stat()


@router.get("/{stat_id}", response_model=StatView)
async def get_stat(
    stat_id: str,
    service: StatService = Depends(get_stat_service),
) -> StatView:
    return await service.get_stat(stat_id)


@router.put("/{stat_id}", response_model=StatView)
async def update_stat(
    stat_id: str,
    patch: StatPatch,
    service: StatService = Depends(get_stat_service),
) -> StatView:
    """Apply a partial update.

    At least one of name, description, chart, public, showroom must be
    present and correctly typed; everything else keeps its value.
    """
    return await service.update_stat(stat_id, patch)


@router.delete("/{stat_id}", response_model=DeleteConfirmation)
async def delete_stat(
    stat_id: str,
    service: StatService = Depends(get_stat_service),
) -> DeleteConfirmation:
    """Delete a stat with all of its values.

    Reports success even if no stat had this id.
    """
    return await service.delete_stat(stat_id)


@router.get("/{stat_id}/values", response_model=ValuesView)
async def list_values(
    stat_id: str,
    service: StatService = Depends(get_stat_service),
) -> ValuesView:
    return await service.list_values(stat_id)


@router.post("/{stat_id}/values", response_model=ValuesView)
async def add_value(
    stat_id: str,
    request: NewValueRequest,
    service: StatService = Depends(get_stat_service),
) -> ValuesView:
    """Append a value and return the refreshed values view."""
    return await service.add_value(stat_id, request.value, request.timestamp)


@router.get("/{stat_id}/values/{value_id}", response_model=ValueDetailView)
async def get_value(
    stat_id: str,
    value_id: str,
    service: StatService = Depends(get_stat_service),
) -> ValueDetailView:
    return await service.get_value(stat_id, value_id)


@router.delete("/{stat_id}/values/{value_id}", response_model=ValuesView)
async def delete_value(
    stat_id: str,
    value_id: str,
    service: StatService = Depends(get_stat_service),
) -> ValuesView:
    """Remove one value and return the refreshed values view."""
    return await service.delete_value(stat_id, value_id)
