"""
Domain models.

These types are the stable "contract" between layers:
- provider parsing (`PlacePrediction`, `ResolvedAddress`)
- the shop directory and ranking (`ShopLocation`, `RankedShop`)
- the search state machine (`SearchPhase`, `SearchState`)

Provider-facing records are frozen Pydantic models so parsed payloads are
validated once and then shared safely; `SearchState` is a frozen dataclass
snapshot handed to the UI layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, ConfigDict

from nearshop.core.geo import GeoPoint


class PlacePrediction(BaseModel):
    """One autocomplete suggestion; `place_id` is the provider's opaque id."""

    model_config = ConfigDict(frozen=True)

    place_id: str
    description: str
    main_text: str = ""
    secondary_text: str = ""


class ResolvedAddress(BaseModel):
    """A coordinate plus its address; `province`/`city` are "" when unknown."""

    model_config = ConfigDict(frozen=True)

    formatted_address: str
    province: str = ""
    city: str = ""
    point: GeoPoint


class ShopLocation(BaseModel):
    """A shop's location; `point` is None when the record lacks coordinates."""

    model_config = ConfigDict(frozen=True)

    id: str
    point: GeoPoint | None = None


class RankedShop(BaseModel):
    """Ranking output; `distance_km` is None when either point is unavailable."""

    model_config = ConfigDict(frozen=True)

    id: str
    distance_km: float | None = None


class SearchPhase(str, Enum):
    IDLE = "idle"
    DEBOUNCING = "debouncing"
    SEARCHING = "searching"
    RESULTS = "results"
    ERROR = "error"


@dataclass(frozen=True)
class SearchState:
    """Snapshot of the autocomplete state machine."""

    query: str = ""
    predictions: tuple[PlacePrediction, ...] = field(default_factory=tuple)
    phase: SearchPhase = SearchPhase.IDLE
    generation: int = 0
