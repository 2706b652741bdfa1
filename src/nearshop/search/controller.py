"""
Autocomplete search controller.

Owns debounce timing, input validation and race-safe sequencing around a
prediction source (normally `PlaceAutocompleteClient`).

State machine (`SearchPhase`):
- any keystroke cancels the pending debounce timer and bumps the keystroke ticket;
- an empty or too-short query goes straight to IDLE with no predictions;
- otherwise DEBOUNCING, and when the timer for the *latest* ticket fires,
  SEARCHING with `generation + 1`;
- a response is applied only if its generation is still current and the
  controller is still SEARCHING; anything else is stale and dropped.

Ordering rests on the generation tag alone. In-flight requests are never
cancelled; their responses are ignored.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Any, Callable, Protocol

from nearshop.config.settings import Settings
from nearshop.core.errors import InvalidInputError, LocationSearchError
from nearshop.domain.models import PlacePrediction, SearchPhase, SearchState

logger = logging.getLogger(__name__)


class PredictionSource(Protocol):
    async def fetch_predictions(
        self,
        query: str,
        *,
        language_code: str | None = None,
        country_filter: str | None = None,
    ) -> list[PlacePrediction]: ...


StateListener = Callable[[SearchState], None]


def validate_query(text: str, *, min_length: int) -> str:
    """Return the trimmed query, or raise `InvalidInputError` if it must not be sent."""
    query = text.strip()
    if len(query) < min_length:
        raise InvalidInputError(f"query shorter than {min_length} characters")
    return query


class SearchQueryController:
    def __init__(
        self,
        source: PredictionSource,
        *,
        debounce_seconds: float = 0.5,
        min_query_length: int = 3,
        language_code: str | None = None,
        country_filter: str | None = None,
        on_change: StateListener | None = None,
    ):
        self._source = source
        self._debounce_seconds = float(debounce_seconds)
        self._min_query_length = int(min_query_length)
        self._language_code = language_code
        self._country_filter = country_filter
        self._on_change = on_change

        self._state = SearchState()
        self._ticket = 0
        self._timer: asyncio.Task[None] | None = None
        self._in_flight: set[asyncio.Task[None]] = set()
        self._closed = False

    @classmethod
    def from_settings(
        cls, settings: Settings, source: PredictionSource, **kwargs: Any
    ) -> "SearchQueryController":
        return cls(
            source,
            debounce_seconds=settings.search.debounce_ms / 1000,
            min_query_length=settings.search.min_query_length,
            language_code=settings.provider.language_code,
            country_filter=settings.provider.country_filter,
            **kwargs,
        )

    @property
    def state(self) -> SearchState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._closed

    def _set(self, **changes: Any) -> None:
        self._state = replace(self._state, **changes)
        if self._on_change is not None:
            self._on_change(self._state)

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    def on_query_changed(self, text: str) -> None:
        """Handle one keystroke (must be called from the running event loop)."""
        if self._closed:
            logger.debug("Ignoring keystroke on closed controller")
            return

        self._ticket += 1
        self._cancel_timer()

        try:
            query = validate_query(text, min_length=self._min_query_length)
        except InvalidInputError:
            self._set(query=text, predictions=(), phase=SearchPhase.IDLE)
            return

        self._set(query=text, predictions=(), phase=SearchPhase.DEBOUNCING)
        self._timer = asyncio.get_running_loop().create_task(self._debounce(self._ticket, query))

    def clear(self) -> None:
        self.on_query_changed("")

    def accept_selection(self, text: str) -> None:
        """Show a chosen prediction's text without searching for it."""
        if self._closed:
            return
        self._ticket += 1
        self._cancel_timer()
        self._set(query=text, predictions=(), phase=SearchPhase.IDLE)

    async def _debounce(self, ticket: int, query: str) -> None:
        await asyncio.sleep(self._debounce_seconds)
        if ticket != self._ticket or self._closed:
            return

        self._timer = None
        generation = self._state.generation + 1
        self._set(phase=SearchPhase.SEARCHING, generation=generation)

        task = asyncio.get_running_loop().create_task(self._search(generation, query))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _search(self, generation: int, query: str) -> None:
        logger.debug("Searching generation=%s query=%r", generation, query)
        try:
            predictions = await self._source.fetch_predictions(
                query,
                language_code=self._language_code,
                country_filter=self._country_filter,
            )
        except LocationSearchError as exc:
            logger.warning("Autocomplete failed for generation=%s: %s", generation, exc)
            self._apply(generation, (), SearchPhase.ERROR)
            return
        self._apply(generation, tuple(predictions), SearchPhase.RESULTS)

    def _apply(
        self, generation: int, predictions: tuple[PlacePrediction, ...], phase: SearchPhase
    ) -> None:
        if (
            self._closed
            or generation != self._state.generation
            or self._state.phase is not SearchPhase.SEARCHING
        ):
            logger.debug(
                "Discarding stale response generation=%s (current=%s)",
                generation,
                self._state.generation,
            )
            return
        self._set(predictions=predictions, phase=phase)

    async def drain(self) -> None:
        """Wait until no debounce timer or search task is pending."""
        while True:
            pending = [t for t in (self._timer, *self._in_flight) if t is not None and not t.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    def close(self) -> None:
        """Tear down: clear the timer and make every in-flight generation stale."""
        self._closed = True
        self._ticket += 1
        self._cancel_timer()
