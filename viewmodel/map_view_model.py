"""View model owning event, filter, marker and focus state for the map screen."""
import asyncio
import logging
from typing import List, Optional, Protocol

from processor.errors import FetchDecodeError, FetchNetworkError
from processor.filters import unique_neighborhoods, visible_events
from processor.models import (
    EventRecord,
    FilterSelection,
    FocusedPlace,
    MarkerDescriptor,
    ResolvedPlace,
)
from processor.reconciler import Reconciler
from viewmodel.presentation import neighborhood_filter_label
from viewmodel.selection import SelectionState

logger = logging.getLogger(__name__)


class EventFetcher(Protocol):
    """Source of event records."""

    def fetch(self) -> List[EventRecord]:
        ...


class MapSurface(Protocol):
    """Map rendering surface that displays marker descriptors."""

    def render_markers(self, markers: List[MarkerDescriptor]) -> None:
        ...


class MapViewModel:
    """
    Single owner of map screen state.

    All state changes happen on the event loop running these coroutines.
    Blocking fetches and lookups run in worker threads and their results
    are applied only after they return to the loop.
    """

    def __init__(
        self,
        fetcher: EventFetcher,
        reconciler: Reconciler,
        map_surface: Optional[MapSurface] = None
    ):
        """
        Initialize the view model.

        Args:
            fetcher: Source of event records
            reconciler: Reconciliation engine owning resolved places
            map_surface: Optional surface notified whenever markers change
        """
        self.fetcher = fetcher
        self.reconciler = reconciler
        self.map_surface = map_surface

        self.events: List[EventRecord] = []
        self.is_loading = False
        self.error: Optional[str] = None
        self.filters = FilterSelection()
        self.selection = SelectionState()
        self.is_neighborhood_filter_expanded = False
        self.focused_photo: Optional[bytes] = None

        self._fetch_ticket = 0
        self._applied_ticket = 0
        self._reconciled_events: Optional[List[EventRecord]] = None

    # Fetching

    async def fetch_data(self) -> None:
        """
        Fetch events and reconcile places for the visible subset.

        Overlapping calls are allowed. A response is applied only if no
        newer response has already been applied, and the loading flag
        tracks the most recent call.
        """
        self._fetch_ticket += 1
        ticket = self._fetch_ticket
        self.is_loading = True
        self.error = None

        events: Optional[List[EventRecord]] = None
        error: Optional[str] = None

        try:
            events = await asyncio.to_thread(self.fetcher.fetch)
        except FetchNetworkError as e:
            error = f"Network error: {e.detail}"
        except FetchDecodeError as e:
            error = f"Decoding error: {e.detail}"
        except Exception as e:
            logger.error(f"Unexpected error fetching events: {e}", exc_info=True)
            error = f"Unexpected error: {e}"

        if ticket == self._fetch_ticket:
            self.is_loading = False

        if ticket < self._applied_ticket:
            logger.info(f"Discarding fetch response {ticket}; response {self._applied_ticket} already applied")
            return
        self._applied_ticket = ticket

        if error is not None:
            logger.error(error)
            self.error = error
            return

        self.error = None
        self.events = events
        logger.info(f"Successfully fetched {len(events)} events")
        await self._refresh_places()

    # Derived state

    def visible_events(self) -> List[EventRecord]:
        return visible_events(self.events, self.filters)

    @property
    def unique_neighborhoods(self) -> List[str]:
        return unique_neighborhoods(self.events)

    @property
    def neighborhood_filter_label(self) -> str:
        return neighborhood_filter_label(self.filters.selected_neighborhoods)

    def markers(self) -> List[MarkerDescriptor]:
        return self.reconciler.markers()

    @property
    def focused(self) -> Optional[FocusedPlace]:
        """
        Focused place built from the reconciler's current mapping.

        None when nothing is focused or the focused place has no marker.
        """
        identifier = self.selection.focused_identifier
        if identifier is None:
            return None
        place = self.reconciler.get(identifier)
        if place is None:
            return None
        return FocusedPlace(identifier=identifier, resolved_place=place)

    # Reconciliation

    async def reconcile(self) -> List[ResolvedPlace]:
        """Resolve places for the currently visible events."""
        visible = self.visible_events()
        self._reconciled_events = visible
        return await self.reconciler.reconcile(visible, on_change=self._render)

    async def _refresh_places(self) -> None:
        if self.visible_events() == self._reconciled_events:
            logger.debug("Visible events unchanged; skipping reconciliation")
            return
        await self.reconcile()

    def _render(self) -> None:
        if self.map_surface is not None:
            self.map_surface.render_markers(self.markers())

    # Filter intents

    async def toggle_active_only(self) -> None:
        self.filters.active_only = not self.filters.active_only
        await self._refresh_places()

    async def toggle_neighborhood(self, name: str) -> None:
        selected = self.filters.selected_neighborhoods
        if name in selected:
            selected.remove(name)
        else:
            selected.add(name)
        await self._refresh_places()

    async def clear_neighborhood_filter(self) -> None:
        self.filters.selected_neighborhoods.clear()
        self.is_neighborhood_filter_expanded = False
        await self._refresh_places()

    def toggle_neighborhood_dropdown(self) -> None:
        self.is_neighborhood_filter_expanded = not self.is_neighborhood_filter_expanded

    # Selection intents

    def select_marker(self, identifier: str) -> None:
        if self.selection.select(identifier, self.reconciler.snapshot()):
            self.focused_photo = None

    def dismiss_detail(self) -> None:
        if self.selection.dismiss():
            self.focused_photo = None

    def drag_ended(self, vertical_translation: float) -> None:
        if self.selection.drag_ended(vertical_translation):
            self.focused_photo = None

    async def load_focused_photo(self) -> Optional[bytes]:
        """
        Load the featured photo of the focused place.

        Returns:
            Photo bytes, or None if nothing is focused, the place has no
            photo, loading failed, or focus moved while loading
        """
        focus = self.focused
        if focus is None or not focus.resolved_place.photo_reference:
            return None

        photo = await self.reconciler.resolver.fetch_photo(focus.resolved_place.photo_reference)

        if self.selection.focused_identifier != focus.identifier:
            logger.debug(f"Focus moved while loading photo for {focus.identifier}")
            return None

        self.focused_photo = photo
        return photo
