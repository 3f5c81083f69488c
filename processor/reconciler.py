"""Reconciliation of event records with resolved place details."""
import dataclasses
import logging
from typing import Callable, Dict, List, Optional, Sequence

from places.resolver import PlaceResolver
from processor.models import EventRecord, MarkerDescriptor, ResolvedPlace

logger = logging.getLogger(__name__)


def unique_place_ids(events: Sequence[EventRecord]) -> List[str]:
    """
    Collect distinct place identifiers referenced by events.

    Args:
        events: Event records

    Returns:
        Identifiers in first-seen order, each exactly once
    """
    return list(dict.fromkeys(
        identifier for event in events for identifier in event.place_identifiers
    ))


def description_for(identifier: str, events: Sequence[EventRecord]) -> Optional[str]:
    """
    Return the description of the first event referencing a place.

    First match in input order wins, even when later events carry a
    different description for the same place.

    Args:
        identifier: Place identifier
        events: Event records in fetch order

    Returns:
        Description string or None
    """
    for event in events:
        if identifier in event.place_identifiers:
            return event.description
    return None


class Reconciler:
    """Owner of the identifier to ResolvedPlace mapping."""

    def __init__(self, resolver: PlaceResolver):
        """
        Initialize the reconciler.

        Args:
            resolver: Resolver used to look up place identifiers
        """
        self.resolver = resolver
        self._places: Dict[str, ResolvedPlace] = {}
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    async def reconcile(
        self,
        events: Sequence[EventRecord],
        on_change: Optional[Callable[[], None]] = None
    ) -> List[ResolvedPlace]:
        """
        Resolve the places referenced by events and merge event descriptions.

        Starting a call supersedes any call still in flight: the mapping is
        cleared, and results belonging to an older generation are dropped
        when they arrive instead of being applied.

        Args:
            events: Visible event records in fetch order
            on_change: Called after the mapping is cleared and after each
                place is applied to it

        Returns:
            Places resolved for these events; failed identifiers are omitted
        """
        self._generation += 1
        generation = self._generation
        self._places = {}
        if on_change is not None:
            on_change()

        events = list(events)
        place_ids = unique_place_ids(events)
        logger.info(
            f"Reconciling {len(events)} events",
            extra={'generation': generation, 'places': len(place_ids)}
        )

        resolved = []
        failed = 0

        async for resolution in self.resolver.resolve(place_ids):
            if not resolution.ok:
                failed += 1
                continue

            place = dataclasses.replace(
                resolution.place,
                attached_description=description_for(resolution.identifier, events)
            )
            resolved.append(place)

            if generation != self._generation:
                logger.debug(
                    f"Discarding stale result for {resolution.identifier} "
                    f"from generation {generation}"
                )
                continue

            self._places[place.identifier] = place
            if on_change is not None:
                on_change()

        logger.info(
            f"Reconciliation finished: {len(resolved)} resolved, {failed} failed",
            extra={
                'generation': generation,
                'stale': generation != self._generation
            }
        )
        return resolved

    def snapshot(self) -> Dict[str, ResolvedPlace]:
        """Copy of the current identifier to place mapping."""
        return dict(self._places)

    def get(self, identifier: str) -> Optional[ResolvedPlace]:
        return self._places.get(identifier)

    def markers(self) -> List[MarkerDescriptor]:
        """Marker descriptors for every resolved place."""
        return [
            MarkerDescriptor(
                identifier=place.identifier,
                latitude=place.latitude,
                longitude=place.longitude,
                label=place.display_name,
                snippet=place.formatted_address
            )
            for place in self._places.values()
        ]
