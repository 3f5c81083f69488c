"""Filter derivations over fetched event records."""
from typing import List, Sequence

from processor.models import EventRecord, FilterSelection


def visible_events(events: Sequence[EventRecord], selection: FilterSelection) -> List[EventRecord]:
    """
    Return the events that pass the current filters, in input order.

    Active-only and neighborhood filters combine with AND. An empty
    neighborhood selection applies no neighborhood filter.

    Args:
        events: All fetched events
        selection: Current filter selection

    Returns:
        List of visible EventRecord objects
    """
    filtered = list(events)

    if selection.active_only:
        filtered = [event for event in filtered if event.is_active]

    if selection.selected_neighborhoods:
        filtered = [
            event for event in filtered
            if not selection.selected_neighborhoods.isdisjoint(event.neighborhoods)
        ]

    return filtered


def unique_neighborhoods(events: Sequence[EventRecord]) -> List[str]:
    """Sorted distinct neighborhood tags across all events."""
    return sorted({name for event in events for name in event.neighborhoods})
