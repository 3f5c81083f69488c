"""Data models for events, resolved places and view state."""
from dataclasses import dataclass, field
from typing import Optional, Set, Tuple

from processor.errors import ResolveError


ACTIVE_MARKER = 'Yes'


@dataclass(frozen=True)
class EventRecord:
    """Event record decoded from the remote table."""
    id: str
    created_at: str
    external_event_id: Optional[int]
    place_refs: Tuple[str, ...]
    place_names: Tuple[str, ...]
    day: Optional[str]
    start_time: Optional[str]
    end_time: Optional[str]
    is_active: bool
    description: Optional[str]
    place_identifiers: Tuple[str, ...]
    neighborhoods: Tuple[str, ...]


@dataclass(frozen=True)
class ResolvedPlace:
    """Place details returned by the lookup service."""
    identifier: str
    display_name: str
    latitude: float
    longitude: float
    rating: Optional[float] = None
    category_tags: Tuple[str, ...] = ()
    derived_category_label: Optional[str] = None
    formatted_address: Optional[str] = None
    photo_reference: Optional[str] = None
    attached_description: Optional[str] = None

    @property
    def coordinate(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving a single identifier."""
    identifier: str
    place: Optional[ResolvedPlace] = None
    error: Optional[ResolveError] = None

    @property
    def ok(self) -> bool:
        return self.place is not None


@dataclass(frozen=True)
class MarkerDescriptor:
    """Marker handed to the map surface."""
    identifier: str
    latitude: float
    longitude: float
    label: str
    snippet: Optional[str]


@dataclass
class FilterSelection:
    """User-selected filters. Empty neighborhoods means no filter."""
    active_only: bool = False
    selected_neighborhoods: Set[str] = field(default_factory=set)


@dataclass(frozen=True)
class FocusedPlace:
    """Place currently shown in the detail panel."""
    identifier: str
    resolved_place: ResolvedPlace
