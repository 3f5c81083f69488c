"""Display helpers for the map, filter controls and detail panel."""
from typing import Collection, List, Optional

from processor.models import ResolvedPlace


DEFAULT_CAMERA = {'latitude': 40.7128, 'longitude': -74.0060, 'zoom': 12}

DEALS_PLACEHOLDER = "(Still learning happy hour deals...)"

STAR_FULL = 'full'
STAR_HALF = 'half'
STAR_EMPTY = 'empty'


def rating_stars(rating: float) -> List[str]:
    """
    Five star states for a 0-5 rating.

    Args:
        rating: Place rating

    Returns:
        List of 'full', 'half' or 'empty' entries
    """
    stars = []
    for index in range(5):
        value = rating - index
        if value >= 0.8:
            stars.append(STAR_FULL)
        elif value >= 0.3:
            stars.append(STAR_HALF)
        else:
            stars.append(STAR_EMPTY)
    return stars


def format_rating(rating: Optional[float]) -> Optional[str]:
    if rating is None:
        return None
    return f"{rating:.1f}"


def google_maps_url(identifier: str) -> str:
    return f"https://www.google.com/maps/place/?q=place_id:{identifier}"


def deals_text(place: ResolvedPlace) -> str:
    if place.attached_description is None:
        return DEALS_PLACEHOLDER
    return place.attached_description


def neighborhood_filter_label(selected: Collection[str]) -> str:
    """Title for the neighborhood filter button."""
    if not selected:
        return "Neighborhood"
    if len(selected) == 1:
        return next(iter(selected))
    return f"{len(selected)} Selected"
