"""Places lookup capability backed by the Google Places API."""
import logging
from typing import Any, Dict, List, Optional, Protocol

import googlemaps
import requests
from googlemaps.exceptions import ApiError, HTTPError, Timeout, TransportError

from processor.errors import (
    PlaceNotFoundError,
    RateLimitedError,
    ResolveError,
    ResolveNetworkError,
)
from processor.models import ResolvedPlace

logger = logging.getLogger(__name__)


PLACE_FIELDS = [
    'geometry/location',
    'name',
    'type',
    'rating',
    'photo',
    'formatted_address',
]

COMMON_TYPES = frozenset({
    'point_of_interest',
    'establishment',
    'food',
    'restaurant',
    'store',
})

NOT_FOUND_STATUSES = frozenset({'NOT_FOUND', 'ZERO_RESULTS', 'INVALID_REQUEST'})
RATE_LIMIT_STATUSES = frozenset({'OVER_QUERY_LIMIT', 'RESOURCE_EXHAUSTED'})

PHOTO_URL = 'https://maps.googleapis.com/maps/api/place/photo'


class PlacesLookup(Protocol):
    """Capability for looking up places by identifier."""

    def fetch_place(self, identifier: str) -> ResolvedPlace:
        ...

    def fetch_photo(self, photo_reference: str, max_width: int) -> bytes:
        ...


def derive_category_label(types: List[str]) -> Optional[str]:
    """
    Pick the first specific place type and humanize it.

    Args:
        types: Raw type tokens from the lookup service

    Returns:
        Label such as "Cocktail Bar", or None if only common types are present
    """
    for place_type in types:
        if place_type not in COMMON_TYPES:
            return ' '.join(word.capitalize() for word in place_type.split('_') if word)
    return None


class GooglePlacesLookup:
    """PlacesLookup implementation using the googlemaps client."""

    def __init__(self, api_key: Optional[str] = None, timeout: int = 30, client: Any = None):
        """
        Initialize the lookup.

        Args:
            api_key: Google Maps Platform API key
            timeout: Request timeout in seconds (default: 30)
            client: Preconfigured googlemaps.Client; built from api_key if omitted
        """
        if client is None:
            client = googlemaps.Client(
                key=api_key,
                timeout=timeout,
                retry_over_query_limit=False
            )
        self.client = client
        self.api_key = api_key
        self.timeout = timeout

    def fetch_place(self, identifier: str) -> ResolvedPlace:
        """
        Look up a place by its Google place ID.

        Args:
            identifier: Google place ID

        Returns:
            ResolvedPlace without an attached description

        Raises:
            PlaceNotFoundError: If the service has no place with coordinates
            RateLimitedError: If the request was rejected for quota reasons
            ResolveNetworkError: On transport or other service failures
        """
        try:
            response = self.client.place(identifier, fields=PLACE_FIELDS)
        except (ApiError, TransportError, Timeout) as e:
            raise self._translate_error(identifier, e) from e

        result = response.get('result') if response else None
        if not result:
            raise PlaceNotFoundError(identifier, "empty result")

        return self._result_to_place(identifier, result)

    def fetch_photo(self, photo_reference: str, max_width: int = 800) -> bytes:
        """
        Download the image bytes behind a photo reference.

        Args:
            photo_reference: Opaque photo token from a place result
            max_width: Maximum image width in pixels (default: 800)

        Returns:
            Image bytes

        Raises:
            RateLimitedError: If the service answered HTTP 429
            ResolveNetworkError: On transport failures, other non-2xx answers,
                or a body that is not an image
        """
        params = {
            'photo_reference': photo_reference,
            'maxwidth': max_width,
            'key': self.api_key,
        }

        try:
            response = requests.get(PHOTO_URL, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            if status == 429:
                raise RateLimitedError(photo_reference, "HTTP 429") from e
            raise ResolveNetworkError(photo_reference, f"HTTP {status}") from e
        except requests.exceptions.RequestException as e:
            raise ResolveNetworkError(photo_reference, str(e)) from e

        content_type = response.headers.get('Content-Type', '')
        if not content_type.startswith('image/'):
            logger.warning(f"Photo {photo_reference} returned non-image content type {content_type!r}")
            raise ResolveNetworkError(photo_reference, f"unexpected content type {content_type!r}")

        return response.content

    def _result_to_place(self, identifier: str, result: Dict[str, Any]) -> ResolvedPlace:
        location = (result.get('geometry') or {}).get('location') or {}
        if 'lat' not in location or 'lng' not in location:
            raise PlaceNotFoundError(identifier, "result has no coordinate")

        types = result.get('types') or []
        photos = result.get('photos') or []
        rating = result.get('rating')

        return ResolvedPlace(
            identifier=identifier,
            display_name=result.get('name') or 'Unknown',
            latitude=float(location['lat']),
            longitude=float(location['lng']),
            rating=float(rating) if rating is not None else None,
            category_tags=tuple(types),
            derived_category_label=derive_category_label(types),
            formatted_address=result.get('formatted_address'),
            photo_reference=photos[0].get('photo_reference') if photos else None
        )

    def _translate_error(self, identifier: str, error: Exception) -> ResolveError:
        if isinstance(error, ApiError):
            if error.status in NOT_FOUND_STATUSES:
                return PlaceNotFoundError(identifier, error.status)
            if error.status in RATE_LIMIT_STATUSES:
                return RateLimitedError(identifier, error.status)
            return ResolveNetworkError(identifier, f"{error.status}: {error.message}")

        if isinstance(error, HTTPError) and error.status_code == 429:
            return RateLimitedError(identifier, "HTTP 429")

        return ResolveNetworkError(identifier, str(error))
