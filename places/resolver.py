"""Concurrent resolution of place identifiers."""
import asyncio
import logging
from typing import AsyncIterator, Iterable, Optional

from places.google_places import PlacesLookup
from processor.errors import PlaceNotFoundError, ResolveError, ResolveNetworkError
from processor.models import Resolution

logger = logging.getLogger(__name__)


class PlaceResolver:
    """Resolves place identifiers through a PlacesLookup, one task per identifier."""

    DEFAULT_MAX_WORKERS = 8
    DEFAULT_PHOTO_WIDTH = 800

    def __init__(self, lookup: PlacesLookup, max_workers: int = DEFAULT_MAX_WORKERS):
        """
        Initialize the resolver.

        Args:
            lookup: Places lookup capability
            max_workers: Maximum lookups in flight at once (default: 8)
        """
        self.lookup = lookup
        self.max_workers = max_workers

    async def resolve(self, identifiers: Iterable[str]) -> AsyncIterator[Resolution]:
        """
        Resolve identifiers concurrently.

        Each distinct identifier is looked up once. Results are yielded in
        completion order; failures are captured per identifier.

        Args:
            identifiers: Place identifiers to resolve

        Yields:
            Resolution for each identifier
        """
        unique_ids = list(dict.fromkeys(identifiers))
        if not unique_ids:
            return

        logger.info(f"Resolving {len(unique_ids)} places")
        semaphore = asyncio.Semaphore(self.max_workers)
        tasks = [
            asyncio.ensure_future(self._resolve_one(identifier, semaphore))
            for identifier in unique_ids
        ]

        try:
            for next_done in asyncio.as_completed(tasks):
                yield await next_done
        finally:
            # Consumer stopped early; results of remaining lookups are dropped
            for task in tasks:
                if not task.done():
                    task.cancel()

    async def _resolve_one(self, identifier: str, semaphore: asyncio.Semaphore) -> Resolution:
        async with semaphore:
            try:
                place = await asyncio.to_thread(self.lookup.fetch_place, identifier)
            except PlaceNotFoundError as e:
                logger.warning(f"No place found for ID {identifier}: {e.detail}")
                return Resolution(identifier=identifier, error=e)
            except ResolveError as e:
                logger.error(
                    f"Error fetching place for ID {identifier}: {e.detail}",
                    extra={'error_type': type(e).__name__}
                )
                return Resolution(identifier=identifier, error=e)
            except Exception as e:
                logger.error(
                    f"Unexpected error fetching place for ID {identifier}: {e}",
                    exc_info=True
                )
                return Resolution(
                    identifier=identifier,
                    error=ResolveNetworkError(identifier, str(e))
                )

        logger.debug(f"Resolved place {identifier}: {place.display_name}")
        return Resolution(identifier=identifier, place=place)

    async def fetch_photo(
        self,
        photo_reference: str,
        max_width: int = DEFAULT_PHOTO_WIDTH
    ) -> Optional[bytes]:
        """
        Load photo bytes for a focused place.

        Args:
            photo_reference: Opaque photo token
            max_width: Maximum image width in pixels

        Returns:
            Image bytes, or None if loading failed
        """
        try:
            return await asyncio.to_thread(self.lookup.fetch_photo, photo_reference, max_width)
        except Exception as e:
            logger.warning(f"Error loading featured photo: {e}")
            return None
