"""Record fetcher for the happy hour events table."""
import logging
from typing import Any, Dict, List, Optional, Tuple

import requests

from processor.errors import FetchDecodeError, FetchNetworkError
from processor.models import ACTIVE_MARKER, EventRecord

logger = logging.getLogger(__name__)


class AirtableEventFetcher:
    """Fetcher for event records stored in an Airtable table."""

    DEFAULT_HOST = "api.airtable.com"

    # Source schema display names
    FIELD_EVENT_ID = "Event ID"
    FIELD_PLACE = "Place"
    FIELD_PLACE_NAME = "Place Name"
    FIELD_DAY = "Day"
    FIELD_START_TIME = "Start Time"
    FIELD_END_TIME = "End Time"
    FIELD_ACTIVE = "Happy Hour Active"
    FIELD_DESCRIPTION = "Description"
    FIELD_GOOGLE_MAPS_ID = "Google Maps ID"
    FIELD_NEIGHBORHOOD = "Neighborhood"

    def __init__(
        self,
        base_id: str,
        table_id: str,
        token: str,
        host: str = DEFAULT_HOST,
        timeout: int = 30
    ):
        """
        Initialize the fetcher.

        Args:
            base_id: Airtable base identifier
            table_id: Table identifier or name within the base
            token: Personal access token sent as a bearer credential
            host: API host (default: api.airtable.com)
            timeout: HTTP request timeout in seconds (default: 30)

        Raises:
            ValueError: If base_id, table_id or token is empty
        """
        for name, value in (('base_id', base_id), ('table_id', table_id), ('token', token)):
            if not value:
                raise ValueError(f"{name} is required")

        self.base_id = base_id
        self.table_id = table_id
        self.token = token
        self.host = host
        self.timeout = timeout

    @property
    def url(self) -> str:
        return f"https://{self.host}/v0/{self.base_id}/{self.table_id}"

    def fetch(self) -> List[EventRecord]:
        """
        Fetch and decode all event records from a single page.

        Returns:
            List of EventRecord objects in source order

        Raises:
            FetchNetworkError: On transport failure or non-success status
            FetchDecodeError: If the payload is not a valid record set
        """
        logger.info(f"Fetching events from {self.url}")
        payload = self._fetch_payload()
        records = self._decode_records(payload)
        logger.info(f"Successfully fetched {len(records)} events")
        return records

    def _fetch_payload(self) -> Any:
        """
        Perform the HTTP request and parse the JSON body.

        Returns:
            Parsed JSON payload

        Raises:
            FetchNetworkError: If the request fails
            FetchDecodeError: If the body is not JSON
        """
        headers = {'Authorization': f"Bearer {self.token}"}

        try:
            response = requests.get(self.url, headers=headers, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Network error fetching events: {e}")
            raise FetchNetworkError(str(e)) from e

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Response body is not valid JSON: {e}")
            raise FetchDecodeError(f"invalid JSON: {e}") from e

    def _decode_records(self, payload: Any) -> List[EventRecord]:
        """
        Decode the records array of a response payload.

        Args:
            payload: Parsed JSON payload

        Returns:
            List of EventRecord objects
        """
        if not isinstance(payload, dict) or not isinstance(payload.get('records'), list):
            raise FetchDecodeError("payload has no 'records' list")

        if payload.get('offset'):
            logger.info("Additional pages available; only the first page is used")

        return [self._decode_record(raw, index) for index, raw in enumerate(payload['records'])]

    def _decode_record(self, raw: Any, index: int) -> EventRecord:
        """
        Decode a single record.

        Args:
            raw: Raw record object with id, createdTime and fields
            index: Position in the records array, used in error details

        Returns:
            EventRecord object

        Raises:
            FetchDecodeError: If a required key is missing or a field has the wrong type
        """
        if not isinstance(raw, dict):
            raise FetchDecodeError(f"record {index} is not an object")

        record_id = raw.get('id')
        created_at = raw.get('createdTime')
        fields = raw.get('fields')

        if not isinstance(record_id, str):
            raise FetchDecodeError(f"record {index} missing string 'id'")
        if not isinstance(created_at, str):
            raise FetchDecodeError(f"record {record_id} missing string 'createdTime'")
        if not isinstance(fields, dict):
            raise FetchDecodeError(f"record {record_id} missing 'fields' object")

        # Source stores active status as the literal "Yes"; anything else is inactive
        active_value = self._optional_str(fields, self.FIELD_ACTIVE, record_id)

        return EventRecord(
            id=record_id,
            created_at=created_at,
            external_event_id=self._optional_int(fields, self.FIELD_EVENT_ID, record_id),
            place_refs=self._str_list(fields, self.FIELD_PLACE, record_id),
            place_names=self._str_list(fields, self.FIELD_PLACE_NAME, record_id),
            day=self._optional_str(fields, self.FIELD_DAY, record_id),
            start_time=self._optional_str(fields, self.FIELD_START_TIME, record_id),
            end_time=self._optional_str(fields, self.FIELD_END_TIME, record_id),
            is_active=active_value == ACTIVE_MARKER,
            description=self._optional_str(fields, self.FIELD_DESCRIPTION, record_id),
            place_identifiers=self._str_list(fields, self.FIELD_GOOGLE_MAPS_ID, record_id),
            neighborhoods=self._str_list(fields, self.FIELD_NEIGHBORHOOD, record_id)
        )

    def _optional_str(self, fields: Dict[str, Any], key: str, record_id: str) -> Optional[str]:
        value = fields.get(key)
        if value is not None and not isinstance(value, str):
            raise FetchDecodeError(f"record {record_id}: '{key}' must be a string")
        return value

    def _optional_int(self, fields: Dict[str, Any], key: str, record_id: str) -> Optional[int]:
        value = fields.get(key)
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, int):
            raise FetchDecodeError(f"record {record_id}: '{key}' must be an integer")
        return value

    def _str_list(self, fields: Dict[str, Any], key: str, record_id: str) -> Tuple[str, ...]:
        value = fields.get(key)
        if value is None:
            return ()
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise FetchDecodeError(f"record {record_id}: '{key}' must be a list of strings")
        return tuple(value)
