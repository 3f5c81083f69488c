"""AWS Lambda handler serving happy hour map markers."""
import asyncio
import json
import logging
import os
import time
from dataclasses import asdict
from typing import Dict, Any

from fetcher.airtable_client import AirtableEventFetcher
from places.google_places import GooglePlacesLookup
from places.resolver import PlaceResolver
from processor.models import FilterSelection
from processor.reconciler import Reconciler
from settings import Settings
from viewmodel.map_view_model import MapViewModel


# Attributes present on every LogRecord; anything else came in through `extra`
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord('', 0, '', 0, '', (), None))) | {'message', 'asctime'}


class JsonFormatter(logging.Formatter):
    """JSON formatter that carries `extra` fields into the output."""
    
    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }
        
        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS and not key.startswith('_'):
                log_data[key] = value
        
        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)
        
        return json.dumps(log_data, default=str)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Install the JSON formatter on the root logger.
    
    Args:
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()
    
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Lambda handler returning a marker snapshot for the happy hour map.
    
    Args:
        event: Invocation payload; optional 'activeOnly' (only JSON true enables
            it) and 'neighborhoods' (list of names) select the filters
        context: Lambda context object
        
    Returns:
        Response dict with statusCode and markers, neighborhoods and statistics
    """
    setup_logging(os.environ.get('LOG_LEVEL', 'INFO'))
    logger = logging.getLogger(__name__)
    
    start_time = time.time()
    event = event or {}
    
    try:
        settings = Settings.from_env()
        
        logger.info(
            "Lambda execution started",
            extra={
                'table_id': settings.airtable_table_id,
                'timeout_seconds': settings.timeout_seconds,
                'max_concurrent_lookups': settings.max_concurrent_lookups
            }
        )
        
        # Instantiate components
        fetcher = AirtableEventFetcher(
            base_id=settings.airtable_base_id,
            table_id=settings.airtable_table_id,
            token=settings.airtable_token,
            host=settings.airtable_host,
            timeout=settings.timeout_seconds
        )
        lookup = GooglePlacesLookup(
            api_key=settings.google_maps_api_key,
            timeout=settings.timeout_seconds
        )
        resolver = PlaceResolver(lookup, max_workers=settings.max_concurrent_lookups)
        view_model = MapViewModel(fetcher, Reconciler(resolver))
        view_model.filters = FilterSelection(
            active_only=event.get('activeOnly') is True,
            selected_neighborhoods=set(event.get('neighborhoods') or [])
        )
        
        # Fetch events and resolve places for the visible subset
        asyncio.run(view_model.fetch_data())
        
        if view_model.error:
            logger.error(
                f"Failed to fetch events: {view_model.error}",
                extra={'error_type': 'FetchError'}
            )
            duration = time.time() - start_time
            return {
                'statusCode': 500,
                'body': json.dumps({
                    'message': 'Failed to fetch events',
                    'error': view_model.error,
                    'error_type': 'FetchError',
                    'duration_seconds': round(duration, 2)
                })
            }
        
        markers = view_model.markers()
        visible = view_model.visible_events()
        duration = time.time() - start_time
        
        logger.info(
            "Lambda execution completed successfully",
            extra={
                'duration_seconds': round(duration, 2),
                'events_fetched': len(view_model.events),
                'events_visible': len(visible),
                'places_resolved': len(markers)
            }
        )
        
        return {
            'statusCode': 200,
            'body': json.dumps({
                'message': 'Markers resolved successfully',
                'markers': [asdict(marker) for marker in markers],
                'neighborhoods': view_model.unique_neighborhoods,
                'statistics': {
                    'events_fetched': len(view_model.events),
                    'events_visible': len(visible),
                    'places_resolved': len(markers),
                    'duration_seconds': round(duration, 2)
                }
            })
        }
        
    except Exception as e:
        duration = time.time() - start_time
        
        logger.error(
            f"Lambda execution failed: {str(e)}",
            extra={
                'duration_seconds': round(duration, 2),
                'error_type': type(e).__name__
            },
            exc_info=True
        )
        
        return {
            'statusCode': 500,
            'body': json.dumps({
                'message': 'Marker snapshot failed',
                'error': str(e),
                'error_type': type(e).__name__,
                'duration_seconds': round(duration, 2)
            })
        }
