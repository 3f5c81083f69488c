"""Configuration loaded from environment variables."""
import os
from dataclasses import dataclass

from dotenv import load_dotenv


DEFAULT_TABLE_ID = 'tblepy4NKexAxYMfi'


@dataclass
class Settings:
    """Runtime settings for the map client."""
    airtable_token: str
    airtable_base_id: str
    google_maps_api_key: str
    airtable_table_id: str = DEFAULT_TABLE_ID
    airtable_host: str = 'api.airtable.com'
    log_level: str = 'INFO'
    timeout_seconds: int = 30
    max_concurrent_lookups: int = 8

    @classmethod
    def from_env(cls) -> 'Settings':
        """
        Build settings from the environment, reading a .env file if present.

        Returns:
            Settings instance

        Raises:
            ValueError: If a required credential is missing
        """
        load_dotenv()

        required = {
            'AIRTABLE_PAT': os.environ.get('AIRTABLE_PAT', ''),
            'AIRTABLE_BASE_ID': os.environ.get('AIRTABLE_BASE_ID', ''),
            'GOOGLE_MAPS_API_KEY': os.environ.get('GOOGLE_MAPS_API_KEY', ''),
        }
        missing = [name for name, value in required.items() if not value]
        if missing:
            raise ValueError(f"Missing required settings: {', '.join(missing)}")

        return cls(
            airtable_token=required['AIRTABLE_PAT'],
            airtable_base_id=required['AIRTABLE_BASE_ID'],
            google_maps_api_key=required['GOOGLE_MAPS_API_KEY'],
            airtable_table_id=os.environ.get('AIRTABLE_TABLE_ID', DEFAULT_TABLE_ID),
            airtable_host=os.environ.get('AIRTABLE_HOST', 'api.airtable.com'),
            log_level=os.environ.get('LOG_LEVEL', 'INFO'),
            timeout_seconds=int(os.environ.get('TIMEOUT_SECONDS', '30')),
            max_concurrent_lookups=int(os.environ.get('MAX_CONCURRENT_LOOKUPS', '8'))
        )
