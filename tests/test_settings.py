"""Unit tests for Settings."""
import os
from unittest.mock import patch

import pytest

from settings import DEFAULT_TABLE_ID, Settings


@pytest.fixture(autouse=True)
def no_dotenv():
    """Keep a developer's .env file out of the tests."""
    with patch('settings.load_dotenv'):
        yield


class TestSettings:
    """Test cases for Settings.from_env."""

    def test_defaults(self):
        """Test that optional settings fall back to their defaults."""
        env_vars = {
            'AIRTABLE_PAT': 'pat-test',
            'AIRTABLE_BASE_ID': 'appTest',
            'GOOGLE_MAPS_API_KEY': 'AIzaTest'
        }
        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings.from_env()

        assert settings.airtable_token == 'pat-test'
        assert settings.airtable_base_id == 'appTest'
        assert settings.google_maps_api_key == 'AIzaTest'
        assert settings.airtable_table_id == DEFAULT_TABLE_ID
        assert settings.airtable_host == 'api.airtable.com'
        assert settings.log_level == 'INFO'
        assert settings.timeout_seconds == 30
        assert settings.max_concurrent_lookups == 8

    def test_overrides(self):
        """Test that environment values override the defaults."""
        env_vars = {
            'AIRTABLE_PAT': 'pat-test',
            'AIRTABLE_BASE_ID': 'appTest',
            'GOOGLE_MAPS_API_KEY': 'AIzaTest',
            'AIRTABLE_TABLE_ID': 'tblOther',
            'LOG_LEVEL': 'DEBUG',
            'TIMEOUT_SECONDS': '5',
            'MAX_CONCURRENT_LOOKUPS': '2'
        }
        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings.from_env()

        assert settings.airtable_table_id == 'tblOther'
        assert settings.log_level == 'DEBUG'
        assert settings.timeout_seconds == 5
        assert settings.max_concurrent_lookups == 2

    def test_missing_credentials(self):
        """Test that a missing required variable raises ValueError."""
        with patch.dict(os.environ, {'AIRTABLE_PAT': 'pat-test'}, clear=True):
            with pytest.raises(ValueError) as exc_info:
                Settings.from_env()

        assert 'AIRTABLE_BASE_ID' in str(exc_info.value)
        assert 'GOOGLE_MAPS_API_KEY' in str(exc_info.value)
        assert 'AIRTABLE_PAT' not in str(exc_info.value)
