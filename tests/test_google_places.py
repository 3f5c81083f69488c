"""Unit tests for GooglePlacesLookup."""
from unittest.mock import Mock, patch

import pytest
import requests
import responses
from googlemaps.exceptions import ApiError, HTTPError, Timeout, TransportError

from places.google_places import PHOTO_URL, PLACE_FIELDS, GooglePlacesLookup, derive_category_label
from processor.errors import PlaceNotFoundError, RateLimitedError, ResolveNetworkError


@pytest.fixture
def client():
    """Create a mock googlemaps client."""
    return Mock()


@pytest.fixture
def lookup(client):
    """Create a lookup backed by the mock client."""
    return GooglePlacesLookup(api_key='AIzaTestKey', client=client)


def place_response(**overrides):
    """Place details response as returned by the Places API."""
    result = {
        'name': 'Employees Only',
        'geometry': {'location': {'lat': 40.7335, 'lng': -74.0060}},
        'types': ['bar', 'point_of_interest', 'establishment'],
        'rating': 4.6,
        'photos': [{'photo_reference': 'photo-abc', 'height': 800, 'width': 1200}],
        'formatted_address': '510 Hudson St, New York, NY 10014, USA'
    }
    result.update(overrides)
    return {'result': result, 'status': 'OK'}


class TestDeriveCategoryLabel:
    """Test cases for category label derivation."""

    def test_first_specific_type_is_humanized(self):
        assert derive_category_label(['point_of_interest', 'cocktail_bar', 'bar']) == 'Cocktail Bar'

    def test_only_common_types(self):
        assert derive_category_label(['restaurant', 'food', 'point_of_interest', 'establishment', 'store']) is None

    def test_empty_types(self):
        assert derive_category_label([]) is None


class TestGooglePlacesLookup:
    """Test cases for GooglePlacesLookup class."""

    def test_fetch_place_success(self, lookup, client):
        """Test that a details response maps onto ResolvedPlace."""
        client.place.return_value = place_response()

        place = lookup.fetch_place('ChIJemployees')

        client.place.assert_called_once_with('ChIJemployees', fields=PLACE_FIELDS)
        assert place.identifier == 'ChIJemployees'
        assert place.display_name == 'Employees Only'
        assert place.coordinate == (40.7335, -74.0060)
        assert place.rating == 4.6
        assert place.category_tags == ('bar', 'point_of_interest', 'establishment')
        assert place.derived_category_label == 'Bar'
        assert place.formatted_address == '510 Hudson St, New York, NY 10014, USA'
        assert place.photo_reference == 'photo-abc'
        assert place.attached_description is None

    def test_fetch_place_optional_fields_absent(self, lookup, client):
        """Test that missing optional fields become None."""
        client.place.return_value = {
            'result': {'geometry': {'location': {'lat': 40.7, 'lng': -74.0}}},
            'status': 'OK'
        }

        place = lookup.fetch_place('ChIJbare')

        assert place.display_name == 'Unknown'
        assert place.rating is None
        assert place.category_tags == ()
        assert place.derived_category_label is None
        assert place.formatted_address is None
        assert place.photo_reference is None

    def test_fetch_place_without_coordinate_is_not_found(self, lookup, client):
        """Test that a result lacking a coordinate is treated as not found."""
        client.place.return_value = place_response(geometry={})

        with pytest.raises(PlaceNotFoundError):
            lookup.fetch_place('ChIJnowhere')

    def test_fetch_place_zero_results(self, lookup, client):
        """Test that a response without a result is treated as not found."""
        client.place.return_value = {'status': 'ZERO_RESULTS'}

        with pytest.raises(PlaceNotFoundError):
            lookup.fetch_place('ChIJgone')

    @pytest.mark.parametrize('error, expected', [
        (ApiError('NOT_FOUND'), PlaceNotFoundError),
        (ApiError('INVALID_REQUEST'), PlaceNotFoundError),
        (ApiError('OVER_QUERY_LIMIT', 'quota exceeded'), RateLimitedError),
        (HTTPError(429), RateLimitedError),
        (HTTPError(503), ResolveNetworkError),
        (ApiError('REQUEST_DENIED', 'key invalid'), ResolveNetworkError),
        (TransportError(ConnectionError('reset')), ResolveNetworkError),
        (Timeout(), ResolveNetworkError),
    ])
    def test_fetch_place_error_translation(self, lookup, client, error, expected):
        """Test that client exceptions map onto the resolve error taxonomy."""
        client.place.side_effect = error

        with pytest.raises(expected) as exc_info:
            lookup.fetch_place('ChIJerr')

        assert exc_info.value.identifier == 'ChIJerr'

    @responses.activate
    def test_fetch_photo_returns_image_bytes(self, lookup):
        """Test that an image response is returned as raw bytes."""
        responses.add(responses.GET, PHOTO_URL, body=b'\x89PNGdata', status=200, content_type='image/png')

        photo = lookup.fetch_photo('photo-abc', max_width=400)

        assert photo == b'\x89PNGdata'
        request_url = responses.calls[0].request.url
        assert 'photo_reference=photo-abc' in request_url
        assert 'maxwidth=400' in request_url
        assert 'key=AIzaTestKey' in request_url

    @responses.activate
    def test_fetch_photo_error_status(self, lookup):
        """Test that a non-2xx error body is not returned as an image."""
        responses.add(responses.GET, PHOTO_URL, json={'error': 'denied'}, status=403)

        with pytest.raises(ResolveNetworkError) as exc_info:
            lookup.fetch_photo('photo-abc')

        assert exc_info.value.identifier == 'photo-abc'
        assert 'HTTP 403' in str(exc_info.value)

    @responses.activate
    def test_fetch_photo_rate_limited(self, lookup):
        """Test that HTTP 429 on a photo download raises RateLimitedError."""
        responses.add(responses.GET, PHOTO_URL, json={'error': 'quota'}, status=429)

        with pytest.raises(RateLimitedError):
            lookup.fetch_photo('photo-abc')

    @responses.activate
    def test_fetch_photo_non_image_body(self, lookup):
        """Test that a 200 response without an image content type is rejected."""
        responses.add(responses.GET, PHOTO_URL, json={'status': 'INVALID_REQUEST'}, status=200)

        with pytest.raises(ResolveNetworkError):
            lookup.fetch_photo('photo-abc')

    @responses.activate
    def test_fetch_photo_connection_error(self, lookup):
        """Test that transport failures raise ResolveNetworkError."""
        responses.add(responses.GET, PHOTO_URL, body=requests.exceptions.ConnectionError('reset'))

        with pytest.raises(ResolveNetworkError):
            lookup.fetch_photo('photo-abc')

    @patch('places.google_places.googlemaps.Client')
    def test_builds_client_without_quota_retries(self, mock_client_class):
        """Test that rate limiting is surfaced instead of retried."""
        GooglePlacesLookup(api_key='AIzaTestKey', timeout=10)

        mock_client_class.assert_called_once_with(
            key='AIzaTestKey',
            timeout=10,
            retry_over_query_limit=False
        )
