"""
Client for the geocoding / autocomplete proxy.

The proxy is an authenticated pass-through in front of the Google Maps
geocoding and place-autocomplete APIs. It is called with a mode, a query and
an optional country code, and answers with the provider's JSON unchanged.

Usage:
    >>> client = GeocodingProxyClient("https://example.supabase.co", "anon-key")
    >>> results = client.geocode("123 Main St SW, Calgary, AB")
    >>> results[0]['address_components']
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from ..exceptions import ConfigurationError, UpstreamError

MODES = ('autocomplete', 'geocode', 'reverse')


class GeocodingProxyClient:
    """Calls the geocoding proxy with the caller-held credential."""

    def __init__(self, base_url: Optional[str], anon_key: Optional[str],
                 function_path: str = "/functions/v1/google-maps-proxy",
                 timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the proxy client.

        Args:
            base_url: Proxy host base URL
            anon_key: Credential sent as both apikey and bearer token
            function_path: Path of the proxy function on the host
            timeout: Optional request timeout (None = transport default)
            session: Optional requests session
            logger: Optional logger instance

        Raises:
            ConfigurationError: If the base URL or the credential is missing
        """
        if not base_url:
            raise ConfigurationError("Missing geocoding proxy URL (SUPABASE_URL)",
                                     config_key='proxy_base_url')
        if not anon_key:
            raise ConfigurationError("Missing geocoding proxy key (SUPABASE_ANON_KEY)",
                                     config_key='proxy_anon_key')

        self.endpoint = base_url.rstrip('/') + '/' + function_path.lstrip('/')
        self.anon_key = anon_key
        self.timeout = timeout
        self.session = session or requests.Session()
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_config(cls, config, session: Optional[requests.Session] = None,
                    logger: Optional[logging.Logger] = None) -> 'GeocodingProxyClient':
        """Create a client from a ResolverConfig."""
        return cls(
            base_url=config.proxy_base_url,
            anon_key=config.proxy_anon_key,
            function_path=config.proxy_function_path,
            timeout=config.request_timeout,
            session=session,
            logger=logger
        )

    def request(self, mode: str, query: str, country: Optional[str] = None) -> Dict[str, Any]:
        """
        Send one request to the proxy.

        Args:
            mode: One of autocomplete, geocode, reverse
            query: Address text, partial input, or "lat,lng" for reverse
            country: Optional country code restricting autocomplete

        Returns:
            Decoded JSON response

        Raises:
            ValueError: If the mode is unknown
            UpstreamError: On transport failure, non-success status or invalid JSON
        """
        if mode not in MODES:
            raise ValueError(f"Invalid mode: {mode}. Use: {', '.join(MODES)}")

        params = {'mode': mode, 'q': query}
        if country:
            params['country'] = country

        headers = {
            'apikey': self.anon_key,
            'Authorization': f"Bearer {self.anon_key}",
        }

        self.logger.debug(f"Geocoding proxy {mode}: {query}")
        try:
            response = self.session.get(self.endpoint, params=params, headers=headers,
                                        timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise UpstreamError(
                f"Geocoding proxy request failed: {e}",
                source=self.endpoint,
                original_error=e
            )

        if not response.ok:
            body = response.text or ''
            raise UpstreamError(
                f"Proxy error {response.status_code}: {body or response.reason}",
                source=self.endpoint,
                status_code=response.status_code
            )

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(
                "Geocoding proxy returned invalid JSON",
                source=self.endpoint,
                status_code=response.status_code,
                original_error=e
            )

    def autocomplete(self, query: str, country: Optional[str] = 'ca') -> List[Dict[str, Any]]:
        """Address predictions for partial input; each has a 'description'."""
        data = self.request('autocomplete', query, country)
        predictions = data.get('predictions') if isinstance(data, dict) else None
        return predictions if isinstance(predictions, list) else []

    def geocode(self, address: str) -> List[Dict[str, Any]]:
        """Geocoding results for an address; each has 'address_components'."""
        return self._results(self.request('geocode', address))

    def reverse(self, latitude: float, longitude: float) -> List[Dict[str, Any]]:
        """Geocoding results for a coordinate pair."""
        return self._results(self.request('reverse', f"{latitude},{longitude}"))

    @staticmethod
    def _results(data: Any) -> List[Dict[str, Any]]:
        results = data.get('results') if isinstance(data, dict) else None
        return results if isinstance(results, list) else []
