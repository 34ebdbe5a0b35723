"""
Configuration management for the voter guide application.

This module provides dataclasses and utilities for managing application
configuration including data source locations, geocoding proxy settings,
resolution parameters, and logging options.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional
import os

from .exceptions import ConfigurationError


VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# Quadrants are as coarse as the city itself for ward lookup
QUADRANT_NAMES = ("NORTH EAST", "NORTH WEST", "SOUTH EAST", "SOUTH WEST")


@dataclass
class ResolverConfig:
    """Configuration class for ward resolution parameters."""

    # Municipality; region_suffix, generic_area_names and address_qualifiers
    # are derived from these when left unset
    city_name: str = "Calgary"
    province_code: str = "AB"
    province_name: str = "Alberta"
    country_name: str = "Canada"
    region_suffix: Optional[str] = None
    country_code: str = "ca"

    # Bundled ward data (local directory or base URL)
    data_root: str = "assets/data/calgary"
    ward_count: int = 14
    ward_file_template: str = "wards/ward-{number}.json"
    aggregated_ward_file: str = "ward-communities.json"

    # Candidate document with an embedded array literal
    candidates_source: Optional[str] = None
    candidates_identifier: str = "candidates"

    # Optional remote address -> community dataset
    address_dataset_url: Optional[str] = None

    # Geocoding proxy
    proxy_base_url: Optional[str] = None
    proxy_anon_key: Optional[str] = None
    proxy_function_path: str = "/functions/v1/google-maps-proxy"
    request_timeout: Optional[float] = None  # None uses the transport default

    # Interactive behaviour
    debounce_seconds: float = 0.3
    min_autocomplete_length: int = 3

    # Geocoder areas too coarse to map to a single ward
    generic_area_names: Optional[List[str]] = None

    # Trailing qualifiers stripped from addresses before lookup
    address_qualifiers: Optional[List[str]] = None

    # "Did you mean" suggestions on a community miss
    suggestion_threshold: int = 80
    max_suggestions: int = 3

    # Concurrent fetch settings
    max_fetch_workers: int = 14
    fetch_attempts: int = 3

    # Logging configuration
    log_level: str = "INFO"
    log_file: Optional[str] = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._derive_city_defaults()
        self._validate_counts()
        self._validate_thresholds()
        self._validate_logging()

    def _derive_city_defaults(self):
        """Fill in the city-dependent settings that were not given explicitly."""
        if not self.city_name or not self.city_name.strip():
            raise ConfigurationError("City name cannot be empty", config_key='city_name')

        city = self.city_name.strip()
        if self.region_suffix is None:
            self.region_suffix = f", {city}, {self.province_code}"
        if self.generic_area_names is None:
            self.generic_area_names = [city.upper()] + list(QUADRANT_NAMES)
        if self.address_qualifiers is None:
            self.address_qualifiers = [
                self.country_name.upper(), self.province_code.upper(),
                self.province_name.upper(), city.upper()
            ]

    def _validate_counts(self):
        """Validate numeric settings."""
        if self.ward_count < 1:
            raise ConfigurationError(
                f"Ward count must be at least 1: {self.ward_count}",
                config_key='ward_count', config_value=self.ward_count
            )

        if "{number}" not in self.ward_file_template:
            raise ConfigurationError(
                f"Ward file template must contain '{{number}}': {self.ward_file_template}",
                config_key='ward_file_template', config_value=self.ward_file_template
            )

        if self.debounce_seconds < 0:
            raise ConfigurationError(
                f"Debounce period cannot be negative: {self.debounce_seconds}",
                config_key='debounce_seconds', config_value=self.debounce_seconds
            )

        if self.request_timeout is not None and self.request_timeout <= 0:
            raise ConfigurationError(
                f"Request timeout must be positive: {self.request_timeout}",
                config_key='request_timeout', config_value=self.request_timeout
            )

        for key in ('min_autocomplete_length', 'max_suggestions'):
            if getattr(self, key) < 0:
                raise ConfigurationError(
                    f"{key} cannot be negative: {getattr(self, key)}",
                    config_key=key, config_value=getattr(self, key)
                )

        for key in ('max_fetch_workers', 'fetch_attempts'):
            if getattr(self, key) < 1:
                raise ConfigurationError(
                    f"{key} must be at least 1: {getattr(self, key)}",
                    config_key=key, config_value=getattr(self, key)
                )

    def _validate_thresholds(self):
        """Validate fuzzy suggestion threshold."""
        if not 0 <= self.suggestion_threshold <= 100:
            raise ConfigurationError(
                f"Suggestion threshold must be between 0 and 100: {self.suggestion_threshold}",
                config_key='suggestion_threshold',
                config_value=self.suggestion_threshold
            )

    def _validate_logging(self):
        """Validate and normalize the log level."""
        self.log_level = self.log_level.upper()
        if self.log_level not in VALID_LOG_LEVELS:
            raise ConfigurationError(
                f"Invalid log level: {self.log_level}",
                config_key='log_level',
                config_value=self.log_level,
                valid_values=VALID_LOG_LEVELS
            )

    def ward_file_location(self, number: int) -> str:
        """Location of the bundled file listing the communities of one ward."""
        return join_location(self.data_root, self.ward_file_template.format(number=number))

    def aggregated_ward_location(self) -> str:
        """Location of the aggregated ward -> communities fallback file."""
        return join_location(self.data_root, self.aggregated_ward_file)

    def has_proxy_credentials(self) -> bool:
        """Check whether the geocoding proxy can be called."""
        return bool(self.proxy_base_url and self.proxy_anon_key)

    @classmethod
    def from_dict(cls, config_dict: Dict) -> 'ResolverConfig':
        """Create configuration from dictionary."""
        return cls(**config_dict)

    @classmethod
    def from_env(cls, **overrides) -> 'ResolverConfig':
        """
        Create configuration with proxy credentials taken from the environment.

        Reads SUPABASE_URL / SUPABASE_ANON_KEY, falling back to the
        NEXT_PUBLIC_ prefixed names used by the web front end.

        Args:
            **overrides: Explicit values that win over the environment

        Returns:
            ResolverConfig instance
        """
        values = {
            'proxy_base_url': os.getenv('SUPABASE_URL') or os.getenv('NEXT_PUBLIC_SUPABASE_URL'),
            'proxy_anon_key': os.getenv('SUPABASE_ANON_KEY') or os.getenv('NEXT_PUBLIC_SUPABASE_ANON_KEY'),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def to_dict(self) -> Dict:
        """Convert configuration to dictionary (the proxy credential is masked)."""
        return {
            'city_name': self.city_name,
            'province_code': self.province_code,
            'province_name': self.province_name,
            'country_name': self.country_name,
            'region_suffix': self.region_suffix,
            'country_code': self.country_code,
            'data_root': self.data_root,
            'ward_count': self.ward_count,
            'ward_file_template': self.ward_file_template,
            'aggregated_ward_file': self.aggregated_ward_file,
            'candidates_source': self.candidates_source,
            'candidates_identifier': self.candidates_identifier,
            'address_dataset_url': self.address_dataset_url,
            'proxy_base_url': self.proxy_base_url,
            'proxy_anon_key': '***' if self.proxy_anon_key else None,
            'proxy_function_path': self.proxy_function_path,
            'request_timeout': self.request_timeout,
            'debounce_seconds': self.debounce_seconds,
            'min_autocomplete_length': self.min_autocomplete_length,
            'generic_area_names': list(self.generic_area_names),
            'address_qualifiers': list(self.address_qualifiers),
            'suggestion_threshold': self.suggestion_threshold,
            'max_suggestions': self.max_suggestions,
            'max_fetch_workers': self.max_fetch_workers,
            'fetch_attempts': self.fetch_attempts,
            'log_level': self.log_level,
            'log_file': self.log_file
        }


@dataclass
class LoadStats:
    """Statistics tracking for one data load."""

    ward_entries: int = 0
    ward_source: Optional[str] = None
    address_entries: int = 0
    candidates: int = 0
    skipped_rows: int = 0
    load_time: float = 0.0

    def is_ready(self) -> bool:
        """Check whether the load produced a usable ward index."""
        return self.ward_entries > 0


def join_location(root: str, relative: str) -> str:
    """
    Join a data root (directory or URL) with a relative file name.

    Args:
        root: Local directory or http(s) base URL
        relative: Relative file name using forward slashes

    Returns:
        Combined location string
    """
    if not root:
        return relative

    if is_remote(root):
        return f"{root.rstrip('/')}/{relative.lstrip('/')}"

    return os.path.join(root, *relative.split('/'))


def is_remote(location: str) -> bool:
    """Check whether a location is an http(s) URL."""
    return location.startswith('http://') or location.startswith('https://')
