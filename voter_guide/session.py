"""
Voter guide session orchestration.

This module provides the VoterGuideSession class that owns one session's
lookup state and coordinates loading of the bundled data, user uploads,
autocomplete and ward resolution.
"""

import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional

from .autocomplete import AutocompleteService
from .config import LoadStats, ResolverConfig
from .geocoding.proxy_client import GeocodingProxyClient
from .index_builder import UPLOAD_SOURCE, IndexBuilder
from .logging_config import VoterGuideLogger
from .models import LookupState, Prediction, SearchOutcome
from .resolution_engine import ResolutionEngine


class VoterGuideSession:
    """
    One user session: lookup data plus the components that read it.

    Bundled loads and uploads install complete new values into the lookup
    state.
    """

    def __init__(self, config: ResolverConfig, logger: Optional[VoterGuideLogger] = None,
                 index_builder: Optional[IndexBuilder] = None,
                 geocoder=None, show_progress: bool = False):
        """
        Initialize the session.

        Args:
            config: Resolver configuration
            logger: Optional logger instance
            index_builder: Optional builder (defaults to one built from config)
            geocoder: Optional geocoding client; by default a proxy client is
                created when the config holds proxy credentials
            show_progress: Show progress bars while indexing large datasets
        """
        self.config = config
        self.logger = logger or VoterGuideLogger(level=config.log_level)

        self.index_builder = index_builder or IndexBuilder(
            config, logger=self.logger.logger, show_progress=show_progress
        )

        if geocoder is None and config.has_proxy_credentials():
            geocoder = GeocodingProxyClient.from_config(config, logger=self.logger.logger)
        elif geocoder is None:
            self.logger.info("Geocoding proxy not configured; address search limited to the address dataset")
        self.geocoder = geocoder

        self.lookup = LookupState()
        self.engine = ResolutionEngine(self.lookup, config, self.geocoder, self.logger.logger)
        self.autocomplete = AutocompleteService(self.lookup, self.geocoder, config,
                                                self.logger.logger)
        self.load_stats = LoadStats()

    @classmethod
    def from_config(cls, config: ResolverConfig, **kwargs) -> 'VoterGuideSession':
        """Create a session with logging set up from the configuration."""
        logger = VoterGuideLogger(level=config.log_level, log_file=config.log_file)
        return cls(config, logger=logger, **kwargs)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_bundled_data(self) -> LoadStats:
        """
        Load ward data, candidates and the address dataset concurrently.

        Each source degrades to empty on failure. A source that finishes after
        a user upload replaced its slot is discarded.

        Returns:
            LoadStats describing what was installed
        """
        start_time = time.time()
        self.logger.log_load_start(self.config.data_root)

        with ThreadPoolExecutor(max_workers=3) as executor:
            ward_future = executor.submit(self.index_builder.load_bundled_ward_index)
            candidates_future = executor.submit(self.index_builder.load_candidates_document)
            address_future = executor.submit(self.index_builder.load_address_index)

            ward_index, ward_source = ward_future.result()
            candidates = candidates_future.result()
            address_index = address_future.result()

        stats = LoadStats(ward_source=ward_source)

        if self.lookup.replace_ward_index(ward_index):
            stats.ward_entries = len(ward_index)
        else:
            self.logger.info("Bundled ward data discarded: a ward CSV upload is in use")
            stats.ward_entries = len(self.lookup.ward_index)
            stats.ward_source = UPLOAD_SOURCE

        if self.lookup.replace_candidates(candidates):
            stats.candidates = len(candidates)
        else:
            self.logger.info("Bundled candidates discarded: a candidate CSV upload is in use")
            stats.candidates = len(self.lookup.candidates)

        self.lookup.replace_address_index(address_index)
        stats.address_entries = len(address_index)

        stats.load_time = time.time() - start_time
        self.load_stats = stats
        self.logger.log_load_complete(stats)
        return stats

    def upload_ward_csv(self, text: str) -> int:
        """
        Replace the ward index with the contents of a ward CSV.

        Args:
            text: CSV contents

        Returns:
            Number of communities in the new index

        Raises:
            DataFormatError: If the CSV is unusable; the current index is kept
        """
        index = self.index_builder.ward_index_from_csv(text)
        self.lookup.replace_ward_index(index, override=True)
        self.load_stats.ward_entries = len(index)
        self.load_stats.ward_source = UPLOAD_SOURCE
        self.logger.log_source_loaded(UPLOAD_SOURCE, "upload", len(index))
        return len(index)

    def upload_candidates_csv(self, text: str) -> int:
        """
        Replace the candidate list with the contents of a candidate CSV.

        Raises:
            DataFormatError: If the CSV is unusable; the current list is kept
        """
        candidates = self.index_builder.candidates_from_csv(text)
        self.lookup.replace_candidates(candidates, override=True)
        self.load_stats.candidates = len(candidates)
        self.logger.log_source_loaded("candidate CSV upload", "upload", len(candidates))
        return len(candidates)

    def upload_ward_file(self, path: str) -> int:
        """Read a ward CSV from disk (or URL) and upload it."""
        return self.upload_ward_csv(self._read_upload(path))

    def upload_candidates_file(self, path: str) -> int:
        """Read a candidate CSV from disk (or URL) and upload it."""
        return self.upload_candidates_csv(self._read_upload(path))

    def _read_upload(self, path: str) -> str:
        return self.index_builder.data_loader.read_text(path)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def search(self, address: str) -> SearchOutcome:
        """Resolve a typed address; never raises."""
        outcome = self.engine.search(address)
        self._log_outcome(outcome)
        return outcome

    def search_community(self, community: str) -> SearchOutcome:
        """Resolve a community name; never raises."""
        outcome = self.engine.search_community(community)
        self._log_outcome(outcome)
        return outcome

    def select_suggestion(self, prediction: Prediction) -> SearchOutcome:
        """Resolve an autocomplete suggestion the user picked; never raises."""
        self.autocomplete.debouncer.cancel()
        self.autocomplete.suggestions = []
        outcome = self.engine.search_suggestion(prediction.description)
        self._log_outcome(outcome)
        return outcome

    def on_address_input(self, value: str,
                         callback: Optional[Callable[[List[Prediction]], None]] = None):
        """Feed one change of the address field to autocomplete."""
        self.autocomplete.on_input(value, callback)

    @property
    def suggestions(self) -> List[Prediction]:
        return self.autocomplete.suggestions

    def _log_outcome(self, outcome: SearchOutcome):
        if outcome.succeeded:
            self.logger.log_resolution(outcome.result)

