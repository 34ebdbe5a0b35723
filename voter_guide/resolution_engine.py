"""
Ward resolution engine for the voter guide application.

This module provides the ResolutionEngine class, which takes one address or
community query through validation, the address-dataset fast path, community
lookup and, when needed, the external geocoder, and returns the ward with
the candidates that apply to it.
"""

import logging
from typing import List, Optional, Sequence

from rapidfuzz import fuzz, process

from .config import ResolverConfig
from .exceptions import (
    ConfigurationError, InputError, IndexNotReadyError, LookupMissError, UpstreamError,
    VoterGuideError
)
from .geocoding.result_adapter import extract_community
from .models import (
    Candidate, LookupState, Position, ResolutionResult, ResolutionSource, ResolutionState,
    SearchOutcome
)
from .utils.error_handler import create_error_context, log_error_details
from .utils.normalizers import normalize_address_key, normalize_community_key, normalize_ward


EMPTY_INPUT_MESSAGE = "Please enter an address"
NOT_READY_MESSAGE = "Ward mapping not loaded. Please wait and try again."
ADDRESS_NOT_FOUND_MESSAGE = "Address not found. Please try a different address."
UNDETERMINED_COMMUNITY_MESSAGE = "Could not determine community from address"
GEOCODE_FAILED_MESSAGE = "Failed to geocode address. Please try again."


def partition_candidates(candidates: Sequence[Candidate], ward: str):
    """
    Split candidates into those shown for a ward.

    Candidates are grouped by office. Mayors are city-wide. Councillors are
    kept when their normalized ward string equals the normalized resolved
    ward. Trustees are not ward-filtered. Candidates running for any other
    office are left out. Load order is preserved.

    Args:
        candidates: Full candidate list in load order
        ward: Resolved ward identifier

    Returns:
        Tuple of (mayors, councillors, trustees)
    """
    ward_key = normalize_ward(ward)

    mayors = [c for c in candidates if c.office is Position.MAYOR]
    councillors = [
        c for c in candidates
        if c.office is Position.COUNCILLOR and normalize_ward(c.ward) == ward_key
    ]
    trustees = [c for c in candidates if c.office is Position.TRUSTEE]

    return mayors, councillors, trustees


class ResolutionEngine:
    """
    Resolves addresses and community names to wards.

    The engine reads the lookup state it is given but never modifies it.
    Its `state` attribute follows the query through
    IDLE -> VALIDATING -> (ADDRESS_DATASET_HIT | COMMUNITY_HIT | GEOCODING)
    -> RESOLVED | FAILED, and goes back to IDLE on the next query.
    """

    def __init__(self, lookup_state: LookupState, config: Optional[ResolverConfig] = None,
                 geocoder=None, logger: Optional[logging.Logger] = None):
        """
        Initialize the ResolutionEngine.

        Args:
            lookup_state: Session lookup data (ward/address indices, candidates)
            config: Resolver configuration
            geocoder: Object with a geocode(address) method returning result
                dicts; None disables the geocoding fallback
            logger: Optional logger instance
        """
        self.lookup = lookup_state
        self.config = config or ResolverConfig()
        self.geocoder = geocoder
        self.logger = logger or logging.getLogger(__name__)
        self.state = ResolutionState.IDLE

    # ------------------------------------------------------------------
    # Boundary entry points: never raise
    # ------------------------------------------------------------------

    def search(self, address: str) -> SearchOutcome:
        """Resolve a typed address, reporting any failure as a FAILED outcome."""
        return self._run(self.resolve_address, address)

    def search_community(self, community: str) -> SearchOutcome:
        """Resolve a community name, reporting any failure as a FAILED outcome."""
        return self._run(self.resolve_community, community)

    def search_suggestion(self, description: str) -> SearchOutcome:
        """Resolve a selected autocomplete suggestion, reporting any failure as a FAILED outcome."""
        return self._run(self.resolve_suggestion, description)

    def _run(self, resolver, value: str) -> SearchOutcome:
        try:
            result = resolver(value)
        except VoterGuideError as e:
            self._transition(ResolutionState.FAILED)
            self._log_failure(e, value)
            return SearchOutcome(ResolutionState.FAILED, message=self._message_for(e), error=e)
        except Exception as e:
            self._transition(ResolutionState.FAILED)
            context = create_error_context(operation="resolve", query=value)
            log_error_details(self.logger, e, context)
            return SearchOutcome(ResolutionState.FAILED, message=GEOCODE_FAILED_MESSAGE, error=e)

        return SearchOutcome(ResolutionState.RESOLVED, result=result)

    # ------------------------------------------------------------------
    # Resolution steps: raise VoterGuideError subclasses on failure
    # ------------------------------------------------------------------

    def resolve_address(self, address: str) -> ResolutionResult:
        """
        Resolve a typed address to its ward.

        The address dataset is consulted first; otherwise the address, with
        the region suffix appended, is geocoded and the extracted community
        is looked up.

        Args:
            address: Free-text address

        Returns:
            ResolutionResult for the address

        Raises:
            InputError: If the address is empty
            IndexNotReadyError: If the ward index is empty
            LookupMissError: If the address or its community cannot be resolved
            UpstreamError: If the geocoder fails
            ConfigurationError: If geocoding is needed but no geocoder is configured
        """
        self._begin(address, field_name='address')

        community = self._dataset_community(address)
        if community is not None:
            return self._community_hit(community, ResolutionSource.ADDRESS_DATASET)

        return self._geocode_then_lookup(address.strip() + self.config.region_suffix)

    def resolve_suggestion(self, description: str) -> ResolutionResult:
        """
        Resolve an autocomplete suggestion's description.

        Same as resolve_address, except the description is geocoded as-is
        since the provider already qualified it.
        """
        self._begin(description, field_name='address')

        community = self._dataset_community(description)
        if community is not None:
            return self._community_hit(community, ResolutionSource.ADDRESS_DATASET)

        return self._geocode_then_lookup(description.strip())

    def resolve_community(self, community: str) -> ResolutionResult:
        """
        Resolve a community name entered directly.

        Raises:
            InputError: If the name is empty
            IndexNotReadyError: If the ward index is empty
            LookupMissError: If the community is not in the ward index
        """
        self._begin(community, field_name='community')
        return self._community_hit(community.strip(), ResolutionSource.COMMUNITY_MATCH)

    def _begin(self, value: Optional[str], field_name: str):
        self._transition(ResolutionState.IDLE)
        self._transition(ResolutionState.VALIDATING)

        if value is None or not str(value).strip():
            raise InputError(EMPTY_INPUT_MESSAGE, field_name=field_name, invalid_value=value)

        if not self.lookup.is_ready():
            raise IndexNotReadyError(NOT_READY_MESSAGE)

    def _dataset_community(self, address: str) -> Optional[str]:
        """Community for an address from the address dataset, if present."""
        index = self.lookup.address_index
        if not index:
            return None

        community = index.get(normalize_address_key(address, self.config.address_qualifiers))
        if community:
            self._transition(ResolutionState.ADDRESS_DATASET_HIT)
            self.logger.debug(f"Address dataset hit: {address!r} -> {community!r}")
        return community or None

    def _geocode_then_lookup(self, query: str) -> ResolutionResult:
        self._transition(ResolutionState.GEOCODING)

        if self.geocoder is None:
            raise ConfigurationError(
                "Geocoding service is not configured; enter a community name instead",
                config_key="proxy_base_url"
            )

        results = self.geocoder.geocode(query)
        if not results:
            raise LookupMissError(ADDRESS_NOT_FOUND_MESSAGE, value=query,
                                  reason='address_not_found')

        first = results[0] if isinstance(results[0], dict) else {}
        community = extract_community(first.get('address_components') or [],
                                      self.config.generic_area_names)
        if not community:
            raise LookupMissError(UNDETERMINED_COMMUNITY_MESSAGE, value=query,
                                  reason='community_undetermined')

        return self._community_hit(community, ResolutionSource.GEOCODE_THEN_COMMUNITY)

    def _community_hit(self, community: str, source: ResolutionSource) -> ResolutionResult:
        self._transition(ResolutionState.COMMUNITY_HIT)

        ward = self.lookup.ward_index.get(normalize_community_key(community))
        if not ward:
            suggestions = self.suggest_communities(community)
            message = f'Community "{community}" not found in database'
            if suggestions:
                message += f". Did you mean: {', '.join(suggestions)}?"
            raise LookupMissError(message, value=community, reason='community_not_found',
                                  suggestions=suggestions)

        result = self.build_result(ward, source, community)
        self._transition(ResolutionState.RESOLVED)
        return result

    def build_result(self, ward: str, source: ResolutionSource,
                     community: Optional[str] = None) -> ResolutionResult:
        """Attach the candidates that apply to a resolved ward."""
        mayors, councillors, trustees = partition_candidates(self.lookup.candidates, ward)
        return ResolutionResult(
            ward=ward,
            source=source,
            community=community,
            mayors=mayors,
            councillors=councillors,
            trustees=trustees
        )

    def suggest_communities(self, community: str) -> List[str]:
        """
        Ward index keys that closely resemble an unknown community.

        Args:
            community: Community name that missed

        Returns:
            Up to max_suggestions keys scoring at least suggestion_threshold
        """
        if self.config.max_suggestions == 0 or not self.lookup.ward_index:
            return []

        matches = process.extract(
            normalize_community_key(community),
            list(self.lookup.ward_index.keys()),
            scorer=fuzz.WRatio,
            limit=self.config.max_suggestions,
            score_cutoff=self.config.suggestion_threshold
        )
        return [match for match, _score, _index in matches]

    def _transition(self, new_state: ResolutionState):
        if new_state != self.state:
            self.logger.debug(f"Resolution state: {self.state.value} -> {new_state.value}")
        self.state = new_state

    @staticmethod
    def _message_for(error: VoterGuideError) -> str:
        if isinstance(error, UpstreamError):
            return GEOCODE_FAILED_MESSAGE
        return error.message

    def _log_failure(self, error: VoterGuideError, value: Optional[str]):
        if isinstance(error, (UpstreamError, ConfigurationError)):
            context = create_error_context(operation="resolve", query=value)
            log_error_details(self.logger, error, context)
        else:
            self.logger.info(f"Query {value!r} not resolved: {error.message}")
