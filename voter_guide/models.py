"""
Data models for the voter guide application.

This module defines the lookup indices, candidate records and resolution
results used throughout the resolution pipeline.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .utils.data_utils import safe_string_conversion, is_null_or_empty
from .utils.normalizers import normalize_position, normalize_ward


# normalized community key -> ward digits
WardIndex = Dict[str, str]

# normalized address key -> community name as provided
AddressIndex = Dict[str, str]


class Position(Enum):
    """Office a candidate is running for."""

    MAYOR = "Mayor"
    COUNCILLOR = "Councillor"
    TRUSTEE = "Trustee"
    OTHER = "Other"

    @classmethod
    def classify(cls, label: str) -> 'Position':
        """Map a normalized position label to its office."""
        for member in (cls.MAYOR, cls.COUNCILLOR, cls.TRUSTEE):
            if label == member.value:
                return member
        return cls.OTHER


class ResolutionSource(Enum):
    """How a ward was reached."""

    ADDRESS_DATASET = "Address dataset"
    COMMUNITY_MATCH = "Community match"
    GEOCODE_THEN_COMMUNITY = "Geocoded community"


class ResolutionState(Enum):
    """States of the resolution state machine for one query."""

    IDLE = "idle"
    VALIDATING = "validating"
    ADDRESS_DATASET_HIT = "address_dataset_hit"
    COMMUNITY_HIT = "community_hit"
    GEOCODING = "geocoding"
    RESOLVED = "resolved"
    FAILED = "failed"


@dataclass
class Candidate:
    """Represents a person standing for election."""

    name: str
    position: str
    ward: Optional[str] = None
    url: Optional[str] = None

    def __post_init__(self):
        """Clean fields after initialization."""
        self.name = safe_string_conversion(self.name)
        self.position = normalize_position(self.position)

        if is_null_or_empty(self.ward):
            self.ward = None
        else:
            self.ward = normalize_ward(self.ward) or None

        if is_null_or_empty(self.url):
            self.url = None
        else:
            self.url = safe_string_conversion(self.url)

    @property
    def office(self) -> Position:
        """Office classification of the normalized position label."""
        return Position.classify(self.position)

    def is_valid(self) -> bool:
        """Check if the record has a name and a position."""
        return not (is_null_or_empty(self.name) or is_null_or_empty(self.position))

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> 'Candidate':
        """Create a candidate from a mapping with name/position/ward/url keys."""
        return cls(
            name=data.get('name'),
            position=data.get('position'),
            ward=data.get('ward'),
            url=data.get('url')
        )

    def to_dict(self) -> Dict[str, Optional[str]]:
        """Convert to a plain dictionary."""
        return {
            'name': self.name,
            'position': self.position,
            'ward': self.ward,
            'url': self.url
        }


@dataclass
class ResolutionResult:
    """Ward resolved for one query, with the candidates that apply to it."""

    ward: str
    source: ResolutionSource
    community: Optional[str] = None
    mayors: List[Candidate] = field(default_factory=list)
    councillors: List[Candidate] = field(default_factory=list)
    trustees: List[Candidate] = field(default_factory=list)

    def source_description(self) -> str:
        """Human-readable description of how the ward was matched."""
        description = f"Matched by {self.source.value}"
        if self.community:
            description += f" - Community: {self.community}"
        return description

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            'ward': self.ward,
            'source': self.source.value,
            'community': self.community,
            'mayors': [c.to_dict() for c in self.mayors],
            'councillors': [c.to_dict() for c in self.councillors],
            'trustees': [c.to_dict() for c in self.trustees]
        }


@dataclass
class SearchOutcome:
    """Terminal state of one query: either a result or a user-visible message."""

    state: ResolutionState
    result: Optional[ResolutionResult] = None
    message: Optional[str] = None
    error: Optional[Exception] = None

    @property
    def succeeded(self) -> bool:
        return self.state == ResolutionState.RESOLVED and self.result is not None


@dataclass
class Prediction:
    """One autocomplete suggestion."""

    description: str
    place_id: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> 'Prediction':
        return cls(
            description=safe_string_conversion(data.get('description')),
            place_id=data.get('place_id')
        )


class LookupState:
    """
    In-memory lookup data for one session.

    The ward index, address index and candidate list start empty and are only
    ever replaced by a full-value swap, never edited in place. Once a slot has
    been replaced by a user upload, bundled loads for that slot are ignored.
    """

    def __init__(self):
        self._ward_index: WardIndex = {}
        self._address_index: AddressIndex = {}
        self._candidates: Tuple[Candidate, ...] = ()
        self.ward_overridden = False
        self.candidates_overridden = False

    @property
    def ward_index(self) -> WardIndex:
        return self._ward_index

    @property
    def address_index(self) -> AddressIndex:
        return self._address_index

    @property
    def candidates(self) -> Tuple[Candidate, ...]:
        return self._candidates

    def is_ready(self) -> bool:
        """Check whether the ward index has any entries."""
        return bool(self._ward_index)

    def replace_ward_index(self, index: WardIndex, override: bool = False) -> bool:
        """
        Swap in a new ward index.

        Args:
            index: Complete replacement index
            override: True for user uploads, which win for the rest of the session

        Returns:
            True if the index was installed, False if a bundled load was
            discarded because an upload already replaced the slot
        """
        if self.ward_overridden and not override:
            return False

        self._ward_index = dict(index)
        self.ward_overridden = self.ward_overridden or override
        return True

    def replace_address_index(self, index: AddressIndex) -> None:
        """Swap in a new address index."""
        self._address_index = dict(index)

    def replace_candidates(self, candidates: List[Candidate], override: bool = False) -> bool:
        """Swap in a new candidate list (see replace_ward_index for override rules)."""
        if self.candidates_overridden and not override:
            return False

        self._candidates = tuple(candidates)
        self.candidates_overridden = self.candidates_overridden or override
        return True
