"""
Column role detection for loaded datasets.

This module provides the ColumnDetector class, which guesses which columns of
a parsed dataset hold wards, communities, candidate details or addresses.
Detection only looks at the first row, as a representative sample.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..utils.data_utils import safe_string_conversion


_WARD_LABEL = re.compile(r'^ward')
_COMMUNITY_LABEL = re.compile(r'community|neighbou?rhood')
_POSITION_LABEL = re.compile(r'position|office|role')
_URL_LABEL = re.compile(r'url|link|website')
_ADDRESS_LABEL = re.compile(r'address|street|full_?address')
_DIGIT = re.compile(r'\d')
_LETTER = re.compile(r'[A-Za-z]')


@dataclass
class WardColumns:
    """Detected columns of a ward-community dataset."""

    ward: Optional[str] = None
    community: Optional[str] = None
    ward_from_values: bool = False
    community_from_values: bool = False

    def missing(self) -> List[str]:
        return [role for role, column in (('ward', self.ward), ('community', self.community))
                if column is None]


@dataclass
class CandidateColumns:
    """Detected columns of a candidate dataset."""

    name: Optional[str] = None
    position: Optional[str] = None
    ward: Optional[str] = None
    url: Optional[str] = None

    def missing(self) -> List[str]:
        """Required roles (name, position) that were not found."""
        return [role for role, column in (('name', self.name), ('position', self.position))
                if column is None]


@dataclass
class AddressColumns:
    """Detected columns of the bulk address dataset."""

    address: Optional[str] = None
    community: Optional[str] = None

    def missing(self) -> List[str]:
        return [role for role, column in (('address', self.address), ('community', self.community))
                if column is None]


class ColumnDetector:
    """
    Detects column roles in parsed datasets from their header labels.

    Ward-community data falls back to inspecting the first row's values when a
    label does not give the role away. Candidate and address data have no
    value-based fallback.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the column detector.

        Args:
            logger: Optional logger instance for logging detection results
        """
        self.logger = logger or logging.getLogger(__name__)

    def detect_ward_columns(self, rows: Sequence[Mapping[str, Any]]) -> WardColumns:
        """
        Detect the ward and community columns of a ward-community dataset.

        Labels starting with "ward" mark the ward column; labels containing
        "community" or "neighbourhood"/"neighborhood" mark the community
        column. A role not found by label is guessed from the first row: the
        first unclaimed column whose value has a digit becomes the ward
        column, the first unclaimed one with a letter the community column.

        Args:
            rows: Parsed rows; only the first one is inspected

        Returns:
            WardColumns with None for roles that could not be guessed
        """
        columns = WardColumns()
        if not rows:
            return columns

        sample = rows[0]
        for key in sample:
            label = str(key).strip().lower()
            if columns.ward is None and _WARD_LABEL.search(label):
                columns.ward = key
            elif columns.community is None and _COMMUNITY_LABEL.search(label):
                columns.community = key

        if columns.ward is None or columns.community is None:
            self._guess_ward_columns_from_values(sample, columns)

        self.logger.debug(
            f"Ward columns detected: ward={columns.ward!r} (from values: {columns.ward_from_values}), "
            f"community={columns.community!r} (from values: {columns.community_from_values})"
        )
        return columns

    def _guess_ward_columns_from_values(self, sample: Mapping[str, Any], columns: WardColumns):
        """Fill missing ward/community roles from the first row's values."""
        claimed = {columns.ward, columns.community}

        for key, raw_value in sample.items():
            if key in claimed:
                continue

            value = safe_string_conversion(raw_value)
            if columns.ward is None and _DIGIT.search(value):
                columns.ward = key
                columns.ward_from_values = True
                claimed.add(key)
            elif columns.community is None and _LETTER.search(value):
                columns.community = key
                columns.community_from_values = True
                claimed.add(key)

    def detect_candidate_columns(self, rows: Sequence[Mapping[str, Any]]) -> CandidateColumns:
        """
        Detect the name, position, ward and url columns of a candidate dataset.

        Args:
            rows: Parsed rows; only the first one's keys are inspected

        Returns:
            CandidateColumns with None for roles that were not found
        """
        columns = CandidateColumns()
        if not rows:
            return columns

        for key in rows[0]:
            label = str(key).strip().lower()
            if columns.name is None and label == 'name':
                columns.name = key
            elif columns.position is None and _POSITION_LABEL.search(label):
                columns.position = key
            elif columns.url is None and _URL_LABEL.search(label):
                columns.url = key
            elif columns.ward is None and _WARD_LABEL.search(label):
                columns.ward = key
            elif columns.name is None and 'candidate' in label:
                columns.name = key

        self.logger.debug(f"Candidate columns detected: {columns}")
        return columns

    def detect_address_columns(self, sample: Mapping[str, Any]) -> AddressColumns:
        """
        Detect the address and community keys of a bulk address dataset row.

        Args:
            sample: First row object of the dataset

        Returns:
            AddressColumns with None for keys that were not found
        """
        columns = AddressColumns()

        for key in sample:
            label = str(key).strip().lower()
            if columns.address is None and _ADDRESS_LABEL.search(label):
                columns.address = key
            if columns.community is None and _COMMUNITY_LABEL.search(label):
                columns.community = key

        self.logger.debug(f"Address dataset columns detected: {columns}")
        return columns


def header_row_looks_like_data(columns: WardColumns) -> bool:
    """
    Check whether a ward CSV was probably uploaded without a header line.

    True when both roles had to be guessed from values and the header labels
    themselves fit those roles (ward label has a digit, community label a
    letter).

    Args:
        columns: Result of ColumnDetector.detect_ward_columns

    Returns:
        True if the header line should be treated as a data row
    """
    if not (columns.ward_from_values and columns.community_from_values):
        return False

    return bool(_DIGIT.search(str(columns.ward)) and _LETTER.search(str(columns.community)))


def available_columns(rows: Sequence[Dict[str, Any]]) -> List[str]:
    """Column labels of a parsed dataset (from its first row)."""
    return [str(key) for key in rows[0]] if rows else []
