"""
Lookup index construction.

This module provides the IndexBuilder class, which turns bundled ward files,
the candidate document, the optional bulk address dataset and user CSV
uploads into fresh ward indices, address indices and candidate lists.
Builders always return complete new values; installing them is the
caller's job.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd
from tqdm import tqdm

from .config import ResolverConfig
from .data_loader import DataLoader
from .exceptions import (
    DataFormatError, UpstreamError, create_missing_columns_error
)
from .models import AddressIndex, Candidate, WardIndex
from .parsing.column_detector import (
    ColumnDetector, available_columns, header_row_looks_like_data
)
from .parsing.literal_parser import extract_assigned_array
from .parsing.tabular_parser import header_labels, parse_delimited_text
from .utils.data_utils import clean_dataframe_strings, rows_to_frame
from .utils.data_validator import DataValidator, DataQualityReport
from .utils.error_handler import (
    RetryConfig, create_error_context, degrade_on_error, log_error_details
)
from .utils.normalizers import normalize_address_key, normalize_community_key, normalize_ward


WARD_FILES_SOURCE = "ward files"
AGGREGATED_SOURCE = "aggregated ward file"
UPLOAD_SOURCE = "ward CSV upload"


class IndexBuilder:
    """
    Builds ward indices, address indices and candidate lists from raw sources.

    Bundled and remote sources degrade silently: anything that cannot be
    fetched or parsed counts as absent. CSV uploads are validated and raise
    DataFormatError instead, so a bad upload never replaces good data.
    """

    def __init__(self, config: ResolverConfig,
                 data_loader: Optional[DataLoader] = None,
                 column_detector: Optional[ColumnDetector] = None,
                 data_validator: Optional[DataValidator] = None,
                 logger: Optional[logging.Logger] = None,
                 show_progress: bool = False):
        """
        Initialize the IndexBuilder.

        Args:
            config: Resolver configuration (sources, qualifiers)
            data_loader: Optional loader used for files and URLs
            column_detector: Optional column role detector
            data_validator: Optional validator for upload quality reports
            logger: Optional logger instance
            show_progress: Show a progress bar while indexing large datasets
        """
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.data_loader = data_loader or DataLoader(
            logger=self.logger,
            timeout=config.request_timeout,
            retry_config=RetryConfig(max_attempts=config.fetch_attempts),
            max_workers=config.max_fetch_workers
        )
        self.column_detector = column_detector or ColumnDetector(self.logger)
        self.data_validator = data_validator or DataValidator(self.logger)
        self.show_progress = show_progress
        self.last_report: Optional[DataQualityReport] = None

    # ------------------------------------------------------------------
    # Ward index
    # ------------------------------------------------------------------

    def load_bundled_ward_index(self) -> Tuple[WardIndex, Optional[str]]:
        """
        Build the ward index from the bundled ward data.

        The per-ward files (fetched concurrently) are used exclusively if they
        yield at least one community; otherwise the aggregated ward file is
        tried. When both are absent the returned index is empty.

        Returns:
            Tuple of (ward index, name of the source used or None)
        """
        numbers = list(range(1, self.config.ward_count + 1))
        locations = [self.config.ward_file_location(n) for n in numbers]
        payloads = self.data_loader.read_json_many(locations)

        lists_by_ward = {
            str(number): payload
            for number, payload in zip(numbers, payloads)
            if isinstance(payload, list)
        }
        index, total = self.ward_index_from_lists(lists_by_ward)
        if total > 0:
            self.logger.info(
                f"Ward mapping loaded from {len(lists_by_ward)} ward files: {total} communities"
            )
            return index, WARD_FILES_SOURCE

        index = self._load_aggregated_ward_index()
        if index:
            self.logger.info(f"Ward mapping loaded from aggregated file: {len(index)} communities")
            return index, AGGREGATED_SOURCE

        self.logger.warning("No ward data could be loaded from any bundled source")
        return {}, None

    def _load_aggregated_ward_index(self) -> WardIndex:
        location = self.config.aggregated_ward_location()
        try:
            payload = self.data_loader.read_json(location)
        except UpstreamError as e:
            self.logger.debug(f"Aggregated ward file unavailable: {e.message}")
            return {}

        if not isinstance(payload, dict):
            self.logger.warning(f"Aggregated ward file is not a ward -> communities object: {location}")
            return {}

        index, _ = self.ward_index_from_lists(payload)
        return index

    def ward_index_from_lists(self, lists_by_ward: Dict[Any, Any]) -> Tuple[WardIndex, int]:
        """
        Build a ward index from ward -> list of community names.

        Args:
            lists_by_ward: Mapping of ward label to community names

        Returns:
            Tuple of (ward index, number of community entries read)
        """
        index: WardIndex = {}
        total = 0

        for ward_label, communities in lists_by_ward.items():
            ward = normalize_ward(ward_label)
            if not ward or not isinstance(communities, list):
                continue

            for community in communities:
                key = normalize_community_key(community)
                if key:
                    index[key] = ward
                    total += 1

        return index, total

    def ward_index_from_csv(self, text: str) -> WardIndex:
        """
        Build a replacement ward index from an uploaded ward CSV.

        Args:
            text: CSV contents

        Returns:
            New ward index

        Raises:
            DataFormatError: If the CSV has no data, lacks a ward or community
                column, or contains no usable rows
        """
        rows = parse_delimited_text(text)
        header_only = not rows
        if header_only:
            # A single line can still be one header-less record; detect on the labels alone
            rows = [{label: label for label in header_labels(text)}]

        columns = self.column_detector.detect_ward_columns(rows)
        if header_only and not header_row_looks_like_data(columns):
            raise DataFormatError("Ward CSV contains no data rows", dataset=UPLOAD_SOURCE)

        missing = columns.missing()
        if missing:
            raise create_missing_columns_error(UPLOAD_SOURCE, missing, available_columns(rows))

        records = [] if header_only else [
            (row.get(columns.ward, ''), row.get(columns.community, '')) for row in rows
        ]
        if header_row_looks_like_data(columns):
            self.logger.info("Ward CSV appears to have no header line; treating it as data")
            records.insert(0, (columns.ward, columns.community))

        df = pd.DataFrame(records, columns=['ward', 'community'], dtype=object)
        df = clean_dataframe_strings(df, ['ward', 'community'])
        df['ward'] = df['ward'].map(normalize_ward)
        df['key'] = df['community'].map(normalize_community_key)

        report = self.data_validator.validate_ward_frame(df, UPLOAD_SOURCE)
        self._log_report(report)

        usable = df[(df['ward'] != '') & (df['key'] != '')]
        if usable.empty:
            raise DataFormatError(
                f"Ward CSV has no rows with both a ward number and a community "
                f"(columns '{columns.ward}' and '{columns.community}')",
                dataset=UPLOAD_SOURCE,
                available_columns=available_columns(rows)
            )

        return dict(zip(usable['key'], usable['ward']))

    # ------------------------------------------------------------------
    # Candidates
    # ------------------------------------------------------------------

    def load_candidates_document(self, location: Optional[str] = None) -> List[Candidate]:
        """
        Load candidates from the document with the embedded candidate array.

        Any failure (missing document, no assignment, invalid literal) leaves
        the list empty.

        Args:
            location: Document path or URL (defaults to the configured source)

        Returns:
            Candidates in document order
        """
        location = location or self.config.candidates_source
        if not location:
            self.logger.debug("No candidate document configured")
            return []

        @degrade_on_error(list, logger=self.logger, operation="load_candidates_document")
        def load() -> List[Candidate]:
            document = self.data_loader.read_text(location)
            candidates = self.candidates_from_document(document)
            self.logger.info(f"Loaded candidates: {len(candidates)}")
            return candidates

        return load()

    def candidates_from_document(self, document: str) -> List[Candidate]:
        """
        Extract the candidate array assigned in a document.

        Args:
            document: HTML or script text

        Returns:
            Candidates with a name and position, in array order

        Raises:
            LiteralSyntaxError: If the assigned value is not plain data
            DataFormatError: If the document has no candidate array
        """
        identifier = self.config.candidates_identifier
        items = extract_assigned_array(document, identifier)
        if items is None:
            raise DataFormatError(
                f"No '{identifier}' array found in candidate document",
                dataset="candidate document"
            )

        candidates = []
        for item in items:
            if not isinstance(item, dict):
                continue
            candidate = Candidate.from_mapping(item)
            if candidate.is_valid():
                candidates.append(candidate)

        return candidates

    def candidates_from_csv(self, text: str) -> List[Candidate]:
        """
        Build a replacement candidate list from an uploaded candidate CSV.

        Args:
            text: CSV contents

        Returns:
            Candidates in file order

        Raises:
            DataFormatError: If the CSV has no data, lacks a name or position
                column, or contains no usable rows
        """
        dataset = "candidate CSV upload"
        rows = parse_delimited_text(text)
        if not rows:
            raise DataFormatError("Candidate CSV contains no data rows", dataset=dataset)

        columns = self.column_detector.detect_candidate_columns(rows)
        missing = columns.missing()
        if missing:
            raise create_missing_columns_error(dataset, missing, available_columns(rows))

        candidates = [
            Candidate(
                name=row.get(columns.name, ''),
                position=row.get(columns.position, ''),
                ward=row.get(columns.ward) if columns.ward else None,
                url=row.get(columns.url) if columns.url else None
            )
            for row in rows
        ]

        df = pd.DataFrame(
            [[c.name, c.position, c.ward or ''] for c in candidates],
            columns=['name', 'position', 'ward'],
            dtype=object
        )
        self._log_report(self.data_validator.validate_candidate_frame(df, dataset))

        usable = [c for c in candidates if c.is_valid()]
        if not usable:
            raise DataFormatError(
                f"Candidate CSV has no rows with both a name and a position "
                f"(columns '{columns.name}' and '{columns.position}')",
                dataset=dataset,
                available_columns=available_columns(rows)
            )

        return usable

    # ------------------------------------------------------------------
    # Address dataset
    # ------------------------------------------------------------------

    def load_address_index(self, location: Optional[str] = None) -> AddressIndex:
        """
        Build the address index from the bulk address dataset.

        Best effort: any fetch or parse failure yields an empty index.

        Args:
            location: Dataset path or URL (defaults to the configured URL)

        Returns:
            Address index (possibly empty)
        """
        location = location or self.config.address_dataset_url
        if not location:
            return {}

        try:
            payload = self.data_loader.read_json(location)
            index = self.address_index_from_payload(payload)
        except UpstreamError as e:
            self.logger.info(f"Address dataset not available: {e.message}")
            return {}
        except Exception as e:
            context = create_error_context(operation="load_address_index", source=location)
            log_error_details(self.logger, e, context)
            return {}

        if index:
            self.logger.info(f"Address dataset loaded: {len(index):,} addresses")
        return index

    def address_index_from_payload(self, payload: Any) -> AddressIndex:
        """
        Build an address index from a decoded dataset document.

        The document is either a list of row objects or an object wrapping
        that list under "rows" or "data". Column roles are detected from the
        first row; rows without an address or community are skipped.

        Args:
            payload: Decoded JSON dataset

        Returns:
            Address index (empty if the shape or columns are not recognised)
        """
        rows = extract_rows(payload)
        if not rows or not isinstance(rows[0], dict):
            return {}

        columns = self.column_detector.detect_address_columns(rows[0])
        if columns.missing():
            self.logger.info(f"Address dataset skipped: no {', '.join(columns.missing())} column")
            return {}

        df = rows_to_frame([row for row in rows if isinstance(row, dict)])
        df = clean_dataframe_strings(df, [columns.address, columns.community])
        df = df[(df[columns.address] != '') & (df[columns.community] != '')]

        qualifiers = self.config.address_qualifiers
        index: AddressIndex = {}
        pairs = zip(df[columns.address], df[columns.community])
        for address, community in tqdm(pairs, total=len(df), desc="Indexing addresses",
                                       disable=not self.show_progress):
            index[normalize_address_key(address, qualifiers)] = community

        return index

    def _log_report(self, report: DataQualityReport):
        self.last_report = report
        self.logger.info(report.summary())
        for warning in report.warnings:
            self.logger.warning(f"DATA QUALITY: {warning}")


def extract_rows(payload: Any) -> List[Any]:
    """Return the row list of a dataset document (top-level list, or under 'rows'/'data')."""
    if isinstance(payload, list):
        return payload

    if isinstance(payload, dict):
        for key in ('rows', 'data'):
            rows = payload.get(key)
            if isinstance(rows, list):
                return rows

    return []
