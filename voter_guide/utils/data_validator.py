"""
Data quality checks for ward and candidate uploads.

This module provides the DataValidator class, which reports rows that will
be skipped and communities that appear under more than one ward before an
uploaded dataset replaces the current index.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pandas as pd

from ..models import Position
from .data_utils import detect_duplicates


@dataclass
class DataQualityReport:
    """Summary of data quality issues found in one dataset."""

    dataset: str
    total_rows: int = 0
    usable_rows: int = 0
    skipped_rows: int = 0
    conflicting_communities: Dict[str, List[str]] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    def has_issues(self) -> bool:
        return bool(self.skipped_rows or self.conflicting_communities or self.warnings)

    def summary(self) -> str:
        """One-line summary for logging."""
        parts = [f"{self.dataset}: {self.usable_rows}/{self.total_rows} rows usable"]
        if self.skipped_rows:
            parts.append(f"{self.skipped_rows} skipped")
        if self.conflicting_communities:
            parts.append(f"{len(self.conflicting_communities)} communities listed under several wards")
        return ", ".join(parts)


class DataValidator:
    """Validates cleaned upload DataFrames and produces quality reports."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the data validator.

        Args:
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)

    def validate_ward_frame(self, df: pd.DataFrame, dataset: str = "ward CSV") -> DataQualityReport:
        """
        Check a ward upload frame with normalized 'ward' and 'key' columns.

        Rows with an empty ward or community key are counted as skipped.
        Communities that appear with different wards are reported; the later
        row wins when the index is built.

        Args:
            df: DataFrame with 'ward' (digits) and 'key' (normalized community) columns
            dataset: Name used in the report

        Returns:
            DataQualityReport for the upload
        """
        report = DataQualityReport(dataset=dataset, total_rows=len(df))
        if df.empty:
            return report

        usable = df[(df['ward'] != '') & (df['key'] != '')]
        report.usable_rows = len(usable)
        report.skipped_rows = report.total_rows - report.usable_rows

        duplicates = detect_duplicates(usable, ['key'])
        if not duplicates.empty:
            for key, group in duplicates.groupby('key', sort=False):
                wards = list(dict.fromkeys(group['ward']))
                if len(wards) > 1:
                    report.conflicting_communities[key] = wards
                    report.warnings.append(
                        f"Community '{key}' listed under wards {', '.join(wards)}; "
                        f"using ward {group['ward'].iloc[-1]}"
                    )

        return report

    def validate_candidate_frame(self, df: pd.DataFrame,
                                 dataset: str = "candidate CSV") -> DataQualityReport:
        """
        Check a candidate upload frame with cleaned 'name' and 'position' columns.

        Args:
            df: DataFrame with at least 'name' and 'position' columns
            dataset: Name used in the report

        Returns:
            DataQualityReport for the upload
        """
        report = DataQualityReport(dataset=dataset, total_rows=len(df))
        if df.empty:
            return report

        usable = df[(df['name'] != '') & (df['position'] != '')]
        report.usable_rows = len(usable)
        report.skipped_rows = report.total_rows - report.usable_rows

        if 'ward' in usable.columns:
            councillors = usable[usable['position'] == Position.COUNCILLOR.value]
            without_ward = int((councillors['ward'] == '').sum())
            if without_ward:
                report.warnings.append(
                    f"{without_ward} councillor candidate(s) have no ward and will never be listed"
                )

        return report
