"""
Data utility functions for type conversions and null handling.

This module provides utility functions for cleaning loaded cells, handling
null values, and turning parsed rows into DataFrames.
"""

import pandas as pd
from typing import Any, Dict, List, Sequence


def safe_string_conversion(value: Any) -> str:
    """
    Safely convert a value to string, handling nulls and cleaning whitespace.

    Args:
        value: Value to convert to string

    Returns:
        Cleaned string value or empty string if null
    """
    if value is None:
        return ""

    if not isinstance(value, (list, dict, tuple)) and pd.isna(value):
        return ""

    return str(value).strip()


def is_null_or_empty(value: Any) -> bool:
    """
    Check if a value is null, empty, or contains only whitespace.

    Args:
        value: Value to check

    Returns:
        True if value is null/empty, False otherwise
    """
    return safe_string_conversion(value) == ""


def rows_to_frame(rows: Sequence[Dict[str, Any]]) -> pd.DataFrame:
    """
    Build a DataFrame from row mappings, keeping every cell as a string.

    Args:
        rows: Row mappings (parsed CSV rows or JSON row objects)

    Returns:
        DataFrame with object dtype columns in first-seen key order
    """
    if not rows:
        return pd.DataFrame()

    return pd.DataFrame(list(rows), dtype=object)


def clean_dataframe_strings(df: pd.DataFrame, string_columns: List[str]) -> pd.DataFrame:
    """
    Trim the given text columns, turning missing cells into empty strings.

    Columns that are not present (or given as None) are ignored, so callers
    can pass optional detected columns straight through.
    """
    present = [col for col in string_columns if col is not None and col in df.columns]
    if not present:
        return df.copy()

    return df.assign(**{str(col): df[col].map(safe_string_conversion) for col in present})


def detect_duplicates(df: pd.DataFrame, key_columns: List[str]) -> pd.DataFrame:
    """Return every row whose key columns occur more than once."""
    if df.empty:
        return df.copy()

    return df[df.duplicated(subset=key_columns, keep=False)].copy()
