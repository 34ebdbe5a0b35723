"""
Utility functions and helpers.
"""

from .normalizers import (
    normalize_community_key,
    normalize_address_key,
    normalize_ward,
    normalize_position
)
from .data_utils import (
    safe_string_conversion,
    is_null_or_empty,
    clean_dataframe_strings,
    detect_duplicates
)

__all__ = [
    'normalize_community_key',
    'normalize_address_key',
    'normalize_ward',
    'normalize_position',
    'safe_string_conversion',
    'is_null_or_empty',
    'clean_dataframe_strings',
    'detect_duplicates'
]
