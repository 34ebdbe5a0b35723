"""
Parsing components: delimited text, column roles and embedded data literals.
"""

from .tabular_parser import parse_delimited_text, split_fields
from .column_detector import ColumnDetector, WardColumns, CandidateColumns, AddressColumns
from .literal_parser import parse_literal, extract_assigned_array, LiteralSyntaxError

__all__ = [
    'parse_delimited_text',
    'split_fields',
    'ColumnDetector',
    'WardColumns',
    'CandidateColumns',
    'AddressColumns',
    'parse_literal',
    'extract_assigned_array',
    'LiteralSyntaxError'
]
