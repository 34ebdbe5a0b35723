"""
Delimited text parser.

This module turns raw delimited text (CSV uploads) into row mappings keyed by
the labels of the first line. It knows nothing about ward or candidate
schemas; column roles are worked out later by the column detector.
"""

import re
from typing import Dict, List

ParsedRow = Dict[str, str]

_LINE_BREAK = re.compile(r'\r\n|\r|\n')


def split_fields(line: str, delimiter: str = ',', quote: str = '"') -> List[str]:
    """
    Split one record into fields.

    A field that starts with a quote may contain the delimiter; two quotes in
    a row inside it stand for one literal quote. An unterminated quote runs to
    the end of the line instead of raising. Fields are returned untrimmed.

    Args:
        line: Single record without its line terminator
        delimiter: Field separator
        quote: Quote character

    Returns:
        List of raw field values

    Example:
        >>> split_fields('a,"b,c",d')
        ['a', 'b,c', 'd']
    """
    fields = []
    current = []
    in_quotes = False
    i = 0
    length = len(line)

    while i < length:
        char = line[i]

        if in_quotes:
            if char == quote:
                if i + 1 < length and line[i + 1] == quote:
                    current.append(quote)
                    i += 1
                else:
                    in_quotes = False
            else:
                current.append(char)
        elif char == quote and not ''.join(current).strip():
            # Opening quote; whitespace before it is dropped
            current = []
            in_quotes = True
        elif char == delimiter:
            fields.append(''.join(current))
            current = []
        else:
            current.append(char)

        i += 1

    fields.append(''.join(current))
    return fields


def placeholder_column_name(position: int) -> str:
    """Name for a column whose header cell is empty (1-based position)."""
    return f"column_{position}"


def parse_delimited_text(text: str, delimiter: str = ',') -> List[ParsedRow]:
    """
    Parse delimited text into row mappings keyed by the header labels.

    Both line-ending conventions are accepted and blank lines are dropped.
    Records are single-line only. Missing trailing fields become empty
    strings; fields beyond the header width are ignored. Empty header cells
    are keyed by a placeholder derived from their position. All values are
    trimmed.

    Args:
        text: Raw file contents
        delimiter: Field separator

    Returns:
        Data rows in file order (the header line is not included)
    """
    lines = split_lines(text)
    if not lines:
        return []

    headers = parse_header(lines[0], delimiter)

    rows = []
    for line in lines[1:]:
        values = split_fields(line, delimiter)
        row = {}
        for index, header in enumerate(headers):
            row[header] = values[index].strip() if index < len(values) else ''
        rows.append(row)

    return rows


def split_lines(text: str) -> List[str]:
    """Non-blank lines of the text, with any leading byte-order mark removed."""
    if not text:
        return []

    # A byte-order mark would otherwise end up in the first header label
    text = text.lstrip('\ufeff')
    return [line for line in _LINE_BREAK.split(text) if line.strip()]


def header_labels(text: str, delimiter: str = ',') -> List[str]:
    """Labels of the first line of delimited text (empty for blank text)."""
    lines = split_lines(text)
    return parse_header(lines[0], delimiter) if lines else []


def parse_header(line: str, delimiter: str = ',') -> List[str]:
    """Parse a header line into column labels, filling in placeholders for empty cells."""
    headers = []
    for position, label in enumerate(split_fields(line, delimiter), start=1):
        label = label.strip()
        headers.append(label or placeholder_column_name(position))
    return headers
