"""
String normalization routines for addresses, communities, wards and positions.

Every key stored in the ward index and the address index is produced by one of
these functions, so lookups never compare raw user input.
"""

import re
from typing import Any, Iterable, Optional

from .data_utils import safe_string_conversion


# Compass pairs that may be typed with spaces or periods ("N E", "N.E.")
_COMPASS_PATTERNS = [
    (re.compile(r'\bN\s*E\b'), 'NE'),
    (re.compile(r'\bN\s*W\b'), 'NW'),
    (re.compile(r'\bS\s*E\b'), 'SE'),
    (re.compile(r'\bS\s*W\b'), 'SW'),
]

STREET_TYPE_ABBREVIATIONS = {
    'ST': 'STREET',
    'AVE': 'AVENUE',
    'RD': 'ROAD',
    'DR': 'DRIVE',
}

DEFAULT_LOCALITY_QUALIFIERS = ('CANADA', 'AB', 'ALBERTA', 'CALGARY')

_WHITESPACE = re.compile(r'\s+')
_DIGIT_RUN = re.compile(r'\d+')
_COUNCILLOR = re.compile(r'coun[cs][ie]l')
_TRUSTEE = re.compile(r'trustee|school')

_STREET_TYPE_PATTERN = re.compile(
    r'\b(' + '|'.join(STREET_TYPE_ABBREVIATIONS) + r')\b'
)


def _collapse_whitespace(value: str) -> str:
    return _WHITESPACE.sub(' ', value).strip()


def normalize_community_key(value: Any) -> str:
    """
    Normalize a community name into a ward index key.

    Uppercases, trims, strips periods, turns hyphens into spaces, collapses
    whitespace and canonicalizes compass abbreviations so that "N E", "N.E."
    and "NE" all become "NE". The function is idempotent.

    Args:
        value: Community name as typed or loaded

    Returns:
        Normalized community key (empty string for null input)
    """
    text = safe_string_conversion(value).upper()
    text = text.replace('.', '').replace('-', ' ')
    text = _collapse_whitespace(text)

    for pattern, replacement in _COMPASS_PATTERNS:
        text = pattern.sub(replacement, text)

    return text


def normalize_address_key(value: Any,
                          qualifiers: Optional[Iterable[str]] = None) -> str:
    """
    Normalize a street address into an address index key.

    Trailing locality qualifiers (", CALGARY", ", AB", ", CANADA" ...) are
    stripped in any order, and common street types are expanded on whole
    words only. Compass suffixes are left as they are.

    Args:
        value: Address as typed or loaded
        qualifiers: Locality names to strip from the end of the address

    Returns:
        Normalized address key

    Example:
        >>> normalize_address_key("123 Main St., Calgary, AB")
        '123 MAIN STREET'
    """
    text = safe_string_conversion(value).upper().replace('.', '')
    text = _collapse_whitespace(text)

    names = [q.upper() for q in (qualifiers or DEFAULT_LOCALITY_QUALIFIERS) if q]
    if names:
        suffix = re.compile(
            r',\s*(?:' + '|'.join(re.escape(name) for name in names) + r')$',
            re.IGNORECASE
        )
        stripped = suffix.sub('', text)
        while stripped != text:
            text = stripped.rstrip()
            stripped = suffix.sub('', text)

    return _STREET_TYPE_PATTERN.sub(
        lambda match: STREET_TYPE_ABBREVIATIONS[match.group(1)], text
    )


def normalize_ward(value: Any) -> str:
    """
    Extract the first run of digits from a ward label.

    Leading zeros are kept: "Ward 07" gives "07", not "7". No range check is
    performed.

    Args:
        value: Ward label ("Ward 7", "7", 7 ...)

    Returns:
        Digit string, or empty string when the label has no digits
    """
    match = _DIGIT_RUN.search(safe_string_conversion(value))
    return match.group(0) if match else ''


def normalize_position(value: Any) -> str:
    """Classify a position label as Mayor, Councillor or Trustee; other labels pass through trimmed."""
    label = safe_string_conversion(value)
    lowered = label.lower()

    if 'mayor' in lowered:
        return 'Mayor'
    if _COUNCILLOR.search(lowered):
        return 'Councillor'
    if _TRUSTEE.search(lowered):
        return 'Trustee'

    return label
