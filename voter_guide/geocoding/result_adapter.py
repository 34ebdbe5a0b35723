"""
Community extraction from geocoding results.

Geocoding providers describe a place as a list of address components, each
with a display name and a set of type tags. The only part the ward lookup
can use is the neighbourhood (or, failing that, the sublocality).
"""

from typing import Any, Dict, Iterable, List, Optional

from ..utils.data_utils import safe_string_conversion

NEIGHBORHOOD_TYPES = ('neighborhood',)
SUBLOCALITY_TYPES = ('sublocality', 'sublocality_level_1')

DEFAULT_GENERIC_AREAS = ('CALGARY', 'NORTH EAST', 'NORTH WEST', 'SOUTH EAST', 'SOUTH WEST')


def component_name(component: Dict[str, Any]) -> str:
    """Display name of an address component."""
    return safe_string_conversion(component.get('long_name') or component.get('name'))


def extract_community(components: Optional[List[Dict[str, Any]]],
                      generic_areas: Iterable[str] = DEFAULT_GENERIC_AREAS) -> Optional[str]:
    """
    Pick the community name out of a geocoding result's address components.

    A component tagged "neighborhood" is preferred over one tagged
    "sublocality"/"sublocality_level_1"; if several carry the same tag the
    last one wins. Names that are only the city itself or one of its
    quadrants are rejected (compared case-insensitively).

    Args:
        components: Address components of one geocoding result
        generic_areas: Area names too coarse to map to a ward

    Returns:
        Community name, or None if no usable component exists

    Example:
        >>> extract_community([{'long_name': 'Beltline', 'types': ['neighborhood', 'political']}])
        'Beltline'
    """
    if not components:
        return None

    neighborhood = None
    sublocality = None

    for component in components:
        if not isinstance(component, dict):
            continue
        types = component.get('types') or []
        name = component_name(component)
        if not name:
            continue
        if any(t in types for t in NEIGHBORHOOD_TYPES):
            neighborhood = name
        if any(t in types for t in SUBLOCALITY_TYPES):
            sublocality = name

    candidate = neighborhood or sublocality
    if candidate is None:
        return None

    denied = {area.strip().upper() for area in generic_areas}
    if candidate.strip().upper() in denied:
        return None

    return candidate
