import pytest

from voter_guide.utils.normalizers import (
    normalize_address_key,
    normalize_community_key,
    normalize_position,
    normalize_ward,
)


@pytest.mark.parametrize("raw", [
    "Downtown",
    "  bridgeland-riverside ",
    "Mount Royal N.E.",
    "Sunalta  S W",
    "",
])
def test_community_key_is_idempotent(raw) -> None:
    once = normalize_community_key(raw)
    assert normalize_community_key(once) == once


def test_community_key_canonicalizes_compass_forms() -> None:
    assert normalize_community_key("n.e.") == "NE"
    assert normalize_community_key("N E") == normalize_community_key("NE") == "NE"
    assert normalize_community_key("Highland Park N.W.") == "HIGHLAND PARK NW"


def test_community_key_hyphens_and_whitespace() -> None:
    assert normalize_community_key("Bridgeland-Riverside") == "BRIDGELAND RIVERSIDE"
    assert normalize_community_key("  Mount   Pleasant ") == "MOUNT PLEASANT"


def test_community_key_leaves_words_containing_compass_letters() -> None:
    assert normalize_community_key("Sage Hill") == "SAGE HILL"
    assert normalize_community_key("Nolan Hill") == "NOLAN HILL"


def test_community_key_null_input() -> None:
    assert normalize_community_key(None) == ""


def test_address_key_strips_locality_qualifiers() -> None:
    assert normalize_address_key("123 Main St, Calgary, AB") == "123 MAIN STREET"
    assert normalize_address_key("123 Main St., Calgary, AB, Canada") == "123 MAIN STREET"
    assert normalize_address_key("123 main street, alberta") == "123 MAIN STREET"


def test_address_key_expands_whole_words_only() -> None:
    assert normalize_address_key("10 Stanley Dr SW") == "10 STANLEY DRIVE SW"
    assert normalize_address_key("5 Drury Ave NE") == "5 DRURY AVENUE NE"
    assert normalize_address_key("77 Rdway Rd") == "77 RDWAY ROAD"


def test_address_key_is_idempotent() -> None:
    once = normalize_address_key("800 Macleod Trl SE, Calgary, AB")
    assert normalize_address_key(once) == once


def test_address_key_custom_qualifiers() -> None:
    key = normalize_address_key("1 King St, Toronto, ON", qualifiers=["TORONTO", "ON"])
    assert key == "1 KING STREET"


@pytest.mark.parametrize("raw,expected", [
    ("Ward 7", "7"),
    ("7", "7"),
    (7, "7"),
    ("Ward 07", "07"),
    ("Ward 14 (North)", "14"),
    ("At large", ""),
    (None, ""),
])
def test_normalize_ward(raw, expected) -> None:
    assert normalize_ward(raw) == expected


@pytest.mark.parametrize("raw,expected", [
    ("Mayor", "Mayor"),
    ("Mayoral Candidate", "Mayor"),
    ("Councillor", "Councillor"),
    ("city councilor", "Councillor"),
    ("Counsellor", "Councillor"),
    ("Public School Trustee", "Trustee"),
    ("School Board", "Trustee"),
    ("  Alderman ", "Alderman"),
])
def test_normalize_position(raw, expected) -> None:
    assert normalize_position(raw) == expected
