import pytest

from voter_guide.parsing.literal_parser import (
    LiteralSyntaxError,
    extract_assigned_array,
    parse_literal,
)


DOCUMENT = """
<html><body>
<script>
  // candidate data
  const candidates = [
    {name: 'Jane Doe', position: "Mayor", url: `https://example.org/jane`},
    { "name": "John Roe", 'position': 'Councillor', ward: 7, },  /* trailing comma */
  ];
  render(candidates);
</script>
</body></html>
"""


def test_extract_assigned_array_from_document() -> None:
    items = extract_assigned_array(DOCUMENT, "candidates")
    assert items == [
        {'name': 'Jane Doe', 'position': 'Mayor', 'url': 'https://example.org/jane'},
        {'name': 'John Roe', 'position': 'Councillor', 'ward': 7},
    ]


def test_extract_missing_assignment_returns_none() -> None:
    assert extract_assigned_array("let other = [1, 2];", "candidates") is None
    assert extract_assigned_array("candidates = [1]", "candidates") is None


def test_let_and_var_assignments() -> None:
    assert extract_assigned_array("var candidates=[1,2]", "candidates") == [1, 2]
    assert extract_assigned_array("let candidates = []", "candidates") == []


def test_scalars() -> None:
    assert parse_literal("[true, false, null, undefined, -1.5, 0x1F, 2e3]") == \
        [True, False, None, None, -1.5, 31, 2000.0]


def test_string_escapes() -> None:
    assert parse_literal(r'"a\nb\t\"c\" é \x41 \u{1F600}"') == 'a\nb\t"c" é A \U0001F600'
    assert parse_literal(r"'it\'s'") == "it's"


@pytest.mark.parametrize("source", [
    "[alert(1)]",
    "{name: fetchName()}",
    "[1 + 2]",
    "[someVariable]",
    "[`Hello ${name}`]",
    "[1, 2",
    "'unterminated",
    "[1] extra",
])
def test_rejects_anything_but_plain_data(source) -> None:
    with pytest.raises(LiteralSyntaxError):
        parse_literal(source)


def test_assigned_array_with_code_is_rejected() -> None:
    with pytest.raises(LiteralSyntaxError):
        extract_assigned_array("const candidates = [{name: getName()}];", "candidates")
