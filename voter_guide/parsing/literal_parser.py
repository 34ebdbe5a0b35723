"""
Restricted parser for script-style data literals.

The candidate source document embeds its data as a script assignment such as
``const candidates = [{name: "A", position: "Mayor"}, ...];``. This module
extracts that array and parses it as pure data: objects, arrays, strings,
numbers, booleans and null. Anything that would need evaluation (calls,
operators, variable references, template substitutions) is rejected.
"""

import re
from typing import Any, List, Optional, Tuple


class LiteralSyntaxError(ValueError):
    """Raised when a literal contains anything other than plain data."""

    def __init__(self, message: str, position: int):
        super().__init__(f"{message} at position {position}")
        self.position = position


_IDENTIFIER = re.compile(r'[A-Za-z_$][A-Za-z0-9_$]*')
_NUMBER = re.compile(
    r'[+-]?(?:0[xX][0-9a-fA-F]+|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)'
)
_KEYWORDS = {'true': True, 'false': False, 'null': None, 'undefined': None}
_SIMPLE_ESCAPES = {
    'n': '\n', 't': '\t', 'r': '\r', 'b': '\b', 'f': '\f', 'v': '\v', '0': '\0',
}


class _LiteralReader:
    """Recursive-descent reader over one literal."""

    def __init__(self, text: str, position: int = 0):
        self.text = text
        self.pos = position

    def skip_ignorable(self):
        """Skip whitespace and // or /* */ comments."""
        text = self.text
        while self.pos < len(text):
            char = text[self.pos]
            if char.isspace():
                self.pos += 1
            elif text.startswith('//', self.pos):
                end = text.find('\n', self.pos)
                self.pos = len(text) if end == -1 else end + 1
            elif text.startswith('/*', self.pos):
                end = text.find('*/', self.pos + 2)
                if end == -1:
                    raise LiteralSyntaxError("Unterminated comment", self.pos)
                self.pos = end + 2
            else:
                break

    def peek(self) -> str:
        self.skip_ignorable()
        return self.text[self.pos] if self.pos < len(self.text) else ''

    def expect(self, char: str):
        if self.peek() != char:
            raise LiteralSyntaxError(f"Expected {char!r}", self.pos)
        self.pos += 1

    def read_value(self) -> Any:
        char = self.peek()

        if char == '[':
            return self.read_array()
        if char == '{':
            return self.read_object()
        if char in ('"', "'", '`'):
            return self.read_string()
        if char and (char.isdigit() or char in '+-.'):
            return self.read_number()

        match = _IDENTIFIER.match(self.text, self.pos)
        if match and match.group(0) in _KEYWORDS:
            self.pos = match.end()
            return _KEYWORDS[match.group(0)]

        if not char:
            raise LiteralSyntaxError("Unexpected end of input", self.pos)
        raise LiteralSyntaxError(f"Unexpected {char!r}", self.pos)

    def read_array(self) -> List[Any]:
        self.expect('[')
        items = []
        while True:
            if self.peek() == ']':
                self.pos += 1
                return items
            items.append(self.read_value())
            if self.peek() == ',':
                self.pos += 1
            elif self.peek() != ']':
                raise LiteralSyntaxError("Expected ',' or ']'", self.pos)

    def read_object(self) -> dict:
        self.expect('{')
        result = {}
        while True:
            if self.peek() == '}':
                self.pos += 1
                return result
            key = self.read_key()
            self.expect(':')
            result[key] = self.read_value()
            if self.peek() == ',':
                self.pos += 1
            elif self.peek() != '}':
                raise LiteralSyntaxError("Expected ',' or '}'", self.pos)

    def read_key(self) -> str:
        char = self.peek()
        if char in ('"', "'"):
            return self.read_string()

        match = _IDENTIFIER.match(self.text, self.pos)
        if match:
            self.pos = match.end()
            return match.group(0)

        match = _NUMBER.match(self.text, self.pos)
        if match:
            self.pos = match.end()
            return match.group(0)

        raise LiteralSyntaxError("Expected property name", self.pos)

    def read_string(self) -> str:
        quote = self.text[self.pos]
        self.pos += 1
        chunks = []
        text = self.text

        while self.pos < len(text):
            char = text[self.pos]

            if char == quote:
                self.pos += 1
                return ''.join(chunks)

            if char == '\\':
                chunks.append(self.read_escape())
                continue

            if quote == '`' and text.startswith('${', self.pos):
                raise LiteralSyntaxError("Template substitutions are not allowed", self.pos)

            if char == '\n' and quote != '`':
                raise LiteralSyntaxError("Unterminated string", self.pos)

            chunks.append(char)
            self.pos += 1

        raise LiteralSyntaxError("Unterminated string", self.pos)

    def read_escape(self) -> str:
        text = self.text
        self.pos += 1
        if self.pos >= len(text):
            raise LiteralSyntaxError("Unterminated escape", self.pos)

        char = text[self.pos]
        self.pos += 1

        if char in _SIMPLE_ESCAPES:
            return _SIMPLE_ESCAPES[char]
        if char == 'x':
            return self._read_hex(2)
        if char == 'u':
            if text.startswith('{', self.pos):
                end = text.find('}', self.pos)
                if end == -1:
                    raise LiteralSyntaxError("Unterminated unicode escape", self.pos)
                code = text[self.pos + 1:end]
                self.pos = end + 1
                return self._code_point(code)
            return self._read_hex(4)
        if char == '\r' and text.startswith('\n', self.pos):
            self.pos += 1
            return ''
        if char in '\n\r':
            return ''

        return char

    def _read_hex(self, width: int) -> str:
        code = self.text[self.pos:self.pos + width]
        self.pos += width
        return self._code_point(code)

    def _code_point(self, code: str) -> str:
        try:
            return chr(int(code, 16))
        except ValueError:
            raise LiteralSyntaxError(f"Invalid escape code {code!r}", self.pos)

    def read_number(self) -> Any:
        match = _NUMBER.match(self.text, self.pos)
        if not match:
            raise LiteralSyntaxError("Invalid number", self.pos)

        self.pos = match.end()
        literal = match.group(0)
        unsigned = literal.lstrip('+-')

        if unsigned[:2].lower() == '0x':
            value = int(unsigned, 16)
            return -value if literal.startswith('-') else value
        if any(c in unsigned for c in '.eE'):
            return float(literal)
        return int(literal)


def parse_literal(text: str) -> Any:
    """
    Parse a complete data literal.

    Args:
        text: Literal source, e.g. ``[{name: 'A', position: "Mayor"}]``

    Returns:
        Parsed Python value (list, dict, str, int, float, bool or None)

    Raises:
        LiteralSyntaxError: If the text is not plain data or has trailing content
    """
    value, end = parse_literal_at(text, 0)
    reader = _LiteralReader(text, end)
    if reader.peek():
        raise LiteralSyntaxError("Unexpected trailing content", reader.pos)
    return value


def parse_literal_at(text: str, position: int) -> Tuple[Any, int]:
    """Parse one literal starting at position; returns the value and the end offset."""
    reader = _LiteralReader(text, position)
    value = reader.read_value()
    return value, reader.pos


def extract_assigned_array(document: str, identifier: str) -> Optional[List[Any]]:
    """
    Find ``<const|let|var> identifier = [...]`` in a document and parse the array.

    Args:
        document: HTML or script text
        identifier: Name the array is assigned to

    Returns:
        Parsed list, or None if no such assignment exists

    Raises:
        LiteralSyntaxError: If the assigned array is not plain data
    """
    pattern = re.compile(
        r'\b(?:const|let|var)\s+' + re.escape(identifier) + r'\s*=\s*(?=\[)'
    )
    match = pattern.search(document)
    if not match:
        return None

    value, _ = parse_literal_at(document, match.end())
    return value
