"""Tag collection <-> PostgreSQL array literal.

Tags are stored in a ``TEXT[]`` column but travel between the application and
the database as the array's text form, e.g. ``{"python","has \\"quotes\\""}``.
Writes always quote every element; reads accept both quoted elements and the
bare elements PostgreSQL emits for simple values (``{python,web}``).
"""

from collections.abc import Sequence

EMPTY_ARRAY_LITERAL = "{}"


def _quote(tag: str) -> str:
    escaped = tag.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def encode_tags(tags: Sequence[str]) -> str:
    """Encode tags as an array literal, preserving order and duplicates."""
    if not tags:
        return EMPTY_ARRAY_LITERAL
    return "{" + ",".join(_quote(tag) for tag in tags) + "}"


class _MalformedLiteral(ValueError):
    pass


def _read_quoted(text: str, start: int) -> tuple[str, int]:
    """Read a quoted element starting at the opening quote.

    Returns the unescaped value and the index just past the closing quote.
    """
    chars: list[str] = []
    i = start + 1
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            if i + 1 >= len(text):
                raise _MalformedLiteral("dangling escape")
            chars.append(text[i + 1])
            i += 2
        elif ch == '"':
            return "".join(chars), i + 1
        else:
            chars.append(ch)
            i += 1
    raise _MalformedLiteral("unterminated quoted element")


def _split_elements(inner: str) -> list[str]:
    tags: list[str] = []
    i = 0
    while True:
        if i < len(inner) and inner[i] == '"':
            value, i = _read_quoted(inner, i)
        else:
            end = inner.find(",", i)
            if end == -1:
                end = len(inner)
            value = inner[i:end]
            if not value or '"' in value:
                raise _MalformedLiteral("empty or partially quoted bare element")
            i = end
        tags.append(value)

        if i == len(inner):
            return tags
        if inner[i] != ",":
            raise _MalformedLiteral("expected a comma between elements")
        i += 1
        if i == len(inner):
            raise _MalformedLiteral("trailing comma")


def decode_tags(raw: str | None) -> list[str]:
    """Decode an array literal into its tags.

    Never raises: ``None``, non-string values and malformed literals all
    decode to an empty list.
    """
    if not isinstance(raw, str):
        return []
    text = raw.strip()
    if len(text) < 2 or text[0] != "{" or text[-1] != "}":
        return []
    inner = text[1:-1]
    if not inner:
        return []
    try:
        return _split_elements(inner)
    except _MalformedLiteral:
        return []
