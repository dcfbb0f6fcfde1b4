"""Brace-delimited field extraction shared by the legacy dialects."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class BraceField:
    """Inner content of a `{...}` field and the index of its closing brace."""

    content: str
    end_index: int


def extract_braces(text: str, start: int = 0) -> Optional[BraceField]:
    """Extract the brace field opening at `start`, honouring nested braces.

    Returns:
        The field, or None if `text[start]` is not `{` or the braces never balance
    """
    if start >= len(text) or text[start] != "{":
        return None

    depth = 0
    for index in range(start, len(text)):
        char = text[index]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return BraceField(content=text[start + 1 : index], end_index=index)
    return None


def extract_fields(text: str, limit: int) -> list[BraceField]:
    """Extract up to `limit` consecutive brace fields separated by whitespace.

    Stops at the first position that does not open a balanced field.
    """
    fields: list[BraceField] = []
    position = 0
    while len(fields) < limit:
        while position < len(text) and text[position].isspace():
            position += 1
        found = extract_braces(text, position)
        if found is None:
            break
        fields.append(found)
        position = found.end_index + 1
    return fields
