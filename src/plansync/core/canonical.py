"""Text canonicalisation for content comparison.

Cosmetic reformatting by the editing agent (or by a different renderer)
must never register as a content change, so every comparison and hash
goes through `normalize_whitespace` first.
"""

import re

_LINE_ENDING = re.compile(r"\r\n?")
_HORIZONTAL_RUN = re.compile(r"[ \t]+")
# A line break with any spaces, tabs or further breaks around it
_LINE_BREAK = re.compile(r"[ \t]*\n[ \t\n]*")


def normalize_whitespace(text: str | None) -> str:
    """Normalize whitespace in a string.

    - Empty or None input yields ""
    - CRLF and lone CR become LF
    - Runs of newlines collapse to one newline, dropping spaces/tabs beside them
    - Other runs of spaces/tabs collapse to one space
    - Leading and trailing whitespace is trimmed

    Args:
        text: Any string, or None

    Returns:
        Canonical form of the text
    """
    if not text:
        return ""
    text = _LINE_ENDING.sub("\n", text)
    text = _LINE_BREAK.sub("\n", text)
    text = _HORIZONTAL_RUN.sub(" ", text)
    return text.strip()
