"""
Text normalization and tokenization.

Normalized text contains only lowercase word characters, digits, hyphens and
single spaces:
- HTML/XML character entities (``&amp;``, ``&#39;``) are removed
- Any other punctuation or symbol becomes a space
- Whitespace runs collapse to one space, ends are trimmed
"""

import re

_ENTITY_RE = re.compile(r"&[#\w]+;")
_NON_WORD_RE = re.compile(r"[^-\w\s]")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """
    Normalize raw text for indexing and for query criteria.

    Lowercasing happens before the character-class pass so that characters
    produced by case mapping (e.g. combining marks from "İ") are folded in the
    same call, which keeps the function idempotent.

    Args:
        text: Raw text (may contain markup entities)

    Returns:
        Normalized string, possibly empty

    Example:
        >>> normalize_text("Tom &amp; Jerry's  Show!")
        'tom jerry s show'
    """
    text = _ENTITY_RE.sub("", text)
    text = text.lower()
    text = _NON_WORD_RE.sub(" ", text)
    text = _WHITESPACE_RE.sub(" ", text)
    return text.strip()


def tokenize(text: str) -> list[str]:
    """Split normalized text into tokens on single spaces."""
    normalized = normalize_text(text)
    if not normalized:
        return []
    return normalized.split(" ")
