"""
Text normalization utilities.

Handles entity stripping, case folding, tokenization and catalog name hashing.
"""

from .ids import name_hash, next_id
from .text_normalizer import normalize_text, tokenize

__all__ = [
    "normalize_text",
    "tokenize",
    "name_hash",
    "next_id",
]
