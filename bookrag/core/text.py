"""
Text normalization and token counting.

Tokens are whitespace-delimited words. The same tokenizer is used for
chunk windows, prompt budgets and usage accounting so the three agree.
"""

import re
import unicodedata

_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Replace control characters with spaces and collapse whitespace."""
    cleaned = "".join(
        " " if unicodedata.category(char).startswith("C") and char not in "\n\t" else char
        for char in text
    )
    return _WHITESPACE.sub(" ", cleaned).strip()


def tokenize(text: str) -> list[str]:
    return text.split()


def count_tokens(text: str) -> int:
    return len(text.split())


def normalize_query(query: str) -> str:
    """Canonical query form used for cache keys."""
    return normalize_text(query).lower()
