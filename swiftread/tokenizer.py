from __future__ import annotations

import re
from typing import List, Optional


def normalize_whitespace(text: Optional[str]) -> str:
    if not text:
        return ""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = re.sub(r"[ \t]+\n", "\n", text)
    text = re.sub(r"\n[ \t]+", "\n", text)
    text = re.sub(r"[ \t]{2,}", " ", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def tokenize(text: Optional[str]) -> List[str]:
    """Split text into display units on runs of whitespace.

    Punctuation stays attached to the word it touches. Empty or
    whitespace-only input gives an empty list.
    """
    if not text:
        return []
    # str.split() with no separator classifies Unicode whitespace and never
    # yields empty strings.
    return text.split()


def word_count(text: Optional[str]) -> int:
    return len(tokenize(text))
