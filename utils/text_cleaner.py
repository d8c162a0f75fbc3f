"""
Text cleaning utilities for turning free-text issue descriptions
into classifier keywords.
"""

from __future__ import annotations

import re
from typing import FrozenSet, List

from utils.log_config import get_logger

log = get_logger(__name__)

_PUNCTUATION = re.compile(r"[^\w\s]")

STOP_WORDS: FrozenSet[str] = frozenset({
    "the", "and", "but", "for", "nor", "not", "yet", "are", "was",
    "were", "been", "being", "have", "has", "had", "does", "did",
    "will", "would", "could", "should", "may", "might", "shall", "can",
    "into", "onto", "from", "with", "without", "about", "above", "below",
    "near", "next", "over", "under", "between", "through", "during",
    "before", "after", "since", "until", "this", "that", "these", "those",
    "there", "here", "where", "when", "which", "what", "who", "whom",
    "its", "our", "your", "their", "his", "her", "they", "them", "you",
    "she", "him", "very", "really", "quite", "just", "also", "some",
    "any", "all", "more", "most", "much", "many", "please", "still",
    "again", "than", "then", "too", "now", "one", "get", "got",
    "image", "photo", "picture", "showing", "issue", "problem",
})


def normalise_text(text: str) -> str:
    """
    Lower-case, replace punctuation with spaces and collapse whitespace.

    Examples:
        "Large POTHOLE, on Main St.!" → "large pothole on main st"
    """
    if not text:
        return ""
    cleaned = _PUNCTUATION.sub(" ", str(text).lower())
    return " ".join(cleaned.split())


def extract_keywords(
    text: str,
    max_keywords: int = 5,
    min_length: int = 3,
) -> List[str]:
    """
    Meaningful description tokens in original order.

    Tokens shorter than *min_length* and stop words are dropped,
    repeats collapse to their first occurrence.
    """
    if max_keywords <= 0:
        return []

    keywords: List[str] = []
    for token in normalise_text(text).split():
        if len(token) < min_length or token in STOP_WORDS:
            continue
        if token in keywords:
            continue
        keywords.append(token)
        if len(keywords) >= max_keywords:
            break

    log.debug("Keywords from '%s': %s", text[:40], keywords)
    return keywords
