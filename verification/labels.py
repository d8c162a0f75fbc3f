"""
Candidate label synthesis.

A label set is four named groups rather than one flat list, so the
scorer can attribute every classifier score to its group by value:

    category  — what a genuine photo of the category looks like
    keyword   — meaningful words from the reporter's description
    compound  — category display name + keyword
    negative  — off-topic distractors (selfies, screenshots, food, ...)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Set, Tuple

from config.labels import NEGATIVE_LABELS, get_profile
from config.settings import LabelConfig
from utils.log_config import get_logger
from utils.text_cleaner import extract_keywords
from verification.models import IssueCategory

log = get_logger(__name__)

GROUP_CATEGORY = "category"
GROUP_KEYWORD = "keyword"
GROUP_COMPOUND = "compound"
GROUP_NEGATIVE = "negative"

POSITIVE_GROUPS: Tuple[str, ...] = (GROUP_CATEGORY, GROUP_KEYWORD, GROUP_COMPOUND)


@dataclass(frozen=True)
class LabelSet:
    category: Tuple[str, ...] = ()
    keyword:  Tuple[str, ...] = ()
    compound: Tuple[str, ...] = ()
    negative: Tuple[str, ...] = ()

    @property
    def labels(self) -> List[str]:
        """All labels in group order, as submitted to the classifier."""
        return [*self.category, *self.keyword, *self.compound, *self.negative]

    def group(self, name: str) -> Tuple[str, ...]:
        return getattr(self, name)

    def group_of(self, label: str) -> Optional[str]:
        for name in (*POSITIVE_GROUPS, GROUP_NEGATIVE):
            if label in self.group(name):
                return name
        return None

    def __len__(self) -> int:
        return len(self.category) + len(self.keyword) + len(self.compound) + len(self.negative)


def _take_unique(candidates: Iterable[str], seen: Set[str], limit: int) -> Tuple[str, ...]:
    picked: List[str] = []
    for label in candidates:
        if len(picked) >= limit:
            break
        if label in seen:
            continue
        seen.add(label)
        picked.append(label)
    return tuple(picked)


def synthesize(
    description: str,
    category: Any,
    cfg: Optional[LabelConfig] = None,
) -> LabelSet:
    """Build the candidate labels for one verification call."""
    cfg = cfg or LabelConfig()
    profile = get_profile(IssueCategory.parse(category).value)

    keywords = extract_keywords(
        description or "",
        max_keywords=cfg.max_keyword_labels,
        min_length=cfg.min_token_length,
    )

    negative_labels = _take_unique(NEGATIVE_LABELS, set(), cfg.max_negative_labels)

    # label values stay unique across groups; distractors are never positive
    seen: Set[str] = set(negative_labels)
    category_labels = _take_unique(profile.labels, seen, cfg.max_category_labels)
    keyword_labels = _take_unique(keywords, seen, cfg.max_keyword_labels)
    compound_labels = _take_unique(
        (f"{profile.display_name} {kw}" for kw in keywords),
        seen,
        cfg.max_compound_labels,
    )

    label_set = LabelSet(
        category=category_labels,
        keyword=keyword_labels,
        compound=compound_labels,
        negative=negative_labels,
    )
    log.debug(
        "Labels for %s: %d category, %d keyword, %d compound, %d negative",
        profile.name, len(category_labels), len(keyword_labels),
        len(compound_labels), len(negative_labels),
    )
    return label_set
