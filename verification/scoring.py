"""
Multi-factor acceptance scoring.

Raw per-label scores are re-associated with their label group by
value, weighted per group and checked against a category threshold
and a minimum winning margin over the best distractor.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Tuple

from config.labels import get_profile
from config.settings import VerificationConfig
from utils.log_config import get_logger
from verification.labels import (
    GROUP_CATEGORY,
    GROUP_COMPOUND,
    GROUP_KEYWORD,
    GROUP_NEGATIVE,
    POSITIVE_GROUPS,
    LabelSet,
)
from verification.models import IssueCategory, LabelScore, VerificationResult

log = get_logger(__name__)

# float noise: 0.23 - 0.18 == 0.05000000000000002
EPSILON = 1e-9


def to_percent(value: float) -> int:
    """0.625 → 63 (half-up, clamped to 0–100)."""
    return max(0, min(100, int(math.floor(value * 100 + 0.5))))


@dataclass
class ScoreBreakdown:
    """Everything the decision was based on."""
    category:       str
    group_scores:   Dict[str, float]          = field(default_factory=dict)
    group_labels:   Dict[str, Optional[str]]  = field(default_factory=dict)
    positive_score: float = 0.0
    positive_label: Optional[str] = None
    positive_group: Optional[str] = None
    negative_score: float = 0.0
    negative_label: Optional[str] = None
    threshold:      float = 0.0
    min_margin:     float = 0.0

    @property
    def margin(self) -> float:
        return self.positive_score - self.negative_score

    @property
    def is_valid(self) -> bool:
        return (
            self.positive_score > self.negative_score
            and self.clears_threshold
            and self.margin > self.min_margin + EPSILON
        )

    @property
    def clears_threshold(self) -> bool:
        return self.positive_score > self.threshold + EPSILON

    @property
    def confidence(self) -> int:
        return to_percent(self.positive_score)

    def summary(self) -> str:
        return (
            f"pos={self.positive_score:.3f} ({self.positive_group}:'{self.positive_label}') "
            f"neg={self.negative_score:.3f} ('{self.negative_label}') "
            f"thr={self.threshold:.2f} margin={self.margin:.3f}"
        )


def _best_per_label(outcome: Iterable[LabelScore]) -> Dict[str, float]:
    best: Dict[str, float] = {}
    for item in outcome:
        score = float(item.score)
        if item.label not in best or score > best[item.label]:
            best[item.label] = score
    return best


def _group_max(labels: Tuple[str, ...], scores: Dict[str, float]) -> Tuple[float, Optional[str]]:
    top, top_label = 0.0, None
    for label in labels:
        s = scores.get(label)
        if s is not None and (top_label is None or s > top):
            top, top_label = s, label
    return top, top_label


def score_breakdown(
    outcome: Iterable[LabelScore],
    label_set: LabelSet,
    category: Any,
    cfg: Optional[VerificationConfig] = None,
) -> ScoreBreakdown:
    cfg = cfg or VerificationConfig()
    cat = IssueCategory.parse(category)
    scores = _best_per_label(outcome)

    weights = {
        GROUP_CATEGORY: cfg.category_weight,
        GROUP_KEYWORD:  cfg.keyword_weight,
        GROUP_COMPOUND: cfg.compound_weight,
    }

    bd = ScoreBreakdown(
        category=cat.value,
        threshold=cfg.threshold_for(cat.value),
        min_margin=cfg.min_margin,
    )

    for group in POSITIVE_GROUPS:
        raw, label = _group_max(label_set.group(group), scores)
        bd.group_scores[group] = raw
        bd.group_labels[group] = label
        weighted = raw * weights[group]
        if label is not None and (bd.positive_label is None or weighted > bd.positive_score):
            bd.positive_score = weighted
            bd.positive_label = label
            bd.positive_group = group

    bd.negative_score, bd.negative_label = _group_max(label_set.negative, scores)
    bd.group_scores[GROUP_NEGATIVE] = bd.negative_score
    bd.group_labels[GROUP_NEGATIVE] = bd.negative_label
    return bd


def explain(bd: ScoreBreakdown) -> str:
    """Human-readable reason for the decision."""
    if bd.is_valid:
        return f'Image matches "{bd.positive_label}" with {bd.confidence}% confidence'
    if bd.negative_label is not None and bd.positive_score <= bd.negative_score:
        return f'Image appears to be "{bd.negative_label}" which is not relevant'
    display = get_profile(bd.category).display_name
    if bd.clears_threshold and bd.negative_label is not None:
        return (
            f'Image is too close to "{bd.negative_label}" to confirm the {display} '
            f"category ({bd.confidence}% vs {to_percent(bd.negative_score)}%)"
        )
    return (
        f"Image does not clearly match the {display} category "
        f"({bd.confidence}% confidence, {to_percent(bd.threshold)}% required)"
    )


def score(
    outcome: Iterable[LabelScore],
    label_set: LabelSet,
    category: Any,
    cfg: Optional[VerificationConfig] = None,
) -> VerificationResult:
    bd = score_breakdown(outcome, label_set, category, cfg)
    result = VerificationResult(
        is_valid=bd.is_valid,
        confidence=bd.confidence,
        reason=explain(bd),
    )
    log.info("[%s] %s %s", bd.category, "✅" if result.is_valid else "❌", bd.summary())
    return result
