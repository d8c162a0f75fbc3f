"""
All configuration — flags, knobs, thresholds.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple

from utils.exceptions import ConfigurationError

ROOT_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = ROOT_DIR / "data"


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  FEATURE FLAGS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

VERBOSE_LOGGING          = False
ENABLE_RESULT_CACHE      = True
HASH_FULL_IMAGE          = False     # prefix fingerprint is the default
CLASSIFIER_DEVICE        = "auto"    # "auto" → accelerator first, then CPU


@dataclass(frozen=True)
class VerificationConfig:
    """
    Zero-shot decision policy.

    A photo is accepted when the best weighted positive label beats
    the best distractor label, clears the category threshold and
    wins by more than ``min_margin``.
    """
    # ── Model ──
    model_name:          str   = "openai/clip-vit-base-patch32"
    task:                str   = "zero-shot-image-classification"
    device:              str   = CLASSIFIER_DEVICE
    hypothesis_template: str   = "This is a photo of {}."

    # ── Thresholds ──
    default_threshold:   float = 0.18
    complex_threshold:   float = 0.12    # ambiguous categories
    min_margin:          float = 0.05
    complex_categories:  Tuple[str, ...] = ("graffiti", "vegetation", "other")

    # ── Group weights ──
    category_weight:     float = 1.0
    keyword_weight:      float = 0.8
    compound_weight:     float = 0.9

    # ── Submission ──
    max_photos:          int   = 2

    def threshold_for(self, category: str) -> float:
        if category in self.complex_categories:
            return self.complex_threshold
        return self.default_threshold


@dataclass(frozen=True)
class LabelConfig:
    max_category_labels: int = 10
    max_keyword_labels:  int = 5
    max_compound_labels: int = 5
    max_negative_labels: int = 10
    min_token_length:    int = 3


@dataclass(frozen=True)
class CacheConfig:
    enabled:            bool  = ENABLE_RESULT_CACHE
    ttl_seconds:        float = 300.0
    image_prefix_chars: int   = 1000
    hash_full_image:    bool  = HASH_FULL_IMAGE


@dataclass(frozen=True)
class PathConfig:
    root:       Path = DATA_DIR
    models_dir: Path = DATA_DIR / "models"
    log_file:   Path = DATA_DIR / "logs" / "verifier.log"

    def ensure(self) -> None:
        for d in (self.models_dir, self.log_file.parent):
            d.mkdir(parents=True, exist_ok=True)


@dataclass
class AppConfig:
    paths:   PathConfig         = field(default_factory=PathConfig)
    verify:  VerificationConfig = field(default_factory=VerificationConfig)
    labels:  LabelConfig        = field(default_factory=LabelConfig)
    cache:   CacheConfig        = field(default_factory=CacheConfig)

    verbose: bool = VERBOSE_LOGGING

    def validate(self) -> None:
        v = self.verify
        for name in ("default_threshold", "complex_threshold", "min_margin"):
            value = getattr(v, name)
            if not 0.0 <= value < 1.0:
                raise ConfigurationError(f"{name} must be in [0, 1): {value}")
        if v.complex_threshold > v.default_threshold:
            raise ConfigurationError(
                "complex_threshold must not exceed default_threshold"
            )
        for name in ("category_weight", "keyword_weight", "compound_weight"):
            if getattr(v, name) <= 0:
                raise ConfigurationError(f"{name} must be positive")
        if v.max_photos < 1:
            raise ConfigurationError("max_photos must be >= 1")
        if "{}" not in v.hypothesis_template:
            raise ConfigurationError("hypothesis_template needs a '{}' slot")
        if self.cache.ttl_seconds <= 0:
            raise ConfigurationError("cache ttl_seconds must be positive")
        if self.cache.image_prefix_chars < 1:
            raise ConfigurationError("image_prefix_chars must be >= 1")
        if min(
            self.labels.max_category_labels,
            self.labels.max_keyword_labels,
            self.labels.max_compound_labels,
            self.labels.max_negative_labels,
        ) < 0:
            raise ConfigurationError("label group sizes must be >= 0")


cfg = AppConfig()
