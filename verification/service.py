"""
Verification facade — the only surface callers use.

    preload()       — eagerly acquire the classifier
    is_ready        — non-blocking readiness check
    verify_image()  — decide whether one photo shows the reported issue
    verify_photos() — same, for every photo attached to a report

Every path resolves to a VerificationResult; a failure anywhere
rejects the photo rather than letting it through unverified.
"""

from __future__ import annotations

import asyncio
from concurrent.futures import Executor
from typing import Any, Dict, List, Optional, Sequence

from config.settings import AppConfig
from utils.concurrency import run_blocking
from utils.log_config import get_logger
from verification.cache import ImageContent, ResultCache
from verification.labels import synthesize
from verification.lifecycle import ClassifierLifecycle
from verification.models import (
    REASON_FAILED,
    REASON_UNAVAILABLE,
    IssueCategory,
    VerificationResult,
)
from verification.scoring import score

log = get_logger(__name__)


class ImageVerificationService:

    def __init__(
        self,
        cfg: Optional[AppConfig] = None,
        lifecycle: Optional[ClassifierLifecycle] = None,
        cache: Optional[ResultCache] = None,
        executor: Optional[Executor] = None,
    ) -> None:
        self.cfg = cfg or AppConfig()
        self.executor = executor
        self.lifecycle = lifecycle or ClassifierLifecycle(
            self.cfg.verify, models_dir=self.cfg.paths.models_dir, executor=executor,
        )
        self.cache = cache or ResultCache(self.cfg.cache)
        self._classify_calls = 0

    async def preload(self) -> bool:
        return await self.lifecycle.ensure_ready()

    @property
    def is_ready(self) -> bool:
        return self.lifecycle.is_ready

    @property
    def classify_calls(self) -> int:
        return self._classify_calls

    async def verify_image(
        self,
        image: ImageContent,
        description: str,
        category: Any,
    ) -> VerificationResult:
        try:
            return await self._verify(image, description or "", IssueCategory.parse(category))
        except Exception as exc:
            log.error("Image verification error: %s", exc, exc_info=True)
            return VerificationResult.rejected(REASON_FAILED)

    async def _verify(
        self,
        image: ImageContent,
        description: str,
        category: IssueCategory,
    ) -> VerificationResult:
        self.cache.sweep()
        key = self.cache.fingerprint(image, description, category.value)
        cached = self.cache.lookup(key)
        if cached is not None:
            return cached

        if not await self.lifecycle.ensure_ready():
            return VerificationResult.rejected(REASON_UNAVAILABLE)

        label_set = synthesize(description, category, self.cfg.labels)
        handle = self.lifecycle.handle

        self._classify_calls += 1
        try:
            outcome = await run_blocking(self.executor, handle.classify, image, label_set.labels)
        except Exception as exc:
            # the classifier stays usable for the next call
            log.warning("Classification failed for %s: %s", category.value, exc)
            return VerificationResult.rejected(REASON_FAILED)

        result = score(outcome, label_set, category, self.cfg.verify)
        self.cache.store(key, result)
        return result

    async def verify_photos(
        self,
        images: Sequence[ImageContent],
        description: str,
        category: Any,
    ) -> List[VerificationResult]:
        """Verify every photo of one report, at most ``max_photos``."""
        limit = self.cfg.verify.max_photos
        if len(images) > limit:
            log.warning("Report has %d photos; only the first %d are verified", len(images), limit)
        photos = list(images[:limit])
        return list(await asyncio.gather(
            *(self.verify_image(img, description, category) for img in photos)
        ))

    def stats(self) -> Dict[str, Any]:
        return {
            **self.lifecycle.stats(),
            "classify_calls": self._classify_calls,
            "cache": self.cache.stats(),
        }
