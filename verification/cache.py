"""
In-memory verification result cache.

Results live for ``ttl_seconds``; ``sweep()`` runs before every
lookup so a stale decision is never handed back.  Nothing is
written to disk.
"""

from __future__ import annotations

import hashlib
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Union

from config.settings import CacheConfig
from utils.log_config import get_logger
from verification.models import VerificationResult

log = get_logger(__name__)

ImageContent = Union[str, bytes]


@dataclass(frozen=True)
class CacheEntry:
    result:    VerificationResult
    timestamp: float


class ResultCache:
    """
    Exact-match memo of recent decisions keyed by an input fingerprint.
    Mutated only from the event loop thread, so no lock is taken.
    """

    def __init__(
        self,
        cfg: Optional[CacheConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.cfg = cfg or CacheConfig()
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._hits = 0
        self._misses = 0

    def fingerprint(self, image: ImageContent, description: str, category: str) -> str:
        """Deterministic key over category, description and the image head."""
        raw = image.encode("utf-8") if isinstance(image, str) else bytes(image)
        head = raw if self.cfg.hash_full_image else raw[: self.cfg.image_prefix_chars]

        h = hashlib.sha256()
        for part in (category.encode("utf-8"), (description or "").encode("utf-8"),
                     str(len(raw)).encode("ascii")):
            h.update(part)
            h.update(b"\x00")
        h.update(head)
        return h.hexdigest()

    def sweep(self) -> int:
        """Drop every entry older than the TTL; returns how many went."""
        now = self._clock()
        ttl = self.cfg.ttl_seconds
        expired = [k for k, e in self._entries.items() if now - e.timestamp > ttl]
        for key in expired:
            del self._entries[key]
        if expired:
            log.debug("Cache sweep evicted %d entr%s", len(expired), "y" if len(expired) == 1 else "ies")
        return len(expired)

    def lookup(self, key: str) -> Optional[VerificationResult]:
        entry = self._entries.get(key)
        if entry is None or self._clock() - entry.timestamp > self.cfg.ttl_seconds:
            self._misses += 1
            return None
        self._hits += 1
        log.debug("Cache HIT %s (hits=%d)", key[:12], self._hits)
        return entry.result

    def store(self, key: str, result: VerificationResult) -> None:
        if not self.cfg.enabled:
            return
        self._entries[key] = CacheEntry(result=result, timestamp=self._clock())
        log.debug("Cache PUT %s", key[:12])

    def clear(self) -> None:
        self._entries.clear()
        log.info("Cache cleared")

    def stats(self) -> Dict[str, int]:
        return {
            "entries": len(self._entries),
            "hits": self._hits,
            "misses": self._misses,
        }

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries
