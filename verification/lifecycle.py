"""
Classifier lifecycle: UNINITIALIZED → INITIALIZING → READY | FAILED.

One lifecycle object is created at startup and handed to the
verification service.  Acquisition is single-flight: however many
callers arrive while the model is loading, exactly one load runs
and everybody receives its outcome.
"""

from __future__ import annotations

import time
from concurrent.futures import Executor
from functools import partial
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from config.settings import VerificationConfig
from utils.concurrency import SingleFlight, run_blocking
from utils.exceptions import ClassifierUnavailableError
from utils.log_config import get_logger
from verification.classifier import Classifier, accelerated_device, load_classifier
from verification.models import LifecycleState

log = get_logger(__name__)

ACCELERATED = "accelerated"

Loader = Callable[[str], Classifier]


class ClassifierLifecycle:
    """Owns the acquired classifier and its state."""

    def __init__(
        self,
        cfg: Optional[VerificationConfig] = None,
        loader: Optional[Loader] = None,
        models_dir: Optional[Path] = None,
        accelerator_probe: Callable[[], Optional[str]] = accelerated_device,
        executor: Optional[Executor] = None,
    ) -> None:
        self.cfg = cfg or VerificationConfig()
        self._loader: Loader = loader or partial(load_classifier, self.cfg, models_dir=models_dir)
        self._probe = accelerator_probe
        self._executor = executor
        self._state = LifecycleState.UNINITIALIZED
        self._handle: Optional[Classifier] = None
        self._device: Optional[str] = None
        self._attempts: List[str] = []
        self._flight: SingleFlight[bool] = SingleFlight()
        self._load_seconds = 0.0

    # ── state ───────────────────────────────────────────────

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is LifecycleState.READY and self._handle is not None

    @property
    def handle(self) -> Optional[Classifier]:
        return self._handle

    @property
    def device(self) -> Optional[str]:
        return self._device

    @property
    def attempts(self) -> List[str]:
        return list(self._attempts)

    # ── acquisition ─────────────────────────────────────────

    async def ensure_ready(self) -> bool:
        """Drive acquisition if needed; never raises."""
        if self._state is LifecycleState.READY:
            return True
        if self._state is LifecycleState.FAILED:
            return False
        if not self._flight.in_flight:
            self._state = LifecycleState.INITIALIZING
        return await self._flight.run(self._initialize)

    def _plan(self) -> List[str]:
        requested = (self.cfg.device or "auto").strip().lower()
        if requested == "cpu":
            return ["cpu"]
        if requested == "auto":
            return [ACCELERATED, "cpu"]
        return [requested, "cpu"]

    def _load(self, target: str) -> Tuple[str, Classifier]:
        device = target
        if target == ACCELERATED:
            device = self._probe()
            if device is None:
                raise ClassifierUnavailableError("No hardware accelerator detected")
        self._attempts.append(device)
        return device, self._loader(device)

    async def _initialize(self) -> bool:
        log.info("Initializing zero-shot classifier (%s)", self.cfg.model_name)
        t0 = time.monotonic()

        for target in self._plan():
            try:
                device, handle = await run_blocking(self._executor, self._load, target)
            except Exception as exc:
                log.warning("Classifier acquisition (%s) failed: %s", target, exc)
                continue
            self._handle = handle
            self._device = device
            self._state = LifecycleState.READY
            self._load_seconds = time.monotonic() - t0
            log.info("Classifier ready on %s (%.1fs)", device, self._load_seconds)
            return True

        self._state = LifecycleState.FAILED
        log.error("❌ Classifier unavailable — every acquisition path failed")
        return False

    def stats(self) -> Dict[str, Any]:
        return {
            "state": self._state.value,
            "ready": self.is_ready,
            "model": self.cfg.model_name,
            "requested_device": self.cfg.device,
            "device": self._device or "none",
            "attempts": self.attempts,
            "load_seconds": round(self._load_seconds, 2),
        }
