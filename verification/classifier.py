"""
Zero-shot image classification backed by a CLIP checkpoint.

Heavy dependencies (torch, transformers) are imported on first
use so the rest of the engine stays importable without them.
"""

from __future__ import annotations

import base64
import threading
import time
from io import BytesIO
from pathlib import Path
from typing import Any, List, Optional, Protocol, Sequence, Union

from PIL import Image

from config.settings import VerificationConfig
from utils.exceptions import (
    ClassificationError,
    ClassifierUnavailableError,
    ImageDecodeError,
)
from utils.log_config import get_logger
from verification.models import LabelScore

log = get_logger(__name__)

_torch = None
_pipeline = None
_AutoModel = None
_AutoProcessor = None

ImageInput = Union[str, bytes, Image.Image]


def _import_deps() -> bool:
    global _torch, _pipeline, _AutoModel, _AutoProcessor
    if _torch is not None and _pipeline is not None:
        return True
    try:
        import torch as t
        _torch = t
    except ImportError:
        log.error("PyTorch not installed! pip install torch")
        return False
    try:
        from transformers import (
            AutoModelForZeroShotImageClassification,
            AutoProcessor,
            pipeline,
        )
        _pipeline = pipeline
        _AutoModel = AutoModelForZeroShotImageClassification
        _AutoProcessor = AutoProcessor
        return True
    except ImportError as exc:
        log.error("transformers not installed: %s", exc)
        return False


class Classifier(Protocol):
    """What the engine needs from an acquired classifier."""

    device: str

    def classify(self, image: Any, labels: Sequence[str]) -> List[LabelScore]:
        ...


def accelerated_device() -> Optional[str]:
    """Best hardware accelerator on this machine, or ``None``."""
    if not _import_deps():
        return None
    if _torch.cuda.is_available():
        return "cuda"
    mps = getattr(_torch.backends, "mps", None)
    if mps is not None and mps.is_available():
        return "mps"
    return None


def decode_image(content: ImageInput) -> Image.Image:
    """
    Turn uploaded content into an RGB picture.

    Accepts a ``data:image/...;base64,`` URL, bare base64 text,
    raw encoded bytes or an already opened PIL image.
    """
    if isinstance(content, Image.Image):
        return content.convert("RGB")

    try:
        if isinstance(content, str):
            text = content.strip()
            if text.startswith("data:"):
                header, sep, payload = text.partition(",")
                if not sep or ";base64" not in header:
                    raise ImageDecodeError("Only base64 data URLs are supported")
                data = base64.b64decode(payload)
            else:
                data = base64.b64decode(text, validate=True)
        else:
            data = bytes(content)

        img = Image.open(BytesIO(data))
        img.load()
        return img.convert("RGB")
    except ImageDecodeError:
        raise
    except (OSError, ValueError, TypeError) as exc:
        raise ImageDecodeError(f"Could not decode image: {exc}") from exc


class ZeroShotClassifier:
    """
    Thin wrapper around a transformers zero-shot image pipeline.
    Calls are serialised; the pipeline is not safe to share between
    worker threads.
    """

    def __init__(
        self,
        pipe: Any,
        device: str,
        hypothesis_template: str = "This is a photo of {}.",
        max_side: int = 384,
    ) -> None:
        self._pipe = pipe
        self.device = device
        self.hypothesis_template = hypothesis_template
        self.max_side = max_side
        self._lock = threading.Lock()

    def classify(self, image: ImageInput, labels: Sequence[str]) -> List[LabelScore]:
        if not labels:
            return []
        img = decode_image(image)
        img.thumbnail((self.max_side, self.max_side), Image.Resampling.LANCZOS)

        t0 = time.monotonic()
        try:
            with self._lock:
                raw = self._pipe(
                    img,
                    candidate_labels=list(labels),
                    hypothesis_template=self.hypothesis_template,
                )
        except Exception as exc:
            raise ClassificationError(f"Zero-shot classification failed: {exc}") from exc

        log.debug(
            "Classified %d labels on %s in %.0fms",
            len(labels), self.device, (time.monotonic() - t0) * 1000,
        )
        return [LabelScore(label=row["label"], score=float(row["score"])) for row in raw]


def load_classifier(
    cfg: VerificationConfig,
    device: str,
    models_dir: Optional[Path] = None,
) -> ZeroShotClassifier:
    """Acquire the zero-shot pipeline on *device* or raise."""
    if not _import_deps():
        raise ClassifierUnavailableError("torch / transformers not installed")

    cache_dir = str(models_dir) if models_dir else None
    log.info("Loading %s on %s", cfg.model_name, device)
    t0 = time.monotonic()
    try:
        processor = _AutoProcessor.from_pretrained(cfg.model_name, cache_dir=cache_dir)
        model = _AutoModel.from_pretrained(cfg.model_name, cache_dir=cache_dir)
        model.eval()
        pipe = _pipeline(
            task=cfg.task,
            model=model,
            tokenizer=processor.tokenizer,
            image_processor=processor.image_processor,
            device=device,
        )
    except Exception as exc:
        raise ClassifierUnavailableError(
            f"{cfg.model_name} unavailable on {device}: {exc}"
        ) from exc

    log.info("✅ Classifier loaded on %s in %.1fs", device, time.monotonic() - t0)
    return ZeroShotClassifier(pipe, device, cfg.hypothesis_template)
