"""Shared test fixtures."""

import base64
import shutil
import tempfile
import time
from io import BytesIO
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from config.settings import AppConfig, PathConfig, VerificationConfig
from verification.cache import ResultCache
from verification.lifecycle import ClassifierLifecycle
from verification.models import LabelScore
from verification.service import ImageVerificationService


class FakeClassifier:
    """Scores every submitted label from a fixed table (0.0 when absent)."""

    def __init__(self, scores=None, error=None, device="cpu"):
        self.scores = dict(scores or {})
        self.error = error
        self.device = device
        self.calls = []

    def classify(self, image, labels):
        self.calls.append((image, list(labels)))
        if self.error is not None:
            raise self.error
        return [LabelScore(label=l, score=self.scores.get(l, 0.0)) for l in labels]


class FakeLoader:
    """Stands in for model loading; records every device it was asked for."""

    def __init__(self, classifier=None, fail_on=(), delay=0.0):
        self.classifier = classifier or FakeClassifier()
        self.fail_on = set(fail_on)
        self.delay = delay
        self.devices = []

    def __call__(self, device):
        self.devices.append(device)
        if self.delay:
            time.sleep(self.delay)
        if device in self.fail_on or "*" in self.fail_on:
            raise RuntimeError(f"cannot load on {device}")
        self.classifier.device = device
        return self.classifier


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def tmp_dir():
    d = Path(tempfile.mkdtemp())
    yield d
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def test_config(tmp_dir):
    paths = PathConfig(
        root=tmp_dir,
        models_dir=tmp_dir / "models",
        log_file=tmp_dir / "test.log",
    )
    cfg = AppConfig(paths=paths, verify=VerificationConfig(device="auto"))
    cfg.paths.ensure()
    return cfg


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_service(test_config, clock):
    """Build a service around a fake classifier; returns (service, classifier, loader)."""

    def _make(scores=None, error=None, fail_on=(), accelerator="cuda", delay=0.0):
        classifier = FakeClassifier(scores=scores, error=error)
        loader = FakeLoader(classifier, fail_on=fail_on, delay=delay)
        lifecycle = ClassifierLifecycle(
            test_config.verify,
            loader=loader,
            accelerator_probe=lambda: accelerator,
        )
        cache = ResultCache(test_config.cache, clock=clock)
        service = ImageVerificationService(test_config, lifecycle=lifecycle, cache=cache)
        return service, classifier, loader

    return _make


@pytest.fixture
def photo_bytes():
    """A small random JPEG."""
    arr = np.random.randint(0, 255, (64, 64, 3), dtype=np.uint8)
    buf = BytesIO()
    Image.fromarray(arr).save(buf, "JPEG", quality=90)
    return buf.getvalue()


@pytest.fixture
def photo_data_url(photo_bytes):
    return "data:image/jpeg;base64," + base64.b64encode(photo_bytes).decode("ascii")
