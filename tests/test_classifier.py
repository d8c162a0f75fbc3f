"""Tests for the transformers-backed classifier adapter."""

import base64
from unittest.mock import MagicMock, patch

import pytest
from PIL import Image

from config.settings import VerificationConfig
from utils.exceptions import (
    ClassificationError,
    ClassifierUnavailableError,
    ImageDecodeError,
)
from verification.classifier import (
    ZeroShotClassifier,
    accelerated_device,
    decode_image,
    load_classifier,
)
from verification.models import LabelScore


class TestDecodeImage:

    def test_data_url(self, photo_data_url):
        img = decode_image(photo_data_url)
        assert img.mode == "RGB"
        assert img.size == (64, 64)

    def test_bare_base64(self, photo_bytes):
        img = decode_image(base64.b64encode(photo_bytes).decode("ascii"))
        assert img.size == (64, 64)

    def test_raw_bytes(self, photo_bytes):
        assert decode_image(photo_bytes).size == (64, 64)

    def test_pil_image_passthrough(self):
        img = decode_image(Image.new("RGBA", (10, 10)))
        assert img.mode == "RGB"

    @pytest.mark.parametrize("bad", [
        "data:image/png,not-base64-encoded",
        "data:image/png;base64,bm90IGFuIGltYWdl",
        "%%% not base64 %%%",
        b"\x00\x01garbage",
    ])
    def test_rejects_garbage(self, bad):
        with pytest.raises(ImageDecodeError):
            decode_image(bad)

    def test_decode_error_is_a_classification_error(self):
        assert issubclass(ImageDecodeError, ClassificationError)


class TestZeroShotClassifier:

    def test_maps_pipeline_output(self, photo_data_url):
        pipe = MagicMock(return_value=[
            {"label": "pothole", "score": 0.7},
            {"label": "selfie photo", "score": 0.3},
        ])
        clf = ZeroShotClassifier(pipe, "cpu", "A photo of {}.")
        out = clf.classify(photo_data_url, ["pothole", "selfie photo"])

        assert out == [LabelScore("pothole", 0.7), LabelScore("selfie photo", 0.3)]
        args, kwargs = pipe.call_args
        assert isinstance(args[0], Image.Image)
        assert kwargs["candidate_labels"] == ["pothole", "selfie photo"]
        assert kwargs["hypothesis_template"] == "A photo of {}."

    def test_downscales_large_images(self):
        pipe = MagicMock(return_value=[])
        clf = ZeroShotClassifier(pipe, "cpu", max_side=100)
        clf.classify(Image.new("RGB", (800, 400)), ["x"])
        assert max(pipe.call_args[0][0].size) <= 100

    def test_no_labels_skips_pipeline(self, photo_bytes):
        pipe = MagicMock()
        assert ZeroShotClassifier(pipe, "cpu").classify(photo_bytes, []) == []
        pipe.assert_not_called()

    def test_pipeline_error_wrapped(self, photo_bytes):
        pipe = MagicMock(side_effect=RuntimeError("CUDA out of memory"))
        with pytest.raises(ClassificationError, match="out of memory"):
            ZeroShotClassifier(pipe, "cuda").classify(photo_bytes, ["pothole"])


class TestLoadClassifier:

    @patch("verification.classifier._import_deps", return_value=False)
    def test_missing_dependencies(self, _deps):
        with pytest.raises(ClassifierUnavailableError):
            load_classifier(VerificationConfig(), "cpu")

    @patch("verification.classifier._import_deps", return_value=True)
    def test_builds_pipeline_on_device(self, _deps, tmp_dir):
        processor = MagicMock()
        model = MagicMock()
        with patch("verification.classifier._AutoProcessor") as auto_proc, \
             patch("verification.classifier._AutoModel") as auto_model, \
             patch("verification.classifier._pipeline") as pipeline:
            auto_proc.from_pretrained.return_value = processor
            auto_model.from_pretrained.return_value = model

            clf = load_classifier(VerificationConfig(), "cuda", models_dir=tmp_dir)

        assert clf.device == "cuda"
        auto_model.from_pretrained.assert_called_once_with(
            "openai/clip-vit-base-patch32", cache_dir=str(tmp_dir),
        )
        kwargs = pipeline.call_args.kwargs
        assert kwargs["task"] == "zero-shot-image-classification"
        assert kwargs["model"] is model
        assert kwargs["device"] == "cuda"

    @patch("verification.classifier._import_deps", return_value=True)
    def test_load_failure_becomes_unavailable(self, _deps):
        with patch("verification.classifier._AutoProcessor") as auto_proc, \
             patch("verification.classifier._AutoModel"), \
             patch("verification.classifier._pipeline"):
            auto_proc.from_pretrained.side_effect = OSError("no network")
            with pytest.raises(ClassifierUnavailableError, match="no network"):
                load_classifier(VerificationConfig(), "cpu")


class TestAcceleratedDevice:

    @patch("verification.classifier._import_deps", return_value=True)
    def test_prefers_cuda(self, _deps):
        torch = MagicMock()
        torch.cuda.is_available.return_value = True
        with patch("verification.classifier._torch", torch):
            assert accelerated_device() == "cuda"

    @patch("verification.classifier._import_deps", return_value=True)
    def test_mps_when_no_cuda(self, _deps):
        torch = MagicMock()
        torch.cuda.is_available.return_value = False
        torch.backends.mps.is_available.return_value = True
        with patch("verification.classifier._torch", torch):
            assert accelerated_device() == "mps"

    @patch("verification.classifier._import_deps", return_value=True)
    def test_none_without_accelerator(self, _deps):
        torch = MagicMock()
        torch.cuda.is_available.return_value = False
        torch.backends.mps.is_available.return_value = False
        with patch("verification.classifier._torch", torch):
            assert accelerated_device() is None

    @patch("verification.classifier._import_deps", return_value=False)
    def test_none_without_torch(self, _deps):
        assert accelerated_device() is None
