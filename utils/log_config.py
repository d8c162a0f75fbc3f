"""
Centralised logging setup.
Every module does:  ``from utils.log_config import get_logger``
"""

from __future__ import annotations

import logging
import sys
import warnings
from pathlib import Path
from typing import Optional

_CONFIGURED = False

# All noisy loggers to silence
NOISY_LOGGERS = [
    # Model hub / downloads
    "huggingface_hub", "huggingface_hub.file_download", "filelock",
    "urllib3", "urllib3.connectionpool", "requests", "httpx", "httpcore",
    # ML runtime
    "transformers", "transformers.modeling_utils", "transformers.pipelines",
    "torch", "torch._dynamo", "accelerate",
    # Image
    "PIL", "PIL.Image", "PIL.PngImagePlugin", "PIL.JpegImagePlugin",
    # Other
    "asyncio", "concurrent", "charset_normalizer",
]


def setup_root(log_file: Path, verbose: bool = False) -> None:
    """Configure logging once at startup."""
    global _CONFIGURED
    if _CONFIGURED:
        return

    level = logging.DEBUG if verbose else logging.INFO
    fmt = "%(asctime)s │ %(levelname)-7s │ %(name)-24s │ %(message)s"
    datefmt = "%H:%M:%S"

    log_file.parent.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=level,
        format=fmt,
        datefmt=datefmt,
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(str(log_file), encoding="utf-8"),
        ],
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.ERROR)
        logging.getLogger(name).propagate = False

    # Loggers created lazily by the model stack
    for prefix in ["transformers.", "huggingface_hub.", "torch."]:
        for logger_name in list(logging.Logger.manager.loggerDict.keys()):
            if logger_name.startswith(prefix):
                logging.getLogger(logger_name).setLevel(logging.ERROR)
                logging.getLogger(logger_name).propagate = False

    warnings.filterwarnings("ignore", category=UserWarning)
    warnings.filterwarnings("ignore", category=FutureWarning)
    warnings.filterwarnings("ignore", message=".*resume_download.*")

    _CONFIGURED = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name or "civicverify")
