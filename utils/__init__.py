from utils.exceptions import (
    VerifierError,
    ClassifierUnavailableError,
    ClassificationError,
    ImageDecodeError,
    ConfigurationError,
)
from utils.log_config import get_logger
from utils.concurrency import SingleFlight, run_blocking
from utils.text_cleaner import extract_keywords, normalise_text
