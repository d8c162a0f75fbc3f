"""Custom exception hierarchy."""


class VerifierError(Exception):
    """Base for every project exception."""


class ClassifierUnavailableError(VerifierError):
    """The zero-shot classifier could not be acquired on a device."""


class ClassificationError(VerifierError):
    """A single classification call failed."""


class ImageDecodeError(ClassificationError):
    """Encoded image content could not be turned into a picture."""


class ConfigurationError(VerifierError):
    """Invalid or missing configuration."""
