"""
errors.py: Exception hierarchy shared by the transform engine, the stores and the API clients.

Every failure surfaces as one of these types so callers can show a recoverable state.
Nothing in the package retries automatically.
"""

from typing import Optional


class ExamWalletError(Exception):
    """Base exception for all exam-wallet errors."""


class ValidationError(ExamWalletError):
    """Raised when user input is rejected before any work is done."""


class UnsupportedMediaTypeError(ValidationError):
    """Raised when a file is not one of the supported raster image types."""


class UnsupportedEnvironmentError(ValidationError):
    """Raised when an operation cannot be performed for this kind of file here."""


class DecodeError(ExamWalletError):
    """Raised when image bytes cannot be decoded."""

    def __init__(self, message: str = "Failed to load image"):
        super().__init__(message)


class EncodeError(ExamWalletError):
    """Raised when the encoder produced no output."""

    def __init__(self, message: str = "Failed to produce output"):
        super().__init__(message)


class RemoteError(ExamWalletError):
    """Raised when the remote store or a search provider call fails."""

    def __init__(self, message: str, status: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.body = body
