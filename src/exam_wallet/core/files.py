"""
files.py: In-memory file values and validation helpers.

UploadedFile is what a user selected; ProcessedFile is what a transform produced.
Both are immutable, every transform returns a fresh ProcessedFile.
"""

import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Union

from .errors import ValidationError

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MiB
IMAGE_MAX_DIMENSION = 1600
IMAGE_PREVIEW_DIMENSION = 300

SUPPORTED_IMAGE_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/webp")
SUPPORTED_DOCUMENT_TYPES = SUPPORTED_IMAGE_TYPES + (
    "application/pdf",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
)

_EXTRA_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
    ".pdf": "application/pdf",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


@dataclass(frozen=True)
class UploadedFile:
    """A file as selected by the user."""
    content: bytes
    media_type: str
    name: str

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def stem(self) -> str:
        dot = self.name.rfind(".")
        return self.name[:dot] if dot > 0 else self.name

    @property
    def extension(self) -> str:
        dot = self.name.rfind(".")
        return self.name[dot:] if dot > 0 else ""


@dataclass(frozen=True)
class ProcessedFile(UploadedFile):
    """Output of a transform. Lives in memory until written or uploaded."""

    def write_to(self, path: Union[str, Path]) -> Path:
        target = Path(path)
        if target.is_dir():
            target = target / self.name
        target.write_bytes(self.content)
        return target


def guess_media_type(name: str) -> str:
    """Guess the media type from a file name, defaulting to application/octet-stream."""
    ext = Path(name).suffix.lower()
    if ext in _EXTRA_TYPES:
        return _EXTRA_TYPES[ext]
    guessed, _ = mimetypes.guess_type(name)
    return guessed or "application/octet-stream"


def load_file(path: Union[str, Path]) -> UploadedFile:
    """Read a file from disk into an UploadedFile."""
    path = Path(path)
    return UploadedFile(content=path.read_bytes(), media_type=guess_media_type(path.name), name=path.name)


def is_image(file: UploadedFile) -> bool:
    return file.media_type in SUPPORTED_IMAGE_TYPES


def validate_file(
    file: UploadedFile,
    supported_types: Iterable[str] = SUPPORTED_DOCUMENT_TYPES,
    max_size: int = MAX_FILE_SIZE,
) -> None:
    """Check a file's type and size.

    Raises:
        ValidationError: if the type is not supported or the file is too large.
    """
    supported_types = tuple(supported_types)
    if file.media_type not in supported_types:
        names = ", ".join(t.split("/")[1] for t in supported_types)
        raise ValidationError(f"Unsupported file type. Supported types: {names}")
    if file.size > max_size:
        raise ValidationError(f"File too large. Maximum size is {max_size / (1024 * 1024):.1f}MB")


def format_file_size(num_bytes: int) -> str:
    """Return a human readable size such as '1.5 MB'."""
    if num_bytes <= 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    value = float(num_bytes)
    i = 0
    while value >= 1024 and i < len(units) - 1:
        value /= 1024
        i += 1
    return f"{round(value, 2):g} {units[i]}"
