"""
Exam Wallet

Track competitive exams, keep personal documents, and resize, crop, convert or
shrink document images before uploading them.
"""

__version__ = "0.1.0"

from .core import (
    CropRegion,
    ReductionResult,
    UploadedFile,
    ProcessedFile,
    load_file,
    resize_image,
    crop_image,
    convert_image_format,
    reduce_to_target_size,
    CollectionCache,
    ExamsStore,
    DocumentsStore,
    ExamCurator,
)
from .api import RemoteStore, SupabaseStore, get_client
from .config import Settings
from .context import AppContext


def main():
    """Entry point for the exam-wallet command."""
    from .cli import main as cli_main
    cli_main()


__all__ = [
    "CropRegion",
    "ReductionResult",
    "UploadedFile",
    "ProcessedFile",
    "load_file",
    "resize_image",
    "crop_image",
    "convert_image_format",
    "reduce_to_target_size",
    "CollectionCache",
    "ExamsStore",
    "DocumentsStore",
    "ExamCurator",
    "RemoteStore",
    "SupabaseStore",
    "get_client",
    "Settings",
    "AppContext",
]
