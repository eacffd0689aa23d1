"""
Core functionality: image transforms, collection caches and the exam/document stores.
"""

from .errors import (
    ExamWalletError,
    ValidationError,
    UnsupportedMediaTypeError,
    UnsupportedEnvironmentError,
    DecodeError,
    EncodeError,
    RemoteError,
)
from .files import UploadedFile, ProcessedFile, load_file, validate_file, format_file_size
from .image_transform import (
    CropRegion,
    ReductionResult,
    resize_image,
    crop_image,
    convert_image_format,
    reduce_to_target_size,
    generate_image_thumbnail,
)
from .collection_cache import CollectionCache, CacheState
from .subscriptions import SubscriptionMarkers
from .exams_store import ExamsStore
from .documents_store import DocumentsStore
from .curation import ExamCurator
from .models import Deadline, Exam, ExamDraft, PendingExam, UserDocument

__all__ = [
    "ExamWalletError",
    "ValidationError",
    "UnsupportedMediaTypeError",
    "UnsupportedEnvironmentError",
    "DecodeError",
    "EncodeError",
    "RemoteError",
    "UploadedFile",
    "ProcessedFile",
    "load_file",
    "validate_file",
    "format_file_size",
    "CropRegion",
    "ReductionResult",
    "resize_image",
    "crop_image",
    "convert_image_format",
    "reduce_to_target_size",
    "generate_image_thumbnail",
    "CollectionCache",
    "CacheState",
    "SubscriptionMarkers",
    "ExamsStore",
    "DocumentsStore",
    "ExamCurator",
    "Deadline",
    "Exam",
    "ExamDraft",
    "PendingExam",
    "UserDocument",
]
