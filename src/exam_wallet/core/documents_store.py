"""
documents_store.py: Cached document wallet backed by the remote table and blob bucket.

Uploads and deletes go to the remote store first; the local list only changes once
the remote call succeeded, so a failure leaves the wallet exactly as it was.
"""

import time
from typing import TYPE_CHECKING, Callable, Dict, List, Optional

from ..utils.log_utils import get_logger
from .collection_cache import DEFAULT_FRESHNESS_SECONDS, CollectionCache
from .errors import RemoteError, ValidationError
from .files import SUPPORTED_DOCUMENT_TYPES, UploadedFile, validate_file
from .models import UserDocument
from .seed_data import seed_documents

if TYPE_CHECKING:
    from ..api.remote_store import RemoteStore

logger = get_logger(__name__)

DOCUMENTS_TABLE = "user_documents"
DOCUMENTS_BUCKET = "documents"
UNCATEGORIZED = "Uncategorized"
DEFAULT_CATEGORIES = ("Certificates", "Identity", "Exam Documents", UNCATEGORIZED)


def guess_document_category(file_name: str) -> str:
    """Pick a wallet category from keywords in the file name."""
    name = file_name.lower()
    if "marksheet" in name or "certificate" in name:
        return "Certificates"
    if "id" in name or "card" in name or "aadhar" in name:
        return "Identity"
    if "admit" in name or "exam" in name:
        return "Exam Documents"
    return UNCATEGORIZED


class DocumentsStore:
    """Document collection cache for the signed-in user."""

    def __init__(
        self,
        remote: "RemoteStore",
        user_id: Optional[str] = None,
        freshness_seconds: float = DEFAULT_FRESHNESS_SECONDS,
        fallback: Optional[Callable[[], List[UserDocument]]] = seed_documents,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.remote = remote
        self.user_id = user_id
        kwargs = {"clock": clock} if clock is not None else {}
        self.cache: CollectionCache[UserDocument] = CollectionCache(
            "documents",
            loader=self._load,
            fallback=fallback,
            freshness_seconds=freshness_seconds,
            **kwargs,
        )

    @property
    def documents(self) -> List[UserDocument]:
        return self.cache.items

    async def _load(self) -> List[UserDocument]:
        match = {"user_id": self.user_id} if self.user_id else None
        rows = await self.remote.query(DOCUMENTS_TABLE, match=match, order="created_at", descending=True)
        return [
            UserDocument.from_row(row, url=self.remote.get_public_url(DOCUMENTS_BUCKET, row["storage_path"]))
            for row in rows
        ]

    async def fetch_documents(self, force: bool = False) -> List[UserDocument]:
        """Return the wallet contents, refreshing from the remote store when stale."""
        return await self.cache.fetch(force=force)

    async def upload_document(self, file: UploadedFile, category: Optional[str] = None) -> UserDocument:
        """Upload a file to the wallet.

        The blob is stored first, then the row is inserted; the document is added to
        the local list only after both succeeded.

        Raises:
            ValidationError: if the file type/size is rejected or no user is signed in.
            RemoteError: if the upload or the insert failed.
        """
        validate_file(file, SUPPORTED_DOCUMENT_TYPES)
        if not self.user_id:
            raise ValidationError("A signed-in user is required to upload documents")

        category = category or guess_document_category(file.name)
        storage_path = f"{self.user_id}/{int(time.time() * 1000)}_{file.name}"
        try:
            await self.remote.upload_blob(DOCUMENTS_BUCKET, storage_path, file.content, file.media_type)
        except RemoteError:
            logger.error("Error uploading document %s", file.name)
            raise
        try:
            row = await self.remote.insert(DOCUMENTS_TABLE, {
                "user_id": self.user_id,
                "file_name": file.name,
                "file_type": file.extension.lstrip(".").lower() or file.media_type.split("/")[-1],
                "file_size": round(file.size / 1024),
                "storage_path": storage_path,
                "category": category,
            })
        except RemoteError:
            logger.error("Error saving document %s", file.name)
            await self._discard_blob(storage_path)
            raise

        document = UserDocument.from_row(row, url=self.remote.get_public_url(DOCUMENTS_BUCKET, storage_path))
        self.cache.append(document)
        logger.info("Uploaded %s to %s", file.name, category)
        return document

    async def delete_document(self, document_id: str) -> None:
        """Delete a document remotely, then drop it from the local list.

        Raises:
            RemoteError: if the remote delete failed; the local list is unchanged.
        """
        document = next((doc for doc in self.cache.items if doc.id == document_id), None)
        await self.remote.delete(DOCUMENTS_TABLE, {"id": document_id})
        self.cache.remove(lambda doc: doc.id == document_id)

        if document is not None and document.storage_path:
            await self._discard_blob(document.storage_path)

    async def _discard_blob(self, storage_path: str) -> None:
        try:
            await self.remote.remove_blob(DOCUMENTS_BUCKET, storage_path)
        except RemoteError as e:
            logger.warning(f"Blob {storage_path} was not removed: {e}")

    def documents_by_category(self) -> Dict[str, List[UserDocument]]:
        """Group documents by category. The default categories are always present."""
        grouped: Dict[str, List[UserDocument]] = {category: [] for category in DEFAULT_CATEGORIES}
        for document in self.cache.items:
            grouped.setdefault(document.category or UNCATEGORIZED, []).append(document)
        return grouped
