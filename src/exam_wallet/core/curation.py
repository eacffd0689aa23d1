"""
curation.py: Admin review queue for the exam catalog.

Search results and manual entries are checked for duplicates, validated, and
queued in `pending_exams`; an admin then approves (copied into `exams` as
verified) or rejects them.
"""

from typing import TYPE_CHECKING, List

from ..utils.log_utils import get_logger
from .errors import ValidationError
from .models import APPROVED, EXAM_CATEGORIES, PENDING, REJECTED, DuplicateReport, ExamDraft, PendingExam

if TYPE_CHECKING:
    from ..api.base import SearchClient
    from ..api.remote_store import RemoteStore

logger = get_logger(__name__)

EXAMS_TABLE = "exams"
PENDING_TABLE = "pending_exams"
REQUIRED_FIELDS = ("name", "category", "description", "registration_start_date",
                   "registration_end_date", "website_url")


def validate_draft(draft: ExamDraft) -> None:
    """Check that a draft has every field the catalog requires.

    Raises:
        ValidationError: naming the missing fields or an unknown category.
    """
    missing = [name for name in REQUIRED_FIELDS if not getattr(draft, name)]
    if missing:
        raise ValidationError(f"Please fill all required fields: {', '.join(missing)}")
    if draft.category not in EXAM_CATEGORIES:
        raise ValidationError(f"Unknown exam category: {draft.category}")
    if draft.registration_end_date < draft.registration_start_date:
        raise ValidationError("Registration end date is before the start date")


class ExamCurator:
    """Admin operations on the exam catalog and its review queue."""

    def __init__(self, remote: "RemoteStore"):
        self.remote = remote

    async def search(self, client: "SearchClient", query: str) -> List[ExamDraft]:
        """Run a provider search; the drafts are not stored anywhere yet."""
        return await client.search_exams(query)

    async def check_for_duplicates(self, name: str) -> DuplicateReport:
        """Find live or queued exams whose name contains `name` (case-insensitive)."""
        pattern = "*".join((name or "").split())
        existing = await self.remote.query(EXAMS_TABLE, ilike={"name": pattern}, columns="id,name")
        pending = await self.remote.query(PENDING_TABLE, ilike={"name": pattern}, columns="id,name")
        return DuplicateReport(existing=existing, pending=pending)

    async def submit_for_review(self, draft: ExamDraft) -> PendingExam:
        """Queue a draft for admin review.

        Raises:
            ValidationError: if a similar exam exists or required fields are missing.
            RemoteError: if the remote store call failed.
        """
        validate_draft(draft)
        report = await self.check_for_duplicates(draft.name)
        if report.existing:
            raise ValidationError("An exam with a similar name already exists in the database.")
        if report.pending:
            raise ValidationError("An exam with a similar name is already pending review.")

        row = draft.to_row()
        row["status"] = PENDING
        stored = await self.remote.insert(PENDING_TABLE, row)
        logger.info("Queued %s for review", draft.name)
        return PendingExam.from_row({**row, **stored})

    async def list_pending(self) -> List[PendingExam]:
        rows = await self.remote.query(PENDING_TABLE, match={"status": PENDING},
                                       order="created_at", descending=True)
        return [PendingExam.from_row(row) for row in rows]

    async def approve(self, pending: PendingExam) -> None:
        """Mark a queued exam approved and publish it to the catalog as verified."""
        validate_draft(pending.draft)
        await self.remote.update(PENDING_TABLE, {"id": pending.id}, {"status": APPROVED})
        row = pending.draft.to_row()
        row["is_verified"] = True
        await self.remote.insert(EXAMS_TABLE, row)
        pending.status = APPROVED
        logger.info("Approved %s", pending.draft.name)

    async def reject(self, pending_id: str) -> None:
        await self.remote.update(PENDING_TABLE, {"id": pending_id}, {"status": REJECTED})
        logger.info("Rejected pending exam %s", pending_id)

    async def add_exam(self, draft: ExamDraft) -> dict:
        """Publish a manually entered exam directly to the catalog."""
        validate_draft(draft)
        row = draft.to_row()
        row["is_verified"] = True
        return await self.remote.insert(EXAMS_TABLE, row)
