from dataclasses import replace
from datetime import date
from unittest.mock import AsyncMock

import pytest

from exam_wallet.core.curation import PENDING_TABLE, ExamCurator, validate_draft
from exam_wallet.core.errors import ValidationError
from exam_wallet.core.models import APPROVED, ExamDraft, PendingExam

DRAFT = ExamDraft(
    name="JEE Main 2025",
    category="Engineering",
    description="National engineering entrance",
    website_url="https://jeemain.nta.ac.in",
    registration_start_date=date(2024, 11, 1),
    registration_end_date=date(2024, 11, 30),
    exam_date=date(2025, 1, 22),
)


def _make_curator(remote, existing=(), pending=()):
    remote.query.side_effect = [list(existing), list(pending)]
    return ExamCurator(remote)


class TestValidateDraft:
    def test_complete_draft_passes(self) -> None:
        validate_draft(DRAFT)

    def test_missing_fields_are_named(self) -> None:
        with pytest.raises(ValidationError, match="description, website_url"):
            validate_draft(replace(DRAFT, description=None, website_url=""))

    def test_unknown_category(self) -> None:
        with pytest.raises(ValidationError, match="category"):
            validate_draft(replace(DRAFT, category="Astrology"))

    def test_end_before_start(self) -> None:
        with pytest.raises(ValidationError, match="before the start"):
            validate_draft(replace(DRAFT, registration_end_date=date(2024, 10, 1)))


class TestSubmitForReview:
    async def test_duplicate_name_blocks_submission(self, remote) -> None:
        curator = _make_curator(remote, existing=[{"id": "1", "name": "JEE Main 2025"}])

        with pytest.raises(ValidationError, match="already exists"):
            await curator.submit_for_review(DRAFT)

        remote.insert.assert_not_awaited()

    async def test_pending_duplicate_blocks_submission(self, remote) -> None:
        curator = _make_curator(remote, pending=[{"id": "7", "name": "JEE Main 2025"}])

        with pytest.raises(ValidationError, match="pending review"):
            await curator.submit_for_review(DRAFT)

    async def test_queues_draft(self, remote) -> None:
        curator = _make_curator(remote)
        remote.insert.return_value = {"id": "p1", "created_at": "2025-01-01T00:00:00+00:00"}

        pending = await curator.submit_for_review(DRAFT)

        table, row = remote.insert.await_args.args
        assert table == PENDING_TABLE
        assert row["status"] == "pending"
        assert row["registration_start_date"] == "2024-11-01"
        assert pending.id == "p1"
        assert pending.draft.exam_date == date(2025, 1, 22)

    async def test_duplicate_lookup_pattern(self, remote) -> None:
        curator = _make_curator(remote)

        report = await curator.check_for_duplicates("JEE  Main 2025")

        assert not report.has_duplicates
        first = remote.query.await_args_list[0]
        assert first.args == ("exams",)
        assert first.kwargs == {"ilike": {"name": "JEE*Main*2025"}, "columns": "id,name"}


class TestReview:
    async def test_approve_publishes_verified_exam(self, remote) -> None:
        curator = ExamCurator(remote)
        pending = PendingExam(id="p1", draft=DRAFT)

        await curator.approve(pending)

        remote.update.assert_awaited_once_with(PENDING_TABLE, {"id": "p1"}, {"status": APPROVED})
        table, row = remote.insert.await_args.args
        assert table == "exams"
        assert row["is_verified"] is True
        assert row["name"] == "JEE Main 2025"
        assert pending.status == APPROVED

    async def test_reject(self, remote) -> None:
        await ExamCurator(remote).reject("p2")

        remote.update.assert_awaited_once_with(PENDING_TABLE, {"id": "p2"}, {"status": "rejected"})

    async def test_list_pending(self, remote) -> None:
        remote.query.return_value = [{**DRAFT.to_row(), "id": "p1", "status": "pending"}]

        pending = await ExamCurator(remote).list_pending()

        assert [item.id for item in pending] == ["p1"]
        assert pending[0].draft.registration_end_date == date(2024, 11, 30)

    async def test_search_delegates_to_client(self, remote) -> None:
        client = AsyncMock()
        client.search_exams.return_value = [DRAFT]

        assert await ExamCurator(remote).search(client, "jee") == [DRAFT]
        client.search_exams.assert_awaited_once_with("jee")
