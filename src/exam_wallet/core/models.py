"""
models.py: Exam and document records, and their mapping to remote rows.

Remote rows use snake_case column names and ISO date strings; the models carry
`datetime.date` / `datetime.datetime` values. The subscribed flag is never read
from a row, it is applied locally by the exams store.
"""

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional

EXAM_CATEGORIES = (
    "Engineering",
    "Medical",
    "Civil Services",
    "Banking",
    "Railways",
    "Defence",
    "Teaching",
    "State Services",
    "School Board",
    "Law",
    "Management",
    "Other",
)

PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"

_EXAM_DATE_FIELDS = (
    "registration_start_date",
    "registration_end_date",
    "exam_date",
    "result_date",
    "answer_key_date",
)


def parse_date(value: Any) -> Optional[date]:
    """Parse an ISO date or timestamp string; dates and None pass through."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value)
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()


def parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def format_date(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass
class Exam:
    """A competitive exam listing."""
    id: str
    name: str
    category: str
    registration_start_date: Optional[date]
    registration_end_date: Optional[date]
    website_url: str = ""
    description: str = ""
    exam_date: Optional[date] = None
    result_date: Optional[date] = None
    answer_key_date: Optional[date] = None
    eligibility: Optional[str] = None
    application_fee: Optional[str] = None
    is_subscribed: bool = False

    @classmethod
    def from_row(cls, row: Dict[str, Any], subscribed: bool = False) -> "Exam":
        return cls(
            id=str(row["id"]),
            name=row.get("name") or "",
            category=row.get("category") or "Other",
            registration_start_date=parse_date(row.get("registration_start_date")),
            registration_end_date=parse_date(row.get("registration_end_date")),
            exam_date=parse_date(row.get("exam_date")),
            result_date=parse_date(row.get("result_date")),
            answer_key_date=parse_date(row.get("answer_key_date")),
            website_url=row.get("website_url") or "",
            description=row.get("description") or "",
            eligibility=row.get("eligibility"),
            application_fee=row.get("application_fee"),
            is_subscribed=subscribed,
        )


@dataclass
class ExamDraft:
    """A partially populated exam, as produced by search providers or the manual entry form."""
    name: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    website_url: Optional[str] = None
    registration_start_date: Optional[date] = None
    registration_end_date: Optional[date] = None
    exam_date: Optional[date] = None
    result_date: Optional[date] = None
    answer_key_date: Optional[date] = None
    eligibility: Optional[str] = None
    application_fee: Optional[str] = None

    def to_row(self) -> Dict[str, Any]:
        row = asdict(self)
        for key in _EXAM_DATE_FIELDS:
            row[key] = format_date(row[key])
        return row

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ExamDraft":
        values = {key: row.get(key) for key in cls.__dataclass_fields__}
        for key in _EXAM_DATE_FIELDS:
            values[key] = parse_date(values[key])
        return cls(**values)


@dataclass
class PendingExam:
    """An exam draft waiting for admin review."""
    id: str
    draft: ExamDraft
    status: str = PENDING
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "PendingExam":
        return cls(
            id=str(row["id"]),
            draft=ExamDraft.from_row(row),
            status=row.get("status") or PENDING,
            created_at=parse_datetime(row.get("created_at")),
        )


@dataclass
class UserDocument:
    """A document stored in the user's wallet."""
    id: str
    file_name: str
    file_type: str
    file_size_kb: int
    url: str
    created_at: Optional[datetime] = None
    category: Optional[str] = None
    user_id: Optional[str] = None
    storage_path: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any], url: str) -> "UserDocument":
        return cls(
            id=str(row["id"]),
            file_name=row["file_name"],
            file_type=row.get("file_type") or "",
            file_size_kb=int(row.get("file_size") or 0),
            url=url,
            created_at=parse_datetime(row.get("created_at")),
            category=row.get("category"),
            user_id=row.get("user_id"),
            storage_path=row.get("storage_path"),
        )


@dataclass
class DuplicateReport:
    """Exams with a similar name already live or waiting for review."""
    existing: List[Dict[str, Any]] = field(default_factory=list)
    pending: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def has_duplicates(self) -> bool:
        return bool(self.existing or self.pending)


REGISTRATION_DEADLINE = "Registration"
EXAM_DAY = "Exam Date"


@dataclass(frozen=True)
class Deadline:
    """A registration close or exam day of a subscribed exam."""
    exam_id: str
    exam_name: str
    kind: str
    due: date
    urgent: bool = False
