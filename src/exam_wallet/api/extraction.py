"""
Heuristic extraction of exam records from search-provider output.

Everything here is best effort: keyword matching for categories and a regex for
dates. It sits behind extract_candidate_records / parse_json_records so a more
reliable structured extractor can replace it without touching the clients.
"""

import json
import re
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

from ..core.models import EXAM_CATEGORIES, ExamDraft, parse_date
from ..utils.log_utils import get_logger

logger = get_logger(__name__)

_MONTHS = r"(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*"
DATE_PATTERN = re.compile(
    r"\b\d{1,2}[-/]\d{1,2}[-/]\d{2,4}\b"
    rf"|\b{_MONTHS} \d{{1,2}}(?:st|nd|rd|th)?,? \d{{2,4}}\b"
    rf"|\b\d{{1,2}}(?:st|nd|rd|th)? {_MONTHS} \d{{2,4}}\b",
    re.IGNORECASE,
)
_ORDINAL = re.compile(r"(\d)(st|nd|rd|th)\b", re.IGNORECASE)

_NUMERIC_FORMATS = ("%d-%m-%Y", "%d/%m/%Y", "%d-%m-%y", "%d/%m/%y")
_TEXT_FORMATS = ("%b %d %Y", "%B %d %Y", "%d %b %Y", "%d %B %Y", "%b %d %y", "%B %d %y", "%d %b %y", "%d %B %y")

# (category, title keywords, query keywords); checked in order
_CATEGORY_RULES = (
    ("Engineering", ("engineering", "jee", "gate"), ("engineering",)),
    ("Medical", ("medical", "neet", "aiims"), ("medical",)),
    ("Civil Services", ("civil service", "upsc", "ias", "ips"), ("civil service",)),
    ("Banking", ("bank", "sbi", "ibps"), ("bank",)),
    ("Railways", ("railway", "rrb"), ("railway",)),
    ("Defence", ("defence", "nda", "cds"), ("defence",)),
    ("Teaching", ("teaching", "ctet", "tet"), ("teaching",)),
    ("State Services", ("state",), ("state service",)),
    ("School Board", ("board", "cbse", "icse"), ("board",)),
    ("Law", ("law", "clat", "ailet"), ("law",)),
    ("Management", ("management", "cat", "mba"), ("management",)),
)


def _parse_date_text(text: str) -> Optional[date]:
    cleaned = _ORDINAL.sub(r"\1", text).replace(",", "").strip()
    formats = _NUMERIC_FORMATS if "/" in cleaned or "-" in cleaned else _TEXT_FORMATS
    for fmt in formats:
        try:
            return datetime.strptime(cleaned, fmt).date()
        except ValueError:
            continue
    return None


def extract_dates(text: str) -> List[date]:
    """Find dates such as 12/05/2024, Jan 5th, 2024 or 5 January 2024 in free text.

    Numeric dates are read day first.
    """
    found = []
    for match in DATE_PATTERN.findall(text or ""):
        parsed = _parse_date_text(match)
        if parsed is not None:
            found.append(parsed)
    return found


def _contains_keyword(text: str, keyword: str) -> bool:
    if len(keyword) <= 4:
        return re.search(rf"\b{re.escape(keyword)}\b", text) is not None
    return keyword in text


def guess_category(title: str, query: str = "") -> str:
    """Guess the exam category from the result title and the search query."""
    title_lower = (title or "").lower()
    query_lower = (query or "").lower()
    for category, title_keywords, query_keywords in _CATEGORY_RULES:
        if any(_contains_keyword(title_lower, kw) for kw in title_keywords):
            return category
        if any(kw in query_lower for kw in query_keywords):
            return category
    return "Other"


def _assign_dates(draft: ExamDraft, dates: List[date]) -> None:
    if len(dates) < 2:
        return
    ordered = sorted(dates)
    draft.registration_start_date = ordered[0]
    draft.registration_end_date = ordered[1]
    if len(ordered) >= 3:
        draft.exam_date = ordered[2]
    if len(ordered) >= 4:
        draft.result_date = ordered[3]


def extract_candidate_records(results: Iterable[Dict[str, Any]], query: str = "") -> List[ExamDraft]:
    """Turn search result fragments (title/snippet/link) into exam drafts.

    Results that do not mention "exam" are skipped. Dates found in the title and
    snippet are sorted and assigned as registration start/end, exam and result date.
    """
    drafts = []
    for result in results:
        title = result.get("title") or ""
        snippet = result.get("snippet") or ""
        if "exam" not in title.lower() and "exam" not in snippet.lower():
            continue

        draft = ExamDraft(
            name=re.sub(r"\s*-\s*.+$", "", title).strip(),
            description=snippet,
            website_url=result.get("link"),
            category=guess_category(title, query),
        )
        _assign_dates(draft, extract_dates(f"{title} {snippet}"))
        drafts.append(draft)
    return drafts


def _find_json(content: str) -> Any:
    fenced = re.search(r"```(?:json)?\s*\n([\s\S]*?)\n```", content)
    candidates = [fenced.group(1)] if fenced else []
    for pattern in (r"\[[\s\S]*\]", r"\{[\s\S]*\}"):
        match = re.search(pattern, content)
        if match:
            candidates.append(match.group(0))
    for candidate in candidates:
        try:
            return json.loads(candidate)
        except ValueError:
            continue
    raise ValueError("Could not find JSON in response")


def _safe_date(value: Any) -> Optional[date]:
    try:
        return parse_date(value)
    except ValueError:
        return None


def parse_json_records(content: str) -> List[ExamDraft]:
    """Parse exam records from a model reply containing a JSON array or object.

    Keys may be camelCase (registrationStartDate) or snake_case.

    Raises:
        ValueError: if no JSON can be found in `content`.
    """
    data = _find_json(content or "")
    items = data if isinstance(data, list) else [data]
    drafts = []
    for item in items:
        if not isinstance(item, dict):
            continue

        def pick(camel: str, snake: str) -> Any:
            return item.get(camel, item.get(snake))

        category = item.get("category")
        drafts.append(ExamDraft(
            name=item.get("name"),
            category=category if category in EXAM_CATEGORIES else "Other",
            description=item.get("description"),
            website_url=pick("websiteUrl", "website_url"),
            registration_start_date=_safe_date(pick("registrationStartDate", "registration_start_date")),
            registration_end_date=_safe_date(pick("registrationEndDate", "registration_end_date")),
            exam_date=_safe_date(pick("examDate", "exam_date")),
            result_date=_safe_date(pick("resultDate", "result_date")),
            answer_key_date=_safe_date(pick("answerKeyDate", "answer_key_date")),
            eligibility=item.get("eligibility"),
            application_fee=pick("applicationFee", "application_fee"),
        ))
    logger.debug("Parsed %d exam records from model reply", len(drafts))
    return drafts
