# This project was developed with assistance from AI tools.
"""Client-to-application matching.

Loan applications copy the client's name, phone and ID number as free
text, so the applications that belong to a client are recovered by
comparing normalized values. Rules are tried in order and the first one
that fires decides the score; they are never summed.

Pure functions -- no DB access. Records are read by attribute (ORM rows,
schema objects) or by key (dicts).
"""

import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from db.enums import MatchType, StatusCategory

from .amounts import AmountValidationError, parse_amount

MIN_MATCH_SCORE = 70.0
FUZZY_SIMILARITY_THRESHOLD = 0.8

_EXACT_SCORE = 100.0
_PHONE_SCORE = 95.0
_ID_SCORE = 95.0
_FUZZY_WEIGHT = 90.0
_PARTIAL_SCORE = 75.0

_COUNTRY_CODE = "256"

_WHITESPACE = re.compile(r"\s+")
_PUNCTUATION = re.compile(r"[^\w\s]", re.ASCII)
_TITLES = re.compile(r"\b(mr|mrs|ms|dr|prof)\b", re.ASCII)
_NON_DIGITS = re.compile(r"\D")


@dataclass
class MatchResult:
    """A candidate application scored against a client."""

    application: Any
    score: float
    match_type: MatchType


@dataclass
class ClientStatistics:
    total_applications: int
    active_applications: int
    approved_loans: int
    total_loan_amount: Decimal


def _field(record: Any, name: str) -> Any:
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


def normalize_name(name: str | None) -> str:
    """Lowercase, strip punctuation and honorifics, collapse whitespace."""
    if not name:
        return ""
    normalized = _WHITESPACE.sub(" ", name.lower().strip())
    normalized = _PUNCTUATION.sub("", normalized)
    normalized = _TITLES.sub("", normalized)
    return _WHITESPACE.sub(" ", normalized).strip()


def normalize_phone(phone: str | None) -> str:
    """Canonical digits-only phone number with the Uganda ``256`` prefix.

    ``0700123456`` and ``700123456`` both become ``256700123456``; numbers
    already carrying ``256`` are kept; anything else is returned as digits.
    """
    if not phone:
        return ""
    digits = _NON_DIGITS.sub("", phone)
    if digits.startswith(_COUNTRY_CODE):
        return digits
    if digits.startswith("0") and len(digits) == 10:
        return _COUNTRY_CODE + digits[1:]
    if len(digits) == 9:
        return _COUNTRY_CODE + digits
    return digits


def normalize_id_number(id_number: str | None) -> str:
    if not id_number:
        return ""
    return id_number.strip().lower()


# ---------------------------------------------------------------------------
# Similarity
# ---------------------------------------------------------------------------


def levenshtein_distance(a: str, b: str) -> int:
    """Minimum number of single-character edits turning ``a`` into ``b``."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + cost,
                )
            )
        previous = current
    return previous[-1]


def similarity(a: str, b: str) -> float:
    """``1 - distance / max_length``; two empty strings are identical."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1 - levenshtein_distance(a, b) / longest


# ---------------------------------------------------------------------------
# Matching
# ---------------------------------------------------------------------------


def score_match(client: Any, application: Any) -> MatchResult | None:
    """Score one application against a client, or None if no rule fires."""
    client_name = normalize_name(_field(client, "full_name"))
    app_name = normalize_name(_field(application, "client_name"))
    client_phone = normalize_phone(_field(client, "phone_number"))
    app_phone = normalize_phone(_field(application, "phone_number"))
    client_id = normalize_id_number(_field(client, "id_number"))
    app_id = normalize_id_number(_field(application, "id_number"))

    if client_name and client_name == app_name:
        return MatchResult(application, _EXACT_SCORE, MatchType.EXACT)
    if client_phone and client_phone == app_phone:
        return MatchResult(application, _PHONE_SCORE, MatchType.PHONE)
    if client_id and client_id == app_id:
        return MatchResult(application, _ID_SCORE, MatchType.ID)
    if client_name and app_name:
        name_similarity = similarity(client_name, app_name)
        if name_similarity >= FUZZY_SIMILARITY_THRESHOLD:
            return MatchResult(application, name_similarity * _FUZZY_WEIGHT, MatchType.FUZZY)
        if client_name in app_name or app_name in client_name:
            return MatchResult(application, _PARTIAL_SCORE, MatchType.PARTIAL)
    return None


def rank_matches(
    client: Any,
    applications: list[Any],
    *,
    min_score: float = MIN_MATCH_SCORE,
) -> list[MatchResult]:
    """Scored matches at or above ``min_score``, best first.

    The sort is stable, so equal scores keep their input order. Candidates
    repeating an earlier application's ``id`` are skipped.
    """
    seen: set = set()
    matches: list[MatchResult] = []
    for application in applications:
        key = _field(application, "id")
        if key is None:
            key = ("object", id(application))
        if key in seen:
            continue
        seen.add(key)
        result = score_match(client, application)
        if result is not None and result.score >= min_score:
            matches.append(result)
    return sorted(matches, key=lambda m: m.score, reverse=True)


def match_client_to_applications(
    client: Any,
    applications: list[Any],
    *,
    min_score: float = MIN_MATCH_SCORE,
) -> list[Any]:
    """Applications that plausibly belong to ``client``, best match first."""
    return [m.application for m in rank_matches(client, applications, min_score=min_score)]


# ---------------------------------------------------------------------------
# Client statistics
# ---------------------------------------------------------------------------

_ACTIVE_STATUSES = frozenset(
    {
        "submitted",
        "pending manager",
        "pending director",
        "pending ceo",
        "pending chairperson",
        "under review",
        "in review",
        "processing",
    }
)
_APPROVED_STATUSES = frozenset({"approved", "disbursed", "completed"})
_REJECTED_STATUSES = frozenset({"rejected", "declined", "cancelled"})
_REJECTED_MARKERS = ("reject", "decline", "cancel")


def status_category(status: str | None) -> StatusCategory:
    """Bucket a free-text application status for dashboard counts."""
    value = getattr(status, "value", status) or ""
    normalized = value.lower().replace("_", " ").strip()

    if normalized in _ACTIVE_STATUSES:
        return StatusCategory.ACTIVE
    if normalized in _APPROVED_STATUSES:
        return StatusCategory.APPROVED
    if normalized in _REJECTED_STATUSES:
        return StatusCategory.REJECTED
    if any(marker in normalized for marker in _REJECTED_MARKERS):
        return StatusCategory.REJECTED
    return StatusCategory.ACTIVE


def client_statistics(applications: list[Any]) -> ClientStatistics:
    """Counts and total requested amount across a client's applications.

    Amounts that cannot be parsed count as zero.
    """
    categories = [status_category(_field(app, "status")) for app in applications]

    total = Decimal("0")
    for app in applications:
        try:
            total += parse_amount(_field(app, "loan_amount"))
        except AmountValidationError:
            continue

    return ClientStatistics(
        total_applications=len(applications),
        active_applications=categories.count(StatusCategory.ACTIVE),
        approved_loans=categories.count(StatusCategory.APPROVED),
        total_loan_amount=total,
    )
