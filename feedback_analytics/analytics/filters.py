"""
In-memory filter evaluation over FeedbackRecords.

Used for the sample data set and anywhere records are already in memory; the
store client applies the same FilterSpec at the query boundary.
"""

from typing import List, Optional
import logging

from feedback_analytics.analytics.normalizer import parse_feedback_date
from feedback_analytics.models.schemas import FeedbackRecord, FilterSpec


logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("message", "account_id", "product", "reply", "details")


def _matches_exact(actual: str, expected: Optional[str]) -> bool:
    if expected is None:
        return True
    return (actual or "").lower() == expected.lower()


def _matches_search(record: FeedbackRecord, term: str) -> bool:
    needle = term.lower()
    return any(needle in (getattr(record, field) or "").lower() for field in SEARCH_FIELDS)


def _matches_dates(record: FeedbackRecord, filters: FilterSpec) -> bool:
    if filters.date_from is None and filters.date_to is None:
        return True
    day = parse_feedback_date(record.date)
    if day is None:
        return False
    if filters.date_from is not None and day < filters.date_from:
        return False
    if filters.date_to is not None and day > filters.date_to:
        return False
    return True


def matches(record: FeedbackRecord, filters: FilterSpec) -> bool:
    """True when *record* satisfies every active dimension of *filters*."""
    if not _matches_exact(record.sentiment, filters.active(filters.sentiment)):
        return False
    if not _matches_exact(record.topic, filters.active(filters.topic)):
        return False
    if not _matches_exact(record.category, filters.active(filters.category)):
        return False
    if not _matches_exact(record.status, filters.active(filters.status)):
        return False
    term = (filters.search_term or "").strip()
    if term and not _matches_search(record, term):
        return False
    return _matches_dates(record, filters)


def apply_filters(records: List[FeedbackRecord], filters: Optional[FilterSpec] = None) -> List[FeedbackRecord]:
    """
    Apply *filters* to *records*.

    Active dimensions are ANDed; within the search term the text fields are
    ORed. Relative order is preserved and nothing is duplicated.

    Args:
        records: Feedback records to filter
        filters: Filter to apply; None or an empty filter returns every record

    Returns:
        A new list holding the matching records in input order
    """
    if filters is None or filters.is_empty:
        return list(records)
    result = [record for record in records if matches(record, filters)]
    logger.debug(f"Filter kept {len(result)} of {len(records)} records")
    return result
