"""
Record normalizer: turns heterogeneous store rows into canonical FeedbackRecords.

Rows arrive from the store with snake_case column names, from older exports
with capitalized legacy names ("Post Copy", "Type of post", ...), or as already
normalized records. One mapping table covers all of them.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Type, Union
from datetime import date, datetime, time, timedelta
from enum import Enum
import logging

from pydantic import ValidationError

from feedback_analytics.exceptions import FeedbackValidationError
from feedback_analytics.models.schemas import (
    Category,
    FeedbackRecord,
    LegacyTopic,
    PostType,
    Sentiment,
    Source,
    Status,
    Topic,
)


logger = logging.getLogger(__name__)


# canonical field -> keys to look up, in priority order
FIELD_KEYS: Dict[str, tuple] = {
    "feedback_id": ("feedback_id", "id", "ID"),
    "link": ("link", "Link"),
    "message": ("message", "post_copy", "Post Copy"),
    "date": ("date", "Date"),
    "time": ("time", "Time"),
    "response_date": ("response_date", "date_responses", "Date responses"),
    "account_id": ("account_id", "Account ID"),
    "customer_id": ("customer_id", "Customer ID"),
    "category": ("category", "Category"),
    "post_type": ("post_type", "type_of_post", "Type of post"),
    "topic": ("topic", "Topic"),
    "product": ("product", "Product"),
    "sentiment": ("sentiment", "Sentiment"),
    "source": ("source", "Source"),
    "reply": ("reply", "Reply"),
    "status": ("status", "Status"),
    "details": ("details", "Details"),
}

ENUM_FIELDS: Dict[str, Type[Enum]] = {
    "category": Category,
    "post_type": PostType,
    "topic": LegacyTopic,
    "sentiment": Sentiment,
    "source": Source,
    "status": Status,
}

# Spellings used by older exports and by the descriptive names of the enumerations
ENUM_ALIASES: Dict[str, Dict[str, Enum]] = {
    "category": {
        "instantmessaging": Category.INSTANT_MESSAGING,
        "instant messaging": Category.INSTANT_MESSAGING,
        "connectedtv": Category.CONNECTED_TV,
        "connected tv": Category.CONNECTED_TV,
        "digitalassistant": Category.DIGITAL_ASSISTANT,
        "digital assistant": Category.DIGITAL_ASSISTANT,
    },
    "post_type": {
        "query": PostType.QUERY,
        "other": PostType.OTHER,
    },
    "source": {
        "directmessage": Source.DIRECT_MESSAGE,
        "comment": Source.COMMENT,
    },
}

DATE_FORMATS = ("%Y-%m-%d", "%d-%b-%Y", "%d-%B-%Y", "%d/%m/%Y", "%Y/%m/%d")
TIME_FORMATS = ("%H:%M:%S", "%H:%M")


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, time):
        return value.strftime("%H:%M:%S")
    return str(value).strip()


def _lookup(row: Mapping[str, Any], keys: Iterable[str]) -> str:
    """Return the first non-empty value found under *keys*."""
    for key in keys:
        text = _to_text(row.get(key))
        if text:
            return text
    return ""


def _match_enum(field: str, raw: str) -> Optional[str]:
    """Match *raw* against the field's enumeration case-insensitively."""
    if not raw:
        return None
    enum_cls = ENUM_FIELDS[field]
    lowered = raw.lower()
    for member in enum_cls:
        if member.value.lower() == lowered or member.name.lower() == lowered:
            return member.value
    alias = ENUM_ALIASES.get(field, {}).get(lowered)
    if alias is not None:
        return alias.value
    return None


def _coerce_enum(field: str, raw: str) -> Optional[str]:
    matched = _match_enum(field, raw)
    if matched is None and raw:
        logger.warning(f"Unknown {field} value {raw!r}; using default")
    return matched


def _coerce_topics(raw: Any) -> List[Topic]:
    """Accept topic lists in the shapes the join query returns."""
    if not raw or not isinstance(raw, (list, tuple)):
        return []
    topics = []
    for item in raw:
        if isinstance(item, Topic):
            topics.append(item)
            continue
        if not isinstance(item, Mapping):
            continue
        # rows from customer_feedback_topic embed the topic under "topics"
        nested = item.get("topics")
        if nested is not None:
            topics.extend(_coerce_topics(nested if isinstance(nested, list) else [nested]))
            continue
        try:
            topics.append(Topic.model_validate(dict(item)))
        except ValidationError:
            logger.warning(f"Skipping malformed topic entry: {item!r}")
    return topics


def normalize_record(row: Union[FeedbackRecord, Mapping[str, Any]]) -> FeedbackRecord:
    """
    Convert one raw row into a FeedbackRecord.

    Missing fields become empty strings or the enumeration default; values
    outside a closed enumeration fall back to the default. Never raises.

    Args:
        row: A store row (dict-like) or an already normalized FeedbackRecord

    Returns:
        The canonical FeedbackRecord
    """
    if isinstance(row, FeedbackRecord):
        return row
    if not isinstance(row, Mapping):
        logger.warning(f"Cannot normalize row of type {type(row).__name__}; using empty record")
        return FeedbackRecord()

    values: Dict[str, Any] = {}
    for field, keys in FIELD_KEYS.items():
        text = _lookup(row, keys)
        if field in ENUM_FIELDS:
            coerced = _coerce_enum(field, text)
            if coerced is not None:
                values[field] = coerced
        else:
            values[field] = text

    values["topics"] = _coerce_topics(row.get("topics"))
    return FeedbackRecord(**values)


def normalize_records(rows: Iterable[Union[FeedbackRecord, Mapping[str, Any]]]) -> List[FeedbackRecord]:
    """Normalize every row, preserving order."""
    return [normalize_record(row) for row in rows or []]


def validate_feedback_input(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Strictly check caller-supplied feedback fields before they are written.

    Unlike normalize_record, which tolerates whatever the store holds, an
    enumerated field outside its vocabulary is rejected here. Matching values
    are rewritten to their canonical spelling; empty values are left alone.

    Args:
        payload: Fields under canonical, snake_case or legacy names

    Returns:
        A copy of *payload* with enumerated values canonicalized

    Raises:
        FeedbackValidationError: For the first enumerated field with an unknown value
    """
    cleaned = dict(payload)
    for field, enum_cls in ENUM_FIELDS.items():
        for key in FIELD_KEYS[field]:
            if key not in cleaned:
                continue
            text = _to_text(cleaned[key])
            if not text:
                continue
            matched = _match_enum(field, text)
            if matched is None:
                allowed = ", ".join(member.value for member in enum_cls)
                raise FeedbackValidationError(
                    field, text, f"Invalid {field} value {text!r}; expected one of: {allowed}"
                )
            cleaned[key] = matched
    return cleaned


def to_store_row(record: FeedbackRecord, include_id: bool = True) -> Dict[str, Any]:
    """Map a FeedbackRecord back to the store's snake_case columns."""
    row = {
        "link": record.link,
        "post_copy": record.message,
        "date": record.date or None,
        "time": record.time or None,
        "date_responses": record.response_date or None,
        "account_id": record.account_id,
        "customer_id": record.customer_id,
        "category": record.category,
        "type_of_post": record.post_type,
        "topic": record.topic,
        "product": record.product,
        "sentiment": record.sentiment,
        "source": record.source,
        "reply": record.reply,
        "status": record.status,
        "details": record.details,
    }
    if include_id:
        row = {"id": record.feedback_id, **row}
    return row


def parse_feedback_date(value: str) -> Optional[date]:
    """Parse an occurrence or response date; None when the text is not a date."""
    if not value:
        return None
    text = value.strip()
    # timestamps such as 2025-03-05T10:00:00 or 2025-03-05 10:00:00
    if len(text) > 10 and text[4:5] == "-" and text[10:11] in ("T", " "):
        text = text[:10]
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def parse_feedback_time(value: str) -> Optional[time]:
    """Parse a time of day; legacy exports use ';' as the separator."""
    if not value:
        return None
    text = value.strip().replace(";", ":")
    for fmt in TIME_FORMATS:
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    return None


def occurrence_datetime(record: FeedbackRecord) -> Optional[datetime]:
    """Occurrence timestamp; a missing time means midnight, a bad time invalidates it."""
    day = parse_feedback_date(record.date)
    if day is None:
        return None
    if not record.time:
        return datetime.combine(day, time.min)
    moment = parse_feedback_time(record.time)
    if moment is None:
        return None
    return datetime.combine(day, moment)


def response_datetime(record: FeedbackRecord) -> Optional[datetime]:
    """Response timestamp, taken at the end of the response day."""
    day = parse_feedback_date(record.response_date)
    if day is None:
        return None
    return datetime.combine(day, time.min) + timedelta(hours=23, minutes=59, seconds=59)
