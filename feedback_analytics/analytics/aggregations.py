"""
Pure aggregation functions over collections of FeedbackRecords.

None of these functions perform I/O or mutate their input; every call builds a
new result from the records it is given.
"""

from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from collections import Counter, OrderedDict
from datetime import datetime, time, timedelta
import math
import logging

import pandas as pd

from feedback_analytics.analytics.normalizer import (
    occurrence_datetime,
    parse_feedback_date,
    response_datetime,
)
from feedback_analytics.models.schemas import (
    Category,
    FeedbackRecord,
    FeedbackStats,
    JourneyMetrics,
    LegacyTopic,
    PainPointBucket,
    PainPointSummary,
    PostType,
    RiskLevel,
    SegmentShare,
    Sentiment,
    SentimentDistribution,
    SentimentTrendPoint,
    SEVERITY_RANK,
    Severity,
    Status,
    Topic,
    TopicTrendEntry,
    TopicWithStats,
)


logger = logging.getLogger(__name__)

SENTIMENT_WEIGHTS = {
    Sentiment.POSITIVE.value: 10,
    Sentiment.NEUTRAL.value: 6,
    Sentiment.NEGATIVE.value: 2,
}
NEUTRAL_SCORE = 5.0

DEFAULT_HARDWARE_KEYWORDS = ("lcd", "screen", "display")

SEGMENT_LABELS = OrderedDict([
    (Category.INSTANT_MESSAGING.value, "Instant Messaging"),
    (Category.GENERAL.value, "General Inquiries"),
    (Category.CONNECTED_TV.value, "CTV Support"),
    (Category.DIGITAL_ASSISTANT.value, "Digital Assistant"),
])
SEGMENT_COLORS = ("#8884d8", "#82ca9d", "#ffc658", "#ff7c7c", "#8dd1e1")

DEFAULT_RESPONSE_TIME_HOURS = 24.0


def _round_half_up(value: float, digits: int = 0) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def _escalate(severity: Severity) -> Severity:
    if severity == Severity.LOW:
        return Severity.MEDIUM
    return Severity.HIGH


# ---------------------------------------------------------------------------
# Sentiment
# ---------------------------------------------------------------------------

def sentiment_score(records: Sequence[FeedbackRecord]) -> float:
    """
    Mean sentiment score on a 0-10 scale.

    Positive counts 10, Neutral 6 and Negative 2; the mean is rounded to one
    decimal. An empty collection scores the neutral default of 5.0.
    """
    if not records:
        return NEUTRAL_SCORE
    total = sum(SENTIMENT_WEIGHTS.get(record.sentiment, SENTIMENT_WEIGHTS[Sentiment.NEUTRAL.value])
                for record in records)
    return _round_half_up(total / len(records), 1)


def sentiment_distribution(records: Sequence[FeedbackRecord]) -> SentimentDistribution:
    """Rounded percentage of records per sentiment."""
    if not records:
        return SentimentDistribution()
    counts = Counter(record.sentiment for record in records)
    total = len(records)

    def share(sentiment: Sentiment) -> int:
        return int(_round_half_up(counts.get(sentiment.value, 0) / total * 100))

    return SentimentDistribution(
        positive=share(Sentiment.POSITIVE),
        neutral=share(Sentiment.NEUTRAL),
        negative=share(Sentiment.NEGATIVE),
    )


def sentiment_trend(records: Sequence[FeedbackRecord], days: int = 30) -> List[SentimentTrendPoint]:
    """
    Daily sentiment counts in chronological order.

    Records without a parseable date are skipped. Only the last *days* distinct
    dates are kept.
    """
    rows = []
    for record in records:
        day = parse_feedback_date(record.date)
        if day is not None:
            rows.append({"day": day, "sentiment": record.sentiment})
    if not rows:
        return []

    df = pd.DataFrame(rows)
    counts = (
        pd.crosstab(df["day"], df["sentiment"])
        .reindex(columns=[s.value for s in Sentiment], fill_value=0)
        .sort_index()
        .tail(days)
    )
    return [
        SentimentTrendPoint(
            date=day.isoformat(),
            positive=int(row[Sentiment.POSITIVE.value]),
            neutral=int(row[Sentiment.NEUTRAL.value]),
            negative=int(row[Sentiment.NEGATIVE.value]),
        )
        for day, row in counts.iterrows()
    ]


# ---------------------------------------------------------------------------
# Pain points
# ---------------------------------------------------------------------------

def classify_pain_point(
    record: FeedbackRecord,
    keywords: Iterable[str] = DEFAULT_HARDWARE_KEYWORDS,
) -> Tuple[str, Severity]:
    """
    Derive the pain-point bucket and severity of a single record.

    Rules are applied in priority order: keyword overrides, critical topics,
    escalation of service/pricing topics, informational topics, default.
    """
    message = (record.message or "").lower()
    details = record.details or ""

    if any(keyword.lower() in message for keyword in keywords if keyword):
        return "Hardware Issues", Severity.HIGH
    if "issue after update" in details.lower():
        return "Software Issues", Severity.HIGH

    if record.topic == LegacyTopic.TECHNICAL:
        return "Technical Issues", Severity.HIGH
    if record.topic == LegacyTopic.PRODUCT_RELEASE:
        return "Product Delivery", Severity.HIGH if "Delayed" in details else Severity.MEDIUM

    if record.topic in (LegacyTopic.SERVICE_CENTER, LegacyTopic.PRICING):
        factors = sum((record.is_complaint, record.is_negative, record.is_pending))
        severity = Severity.LOW
        if factors >= 2:
            severity = _escalate(severity)
        return LegacyTopic(record.topic).value, severity

    if record.topic == LegacyTopic.PRODUCT_INFO:
        return "Product Information", Severity.MEDIUM
    if "Availability" in details:
        return "Product Availability", Severity.MEDIUM

    return "Other", Severity.LOW


def detect_pain_points(
    records: Sequence[FeedbackRecord],
    keywords: Iterable[str] = DEFAULT_HARDWARE_KEYWORDS,
    max_examples: int = 3,
) -> List[PainPointBucket]:
    """
    Bucket complaint or negative records by derived category.

    Every qualifying record lands in exactly one bucket. A bucket carries the
    highest severity among its records. Buckets are ordered by severity
    (high first), then by issue count.

    Args:
        records: Feedback records, filtered or not
        keywords: Message keywords that force the "Hardware Issues" bucket
        max_examples: Number of example messages kept per bucket

    Returns:
        Sorted list of PainPointBucket
    """
    keywords = tuple(keywords)
    buckets: Dict[str, Dict] = {}

    for record in records:
        if not record.is_pain_point:
            continue
        category, severity = classify_pain_point(record, keywords)
        bucket = buckets.setdefault(
            category, {"issues": 0, "severity": Severity.LOW, "ids": [], "examples": []}
        )
        bucket["issues"] += 1
        bucket["ids"].append(record.feedback_id)
        if len(bucket["examples"]) < max_examples:
            bucket["examples"].append(record.message)
        if SEVERITY_RANK[severity.value] > SEVERITY_RANK[bucket["severity"].value]:
            bucket["severity"] = severity

    result = [
        PainPointBucket(
            category=category,
            issues=data["issues"],
            severity=data["severity"],
            feedback_ids=data["ids"],
            examples=data["examples"],
        )
        for category, data in buckets.items()
    ]
    result.sort(key=lambda bucket: (-SEVERITY_RANK[bucket.severity], -bucket.issues))
    return result


def summarize_pain_points(
    records: Sequence[FeedbackRecord],
    keywords: Iterable[str] = DEFAULT_HARDWARE_KEYWORDS,
) -> PainPointSummary:
    """Per-record severity counts of complaint or negative feedback."""
    keywords = tuple(keywords)
    counts = Counter()
    for record in records:
        if record.is_pain_point:
            _, severity = classify_pain_point(record, keywords)
            counts[severity.value] += 1
    return PainPointSummary(
        total=sum(counts.values()),
        high=counts[Severity.HIGH.value],
        medium=counts[Severity.MEDIUM.value],
        low=counts[Severity.LOW.value],
    )


def recent_pain_points(
    records: Sequence[FeedbackRecord],
    now: Optional[datetime] = None,
    window_days: int = 7,
) -> List[FeedbackRecord]:
    """Complaint or negative records whose occurrence date falls in the window."""
    now = now or datetime.now()
    cutoff = now - timedelta(days=window_days)
    recent = []
    for record in records:
        if not record.is_pain_point:
            continue
        day = parse_feedback_date(record.date)
        if day is not None and datetime.combine(day, time.min) >= cutoff:
            recent.append(record)
    return recent


def crisis_risk_level(high_severity_count: int, recent_negative_count: int) -> RiskLevel:
    """Coarse risk level from high-severity pain points and the recent negative volume."""
    if high_severity_count > 5 or recent_negative_count > 10:
        return RiskLevel.HIGH
    if high_severity_count > 2 or recent_negative_count > 5:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


# ---------------------------------------------------------------------------
# Topics
# ---------------------------------------------------------------------------

def topic_trends(records: Sequence[FeedbackRecord], limit: int = 8) -> List[TopicTrendEntry]:
    """
    Most mentioned topics with the share of positive feedback for each.

    Neutral feedback carries no positive weight. Ties keep first-seen order.
    """
    mentions: Dict[str, int] = {}
    positives: Dict[str, int] = {}
    for record in records:
        mentions[record.topic] = mentions.get(record.topic, 0) + 1
        if record.sentiment == Sentiment.POSITIVE:
            positives[record.topic] = positives.get(record.topic, 0) + 1

    entries = [
        TopicTrendEntry(
            topic=topic,
            mentions=count,
            sentiment=positives.get(topic, 0) / count,
        )
        for topic, count in mentions.items()
    ]
    entries.sort(key=lambda entry: -entry.mentions)
    return entries[:limit]


def topic_statistics(topics: Sequence[Topic], records: Sequence[FeedbackRecord]) -> List[TopicWithStats]:
    """
    Statistics per topic from the many-to-many topic links carried by *records*.

    Returns topics ordered by feedback count, most discussed first.
    """
    linked: Dict[str, List[FeedbackRecord]] = {topic.id: [] for topic in topics}
    for record in records:
        for topic in record.topics:
            if topic.id in linked:
                linked[topic.id].append(record)

    stats = []
    for topic in topics:
        members = linked[topic.id]
        counts = Counter(record.sentiment for record in members)
        customers = {
            record.customer_id or record.account_id
            for record in members
            if record.customer_id or record.account_id
        }
        total = len(members)
        stats.append(TopicWithStats(
            **topic.model_dump(),
            feedback_count=total,
            unique_customers=len(customers),
            positive_count=counts[Sentiment.POSITIVE.value],
            neutral_count=counts[Sentiment.NEUTRAL.value],
            negative_count=counts[Sentiment.NEGATIVE.value],
            positive_percentage=_round_half_up(counts[Sentiment.POSITIVE.value] / total * 100, 2) if total else 0.0,
        ))
    stats.sort(key=lambda item: -item.feedback_count)
    return stats


# ---------------------------------------------------------------------------
# Segments
# ---------------------------------------------------------------------------

def _segment_color(category: str) -> str:
    index = list(SEGMENT_LABELS).index(category)
    return SEGMENT_COLORS[index % len(SEGMENT_COLORS)]


def segment_distribution(records: Sequence[FeedbackRecord]) -> List[SegmentShare]:
    """
    Percentage share of each customer segment (feedback category).

    Shares are floored so they never sum past 100; zero shares are dropped.
    Colors are fixed per segment.
    """
    if not records:
        return []
    counts = Counter(record.category for record in records)
    total = len(records)

    segments = []
    for category, label in SEGMENT_LABELS.items():
        value = math.floor(counts.get(category, 0) * 100 / total)
        if value > 0:
            segments.append(SegmentShare(segment=label, value=value, color=_segment_color(category)))
    return segments


def segment_performance(records: Sequence[FeedbackRecord]) -> List[SegmentShare]:
    """Resolution rate (status Clear) per segment, as a rounded percentage."""
    totals = Counter(record.category for record in records)
    resolved = Counter(record.category for record in records if record.status == Status.CLEAR)

    return [
        SegmentShare(
            segment=label,
            value=int(_round_half_up(resolved[category] / totals[category] * 100)),
            color=_segment_color(category),
        )
        for category, label in SEGMENT_LABELS.items()
        if totals[category]
    ]


# ---------------------------------------------------------------------------
# Response time, journey, stats
# ---------------------------------------------------------------------------

def average_response_time(
    records: Sequence[FeedbackRecord],
    fallback_hours: float = DEFAULT_RESPONSE_TIME_HOURS,
) -> float:
    """
    Mean hours between occurrence and response.

    The response is assumed to happen at the end of its day. Records with an
    unparseable timestamp or a non-positive delta are excluded. Returns
    *fallback_hours* when no record qualifies.
    """
    deltas = []
    for record in records:
        if not record.date or not record.response_date:
            continue
        start = occurrence_datetime(record)
        end = response_datetime(record)
        if start is None or end is None:
            continue
        hours = (end - start).total_seconds() / 3600
        if hours > 0:
            deltas.append(hours)

    if not deltas:
        return fallback_hours
    return _round_half_up(sum(deltas) / len(deltas), 1)


def journey_metrics(records: Sequence[FeedbackRecord]) -> JourneyMetrics:
    """
    Customer journey funnel.

    Each stage is a subset of the previous one: replied, then replied and
    resolved, then replied, resolved and positive.
    """
    replied = [record for record in records if record.has_reply]
    resolved = [record for record in replied if record.status == Status.CLEAR]
    satisfied = [record for record in resolved if record.sentiment == Sentiment.POSITIVE]
    return JourneyMetrics(
        initial_contact=len(records),
        response_provided=len(replied),
        issue_resolution=len(resolved),
        customer_satisfaction=len(satisfied),
    )


def feedback_stats(records: Sequence[FeedbackRecord]) -> FeedbackStats:
    sentiments = Counter(record.sentiment for record in records)
    return FeedbackStats(
        total=len(records),
        positive=sentiments[Sentiment.POSITIVE.value],
        negative=sentiments[Sentiment.NEGATIVE.value],
        neutral=sentiments[Sentiment.NEUTRAL.value],
        complaints=sum(1 for record in records if record.post_type == PostType.COMPLAINT),
        resolved=sum(1 for record in records if record.status == Status.CLEAR),
        by_category=dict(Counter(record.category for record in records)),
        by_topic=dict(Counter(record.topic for record in records)),
    )
