"""Alert synthesis from recent complaint and negative feedback."""

from typing import Dict, Iterable, List, Optional, Sequence
from datetime import datetime
import logging

from feedback_analytics.analytics.aggregations import recent_pain_points
from feedback_analytics.models.schemas import FeedbackRecord, LegacyTopic, PainPointAlert, Severity


logger = logging.getLogger(__name__)

ALERT_THRESHOLD = 3
HIGH_SEVERITY_THRESHOLD = 5
GENERAL_INFO_TOPICS = (LegacyTopic.PRODUCT_INFO.value,)

ICONS = {
    Severity.HIGH: "XCircle",
    Severity.MEDIUM: "AlertTriangle",
    Severity.LOW: "AlertCircle",
}


def _count_by(values: Iterable[str]) -> Dict[str, int]:
    # insertion order follows first occurrence
    counts: Dict[str, int] = {}
    for value in values:
        counts[value] = counts.get(value, 0) + 1
    return counts


def _severity_for(count: int) -> Severity:
    return Severity.HIGH if count >= HIGH_SEVERITY_THRESHOLD else Severity.MEDIUM


def generate_alerts(
    records: Sequence[FeedbackRecord],
    now: Optional[datetime] = None,
    window_days: int = 7,
    limit: int = 3,
    excluded_topics: Iterable[str] = GENERAL_INFO_TOPICS,
) -> List[PainPointAlert]:
    """
    Build pain-point alerts from the last *window_days* of feedback.

    Product alerts come first, then topic alerts, then a single monitoring
    alert when any recent complaint or negative feedback exists. Only the
    first *limit* alerts are returned.

    Args:
        records: Feedback records; only recent complaint/negative ones are considered
        now: Reference time for the window (defaults to the current time)
        window_days: Size of the recent window in days
        limit: Maximum number of alerts returned
        excluded_topics: Topics too generic to raise a topic alert

    Returns:
        List of PainPointAlert
    """
    recent = recent_pain_points(records, now=now, window_days=window_days)
    excluded = set(excluded_topics)

    alerts: List[PainPointAlert] = []

    for product, count in _count_by(r.product for r in recent if r.product).items():
        if count >= ALERT_THRESHOLD:
            severity = _severity_for(count)
            alerts.append(PainPointAlert(
                title=f"{product} Issues",
                description=f"Multiple reports of issues with {product}",
                source="From customer feedback",
                severity=severity,
                icon=ICONS[severity],
            ))

    for topic, count in _count_by(r.topic for r in recent).items():
        if count >= ALERT_THRESHOLD and topic not in excluded:
            severity = _severity_for(count)
            alerts.append(PainPointAlert(
                title=f"{topic} Concerns",
                description=f"Increased {topic.lower()} related issues",
                source="Multiple customer complaints",
                severity=severity,
                icon=ICONS[severity],
            ))

    if recent:
        alerts.append(PainPointAlert(
            title="Customer Feedback Monitoring",
            description=f"{len(recent)} negative feedback items in the last {window_days} days",
            source="Ongoing monitoring",
            severity=Severity.LOW,
            icon=ICONS[Severity.LOW],
        ))

    logger.debug(f"Generated {len(alerts)} alerts from {len(recent)} recent pain points")
    return alerts[:limit]
