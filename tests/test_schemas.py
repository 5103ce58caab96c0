"""Unit tests for data schemas."""
import pytest
from datetime import date
from pydantic import ValidationError

from feedback_analytics.models.schemas import (
    FeedbackRecord,
    FilterSpec,
    PainPointBucket,
    Severity,
    TopicTrendEntry,
    TopicWithStats,
)


class TestFeedbackRecord:
    """Test FeedbackRecord schema."""

    def test_feedback_record_defaults(self):
        """Sentiment, status and legacy topic are always present."""
        record = FeedbackRecord(feedback_id="fb-1", message="Halo")
        assert record.sentiment == "Neutral"
        assert record.status == "Pending"
        assert record.topic == "Product Info"
        assert record.category == "General"
        assert record.post_type == "Others"
        assert record.source == "DM Facebook"
        assert record.reply == ""
        assert record.topics == []

    def test_enum_values_are_stored_as_strings(self):
        record = FeedbackRecord(sentiment="Negative", post_type="Complaint", status="Clear")
        assert record.sentiment == "Negative"
        assert isinstance(record.sentiment, str)
        assert record.model_dump()["post_type"] == "Complaint"

    def test_unknown_enum_value_rejected(self):
        with pytest.raises(ValidationError):
            FeedbackRecord(topic="Weather")

    def test_pain_point_flags(self):
        complaint = FeedbackRecord(post_type="Complaint", sentiment="Positive")
        negative = FeedbackRecord(post_type="Queries", sentiment="Negative")
        neutral_query = FeedbackRecord(post_type="Queries", sentiment="Neutral")

        assert complaint.is_pain_point
        assert negative.is_pain_point
        assert not neutral_query.is_pain_point

    def test_has_reply_ignores_whitespace(self):
        assert not FeedbackRecord(reply="   ").has_reply
        assert FeedbackRecord(reply="Terima kasih").has_reply


class TestFilterSpec:
    """Test FilterSpec schema."""

    def test_empty_filter(self):
        assert FilterSpec().is_empty

    def test_all_means_no_constraint(self):
        filters = FilterSpec(sentiment="all", topic="ALL", category=" ", search_term="  ")
        assert filters.is_empty
        assert filters.active(filters.sentiment) is None

    def test_active_dimension(self):
        filters = FilterSpec(sentiment="Negative")
        assert not filters.is_empty
        assert filters.active(filters.sentiment) == "Negative"

    def test_date_bounds_make_filter_active(self):
        assert not FilterSpec(date_from=date(2025, 3, 1)).is_empty


class TestAggregateTypes:
    """Test aggregate result types."""

    def test_pain_point_bucket_severity_value(self):
        bucket = PainPointBucket(category="Hardware Issues", issues=2, severity=Severity.HIGH)
        assert bucket.severity == "high"
        assert bucket.examples == []

    def test_topic_trend_sentiment_bounds(self):
        with pytest.raises(ValidationError):
            TopicTrendEntry(topic="Technical", mentions=1, sentiment=1.5)

    def test_topic_with_stats_defaults(self):
        stats = TopicWithStats(id="t1", name="Battery")
        assert stats.feedback_count == 0
        assert stats.positive_percentage == 0.0
