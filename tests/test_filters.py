"""Unit tests for in-memory filter evaluation."""
from datetime import date

from feedback_analytics.analytics.filters import apply_filters, matches
from feedback_analytics.models.schemas import FeedbackRecord, FilterSpec


def _records():
    return [
        FeedbackRecord(feedback_id="1", message="Layar berkedip", sentiment="Negative",
                       topic="Technical", category="Im", status="Pending", date="2025-03-10",
                       product="Galaxy S22"),
        FeedbackRecord(feedback_id="2", message="Kamera bagus", sentiment="Positive",
                       topic="Product Info", category="General", status="Clear", date="12-Mar-2025",
                       account_id="Nadia"),
        FeedbackRecord(feedback_id="3", message="Harga?", sentiment="Neutral",
                       topic="Pricing", category="General", status="Clear", date="not a date",
                       details="Availability"),
    ]


class TestApplyFilters:
    """Test apply_filters."""

    def test_empty_filter_is_identity(self):
        records = _records()

        result = apply_filters(records, FilterSpec())

        assert result == records
        assert result is not records
        assert apply_filters(records, None) == records

    def test_all_is_no_constraint(self):
        records = _records()
        assert apply_filters(records, FilterSpec(sentiment="all", topic="all")) == records

    def test_exact_match_is_case_insensitive(self):
        result = apply_filters(_records(), FilterSpec(sentiment="negative"))
        assert [r.feedback_id for r in result] == ["1"]

    def test_dimensions_are_anded(self):
        result = apply_filters(_records(), FilterSpec(category="General", status="Clear", topic="Pricing"))
        assert [r.feedback_id for r in result] == ["3"]

    def test_search_covers_text_fields(self):
        assert [r.feedback_id for r in apply_filters(_records(), FilterSpec(search_term="GALAXY"))] == ["1"]
        assert [r.feedback_id for r in apply_filters(_records(), FilterSpec(search_term="nadia"))] == ["2"]
        assert [r.feedback_id for r in apply_filters(_records(), FilterSpec(search_term="availab"))] == ["3"]

    def test_date_range_is_inclusive(self):
        filters = FilterSpec(date_from=date(2025, 3, 10), date_to=date(2025, 3, 12))
        assert [r.feedback_id for r in apply_filters(_records(), filters)] == ["1", "2"]

    def test_unparseable_date_fails_active_range(self):
        record = _records()[2]
        assert not matches(record, FilterSpec(date_from=date(2000, 1, 1)))
        assert matches(record, FilterSpec())

    def test_preserves_order_without_duplicates(self):
        records = _records()
        result = apply_filters(records, FilterSpec(search_term="a"))
        ids = [r.feedback_id for r in result]
        assert ids == sorted(set(ids), key=ids.index)
        assert ids == [r.feedback_id for r in records if r in result]
