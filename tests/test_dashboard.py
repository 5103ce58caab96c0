"""Tests for the dashboard pipeline."""
import pytest
import pandas as pd
from datetime import datetime
from unittest.mock import Mock

from feedback_analytics.config.settings import Settings
from feedback_analytics.data_access.topic_client import TopicClient
from feedback_analytics.exceptions import StoreError
from feedback_analytics.models.schemas import FeedbackQueryResult, FeedbackRecord, FilterSpec, Topic
from feedback_analytics.pipelines.dashboard import DashboardPipeline, export_pain_points
from feedback_analytics.pipelines.fallback import FeedbackRepository


NOW = datetime(2025, 3, 14, 9, 0)


@pytest.fixture
def mock_config():
    """Create a mock configuration with default analytics settings."""
    config = Mock(spec=Settings)
    config.is_store_configured = False
    config.max_workers = 2
    config.hardware_keywords = ["lcd", "screen", "display"]
    config.recent_window_days = 7
    config.topic_trend_limit = 8
    config.alert_limit = 3
    config.sentiment_trend_days = 30
    config.response_time_fallback_hours = 24.0
    return config


class TestDashboardOnSampleData:
    """Dashboard computed from the sample set when no store is configured."""

    def test_metrics(self, mock_config):
        pipeline = DashboardPipeline(mock_config, repository=FeedbackRepository(mock_config))

        metrics = pipeline.run(now=NOW)

        assert metrics.is_using_fallback is True
        assert metrics.errors == ["Database is not configured. Using sample data."]
        assert metrics.total_feedbacks == 12
        assert metrics.overall_sentiment_score == 5.0
        assert metrics.active_pain_points.total == 6
        assert metrics.active_pain_points.high == 5
        assert metrics.active_pain_points.medium == 1
        assert metrics.crisis_risk_level == "MEDIUM"
        assert metrics.pain_points[0].category == "Hardware Issues"
        assert metrics.pain_points[0].issues == 2
        assert metrics.pain_points[-1].category == "Service Center"
        assert [a.title for a in metrics.alerts] == ["Technical Concerns", "Customer Feedback Monitoring"]
        assert metrics.journey.initial_contact == 12
        assert metrics.journey.response_provided == 11
        assert metrics.journey.issue_resolution == 10
        assert metrics.journey.customer_satisfaction == 3
        assert sum(s.value for s in metrics.customer_segments) <= 100
        assert metrics.topic_statistics == []
        assert metrics.generated_at == NOW

    def test_filter_applies_to_every_metric(self, mock_config):
        pipeline = DashboardPipeline(mock_config, repository=FeedbackRepository(mock_config))

        metrics = pipeline.run(FilterSpec(sentiment="Positive"), now=NOW)

        assert metrics.total_feedbacks == 3
        assert metrics.overall_sentiment_score == 10.0
        assert metrics.pain_points == []
        assert metrics.alerts == []
        assert metrics.crisis_risk_level == "LOW"


class TestDashboardOnLiveData:
    """Dashboard fan-out against mocked store collaborators."""

    def _repository(self, records, count):
        repository = Mock(spec=FeedbackRepository)
        repository.is_live = True
        repository.fetch_feedbacks.return_value = FeedbackQueryResult(data=records)
        repository.count_feedbacks.return_value = count
        return repository

    def test_uses_exact_count_and_topic_statistics(self, mock_config):
        battery = Topic(id="t1", name="Battery")
        records = [
            FeedbackRecord(feedback_id="1", sentiment="Positive", account_id="A", topics=[battery]),
            FeedbackRecord(feedback_id="2", sentiment="Negative", account_id="B", topics=[battery]),
        ]
        repository = self._repository(records, 120)
        topic_client = Mock(spec=TopicClient)
        topic_client.get_all_topics.return_value = [battery]

        metrics = DashboardPipeline(mock_config, repository, topic_client).run(now=NOW)

        assert metrics.total_feedbacks == 120
        assert metrics.is_using_fallback is False
        assert metrics.errors == []
        assert metrics.topic_statistics[0].feedback_count == 2
        assert metrics.topic_statistics[0].positive_percentage == 50.0
        repository.fetch_feedbacks.assert_called_once_with(None, include_topics=True)

    def test_failed_fetch_is_reported_not_raised(self, mock_config):
        repository = self._repository([FeedbackRecord(sentiment="Positive")], 1)
        topic_client = Mock(spec=TopicClient)
        topic_client.get_all_topics.side_effect = StoreError("permission denied for table topics")

        metrics = DashboardPipeline(mock_config, repository, topic_client).run(now=NOW)

        assert metrics.errors == ["Could not load topics: permission denied for table topics"]
        assert metrics.topic_statistics == []
        assert metrics.overall_sentiment_score == 10.0


class TestExport:
    """Test CSV export of pain points."""

    def test_export_pain_points(self, mock_config, tmp_path):
        metrics = DashboardPipeline(mock_config, repository=FeedbackRepository(mock_config)).run(now=NOW)
        path = tmp_path / "pain_points.csv"

        written = export_pain_points(metrics, str(path))

        df = pd.read_csv(path)
        assert written == len(metrics.pain_points)
        assert list(df.columns) == ["category", "issues", "severity", "feedback_ids", "examples"]
        assert df.iloc[0]["category"] == "Hardware Issues"
