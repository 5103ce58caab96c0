# feedback_analytics/pipelines/dashboard.py
"""
Dashboard pipeline: fetch one feedback snapshot and derive every dashboard metric from it.
Can be run from the command line to print a report or export pain points to CSV.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Dict, List, Optional
from datetime import datetime
import logging
import argparse

import pandas as pd

from feedback_analytics.analytics.aggregations import (
    average_response_time,
    crisis_risk_level,
    detect_pain_points,
    journey_metrics,
    recent_pain_points,
    segment_distribution,
    segment_performance,
    sentiment_distribution,
    sentiment_score,
    sentiment_trend,
    summarize_pain_points,
    topic_statistics,
    topic_trends,
)
from feedback_analytics.analytics.alerts import generate_alerts
from feedback_analytics.config.settings import Settings
from feedback_analytics.data_access.topic_client import TopicClient
from feedback_analytics.models.schemas import DashboardMetrics, FeedbackQueryResult, FilterSpec, Topic
from feedback_analytics.pipelines.fallback import FeedbackRepository


logger = logging.getLogger(__name__)


class DashboardPipeline:
    """Computes DashboardMetrics from the feedback store, or the sample set when it is unavailable."""

    def __init__(
        self,
        config: Settings,
        repository: Optional[FeedbackRepository] = None,
        topic_client: Optional[TopicClient] = None
    ):
        """
        Initialize the dashboard pipeline.

        Args:
            config: Application settings
            repository: Feedback repository; built from *config* when omitted
            topic_client: Topic store client; built from *config* when omitted and the store is configured
        """
        self.config = config
        self.repository = repository or FeedbackRepository(config)
        self.topic_client = topic_client
        if self.topic_client is None and config.is_store_configured:
            self.topic_client = TopicClient(config)

    def _fetch_snapshot(self, filters: Optional[FilterSpec]) -> Dict[str, object]:
        """Run the independent store reads concurrently and collect their results."""
        tasks: Dict[str, Callable[[], object]] = {
            "feedbacks": lambda: self.repository.fetch_feedbacks(filters, include_topics=True),
            "count": lambda: self.repository.count_feedbacks(filters),
        }
        if self.topic_client is not None and self.repository.is_live:
            tasks["topics"] = self.topic_client.get_all_topics

        results: Dict[str, object] = {}
        errors: List[str] = []

        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            future_to_name = {executor.submit(task): name for name, task in tasks.items()}

            for future in as_completed(future_to_name):
                name = future_to_name[future]
                try:
                    results[name] = future.result()
                except Exception as e:
                    logger.warning(f"Dashboard fetch '{name}' failed: {e}")
                    errors.append(f"Could not load {name}: {e}")

        results["errors"] = errors
        return results

    def run(self, filters: Optional[FilterSpec] = None, now: Optional[datetime] = None) -> DashboardMetrics:
        """
        Build the dashboard for one filter.

        Args:
            filters: Optional filter applied to the feedback snapshot
            now: Reference time for the recent window (defaults to the current time)

        Returns:
            DashboardMetrics computed from a single snapshot of records
        """
        now = now or datetime.now()
        snapshot = self._fetch_snapshot(filters)
        errors: List[str] = list(snapshot["errors"])

        feedback_result = snapshot.get("feedbacks") or FeedbackQueryResult()
        records = feedback_result.data
        if feedback_result.error:
            errors.insert(0, feedback_result.error)

        count = snapshot.get("count")
        total = count if count is not None and not feedback_result.is_using_fallback else len(records)

        topics: List[Topic] = snapshot.get("topics") or []
        keywords = self.config.hardware_keywords
        window = self.config.recent_window_days

        summary = summarize_pain_points(records, keywords)
        recent = recent_pain_points(records, now=now, window_days=window)

        logger.info(
            f"Computing dashboard over {len(records)} records "
            f"({'sample data' if feedback_result.is_using_fallback else 'live data'})"
        )

        return DashboardMetrics(
            overall_sentiment_score=sentiment_score(records),
            active_pain_points=summary,
            crisis_risk_level=crisis_risk_level(summary.high, len(recent)),
            average_response_time=average_response_time(records, self.config.response_time_fallback_hours),
            total_feedbacks=total,
            pain_points=detect_pain_points(records, keywords),
            topic_trends=topic_trends(records, limit=self.config.topic_trend_limit),
            customer_segments=segment_distribution(records),
            segment_performance=segment_performance(records),
            journey=journey_metrics(records),
            sentiment_trend=sentiment_trend(records, days=self.config.sentiment_trend_days),
            sentiment_distribution=sentiment_distribution(records),
            alerts=generate_alerts(records, now=now, window_days=window, limit=self.config.alert_limit),
            topic_statistics=topic_statistics(topics, records),
            is_using_fallback=feedback_result.is_using_fallback,
            errors=errors,
            generated_at=now,
        )

    def close(self) -> None:
        self.repository.close()
        if self.topic_client is not None:
            self.topic_client.close()


def export_pain_points(metrics: DashboardMetrics, path: str) -> int:
    """
    Write the pain-point buckets of *metrics* to a CSV file.

    Returns:
        Number of rows written
    """
    rows = [
        {
            "category": bucket.category,
            "issues": bucket.issues,
            "severity": bucket.severity,
            "feedback_ids": ";".join(bucket.feedback_ids),
            "examples": " | ".join(bucket.examples),
        }
        for bucket in metrics.pain_points
    ]
    df = pd.DataFrame(rows, columns=["category", "issues", "severity", "feedback_ids", "examples"])
    df.to_csv(path, index=False)
    logger.info(f"Exported {len(df)} pain point rows to {path}")
    return len(df)


def main():
    """Main entry point for printing the dashboard report with CLI arguments."""
    config = Settings()

    # Configure logging
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # Parse command-line arguments
    parser = argparse.ArgumentParser(
        description='Compute customer feedback dashboard metrics for an optional filter.'
    )
    parser.add_argument('--sentiment', type=str, help='Positive, Neutral or Negative')
    parser.add_argument('--topic', type=str, help='Legacy topic, e.g. "Technical"')
    parser.add_argument('--category', type=str, help='Im, General, Ctv or Da')
    parser.add_argument('--status', type=str, help='Clear or Pending')
    parser.add_argument('--search', type=str, help='Case-insensitive search over message, account, product, reply and details')
    parser.add_argument(
        '--start-date',
        type=str,
        help='Earliest feedback date in YYYY-MM-DD format'
    )
    parser.add_argument(
        '--end-date',
        type=str,
        help='Latest feedback date in YYYY-MM-DD format'
    )
    parser.add_argument('--export', type=str, help='Write the pain-point table to this CSV file')

    args = parser.parse_args()

    # Parse dates if provided
    date_from = None
    date_to = None

    if args.start_date:
        try:
            date_from = datetime.strptime(args.start_date, '%Y-%m-%d').date()
        except ValueError:
            parser.error(f"Invalid start date format: {args.start_date}. Use YYYY-MM-DD")

    if args.end_date:
        try:
            date_to = datetime.strptime(args.end_date, '%Y-%m-%d').date()
        except ValueError:
            parser.error(f"Invalid end date format: {args.end_date}. Use YYYY-MM-DD")

    if date_from and date_to and date_from > date_to:
        parser.error("--start-date must not be after --end-date")

    filters = FilterSpec(
        sentiment=args.sentiment,
        topic=args.topic,
        category=args.category,
        status=args.status,
        search_term=args.search,
        date_from=date_from,
        date_to=date_to,
    )

    pipeline = DashboardPipeline(config)
    try:
        metrics = pipeline.run(filters)
    finally:
        pipeline.close()

    # Print results
    print("\n" + "="*60)
    print("CUSTOMER FEEDBACK DASHBOARD")
    print("="*60)
    if metrics.is_using_fallback:
        print("Data source: sample data")
    for error in metrics.errors:
        print(f"Warning: {error}")
    print(f"Total feedback: {metrics.total_feedbacks}")
    print(f"Overall sentiment score: {metrics.overall_sentiment_score}/10")
    print(f"Average response time: {metrics.average_response_time}h")
    print(f"Crisis risk level: {metrics.crisis_risk_level}")
    summary = metrics.active_pain_points
    print(f"Active pain points: {summary.total} (high {summary.high}, medium {summary.medium}, low {summary.low})")
    print("-"*60)
    for bucket in metrics.pain_points:
        print(f"  [{bucket.severity:<6}] {bucket.category}: {bucket.issues}")
    print("-"*60)
    for trend in metrics.topic_trends:
        print(f"  {trend.topic}: {trend.mentions} mentions, {trend.sentiment:.0%} positive")
    print("-"*60)
    for alert in metrics.alerts:
        print(f"  ALERT ({alert.severity}) {alert.title}: {alert.description}")
    print("="*60)

    if args.export:
        written = export_pain_points(metrics, args.export)
        print(f"Exported {written} pain point rows to {args.export}")


if __name__ == "__main__":
    main()
