# feedback_analytics/pipelines/fallback.py
"""
Fallback coordinator: every feedback read and write goes through here.

Reads degrade to the static sample set when the store is unconfigured, fails
or returns nothing; the caller always gets a tri-state result and never an
exception.
"""

from typing import Any, Dict, Mapping, Optional, Union
import logging

from feedback_analytics.analytics.aggregations import feedback_stats
from feedback_analytics.analytics.filters import apply_filters
from feedback_analytics.analytics.normalizer import normalize_record, validate_feedback_input
from feedback_analytics.config.settings import Settings
from feedback_analytics.data_access.feedback_client import FeedbackClient
from feedback_analytics.data_access.sample_data import find_sample_feedback, get_sample_feedbacks
from feedback_analytics.exceptions import FeedbackValidationError, StoreError
from feedback_analytics.models.schemas import (
    DeleteResult,
    FeedbackLookupResult,
    FeedbackQueryResult,
    FeedbackRecord,
    FilterSpec,
    MutationResult,
    StatsResult,
)


logger = logging.getLogger(__name__)

NOT_CONFIGURED_MESSAGE = "Database is not configured. Using sample data."
EMPTY_STORE_MESSAGE = "No feedback data available. Using sample data."
CONNECTION_FAILED_MESSAGE = "Failed to connect to database. Using sample data."
NOT_FOUND_MESSAGE = "Feedback not found"
STORE_UNAVAILABLE_MESSAGE = "Database is not configured"


class FeedbackRepository:
    """Feedback access with sample-data fallback."""

    def __init__(self, config: Settings, feedback_client: Optional[FeedbackClient] = None):
        """
        Initialize the repository.

        Args:
            config: Application settings
            feedback_client: Store client; built from *config* when omitted
        """
        self.config = config
        self.store_configured = config.is_store_configured
        self.feedback_client = feedback_client
        if self.feedback_client is None and self.store_configured:
            self.feedback_client = FeedbackClient(config)
        if not self.store_configured:
            logger.warning("Feedback store credentials missing; serving sample data")

    @property
    def is_live(self) -> bool:
        return self.store_configured and self.feedback_client is not None

    def _fallback(self, filters: Optional[FilterSpec], reason: str) -> FeedbackQueryResult:
        return FeedbackQueryResult(
            data=apply_filters(get_sample_feedbacks(), filters),
            error=reason,
            is_using_fallback=True,
        )

    def fetch_feedbacks(
        self,
        filters: Optional[FilterSpec] = None,
        include_topics: bool = False
    ) -> FeedbackQueryResult:
        """
        Fetch feedback records, falling back to the sample set.

        Args:
            filters: Optional filter, applied in the query for live data and
                in memory for the sample set
            include_topics: Load many-to-many topics for live records

        Returns:
            FeedbackQueryResult; is_using_fallback tells live data from sample data
        """
        if not self.is_live:
            return self._fallback(filters, NOT_CONFIGURED_MESSAGE)

        try:
            records = self.feedback_client.fetch_feedbacks(filters, include_topics=include_topics)
        except StoreError as e:
            logger.warning(f"Feedback store query failed, using sample data: {e}")
            return self._fallback(filters, f"Using sample data: {e}")
        except Exception as e:
            logger.error(f"Unexpected error fetching feedback: {e}", exc_info=True)
            return self._fallback(filters, CONNECTION_FAILED_MESSAGE)

        if not records:
            logger.info("Feedback store returned no rows, using sample data")
            return self._fallback(filters, EMPTY_STORE_MESSAGE)

        return FeedbackQueryResult(data=records)

    def count_feedbacks(self, filters: Optional[FilterSpec] = None) -> Optional[int]:
        """Exact row count from the store, or None when it cannot be obtained."""
        if not self.is_live:
            return None
        try:
            return self.feedback_client.count_feedbacks(filters)
        except Exception as e:
            logger.warning(f"Could not count feedback rows: {e}")
            return None

    def get_feedback(self, feedback_id: str) -> FeedbackLookupResult:
        """Look up one record; the sample set answers when the store cannot."""
        if self.is_live:
            try:
                record = self.feedback_client.get_feedback_by_id(feedback_id)
                if record is not None:
                    return FeedbackLookupResult(data=record)
            except Exception as e:
                logger.warning(f"Feedback lookup {feedback_id} failed, checking sample data: {e}")

        record = find_sample_feedback(feedback_id)
        return FeedbackLookupResult(data=record, error=None if record else NOT_FOUND_MESSAGE)

    def create_feedback(self, feedback: Union[FeedbackRecord, Mapping[str, Any]]) -> MutationResult:
        """Insert a record; invalid input and store failures come back as the error string."""
        if not isinstance(feedback, FeedbackRecord):
            try:
                feedback = validate_feedback_input(feedback)
            except FeedbackValidationError as e:
                logger.info(f"Rejected feedback payload: {e}")
                return MutationResult(error=str(e))
        if not self.is_live:
            return MutationResult(error=STORE_UNAVAILABLE_MESSAGE)
        record = normalize_record(feedback)
        try:
            return MutationResult(data=self.feedback_client.insert_feedback(record))
        except StoreError as e:
            logger.error(f"Error creating feedback: {e}")
            return MutationResult(error=str(e))
        except Exception as e:
            logger.error(f"Unexpected error creating feedback: {e}", exc_info=True)
            return MutationResult(error=str(e) or "Unknown error occurred")

    def update_feedback(self, feedback_id: str, updates: Dict[str, Any]) -> MutationResult:
        try:
            updates = validate_feedback_input(updates)
        except FeedbackValidationError as e:
            logger.info(f"Rejected update for feedback {feedback_id}: {e}")
            return MutationResult(error=str(e))
        if not self.is_live:
            return MutationResult(error=STORE_UNAVAILABLE_MESSAGE)
        try:
            record = self.feedback_client.update_feedback(feedback_id, updates)
        except StoreError as e:
            return MutationResult(error=str(e))
        except Exception as e:
            logger.error(f"Unexpected error updating feedback {feedback_id}: {e}", exc_info=True)
            return MutationResult(error="Failed to update customer feedback")
        if record is None:
            return MutationResult(error=NOT_FOUND_MESSAGE)
        return MutationResult(data=record)

    def delete_feedback(self, feedback_id: str) -> DeleteResult:
        if not self.is_live:
            return DeleteResult(success=False, error=STORE_UNAVAILABLE_MESSAGE)
        try:
            deleted = self.feedback_client.delete_feedback(feedback_id)
        except StoreError as e:
            return DeleteResult(success=False, error=str(e))
        except Exception as e:
            logger.error(f"Unexpected error deleting feedback {feedback_id}: {e}", exc_info=True)
            return DeleteResult(success=False, error="Failed to delete customer feedback")
        if not deleted:
            return DeleteResult(success=False, error=NOT_FOUND_MESSAGE)
        return DeleteResult(success=True)

    def get_stats(self) -> StatsResult:
        """Totals over every record, live or sample."""
        result = self.fetch_feedbacks()
        return StatsResult(
            data=feedback_stats(result.data),
            error=result.error,
            is_using_fallback=result.is_using_fallback,
        )

    def close(self) -> None:
        if self.feedback_client is not None:
            self.feedback_client.close()
