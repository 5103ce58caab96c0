# feedback_analytics/data_access/feedback_client.py
"""
PostgreSQL client for the customer_feedbacks table.
"""

from typing import Any, Dict, List, Optional, Tuple
import logging

from feedback_analytics.data_access.postgres import PostgresClient
from feedback_analytics.analytics.normalizer import (
    normalize_record,
    normalize_records,
    to_store_row,
    validate_feedback_input,
)
from feedback_analytics.models.schemas import FeedbackRecord, FilterSpec


logger = logging.getLogger(__name__)

FEEDBACK_TABLE = "customer_feedbacks"

# canonical field -> store column
COLUMNS = {
    "feedback_id": "id",
    "link": "link",
    "message": "post_copy",
    "date": "date",
    "time": "time",
    "response_date": "date_responses",
    "account_id": "account_id",
    "customer_id": "customer_id",
    "category": "category",
    "post_type": "type_of_post",
    "topic": "topic",
    "product": "product",
    "sentiment": "sentiment",
    "source": "source",
    "reply": "reply",
    "status": "status",
    "details": "details",
}

SEARCH_COLUMNS = ("post_copy", "account_id", "product", "reply", "details")

SELECT_WITH_TOPICS = f"""
    SELECT f.*,
           COALESCE(
               json_agg(json_build_object('id', t.id::text, 'name', t.name, 'category', t.category))
                   FILTER (WHERE t.id IS NOT NULL),
               '[]'
           ) AS topics
    FROM {FEEDBACK_TABLE} f
    LEFT JOIN customer_feedback_topic ft ON ft.customer_feedback_id = f.id
    LEFT JOIN topics t ON t.id = ft.topic_id
"""


def build_filter_clause(filters: Optional[FilterSpec], alias: str = "f") -> Tuple[str, List[Any]]:
    """
    Translate a FilterSpec into a SQL WHERE fragment and its parameters.

    Returns:
        (" AND ..." fragment, params); empty fragment for an empty filter
    """
    if filters is None or filters.is_empty:
        return "", []

    clause = ""
    params: List[Any] = []

    for field, column in (("sentiment", "sentiment"), ("topic", "topic"),
                          ("category", "category"), ("status", "status")):
        value = filters.active(getattr(filters, field))
        if value is not None:
            clause += f" AND LOWER({alias}.{column}) = LOWER(%s)"
            params.append(value)

    if filters.date_from:
        clause += f" AND {alias}.date >= %s"
        params.append(filters.date_from)

    if filters.date_to:
        clause += f" AND {alias}.date <= %s"
        params.append(filters.date_to)

    term = (filters.search_term or "").strip()
    if term:
        pattern = f"%{term}%"
        ors = " OR ".join(f"{alias}.{column} ILIKE %s" for column in SEARCH_COLUMNS)
        clause += f" AND ({ors})"
        params.extend([pattern] * len(SEARCH_COLUMNS))

    return clause, params


class FeedbackClient(PostgresClient):
    """PostgreSQL client for customer feedback records."""

    def fetch_feedbacks(
        self,
        filters: Optional[FilterSpec] = None,
        include_topics: bool = False,
        limit: Optional[int] = None
    ) -> List[FeedbackRecord]:
        """
        Retrieve feedback records, newest first.

        Args:
            filters: Optional filter applied at the query boundary
            include_topics: Also load many-to-many topics for each record
            limit: Maximum number of records to return

        Returns:
            List of normalized FeedbackRecord objects
        """
        clause, params = build_filter_clause(filters)

        if include_topics:
            query = SELECT_WITH_TOPICS + " WHERE 1=1" + clause + " GROUP BY f.id"
        else:
            query = f"SELECT f.* FROM {FEEDBACK_TABLE} f WHERE 1=1" + clause

        query += " ORDER BY f.date DESC"

        if limit:
            query += " LIMIT %s"
            params.append(limit)

        with self._cursor("fetch") as cursor:
            cursor.execute(query, params)
            rows = cursor.fetchall()

        logger.info(f"Fetched {len(rows)} feedback rows")
        return normalize_records(rows)

    def get_feedback_by_id(self, feedback_id: str) -> Optional[FeedbackRecord]:
        """Retrieve one feedback record, or None when it does not exist."""
        query = SELECT_WITH_TOPICS + " WHERE f.id = %s GROUP BY f.id"

        with self._cursor("get") as cursor:
            cursor.execute(query, (feedback_id,))
            row = cursor.fetchone()

        return normalize_record(row) if row else None

    def count_feedbacks(self, filters: Optional[FilterSpec] = None) -> int:
        """Exact number of rows matching *filters*."""
        clause, params = build_filter_clause(filters)
        query = f"SELECT COUNT(*) AS total FROM {FEEDBACK_TABLE} f WHERE 1=1" + clause

        with self._cursor("count") as cursor:
            cursor.execute(query, params)
            row = cursor.fetchone()

        return int(row["total"]) if row else 0

    def insert_feedback(self, record: FeedbackRecord) -> FeedbackRecord:
        """
        Insert a feedback record; the store generates its id.

        Returns:
            The stored record as read back from the database
        """
        row = to_store_row(record, include_id=False)
        columns = list(row)
        placeholders = ", ".join(["%s"] * len(columns))
        query = f"""
            INSERT INTO {FEEDBACK_TABLE} ({", ".join(columns)})
            VALUES ({placeholders})
            RETURNING *
        """

        with self._cursor("insert", commit=True) as cursor:
            cursor.execute(query, [row[column] for column in columns])
            stored = cursor.fetchone()

        logger.info(f"Inserted feedback {stored['id'] if stored else '?'}")
        return normalize_record(stored or {})

    def update_feedback(self, feedback_id: str, updates: Dict[str, Any]) -> Optional[FeedbackRecord]:
        """
        Update selected fields of a feedback record.

        Args:
            feedback_id: Record to update
            updates: Canonical field names (e.g. "message", "status") to new values

        Returns:
            The updated record, or None if no row has that id

        Raises:
            FeedbackValidationError: If an enumerated field has an unknown value
        """
        updates = validate_feedback_input(updates)
        assignments = {
            COLUMNS[field]: value for field, value in updates.items()
            if field in COLUMNS and field != "feedback_id"
        }
        if not assignments:
            return self.get_feedback_by_id(feedback_id)

        set_clause = ", ".join(f"{column} = %s" for column in assignments)
        query = f"""
            UPDATE {FEEDBACK_TABLE}
            SET {set_clause}, updated_at = NOW()
            WHERE id = %s
            RETURNING *
        """
        params = [getattr(value, "value", value) for value in assignments.values()] + [feedback_id]

        with self._cursor("update", commit=True) as cursor:
            cursor.execute(query, params)
            stored = cursor.fetchone()

        return normalize_record(stored) if stored else None

    def delete_feedback(self, feedback_id: str) -> bool:
        """Delete a feedback record. Returns True when a row was removed."""
        query = f"DELETE FROM {FEEDBACK_TABLE} WHERE id = %s"

        with self._cursor("delete", commit=True) as cursor:
            cursor.execute(query, (feedback_id,))
            deleted = cursor.rowcount

        return deleted > 0
