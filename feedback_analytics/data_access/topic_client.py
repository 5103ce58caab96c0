# feedback_analytics/data_access/topic_client.py
"""
PostgreSQL client for topics and the feedback/topic many-to-many links.
"""

from psycopg2.extras import execute_values
from typing import List, Optional
import logging

from feedback_analytics.data_access.postgres import PostgresClient
from feedback_analytics.models.schemas import FeedbackTopicLink, Topic, TopicWithStats


logger = logging.getLogger(__name__)


class TopicClient(PostgresClient):
    """Client for the topics, customer_feedback_topic and topic_statistics relations."""

    # ------------------------------------------------------------------
    # Topics
    # ------------------------------------------------------------------

    def get_all_topics(self) -> List[Topic]:
        """All topics ordered by name."""
        with self._cursor("list_topics") as cursor:
            cursor.execute("SELECT id::text AS id, name, category, created_at, updated_at FROM topics ORDER BY name ASC")
            return [Topic(**row) for row in cursor.fetchall()]

    def get_topic_by_id(self, topic_id: str) -> Optional[Topic]:
        with self._cursor("get_topic") as cursor:
            cursor.execute(
                "SELECT id::text AS id, name, category, created_at, updated_at FROM topics WHERE id = %s",
                (topic_id,)
            )
            row = cursor.fetchone()
        return Topic(**row) if row else None

    def get_topic_by_name(self, name: str) -> Optional[Topic]:
        with self._cursor("get_topic_by_name") as cursor:
            cursor.execute(
                "SELECT id::text AS id, name, category, created_at, updated_at FROM topics WHERE name = %s",
                (name,)
            )
            row = cursor.fetchone()
        return Topic(**row) if row else None

    def create_topic(self, name: str, category: Optional[str] = None) -> Topic:
        query = """
            INSERT INTO topics (name, category)
            VALUES (%s, %s)
            RETURNING id::text AS id, name, category, created_at, updated_at
        """
        with self._cursor("create_topic", commit=True) as cursor:
            cursor.execute(query, (name, category))
            row = cursor.fetchone()
        logger.info(f"Created topic {name!r}")
        return Topic(**row)

    def update_topic(self, topic_id: str, name: Optional[str] = None, category: Optional[str] = None) -> Optional[Topic]:
        """Update name and/or category. Returns None when the topic does not exist."""
        assignments = []
        params = []
        if name is not None:
            assignments.append("name = %s")
            params.append(name)
        if category is not None:
            assignments.append("category = %s")
            params.append(category)
        if not assignments:
            return self.get_topic_by_id(topic_id)

        query = f"""
            UPDATE topics SET {", ".join(assignments)}, updated_at = NOW()
            WHERE id = %s
            RETURNING id::text AS id, name, category, created_at, updated_at
        """
        params.append(topic_id)
        with self._cursor("update_topic", commit=True) as cursor:
            cursor.execute(query, params)
            row = cursor.fetchone()
        return Topic(**row) if row else None

    def delete_topic(self, topic_id: str) -> None:
        """Delete a topic; its feedback links go with it (ON DELETE CASCADE)."""
        with self._cursor("delete_topic", commit=True) as cursor:
            cursor.execute("DELETE FROM topics WHERE id = %s", (topic_id,))

    def get_or_create_topic(self, name: str, category: Optional[str] = None) -> Topic:
        topic = self.get_topic_by_name(name)
        if topic is None:
            topic = self.create_topic(name, category)
        return topic

    def get_topics_with_stats(self) -> List[TopicWithStats]:
        """Read the pre-aggregated topic_statistics view, most discussed first."""
        query = """
            SELECT topic_id::text AS id, topic_name AS name, category,
                   feedback_count, unique_customers, positive_count,
                   neutral_count, negative_count, positive_percentage
            FROM topic_statistics
            ORDER BY feedback_count DESC
        """
        with self._cursor("topic_statistics") as cursor:
            cursor.execute(query)
            rows = cursor.fetchall()
        return [
            TopicWithStats(**{key: value for key, value in row.items() if value is not None})
            for row in rows
        ]

    # ------------------------------------------------------------------
    # Feedback <-> topic links
    # ------------------------------------------------------------------

    def get_topics_for_feedback(self, feedback_id: str) -> List[Topic]:
        query = """
            SELECT t.id::text AS id, t.name, t.category, t.created_at, t.updated_at
            FROM customer_feedback_topic ft
            JOIN topics t ON t.id = ft.topic_id
            WHERE ft.customer_feedback_id = %s
            ORDER BY t.name ASC
        """
        with self._cursor("topics_for_feedback") as cursor:
            cursor.execute(query, (feedback_id,))
            return [Topic(**row) for row in cursor.fetchall()]

    def get_feedback_ids_for_topic(self, topic_id: str) -> List[str]:
        with self._cursor("feedbacks_for_topic") as cursor:
            cursor.execute(
                "SELECT customer_feedback_id::text AS feedback_id FROM customer_feedback_topic WHERE topic_id = %s",
                (topic_id,)
            )
            return [row["feedback_id"] for row in cursor.fetchall()]

    def assign_topics(self, feedback_id: str, topic_ids: List[str]) -> List[FeedbackTopicLink]:
        """
        Link a feedback record to one or more topics.

        Args:
            feedback_id: Feedback record id
            topic_ids: Topic ids to link

        Returns:
            The created link rows
        """
        if not topic_ids:
            return []
        query = """
            INSERT INTO customer_feedback_topic (customer_feedback_id, topic_id)
            VALUES %s
            RETURNING id::text AS id, customer_feedback_id::text AS customer_feedback_id,
                      topic_id::text AS topic_id, assigned_at
        """
        values = [(feedback_id, topic_id) for topic_id in topic_ids]
        with self._cursor("assign_topics", commit=True) as cursor:
            rows = execute_values(cursor, query, values, fetch=True)
        return [FeedbackTopicLink(**row) for row in rows]

    def remove_topic_from_feedback(self, feedback_id: str, topic_id: str) -> None:
        with self._cursor("remove_topic", commit=True) as cursor:
            cursor.execute(
                "DELETE FROM customer_feedback_topic WHERE customer_feedback_id = %s AND topic_id = %s",
                (feedback_id, topic_id)
            )

    def remove_all_topics_from_feedback(self, feedback_id: str) -> None:
        with self._cursor("remove_all_topics", commit=True) as cursor:
            cursor.execute(
                "DELETE FROM customer_feedback_topic WHERE customer_feedback_id = %s",
                (feedback_id,)
            )

    def replace_topics_for_feedback(self, feedback_id: str, topic_ids: List[str]) -> List[FeedbackTopicLink]:
        """Swap the full topic set of a feedback record in one transaction."""
        query = """
            INSERT INTO customer_feedback_topic (customer_feedback_id, topic_id)
            VALUES %s
            RETURNING id::text AS id, customer_feedback_id::text AS customer_feedback_id,
                      topic_id::text AS topic_id, assigned_at
        """
        with self._cursor("replace_topics", commit=True) as cursor:
            cursor.execute(
                "DELETE FROM customer_feedback_topic WHERE customer_feedback_id = %s",
                (feedback_id,)
            )
            if not topic_ids:
                return []
            rows = execute_values(cursor, query, [(feedback_id, t) for t in topic_ids], fetch=True)
        return [FeedbackTopicLink(**row) for row in rows]

    def bulk_assign_topics(self, assignments: dict) -> int:
        """
        Insert links for many feedback records at once.

        Args:
            assignments: Mapping of feedback id to the topic ids it should gain

        Returns:
            Number of links inserted
        """
        values = [
            (feedback_id, topic_id)
            for feedback_id, topic_ids in assignments.items()
            for topic_id in topic_ids
        ]
        if not values:
            return 0
        query = "INSERT INTO customer_feedback_topic (customer_feedback_id, topic_id) VALUES %s"
        with self._cursor("bulk_assign", commit=True) as cursor:
            execute_values(cursor, query, values)
        logger.info(f"Bulk assigned {len(values)} topic links")
        return len(values)
