"""
FastAPI application exposing feedback queries, the dashboard and auth routes.

Run with: uvicorn feedback_analytics.api.app:create_app --factory
"""
from datetime import date
from typing import Any, Dict, List, Optional
import logging

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError

from feedback_analytics.api import auth
from feedback_analytics.config.settings import Settings
from feedback_analytics.data_access.auth_client import AuthClient
from feedback_analytics.data_access.topic_client import TopicClient
from feedback_analytics.models.schemas import (
    DashboardMetrics,
    FeedbackQueryResult,
    FeedbackRecord,
    FilterSpec,
    StatsResult,
    TopicWithStats,
)
from feedback_analytics.pipelines.dashboard import DashboardPipeline
from feedback_analytics.pipelines.fallback import NOT_FOUND_MESSAGE, FeedbackRepository

logger = logging.getLogger(__name__)


def get_repository(request: Request) -> FeedbackRepository:
    return request.app.state.repository


def get_pipeline(request: Request) -> DashboardPipeline:
    return request.app.state.pipeline


def get_topic_client(request: Request) -> Optional[TopicClient]:
    return request.app.state.topic_client


def get_filters(
    sentiment: Optional[str] = None,
    topic: Optional[str] = None,
    category: Optional[str] = None,
    status: Optional[str] = None,
    search: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> FilterSpec:
    """Build a FilterSpec from query parameters."""
    return FilterSpec(
        sentiment=sentiment,
        topic=topic,
        category=category,
        status=status,
        search_term=search,
        date_from=date_from,
        date_to=date_to,
    )


def create_app(
    config: Optional[Settings] = None,
    auth_client: Optional[AuthClient] = None,
    repository: Optional[FeedbackRepository] = None,
    pipeline: Optional[DashboardPipeline] = None,
    topic_client: Optional[TopicClient] = None,
) -> FastAPI:
    """
    Build the application; collaborators default to ones built from *config*.
    """
    config = config or Settings()
    repository = repository or FeedbackRepository(config)
    if topic_client is None and config.is_store_configured:
        topic_client = TopicClient(config)

    app = FastAPI(
        title="Customer Feedback Analytics",
        description="Sentiment, topic and pain-point analytics over customer feedback",
        version="0.1.0",
    )
    app.state.config = config
    app.state.auth_client = auth_client or AuthClient(config)
    app.state.repository = repository
    app.state.topic_client = topic_client
    app.state.pipeline = pipeline or DashboardPipeline(config, repository=repository, topic_client=topic_client)

    app.include_router(auth.router, prefix="/api")

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        response = auth.validation_failure(request, exc)
        if response is not None:
            return response
        return await request_validation_exception_handler(request, exc)

    @app.get("/health", tags=["health"])
    def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "store_configured": config.is_store_configured,
            "auth_configured": config.is_auth_configured,
        }

    @app.get("/api/feedbacks", response_model=FeedbackQueryResult, tags=["feedback"])
    def list_feedbacks(
        filters: FilterSpec = Depends(get_filters),
        repo: FeedbackRepository = Depends(get_repository),
    ):
        """
        List feedback records, newest first

        Falls back to the sample set when the store is unavailable; check
        **is_using_fallback** and **error**.
        """
        return repo.fetch_feedbacks(filters)

    @app.get("/api/feedbacks/{feedback_id}", response_model=FeedbackRecord, tags=["feedback"])
    def get_feedback(feedback_id: str, repo: FeedbackRepository = Depends(get_repository)):
        result = repo.get_feedback(feedback_id)
        if result.data is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=result.error or NOT_FOUND_MESSAGE)
        return result.data

    @app.post(
        "/api/feedbacks",
        response_model=FeedbackRecord,
        status_code=status.HTTP_201_CREATED,
        tags=["feedback"],
    )
    def create_feedback(payload: Dict[str, Any], repo: FeedbackRepository = Depends(get_repository)):
        """Create a feedback record from canonical, snake_case or legacy field names."""
        result = repo.create_feedback(payload)
        if result.data is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.error)
        return result.data

    @app.patch("/api/feedbacks/{feedback_id}", response_model=FeedbackRecord, tags=["feedback"])
    def update_feedback(
        feedback_id: str,
        updates: Dict[str, Any],
        repo: FeedbackRepository = Depends(get_repository),
    ):
        result = repo.update_feedback(feedback_id, updates)
        if result.data is None:
            code = status.HTTP_404_NOT_FOUND if result.error == NOT_FOUND_MESSAGE else status.HTTP_400_BAD_REQUEST
            raise HTTPException(status_code=code, detail=result.error)
        return result.data

    @app.delete("/api/feedbacks/{feedback_id}", tags=["feedback"])
    def delete_feedback(feedback_id: str, repo: FeedbackRepository = Depends(get_repository)):
        result = repo.delete_feedback(feedback_id)
        if not result.success:
            code = status.HTTP_404_NOT_FOUND if result.error == NOT_FOUND_MESSAGE else status.HTTP_400_BAD_REQUEST
            raise HTTPException(status_code=code, detail=result.error)
        return {"success": True}

    @app.get("/api/stats", response_model=StatsResult, tags=["feedback"])
    def feedback_stats(repo: FeedbackRepository = Depends(get_repository)):
        return repo.get_stats()

    @app.get("/api/dashboard", response_model=DashboardMetrics, tags=["dashboard"])
    def dashboard(
        filters: FilterSpec = Depends(get_filters),
        dashboard_pipeline: DashboardPipeline = Depends(get_pipeline),
    ):
        """Every dashboard metric computed from one filtered snapshot."""
        return dashboard_pipeline.run(filters)

    @app.get("/api/topics", response_model=List[TopicWithStats], tags=["topics"])
    def topics(client: Optional[TopicClient] = Depends(get_topic_client)):
        """Topics with statistics from the topic_statistics view."""
        if client is None:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Database is not configured",
            )
        try:
            return client.get_topics_with_stats()
        except Exception as e:
            logger.error(f"Failed to load topic statistics: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to load topic statistics: {str(e)}"
            )

    return app


def main():
    """Serve the API with uvicorn."""
    import uvicorn

    config = Settings()
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    uvicorn.run(create_app(config), host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
