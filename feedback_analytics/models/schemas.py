from pydantic import BaseModel, Field, ConfigDict
from datetime import date, datetime
from typing import Optional, List, Dict
from enum import Enum


class Category(str, Enum):
    INSTANT_MESSAGING = "Im"
    GENERAL = "General"
    CONNECTED_TV = "Ctv"
    DIGITAL_ASSISTANT = "Da"


class PostType(str, Enum):
    QUERY = "Queries"
    COMPLAINT = "Complaint"
    COMPLIMENT = "Compliment"
    OTHER = "Others"


class LegacyTopic(str, Enum):
    PRODUCT_INFO = "Product Info"
    PROMO = "Promo"
    TECHNICAL = "Technical"
    PRODUCT_RELEASE = "Product Release"
    E_COMMERCE = "E-commerce"
    SERVICE_CENTER = "Service Center"
    SPONSORSHIP = "Sponsor, Parternship, Job"
    PRICING = "Pricing"
    SES = "SES"


class Sentiment(str, Enum):
    POSITIVE = "Positive"
    NEUTRAL = "Neutral"
    NEGATIVE = "Negative"


class Source(str, Enum):
    DIRECT_MESSAGE = "DM Facebook"
    COMMENT = "Comment Facebook"


class Status(str, Enum):
    CLEAR = "Clear"
    PENDING = "Pending"


class Severity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


SEVERITY_RANK = {Severity.HIGH.value: 3, Severity.MEDIUM.value: 2, Severity.LOW.value: 1}


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class Topic(BaseModel):
    """Named classification bucket from the topics table."""
    id: str
    name: str
    category: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TopicWithStats(Topic):
    """Topic plus statistics derived from its linked feedback."""
    feedback_count: int = 0
    unique_customers: int = 0
    positive_count: int = 0
    neutral_count: int = 0
    negative_count: int = 0
    positive_percentage: float = 0.0


class FeedbackTopicLink(BaseModel):
    """Row of the customer_feedback_topic join table."""
    id: Optional[str] = None
    customer_feedback_id: str
    topic_id: str
    assigned_at: Optional[datetime] = None


class FeedbackRecord(BaseModel):
    """One customer interaction in canonical shape."""
    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    feedback_id: str = ""
    link: str = ""
    message: str = ""
    date: str = ""
    time: str = ""
    response_date: str = ""
    account_id: str = ""
    customer_id: str = ""
    category: Category = Category.GENERAL
    post_type: PostType = PostType.OTHER
    topic: LegacyTopic = LegacyTopic.PRODUCT_INFO
    topics: List[Topic] = Field(default_factory=list)
    product: str = ""
    sentiment: Sentiment = Sentiment.NEUTRAL
    source: Source = Source.DIRECT_MESSAGE
    reply: str = ""
    status: Status = Status.PENDING
    details: str = ""

    @property
    def is_complaint(self) -> bool:
        return self.post_type == PostType.COMPLAINT

    @property
    def is_negative(self) -> bool:
        return self.sentiment == Sentiment.NEGATIVE

    @property
    def is_pending(self) -> bool:
        return self.status == Status.PENDING

    @property
    def is_pain_point(self) -> bool:
        """Complaints and negative feedback are the raw material of pain points."""
        return self.is_complaint or self.is_negative

    @property
    def has_reply(self) -> bool:
        return bool(self.reply.strip())


class FilterSpec(BaseModel):
    """Declarative filter over feedback records. Unset or "all" means no constraint."""
    sentiment: Optional[str] = None
    topic: Optional[str] = None
    category: Optional[str] = None
    status: Optional[str] = None
    search_term: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    def active(self, value: Optional[str]) -> Optional[str]:
        """Return *value* if it constrains its dimension, otherwise None."""
        if value is None:
            return None
        value = value.strip()
        if not value or value.lower() == "all":
            return None
        return value

    @property
    def is_empty(self) -> bool:
        return (
            self.active(self.sentiment) is None
            and self.active(self.topic) is None
            and self.active(self.category) is None
            and self.active(self.status) is None
            and not (self.search_term or "").strip()
            and self.date_from is None
            and self.date_to is None
        )


class PainPointBucket(BaseModel):
    """Cluster of complaint/negative feedback sharing a derived category."""
    model_config = ConfigDict(use_enum_values=True)

    category: str
    issues: int
    severity: Severity
    feedback_ids: List[str] = Field(default_factory=list)
    examples: List[str] = Field(default_factory=list)


class PainPointSummary(BaseModel):
    total: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0


class TopicTrendEntry(BaseModel):
    topic: str
    mentions: int
    sentiment: float = Field(..., ge=0.0, le=1.0)


class SegmentShare(BaseModel):
    segment: str
    value: int
    color: str


class JourneyMetrics(BaseModel):
    initial_contact: int = 0
    response_provided: int = 0
    issue_resolution: int = 0
    customer_satisfaction: int = 0


class SentimentTrendPoint(BaseModel):
    date: str
    positive: int = 0
    neutral: int = 0
    negative: int = 0


class SentimentDistribution(BaseModel):
    positive: int = 0
    neutral: int = 0
    negative: int = 0


class FeedbackStats(BaseModel):
    total: int = 0
    positive: int = 0
    negative: int = 0
    neutral: int = 0
    complaints: int = 0
    resolved: int = 0
    by_category: Dict[str, int] = Field(default_factory=dict)
    by_topic: Dict[str, int] = Field(default_factory=dict)


class PainPointAlert(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    title: str
    description: str
    source: str
    severity: Severity
    icon: str


class FeedbackQueryResult(BaseModel):
    """Tri-state result of a feedback read: data, error message, fallback flag."""
    data: List[FeedbackRecord] = Field(default_factory=list)
    error: Optional[str] = None
    is_using_fallback: bool = False


class FeedbackLookupResult(BaseModel):
    data: Optional[FeedbackRecord] = None
    error: Optional[str] = None


class MutationResult(BaseModel):
    data: Optional[FeedbackRecord] = None
    error: Optional[str] = None


class DeleteResult(BaseModel):
    success: bool
    error: Optional[str] = None


class StatsResult(BaseModel):
    data: Optional[FeedbackStats] = None
    error: Optional[str] = None
    is_using_fallback: bool = False


class DashboardMetrics(BaseModel):
    """Everything one dashboard render needs, computed from a single snapshot."""
    model_config = ConfigDict(use_enum_values=True)

    overall_sentiment_score: float
    active_pain_points: PainPointSummary
    crisis_risk_level: RiskLevel
    average_response_time: float
    total_feedbacks: int
    pain_points: List[PainPointBucket] = Field(default_factory=list)
    topic_trends: List[TopicTrendEntry] = Field(default_factory=list)
    customer_segments: List[SegmentShare] = Field(default_factory=list)
    segment_performance: List[SegmentShare] = Field(default_factory=list)
    journey: JourneyMetrics = Field(default_factory=JourneyMetrics)
    sentiment_trend: List[SentimentTrendPoint] = Field(default_factory=list)
    sentiment_distribution: SentimentDistribution = Field(default_factory=SentimentDistribution)
    alerts: List[PainPointAlert] = Field(default_factory=list)
    topic_statistics: List[TopicWithStats] = Field(default_factory=list)
    is_using_fallback: bool = False
    errors: List[str] = Field(default_factory=list)
    generated_at: Optional[datetime] = None
