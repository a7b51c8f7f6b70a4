from datetime import datetime
from enum import Enum
from typing import Any, Dict, Generic, Iterable, List, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

Priority = Literal["critical", "high", "medium", "low"]
Reputation = Literal["Clean", "Warning", "Unknown"]
RecommendationMethod = Literal["ai", "hardcoded"]

PRIORITY_RANK: Dict[str, int] = {"critical": 0, "high": 1, "medium": 2, "low": 3}

SSL_UNAVAILABLE = "N/A"
REPUTATION_UNAVAILABLE: Reputation = "Unknown"
BREACH_NOT_CONFIGURED = "No breach data available"
BREACH_UNAVAILABLE = "Unable to verify breach data"

T = TypeVar("T")


class HeaderName(str, Enum):
    HSTS = "Strict-Transport-Security"
    X_FRAME_OPTIONS = "X-Frame-Options"
    X_CONTENT_TYPE_OPTIONS = "X-Content-Type-Options"
    CSP = "Content-Security-Policy"
    X_XSS_PROTECTION = "X-XSS-Protection"
    REFERRER_POLICY = "Referrer-Policy"


class HeaderSignal(BaseModel):
    model_config = ConfigDict(frozen=True)

    present: List[HeaderName] = Field(default_factory=list)
    missing: List[HeaderName] = Field(default_factory=lambda: list(HeaderName))

    @classmethod
    def from_present(cls, names: Iterable[HeaderName]) -> "HeaderSignal":
        found = set(names)
        return cls(
            present=[h for h in HeaderName if h in found],
            missing=[h for h in HeaderName if h not in found],
        )


class SignalOutcome(BaseModel, Generic[T]):
    """What a provider hands back: the value, or its sentinel plus the reason."""
    signal: str
    value: T
    available: bool = True
    error: Optional[str] = None


class Signals(BaseModel):
    model_config = ConfigDict(frozen=True)

    ssl_grade: str = SSL_UNAVAILABLE
    headers: HeaderSignal = Field(default_factory=HeaderSignal)
    reputation: Reputation = REPUTATION_UNAVAILABLE
    breach_status: str = BREACH_UNAVAILABLE
    unavailable: Dict[str, str] = Field(default_factory=dict)  # signal key -> error


class Recommendation(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    priority: Priority
    category: str = Field(min_length=1)
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    action: str = Field(min_length=1)
    impact: str = Field(min_length=1)

    @field_validator("priority", mode="before")
    @classmethod
    def _lower_priority(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v


def by_priority(recs: Iterable[Recommendation]) -> List[Recommendation]:
    # sorted() is stable, so rule order survives within a priority
    return sorted(recs, key=lambda r: PRIORITY_RANK[r.priority])


class RecommendationContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    domain: str
    score: int
    ssl_grade: str
    reputation: Reputation
    missing_headers: List[HeaderName] = Field(default_factory=list)


class ScanRequest(BaseModel):
    url: str


class ScanReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    domain: str
    url: str
    signals: Signals
    score: int = Field(ge=0, le=100)
    recommendations: List[Recommendation] = Field(default_factory=list)
    recommendation_method: RecommendationMethod
    timestamp: datetime


class ScanRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    report: ScanReport
    created_at: datetime


class ScanStats(BaseModel):
    total_scans: int = 0
    average_score: int = 0
    unique_domains: int = 0
