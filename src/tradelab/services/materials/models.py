"""Data models for uploaded study materials and their analysis."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List


class MaterialStatus(str, Enum):
    PROCESSING = "processing"
    READY = "ready"
    ERROR = "error"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class UploadedMaterial:
    """A course document uploaded by a user, stored base64-encoded."""

    id: str
    user_id: str
    file_name: str
    file_type: str
    file_size: int
    content: str  # base64
    uploaded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    status: MaterialStatus = MaterialStatus.PROCESSING


@dataclass(frozen=True)
class RiskAssessment:
    level: RiskLevel = RiskLevel.MEDIUM
    factors: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class DocumentAnalysis:
    """Oracle summary of a study document."""

    summary: str = ""
    key_insights: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    risk_assessment: RiskAssessment = field(default_factory=RiskAssessment)

    @classmethod
    def empty(cls) -> "DocumentAnalysis":
        return cls()
