"""Study materials: uploads and document analysis models."""

from .models import (
    DocumentAnalysis,
    MaterialStatus,
    RiskAssessment,
    RiskLevel,
    UploadedMaterial,
)

__all__ = [
    "DocumentAnalysis",
    "MaterialStatus",
    "RiskAssessment",
    "RiskLevel",
    "UploadedMaterial",
]
