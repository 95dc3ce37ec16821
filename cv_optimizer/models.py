"""
Data models shared by the parser, renderer and API.
"""

from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

# * Recommendation sections in report order: (field name, heading)
RECOMMENDATION_SECTIONS = [
    ("key_skills_to_highlight", "Key Skills to Highlight"),
    ("suggested_changes", "Suggested Changes"),
    ("missing_qualifications", "Missing Qualifications"),
    ("specific_recommendations", "Specific Recommendations"),
]


class AnalysisResult(BaseModel):
    """
    Structured analysis returned by the model.

    Only improved_cv_full_text is required. The remaining fields are passed
    through exactly as the model produced them, so the renderer has to cope
    with missing lists or an out-of-range score.
    """

    model_config = ConfigDict(extra="allow")

    match_score: Optional[Any] = Field(
        default=None, description="Match score 0-100 (not validated)"
    )
    key_skills_to_highlight: Optional[Any] = Field(
        default=None, description="Skills to emphasize for this job"
    )
    suggested_changes: Optional[Any] = Field(
        default=None, description="Concise changes to apply to the CV"
    )
    missing_qualifications: Optional[Any] = Field(
        default=None, description="Requirements the CV does not cover"
    )
    specific_recommendations: Optional[Any] = Field(
        default=None, description="Short actionable recommendations"
    )
    improved_cv_full_text: str = Field(
        ..., description="Rewritten CV text using the line markup convention"
    )


class OptimizationResult(BaseModel):
    """Outcome of one optimize request."""

    analysis: AnalysisResult
    pdf_filename: str
    pdf_path: Path
