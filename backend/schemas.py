"""
Pydantic Schemas for API Request/Response Models.
"""

from pydantic import BaseModel, ConfigDict, Field

from cv_optimizer.models import AnalysisResult


class OptimizeResponse(BaseModel):
    """Response from the optimize-for-job endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    analysis: AnalysisResult = Field(..., description="Structured analysis from the model")
    pdf_filename: str = Field(
        ...,
        alias="pdfFilename",
        description="Generated PDF filename, for /api/download/{filename}",
    )


class ErrorResponse(BaseModel):
    """Error body returned for failed requests."""

    detail: str


class HealthResponse(BaseModel):
    """Health check body."""

    status: str
    service: str
    version: str
