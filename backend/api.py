"""
FastAPI Backend for the CV Optimizer.

Provides REST API endpoints for:
- Optimizing an uploaded CV for a job description
- Downloading the generated PDF
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse

from backend.schemas import ErrorResponse, HealthResponse, OptimizeResponse
from backend.services import (
    DocumentService,
    OptimizationService,
    document_store,
    get_document_service,
    get_optimization_service,
    settings,
)
from cv_optimizer import __version__
from cv_optimizer.exceptions import CVOptimizerError
from cv_optimizer.logging_config import configure_logging
from cv_optimizer.optimizer import DEFAULT_RENDER_MODE

logger = logging.getLogger("cv_optimizer.api")

SERVICE_NAME = "CV Job Optimizer API"


@asynccontextmanager
async def lifespan(app: FastAPI):
    # * Directory creation failure aborts startup
    configure_logging(settings.log_level)
    document_store.ensure_directories()
    logger.info("API startup complete version=%s", __version__)
    yield


# * Create FastAPI app
app = FastAPI(
    title=SERVICE_NAME,
    description="API for optimizing a CV against a job description and rendering it to PDF",
    version=__version__,
    lifespan=lifespan,
)

# * Configure CORS for React frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _http_error(error: CVOptimizerError) -> HTTPException:
    return HTTPException(status_code=error.status_code, detail=str(error))


@app.get("/", response_model=HealthResponse)
async def root():
    """Health check endpoint."""
    return HealthResponse(status="ok", service=SERVICE_NAME, version=__version__)


@app.post(
    "/api/optimize-for-job",
    response_model=OptimizeResponse,
    responses={
        400: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def optimize_for_job(
    cv: Optional[UploadFile] = File(None),
    job_description: Optional[str] = Form(None, alias="jobDescription"),
    mode: str = Form(DEFAULT_RENDER_MODE),
    service: OptimizationService = Depends(get_optimization_service),
):
    """
    Optimize an uploaded CV (PDF) for a job description.

    Returns the model's analysis and the filename of the generated PDF.
    """
    data = await cv.read() if cv is not None else None

    try:
        return await service.optimize_upload(
            data=data,
            filename=cv.filename if cv is not None else None,
            content_type=cv.content_type if cv is not None else None,
            job_description=job_description,
            mode=mode,
        )
    except CVOptimizerError as e:
        logger.warning("Optimize failed status=%s error=%s", e.status_code, e)
        raise _http_error(e) from e
    except Exception as e:
        logger.error("Unexpected optimize failure: %s", e, exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="Internal server error while optimizing CV for job",
        ) from e


@app.get(
    "/api/download/{filename}",
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def download_pdf(
    filename: str,
    service: DocumentService = Depends(get_document_service),
):
    """
    Download a generated PDF.
    """
    try:
        filepath = service.get_document(filename)
    except CVOptimizerError as e:
        raise _http_error(e) from e

    return FileResponse(
        filepath,
        media_type="application/pdf",
        filename=filename,
    )


# * Run with: uvicorn backend.api:app --reload --port 3001
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
