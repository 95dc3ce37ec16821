"""
Business Logic Services for the CV Optimizer API.

Wraps the core pipeline with upload handling and download lookup.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

from backend.schemas import OptimizeResponse
from cv_optimizer.config import Settings, load_settings
from cv_optimizer.exceptions import InputError
from cv_optimizer.optimizer import DEFAULT_RENDER_MODE, RENDER_MODES, CVOptimizer
from cv_optimizer.storage import DocumentStore, validate_pdf

# * Module logger
logger = logging.getLogger("cv_optimizer.services")

PDF_CONTENT_TYPE = "application/pdf"


class OptimizationService:
    """Service for optimizing uploaded CVs against job descriptions."""

    def __init__(
        self,
        store: DocumentStore,
        optimizer: Optional[CVOptimizer] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize the optimization service.

        Args:
            store: Document store for uploads and generated PDFs.
            optimizer: Pipeline to run. Built lazily if not provided.
            settings: Settings for the default pipeline.
        """
        self.store = store
        self.settings = settings or Settings()
        self._optimizer = optimizer

    @property
    def optimizer(self) -> CVOptimizer:
        """Lazy-load the optimization pipeline."""
        if self._optimizer is None:
            self._optimizer = CVOptimizer(store=self.store, settings=self.settings)
        return self._optimizer

    async def optimize_upload(
        self,
        data: Optional[bytes],
        filename: Optional[str],
        content_type: Optional[str],
        job_description: Optional[str],
        mode: str = DEFAULT_RENDER_MODE,
    ) -> OptimizeResponse:
        """
        Store an uploaded CV and run the optimization pipeline on it.

        Args:
            data: Uploaded file content, or None if no file was sent.
            filename: Client-side filename.
            content_type: Declared MIME type of the upload.
            job_description: Job description text.
            mode: "cv" or "report".

        Returns:
            OptimizeResponse with the analysis and generated filename.

        Raises:
            InputError: For a missing/non-PDF file or blank job description.
        """
        if data is None:
            raise InputError("No CV file was uploaded")

        if not job_description or not job_description.strip():
            raise InputError("Job description is required in the request body")

        if mode not in RENDER_MODES:
            raise InputError(f"Unknown render mode: {mode}")

        if content_type != PDF_CONTENT_TYPE:
            raise InputError("Only PDF files are allowed")

        # * pdfplumber parsing and disk writes stay off the event loop
        pages = await asyncio.to_thread(validate_pdf, data)
        logger.info(
            "Upload accepted filename=%s bytes=%s pages=%s mode=%s",
            filename,
            len(data),
            pages,
            mode,
        )

        upload_path = await asyncio.to_thread(self.store.save_upload, data, filename)
        result = await self.optimizer.optimize_async(
            upload_path,
            job_description,
            mode=mode,
            discard_upload=True,
        )

        return OptimizeResponse(analysis=result.analysis, pdf_filename=result.pdf_filename)


class DocumentService:
    """Service for looking up generated PDFs."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def get_document(self, filename: str) -> Path:
        """
        Get the path of a generated PDF.

        Args:
            filename: Generated filename.

        Returns:
            Path to the existing file.
        """
        path = self.store.resolve_document(filename)
        logger.info("Download requested filename=%s", filename)
        return path


# * Global service instances
settings = load_settings()
document_store = DocumentStore(settings.uploads_dir, settings.generated_dir)
optimization_service = OptimizationService(document_store, settings=settings)
document_service = DocumentService(document_store)


def get_optimization_service() -> OptimizationService:
    return optimization_service


def get_document_service() -> DocumentService:
    return document_service
