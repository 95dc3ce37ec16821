"""
CV Optimization Pipeline.

Runs one optimize request end to end:
1. Read and base64-encode the uploaded CV
2. Build the analysis prompt
3. Call the text-generation service
4. Parse the reply into an AnalysisResult
5. Render the improved CV (or the full report) to a new PDF
"""

import asyncio
import logging
import time
from pathlib import Path
from typing import Optional

from cv_optimizer.config import Settings
from cv_optimizer.exceptions import InputError
from cv_optimizer.llm_client import get_client
from cv_optimizer.models import AnalysisResult, OptimizationResult
from cv_optimizer.pdf_renderer import PdfRenderer
from cv_optimizer.prompt_builder import build_prompt, encode_pdf_base64
from cv_optimizer.response_parser import parse_analysis
from cv_optimizer.storage import DocumentStore

logger = logging.getLogger("cv_optimizer.optimizer")

# * cv: improved CV text only; report: score, recommendations and CV
RENDER_MODES = ("cv", "report")
DEFAULT_RENDER_MODE = "cv"


class CVOptimizer:
    """Optimizes a CV for a job description and renders the result."""

    def __init__(
        self,
        store: DocumentStore,
        llm=None,
        renderer: Optional[PdfRenderer] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize the optimizer.

        Args:
            store: Document store for uploads and generated PDFs.
            llm: Text generator with generate / generate_async. Created from
                settings on first use if not provided.
            renderer: PDF renderer. Built from the settings fonts if not provided.
            settings: Settings used to build the default LLM client and renderer.
        """
        self.store = store
        self.settings = settings or Settings()
        self.renderer = renderer or PdfRenderer.from_settings(self.settings)
        self._llm = llm

    @property
    def llm(self):
        """Lazy-load the OpenAI client."""
        if self._llm is None:
            self._llm = get_client(
                api_key=self.settings.openai_api_key,
                model=self.settings.openai_model,
                max_completion_tokens=self.settings.max_completion_tokens,
            )
        return self._llm

    def optimize(
        self,
        cv_path: str | Path,
        job_description: str,
        mode: str = DEFAULT_RENDER_MODE,
        discard_upload: bool = False,
    ) -> OptimizationResult:
        """
        Optimize a CV for a job description (sync).

        Args:
            cv_path: Path to the CV PDF.
            job_description: Job description text.
            mode: "cv" to render the improved CV, "report" for the full report.
            discard_upload: Delete cv_path after success.

        Returns:
            OptimizationResult with the analysis and generated filename.
        """
        start = time.perf_counter()
        prompt = self._prepare(cv_path, job_description, mode)

        raw_text = self.llm.generate(prompt)
        analysis = parse_analysis(raw_text)

        pdf_path = self.store.new_document_path()
        self._render(analysis, mode, pdf_path)

        return self._finish(analysis, pdf_path, cv_path, discard_upload, start)

    async def optimize_async(
        self,
        cv_path: str | Path,
        job_description: str,
        mode: str = DEFAULT_RENDER_MODE,
        discard_upload: bool = False,
    ) -> OptimizationResult:
        """
        Optimize a CV for a job description (async).

        The PDF is rendered in a worker thread and awaited to completion
        before the result is returned.

        Args:
            cv_path: Path to the CV PDF.
            job_description: Job description text.
            mode: "cv" to render the improved CV, "report" for the full report.
            discard_upload: Delete cv_path after success.

        Returns:
            OptimizationResult with the analysis and generated filename.
        """
        start = time.perf_counter()
        prompt = self._prepare(cv_path, job_description, mode)

        raw_text = await self.llm.generate_async(prompt)
        analysis = parse_analysis(raw_text)

        pdf_path = self.store.new_document_path()
        await asyncio.to_thread(self._render, analysis, mode, pdf_path)

        return self._finish(analysis, pdf_path, cv_path, discard_upload, start)

    def _prepare(self, cv_path: str | Path, job_description: str, mode: str) -> str:
        if not job_description or not job_description.strip():
            raise InputError("Job description is required")
        if mode not in RENDER_MODES:
            raise InputError(f"Unknown render mode: {mode}")

        cv_bytes = self.store.read_upload(cv_path)
        logger.info(
            "Optimize start mode=%s cv_bytes=%s job_chars=%s",
            mode,
            len(cv_bytes),
            len(job_description),
        )
        return build_prompt(encode_pdf_base64(cv_bytes), job_description)

    def _render(self, analysis: AnalysisResult, mode: str, pdf_path: Path) -> Path:
        if mode == "report":
            return self.renderer.render(analysis, pdf_path)
        return self.renderer.render(analysis.improved_cv_full_text, pdf_path)

    def _finish(
        self,
        analysis: AnalysisResult,
        pdf_path: Path,
        cv_path: str | Path,
        discard_upload: bool,
        start: float,
    ) -> OptimizationResult:
        if discard_upload:
            self.store.discard_upload(cv_path)

        logger.info(
            "Optimize complete file=%s score=%s duration=%.3fs",
            pdf_path.name,
            analysis.match_score,
            time.perf_counter() - start,
        )
        return OptimizationResult(
            analysis=analysis,
            pdf_filename=pdf_path.name,
            pdf_path=pdf_path,
        )
