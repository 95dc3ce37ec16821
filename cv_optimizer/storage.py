"""
Document Storage.

Manages the two working directories:
- uploads: incoming CV PDFs, kept only for the duration of a request
- generated: rendered PDFs, written once and served for download
"""

import io
import logging
import time
from pathlib import Path

import pdfplumber

from cv_optimizer.exceptions import InputError, NotFound, StorageError

logger = logging.getLogger("cv_optimizer.storage")

UPLOAD_PREFIX = "cv"
GENERATED_PREFIX = "cv-improved-for-job"
PDF_SUFFIX = ".pdf"


def _timestamp_ms() -> int:
    return time.time_ns() // 1_000_000


def validate_pdf(data: bytes) -> int:
    """
    Check that bytes hold a readable PDF.

    Args:
        data: Uploaded file content.

    Returns:
        Number of pages in the document.

    Raises:
        InputError: If the content is empty or cannot be opened as a PDF.
    """
    if not data:
        raise InputError("No CV file was uploaded")

    try:
        with pdfplumber.open(io.BytesIO(data)) as pdf:
            pages = len(pdf.pages)
    except Exception as e:
        logger.warning("Uploaded file is not a readable PDF error=%s", e)
        raise InputError("Only PDF files are allowed") from e

    if pages == 0:
        raise InputError("Uploaded PDF has no pages")
    return pages


class DocumentStore:
    """Filesystem store for uploaded CVs and generated PDFs."""

    def __init__(self, uploads_dir: str | Path, generated_dir: str | Path):
        self.uploads_dir = Path(uploads_dir)
        self.generated_dir = Path(generated_dir)

    def ensure_directories(self) -> None:
        """
        Create the upload and generated directories.

        Called once at startup.

        Raises:
            StorageError: If a directory cannot be created.
        """
        for directory in (self.uploads_dir, self.generated_dir):
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                logger.error("Cannot create directory path=%s error=%s", directory, e, exc_info=True)
                raise StorageError(f"Cannot create directory: {directory}") from e

        logger.info(
            "Storage ready uploads=%s generated=%s",
            self.uploads_dir,
            self.generated_dir,
        )

    def _unique_path(self, directory: Path, prefix: str, suffix: str) -> Path:
        stamp = _timestamp_ms()
        path = directory / f"{prefix}-{stamp}{suffix}"
        while path.exists():
            stamp += 1
            path = directory / f"{prefix}-{stamp}{suffix}"
        return path

    def save_upload(self, data: bytes, original_name: str | None = None) -> Path:
        """
        Save uploaded CV bytes to the uploads directory.

        Args:
            data: File content.
            original_name: Client-side filename, used only for its extension.

        Returns:
            Path of the saved upload.

        Raises:
            StorageError: If the file cannot be written.
        """
        suffix = Path(original_name).suffix.lower() if original_name else ""
        path = self._unique_path(self.uploads_dir, UPLOAD_PREFIX, suffix or PDF_SUFFIX)

        try:
            path.write_bytes(data)
        except OSError as e:
            logger.error("Upload save failed path=%s error=%s", path, e, exc_info=True)
            raise StorageError("Failed to store the uploaded CV.") from e

        logger.info("Upload saved path=%s bytes=%s", path, len(data))
        return path

    def read_upload(self, path: str | Path) -> bytes:
        """Read an uploaded CV, raising StorageError on failure."""
        path = Path(path)
        try:
            return path.read_bytes()
        except OSError as e:
            logger.error("Upload read failed path=%s error=%s", path, e, exc_info=True)
            raise StorageError("Failed to read the uploaded CV.") from e

    def discard_upload(self, path: str | Path) -> None:
        """Delete an uploaded CV; failures are logged, never raised."""
        path = Path(path)
        try:
            path.unlink()
            logger.info("Upload removed path=%s", path)
        except OSError as e:
            logger.warning("Failed to delete original file path=%s error=%s", path, e)

    def new_document_path(self) -> Path:
        """
        Reserve a path for a new generated PDF.

        Returns:
            Path named cv-improved-for-job-<ms>.pdf in the generated directory.
        """
        return self._unique_path(self.generated_dir, GENERATED_PREFIX, PDF_SUFFIX)

    def resolve_document(self, filename: str) -> Path:
        """
        Look up a generated PDF for download.

        Args:
            filename: Bare filename as given by the client.

        Returns:
            Path to the existing file.

        Raises:
            InputError: If the filename is empty or tries to leave the directory.
            NotFound: If no such generated file exists.
        """
        if not filename or ".." in filename or "/" in filename or "\\" in filename:
            logger.warning("Rejected download filename=%r", filename)
            raise InputError("Invalid filename")

        path = self.generated_dir / filename
        if not path.is_file():
            raise NotFound("File not found")
        return path
