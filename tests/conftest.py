# tests/conftest.py
import io

import pytest
from reportlab.lib.pagesizes import LETTER
from reportlab.pdfgen import canvas

from cv_optimizer.logging_config import configure_logging
from cv_optimizer.storage import DocumentStore

# Ensure logging is initialized before any tests run
configure_logging()


@pytest.fixture
def sample_pdf_bytes():
    """A small single-page CV PDF."""
    buf = io.BytesIO()
    pdf = canvas.Canvas(buf, pagesize=LETTER)
    pdf.drawString(72, 720, "Jane Doe")
    pdf.drawString(72, 700, "Python developer, 6 years, PostgreSQL, AWS")
    pdf.save()
    return buf.getvalue()


@pytest.fixture
def store(tmp_path):
    document_store = DocumentStore(tmp_path / "uploads", tmp_path / "generated")
    document_store.ensure_directories()
    return document_store


@pytest.fixture
def sample_cv_path(store, sample_pdf_bytes):
    return store.save_upload(sample_pdf_bytes, "resume.pdf")
