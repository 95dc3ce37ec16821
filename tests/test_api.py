"""Integration tests for the HTTP API using FastAPI's TestClient."""

import asyncio

import pytest
from fastapi.testclient import TestClient

from backend.api import app
from backend.services import (
    DocumentService,
    OptimizationService,
    get_document_service,
    get_optimization_service,
)
from cv_optimizer.exceptions import UpstreamUnavailable
from cv_optimizer.optimizer import CVOptimizer
from tests.helpers import FakeLLM, make_reply

GO_JOB = "Senior backend engineer, 5+ years, Go and distributed systems"


@pytest.fixture
def llm():
    return FakeLLM(reply=make_reply())


@pytest.fixture
def client(store, llm):
    optimizer = CVOptimizer(store=store, llm=llm)
    app.dependency_overrides[get_optimization_service] = lambda: OptimizationService(
        store, optimizer=optimizer
    )
    app.dependency_overrides[get_document_service] = lambda: DocumentService(store)
    yield TestClient(app)
    app.dependency_overrides.clear()


def _upload(client, pdf_bytes, job=GO_JOB, **extra):
    data = {"jobDescription": job, **extra}
    return client.post(
        "/api/optimize-for-job",
        files={"cv": ("resume.pdf", pdf_bytes, "application/pdf")},
        data=data,
    )


@pytest.mark.integration
def test_health(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


@pytest.mark.integration
def test_optimize_and_download(client, store, sample_pdf_bytes):
    response = _upload(client, sample_pdf_bytes)

    assert response.status_code == 200
    body = response.json()
    assert body["analysis"]["match_score"] == 72
    assert body["analysis"]["missing_qualifications"] == ["Go", "Distributed systems at scale"]
    filename = body["pdfFilename"]
    assert filename.startswith("cv-improved-for-job-") and filename.endswith(".pdf")

    # Upload is removed once processing succeeded
    assert list(store.uploads_dir.iterdir()) == []

    download = client.get(f"/api/download/{filename}")
    assert download.status_code == 200
    assert download.headers["content-type"] == "application/pdf"
    assert "attachment" in download.headers["content-disposition"]
    assert filename in download.headers["content-disposition"]
    assert download.content.startswith(b"%PDF")


@pytest.mark.integration
def test_optimize_report_mode(client, store, sample_pdf_bytes):
    response = _upload(client, sample_pdf_bytes, mode="report")

    assert response.status_code == 200
    assert (store.generated_dir / response.json()["pdfFilename"]).exists()


@pytest.mark.integration
def test_missing_file(client):
    response = client.post("/api/optimize-for-job", data={"jobDescription": GO_JOB})

    assert response.status_code == 400
    assert response.json()["detail"] == "No CV file was uploaded"


@pytest.mark.integration
@pytest.mark.parametrize("job", ["", "   "])
def test_blank_job_description(client, store, sample_pdf_bytes, job):
    response = _upload(client, sample_pdf_bytes, job=job)

    assert response.status_code == 400
    assert list(store.uploads_dir.iterdir()) == []


@pytest.mark.integration
def test_non_pdf_content_type(client):
    response = client.post(
        "/api/optimize-for-job",
        files={"cv": ("notes.txt", b"hello", "text/plain")},
        data={"jobDescription": GO_JOB},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Only PDF files are allowed"


@pytest.mark.integration
def test_unreadable_pdf(client):
    response = _upload(client, b"this is not really a pdf")

    assert response.status_code == 400


@pytest.mark.integration
def test_unknown_mode(client, sample_pdf_bytes):
    response = _upload(client, sample_pdf_bytes, mode="slides")

    assert response.status_code == 400


@pytest.mark.integration
def test_upstream_unavailable(client, llm, sample_pdf_bytes):
    llm.error = UpstreamUnavailable("AI service is temporarily unavailable. Please try again later.")

    response = _upload(client, sample_pdf_bytes)

    assert response.status_code == 503
    assert "temporarily unavailable" in response.json()["detail"]


@pytest.mark.integration
def test_malformed_reply_is_not_echoed(client, llm, sample_pdf_bytes):
    llm.reply = "Here is my SECRET-RAW analysis, not JSON"

    response = _upload(client, sample_pdf_bytes)

    assert response.status_code == 502
    assert "SECRET-RAW" not in response.text


@pytest.mark.integration
def test_download_rejects_traversal(client):
    response = client.get("/api/download/cv..pdf")

    assert response.status_code == 400


@pytest.mark.integration
def test_download_not_found(client):
    response = client.get("/api/download/cv-improved-for-job-1.pdf")

    assert response.status_code == 404
    assert response.json()["detail"] == "File not found"


@pytest.mark.integration
def test_upload_work_runs_off_the_event_loop(client, sample_pdf_bytes, monkeypatch):
    """PDF validation and the upload write run in worker threads."""
    calls = []
    original = asyncio.to_thread

    async def recording_to_thread(func, *args, **kwargs):
        calls.append(func.__name__)
        return await original(func, *args, **kwargs)

    monkeypatch.setattr(asyncio, "to_thread", recording_to_thread)

    response = _upload(client, sample_pdf_bytes)

    assert response.status_code == 200
    assert "validate_pdf" in calls
    assert "save_upload" in calls
