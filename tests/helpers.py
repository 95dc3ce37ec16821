"""Shared test helpers."""

import json

import pdfplumber

IMPROVED_CV = (
    "Jane Doe\n"
    "jane@example.com | +1 555 0100 | Berlin\n"
    "---\n"
    "### Summary\n"
    "Backend engineer with six years of Python experience.\n"
    "\n"
    "### Experience\n"
    "**Senior Engineer - Acme**\n"
    "* Led a team of four engineers\n"
    "- Built an event ingestion pipeline\n"
)


class FakeLLM:
    """Text generator stand-in that records prompts."""

    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.prompts = []

    def generate(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply

    async def generate_async(self, prompt):
        return self.generate(prompt)


def make_analysis_payload(**overrides):
    payload = {
        "match_score": 72,
        "key_skills_to_highlight": ["Python", "PostgreSQL"],
        "suggested_changes": ["Move the summary above experience"],
        "missing_qualifications": ["Go", "Distributed systems at scale"],
        "specific_recommendations": ["Quantify the pipeline throughput"],
        "improved_cv_full_text": IMPROVED_CV,
    }
    payload.update(overrides)
    return payload


def make_reply(**overrides):
    return json.dumps(make_analysis_payload(**overrides))


def pdf_text(path) -> str:
    """Extract all text from a PDF, whitespace-normalized."""
    with pdfplumber.open(path) as pdf:
        text = "\n".join(page.extract_text() or "" for page in pdf.pages)
    return " ".join(text.split())


def pdf_page_texts(path) -> list[str]:
    with pdfplumber.open(path) as pdf:
        return [" ".join((page.extract_text() or "").split()) for page in pdf.pages]
