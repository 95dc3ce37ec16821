"""
Model Response Parser.

Turns the raw text returned by the language model into an AnalysisResult.
Models sometimes wrap the JSON in a markdown code fence, so one leading and
one trailing fence are trimmed before decoding.
"""

import json
import logging
import re

from pydantic import ValidationError

from cv_optimizer.exceptions import MalformedResponse
from cv_optimizer.models import AnalysisResult

logger = logging.getLogger("cv_optimizer.parser")

# * ``` optionally followed by a language tag, at the very start / end
LEADING_FENCE = re.compile(r"^```[A-Za-z0-9_+-]*")
TRAILING_FENCE = re.compile(r"```$")

REQUIRED_FIELD = "improved_cv_full_text"


def strip_code_fences(text: str) -> str:
    """
    Remove one leading and one trailing code fence, if present.

    Args:
        text: Raw model reply.

    Returns:
        Text with the fences and surrounding whitespace removed.
    """
    cleaned = text.strip()
    cleaned = LEADING_FENCE.sub("", cleaned, count=1)
    cleaned = TRAILING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def parse_analysis(raw_text) -> AnalysisResult:
    """
    Decode a model reply into an AnalysisResult.

    Args:
        raw_text: Text returned by the text-generation service.

    Returns:
        Parsed AnalysisResult.

    Raises:
        MalformedResponse: If the reply is empty, not a JSON object, or has
            no usable improved_cv_full_text.
    """
    if not isinstance(raw_text, str) or not raw_text.strip():
        logger.error("Model returned no usable text type=%s", type(raw_text).__name__)
        raise MalformedResponse("Did not receive a valid text response from AI service.")

    cleaned = strip_code_fences(raw_text)

    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error("Failed to decode model JSON: %s", e)
        logger.error("Raw response: %s", raw_text)
        raise MalformedResponse("Failed to parse JSON from AI service response.") from e

    if not isinstance(payload, dict):
        logger.error("Model JSON is not an object type=%s", type(payload).__name__)
        logger.error("Raw response: %s", raw_text)
        raise MalformedResponse("AI service response was not a JSON object.")

    improved_text = payload.get(REQUIRED_FIELD)
    if not isinstance(improved_text, str) or not improved_text.strip():
        logger.error("Model JSON missing %s keys=%s", REQUIRED_FIELD, sorted(payload))
        raise MalformedResponse(
            f"AI service response did not contain '{REQUIRED_FIELD}'."
        )

    try:
        return AnalysisResult.model_validate(payload)
    except ValidationError as e:
        logger.error("Model JSON failed validation: %s", e)
        raise MalformedResponse("AI service response had an unexpected shape.") from e
