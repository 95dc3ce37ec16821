"""Unit tests for parsing model replies."""

import json

import pytest

from cv_optimizer.exceptions import MalformedResponse
from cv_optimizer.response_parser import parse_analysis, strip_code_fences
from tests.helpers import make_analysis_payload, make_reply


@pytest.mark.unit
def test_parse_plain_json():
    analysis = parse_analysis(make_reply())

    assert analysis.match_score == 72
    assert analysis.key_skills_to_highlight == ["Python", "PostgreSQL"]
    assert analysis.missing_qualifications == ["Go", "Distributed systems at scale"]
    assert analysis.improved_cv_full_text.startswith("Jane Doe")


@pytest.mark.unit
@pytest.mark.parametrize(
    "wrapper",
    [
        "```json\n{}\n```",
        "```JSON\n{}\n```",
        "```\n{}\n```",
        "  ```json\n{}\n```  \n",
        "```json{}```",
        "{}\n```",
    ],
)
def test_fenced_and_unfenced_parse_identically(wrapper):
    reply = make_reply()
    fenced = wrapper.replace("{}", reply)

    assert parse_analysis(fenced) == parse_analysis(reply)


@pytest.mark.unit
def test_strip_code_fences_removes_one_pair_only():
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences("``````") == ""
    assert strip_code_fences('{"a": "```"}') == '{"a": "```"}'


@pytest.mark.unit
@pytest.mark.parametrize(
    "raw",
    [
        "",
        "   \n",
        None,
        b"{}",
        "Sorry, I cannot help with that.",
        '{"match_score": 50',
        "[1, 2, 3]",
        json.dumps({"match_score": 50}),
        json.dumps(make_analysis_payload(improved_cv_full_text="")),
        json.dumps(make_analysis_payload(improved_cv_full_text="   ")),
        json.dumps(make_analysis_payload(improved_cv_full_text=["not", "text"])),
    ],
)
def test_malformed_replies(raw):
    with pytest.raises(MalformedResponse):
        parse_analysis(raw)


@pytest.mark.unit
def test_other_fields_are_not_validated():
    reply = json.dumps({
        "match_score": 140,
        "suggested_changes": "Tighten the summary",
        "improved_cv_full_text": "Text",
    })

    analysis = parse_analysis(reply)

    assert analysis.match_score == 140
    assert analysis.suggested_changes == "Tighten the summary"
    assert analysis.key_skills_to_highlight is None


@pytest.mark.unit
def test_extra_keys_are_preserved():
    reply = make_reply(overall_comment="Strong backend profile")

    analysis = parse_analysis(reply)

    assert analysis.model_dump()["overall_comment"] == "Strong backend profile"
