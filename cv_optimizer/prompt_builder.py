"""
Analysis Prompt Builder.

Builds the instruction sent to the language model: the base64-encoded CV,
the job description, the rules the rewrite must follow and the exact JSON
schema the reply has to match.
"""

import base64

# * Keys of the JSON object the model must return
RESPONSE_KEYS = (
    "match_score",
    "key_skills_to_highlight",
    "suggested_changes",
    "missing_qualifications",
    "specific_recommendations",
    "improved_cv_full_text",
)

RESPONSE_SCHEMA_EXAMPLE = """{
  "match_score": 0-100,
  "key_skills_to_highlight": ["skill 1", "skill 2"],
  "suggested_changes": ["concise change 1", "concise change 2"],
  "missing_qualifications": ["missing 1", "missing 2"],
  "specific_recommendations": ["short recommendation 1", "short recommendation 2"],
  "improved_cv_full_text": "concise improved CV content suitable for one page, based only on real facts from the original CV"
}"""

MARKUP_GUIDE = """Format "improved_cv_full_text" as plain lines using this light markup:
- "### Section" for section headings (Summary, Experience, Education, Skills)
- "**Role - Company**" on its own line for sub-headings
- "* item" or "- item" for bullet points
- "---" on its own line for a horizontal separator
- contact details on a single line separated by " | "
- any other line is a normal paragraph"""

PROMPT_TEMPLATE = """
You are an expert CV/resume writer and job matching specialist.

You will receive:
1) A CV as a PDF file encoded in base64.
2) A job description as plain text.

Your goals:
- Do NOT invent or fabricate experience, skills, degrees, or dates that are not clearly supported by the CV.
- You may only rephrase, reorganize, highlight, or slightly expand on what is already present in the CV.
- Keep the improved CV concise and focused (roughly one page of content).

Your tasks:
1. Decode and read the CV.
2. Read the job description carefully.
3. Analyze how well the CV fits this specific job.
4. Suggest concrete and realistic improvements based ONLY on the existing information.
5. Emphasize the most relevant skills and experience for this specific job.
6. Rewrite the CV content so it:
   - stays faithful to the real facts in the original CV,
   - is clearly structured,
   - is not too long (approximately one page),
   - uses clear, professional language.
7. Provide a precise match score as a number from 0 to 100.
8. Provide short, clear, actionable recommendations (not long paragraphs).

Base64 CV:
{cv_base64}

Job Description:
{job_description}

Return ONLY a valid JSON object with the following structure:

{schema}

{markup_guide}

Rules:
- "match_score" must be a number (0-100), not a string and not a percentage with %.
- Do NOT add fake jobs, fake skills, fake tools, fake degrees, or fake dates.
- If you are not sure about some detail, do NOT guess it and do NOT invent it.
- You may reorder, rephrase, and slightly condense or expand, but always stay faithful to the original CV.
- "improved_cv_full_text" must be professional, focused, and roughly one page of content.
- Recommendations must be short, actionable bullet-style suggestions.
- Return ONLY JSON. Do NOT include markdown, explanations, or extra text.
"""


def encode_pdf_base64(data: bytes) -> str:
    """
    Encode raw PDF bytes for embedding in the prompt.

    Args:
        data: PDF file content.

    Returns:
        Base64 text (ASCII).
    """
    return base64.b64encode(data).decode("ascii")


def build_prompt(cv_base64: str, job_description: str) -> str:
    """
    Build the analysis prompt for a CV and job description.

    Args:
        cv_base64: The CV PDF, base64 encoded.
        job_description: Job description text.

    Returns:
        Prompt text for the language model.
    """
    return PROMPT_TEMPLATE.format(
        cv_base64=cv_base64,
        job_description=job_description.strip(),
        schema=RESPONSE_SCHEMA_EXAMPLE,
        markup_guide=MARKUP_GUIDE,
    )
