"""
Runtime configuration.

Values come from environment variables, optionally loaded from a .env file.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# * Defaults
DEFAULT_MODEL = "gpt-5-mini"
DEFAULT_MAX_COMPLETION_TOKENS = 8000
DEFAULT_PORT = 3001
DEFAULT_CORS_ORIGINS = ["http://localhost:3000"]


@dataclass
class Settings:
    openai_api_key: str | None = None
    openai_model: str = DEFAULT_MODEL
    max_completion_tokens: int = DEFAULT_MAX_COMPLETION_TOKENS
    uploads_dir: Path = Path("uploads")
    generated_dir: Path = Path("generated")
    cors_origins: list[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    log_level: str = "INFO"
    port: int = DEFAULT_PORT
    # * TrueType fonts for the generated PDF; Helvetica (Latin-1 only) when unset
    pdf_font_path: Path | None = None
    pdf_bold_font_path: Path | None = None


def _split_origins(value: str | None) -> list[str]:
    if not value:
        return list(DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in value.split(",") if origin.strip()]


def _optional_path(value: str | None) -> Path | None:
    return Path(value).expanduser() if value else None


def load_settings() -> Settings:
    """
    Build settings from the environment.

    Returns:
        Settings populated from environment variables and .env.
    """
    load_dotenv()

    return Settings(
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        openai_model=os.getenv("OPENAI_MODEL", DEFAULT_MODEL),
        max_completion_tokens=int(
            os.getenv("LLM_MAX_COMPLETION_TOKENS", DEFAULT_MAX_COMPLETION_TOKENS)
        ),
        uploads_dir=Path(os.getenv("CV_UPLOADS_DIR", "uploads")).resolve(),
        generated_dir=Path(os.getenv("CV_GENERATED_DIR", "generated")).resolve(),
        cors_origins=_split_origins(os.getenv("CORS_ORIGINS")),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        port=int(os.getenv("PORT", DEFAULT_PORT)),
        pdf_font_path=_optional_path(os.getenv("CV_PDF_FONT")),
        pdf_bold_font_path=_optional_path(os.getenv("CV_PDF_BOLD_FONT")),
    )
