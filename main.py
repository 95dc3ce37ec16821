#!/usr/bin/env python3
"""
CV Job Optimizer CLI.

Rewrites a CV for a specific job description with a language model and
renders the result to PDF.

Usage:
    python main.py optimize CV_PDF --job-file JOB.txt   # Full pipeline
    python main.py render improved.txt -o cv.pdf         # Render markup only
    python main.py serve                                 # Run the API server
"""

import sys
from pathlib import Path

import click

from cv_optimizer import __version__

# * Configuration - adjust these paths as needed
DEFAULT_OUTPUT_DIR = Path(__file__).parent / "generated"


@click.group()
@click.version_option(version=__version__, prog_name="CV Job Optimizer")
@click.option("--log-level", default="INFO", show_default=True, help="Logging level")
def cli(log_level: str):
    """
    CV Job Optimizer - Tailor your CV to a job description.

    Sends your CV and the job description to a language model, then renders
    the improved CV (or a full analysis report) as a new PDF.
    """
    from cv_optimizer.logging_config import configure_logging

    configure_logging(log_level)


@cli.command()
@click.argument("cv_pdf", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--job-file",
    "-j",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="File containing the job description",
)
@click.option(
    "--text",
    "-t",
    type=str,
    default=None,
    help="Job description text (alternative to file)",
)
@click.option(
    "--mode",
    "-m",
    type=click.Choice(["cv", "report"]),
    default="cv",
    show_default=True,
    help="Render the improved CV only, or the full analysis report",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(file_okay=False),
    default=str(DEFAULT_OUTPUT_DIR),
    help="Directory for the generated PDF",
)
def optimize(cv_pdf: str, job_file: str, text: str, mode: str, output: str):
    """
    Optimize a CV PDF for a job description.

    Example:
        python main.py optimize cv.pdf --job-file vacancies/backend.txt
        python main.py optimize cv.pdf --text "Senior backend engineer..." -m report
    """
    from cv_optimizer.config import load_settings
    from cv_optimizer.exceptions import CVOptimizerError
    from cv_optimizer.markup import format_score, normalize_items
    from cv_optimizer.optimizer import CVOptimizer
    from cv_optimizer.storage import DocumentStore, validate_pdf

    # * Get job description text
    if job_file:
        with open(job_file, "r", encoding="utf-8") as f:
            job_text = f.read()
        click.echo(f"Job description: {Path(job_file).name}")
    elif text:
        job_text = text
        click.echo("Job description: (provided via --text)")
    else:
        click.echo("Error: Provide either --job-file or --text", err=True)
        sys.exit(1)

    settings = load_settings()
    output_dir = Path(output)
    store = DocumentStore(settings.uploads_dir, output_dir)

    try:
        store.ensure_directories()
        validate_pdf(Path(cv_pdf).read_bytes())
        optimizer = CVOptimizer(store=store, settings=settings)
        result = optimizer.optimize(cv_pdf, job_text, mode=mode)
    except CVOptimizerError as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)
    except ValueError as e:
        # * Missing API key or unreadable PDF font
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)

    analysis = result.analysis
    score = format_score(analysis.match_score)

    click.echo()
    click.echo("═" * 50)
    click.echo(f"  MATCH SCORE: {score or 'n/a'}")
    click.echo("═" * 50)

    missing = normalize_items(analysis.missing_qualifications)
    if missing:
        click.echo()
        click.echo("Missing Qualifications:")
        for item in missing:
            click.echo(f"  • {item}")

    click.echo()
    click.echo(f"✓ PDF: {result.pdf_path}")


@cli.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    required=True,
    help="Path of the PDF to write",
)
@click.option(
    "--report/--cv-only",
    default=False,
    help="Treat SOURCE as a saved analysis JSON and render the full report",
)
@click.option(
    "--font",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="TrueType font for regular text (default: CV_PDF_FONT or Helvetica)",
)
@click.option(
    "--bold-font",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="TrueType font for bold text (default: CV_PDF_BOLD_FONT or --font)",
)
def render(source: str, output: str, report: bool, font: str, bold_font: str):
    """
    Render a markup text file (or analysis JSON) to PDF without calling the model.
    """
    from cv_optimizer.config import load_settings
    from cv_optimizer.exceptions import CVOptimizerError
    from cv_optimizer.pdf_renderer import render_pdf
    from cv_optimizer.response_parser import parse_analysis

    with open(source, "r", encoding="utf-8") as f:
        content = f.read()

    settings = load_settings()
    if font:
        font_path, bold_font_path = font, bold_font
    else:
        font_path = settings.pdf_font_path
        bold_font_path = bold_font or settings.pdf_bold_font_path

    try:
        if report:
            content = parse_analysis(content)
        path = render_pdf(content, output, font_path=font_path, bold_font_path=bold_font_path)
    except (CVOptimizerError, ValueError) as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)

    click.echo(f"✓ PDF: {path}")


@cli.command()
@click.option("--host", default="0.0.0.0", show_default=True, help="Bind address")
@click.option("--port", type=int, default=None, help="Port (default: PORT env or 3001)")
@click.option("--reload/--no-reload", default=False, help="Auto-reload on code changes")
def serve(host: str, port: int, reload: bool):
    """
    Run the HTTP API with uvicorn.
    """
    import uvicorn

    from cv_optimizer.config import load_settings

    port = port or load_settings().port
    click.echo(f"Server listening on http://{host}:{port}")
    uvicorn.run("backend.api:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    cli()
