"""CLI commands using Typer."""

import logging
from pathlib import Path
from typing import Optional
import requests
import typer
from pydantic import ValidationError

from dascraper.config import ExtractionConfig, ScraperConfig
from dascraper.extractor import Extractor
from dascraper.fetch import discover_pdf_urls, document_name, download_pdf, fetch_listing, select_documents
from dascraper.output import OutputGenerator
from dascraper.parser import read_fragment_pages
from dascraper.store import RecordStore

logger = logging.getLogger(__name__)

app = typer.Typer(help="Development application register PDF scraper")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show per-row debug logging")):
    """Configure logging for all commands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s | %(name)s | %(message)s",
    )


def _load_config(config_path: Optional[str], config_class=ExtractionConfig):
    if not config_path:
        return config_class()
    try:
        return config_class.from_file(config_path)
    except (OSError, ValidationError) as e:
        typer.echo(f"Error: Invalid config file {config_path}: {e}", err=True)
        raise typer.Exit(code=2)


def _check_input(input_path: str) -> Path:
    input_file = Path(input_path)
    if not input_file.exists():
        typer.echo(f"Error: Input file not found: {input_path}", err=True)
        raise typer.Exit(code=2)
    if input_file.suffix.lower() not in (".pdf", ".json"):
        typer.echo(f"Error: Not a PDF or fragment JSON file: {input_path}", err=True)
        raise typer.Exit(code=2)
    return input_file


@app.command()
def extract(
    input_path: str = typer.Argument(..., help="PDF file, or JSON file of pre-parsed fragments"),
    out: str = typer.Option("out", "--out", "-o", help="Output directory"),
    url: Optional[str] = typer.Option(None, "--url", help="Source URL recorded on each application"),
    config_path: Optional[str] = typer.Option(None, "--config", "-c", help="JSON configuration file"),
    db: Optional[str] = typer.Option(None, "--db", help="SQLite database to insert applications into"),
    row_matching: Optional[str] = typer.Option(None, "--row-matching", help="Row clustering rule: nearest or latest"),
):
    """Extract development applications from one document."""
    input_file = _check_input(input_path)
    config = _load_config(config_path)
    if row_matching:
        if row_matching not in ("nearest", "latest"):
            typer.echo(f"Error: Unknown row matching rule: {row_matching}", err=True)
            raise typer.Exit(code=2)
        config = config.model_copy(update={"row_matching": row_matching})

    information_url = url or input_file.resolve().as_uri()
    typer.echo(f"Processing {input_file.name}")

    try:
        pages = read_fragment_pages(input_file)
    except Exception as e:
        typer.echo(f"[FAIL] Could not read {input_file.name}: {e}", err=True)
        raise typer.Exit(code=1)

    applications, summary = Extractor(config).extract_records(pages, information_url)
    typer.echo(f"[OK] {summary.pages} page(s), {summary.rows} row(s), {summary.records} application(s)")
    if summary.missing_lodgement_dates:
        typer.echo(f"[WARNING] {summary.missing_lodgement_dates} application(s) without a lodgement date")

    output_gen = OutputGenerator(out)
    json_path = output_gen.generate_records_json(input_file.stem, applications, summary)
    typer.echo(f"[OK] Records JSON: {json_path}")

    if db:
        with RecordStore(db) as store:
            inserted = store.insert_many(applications)
        typer.echo(f"[OK] Inserted {inserted} new application(s) into {db}")


@app.command()
def rows(
    input_path: str = typer.Argument(..., help="PDF file, or JSON file of pre-parsed fragments"),
    out: str = typer.Option("out", "--out", "-o", help="Output directory"),
    row_matching: str = typer.Option("nearest", "--row-matching", help="Row clustering rule: nearest or latest"),
):
    """Dump the reconstructed rows of a document for debugging."""
    input_file = _check_input(input_path)
    if row_matching not in ("nearest", "latest"):
        typer.echo(f"Error: Unknown row matching rule: {row_matching}", err=True)
        raise typer.Exit(code=2)

    try:
        pages = read_fragment_pages(input_file)
    except Exception as e:
        typer.echo(f"[FAIL] Could not read {input_file.name}: {e}", err=True)
        raise typer.Exit(code=1)

    extractor = Extractor(ExtractionConfig(row_matching=row_matching))
    document_rows = extractor.reconstruct(pages)
    rows_path = OutputGenerator(out).generate_rows_json(input_file.stem, document_rows)
    typer.echo(f"[OK] {len(document_rows)} row(s) from {len(pages)} page(s): {rows_path}")


@app.command()
def scrape(
    listing_url: Optional[str] = typer.Option(None, "--listing-url", help="Page listing the register PDFs"),
    db: Optional[str] = typer.Option(None, "--db", help="SQLite database file"),
    max_documents: Optional[int] = typer.Option(None, "--max-documents", "-n", min=1, help="Documents to parse this run"),
    config_path: Optional[str] = typer.Option(None, "--config", "-c", help="JSON configuration file"),
):
    """Find register PDFs on the council site, parse them and store the applications."""
    config = _load_config(config_path, ScraperConfig)
    overrides = {
        key: value for key, value in
        (("listing_url", listing_url), ("database", db), ("max_documents", max_documents))
        if value is not None
    }
    config = config.model_copy(update=overrides)

    session = requests.Session()
    try:
        html = fetch_listing(config.listing_url, session, config.timeout)
    except requests.RequestException as e:
        typer.echo(f"[FAIL] Error requesting page {config.listing_url}: {e}", err=True)
        raise typer.Exit(code=1)

    pdf_urls = discover_pdf_urls(html, config.listing_url, config.link_selector)
    selected = select_documents(pdf_urls, config.max_documents)
    typer.echo(f"Found {len(pdf_urls)} PDF file(s) at {config.listing_url}. Selected {len(selected)} to parse.")

    extractor = Extractor(config)
    failures = 0
    with RecordStore(config.database) as store:
        for pdf_url in selected:
            name = document_name(pdf_url)
            try:
                content = download_pdf(pdf_url, session, config.timeout)
                applications, summary = extractor.extract_pdf(content, pdf_url)
            except Exception as e:
                failures += 1
                logger.warning("Skipping document %s: %s", pdf_url, e)
                typer.echo(f"[FAIL] {name}: {e}", err=True)
                continue

            inserted = store.insert_many(applications)
            store.commit()
            typer.echo(f"[OK] {name}: {summary.records} application(s), {inserted} new")

    if failures:
        raise typer.Exit(code=1)


@app.command()
def version():
    """Show version information."""
    from dascraper import __version__
    typer.echo(f"dascraper version {__version__}")


if __name__ == "__main__":
    app()
