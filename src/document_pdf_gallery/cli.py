from __future__ import annotations

import os

import click

from document_pdf_gallery.config import Config, load_environment
from document_pdf_gallery.services.errors import ConversionError
from document_pdf_gallery.services.provider_factory import build_conversion_service


@click.group()
def cli() -> None:
    """Document PDF Gallery CLI."""


@cli.command("convert-file")
@click.argument("source", type=click.Path(exists=True, dir_okay=False, readable=True))
@click.argument("output", type=click.Path(dir_okay=False, writable=True))
@click.option("--file-type", "file_type", "-t", type=click.Choice(["pdf", "word", "excel", "image"]),
              help="Document category. Defaults to the category of the source extension.")
def convert_file(source: str, output: str, file_type: str | None) -> None:
    """Convert SOURCE to a PDF written at OUTPUT."""
    load_environment()
    service = build_conversion_service()
    try:
        service.convert(source, output, file_type)
    except ConversionError as e:
        click.secho(f"[error] {e}", fg="red", err=True)
        raise SystemExit(1)
    click.secho(f"[ok] written -> {os.path.abspath(output)}", fg="green")


@cli.command("convert-dir")
@click.argument("source_dir", type=click.Path(exists=True, file_okay=False, readable=True))
@click.option("--output-dir", "output_dir", "-o", required=True, type=click.Path(file_okay=False, writable=True),
              help="Directory to write PDFs to (structure is preserved).")
@click.option("--extensions", "exts", "-e", help="Comma-separated list of extensions to include (default: all supported).")
@click.option("--recursive/--no-recursive", default=True, help="Recurse into subdirectories (default: true).")
def convert_dir(source_dir: str, output_dir: str, exts: str | None, recursive: bool) -> None:
    """Convert every supported file under SOURCE_DIR to PDF."""
    load_environment()
    service = build_conversion_service()

    if exts:
        include_exts = [x.strip().lower().lstrip('.') for x in exts.split(',') if x.strip()]
    else:
        include_exts = [ext.lower() for ext in Config.SUPPORTED_FILE_TYPES]

    total = success = failed = 0
    for root, dirs, files in os.walk(source_dir):
        if not recursive:
            dirs[:] = []
        for fname in sorted(files):
            ext = os.path.splitext(fname)[1].lstrip('.').lower()
            if ext not in include_exts:
                continue
            total += 1
            src_path = os.path.join(root, fname)
            rel_no_ext = os.path.splitext(os.path.relpath(src_path, source_dir))[0]
            out_path = os.path.join(output_dir, rel_no_ext + ".pdf")

            try:
                service.convert(src_path, out_path)
            except ConversionError as e:
                failed += 1
                click.secho(f"[fail] {src_path} :: {e}", fg="red", err=True)
                continue
            success += 1
            click.secho(f"[ok] {src_path} -> {out_path}", fg="green")

    click.echo(f"Done. total={total} success={success} failed={failed}")
    if failed:
        raise SystemExit(1)


@cli.command("probe")
def probe() -> None:
    """Show the configured conversion chains and which methods are available here."""
    load_environment()
    service = build_conversion_service()
    for category, methods in service.describe_chains().items():
        click.echo(f"{category}:")
        for method in methods:
            status = "available" if method['available'] else "unavailable"
            click.secho(f"  {method['name']:<12} {status}", fg="green" if method['available'] else "yellow")


@cli.command("init-db")
def init_db() -> None:
    """Create the documents table in the configured database."""
    from document_pdf_gallery import create_app
    from document_pdf_gallery.extensions import db

    app = create_app()
    with app.app_context():
        db.create_all()
    click.secho("Database initialized!", fg="green")


if __name__ == "__main__":
    cli()
