import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Optional

from document_pdf_gallery.services.errors import ConversionMethodFailed, ExternalToolUnavailable

BINARY_NAMES = ('soffice', 'libreoffice')


def find_soffice() -> Optional[str]:
    """Locate the office-suite binary on PATH (soffice first, then libreoffice)."""
    for name in BINARY_NAMES:
        path = shutil.which(name)
        if path:
            return path
    return None


def is_available() -> bool:
    return find_soffice() is not None


def convert_with_libreoffice(source_path: str, pdf_path: str, timeout: Optional[float] = 120) -> str:
    """
    Convert an office document to PDF with LibreOffice in headless mode.

    soffice names its output after the source's base filename, so the conversion
    runs into a private temp directory and the result is moved to ``pdf_path``.

    Returns:
        ``pdf_path`` once the file exists.
    Raises:
        ExternalToolUnavailable: soffice is not on PATH.
        ConversionMethodFailed: non-zero exit, timeout, or no PDF produced.
    """
    soffice_path = find_soffice()
    if not soffice_path:
        raise ExternalToolUnavailable("LibreOffice (soffice) not found on PATH")

    source = Path(source_path).resolve()
    with tempfile.TemporaryDirectory(prefix='soffice_') as outdir:
        try:
            completed = subprocess.run(
                [soffice_path, '--headless', '--convert-to', 'pdf', '--outdir', outdir, str(source)],
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            # subprocess.run kills the child before re-raising
            raise ConversionMethodFailed(f"LibreOffice conversion timed out after {timeout} seconds") from e
        except OSError as e:
            raise ConversionMethodFailed(f"LibreOffice could not be started: {e}") from e

        if completed.returncode != 0:
            output = (completed.stderr or completed.stdout or '').strip()
            raise ConversionMethodFailed(f"LibreOffice conversion failed (exit {completed.returncode}): {output}")

        generated = Path(outdir) / f"{source.stem}.pdf"
        if not generated.exists():
            raise ConversionMethodFailed("LibreOffice did not generate PDF file")

        os.makedirs(os.path.dirname(os.path.abspath(pdf_path)), exist_ok=True)
        shutil.move(str(generated), pdf_path)

    return pdf_path
