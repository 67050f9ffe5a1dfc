import os
import subprocess

import pytest

from document_pdf_gallery.services import libreoffice
from document_pdf_gallery.services.conversion.strategies import LibreOfficeStrategy
from document_pdf_gallery.services.errors import ConversionMethodFailed, ExternalToolUnavailable


@pytest.fixture
def source(tmp_path):
    path = tmp_path / 'report.doc'
    path.write_bytes(b'legacy word bytes')
    return path


@pytest.fixture
def soffice(monkeypatch):
    monkeypatch.setattr(libreoffice, 'find_soffice', lambda: '/usr/bin/soffice')


def fake_run(returncode=0, write_pdf=True, stderr=''):
    def run(args, **kwargs):
        assert args[1:4] == ['--headless', '--convert-to', 'pdf']
        outdir = args[args.index('--outdir') + 1]
        if write_pdf:
            stem = os.path.splitext(os.path.basename(args[-1]))[0]
            with open(os.path.join(outdir, f'{stem}.pdf'), 'wb') as f:
                f.write(b'%PDF-1.4 from soffice')
        return subprocess.CompletedProcess(args, returncode, stdout='', stderr=stderr)
    return run


def test_missing_binary_is_reported_unavailable(monkeypatch, source, tmp_path):
    monkeypatch.setattr(libreoffice, 'find_soffice', lambda: None)
    with pytest.raises(ExternalToolUnavailable):
        libreoffice.convert_with_libreoffice(str(source), str(tmp_path / 'out.pdf'))

    result = LibreOfficeStrategy().attempt(str(source), str(tmp_path / 'out.pdf'), 'word')
    assert result.unavailable and not result.ok


def test_successful_conversion_moves_output(monkeypatch, soffice, source, tmp_path):
    monkeypatch.setattr(libreoffice.subprocess, 'run', fake_run())
    target = tmp_path / 'pdfs' / 'hashname.pdf'

    assert libreoffice.convert_with_libreoffice(str(source), str(target)) == str(target)
    assert target.read_bytes() == b'%PDF-1.4 from soffice'


def test_non_zero_exit(monkeypatch, soffice, source, tmp_path):
    monkeypatch.setattr(libreoffice.subprocess, 'run', fake_run(returncode=1, write_pdf=False, stderr='Error: source file could not be loaded'))
    with pytest.raises(ConversionMethodFailed, match='exit 1'):
        libreoffice.convert_with_libreoffice(str(source), str(tmp_path / 'out.pdf'))


def test_no_pdf_generated(monkeypatch, soffice, source, tmp_path):
    monkeypatch.setattr(libreoffice.subprocess, 'run', fake_run(write_pdf=False))
    with pytest.raises(ConversionMethodFailed, match='did not generate'):
        libreoffice.convert_with_libreoffice(str(source), str(tmp_path / 'out.pdf'))


def test_timeout(monkeypatch, soffice, source, tmp_path):
    def run(args, **kwargs):
        raise subprocess.TimeoutExpired(args, kwargs['timeout'])
    monkeypatch.setattr(libreoffice.subprocess, 'run', run)

    with pytest.raises(ConversionMethodFailed, match='timed out after 5 seconds'):
        libreoffice.convert_with_libreoffice(str(source), str(tmp_path / 'out.pdf'), timeout=5)
    assert not (tmp_path / 'out.pdf').exists()
