import io
import os
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.datastructures import FileStorage

from document_pdf_gallery.extensions import db
from document_pdf_gallery.models import Document
from document_pdf_gallery.services import document_service
from document_pdf_gallery.services.errors import StorageWriteFailed
from document_pdf_gallery.services.storage import PublicStorage
from document_pdf_gallery.utils.formatting import diff_for_humans


def test_file_type_is_immutable():
    document = Document(name='report.docx', path='a', pdf_path='b', file_type='word')
    document.file_type = 'word'
    with pytest.raises(ValueError):
        document.file_type = 'excel'
    assert document.file_type == 'word'


def test_file_type_must_be_a_known_category():
    with pytest.raises(ValueError):
        Document(name='x', path='a', pdf_path='b', file_type='video')


def test_display_helpers():
    document = Document(name='Budget 2024.xlsx', path='a', pdf_path='b', file_type='excel')
    assert document.pdf_download_name == 'Budget 2024.pdf'
    assert document.file_icon == '📊'
    assert Document(name='x.pdf', path='a', pdf_path='b', file_type='pdf').file_icon == '📎'


def test_diff_for_humans():
    now = datetime(2026, 1, 10, 12, 0, tzinfo=timezone.utc)
    assert diff_for_humans(now - timedelta(minutes=3), now) == '3 minutes ago'
    assert diff_for_humans(now - timedelta(hours=1), now) == '1 hour ago'
    assert diff_for_humans(now - timedelta(days=15), now) == '2 weeks ago'
    assert diff_for_humans(now, now) == 'just now'
    assert diff_for_humans(datetime(2026, 1, 10, 11, 59, 30), now) == '30 seconds ago'
    assert diff_for_humans(None) == ''


def _write(storage, relative, data=b'data'):
    path = storage.path(relative)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, 'wb') as f:
        f.write(data)
    return relative


def test_staged_delete_restore_and_purge(tmp_path):
    storage = PublicStorage(str(tmp_path))
    original = _write(storage, 'files/documents/abc.docx')
    pdf = _write(storage, 'files/pdfs/abc.pdf')

    staged = storage.stage_for_delete([original, pdf, 'files/pdfs/missing.pdf', None])
    assert not storage.exists(original) and not storage.exists(pdf)

    staged.restore()
    assert storage.exists(original) and storage.exists(pdf)

    staged = storage.stage_for_delete([original, pdf])
    assert staged.purge() == []
    assert not storage.exists(original) and not storage.exists(pdf)


def test_storage_rejects_paths_outside_root(tmp_path):
    storage = PublicStorage(str(tmp_path / 'public'))
    with pytest.raises(ValueError):
        storage.path('../secrets.txt')


def test_put_file_failure_raises_storage_error(tmp_path):
    storage = PublicStorage(str(tmp_path))
    (tmp_path / 'files').write_text('a file where a directory should be')
    upload = FileStorage(stream=io.BytesIO(b'abc'), filename='a.png')
    with pytest.raises(StorageWriteFailed):
        storage.put_file(upload, 'files/documents', 'a.png')


def test_delete_restores_files_when_commit_fails(app, monkeypatch, tmp_path):
    with app.app_context():
        storage = app.extensions['public_storage']
        original = _write(storage, 'files/documents/keep.png')
        pdf = _write(storage, 'files/pdfs/keep.pdf')
        document = Document(name='keep.png', path=original, pdf_path=pdf, file_type='image')
        db.session.add(document)
        db.session.commit()

        def broken_commit():
            raise SQLAlchemyError('database is locked')
        monkeypatch.setattr(db.session(), 'commit', broken_commit)

        with pytest.raises(SQLAlchemyError):
            document_service.delete_document(document)

        monkeypatch.undo()
        assert storage.exists(original) and storage.exists(pdf)
        assert Document.query.count() == 1


class _DroppedConnection(io.BytesIO):
    """Hands out one chunk, then fails like a client that went away mid-upload."""

    def __init__(self):
        super().__init__(b'x' * 4096)
        self.reads = 0

    def read(self, size=-1):
        self.reads += 1
        if self.reads > 1:
            raise OSError('connection reset by peer')
        return super().read(16)


def test_put_file_removes_partial_write(tmp_path):
    storage = PublicStorage(str(tmp_path))
    upload = FileStorage(stream=_DroppedConnection(), filename='big.png')

    with pytest.raises(StorageWriteFailed):
        storage.put_file(upload, 'files/documents', 'abc.png')

    assert not storage.exists('files/documents/abc.png')
