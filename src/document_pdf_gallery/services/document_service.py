"""Upload → store → convert → persist, listing, and two-phase delete of documents."""
import logging

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from document_pdf_gallery.extensions import db
from document_pdf_gallery.models import Document
from document_pdf_gallery.services.errors import StorageWriteFailed
from document_pdf_gallery.services.file_types import ALLOWED_EXTENSIONS, get_file_type
from document_pdf_gallery.services.provider_factory import get_conversion_service
from document_pdf_gallery.services.storage import get_storage
from document_pdf_gallery.utils.file_utils import generate_hash_name, get_extension, stream_size

logger = logging.getLogger(__name__)

UPLOAD_FIELD = 'document'

MESSAGES = {
    'required': 'Please choose a file to upload.',
    'mimes': 'Please upload a PDF, Word document, Excel spreadsheet, or image file.',
    'max': 'File size must not exceed 20MB.',
}


class UploadValidationError(Exception):
    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(message)


def validate_upload(file_storage, max_kb: int):
    """Return (extension, category) for an acceptable upload or raise UploadValidationError."""
    if file_storage is None or not file_storage.filename:
        raise UploadValidationError(UPLOAD_FIELD, MESSAGES['required'])

    extension = get_extension(file_storage.filename)
    category = get_file_type(extension)
    if extension not in ALLOWED_EXTENSIONS or category is None:
        raise UploadValidationError(UPLOAD_FIELD, MESSAGES['mimes'])

    if stream_size(file_storage) > max_kb * 1024:
        raise UploadValidationError(UPLOAD_FIELD, MESSAGES['max'])
    return extension, category


def list_documents(page: int = 1, per_page: int = 20):
    """Newest first."""
    query = Document.query.order_by(Document.created_at.desc(), Document.id.desc())
    return query.paginate(page=page, per_page=per_page, error_out=False)


def create_document(file_storage) -> Document:
    """Store the original, convert (or copy) it to PDF and save the record.

    Nothing is left behind on failure: the stored files are removed and the
    session rolled back before the exception propagates.
    """
    config = current_app.config
    extension, category = validate_upload(file_storage, config['MAX_UPLOAD_KB'])

    storage = get_storage()
    service = get_conversion_service()
    hash_name = generate_hash_name()

    document_path = storage.put_file(file_storage, config['DOCUMENTS_DIR'], f"{hash_name}.{extension}")
    pdf_path = None
    try:
        pdf_path = service.convert_to_pdf(storage.path(document_path), category.value, hash_name)
        if not (storage.exists(document_path) and storage.exists(pdf_path)):
            raise StorageWriteFailed(f"Stored files missing after conversion of {file_storage.filename}")

        document = Document(
            name=file_storage.filename,
            path=document_path,
            pdf_path=pdf_path,
            file_type=category.value,
        )
        db.session.add(document)
        db.session.commit()
    except Exception:
        db.session.rollback()
        storage.delete(document_path)
        if pdf_path:
            storage.delete(pdf_path)
        raise

    logger.info("Stored document id=%s name=%r type=%s", document.id, document.name, document.file_type)
    return document


def delete_document(document: Document) -> None:
    """Remove the record and both backing files.

    Files are first moved aside; the record is deleted only once both moves
    succeed, and the files come back if the commit fails. Staged files that
    cannot be unlinked afterwards are logged as orphans.
    """
    storage = get_storage()
    staged = storage.stage_for_delete([document.path, document.pdf_path])

    document_id = document.id
    try:
        db.session.delete(document)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        staged.restore()
        raise

    orphans = staged.purge()
    if orphans:
        logger.warning("Document id=%s deleted with %s orphaned file(s)", document_id, len(orphans))
    else:
        logger.info("Deleted document id=%s and its files", document_id)
