from flask import Blueprint, abort, current_app, flash, redirect, render_template, request, send_from_directory, url_for
from sqlalchemy.exc import SQLAlchemyError

from document_pdf_gallery.extensions import db
from document_pdf_gallery.models import Document
from document_pdf_gallery.services.document_service import (
    MESSAGES,
    UPLOAD_FIELD,
    UploadValidationError,
    create_document,
    delete_document,
    list_documents,
)
from document_pdf_gallery.services.errors import ConversionError, StorageWriteFailed
from document_pdf_gallery.services.file_types import accept_attribute
from document_pdf_gallery.services.storage import TRASH_DIR, get_storage

bp = Blueprint('documents', __name__)


def _back_to_index(status=302):
    return redirect(url_for('documents.index'), code=status)


@bp.route('/')
@bp.route('/documents')
def index():
    page = request.args.get('page', 1, type=int)
    pagination = list_documents(page=max(page, 1), per_page=current_app.config.get('DOCUMENTS_PER_PAGE', 20))
    return render_template('documents.html', documents=pagination.items, pagination=pagination,
                           upload_field=UPLOAD_FIELD, accept=accept_attribute())


@bp.route('/documents', methods=['POST'])
def create():
    upload = request.files.get(UPLOAD_FIELD)
    try:
        document = create_document(upload)
    except UploadValidationError as e:
        flash(e.message, e.field)
        return _back_to_index()
    except ConversionError as e:
        current_app.logger.error(f"Upload of {upload.filename!r} failed: {e}")
        flash(f"Conversion failed: {e}", 'error')
        return _back_to_index()
    except Exception as e:
        current_app.logger.error(f"Unexpected error while uploading document: {e}", exc_info=True)
        flash(f"Conversion failed: {e}", 'error')
        return _back_to_index()

    current_app.logger.info(f"Uploaded {document.name!r} as {document.file_type}")
    flash('Document uploaded and converted to PDF successfully!', 'success')
    return _back_to_index()


@bp.route('/documents/<int:document_id>', methods=['DELETE'])
@bp.route('/documents/<int:document_id>/delete', methods=['POST'])
def destroy(document_id):
    document = db.get_or_404(Document, document_id)
    try:
        delete_document(document)
    except (StorageWriteFailed, SQLAlchemyError) as e:
        current_app.logger.error(f"Failed to delete document id={document_id}: {e}", exc_info=True)
        flash(f"Could not delete document: {e}", 'error')
        return _back_to_index(303)

    flash('Document deleted successfully!', 'success')
    return _back_to_index(303)


@bp.route('/storage/<path:filename>')
def storage_file(filename):
    if filename.split('/', 1)[0] == TRASH_DIR:
        abort(404)
    return send_from_directory(get_storage().root, filename)


@bp.app_errorhandler(413)
def upload_too_large(error):
    flash(MESSAGES['max'], UPLOAD_FIELD)
    return _back_to_index()
