import pytest

from document_pdf_gallery.models import FileCategory
from document_pdf_gallery.services.file_types import (
    ALLOWED_EXTENSIONS,
    accept_attribute,
    extensions_for,
    get_file_type,
)
from document_pdf_gallery.utils.file_utils import generate_hash_name, get_extension


@pytest.mark.parametrize('extension, expected', [
    ('pdf', FileCategory.PDF),
    ('docx', FileCategory.WORD),
    ('RTF', FileCategory.WORD),
    ('.odt', FileCategory.WORD),
    ('csv', FileCategory.EXCEL),
    ('xlsx', FileCategory.EXCEL),
    ('JPEG', FileCategory.IMAGE),
    ('webp', FileCategory.IMAGE),
])
def test_get_file_type_known_extensions(extension, expected):
    assert get_file_type(extension) == expected


@pytest.mark.parametrize('extension', ['txt', 'exe', '', 'docm', 'svg'])
def test_get_file_type_unknown_extensions(extension):
    assert get_file_type(extension) is None


def test_allowed_extensions_cover_every_category():
    for category in FileCategory:
        assert set(extensions_for(category)) <= ALLOWED_EXTENSIONS
    assert len(ALLOWED_EXTENSIONS) == 15


def test_accept_attribute_lists_dotted_extensions():
    accept = accept_attribute().split(',')
    assert accept[0] == '.pdf'
    assert '.webp' in accept and '.ods' in accept
    assert len(accept) == len(ALLOWED_EXTENSIONS)


def test_get_extension_and_hash_name():
    assert get_extension('Report.Final.DOCX') == 'docx'
    assert get_extension('noext') == ''
    name = generate_hash_name()
    assert len(name) == 40 and name != generate_hash_name()
