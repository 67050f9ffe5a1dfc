import pytest
from reportlab.lib.pagesizes import A4

from document_pdf_gallery.services.errors import ConversionMethodFailed
from document_pdf_gallery.services.page_images import combine_images_to_pdf, count_pdf_pages
from tests.helpers import make_image, media_box


def test_count_pdf_pages_ignores_pages_tree():
    data = b'<< /Type /Pages /Count 2 >>\n<< /Type /Page /Parent 1 0 R >>\n<< /Type/Page\n>>'
    assert count_pdf_pages(data) == 2


def test_count_pdf_pages_minimum_one(tmp_path):
    assert count_pdf_pages(b'') == 1
    assert count_pdf_pages(str(tmp_path / 'missing.pdf')) == 1


def test_combine_images_one_page_each(tmp_path):
    images = [str(make_image(tmp_path / f'page_{n}.png', size=(794, 1123))) for n in range(3)]
    output = tmp_path / 'combined.pdf'

    combine_images_to_pdf(images, str(output))

    assert count_pdf_pages(str(output)) == 3
    assert media_box(output) == pytest.approx(A4, abs=1)


def test_combine_requires_images(tmp_path):
    with pytest.raises(ConversionMethodFailed):
        combine_images_to_pdf([], str(tmp_path / 'empty.pdf'))
