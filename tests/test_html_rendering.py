import pytest
from reportlab.lib.pagesizes import A4

from document_pdf_gallery.services.errors import RenderError
from document_pdf_gallery.services.html_builder import MINIMAL_CSS, excel_to_html, wrap_html_minimal
from document_pdf_gallery.services.html_renderer import (
    LANDSCAPE,
    RendererOptions,
    prepare_html,
    render_html_to_pdf,
)
from tests.helpers import is_pdf, make_xlsx, media_box

SAMPLE = "<html><head><style>p { color: red; }</style></head><body><p>Hello PDF</p></body></html>"


def test_wrap_html_minimal_keeps_document_styles():
    wrapped = wrap_html_minimal("<!DOCTYPE html>" + SAMPLE)
    assert wrapped.count('<!DOCTYPE html>') == 1
    assert wrapped.count('<body>') == 1
    assert '<p>Hello PDF</p>' in wrapped
    assert 'p { color: red; }' in wrapped
    assert wrapped.index(MINIMAL_CSS.strip()) < wrapped.index('p { color: red; }')


def test_prepare_html_drops_scripts_and_screen_styles():
    html = ('<html><head><style media="screen">.x{}</style><style media="print">.y{}</style>'
            '<script>alert(1)</script></head><body>x</body></html>')
    prepared = prepare_html(html, RendererOptions(), LANDSCAPE)
    assert '<script' not in prepared
    assert '.x{}' not in prepared
    assert '.y{}' in prepared
    assert '@page { size: a4 landscape; }' in prepared


def test_render_portrait_and_landscape(tmp_path):
    portrait_pdf = tmp_path / 'portrait.pdf'
    landscape_pdf = tmp_path / 'landscape.pdf'

    assert render_html_to_pdf(SAMPLE, str(portrait_pdf)) > 100
    render_html_to_pdf(SAMPLE, str(landscape_pdf), LANDSCAPE)

    assert is_pdf(portrait_pdf)
    assert media_box(portrait_pdf) == pytest.approx(A4, abs=1)
    assert media_box(landscape_pdf) == pytest.approx((A4[1], A4[0]), abs=1)


def test_render_rejects_tiny_output(tmp_path):
    output = tmp_path / 'out.pdf'
    with pytest.raises(RenderError, match='empty or corrupted'):
        render_html_to_pdf(SAMPLE, str(output), options=RendererOptions(min_output_bytes=10 ** 9))
    assert not output.exists()


def test_render_enforces_input_budget(tmp_path):
    with pytest.raises(RenderError, match='render budget'):
        render_html_to_pdf(SAMPLE, str(tmp_path / 'out.pdf'), options=RendererOptions(max_html_bytes=10))


def test_excel_to_html_renders_used_range(tmp_path):
    path = make_xlsx(tmp_path / 'data.xlsx')
    html = excel_to_html(str(path))
    assert html.count('<tr>') == 4
    assert '135</td>' in html
    assert 'text-align: right' in html
    assert 'South' in html
