from __future__ import annotations

from io import BytesIO
from typing import Iterator, List

from reportlab.lib.pagesizes import LETTER
from reportlab.pdfgen import canvas

FONT_SIZE = 12
TOP_MARGIN = 740
LEFT_MARGIN = 50


def _pages(lines: List[str], lines_per_page: int) -> Iterator[List[str]]:
    if not lines:
        yield [""]
        return
    for start in range(0, len(lines), lines_per_page):
        yield lines[start : start + lines_per_page]


def create_schedule_pdf(text: str, lines_per_page: int = 40) -> bytes:
    """Render schedule text one line per PDF text line, across pages.

    Output is byte-stable between runs (invariant mode, fixed title).
    """
    buffer = BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=LETTER, invariant=1)
    pdf.setTitle("Harmonized Tariff Schedule (test extract)")
    for page_lines in _pages(text.splitlines(), lines_per_page):
        pdf.setFont("Helvetica", FONT_SIZE)
        text_object = pdf.beginText(LEFT_MARGIN, TOP_MARGIN)
        for line in page_lines:
            text_object.textLine(line)
        pdf.drawText(text_object)
        pdf.showPage()
    pdf.save()
    return buffer.getvalue()
