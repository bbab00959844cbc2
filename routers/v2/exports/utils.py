"""
PDF export utilities for the CWL roster
"""
from io import BytesIO

from fastapi.responses import Response

from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

PDF_TITLE = "Messaggio CWL"
PDF_FILENAME = "cwl-message.pdf"

TITLE_FONT = ("Helvetica-Bold", 16)
BODY_FONT = ("Helvetica", 12)
MARGIN = 50
LINE_HEIGHT = 15


def wrap_message(message: str, max_width: float) -> list[str]:
    """Split the message into printable lines, keeping blank lines and wrapping long ones"""
    font_name, font_size = BODY_FONT
    lines = []
    for raw_line in message.splitlines():
        if not raw_line.strip():
            lines.append("")
            continue
        lines.extend(simpleSplit(raw_line, font_name, font_size, max_width))
    return lines


def render_pdf(message: str, title: str = PDF_TITLE) -> bytes:
    """
    Render the roster message into a PDF document

    Args:
        message: The rendered roster text, printed as-is
        title: Centered heading of the first page

    Returns:
        The PDF file content
    """
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    c.setTitle(title)
    width, height = A4

    y = height - MARGIN
    c.setFont(*TITLE_FONT)
    c.drawCentredString(width / 2, y, title)
    y -= LINE_HEIGHT * 2

    c.setFont(*BODY_FONT)
    for line in wrap_message(message, width - 2 * MARGIN):
        if y < MARGIN:
            c.showPage()
            c.setFont(*BODY_FONT)
            y = height - MARGIN
        c.drawString(MARGIN, y, line)
        y -= LINE_HEIGHT

    c.showPage()
    c.save()
    return buffer.getvalue()


def pdf_response(message: str, filename: str = PDF_FILENAME) -> Response:
    return Response(
        content=render_pdf(message),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
