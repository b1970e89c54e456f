# backend/voll/services/exports.py
import csv
import io
from datetime import date
from typing import Iterable, List

import openpyxl
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from reportlab.lib.colors import HexColor, white
from reportlab.lib.pagesizes import A4
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from .. import models
from ..date_utils import format_short_date_pt, format_report_date_pt

CSV_HEADER = ["Nome", "Email", "Telefone", "Status", "Plano", "Cadastrado em"]
BOM = "\ufeff"


def _student_row(s: models.Student) -> List[str]:
    return [
        s.name or "",
        s.email or "",
        s.phone or "",
        s.status or "",
        s.plan or "",
        format_short_date_pt(s.created_at),
    ]

# ---------------------------------------------------------
# CSV
# ---------------------------------------------------------
def students_csv(students: Iterable[models.Student]) -> str:
    """BOM-prefixed CSV so spreadsheet apps pick UTF-8."""
    out = io.StringIO()
    writer = csv.writer(out, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for s in students:
        writer.writerow(_student_row(s))
    return BOM + out.getvalue()

# ---------------------------------------------------------
# XLSX
# ---------------------------------------------------------
def students_xlsx(students: Iterable[models.Student]) -> io.BytesIO:
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Alunos"

    ws.append(CSV_HEADER)
    for cell in ws[1]:
        cell.font = Font(bold=True)

    for s in students:
        ws.append(_student_row(s))

    for idx, width in enumerate([30, 32, 18, 14, 14, 16], start=1):
        ws.column_dimensions[get_column_letter(idx)].width = width

    stream = io.BytesIO()
    wb.save(stream)
    stream.seek(0)
    return stream

# ---------------------------------------------------------
# PDF
# ---------------------------------------------------------
EMERALD = HexColor("#059669")
HEADER_BG = HexColor("#f1f5f9")
HEADER_FG = HexColor("#475569")
ROW_SHADE = HexColor("#f8fafc")
ROW_FG = HexColor("#1e293b")
RULE = HexColor("#e2e8f0")
MUTED = HexColor("#6b7280")

PDF_COLUMNS = [
    ("Nome", 155),
    ("Email", 145),
    ("Telefone", 85),
    ("Status", 60),
    ("Plano", 50),
]
TABLE_W = sum(w for _, w in PDF_COLUMNS)
LEFT = 50
TOP = 50
ROW_H = 22
PAGE_BREAK_AT = 780
CELL_PAD = 6


def _fit(text: str, font: str, size: float, width: float) -> str:
    """Truncate with an ellipsis so the text fits `width` points."""
    if stringWidth(text, font, size) <= width:
        return text
    ellipsis = "..."
    while text and stringWidth(text + ellipsis, font, size) > width:
        text = text[:-1]
    return text + ellipsis


class _Page:
    """Top-left origin drawing helpers over a reportlab canvas."""

    def __init__(self, c: canvas.Canvas):
        self.c = c
        self.height = A4[1]

    def rect(self, x, top, w, h, color):
        self.c.setFillColor(color)
        self.c.rect(x, self.height - top - h, w, h, stroke=0, fill=1)

    def text(self, x, top, value, font, size, color, align="left", width=0):
        self.c.setFont(font, size)
        self.c.setFillColor(color)
        baseline = self.height - top - size * 0.8
        if align == "center":
            self.c.drawCentredString(x + width / 2, baseline, value)
        elif align == "right":
            self.c.drawRightString(x + width, baseline, value)
        else:
            self.c.drawString(x, baseline, value)

    def rule(self, x1, x2, top):
        self.c.setStrokeColor(RULE)
        self.c.setLineWidth(0.5)
        self.c.line(x1, self.height - top, x2, self.height - top)


def students_pdf(students: List[models.Student], today: date = None) -> bytes:
    today = today or date.today()
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    c.setTitle("VOLL — Lista de Alunos")
    page = _Page(c)

    # title band
    page.rect(LEFT, TOP, TABLE_W, 52, EMERALD)
    page.text(LEFT, 62, "VOLL — Lista de Alunos", "Helvetica-Bold", 18, white, "center", TABLE_W)
    page.text(
        LEFT, 118, f"Gerado em {format_report_date_pt(today)}",
        "Helvetica", 9, MUTED, "right", TABLE_W,
    )

    # header row
    y = 140
    page.rect(LEFT, y, TABLE_W, ROW_H, HEADER_BG)
    x = LEFT
    for label, width in PDF_COLUMNS:
        page.text(x + CELL_PAD, y + 7, label, "Helvetica-Bold", 9, HEADER_FG)
        x += width
    y += ROW_H

    for i, s in enumerate(students):
        if y > PAGE_BREAK_AT:
            c.showPage()
            y = TOP
        if i % 2 == 0:
            page.rect(LEFT, y, TABLE_W, ROW_H, ROW_SHADE)

        x = LEFT
        for (_, width), value in zip(PDF_COLUMNS, [s.name, s.email, s.phone, s.status, s.plan]):
            cell = _fit(value or "", "Helvetica", 8, width - 2 * CELL_PAD)
            page.text(x + CELL_PAD, y + 7, cell, "Helvetica", 8, ROW_FG)
            x += width

        page.rule(LEFT, LEFT + TABLE_W, y + ROW_H)
        y += ROW_H

    total = len(students)
    page.text(LEFT, y + 12, f"Total: {total} aluno{'s' if total != 1 else ''}", "Helvetica", 9, MUTED)

    c.save()
    return buf.getvalue()
