"""PDF export for daily service reports.

Paints the aggregated report onto A4 pages with the ReportLab canvas:
- Header with logo, title, building and date (first page only)
- Client summary and internal notes, word-wrapped
- One block per template with every execution and its checklist values
- Signature and evidence placeholders

A vertical cursor starts under the top margin and moves down as lines are
drawn; a new page is started whenever the next block would cross the
bottom margin.
"""

from __future__ import annotations

import re
import unicodedata
from io import BytesIO
from pathlib import Path

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from fieldops.config import ReportConfig, get_config
from fieldops.dates import format_date_label, format_local_datetime
from fieldops.errors import RenderError
from fieldops.reporting.floor_rounds import table_lines
from fieldops.reporting.formatting import PLACEHOLDER, format_response_value
from fieldops.reporting.i18n import labels_for
from fieldops.reporting.models import ReportItem, ReportSection, ReportVisit, ServiceReportData

FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
FONT_SIZE = 11
HEADER_FONT_SIZE = 16
LINE_HEIGHT = 16
NOTE_FONT_SIZE = 9
NOTE_LINE_HEIGHT = 12
BLOCK_GAP = 8
NOTE_COLOR = colors.Color(0.35, 0.35, 0.35)

# Lines of room required before starting each kind of block
SECTION_MIN_LINES = 8
ITEM_MIN_LINES = 4
TEXT_BLOCK_MIN_LINES = 3
TEXT_LINE_MIN_LINES = 2
FOOTER_MIN_LINES = 5

_VARIATION_SELECTORS = re.compile("[\ufe00-\ufe0f\u200d]")


def _encodable(ch: str) -> bool:
    # Standard Type 1 fonts are painted with WinAnsi (cp1252) encoding
    try:
        ch.encode("cp1252")
    except UnicodeEncodeError:
        return False
    return True


def sanitize_pdf_text(text: str, locale: str | None = None) -> str:
    """Make text paintable with the standard Helvetica font.

    Check and cross marks become words, variation selectors and joiners
    are removed, other characters outside the font's encoding are reduced
    to their base letter when one exists and dropped otherwise (emoji).
    """
    labels = labels_for(locale)
    for glyph in ("✅", "✔", "☑"):
        text = text.replace(glyph, labels["pass_glyph"])
    for glyph in ("❌", "✖", "✗", "✘"):
        text = text.replace(glyph, labels["fail_glyph"])
    text = _VARIATION_SELECTORS.sub("", text)

    out: list[str] = []
    for ch in text:
        if _encodable(ch):
            out.append(ch)
            continue
        base = "".join(c for c in unicodedata.normalize("NFKD", ch) if _encodable(c))
        out.append(base)
    return "".join(out)


def _split_word(word: str, max_width: float, font: str, font_size: float) -> list[str]:
    if stringWidth(word, font, font_size) <= max_width:
        return [word]

    pieces: list[str] = []
    current = ""
    for ch in word:
        if current and stringWidth(current + ch, font, font_size) > max_width:
            pieces.append(current)
            current = ch
        else:
            current += ch
    pieces.append(current)
    return pieces


def wrap_text(
    text: str,
    max_width: float,
    font: str = FONT,
    font_size: float = FONT_SIZE,
    locale: str | None = None,
) -> list[str]:
    """Greedy word wrap using the font's measured string width.

    Words wider than ``max_width`` on their own (URLs, serial numbers) are
    broken between characters.
    """
    words: list[str] = []
    for word in sanitize_pdf_text(text, locale).split():
        words.extend(_split_word(word, max_width, font, font_size))

    lines: list[str] = []
    current = ""

    for word in words:
        candidate = f"{current} {word}" if current else word
        if stringWidth(candidate, font, font_size) <= max_width:
            current = candidate
            continue
        if current:
            lines.append(current)
        current = word

    if current:
        lines.append(current)

    return lines or [PLACEHOLDER]


def _load_logo(path: Path) -> ImageReader:
    if not path.is_file():
        raise RenderError(f"Logo asset not found: {path}")
    try:
        return ImageReader(str(path))
    except Exception as exc:
        raise RenderError(f"Logo asset could not be read: {path}: {exc}") from exc


class ServiceReportPDF:
    """Cursor-based painter for one service report."""

    def __init__(self, data: ServiceReportData, config: ReportConfig):
        self.data = data
        self.config = config
        self.locale = config.locale
        self.labels = labels_for(config.locale)
        self.margin = config.page_margin
        self.page_width, self.page_height = A4

        self.buffer = BytesIO()
        self.canvas = canvas.Canvas(self.buffer, pagesize=A4)
        self.canvas.setTitle(f"{self.labels['title']} {data.report_date}")
        self.canvas.setAuthor("fieldops")
        self.cursor_y = self.page_height - self.margin
        self.page_count = 1

    @property
    def content_width(self) -> float:
        return self.page_width - self.margin * 2

    def new_page(self) -> None:
        self.canvas.showPage()
        self.page_count += 1
        self.cursor_y = self.page_height - self.margin

    def ensure_space(self, lines_needed: int, line_height: float = LINE_HEIGHT) -> None:
        if self.cursor_y < self.margin + line_height * lines_needed:
            self.new_page()

    def draw_line(
        self,
        text: str,
        font: str = FONT,
        size: float = FONT_SIZE,
        x: float | None = None,
        color=colors.black,
    ) -> None:
        self.canvas.setFillColor(color)
        self.canvas.setFont(font, size)
        self.canvas.drawString(
            self.margin if x is None else x,
            self.cursor_y,
            sanitize_pdf_text(text, self.locale),
        )

    def draw_wrapped(
        self,
        text: str,
        font: str = FONT,
        size: float = FONT_SIZE,
        line_height: float = LINE_HEIGHT,
        min_lines: int = ITEM_MIN_LINES,
        color=colors.black,
    ) -> None:
        for line in wrap_text(text, self.content_width, font, size, self.locale):
            self.ensure_space(min_lines)
            self.draw_line(line, font=font, size=size, color=color)
            self.cursor_y -= line_height

    # -- blocks -----------------------------------------------------------

    def draw_header(self) -> None:
        logo = _load_logo(self.config.logo_path)
        logo_w, logo_h = logo.getSize()
        height = self.config.logo_height
        width = logo_w * height / logo_h if logo_h else height

        self.canvas.drawImage(
            logo,
            self.margin,
            self.cursor_y - height,
            width=width,
            height=height,
            mask="auto",
        )
        self.canvas.setFont(FONT_BOLD, HEADER_FONT_SIZE)
        self.canvas.drawString(
            self.margin + width + 16,
            self.cursor_y - 8 - HEADER_FONT_SIZE / 2,
            sanitize_pdf_text(self.labels["title"], self.locale),
        )
        self.cursor_y -= max(height, HEADER_FONT_SIZE + 4) + 16

        self.draw_line(f"{self.labels['building']}: {self.data.building.name}")
        self.cursor_y -= LINE_HEIGHT
        date_label = format_date_label(self.data.report_date, self.labels["date_format"])
        self.draw_line(f"{self.labels['date']}: {date_label}")
        self.cursor_y -= LINE_HEIGHT + BLOCK_GAP

    def draw_text_block(self, title: str, body: str | None) -> None:
        body = (body or "").strip()
        if not body:
            return
        self.ensure_space(TEXT_BLOCK_MIN_LINES)
        self.draw_line(title, font=FONT_BOLD)
        self.cursor_y -= LINE_HEIGHT
        self.draw_wrapped(body, min_lines=TEXT_LINE_MIN_LINES)
        self.cursor_y -= BLOCK_GAP

    def draw_item(self, item: ReportItem, visit: ReportVisit) -> None:
        response = visit.response_for(item.id)

        rows = table_lines(
            item.label,
            item.item_kind,
            response.value_text if response else None,
            self.locale,
        )
        if rows is not None:
            self.draw_wrapped(f"{item.label}:")
            for line in rows:
                self.draw_wrapped(line)
            return

        value = format_response_value(item.item_type, response, self.locale)
        self.draw_wrapped(f"{item.label}: {value}")

    def draw_visit(self, section: ReportSection, visit: ReportVisit, index: int) -> None:
        self.ensure_space(ITEM_MIN_LINES)
        completed = format_local_datetime(
            visit.completed_at, self.data.time_zone, self.labels["datetime_format"]
        )
        self.draw_line(f"{self.labels['execution']} #{index} · {completed}")
        self.cursor_y -= LINE_HEIGHT

        if visit.equipment_labels:
            self.draw_wrapped(
                f"{self.labels['equipment']}: {', '.join(visit.equipment_labels)}",
                size=NOTE_FONT_SIZE,
                line_height=NOTE_LINE_HEIGHT,
                color=NOTE_COLOR,
            )

        if not section.items:
            self.draw_wrapped(self.labels["no_items"])
        for item in section.items:
            self.draw_item(item, visit)
        self.cursor_y -= BLOCK_GAP

    def draw_section(self, section: ReportSection) -> None:
        self.ensure_space(SECTION_MIN_LINES)
        self.draw_line(section.template_name, font=FONT_BOLD, size=FONT_SIZE + 1)
        self.cursor_y -= LINE_HEIGHT

        self.draw_wrapped(
            self.labels["legend"],
            size=NOTE_FONT_SIZE,
            line_height=NOTE_LINE_HEIGHT,
            min_lines=TEXT_LINE_MIN_LINES,
            color=NOTE_COLOR,
        )
        self.cursor_y -= 4

        for index, visit in enumerate(section.visits, start=1):
            self.draw_visit(section, visit, index)
        self.cursor_y -= BLOCK_GAP

    def draw_footer(self) -> None:
        self.ensure_space(FOOTER_MIN_LINES)
        self.draw_line(self.labels["signature"])
        self.cursor_y -= LINE_HEIGHT * 2
        self.draw_line(self.labels["evidence"])

    def render(self) -> bytes:
        self.draw_header()

        report = self.data.report
        if report is not None:
            self.draw_text_block(self.labels["client_summary"], report.client_summary)
            self.draw_text_block(self.labels["internal_notes"], report.internal_notes)

        if not self.data.sections:
            self.draw_wrapped(self.labels["no_visits"])
            self.cursor_y -= BLOCK_GAP
        for section in self.data.sections:
            self.draw_section(section)

        self.draw_footer()
        self.canvas.save()
        return self.buffer.getvalue()


def render_service_report_pdf(
    data: ServiceReportData, config: ReportConfig | None = None
) -> bytes:
    """Render the aggregated report to PDF bytes.

    Raises:
        RenderError: if the logo or another required asset is unavailable
    """
    return ServiceReportPDF(data, config or get_config().report).render()
