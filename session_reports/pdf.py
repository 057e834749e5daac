from __future__ import annotations  # Styled PDF rendering for final interview reports

import os
from datetime import datetime
from typing import Any, List, Optional, Sequence, Tuple

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from services.orchestrator import ReportView
from storage import HistoryEntry


DEJAVU_SANS = "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"  # System font
DEJAVU_SANS_BOLD = "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"  # System font

ACCENT = (45, 115, 245)  # Palette accent
TEXT = (34, 34, 34)  # Primary text color
MUTED = (100, 100, 100)  # Secondary text color
RULE = (230, 230, 230)  # Divider color
SOFT_ACCENT_BG = (243, 248, 255)  # Highlight background
ROW_FILL = (247, 250, 255)  # Zebra row fill

RECOMMENDATION_COLORS = {
    "Ready": (34, 139, 34),
    "Needs Practice": (230, 145, 30),
    "Not Ready": (200, 50, 50),
}


def _format_datetime(value: Optional[datetime]) -> str:  # Format timestamp for display
    if not value:
        return "-"
    return value.strftime("%d %b %Y, %I:%M %p").lstrip("0").replace(" 0", " ")


def _format_duration(seconds: Optional[float]) -> str:  # Render seconds as "Xm Ys"
    if seconds is None:
        return "-"
    total = int(seconds)
    minutes, secs = divmod(total, 60)
    return f"{minutes}m {secs:02d}s" if minutes else f"{secs}s"


def _effective_width(pdf: FPDF) -> float:
    return float(pdf.w) - float(pdf.l_margin) - float(pdf.r_margin)


class ReportPDF(FPDF):  # PDF with custom header/footer styling
    def __init__(self, *args, accent: Tuple[int, int, int] = ACCENT, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.accent = accent
        self.header_title = "Interview Report"
        self.font_regular = "Helvetica"
        self.font_bold = "Helvetica"
        self.supports_unicode = False

    def use_system_fonts(self) -> None:  # Switch to DejaVu when installed
        if not (os.path.exists(DEJAVU_SANS) and os.path.exists(DEJAVU_SANS_BOLD)):
            return
        self.add_font("DejaVu", "", DEJAVU_SANS)
        self.add_font("DejaVu", "B", DEJAVU_SANS_BOLD)
        self.font_regular = "DejaVu"
        self.font_bold = "DejaVu"
        self.supports_unicode = True

    def prepare_text(self, text: Any) -> str:  # Sanitize text for non-unicode fonts
        value = "" if text is None else str(text)
        if self.supports_unicode:
            return value
        cleaned = value.replace("•", "-").replace("…", "...").replace("–", "-").replace("—", "-")
        return cleaned.encode("latin-1", "ignore").decode("latin-1")

    def header(self) -> None:  # Render header banner
        usable = _effective_width(self)
        if self.page_no() == 1:
            self.set_fill_color(*self.accent)
            self.rect(0, 0, self.w, 20, style="F")
            self.set_text_color(255, 255, 255)
            self.set_font(self.font_bold, "B", 16)
            self.set_xy(self.l_margin, 6)
            self.cell(usable, 8, self.prepare_text(self.header_title), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
            self.set_text_color(*TEXT)
            self.set_y(26)
        else:
            self.set_text_color(80, 80, 80)
            self.set_xy(self.l_margin, 8)
            self.set_font(self.font_bold, "B", 12)
            self.cell(usable, 6, self.prepare_text(self.header_title), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
            mark = self.get_y()
            self.set_draw_color(*self.accent)
            self.set_line_width(0.4)
            self.line(self.l_margin, mark + 1, self.w - self.r_margin, mark + 1)
            self.set_text_color(*TEXT)
            self.ln(4)

    def footer(self) -> None:  # Render footer with pagination
        self.set_y(-12)
        self.set_draw_color(*RULE)
        self.set_line_width(0.2)
        self.line(self.l_margin, self.get_y(), self.w - self.r_margin, self.get_y())
        self.set_text_color(120, 120, 120)
        self.set_font(self.font_regular, "", 9)
        self.cell(0, 10, f"Page {self.page_no()}/{{nb}}", align="R")

    def paragraph(self, text: str, *, size: int = 11, color: Tuple[int, int, int] = TEXT, bold: bool = False) -> None:
        self.set_x(self.l_margin)
        self.set_text_color(*color)
        self.set_font(self.font_bold if bold else self.font_regular, "B" if bold else "", size)
        self.multi_cell(_effective_width(self), 6, self.prepare_text(text), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        self.set_text_color(*TEXT)


def _section_title(pdf: ReportPDF, title: str) -> None:  # Render styled section title
    pdf.ln(2)
    pdf.set_text_color(*TEXT)
    pdf.set_x(pdf.l_margin)
    pdf.set_font(pdf.font_bold, "B", 13)
    pdf.cell(0, 9, pdf.prepare_text(title), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_draw_color(*RULE)
    pdf.set_line_width(0.2)
    y = pdf.get_y()
    pdf.line(pdf.l_margin, y, pdf.l_margin + _effective_width(pdf), y)
    pdf.ln(2)


def _meta_block(pdf: ReportPDF, rows: List[Tuple[str, str]]) -> None:  # Draw two-column metadata
    col = _effective_width(pdf) / 2.0
    line = 6
    for idx in range(0, len(rows), 2):
        left = rows[idx]
        right = rows[idx + 1] if idx + 1 < len(rows) else ("", "")
        pdf.set_x(pdf.l_margin)
        pdf.set_text_color(*MUTED)
        pdf.set_font(pdf.font_regular, "", 10)
        pdf.cell(col, line, pdf.prepare_text(left[0]), new_x=XPos.RIGHT, new_y=YPos.TOP)
        pdf.cell(col, line, pdf.prepare_text(right[0]), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_text_color(*TEXT)
        pdf.set_font(pdf.font_bold, "B", 11)
        pdf.cell(col, line, pdf.prepare_text(left[1]), new_x=XPos.RIGHT, new_y=YPos.TOP)
        pdf.cell(col, line, pdf.prepare_text(right[1]), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(2)


def _score_banner(pdf: ReportPDF, view: ReportView) -> None:  # Overall score and recommendation box
    report = view.report
    top = pdf.get_y()
    width = _effective_width(pdf)
    pdf.set_fill_color(*SOFT_ACCENT_BG)
    pdf.rect(pdf.l_margin, top, width, 20, style="F")
    pdf.set_xy(pdf.l_margin + 6, top + 3)
    pdf.set_text_color(*MUTED)
    pdf.set_font(pdf.font_regular, "", 10)
    pdf.cell(width / 2 - 6, 6, "Overall Score", new_x=XPos.RIGHT, new_y=YPos.TOP)
    pdf.cell(width / 2 - 6, 6, "Recommendation", align="R", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_x(pdf.l_margin + 6)
    pdf.set_text_color(*ACCENT)
    pdf.set_font(pdf.font_bold, "B", 16)
    pdf.cell(width / 2 - 6, 9, f"{report.overall_score:.1f}/100", new_x=XPos.RIGHT, new_y=YPos.TOP)
    pdf.set_text_color(*RECOMMENDATION_COLORS.get(report.recommendation, ACCENT))
    pdf.cell(
        width / 2 - 6,
        9,
        f"{report.recommendation} ({report.recommendation_confidence:.0f}%)",
        align="R",
        new_x=XPos.LMARGIN,
        new_y=YPos.NEXT,
    )
    pdf.set_text_color(*TEXT)
    pdf.set_y(top + 24)


def _table(pdf: ReportPDF, headers: Sequence[str], ratios: Sequence[float], rows: Sequence[Sequence[str]], empty: str) -> None:
    widths = [_effective_width(pdf) * ratio for ratio in ratios]
    pdf.set_x(pdf.l_margin)
    pdf.set_fill_color(*ACCENT)
    pdf.set_text_color(255, 255, 255)
    pdf.set_font(pdf.font_bold, "B", 10)
    for width, title in zip(widths, headers):
        pdf.cell(width, 8, pdf.prepare_text(title), align="L", fill=True)
    pdf.ln(8)
    pdf.set_text_color(*TEXT)
    if not rows:
        pdf.paragraph(empty, size=10, color=MUTED)
        pdf.ln(2)
        return
    pdf.set_font(pdf.font_regular, "", 10)
    for idx, row in enumerate(rows):
        fill = idx % 2 == 0
        if fill:
            pdf.set_fill_color(*ROW_FILL)
        pdf.set_x(pdf.l_margin)
        for width, value in zip(widths, row):
            pdf.cell(width, 7, pdf.prepare_text(value), border=0, fill=fill)
        pdf.ln(7)
    pdf.ln(2)


def _render_weaknesses(pdf: ReportPDF, view: ReportView) -> None:
    if not view.report.weaknesses:
        pdf.paragraph("No weaknesses identified.", size=10, color=MUTED)
        return
    for weakness in view.report.weaknesses:
        pdf.paragraph(weakness.skill.replace("_", " ").title(), size=11, bold=True)
        pdf.paragraph(weakness.feedback, size=10)
        pdf.paragraph(f"Next step: {weakness.improvement}", size=10, color=MUTED)
        pdf.ln(1)


def _render_transcript(pdf: ReportPDF, history: Sequence[HistoryEntry]) -> None:  # Question and answer log
    if not history:
        pdf.paragraph("No transcript entries recorded for this session.", size=10, color=MUTED)
        return
    bullet = "•" if pdf.supports_unicode else "-"
    for entry in history:
        question = entry.question
        pdf.paragraph(
            f"Q{question.number} · {question.category} · {question.difficulty}"
            if pdf.supports_unicode
            else f"Q{question.number} - {question.category} - {question.difficulty}",
            size=9,
            color=MUTED,
        )
        pdf.paragraph(question.text, size=10, color=ACCENT, bold=True)
        answer = entry.answer
        if answer is None:
            pdf.paragraph("Not answered.", size=10, color=MUTED)
        else:
            pdf.paragraph(f"A: {answer.response_text.strip() or '-'}", size=10, color=(60, 60, 60))
            details = [
                f"Score {answer.score:.1f}",
                f"time {answer.time_taken:.0f}s of {question.time_limit}s",
            ]
            if answer.time_penalty:
                details.append(f"penalty {answer.time_penalty:.0f}")
            pdf.paragraph(f"{bullet} " + ", ".join(details), size=9)
            if answer.feedback:
                pdf.paragraph(f"{bullet} {answer.feedback}", size=9, color=MUTED)
        pdf.set_draw_color(*RULE)
        pdf.set_line_width(0.2)
        y = pdf.get_y() + 1
        pdf.line(pdf.l_margin, y, pdf.l_margin + _effective_width(pdf), y)
        pdf.ln(3)


def render_report_pdf(  # Build PDF payload for a final report
    view: ReportView,
    history: Sequence[HistoryEntry] = (),
    *,
    title: str = "Interview Report",
) -> bytes:
    pdf = ReportPDF()
    pdf.use_system_fonts()
    pdf.alias_nb_pages()
    pdf.header_title = title
    pdf.set_margins(15, 22, 15)
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()

    report = view.report
    _section_title(pdf, "Session Overview")
    _meta_block(
        pdf,
        [
            ("Session ID", report.session_id),
            ("Status", view.status),
            ("Started", _format_datetime(view.start_time)),
            ("Ended", _format_datetime(view.end_time)),
            ("Duration", _format_duration(view.total_duration)),
            ("Questions", str(report.question_count)),
            ("Avg. time per question", _format_duration(report.average_time_per_question)),
            ("Trend", report.performance_trend),
        ],
    )
    if view.early_termination_reason:
        pdf.paragraph(f"Ended because: {view.early_termination_reason}", size=10, color=MUTED)
        pdf.ln(2)

    _score_banner(pdf, view)

    _section_title(pdf, "Skill Breakdown")
    skills = report.skill_breakdown.model_dump()
    _table(
        pdf,
        ["Skill", "Score"],
        [0.6, 0.4],
        [(name.replace("_", " ").title(), f"{value:.1f}") for name, value in skills.items()],
        "No skill scores recorded.",
    )

    _section_title(pdf, "Strengths")
    if report.strengths:
        bullet = "•" if pdf.supports_unicode else "-"
        for skill in report.strengths:
            pdf.paragraph(f"{bullet} {skill.replace('_', ' ').title()}", size=11)
    else:
        pdf.paragraph("No strengths identified.", size=10, color=MUTED)

    _section_title(pdf, "Areas To Improve")
    _render_weaknesses(pdf, view)

    _section_title(pdf, "Question & Answer Transcript")
    _render_transcript(pdf, history)

    return bytes(pdf.output())


__all__ = ["ReportPDF", "render_report_pdf"]
