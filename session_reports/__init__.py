"""PDF export for final interview reports."""
from .pdf import ReportPDF, render_report_pdf

__all__ = ["ReportPDF", "render_report_pdf"]
