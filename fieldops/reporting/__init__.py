"""Daily service reports: aggregation, formatting and PDF export."""

from fieldops.reporting.pdf_export import render_service_report_pdf
from fieldops.reporting.service_report import ensure_service_report, get_service_report_data
from fieldops.reporting.workflow import apply_report_action, update_report_notes

__all__ = [
    "apply_report_action",
    "ensure_service_report",
    "get_service_report_data",
    "render_service_report_pdf",
    "update_report_notes",
]
