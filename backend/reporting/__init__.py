"""Reporting utilities for backend-generated documents."""

from backend.reporting.dashboard_report import generate_dashboard_report_pdf, period_label

__all__ = ["generate_dashboard_report_pdf", "period_label"]
