"""Render the dashboard view to a printable PDF."""

from __future__ import annotations

from datetime import date
from io import BytesIO
from xml.sax.saxutils import escape

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfgen.canvas import Canvas
from reportlab.platypus import Image, PageBreak, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from shared.models import MONTH_NAMES, CategoryBreakdownView, DashboardFilters, DashboardView


_DISPLAY_LIMIT = 250


def period_label(filters: DashboardFilters) -> str:
    month = MONTH_NAMES[filters.month] if filters.month is not None else "All Months"
    year = str(filters.year) if filters.year is not None else "All Years"
    label = f"{month} {year}"
    if filters.search:
        label = f'{label} - matching "{filters.search}"'
    return label


def _autopct_threshold(pct: float) -> str:
    return f"{pct:.1f}%" if pct >= 3 else ""


def _build_donut_chart(rows: list[CategoryBreakdownView]) -> bytes:
    labels = [row.category for row in rows]
    values = [float(row.total) for row in rows]

    fig, ax = plt.subplots(figsize=(6.2, 3.6), dpi=140)
    wedges, _, _ = ax.pie(
        values,
        labels=None,
        colors=[row.color for row in rows],
        autopct=_autopct_threshold,
        startangle=90,
        wedgeprops={"width": 0.45, "edgecolor": "white"},
        pctdistance=0.78,
    )
    ax.legend(
        wedges,
        labels,
        title="Categories",
        loc="center left",
        bbox_to_anchor=(1.0, 0.5),
        fontsize=8,
        frameon=False,
    )
    ax.set_title("Spending by Category")
    ax.axis("equal")

    image_buffer = BytesIO()
    fig.savefig(image_buffer, format="png", bbox_inches="tight")
    plt.close(fig)
    image_buffer.seek(0)
    return image_buffer.read()


class _FooterCanvas(Canvas):
    def __init__(self, *args, generated_on: str, **kwargs):
        super().__init__(*args, **kwargs)
        self._generated_on = generated_on
        self._saved_page_states: list[dict] = []

    def showPage(self) -> None:  # noqa: N802 (ReportLab API)
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self) -> None:
        page_count = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self._draw_footer(page_count=page_count)
            super().showPage()
        super().save()

    def _draw_footer(self, *, page_count: int) -> None:
        self.setFont("Helvetica", 8)
        self.setFillColor(colors.HexColor("#8A8F98"))
        self.drawString(20 * mm, 10 * mm, f"Generated on {self._generated_on}")
        self.drawRightString(190 * mm, 10 * mm, f"Page {self._pageNumber}/{page_count}")


def _build_kpi_cards(view: DashboardView) -> Table:
    styles = getSampleStyleSheet()
    card_style = ParagraphStyle(
        name="KpiCard",
        parent=styles["BodyText"],
        fontSize=10,
        leading=14,
        textColor=colors.HexColor("#1F2937"),
    )
    cells = [
        [
            Paragraph("<b>Total Balance</b><br/>" + view.totals.display_balance, card_style),
            Paragraph("<b>Income</b><br/>" + view.totals.display_income, card_style),
            Paragraph("<b>Expenses</b><br/>" + view.totals.display_expenses, card_style),
        ]
    ]
    table = Table(cells, colWidths=[58 * mm, 58 * mm, 58 * mm])
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, -1), colors.HexColor("#F4F6F8")),
                ("BOX", (0, 0), (-1, -1), 0.6, colors.HexColor("#DDE2E8")),
                ("INNERGRID", (0, 0), (-1, -1), 0.4, colors.HexColor("#DDE2E8")),
                ("LEFTPADDING", (0, 0), (-1, -1), 8),
                ("RIGHTPADDING", (0, 0), (-1, -1), 8),
                ("TOPPADDING", (0, 0), (-1, -1), 8),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 8),
            ]
        )
    )
    return table


def _striped(table_data: list[list[str]], base_style: list[tuple]) -> TableStyle:
    table_style = list(base_style)
    for row_index in range(1, len(table_data)):
        if row_index % 2 == 0:
            table_style.append(("BACKGROUND", (0, row_index), (-1, row_index), colors.HexColor("#FAFBFC")))
    return TableStyle(table_style)


def _build_breakdown_table(rows: list[CategoryBreakdownView]) -> Table:
    table_data = [["Category", "Amount", "Share (%)"]]
    for row in rows:
        table_data.append([row.category, row.display_total, row.display_percentage])

    table = Table(table_data, colWidths=[90 * mm, 50 * mm, 24 * mm], repeatRows=1)
    table.setStyle(
        _striped(
            table_data,
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#EEF1F4")),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.HexColor("#D7DCE2")),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("ALIGN", (1, 1), (-1, -1), "RIGHT"),
                ("TOPPADDING", (0, 0), (-1, -1), 4),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
            ],
        )
    )
    return table


def _build_transactions_table(view: DashboardView) -> Table:
    def _truncate_text(value: str, max_length: int = 36) -> str:
        if len(value) <= max_length:
            return value
        return value[: max_length - 1].rstrip() + "…"

    table_data = [["Date", "Description", "Category", "Amount"]]
    if not view.transactions:
        table_data.append(["-", "No results found", "-", "-"])
    else:
        for row in view.transactions[:_DISPLAY_LIMIT]:
            table_data.append([row.display_date, _truncate_text(row.description), row.category, row.display_amount])

    table = Table(table_data, colWidths=[28 * mm, 62 * mm, 50 * mm, 38 * mm], repeatRows=1)
    table.setStyle(
        _striped(
            table_data,
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#EEF1F4")),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.HexColor("#D7DCE2")),
                ("ALIGN", (3, 1), (3, -1), "RIGHT"),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ("TOPPADDING", (0, 0), (-1, -1), 4),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
            ],
        )
    )
    return table


def generate_dashboard_report_pdf(view: DashboardView) -> bytes:
    """Render a 2-page report: summary with breakdown, then transaction history."""

    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=16 * mm,
        leftMargin=16 * mm,
        topMargin=16 * mm,
        bottomMargin=14 * mm,
    )
    styles = getSampleStyleSheet()
    section_title_style = ParagraphStyle(name="SectionTitle", parent=styles["Heading2"], spaceAfter=4, fontSize=12)
    subtitle_style = ParagraphStyle(name="Subtitle", parent=styles["BodyText"], fontSize=9, textColor=colors.HexColor("#6B7280"))
    label = period_label(view.filters)

    story = [
        Paragraph("Finance Pro", styles["Title"]),
        Spacer(1, 1 * mm),
        Paragraph(f"Period: {escape(label)}", styles["BodyText"]),
        Paragraph(f"Generated on {date.today().isoformat()}", subtitle_style),
        Spacer(1, 5 * mm),
        _build_kpi_cards(view),
        Spacer(1, 6 * mm),
        Paragraph("Spending by Category", section_title_style),
        Spacer(1, 1 * mm),
    ]

    if not view.breakdown or view.totals.expenses == 0:
        story.append(Paragraph("No expense data to display for this period.", styles["BodyText"]))
    else:
        story.append(Image(BytesIO(_build_donut_chart(view.breakdown)), width=166 * mm, height=92 * mm))
        story.append(Spacer(1, 3 * mm))
        story.append(_build_breakdown_table(view.breakdown))

    story.append(PageBreak())
    story.append(Paragraph("Transaction History", styles["Title"]))
    story.append(Spacer(1, 2 * mm))
    story.append(Paragraph(f"Showing {view.shown_count} of {view.total_count} items, sorted by newest", subtitle_style))
    story.append(Spacer(1, 4 * mm))
    if view.shown_count > _DISPLAY_LIMIT:
        story.append(Paragraph(f"List truncated to {_DISPLAY_LIMIT} transactions.", styles["Italic"]))
        story.append(Spacer(1, 2 * mm))
    story.append(_build_transactions_table(view))

    generated_on = date.today().isoformat()
    doc.build(
        story,
        canvasmaker=lambda *args, **kwargs: _FooterCanvas(*args, generated_on=generated_on, **kwargs),
    )
    buffer.seek(0)
    return buffer.read()
