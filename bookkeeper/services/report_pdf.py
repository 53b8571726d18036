"""
Report PDF Generator
Renders assembled report data as a printable summary document
"""

import io
import logging
from datetime import datetime
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ..config import CURRENCY_LABEL

logger = logging.getLogger(__name__)


def format_money(amount: int) -> str:
    return f"{amount:,}".replace(",", " ") + f" {CURRENCY_LABEL}"


def format_period_title(period: dict) -> str:
    start = datetime.strptime(period["start"], "%Y-%m-%d")
    if period["type"] == "day":
        return start.strftime("%d %B %Y")
    if period["type"] == "month":
        return start.strftime("%B %Y")
    return start.strftime("%Y")


class ReportPDFGenerator:
    """Generate a period report PDF from ReportService.assemble_report output"""

    def __init__(self, data: dict):
        self.data = data

        # PDF settings
        self.page_width, self.page_height = A4
        self.margin = 0.6 * inch
        self.content_width = self.page_width - (2 * self.margin)

        self.brand_color = colors.HexColor("#4472C4")
        self.dark_gray = colors.HexColor("#1e293b")
        self.light_gray = colors.HexColor("#f1f5f9")

        styles = getSampleStyleSheet()
        self.title_style = ParagraphStyle(
            "ReportTitle",
            parent=styles["Heading1"],
            fontSize=20,
            textColor=self.brand_color,
            spaceAfter=6,
            alignment=1,
        )
        self.heading_style = ParagraphStyle(
            "ReportHeading",
            parent=styles["Heading2"],
            fontSize=13,
            textColor=self.dark_gray,
            spaceBefore=16,
            spaceAfter=8,
        )
        self.body_style = ParagraphStyle(
            "ReportBody",
            parent=styles["Normal"],
            fontSize=9,
            textColor=self.dark_gray,
        )

    def generate(self) -> bytes:
        """Generate PDF and return bytes"""
        period = self.data["period"]
        logger.info(f"📄 Generating report PDF for {period['start']}..{period['end']}")

        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=self.margin,
            leftMargin=self.margin,
            topMargin=self.margin,
            bottomMargin=self.margin,
            title=f"Report {period['start']} - {period['end']}",
        )

        story = [
            Paragraph("FINANCIAL REPORT", self.title_style),
            Paragraph(
                escape(f"{format_period_title(period)} ({period['start']} - {period['end']})"),
                ParagraphStyle("Subtitle", parent=self.body_style, alignment=1),
            ),
            Spacer(1, 0.25 * inch),
        ]

        analytics = self.data["analytics"]
        story.append(Paragraph("SUMMARY", self.heading_style))
        story.append(
            self._table(
                [
                    ["Metric", "Value"],
                    ["Total income", format_money(analytics["totalIncome"])],
                    ["Total expense", format_money(analytics["totalExpense"])],
                    ["Result", format_money(analytics["result"])],
                    ["Unique clients", str(analytics["uniqueClients"])],
                ],
                [3.5, 3.0],
            )
        )

        self._section(
            story,
            "SERVICES",
            ["Service", "Records", "Patients", "Total"],
            [[s["name"], s["count"], s["patientCount"], format_money(s["total"])] for s in self.data["serviceStats"]],
            [3.0, 1.0, 1.0, 1.5],
        )
        self._section(
            story,
            "CLIENTS",
            ["Client", "Phone", "Visits", "Total"],
            [[c["name"], c["phone"], c["count"], format_money(c["total"])] for c in self.data["clientStats"]],
            [2.6, 1.6, 0.8, 1.5],
        )

        employee_rows = []
        for employee in self.data["employeeStats"]:
            employee_rows.append([employee["name"], "", employee["patientCount"], format_money(employee["total"])])
            for service_name, stats in employee["services"].items():
                employee_rows.append(["", service_name, stats["patientCount"], format_money(stats["total"])])
        self._section(
            story,
            "EMPLOYEES",
            ["Employee", "Service", "Patients", "Total"],
            employee_rows,
            [2.0, 2.2, 0.8, 1.5],
        )

        self._section(
            story,
            "EXPENSES",
            ["Date", "Name", "Amount"],
            [[e["date"], e["name"], format_money(e["amount"])] for e in self.data["expenses"]],
            [1.2, 3.8, 1.5],
        )

        doc.build(story)
        pdf_bytes = buffer.getvalue()
        buffer.close()

        logger.info(f"✅ Report PDF generated ({len(pdf_bytes)} bytes)")
        return pdf_bytes

    def _section(self, story: list, title: str, header: list, rows: list, widths: list) -> None:
        story.append(Paragraph(title, self.heading_style))
        if not rows:
            story.append(Paragraph("No data for this period", self.body_style))
            return
        story.append(self._table([header] + [[str(v) for v in row] for row in rows], widths))

    def _table(self, table_data: list, widths: list) -> Table:
        table = Table(table_data, colWidths=[w * inch for w in widths], repeatRows=1)
        table.setStyle(
            TableStyle(
                [
                    # Header row
                    ("BACKGROUND", (0, 0), (-1, 0), self.brand_color),
                    ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                    ("FONT", (0, 0), (-1, 0), "Helvetica-Bold", 9),
                    # Data rows
                    ("FONT", (0, 1), (-1, -1), "Helvetica", 8),
                    ("TEXTCOLOR", (0, 1), (-1, -1), self.dark_gray),
                    ("VALIGN", (0, 0), (-1, -1), "TOP"),
                    ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, self.light_gray]),
                    ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                    ("TOPPADDING", (0, 0), (-1, -1), 4),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
                ]
            )
        )
        return table


def generate_report_pdf(data: dict) -> bytes:
    return ReportPDFGenerator(data).generate()
