"""Render salary slips as plain text, CSV, HTML or PDF documents."""

from __future__ import annotations

import csv
import html
import logging
import os
from dataclasses import dataclass, field
from datetime import date
from io import StringIO
from pathlib import Path
from typing import Any, Callable, Mapping

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from ethiosalary.backend.app.localization import Translator, get_translator
from ethiosalary.backend.services import SalaryComputation, compute_salary
from ethiosalary.backend.services.calculators import (
    format_currency,
    format_percentage,
)
from ethiosalary.backend.services.response_builder import deduction_rows, earnings_rows

_LOGGER = logging.getLogger(__name__)

PDF_FONT_ENV = "ETHIOSALARY_PDF_FONT"
_PDF_FONT_FAMILY = "Ethiopic"


@dataclass(frozen=True)
class Payslip:
    """Everything needed to render one salary slip."""

    computation: SalaryComputation
    issued_on: date
    earnings: list[dict[str, Any]] = field(default_factory=list)
    deductions: list[dict[str, Any]] = field(default_factory=list)

    @property
    def translator(self) -> Translator:
        return self.computation.translator

    @property
    def total_earnings(self) -> float:
        return sum(row["amount"] for row in self.earnings)

    @property
    def total_deductions(self) -> float:
        return sum(row["amount"] for row in self.deductions)

    @property
    def net_salary(self) -> float:
        return self.computation.calculation.net_salary


@dataclass(frozen=True)
class RenderedPayslip:
    body: str | bytes
    mimetype: str
    filename: str


def _format_date(value: date) -> str:
    return f"{value:%B} {value.day}, {value.year}"


def build_payslip(computation: SalaryComputation, *, issued_on: date | None = None) -> Payslip:
    """Assemble the earnings and deduction rows for ``computation``."""

    translator = computation.translator
    return Payslip(
        computation=computation,
        issued_on=issued_on or date.today(),
        earnings=earnings_rows(computation.inputs, translator),
        deductions=deduction_rows(computation.inputs, computation.calculation, translator),
    )


def render_text(payslip: Payslip) -> str:
    """Return the copy-to-clipboard summary of the slip."""

    t = payslip.translator
    inputs = payslip.computation.inputs
    calculation = payslip.computation.calculation

    lines = [
        t("payslip.text_heading"),
        f"{t('payslip.date')}: {_format_date(payslip.issued_on)}",
        "",
        f"{t('payslip.gross_heading')}:",
        f"{t('summary.basic_salary')}: {format_currency(inputs.gross_salary)}",
        f"{t('summary.total_allowances')}: {format_currency(calculation.total_allowances)}",
    ]
    if inputs.overtime_pay > 0:
        lines.append(f"{t('summary.overtime_pay')}: {format_currency(inputs.overtime_pay)}")

    lines.extend(["", f"{t('payslip.deductions_heading')}:"])
    lines.append(f"{t('deductions.income_tax')}: {format_currency(calculation.income_tax)}")
    lines.append(
        f"{t('deductions.pension')}: {format_currency(calculation.pension_contribution)}"
    )
    for row in payslip.deductions:
        if row["type"] in {"union_dues", "loans", "other"}:
            lines.append(f"{row['label']}: {format_currency(row['amount'])}")

    lines.extend(
        [
            "",
            f"{t('payslip.net_heading')}: {format_currency(calculation.net_salary)}",
            "",
            f"{t('payslip.tax_heading')}:",
            f"{t('summary.effective_tax_rate')}: "
            f"{format_percentage(calculation.effective_tax_rate, 1)}",
            f"{t('summary.marginal_tax_rate')}: "
            f"{format_percentage(calculation.marginal_tax_rate, 0)}",
            "",
            t("payslip.generated_with"),
        ]
    )
    return "\n".join(lines)


def render_csv(payslip: Payslip) -> str:
    t = payslip.translator
    buffer = StringIO()
    writer = csv.writer(buffer)
    writer.writerow(["section", t("payslip.particulars"), t("payslip.amount")])
    for row in payslip.earnings:
        writer.writerow(["earnings", row["label"], f"{row['amount']:.2f}"])
    for row in payslip.deductions:
        writer.writerow(["deductions", row["label"], f"{row['amount']:.2f}"])
    writer.writerow(["total", t("payslip.total_addition"), f"{payslip.total_earnings:.2f}"])
    writer.writerow(["total", t("payslip.total_deduction"), f"{payslip.total_deductions:.2f}"])
    writer.writerow(["net", t("payslip.net_salary"), f"{payslip.net_salary:.2f}"])
    return buffer.getvalue()


def _paired_rows(payslip: Payslip) -> list[tuple[dict[str, Any] | None, dict[str, Any] | None]]:
    count = max(len(payslip.earnings), len(payslip.deductions))
    return [
        (
            payslip.earnings[index] if index < len(payslip.earnings) else None,
            payslip.deductions[index] if index < len(payslip.deductions) else None,
        )
        for index in range(count)
    ]


def render_html(payslip: Payslip) -> str:
    """Return a printable, self-contained HTML salary slip."""

    t = payslip.translator
    escape = html.escape

    def _cells(row: dict[str, Any] | None) -> str:
        if row is None:
            return '<td class="desc">&nbsp;</td><td class="amt">&nbsp;</td>'
        return (
            f'<td class="desc">{escape(row["label"])}</td>'
            f'<td class="amt">{format_currency(row["amount"])}</td>'
        )

    rows_html = "\n".join(
        f"<tr>{_cells(earning)}{_cells(deduction)}</tr>"
        for earning, deduction in _paired_rows(payslip)
    )
    issued = _format_date(payslip.issued_on)
    net = format_currency(payslip.net_salary)

    return f"""<!DOCTYPE html>
<html lang="{t.locale}">
  <head>
    <meta charset="utf-8" />
    <title>{escape(t('payslip.title'))}</title>
    <style>
      body {{ font-family: Arial, Helvetica, sans-serif; color: #000; margin: 24px; }}
      .center {{ text-align: center; }}
      .company {{ font-size: 22px; font-weight: 700; }}
      .line {{ border-bottom: 1px solid #000; display: inline-block; min-width: 240px; height: 12px; }}
      table {{ width: 100%; border-collapse: collapse; margin-top: 12px; }}
      th, td {{ border: 1px solid #000; padding: 6px 8px; font-size: 12px; }}
      th {{ background: #f5f5f5; }}
      .desc {{ width: 32%; }}
      .amt {{ width: 18%; text-align: right; }}
      .total-row td {{ font-weight: 700; }}
      .net-row td {{ font-weight: 800; font-size: 14px; }}
      footer {{ margin-top: 16px; font-size: 12px; }}
    </style>
  </head>
  <body>
    <div class="center">
      <div class="company">{escape(t('payslip.company_name'))}</div>
      <div>{escape(t('payslip.title'))}</div>
    </div>
    <p><strong>{escape(t('payslip.employee_name'))}:</strong> <span class="line"></span></p>
    <p><strong>{escape(t('payslip.designation'))}:</strong> <span class="line"></span></p>
    <p><strong>{escape(t('payslip.month_year'))}:</strong> <span class="line"></span></p>
    <table>
      <thead>
        <tr>
          <th colspan="2">{escape(t('payslip.earnings'))}</th>
          <th colspan="2">{escape(t('payslip.deductions'))}</th>
        </tr>
        <tr>
          <th class="desc">{escape(t('payslip.particulars'))}</th>
          <th class="amt">{escape(t('payslip.amount'))}</th>
          <th class="desc">{escape(t('payslip.particulars'))}</th>
          <th class="amt">{escape(t('payslip.amount'))}</th>
        </tr>
      </thead>
      <tbody>
        {rows_html}
        <tr class="total-row">
          <td>{escape(t('payslip.total_addition'))}</td>
          <td class="amt">{format_currency(payslip.total_earnings)}</td>
          <td>{escape(t('payslip.total_deduction'))}</td>
          <td class="amt">{format_currency(payslip.total_deductions)}</td>
        </tr>
        <tr class="net-row">
          <td colspan="3" style="text-align:right;">{escape(t('payslip.net_salary'))}</td>
          <td class="amt">{net}</td>
        </tr>
      </tbody>
    </table>
    <footer>
      <p><strong>{escape(t('payslip.in_words'))}:</strong> {net} {escape(t('payslip.only'))}</p>
      <p><strong>{escape(t('payslip.date'))}:</strong> {issued}</p>
      <p><strong>{escape(t('payslip.employee_signature'))}</strong> ________________________
         &nbsp; <strong>{escape(t('payslip.director'))}</strong> ________________________</p>
      <p>{escape(t('payslip.calculated_on'))}: {issued}</p>
    </footer>
  </body>
</html>"""


def _resolve_pdf_font() -> Path | None:
    raw = os.getenv(PDF_FONT_ENV, "").strip()
    if not raw:
        return None
    path = Path(raw).expanduser()
    if not path.is_file():
        _LOGGER.warning("Ignoring %s=%s: font file not found", PDF_FONT_ENV, raw)
        return None
    return path


def _latin1(text: str) -> str:
    return text.encode("latin-1", "replace").decode("latin-1")


def render_pdf(payslip: Payslip) -> bytes:
    """Return the salary slip as a PDF document.

    Ethiopic labels need a Unicode TrueType font supplied through
    ``ETHIOSALARY_PDF_FONT``. Without one the slip falls back to the core
    Helvetica font with English labels; user-entered names outside Latin-1 are
    replaced with ``?``.
    """

    font_path = _resolve_pdf_font()
    pdf = FPDF()
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()

    if font_path is not None:
        pdf.add_font(_PDF_FONT_FAMILY, fname=str(font_path))
        family, heading_style = _PDF_FONT_FAMILY, ""
        translator = payslip.translator
        clean: Callable[[str], str] = str
    else:
        family, heading_style = "Helvetica", "B"
        translator = get_translator("en")
        clean = _latin1
        if payslip.translator.locale != "en":
            payslip = build_payslip(
                SalaryComputation(
                    inputs=payslip.computation.inputs,
                    calculation=payslip.computation.calculation,
                    translator=translator,
                ),
                issued_on=payslip.issued_on,
            )

    t = translator
    pdf.set_title(clean(t("payslip.title")))
    pdf.set_text_color(0, 0, 0)
    pdf.set_draw_color(0, 0, 0)

    pdf.set_font(family, style=heading_style, size=18)
    pdf.cell(0, 10, clean(t("payslip.company_name")), align="C", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_font(family, size=11)
    pdf.cell(0, 6, clean(t("payslip.title")), align="C", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(4)

    for key in ("payslip.employee_name", "payslip.designation", "payslip.month_year"):
        pdf.cell(0, 7, clean(f"{t(key)}: ______________________"), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(3)

    desc_width = pdf.epw * 0.32
    amount_width = pdf.epw * 0.18

    pdf.set_fill_color(245, 245, 245)
    pdf.cell(desc_width + amount_width, 8, clean(t("payslip.earnings")), border=1, align="C", fill=True)
    pdf.cell(
        desc_width + amount_width,
        8,
        clean(t("payslip.deductions")),
        border=1,
        align="C",
        fill=True,
        new_x=XPos.LMARGIN,
        new_y=YPos.NEXT,
    )
    for _ in range(2):
        pdf.cell(desc_width, 7, clean(t("payslip.particulars")), border=1, fill=True)
        pdf.cell(amount_width, 7, clean(t("payslip.amount")), border=1, align="R", fill=True)
    pdf.ln()

    for earning, deduction in _paired_rows(payslip):
        for row in (earning, deduction):
            label = clean(row["label"]) if row else ""
            amount = format_currency(row["amount"]) if row else ""
            pdf.cell(desc_width, 7, label, border=1)
            pdf.cell(amount_width, 7, amount, border=1, align="R")
        pdf.ln()

    pdf.set_font(family, style=heading_style, size=11)
    pdf.cell(desc_width, 7, clean(t("payslip.total_addition")), border=1)
    pdf.cell(amount_width, 7, format_currency(payslip.total_earnings), border=1, align="R")
    pdf.cell(desc_width, 7, clean(t("payslip.total_deduction")), border=1)
    pdf.cell(
        amount_width,
        7,
        format_currency(payslip.total_deductions),
        border=1,
        align="R",
        new_x=XPos.LMARGIN,
        new_y=YPos.NEXT,
    )
    pdf.cell(2 * desc_width + amount_width, 8, clean(t("payslip.net_salary")), border=1, align="R")
    pdf.cell(
        amount_width,
        8,
        format_currency(payslip.net_salary),
        border=1,
        align="R",
        new_x=XPos.LMARGIN,
        new_y=YPos.NEXT,
    )

    pdf.set_font(family, size=10)
    pdf.ln(4)
    pdf.multi_cell(
        pdf.epw,
        6,
        clean(f"{t('payslip.in_words')}: {format_currency(payslip.net_salary)} {t('payslip.only')}"),
    )
    pdf.multi_cell(pdf.epw, 6, clean(f"{t('payslip.date')}: {_format_date(payslip.issued_on)}"))
    pdf.ln(8)
    pdf.cell(pdf.epw / 2, 6, clean(f"{t('payslip.employee_signature')} ____________"))
    pdf.cell(pdf.epw / 2, 6, clean(f"{t('payslip.director')} ____________"), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(6)
    pdf.multi_cell(0, 6, clean(t("payslip.generated_with")))

    output = pdf.output()
    if isinstance(output, (bytes, bytearray)):
        return bytes(output)
    return output.encode("latin1")


PAYSLIP_FORMATS: Mapping[str, tuple[Callable[[Payslip], str | bytes], str, str]] = {
    "text": (render_text, "text/plain; charset=utf-8", "txt"),
    "csv": (render_csv, "text/csv; charset=utf-8", "csv"),
    "html": (render_html, "text/html; charset=utf-8", "html"),
    "pdf": (render_pdf, "application/pdf", "pdf"),
}


def export_payslip(
    payload: Mapping[str, Any], fmt: str, *, issued_on: date | None = None
) -> RenderedPayslip:
    """Validate ``payload``, calculate it and render the slip as ``fmt``.

    Raises ``KeyError`` for an unknown format and ``ValueError`` for an
    invalid payload.
    """

    renderer, mimetype, extension = PAYSLIP_FORMATS[fmt]
    payslip = build_payslip(compute_salary(payload), issued_on=issued_on)
    body = renderer(payslip)
    return RenderedPayslip(
        body=body,
        mimetype=mimetype,
        filename=f"salary-slip-{payslip.issued_on.isoformat()}.{extension}",
    )


__all__ = [
    "PAYSLIP_FORMATS",
    "Payslip",
    "RenderedPayslip",
    "build_payslip",
    "export_payslip",
    "render_csv",
    "render_html",
    "render_pdf",
    "render_text",
]
