"""
Quote export: printable HTML quote and CSV bill of materials.

HTML is rendered with a Jinja environment that autoescapes, so customer and
catalog text can never inject markup.
"""
from decimal import Decimal
from typing import Optional
import csv
import io

from jinja2 import Environment
from markupsafe import Markup, escape

from fencemark.models.quote import Quote
from fencemark.utils.clock import utcnow

CSV_HEADER = ["Category", "Description", "SKU", "Quantity", "Unit of Measure", "Unit Price", "Total Price"]

_QUOTE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <title>Quote {{ quote.quote_number }}</title>
    <style>
        body { font-family: Arial, sans-serif; max-width: 800px; margin: 40px auto; padding: 20px; }
        .header { border-bottom: 3px solid #333; padding-bottom: 20px; margin-bottom: 30px; }
        .info-section { margin-bottom: 30px; }
        .info-grid { display: grid; grid-template-columns: 150px 1fr; gap: 10px; }
        .info-label { font-weight: bold; color: #666; }
        table { width: 100%; border-collapse: collapse; margin: 20px 0; }
        th { background-color: #f4f4f4; text-align: left; padding: 12px; border: 1px solid #ddd; }
        td { padding: 10px; border: 1px solid #ddd; }
        .num { text-align: right; }
        .category-header { background-color: #e8e8e8; font-weight: bold; }
        .totals { margin-top: 30px; float: right; width: 300px; }
        .total-row { display: flex; justify-content: space-between; padding: 8px 0; border-bottom: 1px solid #eee; }
        .grand-total { font-size: 1.2em; font-weight: bold; border-top: 2px solid #333; padding-top: 10px; }
        .footer { clear: both; margin-top: 50px; padding-top: 20px; border-top: 1px solid #ddd; font-size: 0.9em; color: #666; }
    </style>
</head>
<body>
    <div class="header">
        <h1>{{ organization_name }}</h1>
        <h2>Quote #{{ quote.quote_number }}</h2>
    </div>
    <div class="info-section">
        <h2>Quote Information</h2>
        <div class="info-grid">
            <div class="info-label">Quote Date:</div><div>{{ quote.created_at | longdate }}</div>
            <div class="info-label">Valid Until:</div><div>{{ valid_until | longdate }}</div>
            <div class="info-label">Status:</div><div>{{ quote.status.value }}</div>
            <div class="info-label">Version:</div><div>{{ quote.current_version }}</div>
        </div>
    </div>
    <div class="info-section">
        <h2>Customer Information</h2>
        <div class="info-grid">
            <div class="info-label">Name:</div><div>{{ job.customer_name if job else "Unknown" }}</div>
            {%- if job and job.customer_email %}
            <div class="info-label">Email:</div><div>{{ job.customer_email }}</div>
            {%- endif %}
            {%- if job and job.customer_phone %}
            <div class="info-label">Phone:</div><div>{{ job.customer_phone }}</div>
            {%- endif %}
            {%- if job and job.installation_address %}
            <div class="info-label">Address:</div><div>{{ job.installation_address }}</div>
            {%- endif %}
        </div>
    </div>
    <div class="info-section">
        <h2>Bill of Materials</h2>
        <table>
            <thead>
                <tr>
                    <th>Description</th>
                    <th>SKU</th>
                    <th class="num">Quantity</th>
                    <th class="num">Unit Price</th>
                    <th class="num">Total</th>
                </tr>
            </thead>
            <tbody>
            {%- for category, items in groups %}
                <tr class="category-header"><td colspan="5">{{ category }}</td></tr>
                {%- for item in items %}
                <tr>
                    <td>{{ item.description }}</td>
                    <td>{{ item.sku or "-" }}</td>
                    <td class="num">{{ item.quantity | number }} {{ item.unit_of_measure }}</td>
                    <td class="num">${{ item.unit_price | number }}</td>
                    <td class="num">${{ item.total_price | number }}</td>
                </tr>
                {%- endfor %}
            {%- endfor %}
            </tbody>
        </table>
    </div>
    <div class="totals">
        <div class="total-row"><span>Materials:</span><span>${{ quote.materials_cost | number }}</span></div>
        <div class="total-row"><span>Labor:</span><span>${{ quote.labor_cost | number }}</span></div>
        <div class="total-row"><span>Subtotal:</span><span>${{ quote.subtotal | number }}</span></div>
        <div class="total-row"><span>Contingency:</span><span>${{ quote.contingency_amount | number }}</span></div>
        <div class="total-row"><span>Profit:</span><span>${{ quote.profit_amount | number }}</span></div>
        {%- if quote.tax_amount > 0 %}
        <div class="total-row"><span>Tax:</span><span>${{ quote.tax_amount | number }}</span></div>
        {%- endif %}
        <div class="total-row grand-total"><span>Grand Total:</span><span>${{ quote.grand_total | number }}</span></div>
    </div>
    {%- if quote.terms or quote.notes %}
    <div class="info-section">
        {%- if quote.terms %}
        <h2>Terms and Conditions</h2>
        <p>{{ quote.terms | paragraphs }}</p>
        {%- endif %}
        {%- if quote.notes %}
        <h2>Notes</h2>
        <p>{{ quote.notes | paragraphs }}</p>
        {%- endif %}
    </div>
    {%- endif %}
    <div class="footer">
        <p>This quote is valid until {{ valid_until | longdate }}.</p>
        <p>Generated on {{ generated_at | longdate }} at {{ generated_at.strftime("%H:%M") }} UTC</p>
    </div>
</body>
</html>
"""


def _format_number(value) -> str:
    return f"{Decimal(value or 0):,.2f}"


def _format_long_date(value) -> str:
    return value.strftime("%B %d, %Y") if value else ""


def _paragraphs(value: str):
    """Escape text, then turn newlines into <br>."""
    return Markup("<br>").join(escape(line) for line in value.split("\n"))


_env = Environment(autoescape=True)
_env.filters["number"] = _format_number
_env.filters["longdate"] = _format_long_date
_env.filters["paragraphs"] = _paragraphs
_quote_template = _env.from_string(_QUOTE_TEMPLATE)


def _sorted_bom(quote: Quote):
    return sorted(quote.bill_of_materials, key=lambda item: (item.category, item.sort_order))


def render_quote_html(quote: Quote, organization_name: Optional[str] = None) -> str:
    groups = []
    for item in _sorted_bom(quote):
        if not groups or groups[-1][0] != item.category:
            groups.append((item.category, []))
        groups[-1][1].append(item)

    generated_at = utcnow()
    return _quote_template.render(
        quote=quote,
        job=quote.job,
        organization_name=organization_name or "Unknown",
        groups=groups,
        valid_until=quote.valid_until or generated_at,
        generated_at=generated_at,
    )


def render_bom_csv(quote: Quote) -> str:
    """BOM rows sorted by category then sort order, followed by a cost summary."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)

    for item in _sorted_bom(quote):
        writer.writerow([
            item.category,
            item.description,
            item.sku or "",
            f"{Decimal(item.quantity):.2f}",
            item.unit_of_measure,
            f"{Decimal(item.unit_price):.2f}",
            f"{Decimal(item.total_price):.2f}",
        ])

    summary = [
        ("Materials Cost", quote.materials_cost),
        ("Labor Cost", quote.labor_cost),
        ("Subtotal", quote.subtotal),
        ("Contingency", quote.contingency_amount),
        ("Profit", quote.profit_amount),
    ]
    if Decimal(quote.tax_amount or 0) > 0:
        summary.append(("Tax", quote.tax_amount))
    summary.append(("Grand Total", quote.grand_total))

    writer.writerow([])
    for label, value in summary:
        writer.writerow([label, "", "", "", "", "", f"{Decimal(value or 0):.2f}"])

    return buffer.getvalue()
