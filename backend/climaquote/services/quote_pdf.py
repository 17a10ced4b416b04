from io import BytesIO
from typing import Optional

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from .. import models
from ..core.config import settings
from .financing import monthly_fee
from .money import format_money, to_decimal

_LABELS = {
    "es": {
        "title": "Presupuesto",
        "date": "Fecha",
        "valid_until": "Válido hasta",
        "client": "Cliente",
        "tax_id": "NIF",
        "work_order": "Nº orden de trabajo",
        "concept": "Concepto",
        "qty": "Cant.",
        "price": "Precio",
        "amount": "Importe",
        "total": "Total (IVA incl.)",
        "financing": "Financiación: {months} meses, cuota estimada {fee}/mes",
        "signature": "Firma del cliente",
        "accepted": "Aceptado el",
    },
    "ca": {
        "title": "Pressupost",
        "date": "Data",
        "valid_until": "Vàlid fins a",
        "client": "Client",
        "tax_id": "NIF",
        "work_order": "Núm. ordre de treball",
        "concept": "Concepte",
        "qty": "Quant.",
        "price": "Preu",
        "amount": "Import",
        "total": "Total (IVA incl.)",
        "financing": "Finançament: {months} mesos, quota estimada {fee}/mes",
        "signature": "Signatura del client",
        "accepted": "Acceptat el",
    },
}


def _labels(locale: Optional[str]) -> dict:
    return _LABELS.get((locale or "").lower(), _LABELS[settings.DEFAULT_LOCALE])


def render_quote_pdf(quote: models.Quote, locale: Optional[str] = None) -> bytes:
    """Return PDF bytes for the given quote in ``locale`` (defaults to the quote's)."""
    t = _labels(locale or quote.locale)
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    c.setTitle(f"{t['title']} {quote.quote_no}")

    c.setFont("Helvetica-Bold", 14)
    c.drawString(50, 800, f"{t['title']} {quote.quote_no}")
    c.setFont("Helvetica", 10)
    c.drawString(50, 780, f"{t['date']}: {quote.created_at:%d/%m/%Y}")
    c.drawString(300, 780, f"{t['valid_until']}: {quote.valid_until:%d/%m/%Y}")

    y = 755
    c.drawString(50, y, f"{t['client']}: {quote.client_name or '-'}")
    for line in (quote.client_email, quote.client_phone, quote.client_address, quote.client_population):
        if line:
            y -= 14
            c.drawString(60, y, str(line))
    if quote.client_tax_id:
        y -= 14
        c.drawString(60, y, f"{t['tax_id']}: {quote.client_tax_id}")
    if quote.is_technician and quote.work_order_number:
        y -= 14
        c.drawString(60, y, f"{t['work_order']}: {quote.work_order_number}")

    y -= 30
    c.setFont("Helvetica-Bold", 10)
    c.drawString(50, y, t["concept"])
    c.drawRightString(380, y, t["qty"])
    c.drawRightString(460, y, t["price"])
    c.drawRightString(550, y, t["amount"])
    c.setFont("Helvetica", 10)
    for item in quote.items:
        y -= 18
        if y < 120:
            c.showPage()
            c.setFont("Helvetica", 10)
            y = 800
        c.drawString(50, y, item.description[:60])
        c.drawRightString(380, y, str(item.quantity))
        c.drawRightString(460, y, format_money(item.unit_price))
        c.drawRightString(550, y, format_money(item.total))
    c.line(50, y - 8, 550, y - 8)

    c.setFont("Helvetica-Bold", 12)
    y -= 28
    c.drawRightString(550, y, f"{t['total']}: {format_money(quote.total_amount)}")

    if quote.financing_months:
        fee = quote.financing_fee
        if fee is None:
            fee = monthly_fee(to_decimal(quote.total_amount), quote.financing_months)
        c.setFont("Helvetica", 10)
        y -= 18
        c.drawRightString(550, y, t["financing"].format(months=quote.financing_months, fee=format_money(fee)))

    c.setFont("Helvetica", 10)
    y -= 50
    c.drawString(50, y, f"{t['signature']}:")
    c.line(50, y - 40, 250, y - 40)
    if quote.accepted_at:
        c.drawString(300, y, f"{t['accepted']} {quote.accepted_at:%d/%m/%Y %H:%M}")

    c.showPage()
    c.save()
    buffer.seek(0)
    return buffer.read()
