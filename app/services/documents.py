import os
from flask import current_app


def _money(value):
    return f"{float(value or 0):,.2f}"


def render_invoice_document(invoice, customer=None, directory: str = None) -> str:
    """Write a plain-text copy of ``invoice`` and return its path."""
    directory = directory or current_app.config["INVOICE_DOCUMENT_DIR"]
    os.makedirs(directory, exist_ok=True)
    path = os.path.join(directory, f"{invoice.owner_id}-{invoice.invoice_no}.txt")

    rows = [
        f"Invoice {invoice.invoice_no}",
        f"Date: {invoice.created_at:%Y-%m-%d %H:%M}" if invoice.created_at else "Date: -",
    ]
    if customer is not None:
        rows.append(f"Customer: {customer.name} ({customer.phone})")
    rows.append("")
    rows.append(f"{'Item':<30}{'Qty':>6}{'Price':>12}{'Total':>12}")
    for line in invoice.lines:
        rows.append(
            f"{(line.name or str(line.item_id))[:30]:<30}{line.quantity:>6}"
            f"{_money(line.unit_price):>12}{_money(line.line_total):>12}"
        )
    rows.append("")
    rows.append(f"{'Subtotal':<48}{_money(invoice.subtotal):>12}")
    rows.append(f"{'Discount':<48}{_money(invoice.discount):>12}")
    rows.append(f"{'Total':<48}{_money(invoice.total_amount):>12}")
    rows.append(f"{'Paid (' + invoice.payment_method + ')':<48}{_money(invoice.paid_amount):>12}")
    rows.append(f"Status: {invoice.payment_status}")

    with open(path, "w", encoding="utf-8") as fh:
        fh.write("\n".join(rows) + "\n")
    return path
