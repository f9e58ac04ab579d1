from decimal import Decimal
from typing import Optional, Union

from jinja2 import Environment, PackageLoader, select_autoescape

QR_CONTENT_ID = "frutico-qr"

_env = Environment(
    loader=PackageLoader("frutico", "templates"),
    autoescape=select_autoescape(["html"]),
)


def _rupees(value: Optional[Union[Decimal, float]]) -> str:
    if value is None:
        return "-"
    return f"₹{Decimal(str(value)):,.2f}"


_env.filters["rupees"] = _rupees


def render_ticket_html(
    name: str,
    persons: int,
    location: str,
    visit_date: str,
    amount: Optional[Union[Decimal, float]],
    ticket_id: str,
) -> str:
    """Render the e-mail ticket; the QR image is referenced as ``cid:frutico-qr``."""
    template = _env.get_template("ticket.html")
    return template.render(
        name=name,
        persons=persons,
        location=location,
        visit_date=visit_date,
        amount=amount,
        ticket_id=ticket_id,
        qr_cid=QR_CONTENT_ID,
    )
