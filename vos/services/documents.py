"""PDF rendering for case files and bills of sale."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import List, Protocol, Tuple

from reportlab.lib import colors
from reportlab.lib.pagesizes import LETTER
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from vos.core.config import settings
from vos.core.errors import ExternalFailureError
from vos.services.graph import CaseGraph

logger = logging.getLogger(__name__)

BRAND = colors.HexColor("#1f3a5f")
DARK = colors.HexColor("#111827")
GRAY = colors.HexColor("#6b7280")


@dataclass
class RenderedDocument:
    file_path: Path
    file_name: str

    @property
    def url(self) -> str:
        return f"{settings.API_URL}/uploads/pdfs/{self.file_name}"


class DocumentRenderer(Protocol):
    async def render_case_file(self, graph: CaseGraph) -> RenderedDocument:
        ...

    async def render_bill_of_sale(self, graph: CaseGraph) -> RenderedDocument:
        ...


def _fmt(v) -> str:
    if v is None or v == "":
        return "-"
    if isinstance(v, (datetime, date)):
        return v.strftime("%Y-%m-%d")
    if isinstance(v, bool):
        return "Yes" if v else "No"
    return str(getattr(v, "value", v))


def _money(v) -> str:
    try:
        return "-" if v is None else f"${float(v):,.2f}"
    except (TypeError, ValueError):
        return str(v)


def _case_file_sections(graph: CaseGraph) -> List[Tuple[str, List[Tuple[str, str]]]]:
    case, customer, vehicle = graph.case, graph.customer, graph.vehicle
    inspection, quote, transaction = graph.inspection, graph.quote, graph.transaction

    sections = [
        ("Case", [
            ("Case ID", case.id),
            ("Status", _fmt(case.status)),
            ("Stage", _fmt(case.current_stage)),
            ("Created", _fmt(case.created_at)),
            ("Completed", _fmt((case.completion or {}).get("completedAt"))),
        ]),
    ]
    if customer:
        sections.append(("Customer", [
            ("Name", customer.full_name or "-"),
            ("Email", _fmt(customer.primary_email)),
            ("Phone", _fmt(customer.cell_phone or customer.home_phone)),
        ]))
    if vehicle:
        sections.append(("Vehicle", [
            ("Vehicle", vehicle.description or "-"),
            ("VIN", _fmt(vehicle.vin)),
            ("Mileage", _fmt(vehicle.current_mileage)),
            ("Title status", _fmt(vehicle.title_status)),
        ]))
    if inspection:
        sections.append(("Inspection", [
            ("Inspector", _fmt(inspection.inspector_name)),
            ("Completed", _fmt(inspection.completed_at)),
            ("Overall rating", _fmt(inspection.overall_rating)),
            ("Score", f"{_fmt(inspection.overall_score)} / {_fmt(inspection.max_possible_score)}"),
        ]))
    if quote:
        decision = quote.offer_decision or {}
        sections.append(("Quote", [
            ("Offer amount", _money(quote.offer_amount)),
            ("Decision", _fmt(decision.get("decision"))),
            ("Final amount", _money(decision.get("finalAmount"))),
            ("Decision date", _fmt(decision.get("decisionDate"))),
        ]))
    if transaction:
        sections.append(("Transaction", [
            ("Sale price", _money(transaction.sale_price)),
            ("Payment method", _fmt(transaction.preferred_payment_method)),
            ("Payment status", _fmt(transaction.payment_status)),
            ("Payoff status", _fmt(transaction.payoff_status)),
        ]))
    return sections


def _bill_of_sale_sections(graph: CaseGraph) -> List[Tuple[str, List[Tuple[str, str]]]]:
    bill = (graph.transaction.bill_of_sale if graph.transaction else None) or {}
    return [
        ("Seller", [
            ("Name", _fmt(bill.get("sellerName") or graph.customer_name)),
            ("Address", _fmt(bill.get("sellerAddress"))),
            ("City/State/ZIP", " ".join(
                _fmt(bill.get(k)) for k in ("sellerCity", "sellerState", "sellerZip")
            )),
            ("Driver license", f"{_fmt(bill.get('sellerDLNumber'))} ({_fmt(bill.get('sellerDLState'))})"),
        ]),
        ("Buyer", [
            ("Name", _fmt(bill.get("buyerName") or settings.BUYER_NAME)),
            ("Address", _fmt(bill.get("buyerAddress") or settings.BUYER_ADDRESS)),
            ("Business license", _fmt(bill.get("buyerBusinessLicense") or settings.BUYER_BUSINESS_LICENSE)),
        ]),
        ("Vehicle", [
            ("VIN", _fmt(bill.get("vehicleVIN"))),
            ("Year/Make/Model", " ".join(
                _fmt(bill.get(k)) for k in ("vehicleYear", "vehicleMake", "vehicleModel")
            )),
            ("Odometer", _fmt(bill.get("odometerReading"))),
            ("Title number", _fmt(bill.get("vehicleTitleNumber"))),
        ]),
        ("Sale", [
            ("Date", _fmt(bill.get("saleDate"))),
            ("Price", _money(bill.get("salePrice"))),
            ("Sold as-is", _fmt(bill.get("asIsAcknowledgment"))),
        ]),
    ]


def _draw_pdf(path: Path, title: str, subtitle: str, sections) -> None:
    c = canvas.Canvas(str(path), pagesize=LETTER)
    width, height = LETTER

    c.setFillColor(BRAND)
    c.rect(0, height - 26 * mm, width, 26 * mm, stroke=0, fill=1)
    c.setFillColor(colors.white)
    c.setFont("Helvetica-Bold", 16)
    c.drawString(18 * mm, height - 15 * mm, title)
    c.setFont("Helvetica", 9)
    c.drawString(18 * mm, height - 21 * mm, subtitle)

    y = height - 36 * mm
    for heading, rows in sections:
        if y < 40 * mm:
            c.showPage()
            y = height - 20 * mm
        c.setFillColor(DARK)
        c.setFont("Helvetica-Bold", 11)
        c.drawString(18 * mm, y, heading)
        y -= 6 * mm
        c.setFont("Helvetica", 9)
        for label, value in rows:
            c.setFillColor(GRAY)
            c.drawString(22 * mm, y, label)
            c.setFillColor(DARK)
            c.drawString(70 * mm, y, str(value)[:90])
            y -= 5 * mm
        y -= 4 * mm

    c.setFillColor(GRAY)
    c.setFont("Helvetica", 8)
    c.drawString(18 * mm, 12 * mm, f"Generated {datetime.utcnow().strftime('%Y-%m-%d %H:%M')} UTC")
    c.save()


class ReportlabRenderer:
    """Write PDFs into a directory with reportlab."""

    def __init__(self, output_dir: Path = None):
        self.output_dir = Path(output_dir or settings.PDF_DIR)

    async def _render(self, file_name: str, title: str, subtitle: str, sections) -> RenderedDocument:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / file_name
        try:
            await asyncio.to_thread(_draw_pdf, path, title, subtitle, sections)
        except OSError as e:
            raise ExternalFailureError(f"Failed to write {file_name}: {e}") from e
        logger.info("Rendered %s", path)
        return RenderedDocument(file_path=path, file_name=file_name)

    async def render_case_file(self, graph: CaseGraph) -> RenderedDocument:
        return await self._render(
            f"case-{graph.case.id}.pdf",
            "Vehicle Purchase Case File",
            f"{graph.customer_name} - {graph.vehicle_description}",
            _case_file_sections(graph),
        )

    async def render_bill_of_sale(self, graph: CaseGraph) -> RenderedDocument:
        return await self._render(
            f"bill-of-sale-{graph.case.id}.pdf",
            "Bill of Sale",
            graph.vehicle_description,
            _bill_of_sale_sections(graph),
        )
