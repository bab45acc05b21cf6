"""PDF rendering and notification adapters."""

import pytest

from vos.core.errors import ExternalFailureError
from vos.services.documents import ReportlabRenderer
from vos.services.graph import load_case_graph
from vos.services.notifications import LogNotifier, NotificationMessage, SmtpNotifier, build_notifier


@pytest.mark.asyncio
async def test_reportlab_renders_case_file_and_bill_of_sale(db, tmp_path, client, case_flow):
    state = await case_flow()
    await client.post(f"/quotes/{state['quote_token']}/submit", json={"offerAmount": 14250})
    graph = await load_case_graph(db, state["case_id"])

    renderer = ReportlabRenderer(output_dir=tmp_path / "out")
    case_file = await renderer.render_case_file(graph)
    bill = await renderer.render_bill_of_sale(graph)

    assert case_file.file_name == f"case-{state['case_id']}.pdf"
    assert case_file.file_path.read_bytes().startswith(b"%PDF")
    assert case_file.url.endswith(f"/uploads/pdfs/{case_file.file_name}")
    assert bill.file_name == f"bill-of-sale-{state['case_id']}.pdf"
    assert bill.file_path.stat().st_size > 0


def test_message_body_skips_empty_context():
    message = NotificationMessage(
        kind="customer-quote",
        recipients=["dana.seller@example.com"],
        subject="Your offer",
        context={"offerAmount": 14250, "notes": None, "link": ""},
    )
    assert message.body() == "Your offer\n\nofferAmount: 14250"


def test_log_notifier_without_smtp_host():
    assert isinstance(build_notifier(), LogNotifier)


@pytest.mark.asyncio
async def test_smtp_failure_is_external_failure():
    notifier = SmtpNotifier(host="127.0.0.1", port=1, use_tls=False, timeout=1)
    message = NotificationMessage(kind="customer-quote", recipients=["dana.seller@example.com"], subject="Offer")
    with pytest.raises(ExternalFailureError) as exc_info:
        await notifier.send(message)
    assert exc_info.value.status_code == 502
    assert "customer-quote" in exc_info.value.message
