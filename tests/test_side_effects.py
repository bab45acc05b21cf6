"""Side effects never roll back or fail a committed transition."""

import pytest

from vos.services.side_effects import FAILED, OK, SKIPPED, SideEffectDispatcher


class TestDispatcher:
    """Unit tests for SideEffectDispatcher.run"""

    @pytest.mark.asyncio
    async def test_each_effect_runs_once_and_failures_are_isolated(self, notifier, renderer):
        calls = []

        async def good():
            calls.append("good")
            return 42

        async def bad():
            calls.append("bad")
            raise RuntimeError("relay down")

        async def after():
            calls.append("after")

        dispatcher = SideEffectDispatcher(notifier=notifier, renderer=renderer)
        report = await dispatcher.run("test", [("good", good), ("bad", bad), ("none", None), ("after", after)])

        assert calls == ["good", "bad", "after"]
        assert [o.status for o in report.outcomes] == [OK, FAILED, SKIPPED, OK]
        assert report.outcome("good").result == 42
        assert report.outcome("bad").error == "relay down"
        assert [o.name for o in report.failures] == ["bad"]
        assert report.succeeded("good")
        assert not report.succeeded("bad")
        assert not report.succeeded("missing")

    @pytest.mark.asyncio
    async def test_email_without_recipients_is_skipped(self, dispatcher):
        assert dispatcher._email("customer-quote", [], "Subject") is None


@pytest.mark.asyncio
async def test_failed_inspector_email_keeps_schedule(client, headers, intake_payload, schedule_payload, notifier):
    resp = await client.post("/cases", json=intake_payload, headers=headers["agent"])
    case_id = resp.json()["data"]["id"]

    notifier.fail_all = True
    resp = await client.post(f"/cases/{case_id}/inspection", json=schedule_payload, headers=headers["agent"])
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert "inspector-assignment" in body["message"]

    case = body["data"]
    assert case["currentStage"] == 3
    assert case["status"] == "scheduled"
    assert case["inspection"]["emailSent"] is False

    notifier.fail_all = False
    case = (await client.get(f"/cases/{case_id}", headers=headers["agent"])).json()["data"]
    assert case["inspection"]["status"] == "scheduled"
    assert case["inspection"]["inspector"]["email"] == "inspector@vosmotors.com"


@pytest.mark.asyncio
async def test_inspector_email_sets_email_sent(client, headers, intake_payload, schedule_payload, notifier):
    resp = await client.post("/cases", json=intake_payload, headers=headers["agent"])
    case_id = resp.json()["data"]["id"]

    resp = await client.post(f"/cases/{case_id}/inspection", json=schedule_payload, headers=headers["agent"])
    body = resp.json()
    assert body["message"] is None
    assert body["data"]["inspection"]["emailSent"] is True

    message = [m for m in notifier.sent if m.kind == "inspector-assignment"][-1]
    assert message.recipients == ["inspector@vosmotors.com"]
    assert message.context["link"].endswith(f"/inspection/{body['data']['inspection']['accessToken']}")


@pytest.mark.asyncio
async def test_failed_quote_email_keeps_quote(client, case_flow, notifier):
    state = await case_flow()
    notifier.fail_kinds.add("customer-quote")

    resp = await client.post(f"/quotes/{state['quote_token']}/submit", json={"offerAmount": 13000})
    assert resp.status_code == 200
    quote = resp.json()["data"]
    assert quote["status"] == "ready"
    assert quote["offerAmount"] == 13000
    assert quote["emailSent"] is False
    assert "customer-quote" in resp.json()["message"]


@pytest.mark.asyncio
async def test_inspection_submission_notifies_everyone(client, headers, intake_payload, schedule_payload,
                                                       inspection_payload, notifier):
    resp = await client.post("/cases", json=intake_payload, headers=headers["agent"])
    case_id = resp.json()["data"]["id"]
    await client.post(f"/cases/{case_id}/estimator",
                      json={"estimator": {"email": "estimator@vosmotors.com"}}, headers=headers["agent"])
    resp = await client.post(f"/cases/{case_id}/inspection", json=schedule_payload, headers=headers["agent"])
    token = resp.json()["data"]["inspection"]["accessToken"]

    await client.post(f"/inspections/{token}/submit", json=inspection_payload)

    by_kind = {m.kind: m for m in notifier.sent}
    assert by_kind["customer-inspection-complete"].recipients == ["dana.seller@example.com"]
    assert by_kind["admin-inspection-complete"].recipients == ["admin@vosmotors.com"]
    assert by_kind["estimator-inspection-complete"].recipients == ["estimator@vosmotors.com"]
    assert by_kind["customer-inspection-complete"].context["overallScore"] == 17


@pytest.mark.asyncio
async def test_pdf_failure_still_completes_case(client, headers, case_flow, renderer, notifier):
    state = await case_flow()
    renderer.fail = True

    resp = await client.post(f"/cases/{state['case_id']}/complete", headers=headers["agent"])
    assert resp.status_code == 200
    body = resp.json()
    assert "case-pdf" in body["message"]

    data = body["data"]
    assert data["pdfUrl"] is None
    assert data["case"]["status"] == "completed"
    assert data["case"]["currentStage"] == 7
    assert data["case"]["pdfCaseFile"] is None
    assert data["case"]["completion"]["pdfGenerated"] is False
    assert data["case"]["completion"]["completedAt"] is not None

    thank_you = [m for m in notifier.sent if m.kind == "customer-thank-you"]
    assert len(thank_you) == 1
    assert thank_you[0].context["pdfUrl"] is None


@pytest.mark.asyncio
async def test_failed_thank_you_leaves_flags_unset(client, headers, case_flow, notifier):
    state = await case_flow()
    notifier.fail_kinds.add("customer-thank-you")

    resp = await client.post(f"/cases/{state['case_id']}/complete", headers=headers["agent"])
    assert resp.status_code == 200
    body = resp.json()
    assert "customer-thank-you" in body["message"]
    assert body["data"]["case"]["status"] == "completed"
    assert body["data"]["case"]["thankYouSent"] is False
    assert body["data"]["case"]["completion"]["thankYouSent"] is False
    assert body["data"]["pdfUrl"] is not None

    case = (await client.get(f"/cases/{state['case_id']}", headers=headers["agent"])).json()["data"]
    assert case["thankYouSent"] is False
    assert case["completion"]["pdfGenerated"] is True


@pytest.mark.asyncio
async def test_on_demand_pdf_failure_is_reported(client, headers, case_flow, renderer):
    state = await case_flow()

    resp = await client.get(f"/cases/{state['case_id']}/pdf", headers=headers["agent"])
    assert resp.status_code == 200
    assert resp.json()["data"]["pdfUrl"].endswith(f"/uploads/pdfs/case-{state['case_id']}.pdf")
    assert resp.json()["data"]["case"]["completion"]["pdfGenerated"] is True

    renderer.fail = True
    resp = await client.get(f"/cases/{state['case_id']}/pdf", headers=headers["agent"])
    assert resp.status_code == 502
    assert resp.json()["success"] is False


@pytest.mark.asyncio
async def test_on_demand_bill_of_sale(client, headers, case_flow, renderer):
    state = await case_flow()
    case_id = state["case_id"]

    resp = await client.get(f"/cases/{case_id}/bill-of-sale", headers=headers["agent"])
    assert resp.status_code == 200
    document = resp.json()["data"]
    assert document["fileName"] == f"bill-of-sale-{case_id}.pdf"
    assert document["pdfUrl"].endswith(f"/uploads/pdfs/bill-of-sale-{case_id}.pdf")
    assert renderer.rendered == [f"bill-of-sale-{case_id}.pdf"]

    renderer.fail = True
    resp = await client.get(f"/cases/{case_id}/bill-of-sale", headers=headers["agent"])
    assert resp.status_code == 502
    assert resp.json()["error"] == "PDF renderer unavailable"

    resp = await client.get("/cases/missing/bill-of-sale", headers=headers["agent"])
    assert resp.status_code == 404

    resp = await client.get(f"/cases/{case_id}/bill-of-sale")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_intake_without_customer_email_skips_confirmation(client, headers, intake_payload, notifier):
    intake_payload["customer"].pop("email1")
    resp = await client.post("/cases", json=intake_payload, headers=headers["agent"])
    assert resp.status_code == 201
    assert resp.json()["message"] is None
    assert notifier.kinds == ["admin-new-case"]
