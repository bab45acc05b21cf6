"""Lender payoff confirmation and per-stage time tracking."""

import pytest


async def _with_transaction(client, headers, case_flow):
    state = await case_flow()
    resp = await client.put(
        f"/quotes/case/{state['case_id']}/paperwork",
        json={
            "billOfSale": {"sellerName": "Dana Seller", "odometerReading": "64200"},
            "bankDetails": {"bankName": "First Auto Credit", "loanNumber": "LN-778", "payoffAmount": 4200},
            "payoffStatus": "pending",
        },
        headers=headers["agent"],
    )
    assert resp.status_code == 200, resp.text
    return state, resp.json()["data"]


@pytest.mark.asyncio
async def test_staff_paperwork_does_not_move_stage(client, headers, case_flow):
    state, result = await _with_transaction(client, headers, case_flow)
    assert result["case"]["currentStage"] == 4
    assert result["case"]["vehicle"]["currentMileage"] == "64200"
    assert result["transaction"]["bankDetails"]["loanNumber"] == "LN-778"
    assert result["transaction"]["payoffStatus"] == "pending"
    assert result["transaction"]["billOfSale"]["buyerName"] == "VOS - Vehicle Offer Service"
    assert result["transaction"]["submittedAt"] is not None


@pytest.mark.asyncio
async def test_payoff_confirmed_then_completed(client, headers, staff, case_flow):
    state, _ = await _with_transaction(client, headers, case_flow)
    url = f"/cases/{state['case_id']}/payoff-confirmation"

    resp = await client.post(url, json={"payoffStatus": "confirmed", "payoffNotes": "Lender called"},
                             headers=headers["agent"])
    assert resp.status_code == 200
    transaction = resp.json()["data"]["transaction"]
    assert transaction["payoffStatus"] == "confirmed"
    assert transaction["payoffNotes"] == "Lender called"
    assert transaction["payoffConfirmedBy"] == staff["agent"].id
    assert transaction["payoffConfirmedAt"] is not None
    assert transaction["payoffCompletedAt"] is None
    confirmed_at = transaction["payoffConfirmedAt"]

    resp = await client.post(url, json={"payoffStatus": "completed"}, headers=headers["admin"])
    transaction = resp.json()["data"]["transaction"]
    assert transaction["payoffStatus"] == "completed"
    assert transaction["payoffCompletedAt"] is not None
    assert transaction["payoffConfirmedAt"] == confirmed_at
    assert transaction["payoffConfirmedBy"] == staff["agent"].id


@pytest.mark.asyncio
async def test_payoff_completed_directly_stamps_confirmation(client, headers, staff, case_flow):
    state, _ = await _with_transaction(client, headers, case_flow)

    resp = await client.post(f"/cases/{state['case_id']}/payoff-confirmation",
                             json={"payoffStatus": "completed"}, headers=headers["admin"])
    transaction = resp.json()["data"]["transaction"]
    assert transaction["payoffCompletedAt"] is not None
    assert transaction["payoffConfirmedAt"] is not None
    assert transaction["payoffConfirmedBy"] == staff["admin"].id


@pytest.mark.asyncio
async def test_payoff_requires_transaction(client, headers, case_flow):
    state = await case_flow()
    resp = await client.post(f"/cases/{state['case_id']}/payoff-confirmation",
                             json={"payoffStatus": "confirmed"}, headers=headers["agent"])
    assert resp.status_code == 404
    assert resp.json()["error"] == "No transaction found for this case"


def stage_time(case_id, stage, start, end, **extra):
    payload = {"caseId": case_id, "stageName": stage, "startTime": start, "endTime": end}
    if extra:
        payload["extraFields"] = extra
    return payload


@pytest.mark.asyncio
async def test_stage_time_replaces_stage_and_recomputes_total(client, headers, intake_payload):
    resp = await client.post("/cases", json=intake_payload, headers=headers["agent"])
    case_id = resp.json()["data"]["id"]

    resp = await client.get(f"/cases/{case_id}/time-tracking", headers=headers["agent"])
    assert resp.status_code == 404
    assert resp.json()["error"] == "No time tracking found for this case"

    resp = await client.post("/stage-time", json=stage_time(
        case_id, "intake", "2026-10-01T09:00:00", "2026-10-01T09:01:30"), headers=headers["agent"])
    assert resp.status_code == 200
    assert resp.json()["data"]["totalTime"] == 90000

    resp = await client.post("/stage-time", json=stage_time(
        case_id, "inspection", "2026-10-02T09:00:00", "2026-10-02T10:00:00", totalTime=5000, mileage="64000"),
        headers=headers["agent"])
    tracking = resp.json()["data"]
    assert tracking["totalTime"] == 95000
    assert tracking["stageTimes"]["inspection"]["totalTime"] == 5000
    assert tracking["stageTimes"]["inspection"]["mileage"] == "64000"

    resp = await client.post("/stage-time", json=stage_time(
        case_id, "intake", "2026-10-01T09:00:00", "2026-10-01T09:00:30"), headers=headers["agent"])
    assert resp.json()["data"]["totalTime"] == 35000

    resp = await client.get(f"/cases/{case_id}/time-tracking", headers=headers["agent"])
    tracking = resp.json()["data"]
    assert tracking["caseId"] == case_id
    assert set(tracking["stageTimes"]) == {"intake", "inspection"}
    assert tracking["totalTime"] == 35000


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "stage,start,end",
    [
        ("lunch", "2026-10-01T09:00:00", "2026-10-01T10:00:00"),
        ("intake", "2026-10-01T10:00:00", "2026-10-01T09:00:00"),
    ],
)
async def test_stage_time_validation(client, headers, intake_payload, stage, start, end):
    resp = await client.post("/cases", json=intake_payload, headers=headers["agent"])
    case_id = resp.json()["data"]["id"]

    resp = await client.post("/stage-time", json=stage_time(case_id, stage, start, end), headers=headers["agent"])
    assert resp.status_code == 422


@pytest.mark.asyncio
@pytest.mark.parametrize("total", ["5 minutes", -1, True, 12.5])
async def test_stage_time_rejects_bad_total_without_writing(client, headers, intake_payload, total):
    resp = await client.post("/cases", json=intake_payload, headers=headers["agent"])
    case_id = resp.json()["data"]["id"]

    resp = await client.post("/stage-time", json=stage_time(
        case_id, "intake", "2026-10-01T09:00:00", "2026-10-01T09:01:00", totalTime=total), headers=headers["agent"])
    assert resp.status_code == 422
    assert resp.json()["success"] is False

    resp = await client.get(f"/cases/{case_id}/time-tracking", headers=headers["agent"])
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_stage_time_unknown_case(client, headers):
    resp = await client.post("/stage-time", json=stage_time(
        "missing", "intake", "2026-10-01T09:00:00", "2026-10-01T09:01:00"), headers=headers["agent"])
    assert resp.status_code == 404
