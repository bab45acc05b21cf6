"""Case administration: deletion, linking, overrides, authentication."""

import asyncio

import pytest
from sqlalchemy import func, select

from vos.models import Case, Customer, Inspection, Quote, SigningSession, TimeTracking, Transaction, Vehicle
from vos.schemas.quote import EstimatorAssignment
from vos.services import quote_service


async def count(session_factory, model):
    async with session_factory() as session:
        return (await session.execute(select(func.count()).select_from(model))).scalar_one()


OWNED_MODELS = (Case, Customer, Vehicle, Inspection, Quote, Transaction, TimeTracking, SigningSession)


@pytest.mark.asyncio
async def test_delete_case_removes_owned_records(client, headers, case_flow, session_factory):
    state = await case_flow()
    case_id = state["case_id"]
    resp = await client.post(f"/quotes/{state['quote_token']}/submit", json={"offerAmount": 14250})
    assert resp.status_code == 200
    resp = await client.post(
        f"/cases/{case_id}/signing",
        json={"recipientName": "Dana Seller", "recipientEmail": "dana.seller@example.com"},
        headers=headers["agent"],
    )
    assert resp.status_code == 201
    await client.post("/stage-time", json={
        "caseId": case_id,
        "stageName": "intake",
        "startTime": "2026-10-01T09:00:00",
        "endTime": "2026-10-01T09:05:00",
    }, headers=headers["agent"])

    for model in OWNED_MODELS:
        assert await count(session_factory, model) == 1, model.__name__

    resp = await client.delete(f"/cases/{case_id}", headers=headers["agent"])
    assert resp.status_code == 403

    resp = await client.delete(f"/cases/{case_id}", headers=headers["admin"])
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "data": None, "error": None, "message": "Case deleted"}

    resp = await client.get(f"/cases/{case_id}", headers=headers["admin"])
    assert resp.status_code == 404

    for model in OWNED_MODELS:
        assert await count(session_factory, model) == 0, model.__name__


@pytest.mark.asyncio
async def test_delete_unknown_case(client, headers):
    resp = await client.delete("/cases/does-not-exist", headers=headers["admin"])
    assert resp.status_code == 404
    assert resp.json()["success"] is False


@pytest.mark.asyncio
async def test_estimator_assignment_reuses_single_quote(client, headers, staff, case_flow, notifier,
                                                        session_factory):
    state = await case_flow()
    case_id = state["case_id"]

    resp = await client.post(
        f"/cases/{case_id}/estimator",
        json={"estimator": {"firstName": "Other", "lastName": "Person", "email": "other@example.com"}},
        headers=headers["agent"],
    )
    assert resp.status_code == 200
    case = resp.json()["data"]

    assert case["quote"]["accessToken"] == state["quote_token"]
    assert case["quoteId"] == case["quote"]["id"]
    assert case["quote"]["estimator"]["email"] == "other@example.com"
    # no User with that email: the earlier link stays
    assert case["estimatorId"] == staff["estimator"].id
    assert await count(session_factory, Quote) == 1
    assert notifier.kinds.count("estimator-assignment") == 2


@pytest.mark.asyncio
async def test_concurrent_estimator_assignment_creates_one_quote(case_flow, session_factory, dispatcher):
    state = await case_flow(assign=False)
    case_id = state["case_id"]
    assignment = EstimatorAssignment.model_validate(
        {"estimator": {"firstName": "Erin", "lastName": "Estimator", "email": "estimator@vosmotors.com"}}
    )

    async def assign():
        async with session_factory() as session:
            graph, _ = await quote_service.assign_estimator(session, case_id, assignment, dispatcher)
            return graph.quote.id

    quote_ids = await asyncio.gather(*(assign() for _ in range(5)))

    assert len(set(quote_ids)) == 1
    assert await count(session_factory, Quote) == 1
    async with session_factory() as session:
        case = await session.get(Case, case_id)
        quote = (await session.execute(select(Quote))).scalar_one()
        assert quote.case_id == case_id
        assert case.quote_id == quote.id == quote_ids[0]


@pytest.mark.asyncio
async def test_forward_reference_is_repaired(client, headers, case_flow, session_factory):
    state = await case_flow()
    case_id = state["case_id"]

    async with session_factory() as session:
        case = await session.get(Case, case_id)
        expected_quote_id = case.quote_id
        case.quote_id = None
        case.inspection_id = "stale-id"
        await session.commit()

    resp = await client.get(f"/cases/{case_id}", headers=headers["agent"])
    case = resp.json()["data"]
    assert case["quoteId"] == expected_quote_id
    assert case["inspectionId"] == case["inspection"]["id"]

    async with session_factory() as session:
        stored = await session.get(Case, case_id)
        assert stored.quote_id == expected_quote_id
        assert stored.inspection_id == case["inspection"]["id"]


@pytest.mark.asyncio
async def test_stage_override_is_not_validated_against_transitions(client, headers, intake_payload):
    resp = await client.post("/cases", json=intake_payload, headers=headers["agent"])
    case_id = resp.json()["data"]["id"]

    resp = await client.put(
        f"/cases/{case_id}/stage",
        json={"currentStage": 6, "stageStatuses": {"2": "pending", "6": "active"}},
        headers=headers["agent"],
    )
    assert resp.status_code == 200
    case = resp.json()["data"]
    assert case["currentStage"] == 6
    assert case["stageStatuses"]["1"] == "complete"
    assert case["stageStatuses"]["2"] == "pending"
    assert case["stageStatuses"]["6"] == "active"
    assert case["status"] == "new"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"currentStage": 0},
        {"currentStage": 8},
        {"currentStage": 3, "stageStatuses": {"9": "active"}},
        {"currentStage": 3, "stageStatuses": {"3": "done"}},
    ],
)
async def test_stage_override_shape_is_checked(client, headers, intake_payload, payload):
    resp = await client.post("/cases", json=intake_payload, headers=headers["agent"])
    case_id = resp.json()["data"]["id"]

    resp = await client.put(f"/cases/{case_id}/stage", json=payload, headers=headers["agent"])
    assert resp.status_code == 422
    assert resp.json()["success"] is False


@pytest.mark.asyncio
async def test_quote_token_stage_override(client, headers, case_flow):
    state = await case_flow()
    resp = await client.put(f"/quotes/{state['quote_token']}/stage", json={"currentStage": 5,
                                                                          "stageStatuses": {"5": "active"}})
    assert resp.status_code == 200
    assert resp.json()["data"]["currentStage"] == 5
    assert resp.json()["data"]["stageStatuses"]["5"] == "active"


@pytest.mark.asyncio
async def test_status_override(client, headers, intake_payload):
    resp = await client.post("/cases", json=intake_payload, headers=headers["agent"])
    case_id = resp.json()["data"]["id"]

    resp = await client.put(f"/cases/{case_id}/status", json={"status": "active"}, headers=headers["agent"])
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "active"
    assert resp.json()["data"]["currentStage"] == 2

    resp = await client.put(f"/cases/{case_id}/status", json={"status": "archived"}, headers=headers["agent"])
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_completion_checklist(client, headers, case_flow):
    state = await case_flow()
    resp = await client.post(
        f"/cases/{state['case_id']}/completion",
        json={"leaveBehinds": {"vehicleLeft": True, "keysHandedOver": True}, "titleConfirmation": True},
        headers=headers["agent"],
    )
    assert resp.status_code == 200
    case = resp.json()["data"]
    assert case["completion"]["leaveBehinds"] == {
        "vehicleLeft": True,
        "keysHandedOver": True,
        "documentsReceived": False,
    }
    assert case["completion"]["titleConfirmation"] is True
    assert case["completion"]["thankYouSent"] is False
    assert case["currentStage"] == 4


@pytest.mark.asyncio
async def test_staff_routes_require_session(client, headers, intake_payload):
    resp = await client.get("/cases")
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "error": "Authentication required"}

    resp = await client.get("/cases", headers={"Authorization": "Bearer not-a-session"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "Invalid session token"

    resp = await client.post("/cases", json=intake_payload, headers={"Authorization": "Basic abc"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_quote_case_routes_reject_inspectors(client, headers, case_flow):
    state = await case_flow()
    resp = await client.post(f"/quotes/case/{state['case_id']}/submit", json={"offerAmount": 1},
                             headers=headers["inspector"])
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_unknown_case_and_route(client, headers):
    resp = await client.get("/cases/missing", headers=headers["agent"])
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "Case with id missing not found"}

    resp = await client.get("/nowhere")
    assert resp.status_code == 404
    assert resp.json()["success"] is False


@pytest.mark.asyncio
async def test_schedule_requires_customer_and_vehicle(client, headers, intake_payload, schedule_payload,
                                                      session_factory):
    resp = await client.post("/cases", json=intake_payload, headers=headers["agent"])
    case_id = resp.json()["data"]["id"]

    async with session_factory() as session:
        case = await session.get(Case, case_id)
        case.vehicle_id = None
        await session.commit()

    resp = await client.post(f"/cases/{case_id}/inspection", json=schedule_payload, headers=headers["agent"])
    assert resp.status_code == 400
