"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from main import app  # noqa: E402
from vos.api.deps import get_dispatcher  # noqa: E402
from vos.core.database import Base, get_db  # noqa: E402
from vos.core.errors import ExternalFailureError  # noqa: E402
from vos.models import User, UserRole  # noqa: E402
from vos.services.documents import RenderedDocument  # noqa: E402
from vos.services.side_effects import SideEffectDispatcher  # noqa: E402


class RecordingNotifier:
    """Collects messages instead of sending them; can be told to fail."""

    def __init__(self):
        self.sent = []
        self.fail_kinds = set()
        self.fail_all = False

    async def send(self, message):
        if self.fail_all or message.kind in self.fail_kinds:
            raise ExternalFailureError(f"SMTP relay refused {message.kind}")
        self.sent.append(message)

    @property
    def kinds(self):
        return [m.kind for m in self.sent]


class FakeRenderer:
    """Writes placeholder PDFs into a temp directory."""

    def __init__(self, output_dir: Path):
        self.output_dir = output_dir
        self.fail = False
        self.rendered = []

    async def _write(self, file_name: str) -> RenderedDocument:
        if self.fail:
            raise ExternalFailureError("PDF renderer unavailable")
        path = self.output_dir / file_name
        path.write_bytes(b"%PDF-1.4\n%test\n")
        self.rendered.append(file_name)
        return RenderedDocument(file_path=path, file_name=file_name)

    async def render_case_file(self, graph):
        return await self._write(f"case-{graph.case.id}.pdf")

    async def render_bill_of_sale(self, graph):
        return await self._write(f"bill-of-sale-{graph.case.id}.pdf")


@pytest_asyncio.fixture
async def engine(tmp_path):
    """Fresh SQLite database per test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def renderer(tmp_path):
    output_dir = tmp_path / "pdfs"
    output_dir.mkdir()
    return FakeRenderer(output_dir)


@pytest.fixture
def dispatcher(notifier, renderer):
    return SideEffectDispatcher(notifier=notifier, renderer=renderer)


@pytest_asyncio.fixture
async def staff(session_factory):
    """One user per role, keyed by role value."""
    users = {
        "admin": User(email="admin@vosmotors.com", first_name="Ada", last_name="Admin", role=UserRole.ADMIN),
        "agent": User(email="agent@vosmotors.com", first_name="Alex", last_name="Agent", role=UserRole.AGENT,
                      location="Downtown"),
        "estimator": User(email="estimator@vosmotors.com", first_name="Erin", last_name="Estimator",
                          role=UserRole.ESTIMATOR),
        "inspector": User(email="inspector@vosmotors.com", first_name="Ivan", last_name="Inspector",
                          role=UserRole.INSPECTOR),
    }
    async with session_factory() as session:
        session.add_all(users.values())
        await session.commit()
    return users


@pytest.fixture
def headers(staff):
    """Authorization headers per role."""
    return {role: {"Authorization": f"Bearer {user.session_token}"} for role, user in staff.items()}


@pytest_asyncio.fixture
async def client(session_factory, dispatcher):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def intake_payload():
    return {
        "customer": {
            "firstName": "Dana",
            "lastName": "Seller",
            "cellPhone": "555-0100",
            "email1": "dana.seller@example.com",
            "hearAboutVOS": "Radio",
            "source": "walk_in",
        },
        "vehicle": {
            "year": 2018,
            "make": "Honda",
            "model": "Civic",
            "currentMileage": 64000,
            "vin": "2HGFC2F59JH512345",
            "color": "Blue",
            "titleStatus": "clean",
            "loanStatus": "paid-off",
            "estimatedValue": 15500,
        },
        "agentInfo": {"storeLocation": "Downtown"},
    }


@pytest.fixture
def schedule_payload():
    return {
        "inspector": {
            "firstName": "Ivan",
            "lastName": "Inspector",
            "email": "inspector@vosmotors.com",
            "phone": "555-0199",
        },
        "scheduledDate": "2026-11-02T00:00:00",
        "scheduledTime": "10:30",
        "notesForInspector": "Customer prefers mornings",
    }


@pytest.fixture
def inspection_payload():
    return {
        "sections": [
            {
                "id": "exterior",
                "name": "Exterior",
                "score": 8,
                "maxScore": 10,
                "completed": True,
                "questions": [
                    {
                        "id": "paint",
                        "question": "Paint condition",
                        "type": "radio",
                        "answer": "good",
                        "subQuestions": [{"id": "scratches", "question": "Visible scratches?", "answer": "no"}],
                    }
                ],
            },
            {"id": "engine", "name": "Engine", "score": 9, "maxScore": 10, "completed": True},
        ],
        "overallRating": 4,
        "inspectionNotes": "Clean vehicle",
    }


@pytest.fixture
def case_flow(client, headers, intake_payload, schedule_payload, inspection_payload):
    """Drive a case through intake, scheduling, inspection and estimator assignment."""

    async def run(inspect: bool = True, assign: bool = True) -> dict:
        resp = await client.post("/cases", json=intake_payload, headers=headers["agent"])
        assert resp.status_code == 201, resp.text
        case = resp.json()["data"]
        state = {"case_id": case["id"]}

        resp = await client.post(f"/cases/{case['id']}/inspection", json=schedule_payload, headers=headers["agent"])
        assert resp.status_code == 200, resp.text
        state["inspection_token"] = resp.json()["data"]["inspection"]["accessToken"]

        if inspect:
            resp = await client.post(f"/inspections/{state['inspection_token']}/submit", json=inspection_payload)
            assert resp.status_code == 200, resp.text

        if assign:
            resp = await client.post(
                f"/cases/{case['id']}/estimator",
                json={"estimator": {"firstName": "Erin", "lastName": "Estimator", "email": "estimator@vosmotors.com"}},
                headers=headers["agent"],
            )
            assert resp.status_code == 200, resp.text
            state["quote_token"] = resp.json()["data"]["quote"]["accessToken"]
        return state

    return run
