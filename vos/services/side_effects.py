"""
Side-effect dispatch for workflow transitions.

A transition is committed before its side effects run. Each effect is awaited
once in isolation: a failure is logged with its traceback and recorded in the
returned DispatchReport, never raised to the caller. There are no retries.

Effects per transition:
- case created: customer confirmation, admin broadcast
- inspection scheduled: inspector assignment (with token link)
- estimator assigned: estimator assignment
- inspection submitted: customer, admin broadcast, assigned estimator
- quote ready: quote to customer (with token link)
- offer decided: estimator and admins
- case completed: case PDF, then thank-you with the PDF link (not when cancelled)
- signing requested: signing link to the recipient
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, List, Optional, Sequence, Tuple

from vos.core.config import settings
from vos.models.enums import CaseStatus
from vos.models.signing_session import SigningSession
from vos.services.documents import DocumentRenderer, ReportlabRenderer
from vos.services.graph import CaseGraph
from vos.services.notifications import NotificationMessage, Notifier, build_notifier

logger = logging.getLogger(__name__)

OK = "ok"
FAILED = "failed"
SKIPPED = "skipped"

Effect = Tuple[str, Optional[Callable[[], Awaitable[Any]]]]


@dataclass
class EffectOutcome:
    name: str
    status: str
    error: Optional[str] = None
    result: Any = None

    @property
    def ok(self) -> bool:
        return self.status == OK


@dataclass
class DispatchReport:
    transition: str
    outcomes: List[EffectOutcome] = field(default_factory=list)

    def outcome(self, name: str) -> Optional[EffectOutcome]:
        for outcome in self.outcomes:
            if outcome.name == name:
                return outcome
        return None

    def succeeded(self, name: str) -> bool:
        outcome = self.outcome(name)
        return bool(outcome and outcome.ok)

    @property
    def failures(self) -> List[EffectOutcome]:
        return [o for o in self.outcomes if o.status == FAILED]


def inspection_link(token: str) -> str:
    return f"{settings.FRONTEND_URL}/inspection/{token}"


def quote_link(token: str) -> str:
    return f"{settings.FRONTEND_URL}/quote/{token}"


def signing_link(token: str) -> str:
    return f"{settings.FRONTEND_URL}/sign/{token}"


def _recipients(*emails: Optional[str], extra: Iterable[str] = ()) -> List[str]:
    seen = []
    for email in list(emails) + list(extra):
        if email and email not in seen:
            seen.append(email)
    return seen


class SideEffectDispatcher:
    """Runs the side effects of committed transitions."""

    def __init__(self, notifier: Notifier = None, renderer: DocumentRenderer = None):
        self.notifier = notifier or build_notifier()
        self.renderer = renderer or ReportlabRenderer()

    async def _attempt(self, transition: str, name: str, effect) -> EffectOutcome:
        if effect is None:
            logger.info("Skipped %s for %s: nothing to send", name, transition)
            return EffectOutcome(name=name, status=SKIPPED)
        try:
            result = await effect()
        except Exception as e:
            logger.exception("Side effect %s failed for %s", name, transition)
            return EffectOutcome(name=name, status=FAILED, error=str(e))
        return EffectOutcome(name=name, status=OK, result=result)

    async def run(self, transition: str, effects: Sequence[Effect]) -> DispatchReport:
        """Await each effect once, in order, isolating failures."""
        report = DispatchReport(transition=transition)
        for name, effect in effects:
            report.outcomes.append(await self._attempt(transition, name, effect))
        if report.failures:
            logger.warning(
                "%s: %d of %d side effects failed",
                transition, len(report.failures), len(report.outcomes),
            )
        return report

    def _email(self, kind: str, recipients: List[str], subject: str, **context):
        if not recipients:
            return None
        message = NotificationMessage(kind=kind, recipients=recipients, subject=subject, context=context)
        return lambda: self.notifier.send(message)

    async def case_created(self, graph: CaseGraph, admins: List[str]) -> DispatchReport:
        case = graph.case
        return await self.run("case-created", [
            ("customer-confirmation", self._email(
                "customer-confirmation",
                _recipients(graph.customer_email),
                "We received your vehicle information",
                customerName=graph.customer_name,
                vehicle=graph.vehicle_description,
                caseId=case.id,
            )),
            ("admin-new-case", self._email(
                "admin-new-case",
                _recipients(extra=admins),
                f"New case: {graph.vehicle_description or case.id}",
                customerName=graph.customer_name,
                vehicle=graph.vehicle_description,
                caseId=case.id,
            )),
        ])

    async def inspection_scheduled(self, graph: CaseGraph) -> DispatchReport:
        inspection = graph.inspection
        return await self.run("inspection-scheduled", [
            ("inspector-assignment", self._email(
                "inspector-assignment",
                _recipients(inspection.inspector_email),
                f"Inspection assigned: {graph.vehicle_description}",
                inspectorName=inspection.inspector_name,
                vehicle=graph.vehicle_description,
                scheduledDate=inspection.scheduled_date,
                scheduledTime=inspection.scheduled_time,
                notes=inspection.notes_for_inspector,
                link=inspection_link(inspection.access_token),
            )),
        ])

    async def estimator_assigned(self, graph: CaseGraph) -> DispatchReport:
        quote = graph.quote
        return await self.run("estimator-assigned", [
            ("estimator-assignment", self._email(
                "estimator-assignment",
                _recipients(quote.estimator_email),
                f"Quote requested: {graph.vehicle_description}",
                vehicle=graph.vehicle_description,
                customerName=graph.customer_name,
                link=quote_link(quote.access_token),
            )),
        ])

    async def inspection_submitted(self, graph: CaseGraph, admins: List[str]) -> DispatchReport:
        inspection = graph.inspection
        context = dict(
            vehicle=graph.vehicle_description,
            inspectorName=inspection.inspector_name,
            overallRating=inspection.overall_rating,
            overallScore=inspection.overall_score,
            caseId=graph.case.id,
        )
        estimator_email = graph.quote.estimator_email if graph.quote else None
        return await self.run("inspection-submitted", [
            ("customer-inspection-complete", self._email(
                "customer-inspection-complete",
                _recipients(graph.customer_email),
                "Your vehicle inspection is complete",
                customerName=graph.customer_name,
                **context,
            )),
            ("admin-inspection-complete", self._email(
                "admin-inspection-complete",
                _recipients(extra=admins),
                f"Inspection completed: {graph.vehicle_description}",
                **context,
            )),
            ("estimator-inspection-complete", self._email(
                "estimator-inspection-complete",
                _recipients(estimator_email),
                f"Ready for quote: {graph.vehicle_description}",
                link=quote_link(graph.quote.access_token) if graph.quote else None,
                **context,
            )),
        ])

    async def quote_ready(self, graph: CaseGraph) -> DispatchReport:
        quote = graph.quote
        return await self.run("quote-ready", [
            ("customer-quote", self._email(
                "customer-quote",
                _recipients(graph.customer_email),
                f"Your offer for the {graph.vehicle_description}",
                customerName=graph.customer_name,
                offerAmount=quote.offer_amount,
                expiryDate=quote.expiry_date,
                link=quote_link(quote.access_token),
            )),
        ])

    async def offer_decided(self, graph: CaseGraph, admins: List[str]) -> DispatchReport:
        quote = graph.quote
        decision = quote.offer_decision or {}
        return await self.run("offer-decided", [
            ("decision-notification", self._email(
                "decision-notification",
                _recipients(quote.estimator_email, extra=admins),
                f"Offer {decision.get('decision')}: {graph.vehicle_description}",
                customerName=graph.customer_name,
                decision=decision.get("decision"),
                counterOffer=decision.get("counterOffer"),
                finalAmount=decision.get("finalAmount"),
                customerNotes=decision.get("customerNotes"),
                caseId=graph.case.id,
            )),
        ])

    async def case_completed(self, graph: CaseGraph) -> DispatchReport:
        """Render the case PDF, then thank the customer (skipped for cancelled cases)."""
        report = await self.run("case-completed", [
            ("case-pdf", lambda: self.renderer.render_case_file(graph)),
        ])
        if graph.case.status == CaseStatus.CANCELLED:
            return report

        rendered = report.outcome("case-pdf").result
        thank_you = await self.run("case-completed", [
            ("customer-thank-you", self._email(
                "customer-thank-you",
                _recipients(graph.customer_email),
                "Thank you for selling your vehicle with us",
                customerName=graph.customer_name,
                vehicle=graph.vehicle_description,
                pdfUrl=rendered.url if rendered else None,
            )),
        ])
        report.outcomes.extend(thank_you.outcomes)
        return report

    async def signing_requested(self, graph: CaseGraph, session: SigningSession) -> DispatchReport:
        recipient = session.recipient or {}
        document_type = getattr(session.document_type, "value", session.document_type)
        return await self.run("signing-requested", [
            ("signing-link", self._email(
                "signing-link",
                _recipients(recipient.get("email")),
                f"Please sign: {document_type.replace('-', ' ')}",
                recipientName=recipient.get("name"),
                vehicle=graph.vehicle_description,
                expiresAt=session.expires_at,
                link=signing_link(session.token),
            )),
        ])
