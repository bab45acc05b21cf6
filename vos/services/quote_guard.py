"""Quote decision guard.

A quote whose customer decision (or status) is accepted/declined is frozen:
its offer terms, and the sale price derived from them, can no longer change.
"""

from vos.core.errors import ConflictError
from vos.models.enums import OfferDecision, QuoteStatus
from vos.models.quote import Quote

DECIDED_DECISIONS = (OfferDecision.ACCEPTED.value, OfferDecision.DECLINED.value)
DECIDED_STATUSES = (QuoteStatus.ACCEPTED.value, QuoteStatus.DECLINED.value)


def _value(v):
    return getattr(v, "value", v)


def decided_outcome(quote: Quote):
    """Return 'accepted'/'declined' when the quote is decided, else None."""
    if quote is None:
        return None
    decision = _value((quote.offer_decision or {}).get("decision"))
    if decision in DECIDED_DECISIONS:
        return decision
    status = _value(quote.status)
    if status in DECIDED_STATUSES:
        return status
    return None


def is_quote_decided(quote: Quote) -> bool:
    return decided_outcome(quote) is not None


def ensure_quote_mutable(quote: Quote) -> None:
    """Raise ConflictError if the quote's offer terms are frozen.

    Args:
        quote: Quote about to be modified (None passes)

    Raises:
        ConflictError: naming the recorded decision
    """
    outcome = decided_outcome(quote)
    if outcome:
        raise ConflictError(
            f"Quote has already been {outcome}. Cannot modify a quote that has been decided."
        )
