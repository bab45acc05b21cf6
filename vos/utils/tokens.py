"""Opaque token generation for tokenized links."""

import secrets

ACCESS_TOKEN_BYTES = 20    # 40 hex chars: inspection and quote links
SIGNING_TOKEN_BYTES = 32   # 64 hex chars: signing sessions
SESSION_TOKEN_BYTES = 32


def generate_access_token() -> str:
    """Token for an Inspection or Quote link."""
    return secrets.token_hex(ACCESS_TOKEN_BYTES)


def generate_signing_token() -> str:
    """Token for a document signing session."""
    return secrets.token_hex(SIGNING_TOKEN_BYTES)


def generate_session_token() -> str:
    """Token identifying a staff user's API session."""
    return secrets.token_urlsafe(SESSION_TOKEN_BYTES)
