"""HMAC-SHA256 webhook signature verification

The signature is the lowercase hex HMAC-SHA256 of the raw request body,
keyed with the shared webhook secret.
"""

import hashlib
import hmac
from typing import Optional

SIGNATURE_HEADERS = ("X-Webhook-Signature", "X-Signature")

PERMISSIVE = "permissive"   # verify only when a signature header is present
ENFORCE = "enforce"         # a missing signature is rejected


def compute_signature(raw_body: bytes, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).hexdigest()


def verify_signature(
    raw_body: bytes,
    signature: Optional[str],
    secret: Optional[str],
    mode: str = PERMISSIVE,
) -> bool:
    """
    Check a delivery's signature against the configured secret

    Without a configured secret verification is disabled and every delivery
    passes. Comparison is constant-time.
    """
    if not secret:
        return True
    if not signature:
        return (mode or PERMISSIVE).strip().lower() != ENFORCE
    expected = compute_signature(raw_body, secret)
    return hmac.compare_digest(expected, signature.strip().lower())
