"""Unit tests for webhook signature verification and correlation ids"""

import re

from src.app.use_cases.webhooks.correlation import new_correlation_id
from src.app.use_cases.webhooks.signature import (
    ENFORCE,
    PERMISSIVE,
    compute_signature,
    verify_signature,
)

BODY = b'{"event":"message.sent","id":"evt_1"}'
SECRET = "topsecret"


class TestVerifySignature:

    def test_matching_signature(self):
        assert verify_signature(BODY, compute_signature(BODY, SECRET), SECRET) is True

    def test_uppercase_hex_is_accepted(self):
        assert verify_signature(BODY, compute_signature(BODY, SECRET).upper(), SECRET) is True

    def test_tampered_body_fails(self):
        signature = compute_signature(BODY, SECRET)

        assert verify_signature(BODY + b" ", signature, SECRET) is False

    def test_wrong_secret_fails(self):
        assert verify_signature(BODY, compute_signature(BODY, "other"), SECRET) is False

    def test_no_secret_disables_verification(self):
        assert verify_signature(BODY, "garbage", None) is True
        assert verify_signature(BODY, None, "") is True

    def test_missing_signature_depends_on_mode(self):
        assert verify_signature(BODY, None, SECRET, PERMISSIVE) is True
        assert verify_signature(BODY, None, SECRET, ENFORCE) is False


class TestCorrelationId:

    def test_format(self):
        assert re.fullmatch(r"evt-\d{13}-[0-9a-z]{5}", new_correlation_id())

    def test_unique(self):
        assert len({new_correlation_id() for _ in range(50)}) == 50
