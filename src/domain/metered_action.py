"""Metered action attempt states

An attempt is not persisted: its trace is one debit entry plus, when the
external call fails, one credit entry carrying the same token.

    INIT -> DEBITED -> EXTERNAL_OK
                    -> EXTERNAL_FAILED -> ROLLED_BACK
                                       -> ROLLBACK_FAILED
    INIT -> REJECTED
"""

from enum import Enum


class MeteredActionState(str, Enum):
    INIT = "init"
    DEBITED = "debited"
    EXTERNAL_OK = "external_ok"
    EXTERNAL_FAILED = "external_failed"
    ROLLED_BACK = "rolled_back"
    REJECTED = "rejected"
    ROLLBACK_FAILED = "rollback_failed"
