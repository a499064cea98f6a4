import secrets
import string
import time

_BASE36 = string.digits + string.ascii_lowercase


def new_correlation_id() -> str:
    """evt-<epoch ms>-<5 random base36 chars>"""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(5))
    return f"evt-{int(time.time() * 1000)}-{suffix}"
