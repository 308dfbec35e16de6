import secrets
import string
import time

_ALPHABET = string.ascii_lowercase + string.digits


def _suffix(length: int = 7) -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


def generate_alert_id() -> str:
    return f"danger_{int(time.time() * 1000)}_{_suffix()}"


def generate_proposal_id() -> str:
    return f"deletion_{int(time.time() * 1000)}_{_suffix()}"
