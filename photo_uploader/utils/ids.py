"""Client-side id generation."""
import secrets
import string
import time

_ALPHABET = string.digits + string.ascii_lowercase


def generate_task_id() -> str:
    """Time + random composite id, e.g. '1718037600123-k3j9x0abq'."""
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(9))
    return f"{int(time.time() * 1000)}-{suffix}"
