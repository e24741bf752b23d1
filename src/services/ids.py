import random
import string
import time
from datetime import datetime, timezone

_ALPHABET = string.digits + string.ascii_lowercase


def new_id(prefix: str) -> str:
    """`<prefix>_<epoch millis>_<9 base36 chars>`; collisions are not checked."""
    suffix = "".join(random.choice(_ALPHABET) for _ in range(9))
    return f"{prefix}_{int(time.time() * 1000)}_{suffix}"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
