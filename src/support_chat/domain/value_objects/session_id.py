"""External session handle: ``session_<epoch-ms>_<9 base36 chars>``."""
from __future__ import annotations

import re
import secrets
import string
import time
from typing import NewType

SessionId = NewType("SessionId", str)

PREFIX = "session_"
_ALPHABET = string.digits + string.ascii_lowercase
_SUFFIX_LEN = 9
_PATTERN = re.compile(r"^session_\d+_[0-9a-z]+$")


def new_session_id() -> SessionId:
    millis = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(_SUFFIX_LEN))
    return SessionId(f"{PREFIX}{millis}_{suffix}")


def is_valid_session_id(value: object) -> bool:
    return isinstance(value, str) and _PATTERN.match(value) is not None
