import base64
import json
import random
import string
import time
from datetime import datetime
from typing import Any
from urllib.parse import quote, unquote

# Characters encodeURIComponent leaves alone on top of quote()'s always-safe set.
_URI_COMPONENT_SAFE = "!~*'()"
_ID_ALPHABET = string.ascii_lowercase + string.digits


def now_ms() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


def get_date_suffix_for_filename() -> str:
    """Returns the current date as a YYYY-MM-DD string for filenames."""
    return datetime.now().strftime("%Y-%m-%d")


def format_datetime(ms: int) -> str:
    """Formats an epoch-milliseconds timestamp as 'dd/mm/YYYY HH:MM' in local time."""
    return datetime.fromtimestamp(ms / 1000).strftime("%d/%m/%Y %H:%M")


def generate_id(prefix: str = "id") -> str:
    suffix = "".join(random.choices(_ID_ALPHABET, k=6))
    return f"{prefix}_{now_ms()}_{suffix}"


def base64_encode_json(obj: Any) -> str:
    """
    JSON -> percent-encoding -> base64.
    The percent-encoding step keeps the payload ASCII so non-latin names survive,
    and the output matches btoa(encodeURIComponent(JSON.stringify(obj))) in a browser.
    """
    raw = json.dumps(obj, ensure_ascii=False, separators=(",", ":"))
    encoded = quote(raw, safe=_URI_COMPONENT_SAFE)
    return base64.b64encode(encoded.encode("ascii")).decode("ascii")


def base64_decode_json(b64: str) -> Any:
    # Query-string parsing turns '+' into spaces.
    cleaned = b64.strip().replace(" ", "+")
    decoded = base64.b64decode(cleaned, validate=True).decode("ascii")
    return json.loads(unquote(decoded))
