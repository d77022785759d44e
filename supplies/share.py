"""Export/import of a whole profile set through a `?data=` URL parameter."""

from typing import Optional
from urllib.parse import parse_qs, unquote, urlencode, urlsplit

from . import settings
from .schemas import AppState
from .utils import base64_decode_json, base64_encode_json

DATA_PARAM = "data"


def build_export_url(state: AppState, base_url: Optional[str] = None) -> str:
    base_url = base_url or settings.EXPORT_BASE_URL
    payload = state.model_dump(mode="json", by_alias=True, exclude_none=True)
    query = urlencode({DATA_PARAM: base64_encode_json(payload)})
    return f"{base_url}?{query}"


def extract_payload(source: str) -> str:
    """
    Pulls the base64 value out of whatever the user pasted:
    a full exported URL, anything containing 'data=', or the bare value.
    """
    source = source.strip()
    parts = urlsplit(source)
    if parts.scheme and parts.netloc:
        values = parse_qs(parts.query).get(DATA_PARAM)
        if values:
            return values[0]

    marker = f"{DATA_PARAM}="
    idx = source.find(marker)
    if idx >= 0:
        return unquote(source[idx + len(marker):].split("&")[0])
    return source


def decode_state(source: str) -> AppState:
    """Raises ValueError (binascii, JSON or pydantic validation errors) on a bad payload."""
    payload = base64_decode_json(extract_payload(source))
    if not isinstance(payload, dict):
        raise ValueError("Shared payload is not an object")
    payload.setdefault("profiles", [])
    return AppState.model_validate(payload)
