"""
Share codec for moving an event between devices.

A share link carries the whole snapshot in its URL fragment:

    https://host/app/#k=<token>

where <token> is base64( UTF-8( JSON {"eid": …, "state": …} ) ),
percent-encoded for embedding. Decoding never raises: any malformed,
truncated or structurally invalid token yields None.

The link can also be rendered as a QR code with `segno`, a pure-Python
QR encoder (no native libs required).
"""
from __future__ import annotations

import base64
import binascii
import io
import logging
import re
from typing import Optional
from urllib.parse import quote, unquote

import segno
from pydantic import ValidationError

from liftwin.schemas import EID, EventState, SharePayload

logger = logging.getLogger(__name__)

_KEY_RE   = re.compile(r"[#&]k=([^&]+)")
_EVENT_RE = re.compile(r"[#&]event=([^&]+)")


# ─────────────────────────── Codec ───────────────────────────────────────────

def encode_share_key(eid: Optional[EID], state: EventState) -> str:
    """Serialize (eid, snapshot) into a base64 token."""
    payload = SharePayload(eid=eid, state=state)
    raw = payload.model_dump_json(by_alias=True).encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


def decode_share_key(key: Optional[str]) -> Optional[SharePayload]:
    """
    Reverse of encode_share_key.
    Accepts standard and URL-safe base64 alphabets, with or without padding.
    """
    if not key:
        return None
    token = key.strip().replace("-", "+").replace("_", "/")
    token += "=" * (-len(token) % 4)
    try:
        raw = base64.b64decode(token, validate=True).decode("utf-8")
    except (binascii.Error, ValueError) as exc:
        # UnicodeDecodeError is a ValueError too
        logger.debug("Undecodable share key: %s", exc)
        return None
    try:
        # pydantic-core caps nesting depth, too-deep input is a ValidationError
        payload = SharePayload.model_validate_json(raw)
    except ValidationError as exc:
        logger.debug("Share key has invalid structure: %s", exc.error_count())
        return None
    return payload if payload.state is not None else None


# ─────────────────────────── Links ───────────────────────────────────────────

def build_share_link(base_url: str, eid: Optional[EID], state: EventState) -> str:
    """Full link with the token in a ``#k=`` fragment."""
    base = base_url.split("#", 1)[0]
    return f"{base}#k={quote(encode_share_key(eid, state), safe='')}"


def extract_key_from_url(text: Optional[str]) -> Optional[str]:
    """Pull the ``k`` token out of a URL / fragment, tolerating other parameters."""
    if not text:
        return None
    m = _KEY_RE.search(text)
    return unquote(m.group(1)) if m else None


def extract_event_id_from_url(text: Optional[str]) -> Optional[EID]:
    """Legacy ``#event=<id>`` fragments carry only an event id."""
    if not text:
        return None
    m = _EVENT_RE.search(text)
    return unquote(m.group(1)) if m else None


def decode_share_link(text: Optional[str]) -> Optional[SharePayload]:
    return decode_share_key(extract_key_from_url(text))


# ─────────────────────────── QR ──────────────────────────────────────────────

def share_qr_png(link: str, scale: int = 4, border: int = 2) -> bytes:
    """
    Render a share link as a PNG QR code.

    Share links carry the full roster, so the lowest error-correction level
    is used to keep the symbol as small as possible.

    Raises ``segno.DataOverflowError`` when the link is too long for a QR code.
    """
    qr  = segno.make_qr(link, error="L")
    buf = io.BytesIO()
    qr.save(buf, kind="png", scale=scale, border=border)
    return buf.getvalue()
