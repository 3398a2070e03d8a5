"""
Unit tests — Share codec (share_service.py).

Covers token round-trips (including non-ASCII content), link building and
fragment extraction, tolerance to garbage input and QR rendering.
"""
from __future__ import annotations

import base64
from urllib.parse import quote

import pytest

from liftwin.schemas import Athlete, EventState
from liftwin.services.share_service import (
    build_share_link,
    decode_share_key,
    decode_share_link,
    encode_share_key,
    extract_event_id_from_url,
    extract_key_from_url,
    share_qr_png,
)


# ─────────────────────────── Codec ───────────────────────────────────────────

class TestCodec:
    def test_round_trip(self, sample_state: EventState) -> None:
        payload = decode_share_key(encode_share_key("e1", sample_state))
        assert payload is not None
        assert payload.eid == "e1"
        assert payload.state == sample_state

    def test_round_trip_unicode(self) -> None:
        state = EventState(
            title="Кубок «Железо» 🏋️",
            athletes=[Athlete(id="x1", name="Zoë Ōtsuka", sex="F", bodyweight=58.5)],
        )
        payload = decode_share_key(encode_share_key("e1", state))
        assert payload is not None
        assert payload.state == state

    def test_round_trip_without_eid(self, sample_state: EventState) -> None:
        payload = decode_share_key(encode_share_key(None, sample_state))
        assert payload is not None
        assert payload.eid is None
        assert payload.state == sample_state

    def test_token_is_plain_base64(self, sample_state: EventState) -> None:
        token = encode_share_key("e1", sample_state)
        assert base64.b64decode(token, validate=True).startswith(b"{")

    def test_urlsafe_alphabet_accepted(self, sample_state: EventState) -> None:
        token = encode_share_key("e1", sample_state)
        urlsafe = token.replace("+", "-").replace("/", "_").rstrip("=")
        payload = decode_share_key(urlsafe)
        assert payload is not None and payload.state == sample_state

    def test_reads_original_app_payload(self) -> None:
        raw = (
            '{"eid":"abc","state":{"title":"Monthly Meet","pointsPreset":"Simple",'
            '"pointsCustom":[10,7,5,3,2,1],"athletes":[{"id":"k3j","name":"Alex",'
            '"sex":"M","age":30,"bodyweight":85,"squat":null,"bench":null,'
            '"deadlift":null,"runTime":""}]}}'
        )
        token = base64.b64encode(raw.encode("utf-8")).decode("ascii")
        payload = decode_share_key(token)
        assert payload is not None
        assert payload.eid == "abc"
        assert payload.state.points_preset == "Simple"
        assert payload.state.athletes[0].bodyweight == 85.0

    @pytest.mark.parametrize("garbage", [
        "",
        None,
        "!!!not base64!!!",
        "e30",                                        # "{}", no state
        base64.b64encode(b"[1, 2, 3]").decode(),      # not an object
        base64.b64encode(b"\xff\xfe\xfd").decode(),   # not UTF-8
        base64.b64encode(b'{"state": {"athletes": [{"name": "no id"}]}}').decode(),
        base64.b64encode(b'{"state": null}').decode(),
    ])
    def test_garbage_yields_none(self, garbage) -> None:
        assert decode_share_key(garbage) is None

    def test_deeply_nested_payload_yields_none(self) -> None:
        raw = b'{"state":' + b"[" * 200000 + b"]" * 200000 + b"}"
        assert decode_share_key(base64.b64encode(raw).decode()) is None
        assert decode_share_key(base64.urlsafe_b64encode(raw).decode().rstrip("=")) is None

    def test_truncated_token_yields_none(self, sample_state: EventState) -> None:
        token = encode_share_key("e1", sample_state)
        assert decode_share_key(token[: len(token) // 2]) is None


# ─────────────────────────── Links ───────────────────────────────────────────

class TestLinks:
    def test_link_round_trip(self, sample_state: EventState) -> None:
        link = build_share_link("https://meet.example/app/", "e1", sample_state)
        assert link.startswith("https://meet.example/app/#k=")
        payload = decode_share_link(link)
        assert payload is not None and payload.state == sample_state

    def test_existing_fragment_replaced(self, sample_state: EventState) -> None:
        link = build_share_link("https://meet.example/#old", "e1", sample_state)
        assert link.count("#") == 1

    def test_token_is_percent_encoded(self, sample_state: EventState) -> None:
        link = build_share_link("https://meet.example/", "e1", sample_state)
        fragment = link.split("#k=", 1)[1]
        assert "+" not in fragment and "/" not in fragment and "=" not in fragment

    def test_extract_tolerates_other_parameters(self) -> None:
        token = "abc+/=="
        assert extract_key_from_url(f"https://x/#foo=1&k={quote(token, safe='')}&bar=2") == token
        assert extract_key_from_url(f"#k={quote(token, safe='')}") == token

    @pytest.mark.parametrize("text", [None, "", "https://x/", "https://x/#key=abc", "https://x/?k=abc"])
    def test_extract_without_key(self, text) -> None:
        assert extract_key_from_url(text) is None

    def test_extract_legacy_event_id(self) -> None:
        assert extract_event_id_from_url("https://x/#event=e-42&theme=dark") == "e-42"
        assert extract_event_id_from_url("https://x/#k=abc") is None

    def test_bad_link_yields_none(self) -> None:
        assert decode_share_link("https://x/#k=%%%") is None


# ─────────────────────────── QR ──────────────────────────────────────────────

def test_share_qr_png() -> None:
    link = build_share_link("https://meet.example/", "e1", EventState(title="Tiny"))
    png = share_qr_png(link)
    assert png.startswith(b"\x89PNG")
