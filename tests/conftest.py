"""Test configuration hooks."""

from __future__ import annotations

import base64
import json
import re
from collections.abc import Callable, Iterator
from typing import Any

import httpx
import pytest

from youdu_app.api import YouduClient, encode_json
from youdu_app.api.models import Session
from youdu_app.crypto import EnvelopeCodec

BUIN = 666666
APP_ID = "yd37D192E9F20E448192827A001A84D443"
AES_KEY = base64.b64encode(bytes(range(32))).decode("ascii")
SERVER_ADDR = "http://youdu.test:7080"


@pytest.fixture
def codec() -> EnvelopeCodec:
    """Codec sharing the key and app id of the ``client`` fixture."""
    return EnvelopeCodec.from_base64(AES_KEY, APP_ID)


@pytest.fixture
def client() -> Iterator[YouduClient]:
    """Client without a session."""
    youdu = YouduClient(buin=BUIN, app_id=APP_ID, aes_key=AES_KEY, server_addr=SERVER_ADDR)
    yield youdu
    youdu.close()


@pytest.fixture
def authed_client(client: YouduClient) -> YouduClient:
    """Client holding the access token ``tok``."""
    client._set_session(Session(token="tok", expire_in=7200))
    return client


@pytest.fixture
def sealed(codec: EnvelopeCodec) -> Callable[[Any], dict[str, Any]]:
    """Build a successful response frame whose envelope carries ``payload``."""

    def _sealed(payload: Any) -> dict[str, Any]:
        return {"errcode": 0, "errmsg": "ok", "encrypt": codec.seal(encode_json(payload))}

    return _sealed


@pytest.fixture
def open_request(codec: EnvelopeCodec) -> Callable[[httpx.Request], Any]:
    """Decode the business payload of a JSON request frame."""

    def _open(request: httpx.Request) -> Any:
        frame = json.loads(request.read())
        return codec.open_json(frame["encrypt"])

    return _open


def multipart_field(body: bytes, name: str) -> bytes:
    """Extract one part of a multipart/form-data body."""
    pattern = (
        rb'name="' + re.escape(name.encode()) + rb'"(?:; filename="[^"]*")?\r\n'
        rb"(?:Content-Type: [^\r\n]*\r\n)?\r\n(.*?)\r\n--"
    )
    match = re.search(pattern, body, re.DOTALL)
    assert match, f"multipart field {name!r} not found"
    return match.group(1)


@pytest.fixture
def multipart() -> Callable[[bytes, str], bytes]:
    return multipart_field
