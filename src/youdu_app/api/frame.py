"""Request and response frames for the Youdu API.

A request frame is the JSON object ``{"buin", "appId", "encrypt"}`` where
``encrypt`` is the envelope of the JSON-encoded business payload. A response
frame always carries ``errcode`` and ``errmsg`` and, for calls that return
data, an ``encrypt`` envelope.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from ..crypto.envelope import EnvelopeCodec
from ..errors import ApiError, MissingFieldError, ProtocolError, TypeMismatchError

STATUS_OK = 0


def encode_json(obj: Any) -> bytes:
    """Encode ``obj`` as compact UTF-8 JSON, keeping mapping order."""
    return json.dumps(obj, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def build_frame(buin: int, app_id: str, cipher_text: str) -> bytes:
    """Wrap an already sealed envelope in a request frame."""
    return encode_json({"buin": buin, "appId": app_id, "encrypt": cipher_text})


def build_request(codec: EnvelopeCodec, buin: int, inner: Mapping[str, Any]) -> bytes:
    """Seal ``inner`` and wrap it in a request frame.

    Args:
        codec: Envelope codec of the calling application.
        buin: Enterprise number.
        inner: Business payload; key order is kept on the wire.

    Returns:
        JSON body ready to POST.
    """
    return build_frame(buin, codec.app_id, codec.seal(encode_json(dict(inner))))


class ApiResponse:
    """Parsed response frame.

    Example:
        ```python
        rsp = ApiResponse.parse(b'{"errcode":0,"errmsg":"ok","encrypt":"..."}')
        if rsp.status_ok():
            cipher = rsp.get_string("encrypt")
        ```
    """

    def __init__(self, fields: dict[str, Any], body: bytes = b"") -> None:
        self.fields = fields
        self.body = body
        self.errcode = self.get_int("errcode")
        self.errmsg = self.get_string("errmsg")

    @classmethod
    def parse(cls, body: bytes | str) -> ApiResponse:
        """Decode a response body.

        Raises:
            ProtocolError: If the body is not a JSON object, or ``errcode`` or
                ``errmsg`` is missing or of the wrong type.
        """
        raw = body.encode("utf-8") if isinstance(body, str) else body
        try:
            fields = json.loads(raw)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ProtocolError(f"Response unmarshal error: {exc}") from exc
        if not isinstance(fields, dict):
            raise ProtocolError("Response is not a JSON object")
        return cls(fields, raw)

    def get_string(self, key: str) -> str:
        if key not in self.fields:
            raise MissingFieldError(key)
        value = self.fields[key]
        if not isinstance(value, str):
            raise TypeMismatchError(key, "string", value)
        return value

    def get_int(self, key: str) -> int:
        if key not in self.fields:
            raise MissingFieldError(key)
        value = self.fields[key]
        # JSON numbers like 0.0 are accepted when integral; booleans are not numbers here
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeMismatchError(key, "integer", value)
        if isinstance(value, float):
            if not value.is_integer():
                raise TypeMismatchError(key, "integer", value)
            value = int(value)
        return value

    def status_ok(self) -> bool:
        return self.errcode == STATUS_OK

    def status(self) -> str:
        return f"errcode: {self.errcode}, errmsg: {self.errmsg}"

    def error(self) -> ApiError | None:
        """Return the API error carried by this frame, or None on success."""
        if self.status_ok():
            return None
        return ApiError(self.errcode, self.errmsg)

    def raise_for_error(self) -> ApiResponse:
        err = self.error()
        if err is not None:
            raise err
        return self

    def __repr__(self) -> str:
        return f"ApiResponse({self.status()})"
