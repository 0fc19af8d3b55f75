"""Data models for the Youdu API.

This module contains the session state, user records and inbound callback
messages used by the client.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

MediaType = Literal["file", "image"]

MEDIA_TYPE_FILE: MediaType = "file"
MEDIA_TYPE_IMAGE: MediaType = "image"


@dataclass(frozen=True)
class Session:
    """Access token obtained from a token exchange.

    Sessions are never mutated: each successful exchange builds a new one and
    the client swaps its reference.

    Attributes:
        token: The access token string.
        expire_in: Token lifetime in seconds as reported by the server.
        obtained_at: Unix timestamp when the token was received.
    """

    token: str
    expire_in: int
    obtained_at: float = field(default_factory=time.time)

    @property
    def expires_at(self) -> float:
        return self.obtained_at + self.expire_in

    def is_expired(self, buffer_seconds: int = 0) -> bool:
        """Check if the token has expired or is about to.

        The client never acts on this; it is for callers deciding when to
        call ``get_token()`` again.
        """
        return time.time() >= (self.expires_at - buffer_seconds)


class Department(BaseModel):
    """Department membership of a user."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    dept_id: int = Field(default=0, alias="deptId")
    position: str = ""
    weight: int = 0
    sort_id: int = Field(default=0, alias="sortId")


class UserInfo(BaseModel):
    """User record returned by the user lookup API."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    user_id: str = Field(default="", alias="userId")
    name: str = ""
    gender: int = 0
    mobile: str = ""
    phone: str = ""
    email: str = ""
    dept: list[int] = Field(default_factory=list)
    dept_detail: list[Department] = Field(default_factory=list, alias="deptDetail")


class ReceivedMessage(BaseModel):
    """Message pushed to the callback URL.

    Only ``packageId`` is required; it is echoed back as the acknowledgement.
    Variant bodies (``text``, ``image``, ``file`` ...) are kept as plain dicts
    and any unknown fields are preserved.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    package_id: str = Field(..., alias="packageId")
    msg_type: str = Field(default="", alias="msgType")
    from_user: str = Field(default="", alias="fromUser")
    create_time: int = Field(default=0, alias="createTime")
    msg_id: str = Field(default="", alias="msgId")
    text: dict[str, Any] | None = None
    image: dict[str, Any] | None = None
    file: dict[str, Any] | None = None

    @property
    def content(self) -> str:
        """Text content for text messages, empty otherwise."""
        if self.text:
            return str(self.text.get("content", ""))
        return ""
