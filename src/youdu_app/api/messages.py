"""Outbound message types for the Youdu API.

Each message kind is a concrete record with its own ``msg_type`` tag and
``to_body()`` encoder producing the variant body placed under that tag in
the send payload::

    {"toUser": ..., "toDept": ..., "msgType": "text", "text": {"content": "hi"}}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Union

MSG_TYPE_TEXT = "text"
MSG_TYPE_IMAGE = "image"
MSG_TYPE_FILE = "file"
MSG_TYPE_MPNEWS = "mpnews"
MSG_TYPE_EXLINK = "exlink"


@dataclass(frozen=True)
class MpNews:
    """One article of an mpnews message.

    Attributes:
        title: Article title.
        media_id: Cover image media id. When empty, ``path`` is uploaded first.
        digest: Article summary.
        content: Article body.
        url: Optional link.
        show_front: 1 to show the cover image in the body.
        path: Local image path, used only while ``media_id`` is empty.
    """

    title: str
    media_id: str = ""
    digest: str = ""
    content: str = ""
    url: str = ""
    show_front: int = 0
    path: str = ""

    def to_body(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "media_id": self.media_id,
            "digest": self.digest,
            "content": self.content,
            "url": self.url,
            "showFront": self.show_front,
        }


@dataclass(frozen=True)
class ExLink:
    """One entry of an external link message.

    Attributes:
        title: Link title.
        url: Target URL.
        digest: Summary.
        media_id: Cover image media id. When empty, ``path`` is uploaded first.
        path: Local image path, used only while ``media_id`` is empty.
    """

    title: str
    url: str
    digest: str = ""
    media_id: str = ""
    path: str = ""

    def to_body(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "url": self.url,
            "digest": self.digest,
            "media_id": self.media_id,
        }


@dataclass(frozen=True)
class TextMessage:
    msg_type: ClassVar[str] = MSG_TYPE_TEXT

    content: str

    def to_body(self) -> dict[str, Any]:
        return {"content": self.content}


@dataclass(frozen=True)
class ImageMessage:
    msg_type: ClassVar[str] = MSG_TYPE_IMAGE

    media_id: str

    def to_body(self) -> dict[str, Any]:
        return {"media_id": self.media_id}


@dataclass(frozen=True)
class FileMessage:
    msg_type: ClassVar[str] = MSG_TYPE_FILE

    media_id: str

    def to_body(self) -> dict[str, Any]:
        return {"media_id": self.media_id}


@dataclass(frozen=True)
class MpNewsMessage:
    msg_type: ClassVar[str] = MSG_TYPE_MPNEWS

    articles: list[MpNews] = field(default_factory=list)

    def to_body(self) -> list[dict[str, Any]]:
        return [article.to_body() for article in self.articles]


@dataclass(frozen=True)
class ExLinkMessage:
    msg_type: ClassVar[str] = MSG_TYPE_EXLINK

    links: list[ExLink] = field(default_factory=list)

    def to_body(self) -> list[dict[str, Any]]:
        return [link.to_body() for link in self.links]


Message = Union[TextMessage, ImageMessage, FileMessage, MpNewsMessage, ExLinkMessage]
