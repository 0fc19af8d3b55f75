"""Message API operations for Youdu.

This module provides message composition and sending:
- Send text, image, file, mpnews and exlink messages
- Upload pending cover images before composing mpnews/exlink batches
- Upload-and-send helpers for local images and files
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ..core.logger import get_logger
from .messages import (
    ExLink,
    ExLinkMessage,
    FileMessage,
    ImageMessage,
    Message,
    MpNews,
    MpNewsMessage,
    TextMessage,
)

if TYPE_CHECKING:
    from .frame import ApiResponse

logger = get_logger("api.message")

Receivers = str | Iterable[str]


def join_receivers(receivers: Receivers | None) -> str:
    """Join receiver ids with ``|`` as the API expects (``cs1|cs2|cs3``)."""
    if not receivers:
        return ""
    if isinstance(receivers, str):
        return receivers
    return "|".join(receivers)


class YouduMessageMixin:
    """Mixin providing message functionality for the Youdu API.

    This mixin should be used with a class that has:
    - self._post_frame(api, inner) -> ApiResponse
    - self.upload_image(path, name) -> str
    - self.upload_file(path, name) -> str
    """

    SEND_MSG_URL = "/cgi/msg/send"

    def _post_frame(
        self, api: str, inner: Mapping[str, Any], *, with_token: bool = True
    ) -> ApiResponse:
        """POST a sealed frame. To be implemented by main class."""
        raise NotImplementedError

    def _resolve_media(self, media_id: str, path: str, default_name: str) -> str:
        if media_id:
            return media_id
        if not path:
            raise ValueError("Entry has neither media_id nor path")
        logger.debug("Uploading pending image %s", path)
        name = Path(path).name or default_name
        return self.upload_image(path, name)  # type: ignore[attr-defined]

    def _resolve_pending_media(self, message: Message) -> Message:
        """Upload images of entries without media id, in order.

        The first failing upload aborts the whole batch. The given message is
        left untouched; a copy with filled media ids is returned.
        """
        if isinstance(message, MpNewsMessage):
            articles = [
                dataclasses.replace(
                    article,
                    media_id=self._resolve_media(article.media_id, article.path, "MpNews.jpg"),
                )
                for article in message.articles
            ]
            return MpNewsMessage(articles=articles)
        if isinstance(message, ExLinkMessage):
            links = [
                dataclasses.replace(
                    link,
                    media_id=self._resolve_media(link.media_id, link.path, "ExLink.jpg"),
                )
                for link in message.links
            ]
            return ExLinkMessage(links=links)
        return message

    def compose(
        self,
        message: Message,
        to_user: Receivers | None = None,
        to_dept: Receivers | None = None,
    ) -> dict[str, Any]:
        """Build the send payload for ``message``.

        Args:
            message: Message to send.
            to_user: Receiver user id(s). Several ids may be joined by ``|``.
            to_dept: Receiver department id(s).

        Returns:
            Payload ``{"toUser", "toDept", "msgType", <msgType>: body}``.

        Raises:
            ValueError: If no receiver is given, or an entry has no media id
                and no path to upload.
        """
        users = join_receivers(to_user)
        depts = join_receivers(to_dept)
        if not users and not depts:
            raise ValueError("At least one of to_user or to_dept is required")

        resolved = self._resolve_pending_media(message)
        return {
            "toUser": users,
            "toDept": depts,
            "msgType": resolved.msg_type,
            resolved.msg_type: resolved.to_body(),
        }

    def send(
        self,
        message: Message,
        to_user: Receivers | None = None,
        to_dept: Receivers | None = None,
    ) -> None:
        """Compose and send a message.

        Raises:
            ApiError: If the server reports a failure.
        """
        payload = self.compose(message, to_user, to_dept)
        rsp = self._post_frame(self.SEND_MSG_URL, payload)
        if not rsp.status_ok():
            logger.error("Send %s message failed: %s", message.msg_type, rsp.status())
            rsp.raise_for_error()
        logger.info(
            "Sent %s message to user=%r dept=%r",
            message.msg_type,
            payload["toUser"],
            payload["toDept"],
        )

    def send_text(
        self, content: str, to_user: Receivers | None = None, to_dept: Receivers | None = None
    ) -> None:
        """Send a text message (emoji included)."""
        self.send(TextMessage(content=content), to_user, to_dept)

    def send_image(
        self, media_id: str, to_user: Receivers | None = None, to_dept: Receivers | None = None
    ) -> None:
        """Send an already uploaded image."""
        self.send(ImageMessage(media_id=media_id), to_user, to_dept)

    def send_file(
        self, media_id: str, to_user: Receivers | None = None, to_dept: Receivers | None = None
    ) -> None:
        """Send an already uploaded file."""
        self.send(FileMessage(media_id=media_id), to_user, to_dept)

    def send_mpnews(
        self,
        articles: Iterable[MpNews],
        to_user: Receivers | None = None,
        to_dept: Receivers | None = None,
    ) -> None:
        """Send rich articles, uploading cover images given by path."""
        self.send(MpNewsMessage(articles=list(articles)), to_user, to_dept)

    def send_exlink(
        self,
        links: Iterable[ExLink],
        to_user: Receivers | None = None,
        to_dept: Receivers | None = None,
    ) -> None:
        """Send external links, uploading cover images given by path."""
        self.send(ExLinkMessage(links=list(links)), to_user, to_dept)

    def send_image_path(
        self,
        path: str | Path,
        to_user: Receivers | None = None,
        to_dept: Receivers | None = None,
    ) -> str:
        """Upload a local image and send it.

        Returns:
            Media id of the uploaded image.
        """
        media_id = self.upload_image(path)  # type: ignore[attr-defined]
        self.send_image(media_id, to_user, to_dept)
        return media_id

    def send_file_path(
        self,
        path: str | Path,
        to_user: Receivers | None = None,
        to_dept: Receivers | None = None,
        name: str | None = None,
    ) -> str:
        """Upload a local file and send it.

        Returns:
            Media id of the uploaded file.
        """
        media_id = self.upload_file(path, name)  # type: ignore[attr-defined]
        self.send_file(media_id, to_user, to_dept)
        return media_id
