"""File and media API operations for Youdu.

This module provides file and media operations:
- Upload images and files (from bytes or local paths)
- Download images and files (to memory or to a local path)
- Look up file name and size by media id
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ..core.logger import get_logger
from ..errors import FileIOError, MissingFieldError, TypeMismatchError
from .frame import ApiResponse, encode_json
from .models import MEDIA_TYPE_FILE, MEDIA_TYPE_IMAGE, MediaType

if TYPE_CHECKING:
    import httpx

    from ..crypto.envelope import EnvelopeCodec

logger = get_logger("api.media")


def _read_file(path: str | Path) -> bytes:
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        raise FileIOError(f"Cannot read {path}: {exc}", path=str(path)) from exc


def save_file(data: bytes, path: str | Path) -> Path:
    """Write ``data`` to ``path``, creating missing parent directories.

    Raises:
        FileIOError: If a directory cannot be created or the file written.
    """
    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
    except OSError as exc:
        raise FileIOError(f"Cannot write {target}: {exc}", path=str(target)) from exc
    return target


class YouduMediaMixin:
    """Mixin providing file/media functionality for the Youdu API.

    This mixin should be used with a class that has:
    - self.buin: int
    - self.app_id: str
    - self.codec: EnvelopeCodec
    - self._request(method, api, ...) -> httpx.Response
    - self._post_frame(api, inner) -> ApiResponse
    - self._post_frame_raw(api, inner) -> bytes
    - self._open_json_object(rsp) -> dict
    """

    UPLOAD_FILE_URL = "/cgi/media/upload"
    DOWNLOAD_FILE_URL = "/cgi/media/get"
    SEARCH_FILE_URL = "/cgi/media/search"

    buin: int
    app_id: str
    codec: EnvelopeCodec

    def _request(self, method: str, api: str, **kwargs: Any) -> httpx.Response:
        """Send an HTTP request. To be implemented by main class."""
        raise NotImplementedError

    def _post_frame(
        self, api: str, inner: Mapping[str, Any], *, with_token: bool = True
    ) -> ApiResponse:
        """POST a sealed frame. To be implemented by main class."""
        raise NotImplementedError

    def _post_frame_raw(self, api: str, inner: Mapping[str, Any]) -> bytes:
        """POST a sealed frame, returning the raw body. To be implemented by main class."""
        raise NotImplementedError

    def _open_json_object(self, rsp: ApiResponse) -> dict[str, Any]:
        """Open a response envelope. To be implemented by main class."""
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------
    def upload(self, media_type: MediaType, name: str, data: bytes) -> str:
        """Upload a file or image.

        The multipart body carries ``buin`` and ``appId`` in clear, an
        ``encrypt`` field sealing ``{"type", "name"}``, and a ``file`` part
        whose content is the envelope ciphertext of ``data``.

        Args:
            media_type: ``"file"`` or ``"image"``.
            name: File name shown to receivers.
            data: File content.

        Returns:
            Media id assigned by the server.

        Raises:
            ApiError: If the upload is rejected.
        """
        if media_type not in (MEDIA_TYPE_FILE, MEDIA_TYPE_IMAGE):
            raise ValueError(f"Unsupported media type: {media_type}")

        meta = self.codec.seal(encode_json({"type": media_type, "name": name}))
        cipher = self.codec.seal(data)

        response = self._request(
            "POST",
            self.UPLOAD_FILE_URL,
            data={"buin": str(self.buin), "appId": self.app_id, "encrypt": meta},
            files={"file": (name, cipher.encode("ascii"), "application/octet-stream")},
        )
        rsp = ApiResponse.parse(response.content)
        if not rsp.status_ok():
            logger.error("Upload of %s failed: %s", name, rsp.status())
        result = self._open_json_object(rsp)

        media_id = result.get("mediaId")
        if media_id is None:
            raise MissingFieldError("mediaId")
        if not isinstance(media_id, str):
            raise TypeMismatchError("mediaId", "string", media_id)

        logger.info("Uploaded %s %s (%d bytes): %s", media_type, name, len(data), media_id)
        return media_id

    def upload_file_bytes(self, name: str, data: bytes) -> str:
        """Upload file content held in memory."""
        return self.upload(MEDIA_TYPE_FILE, name, data)

    def upload_image_bytes(self, name: str, data: bytes) -> str:
        """Upload image content held in memory (jpg, png, gif)."""
        return self.upload(MEDIA_TYPE_IMAGE, name, data)

    def upload_file(self, path: str | Path, name: str | None = None) -> str:
        """Upload a local file. ``name`` defaults to the file name of ``path``."""
        return self.upload(MEDIA_TYPE_FILE, name or Path(path).name, _read_file(path))

    def upload_image(self, path: str | Path, name: str | None = None) -> str:
        """Upload a local image. ``name`` defaults to the file name of ``path``."""
        return self.upload(MEDIA_TYPE_IMAGE, name or Path(path).name, _read_file(path))

    # ------------------------------------------------------------------
    # Download
    # ------------------------------------------------------------------
    def download(self, media_id: str) -> bytes:
        """Download a file or image.

        The server answers with the bare envelope ciphertext rather than a
        JSON frame; a JSON body means the request was refused.

        Raises:
            ApiError: If the server answers with an error frame.
            EnvelopeError: If the ciphertext cannot be opened.
        """
        body = self._post_frame_raw(self.DOWNLOAD_FILE_URL, {"mediaId": media_id})
        if body.lstrip().startswith(b"{"):
            ApiResponse.parse(body).raise_for_error()

        data = self.codec.open(body.strip()).payload
        logger.info("Downloaded %s (%d bytes)", media_id, len(data))
        return data

    def download_to(self, media_id: str, path: str | Path) -> Path:
        """Download and save to ``path``, creating missing directories."""
        return save_file(self.download(media_id), path)

    def download_file(self, media_id: str) -> bytes:
        return self.download(media_id)

    def download_image(self, media_id: str) -> bytes:
        return self.download(media_id)

    def download_file_save(self, media_id: str, path: str | Path) -> Path:
        return self.download_to(media_id, path)

    def download_image_save(self, media_id: str, path: str | Path) -> Path:
        return self.download_to(media_id, path)

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------
    def search_file(self, media_id: str) -> tuple[str, int]:
        """Look up a media file.

        Returns:
            Tuple of (name, size_in_bytes).
        """
        rsp = self._post_frame(self.SEARCH_FILE_URL, {"mediaId": media_id})
        info = self._open_json_object(rsp)

        name = info.get("name")
        size = info.get("size")
        if name is None:
            raise MissingFieldError("name")
        if size is None:
            raise MissingFieldError("size")
        if not isinstance(name, str):
            raise TypeMismatchError("name", "string", name)
        if isinstance(size, bool) or not isinstance(size, (int, float)):
            raise TypeMismatchError("size", "integer", size)
        return name, int(size)
