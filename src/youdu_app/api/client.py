"""Youdu application API client.

This module provides the main YouduClient class that combines all API
functionality through mixins and owns the single HTTP transport seam.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import Any

import httpx

from ..core.config import AppCredential, YouduConfig
from ..core.logger import get_logger
from ..crypto.envelope import EnvelopeCodec
from ..errors import HttpStatusError, ProtocolError, TransportError
from .auth import YouduAuthMixin
from .frame import ApiResponse, build_frame, build_request
from .media import YouduMediaMixin
from .message import YouduMessageMixin
from .models import Session
from .user import YouduUserMixin

logger = get_logger("api")

JSON_CONTENT_TYPE = "application/json"


class YouduClient(
    YouduAuthMixin,
    YouduMediaMixin,
    YouduMessageMixin,
    YouduUserMixin,
):
    """Youdu application API client.

    Provides access to the Youdu third-party application API:
    - Token exchange
    - Sending text, image, file, mpnews and exlink messages
    - Media upload, download and lookup
    - User lookup

    Every request and response body is sealed with the application's AES key.
    Tokens are never refreshed automatically; call ``get_token()`` again when
    the server rejects the current one.

    Example:
        ```python
        with YouduClient(buin=666666, app_id="yd37...", aes_key="AY2O...",
                         server_addr="http://localhost:7080") as client:
            client.get_token()
            client.send_text("hello", to_user="sa08")
        ```
    """

    def __init__(
        self,
        buin: int,
        app_id: str,
        aes_key: str,
        server_addr: str,
        timeout: float | None = None,
        http_client: httpx.Client | None = None,
    ):
        """Initialize the client.

        Args:
            buin: Enterprise number.
            app_id: Application ID.
            aes_key: Base64 encoded 32-byte AES key.
            server_addr: Server address including scheme, e.g. ``http://host:7080``.
            timeout: HTTP timeout in seconds. None disables timeouts.
            http_client: Preconfigured httpx client (ownership is transferred).

        Raises:
            ConfigError: If the AES key is not valid base64 or not 32 bytes.
        """
        self.credential = AppCredential(buin=buin, app_id=app_id, aes_key=aes_key)
        self.codec = EnvelopeCodec(self.credential.key, app_id)
        self.server_addr = server_addr.rstrip("/")
        self.timeout = timeout

        self._client = http_client or httpx.Client(timeout=timeout)
        self._session: Session | None = None
        self._session_lock = threading.Lock()

    @classmethod
    def from_config(cls, config: YouduConfig) -> YouduClient:
        """Create a client from a loaded configuration."""
        return cls(
            buin=config.buin,
            app_id=config.app_id,
            aes_key=config.aes_key,
            server_addr=config.server_addr,
            timeout=config.timeout,
        )

    @property
    def buin(self) -> int:
        return self.credential.buin

    @property
    def app_id(self) -> str:
        return self.credential.app_id

    def __enter__(self) -> YouduClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.close()

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()
        logger.debug("YouduClient closed")

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    def _url(self, api: str) -> str:
        return f"{self.server_addr}{api}"

    def _request(
        self,
        method: str,
        api: str,
        *,
        with_token: bool = True,
        params: Mapping[str, str] | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send one HTTP request and check its status.

        Raises:
            TransportError: If the request could not be completed.
            HttpStatusError: If the server answers with a non-2xx status.
        """
        query: dict[str, str] = {}
        if with_token:
            query["accessToken"] = self.access_token
        if params:
            query.update(params)

        url = self._url(api)
        try:
            response = self._client.request(method, url, params=query or None, **kwargs)
        except httpx.TransportError as exc:
            logger.error("Request to %s failed: %s", api, exc)
            raise TransportError(f"{method} {api} failed: {exc}", url=url) from exc

        if not response.is_success:
            logger.error("Request to %s returned HTTP %s", api, response.status_code)
            raise HttpStatusError(response.status_code, url=url, reason=response.reason_phrase)
        return response

    def _post_body(self, api: str, body: bytes, *, with_token: bool = True) -> httpx.Response:
        return self._request(
            "POST",
            api,
            with_token=with_token,
            content=body,
            headers={"Content-Type": JSON_CONTENT_TYPE},
        )

    def _post_frame(
        self, api: str, inner: Mapping[str, Any], *, with_token: bool = True
    ) -> ApiResponse:
        """Seal ``inner`` into a request frame, POST it and parse the reply."""
        body = build_request(self.codec, self.buin, inner)
        return ApiResponse.parse(self._post_body(api, body, with_token=with_token).content)

    def _post_sealed(self, api: str, cipher_text: str, *, with_token: bool = True) -> ApiResponse:
        """POST a frame around an already sealed envelope and parse the reply."""
        body = build_frame(self.buin, self.app_id, cipher_text)
        return ApiResponse.parse(self._post_body(api, body, with_token=with_token).content)

    def _post_frame_raw(self, api: str, inner: Mapping[str, Any]) -> bytes:
        """POST a sealed frame and return the undecoded response body."""
        body = build_request(self.codec, self.buin, inner)
        return self._post_body(api, body).content

    def _open_response(self, rsp: ApiResponse) -> Any:
        """Open the ``encrypt`` field of a successful frame as JSON."""
        rsp.raise_for_error()
        return self.codec.open_json(rsp.get_string("encrypt"))

    def _open_json_object(self, rsp: ApiResponse) -> dict[str, Any]:
        data = self._open_response(rsp)
        if not isinstance(data, dict):
            raise ProtocolError("Envelope payload is not a JSON object")
        return data

    def _set_session(self, session: Session) -> None:
        with self._session_lock:
            self._session = session

    @property
    def session(self) -> Session | None:
        """Current session, or None before the first token exchange."""
        with self._session_lock:
            return self._session

    @property
    def access_token(self) -> str:
        session = self.session
        return session.token if session else ""


def create_youdu_client(config: YouduConfig) -> YouduClient:
    """Factory function to create a client from configuration.

    Args:
        config: Loaded configuration.

    Returns:
        Configured YouduClient instance.
    """
    return YouduClient.from_config(config)
