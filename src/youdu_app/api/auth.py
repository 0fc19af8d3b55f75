"""Token exchange for the Youdu API.

The token is obtained by sealing the current unix timestamp and posting it
to the token endpoint. It is the only call made without ``accessToken``.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

from ..core.logger import get_logger
from ..errors import MissingFieldError, TypeMismatchError
from .models import Session

if TYPE_CHECKING:
    from ..crypto.envelope import EnvelopeCodec
    from .frame import ApiResponse

logger = get_logger("api.auth")


class YouduAuthMixin:
    """Mixin providing token management for the Youdu API.

    This mixin should be used with a class that has:
    - self.codec: EnvelopeCodec
    - self._post_sealed(api, cipher_text, with_token=...) -> ApiResponse
    - self._open_json_object(rsp) -> dict
    - self._set_session(session) -> None
    """

    GET_TOKEN_URL = "/cgi/gettoken"

    codec: EnvelopeCodec

    def _post_sealed(self, api: str, cipher_text: str, *, with_token: bool = True) -> ApiResponse:
        """POST a frame whose envelope is already sealed. To be implemented by main class."""
        raise NotImplementedError

    def _open_json_object(self, rsp: ApiResponse) -> dict[str, Any]:
        """Open a response envelope. To be implemented by main class."""
        raise NotImplementedError

    def _set_session(self, session: Session) -> None:
        """Store the session. To be implemented by main class."""
        raise NotImplementedError

    def get_token(self) -> tuple[str, int]:
        """Exchange an encrypted timestamp for an access token.

        The new token replaces the stored one and is appended to every
        following request.

        Returns:
            Tuple of (access_token, expire_in_seconds).

        Raises:
            ApiError: If the server rejects the exchange.
            ProtocolError: If the reply lacks ``accessToken`` or ``expireIn``.
        """
        timestamp = str(int(time.time()))
        logger.debug("Requesting access token")

        rsp = self._post_sealed(
            self.GET_TOKEN_URL,
            self.codec.seal(timestamp.encode("ascii")),
            with_token=False,
        )
        data = self._open_json_object(rsp)

        token = data.get("accessToken")
        if token is None:
            raise MissingFieldError("accessToken")
        if not isinstance(token, str):
            raise TypeMismatchError("accessToken", "string", token)

        expire = data.get("expireIn")
        if expire is None:
            raise MissingFieldError("expireIn")
        if isinstance(expire, bool) or not isinstance(expire, (int, float)):
            raise TypeMismatchError("expireIn", "integer", expire)

        session = Session(token=token, expire_in=int(expire))
        self._set_session(session)

        logger.info("Obtained access token (expires in %d seconds)", session.expire_in)
        return session.token, session.expire_in
