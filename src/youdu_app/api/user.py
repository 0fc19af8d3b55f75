"""User info API operations for Youdu."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from ..core.logger import get_logger
from ..errors import ProtocolError
from .frame import ApiResponse
from .models import UserInfo

if TYPE_CHECKING:
    import httpx

logger = get_logger("api.user")

_FRAME_FIELDS = {"errcode", "errmsg"}


class YouduUserMixin:
    """Mixin providing user lookup for the Youdu API.

    This mixin should be used with a class that has:
    - self._request(method, api, params=...) -> httpx.Response
    - self._open_json_object(rsp) -> dict
    """

    GET_USER_URL = "/cgi/user/get"

    def _request(
        self, method: str, api: str, *, params: Mapping[str, str] | None = None, **kwargs: Any
    ) -> httpx.Response:
        """Send an HTTP request. To be implemented by main class."""
        raise NotImplementedError

    def _open_json_object(self, rsp: ApiResponse) -> dict[str, Any]:
        """Open a response envelope. To be implemented by main class."""
        raise NotImplementedError

    def get_user(self, user_id: str) -> UserInfo:
        """Get user information.

        Args:
            user_id: Youdu account of the user.

        Returns:
            The user record.

        Raises:
            ApiError: If the lookup fails.

        Example:
            ```python
            user = client.get_user("sa08")
            print(user.name, user.email)
            ```
        """
        response = self._request("GET", self.GET_USER_URL, params={"userId": user_id})
        rsp = ApiResponse.parse(response.content).raise_for_error()

        if "encrypt" in rsp.fields:
            record = self._open_json_object(rsp)
        else:
            record = {k: v for k, v in rsp.fields.items() if k not in _FRAME_FIELDS}

        try:
            user = UserInfo.model_validate(record)
        except ValidationError as exc:
            raise ProtocolError(f"Invalid user record: {exc}") from exc

        logger.debug("Fetched user %s", user.user_id or user_id)
        return user

    def get_user_info(self, user_id: str) -> UserInfo:
        return self.get_user(user_id)
