"""Tests for the user lookup."""

from __future__ import annotations

import pytest
from pytest_httpx import HTTPXMock

from youdu_app.errors import ApiError, ProtocolError

USER = {
    "userId": "sa08",
    "name": "张三",
    "gender": 1,
    "mobile": "13800000000",
    "phone": "",
    "email": "sa08@example.com",
    "dept": [1, 12],
    "deptDetail": [{"deptId": 12, "position": "Engineer", "weight": 0, "sortId": 3}],
}


def test_get_user_encrypted(authed_client, sealed, httpx_mock: HTTPXMock) -> None:
    httpx_mock.add_response(json=sealed(USER))

    user = authed_client.get_user("sa08")

    assert user.user_id == "sa08"
    assert user.name == "张三"
    assert user.dept == [1, 12]
    assert user.dept_detail[0].dept_id == 12
    assert user.dept_detail[0].sort_id == 3

    request = httpx_mock.get_requests()[0]
    assert request.method == "GET"
    assert request.url.path == "/cgi/user/get"
    assert request.url.params["userId"] == "sa08"
    assert request.url.params["accessToken"] == "tok"


def test_get_user_plain_record(authed_client, httpx_mock: HTTPXMock) -> None:
    """Servers answering with the record beside errcode are understood too."""
    httpx_mock.add_response(json={"errcode": 0, "errmsg": "ok", **USER, "extra": "kept"})

    user = authed_client.get_user_info("sa08")

    assert user.email == "sa08@example.com"
    assert user.model_extra == {"extra": "kept"}


def test_get_user_not_found(authed_client, httpx_mock: HTTPXMock) -> None:
    httpx_mock.add_response(json={"errcode": 40003, "errmsg": "user not exist"})

    with pytest.raises(ApiError) as exc_info:
        authed_client.get_user("ghost")

    assert exc_info.value.code == 40003


def test_get_user_invalid_record(authed_client, sealed, httpx_mock: HTTPXMock) -> None:
    httpx_mock.add_response(json=sealed({"userId": "sa08", "gender": "unknown"}))

    with pytest.raises(ProtocolError):
        authed_client.get_user("sa08")
