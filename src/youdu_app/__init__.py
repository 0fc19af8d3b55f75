"""Youdu application SDK.

A client for the Youdu enterprise messaging third-party application API:
- Encrypted token exchange
- Text, image, file, mpnews and exlink messages
- Media upload, download and lookup
- User lookup
- Inbound message callbacks

Example:
    ```python
    from youdu_app import YouduClient, CallbackServer

    client = YouduClient(
        buin=666666,
        app_id="yd37D192E9F20E448192827A001A84D443",
        aes_key="AY2O92Lpyr4M2IOXT05NQG3eaXd72FlS/QZ1l4vGKsQ=",
        server_addr="http://localhost:7080",
    )
    client.get_token()
    client.send_text("hello", to_user="sa08")

    server = CallbackServer(client.codec, handler=lambda msg: print(msg.content))
    server.start()
    ```
"""

from importlib.metadata import PackageNotFoundError, version

from .api import (
    ApiResponse,
    ExLink,
    ExLinkMessage,
    FileMessage,
    ImageMessage,
    MpNews,
    MpNewsMessage,
    ReceivedMessage,
    Session,
    TextMessage,
    UserInfo,
    YouduClient,
)
from .callback import CallbackDispatcher, CallbackServer
from .core import AppCredential, YouduConfig, get_logger, setup_logging
from .crypto import Envelope, EnvelopeCodec
from .errors import (
    ApiError,
    ConfigError,
    EnvelopeError,
    FileIOError,
    HttpStatusError,
    MissingFieldError,
    ProtocolError,
    TransportError,
    TypeMismatchError,
    YouduError,
)

__all__ = [
    "__version__",
    "YouduClient",
    "YouduConfig",
    "AppCredential",
    "ApiResponse",
    "Session",
    "UserInfo",
    "ReceivedMessage",
    "TextMessage",
    "ImageMessage",
    "FileMessage",
    "MpNews",
    "MpNewsMessage",
    "ExLink",
    "ExLinkMessage",
    "CallbackServer",
    "CallbackDispatcher",
    "Envelope",
    "EnvelopeCodec",
    "YouduError",
    "ConfigError",
    "TransportError",
    "HttpStatusError",
    "EnvelopeError",
    "ProtocolError",
    "MissingFieldError",
    "TypeMismatchError",
    "ApiError",
    "FileIOError",
    "get_logger",
    "setup_logging",
]

try:  # pragma: no cover - best-effort during development
    __version__ = version("youdu-app")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"
