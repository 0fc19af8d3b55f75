"""FastAPI-based receiver for Youdu message callbacks."""

from __future__ import annotations

import asyncio
import json
import threading
from typing import Any

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from ..api.models import ReceivedMessage
from ..core.config import CallbackConfig
from ..core.logger import get_logger
from ..crypto.envelope import EnvelopeCodec
from ..errors import YouduError
from .dispatcher import CallbackDispatcher, MessageHandler, Receiver

logger = get_logger("callback.server")


class CallbackServer:
    """Serve the Youdu callback URL and hand decoded messages to a handler.

    Each POST carries ``{"encrypt": <envelope>}``. The envelope is opened with
    the application key, checked against the application id, and the decoded
    message is queued for the handler. The response body is the message's
    ``packageId``, written before the handler runs. Requests that cannot be
    decoded are logged and answered with an empty body; the sender never sees
    decode or handler errors.

    Example:
        ```python
        server = CallbackServer(client.codec, handler=print)
        server.start()
        ```
    """

    def __init__(
        self,
        codec: EnvelopeCodec,
        handler: MessageHandler | Receiver | None = None,
        config: CallbackConfig | None = None,
    ) -> None:
        """Initialize the callback server.

        Args:
            codec: Envelope codec of the receiving application.
            handler: Called for each decoded message (optional).
            config: Bind address, callback path and worker pool settings.
        """
        self._codec = codec
        self._config = config or CallbackConfig()
        self._dispatcher: CallbackDispatcher | None = None
        self._app = FastAPI()
        self._server: uvicorn.Server | None = None
        self._thread: threading.Thread | None = None

        if handler is not None:
            self.set_handler(handler)

        self._create_routes()

    @property
    def app(self) -> FastAPI:
        return self._app

    @property
    def path(self) -> str:
        return self._config.path

    @property
    def dispatcher(self) -> CallbackDispatcher | None:
        return self._dispatcher

    def set_handler(self, handler: MessageHandler | Receiver) -> None:
        """Register the message handler, replacing any previous one."""
        previous = self._dispatcher
        self._dispatcher = CallbackDispatcher(
            handler,
            workers=self._config.workers,
            queue_size=self._config.queue_size,
        )
        if previous is not None:
            previous.stop()

    # ------------------------------------------------------------------
    # FastAPI setup
    # ------------------------------------------------------------------
    def _create_routes(self) -> None:
        @self._app.get("/healthz")
        async def health() -> dict[str, str]:  # pragma: no cover - trivial
            return {"status": "ok"}

        @self._app.post(self._config.path)
        async def receive_message(request: Request) -> Response:
            body = await request.body()
            message = self.decode(body)
            if message is None:
                return Response(status_code=200)

            self.dispatch(message)
            return PlainTextResponse(message.package_id)

    # ------------------------------------------------------------------
    # Decoding and dispatch
    # ------------------------------------------------------------------
    def decode(self, body: bytes) -> ReceivedMessage | None:
        """Decode a callback body, or return None after logging why not."""
        try:
            outer: Any = json.loads(body)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.warning("Receive package error: %s", exc)
            return None

        cipher = outer.get("encrypt") if isinstance(outer, dict) else None
        if not isinstance(cipher, str):
            logger.warning("Receive package error: missing encrypt field")
            return None

        try:
            inner = self._codec.open_json(cipher)
        except YouduError as exc:
            logger.warning("Decrypt error: %s", exc)
            return None

        try:
            message = ReceivedMessage.model_validate(inner)
        except ValidationError as exc:
            logger.warning("Json unmarshal error: %s", exc)
            return None

        logger.info(
            "Received %s message, package %s", message.msg_type or "unknown", message.package_id
        )
        return message

    def dispatch(self, message: ReceivedMessage) -> bool:
        """Queue ``message`` for the handler. Returns False if not queued."""
        if self._dispatcher is None:
            logger.debug("No handler registered, package %s not dispatched", message.package_id)
            return False
        return self._dispatcher.submit(message)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        if self._thread:
            return

        if self._dispatcher is not None:
            self._dispatcher.start()

        config = uvicorn.Config(
            self._app,
            host=self._config.host,
            port=self._config.port,
            log_level="info",
        )
        self._server = uvicorn.Server(config)

        def _run() -> None:
            loop = asyncio.new_event_loop()
            asyncio.set_event_loop(loop)
            try:
                server = self._server
                if server is None:
                    logger.error("Callback server thread started without a uvicorn server instance")
                    return
                loop.run_until_complete(server.serve())
            finally:
                loop.close()

        self._thread = threading.Thread(
            target=_run,
            name="youdu-callback-server",
            daemon=True,
        )
        self._thread.start()
        logger.info(
            "Youdu callback server listening on http://%s:%s%s",
            self._config.host,
            self._config.port,
            self._config.path,
        )

    def serve_forever(self) -> None:
        """Run the server in the calling thread until interrupted."""
        if self._dispatcher is not None:
            self._dispatcher.start()
        logger.info(
            "Youdu callback server listening on http://%s:%s%s",
            self._config.host,
            self._config.port,
            self._config.path,
        )
        try:
            uvicorn.run(self._app, host=self._config.host, port=self._config.port, log_level="info")
        finally:
            if self._dispatcher is not None:
                self._dispatcher.stop()

    def stop(self) -> None:
        if self._server:
            self._server.should_exit = True
        if self._thread:
            self._thread.join(timeout=5)
            self._thread = None
        if self._dispatcher is not None:
            self._dispatcher.stop()
        logger.info("Youdu callback server stopped")

    @property
    def is_running(self) -> bool:
        return bool(self._thread and self._thread.is_alive())
