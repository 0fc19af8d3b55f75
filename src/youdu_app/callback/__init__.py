"""Inbound callback receiver."""

from .dispatcher import CallbackDispatcher, MessageHandler, Receiver, as_handler
from .server import CallbackServer

__all__ = [
    "CallbackDispatcher",
    "CallbackServer",
    "MessageHandler",
    "Receiver",
    "as_handler",
]
