"""Youdu application API module.

Components:
- client.py: YouduClient core client and HTTP transport
- frame.py: request/response frames
- auth.py: token exchange
- message.py: message composition and sending
- messages.py: message types
- media.py: file and image transfer
- user.py: user lookup
- models.py: data models
"""

from .auth import YouduAuthMixin
from .client import YouduClient, create_youdu_client
from .frame import ApiResponse, build_frame, build_request, encode_json
from .media import YouduMediaMixin, save_file
from .message import YouduMessageMixin, join_receivers
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
from .models import Department, ReceivedMessage, Session, UserInfo
from .user import YouduUserMixin

__all__ = [
    # Main client
    "YouduClient",
    "create_youdu_client",
    # Frames
    "ApiResponse",
    "build_frame",
    "build_request",
    "encode_json",
    # Messages
    "Message",
    "TextMessage",
    "ImageMessage",
    "FileMessage",
    "MpNews",
    "MpNewsMessage",
    "ExLink",
    "ExLinkMessage",
    "join_receivers",
    # Models
    "Session",
    "UserInfo",
    "Department",
    "ReceivedMessage",
    "save_file",
    # Mixins (for advanced usage)
    "YouduAuthMixin",
    "YouduMessageMixin",
    "YouduMediaMixin",
    "YouduUserMixin",
]
