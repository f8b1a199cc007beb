from .app import create_app
from .channel import CloseReason, ConnectionState, SseChannel
from .dispatcher import SessionDispatcher
from .handler import ProtocolHandler
from .registry import SessionRegistry
from .session import ServerSession

__all__ = [
    "CloseReason",
    "ConnectionState",
    "ProtocolHandler",
    "ServerSession",
    "SessionDispatcher",
    "SessionRegistry",
    "SseChannel",
    "create_app",
]
