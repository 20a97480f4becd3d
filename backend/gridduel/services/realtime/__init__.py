"""Connection bookkeeping and per-session fan-out for the socket layer."""

from .broadcaster import Broadcaster
from .connections import Connection, ConnectionRegistry, SocketHandle
from .disconnect import DisconnectCoordinator

__all__ = ['Broadcaster', 'Connection', 'ConnectionRegistry', 'DisconnectCoordinator', 'SocketHandle']
