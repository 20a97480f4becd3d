from typing import Dict, List, Optional


class SocketHandle:
    """Live transport handle for one Socket.IO client on one namespace."""

    def __init__(self, socketio, sid: str, namespace: str = '/ws'):
        self.socketio = socketio
        self.sid = sid
        self.namespace = namespace
        self.closed = False

    @property
    def key(self) -> str:
        return self.sid

    def is_open(self) -> bool:
        if self.closed:
            return False
        server = getattr(self.socketio, 'server', None)
        if server is None:
            return False
        return bool(server.manager.is_connected(self.sid, self.namespace))

    def send(self, event: str, payload: dict) -> None:
        self.socketio.emit(event, payload, to=self.sid, namespace=self.namespace)

    def close(self) -> None:
        self.closed = True


class Connection:
    def __init__(self, client_id: str, user_id: int, handle):
        self.client_id = client_id
        self.user_id = user_id
        self.handle = handle
        self.session_id: Optional[str] = None

    def __repr__(self):
        return f"<Connection {self.client_id} user={self.user_id} game={self.session_id}>"


class ConnectionRegistry:
    """Maps client ids to their transport handle and session membership."""

    def __init__(self):
        self._by_client: Dict[str, Connection] = {}
        self._by_key: Dict[str, str] = {}

    def __len__(self):
        return len(self._by_client)

    def add(self, client_id: str, user_id: int, handle) -> Connection:
        conn = Connection(client_id, user_id, handle)
        self._by_client[client_id] = conn
        self._by_key[handle.key] = client_id
        return conn

    def get(self, client_id) -> Optional[Connection]:
        return self._by_client.get(client_id)

    def by_key(self, key) -> Optional[Connection]:
        client_id = self._by_key.get(key)
        return self._by_client.get(client_id) if client_id else None

    def remove(self, client_id) -> Optional[Connection]:
        conn = self._by_client.pop(client_id, None)
        if conn is not None and self._by_key.get(conn.handle.key) == client_id:
            del self._by_key[conn.handle.key]
        return conn

    def for_user(self, user_id) -> List[Connection]:
        return [c for c in self._by_client.values() if c.user_id == user_id]

    def is_stale(self, client_id) -> bool:
        conn = self._by_client.get(client_id)
        return conn is None or not conn.handle.is_open()
