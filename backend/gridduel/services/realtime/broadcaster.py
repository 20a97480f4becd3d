from typing import Dict, List, Set

from .connections import ConnectionRegistry


class Broadcaster:
    """Per-session publish/subscribe over the connection registry.

    Groups hold client ids only; handles are resolved through the registry at
    publish time. Connections found closed while publishing are dropped from
    the group and reported back to the caller, who owns the rest of the
    cleanup.
    """

    def __init__(self, registry: ConnectionRegistry, logger=None):
        self.registry = registry
        self.logger = logger
        self._groups: Dict[str, Set[str]] = {}

    def subscribe(self, game_id: str, client_id: str) -> None:
        self._groups.setdefault(game_id, set()).add(client_id)
        conn = self.registry.get(client_id)
        if conn is not None:
            conn.session_id = game_id

    def unsubscribe(self, game_id: str, client_id: str) -> None:
        members = self._groups.get(game_id)
        if members is not None:
            members.discard(client_id)
            if not members:
                del self._groups[game_id]
        conn = self.registry.get(client_id)
        if conn is not None and conn.session_id == game_id:
            conn.session_id = None

    def subscribers(self, game_id: str) -> Set[str]:
        return set(self._groups.get(game_id, ()))

    def has_group(self, game_id: str) -> bool:
        return game_id in self._groups

    def send_to(self, client_id: str, event: str, payload: dict) -> bool:
        """Deliver one event to one connection; False if it is gone."""
        conn = self.registry.get(client_id)
        if conn is None or not conn.handle.is_open():
            return False
        try:
            conn.handle.send(event, dict(payload, type=event))
        except Exception as exc:
            self._log(f"[send-failed] client={client_id} event={event} error={exc}")
            conn.handle.close()
            return False
        return True

    def publish(self, game_id: str, event: str, payload: dict) -> List[str]:
        """Send ``event`` to every live subscriber of ``game_id``.

        Returns the client ids found dead during delivery; they are already
        unsubscribed from the group.
        """
        dead = []
        for client_id in sorted(self.subscribers(game_id)):
            if not self.send_to(client_id, event, payload):
                dead.append(client_id)
        for client_id in dead:
            self.unsubscribe(game_id, client_id)
        if dead:
            self._log(f"[publish-prune] game={game_id} dropped={dead}")
        return dead

    def _log(self, msg: str) -> None:
        if self.logger is not None:
            self.logger.info(msg)
