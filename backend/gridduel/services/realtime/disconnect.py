from typing import Iterable, Optional

from gridduel.services.games.session import Phase, Session, SessionStore

from .broadcaster import Broadcaster
from .connections import Connection, ConnectionRegistry


class DisconnectCoordinator:
    """Tears down or aborts the session owned by a connection that went away."""

    def __init__(self, store: SessionStore, registry: ConnectionRegistry, broadcaster: Broadcaster, logger=None):
        self.store = store
        self.registry = registry
        self.broadcaster = broadcaster
        self.logger = logger

    def on_disconnect(self, client_id: str) -> None:
        conn = self.registry.remove(client_id)
        if conn is None:
            return
        self._log(f"[disconnect] client={client_id} user={conn.user_id} game={conn.session_id}")
        self.detach(conn)

    def reap(self, dead_ids: Iterable[str]) -> None:
        """Run the close path for connections found dead while publishing."""
        for client_id in dead_ids:
            self.on_disconnect(client_id)

    def _owning_session(self, conn: Connection) -> Optional[Session]:
        if conn.session_id is not None:
            session = self.store.get(conn.session_id)
            if session is not None:
                return session
        session = self.store.find_by_player(conn.user_id)
        if session is None:
            return None
        # Another live connection of the same user still holds that seat
        for other in self.broadcaster.subscribers(session.id):
            other_conn = self.registry.get(other)
            if other_conn is not None and other_conn.user_id == conn.user_id and other != conn.client_id:
                return None
        return session

    def detach(self, conn: Connection) -> None:
        """Remove ``conn`` from its session, aborting or deleting the session."""
        session = self._owning_session(conn)
        if session is None:
            return
        game_id = session.id
        self.broadcaster.unsubscribe(game_id, conn.client_id)
        conn.session_id = None

        mark = session.mark_of(conn.user_id)
        if mark is not None:
            opponent = session.opponent_of(mark)
            if session.phase == Phase.WAITING:
                if mark == session.first_mark:
                    self._delete(session, 'creator left before start')
                    return
                session.vacate(mark)
            elif session.phase in (Phase.PLAYING, Phase.FINISHED) and opponent is not None:
                session.phase = Phase.ABORTED
                session.clear_result()
                session.vacate(mark)
                self._log(f"[session-abort] game={game_id} left={conn.user_id} opponent={opponent}")
                dead = self.broadcaster.publish(game_id, 'opponent_disconnected', {
                    'gameId': game_id,
                    'disconnectedPlayerId': conn.user_id,
                    'message': 'Your opponent has disconnected',
                })
                self.reap(dead)
            elif session.is_terminal and opponent is None:
                self._delete(session, 'both players gone')
                return

        if game_id in self.store and session.is_terminal and not self.broadcaster.has_group(game_id):
            self._delete(session, 'no subscribers left')

    def _delete(self, session: Session, reason: str) -> None:
        for client_id in self.broadcaster.subscribers(session.id):
            self.broadcaster.unsubscribe(session.id, client_id)
        self.store.remove(session.id)
        self._log(f"[session-remove] game={session.id} reason={reason}")

    def _log(self, msg: str) -> None:
        if self.logger is not None:
            self.logger.info(msg)
