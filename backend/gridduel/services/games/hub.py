import threading
from typing import List, Optional

from .board import Variant, apply_move, detect_outcome
from .errors import AlreadySeated, SelfJoin, SessionError, SessionFull, SessionNotFound, WrongPhase
from .session import Phase, Session, SessionStore


class GameHub:
    """Drives every session's lifecycle from inbound connection events.

    All public operations run under one re-entrant lock, so a session is
    never observed half way through a transition. Rating updates are issued
    after the lock is released and after players have been notified.
    """

    def __init__(self, store: SessionStore, registry, broadcaster, coordinator,
                 ratings=None, rating_delta: int = 25, chat_max_length: int = 250,
                 spawn=None, logger=None):
        self.store = store
        self.registry = registry
        self.broadcaster = broadcaster
        self.coordinator = coordinator
        self.ratings = ratings
        self.rating_delta = rating_delta
        self.chat_max_length = chat_max_length
        self.spawn = spawn
        self.logger = logger
        self._lock = threading.RLock()

    # ---- connection lifecycle ----

    def connect(self, client_id: str, user_id: int, handle):
        with self._lock:
            conn = self.registry.add(client_id, user_id, handle)
            self._log(f"[connect] client={client_id} user={user_id}")
            return conn

    def disconnect(self, client_id: str) -> None:
        with self._lock:
            self.coordinator.on_disconnect(client_id)

    def connection_for(self, key):
        with self._lock:
            return self.registry.by_key(key)

    # ---- session operations ----

    def create_session(self, client_id: str, variant: Variant) -> Session:
        with self._lock:
            conn = self._require_connection(client_id)
            self._ensure_free(conn)
            session = self.store.create(variant, conn.user_id)
            self.broadcaster.subscribe(session.id, client_id)
            self._log(f"[session-create] game={session.id} variant={variant.value} user={conn.user_id}")
            self._publish(session.id, 'game_created', {'gameId': session.id, 'game': session.to_dict()})
            return session

    def join_session(self, client_id: str, game_id: str) -> Session:
        with self._lock:
            conn = self._require_connection(client_id)
            session = self.store.get(game_id)
            if session is None:
                raise SessionNotFound()
            second = session.second_mark
            if session.players[second] is not None:
                raise SessionFull()
            if session.players[session.first_mark] == conn.user_id:
                raise SelfJoin()
            if session.phase != Phase.WAITING:
                raise WrongPhase()
            self._ensure_free(conn)

            session.players[second] = conn.user_id
            session.phase = Phase.PLAYING
            session.turn = session.starter
            session.rematch_votes.clear()
            self.broadcaster.subscribe(session.id, client_id)
            self._log(f"[session-join] game={session.id} user={conn.user_id}")
            self._publish(session.id, 'game_started', {'game': session.to_dict()})
            return session

    def make_move(self, client_id: str, game_id: str, move) -> bool:
        """Apply a move; returns False (and changes nothing) if it is not allowed.

        ``move`` is either the raw target or the inbound message dict, in which
        case the variant's own field (``position`` or ``column``) is read.
        """
        with self._lock:
            settlement = None
            conn = self.registry.get(client_id)
            session = self.store.get(game_id)
            if conn is None or session is None:
                return False
            mark = session.mark_of(conn.user_id)
            if mark is None or session.phase != Phase.PLAYING or session.turn != mark:
                return False
            target = move.get(session.variant.move_field) if isinstance(move, dict) else move
            placement = apply_move(session.board, session.variant, mark, target)
            if placement is None:
                return False

            session.board = placement.board
            outcome = detect_outcome(session.board, session.variant, mark, placement.index)
            if outcome.is_win:
                session.phase = Phase.FINISHED
                session.winner = mark
                if session.variant is Variant.CONNECT_FOUR:
                    session.winning_line = outcome.line
                # Seats may be vacated by cleanup triggered from the publish below
                settlement = (session.players.get(mark), session.opponent_of(mark))
                self._log(f"[game-over] game={session.id} winner={mark}")
                self._publish(session.id, 'game_over', {
                    'game': session.to_dict(),
                    'winner': mark,
                    'winningLine': session.winning_line,
                })
            elif outcome.is_draw:
                session.phase = Phase.FINISHED
                session.winner = None
                self._log(f"[game-over] game={session.id} draw")
                self._publish(session.id, 'game_over', {'game': session.to_dict(), 'winner': None})
            else:
                session.turn = session.variant.other_mark(mark)
                self._publish(session.id, 'move_made', {'game': session.to_dict(), 'lastMove': placement.index})

        if settlement is not None:
            self._settle_ratings(*settlement)
        return True

    def request_rematch(self, client_id: str, game_id: str) -> bool:
        with self._lock:
            conn = self.registry.get(client_id)
            session = self.store.get(game_id)
            if conn is None or session is None or session.phase != Phase.FINISHED:
                return False
            mark = session.mark_of(conn.user_id)
            if mark is None:
                return False

            first_vote = conn.user_id not in session.rematch_votes
            session.rematch_votes.add(conn.user_id)
            dead = []
            if not self.broadcaster.send_to(client_id, 'replay_request_acknowledged', {'gameId': session.id}):
                dead.append(client_id)

            seated = session.seated_ids()
            if len(seated) == 2 and all(uid in session.rematch_votes for uid in seated):
                self.reset_round(session.id)
            elif first_vote:
                opponent = session.opponent_of(mark)
                for other in self._connections_of(session.id, opponent):
                    if not self.broadcaster.send_to(other, 'replay_requested', {
                        'gameId': session.id,
                        'requesterId': conn.user_id,
                    }):
                        dead.append(other)
            self.coordinator.reap(dead)
            return True

    def reset_round(self, game_id: str) -> Optional[Session]:
        with self._lock:
            session = self.store.get(game_id)
            if session is None:
                return None
            session.start_round()
            self._log(f"[round-reset] game={session.id} starter={session.starter}")
            self._publish(session.id, 'game_started', {'game': session.to_dict()})
            return session

    def send_chat(self, client_id: str, game_id: str, text) -> bool:
        with self._lock:
            conn = self.registry.get(client_id)
            session = self.store.get(game_id)
            if conn is None or session is None or session.phase == Phase.ABORTED:
                return False
            mark = session.mark_of(conn.user_id)
            if mark is None or not isinstance(text, str):
                return False
            text = text.strip()
            if not text:
                return False
            self._publish(session.id, 'chat_message', {
                'gameId': session.id,
                'senderSymbol': mark,
                'message': text[:self.chat_max_length],
            })
            return True

    # ---- read side ----

    def snapshot(self, game_id: str) -> Optional[dict]:
        with self._lock:
            session = self.store.get(game_id)
            return session.to_dict() if session else None

    def open_games(self) -> List[dict]:
        with self._lock:
            return [
                {'gameId': s.id, 'gameType': s.variant.value, 'creatorId': s.players[s.first_mark]}
                for s in self.store.waiting()
            ]

    # ---- helpers ----

    def _require_connection(self, client_id):
        conn = self.registry.get(client_id)
        if conn is None:
            raise SessionError('Not connected')
        return conn

    def _ensure_free(self, conn) -> None:
        current = self.store.get(conn.session_id) if conn.session_id else None
        if current is None:
            current = self.store.find_by_player(conn.user_id)
        if current is None:
            return
        if not current.is_terminal:
            raise AlreadySeated()
        self.coordinator.detach(conn)

    def _connections_of(self, game_id: str, user_id) -> List[str]:
        if user_id is None:
            return []
        members = self.broadcaster.subscribers(game_id)
        return sorted(c.client_id for c in self.registry.for_user(user_id) if c.client_id in members)

    def _publish(self, game_id: str, event: str, payload: dict) -> None:
        dead = self.broadcaster.publish(game_id, event, payload)
        self.coordinator.reap(dead)

    def _settle_ratings(self, winner_id, loser_id) -> None:
        if self.ratings is None or winner_id is None or loser_id is None:
            return
        delta = self.rating_delta

        def _job():
            self.ratings.apply_rating_delta(winner_id, delta)
            self.ratings.apply_rating_delta(loser_id, -delta)

        try:
            if self.spawn is None:
                _job()
            else:
                self.spawn(_job)
        except Exception as exc:
            if self.logger is not None:
                self.logger.warning(f"[rating-failed] winner={winner_id} loser={loser_id} error={exc}")

    def _log(self, msg: str) -> None:
        if self.logger is not None:
            self.logger.info(msg)
