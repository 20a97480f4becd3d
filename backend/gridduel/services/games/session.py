import random
import string
from typing import Dict, List, Optional, Set

from .board import Board, Variant, empty_board


class Phase:
    WAITING = 'waiting'
    PLAYING = 'playing'
    FINISHED = 'finished'
    ABORTED = 'aborted'

    TERMINAL = (FINISHED, ABORTED)


class Session:
    """One game between at most two users, keyed by a short id."""

    def __init__(self, game_id: str, variant: Variant, creator_id: int):
        first, second = variant.marks
        self.id = game_id
        self.variant = variant
        self.board: Board = empty_board(variant)
        self.players: Dict[str, Optional[int]] = {first: creator_id, second: None}
        self.turn = first
        self.starter = first
        self.phase = Phase.WAITING
        self.winner: Optional[str] = None
        self.winning_line: Optional[List[int]] = None
        self.rematch_votes: Set[int] = set()

    @property
    def first_mark(self) -> str:
        return self.variant.marks[0]

    @property
    def second_mark(self) -> str:
        return self.variant.marks[1]

    @property
    def is_terminal(self) -> bool:
        return self.phase in Phase.TERMINAL

    def mark_of(self, user_id) -> Optional[str]:
        if user_id is None:
            return None
        for mark, holder in self.players.items():
            if holder == user_id:
                return mark
        return None

    def opponent_of(self, mark: str) -> Optional[int]:
        return self.players.get(self.variant.other_mark(mark))

    def seated_ids(self) -> List[int]:
        return [holder for holder in self.players.values() if holder is not None]

    def vacate(self, mark: str) -> None:
        self.players[mark] = None

    def clear_result(self) -> None:
        self.winner = None
        self.winning_line = None
        self.rematch_votes.clear()

    def start_round(self) -> None:
        """Reset the board for a new round; the other mark opens this time."""
        self.starter = self.variant.other_mark(self.starter)
        self.turn = self.starter
        self.board = empty_board(self.variant)
        self.phase = Phase.PLAYING
        self.clear_result()

    def to_dict(self):
        return {
            'id': self.id,
            'gameType': self.variant.value,
            'board': list(self.board),
            'rows': self.variant.rows,
            'cols': self.variant.cols,
            'players': dict(self.players),
            'currentTurn': self.turn,
            'starter': self.starter,
            'status': self.phase,
            'winner': self.winner,
            'winningLine': list(self.winning_line) if self.winning_line else None,
            'replayVotes': sorted(self.rematch_votes),
        }


def generate_game_code(taken, length=6):
    """Generate a short game code that is not already in ``taken``."""
    alphabet = string.ascii_lowercase + string.digits
    while True:
        code = ''.join(random.choices(alphabet, k=length))
        if code not in taken:
            return code


class SessionStore:
    """In-memory registry of active sessions."""

    def __init__(self, id_length=6):
        self.id_length = id_length
        self._sessions: Dict[str, Session] = {}

    def __len__(self):
        return len(self._sessions)

    def __contains__(self, game_id):
        return game_id in self._sessions

    def create(self, variant: Variant, creator_id: int) -> Session:
        game_id = generate_game_code(self._sessions, self.id_length)
        session = Session(game_id, variant, creator_id)
        self._sessions[game_id] = session
        return session

    def get(self, game_id) -> Optional[Session]:
        if not isinstance(game_id, str):
            return None
        return self._sessions.get(game_id)

    def remove(self, game_id) -> Optional[Session]:
        return self._sessions.pop(game_id, None)

    def find_by_player(self, user_id) -> Optional[Session]:
        for session in self._sessions.values():
            if session.mark_of(user_id) is not None:
                return session
        return None

    def waiting(self) -> List[Session]:
        return [s for s in self._sessions.values() if s.phase == Phase.WAITING]
