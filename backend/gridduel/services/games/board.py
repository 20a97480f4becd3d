"""Board rules for the two supported variants.

Everything here is pure: boards are plain lists of cell values (``None`` for
an empty cell, otherwise the mark string) and every function returns new
values instead of mutating its arguments.
"""

from enum import Enum
from typing import List, NamedTuple, Optional, Sequence, Tuple


Board = List[Optional[str]]


class Variant(Enum):
    CONNECT_THREE = 'tictactoe'
    CONNECT_FOUR = 'connect4'

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional['Variant']:
        """Map a wire ``gameType`` to a variant; missing means connect-three."""
        if value is None or value == '':
            return cls.CONNECT_THREE
        for variant in cls:
            if variant.value == value:
                return variant
        return None

    @property
    def marks(self) -> Tuple[str, str]:
        if self is Variant.CONNECT_FOUR:
            return ('red', 'yellow')
        return ('X', 'O')

    @property
    def rows(self) -> int:
        return 6 if self is Variant.CONNECT_FOUR else 3

    @property
    def cols(self) -> int:
        return 7 if self is Variant.CONNECT_FOUR else 3

    @property
    def size(self) -> int:
        return self.rows * self.cols

    @property
    def move_field(self) -> str:
        # Name of the move argument on the wire
        return 'column' if self is Variant.CONNECT_FOUR else 'position'

    @property
    def move_domain(self) -> int:
        return self.cols if self is Variant.CONNECT_FOUR else self.size

    def other_mark(self, mark: str) -> str:
        first, second = self.marks
        return second if mark == first else first


class Placement(NamedTuple):
    board: Board
    index: int


class Outcome(NamedTuple):
    kind: str  # 'win', 'draw' or 'ongoing'
    line: Optional[List[int]] = None

    @property
    def is_win(self) -> bool:
        return self.kind == 'win'

    @property
    def is_draw(self) -> bool:
        return self.kind == 'draw'


ONGOING = Outcome('ongoing')
DRAW = Outcome('draw')

THREE_LINES = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),  # rows
    (0, 3, 6), (1, 4, 7), (2, 5, 8),  # columns
    (0, 4, 8), (2, 4, 6),             # diagonals
)

# horizontal, vertical, and the two diagonals
FOUR_AXES = ((0, 1), (1, 0), (1, 1), (1, -1))


def empty_board(variant: Variant) -> Board:
    return [None] * variant.size


def is_valid_target(variant: Variant, target) -> bool:
    """True when ``target`` is an int inside the variant's move domain."""
    if isinstance(target, bool) or not isinstance(target, int):
        return False
    return 0 <= target < variant.move_domain


def apply_move(board: Sequence[Optional[str]], variant: Variant, mark: str, target) -> Optional[Placement]:
    """Place ``mark`` on a copy of ``board``.

    Connect-three targets a cell index; connect-four targets a column and the
    piece falls to the lowest empty row. Returns ``None`` when the move is
    rejected (out of range, occupied cell, full column).
    """
    if len(board) != variant.size or not is_valid_target(variant, target):
        return None

    if variant is Variant.CONNECT_THREE:
        index = target
        if board[index] is not None:
            return None
    else:
        index = None
        for row in range(variant.rows - 1, -1, -1):
            candidate = row * variant.cols + target
            if board[candidate] is None:
                index = candidate
                break
        if index is None:
            return None

    new_board = list(board)
    new_board[index] = mark
    return Placement(new_board, index)


def _three_outcome(board: Sequence[Optional[str]], mark: str) -> Optional[List[int]]:
    for line in THREE_LINES:
        if all(board[i] == mark for i in line):
            return list(line)
    return None


def _four_outcome(board: Sequence[Optional[str]], variant: Variant, mark: str, last_index: int) -> Optional[List[int]]:
    rows, cols = variant.rows, variant.cols
    row, col = divmod(last_index, cols)
    for dr, dc in FOUR_AXES:
        run = [last_index]
        for sign in (1, -1):
            r, c = row + dr * sign, col + dc * sign
            while 0 <= r < rows and 0 <= c < cols and board[r * cols + c] == mark:
                run.append(r * cols + c)
                r += dr * sign
                c += dc * sign
        if len(run) >= 4:
            return sorted(run)
    return None


def detect_outcome(board: Sequence[Optional[str]], variant: Variant, mark: str, last_index: int) -> Outcome:
    """Classify the board after ``mark`` was placed at ``last_index``."""
    if variant is Variant.CONNECT_THREE:
        line = _three_outcome(board, mark)
    elif board[last_index] == mark:
        line = _four_outcome(board, variant, mark, last_index)
    else:
        line = None

    if line is not None:
        return Outcome('win', line)
    if all(cell is not None for cell in board):
        return DRAW
    return ONGOING
