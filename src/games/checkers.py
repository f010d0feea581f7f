"""
Checkers rule engine: human player versus the computer on an 8x8 board.

The human player starts at the bottom (rows 5-7) and moves up the board, the computer starts at the top (rows 0-2)
and moves down. Kings move in both directions. A capture jumps over exactly one opposing piece.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Self

from src.core.exceptions import GameStateError, IllegalMoveError, NotYourTurnError
from src.core.shared_types import Severity
from src.games import events
from src.games.events import LogDraft
from src.games.grid import Cell

BOARD_SIZE = 8
STARTING_ROWS = 3
COLUMN_STEPS: tuple[int, ...] = (-1, 1)


class Side(Enum):
    PLAYER = auto()
    COMPUTER = auto()

    @property
    def opponent(self) -> "Side":
        return Side.COMPUTER if self == Side.PLAYER else Side.PLAYER

    @property
    def forward(self) -> int:
        """Row step towards the opponent's edge"""
        return -1 if self == Side.PLAYER else 1

    @property
    def promotion_row(self) -> int:
        return 0 if self == Side.PLAYER else BOARD_SIZE - 1

    @property
    def label(self) -> str:
        return self.name.capitalize()


class Status(Enum):
    IN_PROGRESS = auto()
    FINISHED = auto()


@dataclass(frozen=True)
class Piece:
    owner: Side
    is_king: bool = False

    def row_steps(self) -> tuple[int, ...]:
        return (-1, 1) if self.is_king else (self.owner.forward,)


@dataclass(frozen=True)
class Move:
    from_cell: Cell
    to_cell: Cell
    captured: Optional[Cell] = None

    @property
    def is_capture(self) -> bool:
        return self.captured is not None

    def to_dict(self) -> dict:
        move = {"from": self.from_cell.to_dict(), "to": self.to_cell.to_dict()}
        if self.captured:
            move["captured"] = self.captured.to_dict()
        return move


Board = list[list[Optional[Piece]]]


def initial_board() -> Board:
    """Pieces only stand on the dark squares: (row + col) odd."""
    board: Board = [[None] * BOARD_SIZE for _ in range(BOARD_SIZE)]
    for row in range(BOARD_SIZE):
        for col in range(BOARD_SIZE):
            if (row + col) % 2 != 1:
                continue
            if row < STARTING_ROWS:
                board[row][col] = Piece(Side.COMPUTER)
            elif row >= BOARD_SIZE - STARTING_ROWS:
                board[row][col] = Piece(Side.PLAYER)
    return board


def empty_board() -> Board:
    return [[None] * BOARD_SIZE for _ in range(BOARD_SIZE)]


@dataclass
class CheckersGame:
    board: Board  # indexed [row][col], i.e. [cell.y][cell.x]
    turn: Side = Side.PLAYER
    selected: Optional[Cell] = None
    status: Status = Status.IN_PROGRESS
    winner: Optional[Side] = None

    @classmethod
    def new_game(cls) -> Self:
        return cls(board=initial_board())

    # --- QUERIES ---
    def piece(self, cell: Cell) -> Optional[Piece]:
        cell.assert_within_bounds(BOARD_SIZE, BOARD_SIZE)
        return self.board[cell.y][cell.x]

    def is_terminal(self) -> bool:
        return self.status == Status.FINISHED

    def count_pieces(self) -> dict[Side, int]:
        counts = {Side.PLAYER: 0, Side.COMPUTER: 0}
        for row in self.board:
            for piece in row:
                if piece:
                    counts[piece.owner] += 1
        return counts

    def locate_pieces(self, side: Side) -> list[Cell]:
        return [
            Cell(col, row)
            for row in range(BOARD_SIZE)
            for col in range(BOARD_SIZE)
            if (piece := self.board[row][col]) is not None and piece.owner == side
        ]

    def moves_from(self, cell: Cell) -> list[Move]:
        """
        Candidate moves of the piece standing on the cell
        ---

        * simple move: one diagonal step into an empty cell
        * capture: jump two diagonal steps, over an opposing piece, into an empty cell
        """
        piece = self.piece(cell)
        if piece is None:
            return []

        moves: list[Move] = []
        for row_step in piece.row_steps():
            for col_step in COLUMN_STEPS:
                step = cell.shifted(col_step, row_step)
                if not step.is_within_bounds(BOARD_SIZE, BOARD_SIZE):
                    continue
                if self.board[step.y][step.x] is None:
                    moves.append(Move(cell, step))
                    continue

                landing = cell.shifted(2 * col_step, 2 * row_step)
                jumped = self.board[step.y][step.x]
                if (
                    landing.is_within_bounds(BOARD_SIZE, BOARD_SIZE)
                    and self.board[landing.y][landing.x] is None
                    and jumped is not None
                    and jumped.owner != piece.owner
                ):
                    moves.append(Move(cell, landing, captured=step))
        return moves

    def legal_moves(self, side: Side) -> list[Move]:
        moves: list[Move] = []
        for cell in self.locate_pieces(side):
            moves.extend(self.moves_from(cell))
        return moves

    # --- INPUT ---
    def make_move(self, from_cell: Cell, to_cell: Cell, side: Side) -> list[LogDraft]:
        """
        Attempt a move
        ---

        1. game must be in progress and it must be your turn
        2. both cells must be on the board, and the moving piece must be yours
        3. the move must be one of the legal moves of that piece
        Only then the board gets updated and the turn passes to the opponent.
        """
        if self.status != Status.IN_PROGRESS:
            raise GameStateError(f"Game is not in progress. status: {self.status.name}")
        if side != self.turn:
            raise NotYourTurnError(f"It is not your turn. Waiting for {self.turn.label}.")

        to_cell.assert_within_bounds(BOARD_SIZE, BOARD_SIZE)
        piece = self.piece(from_cell)
        if piece is None or piece.owner != side:
            raise IllegalMoveError(
                f"No {side.label.lower()} piece on ({from_cell.x}, {from_cell.y})."
            )

        move = next(
            (m for m in self.moves_from(from_cell) if m.to_cell == to_cell), None
        )
        if move is None:
            raise IllegalMoveError(
                f"Move not allowed: ({from_cell.x}, {from_cell.y}) -> ({to_cell.x}, {to_cell.y})"
            )
        return self._apply(move, piece)

    def click(self, cell: Cell) -> list[LogDraft]:
        """
        Human input on a single cell
        ---

        * a piece is selected and the cell is one of its destinations: move there
        * a piece is selected otherwise: drop the selection
        * nothing selected and the cell holds your piece: select it
        """
        if self.status != Status.IN_PROGRESS or self.turn != Side.PLAYER:
            return []

        piece = self.piece(cell)
        if self.selected is not None:
            selected = self.selected
            self.selected = None
            if any(m.to_cell == cell for m in self.moves_from(selected)):
                return self.make_move(selected, cell, Side.PLAYER)
            return []

        if piece is not None and piece.owner == Side.PLAYER:
            self.selected = cell
        return []

    # --- PRIVATE HELPERS ---
    def _apply(self, move: Move, piece: Piece) -> list[LogDraft]:
        emitted: list[LogDraft] = []
        self.board[move.to_cell.y][move.to_cell.x] = piece
        self.board[move.from_cell.y][move.from_cell.x] = None

        if move.captured:
            self.board[move.captured.y][move.captured.x] = None
            emitted.append(
                events.info(
                    f"{piece.owner.label} captured a piece",
                    events.GAME_MECHANICS,
                    severity=Severity.MEDIUM,
                    details=move.to_dict(),
                    game_state={"position": move.to_cell.to_dict()},
                )
            )

        if not piece.is_king and move.to_cell.y == piece.owner.promotion_row:
            self.board[move.to_cell.y][move.to_cell.x] = Piece(piece.owner, is_king=True)
            emitted.append(
                events.info(
                    f"{piece.owner.label} piece promoted to king",
                    events.ACHIEVEMENT,
                    severity=Severity.MEDIUM,
                    details={"position": move.to_cell.to_dict()},
                    game_state={"position": move.to_cell.to_dict()},
                )
            )

        self.turn = piece.owner.opponent
        emitted.extend(self._update_game_status())
        return emitted

    def _update_game_status(self) -> list[LogDraft]:
        """
        The game ends when a side runs out of pieces.
        A side that still has pieces but cannot move any of them on its turn loses as well.
        """
        counts = self.count_pieces()
        if counts[Side.PLAYER] == 0 or counts[Side.COMPUTER] == 0:
            winner = Side.PLAYER if counts[Side.PLAYER] > 0 else Side.COMPUTER
            return [self._finish(winner, counts, reason="no pieces left")]

        if not self.legal_moves(self.turn):
            return [self._finish(self.turn.opponent, counts, reason="no legal moves")]
        return []

    def _finish(self, winner: Side, counts: dict[Side, int], reason: str) -> LogDraft:
        self.status = Status.FINISHED
        self.winner = winner
        self.selected = None
        return events.info(
            f"Game Over - {winner.name.lower()} wins!",
            events.GAME_STATE,
            severity=Severity.HIGH,
            details={
                "winner": winner.name.lower(),
                "reason": reason,
                "playerPieces": counts[Side.PLAYER],
                "computerPieces": counts[Side.COMPUTER],
            },
            game_state={"score": counts[winner]},
        )
