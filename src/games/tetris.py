"""
Tetris rule engine.

The board is a fixed grid of colour tags (empty string = free cell). A single falling piece moves on top of it until it
cannot move down anymore, at which point it is merged into the board.
"""

import random
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Self

from src.core.exceptions import GameStateError
from src.core.shared_types import Severity
from src.games import events
from src.games.events import LogDraft
from src.games.grid import Cell

GRID_WIDTH = 10
GRID_HEIGHT = 20
POINTS_PER_LINE = 100
EMPTY = ""

Shape = tuple[tuple[int, ...], ...]


class Tetromino(Enum):
    I = "I"
    O = "O"
    T = "T"
    S = "S"
    Z = "Z"
    J = "J"
    L = "L"


SHAPES: dict[Tetromino, Shape] = {
    Tetromino.I: ((1, 1, 1, 1),),
    Tetromino.O: ((1, 1), (1, 1)),
    Tetromino.T: ((0, 1, 0), (1, 1, 1)),
    Tetromino.S: ((0, 1, 1), (1, 1, 0)),
    Tetromino.Z: ((1, 1, 0), (0, 1, 1)),
    Tetromino.J: ((1, 0, 0), (1, 1, 1)),
    Tetromino.L: ((0, 0, 1), (1, 1, 1)),
}

COLORS: dict[Tetromino, str] = {
    Tetromino.I: "cyan",
    Tetromino.O: "yellow",
    Tetromino.T: "purple",
    Tetromino.S: "green",
    Tetromino.Z: "red",
    Tetromino.J: "blue",
    Tetromino.L: "orange",
}

SPAWN_CELL = Cell(GRID_WIDTH // 2 - 1, 0)


def rotate_shape(shape: Shape) -> Shape:
    """Clockwise rotation: transpose, then reverse every row."""
    return tuple(tuple(reversed(column)) for column in zip(*shape))


@dataclass(frozen=True)
class Piece:
    type: Tetromino
    shape: Shape
    position: Cell  # top-left corner of the shape matrix
    color: str

    @classmethod
    def spawn(cls, piece_type: Tetromino) -> Self:
        return cls(piece_type, SHAPES[piece_type], SPAWN_CELL, COLORS[piece_type])

    def cells(self, dx: int = 0, dy: int = 0) -> list[Cell]:
        """Board cells covered by the filled part of the shape (after an optional offset)"""
        return [
            Cell(self.position.x + col + dx, self.position.y + row + dy)
            for row, line in enumerate(self.shape)
            for col, filled in enumerate(line)
            if filled
        ]


def empty_board() -> list[list[str]]:
    return [[EMPTY] * GRID_WIDTH for _ in range(GRID_HEIGHT)]


@dataclass
class TetrisGame:
    board: list[list[str]]  # indexed [row][column]
    current: Optional[Piece]
    score: int = 0
    high_score: int = 0
    lines_cleared: int = 0
    is_paused: bool = False
    is_over: bool = False
    rng: random.Random = field(default_factory=random.Random, repr=False)

    @classmethod
    def new_game(cls, rng: Optional[random.Random] = None, high_score: int = 0) -> Self:
        game = cls(
            board=empty_board(),
            current=None,
            high_score=high_score,
            rng=rng or random.Random(),
        )
        game.current = Piece.spawn(game._random_type())
        return game

    def is_terminal(self) -> bool:
        return self.is_over

    def snapshot(self) -> dict:
        state: dict = {"score": self.score}
        if self.current:
            state["currentPiece"] = self.current.type.value
            state["position"] = self.current.position.to_dict()
        return state

    # --- VALIDITY ---
    def is_valid_position(self, piece: Piece, dx: int = 0, dy: int = 0) -> bool:
        """
        Every filled cell must be inside the side walls and above the floor and must not overlap a settled cell.
        Rows above the top (y < 0) are allowed: a rotated piece may stick out of the top of the board.
        """
        for cell in piece.cells(dx, dy):
            if not (0 <= cell.x < GRID_WIDTH) or cell.y >= GRID_HEIGHT:
                return False
            if cell.y >= 0 and self.board[cell.y][cell.x] != EMPTY:
                return False
        return True

    # --- INPUT ---
    def move_left(self) -> list[LogDraft]:
        return self._shift(-1)

    def move_right(self) -> list[LogDraft]:
        return self._shift(1)

    def rotate(self) -> list[LogDraft]:
        """Rejected (no change) when the rotated shape would overlap or leave the board."""
        if not self._accepts_input():
            return []
        assert self.current is not None
        rotated = replace(self.current, shape=rotate_shape(self.current.shape))
        if self.is_valid_position(rotated):
            self.current = rotated
        return []

    def soft_drop(self) -> list[LogDraft]:
        return self.tick()

    def hard_drop(self) -> list[LogDraft]:
        """Drop the piece straight to its resting row and lock it immediately."""
        if not self._accepts_input():
            return []
        assert self.current is not None
        distance = 0
        while self.is_valid_position(self.current, 0, distance + 1):
            distance += 1
        self.current = replace(self.current, position=self.current.position.shifted(0, distance))
        return self._lock_piece()

    def toggle_pause(self) -> list[LogDraft]:
        if self.is_over:
            raise GameStateError("Cannot pause a game that is over.")
        was_paused = self.is_paused
        self.is_paused = not was_paused
        return [
            events.info(
                "Game resumed" if was_paused else "Game paused",
                events.GAME_STATE,
                game_state={"score": self.score},
            )
        ]

    def tick(self) -> list[LogDraft]:
        """Gravity: the piece falls one row, or gets locked into place when it is blocked."""
        if not self._accepts_input():
            return []
        assert self.current is not None

        if self.is_valid_position(self.current, 0, 1):
            self.current = replace(self.current, position=self.current.position.shifted(0, 1))
            return []
        return self._lock_piece()

    # --- PRIVATE HELPERS ---
    def _accepts_input(self) -> bool:
        return self.current is not None and not self.is_over and not self.is_paused

    def _shift(self, dx: int) -> list[LogDraft]:
        if not self._accepts_input():
            return []
        assert self.current is not None
        if self.is_valid_position(self.current, dx, 0):
            self.current = replace(self.current, position=self.current.position.shifted(dx, 0))
        return []

    def _random_type(self) -> Tetromino:
        return self.rng.choice(list(Tetromino))

    def _lock_piece(self) -> list[LogDraft]:
        """merge -> clear lines -> spawn the next piece (which may end the game)"""
        emitted: list[LogDraft] = []
        self._merge_piece()
        emitted.extend(self._clear_lines())
        emitted.extend(self._spawn_piece())
        return emitted

    def _merge_piece(self) -> None:
        assert self.current is not None
        for cell in self.current.cells():
            # cells sticking out above the top are lost
            if cell.is_within_bounds(GRID_WIDTH, GRID_HEIGHT):
                self.board[cell.y][cell.x] = self.current.color
        self.current = None

    def _clear_lines(self) -> list[LogDraft]:
        """A row is cleared only when every one of its cells is filled. Rows above shift down."""
        remaining = [row for row in self.board if not all(cell != EMPTY for cell in row)]
        cleared = GRID_HEIGHT - len(remaining)
        if cleared == 0:
            return []

        self.board = [[EMPTY] * GRID_WIDTH for _ in range(cleared)] + remaining
        self.lines_cleared += cleared
        self.score += cleared * POINTS_PER_LINE

        emitted = [
            events.info(
                f"Cleared {cleared} lines",
                events.GAME_MECHANICS,
                severity=Severity.MEDIUM,
                details={"linesCleared": cleared, "newScore": self.score},
                game_state={"score": self.score, "linesCleared": cleared},
            )
        ]
        if self.score > self.high_score:
            previous = self.high_score
            self.high_score = self.score
            emitted.append(
                events.info(
                    "New high score!",
                    events.ACHIEVEMENT,
                    severity=Severity.HIGH,
                    details={"newHighScore": self.score, "previousHighScore": previous},
                    game_state={"score": self.score},
                )
            )
        return emitted

    def _spawn_piece(self) -> list[LogDraft]:
        piece = Piece.spawn(self._random_type())
        emitted = [
            events.info(
                "New piece generated",
                events.GAME_MECHANICS,
                details={"pieceType": piece.type.value},
                game_state={
                    "score": self.score,
                    "currentPiece": piece.type.value,
                    "position": piece.position.to_dict(),
                },
            )
        ]
        if not self.is_valid_position(piece):
            self.is_over = True
            emitted.append(
                events.info(
                    "Game Over",
                    events.GAME_STATE,
                    severity=Severity.MEDIUM,
                    details={"finalScore": self.score},
                    game_state={"score": self.score},
                )
            )
            return emitted

        self.current = piece
        return emitted
