"""
Snake rule engine.

One call to `tick()` advances the game by a single step: the head moves one cell in the facing direction, and the snake
either collides, eats, or slides forward.
"""

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Self

from src.core.exceptions import GameStateError
from src.core.shared_types import Severity
from src.games import events
from src.games.events import LogDraft
from src.games.grid import Cell

GRID_SIZE = 20
START_CELL = Cell(10, 10)
START_FOOD = Cell(15, 15)
SCORE_MILESTONES: tuple[int, ...] = (5, 10, 15, 20, 25, 30)


class Direction(Enum):
    """Values are the (dx, dy) step. Rows count downwards, so UP decreases y."""

    UP = (0, -1)
    DOWN = (0, 1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)

    @property
    def opposite(self) -> "Direction":
        dx, dy = self.value
        return Direction((-dx, -dy))


@dataclass
class SnakeGame:
    body: list[Cell]  # head first
    food: Optional[Cell]
    direction: Direction
    is_paused: bool = False
    is_over: bool = False
    high_score: int = 0
    rng: random.Random = field(default_factory=random.Random, repr=False)
    # direction of the last step actually taken: reversal is checked against this one,
    # so two quick turns within a single tick cannot fold the snake onto itself.
    _last_moved: Direction = field(init=False)

    def __post_init__(self) -> None:
        self._last_moved = self.direction

    @classmethod
    def new_game(cls, rng: Optional[random.Random] = None, high_score: int = 0) -> Self:
        return cls(
            body=[START_CELL],
            food=START_FOOD,
            direction=Direction.RIGHT,
            high_score=high_score,
            rng=rng or random.Random(),
        )

    # --- QUERIES ---
    @property
    def head(self) -> Cell:
        return self.body[0]

    @property
    def score(self) -> int:
        return len(self.body) - 1

    def is_terminal(self) -> bool:
        return self.is_over

    def snapshot(self, position: Optional[Cell] = None) -> dict:
        """The game state attached to every log entry"""
        return {
            "score": self.score,
            "snakeLength": len(self.body),
            "position": (position or self.head).to_dict(),
        }

    def free_cells(self) -> list[Cell]:
        occupied = set(self.body)
        return [
            Cell(x, y)
            for y in range(GRID_SIZE)
            for x in range(GRID_SIZE)
            if Cell(x, y) not in occupied
        ]

    # --- INPUT ---
    def change_direction(self, new_direction: Direction) -> list[LogDraft]:
        """A 180 degree turn would run straight into the neck, so it is ignored (as is turning into the current direction)."""
        if self.is_over:
            raise GameStateError("Game is over. Start a new game to keep playing.")
        if new_direction == self._last_moved.opposite or new_direction == self.direction:
            return []

        old_direction = self.direction
        self.direction = new_direction
        return [
            events.info(
                "Direction changed",
                events.INPUT,
                details={
                    "oldDirection": old_direction.name,
                    "newDirection": new_direction.name,
                },
                game_state=self.snapshot(),
            )
        ]

    def toggle_pause(self) -> list[LogDraft]:
        if self.is_over:
            raise GameStateError("Cannot pause a game that is over.")
        was_paused = self.is_paused
        self.is_paused = not was_paused
        return [
            events.info(
                "Game resumed" if was_paused else "Game paused",
                events.GAME_STATE,
                game_state=self.snapshot(),
            )
        ]

    def tick(self) -> list[LogDraft]:
        """Advance a single step. Paused or finished games do not change."""
        if self.is_over or self.is_paused:
            return []

        dx, dy = self.direction.value
        new_head = self.head.shifted(dx, dy)
        self._last_moved = self.direction

        collision = self._check_collision(new_head)
        if collision:
            return [collision, self._game_over(new_head)]

        if new_head == self.food:
            return self._eat(new_head)

        self.body = [new_head] + self.body[:-1]
        return []

    # --- PRIVATE HELPERS ---
    def _check_collision(self, new_head: Cell) -> Optional[LogDraft]:
        """Walls first (so the body is never compared against a cell outside the board), then the body."""
        if not new_head.is_within_bounds(GRID_SIZE, GRID_SIZE):
            return events.error(
                "Wall collision detected",
                events.COLLISION,
                details={
                    "head": new_head.to_dict(),
                    "bounds": {"width": GRID_SIZE, "height": GRID_SIZE},
                },
                game_state=self.snapshot(new_head),
            )

        if new_head in self.body[1:]:
            return events.error(
                "Self collision detected",
                events.COLLISION,
                details={
                    "head": new_head.to_dict(),
                    "snake": [cell.to_dict() for cell in self.body],
                },
                game_state=self.snapshot(new_head),
            )
        return None

    def _game_over(self, position: Cell) -> LogDraft:
        self.is_over = True
        return events.info(
            "Game Over",
            events.GAME_STATE,
            severity=Severity.MEDIUM,
            details={"finalScore": self.score},
            game_state=self.snapshot(position),
        )

    def _eat(self, new_head: Cell) -> list[LogDraft]:
        """Grow by keeping the tail, then place new food and check for achievements."""
        eaten_at = self.food
        assert eaten_at is not None
        self.body = [new_head] + self.body

        emitted: list[LogDraft] = []
        emitted.extend(self._place_food())
        emitted.extend(self._check_achievements())
        emitted.append(
            events.info(
                "Food eaten",
                events.GAME_MECHANICS,
                details={"newScore": self.score, "foodPosition": eaten_at.to_dict()},
                game_state=self.snapshot(),
            )
        )
        if self.food is None:
            emitted.append(self._game_over(self.head))
        return emitted

    def _place_food(self) -> list[LogDraft]:
        """Food lands on a uniformly random cell that is not part of the snake."""
        candidates = self.free_cells()
        if not candidates:
            # board filled: nothing left to eat
            self.food = None
            return [
                events.info(
                    "Board filled",
                    events.ACHIEVEMENT,
                    severity=Severity.HIGH,
                    game_state=self.snapshot(),
                )
            ]

        self.food = self.rng.choice(candidates)
        return [
            events.info(
                "Food generated",
                events.GAME_MECHANICS,
                details=self.food.to_dict(),
                game_state=self.snapshot(),
            )
        ]

    def _check_achievements(self) -> list[LogDraft]:
        emitted: list[LogDraft] = []
        new_score = self.score
        if new_score in SCORE_MILESTONES:
            emitted.append(
                events.info(
                    f"Milestone reached: {new_score} points!",
                    events.ACHIEVEMENT,
                    severity=Severity.MEDIUM,
                    details={"milestone": new_score},
                    game_state=self.snapshot(),
                )
            )

        if new_score > self.high_score:
            previous = self.high_score
            self.high_score = new_score
            emitted.append(
                events.info(
                    "New high score!",
                    events.ACHIEVEMENT,
                    severity=Severity.HIGH,
                    details={"newHighScore": new_score, "previousHighScore": previous},
                    game_state=self.snapshot(),
                )
            )
        return emitted
