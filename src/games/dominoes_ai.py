"""
Computer players for dominoes.

`calculate_best_move` only picks a tile. `RunawayGuard` is a safety valve for the automated turn loop: if the AI keeps
acting far faster than a person could follow, something is cycling turns by accident and automated play must stop.
"""

import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Optional

from src.core.shared_types import Severity
from src.games import events
from src.games.dominoes import CATEGORY, DominoGame, DominoMove, DominoTile, End, Endpoints
from src.games.events import LogDraft

# cosmetic pause before an AI action gets applied
THINK_SECONDS = 1.0

MOVE_THRESHOLD = 5
TIME_WINDOW_SECONDS = 2.0

Clock = Callable[[], float]


def calculate_best_move(
    hand: list[DominoTile], endpoints: Optional[Endpoints]
) -> Optional[DominoMove]:
    """First tile in hand order that fits; the left end is tried before the right end. None if nothing fits."""
    for tile in hand:
        if endpoints is None:
            return DominoMove(tile, End.RIGHT)

        left, right = endpoints
        if tile.matches(left):
            return DominoMove(tile, End.LEFT)
        if tile.matches(right):
            return DominoMove(tile, End.RIGHT)
    return None


@dataclass
class RunawayGuard:
    """Counts automated actions in a rolling time window. Once tripped, it stays tripped."""

    threshold: int = MOVE_THRESHOLD
    window: float = TIME_WINDOW_SECONDS
    clock: Clock = time.monotonic
    tripped: bool = False
    _actions: deque[float] = field(default_factory=deque, init=False, repr=False)

    def register_action(self) -> bool:
        """Record an action now. Returns False when automated play must halt."""
        if self.tripped:
            return False

        now = self.clock()
        self._actions.append(now)
        while self._actions and now - self._actions[0] > self.window:
            self._actions.popleft()

        if len(self._actions) > self.threshold:
            self.tripped = True
            return False
        return True

    @property
    def recent_actions(self) -> int:
        return len(self._actions)


def runaway_event(guard: RunawayGuard, game: DominoGame) -> LogDraft:
    player = game.current_player
    window_ms = int(guard.window * 1000)
    return events.error(
        f"Detected runaway AI in Dominoes - {guard.recent_actions} moves in {window_ms}ms",
        CATEGORY,
        severity=Severity.HIGH,
        details={
            "moveCount": guard.recent_actions,
            "timeWindow": window_ms,
            "playerName": player.name,
            "gameState": {
                "boardSize": len(game.board),
                "remainingTiles": len(game.boneyard),
            },
        },
    )
