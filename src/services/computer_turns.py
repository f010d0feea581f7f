"""
Drives the computer side of checkers and dominoes.

The AI modules only decide what to play; the functions here apply the decision after a short, purely cosmetic
"thinking" pause and collect the events the game produced. `pause` is injectable so tests do not sleep.
"""

import logging
import random
import time
from typing import Callable, Optional

from src.games import checkers_ai, dominoes_ai, events
from src.games.checkers import CheckersGame, Side
from src.games.checkers import Status as CheckersStatus
from src.games.dominoes import DominoGame, PlayerKind
from src.games.dominoes import Status as DominoStatus
from src.games.dominoes_ai import RunawayGuard, calculate_best_move, runaway_event
from src.games.events import LogDraft

logger = logging.getLogger(__name__)

Pause = Callable[[float], None]


def play_checkers_turn(
    game: CheckersGame,
    rng: Optional[random.Random] = None,
    pause: Pause = time.sleep,
) -> list[LogDraft]:
    """Make the computer's move, if it is the computer's turn. Returns [] when there is nothing to do."""
    if game.status != CheckersStatus.IN_PROGRESS or game.turn != Side.COMPUTER:
        return []

    move = checkers_ai.choose_move(game, rng)
    if move is None:
        # only reachable on a board that was set up by hand: normal play ends the game before this
        logger.warning("Computer has no legal move to make")
        return []

    pause(checkers_ai.THINK_SECONDS)
    emitted = game.make_move(move.from_cell, move.to_cell, Side.COMPUTER)
    emitted.append(
        events.info(
            "Computer made a move",
            events.GAME_MECHANICS,
            details=move.to_dict(),
            game_state={"position": move.to_cell.to_dict()},
        )
    )
    return emitted


class DominoesAIRunner:
    """Plays the AI seats until it is the human's turn again, the game ends, or the runaway guard trips."""

    def __init__(
        self,
        guard: Optional[RunawayGuard] = None,
        pause: Pause = time.sleep,
    ) -> None:
        self.guard = guard or RunawayGuard()
        self.pause = pause

    @property
    def halted(self) -> bool:
        return self.guard.tripped

    def take_turn(self, game: DominoGame) -> list[LogDraft]:
        """
        One AI turn
        ---

        1. count the action; a tripped guard stops automated play with a high severity event
        2. draw until a tile fits or the boneyard is empty
        3. play the first tile that fits, otherwise pass
        """
        if game.status != DominoStatus.PLAYING or game.current_player.kind != PlayerKind.AI:
            return []

        if not self.guard.register_action():
            logger.error("Runaway dominoes AI halted after %d actions", self.guard.recent_actions)
            return [runaway_event(self.guard, game)]

        self.pause(dominoes_ai.THINK_SECONDS)
        player = game.current_player
        emitted: list[LogDraft] = []
        while game.boneyard and calculate_best_move(player.hand, game.endpoints) is None:
            emitted.extend(game.draw_tile())

        best_move = calculate_best_move(player.hand, game.endpoints)
        if best_move:
            emitted.extend(game.place_tile(best_move.tile, best_move.end))
        else:
            emitted.extend(game.pass_turn())
        return emitted

    def play_until_human(self, game: DominoGame) -> list[LogDraft]:
        emitted: list[LogDraft] = []
        while (
            game.status == DominoStatus.PLAYING
            and game.current_player.kind == PlayerKind.AI
            and not self.halted
        ):
            emitted.extend(self.take_turn(game))
        return emitted
