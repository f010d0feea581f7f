"""Computer opponent for checkers: any capture beats any simple move, otherwise pick at random."""

import random
from typing import Optional

from src.games.checkers import CheckersGame, Move, Side

# cosmetic pause before the computer's move gets applied
THINK_SECONDS = 0.5


def choose_move(
    game: CheckersGame, rng: Optional[random.Random] = None, side: Side = Side.COMPUTER
) -> Optional[Move]:
    """Uniformly random among the captures if there is one, else uniformly random among all moves. None if stuck."""
    rng = rng or random.Random()
    possible_moves = game.legal_moves(side)
    if not possible_moves:
        return None

    capture_moves = [move for move in possible_moves if move.is_capture]
    return rng.choice(capture_moves or possible_moves)
