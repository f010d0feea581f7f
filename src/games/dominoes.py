"""
Dominoes rule engine (double-six set, round-robin turns).

The tiles in play are conserved at every point in time: hands + board + boneyard always hold
the 28 tiles (i, j) with 0 <= i <= j <= 6, each exactly once.
"""

import math
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Self

from src.core.exceptions import GameStateError, IllegalMoveError
from src.core.shared_types import Severity
from src.games import events
from src.games.events import LogDraft

MAX_PIPS = 6
HAND_SIZE = 7
DEFAULT_PLAYER_COUNT = 4
SHUFFLE_SEED = 12345
CATEGORY = "dominoes"


@dataclass(frozen=True)
class DominoTile:
    left: int
    right: int

    @property
    def id(self) -> str:
        return f"tile-{self.left}-{self.right}"

    @property
    def is_double(self) -> bool:
        return self.left == self.right

    @property
    def pips(self) -> int:
        return self.left + self.right

    def matches(self, value: int) -> bool:
        return self.left == value or self.right == value

    def other_side(self, value: int) -> int:
        """The value left open once the tile gets attached by `value`"""
        return self.right if self.left == value else self.left

    def to_dict(self) -> dict[str, int]:
        return {"left": self.left, "right": self.right}


class End(Enum):
    LEFT = "left"
    RIGHT = "right"


class PlayerKind(Enum):
    HUMAN = "human"
    AI = "ai"


class Status(Enum):
    WAITING = "waiting"
    PLAYING = "playing"
    FINISHED = "finished"


@dataclass(frozen=True)
class DominoMove:
    tile: DominoTile
    end: End

    def to_dict(self) -> dict:
        return {"tile": self.tile.to_dict(), "end": self.end.value}


@dataclass
class Player:
    id: str
    name: str
    kind: PlayerKind
    hand: list[DominoTile]
    score: int = 0

    @property
    def pip_count(self) -> int:
        return sum(tile.pips for tile in self.hand)


Endpoints = tuple[int, int]


# --- TILE SET ---
def generate_domino_set() -> list[DominoTile]:
    """All 28 tiles, in (0-0, 0-1, ..., 6-6) order"""
    return [
        DominoTile(i, j) for i in range(MAX_PIPS + 1) for j in range(i, MAX_PIPS + 1)
    ]


def _seeded_random(seed: int, index: int) -> float:
    """Fractional part of sin(seed + index) * 10000: a fixed sequence for a fixed seed."""
    x = math.sin(seed + index) * 10000
    return x - math.floor(x)


def shuffle_tiles(tiles: list[DominoTile], seed: int = SHUFFLE_SEED) -> list[DominoTile]:
    """
    Fisher-Yates shuffle driven by a seeded sequence
    ---

    Walks from the back of the list to the front, swapping the current slot with a random earlier (or same) slot.
    The same seed always yields the same permutation. Returns a new list.
    """
    shuffled = list(tiles)
    current = len(shuffled)
    while current != 0:
        random_index = math.floor(_seeded_random(seed, current) * current)
        current -= 1
        shuffled[current], shuffled[random_index] = (
            shuffled[random_index],
            shuffled[current],
        )
    return shuffled


@dataclass
class DominoGame:
    players: list[Player]
    boneyard: list[DominoTile]
    board: list[DominoTile] = field(default_factory=list)  # in order of placement
    endpoints: Optional[Endpoints] = None  # None while the board is empty
    current_player_index: int = 0
    status: Status = Status.WAITING
    winner: Optional[int] = None
    last_move: Optional[DominoMove] = None
    consecutive_passes: int = 0

    @classmethod
    def new_game(
        cls, player_count: int = DEFAULT_PLAYER_COUNT, seed: int = SHUFFLE_SEED
    ) -> Self:
        """Seat one human player followed by AI players and deal 7 tiles to each. The rest is the boneyard."""
        max_players = len(generate_domino_set()) // HAND_SIZE
        if not 2 <= player_count <= max_players:
            raise GameStateError(
                f"Dominoes needs between 2 and {max_players} players, got {player_count}."
            )

        tiles = shuffle_tiles(generate_domino_set(), seed)
        players: list[Player] = []
        for seat in range(player_count):
            hand, tiles = tiles[:HAND_SIZE], tiles[HAND_SIZE:]
            if seat == 0:
                players.append(Player("human", "Player", PlayerKind.HUMAN, hand))
            else:
                players.append(Player(f"ai-{seat}", f"AI {seat}", PlayerKind.AI, hand))
        return cls(players=players, boneyard=tiles)

    # --- QUERIES ---
    @property
    def current_player(self) -> Player:
        return self.players[self.current_player_index]

    def is_terminal(self) -> bool:
        return self.status == Status.FINISHED

    def all_tiles(self) -> Counter[DominoTile]:
        """Multiset of every tile in hands, on the board, and in the boneyard"""
        tiles: Counter[DominoTile] = Counter(self.board)
        tiles.update(self.boneyard)
        for player in self.players:
            tiles.update(player.hand)
        return tiles

    def can_play(self, tile: DominoTile) -> bool:
        if self.endpoints is None:
            return True
        left, right = self.endpoints
        return tile.matches(left) or tile.matches(right)

    def valid_moves(self, tile: DominoTile) -> list[DominoMove]:
        """The opening tile always goes on the right end."""
        if self.endpoints is None:
            return [DominoMove(tile, End.RIGHT)]

        left, right = self.endpoints
        moves: list[DominoMove] = []
        if tile.matches(left):
            moves.append(DominoMove(tile, End.LEFT))
        if tile.matches(right):
            moves.append(DominoMove(tile, End.RIGHT))
        return moves

    def has_playable_tile(self, player: Optional[Player] = None) -> bool:
        player = player or self.current_player
        return any(self.can_play(tile) for tile in player.hand)

    def snapshot(self) -> dict:
        return {
            "boardSize": len(self.board),
            "remainingTiles": len(self.boneyard),
            "currentPlayer": self.current_player.id,
        }

    # --- INPUT ---
    def start(self) -> list[LogDraft]:
        if self.status != Status.WAITING:
            raise GameStateError(f"Game already started. status: {self.status.value}")
        self.status = Status.PLAYING
        return [
            events.info(
                "Dominoes game started",
                events.GAME_STATE,
                details={"players": [p.id for p in self.players]},
                game_state=self.snapshot(),
            )
        ]

    def place_tile(self, tile: DominoTile, end: End) -> list[LogDraft]:
        """
        Play a tile from the current player's hand
        ---

        The endpoint the tile is attached to becomes the tile's other value. Checks happen before anything is mutated.
        """
        self._assert_playing()
        player = self.current_player
        if tile not in player.hand:
            raise IllegalMoveError(f"{player.name} does not hold {tile.id}.")
        move = DominoMove(tile, end)
        if move not in self.valid_moves(tile):
            raise IllegalMoveError(f"{tile.id} cannot be played on the {end.value} end.")

        player.hand.remove(tile)
        self.board.append(tile)
        self.endpoints = self._new_endpoints(tile, end)
        self.last_move = move
        self.consecutive_passes = 0

        emitted = [
            events.info(
                f"{player.name} played {tile.left}-{tile.right}",
                CATEGORY,
                details={"player": player.id, "move": move.to_dict()},
                game_state=self.snapshot(),
            )
        ]
        if not player.hand:
            emitted.append(self._finish(self.current_player_index, reason="domino"))
            return emitted

        self._advance_turn()
        return emitted

    def draw_tile(self) -> list[LogDraft]:
        """Take the top tile of the boneyard. The turn stays with the same player."""
        self._assert_playing()
        if not self.boneyard:
            raise IllegalMoveError("The boneyard is empty.")

        player = self.current_player
        drawn = self.boneyard.pop(0)
        player.hand.append(drawn)
        return [
            events.info(
                f"{player.name} drew a tile",
                CATEGORY,
                details={"player": player.id},
                game_state=self.snapshot(),
            )
        ]

    def pass_turn(self) -> list[LogDraft]:
        """Only allowed when there is nothing to play and nothing to draw."""
        self._assert_playing()
        player = self.current_player
        if self.boneyard:
            raise IllegalMoveError("Cannot pass while the boneyard still has tiles. Draw first.")
        if self.has_playable_tile(player):
            raise IllegalMoveError(f"{player.name} has a playable tile and cannot pass.")

        self.consecutive_passes += 1
        emitted = [
            events.info(
                f"{player.name} passed",
                CATEGORY,
                details={"player": player.id},
                game_state=self.snapshot(),
            )
        ]
        if self.consecutive_passes >= len(self.players):
            emitted.append(self._finish(self._lowest_pip_count_seat(), reason="blocked"))
            return emitted

        self._advance_turn()
        return emitted

    # --- PRIVATE HELPERS ---
    def _assert_playing(self) -> None:
        if self.status != Status.PLAYING:
            raise GameStateError(f"Game is not being played. status: {self.status.value}")

    def _new_endpoints(self, tile: DominoTile, end: End) -> Endpoints:
        if self.endpoints is None:
            return (tile.left, tile.right)
        left, right = self.endpoints
        if end == End.LEFT:
            return (tile.other_side(left), right)
        return (left, tile.other_side(right))

    def _advance_turn(self) -> None:
        self.current_player_index = (self.current_player_index + 1) % len(self.players)

    def _lowest_pip_count_seat(self) -> int:
        """min() keeps the first seat on ties"""
        return min(range(len(self.players)), key=lambda seat: self.players[seat].pip_count)

    def _finish(self, seat: int, reason: str) -> LogDraft:
        """The winner scores the pips left in the other players' hands."""
        winner = self.players[seat]
        points = sum(p.pip_count for i, p in enumerate(self.players) if i != seat)
        winner.score += points
        self.status = Status.FINISHED
        self.winner = seat
        return events.info(
            f"Game Over - {winner.name} wins!",
            events.GAME_STATE,
            severity=Severity.HIGH,
            details={"winner": winner.id, "reason": reason, "points": points},
            game_state=self.snapshot(),
        )
