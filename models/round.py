"""A single elimination round."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from models.game import Game
from models.scoring import Additive, Outcome, ScoreRule
from models.team import Team

logger = logging.getLogger(__name__)


class Round:
    """Ordered games of one elimination level.

    Game order matters: it fixes which slot each winner takes in the next
    round and which bit each game occupies in a bracket code.
    """

    def __init__(self, games: Sequence[Game], name: str, round_index: int = 0,
                 rule: ScoreRule | None = None):
        self.games: list[Game] = list(games)
        self.name = name
        self.round_index = round_index
        self.rule = rule if rule is not None else Additive(0)
        self.winners: list[Team] = []
        self.points = 0
        self.probability = 0.0

    def __repr__(self):
        return f"Round({self.name!r}, games={len(self.games)})"

    @property
    def round_points(self) -> int:
        return self.rule.points

    @property
    def outcomes(self) -> list[Outcome]:
        return [game.outcome for game in self.games if game.outcome is not None]

    @property
    def is_complete(self) -> bool:
        return all(game.is_decided for game in self.games)

    def play(self) -> list[Team]:
        """Simulate every game in order.

        Returns:
            Winners in game order
        """
        for game in self.games:
            game.play()
        return self._tally()

    def set_winners(self, winners: Sequence[Team]) -> list[Team]:
        """Assign winners directly, one per game, without simulating."""
        if len(winners) != len(self.games):
            raise ValueError(
                f"{self.name}: expected {len(self.games)} winners, got {len(winners)}"
            )
        for game, team in zip(self.games, winners):
            game.set_winner(team)
        return self._tally()

    def _tally(self) -> list[Team]:
        self.winners = [game.winner for game in self.games]
        self.points = sum(game.points for game in self.games)
        if self.games:
            self.probability = sum(game.probability for game in self.games) / len(self.games)
        else:
            self.probability = 0.0

        logger.debug("%s winners: %s", self.name, ", ".join(str(t) for t in self.winners))
        return self.winners
