"""A single tournament matchup."""

from __future__ import annotations

from typing import Protocol

import numpy as np

from models.scoring import Additive, Outcome, ScoreRule, home_team_odds, score
from models.team import Team


class RandomSource(Protocol):
    def random(self) -> float: ...


class Game:
    """One matchup between a home and an away team.

    The game is decided once, either by `play` (simulated) or `set_winner`
    (assigned, e.g. when rebuilding a bracket from a code).
    """

    def __init__(self, home_team: Team, away_team: Team,
                 rule: ScoreRule | None = None,
                 rng: RandomSource | None = None):
        self.home_team = home_team
        self.away_team = away_team
        self.rule = rule if rule is not None else Additive(0)
        self.rng = rng if rng is not None else np.random.default_rng()
        self.outcome: Outcome | None = None

    def __repr__(self):
        return f"Game({self.home_team} vs {self.away_team})"

    @property
    def round_points(self) -> int:
        return self.rule.points

    @property
    def home_team_odds(self) -> float:
        return home_team_odds(self.home_team.rank, self.away_team.rank)

    @property
    def winner(self) -> Team | None:
        return self.outcome.winner if self.outcome else None

    @property
    def probability(self) -> float:
        return self.outcome.probability if self.outcome else 0.0

    @property
    def points(self) -> int:
        return self.outcome.points if self.outcome else 0

    @property
    def is_decided(self) -> bool:
        return self.outcome is not None

    @property
    def home_won(self) -> bool:
        if self.outcome is None:
            raise ValueError(f"{self!r} has not been decided")
        return self.outcome.winner is self.home_team

    def simulate(self) -> Team:
        """Weighted coin flip: home wins if the draw lands within its odds."""
        return self.home_team if self.rng.random() <= self.home_team_odds else self.away_team

    def play(self) -> Team:
        return self.set_winner(self.simulate())

    def set_winner(self, team: Team) -> Team:
        """Record the winner along with its probability and points.

        Calling again overwrites the previous result.
        """
        if team is self.home_team:
            home = True
        elif team is self.away_team:
            home = False
        elif team == self.home_team:
            home = True
        elif team == self.away_team:
            home = False
        else:
            raise ValueError(f"{team} is not playing in {self!r}")

        odds = self.home_team_odds
        winner = self.home_team if home else self.away_team
        self.outcome = Outcome(
            winner=winner,
            probability=odds if home else 1.0 - odds,
            points=score(self.rule, winner.rank),
        )
        return winner
