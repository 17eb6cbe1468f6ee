"""Win probability and round scoring rules."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from models.errors import ConfigurationError
from models.team import Team


def home_team_odds(home_rank: int, away_rank: int) -> float:
    """Probability that the home team wins, weighted by the inverse rank ratio.

    Each team gets the other team's share of the combined rank, so a #1 playing
    a #7 wins 7 / 8 == 0.875 of the time.

    Args:
        home_rank: Home team's rank (1 = strongest)
        away_rank: Away team's rank

    Returns:
        Probability that home wins (0-1)
    """
    return float(away_rank) / (float(home_rank) + float(away_rank))


@dataclass(frozen=True)
class Additive:
    points: int


@dataclass(frozen=True)
class Multiplicative:
    points: int


@dataclass(frozen=True)
class Subtractive:
    points: int


ScoreRule = Union[Additive, Multiplicative, Subtractive]

SCORE_OPERATORS = {"+": Additive, "*": Multiplicative, "-": Subtractive}


def make_score_rule(operator: str, points: int) -> ScoreRule:
    """Build the score rule for a round from its operator symbol."""
    try:
        rule_cls = SCORE_OPERATORS[operator]
    except KeyError:
        raise ConfigurationError(f"Unknown score operator: {operator!r}") from None
    return rule_cls(points)


def score(rule: ScoreRule, rank: int) -> int:
    """Points awarded when a team of this rank wins under the rule."""
    if isinstance(rule, Additive):
        return rank + rule.points
    if isinstance(rule, Multiplicative):
        return rank * rule.points
    if isinstance(rule, Subtractive):
        return rank - rule.points
    raise TypeError(f"Not a score rule: {rule!r}")


@dataclass(frozen=True)
class Outcome:
    """Result of one decided game."""

    winner: Team
    probability: float  # modeled likelihood of this winner
    points: int

    def to_dict(self) -> dict:
        return {
            "name": self.winner.name,
            "rank": self.winner.rank,
            "probability": self.probability,
            "points": self.points,
        }
