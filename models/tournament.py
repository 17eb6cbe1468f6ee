"""Tournament orchestration.

A Tournament takes the teams of the opening round (in bracket order) plus an
optional list of play-in ("First Four") teams and plays rounds until a single
champion is left. Every completed bracket has a code: one bit per game in
play order (0 = home won, 1 = away won), written in a larger radix. Loading a
code rebuilds the same bracket without any randomness.

Lifecycle: EMPTY -> IN_PROGRESS -> COMPLETE. `reset()` returns to EMPTY so a
single Tournament can run many independent simulations.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any

import numpy as np
from tqdm import tqdm

from config import TournamentConfig
from models.errors import ConfigurationError, MalformedImportError
from models.game import Game, RandomSource
from models.round import Round
from models.scoring import make_score_rule
from models.team import Team, parse_rank
from models.tourney_code import (
    CodeScheme,
    code_from_phrase,
    decode_code,
    encode_bits,
    get_scheme,
)
from simulation.consensus import Consensus, aggregate_winners

logger = logging.getLogger(__name__)


class TournamentState(Enum):
    EMPTY = "empty"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


@dataclass(frozen=True)
class SimulationSummary:
    winner: Team
    points: int
    probability: float
    projected_points: int
    code: str
    exported: bool = False
    export: dict[str, list[dict[str, Any]]] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "winner": {"name": self.winner.name, "rank": self.winner.rank},
            "points": self.points,
            "probability": self.probability,
            "projected_points": self.projected_points,
            "code": self.code,
        }


class Tournament:
    """A single-elimination bracket."""

    def __init__(self, teams: Sequence[Team], first_four: Sequence[Team] | None = None,
                 config: TournamentConfig | None = None,
                 rng: RandomSource | None = None,
                 year: int | None = None):
        self.config = config or TournamentConfig()
        self.year = year if year is not None else date.today().year
        self.rng = rng if rng is not None else np.random.default_rng()

        self._seed_teams = _check_teams(teams, "teams")
        self.first_four = _check_teams(first_four or [], "first_four")
        self._validate()

        self.scheme = get_scheme(self.config.code_scheme, self.config.code_length)
        # Fail now if codes can't hold this many games
        self.scheme.code_length(self.bit_length)

        self.reset()

    @classmethod
    def from_payload(cls, payload: Any, config: TournamentConfig | None = None,
                     rng: RandomSource | None = None) -> Tournament:
        """Build a tournament from an import payload.

        Expected format:
        {
            "year": 2026,                     (optional)
            "teams": [{"name": "Duke", "rank": 1}, ...],
            "first_four": [{"name": "Howard", "rank": 16}, ...]   (optional)
        }

        Raises:
            MalformedImportError: if the payload or any team record is invalid
        """
        if not isinstance(payload, Mapping):
            raise MalformedImportError("Import payload must be an object")

        teams_data = payload.get("teams")
        if not isinstance(teams_data, list) or not teams_data:
            raise MalformedImportError("Import payload needs a non-empty 'teams' list")

        first_four_data = payload.get("first_four") or []
        if not isinstance(first_four_data, list):
            raise MalformedImportError("'first_four' must be a list")

        year = payload.get("year")
        if year is not None and (isinstance(year, bool) or not isinstance(year, int)):
            raise MalformedImportError(f"Invalid year: {year!r}")

        teams = [Team.from_dict(record) for record in teams_data]
        first_four = [Team.from_dict(record) for record in first_four_data]
        return cls(teams, first_four, config=config, rng=rng, year=year)

    def to_payload(self) -> dict[str, Any]:
        return {
            "year": self.year,
            "teams": [team.to_dict() for team in self._seed_teams],
            "first_four": [team.to_dict() for team in self.first_four],
        }

    def _validate(self):
        n = len(self._seed_teams)
        if n & (n - 1):
            raise ConfigurationError(f"Team count must be a power of two, got {n}")
        if len(self.first_four) % 2:
            raise MalformedImportError(
                f"First Four needs an even number of teams, got {len(self.first_four)}"
            )
        if len(self.config.round_names) != len(self.config.round_points):
            raise ConfigurationError("Round names and round points tables differ in length")
        if self.round_count > len(self.config.round_names):
            raise ConfigurationError(
                f"{n} teams need {self.round_count} rounds but only "
                f"{len(self.config.round_names)} are configured"
            )
        make_score_rule(self.config.score_operator, 0)

    # --- Structure ---

    @property
    def teams(self) -> list[Team]:
        """Opening-round teams, with play-in winners seated once the First Four is played."""
        return self._teams

    @property
    def round_count(self) -> int:
        return len(self._seed_teams).bit_length() - 1

    @property
    def bit_length(self) -> int:
        """Games in a full bracket, including the First Four."""
        return len(self.first_four) // 2 + len(self._seed_teams) - 1

    @property
    def played_rounds(self) -> list[Round]:
        """First Four (if played) followed by the elimination rounds."""
        rounds = [self.first_four_round] if self.first_four_round else []
        return rounds + self.rounds

    @property
    def state(self) -> TournamentState:
        if self.winner is not None:
            return TournamentState.COMPLETE
        if self.rounds or self.first_four_round:
            return TournamentState.IN_PROGRESS
        return TournamentState.EMPTY

    def reset(self):
        """Clear all results so the bracket can be played again."""
        self._teams = list(self._seed_teams)
        self.first_four_round: Round | None = None
        self.first_four_winners: list[Team] = []
        self.rounds: list[Round] = []
        self.winner: Team | None = None
        self.code: str | None = None
        self.max_total_points = 0
        self.probability = 0.0
        self.projected_points = 0

    def build_round(self, round_teams: Sequence[Team], round_name: str | None = None,
                    round_points: int | None = None) -> Round:
        """Pair consecutive teams into the games of a round.

        Name and points default to the configured entry for the next round.
        """
        index = len(self.rounds)
        if round_name is None or round_points is None:
            if index >= len(self.config.round_names):
                raise ConfigurationError(f"No round configured at index {index}")
            if round_name is None:
                round_name = self.config.round_names[index]
            if round_points is None:
                round_points = self.config.round_points[index]

        if len(round_teams) % 2:
            raise ConfigurationError(f"{round_name} has an odd number of teams ({len(round_teams)})")

        rule = make_score_rule(self.config.score_operator, round_points)
        games = [
            Game(round_teams[i], round_teams[i + 1], rule=rule, rng=self.rng)
            for i in range(0, len(round_teams), 2)
        ]
        return Round(games, round_name, round_index=index, rule=rule)

    def play_in_slots(self) -> list[int]:
        """Indices of opening-round slots filled by First Four winners.

        Slots are teams named like the placeholder; without any, teams of the
        play-in rank.
        """
        named = [i for i, team in enumerate(self._seed_teams)
                 if team.name == self.config.play_in_slot_name]
        if named:
            return named
        return [i for i, team in enumerate(self._seed_teams)
                if team.rank == self.config.play_in_slot_rank]

    def _build_first_four(self) -> Round:
        self.first_four_round = self.build_round(self.first_four, self.config.first_four_name, 0)
        return self.first_four_round

    def _seat_play_in_winners(self, winners: Sequence[Team]):
        self.first_four_winners = list(winners)
        slots = self.play_in_slots()
        if len(slots) != len(winners):
            logger.warning(
                "%s play-in winners for %s play-in slots; seating in slot order",
                len(winners), len(slots),
            )
        for slot, team in zip(slots, winners):
            self._teams[slot] = team

    # --- Simulation ---

    def simulate_first_four(self) -> list[Team]:
        """Play the First Four and seat its winners in the opening round.

        Returns:
            First Four winners in game order (empty without play-in teams)
        """
        if not self.first_four:
            return []
        winners = self._build_first_four().play()
        self._seat_play_in_winners(winners)
        return self.first_four_winners

    def simulate(self) -> list[Team]:
        """Play the current round and queue the next one, or crown the champion."""
        if not self.rounds:
            raise ValueError("No round to play; call simulate_bracket() first")
        winners = self.rounds[-1].play()
        if len(winners) > 1:
            self.rounds.append(self.build_round(winners))
        else:
            self.winner = winners[0]
        return winners

    def simulate_bracket(self) -> Team:
        """Reset and play one full bracket.

        Returns:
            Champion
        """
        self.reset()
        self.simulate_first_four()

        if len(self._teams) == 1:
            self.winner = self._teams[0]
        else:
            self.rounds.append(self.build_round(self._teams))
            while self.winner is None:
                self.simulate()

        self._score()
        self.code = self.to_tourney_code()
        logger.debug("%s tournament winner: %s (%s)", self.year, self.winner, self.code)
        return self.winner

    def play(self, should_export: bool = False, sims: int = 1, min_rank: int | None = None,
             show_progress: bool = False) -> list[SimulationSummary]:
        """Simulate the bracket `sims` times in sequence.

        A run is an export candidate when no elimination-round winner has rank
        `min_rank` and its projected points reach the best seen so far in
        this batch.

        Args:
            should_export: attach the export payload to candidate runs
            sims: number of independent simulations
            min_rank: rank that disqualifies a run from export when it wins a game
            show_progress: show a progress bar

        Returns:
            One summary per simulation, in order
        """
        if sims < 1:
            raise ValueError(f"sims must be at least 1, got {sims}")

        summaries: list[SimulationSummary] = []
        best: int | None = None

        iterator: Iterable[int] = range(sims)
        if show_progress:
            iterator = tqdm(iterator, desc="Simulating brackets")

        for _ in iterator:
            self.simulate_bracket()

            candidate = self._passes_rank_filter(min_rank) and (
                best is None or self.projected_points >= best
            )
            if candidate:
                best = self.projected_points

            export = self.export() if should_export and candidate else None
            summaries.append(self.summary(export))

        logger.info(
            "%s tournament: %s simulation(s), best projected points %s, %s exported",
            self.year, sims, best, sum(1 for s in summaries if s.exported),
        )
        return summaries

    def _passes_rank_filter(self, min_rank: int | None) -> bool:
        if min_rank is None:
            return True
        return all(team.rank != min_rank for r in self.rounds for team in r.winners)

    def _score(self):
        """Score the bracket.

        projected_points multiplies the bracket-wide mean probability by the
        maximum points; it is a rough heuristic, not a per-round expectation.
        """
        self.max_total_points = sum(r.points for r in self.rounds)
        probabilities = [game.probability for r in self.rounds for game in r.games]
        self.probability = sum(probabilities) / len(probabilities) if probabilities else 0.0
        self.projected_points = math.floor(self.probability * self.max_total_points)

    def summary(self, export: dict[str, list[dict[str, Any]]] | None = None) -> SimulationSummary:
        if self.winner is None or self.code is None:
            raise ValueError("Tournament has not been played")
        return SimulationSummary(
            winner=self.winner,
            points=self.max_total_points,
            probability=self.probability,
            projected_points=self.projected_points,
            code=self.code,
            exported=export is not None,
            export=export,
        )

    def export(self, detailed: bool | None = None) -> dict[str, list[dict[str, Any]]]:
        """Winners of every round keyed by round name, in play order.

        Args:
            detailed: include each game's probability and points
                (defaults to the config's detailed_export)
        """
        if self.winner is None:
            raise ValueError("Tournament has not been played")
        if detailed is None:
            detailed = self.config.detailed_export

        out: dict[str, list[dict[str, Any]]] = {}
        for r in self.played_rounds:
            if detailed:
                out[r.name] = [outcome.to_dict() for outcome in r.outcomes]
            else:
                out[r.name] = [{"name": t.name, "rank": t.rank} for t in r.winners]
        return out

    # --- Codes ---

    def _scheme(self, scheme: CodeScheme | str | None) -> CodeScheme:
        if scheme is None:
            return self.scheme
        if isinstance(scheme, str):
            return get_scheme(scheme, self.config.code_length)
        return scheme

    def tourney_bits(self) -> str:
        """One bit per game in play order: "0" home won, "1" away won."""
        if self.winner is None:
            raise ValueError("Tournament has not been played")
        return "".join(
            "0" if game.home_won else "1"
            for r in self.played_rounds
            for game in r.games
        )

    def to_tourney_code(self, scheme: CodeScheme | str | None = None) -> str:
        return encode_bits(self.tourney_bits(), self._scheme(scheme))

    def load_from_tourney_code(self, code: str, scheme: CodeScheme | str | None = None) -> Team:
        """Rebuild the bracket a code describes, without simulating.

        The code is fully validated before any state changes.

        Raises:
            InvalidCode: if the code does not decode for this bracket

        Returns:
            Champion
        """
        scheme = self._scheme(scheme)
        bits = decode_code(code, self.bit_length, scheme)

        self.reset()
        cursor = 0
        if self.first_four:
            ff_round = self._build_first_four()
            cursor = _apply_bits(ff_round, bits, cursor)
            self._seat_play_in_winners(ff_round.winners)

        field = self._teams
        while len(field) > 1:
            next_round = self.build_round(field)
            self.rounds.append(next_round)
            cursor = _apply_bits(next_round, bits, cursor)
            field = next_round.winners

        self.winner = field[0]
        self._score()
        self.code = encode_bits(bits, scheme)
        logger.debug("Loaded %s from code %s: winner %s", self.year, self.code, self.winner)
        return self.winner

    def create_code_from_phrase(self, phrase: str, scheme: CodeScheme | str | None = None) -> str:
        """Deterministic bracket code for a phrase. No games are played."""
        return code_from_phrase(phrase, self.bit_length, self._scheme(scheme))

    @staticmethod
    def aggregate(artifacts: Iterable[Any]) -> Consensus:
        """Consensus bracket from many exports; see `simulation.consensus`."""
        return aggregate_winners(artifacts)


def _apply_bits(round_: Round, bits: str, cursor: int) -> int:
    winners = [
        game.away_team if bits[cursor + i] == "1" else game.home_team
        for i, game in enumerate(round_.games)
    ]
    round_.set_winners(winners)
    return cursor + len(round_.games)


def _check_teams(teams: Iterable[Any], label: str) -> list[Team]:
    teams = list(teams)
    for team in teams:
        if not isinstance(team, Team):
            raise MalformedImportError(f"{label} must contain Team objects, got {team!r}")
        if parse_rank(team.rank) != team.rank:
            raise MalformedImportError(f"{team.name!r} has invalid rank: {team.rank!r}")
    if label == "teams" and not teams:
        raise MalformedImportError("A tournament needs at least one team")
    return teams
