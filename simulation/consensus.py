"""Consensus bracket from many exported simulations.

Each exported simulation maps round names to the ordered list of winners in
that round. Voting slot by slot across many of them picks the most common
winner for every game. Because single simulations lean toward stronger teams,
more samples push the consensus toward chalk.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from models.team import parse_rank

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlotWinner:
    name: str
    rank: int
    count: int

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "rank": self.rank, "count": self.count}


@dataclass
class Consensus:
    rounds: dict[str, list[SlotWinner]] = field(default_factory=dict)
    sample_size: int = 0

    @property
    def winner(self) -> SlotWinner | None:
        """Consensus pick in the last round, if it has a single slot."""
        if not self.rounds:
            return None
        last = list(self.rounds.values())[-1]
        return last[0] if len(last) == 1 else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "sample_size": self.sample_size,
            "winners": {
                name: [w.to_dict() for w in winners]
                for name, winners in self.rounds.items()
            },
        }


def aggregate_winners(artifacts: Iterable[Any]) -> Consensus:
    """Pick the most frequent winner for every round and slot.

    Ties go to the lower (stronger) rank, then to the name in alphabetical order.
    Artifacts that aren't well-formed are skipped whole.

    Args:
        artifacts: Exported simulations, each {round_name: [{"name", "rank"}, ...]}

    Returns:
        Consensus winners per round and the number of artifacts counted
    """
    # round name -> slot index -> (name, rank) -> votes
    tallies: dict[str, list[Counter]] = {}
    sample_size = 0

    for i, artifact in enumerate(artifacts):
        parsed = _parse_artifact(artifact)
        if parsed is None:
            logger.warning("Skipping malformed simulation export #%s", i)
            continue

        sample_size += 1
        for round_name, winners in parsed.items():
            slots = tallies.setdefault(round_name, [])
            while len(slots) < len(winners):
                slots.append(Counter())
            for slot, key in enumerate(winners):
                slots[slot][key] += 1

    rounds: dict[str, list[SlotWinner]] = {}
    for round_name, slots in tallies.items():
        rounds[round_name] = [_pick(counter) for counter in slots]

    logger.info("Built consensus bracket from %s simulations", sample_size)
    return Consensus(rounds=rounds, sample_size=sample_size)


def _pick(counter: Counter) -> SlotWinner:
    (name, rank), count = min(counter.items(), key=lambda item: (-item[1], item[0][1], item[0][0]))
    return SlotWinner(name=name, rank=rank, count=count)


def _parse_artifact(artifact: Any) -> dict[str, list[tuple[str, int]]] | None:
    if not isinstance(artifact, Mapping):
        return None

    parsed: dict[str, list[tuple[str, int]]] = {}
    for round_name, winners in artifact.items():
        if not isinstance(round_name, str) or not isinstance(winners, list):
            return None
        keys = []
        for record in winners:
            if not isinstance(record, Mapping):
                return None
            name = record.get("name")
            rank = parse_rank(record.get("rank"))
            if not isinstance(name, str) or not name or rank is None:
                return None
            keys.append((name, rank))
        parsed[round_name] = keys
    return parsed
