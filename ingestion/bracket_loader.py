"""Bracket loader - read and write tournament import files.

Supports:
1. JSON import files ({"teams": [...], "first_four": [...]})
2. Programmatic construction of a standard regional field
"""

from __future__ import annotations

import json
import logging
import os

from config import SEED_ORDER, TournamentConfig
from models.errors import MalformedImportError
from models.game import RandomSource
from models.team import Team
from models.tournament import Tournament

logger = logging.getLogger(__name__)


def load_tournament_from_json(filepath: str, config: TournamentConfig | None = None,
                              rng: RandomSource | None = None) -> Tournament:
    """Load a tournament from a JSON import file.

    Expected format:
    {
        "year": 2026,
        "teams": [{"name": "Duke", "rank": 1}, {"name": "First Four", "rank": 16}, ...],
        "first_four": [{"name": "Howard", "rank": 16}, ...]
    }

    Raises:
        FileNotFoundError: if the file does not exist
        MalformedImportError: if the file is not valid JSON or a team record is invalid
    """
    with open(filepath, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as exc:
            raise MalformedImportError(f"{filepath} is not valid JSON: {exc}") from exc

    tournament = Tournament.from_payload(data, config=config, rng=rng)
    logger.info(
        "Loaded %s teams (%s play-in) from %s",
        len(tournament.teams), len(tournament.first_four), filepath,
    )
    return tournament


def save_tournament_to_json(tournament: Tournament, filepath: str):
    """Save a tournament's teams to an import file."""
    directory = os.path.dirname(filepath)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(tournament.to_payload(), f, indent=2)
    logger.info("Saved tournament to %s", filepath)


def build_regional_field(regions: dict[str, list[str]]) -> list[Team]:
    """Lay out regions of 16 teams in standard bracket order.

    Args:
        regions: {region name: team names ordered by seed, 1 first}

    Returns:
        Teams in opening-round order (1 vs 16, 8 vs 9, ...) region by region
    """
    field: list[Team] = []
    for region_name, names in regions.items():
        if len(names) != len(SEED_ORDER):
            raise MalformedImportError(
                f"Region {region_name} needs {len(SEED_ORDER)} teams, got {len(names)}"
            )
        for seed in SEED_ORDER:
            field.append(Team(name=names[seed - 1], rank=seed))
    return field
