"""CSV team loading.

Used when teams are kept in a spreadsheet instead of a JSON import file.
"""

from __future__ import annotations

import logging

import pandas as pd

from config import TournamentConfig
from models.errors import MalformedImportError
from models.game import RandomSource
from models.team import Team
from models.tournament import Tournament

logger = logging.getLogger(__name__)


def load_teams_from_csv(filepath: str) -> dict[str, list[Team]]:
    """Load tournament teams from a user-prepared CSV.

    Expected columns: name, rank [, color, first_four]
    Rows are taken in bracket order. Rows with a truthy first_four column
    (1, yes, true, x) go to the play-in list.

    Returns:
        {"teams": [...], "first_four": [...]}
    """
    df = pd.read_csv(filepath)
    df.columns = [str(c).strip().lower() for c in df.columns]

    missing = {"name", "rank"} - set(df.columns)
    if missing:
        raise MalformedImportError(f"{filepath} is missing columns: {', '.join(sorted(missing))}")

    teams: list[Team] = []
    first_four: list[Team] = []

    for _, row in df.iterrows():
        record = {"name": str(row["name"]).strip() if pd.notna(row["name"]) else ""}
        record["rank"] = row["rank"].item() if hasattr(row["rank"], "item") else row["rank"]
        if "color" in df.columns and pd.notna(row["color"]):
            record["color"] = str(row["color"]).strip()
        team = Team.from_dict(record)

        play_in = "first_four" in df.columns and _truthy(row["first_four"])
        (first_four if play_in else teams).append(team)

    return {"teams": teams, "first_four": first_four}


def load_tournament_from_csv(filepath: str, config: TournamentConfig | None = None,
                             rng: RandomSource | None = None) -> Tournament:
    """Build a tournament from a CSV laid out as for `load_teams_from_csv`."""
    loaded = load_teams_from_csv(filepath)
    tournament = Tournament(loaded["teams"], loaded["first_four"], config=config, rng=rng)
    logger.info(
        "Loaded %s teams (%s play-in) from %s",
        len(tournament.teams), len(tournament.first_four), filepath,
    )
    return tournament


def _truthy(value) -> bool:
    if pd.isna(value):
        return False
    return str(value).strip().lower() in {"1", "1.0", "yes", "y", "true", "x"}
