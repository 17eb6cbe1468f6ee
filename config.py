"""Central configuration for the bracket simulator."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Round display names in play order, one per elimination level
ROUND_NAMES = (
    "First Round",
    "Second Round",
    "Sweet Sixteen",
    "Elite Eight",
    "Final Four",
    "Championship",
)

# Points for correctly picking a winner in each round
ROUND_POINTS = (1, 2, 4, 8, 16, 32)

# How round points combine with the winner's rank: "+", "*" or "-"
SCORE_OPERATOR = "+"

FIRST_FOUR_NAME = "First Four"

# Play-in winners replace teams named PLAY_IN_SLOT_NAME, or failing that, teams of this rank
PLAY_IN_SLOT_NAME = "First Four"
PLAY_IN_SLOT_RANK = 16

# Codes: radix 36, always 13 characters (enough for 67 games)
CODE_SCHEME = "radix36"
CODE_LENGTH = 13

DEFAULT_SIMULATIONS = 1_000
DEFAULT_IMPORT_FILE = "64_team_test.json"

# Seeds placed in bracket order within a region
SEED_ORDER = [1, 16, 8, 9, 5, 12, 4, 13, 6, 11, 3, 14, 7, 10, 2, 15]


@dataclass(frozen=True)
class TournamentConfig:
    """Immutable settings handed to a Tournament."""

    round_names: tuple[str, ...] = ROUND_NAMES
    round_points: tuple[int, ...] = ROUND_POINTS
    score_operator: str = SCORE_OPERATOR
    first_four_name: str = FIRST_FOUR_NAME
    play_in_slot_name: str = PLAY_IN_SLOT_NAME
    play_in_slot_rank: int = PLAY_IN_SLOT_RANK
    code_scheme: str = CODE_SCHEME
    code_length: int = CODE_LENGTH
    detailed_export: bool = False


@dataclass(frozen=True)
class Settings:
    project_root: Path
    brackets_dir: Path
    import_dir: Path
    export_dir: Path
    results_dir: Path
    default_import_file: str
    default_simulations: int
    code_scheme: str

    @staticmethod
    def from_env() -> "Settings":
        project_root = Path(__file__).resolve().parent
        brackets_dir = Path(os.getenv("BRACKETS_DIR", str(project_root / "brackets")))
        return Settings(
            project_root=project_root,
            brackets_dir=brackets_dir,
            import_dir=brackets_dir / "import",
            export_dir=brackets_dir / "export",
            results_dir=brackets_dir / "results",
            default_import_file=os.getenv("DEFAULT_IMPORT_FILE", DEFAULT_IMPORT_FILE),
            default_simulations=int(os.getenv("SIMULATIONS", str(DEFAULT_SIMULATIONS))),
            code_scheme=os.getenv("CODE_SCHEME", CODE_SCHEME),
        )

    def tournament_config(self) -> TournamentConfig:
        return TournamentConfig(code_scheme=self.code_scheme)


def configure_logging() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO"),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def load_settings() -> Settings:
    settings = Settings.from_env()
    load_dotenv(dotenv_path=settings.project_root / ".env", override=False)
    load_dotenv(override=False)
    return Settings.from_env()
