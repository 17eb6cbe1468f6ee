import pytest

from ingestion.bracket_loader import build_regional_field
from models.team import Team


class FixedRandom:
    """Random source that always draws the same value."""

    def __init__(self, value: float) -> None:
        self.value = value
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        return self.value


def _region(prefix: str) -> list[str]:
    names = [f"{prefix} {seed}" for seed in range(1, 17)]
    names[15] = "First Four"
    return names


@pytest.fixture
def fixed_rng():
    return FixedRandom


@pytest.fixture
def field_64() -> list[Team]:
    return build_regional_field({region: _region(region) for region in ("East", "West", "South", "Midwest")})


@pytest.fixture
def first_four_8() -> list[Team]:
    return [Team(name=f"Play-in {i}", rank=16) for i in range(1, 9)]


@pytest.fixture
def eight_teams() -> list[Team]:
    # Bracket order: 1v8, 4v5, 3v6, 2v7
    return [Team(name=f"Team {rank}", rank=rank) for rank in (1, 8, 4, 5, 3, 6, 2, 7)]
