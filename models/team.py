"""Team data model."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from models.errors import MalformedImportError


@dataclass(frozen=True)
class Team:
    name: str
    rank: int  # 1 = strongest
    color: str | None = field(default=None, compare=False)  # display only

    def __str__(self):
        return f"#{self.rank} {self.name}"

    @property
    def key(self) -> str:
        """Aggregation key; teams with the same name and rank share it."""
        return str(self)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "rank": self.rank}
        if self.color:
            data["color"] = self.color
        return data

    @classmethod
    def from_dict(cls, record: Any) -> Team:
        """Build a team from an import record such as {"name": "Duke", "rank": 1}.

        Raises:
            MalformedImportError: if the name is missing or the rank is not a positive integer
        """
        if not isinstance(record, dict):
            raise MalformedImportError(f"Team record must be an object, got {record!r}")

        name = record.get("name")
        if not isinstance(name, str) or not name.strip():
            raise MalformedImportError(f"Team record has no name: {record!r}")

        rank = parse_rank(record.get("rank"))
        if rank is None:
            raise MalformedImportError(f"Team {name!r} has invalid rank: {record.get('rank')!r}")

        color = record.get("color")
        return cls(name=name.strip(), rank=rank, color=str(color) if color else None)


def parse_rank(value: Any) -> int | None:
    """Coerce a rank value to a positive int, or None if it isn't one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, float) and value.is_integer():
        return int(value) if value > 0 else None
    if isinstance(value, str) and value.strip().isdigit():
        rank = int(value.strip())
        return rank if rank > 0 else None
    return None
