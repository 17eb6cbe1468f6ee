"""JSON export artifacts.

Exports are written one file per simulation, named by the millisecond
timestamp they were written at. Consensus results go to their own directory.
"""

from __future__ import annotations

import json
import logging
import os
import time
from typing import Any

from simulation.consensus import Consensus

logger = logging.getLogger(__name__)


def write_export(export: dict[str, Any], directory: str) -> str:
    """Write one simulation's winners to a new file in `directory`.

    Returns:
        Path of the written file
    """
    os.makedirs(directory, exist_ok=True)
    stamp = int(time.time() * 1000)
    filepath = os.path.join(directory, f"{stamp}.json")
    while os.path.exists(filepath):
        stamp += 1
        filepath = os.path.join(directory, f"{stamp}.json")

    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(export, f)
    logger.info("Exported bracket to %s", filepath)
    return filepath


def load_exports(directory: str) -> list[Any]:
    """Read every JSON export in `directory`, in filename order.

    Files that can't be read or parsed are skipped with a warning.
    """
    if not os.path.isdir(directory):
        return []

    exports = []
    for name in sorted(os.listdir(directory)):
        if not name.endswith(".json"):
            continue
        path = os.path.join(directory, name)
        try:
            with open(path, "r", encoding="utf-8") as f:
                exports.append(json.load(f))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Skipping unreadable export %s: %s", path, exc)

    logger.info("Loaded %s exports from %s", len(exports), directory)
    return exports


def write_consensus(consensus: Consensus, directory: str) -> str:
    """Write a consensus bracket to `directory`.

    Returns:
        Path of the written file
    """
    os.makedirs(directory, exist_ok=True)
    filepath = os.path.join(directory, f"consensus_{int(time.time() * 1000)}.json")
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(consensus.to_dict(), f, indent=2)
    logger.info("Wrote consensus of %s simulations to %s", consensus.sample_size, filepath)
    return filepath
