"""Monte Carlo round-by-round advancement odds.

Plays the bracket many times and counts how often each team wins a game in
each round. Conditional paths (who a team meets in round 2 depends on round 1)
come out of the simulation naturally.
"""

from __future__ import annotations

from tqdm import tqdm

from models.tournament import Tournament


def simulate_advancement(tournament: Tournament, n_sims: int = 1_000,
                         show_progress: bool = True) -> dict[str, dict[str, float]]:
    """Run the bracket `n_sims` times and tally winners per round.

    Args:
        tournament: Tournament to simulate; its results are reset on every run
        n_sims: Number of simulations to run
        show_progress: Show progress bar

    Returns:
        {team key: {round name: probability of winning a game in that round}},
        round names in play order
    """
    if n_sims <= 0:
        raise ValueError("n_sims must be greater than 0")

    win_counts: dict[str, dict[str, int]] = {}
    round_names: list[str] = []

    iterator = range(n_sims)
    if show_progress:
        iterator = tqdm(iterator, desc="Simulating tournaments")

    for _ in iterator:
        tournament.simulate_bracket()
        for r in tournament.played_rounds:
            if r.name not in round_names:
                round_names.append(r.name)
            for team in r.winners:
                counts = win_counts.setdefault(team.key, {})
                counts[r.name] = counts.get(r.name, 0) + 1

    # Convert counts to probabilities
    reach_probs: dict[str, dict[str, float]] = {}
    for key, counts in win_counts.items():
        reach_probs[key] = {name: counts.get(name, 0) / n_sims for name in round_names}

    return reach_probs


def championship_odds(reach_probs: dict[str, dict[str, float]]) -> list[tuple[str, float]]:
    """Teams sorted by how often they won the final round."""
    odds = []
    for key, probs in reach_probs.items():
        if probs:
            odds.append((key, list(probs.values())[-1]))
    odds.sort(key=lambda x: x[1], reverse=True)
    return odds
