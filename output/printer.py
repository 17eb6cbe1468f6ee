"""Pretty-print bracket output."""

from __future__ import annotations

from tabulate import tabulate

from models.tournament import SimulationSummary, Tournament
from models.tourney_code import group_code
from simulation.advancement import championship_odds
from simulation.consensus import Consensus


def print_bracket(tournament: Tournament):
    """Print every round of a completed bracket, game by game."""
    print("\n" + "=" * 60)
    print(f"           {tournament.year} BRACKET")
    print("=" * 60)

    for r in tournament.played_rounds:
        print(f"\n--- {r.name.upper()} ---")
        for game in r.games:
            print(f"    {game.home_team} vs {game.away_team}  ->  {game.winner}"
                  f"  ({game.probability:.1%}, {game.points} pts)")

    print("\n" + "=" * 60)
    if tournament.winner:
        print(f"  CHAMPION: {tournament.winner}")
        print(f"  Code: {group_code(tournament.code, tournament.scheme)}")
    print("=" * 60)
    print_score(tournament)


def print_score(tournament: Tournament):
    """Print the score breakdown by round."""
    rows = [[r.name, len(r.games), r.points, f"{r.probability:.1%}"] for r in tournament.rounds]
    rows.append(["Total", sum(len(r.games) for r in tournament.rounds),
                 tournament.max_total_points, f"{tournament.probability:.1%}"])

    print()
    print(tabulate(rows, headers=["Round", "Games", "Points", "Avg probability"], tablefmt="simple"))
    print(f"\n  Projected points: {tournament.projected_points} / {tournament.max_total_points}")


def print_summary_table(summaries: list[SimulationSummary], limit: int = 15):
    """Print the best simulations of a batch by projected points."""
    print(f"\n=== TOP {min(limit, len(summaries))} OF {len(summaries)} SIMULATIONS ===\n")

    ranked = sorted(enumerate(summaries, 1), key=lambda x: x[1].projected_points, reverse=True)
    rows = []
    for i, s in ranked[:limit]:
        rows.append([i, str(s.winner), s.points, f"{s.probability:.1%}",
                     s.projected_points, s.code, "yes" if s.exported else ""])

    headers = ["Sim", "Champion", "Max pts", "Avg prob", "Projected", "Code", "Exported"]
    print(tabulate(rows, headers=headers, tablefmt="simple"))


def print_advancement(reach_probs: dict[str, dict[str, float]], limit: int = 15):
    """Print the teams most likely to win it all with their odds per round."""
    if not reach_probs:
        return
    round_names = list(next(iter(reach_probs.values())).keys())
    ranked = championship_odds(reach_probs)

    rows = [[key] + [f"{reach_probs[key].get(name, 0):.1%}" for name in round_names]
            for key, _ in ranked[:limit]]
    print(tabulate(rows, headers=["Team"] + round_names, tablefmt="simple"))


def print_consensus(consensus: Consensus):
    """Print consensus winners for every round."""
    print(f"\n=== CONSENSUS BRACKET ({consensus.sample_size} simulations) ===")
    for round_name, winners in consensus.rounds.items():
        print(f"\n--- {round_name.upper()} ---")
        rows = [[slot, f"#{w.rank} {w.name}", w.count, f"{w.count / consensus.sample_size:.1%}"]
                for slot, w in enumerate(winners)]
        print(tabulate(rows, headers=["Slot", "Team", "Votes", "Share"], tablefmt="simple"))
