"""Bracket simulator - CLI entry point.

Usage:
    python cli.py play [--file 64_team_test | teams.csv] [--sims 1] [--export] [--min-rank 16] [--seed 42]
    python cli.py show CODE [--file 64_team_test]
    python cli.py phrase "march madness" [--file 64_team_test]
    python cli.py advance [--sims 1000]
    python cli.py aggregate [--dir brackets/export]
"""

import argparse
import os
import sys

import numpy as np

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config import Settings, configure_logging, load_settings
from models.errors import ConfigurationError, InvalidCode, MalformedImportError


def load_tournament(settings: Settings, args):
    """Load the import file named on the command line (or the default one).

    `.csv` files go through the spreadsheet loader; anything else is JSON.
    """
    from ingestion.bracket_loader import load_tournament_from_json
    from ingestion.manual_entry import load_tournament_from_csv

    name = args.file or settings.default_import_file
    if not name.endswith((".json", ".csv")):
        name += ".json"
    path = name if os.path.isabs(name) else os.path.join(settings.import_dir, name)

    rng = np.random.default_rng(args.seed) if getattr(args, "seed", None) is not None else None
    if name.endswith(".csv"):
        return load_tournament_from_csv(path, config=settings.tournament_config(), rng=rng)
    return load_tournament_from_json(path, config=settings.tournament_config(), rng=rng)


def positive_int(value: str) -> int:
    """argparse type for simulation counts."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a whole number, got {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


# --- Commands ---

def cmd_play(settings: Settings, args) -> int:
    """Simulate the bracket one or more times."""
    from output.export import write_export
    from output.printer import print_bracket, print_summary_table

    tournament = load_tournament(settings, args)
    summaries = tournament.play(
        should_export=args.export,
        sims=args.sims,
        min_rank=args.min_rank,
        show_progress=args.sims > 1,
    )

    for summary in summaries:
        if summary.export is not None:
            write_export(summary.export, str(settings.export_dir))

    if args.sims == 1:
        print_bracket(tournament)
    else:
        print_summary_table(summaries)
        best = max(summaries, key=lambda s: s.projected_points)
        tournament.load_from_tourney_code(best.code)
        print_bracket(tournament)
    return 0


def cmd_show(settings: Settings, args) -> int:
    """Rebuild a bracket from its code."""
    from output.printer import print_bracket

    tournament = load_tournament(settings, args)
    tournament.load_from_tourney_code(args.code)
    print_bracket(tournament)
    return 0


def cmd_phrase(settings: Settings, args) -> int:
    """Turn a phrase into a bracket code and show that bracket."""
    from output.printer import print_bracket

    tournament = load_tournament(settings, args)
    code = tournament.create_code_from_phrase(args.phrase)
    print(f"Code for {args.phrase!r}: {code}")
    tournament.load_from_tourney_code(code)
    print_bracket(tournament)
    return 0


def cmd_advance(settings: Settings, args) -> int:
    """Monte Carlo odds of each team winning each round."""
    from output.printer import print_advancement
    from simulation.advancement import simulate_advancement

    tournament = load_tournament(settings, args)
    sims = args.sims or settings.default_simulations
    reach_probs = simulate_advancement(tournament, n_sims=sims)

    print(f"\nAdvancement odds over {sims} simulations:\n")
    print_advancement(reach_probs)
    return 0


def cmd_aggregate(settings: Settings, args) -> int:
    """Combine exported simulations into one consensus bracket."""
    from models.tournament import Tournament
    from output.export import load_exports, write_consensus
    from output.printer import print_consensus

    directory = args.dir or str(settings.export_dir)
    exports = load_exports(directory)
    if not exports:
        print(f"ERROR: No exports found in {directory}. Run 'python cli.py play --export' first.")
        return 1

    consensus = Tournament.aggregate(exports)
    if not consensus.sample_size:
        print(f"ERROR: None of the {len(exports)} exports in {directory} could be read.")
        return 1

    path = write_consensus(consensus, str(settings.results_dir))
    print_consensus(consensus)
    print(f"\nSaved consensus to {path}")
    return 0


# --- Main ---

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Single-elimination bracket simulator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Workflow:
  1. python cli.py play --sims 500 --export     # Simulate and export the best brackets
  2. python cli.py aggregate                     # Vote them into a consensus bracket
  3. python cli.py show 0a1b2c3d4e5f6            # Rebuild any bracket from its code
        """
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    def add_bracket_args(p, with_seed=True):
        p.add_argument("--file", help="Import file name in the import directory")
        if with_seed:
            p.add_argument("--seed", type=int, default=None, help="Random seed")

    # play
    p_play = subparsers.add_parser("play", help="Simulate the bracket")
    add_bracket_args(p_play)
    p_play.add_argument("--sims", type=positive_int, default=1)
    p_play.add_argument("--export", action="store_true", help="Export candidate brackets")
    p_play.add_argument("--min-rank", type=int, default=None,
                        help="Don't export brackets where a team of this rank wins a game")

    # show
    p_show = subparsers.add_parser("show", help="Rebuild a bracket from its code")
    p_show.add_argument("code")
    add_bracket_args(p_show, with_seed=False)

    # phrase
    p_phrase = subparsers.add_parser("phrase", help="Bracket code from a phrase")
    p_phrase.add_argument("phrase")
    add_bracket_args(p_phrase, with_seed=False)

    # advance
    p_adv = subparsers.add_parser("advance", help="Monte Carlo advancement odds")
    add_bracket_args(p_adv)
    p_adv.add_argument("--sims", type=positive_int, default=None)

    # aggregate
    p_agg = subparsers.add_parser("aggregate", help="Consensus bracket from exports")
    p_agg.add_argument("--dir", help="Directory of exported simulations")

    return parser


def main(argv=None) -> int:
    configure_logging()
    settings = load_settings()
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    commands = {
        "play": cmd_play,
        "show": cmd_show,
        "phrase": cmd_phrase,
        "advance": cmd_advance,
        "aggregate": cmd_aggregate,
    }

    try:
        return commands[args.command](settings, args)
    except InvalidCode as exc:
        print(f"ERROR: invalid code: {exc}", file=sys.stderr)
    except MalformedImportError as exc:
        print(f"ERROR: invalid import file: {exc}", file=sys.stderr)
    except FileNotFoundError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
    except ConfigurationError as exc:
        print(f"ERROR: configuration: {exc}", file=sys.stderr)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
