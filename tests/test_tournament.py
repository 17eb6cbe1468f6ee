import numpy as np
import pytest

from config import TournamentConfig
from models.errors import ConfigurationError, InvalidCode, MalformedImportError
from models.team import Team
from models.tournament import Tournament, TournamentState


def _winners(tournament: Tournament) -> list[list[Team]]:
    return [list(r.winners) for r in tournament.played_rounds]


def test_chalk_bracket_scores(eight_teams, fixed_rng) -> None:
    tournament = Tournament(eight_teams, rng=fixed_rng(0.0), year=2025)

    champion = tournament.simulate_bracket()

    assert champion == Team("Team 1", 1)
    assert [r.name for r in tournament.rounds] == ["First Round", "Second Round", "Sweet Sixteen"]
    assert [len(r.games) for r in tournament.rounds] == [4, 2, 1]
    # (2 + 5 + 4 + 3) + (3 + 5) + 5
    assert tournament.max_total_points == 27
    expected = (8 / 9 + 5 / 9 + 6 / 9 + 7 / 9 + 4 / 5 + 2 / 5 + 3 / 4) / 7
    assert tournament.probability == pytest.approx(expected)
    assert tournament.projected_points == 18
    assert tournament.code == "0" * 13
    assert tournament.state is TournamentState.COMPLETE


def test_full_bracket_reduces_to_one_winner(field_64, first_four_8) -> None:
    tournament = Tournament(field_64, first_four_8, rng=np.random.default_rng(3))
    tournament.simulate_bracket()

    assert len(tournament.rounds) == 6
    for k, r in enumerate(tournament.rounds):
        assert len(r.games) == 64 // 2 ** (k + 1)
        assert len(r.winners) == len(r.games)
        assert r.is_complete
    assert tournament.rounds[-1].winners == [tournament.winner]
    assert len(tournament.first_four_round.games) == 4
    assert tournament.bit_length == 67
    assert len(tournament.tourney_bits()) == 67


def test_scores_add_up_across_rounds(field_64) -> None:
    tournament = Tournament(field_64, rng=np.random.default_rng(11))
    tournament.simulate_bracket()

    games = [g for r in tournament.rounds for g in r.games]
    assert tournament.max_total_points == sum(g.points for g in games)
    assert tournament.max_total_points == sum(r.points for r in tournament.rounds)
    assert tournament.probability == pytest.approx(sum(g.probability for g in games) / len(games))
    assert all(0.0 <= g.probability <= 1.0 for g in games)
    assert tournament.projected_points == int(tournament.probability * tournament.max_total_points)


def test_first_four_winners_fill_placeholders(field_64, first_four_8, fixed_rng) -> None:
    tournament = Tournament(field_64, first_four_8, rng=fixed_rng(0.0))
    slots = tournament.play_in_slots()
    assert slots == [1, 17, 33, 49]

    winners = tournament.simulate_first_four()

    assert winners == [first_four_8[0], first_four_8[2], first_four_8[4], first_four_8[6]]
    assert [tournament.teams[i] for i in slots] == winners
    assert len(tournament.teams) == 64
    assert tournament.state is TournamentState.IN_PROGRESS

    tournament.reset()
    assert tournament.teams == field_64
    assert tournament.state is TournamentState.EMPTY


def test_fewer_play_in_winners_than_slots(field_64, fixed_rng) -> None:
    first_four = [Team(f"Play-in {i}", 16) for i in range(4)]
    tournament = Tournament(field_64, first_four, rng=fixed_rng(0.0))

    tournament.simulate_first_four()

    assert tournament.teams[1] == first_four[0]
    assert tournament.teams[17] == first_four[2]
    assert tournament.teams[33].name == "First Four"
    assert tournament.teams[49].name == "First Four"
    assert len(tournament.teams) == 64


def test_play_in_slots_fall_back_to_rank(eight_teams) -> None:
    teams = list(eight_teams)
    teams[1] = Team("Sixteen", 16)
    config = TournamentConfig(play_in_slot_name="TBD")
    tournament = Tournament(teams, [Team("X", 16), Team("Y", 16)], config=config)
    assert tournament.play_in_slots() == [1]


def test_code_round_trip(field_64, first_four_8) -> None:
    played = Tournament(field_64, first_four_8, rng=np.random.default_rng(42))
    summary = played.play()[0]
    assert len(summary.code) == 13

    loaded = Tournament(field_64, first_four_8, rng=np.random.default_rng(0))
    assert loaded.load_from_tourney_code(summary.code) == played.winner

    assert _winners(loaded) == _winners(played)
    assert loaded.code == summary.code
    assert loaded.to_tourney_code() == summary.code
    assert loaded.max_total_points == played.max_total_points
    assert loaded.probability == played.probability
    assert loaded.projected_points == played.projected_points


def test_base64_code_round_trip(field_64, first_four_8) -> None:
    played = Tournament(field_64, first_four_8, rng=np.random.default_rng(5))
    played.simulate_bracket()
    code = played.to_tourney_code("base64")
    assert len(code) == 12

    loaded = Tournament(field_64, first_four_8)
    loaded.load_from_tourney_code(code, scheme="base64")
    assert _winners(loaded) == _winners(played)
    assert loaded.to_tourney_code("base64") == code


def test_decode_is_deterministic(field_64, first_four_8) -> None:
    tournament = Tournament(field_64, first_four_8)
    code = tournament.create_code_from_phrase("march madness")

    tournament.load_from_tourney_code(code)
    first = (_winners(tournament), tournament.max_total_points, tournament.probability)
    tournament.load_from_tourney_code(code)
    second = (_winners(tournament), tournament.max_total_points, tournament.probability)

    assert first == second


def test_away_wins_everything(eight_teams, fixed_rng) -> None:
    tournament = Tournament(eight_teams, rng=fixed_rng(0.999))
    tournament.simulate_bracket()

    assert tournament.tourney_bits() == "1111111"
    assert tournament.winner == Team("Team 7", 7)
    assert tournament.code == "000000000003j"  # 127 in radix 36


def test_phrase_code_needs_no_simulation(field_64, first_four_8) -> None:
    tournament = Tournament(field_64, first_four_8)

    code = tournament.create_code_from_phrase("march madness")

    assert code == tournament.create_code_from_phrase("march madness")
    assert code != tournament.create_code_from_phrase("final four")
    assert len(code) == 13
    assert tournament.state is TournamentState.EMPTY
    tournament.load_from_tourney_code(code)
    assert tournament.code == code


def test_invalid_code_leaves_state_untouched(field_64, first_four_8) -> None:
    tournament = Tournament(field_64, first_four_8, rng=np.random.default_rng(9))
    tournament.simulate_bracket()
    before = (tournament.code, tournament.winner, _winners(tournament), tournament.teams)

    for bad in ("abc1234567", "abc12345678!z", "zzzzzzzzzzzzz", "0" * 14):
        with pytest.raises(InvalidCode):
            tournament.load_from_tourney_code(bad)

    assert (tournament.code, tournament.winner, _winners(tournament), tournament.teams) == before


def test_code_accepts_display_grouping_and_case(eight_teams, fixed_rng) -> None:
    tournament = Tournament(eight_teams, rng=fixed_rng(0.999))
    tournament.simulate_bracket()

    other = Tournament(eight_teams)
    other.load_from_tourney_code("0000-0000-0003-J")
    assert other.winner == tournament.winner


def test_play_returns_summary_per_simulation(field_64, first_four_8) -> None:
    tournament = Tournament(field_64, first_four_8, rng=np.random.default_rng(7))

    summaries = tournament.play(should_export=True, sims=20)

    assert len(summaries) == 20
    best = None
    for s in summaries:
        candidate = best is None or s.projected_points >= best
        if candidate:
            best = s.projected_points
        assert s.exported == candidate
        assert (s.export is not None) == candidate
    assert summaries[0].exported
    assert summaries[-1].code == tournament.code


def test_min_rank_blocks_export(eight_teams, fixed_rng) -> None:
    tournament = Tournament(eight_teams, rng=fixed_rng(0.0))

    assert all(s.exported for s in tournament.play(should_export=True, sims=3))
    assert not any(s.exported for s in tournament.play(should_export=True, sims=3, min_rank=1))
    assert all(s.exported for s in tournament.play(should_export=True, sims=3, min_rank=7))
    assert not any(s.exported for s in tournament.play(sims=3))


def test_play_requires_a_simulation(eight_teams) -> None:
    with pytest.raises(ValueError):
        Tournament(eight_teams).play(sims=0)


def test_export_lists_winners_by_round(field_64, first_four_8) -> None:
    tournament = Tournament(field_64, first_four_8, rng=np.random.default_rng(1))
    tournament.simulate_bracket()

    export = tournament.export()

    assert list(export) == [
        "First Four", "First Round", "Second Round", "Sweet Sixteen",
        "Elite Eight", "Final Four", "Championship",
    ]
    assert export["Championship"] == [{"name": tournament.winner.name, "rank": tournament.winner.rank}]
    assert len(export["First Round"]) == 32

    detailed = tournament.export(detailed=True)
    record = detailed["Championship"][0]
    assert set(record) == {"name", "rank", "probability", "points"}
    assert record["points"] == tournament.winner.rank + 32


def test_export_before_play_fails(eight_teams) -> None:
    with pytest.raises(ValueError):
        Tournament(eight_teams).export()


def test_configuration_errors(eight_teams) -> None:
    with pytest.raises(ConfigurationError):
        Tournament(eight_teams[:6])
    with pytest.raises(ConfigurationError):
        Tournament([Team(f"T{i}", i + 1) for i in range(128)])
    with pytest.raises(ConfigurationError):
        Tournament(eight_teams, config=TournamentConfig(round_points=(1, 2)))
    with pytest.raises(ConfigurationError):
        Tournament(eight_teams, config=TournamentConfig(score_operator="%"))
    with pytest.raises(ConfigurationError):
        Tournament(eight_teams, config=TournamentConfig(code_scheme="hex"))


def test_code_length_too_short_for_field(field_64) -> None:
    with pytest.raises(ConfigurationError):
        Tournament(field_64, config=TournamentConfig(code_length=10))


def test_malformed_import(eight_teams) -> None:
    with pytest.raises(MalformedImportError):
        Tournament(eight_teams, eight_teams[:3])
    with pytest.raises(MalformedImportError):
        Tournament([])
    with pytest.raises(MalformedImportError):
        Tournament.from_payload({"teams": [{"name": "A"}]})
    with pytest.raises(MalformedImportError):
        Tournament.from_payload({"teams": [{"name": "A", "rank": 0}]})
    with pytest.raises(MalformedImportError):
        Tournament.from_payload({"teams": [{"rank": 1}]})
    with pytest.raises(MalformedImportError):
        Tournament.from_payload({"teams": []})
    with pytest.raises(MalformedImportError):
        Tournament.from_payload(["not", "a", "payload"])


def test_from_payload(eight_teams) -> None:
    payload = {
        "year": 2024,
        "teams": [{"name": t.name, "rank": str(t.rank)} for t in eight_teams],
        "first_four": None,
    }
    tournament = Tournament.from_payload(payload)

    assert tournament.teams == eight_teams
    assert tournament.first_four == []
    assert tournament.year == 2024
    assert Tournament.from_payload(tournament.to_payload()).teams == eight_teams


def test_single_team_is_champion() -> None:
    tournament = Tournament([Team("Solo", 1)])
    assert tournament.simulate_bracket() == Team("Solo", 1)
    assert tournament.rounds == []
    assert tournament.max_total_points == 0
    assert tournament.code == "0" * 13


def test_rejects_teams_without_positive_rank() -> None:
    with pytest.raises(MalformedImportError):
        Tournament([Team("A", 0), Team("B", 0)])
    with pytest.raises(MalformedImportError):
        Tournament([Team("A", -1), Team("B", 2)])
    with pytest.raises(MalformedImportError):
        Tournament([Team("A", 1), Team("B", 2)], first_four=[Team("C", 0), Team("D", 16)])


def test_simulate_needs_a_round(eight_teams) -> None:
    tournament = Tournament(eight_teams)
    with pytest.raises(ValueError, match="No round to play"):
        tournament.simulate()
