from depth_charts.db.schemas.player import PlayerRead
from depth_charts.app.services.recommendation import recommend, score_player

YEAR = 2025


def player(player_id: int, position: str | None, **fields) -> PlayerRead:
    fields.setdefault("first_name", f"Player{player_id}")
    fields.setdefault("last_name", "Test")
    return PlayerRead(id=player_id, team_id=1, position=position, **fields)


def test_pitchers_ranked_by_fit_performance_and_health():
    p1 = player(1, "P", era=2.8)
    p2 = player(2, "C", has_medical_issues=True)
    p3 = player(3, "SP", era=3.5)

    ranked = recommend([p2, p3, p1], "P", current_year=YEAR)

    assert [r.id for r in ranked] == [1, 3, 2]
    assert [r.score for r in ranked] == [170, 130, -10]


def test_pitcher_with_good_era_beats_outfielder_without_stats():
    ace = player(1, "P", era=2.5)
    fielder = player(2, "OF")

    ranked = recommend([fielder, ace], "P", current_year=YEAR)

    assert ranked[0].id == ace.id
    assert ranked[0].score > ranked[1].score


def test_exact_match_reasons():
    card = score_player(player(1, "P", era=2.8), "P", current_year=YEAR)
    assert card.top_reasons() == ["Exact position match", "Excellent ERA: 2.8", "No medical issues"]


def test_position_group_and_utility_fit():
    assert score_player(player(1, "MI"), "SS", current_year=YEAR).reasons[0] == (80, "Position group match")
    assert score_player(player(2, "UTIL"), "SS", current_year=YEAR).reasons[0] == (60, "Utility player")
    assert score_player(player(3, "C"), "SS", current_year=YEAR).reasons[0] == (20, "Position mismatch")


def test_missing_player_position_skips_fit():
    card = score_player(player(1, None), "SS", current_year=YEAR)
    assert card.score == 20
    assert card.top_reasons() == ["No medical issues"]


def test_batting_components():
    slugger = player(1, "1B", batting_avg=0.320, home_runs=12, rbi=30, stolen_bases=15)
    card = score_player(slugger, "1B", current_year=YEAR)

    # 100 fit + 40 avg + 15 HR + 15 RBI + 15 SB + 20 health
    assert card.score == 205
    assert "Power hitter: 12 HR" in [reason for _points, reason in card.reasons]
    assert "Speed: 15 SB" in [reason for _points, reason in card.reasons]


def test_average_thresholds_are_exclusive():
    assert score_player(player(1, None, batting_avg=0.300), "LF", current_year=YEAR).score == 20 + 20
    assert score_player(player(2, None, batting_avg=0.250), "LF", current_year=YEAR).score == 20


def test_win_rate_needs_decisions():
    no_decisions = score_player(player(1, None, wins=0, losses=0), "P", current_year=YEAR)
    assert no_decisions.score == 20

    winner = score_player(player(2, None, wins=7, losses=3, strikeouts=60), "P", current_year=YEAR)
    assert winner.score == 20 + 20 + 25
    assert (25, "Good win rate: 70%") in winner.reasons


def test_eligibility_counts_remaining_years():
    card = score_player(player(1, None, graduation_year=YEAR + 3), "C", current_year=YEAR)
    assert (15, f"Graduation year: {YEAR + 3}") in card.reasons

    graduated = score_player(player(2, None, graduation_year=YEAR), "C", current_year=YEAR)
    assert graduated.score == 20


def test_medical_issues_penalty():
    card = score_player(player(1, None, has_medical_issues=True), "C", current_year=YEAR)
    assert card.score == -30
    assert card.top_reasons() == ["Has medical issues"]


def test_at_most_three_reasons_largest_first():
    star = player(1, "CF", batting_avg=0.350, home_runs=10, rbi=25, stolen_bases=20, graduation_year=YEAR + 2)
    ranked = recommend([star], "CF", current_year=YEAR)

    assert ranked[0].reasons == ["Exact position match", "High average: 0.35", "No medical issues"]


def test_limit_and_stable_ties():
    candidates = [player(i, "C") for i in range(1, 15)]
    ranked = recommend(candidates, "C", current_year=YEAR)

    assert len(ranked) == 10
    assert [r.id for r in ranked] == list(range(1, 11))


def test_empty_pool():
    assert recommend([], "P") == []
