import logging

import pytest

from depth_charts.db.enums import PlayerStatus
from depth_charts.db.schemas.assignment import AssignmentCreate
from depth_charts.db.schemas.position import PositionCreate, PositionUpdate
from depth_charts.errors import Conflict, NotFound

from conftest import COACH_ID, OTHER_TEAM_ID, TEAM_ID


def slot(player_id: int, depth_order: int = 1, **fields) -> AssignmentCreate:
    return AssignmentCreate(player_id=player_id, depth_order=depth_order, **fields)


# --------- positions ---------
async def test_add_and_update_position(charts, positions, make_chart):
    chart = await make_chart()

    added = await positions.add(chart.id, TEAM_ID, PositionCreate(position_code="UT", position_name="Utility", sort_order=11))
    updated = await positions.update(added.id, TEAM_ID, PositionUpdate(color="#AABBCC"))

    assert updated.color == "#AABBCC"
    assert updated.position_name == "Utility"
    assert [p.position_code for p in (await charts.get(chart.id, TEAM_ID)).positions][-1] == "UT"


async def test_position_on_deleted_or_foreign_chart(charts, positions, make_chart):
    chart = await make_chart()
    payload = PositionCreate(position_code="UT", position_name="Utility")

    with pytest.raises(NotFound):
        await positions.add(chart.id, OTHER_TEAM_ID, payload)

    await charts.soft_delete(chart.id, TEAM_ID)
    with pytest.raises(NotFound):
        await positions.add(chart.id, TEAM_ID, payload)
    with pytest.raises(NotFound):
        await positions.update(chart.positions[0].id, TEAM_ID, PositionUpdate(position_name="Ace"))


async def test_deleted_position_is_not_found(charts, positions, make_chart):
    chart = await make_chart()
    target = chart.positions[0]
    await positions.soft_delete(target.id, TEAM_ID)

    with pytest.raises(NotFound):
        await positions.update(target.id, TEAM_ID, PositionUpdate(position_name="Ace"))
    with pytest.raises(NotFound):
        await positions.soft_delete(target.id, TEAM_ID)
    assert target.id not in [p.id for p in (await charts.get(chart.id, TEAM_ID)).positions]


# --------- assignments ---------
async def test_assign_returns_player_projection(charts, assignments, make_chart, make_player):
    chart = await make_chart()
    alex = await make_player("Alex", "Diaz", position="P", graduation_year=2027)

    assignment = await assignments.assign(chart.positions[0].id, TEAM_ID, COACH_ID, slot(alex.id, notes="Opening day"))

    assert assignment.depth_chart_id == chart.id
    assert assignment.player.first_name == "Alex"
    assert assignment.player.graduation_year == 2027

    detail = await charts.get(chart.id, TEAM_ID)
    assert [a.player_id for a in detail.positions[0].assignments] == [alex.id]


async def test_same_position_twice_conflicts(assignments, make_chart, make_player):
    chart = await make_chart()
    alex = await make_player("Alex")
    pitcher = chart.positions[0].id

    await assignments.assign(pitcher, TEAM_ID, COACH_ID, slot(alex.id))
    with pytest.raises(Conflict, match="already assigned"):
        await assignments.assign(pitcher, TEAM_ID, COACH_ID, slot(alex.id, depth_order=2))


async def test_player_may_hold_several_positions(assignments, make_chart, make_player):
    chart = await make_chart()
    alex = await make_player("Alex")

    first = await assignments.assign(chart.positions[0].id, TEAM_ID, COACH_ID, slot(alex.id))
    second = await assignments.assign(chart.positions[9].id, TEAM_ID, COACH_ID, slot(alex.id))

    assert first.id != second.id


async def test_depth_order_may_repeat(charts, assignments, make_chart, make_player):
    chart = await make_chart()
    alex = await make_player("Alex")
    blake = await make_player("Blake")

    await assignments.assign(chart.positions[1].id, TEAM_ID, COACH_ID, slot(blake.id, depth_order=1))
    await assignments.assign(chart.positions[1].id, TEAM_ID, COACH_ID, slot(alex.id, depth_order=1))

    catchers = (await charts.get(chart.id, TEAM_ID)).positions[1].assignments
    assert [a.player_id for a in catchers] == [blake.id, alex.id]


async def test_assign_unknown_position_or_player(assignments, positions, make_chart, make_player):
    chart = await make_chart()
    stranger = await make_player("Casey", team_id=OTHER_TEAM_ID)
    alex = await make_player("Alex")

    with pytest.raises(NotFound, match="Player not found"):
        await assignments.assign(chart.positions[0].id, TEAM_ID, COACH_ID, slot(stranger.id))
    with pytest.raises(NotFound, match="Position not found"):
        await assignments.assign(chart.positions[0].id, OTHER_TEAM_ID, COACH_ID, slot(alex.id))

    await positions.soft_delete(chart.positions[0].id, TEAM_ID)
    with pytest.raises(NotFound, match="Position not found"):
        await assignments.assign(chart.positions[0].id, TEAM_ID, COACH_ID, slot(alex.id))


async def test_max_players_is_advisory(caplog, assignments, positions, make_chart, make_player):
    chart = await make_chart()
    solo = await positions.add(
        chart.id, TEAM_ID, PositionCreate(position_code="CP", position_name="Closer", max_players=1)
    )
    alex = await make_player("Alex")
    blake = await make_player("Blake")

    await assignments.assign(solo.id, TEAM_ID, COACH_ID, slot(alex.id))
    with caplog.at_level(logging.WARNING, logger="depth_charts.app.services.assignment"):
        await assignments.assign(solo.id, TEAM_ID, COACH_ID, slot(blake.id, depth_order=2))

    assert "over its advisory max of 1" in caplog.text


async def test_unassign(assignments, make_chart, make_player):
    chart = await make_chart()
    alex = await make_player("Alex")
    assignment = await assignments.assign(chart.positions[0].id, TEAM_ID, COACH_ID, slot(alex.id))

    with pytest.raises(NotFound):
        await assignments.unassign(assignment.id, OTHER_TEAM_ID)

    removed = await assignments.unassign(assignment.id, TEAM_ID, COACH_ID)
    assert removed.is_active is False

    with pytest.raises(NotFound, match="Assignment not found"):
        await assignments.unassign(assignment.id, TEAM_ID)

    # the triple is free again
    await assignments.assign(chart.positions[0].id, TEAM_ID, COACH_ID, slot(alex.id))


async def test_unassign_from_deleted_position(assignments, positions, make_chart, make_player):
    chart = await make_chart()
    alex = await make_player("Alex")
    assignment = await assignments.assign(chart.positions[0].id, TEAM_ID, COACH_ID, slot(alex.id))
    await positions.soft_delete(chart.positions[0].id, TEAM_ID)

    removed = await assignments.unassign(assignment.id, TEAM_ID)
    assert removed.id == assignment.id


async def test_unassign_on_deleted_chart(charts, assignments, make_chart, make_player):
    chart = await make_chart()
    alex = await make_player("Alex")
    assignment = await assignments.assign(chart.positions[0].id, TEAM_ID, COACH_ID, slot(alex.id))
    await charts.soft_delete(chart.id, TEAM_ID)

    with pytest.raises(NotFound):
        await assignments.unassign(assignment.id, TEAM_ID)


# --------- available players ---------
async def test_available_players_excludes_assigned_anywhere(assignments, make_chart, make_player):
    chart = await make_chart()
    other_chart = await make_chart("JV")
    zoe = await make_player("Zoe", "Adams")
    alex = await make_player("Alex", "Young")
    blake = await make_player("Alex", "Brown")
    await make_player("Inactive", status=PlayerStatus.INACTIVE)
    await make_player("Foreign", team_id=OTHER_TEAM_ID)

    await assignments.assign(chart.positions[4].id, TEAM_ID, COACH_ID, slot(zoe.id))
    await assignments.assign(other_chart.positions[0].id, TEAM_ID, COACH_ID, slot(alex.id))

    available = await assignments.available_players(chart.id, TEAM_ID)
    assert [p.id for p in available] == [blake.id, alex.id]
    assert await assignments.exclusion_set(chart.id) == {zoe.id}


async def test_available_players_of_deleted_chart(charts, assignments, make_chart):
    chart = await make_chart()
    await charts.soft_delete(chart.id, TEAM_ID)

    with pytest.raises(NotFound):
        await assignments.available_players(chart.id, TEAM_ID)


# --------- recommendations ---------
async def test_recommendations_for_position(recommendations, assignments, make_chart, make_player):
    chart = await make_chart()
    pitcher_slot = chart.positions[0]
    p1 = await make_player("Pat", position="P", era=2.8)
    p2 = await make_player("Quinn", position="C", has_medical_issues=True)
    p3 = await make_player("Riley", position="SP", era=3.5)
    taken = await make_player("Sam", position="P", era=1.2)
    await assignments.assign(chart.positions[1].id, TEAM_ID, COACH_ID, slot(taken.id))

    ranked = await recommendations.recommend_for_position(chart.id, pitcher_slot.id, TEAM_ID, current_year=2025)

    assert [(r.id, r.score) for r in ranked] == [(p1.id, 170), (p3.id, 130), (p2.id, -10)]


async def test_recommendations_validate_chart_and_position(recommendations, make_chart):
    chart = await make_chart()
    other = await make_chart("JV")

    with pytest.raises(NotFound, match="Position not found"):
        await recommendations.recommend_for_position(chart.id, other.positions[0].id, TEAM_ID)
    with pytest.raises(NotFound, match="Depth chart not found"):
        await recommendations.recommend_for_position(chart.id, chart.positions[0].id, OTHER_TEAM_ID)


# --------- concurrency and atomicity ---------
async def test_concurrent_duplicate_assignment_conflicts(charts, assignments, database, make_chart, make_player, monkeypatch):
    chart = await make_chart()
    alex = await make_player("Alex")
    pitcher = chart.positions[0].id
    await assignments.assign(pitcher, TEAM_ID, COACH_ID, slot(alex.id))

    async def not_yet_assigned(*_args, **_kwargs):
        return False

    # the lookup misses a row a concurrent request is about to commit
    monkeypatch.setattr(database, "_holds_position", not_yet_assigned)

    with pytest.raises(Conflict, match="already assigned"):
        await assignments.assign(pitcher, TEAM_ID, COACH_ID, slot(alex.id, depth_order=2))

    detail = await charts.get(chart.id, TEAM_ID)
    assert [(a.player_id, a.depth_order) for a in detail.positions[0].assignments] == [(alex.id, 1)]


async def test_failed_audit_write_rolls_back_assignment(assignments, database, make_chart, make_player, monkeypatch):
    chart = await make_chart()
    alex = await make_player("Alex")

    async def failing_audit_write(*_args, **_kwargs):
        raise RuntimeError("audit store unavailable")

    monkeypatch.setattr(database, "create_audit_log", failing_audit_write)
    with pytest.raises(RuntimeError):
        await assignments.assign(chart.positions[0].id, TEAM_ID, COACH_ID, slot(alex.id))

    assert await assignments.exclusion_set(chart.id) == set()


async def test_chart_detail_carries_player_stats(charts, assignments, make_chart, make_player):
    chart = await make_chart()
    ace = await make_player(
        "Sam",
        "Reyes",
        position="P",
        era=2.8,
        wins=7,
        losses=2,
        strikeouts=81,
        has_medical_issues=True,
        status=PlayerStatus.INACTIVE,
    )
    await assignments.assign(chart.positions[0].id, TEAM_ID, COACH_ID, slot(ace.id))

    player = (await charts.get(chart.id, TEAM_ID)).positions[0].assignments[0].player

    assert (player.era, player.wins, player.losses, player.strikeouts) == (2.8, 7, 2, 81)
    assert player.batting_avg is None
    assert player.status == PlayerStatus.INACTIVE
    assert player.has_medical_issues is True
