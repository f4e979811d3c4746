# app/services/recommendation.py
"""
Player recommendations for a depth chart position.

The scoring is a pure function of the candidate list and the target position code:
it never touches the database. ``RecommendationService`` only resolves the chart,
the position and the candidate pool before delegating to :func:`recommend`.

Score = position fit + performance + eligibility + health.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional, Sequence

from depth_charts.db.database import DataBase
from depth_charts.db.schemas.player import PlayerRead, RankedPlayer
from depth_charts.errors import NotFound
from depth_charts.app.services.assignment import AssignmentService

RECOMMENDATION_LIMIT = 10
MAX_REASONS = 3

PITCHING_CODES = frozenset({"P", "SP", "RP", "CP"})
UTILITY_CODES = frozenset({"UTIL", "IF", "OF"})

POSITION_GROUPS: dict[str, frozenset[str]] = {
	"P": PITCHING_CODES,
	"C": frozenset({"C"}),
	"1B": frozenset({"1B", "IF"}),
	"2B": frozenset({"2B", "IF", "MI"}),
	"3B": frozenset({"3B", "IF", "CI"}),
	"SS": frozenset({"SS", "IF", "MI"}),
	"LF": frozenset({"LF", "OF"}),
	"CF": frozenset({"CF", "OF"}),
	"RF": frozenset({"RF", "OF"}),
	"DH": frozenset({"DH", "UTIL"}),
}

HEALTHY_BONUS = 20
MEDICAL_PENALTY = -30
POINTS_PER_ELIGIBLE_YEAR = 5


@dataclass
class ScoreCard:
	"""Running total plus the (points, reason) pairs that produced it."""
	score: int = 0
	reasons: List[tuple[int, str]] = field(default_factory=list)

	def add(self, points: int, reason: str) -> None:
		self.score += points
		self.reasons.append((points, reason))

	def top_reasons(self, limit: int = MAX_REASONS) -> list[str]:
		# largest absolute contribution first; sorted() keeps component order among equals
		ranked = sorted(self.reasons, key=lambda item: abs(item[0]), reverse=True)
		return [reason for _points, reason in ranked[:limit]]


def _fmt(value: float) -> str:
	return f"{value:g}"


def score_position_fit(card: ScoreCard, player_position: Optional[str], target_code: str) -> None:
	if not player_position or not target_code:
		return

	if player_position == target_code:
		card.add(100, "Exact position match")
		return

	if player_position in POSITION_GROUPS.get(target_code, frozenset()):
		card.add(80, "Position group match")
	elif player_position in UTILITY_CODES:
		card.add(60, "Utility player")
	else:
		card.add(20, "Position mismatch")


def score_pitching(card: ScoreCard, player: PlayerRead) -> None:
	if player.era is not None and player.era < 3.00:
		card.add(50, f"Excellent ERA: {_fmt(player.era)}")
	elif player.era is not None and player.era < 4.00:
		card.add(30, f"Good ERA: {_fmt(player.era)}")

	if player.strikeouts is not None and player.strikeouts > 50:
		card.add(20, f"High strikeouts: {player.strikeouts}")

	if player.wins is not None and player.losses is not None:
		decisions = player.wins + player.losses
		if decisions > 0:
			win_rate = player.wins / decisions
			if win_rate > 0.6:
				card.add(25, f"Good win rate: {win_rate * 100:.0f}%")


def score_batting(card: ScoreCard, player: PlayerRead) -> None:
	if player.batting_avg is not None and player.batting_avg > 0.300:
		card.add(40, f"High average: {_fmt(player.batting_avg)}")
	elif player.batting_avg is not None and player.batting_avg > 0.250:
		card.add(20, f"Good average: {_fmt(player.batting_avg)}")

	if player.home_runs is not None and player.home_runs > 5:
		card.add(15, f"Power hitter: {player.home_runs} HR")

	if player.rbi is not None and player.rbi > 20:
		card.add(15, f"RBI producer: {player.rbi} RBI")

	if player.stolen_bases is not None and player.stolen_bases > 10:
		card.add(15, f"Speed: {player.stolen_bases} SB")


def score_performance(card: ScoreCard, player: PlayerRead, target_code: str) -> None:
	if target_code in PITCHING_CODES:
		score_pitching(card, player)
	else:
		score_batting(card, player)


def score_eligibility(card: ScoreCard, graduation_year: Optional[int], current_year: int) -> None:
	if not graduation_year:
		return
	years_remaining = graduation_year - current_year
	if years_remaining > 0:
		card.add(years_remaining * POINTS_PER_ELIGIBLE_YEAR, f"Graduation year: {graduation_year}")


def score_health(card: ScoreCard, has_medical_issues: bool) -> None:
	if not has_medical_issues:
		card.add(HEALTHY_BONUS, "No medical issues")
	else:
		card.add(MEDICAL_PENALTY, "Has medical issues")


def score_player(player: PlayerRead, target_code: str, *, current_year: Optional[int] = None) -> ScoreCard:
	"""Score one candidate for ``target_code``. All four components are independent."""
	year = current_year if current_year is not None else date.today().year
	card = ScoreCard()
	score_position_fit(card, player.position, target_code)
	score_performance(card, player, target_code)
	score_eligibility(card, player.graduation_year, year)
	score_health(card, player.has_medical_issues)
	return card


def recommend(
	candidates: Iterable[PlayerRead],
	target_position_code: str,
	*,
	current_year: Optional[int] = None,
	limit: int = RECOMMENDATION_LIMIT,
) -> list[RankedPlayer]:
	"""
	Rank candidates for a position, best first, truncated to ``limit``.

	Candidates are expected to be pre-filtered (same team, active status, not
	assigned anywhere on the chart). Equal scores keep the input order because
	``sorted`` is stable; callers must not rely on that as an ordering contract.
	"""
	ranked: list[RankedPlayer] = []
	for player in candidates:
		card = score_player(player, target_position_code, current_year=current_year)
		ranked.append(
			RankedPlayer(
				**player.model_dump(),
				score=card.score,
				reasons=card.top_reasons(),
			)
		)

	ranked = sorted(ranked, key=lambda r: r.score, reverse=True)
	return ranked[:limit]


class RecommendationService:
	"""Resolves chart, position and candidate pool, then delegates to :func:`recommend`."""

	def __init__(self, database: Optional[DataBase] = None) -> None:
		self._database = database or DataBase()
		self._assignments = AssignmentService(self._database)

	async def recommend_for_position(
		self,
		chart_id: int,
		position_id: int,
		team_id: int,
		*,
		current_year: Optional[int] = None,
	) -> list[RankedPlayer]:
		chart = await self._database.get_depth_chart(chart_id, team_id)
		if chart is None:
			raise NotFound("Depth chart not found")

		position = await self._database.get_position(position_id, team_id)
		if position is None or position.depth_chart_id != chart.id:
			raise NotFound("Position not found")

		candidates: Sequence[PlayerRead] = await self._assignments.available_players(chart.id, team_id)
		return recommend(candidates, position.position_code, current_year=current_year)
