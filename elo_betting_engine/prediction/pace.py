"""Live pace projection for in-progress basketball games.

Two projections are produced from the live score and game clock:
- Run rate: points so far extrapolated linearly to regulation length.
- Calibrated: points so far plus each team's average scoring for the time
  left (per-quarter averages), scaled by an empirical multiplier for the
  current score gap. Lopsided games slow down late, so the multiplier for
  a large gap is usually below 1.

Only regulation is projected; once a game reaches overtime the calibrated
projection is unavailable and only the run rate is returned.
"""

import re
from dataclasses import dataclass, field

from elo_betting_engine.models.numeric import round_to_step

_CLOCK_MMSS = re.compile(r"(\d+):(\d+(?:\.\d+)?)")
_CLOCK_SECONDS = re.compile(r"^(\d+(?:\.\d+)?)$")


def parse_clock(clock: str) -> float | None:
    """Minutes remaining from a display clock ("8:39" or "37.1" seconds)."""
    if not clock:
        return None
    match = _CLOCK_MMSS.search(clock)
    if match:
        return int(match.group(1)) + float(match.group(2)) / 60
    match = _CLOCK_SECONDS.match(clock.strip())
    if match:
        return float(match.group(1)) / 60
    return None


def minutes_elapsed(
    period: int,
    clock: str,
    quarter_minutes: float = 12.0,
    periods: int = 4,
    overtime_minutes: float = 5.0,
) -> float | None:
    """Game minutes played, counting overtime periods after regulation.

    Example:
        >>> minutes_elapsed(2, "6:00")
        18.0
    """
    remaining = parse_clock(clock)
    if remaining is None or period < 1:
        return None
    if period <= periods:
        return (period - 1) * quarter_minutes + max(0.0, quarter_minutes - remaining)
    overtime_index = period - periods
    regulation = periods * quarter_minutes
    return regulation + (overtime_index - 1) * overtime_minutes + max(0.0, overtime_minutes - remaining)


def gap_bucket(gap: int) -> str:
    """Score-gap bucket: close (<=4), small (<=9), medium (<=14), large."""
    gap = abs(gap)
    if gap <= 4:
        return "close"
    if gap <= 9:
        return "small"
    if gap <= 14:
        return "medium"
    return "large"


def checkpoint_for_quarter(quarter: int) -> str:
    if quarter <= 1:
        return "Q1"
    if quarter <= 2:
        return "HALF"
    return "Q3"


def project_run_rate(total_points: int, elapsed: float, regulation_minutes: float = 48.0) -> float | None:
    """Linear extrapolation of the combined score; None before tip-off."""
    if elapsed <= 0:
        return None
    return total_points / elapsed * regulation_minutes


@dataclass(frozen=True)
class PaceCalibration:
    """Historical scoring shape used by the calibrated projection.

    Attributes:
        team_quarter_averages: Points per quarter (Q1..Q4) by team
        gap_multipliers: checkpoint ("Q1" / "HALF" / "Q3") -> gap bucket -> multiplier
    """

    team_quarter_averages: dict[str, list[float]]
    gap_multipliers: dict[str, dict[str, float]] = field(default_factory=dict)

    def multiplier(self, checkpoint: str, bucket: str) -> float:
        return self.gap_multipliers.get(checkpoint, {}).get(bucket, 1.0)


@dataclass(frozen=True)
class LiveGameState:
    home_team: str
    away_team: str
    home_score: int
    away_score: int
    period: int
    clock: str


@dataclass(frozen=True)
class PaceProjection:
    """Projected finals for a live game.

    ``projected_spread`` is away minus home, matching pre-game spreads.
    """

    minutes_elapsed: float
    run_rate_total: float | None
    projected_total: float | None
    projected_home: float | None
    projected_away: float | None
    multiplier: float = 1.0

    @property
    def projected_spread(self) -> float | None:
        if self.projected_home is None or self.projected_away is None:
            return None
        return round_to_step(self.projected_away - self.projected_home, 0.1)

    def edge_vs(self, live_total: float) -> float | None:
        """Projected total minus a live market total."""
        if self.projected_total is None:
            return None
        return round_to_step(self.projected_total - live_total, 0.1)


class PaceProjector:
    """Projects final scores of live games.

    Args:
        calibration: Per-team quarter averages and gap multipliers; without
            it only the run-rate projection is available
        quarter_minutes: Length of a regulation period
        periods: Regulation periods
    """

    def __init__(
        self,
        calibration: PaceCalibration | None = None,
        quarter_minutes: float = 12.0,
        periods: int = 4,
    ) -> None:
        self.calibration = calibration
        self.quarter_minutes = quarter_minutes
        self.periods = periods

    @property
    def regulation_minutes(self) -> float:
        return self.quarter_minutes * self.periods

    def project(self, state: LiveGameState) -> PaceProjection | None:
        """Project a live game, None if the clock cannot be read."""
        elapsed = minutes_elapsed(state.period, state.clock, self.quarter_minutes, self.periods)
        if elapsed is None:
            return None

        total_points = state.home_score + state.away_score
        run_rate = project_run_rate(total_points, elapsed, self.regulation_minutes)
        projected_total = run_rate
        projected_home = None
        projected_away = None
        multiplier = 1.0

        calibrated = self._calibrated(state, elapsed)
        if calibrated is not None:
            home_remaining, away_remaining, multiplier = calibrated
            projected_home = state.home_score + home_remaining * multiplier
            projected_away = state.away_score + away_remaining * multiplier
            projected_total = projected_home + projected_away
        elif run_rate is not None and total_points > 0:
            # Split the run-rate total by current share of the score
            projected_home = run_rate * state.home_score / total_points
            projected_away = run_rate * state.away_score / total_points

        return PaceProjection(
            minutes_elapsed=elapsed,
            run_rate_total=None if run_rate is None else round_to_step(run_rate, 0.1),
            projected_total=None if projected_total is None else round_to_step(projected_total, 0.1),
            projected_home=None if projected_home is None else round_to_step(projected_home, 0.1),
            projected_away=None if projected_away is None else round_to_step(projected_away, 0.1),
            multiplier=multiplier,
        )

    def _calibrated(self, state: LiveGameState, elapsed: float) -> tuple[float, float, float] | None:
        if self.calibration is None or state.period > self.periods:
            return None
        if elapsed >= self.regulation_minutes:
            return None
        home_avg = self.calibration.team_quarter_averages.get(state.home_team)
        away_avg = self.calibration.team_quarter_averages.get(state.away_team)
        if not home_avg or not away_avg:
            return None

        quarter = min(self.periods, int(elapsed // self.quarter_minutes) + 1)
        index = quarter - 1
        fraction_left = (self.quarter_minutes - elapsed % self.quarter_minutes) / self.quarter_minutes

        home_remaining = sum(home_avg[index + 1:]) + home_avg[index] * fraction_left
        away_remaining = sum(away_avg[index + 1:]) + away_avg[index] * fraction_left
        if home_remaining + away_remaining <= 0:
            return None

        bucket = gap_bucket(state.home_score - state.away_score)
        multiplier = self.calibration.multiplier(checkpoint_for_quarter(quarter), bucket)
        return home_remaining, away_remaining, multiplier
