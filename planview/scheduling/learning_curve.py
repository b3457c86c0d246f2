"""
Learning-curve evaluation and daily production calculation.

A learning curve is a set of (day, efficiency %) points. Output for a day is
derived from the efficiency with the standard-minute formula:

    capacity = (efficiency / 100) * operators * working_minutes / smv

Nothing here knows about holidays; day numbers are production days and
dates are consecutive calendar days. Skipping non-working days is the
planner's job.
"""

from datetime import date, timedelta
from typing import Iterable, List, Optional, Sequence

from planview.scheduling.models import DailyProductionEntry, LearningCurvePoint


def efficiency_for_day(day: int, points: Iterable[LearningCurvePoint]) -> float:
    """
    Efficiency percentage for a production day.

    Resolution order:
    - no points -> 0
    - exact day match -> that point's efficiency
    - before the first point / after the last point -> flat extrapolation
    - otherwise linear interpolation between the bracketing points,
      rounded to 2 decimals

    Args:
        day: 1-based production day number
        points: Curve points in any order

    Returns:
        float: Efficiency percentage
    """
    ordered = sorted(points, key=lambda p: p.day)
    if not ordered:
        return 0

    for point in ordered:
        if point.day == day:
            return point.efficiency

    if day < ordered[0].day:
        return ordered[0].efficiency
    if day > ordered[-1].day:
        return ordered[-1].efficiency

    for lower, upper in zip(ordered, ordered[1:]):
        if lower.day < day < upper.day:
            day_span = upper.day - lower.day
            if day_span == 0:
                return lower.efficiency
            efficiency = lower.efficiency + (upper.efficiency - lower.efficiency) * (day - lower.day) / day_span
            return round(efficiency, 2)

    # Only reachable with duplicate days straddling the request
    return ordered[-1].efficiency


def daily_capacity(
    efficiency: float,
    smv: Optional[float],
    working_minutes_per_day: float,
    operators_count: int
) -> float:
    """
    Units a line can produce in one day at the given efficiency.

    Returns 0 when the SMV is missing or not positive; callers fall back to
    the line's flat capacity in that case.
    """
    if smv is None or smv <= 0:
        return 0.0
    capacity = (efficiency / 100) * operators_count * working_minutes_per_day / smv
    return round(capacity, 2)


def production_from_points(
    points: Sequence[LearningCurvePoint],
    smv: Optional[float],
    working_minutes_per_day: float,
    operators_count: int,
    duration_days: int,
    start_date: date
) -> List[DailyProductionEntry]:
    """
    Daily production for ``duration_days`` consecutive days using curve points.

    Day index ``i`` (0-based) is evaluated as production day ``i + 1``.
    """
    ordered = sorted(points, key=lambda p: p.day)
    entries = []
    for index in range(max(0, duration_days)):
        efficiency = efficiency_for_day(index + 1, ordered)
        entries.append(DailyProductionEntry(
            date=start_date + timedelta(days=index),
            efficiency=round(efficiency, 2),
            capacity=daily_capacity(efficiency, smv, working_minutes_per_day, operators_count),
        ))
    return entries


def linear_ramp_efficiency(
    day_index: int,
    initial_efficiency: float,
    target_efficiency: float,
    ramp_days: int
) -> float:
    """
    Efficiency for a 0-based day index on a straight ramp.

    The ramp climbs from ``initial_efficiency`` and holds ``target_efficiency``
    once the day number passes ``ramp_days``. The result is capped at the
    target and floored at the initial efficiency.
    """
    if ramp_days <= 0 or day_index + 1 > ramp_days:
        efficiency = target_efficiency
    elif initial_efficiency != target_efficiency:
        efficiency = initial_efficiency + (target_efficiency - initial_efficiency) / ramp_days * day_index
    else:
        efficiency = initial_efficiency

    efficiency = min(efficiency, target_efficiency)
    return max(efficiency, initial_efficiency)


def production_from_linear_ramp(
    initial_efficiency: float,
    target_efficiency: float,
    ramp_days: int,
    smv: Optional[float],
    working_minutes_per_day: float,
    operators_count: int,
    duration_days: int,
    start_date: date
) -> List[DailyProductionEntry]:
    """Daily production for the legacy initial/target/ramp-days curve format."""
    entries = []
    for index in range(max(0, duration_days)):
        efficiency = linear_ramp_efficiency(index, initial_efficiency, target_efficiency, ramp_days)
        entries.append(DailyProductionEntry(
            date=start_date + timedelta(days=index),
            efficiency=round(efficiency, 2),
            capacity=daily_capacity(efficiency, smv, working_minutes_per_day, operators_count),
        ))
    return entries


def generate_standard_points(initial: float, target: float, ramp_days: int) -> List[LearningCurvePoint]:
    """
    Build curve points for a standard ramp.

    One point per ramp day, stepping evenly from ``initial`` on day 1 to
    ``target`` on day ``ramp_days``, then a hold point on the following day.

    Example:
        generate_standard_points(40, 60, 3)
        -> [(1, 40.0), (2, 50.0), (3, 60), (4, 60)]
    """
    if ramp_days <= 0:
        return [LearningCurvePoint(day=1, efficiency=target)]

    step = (target - initial) / max(ramp_days - 1, 1)
    efficiencies = {}
    for index in range(ramp_days):
        efficiencies[index + 1] = round(min(initial + step * index, target), 1)

    # Land exactly on target at the end of the ramp, then hold it
    efficiencies[ramp_days] = target
    efficiencies[ramp_days + 1] = target

    return [LearningCurvePoint(day=day, efficiency=eff) for day, eff in sorted(efficiencies.items())]
