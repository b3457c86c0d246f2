"""
Capacity-constrained task planner.

Walks the calendar one day at a time from a start date, skipping full
holidays, and places as much of the order as the line can make each day
until the whole quantity is allocated. The learning curve is indexed by
production day, so a holiday in the middle of a run does not advance the
ramp.
"""

import math
from dataclasses import dataclass, replace
from datetime import date, timedelta
from typing import List, Optional, Sequence, Tuple

from planview.logging_config import get_logger
from planview.scheduling.calendar import HolidayCalendar
from planview.scheduling.config import SchedulingConfig
from planview.scheduling.errors import PlanningLimitExceeded
from planview.scheduling.learning_curve import daily_capacity, efficiency_for_day, production_from_points
from planview.scheduling.models import (
    DailySegment,
    LearningCurveDefinition,
    Order,
    SchedulableResource,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class PlanResult:
    """Outcome of one planner run."""
    segments: Tuple[DailySegment, ...]
    actual_end_date: date

    @property
    def planned_total(self) -> int:
        return sum(segment.planned_qty for segment in self.segments)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up."""
    return int(math.floor(value + 0.5))


def reconcile_segments(segments: Sequence[DailySegment], quantity: int) -> List[DailySegment]:
    """
    Make planned quantities sum exactly to ``quantity``.

    Rounding drift is absorbed by the final segment (earlier ones only when the
    final segment would go negative). Cumulative totals are rebuilt afterwards.
    """
    adjusted = list(segments)
    if not adjusted:
        return adjusted

    difference = quantity - sum(s.planned_qty for s in adjusted)
    index = len(adjusted) - 1
    while difference != 0 and index >= 0:
        new_qty = max(0, adjusted[index].planned_qty + difference)
        difference -= new_qty - adjusted[index].planned_qty
        adjusted[index] = replace(adjusted[index], planned_qty=new_qty)
        index -= 1

    running = 0
    for i, segment in enumerate(adjusted):
        running += segment.planned_qty
        adjusted[i] = replace(segment, cumulative_qty=running)
    return adjusted


def plan_task(
    order: Order,
    resource: SchedulableResource,
    start_date: date,
    calendar: HolidayCalendar,
    learning_curve: Optional[LearningCurveDefinition] = None,
    max_days: int = SchedulingConfig.DEFAULT_MAX_PLANNING_DAYS,
    task_id: Optional[str] = None
) -> PlanResult:
    """
    Allocate an order's quantity across working days on one line.

    Each production day the output is the learning-curve capacity for that
    production day (or the line's flat capacity without a usable curve),
    capped by the line's capacity and by what is left to place.

    Args:
        order: Order to place; its quantity is the amount to allocate
        resource: Line the order runs on
        start_date: First calendar day to consider
        calendar: Holiday calendar; full holidays produce nothing
        learning_curve: Curve for the order's style, if any
        max_days: Calendar days to walk before giving up
        task_id: Task being planned, reported on failure

    Returns:
        PlanResult: daily segments and the date the last unit is made

    Raises:
        PlanningLimitExceeded: If the quantity cannot be placed within max_days
    """
    quantity = order.quantity
    style_code = order.style

    if quantity == 0:
        segment = DailySegment(
            date=start_date,
            style_code=style_code,
            planned_qty=0,
            efficiency=SchedulingConfig.FLAT_EFFICIENCY,
            cumulative_qty=0,
        )
        return PlanResult(segments=(segment,), actual_end_date=start_date)

    use_curve = learning_curve is not None and learning_curve.has_capacity_model and quantity > 0

    remaining = float(quantity)
    segments: List[DailySegment] = []
    current = start_date
    actual_end = start_date
    production_day = 0
    days_walked = 0
    running_total = 0

    while remaining > 0:
        days_walked += 1
        if days_walked > max_days:
            logger.warning(
                "Planner exceeded calendar-day cap",
                order_id=order.id,
                resource_id=resource.id,
                start_date=start_date.isoformat(),
                max_days=max_days,
            )
            raise PlanningLimitExceeded(order.id, max_days, task_id=task_id)

        if calendar.is_full_holiday(current):
            if not segments:
                actual_end = current
            current += timedelta(days=1)
            continue

        production_day += 1

        efficiency = SchedulingConfig.FLAT_EFFICIENCY
        potential_output = resource.capacity
        if use_curve:
            curve_efficiency = efficiency_for_day(production_day, learning_curve.points)
            curve_capacity = daily_capacity(
                curve_efficiency,
                learning_curve.smv,
                learning_curve.working_minutes_per_day,
                learning_curve.operators_count,
            )
            # a curve day with no output falls back to the line's flat capacity
            potential_output = curve_capacity or resource.capacity
            if learning_curve.points:
                efficiency = round(curve_efficiency, 2)

        plannable_today = min(potential_output, resource.capacity)
        qty_today = min(remaining, plannable_today)

        if qty_today > 0:
            planned = round_half_up(qty_today)
            running_total += planned
            segments.append(DailySegment(
                date=current,
                style_code=style_code,
                planned_qty=planned,
                efficiency=efficiency,
                cumulative_qty=running_total,
            ))
            remaining -= qty_today

        actual_end = current
        if remaining <= 0:
            break
        current += timedelta(days=1)

    if not segments:
        segments.append(DailySegment(
            date=start_date,
            style_code=style_code,
            planned_qty=0,
            efficiency=0,
            cumulative_qty=0,
        ))
        return PlanResult(segments=tuple(segments), actual_end_date=start_date)

    return PlanResult(
        segments=tuple(reconcile_segments(segments, quantity)),
        actual_end_date=actual_end,
    )


def proportional_daily_plan(
    start_date: date,
    end_date: date,
    style_code: str,
    quantity: int,
    learning_curve: Optional[LearningCurveDefinition] = None,
    calendar: Optional[HolidayCalendar] = None,
) -> List[DailySegment]:
    """
    Spread a quantity over a fixed inclusive date range.

    Used for snapshot tasks saved without a daily breakdown. Full holidays in
    the range get no segment, as in :func:`plan_task`; if every day is a full
    holiday the whole range is used. With a curve the quantity follows the
    curve's capacities by production day; otherwise it is spread evenly.
    """
    if start_date > end_date:
        logger.warning(
            "Invalid date range for proportional plan",
            start_date=start_date.isoformat(),
            end_date=end_date.isoformat(),
        )
        return []

    days = [start_date + timedelta(days=i) for i in range((end_date - start_date).days + 1)]
    if calendar is not None:
        days = [d for d in days if not calendar.is_full_holiday(d)] or days

    if learning_curve is not None and learning_curve.has_capacity_model:
        entries = production_from_points(
            learning_curve.points,
            learning_curve.smv,
            learning_curve.working_minutes_per_day,
            learning_curve.operators_count,
            len(days),
            start_date,
        )
        plan = [(day, entry.capacity, entry.efficiency) for day, entry in zip(days, entries)]
    else:
        average = round_half_up(quantity / len(days))
        plan = [(day, average, SchedulingConfig.FLAT_EFFICIENCY) for day in days]

    total_capacity = sum(capacity for _, capacity, _ in plan)
    factor = quantity / total_capacity if total_capacity > 0 and quantity > 0 else 1

    segments = [
        DailySegment(
            date=day,
            style_code=style_code,
            planned_qty=max(0, round_half_up(capacity * factor)),
            efficiency=efficiency,
        )
        for day, capacity, efficiency in plan
    ]
    return reconcile_segments(segments, quantity)
