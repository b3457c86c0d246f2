"""
Inputs every operator reads but never changes: master data, the calendar,
the plant date and the task id sequence.
"""
import itertools
import re
import time
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, Iterator, Optional

from planview.scheduling.calendar import HolidayCalendar
from planview.scheduling.config import SchedulingConfig
from planview.scheduling.errors import ValidationRejection
from planview.scheduling.models import LearningCurveDefinition, Order, SchedulableResource


_ID_SUFFIX = re.compile(r"-(\d+)$")


def _default_sequence() -> Iterator[int]:
    # clock seed; continue_ids_after moves it past ids already saved on the plan
    return itertools.count(int(time.time() * 1000))


@dataclass
class SchedulingContext:
    resources: Dict[str, SchedulableResource]
    today: date
    calendar: HolidayCalendar = field(default_factory=HolidayCalendar)
    learning_curves: Dict[str, LearningCurveDefinition] = field(default_factory=dict)
    max_planning_days: int = SchedulingConfig.DEFAULT_MAX_PLANNING_DAYS
    id_sequence: Iterator[int] = field(default_factory=_default_sequence)

    @classmethod
    def build(
        cls,
        resources: Iterable[SchedulableResource],
        today: date,
        calendar: Optional[HolidayCalendar] = None,
        learning_curves: Iterable[LearningCurveDefinition] = (),
        max_planning_days: int = SchedulingConfig.DEFAULT_MAX_PLANNING_DAYS,
        id_start: Optional[int] = None,
    ) -> "SchedulingContext":
        ctx = cls(
            resources={r.id: r for r in resources},
            today=today,
            calendar=calendar or HolidayCalendar(),
            learning_curves={lc.id: lc for lc in learning_curves},
            max_planning_days=max_planning_days,
        )
        if id_start is not None:
            ctx.id_sequence = itertools.count(id_start)
        return ctx

    def next_id(self) -> int:
        return next(self.id_sequence)

    def continue_ids_after(self, used_ids: Iterable[str]) -> "SchedulingContext":
        """
        Restart the id sequence above every numeric id suffix already in use.

        Called with the ids on a loaded plan, so a second split of a part
        never reuses the first split's ``-splitA-{n}``.
        """
        suffixes = [int(match.group(1)) for match in map(_ID_SUFFIX.search, used_ids) if match]
        start = max([next(self.id_sequence)] + [n + 1 for n in suffixes])
        self.id_sequence = itertools.count(start)
        return self

    def first_resource(self) -> Optional[SchedulableResource]:
        return next(iter(self.resources.values()), None)

    def require_resource(self, resource_id: str) -> SchedulableResource:
        resource = self.resources.get(resource_id)
        if resource is None:
            raise ValidationRejection(f"Resource {resource_id} not found.")
        return resource

    def learning_curve_for(self, order: Order, learning_curve_id: Optional[str] = None) -> Optional[LearningCurveDefinition]:
        """Curve for an order; an explicit task-level id wins over the order's own."""
        curve_id = learning_curve_id or order.learning_curve_id
        if not curve_id:
            return None
        return self.learning_curves.get(curve_id)

    def require_valid_start(self, start_date: date, action: str = "schedule", task_id: Optional[str] = None):
        """Reject start dates in the past or on a full holiday."""
        if start_date < self.today:
            raise ValidationRejection(f"Cannot {action} on a past date ({start_date.isoformat()}).", task_id=task_id)
        if self.calendar.is_full_holiday(start_date):
            raise ValidationRejection(
                f"Cannot {action} on a full holiday ({start_date.isoformat()}).", task_id=task_id
            )
