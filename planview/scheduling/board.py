"""
Dual-view plan board.

A scheduled task lives twice: once in the horizontal (grid) collection and
once in the vertical (daily timeline) collection, joined by task id. The
board is an immutable snapshot of both collections plus the unscheduled
order pool. Changes produce a new board via filter-then-append, so a
half-applied operation is never visible.
"""
from dataclasses import dataclass, replace
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from planview.scheduling.config import SchedulingConfig
from planview.scheduling.context import SchedulingContext
from planview.scheduling.errors import DataIntegrityError
from planview.scheduling.models import (
    DailySegment,
    HorizontalTask,
    Order,
    PlanData,
    TnaPlan,
    VerticalTask,
)
from planview.scheduling.planner import PlanResult, plan_task, proportional_daily_plan

Task = Union[HorizontalTask, VerticalTask]
TaskPair = Tuple[HorizontalTask, VerticalTask]


def default_label(order: Order) -> str:
    return f"{order.style} ({order.quantity})"


def default_order_name(order: Order) -> str:
    return f"{order.style} [{order.quantity}]"


def default_image_hint(order: Order, fallback: str = SchedulingConfig.DEFAULT_IMAGE_HINT) -> str:
    if order.image_hint:
        return order.image_hint
    if order.product_type:
        return order.product_type.lower()
    return fallback


def build_task_pair(
    task_id: str,
    order: Order,
    resource_id: str,
    start_date: date,
    plan: PlanResult,
    color: Optional[str],
    label: Optional[str] = None,
    order_name: Optional[str] = None,
    image_hint: Optional[str] = None,
    learning_curve_id: Optional[str] = None,
    merged_order_ids: Sequence[str] = (),
    tna_plan: Optional[TnaPlan] = None,
) -> TaskPair:
    """Create the horizontal and vertical records for one scheduled task."""
    common = dict(
        id=task_id,
        resource_id=resource_id,
        start_date=start_date,
        end_date=plan.actual_end_date,
        original_order_details=order,
        color=color,
        display_color=color,
        learning_curve_id=learning_curve_id,
        merged_order_ids=tuple(merged_order_ids),
        tna_plan=tna_plan,
    )
    horizontal = HorizontalTask(label=label or default_label(order), **common)
    vertical = VerticalTask(
        order_name=order_name or default_order_name(order),
        image_hint=image_hint or default_image_hint(order),
        daily_data=plan.segments,
        **common,
    )
    return horizontal, vertical


@dataclass(frozen=True)
class TaskUpdate:
    """A coarse change to one task. Fields left as None keep their current value."""
    resource_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    order: Optional[Order] = None
    color: Optional[str] = None
    label: Optional[str] = None
    order_name: Optional[str] = None
    learning_curve_id: Optional[str] = None
    daily_data: Optional[Tuple[DailySegment, ...]] = None


class PlanBoard:
    """Immutable snapshot of both task views and the unscheduled pool."""

    def __init__(
        self,
        horizontal_tasks: Iterable[HorizontalTask] = (),
        vertical_tasks: Iterable[VerticalTask] = (),
        unscheduled_orders: Iterable[Order] = (),
        bucket_scheduled_tasks: Iterable[dict] = (),
    ):
        self._horizontal: Tuple[HorizontalTask, ...] = tuple(horizontal_tasks)
        self._vertical: Tuple[VerticalTask, ...] = tuple(vertical_tasks)
        self._unscheduled: Tuple[Order, ...] = tuple(unscheduled_orders)
        self._bucket_scheduled: Tuple[dict, ...] = tuple(bucket_scheduled_tasks)

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    @classmethod
    def from_plan_data(cls, plan: PlanData) -> "PlanBoard":
        return cls(
            horizontal_tasks=plan.horizontal_tasks,
            vertical_tasks=plan.vertical_tasks,
            unscheduled_orders=plan.bucket_unscheduled_orders,
            bucket_scheduled_tasks=plan.bucket_scheduled_tasks,
        )

    def to_plan_data(self) -> PlanData:
        return PlanData(
            horizontal_tasks=list(self._horizontal),
            vertical_tasks=list(self._vertical),
            bucket_scheduled_tasks=list(self._bucket_scheduled),
            bucket_unscheduled_orders=list(self._unscheduled),
        )

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def horizontal_tasks(self) -> Tuple[HorizontalTask, ...]:
        return self._horizontal

    @property
    def vertical_tasks(self) -> Tuple[VerticalTask, ...]:
        return self._vertical

    @property
    def unscheduled_orders(self) -> Tuple[Order, ...]:
        return self._unscheduled

    @property
    def bucket_scheduled_tasks(self) -> Tuple[dict, ...]:
        return self._bucket_scheduled

    def task_ids(self) -> List[str]:
        seen = {}
        for task in self._horizontal + self._vertical:
            seen.setdefault(task.id, None)
        return list(seen)

    def get_horizontal(self, task_id: str) -> Optional[HorizontalTask]:
        return next((t for t in self._horizontal if t.id == task_id), None)

    def get_vertical(self, task_id: str) -> Optional[VerticalTask]:
        return next((t for t in self._vertical if t.id == task_id), None)

    def get_task(self, task_id: str) -> Optional[Task]:
        return self.get_horizontal(task_id) or self.get_vertical(task_id)

    def all_tasks(self) -> List[Task]:
        """One record per task id, preferring the horizontal view."""
        tasks: Dict[str, Task] = {t.id: t for t in self._horizontal}
        for task in self._vertical:
            tasks.setdefault(task.id, task)
        return list(tasks.values())

    def find_unscheduled(self, order_id: str) -> Optional[Order]:
        return next((o for o in self._unscheduled if o.id == order_id), None)

    def tasks_for_resource(self, resource_id: str) -> List[HorizontalTask]:
        return [t for t in self._horizontal if t.resource_id == resource_id]

    def tasks_for_base_order(self, base_order_id: str) -> List[Task]:
        return [t for t in self.all_tasks() if t.base_order_id == base_order_id]

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------

    def replace(
        self,
        remove_ids: Iterable[str] = (),
        add: Iterable[TaskPair] = (),
        unscheduled: Optional[Iterable[Order]] = None,
    ) -> "PlanBoard":
        """Drop tasks by id from both views, append new pairs, optionally swap the pool."""
        removed = set(remove_ids)
        pairs = list(add)
        horizontal = [t for t in self._horizontal if t.id not in removed]
        vertical = [t for t in self._vertical if t.id not in removed]
        horizontal.extend(h for h, _ in pairs)
        vertical.extend(v for _, v in pairs)
        return PlanBoard(
            horizontal_tasks=horizontal,
            vertical_tasks=vertical,
            unscheduled_orders=self._unscheduled if unscheduled is None else unscheduled,
            bucket_scheduled_tasks=self._bucket_scheduled,
        )

    def apply_update(self, task_id: str, update: TaskUpdate, ctx: SchedulingContext) -> "PlanBoard":
        """
        Apply one coarse update to both views.

        The horizontal label and vertical order name are rebuilt from the
        order unless the update supplies them. When no daily breakdown is
        supplied, the planner recomputes it for the new placement.

        Raises:
            DataIntegrityError: If the task has no order details
        """
        current_h = self.get_horizontal(task_id)
        current_v = self.get_vertical(task_id)
        current = current_h or current_v
        if current is None:
            raise DataIntegrityError(f"Task {task_id} is not on the board.", task_id=task_id)

        order = update.order or current.original_order_details
        if order is None:
            raise DataIntegrityError(f"Task {task_id} has no order details.", task_id=task_id)

        resource_id = update.resource_id or current.resource_id
        start_date = update.start_date or current.start_date
        learning_curve_id = update.learning_curve_id or current.learning_curve_id

        if update.daily_data:
            daily_data = tuple(update.daily_data)
            end_date = update.end_date or daily_data[-1].date
        else:
            resource = ctx.require_resource(resource_id)
            plan = plan_task(
                order,
                resource,
                start_date,
                ctx.calendar,
                learning_curve=ctx.learning_curve_for(order, learning_curve_id),
                max_days=ctx.max_planning_days,
                task_id=task_id,
            )
            daily_data = plan.segments
            end_date = plan.actual_end_date

        coarse = dict(
            resource_id=resource_id,
            start_date=start_date,
            end_date=end_date,
            original_order_details=order,
            learning_curve_id=learning_curve_id,
        )
        if update.color:
            coarse["color"] = update.color

        horizontal = [
            replace(t, label=update.label or default_label(order), **coarse) if t.id == task_id else t
            for t in self._horizontal
        ]
        vertical = [
            replace(
                t,
                order_name=update.order_name or default_order_name(order),
                image_hint=t.image_hint or default_image_hint(order),
                daily_data=daily_data,
                **coarse,
            ) if t.id == task_id else t
            for t in self._vertical
        ]
        return PlanBoard(horizontal, vertical, self._unscheduled, self._bucket_scheduled)

    def fill_missing_daily_data(self, ctx: SchedulingContext) -> "PlanBoard":
        """Rebuild daily breakdowns for vertical tasks saved without one."""
        vertical = []
        for task in self._vertical:
            if not task.daily_data and task.original_order_details is not None:
                order = task.original_order_details
                segments = proportional_daily_plan(
                    task.start_date,
                    task.end_date,
                    order.style,
                    order.quantity,
                    learning_curve=ctx.learning_curve_for(order, task.learning_curve_id),
                    calendar=ctx.calendar,
                )
                task = replace(task, daily_data=tuple(segments))
            vertical.append(task)
        return PlanBoard(self._horizontal, vertical, self._unscheduled, self._bucket_scheduled)

    # ------------------------------------------------------------------
    # Consistency
    # ------------------------------------------------------------------

    def consistency_errors(self) -> List[str]:
        """Describe every task whose two views disagree on placement."""
        errors = []
        horizontal = {t.id: t for t in self._horizontal}
        vertical = {t.id: t for t in self._vertical}

        for task_id in sorted(set(horizontal) | set(vertical)):
            h = horizontal.get(task_id)
            v = vertical.get(task_id)
            if h is None:
                errors.append(f"{task_id}: missing from horizontal view")
                continue
            if v is None:
                errors.append(f"{task_id}: missing from vertical view")
                continue
            for field_name in ("resource_id", "start_date", "end_date"):
                if getattr(h, field_name) != getattr(v, field_name):
                    errors.append(
                        f"{task_id}: {field_name} differs "
                        f"({getattr(h, field_name)} != {getattr(v, field_name)})"
                    )
        return errors

    def assert_consistent(self) -> "PlanBoard":
        errors = self.consistency_errors()
        if errors:
            raise DataIntegrityError("Plan views out of sync: " + "; ".join(errors))
        return self
