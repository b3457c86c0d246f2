"""
Production scheduling core for the plan view.

Pure planning logic with no Flask or database imports: learning curves,
the capacity-constrained planner, the dual-view board and the mutation
operators that run on it.
"""
from planview.scheduling.board import PlanBoard, TaskUpdate, build_task_pair
from planview.scheduling.calendar import HolidayCalendar
from planview.scheduling.colors import assign_display_colors
from planview.scheduling.context import SchedulingContext
from planview.scheduling.errors import (
    DataIntegrityError,
    PlanningLimitExceeded,
    SchedulingError,
    TaskNotFound,
    ValidationRejection,
)
from planview.scheduling.planner import PlanResult, plan_task

__all__ = [
    "PlanBoard",
    "TaskUpdate",
    "build_task_pair",
    "HolidayCalendar",
    "assign_display_colors",
    "SchedulingContext",
    "DataIntegrityError",
    "PlanningLimitExceeded",
    "SchedulingError",
    "TaskNotFound",
    "ValidationRejection",
    "PlanResult",
    "plan_task",
]
