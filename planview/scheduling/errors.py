"""
Errors raised by the scheduling core.

Every error is raised before a new board is produced, so a failed operation
never leaves a partially applied plan behind.
"""
from typing import Optional


class SchedulingError(Exception):
    """Base class for scheduling failures carrying a user-facing message."""

    title = "Scheduling error"

    def __init__(self, message: str, task_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.task_id = task_id

    def to_dict(self):
        return {
            "error": self.title,
            "details": self.message,
            "taskId": self.task_id,
        }


class ValidationRejection(SchedulingError):
    """User-correctable input problem (past date, holiday, bad quantity, ...)."""

    title = "Validation error"


class DataIntegrityError(SchedulingError):
    """A task is missing data an operator depends on, e.g. its order details."""

    title = "Data integrity error"


class PlanningLimitExceeded(SchedulingError):
    """The planner walked past its calendar-day cap without placing the quantity."""

    title = "Planning limit exceeded"

    def __init__(self, order_id: str, max_days: int, task_id: Optional[str] = None):
        super().__init__(
            f"Could not place order {order_id} within {max_days} calendar days. "
            f"Check the line capacity and learning curve.",
            task_id=task_id,
        )
        self.order_id = order_id
        self.max_days = max_days


class TaskNotFound(ValidationRejection):
    """The task or unscheduled order named by a command is not on the board."""

    title = "Not found"
