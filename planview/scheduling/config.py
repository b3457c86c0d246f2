"""
Scheduling configuration module.

Fixed labels, colors and defaults shared by the planner and the operators.
The planner's iteration cap can be overridden per call (see MAX_PLANNING_DAYS
in planview.config).
"""

from typing import Dict


class SchedulingConfig:
    """Defaults for plan-view scheduling."""

    # Calendar days the planner may walk before giving up (~3 years)
    DEFAULT_MAX_PLANNING_DAYS: int = 1095

    # Efficiency recorded on segments planned without a learning curve
    FLAT_EFFICIENCY: float = 100.0

    # Merged order style text is cut to this many characters
    MERGED_STYLE_MAX_LENGTH: int = 100

    # Task colors by how the task was created
    TASK_COLORS: Dict[str, str] = {
        'scheduled': 'bg-purple-500 text-white',
        'merged': 'bg-green-600 text-white',
        'loaded': 'bg-teal-500 text-white',
        'split': 'bg-orange-500 text-white',
    }

    DEFAULT_IMAGE_HINT: str = 'apparel fashion'
    MERGED_IMAGE_HINT: str = 'apparel collage'

    # Reasons written on orders returned to the unscheduled pool
    UNLOADED_REASON: str = 'Unloaded from plan'
    ANOTHER_PART_UNLOADED: str = '; another part also unloaded'
    MERGED_REASON: str = 'Merged Order'

    SPLIT_MODES = ('retain', 'remove')
    PUSH_PULL_SCOPES = ('orderOnly', 'linkedOrders')
    PULL_FORWARD_RANGES = ('currentDay', 'currentWeek', 'currentMonth', 'entirePlan', 'dateRange')

    @classmethod
    def get_task_color(cls, kind: str) -> str:
        """
        Get the stored color for a newly created task.

        Args:
            kind: 'scheduled', 'merged', 'loaded' or 'split'

        Returns:
            str: CSS class string, the scheduled color for unknown kinds
        """
        return cls.TASK_COLORS.get(kind, cls.TASK_COLORS['scheduled'])
