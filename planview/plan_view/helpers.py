"""
Helpers shared by the plan view routes: building the scheduling context from
master data, loading and saving boards, and reading request payloads.
"""
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from flask import current_app, request

from planview.datetime_utils import parse_iso_date, plant_today
from planview.models import HolidayEntry, LearningCurveMaster, ProductionLine
from planview.plan_store import PlanStore, StoredPlan
from planview.scheduling import HolidayCalendar, PlanBoard, SchedulingContext, ValidationRejection
from planview.scheduling.colors import assign_display_colors
from planview.scheduling.masters import default_learning_curves, default_production_lines
from planview.scheduling.models import PlanData


def get_plan_store() -> PlanStore:
    return current_app.extensions["plan_store"]


def load_resources():
    """Active sewing lines from the database, or the starter lines when none are set up."""
    resources = ProductionLine.active_resources()
    return resources or default_production_lines()


def load_learning_curves():
    curves = [row.to_definition() for row in LearningCurveMaster.query.order_by(LearningCurveMaster.curve_id).all()]
    return curves or default_learning_curves()


def load_calendar() -> HolidayCalendar:
    return HolidayCalendar({row.holiday_date: row.to_detail() for row in HolidayEntry.query.all()})


def build_scheduling_context(today: Optional[date] = None) -> SchedulingContext:
    """Context for one request: current master data, the plant date and the configured iteration cap."""
    return SchedulingContext.build(
        resources=load_resources(),
        today=today or plant_today(current_app.config.get("PLANT_TIMEZONE")),
        calendar=load_calendar(),
        learning_curves=load_learning_curves(),
        max_planning_days=current_app.config.get("MAX_PLANNING_DAYS", 1095),
    )


def load_board(plan_id: str, ctx: SchedulingContext) -> Tuple[StoredPlan, PlanBoard]:
    """
    Load a saved plan as a board, rebuilding daily breakdowns missing from older
    saves. The context's id sequence continues after the ids already on the plan.
    """
    stored = get_plan_store().load_plan(plan_id)
    board = PlanBoard.from_plan_data(stored.data).fill_missing_daily_data(ctx)
    ctx.continue_ids_after(board.task_ids() + [o.id for o in board.unscheduled_orders])
    return stored, board


def save_board(stored: StoredPlan, board: PlanBoard) -> StoredPlan:
    return get_plan_store().save_plan(stored.id, stored.name, board.to_plan_data())


def colored_plan_dict(stored: StoredPlan, board: PlanBoard, rotation_mode: Optional[str] = None) -> Dict[str, Any]:
    """Plan payload with display colors derived for the rotation mode."""
    mode = rotation_mode or current_app.config.get("DEFAULT_ROTATION_MODE", "order")
    try:
        horizontal = assign_display_colors(board.horizontal_tasks, mode)
        vertical = assign_display_colors(board.vertical_tasks, mode)
    except ValueError as e:
        raise ValidationRejection(str(e))

    data = PlanData(
        horizontal_tasks=horizontal,
        vertical_tasks=vertical,
        bucket_scheduled_tasks=list(board.bucket_scheduled_tasks),
        bucket_unscheduled_orders=list(board.unscheduled_orders),
    )
    result = stored.summary()
    result.update(data.to_dict())
    result["rotationMode"] = mode
    return result


# ----------------------------------------------------------------------
# Request payloads
# ----------------------------------------------------------------------

def get_payload() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationRejection("Request body must be a JSON object.")
    return data


def require_field(data: Dict[str, Any], key: str) -> Any:
    value = data.get(key)
    if value is None or value == "":
        raise ValidationRejection(f"Missing required field: {key}")
    return value


def require_date(data: Dict[str, Any], key: str) -> date:
    try:
        return parse_iso_date(require_field(data, key))
    except ValueError as e:
        raise ValidationRejection(str(e))


def optional_date(value: Any) -> Optional[date]:
    try:
        return parse_iso_date(value)
    except ValueError as e:
        raise ValidationRejection(str(e))


def require_int(data: Dict[str, Any], key: str) -> int:
    value = require_field(data, key)
    if isinstance(value, bool):
        raise ValidationRejection(f"{key} must be a whole number.")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationRejection(f"{key} must be a whole number.")
    if number != float(value):
        raise ValidationRejection(f"{key} must be a whole number.")
    return number


def require_id_list(data: Dict[str, Any], key: str) -> List[str]:
    value = data.get(key)
    if not isinstance(value, list) or not value:
        raise ValidationRejection(f"{key} must be a non-empty list.")
    return [str(item) for item in value]


def operation_response(stored: StoredPlan, board: PlanBoard, result) -> Dict[str, Any]:
    return {
        "message": result.message,
        "taskIds": list(result.task_ids),
        "plan": colored_plan_dict(stored, board),
    }
