"""
Route handlers for the plan view Blueprint.

Every mutation follows the same path: take the plan lock, load the saved
snapshot, run one scheduling operation, save the new snapshot and return
it with the operation's message. A rejected operation leaves the saved plan
untouched.
"""
from datetime import date, timedelta

from flask import current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from planview.logging_config import OperationContext, get_logger
from planview.models import HolidayEntry
from planview.plan_lock import PlanBusyError, plan_lock_manager
from planview.plan_store import DefaultPlanProtected, PlanNotFound
from planview.plan_view import plan_view_bp
from planview.plan_view.helpers import (
    build_scheduling_context,
    colored_plan_dict,
    get_payload,
    get_plan_store,
    load_board,
    load_learning_curves,
    load_resources,
    operation_response,
    optional_date,
    require_date,
    require_field,
    require_id_list,
    require_int,
    save_board,
)
from planview.scheduling import operations
from planview.scheduling.board import PlanBoard
from planview.scheduling.errors import (
    DataIntegrityError,
    PlanningLimitExceeded,
    SchedulingError,
    TaskNotFound,
    ValidationRejection,
)
from planview.scheduling.load import daily_load_records
from planview.scheduling.models import PlanData

logger = get_logger(__name__)

DEFAULT_LOAD_WINDOW_DAYS = 14


# ----------------------------------------------------------------------
# Error handling
# ----------------------------------------------------------------------

@plan_view_bp.errorhandler(SchedulingError)
def handle_scheduling_error(error):
    if isinstance(error, TaskNotFound):
        status = 404
    elif isinstance(error, ValidationRejection):
        status = 400
    elif isinstance(error, (DataIntegrityError, PlanningLimitExceeded)):
        status = 422
    else:
        status = 400
    logger.warning("Scheduling operation rejected", error_type=type(error).__name__,
                   error_message=error.message, task_id=error.task_id, status=status)
    return jsonify(error.to_dict()), status


@plan_view_bp.errorhandler(PlanNotFound)
def handle_plan_not_found(error):
    logger.warning("Plan not found", plan_id=error.plan_id)
    return jsonify({"error": "Not found", "details": str(error)}), 404


@plan_view_bp.errorhandler(DefaultPlanProtected)
def handle_default_plan_protected(error):
    logger.warning("Attempt to delete built-in plan", plan_id=error.plan_id)
    return jsonify({"error": "Conflict", "details": str(error)}), 409


@plan_view_bp.errorhandler(PlanBusyError)
def handle_plan_busy(error):
    return jsonify({"error": "Conflict", "details": str(error)}), 409


@plan_view_bp.errorhandler(Exception)
def handle_unexpected_error(error):
    if isinstance(error, HTTPException):
        return error
    logger.error("Unhandled plan view error", error=str(error), exc_info=True)
    return jsonify({"error": "Internal server error", "details": str(error)}), 500


def _run_operation(plan_id: str, operation_type: str, operation):
    """
    Run ``operation(board, ctx)`` against a saved plan under its lock and save the result.

    The operation returns an OperationResult; its board replaces the saved snapshot.
    """
    timeout = current_app.config.get("PLAN_LOCK_TIMEOUT_SECONDS")
    with plan_lock_manager.acquire_plan_lock(plan_id, operation_type, timeout_seconds=timeout):
        with OperationContext(operation_type, plan_id=plan_id) as operation_log:
            ctx = build_scheduling_context()
            stored, board = load_board(plan_id, ctx)
            result = operation(board, ctx)
            saved = save_board(stored, result.board)
            operation_log.record(result.task_ids)
    return jsonify(operation_response(saved, result.board, result)), 200


# ----------------------------------------------------------------------
# Plans
# ----------------------------------------------------------------------

@plan_view_bp.route("/plans", methods=["GET"])
def list_plans():
    """
    List saved plans, built-in plans first.

    Returns:
        JSON object with 'plans' array of {id, name, updatedAt}
    """
    plans = get_plan_store().list_plans()
    return jsonify({"plans": [plan.summary() for plan in plans]}), 200


@plan_view_bp.route("/plans", methods=["POST"])
def create_plan():
    """
    Save a plan snapshot. Generates an id when none is given.

    Request body:
        id (optional), name, and any of horizontalTasks, verticalTasks,
        bucketScheduledTasks, bucketUnscheduledOrders
    """
    data = get_payload()
    name = require_field(data, "name")
    snapshot = _snapshot_from_payload(data)
    plan_id = data.get("id")

    if plan_id:
        timeout = current_app.config.get("PLAN_LOCK_TIMEOUT_SECONDS")
        with plan_lock_manager.acquire_plan_lock(plan_id, "save_plan", timeout_seconds=timeout):
            stored = get_plan_store().save_plan(plan_id, name, snapshot)
    else:
        stored = get_plan_store().save_plan(None, name, snapshot)
    return jsonify(stored.to_dict()), 201


@plan_view_bp.route("/plans/<plan_id>", methods=["GET"])
def get_plan(plan_id):
    ctx = build_scheduling_context()
    stored, board = load_board(plan_id, ctx)
    return jsonify(colored_plan_dict(stored, board, request.args.get("rotationMode"))), 200


@plan_view_bp.route("/plans/<plan_id>", methods=["PUT"])
def replace_plan(plan_id):
    """Overwrite a plan's snapshot. The name is kept unless the body carries one."""
    data = get_payload()
    snapshot = _snapshot_from_payload(data)
    timeout = current_app.config.get("PLAN_LOCK_TIMEOUT_SECONDS")
    with plan_lock_manager.acquire_plan_lock(plan_id, "replace_plan", timeout_seconds=timeout):
        stored = get_plan_store().save_plan(plan_id, data.get("name"), snapshot)
    return jsonify(stored.to_dict()), 200


@plan_view_bp.route("/plans/<plan_id>/name", methods=["PATCH"])
def rename_plan(plan_id):
    data = get_payload()
    name = str(require_field(data, "name"))
    if not name.strip():
        raise ValidationRejection("Missing required field: name")
    timeout = current_app.config.get("PLAN_LOCK_TIMEOUT_SECONDS")
    with plan_lock_manager.acquire_plan_lock(plan_id, "rename_plan", timeout_seconds=timeout):
        stored = get_plan_store().rename_plan(plan_id, name)
    return jsonify(stored.summary()), 200


@plan_view_bp.route("/plans/<plan_id>", methods=["DELETE"])
def delete_plan(plan_id):
    timeout = current_app.config.get("PLAN_LOCK_TIMEOUT_SECONDS")
    with plan_lock_manager.acquire_plan_lock(plan_id, "delete_plan", timeout_seconds=timeout):
        get_plan_store().delete_plan(plan_id)
    return jsonify({"message": f"Plan {plan_id} deleted.", "id": plan_id}), 200


def _snapshot_from_payload(data) -> PlanData:
    try:
        return PlanData.from_dict({
            "horizontalTasks": data.get("horizontalTasks"),
            "verticalTasks": data.get("verticalTasks"),
            "bucketScheduledTasks": data.get("bucketScheduledTasks"),
            "bucketUnscheduledOrders": data.get("bucketUnscheduledOrders"),
        })
    except (KeyError, TypeError, ValueError) as e:
        raise ValidationRejection(f"Invalid plan snapshot: {e}")


# ----------------------------------------------------------------------
# Plan views
# ----------------------------------------------------------------------

@plan_view_bp.route("/plans/<plan_id>/board", methods=["GET"])
def get_board(plan_id):
    """
    Both task views with display colors for the requested rotation mode.

    Query params:
        rotationMode: order | product | productType | customer | delivery
    """
    ctx = build_scheduling_context()
    stored, board = load_board(plan_id, ctx)
    payload = colored_plan_dict(stored, board, request.args.get("rotationMode"))
    payload["consistencyErrors"] = board.consistency_errors()
    return jsonify(payload), 200


@plan_view_bp.route("/plans/<plan_id>/daily-load", methods=["GET"])
def get_daily_load(plan_id):
    """
    Planned quantity against line capacity per day.

    Query params:
        from: first day (default today)
        to: last day (default two weeks from ``from``)
    """
    ctx = build_scheduling_context()
    _, board = load_board(plan_id, ctx)

    start = optional_date(request.args.get("from")) or ctx.today
    end = optional_date(request.args.get("to")) or start + timedelta(days=DEFAULT_LOAD_WINDOW_DAYS - 1)
    if end < start:
        raise ValidationRejection("'to' must not be before 'from'.")

    records = daily_load_records(board, ctx.resources.values(), start, end, ctx.calendar)
    return jsonify({
        "from": start.isoformat(),
        "to": end.isoformat(),
        "rows": records,
    }), 200


# ----------------------------------------------------------------------
# Plan mutations
# ----------------------------------------------------------------------

@plan_view_bp.route("/plans/<plan_id>/schedule", methods=["POST"])
def schedule_order(plan_id):
    """
    Place an unscheduled order on a line.

    Request body:
        orderId, resourceId, startDate (YYYY-MM-DD)
    """
    data = get_payload()
    order_id = str(require_field(data, "orderId"))
    resource_id = str(require_field(data, "resourceId"))
    start_date = require_date(data, "startDate")
    return _run_operation(
        plan_id, "schedule_order",
        lambda board, ctx: operations.schedule_order(board, ctx, order_id, resource_id, start_date),
    )


@plan_view_bp.route("/plans/<plan_id>/pull-forward", methods=["POST"])
def pull_forward(plan_id):
    """
    Close gaps between tasks on each line within a date range.

    Request body:
        rangeType: currentDay | currentWeek | currentMonth | entirePlan | dateRange
        referenceDate (optional), from / to (for dateRange)
    """
    data = get_payload()
    range_type = str(require_field(data, "rangeType"))
    reference_date = optional_date(data.get("referenceDate"))
    from_date = optional_date(data.get("from"))
    to_date = optional_date(data.get("to"))
    return _run_operation(
        plan_id, "pull_forward",
        lambda board, ctx: operations.pull_forward(board, ctx, range_type, reference_date, from_date, to_date),
    )


@plan_view_bp.route("/plans/<plan_id>/load-unplanned", methods=["POST"])
def load_unplanned(plan_id):
    """
    Load selected unscheduled orders back to back from today.

    Request body:
        orderIds, resourceId (optional, defaults to the first line)
    """
    data = get_payload()
    order_ids = require_id_list(data, "orderIds")
    resource_id = data.get("resourceId")
    return _run_operation(
        plan_id, "load_unplanned_orders",
        lambda board, ctx: operations.load_unplanned_orders(board, ctx, order_ids, resource_id),
    )


# ----------------------------------------------------------------------
# Task mutations
# ----------------------------------------------------------------------

@plan_view_bp.route("/plans/<plan_id>/tasks/<task_id>/move", methods=["POST"])
def move_task(plan_id, task_id):
    data = get_payload()
    resource_id = str(require_field(data, "resourceId"))
    start_date = require_date(data, "startDate")
    return _run_operation(
        plan_id, "move_task",
        lambda board, ctx: operations.move_task(board, ctx, task_id, resource_id, start_date),
    )


@plan_view_bp.route("/plans/<plan_id>/tasks/<task_id>/undo", methods=["POST"])
def undo_allocation(plan_id, task_id):
    return _run_operation(
        plan_id, "undo_allocation",
        lambda board, ctx: operations.undo_allocation(board, ctx, task_id),
    )


@plan_view_bp.route("/plans/<plan_id>/tasks/<task_id>/split", methods=["POST"])
def split_task(plan_id, task_id):
    """
    Request body:
        quantity, mode: retain (keep quantity in part 1) | remove (move quantity to part 2)
    """
    data = get_payload()
    quantity = require_int(data, "quantity")
    mode = data.get("mode") or "retain"
    return _run_operation(
        plan_id, "split_task",
        lambda board, ctx: operations.split_task(board, ctx, task_id, quantity, mode),
    )


@plan_view_bp.route("/plans/<plan_id>/tasks/<task_id>/merge-candidates", methods=["GET"])
def get_merge_candidates(plan_id, task_id):
    ctx = build_scheduling_context()
    _, board = load_board(plan_id, ctx)
    candidates = operations.merge_candidates(board, task_id)
    return jsonify({"taskId": task_id, "candidates": [c.to_dict() for c in candidates]}), 200


@plan_view_bp.route("/plans/<plan_id>/tasks/<task_id>/merge", methods=["POST"])
def merge_tasks(plan_id, task_id):
    """
    Request body:
        selectedIds: candidate ids from merge-candidates
    """
    data = get_payload()
    selected_ids = require_id_list(data, "selectedIds")
    return _run_operation(
        plan_id, "merge_tasks",
        lambda board, ctx: operations.merge_tasks(board, ctx, task_id, selected_ids),
    )


@plan_view_bp.route("/plans/<plan_id>/tasks/<task_id>/equalize", methods=["POST"])
def equalize_task(plan_id, task_id):
    data = get_payload()
    parts = require_int(data, "parts")
    return _run_operation(
        plan_id, "equalize_task",
        lambda board, ctx: operations.equalize_task(board, ctx, task_id, parts),
    )


@plan_view_bp.route("/plans/<plan_id>/tasks/<task_id>/push-pull", methods=["POST"])
def push_pull(plan_id, task_id):
    """
    Request body:
        scope: orderOnly | linkedOrders
        resourceId, startDate (YYYY-MM-DD)
    """
    data = get_payload()
    scope = str(require_field(data, "scope"))
    resource_id = str(require_field(data, "resourceId"))
    start_date = require_date(data, "startDate")

    def confirm(board: PlanBoard, ctx):
        session = operations.PushPullSession().start(board, task_id, scope)
        return session.confirm(board, ctx, resource_id, start_date)

    return _run_operation(plan_id, "push_pull", confirm)


# ----------------------------------------------------------------------
# Master data
# ----------------------------------------------------------------------

@plan_view_bp.route("/resources", methods=["GET"])
def list_resources():
    return jsonify({"resources": [r.to_dict() for r in load_resources()]}), 200


@plan_view_bp.route("/learning-curves", methods=["GET"])
def list_learning_curves():
    return jsonify({"learningCurves": [lc.to_dict() for lc in load_learning_curves()]}), 200


@plan_view_bp.route("/holidays", methods=["GET"])
def list_holidays():
    """
    Holiday calendar, optionally limited to one year.

    Query params:
        year: four digit year
    """
    query = HolidayEntry.query
    year = request.args.get("year")
    if year:
        try:
            year = int(year)
        except ValueError:
            raise ValidationRejection("year must be a whole number.")
        query = query.filter(
            HolidayEntry.holiday_date >= date(year, 1, 1),
            HolidayEntry.holiday_date <= date(year, 12, 31),
        )
    holidays = query.order_by(HolidayEntry.holiday_date).all()
    return jsonify({"holidays": [h.to_dict() for h in holidays]}), 200
