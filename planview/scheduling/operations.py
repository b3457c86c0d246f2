"""
Plan mutation operators.

Each operator reads one board snapshot, validates its input, runs the
planner for every task it creates or moves and returns a new board. Nothing
is written to the input board; a rejected command raises before any new
board exists.
"""
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from planview.logging_config import get_logger
from planview.scheduling.board import (
    PlanBoard,
    Task,
    TaskPair,
    TaskUpdate,
    build_task_pair,
    default_image_hint,
    default_label,
    default_order_name,
)
from planview.scheduling.config import SchedulingConfig
from planview.scheduling.context import SchedulingContext
from planview.scheduling.errors import DataIntegrityError, TaskNotFound, ValidationRejection
from planview.scheduling.models import HorizontalTask, Order, SchedulableResource
from planview.scheduling.planner import PlanResult, plan_task

logger = get_logger(__name__)

ONE_DAY = timedelta(days=1)


@dataclass
class OperationResult:
    """New board plus what the operator did, for the caller to report."""
    board: PlanBoard
    message: str
    task_ids: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class MergeCandidate:
    """A scheduled task or unscheduled order that can be folded into a merge."""
    id: str
    display_label: str
    kind: str  # 'task' or 'unscheduled_order'
    buyer: str
    quantity: int
    style: str
    order: Order
    product_type: Optional[str] = None
    learning_curve_id: Optional[str] = None

    def to_dict(self):
        return {
            "id": self.id,
            "displayLabel": self.display_label,
            "type": self.kind,
            "buyer": self.buyer,
            "quantity": self.quantity,
            "style": self.style,
            "productType": self.product_type,
        }


# ----------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------

def _require_task(board: PlanBoard, task_id: str) -> Tuple[Task, Order]:
    task = board.get_task(task_id)
    if task is None:
        raise TaskNotFound(f"Task {task_id} not found.", task_id=task_id)
    if task.original_order_details is None:
        raise DataIntegrityError(f"Task {task_id} is missing its order details.", task_id=task_id)
    return task, task.original_order_details


def _require_quantity(order: Order, task_id: Optional[str] = None) -> Order:
    if order.quantity < 0:
        raise ValidationRejection(
            f"Order {order.id} has a negative quantity ({order.quantity}).", task_id=task_id
        )
    return order


def _plan(
    ctx: SchedulingContext,
    order: Order,
    resource: SchedulableResource,
    start_date: date,
    learning_curve_id: Optional[str] = None,
    task_id: Optional[str] = None,
) -> PlanResult:
    return plan_task(
        order,
        resource,
        start_date,
        ctx.calendar,
        learning_curve=ctx.learning_curve_for(order, learning_curve_id),
        max_days=ctx.max_planning_days,
        task_id=task_id,
    )


def _image_hint_for(board: PlanBoard, task: Task, order: Order) -> Optional[str]:
    vertical = board.get_vertical(task.id)
    if vertical is not None and vertical.image_hint:
        return vertical.image_hint
    return order.product_type.lower() if order.product_type else None


def _replanned_pair(
    board: PlanBoard,
    task: Task,
    order: Order,
    resource_id: str,
    start_date: date,
    plan: PlanResult,
) -> TaskPair:
    """Re-placed copy of an existing task, keeping its labels and colors."""
    horizontal = board.get_horizontal(task.id)
    vertical = board.get_vertical(task.id)
    return build_task_pair(
        task.id,
        order,
        resource_id,
        start_date,
        plan,
        color=task.color,
        label=horizontal.label if horizontal is not None and horizontal.label else default_label(order),
        order_name=vertical.order_name if vertical is not None and vertical.order_name else default_order_name(order),
        image_hint=_image_hint_for(board, task, order),
        learning_curve_id=task.learning_curve_id,
        merged_order_ids=task.merged_order_ids,
        tna_plan=task.tna_plan,
    )


def _result(board: PlanBoard, message: str, task_ids: Sequence[str]) -> OperationResult:
    board.assert_consistent()
    return OperationResult(board=board, message=message, task_ids=list(task_ids))


def equal_parts(total: int, parts: int) -> List[int]:
    """
    Split ``total`` into ``parts`` integers differing by at most one.

    The remainder goes one unit each to the first parts:
        equal_parts(100, 3) -> [34, 33, 33]
    """
    base, remainder = divmod(total, parts)
    return [base + (1 if index < remainder else 0) for index in range(parts)]


# ----------------------------------------------------------------------
# Schedule / move / undo
# ----------------------------------------------------------------------

def schedule_order(
    board: PlanBoard,
    ctx: SchedulingContext,
    order_id: str,
    resource_id: str,
    start_date: date,
) -> OperationResult:
    """Place an unscheduled order on a line starting at ``start_date``."""
    order = board.find_unscheduled(order_id)
    if order is None:
        raise TaskNotFound(f"Order {order_id} is not in the unscheduled list.")
    _require_quantity(order)
    resource = ctx.require_resource(resource_id)
    ctx.require_valid_start(start_date, "schedule")

    task_id = f"task-{order.base_order_id}-sch-{ctx.next_id()}"
    plan = _plan(ctx, order, resource, start_date, task_id=task_id)
    pair = build_task_pair(
        task_id,
        order,
        resource.id,
        start_date,
        plan,
        color=SchedulingConfig.get_task_color('scheduled'),
        image_hint=default_image_hint(order),
        learning_curve_id=order.learning_curve_id,
    )

    remaining = [o for o in board.unscheduled_orders if o.id != order_id]
    new_board = board.replace(add=[pair], unscheduled=remaining)

    logger.info(
        "Order scheduled",
        order_id=order_id,
        task_id=task_id,
        resource_id=resource.id,
        start_date=start_date.isoformat(),
        end_date=plan.actual_end_date.isoformat(),
    )
    return _result(new_board, f"Order {order.style} scheduled on {resource.name}.", [task_id])


def move_task(
    board: PlanBoard,
    ctx: SchedulingContext,
    task_id: str,
    resource_id: str,
    start_date: date,
) -> OperationResult:
    """Re-plan a task on a new line and/or start date. Quantity is unchanged."""
    _require_task(board, task_id)
    resource = ctx.require_resource(resource_id)
    ctx.require_valid_start(start_date, "move a task", task_id=task_id)

    horizontal = board.get_horizontal(task_id)
    vertical = board.get_vertical(task_id)
    update = TaskUpdate(
        resource_id=resource.id,
        start_date=start_date,
        label=horizontal.label if horizontal is not None else None,
        order_name=vertical.order_name if vertical is not None else None,
    )
    new_board = board.apply_update(task_id, update, ctx)

    logger.info("Task moved", task_id=task_id, resource_id=resource.id, start_date=start_date.isoformat())
    return _result(new_board, f"Task moved to {resource.name}.", [task_id])


def undo_allocation(board: PlanBoard, ctx: SchedulingContext, task_id: str) -> OperationResult:
    """
    Take a task off the plan and return its order to the unscheduled pool.

    The order comes back under its base order id; when the pool already holds
    that base id, the quantities are added together.
    """
    _, order = _require_task(board, task_id)
    base_id = order.base_order_id

    returned = replace(order, id=base_id, reason=SchedulingConfig.UNLOADED_REASON)
    pool = list(board.unscheduled_orders)
    existing_index = next((i for i, o in enumerate(pool) if o.base_order_id == base_id), None)
    if existing_index is None:
        pool.append(returned)
    else:
        existing = pool[existing_index]
        pool[existing_index] = replace(
            existing,
            id=base_id,
            quantity=existing.quantity + returned.quantity,
            reason=(existing.reason or SchedulingConfig.UNLOADED_REASON) + SchedulingConfig.ANOTHER_PART_UNLOADED,
        )
    pool.sort(key=lambda o: o.id)

    new_board = board.replace(remove_ids=[task_id], unscheduled=pool)
    logger.info("Task unscheduled", task_id=task_id, base_order_id=base_id, quantity=order.quantity)
    return _result(new_board, f"Order for style {order.style} moved to unscheduled list.", [base_id])


# ----------------------------------------------------------------------
# Split / merge / equalize
# ----------------------------------------------------------------------

def split_task(
    board: PlanBoard,
    ctx: SchedulingContext,
    task_id: str,
    quantity: int,
    mode: str = 'retain',
) -> OperationResult:
    """
    Split a task in two on the same line.

    ``mode='retain'`` keeps ``quantity`` in the first part; ``mode='remove'``
    moves ``quantity`` into the second part. Part 2 starts on the first valid
    day after part 1 ends.
    """
    if mode not in SchedulingConfig.SPLIT_MODES:
        raise ValidationRejection(f"Split mode must be one of: {', '.join(SchedulingConfig.SPLIT_MODES)}")

    task, order = _require_task(board, task_id)
    if order.quantity <= 1:
        raise ValidationRejection("Task quantity must be greater than 1 to split.", task_id=task_id)

    if mode == 'retain':
        first_qty, second_qty = quantity, order.quantity - quantity
    else:
        first_qty, second_qty = order.quantity - quantity, quantity
    if first_qty <= 0 or second_qty <= 0:
        raise ValidationRejection("Both parts must have a quantity greater than 0.", task_id=task_id)

    ctx.require_valid_start(task.start_date, "split a task starting", task_id=task_id)
    resource = ctx.require_resource(task.resource_id)

    base_id = order.base_order_id
    style = order.style
    color = task.color or SchedulingConfig.get_task_color('split')
    image_hint = _image_hint_for(board, task, order)

    part_one = replace(order, id=f"{base_id}-splitA-{ctx.next_id()}", quantity=first_qty, base_order_id=base_id)
    plan_one = _plan(ctx, part_one, resource, task.start_date, task.learning_curve_id, part_one.id)

    second_start = ctx.calendar.next_valid_start(plan_one.actual_end_date + ONE_DAY, ctx.today)
    part_two = replace(order, id=f"{base_id}-splitB-{ctx.next_id()}", quantity=second_qty, base_order_id=base_id)
    plan_two = _plan(ctx, part_two, resource, second_start, task.learning_curve_id, part_two.id)

    pairs = [
        build_task_pair(
            part.id, part, resource.id, start, plan,
            color=color,
            label=f"{style} (S{number}-{part.quantity})",
            order_name=f"{style} [S{number}-{part.quantity}]",
            image_hint=image_hint,
            learning_curve_id=task.learning_curve_id,
            tna_plan=task.tna_plan,
        )
        for number, part, start, plan in (
            (1, part_one, task.start_date, plan_one),
            (2, part_two, second_start, plan_two),
        )
    ]
    new_board = board.replace(remove_ids=[task_id], add=pairs)

    logger.info("Task split", task_id=task_id, quantities=[first_qty, second_qty], mode=mode)
    return _result(
        new_board,
        f"Task for style {style} split into quantities {first_qty} and {second_qty}.",
        [part_one.id, part_two.id],
    )


def merge_candidates(board: PlanBoard, task_id: str) -> List[MergeCandidate]:
    """
    Scheduled tasks and unscheduled orders that share the task's buyer.

    Raises:
        ValidationRejection: If the task has no buyer or nothing can be merged
    """
    anchor, order = _require_task(board, task_id)
    buyer = order.buyer
    if not buyer:
        raise ValidationRejection("Task has no buyer information.", task_id=task_id)

    candidates = []
    for task in board.all_tasks():
        other = task.original_order_details
        if task.id == anchor.id or other is None or other.buyer != buyer:
            continue
        label = task.label if isinstance(task, HorizontalTask) else task.order_name
        candidates.append(MergeCandidate(
            id=task.id,
            display_label=f"{label} (Scheduled)",
            kind='task',
            buyer=other.buyer,
            quantity=other.quantity,
            style=other.style,
            order=other,
            product_type=other.product_type,
            learning_curve_id=task.learning_curve_id,
        ))

    for unscheduled in board.unscheduled_orders:
        if unscheduled.buyer != buyer:
            continue
        candidates.append(MergeCandidate(
            id=unscheduled.id,
            display_label=f"{unscheduled.style} ({unscheduled.quantity}) (Unscheduled)",
            kind='unscheduled_order',
            buyer=unscheduled.buyer,
            quantity=unscheduled.quantity,
            style=unscheduled.style,
            order=unscheduled,
            product_type=unscheduled.product_type,
            learning_curve_id=unscheduled.learning_curve_id,
        ))

    if not candidates:
        raise ValidationRejection(f"No other orders found for buyer {buyer}.", task_id=task_id)
    return candidates


def merge_tasks(
    board: PlanBoard,
    ctx: SchedulingContext,
    task_id: str,
    selected_ids: Iterable[str],
) -> OperationResult:
    """
    Fold the selected candidates into the anchor task.

    The merged task starts where the anchor starts, on the anchor's line, and
    carries the summed quantity and the earliest requested ship date.
    """
    selected = list(dict.fromkeys(selected_ids))
    if not selected:
        raise ValidationRejection("No orders selected for merge.", task_id=task_id)

    anchor, order = _require_task(board, task_id)
    candidates: Dict[str, MergeCandidate] = {c.id: c for c in merge_candidates(board, task_id)}
    unknown = [item_id for item_id in selected if item_id not in candidates]
    if unknown:
        raise ValidationRejection(f"Cannot merge {', '.join(unknown)}: not eligible for this task.", task_id=task_id)

    _require_quantity(order, task_id)
    for item_id in selected:
        _require_quantity(candidates[item_id].order, task_id)
    ctx.require_valid_start(anchor.start_date, "merge starting", task_id=task_id)
    resource = ctx.require_resource(anchor.resource_id)

    total_quantity = order.quantity
    descriptions = [f"{order.style} ({order.quantity})"]
    source_ids = {anchor.id}
    learning_curve_id = anchor.learning_curve_id
    earliest_ship = order.requested_ship_date
    base_ids = [order.base_order_id]

    for item_id in selected:
        candidate = candidates[item_id]
        total_quantity += candidate.quantity
        descriptions.append(f"{candidate.style} ({candidate.quantity})")
        source_ids.add(candidate.id)

        ship = candidate.order.requested_ship_date
        if ship is not None and (earliest_ship is None or ship < earliest_ship):
            earliest_ship = ship
        if candidate.order.base_order_id not in base_ids:
            base_ids.append(candidate.order.base_order_id)
        if not learning_curve_id and candidate.learning_curve_id:
            learning_curve_id = candidate.learning_curve_id

    merged_id = f"merged-{'_'.join(base_ids[:2])}-{ctx.next_id()}"
    style = f"MERGED ({len(base_ids)}): {'; '.join(descriptions[:2])}{'...' if len(descriptions) > 2 else ''}"
    style = style[:SchedulingConfig.MERGED_STYLE_MAX_LENGTH]

    merged_order = Order(
        id=merged_id,
        buyer=order.buyer,
        style=style,
        quantity=total_quantity,
        requested_ship_date=earliest_ship,
        product_type=order.product_type,
        reason=SchedulingConfig.MERGED_REASON,
        learning_curve_id=learning_curve_id,
        image_hint=order.image_hint,
        base_order_id=merged_id,
    )
    plan = _plan(ctx, merged_order, resource, anchor.start_date, learning_curve_id, merged_id)
    pair = build_task_pair(
        merged_id,
        merged_order,
        resource.id,
        anchor.start_date,
        plan,
        color=SchedulingConfig.get_task_color('merged'),
        label=style,
        order_name=style,
        image_hint=default_image_hint(merged_order, SchedulingConfig.MERGED_IMAGE_HINT),
        learning_curve_id=learning_curve_id,
        merged_order_ids=base_ids,
        tna_plan=anchor.tna_plan,
    )

    pool = [o for o in board.unscheduled_orders if o.id not in source_ids]
    new_board = board.replace(remove_ids=source_ids, add=[pair], unscheduled=pool)

    logger.info(
        "Orders merged",
        task_id=merged_id,
        source_ids=sorted(source_ids),
        quantity=total_quantity,
    )
    return _result(new_board, f"{len(descriptions)} orders/parts merged into a new task.", [merged_id])


def equalize_task(
    board: PlanBoard,
    ctx: SchedulingContext,
    task_id: str,
    parts: int,
) -> OperationResult:
    """Replace a task with ``parts`` near-equal parts laid out back to back."""
    task, order = _require_task(board, task_id)
    if parts < 2:
        raise ValidationRejection("Number of parts must be at least 2.", task_id=task_id)
    if parts > order.quantity:
        raise ValidationRejection(
            f"Cannot split into more parts ({parts}) than quantity ({order.quantity}).", task_id=task_id
        )

    ctx.require_valid_start(task.start_date, "equalise a task starting", task_id=task_id)
    resource = ctx.require_resource(task.resource_id)

    base_id = order.base_order_id
    style = order.style
    color = task.color or SchedulingConfig.get_task_color('scheduled')
    image_hint = _image_hint_for(board, task, order)

    pairs = []
    current = task.start_date
    for number, part_qty in enumerate(equal_parts(order.quantity, parts), start=1):
        current = ctx.calendar.next_valid_start(current, ctx.today)
        part = replace(order, id=f"{base_id}-eq{number}-{ctx.next_id()}", quantity=part_qty, base_order_id=base_id)
        plan = _plan(ctx, part, resource, current, task.learning_curve_id, part.id)
        pairs.append(build_task_pair(
            part.id, part, resource.id, current, plan,
            color=color,
            label=f"{style} (EQ {number}/{parts} - {part_qty})",
            order_name=f"{style} [EQ {number}/{parts} - {part_qty}]",
            image_hint=image_hint,
            learning_curve_id=task.learning_curve_id,
            tna_plan=task.tna_plan,
        ))
        current = plan.actual_end_date + ONE_DAY

    new_board = board.replace(remove_ids=[task_id], add=pairs)
    logger.info("Task equalised", task_id=task_id, parts=parts, quantity=order.quantity)
    return _result(
        new_board,
        f"Order for {style} split into {parts} parts.",
        [horizontal.id for horizontal, _ in pairs],
    )


# ----------------------------------------------------------------------
# Push / pull and pull forward
# ----------------------------------------------------------------------

def push_pull(
    board: PlanBoard,
    ctx: SchedulingContext,
    task_id: str,
    scope: str,
    resource_id: str,
    start_date: date,
) -> OperationResult:
    """
    Shift a task, or every task of its base order, to a new line and date.

    Tasks in scope keep their relative order (by current start) and are laid
    out back to back from ``start_date``.
    """
    if scope not in SchedulingConfig.PUSH_PULL_SCOPES:
        raise ValidationRejection(f"Scope must be one of: {', '.join(SchedulingConfig.PUSH_PULL_SCOPES)}")

    origin, _ = _require_task(board, task_id)
    ctx.require_valid_start(start_date, "shift task(s)", task_id=task_id)
    resource = ctx.require_resource(resource_id)

    if scope == 'orderOnly':
        in_scope = [origin]
    else:
        in_scope = [
            t for t in board.all_tasks()
            if t.original_order_details is not None and t.base_order_id == origin.base_order_id
        ]
    in_scope.sort(key=lambda t: t.start_date)

    pairs = []
    current = start_date
    for task in in_scope:
        current = ctx.calendar.next_valid_start(current, ctx.today)
        order = task.original_order_details
        plan = _plan(ctx, order, resource, current, task.learning_curve_id, task.id)
        pairs.append(_replanned_pair(board, task, order, resource.id, current, plan))
        current = ctx.calendar.skip_full_holidays(plan.actual_end_date + ONE_DAY)

    moved_ids = [t.id for t in in_scope]
    new_board = board.replace(remove_ids=moved_ids, add=pairs)
    logger.info("Push/pull applied", task_id=task_id, scope=scope, moved=len(moved_ids), resource_id=resource.id)
    return _result(new_board, f"{len(moved_ids)} task part(s) shifted to {resource.name}.", moved_ids)


@dataclass
class PushPullSession:
    """
    Interactive push/pull mode.

    ``start`` arms the mode for a task, ``confirm`` applies it to the chosen
    target and ``cancel`` leaves without touching the plan. The mode is
    disarmed after ``confirm`` whether or not it succeeds.
    """
    is_active: bool = False
    origin_task_id: Optional[str] = None
    scope: Optional[str] = None

    def start(self, board: PlanBoard, task_id: str, scope: str) -> "PushPullSession":
        if scope not in SchedulingConfig.PUSH_PULL_SCOPES:
            raise ValidationRejection(f"Scope must be one of: {', '.join(SchedulingConfig.PUSH_PULL_SCOPES)}")
        _require_task(board, task_id)
        self.is_active = True
        self.origin_task_id = task_id
        self.scope = scope
        return self

    def cancel(self) -> None:
        self.is_active = False
        self.origin_task_id = None
        self.scope = None

    def confirm(
        self,
        board: PlanBoard,
        ctx: SchedulingContext,
        resource_id: str,
        start_date: date,
    ) -> OperationResult:
        if not self.is_active:
            raise ValidationRejection("Push/pull mode is not active.")
        try:
            return push_pull(board, ctx, self.origin_task_id, self.scope, resource_id, start_date)
        finally:
            self.cancel()


def resolve_pull_forward_range(
    board: PlanBoard,
    range_type: str,
    today: date,
    reference_date: Optional[date] = None,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
) -> Tuple[date, date]:
    """
    Turn a pull-forward range choice into concrete dates.

    ``reference_date`` is the date the view is showing (defaults to today).
    The start is never earlier than today and the end never precedes the start.
    """
    reference = reference_date or today

    if range_type == 'currentDay':
        start, end = reference, reference
    elif range_type == 'currentWeek':
        start = reference - timedelta(days=reference.weekday())
        end = start + timedelta(days=6)
    elif range_type == 'currentMonth':
        start = reference.replace(day=1)
        next_month = (start + timedelta(days=32)).replace(day=1)
        end = next_month - ONE_DAY
    elif range_type == 'entirePlan':
        tasks = [t for t in board.all_tasks() if t.original_order_details is not None]
        if not tasks:
            raise ValidationRejection("No tasks available to pull forward.")
        start = min(t.start_date for t in tasks)
        end = max(t.end_date for t in tasks)
    elif range_type == 'dateRange':
        if from_date is None or to_date is None:
            raise ValidationRejection("Date range not specified for pull forward.")
        start, end = from_date, to_date
    else:
        raise ValidationRejection(
            f"Range type must be one of: {', '.join(SchedulingConfig.PULL_FORWARD_RANGES)}"
        )

    start = max(start, today)
    end = max(end, start)
    return start, end


def pull_forward(
    board: PlanBoard,
    ctx: SchedulingContext,
    range_type: str,
    reference_date: Optional[date] = None,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
) -> OperationResult:
    """
    Close overlaps per line within a date range.

    Each line's tasks that touch the range are walked in start order; a task
    starts at the later of its own start and the day after the previous task
    ends. Tasks whose placement does not change are not re-planned.
    """
    range_start, range_end = resolve_pull_forward_range(
        board, range_type, ctx.today, reference_date, from_date, to_date
    )

    working = board
    shifted: List[str] = []
    for resource in ctx.resources.values():
        in_range = sorted(
            (
                t for t in working.all_tasks()
                if t.resource_id == resource.id
                and t.original_order_details is not None
                and not (t.end_date < range_start or t.start_date > range_end)
            ),
            key=lambda t: t.start_date,
        )

        anchor = range_start
        for task in in_range:
            candidate = max(anchor, task.start_date, range_start, ctx.today)
            candidate = ctx.calendar.skip_full_holidays(candidate)

            if candidate == task.start_date:
                last_end = task.end_date
            else:
                order = task.original_order_details
                plan = _plan(ctx, order, resource, candidate, task.learning_curve_id, task.id)
                pair = _replanned_pair(working, task, order, resource.id, candidate, plan)
                working = working.replace(remove_ids=[task.id], add=[pair])
                shifted.append(task.id)
                last_end = plan.actual_end_date

            anchor = ctx.calendar.skip_full_holidays(last_end + ONE_DAY)

    logger.info(
        "Pull forward applied",
        range_type=range_type,
        range_start=range_start.isoformat(),
        range_end=range_end.isoformat(),
        shifted=len(shifted),
    )
    if not shifted:
        return _result(working, "No tasks needed pulling forward within the selected range.", [])
    return _result(working, f"{len(shifted)} task(s)/part(s) shifted to fill gaps.", shifted)


# ----------------------------------------------------------------------
# Bulk load
# ----------------------------------------------------------------------

def load_unplanned_orders(
    board: PlanBoard,
    ctx: SchedulingContext,
    order_ids: Iterable[str],
    resource_id: Optional[str] = None,
) -> OperationResult:
    """Schedule the selected unscheduled orders back to back from today."""
    wanted = set(order_ids)
    selected = [o for o in board.unscheduled_orders if o.id in wanted]
    if not selected:
        raise ValidationRejection("Please select orders from the list to load.")
    for order in selected:
        _require_quantity(order)

    if resource_id:
        resource = ctx.require_resource(resource_id)
    else:
        resource = ctx.first_resource()
        if resource is None:
            raise ValidationRejection("No available lines to schedule orders onto.")

    pairs = []
    current = ctx.calendar.next_valid_start(ctx.today, ctx.today)
    for order in selected:
        current = ctx.calendar.next_valid_start(current, ctx.today)
        task_id = f"task-{order.base_order_id}-loaded-{ctx.next_id()}"
        plan = _plan(ctx, order, resource, current, task_id=task_id)
        pairs.append(build_task_pair(
            task_id,
            order,
            resource.id,
            current,
            plan,
            color=SchedulingConfig.get_task_color('loaded'),
            image_hint=order.image_hint,
            learning_curve_id=order.learning_curve_id,
        ))
        current = ctx.calendar.skip_full_holidays(plan.actual_end_date + ONE_DAY)

    loaded_ids = {o.id for o in selected}
    pool = [o for o in board.unscheduled_orders if o.id not in loaded_ids]
    new_board = board.replace(add=pairs, unscheduled=pool)

    logger.info("Unplanned orders loaded", count=len(selected), resource_id=resource.id)
    return _result(
        new_board,
        f"{len(selected)} order(s) loaded onto {resource.name}.",
        [horizontal.id for horizontal, _ in pairs],
    )
