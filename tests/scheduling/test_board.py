"""
Tests for the dual-view board, display colors and the plan snapshot format.
"""
from dataclasses import replace

import pytest

from planview.scheduling.board import PlanBoard, TaskUpdate, build_task_pair
from planview.scheduling.calendar import HolidayCalendar
from planview.scheduling.colors import ROTATION_COLORS, assign_display_colors
from planview.scheduling.errors import DataIntegrityError
from planview.scheduling.models import HorizontalTask, PlanData
from planview.scheduling.planner import plan_task
from tests.scheduling.factories import MONDAY, day, make_order


def pair_for(ctx, order, task_id=None, resource_id="line-1", start=MONDAY, color=None):
    resource = ctx.require_resource(resource_id)
    plan = plan_task(order, resource, start, ctx.calendar)
    return build_task_pair(task_id or f"task-{order.id}", order, resource_id, start, plan, color=color)


# ==============================================================================
# Board updates
# ==============================================================================

class TestPlanBoard:
    """Filter-then-append updates and lookups."""

    def test_build_task_pair_matches_views(self, ctx):
        horizontal, vertical = pair_for(ctx, make_order("o1", 1000))

        assert horizontal.id == vertical.id == "task-o1"
        assert horizontal.end_date == vertical.end_date == day(4)
        assert horizontal.label == "Style A (1000)"
        assert vertical.order_name == "Style A [1000]"
        assert vertical.image_hint == "shirt"

    def test_replace_returns_new_board(self, ctx):
        board = PlanBoard()
        new_board = board.replace(add=[pair_for(ctx, make_order("o1"))])

        assert board.task_ids() == []
        assert new_board.task_ids() == ["task-o1"]

    def test_replace_removes_from_both_views(self, ctx):
        board = PlanBoard().replace(add=[pair_for(ctx, make_order("o1")), pair_for(ctx, make_order("o2"))])

        board = board.replace(remove_ids=["task-o1"])

        assert [t.id for t in board.horizontal_tasks] == ["task-o2"]
        assert [t.id for t in board.vertical_tasks] == ["task-o2"]

    def test_tasks_for_base_order(self, ctx):
        part = make_order("o1-splitA-5", 300, base_order_id="o1")
        board = PlanBoard().replace(add=[
            pair_for(ctx, make_order("o1", 700)),
            pair_for(ctx, part, start=day(7)),
            pair_for(ctx, make_order("o2")),
        ])

        assert {t.id for t in board.tasks_for_base_order("o1")} == {"task-o1", "task-o1-splitA-5"}
        assert len(board.tasks_for_resource("line-1")) == 3

    def test_apply_update_replans_both_views(self, ctx):
        board = PlanBoard().replace(add=[pair_for(ctx, make_order("o1", 1000))])

        board = board.apply_update("task-o1", TaskUpdate(resource_id="line-2", start_date=day(7)), ctx)

        horizontal = board.get_horizontal("task-o1")
        vertical = board.get_vertical("task-o1")
        assert horizontal.resource_id == vertical.resource_id == "line-2"
        assert horizontal.end_date == vertical.end_date == day(16)
        assert len(vertical.daily_data) == 10
        assert board.consistency_errors() == []

    def test_apply_update_rebuilds_labels_from_new_order(self, ctx):
        board = PlanBoard().replace(add=[pair_for(ctx, make_order("o1", 1000))])

        board = board.apply_update("task-o1", TaskUpdate(order=make_order("o1", 400)), ctx)

        assert board.get_horizontal("task-o1").label == "Style A (400)"
        assert board.get_vertical("task-o1").order_name == "Style A [400]"
        assert board.get_vertical("task-o1").planned_total == 400

    def test_apply_update_with_explicit_daily_data(self, ctx):
        board = PlanBoard().replace(add=[pair_for(ctx, make_order("o1", 1000))])
        daily = board.get_vertical("task-o1").daily_data[:2]

        board = board.apply_update("task-o1", TaskUpdate(daily_data=daily), ctx)

        assert board.get_horizontal("task-o1").end_date == day(1)

    def test_apply_update_unknown_task(self, ctx):
        with pytest.raises(DataIntegrityError):
            PlanBoard().apply_update("nope", TaskUpdate(), ctx)

    def test_fill_missing_daily_data(self, ctx):
        horizontal, vertical = pair_for(ctx, make_order("o1", 100))
        bare = replace(vertical, daily_data=(), end_date=day(3))
        board = PlanBoard([replace(horizontal, end_date=day(3))], [bare])

        filled = board.fill_missing_daily_data(ctx).get_vertical("task-o1")

        assert [s.planned_qty for s in filled.daily_data] == [25, 25, 25, 25]
        assert filled.daily_data[-1].date == day(3)

    def test_fill_missing_daily_data_skips_full_holidays(self, holiday_ctx):
        horizontal, vertical = pair_for(holiday_ctx, make_order("o1", 90))
        bare = replace(vertical, daily_data=(), end_date=day(3))
        board = PlanBoard([replace(horizontal, end_date=day(3))], [bare])

        filled = board.fill_missing_daily_data(holiday_ctx).get_vertical("task-o1")

        assert [s.date for s in filled.daily_data] == [MONDAY, day(1), day(3)]
        assert [s.planned_qty for s in filled.daily_data] == [30, 30, 30]


class TestConsistency:
    """Disagreements between the two views are reported."""

    def test_consistent_board(self, ctx):
        board = PlanBoard().replace(add=[pair_for(ctx, make_order("o1"))])
        assert board.consistency_errors() == []
        assert board.assert_consistent() is board

    def test_detects_mismatched_dates(self, ctx):
        horizontal, vertical = pair_for(ctx, make_order("o1"))
        board = PlanBoard([replace(horizontal, end_date=day(9))], [vertical])

        errors = board.consistency_errors()

        assert len(errors) == 1
        assert "end_date" in errors[0]
        with pytest.raises(DataIntegrityError):
            board.assert_consistent()

    def test_detects_missing_view(self, ctx):
        horizontal, _ = pair_for(ctx, make_order("o1"))
        board = PlanBoard([horizontal], [])
        assert board.consistency_errors() == ["task-o1: missing from vertical view"]


# ==============================================================================
# Display colors
# ==============================================================================

class TestDisplayColors:
    """Rotation-mode colors are derived, never stored."""

    def _tasks(self, ctx):
        return [
            pair_for(ctx, make_order("o1", buyer="Acme"), color="bg-purple-500 text-white")[0],
            pair_for(ctx, make_order("o2", buyer="Globex"))[0],
            pair_for(ctx, make_order("o3", buyer="Acme"))[0],
        ]

    def test_order_mode_keeps_stored_color(self, ctx):
        colored = assign_display_colors(self._tasks(ctx), "order")

        assert colored[0].display_color == "bg-purple-500 text-white"
        assert colored[1].display_color == ROTATION_COLORS[1]
        assert colored[2].display_color == ROTATION_COLORS[2]

    def test_customer_mode_groups_by_buyer(self, ctx):
        colored = assign_display_colors(self._tasks(ctx), "customer")

        assert colored[0].display_color == ROTATION_COLORS[0]
        assert colored[1].display_color == ROTATION_COLORS[1]
        assert colored[2].display_color == ROTATION_COLORS[0]

    def test_stored_color_is_untouched(self, ctx):
        tasks = self._tasks(ctx)
        colored = assign_display_colors(tasks, "customer")
        assert colored[0].color == "bg-purple-500 text-white"
        assert tasks[1].display_color is None

    def test_delivery_mode(self, ctx):
        tasks = [
            pair_for(ctx, make_order("o1", requested_ship_date=day(30)))[0],
            pair_for(ctx, make_order("o2", requested_ship_date=day(40)))[0],
            pair_for(ctx, make_order("o3", requested_ship_date=day(30)))[0],
        ]
        colored = assign_display_colors(tasks, "delivery")
        assert colored[0].display_color == colored[2].display_color != colored[1].display_color

    def test_unknown_mode(self, ctx):
        with pytest.raises(ValueError):
            assign_display_colors(self._tasks(ctx), "rainbow")


# ==============================================================================
# Snapshot format
# ==============================================================================

class TestPlanData:
    """camelCase snapshot written to and read from the plan store."""

    def test_round_trip(self, ctx):
        horizontal, vertical = pair_for(ctx, make_order("o1", 400))
        data = PlanData([horizontal], [vertical], [], [make_order("o2", 50)])

        restored = PlanData.from_dict(data.to_dict())

        assert restored.horizontal_tasks == [horizontal]
        assert restored.vertical_tasks == [vertical]
        assert restored.bucket_unscheduled_orders[0].id == "o2"

    def test_snapshot_keys(self, ctx):
        horizontal, vertical = pair_for(ctx, make_order("o1", 400))
        snapshot = PlanData([horizontal], [vertical]).to_dict()

        assert set(snapshot) == {"horizontalTasks", "verticalTasks", "bucketScheduledTasks", "bucketUnscheduledOrders"}
        task = snapshot["verticalTasks"][0]
        assert task["resourceId"] == "line-1"
        assert task["startDate"] == "2030-01-07"
        assert task["originalOrderDetails"]["baseOrderId"] == "o1"
        assert task["dailyData"][0]["plannedQty"] == 200

    def test_legacy_line_id_and_missing_base_order_id(self):
        legacy = {
            "horizontalTasks": [{
                "id": "t1",
                "lineId": "line-3",
                "startDate": "2030-01-07",
                "endDate": "2030-01-08",
                "label": "Old (10)",
                "originalOrderDetails": {"id": "o9", "buyer": "Acme", "style": "Old", "quantity": 10},
            }],
        }

        restored = PlanData.from_dict(legacy)
        task = restored.horizontal_tasks[0]

        assert isinstance(task, HorizontalTask)
        assert task.resource_id == "line-3"
        assert task.base_order_id == "o9"

    def test_empty_snapshot(self):
        restored = PlanData.from_dict(None)
        assert restored.horizontal_tasks == []
        assert restored.bucket_unscheduled_orders == []

    def test_negative_quantity_is_rejected(self):
        with pytest.raises(ValueError, match="negative quantity"):
            PlanData.from_dict({
                "bucketUnscheduledOrders": [{"id": "neg", "buyer": "Acme", "style": "S", "quantity": -500}],
            })


class TestHolidayCalendar:
    """Start-date validity on the plant calendar."""

    def test_valid_start(self):
        calendar = HolidayCalendar.from_full_days([day(2)])
        assert calendar.is_valid_start(day(1), MONDAY)
        assert not calendar.is_valid_start(day(2), MONDAY)
        assert not calendar.is_valid_start(day(-1), MONDAY)

    def test_next_valid_start(self):
        calendar = HolidayCalendar.from_full_days([day(2), day(3)])
        assert calendar.next_valid_start(day(2), MONDAY) == day(4)
        assert calendar.next_valid_start(day(-5), MONDAY) == MONDAY
