"""
Tests for the daily line load summary.
"""
import pytest

from planview.scheduling.board import PlanBoard
from planview.scheduling.calendar import HolidayCalendar
from planview.scheduling.load import LOAD_COLUMNS, daily_load_frame, daily_load_records
from planview.scheduling.operations import schedule_order
from tests.scheduling.factories import MONDAY, day, make_order


@pytest.fixture
def loaded_board(ctx):
    board = PlanBoard(unscheduled_orders=[make_order("o1", 1000), make_order("o2", 50)])
    board = schedule_order(board, ctx, "o1", "line-1", MONDAY).board
    return schedule_order(board, ctx, "o2", "line-1", day(1)).board


class TestDailyLoadFrame:
    """One row per line per day."""

    def test_grid_shape(self, loaded_board, resources):
        frame = daily_load_frame(loaded_board, resources, MONDAY, day(6), HolidayCalendar())

        assert list(frame.columns) == LOAD_COLUMNS
        assert len(frame) == 14
        assert set(frame["resourceId"]) == {"line-1", "line-2"}

    def test_planned_and_utilization(self, loaded_board, resources):
        frame = daily_load_frame(loaded_board, resources, MONDAY, day(6), HolidayCalendar())
        line_1 = frame[frame["resourceId"] == "line-1"].set_index("date")

        assert line_1.loc[MONDAY, "plannedQty"] == 200
        assert line_1.loc[MONDAY, "utilization"] == 1.0
        assert not line_1.loc[MONDAY, "overloaded"]
        assert line_1.loc[day(1), "plannedQty"] == 250
        assert line_1.loc[day(1), "utilization"] == 1.25
        assert line_1.loc[day(1), "overloaded"]
        assert line_1.loc[day(5), "plannedQty"] == 0

    def test_holiday_has_no_capacity(self, loaded_board, resources):
        calendar = HolidayCalendar.from_full_days([day(5)])

        frame = daily_load_frame(loaded_board, resources, MONDAY, day(6), calendar)
        holiday_rows = frame[frame["date"] == day(5)]

        assert (holiday_rows["capacity"] == 0).all()
        assert (holiday_rows["utilization"] == 0).all()
        assert not holiday_rows["overloaded"].any()

    def test_empty_board(self, resources):
        frame = daily_load_frame(PlanBoard(), resources, MONDAY, MONDAY, HolidayCalendar())

        assert len(frame) == 2
        assert (frame["plannedQty"] == 0).all()

    def test_inverted_range(self, resources):
        with pytest.raises(ValueError):
            daily_load_frame(PlanBoard(), resources, day(3), MONDAY, HolidayCalendar())


class TestDailyLoadRecords:
    """JSON-ready rows."""

    def test_plain_python_values(self, loaded_board, resources):
        records = daily_load_records(loaded_board, resources, MONDAY, MONDAY, HolidayCalendar())

        assert records[0] == {
            "resourceId": "line-1",
            "date": "2030-01-07",
            "capacity": 200.0,
            "plannedQty": 200,
            "utilization": 1.0,
            "overloaded": False,
        }
        assert type(records[0]["plannedQty"]) is int
        assert type(records[0]["overloaded"]) is bool
