"""
Daily line load summary.

Compares what the plan puts on each line per day against the line's flat
capacity. Built from the vertical view, whose daily breakdown is the
authoritative plan.
"""
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List

import pandas as pd

from planview.scheduling.board import PlanBoard
from planview.scheduling.calendar import HolidayCalendar
from planview.scheduling.models import SchedulableResource

LOAD_COLUMNS = ["resourceId", "date", "capacity", "plannedQty", "utilization", "overloaded"]


def daily_load_frame(
    board: PlanBoard,
    resources: Iterable[SchedulableResource],
    start_date: date,
    end_date: date,
    calendar: HolidayCalendar,
) -> pd.DataFrame:
    """
    One row per (line, day) between start_date and end_date inclusive.

    Columns:
        resourceId, date, capacity (0 on full holidays), plannedQty,
        utilization (planned / capacity, 0 without capacity), overloaded

    Raises:
        ValueError: If end_date is before start_date
    """
    if end_date < start_date:
        raise ValueError("end_date must not be before start_date")

    resources = list(resources)
    days = [start_date + timedelta(days=i) for i in range((end_date - start_date).days + 1)]

    grid = pd.MultiIndex.from_product(
        [[r.id for r in resources], days], names=["resourceId", "date"]
    ).to_frame(index=False)
    if grid.empty:
        return pd.DataFrame(columns=LOAD_COLUMNS)

    planned_rows = [
        {"resourceId": task.resource_id, "date": segment.date, "plannedQty": segment.planned_qty}
        for task in board.vertical_tasks
        for segment in task.daily_data
        if start_date <= segment.date <= end_date
    ]
    planned = pd.DataFrame(planned_rows, columns=["resourceId", "date", "plannedQty"])
    planned = planned.groupby(["resourceId", "date"], as_index=False)["plannedQty"].sum()

    frame = grid.merge(planned, on=["resourceId", "date"], how="left")
    frame["plannedQty"] = frame["plannedQty"].fillna(0).astype(int)

    capacity_by_line = {r.id: float(r.capacity) for r in resources}
    frame["capacity"] = frame["resourceId"].map(capacity_by_line)
    holiday_mask = frame["date"].map(calendar.is_full_holiday).astype(bool)
    frame.loc[holiday_mask, "capacity"] = 0.0

    has_capacity = frame["capacity"] > 0
    frame["utilization"] = 0.0
    frame.loc[has_capacity, "utilization"] = (
        frame.loc[has_capacity, "plannedQty"] / frame.loc[has_capacity, "capacity"]
    ).round(4)
    frame["overloaded"] = frame["plannedQty"] > frame["capacity"]

    return frame[LOAD_COLUMNS]


def daily_load_records(
    board: PlanBoard,
    resources: Iterable[SchedulableResource],
    start_date: date,
    end_date: date,
    calendar: HolidayCalendar,
) -> List[Dict[str, Any]]:
    """JSON-ready rows of :func:`daily_load_frame`."""
    frame = daily_load_frame(board, resources, start_date, end_date, calendar)
    return [
        {
            "resourceId": row["resourceId"],
            "date": row["date"].isoformat(),
            "capacity": float(row["capacity"]),
            "plannedQty": int(row["plannedQty"]),
            "utilization": float(row["utilization"]),
            "overloaded": bool(row["overloaded"]),
        }
        for row in frame.to_dict(orient="records")
    ]
