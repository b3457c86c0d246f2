import pytest

from planview.scheduling.board import PlanBoard
from planview.scheduling.calendar import HolidayCalendar
from planview.scheduling.context import SchedulingContext
from planview.scheduling.models import SchedulableResource
from tests.scheduling.factories import MONDAY, day


@pytest.fixture
def resources():
    return [
        SchedulableResource(id="line-1", name="Sewing Line 1", capacity=200),
        SchedulableResource(id="line-2", name="Sewing Line 2", capacity=100),
    ]


@pytest.fixture
def ctx(resources):
    return SchedulingContext.build(resources, today=MONDAY, id_start=1)


@pytest.fixture
def holiday_ctx(resources):
    """Context with Wednesday 2030-01-09 as a full holiday."""
    return SchedulingContext.build(
        resources,
        today=MONDAY,
        calendar=HolidayCalendar.from_full_days([day(2)]),
        id_start=1,
    )


@pytest.fixture
def empty_board():
    return PlanBoard()
