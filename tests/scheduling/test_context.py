"""
Tests for the per-request scheduling context.
"""
from planview.scheduling.context import SchedulingContext
from tests.scheduling.factories import MONDAY


class TestIdSequence:
    def test_continues_after_largest_saved_suffix(self, resources):
        ctx = SchedulingContext.build(resources, today=MONDAY, id_start=1)

        ctx.continue_ids_after(["task-o1-sch-7", "o1-splitA-3", "o2", "merged-o3_o4-5"])

        assert ctx.next_id() == 8
        assert ctx.next_id() == 9

    def test_keeps_sequence_already_ahead(self, resources):
        ctx = SchedulingContext.build(resources, today=MONDAY, id_start=100)

        ctx.continue_ids_after(["task-o1-sch-7"])

        assert ctx.next_id() == 100

    def test_empty_plan_keeps_sequence(self, ctx):
        ctx.continue_ids_after([])
        assert ctx.next_id() == 1
